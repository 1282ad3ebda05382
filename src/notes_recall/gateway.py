"""Clients for the external embedding and text-generation services."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Protocol

import numpy as np
import openai
from openai import OpenAI

from .logging import get_logger

if TYPE_CHECKING:
    from .config import AppConfig

logger = get_logger("gateway")

NO_RESPONSE = "[No response]"


class EmbeddingError(RuntimeError):
    """Raised when text that must be embedded (a query or topic) could not be."""


class GenerationError(RuntimeError):
    """Raised when the generation service could not be reached."""


class Embedder(Protocol):
    def embed(self, text: str) -> Optional[List[float]]: ...


class Generator(Protocol):
    def generate(self, prompt: str) -> str: ...


def to_float32_list(values) -> List[float]:
    return np.asarray(values, dtype=np.float32).ravel().tolist()


class OpenAIGateway:
    """Embedding and generation over an OpenAI-compatible HTTP API.

    Defaults target a local Ollama server, which exposes the same endpoints
    under ``/v1``.
    """

    SYSTEM_PROMPT = "You are a careful assistant that reasons over the user's personal notes."

    def __init__(
        self,
        *,
        embedding_model: str,
        generation_model: str,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        temperature: float = 0.2,
        client: Optional[OpenAI] = None,
    ) -> None:
        self.embedding_model = embedding_model
        self.generation_model = generation_model
        self.temperature = temperature
        self._client = client or OpenAI(base_url=base_url, api_key=api_key)

    @classmethod
    def from_config(cls, cfg: "AppConfig") -> "OpenAIGateway":
        return cls(
            embedding_model=cfg.embedding_model_name,
            generation_model=cfg.generation_model,
            base_url=cfg.base_url,
            api_key=cfg.api_key,
            temperature=cfg.temperature,
        )

    def embed(self, text: str) -> Optional[List[float]]:
        try:
            response = self._client.embeddings.create(model=self.embedding_model, input=text)
            raw = response.data[0].embedding
            if not raw:
                return None
            return to_float32_list(raw)
        except openai.OpenAIError as exc:
            logger.debug("Embedding request failed: %s", exc)
            return None
        except (AttributeError, IndexError, TypeError, ValueError) as exc:
            logger.debug("Malformed embedding response: %s", exc)
            return None

    def generate(self, prompt: str) -> str:
        try:
            response = self._client.chat.completions.create(
                model=self.generation_model,
                messages=[
                    {"role": "system", "content": self.SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=self.temperature,
            )
        except openai.APIStatusError as exc:
            # The server answered, just not with text.
            logger.debug("Generation request returned status %s: %s", exc.status_code, exc)
            return NO_RESPONSE
        except openai.OpenAIError as exc:
            raise GenerationError(f"Generation request failed: {exc}") from exc

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError):
            content = None
        return content if content else NO_RESPONSE


def build_embedder(cfg: "AppConfig", gateway: Optional[OpenAIGateway] = None) -> Embedder:
    if cfg.embedding_backend == "local":
        from .local_embedder import LocalEmbedder

        return LocalEmbedder(cfg.embedding_model_name)
    return gateway or OpenAIGateway.from_config(cfg)


__all__ = [
    "Embedder",
    "EmbeddingError",
    "GenerationError",
    "Generator",
    "NO_RESPONSE",
    "OpenAIGateway",
    "build_embedder",
    "to_float32_list",
]
