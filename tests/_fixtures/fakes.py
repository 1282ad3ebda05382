"""Stand-ins for the embedding and generation services."""

from __future__ import annotations

from typing import Dict, List, Optional

from notes_recall.gateway import GenerationError


class FakeEmbedder:
    """Embeds text by looking it up in a table; unknown text gets `default`."""

    def __init__(
        self,
        vectors: Optional[Dict[str, List[float]]] = None,
        default: Optional[List[float]] = None,
    ) -> None:
        self.vectors = vectors or {}
        self.default = default
        self.calls: List[str] = []

    def embed(self, text: str) -> Optional[List[float]]:
        self.calls.append(text)
        return self.vectors.get(text, self.default)


class ExplodingEmbedder:
    def embed(self, text: str) -> Optional[List[float]]:
        raise AssertionError(f"embedder should not be called, got {text!r}")


class FakeGenerator:
    def __init__(self, reply: str = "a reply") -> None:
        self.reply = reply
        self.prompts: List[str] = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.reply


class OfflineGenerator:
    def generate(self, prompt: str) -> str:
        raise GenerationError("connection refused")
