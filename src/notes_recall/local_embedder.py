from __future__ import annotations

from typing import List, Optional

from sentence_transformers import SentenceTransformer

from .gateway import to_float32_list
from .logging import get_logger

logger = get_logger("local_embedder")


class LocalEmbedder:
    """Embeds text in-process with a sentence-transformers model."""

    def __init__(self, model_name: str, model: Optional[SentenceTransformer] = None) -> None:
        if model is None:
            logger.info("Loading embedding model: %s", model_name)
            model = SentenceTransformer(model_name)
        self.model_name = model_name
        self._model = model

    def embed(self, text: str) -> Optional[List[float]]:
        try:
            vectors = self._model.encode([text], convert_to_numpy=True)
        except (RuntimeError, ValueError) as exc:
            logger.debug("Local embedding failed: %s", exc)
            return None
        if len(vectors) == 0:
            return None
        return to_float32_list(vectors[0])


__all__ = ["LocalEmbedder"]
