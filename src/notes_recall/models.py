from __future__ import annotations

from dataclasses import dataclass, field
from numbers import Real
from typing import List


@dataclass
class Chunk:
    """A word-bounded slice of a note plus the embedding computed for it."""

    text: str
    file_path: str
    embedding: List[float] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"text": self.text, "file_path": self.file_path, "embedding": list(self.embedding)}

    @classmethod
    def from_dict(cls, data: dict) -> "Chunk":
        text = data["text"]
        file_path = data["file_path"]
        embedding = data["embedding"]
        if not isinstance(text, str) or not isinstance(file_path, str):
            raise TypeError("text and file_path must be strings")
        if not isinstance(embedding, list) or not all(
            isinstance(v, Real) and not isinstance(v, bool) for v in embedding
        ):
            raise TypeError("embedding must be a list of numbers")
        return cls(text=text, file_path=file_path, embedding=[float(v) for v in embedding])


__all__ = ["Chunk"]
