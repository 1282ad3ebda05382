"""Content-addressed embedding cache persisted as a flat JSON file."""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Dict

from .logging import get_logger
from .models import Chunk

logger = get_logger("cache")

Cache = Dict[str, Chunk]


def digest(text: str, file_path: str) -> str:
    hasher = hashlib.sha256()
    hasher.update(text.encode("utf-8"))
    hasher.update(file_path.encode("utf-8"))
    return hasher.hexdigest()


def load_cache(path: Path) -> Cache:
    """Read a cache file; anything unreadable or malformed gives an empty cache."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        logger.warning("Ignoring unreadable cache file %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring cache file %s: expected a JSON object", path)
        return {}

    cache: Cache = {}
    for key, entry in data.items():
        if not isinstance(entry, dict):
            continue
        try:
            cache[str(key)] = Chunk.from_dict(entry)
        except (KeyError, TypeError, ValueError):
            logger.debug("Skipping malformed cache entry %s", key)
    return cache


def save_cache(path: Path, cache: Cache) -> None:
    """Overwrite the cache file with the full mapping. Failures are logged, not raised."""
    path = Path(path)
    serialisable = {key: chunk.to_dict() for key, chunk in cache.items()}
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(serialisable, indent=2), encoding="utf-8")
    except OSError as exc:
        logger.warning("Could not write cache file %s: %s", path, exc)


__all__ = ["Cache", "digest", "load_cache", "save_cache"]
