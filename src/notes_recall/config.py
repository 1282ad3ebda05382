from __future__ import annotations

import os
from pathlib import Path
from typing import List, Literal, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

DEFAULT_CONFIG_PATH = Path("config.yaml")


class AppConfig(BaseModel):
    cache_file: Path = Field(default=Path(".notes_recall/cache.json"))
    content_paths: List[Path] = Field(default_factory=lambda: [Path("notes")])
    extensions: List[str] = Field(default_factory=lambda: [".md"])
    chunk_words: int = Field(default=400, ge=1)

    query_top_n: int = Field(default=5, ge=1)
    explore_top_n: int = Field(default=10, ge=1)
    chat_top_n: int = Field(default=8, ge=1)
    cluster_k: int = Field(default=5, ge=1)
    cluster_rounds: int = Field(default=5, ge=1)

    embedding_backend: Literal["api", "local"] = "api"
    embedding_model_name: str = Field(default="nomic-embed-text")
    generation_model: str = Field(default="phi3:mini")
    # Ollama's OpenAI-compatible endpoint. Set to null to talk to api.openai.com.
    base_url: Optional[str] = Field(default="http://localhost:11434/v1")
    temperature: float = Field(default=0.2, ge=0.0, le=2.0)

    @field_validator("extensions")
    @classmethod
    def _normalize_extensions(cls, value: List[str]) -> List[str]:
        normalized = []
        for ext in value:
            ext = ext.strip().lower()
            if not ext:
                continue
            normalized.append(ext if ext.startswith(".") else f".{ext}")
        return normalized

    @property
    def api_key(self) -> Optional[str]:
        key = os.getenv("OPENAI_API_KEY")
        if key:
            return key
        # Local OpenAI-compatible servers ignore the key but the client requires one.
        if self.base_url:
            return "ollama"
        return None


def load_config(path: Optional[Path] = None) -> AppConfig:
    """
    Load configuration from a YAML file.

    If `path` is None, reads `config.yaml` in the current working directory.
    Also loads environment variables from a `.env` file if present. A missing,
    unreadable or invalid file is fatal.
    """
    load_dotenv()

    if path is None:
        path = DEFAULT_CONFIG_PATH
    path = Path(path)

    if not path.exists():
        raise SystemExit(f"Configuration file not found: {path}")

    try:
        with path.open("r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except OSError as e:
        raise SystemExit(f"Failed to read configuration file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise SystemExit(f"Failed to parse configuration file {path}:\n{e}") from e

    if not isinstance(raw, dict):
        raise SystemExit(f"Invalid configuration in {path}: expected a mapping at the top level")

    # Older config files nest everything under a `config:` table.
    if set(raw) == {"config"} and isinstance(raw["config"], dict):
        raw = raw["config"]

    try:
        cfg = AppConfig(**raw)
    except ValidationError as e:
        raise SystemExit(f"Invalid configuration in {path}:\n{e}") from e

    if cfg.api_key is None:
        raise SystemExit("OPENAI_API_KEY is not set. Put it in a .env file or environment variable.")

    return cfg


__all__ = ["AppConfig", "DEFAULT_CONFIG_PATH", "load_config"]
