from __future__ import annotations

from pathlib import Path

import pytest

from notes_recall.config import AppConfig


@pytest.fixture
def notes_dir(tmp_path: Path) -> Path:
    """A small notes tree: two markdown files and one file that must be ignored."""
    root = tmp_path / "notes"
    (root / "sub").mkdir(parents=True)
    (root / "alpha.md").write_text("one two three four five", encoding="utf-8")
    (root / "sub" / "beta.md").write_text("six seven", encoding="utf-8")
    (root / "ignored.txt").write_text("not a note", encoding="utf-8")
    return root


@pytest.fixture
def app_config(tmp_path: Path, notes_dir: Path) -> AppConfig:
    return AppConfig(
        cache_file=tmp_path / "cache" / "cache.json",
        content_paths=[notes_dir],
        chunk_words=2,
    )
