"""CLI parser and exit-code behaviour tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from notes_recall import cli
from notes_recall.cli import _build_parser, parse_cluster_count
from notes_recall.gateway import EmbeddingError


def test_cli_joins_query_words() -> None:
    args = _build_parser().parse_args(["query", "spaced", "repetition"])
    assert args.command == "query"
    assert args.idea == ["spaced", "repetition"]
    assert args.config == "config.yaml"


def test_cli_accepts_options_after_command() -> None:
    args = _build_parser().parse_args(["explore", "habits", "--config", "other.yaml", "-v"])
    assert args.command == "explore"
    assert args.config == "other.yaml"
    assert args.verbose is True


def test_cli_accepts_options_before_command() -> None:
    args = _build_parser().parse_args(["--config", "other.yaml", "chat"])
    assert args.command == "chat"
    assert args.config == "other.yaml"
    assert args.verbose is False


@pytest.mark.parametrize(
    ("value", "expected"),
    [(None, None), ("3", 3), ("three", None), ("", None)],
)
def test_parse_cluster_count(value, expected) -> None:
    assert parse_cluster_count(value) == expected


def test_cluster_without_count_uses_config_default(monkeypatch, tmp_path: Path) -> None:
    config_file = tmp_path / "config.yaml"
    config_file.write_text("content_paths: []\n", encoding="utf-8")
    captured = {}

    def fake_run_cluster(cfg, k):
        captured["k"] = k
        return []

    monkeypatch.setattr(cli, "run_cluster", fake_run_cluster)

    cli.main(["cluster", "lots", "--config", str(config_file)])

    assert captured["k"] is None


def test_query_embedding_failure_exits_non_zero(monkeypatch, tmp_path: Path) -> None:
    config_file = tmp_path / "config.yaml"
    config_file.write_text("content_paths: []\n", encoding="utf-8")

    def failing_answer(idea, cfg):
        raise EmbeddingError("Failed to embed 'x'")

    monkeypatch.setattr(cli, "answer_question", failing_answer)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["query", "x", "--config", str(config_file)])

    assert excinfo.value.code == 1
