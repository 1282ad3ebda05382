"""Tests for cosine similarity ranking."""

from __future__ import annotations

import pytest

from notes_recall.index import cosine_similarity, find_top, rank
from notes_recall.models import Chunk


def _corpus(*embeddings):
    return [Chunk(text=f"chunk {i}", file_path=f"{i}.md", embedding=list(e)) for i, e in enumerate(embeddings)]


def test_cosine_similarity_identical_and_orthogonal() -> None:
    assert cosine_similarity([0.3, 0.4, 0.5], [0.3, 0.4, 0.5]) == pytest.approx(1.0, abs=1e-6)
    assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0, abs=1e-6)


def test_cosine_similarity_zero_vector_is_finite() -> None:
    assert cosine_similarity([0.0, 0.0], [1.0, 1.0]) == 0.0


def test_cosine_similarity_mismatched_lengths() -> None:
    assert cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0]) is None


def test_find_top_scenario() -> None:
    corpus = _corpus([1, 0], [0, 1], [0.9, 0.1])

    top = find_top(corpus, [1, 0], 2)

    assert top == [corpus[0], corpus[2]]


def test_find_top_larger_n_returns_full_ranking() -> None:
    corpus = _corpus([0, 1], [1, 0], [0.5, 0.5])

    top = find_top(corpus, [1, 0], 10)

    assert top == [corpus[1], corpus[2], corpus[0]]


def test_find_top_is_repeatable() -> None:
    corpus = _corpus([1, 1], [1, 1], [0.2, 0.9], [1, 0])

    assert find_top(corpus, [1, 0.5], 3) == find_top(corpus, [1, 0.5], 3)


def test_rank_keeps_corpus_order_for_ties() -> None:
    corpus = _corpus([1, 1], [1, 1], [1, 1])

    assert [chunk for _, chunk in rank(corpus, [1, 1])] == corpus


def test_find_top_excludes_mismatched_dimensions() -> None:
    corpus = _corpus([1, 0], [1, 0, 0], [0, 1])

    top = find_top(corpus, [1, 0], 5)

    assert top == [corpus[0], corpus[2]]


def test_find_top_empty_results() -> None:
    assert find_top([], [1.0], 3) == []
    assert find_top(_corpus([1, 0, 0]), [1, 0], 3) == []


def test_find_top_rejects_negative_n() -> None:
    with pytest.raises(ValueError):
        find_top(_corpus([1, 0]), [1, 0], -1)
