"""Topic grouping of the embedded corpus with a bounded k-means pass."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Tuple

import numpy as np
from rich.console import Console
from rich.markup import escape

from .gateway import Embedder, Generator, OpenAIGateway, build_embedder
from .index import cosine_similarity
from .ingest import load_corpus
from .logging import get_logger
from .models import Chunk

if TYPE_CHECKING:
    from .config import AppConfig

console = Console()
logger = get_logger("cluster")

KMEANS_ROUNDS = 5
LABEL_SAMPLES = 5
UNDEFINED_SIMILARITY = -1.0


class ClusterError(ValueError):
    """Raised when a clustering request cannot be satisfied."""


@dataclass
class ClusterSummary:
    cluster_id: int
    label: str
    size: int
    sample_paths: List[str] = field(default_factory=list)


def _validate_k(k: int, size: int) -> None:
    if k < 1:
        raise ClusterError(f"Number of clusters must be at least 1, got {k}")
    if k > size:
        raise ClusterError(f"Cannot form {k} clusters from {size} chunks")


def _assign(vectors: Sequence[np.ndarray], centroids: Sequence[np.ndarray]) -> List[int]:
    assignments = []
    for vector in vectors:
        scores = []
        for centroid in centroids:
            score = cosine_similarity(vector, centroid)
            scores.append(UNDEFINED_SIMILARITY if score is None else score)
        # argmax returns the first index among equal maxima.
        assignments.append(int(np.argmax(scores)))
    return assignments


def _update(
    vectors: Sequence[np.ndarray], assignments: Sequence[int], centroids: List[np.ndarray]
) -> None:
    for cluster_id, centroid in enumerate(centroids):
        members = [
            vector
            for vector, assigned in zip(vectors, assignments)
            if assigned == cluster_id and len(vector) == len(centroid)
        ]
        # Empty clusters keep their previous centroid.
        if members:
            centroids[cluster_id] = np.mean(np.stack(members), axis=0, dtype=np.float32)


def kmeans_lite(
    embeddings: Sequence[Sequence[float]],
    k: int,
    *,
    rounds: int = KMEANS_ROUNDS,
    rng: Optional[np.random.Generator] = None,
) -> Tuple[List[np.ndarray], List[int]]:
    """
    Run a fixed number of k-means rounds using cosine similarity.

    Initial centroids are `k` distinct embeddings drawn uniformly at random.
    There is no convergence check: exactly `rounds` assign/update passes run.
    Returns the final centroids and the cluster id of every embedding.
    """
    _validate_k(k, len(embeddings))
    rng = rng if rng is not None else np.random.default_rng()

    vectors = [np.asarray(e, dtype=np.float32) for e in embeddings]
    picks = rng.choice(len(vectors), size=k, replace=False)
    centroids = [vectors[int(i)].copy() for i in picks]

    assignments = [0] * len(vectors)
    for _ in range(rounds):
        assignments = _assign(vectors, centroids)
        _update(vectors, assignments, centroids)
    return centroids, assignments


def cluster(
    corpus: Sequence[Chunk],
    k: int,
    *,
    rounds: int = KMEANS_ROUNDS,
    rng: Optional[np.random.Generator] = None,
) -> Dict[int, List[Chunk]]:
    """Group `corpus` into `k` clusters; every id in `0..k-1` is present, even if empty."""
    _, assignments = kmeans_lite([c.embedding for c in corpus], k, rounds=rounds, rng=rng)
    groups: Dict[int, List[Chunk]] = {cluster_id: [] for cluster_id in range(k)}
    for chunk, cluster_id in zip(corpus, assignments):
        groups[cluster_id].append(chunk)
    logger.debug("Cluster sizes: %s", {cid: len(members) for cid, members in groups.items()})
    return groups


def build_label_prompt(members: Sequence[Chunk], samples: int = LABEL_SAMPLES) -> str:
    sample = "\n".join(f"- {chunk.text}" for chunk in members[:samples])
    return (
        f"Here are some notes:\n\n{sample}\n\n"
        "What common theme or topic do they share? Respond with just a short label."
    )


def label_clusters(
    groups: Dict[int, List[Chunk]],
    generator: Generator,
    *,
    samples: int = LABEL_SAMPLES,
) -> List[ClusterSummary]:
    summaries = []
    for cluster_id in sorted(groups):
        members = groups[cluster_id]
        label = generator.generate(build_label_prompt(members, samples)).strip()
        summaries.append(
            ClusterSummary(
                cluster_id=cluster_id,
                label=label,
                size=len(members),
                sample_paths=[chunk.file_path for chunk in members[:samples]],
            )
        )
    return summaries


def run_cluster(
    cfg: "AppConfig",
    k: Optional[int] = None,
    *,
    embedder: Optional[Embedder] = None,
    generator: Optional[Generator] = None,
    rng: Optional[np.random.Generator] = None,
) -> List[ClusterSummary]:
    if k is None:
        k = cfg.cluster_k
    if embedder is None or generator is None:
        gateway = OpenAIGateway.from_config(cfg)
        embedder = embedder or build_embedder(cfg, gateway)
        generator = generator or gateway

    console.print("[bold green]Clustering ideas[/bold green]")
    corpus = load_corpus(
        cfg.content_paths,
        cfg.cache_file,
        embedder,
        max_words=cfg.chunk_words,
        extensions=cfg.extensions,
    )
    groups = cluster(corpus, k, rounds=cfg.cluster_rounds, rng=rng)
    summaries = label_clusters(groups, generator)

    console.print(f"\nClustered into {k} groups:\n")
    for summary in summaries:
        console.print(f"[bold]Cluster {summary.cluster_id + 1} - {escape(summary.label)}[/bold]")
        console.print(f"{summary.size} items")
        for path in summary.sample_paths:
            console.print(f"•  {escape(path)}")
        console.print()
    return summaries


__all__ = [
    "ClusterError",
    "ClusterSummary",
    "KMEANS_ROUNDS",
    "build_label_prompt",
    "cluster",
    "kmeans_lite",
    "label_clusters",
    "run_cluster",
]
