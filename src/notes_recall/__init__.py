"""
notes-recall.

Retrieval over a folder of markdown notes: chunk, embed (with a content-addressed
cache), rank by cosine similarity, and group into labelled topics.
"""

__all__ = [
    "cache",
    "cli",
    "cluster",
    "config",
    "gateway",
    "index",
    "ingest",
    "local_embedder",
    "logging",
    "models",
    "query",
]
