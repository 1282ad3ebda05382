from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from rich.progress import Progress

from .cache import digest, load_cache, save_cache
from .gateway import Embedder, to_float32_list
from .logging import get_logger
from .models import Chunk

logger = get_logger("ingest")

DEFAULT_CHUNK_WORDS = 400
DEFAULT_EXTENSIONS = (".md",)


@dataclass
class LoadReport:
    files_read: int = 0
    files_skipped: int = 0
    chunks_cached: int = 0
    chunks_embedded: int = 0
    chunks_dropped: int = 0


def load_markdown(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def chunk_text(text: str, max_words: int = DEFAULT_CHUNK_WORDS) -> List[str]:
    """Split text into consecutive windows of at most `max_words` words."""
    if max_words < 1:
        raise ValueError(f"max_words must be at least 1, got {max_words}")
    words = text.split()
    return [" ".join(words[start : start + max_words]) for start in range(0, len(words), max_words)]


def iter_files(root: Path, extensions: Sequence[str] = DEFAULT_EXTENSIONS) -> Iterable[Path]:
    wanted = {ext.lower() for ext in extensions}
    if root.is_file():
        if root.suffix.lower() in wanted:
            yield root
        return
    try:
        candidates = sorted(root.rglob("*"))
    except OSError as exc:
        logger.warning("Cannot walk %s: %s", root, exc)
        return
    for path in candidates:
        if path.suffix.lower() in wanted and path.is_file():
            yield path


def iter_source_chunks(
    content_roots: Iterable[Path],
    max_words: int = DEFAULT_CHUNK_WORDS,
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
    report: Optional[LoadReport] = None,
) -> Iterator[Tuple[str, str]]:
    """Yield `(chunk_text, file_path)` pairs, skipping files that cannot be read."""
    report = report if report is not None else LoadReport()
    for root in content_roots:
        root = Path(root)
        if not root.exists():
            logger.warning("Content path not found: %s", root)
            continue
        for path in iter_files(root, extensions):
            try:
                text = load_markdown(path)
            except (OSError, UnicodeDecodeError) as exc:
                logger.debug("Skipping %s: %s", path, exc)
                report.files_skipped += 1
                continue
            report.files_read += 1
            file_path = str(path)
            for chunk in chunk_text(text, max_words):
                yield chunk, file_path


def load_corpus(
    content_roots: Iterable[Path],
    cache_path: Path,
    embedder: Embedder,
    *,
    max_words: int = DEFAULT_CHUNK_WORDS,
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
    report: Optional[LoadReport] = None,
) -> List[Chunk]:
    """
    Chunk every note under `content_roots` and attach an embedding to each chunk.

    Chunks already present in the cache file are reused; the rest go through
    `embedder`. Chunks the embedder cannot handle are dropped. The cache is
    written back in full once every chunk has been visited.
    """
    report = report if report is not None else LoadReport()
    cache = load_cache(cache_path)
    raw_chunks = list(iter_source_chunks(content_roots, max_words, extensions, report))
    logger.info("Loaded chunks: %d from %d files", len(raw_chunks), report.files_read)

    corpus: List[Chunk] = []
    with Progress(transient=True) as progress:
        task = progress.add_task("Embedding chunks...", total=len(raw_chunks))
        for text, file_path in raw_chunks:
            key = digest(text, file_path)
            cached = cache.get(key)
            if cached is not None:
                corpus.append(cached)
                report.chunks_cached += 1
            else:
                embedding = embedder.embed(text)
                if embedding is None:
                    report.chunks_dropped += 1
                else:
                    chunk = Chunk(text=text, file_path=file_path, embedding=to_float32_list(embedding))
                    cache[key] = chunk
                    corpus.append(chunk)
                    report.chunks_embedded += 1
            progress.update(task, advance=1)

    save_cache(cache_path, cache)

    logger.info(
        "Embedded chunks: %d (%d cached, %d new, %d dropped)",
        len(corpus),
        report.chunks_cached,
        report.chunks_embedded,
        report.chunks_dropped,
    )
    return corpus


__all__ = [
    "Chunk",
    "LoadReport",
    "chunk_text",
    "iter_files",
    "iter_source_chunks",
    "load_corpus",
]
