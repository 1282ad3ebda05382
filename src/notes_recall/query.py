from __future__ import annotations

from pathlib import Path
from textwrap import shorten
from typing import Callable, List, Optional, Sequence, Tuple

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from .config import AppConfig
from .gateway import Embedder, EmbeddingError, Generator, OpenAIGateway, build_embedder
from .index import rank
from .ingest import load_corpus
from .models import Chunk

console = Console()

EXIT_WORDS = {"exit", "quit"}


def _format_context(chunks: Sequence[Chunk]) -> str:
    return "\n\n".join(f"• {chunk.text}" for chunk in chunks)


def build_query_prompt(chunks: Sequence[Chunk]) -> str:
    return (
        f"These ideas appear related:\n\n{_format_context(chunks)}\n\n"
        "Describe their connection or common theme."
    )


def build_explore_prompt(topic: str, chunks: Sequence[Chunk]) -> str:
    return (
        f"Based on the following notes, summarize what I think or understand about '{topic}':\n\n"
        f"{_format_context(chunks)}"
    )


def build_chat_prompt(question: str, chunks: Sequence[Chunk]) -> str:
    return (
        "Answer the following question based on my notes below.\n"
        "If not enough info is present, say so.\n\n"
        f"Notes:\n{_format_context(chunks)}\n\nQuestion: {question}\n\nAnswer:"
    )


def _resolve_services(
    cfg: AppConfig, embedder: Optional[Embedder], generator: Optional[Generator]
) -> Tuple[Embedder, Generator]:
    if embedder is not None and generator is not None:
        return embedder, generator
    gateway = OpenAIGateway.from_config(cfg)
    return embedder or build_embedder(cfg, gateway), generator or gateway


def _load(cfg: AppConfig, embedder: Embedder) -> List[Chunk]:
    return load_corpus(
        cfg.content_paths,
        cfg.cache_file,
        embedder,
        max_words=cfg.chunk_words,
        extensions=cfg.extensions,
    )


def _retrieve(
    corpus: Sequence[Chunk], embedder: Embedder, text: str, top_n: int
) -> List[Tuple[float, Chunk]]:
    vector = embedder.embed(text)
    if vector is None:
        raise EmbeddingError(f"Failed to embed {text!r}")
    return rank(corpus, vector)[:top_n]


def _print_matches(results: Sequence[Tuple[float, Chunk]]) -> None:
    for i, (score, chunk) in enumerate(results, start=1):
        preview = shorten(chunk.text, width=180, placeholder="...")
        console.print(
            Panel(
                escape(preview),
                title=f"{i}. {escape(Path(chunk.file_path).name)}",
                subtitle=f"score={score:.3f}",
                expand=False,
            )
        )


def _print_answer(answer: str) -> None:
    console.rule("[bold green]Answer[/bold green]")
    console.print(escape(answer.strip()))


def answer_question(
    idea: str,
    cfg: AppConfig,
    *,
    embedder: Optional[Embedder] = None,
    generator: Optional[Generator] = None,
) -> str:
    """Find the notes closest to `idea` and ask what connects them."""
    embedder, generator = _resolve_services(cfg, embedder, generator)
    corpus = _load(cfg, embedder)

    results = _retrieve(corpus, embedder, idea, cfg.query_top_n)
    console.rule(f"[bold blue]Top {len(results)} matching chunks[/bold blue]")
    _print_matches(results)

    answer = generator.generate(build_query_prompt([chunk for _, chunk in results]))
    _print_answer(answer)
    return answer


def explore_topic(
    topic: str,
    cfg: AppConfig,
    *,
    embedder: Optional[Embedder] = None,
    generator: Optional[Generator] = None,
) -> str:
    """Summarize what the notes say about `topic`."""
    embedder, generator = _resolve_services(cfg, embedder, generator)
    console.print(f"[green]Exploring topic:[/green] {escape(topic)!r}")
    corpus = _load(cfg, embedder)

    results = _retrieve(corpus, embedder, topic, cfg.explore_top_n)
    console.rule(f"[bold blue]Top matching ideas related to {escape(topic)!r}[/bold blue]")
    _print_matches(results)

    answer = generator.generate(build_explore_prompt(topic, [chunk for _, chunk in results]))
    _print_answer(answer)
    return answer


def chat(
    cfg: AppConfig,
    *,
    embedder: Optional[Embedder] = None,
    generator: Optional[Generator] = None,
    read_line: Optional[Callable[[str], str]] = None,
) -> int:
    """
    Answer questions from stdin until EOF or an exit word.

    The corpus is loaded once; every turn re-ranks it against the new question.
    A question that cannot be embedded is reported and skipped. Returns the
    number of answered questions.
    """
    embedder, generator = _resolve_services(cfg, embedder, generator)
    if read_line is None:
        read_line = console.input

    console.print("[bold green]Chat mode started. Ask your notes anything. Ctrl+D or 'exit' to quit.[/bold green]")
    corpus = _load(cfg, embedder)

    answered = 0
    while True:
        try:
            question = read_line("\n[bold]You:[/bold] ").strip()
        except (EOFError, KeyboardInterrupt):
            console.print()
            break
        if not question:
            continue
        if question.lower() in EXIT_WORDS:
            break

        try:
            results = _retrieve(corpus, embedder, question, cfg.chat_top_n)
        except EmbeddingError:
            console.print("[yellow]Could not embed question.[/yellow]")
            continue

        answer = generator.generate(build_chat_prompt(question, [chunk for _, chunk in results]))
        console.print(f"\n[bold green]>[/bold green] {escape(answer.strip())}")
        answered += 1
    return answered


__all__ = [
    "answer_question",
    "build_chat_prompt",
    "build_explore_prompt",
    "build_query_prompt",
    "chat",
    "explore_topic",
]
