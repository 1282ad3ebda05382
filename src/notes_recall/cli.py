from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .cluster import ClusterError, run_cluster
from .config import DEFAULT_CONFIG_PATH, load_config
from .gateway import EmbeddingError, GenerationError
from .logging import configure_logging
from .query import answer_question, chat, explore_topic


def _add_common_options(parser: argparse.ArgumentParser, *, suppress_default: bool = False) -> None:
    default_config = argparse.SUPPRESS if suppress_default else str(DEFAULT_CONFIG_PATH)
    default_verbose = argparse.SUPPRESS if suppress_default else False
    parser.add_argument(
        "--config",
        type=str,
        default=default_config,
        help=f"Path to a config YAML file (default: {DEFAULT_CONFIG_PATH}).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=default_verbose,
        help="Increase log verbosity for troubleshooting.",
    )


def parse_cluster_count(value: Optional[str]) -> Optional[int]:
    """Parse the cluster count argument; anything that is not an integer means "use the default"."""
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="notes-recall",
        description="Ask questions over your markdown notes, explore topics and group notes by theme.",
    )
    _add_common_options(parser)

    subparsers = parser.add_subparsers(dest="command", required=True)

    query_parser = subparsers.add_parser(
        "query",
        help="Find the notes closest to an idea and describe what connects them.",
    )
    _add_common_options(query_parser, suppress_default=True)
    query_parser.add_argument("idea", nargs="+", help="Idea to match against your notes.")

    explore_parser = subparsers.add_parser(
        "explore",
        help="Summarize what your notes say about a topic.",
    )
    _add_common_options(explore_parser, suppress_default=True)
    explore_parser.add_argument("topic", nargs="+", help="Topic to explore.")

    chat_parser = subparsers.add_parser(
        "chat",
        help="Interactive question answering over your notes.",
    )
    _add_common_options(chat_parser, suppress_default=True)

    cluster_parser = subparsers.add_parser(
        "cluster",
        help="Group notes into topics and label each group.",
    )
    _add_common_options(cluster_parser, suppress_default=True)
    cluster_parser.add_argument(
        "k",
        nargs="?",
        default=None,
        help="Number of clusters (default: cluster_k from the config, 5 unless set).",
    )

    return parser


def main(argv: List[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))
    cfg = load_config(Path(args.config))

    try:
        if args.command == "query":
            answer_question(" ".join(args.idea), cfg)
        elif args.command == "explore":
            explore_topic(" ".join(args.topic), cfg)
        elif args.command == "chat":
            chat(cfg)
        elif args.command == "cluster":
            run_cluster(cfg, parse_cluster_count(args.k))
        else:  # pragma: no cover - argparse enforces choices
            parser.print_help()
    except (EmbeddingError, GenerationError, ClusterError) as exc:
        parser.exit(1, f"notes-recall {args.command} failed: {exc}\n")


if __name__ == "__main__":
    main(sys.argv[1:])
