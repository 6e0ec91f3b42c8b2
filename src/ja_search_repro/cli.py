"""Command line entry point.

Without ``--query`` the interactive terminal UI starts. With ``--query`` the
given ``--doc`` strings are indexed, the query runs once and the ranked
results are printed as a table.
"""

from __future__ import annotations

import argparse
from collections.abc import Sequence
import logging
from pathlib import Path
import sys
from typing import Any

from pydantic import ValidationError
from rich.console import Console
from rich.table import Table
from rich.text import Text

from ja_search_repro import __version__
from ja_search_repro.config import Settings
from ja_search_repro.domain.model import DocumentStore
from ja_search_repro.observability import configure_logging
from ja_search_repro.session import IndexSession


logger = logging.getLogger(__name__)


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ja-search-repro",
        description="Index Japanese strings and search them with a configurable tokenizer",
    )
    parser.add_argument(
        "--tokenizer",
        choices=["japanese", "ngram", "standard"],
        help="Analyzer for document bodies and queries (default: SEARCH_TOKENIZER or japanese)",
    )
    parser.add_argument(
        "--min-gram",
        type=int,
        help="Smallest n-gram size when --tokenizer=ngram",
    )
    parser.add_argument(
        "--max-gram",
        type=int,
        help="Largest n-gram size when --tokenizer=ngram",
    )
    parser.add_argument(
        "--wildcard",
        choices=["trailing", "none"],
        help="Match query tokens as prefixes ('trailing') or exactly ('none')",
    )
    parser.add_argument(
        "--doc",
        action="append",
        default=[],
        metavar="TEXT",
        help="Document to index before the UI starts or the query runs (repeatable)",
    )
    parser.add_argument(
        "--query",
        help="Run this query once against the --doc documents and print the results",
    )
    parser.add_argument(
        "--log-level",
        help="Logging level (default: LOG_LEVEL or info)",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        help="Append logs to this file",
    )
    parser.add_argument(
        "--plain-logs",
        action="store_true",
        help="Use plain text log lines instead of JSON",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _settings_overrides(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, Any] = {
        "search_tokenizer": args.tokenizer,
        "search_wildcard": args.wildcard,
        "ngram_min_size": args.min_gram,
        "ngram_max_size": args.max_gram,
        "log_level": args.log_level,
        "log_file": args.log_file,
    }
    if args.plain_logs:
        overrides["log_json"] = False
    return {key: value for key, value in overrides.items() if value is not None}


def _build_store(bodies: Sequence[str]) -> DocumentStore:
    store = DocumentStore.empty()
    for body in bodies:
        if body.strip():
            store = store.add(body)
    return store


def _run_query(session: IndexSession, store: DocumentStore, query: str, console: Console) -> int:
    session.rebuild(store)
    outcome = session.search(query)

    if outcome.error:
        console.print(Text.assemble(("Error searching: ", "bold red"), outcome.error))
        console.print(outcome.summary())
        return 1

    if outcome.tokens:
        console.print(f"Tokens: {', '.join(outcome.tokens)}", markup=False, highlight=False)
    console.print(outcome.summary(), highlight=False)
    if not outcome.results:
        return 0

    table = Table(title=Text(f"Results for {query!r}"))
    table.add_column("Document", style="cyan")
    table.add_column("Score", justify="right", style="magenta")
    table.add_column("Body")
    table.add_column("Matched terms")
    for hit in outcome.results:
        table.add_row(
            hit.document_id,
            f"{hit.score:.3f}",
            Text(store[hit.document_id]),
            Text(", ".join(hit.matched_terms)),
        )
    console.print(table)
    return 0


def _run_interactive(session: IndexSession, store: DocumentStore) -> int:
    from ja_search_repro.ui.app import SearchReproApp

    SearchReproApp(session, documents=store if store else None).run()
    return 0


def main(argv: Sequence[str] | None = None, *, console: Console | None = None) -> int:
    parser = build_argument_parser()
    args = parser.parse_args(argv)
    console = console or Console()

    try:
        settings = Settings(**_settings_overrides(args))
    except ValidationError as exc:
        console.print(f"Invalid configuration:\n{exc}", markup=False, highlight=False)
        return 2

    if args.query is not None or settings.log_file is not None:
        configure_logging(settings.log_level, settings.log_json, log_file=settings.log_file)
    else:
        # stderr belongs to the terminal UI; route records to the textual devtools console
        from textual.logging import TextualHandler

        configure_logging(settings.log_level, settings.log_json, handler=TextualHandler())

    session = IndexSession(settings)
    store = _build_store(args.doc)
    logger.debug("Starting with %d documents", len(store), extra={"tokenizer": settings.search_tokenizer})

    if args.query is not None:
        return _run_query(session, store, args.query, console)
    return _run_interactive(session, store)


if __name__ == "__main__":
    sys.exit(main())
