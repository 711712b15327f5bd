# main.py

"""merch_search command line: search, health check or suggestions."""

import argparse
import asyncio
import logging
import sys
from collections.abc import Coroutine
from typing import Any

from src.config.logging_config import setup_logging
from src.config.settings import Settings
from src.config.targets import TargetRegistry

logger = logging.getLogger("merch_search.main")


def _build_parser() -> argparse.ArgumentParser:
    targets = ", ".join(
        f"{t.id} (priority {t.priority})"
        for t in TargetRegistry().list_enabled()
    )
    parser = argparse.ArgumentParser(
        prog="merch_search",
        description=(
            "Find F1 merchandise across several online stores from one "
            "plain-language request."
        ),
        epilog=f"Enabled targets: {targets}",
    )
    parser.add_argument(
        "query",
        nargs="?",
        help='What to look for, e.g. "Red Bull hoodie under $100".',
    )
    parser.add_argument(
        "-n",
        "--max-results",
        type=int,
        default=Settings.DEFAULT_MAX_RESULTS,
        metavar="N",
        help="Maximum products returned (default: %(default)s).",
    )
    parser.add_argument(
        "-f",
        "--format",
        dest="output_format",
        choices=("json", "table"),
        default="json",
        help="json prints the response envelope, table a summary grid.",
    )
    parser.add_argument(
        "--filter-intent",
        action="store_true",
        help="Drop products contradicting the team, driver, item or budget.",
    )

    modes = parser.add_mutually_exclusive_group()
    modes.add_argument(
        "--health",
        action="store_true",
        help="Probe each enabled target's homepage and exit.",
    )
    modes.add_argument(
        "--suggest",
        metavar="TEXT",
        help="List canned query suggestions containing TEXT and exit.",
    )
    return parser


def _print_suggestions(partial: str) -> int:
    from src.services.search_coordinator import SearchCoordinator

    matches = SearchCoordinator.suggestions(partial)
    for suggestion in matches:
        print(suggestion)
    return 0 if matches else 1


def _dispatch(
    args: argparse.Namespace, parser: argparse.ArgumentParser,
) -> int:
    """Pick the mode requested on the command line and run it."""
    from src.cli.runner import cli_search, run_health_check

    if args.suggest is not None:
        return _print_suggestions(args.suggest)

    job: Coroutine[Any, Any, int]
    if args.health:
        job = run_health_check()
    elif args.query is None:
        parser.print_usage(sys.stderr)
        return 2
    else:
        job = cli_search(
            query=args.query,
            max_results=args.max_results,
            output_format=args.output_format,
            filter_intent=args.filter_intent,
        )
    return asyncio.run(job)


def main() -> None:
    log_file = setup_logging()
    logger.info("Run started, argv=%s, log=%s", sys.argv[1:], log_file)
    parser = _build_parser()
    sys.exit(_dispatch(parser.parse_args(), parser))


if __name__ == "__main__":
    main()
