# src/cli/runner.py

"""Headless runners behind the command line: search and health check."""

import json
import logging
import sys

from rich.console import Console
from rich.table import Table

from src.config.settings import Settings
from src.models.product import AvailabilityStatus
from src.models.search import ApiResponse, SearchResult
from src.services.health_checker import HealthChecker, HealthResult
from src.services.search_coordinator import SearchCoordinator

logger = logging.getLogger("merch_search.cli")

# Progress and errors go to stderr; stdout carries only the result.
_status = Console(stderr=True)

_STOCK_STYLE: dict[AvailabilityStatus, str] = {
    AvailabilityStatus.IN_STOCK: "[green]in stock[/green]",
    AvailabilityStatus.LIMITED_STOCK: "[yellow]limited[/yellow]",
    AvailabilityStatus.OUT_OF_STOCK: "[red]sold out[/red]",
}

_HEALTH_STYLE: dict[str, str] = {
    "ok": "[green]OK[/green]",
    "slow": "[yellow]SLOW[/yellow]",
    "down": "[red]DOWN[/red]",
}


def validate_query(query: str | None) -> ApiResponse | None:
    """Return an error envelope for unusable input, else ``None``."""
    if not query or not query.strip():
        return ApiResponse.fail(
            "INVALID_REQUEST",
            "Message is required and must be a non-empty string",
        )
    if len(query) > Settings.MAX_QUERY_LENGTH:
        return ApiResponse.fail(
            "MESSAGE_TOO_LONG",
            f"Message must be {Settings.MAX_QUERY_LENGTH} characters or less",
        )
    return None


def _write_envelope(response: ApiResponse) -> None:
    sys.stdout.write(
        json.dumps(response.to_dict(), ensure_ascii=False, indent=2) + "\n"
    )


def _results_table(result: SearchResult) -> Table:
    table = Table(
        title=f"{len(result.products)} of {result.total_found} products",
        caption=result.summary,
        show_lines=True,
    )
    table.add_column("Rank", justify="right", style="dim")
    table.add_column("Product", max_width=60)
    table.add_column("Price", justify="right", style="bold green")
    table.add_column("Stock", justify="center")
    table.add_column("Store", style="cyan")
    table.add_column("Link", overflow="fold", style="dim")

    for rank, product in enumerate(result.products, start=1):
        table.add_row(
            str(rank),
            product.name,
            product.price.formatted_amount,
            _STOCK_STYLE[product.availability],
            product.source,
            product.url,
        )
    return table


async def cli_search(
    query: str | None,
    max_results: int,
    output_format: str,
    filter_intent: bool = False,
    coordinator: SearchCoordinator | None = None,
) -> int:
    """Validate, search and print; returns the process exit code."""
    rejected = validate_query(query)
    if rejected is not None:
        if rejected.error is not None:
            _status.print(f"[red]{rejected.error.message}[/red]")
        _write_envelope(rejected)
        return 1
    query = (query or "").strip()

    missing = Settings.validate()
    if missing:
        logger.warning("Unset environment variables: %s", missing)
        _status.print(
            f"[yellow]{', '.join(missing)} not set: intent, summary and "
            "AI extraction will use their fallbacks.[/yellow]"
        )

    if coordinator is None:
        coordinator = SearchCoordinator(apply_intent_filter=filter_intent)

    _status.print(f"Searching for [bold]{query}[/bold] ...")
    try:
        result = await coordinator.search(query, max_results)
    except Exception as exc:
        logger.error("Search for '%s' failed", query, exc_info=True)
        _status.print(f"[red]Search failed: {exc}[/red]")
        _write_envelope(
            ApiResponse.fail(
                "INTERNAL_SERVER_ERROR",
                "Failed to process search request",
                details=str(exc),
            )
        )
        return 1

    sources = ", ".join(result.sources) or "no store"
    _status.print(
        f"[green]{len(result.products)} products from {sources} "
        f"in {result.processing_time:.1f}s[/green]"
    )

    if output_format == "table":
        Console().print(_results_table(result))
    else:
        _write_envelope(ApiResponse.ok(result))
    return 0


def _health_table(results: list[HealthResult]) -> Table:
    table = Table(title="Target health", show_lines=True)
    table.add_column("Target", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Latency", justify="right")
    table.add_column("Detail", style="dim")
    for result in results:
        table.add_row(
            result.target_id,
            _HEALTH_STYLE.get(result.status, result.status),
            f"{result.latency_ms:.0f} ms" if result.latency_ms > 0 else "-",
            result.message,
        )
    return table


async def run_health_check(checker: HealthChecker | None = None) -> int:
    """Probe enabled targets; exit code 1 when any of them is down."""
    _status.print("Probing enabled targets ...")
    results = await (checker or HealthChecker()).check_all()
    Console().print(_health_table(results))
    return 1 if any(r.status == "down" for r in results) else 0
