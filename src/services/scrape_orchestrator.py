# src/services/scrape_orchestrator.py

"""Runs every enabled target concurrently with per-target isolation."""

import asyncio
import logging
import time
from collections.abc import Callable

from src.config.settings import Settings
from src.config.targets import Target
from src.models.product import Product
from src.models.scrape_outcome import ScrapeOutcome
from src.scrapers.ai_extractor import AIExtractor
from src.scrapers.base_fetcher import BaseFetcher
from src.scrapers.browser import BrowserManager
from src.scrapers.normalizer import normalize_listings
from src.scrapers.rendered_fetcher import (
    RenderedFetcher,
    StructuredDataFetcher,
)
from src.scrapers.retry import with_retry
from src.scrapers.static_fetcher import StaticFetcher

logger = logging.getLogger("merch_search.orchestrator")

FetcherFactory = Callable[[Target], BaseFetcher]


def build_fetcher(
    target: Target,
    browser: BrowserManager,
    ai_extractor: AIExtractor | None = None,
) -> BaseFetcher:
    """Pick the fetch strategy a target needs."""
    if target.structured_data:
        return StructuredDataFetcher(browser, ai_extractor)
    if target.requires_javascript:
        return RenderedFetcher(browser, ai_extractor)
    return StaticFetcher(ai_extractor)


class ScrapeOrchestrator:
    """Fan out one retry-wrapped fetch per target and fan the results in."""

    def __init__(
        self,
        fetcher_factory: FetcherFactory,
        max_attempts: int = Settings.MAX_RETRIES,
        base_delay: float = Settings.RETRY_BASE_DELAY,
    ) -> None:
        self.fetcher_factory = fetcher_factory
        self.max_attempts = max_attempts
        self.base_delay = base_delay

    async def _fetch_products(
        self, fetcher: BaseFetcher, target: Target, query: str,
    ) -> list[Product]:
        """One attempt: fetch and normalise."""
        raws = await fetcher.fetch(target, query)
        return normalize_listings(raws, target)

    async def scrape_target(
        self, target: Target, query: str,
    ) -> ScrapeOutcome:
        """Scrape one target; failures become an unsuccessful outcome."""
        start = time.monotonic()
        logger.info(
            "Starting scrape for %s (url=%s)",
            target.name,
            target.search_url(query),
        )
        try:
            fetcher = self.fetcher_factory(target)
            products = await with_retry(
                lambda: self._fetch_products(fetcher, target, query),
                max_attempts=self.max_attempts,
                base_delay=self.base_delay,
                label=target.id,
            )
        except Exception as exc:
            elapsed = time.monotonic() - start
            logger.error(
                "Scrape failed for %s after %.1fs: %s",
                target.name,
                elapsed,
                exc,
                exc_info=exc,
            )
            return ScrapeOutcome(
                source=target.name,
                success=False,
                error=str(exc) or type(exc).__name__,
                processing_time=elapsed,
                target_id=target.id,
                priority=target.priority,
            )

        elapsed = time.monotonic() - start
        logger.info(
            "Scrape completed for %s: %d products in %.1fs",
            target.name,
            len(products),
            elapsed,
        )
        return ScrapeOutcome(
            source=target.name,
            success=True,
            products=products,
            processing_time=elapsed,
            target_id=target.id,
            priority=target.priority,
        )

    async def run_all(
        self, targets: list[Target], query: str,
    ) -> list[ScrapeOutcome]:
        """Scrape all *targets* concurrently; one outcome per target.

        Waits for every target to settle. A failure on one target never
        cancels or delays the others.
        """
        logger.info("Scraping %d targets for '%s'", len(targets), query)
        settled = await asyncio.gather(
            *(self.scrape_target(t, query) for t in targets),
            return_exceptions=True,
        )

        outcomes: list[ScrapeOutcome] = []
        for target, result in zip(targets, settled):
            if isinstance(result, ScrapeOutcome):
                outcomes.append(result)
                continue
            logger.error(
                "Unexpected failure for %s: %s",
                target.name,
                result,
                exc_info=result,
            )
            outcomes.append(
                ScrapeOutcome(
                    source=target.name,
                    success=False,
                    error=str(result) or "Task failed",
                    target_id=target.id,
                    priority=target.priority,
                )
            )

        succeeded = sum(1 for o in outcomes if o.success)
        logger.info(
            "Scraping completed: %d/%d successful",
            succeeded,
            len(outcomes),
        )
        return outcomes
