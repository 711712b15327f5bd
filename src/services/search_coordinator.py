# src/services/search_coordinator.py

"""Sequences intent → query → scrape → consolidate → summary → cache."""

import logging
import time

from src.config.settings import Settings
from src.config.targets import TargetRegistry
from src.models.search import SearchIntent, SearchResult
from src.scrapers.ai_extractor import AIExtractor
from src.scrapers.browser import BrowserManager
from src.services.consolidator import Consolidator
from src.services.intent_extractor import IntentExtractor, build_search_query
from src.services.scrape_orchestrator import ScrapeOrchestrator, build_fetcher
from src.services.summary_generator import SummaryGenerator, fallback_summary
from src.services.text_generator import OpenAITextGenerator, TextGenerator
from src.storage.query_cache import ResultCache, cache_key

logger = logging.getLogger("merch_search.coordinator")

SUGGESTIONS: tuple[str, ...] = (
    "Red Bull Racing hoodie",
    "Ferrari cap",
    "Mercedes jacket",
    "McLaren t-shirt",
    "Max Verstappen merchandise",
    "Lewis Hamilton gear",
    "F1 model cars",
    "F1 flags",
    "Team polo shirts",
    "Racing jackets",
)


class SearchCoordinator:
    """Thin driver tying the scraping core to its collaborators.

    Intent filtering is bypassed by default: the search string sent to
    every target already carries the intent terms. Deduplication and
    ranking always run.
    """

    def __init__(
        self,
        registry: TargetRegistry | None = None,
        collaborator: TextGenerator | None = None,
        cache: ResultCache | None = None,
        browser: BrowserManager | None = None,
        orchestrator: ScrapeOrchestrator | None = None,
        apply_intent_filter: bool = False,
        ai_fallback: bool = True,
    ) -> None:
        self.registry = registry or TargetRegistry()
        self.collaborator = collaborator or OpenAITextGenerator()
        self.cache = cache or ResultCache()
        self.browser = browser or BrowserManager()
        self.apply_intent_filter = apply_intent_filter

        ai_extractor = AIExtractor(self.collaborator) if ai_fallback else None
        self.orchestrator = orchestrator or ScrapeOrchestrator(
            lambda target: build_fetcher(target, self.browser, ai_extractor)
        )
        self.intent_extractor = IntentExtractor(self.collaborator)
        self.summary_generator = SummaryGenerator(self.collaborator)

    async def resolve_intent(
        self, query_text: str,
    ) -> tuple[SearchIntent, str]:
        """Return the intent and the search string sent to targets.

        Without a usable intent (no item) the raw query is both the
        search string and the sole item term.
        """
        intent = await self.intent_extractor.extract_intent(query_text)
        if intent.is_empty() or not intent.item:
            logger.warning(
                "Intent extraction unusable, searching with the raw query"
            )
            return (
                SearchIntent(item=query_text.lower(), category="general"),
                query_text,
            )
        return intent, build_search_query(intent)

    async def _summarise(
        self,
        query_text: str,
        result: SearchResult,
    ) -> str:
        if not result.products:
            return fallback_summary(result.products, result.sources)
        try:
            return await self.summary_generator.generate_summary(
                query_text,
                result.products,
                result.intent,
                result.sources,
            )
        except Exception as exc:
            logger.warning("Summary generation failed: %s", exc)
            return fallback_summary(result.products, result.sources)

    async def search(
        self,
        query_text: str,
        max_results: int = Settings.DEFAULT_MAX_RESULTS,
    ) -> SearchResult:
        """Run a full search; zero successful targets is not an error."""
        start = time.monotonic()
        logger.info(
            "Starting product search for '%s' (max_results=%d)",
            query_text,
            max_results,
        )
        key = cache_key(query_text, max_results)
        try:
            cached = self.cache.get(key)
            if cached is not None:
                logger.info("Returning cached search results")
                return cached

            intent, search_query = await self.resolve_intent(query_text)
            targets = self.registry.list_enabled()
            logger.info("Using %d scraper targets", len(targets))

            outcomes = await self.orchestrator.run_all(
                targets, search_query
            )
            merged = Consolidator.consolidate(
                outcomes,
                search_query,
                max_results,
                intent=intent,
                apply_intent_filter=self.apply_intent_filter,
            )

            result = SearchResult(
                search_query=search_query,
                products=merged.products,
                intent=intent,
                sources=merged.sources,
                total_found=merged.total_found,
            )
            result.summary = await self._summarise(query_text, result)
            result.processing_time = time.monotonic() - start

            self.cache.set(key, result)
            logger.info(
                "Search completed: %d returned of %d found from %d "
                "sources in %.1fs",
                len(result.products),
                result.total_found,
                len(result.sources),
                result.processing_time,
            )
            return result
        finally:
            await self.browser.shutdown()

    @staticmethod
    def suggestions(partial: str, limit: int = 5) -> list[str]:
        """Canned autocomplete suggestions containing *partial*."""
        needle = partial.lower()
        return [s for s in SUGGESTIONS if needle in s.lower()][:limit]
