# src/services/consolidator.py

"""Merge per-target outcomes into one ranked, deduplicated product list."""

import logging
from dataclasses import dataclass, field

from src.filters.deduplicator import ProductDeduplicator
from src.filters.intent_filter import IntentFilter
from src.filters.relevance import RelevanceRanker
from src.models.product import Product
from src.models.scrape_outcome import ScrapeOutcome
from src.models.search import SearchIntent

logger = logging.getLogger("merch_search.consolidator")


@dataclass
class Consolidation:
    """Output of one consolidation pass."""

    products: list[Product] = field(
        default_factory=lambda: list[Product]()
    )
    total_found: int = 0
    sources: list[str] = field(
        default_factory=lambda: list[str]()
    )
    filtered_count: int = 0
    deduplicated_count: int = 0


class Consolidator:
    """Filter (optionally), deduplicate, rank and truncate."""

    @staticmethod
    def order_by_priority(
        outcomes: list[ScrapeOutcome],
    ) -> list[ScrapeOutcome]:
        """Stable sort so higher-priority targets' products come first."""
        return sorted(outcomes, key=lambda o: o.priority, reverse=True)

    @staticmethod
    def consolidate(
        outcomes: list[ScrapeOutcome],
        search_query: str,
        max_results: int,
        intent: SearchIntent | None = None,
        apply_intent_filter: bool = False,
    ) -> Consolidation:
        """Run the consolidation pipeline over successful outcomes."""
        result = Consolidation()
        all_products: list[Product] = []
        for outcome in Consolidator.order_by_priority(outcomes):
            if not outcome.success or not outcome.products:
                continue
            all_products.extend(outcome.products)
            result.sources.append(outcome.source)

        logger.info(
            "Collected %d products from %d sources",
            len(all_products),
            len(result.sources),
        )

        candidates = all_products
        if apply_intent_filter and intent is not None:
            candidates, result.filtered_count = (
                IntentFilter.filter_by_intent(candidates, intent)
            )

        candidates, result.deduplicated_count = (
            ProductDeduplicator.deduplicate(candidates)
        )
        ranked = RelevanceRanker.rank(candidates, search_query)

        result.total_found = len(ranked)
        result.products = ranked[: max(0, max_results)]
        return result
