# src/filters/intent_filter.py

"""Post-scrape product filtering by extracted search intent."""

import logging

from src.models.product import Product
from src.models.search import SearchIntent

logger = logging.getLogger("merch_search.filters")

# An item token on the left also matches any of the words on the right.
ITEM_SYNONYMS: dict[str, tuple[str, ...]] = {
    "clothing": ("shirt", "jacket", "polo"),
    "racewear": ("race", "suit", "teamwear"),
}


class IntentFilter:
    """Drop products that contradict the team, driver, item or budget."""

    @staticmethod
    def matches_item(item: str, text: str) -> bool:
        """True when any item word (or one of its synonyms) is in *text*."""
        for word in item.lower().split():
            if word in text:
                return True
            if any(syn in text for syn in ITEM_SYNONYMS.get(word, ())):
                return True
        return False

    @staticmethod
    def accepts(product: Product, intent: SearchIntent) -> bool:
        """Decide whether a single product satisfies *intent*."""
        text = product.searchable_text

        if intent.team and intent.team.lower() not in text:
            return False
        if intent.driver and intent.driver.lower() not in text:
            return False
        if intent.item and not IntentFilter.matches_item(intent.item, text):
            return False
        if (
            intent.budget is not None
            and float(product.price.amount) > intent.budget
        ):
            return False
        return True

    @staticmethod
    def filter_by_intent(
        products: list[Product],
        intent: SearchIntent,
    ) -> tuple[list[Product], int]:
        """Keep products accepted by *intent*.

        Returns the filtered list and the count of excluded products.
        """
        if intent.is_empty():
            return products, 0

        kept = [p for p in products if IntentFilter.accepts(p, intent)]
        excluded = len(products) - len(kept)
        if excluded:
            logger.info(
                "Intent filter removed %d of %d products",
                excluded,
                len(products),
            )
        return kept, excluded
