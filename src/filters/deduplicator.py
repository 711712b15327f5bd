# src/filters/deduplicator.py

"""Product deduplication across multiple merchandise sources."""

import logging
import re

from src.models.product import Product

logger = logging.getLogger("merch_search.filters")


class ProductDeduplicator:
    """Remove duplicate products by normalised name, first seen wins."""

    _NON_ALNUM_RE = re.compile(r"[^a-z0-9]")

    @staticmethod
    def normalise_key(name: str) -> str:
        """Lowercase the name and strip every non-alphanumeric character."""
        return ProductDeduplicator._NON_ALNUM_RE.sub("", name.lower())

    @staticmethod
    def deduplicate(
        products: list[Product],
    ) -> tuple[list[Product], int]:
        """Keep the first product per normalised-name key, in input order.

        Callers that want priority to decide the survivor must pass the
        products ordered by source priority.

        Returns the deduplicated list and the count of removed dupes.
        """
        if not products:
            return [], 0

        seen: set[str] = set()
        kept: list[Product] = []
        for product in products:
            key = ProductDeduplicator.normalise_key(product.name)
            if key in seen:
                logger.debug(
                    "Dropped duplicate '%s' from %s",
                    product.name,
                    product.source,
                )
                continue
            seen.add(key)
            kept.append(product)

        removed = len(products) - len(kept)
        if removed:
            logger.info(
                "Deduplication removed %d duplicate products",
                removed,
            )

        return kept, removed
