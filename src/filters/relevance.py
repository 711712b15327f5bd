# src/filters/relevance.py

"""Keyword relevance scoring and stable ranking."""

from src.models.product import AvailabilityStatus, Product

NAME_WEIGHT = 3.0
TEXT_WEIGHT = 1.0
IN_STOCK_BONUS = 0.5
MIN_TOKEN_LENGTH = 2


class RelevanceRanker:
    """Score products against the search string and sort by score."""

    @staticmethod
    def tokenize(query: str) -> list[str]:
        """Whitespace tokens of at least two characters, lowercased."""
        return [
            token
            for token in query.lower().split()
            if len(token) >= MIN_TOKEN_LENGTH
        ]

    @staticmethod
    def score(product: Product, tokens: list[str]) -> float:
        """3 per token in the name, 1 per token anywhere, +0.5 if in stock."""
        name = product.name.lower()
        text = product.searchable_text
        total = 0.0
        for token in tokens:
            if token in name:
                total += NAME_WEIGHT
            if token in text:
                total += TEXT_WEIGHT
        if product.availability is AvailabilityStatus.IN_STOCK:
            total += IN_STOCK_BONUS
        return total

    @staticmethod
    def rank(products: list[Product], query: str) -> list[Product]:
        """Sort descending by score; equal scores keep their input order."""
        tokens = RelevanceRanker.tokenize(query)
        # sorted() is stable, so ties preserve prior relative order.
        return sorted(
            products,
            key=lambda p: RelevanceRanker.score(p, tokens),
            reverse=True,
        )
