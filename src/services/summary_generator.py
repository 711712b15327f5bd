# src/services/summary_generator.py

"""Prose summary of a search result, with a templated fallback."""

import asyncio
import json
import logging

from src.config.settings import Settings
from src.models.product import Product
from src.models.search import SearchIntent
from src.scrapers.errors import CollaboratorError
from src.services.text_generator import TextGenerator

logger = logging.getLogger("merch_search.summary")

SUMMARY_SYSTEM_PROMPT = """You are a helpful and enthusiastic F1 merchandise shopping assistant.
Generate a friendly, conversational response that:
1. Acknowledges the user's request
2. Mentions the number of products found
3. Highlights key products (if any)
4. Mentions the sources searched
5. Offers to help with more specific searches if needed
6. Keeps the response under 100 words

Be natural and conversational, like a real shopping assistant would be."""


def fallback_summary(products: list[Product], sources: list[str]) -> str:
    """Deterministic sentence used when the collaborator is unavailable."""
    if not products:
        return (
            "I couldn't find any F1 merchandise matching your search "
            "right now. Try a different team, driver or item."
        )
    origin = f" from {', '.join(sources)}" if sources else ""
    noun = "item" if len(products) == 1 else "items"
    return f"I found {len(products)} F1 merchandise {noun}{origin} for you!"


def build_summary_prompt(
    query_text: str,
    products: list[Product],
    intent: SearchIntent,
    sources: list[str],
) -> str:
    top = ", ".join(
        f"{p.name} - {p.price.formatted_amount} ({p.source})"
        for p in products[:3]
    )
    return (
        f'User asked: "{query_text}"\n'
        f"Found {len(products)} products\n"
        f"Top products: {top or 'None'}\n"
        f"Sources searched: {', '.join(sources) or 'None'}\n"
        f"User intent: {json.dumps(intent.to_dict())}"
    )


class SummaryGenerator:
    """Wraps the collaborator; raises CollaboratorError on failure."""

    def __init__(self, collaborator: TextGenerator) -> None:
        self.collaborator = collaborator

    async def generate_summary(
        self,
        query_text: str,
        products: list[Product],
        intent: SearchIntent,
        sources: list[str],
    ) -> str:
        """Return the model's summary of the result set."""
        logger.info(
            "Generating summary (%d products, sources=%s)",
            len(products),
            sources,
        )
        prompt = build_summary_prompt(query_text, products, intent, sources)
        summary = await asyncio.to_thread(
            self.collaborator.request,
            prompt,
            SUMMARY_SYSTEM_PROMPT,
            Settings.SUMMARY_MAX_TOKENS,
        )
        if not summary.strip():
            msg = "Empty summary"
            raise CollaboratorError(msg)
        return summary.strip()
