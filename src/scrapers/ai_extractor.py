# src/scrapers/ai_extractor.py

"""Last-resort product extraction through the text-generation collaborator.

Used only when a target's CSS selectors yield nothing. The page is cut
down to product-looking fragments, sent with a strict prompt, and the
model's JSON is folded back into RawListing records so it passes
through the same normalisation as structural extraction.
"""

import asyncio
import json
import logging
import re
from typing import Any, cast

from bs4 import BeautifulSoup, Tag

from src.config.settings import Settings
from src.models.product import RawListing
from src.scrapers.errors import CollaboratorError, ExtractionError
from src.services.text_generator import TextGenerator

logger = logging.getLogger("merch_search.ai_extractor")

CONTAINER_PATTERNS: tuple[str, ...] = (
    '[class*="product"]',
    '[data-testid*="product"]',
    "product-card",
    '[class*="grid-item"]',
    '[class*="card"]',
)

_NOISE_TAGS = ["style", "script", "meta", "link", "noscript", "svg"]

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)

SYSTEM_PROMPT = (
    "You are an expert web scraper that extracts product information "
    "from HTML. You must return ONLY valid JSON with no additional "
    "text or formatting."
)


def _truncate(text: str, budget: int) -> str:
    if len(text) <= budget:
        return text
    return text[:budget] + "..."


def reduce_markup(html: str, budget: int = Settings.AI_MARKUP_BUDGET) -> str:
    """Reduce a full page to product-relevant fragments within *budget*."""
    soup = BeautifulSoup(html, "lxml")
    for tag in soup(_NOISE_TAGS):
        tag.decompose()
    root: Tag = soup.body or soup

    chosen: list[Tag] = []
    chosen_ids: set[int] = set()
    for element in root.select(", ".join(CONTAINER_PATTERNS)):
        # Keep outermost matches only.
        if any(id(parent) in chosen_ids for parent in element.parents):
            continue
        chosen.append(element)
        chosen_ids.add(id(element))

    if chosen:
        logger.debug("Reduced markup to %d product fragments", len(chosen))
        return _truncate(
            "\n\n".join(str(el) for el in chosen), budget
        )

    logger.debug("No product fragments, using stripped body")
    return _truncate(str(root), budget)


def build_extraction_prompt(
    markup: str, source_name: str, query: str,
) -> str:
    """Strict prompt asking for a fixed JSON shape."""
    return f"""
Extract product information from this {source_name} HTML page. The user searched for: "{query}"

Find all products on this page and extract:
- name: Product name/title
- price: Price with currency (numeric amount, display string and currency code)
- url: Product page URL
- imageUrl: Product image URL
- availability: "IN_STOCK", "OUT_OF_STOCK", or "LIMITED_STOCK"

HTML Content:
{markup}

Return ONLY a JSON object with this exact structure:
{{
  "products": [
    {{
      "name": "Product Name",
      "price": {{"amount": 99.99, "formattedAmount": "$99.99", "currency": "USD"}},
      "url": "https://example.com/product",
      "imageUrl": "https://example.com/image.jpg",
      "availability": "IN_STOCK"
    }}
  ]
}}

If no products are found, return: {{"products": []}}
"""


def _price_text(raw: object) -> str:
    """Flatten a model-supplied price (object, number or string)."""
    if isinstance(raw, dict):
        price = cast(dict[str, Any], raw)
        formatted = price.get("formattedAmount")
        if formatted:
            return str(formatted)
        amount = price.get("amount")
        if amount is None:
            return ""
        return f"{amount} {price.get('currency', '')}".strip()
    if raw is None:
        return ""
    return str(raw)


def _availability_text(raw: object) -> str:
    if not raw:
        return ""
    return str(raw).replace("_", " ").lower()


def parse_extraction_response(text: str) -> list[RawListing]:
    """Parse the model's JSON into RawListings or raise ExtractionError."""
    cleaned = _FENCE_RE.sub("", text.strip())
    try:
        data: object = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        msg = f"Model returned invalid JSON: {exc}"
        raise ExtractionError(msg) from exc

    if isinstance(data, dict):
        items: object = cast(dict[str, Any], data).get("products", [])
    else:
        items = data
    if not isinstance(items, list):
        msg = "Model JSON has no product list"
        raise ExtractionError(msg)

    listings: list[RawListing] = []
    for item in cast(list[object], items):
        if not isinstance(item, dict):
            continue
        entry = cast(dict[str, Any], item)
        listings.append(
            RawListing(
                name=str(entry.get("name") or ""),
                price_text=_price_text(entry.get("price")),
                image_url=str(entry.get("imageUrl") or ""),
                link_url=str(entry.get("url") or ""),
                availability_text=_availability_text(
                    entry.get("availability")
                ),
                description=str(entry.get("description") or ""),
            )
        )
    return listings


class AIExtractor:
    """Best-effort extraction; never raises, degrades to an empty list."""

    def __init__(
        self,
        collaborator: TextGenerator,
        markup_budget: int = Settings.AI_MARKUP_BUDGET,
    ) -> None:
        self.collaborator = collaborator
        self.markup_budget = markup_budget

    async def extract(
        self, page_markup: str, source_name: str, query: str,
    ) -> list[RawListing]:
        """Return listings found by the model, or ``[]`` on any failure."""
        try:
            markup = reduce_markup(page_markup, self.markup_budget)
            prompt = build_extraction_prompt(markup, source_name, query)
            response = await asyncio.to_thread(
                self.collaborator.request,
                prompt,
                SYSTEM_PROMPT,
                Settings.EXTRACTION_MAX_TOKENS,
            )
            listings = parse_extraction_response(response)
        except (CollaboratorError, ExtractionError) as exc:
            logger.warning(
                "[%s] AI extraction failed: %s", source_name, exc
            )
            return []
        except Exception:
            logger.error(
                "[%s] AI extraction crashed", source_name, exc_info=True
            )
            return []

        logger.info(
            "[%s] AI extraction produced %d listings",
            source_name,
            len(listings),
        )
        return listings
