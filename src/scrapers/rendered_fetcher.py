# src/scrapers/rendered_fetcher.py

"""Headless-browser fetch for JavaScript-driven search pages."""

import asyncio
import json
from typing import Any, cast

from bs4 import BeautifulSoup, Tag
from playwright.async_api import Error as PlaywrightError, Page

from src.config.settings import Settings
from src.config.targets import Target
from src.models.product import RawListing
from src.scrapers.ai_extractor import AIExtractor
from src.scrapers.base_fetcher import BaseFetcher
from src.scrapers.browser import BrowserManager
from src.scrapers.errors import ExtractionError, FetchError
from src.scrapers.pagination import traverse_load_more


class RenderedFetcher(BaseFetcher):
    """Render the search page, page through "load more", then extract.

    Extraction runs over a snapshot of the rendered DOM using the same
    selector contract as :class:`StaticFetcher`.
    """

    def __init__(
        self,
        browser: BrowserManager,
        ai_extractor: AIExtractor | None = None,
        max_products: int | None = None,
    ) -> None:
        super().__init__(ai_extractor, max_products)
        self.browser = browser

    def _wait_selector(self, target: Target) -> str:
        return target.selectors.product_container

    async def _load(self, page: Page, target: Target, url: str) -> str:
        """Navigate, settle, paginate and return the rendered markup."""
        log = self._logger_for(target)
        await page.goto(
            url,
            wait_until="domcontentloaded",
            timeout=target.timeout * 1000,
        )
        await asyncio.sleep(target.delay)
        await page.wait_for_selector(
            self._wait_selector(target),
            timeout=self.settings.SELECTOR_WAIT_TIMEOUT_MS,
        )
        clicks = await traverse_load_more(
            page,
            target.selectors,
            max_clicks=self.settings.LOAD_MORE_MAX_CLICKS,
            product_ceiling=self.settings.LOAD_MORE_PRODUCT_CEILING,
            click_delay=self.settings.LOAD_MORE_CLICK_DELAY,
        )
        log.debug("[%s] Load-more clicks: %d", target.id, clicks)
        return await page.content()

    async def _extract(
        self, html: str, target: Target, query: str,
    ) -> list[RawListing]:
        return await self._extract_with_fallback(html, target, query)

    async def fetch(self, target: Target, query: str) -> list[RawListing]:
        """Render ``target.search_url(query)`` and extract listings."""
        url = target.search_url(query)
        log = self._logger_for(target)
        log.debug("[%s] Rendered fetch: %s", target.id, url)
        try:
            async with self.browser.new_page() as page:
                html = await self._load(page, target, url)
        except PlaywrightError as exc:
            log.warning(
                "[%s] Browser fetch failed: %s", target.id, exc
            )
            msg = f"Browser fetch of {url} failed: {exc}"
            raise FetchError(msg) from exc
        return await self._extract(html, target, query)


CARD_SELECTOR = "product-card"
PAYLOAD_ATTRIBUTE = "product"


def _structured_price(raw: object) -> str:
    """Integer prices in the embedded payload are minor units (cents)."""
    if raw is None or isinstance(raw, bool):
        return ""
    if isinstance(raw, int):
        return f"${raw / 100:.2f}"
    if isinstance(raw, float):
        return f"${raw:.2f}"
    return str(raw)


def parse_product_card(card: Tag) -> RawListing:
    """Map one card's embedded JSON onto a RawListing."""
    payload = card.get(PAYLOAD_ATTRIBUTE)
    if not payload or not isinstance(payload, str):
        msg = "Product card has no embedded payload"
        raise ExtractionError(msg)
    try:
        data: object = json.loads(payload)
    except json.JSONDecodeError as exc:
        msg = f"Malformed product payload: {exc}"
        raise ExtractionError(msg) from exc
    if not isinstance(data, dict):
        msg = "Product payload is not an object"
        raise ExtractionError(msg)

    product = cast(dict[str, Any], data)
    available = product.get("available")
    if isinstance(available, bool):
        availability = "In Stock" if available else "Out of Stock"
    else:
        availability = str(available or "In Stock")
    handle = str(product.get("handle") or "")

    return RawListing(
        name=str(product.get("title") or ""),
        price_text=_structured_price(product.get("price")),
        image_url=str(product.get("featured_image") or ""),
        link_url=f"/products/{handle}" if handle else "",
        availability_text=availability,
    )


class StructuredDataFetcher(RenderedFetcher):
    """Read the JSON each ``<product-card>`` carries instead of its markup."""

    def __init__(
        self,
        browser: BrowserManager,
        ai_extractor: AIExtractor | None = None,
        max_products: int | None = Settings.STRUCTURED_MAX_PRODUCTS,
    ) -> None:
        super().__init__(browser, ai_extractor, max_products)

    def _wait_selector(self, target: Target) -> str:
        return f"{CARD_SELECTOR}, {target.selectors.product_container}"

    def extract_structured(
        self, html: str, target: Target,
    ) -> tuple[list[RawListing], int]:
        """Return parsed listings and the number of cards seen."""
        log = self._logger_for(target)
        soup = BeautifulSoup(html, "lxml")
        cards = soup.select(CARD_SELECTOR)
        if self.max_products is not None:
            cards = cards[: self.max_products]

        listings: list[RawListing] = []
        for card in cards:
            try:
                listings.append(parse_product_card(card))
            except ExtractionError as exc:
                log.debug("[%s] Skipped card: %s", target.id, exc)
        log.info(
            "[%s] Extracted %d/%d products from embedded JSON",
            target.id,
            len(listings),
            len(cards),
        )
        return listings, len(cards)

    async def _extract(
        self, html: str, target: Target, query: str,
    ) -> list[RawListing]:
        listings, card_count = self.extract_structured(html, target)
        if listings:
            return listings

        fallback = await self._extract_with_fallback(html, target, query)
        if not fallback and card_count:
            msg = (
                f"{card_count} product cards on {target.name} "
                "carried no readable payload"
            )
            raise ExtractionError(msg)
        return fallback
