# tests/test_rendered_fetcher.py

"""Tests for rendered and structured-data fetch strategies."""

import json
import unittest
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from html import escape
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

from bs4 import BeautifulSoup
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from src.config.targets import ExtractionRules, Target
from src.scrapers.errors import ExtractionError, FetchError
from src.scrapers.rendered_fetcher import (
    RenderedFetcher,
    StructuredDataFetcher,
    parse_product_card,
)

TRAVERSE_PATH = "src.scrapers.rendered_fetcher.traverse_load_more"

RULES = ExtractionRules(
    product_container=".product-tile",
    name="h3",
    price=".price",
)

RENDERED = Target(
    id="redbull-shop",
    name="Red Bull Shop",
    base_url="https://www.redbullshop.com",
    search_path="/en-int/search/?q={query}",
    selectors=RULES,
    delay=0.0,
    timeout=20.0,
    requires_javascript=True,
)

STRUCTURED = Target(
    id="f1-authentics",
    name="F1 Authentics",
    base_url="https://www.f1authentics.com",
    search_path="/search?q={query}",
    selectors=RULES,
    delay=0.0,
    requires_javascript=True,
    structured_data=True,
)


def _card(payload: dict[str, Any] | str) -> str:
    raw = payload if isinstance(payload, str) else json.dumps(payload)
    return f'<product-card product="{escape(raw, quote=True)}"></product-card>'


def _tile(name: str, price: str) -> str:
    return (
        f'<div class="product-tile"><h3>{name}</h3>'
        f'<span class="price">{price}</span></div>'
    )


def _page_mock(html: str) -> MagicMock:
    page = MagicMock()
    page.goto = AsyncMock()
    page.wait_for_selector = AsyncMock()
    page.content = AsyncMock(return_value=html)
    return page


class FakeBrowser:
    """Stands in for BrowserManager; hands out one canned page."""

    def __init__(self, page: MagicMock) -> None:
        self.page = page
        self.opened = 0

    @asynccontextmanager
    async def new_page(self) -> AsyncIterator[MagicMock]:
        self.opened += 1
        yield self.page


class TestParseProductCard(unittest.TestCase):
    """Embedded JSON payload mapping."""

    def _card_tag(self, payload: dict[str, Any] | str) -> Any:
        soup = BeautifulSoup(_card(payload), "lxml")
        return soup.select_one("product-card")

    def test_full_payload(self) -> None:
        listing = parse_product_card(
            self._card_tag(
                {
                    "title": "Ferrari Team Cap",
                    "price": 4500,
                    "featured_image": "//cdn.example/cap.jpg",
                    "handle": "ferrari-team-cap",
                    "available": True,
                }
            )
        )
        self.assertEqual(listing.name, "Ferrari Team Cap")
        self.assertEqual(listing.price_text, "$45.00")
        self.assertEqual(listing.link_url, "/products/ferrari-team-cap")
        self.assertEqual(listing.image_url, "//cdn.example/cap.jpg")
        self.assertEqual(listing.availability_text, "In Stock")

    def test_unavailable(self) -> None:
        listing = parse_product_card(
            self._card_tag({"title": "Cap", "available": False})
        )
        self.assertEqual(listing.availability_text, "Out of Stock")
        self.assertEqual(listing.price_text, "")

    def test_string_price_passed_through(self) -> None:
        listing = parse_product_card(
            self._card_tag({"title": "Cap", "price": "€30"})
        )
        self.assertEqual(listing.price_text, "€30")

    def test_malformed_json_raises(self) -> None:
        with self.assertRaises(ExtractionError):
            parse_product_card(self._card_tag("{not json"))

    def test_non_object_raises(self) -> None:
        with self.assertRaises(ExtractionError):
            parse_product_card(self._card_tag("[1, 2]"))

    def test_missing_payload_raises(self) -> None:
        soup = BeautifulSoup("<product-card></product-card>", "lxml")
        with self.assertRaises(ExtractionError):
            parse_product_card(soup.select_one("product-card"))


class TestExtractStructured(unittest.TestCase):
    """StructuredDataFetcher.extract_structured."""

    def test_bad_cards_skipped(self) -> None:
        html = (
            "<body>"
            + _card({"title": "A", "price": 1000})
            + _card("{broken")
            + _card({"title": "B", "price": 2000})
            + "</body>"
        )
        fetcher = StructuredDataFetcher(MagicMock())
        listings, seen = fetcher.extract_structured(html, STRUCTURED)
        self.assertEqual([raw.name for raw in listings], ["A", "B"])
        self.assertEqual(seen, 3)

    def test_cap_of_twenty(self) -> None:
        html = "".join(
            _card({"title": f"Item {i}", "price": 100}) for i in range(25)
        )
        fetcher = StructuredDataFetcher(MagicMock())
        listings, seen = fetcher.extract_structured(html, STRUCTURED)
        self.assertEqual(len(listings), 20)
        self.assertEqual(seen, 20)


class TestRenderedFetcher(unittest.IsolatedAsyncioTestCase):
    """RenderedFetcher.fetch against a fake browser."""

    @patch(TRAVERSE_PATH, new_callable=AsyncMock, return_value=2)
    async def test_extracts_rendered_markup(
        self, traverse: AsyncMock,
    ) -> None:
        page = _page_mock(
            _tile("Red Bull Hoodie", "$80.00") + _tile("RB Cap", "$35")
        )
        browser = FakeBrowser(page)
        listings = await RenderedFetcher(browser).fetch(  # type: ignore[arg-type]
            RENDERED, "hoodie"
        )

        self.assertEqual([raw.name for raw in listings], ["Red Bull Hoodie", "RB Cap"])
        page.goto.assert_awaited_once()
        self.assertEqual(
            page.goto.call_args.args[0],
            "https://www.redbullshop.com/en-int/search/?q=hoodie",
        )
        self.assertEqual(page.goto.call_args.kwargs["timeout"], 20000)
        traverse.assert_awaited_once()

    @patch(TRAVERSE_PATH, new_callable=AsyncMock, return_value=0)
    async def test_selector_timeout_is_fetch_error(
        self, _traverse: AsyncMock,
    ) -> None:
        """No product container before the wait deadline fails the fetch."""
        page = _page_mock("")
        page.wait_for_selector.side_effect = PlaywrightTimeoutError(
            "Timeout 10000ms exceeded"
        )
        with self.assertRaises(FetchError):
            await RenderedFetcher(FakeBrowser(page)).fetch(  # type: ignore[arg-type]
                RENDERED, "cap"
            )
        page.content.assert_not_awaited()

    @patch(TRAVERSE_PATH, new_callable=AsyncMock, return_value=0)
    async def test_navigation_failure_is_fetch_error(
        self, _traverse: AsyncMock,
    ) -> None:
        page = _page_mock("")
        page.goto.side_effect = PlaywrightTimeoutError("nav timeout")
        with self.assertRaises(FetchError):
            await RenderedFetcher(FakeBrowser(page)).fetch(  # type: ignore[arg-type]
                RENDERED, "cap"
            )


class TestStructuredDataFetcher(unittest.IsolatedAsyncioTestCase):
    """StructuredDataFetcher fallbacks."""

    @patch(TRAVERSE_PATH, new_callable=AsyncMock, return_value=0)
    async def test_reads_cards(self, _traverse: AsyncMock) -> None:
        page = _page_mock(_card({"title": "Mercedes Polo", "price": 9900}))
        listings = await StructuredDataFetcher(FakeBrowser(page)).fetch(  # type: ignore[arg-type]
            STRUCTURED, "polo"
        )
        self.assertEqual(len(listings), 1)
        self.assertEqual(listings[0].price_text, "$99.00")

    @patch(TRAVERSE_PATH, new_callable=AsyncMock, return_value=0)
    async def test_falls_back_to_selectors(
        self, _traverse: AsyncMock,
    ) -> None:
        """No cards at all → the generic selector contract."""
        page = _page_mock(_tile("McLaren Tee", "$40"))
        listings = await StructuredDataFetcher(FakeBrowser(page)).fetch(  # type: ignore[arg-type]
            STRUCTURED, "tee"
        )
        self.assertEqual([raw.name for raw in listings], ["McLaren Tee"])

    @patch(TRAVERSE_PATH, new_callable=AsyncMock, return_value=0)
    async def test_unreadable_cards_raise(
        self, _traverse: AsyncMock,
    ) -> None:
        """Cards present but none parseable is an extraction error."""
        page = _page_mock(_card("{broken") + _card("also broken"))
        with self.assertRaises(ExtractionError):
            await StructuredDataFetcher(FakeBrowser(page)).fetch(  # type: ignore[arg-type]
                STRUCTURED, "cap"
            )


if __name__ == "__main__":
    unittest.main()
