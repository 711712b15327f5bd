# src/scrapers/base_fetcher.py

"""Abstract base class for all fetch strategies."""

import logging
from abc import ABC, abstractmethod

from bs4 import BeautifulSoup, Tag

from src.config.settings import Settings
from src.config.targets import ExtractionRules, Target
from src.models.product import RawListing
from src.scrapers.ai_extractor import AIExtractor


def _text(container: Tag, selector: str | None) -> str:
    """Stripped text of the first match for *selector*, or ``""``."""
    if not selector:
        return ""
    element = container.select_one(selector)
    if element is None:
        return ""
    return element.get_text(" ", strip=True)


def _attr(element: Tag | None, *names: str) -> str:
    """First non-empty attribute among *names*."""
    if element is None:
        return ""
    for name in names:
        value = element.get(name)
        if isinstance(value, list):
            value = " ".join(value)
        if value:
            return str(value).strip()
    return ""


def extract_listings(
    soup: BeautifulSoup | Tag,
    rules: ExtractionRules,
    limit: int | None = None,
) -> list[RawListing]:
    """Apply the selector contract to every product container.

    A container only yields a listing when both a name and a price
    are found.
    """
    logger = logging.getLogger("merch_search.extract")
    listings: list[RawListing] = []
    for container in soup.select(rules.product_container):
        try:
            name = _text(container, rules.name)
            price_text = _text(container, rules.price)
            if not name or not price_text:
                continue

            image = container.select_one(rules.image)
            link = container.select_one(rules.link)
            if link is None and container.name == "a":
                link = container

            listings.append(
                RawListing(
                    name=name,
                    price_text=price_text,
                    image_url=_attr(image, "src", "data-src"),
                    link_url=_attr(link, "href"),
                    availability_text=(
                        _text(container, rules.availability)
                        if rules.availability
                        else "In Stock"
                    ),
                    description=_text(container, rules.description),
                )
            )
        except Exception as exc:
            logger.warning(
                "Error parsing product element: %s", exc, exc_info=True
            )
            continue

        if limit is not None and len(listings) >= limit:
            break
    return listings


class BaseFetcher(ABC):
    """Fetch one target's search page and return raw listings.

    Subclasses raise :class:`~src.scrapers.errors.FetchError` on
    network, timeout or navigation failures; partial page results are
    never returned as a success.
    """

    def __init__(
        self,
        ai_extractor: AIExtractor | None = None,
        max_products: int | None = None,
    ) -> None:
        self.ai_extractor = ai_extractor
        self.max_products = max_products
        self.settings = Settings()
        self.logger = logging.getLogger("merch_search.fetch")

    def _logger_for(self, target: Target) -> logging.Logger:
        return logging.getLogger(f"merch_search.{target.id}")

    async def _extract_with_fallback(
        self, html: str, target: Target, query: str,
    ) -> list[RawListing]:
        """Selector extraction first, model extraction when it finds nothing."""
        log = self._logger_for(target)
        soup = BeautifulSoup(html, "lxml")
        listings = extract_listings(
            soup, target.selectors, self.max_products
        )
        if listings or self.ai_extractor is None:
            return listings

        log.info(
            "[%s] Selectors matched no products, trying AI extraction",
            target.id,
        )
        listings = await self.ai_extractor.extract(
            html, target.name, query
        )
        if self.max_products is not None:
            listings = listings[: self.max_products]
        return listings

    @abstractmethod
    async def fetch(self, target: Target, query: str) -> list[RawListing]:
        """Fetch *target*'s results for *query*."""
        ...
