# src/config/targets.py

"""Static catalog of merchandise sources and the registry that serves it.

Adding, removing or disabling a source only requires editing ``TARGETS``;
nothing else in the pipeline depends on the catalog's size or contents.
"""

import logging
from dataclasses import dataclass
from urllib.parse import quote_plus

from src.config.settings import Settings
from src.scrapers.errors import TargetNotFoundError

logger = logging.getLogger("merch_search.targets")


@dataclass(frozen=True)
class ExtractionRules:
    """CSS selectors applied inside each matched product container."""

    product_container: str
    name: str
    price: str
    image: str = "img"
    link: str = "a"
    availability: str | None = None
    description: str | None = None
    load_more_button: str | None = None


@dataclass(frozen=True)
class Target:
    """One configured external source to scrape."""

    id: str
    name: str
    base_url: str
    search_path: str            # Template containing ``{query}``
    selectors: ExtractionRules
    enabled: bool = True
    priority: int = 0
    delay: float = Settings.REQUEST_DELAY       # Seconds (courtesy / settle)
    timeout: float = Settings.REQUEST_TIMEOUT   # Seconds
    requires_javascript: bool = False
    structured_data: bool = False

    def search_url(self, query: str) -> str:
        """Build the search URL with the query URL-encoded into the path."""
        path = self.search_path.format(query=quote_plus(query))
        return f"{self.base_url.rstrip('/')}{path}"


TARGETS: tuple[Target, ...] = (
    Target(
        id="f1-authentics",
        name="F1 Authentics",
        base_url="https://www.f1authentics.com",
        search_path="/search?q={query}",
        enabled=True,
        priority=10,
        delay=3.0,
        timeout=60.0,
        requires_javascript=True,
        structured_data=True,
        selectors=ExtractionRules(
            product_container=(
                ".product-tile, .product-item, .product-card, "
                '.product, .grid-item, [data-testid="product"]'
            ),
            name="h3, h4, .product-name, .product-title, .title, h2, a",
            price=".price, .product-price, .price-current, .money",
            availability=(
                ".availability, .stock-status, .in-stock, .out-of-stock"
            ),
            description=".product-description, .description",
            load_more_button=(
                '.load-more, .show-more, [data-testid="load-more"]'
            ),
        ),
    ),
    Target(
        id="redbull-shop",
        name="Red Bull Shop",
        base_url="https://www.redbullshop.com",
        search_path="/en-int/search/?q={query}",
        enabled=True,
        priority=9,
        delay=1.5,
        timeout=20.0,
        requires_javascript=True,
        selectors=ExtractionRules(
            product_container=".product-tile",
            name="h3, .product-name, .title, a",
            price=".price, .product-price, span",
            description=".product-description",
        ),
    ),
    Target(
        id="ebay",
        name="eBay",
        base_url="https://www.ebay.com",
        search_path="/sch/i.html?_nkw={query}",
        enabled=True,
        priority=8,
        delay=2.0,
        timeout=30.0,
        selectors=ExtractionRules(
            product_container=".s-item, .item, .product-item, .listing-item",
            name=".s-item__title, h3, .item-title, .product-title",
            price=".s-item__price, .price, .item-price, .product-price",
            availability=".s-item__availability, .availability, .stock-status",
            description=(
                ".s-item__subtitle, .item-description, .product-description"
            ),
        ),
    ),
    # Disabled: these storefronts block automated clients outright.
    Target(
        id="f1-official-store",
        name="F1 Official Store",
        base_url="https://f1store.formula1.com",
        search_path="/en/search?q={query}",
        enabled=False,
        priority=0,
        delay=1.5,
        timeout=20.0,
        requires_javascript=True,
        selectors=ExtractionRules(
            product_container=(
                '[data-testid="product-tile"], .product-item, '
                ".product-card, .product, .grid-tile"
            ),
            name=(
                'h3, .product-name, .product-title, '
                '[data-testid="product-name"], h2, .pdp-link'
            ),
            price=(
                '.price, .product-price, [data-testid="price"], '
                ".price-sales, .sales"
            ),
            availability=(
                '.availability, .stock-status, [data-testid="availability"]'
            ),
            description='.product-description, [data-testid="description"]',
        ),
    ),
    Target(
        id="fanatics",
        name="Fanatics",
        base_url="https://www.fanatics.com",
        search_path="/?query={query}",
        enabled=False,
        priority=0,
        delay=2.0,
        timeout=20.0,
        requires_javascript=True,
        selectors=ExtractionRules(
            product_container=(
                ".product-item, .product-card, .search-result-item, "
                '[data-testid="product"]'
            ),
            name=".product-name, h3, .product-title, .item-name, h2",
            price=".price, .product-price, .price-current, .item-price",
        ),
    ),
    Target(
        id="depop",
        name="Depop",
        base_url="https://www.depop.com",
        search_path="/search/?q={query}",
        enabled=False,
        priority=0,
        delay=2.0,
        timeout=80.0,
        requires_javascript=True,
        selectors=ExtractionRules(
            product_container=(
                '[data-testid="product-tile"], .product-tile, '
                ".product-item, .product-card, .listing"
            ),
            name=(
                'h3, h4, .product-name, .product-title, .title, '
                '[data-testid="product-name"], .listing-title'
            ),
            price=".price, .product-price, .price-current, .money, .listing-price",
            availability=".availability, .stock-status, .sold, .available",
            description=".product-description, .description, .item-description",
        ),
    ),
)


class TargetRegistry:
    """Read-only view over the target catalog."""

    def __init__(self, targets: tuple[Target, ...] | list[Target] = TARGETS) -> None:
        self._targets: tuple[Target, ...] = tuple(targets)

    def list_enabled(self) -> list[Target]:
        """Return enabled targets, highest priority first."""
        enabled = [t for t in self._targets if t.enabled]
        return sorted(enabled, key=lambda t: t.priority, reverse=True)

    def list_by_priority(self, min_priority: int) -> list[Target]:
        """Return enabled targets at or above *min_priority*."""
        return [
            t for t in self.list_enabled() if t.priority >= min_priority
        ]

    def find_by_id(self, target_id: str) -> Target:
        """Look up a target by id, enabled or not."""
        for target in self._targets:
            if target.id == target_id:
                return target
        logger.debug("Unknown target id '%s'", target_id)
        raise TargetNotFoundError(target_id)

    def __len__(self) -> int:
        return len(self._targets)
