# src/scrapers/normalizer.py

"""Turn RawListing records into canonical Product objects."""

import logging
import re
import time
import uuid
from datetime import datetime
from decimal import Decimal, InvalidOperation
from urllib.parse import urljoin, urlparse

from src.config.targets import Target
from src.models.product import (
    PRICE_PLACEHOLDER,
    AvailabilityStatus,
    Price,
    Product,
    RawListing,
)

logger = logging.getLogger("merch_search.normalizer")

_CURRENCY_SYMBOLS: dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
}

# Tried in order; the first hit wins.
_PRICE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"[$€£](\d+(?:\.\d+)?)"),
    re.compile(r"(\d+(?:\.\d+)?)(?:usd|eur|gbp)"),
    re.compile(r"(?:usd|eur|gbp)(\d+(?:\.\d+)?)"),
    re.compile(r"(\d+(?:\.\d+)?)"),
]

_OUT_OF_STOCK_MARKERS = ("out of stock", "unavailable", "sold out")
_LIMITED_MARKERS = ("limited", "few left", "low stock")

_SANITIZE_RE = re.compile(r"[^\w\s$€£.,!?'&-]")


def _detect_currency(text: str) -> str:
    """Guess the ISO currency code from a lowercased price string."""
    if "€" in text or "eur" in text:
        return "EUR"
    if "£" in text or "gbp" in text:
        return "GBP"
    return "USD"


def format_price(amount: Decimal, currency: str) -> str:
    """Human-readable price, or the placeholder when unknown."""
    if amount <= 0:
        return PRICE_PLACEHOLDER
    symbol = _CURRENCY_SYMBOLS.get(currency, f"{currency} ")
    return f"{symbol}{amount:,.2f}"


def parse_price(text: str | None) -> Price:
    """Parse strings like '$1,299.00', '45 EUR' or '£12' into a Price."""
    if not text:
        return Price()
    cleaned = re.sub(r"\s+", "", text).replace(",", "").lower()
    currency = _detect_currency(cleaned)

    amount = Decimal("0")
    for pattern in _PRICE_PATTERNS:
        match = pattern.search(cleaned)
        if not match:
            continue
        try:
            amount = Decimal(match.group(1)).quantize(Decimal("0.01"))
        except InvalidOperation:
            amount = Decimal("0")
        break

    if amount < 0:
        amount = Decimal("0")
    return Price(
        amount=amount,
        formatted_amount=format_price(amount, currency),
        currency=currency,
    )


def determine_availability(text: str | None) -> AvailabilityStatus:
    """Map free-text stock wording onto an AvailabilityStatus."""
    lowered = (text or "").lower()
    if any(marker in lowered for marker in _OUT_OF_STOCK_MARKERS):
        return AvailabilityStatus.OUT_OF_STOCK
    if any(marker in lowered for marker in _LIMITED_MARKERS):
        return AvailabilityStatus.LIMITED_STOCK
    return AvailabilityStatus.IN_STOCK


def sanitize_text(text: str | None) -> str:
    """Collapse whitespace and drop characters outside a safe set."""
    if not text:
        return ""
    collapsed = " ".join(text.split())
    return _SANITIZE_RE.sub("", collapsed).strip()


def make_absolute_url(url: str | None, base_url: str) -> str:
    """Resolve a relative path or protocol-relative URL against *base_url*."""
    if not url:
        return ""
    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme and parsed.netloc:
        return url
    if url.startswith("//"):
        return f"https:{url}"
    return urljoin(base_url.rstrip("/") + "/", url)


def generate_id(prefix: str) -> str:
    """Source-prefixed id: ``<prefix>-<ms timestamp b16>-<random>``."""
    stamp = format(int(time.time() * 1000), "x")
    return f"{prefix}-{stamp}-{uuid.uuid4().hex[:10]}"


def normalize_listing(
    raw: RawListing,
    target: Target,
    scraped_at: datetime | None = None,
) -> Product | None:
    """Validate and default a RawListing into a Product.

    Returns ``None`` when the listing has no usable name.
    """
    name = sanitize_text(raw.name)
    if not name:
        logger.debug(
            "[%s] Dropped listing without a name (url=%s)",
            target.id,
            raw.link_url,
        )
        return None

    description = sanitize_text(raw.description) or None
    image_url = make_absolute_url(raw.image_url, target.base_url) or None

    return Product(
        id=generate_id(target.id),
        name=name,
        description=description,
        url=make_absolute_url(raw.link_url, target.base_url),
        image_url=image_url,
        price=parse_price(raw.price_text),
        availability=determine_availability(raw.availability_text),
        source=target.name,
        scraped_at=scraped_at or datetime.now(),
    )


def normalize_listings(
    raws: list[RawListing],
    target: Target,
    scraped_at: datetime | None = None,
) -> list[Product]:
    """Normalise a batch, dropping listings that fail validation."""
    stamp = scraped_at or datetime.now()
    products: list[Product] = []
    for raw in raws:
        product = normalize_listing(raw, target, stamp)
        if product is not None:
            products.append(product)
    dropped = len(raws) - len(products)
    if dropped:
        logger.info(
            "[%s] Normalisation dropped %d invalid listings",
            target.id,
            dropped,
        )
    return products
