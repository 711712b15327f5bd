# src/models/product.py

"""Product data models for inter-module data flow."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum

PRICE_PLACEHOLDER = "Price not available"


class AvailabilityStatus(str, Enum):
    """Stock status of a listing."""

    IN_STOCK = "IN_STOCK"
    OUT_OF_STOCK = "OUT_OF_STOCK"
    LIMITED_STOCK = "LIMITED_STOCK"


@dataclass(frozen=True)
class Price:
    """Normalised price; ``amount`` is zero when the price is unknown."""

    amount: Decimal = Decimal("0")
    formatted_amount: str = PRICE_PLACEHOLDER
    currency: str = "USD"

    def __post_init__(self) -> None:
        if self.amount < 0:
            msg = f"Price amount must be non-negative, got {self.amount}"
            raise ValueError(msg)

    @property
    def known(self) -> bool:
        """True when a real amount was parsed."""
        return self.amount > 0


@dataclass
class RawListing:
    """Unvalidated fields straight out of a page, before normalisation."""

    name: str = ""
    price_text: str = ""
    image_url: str = ""
    link_url: str = ""
    availability_text: str = ""
    description: str = ""


@dataclass(frozen=True)
class Product:
    """Canonical merchandise record used throughout the pipeline."""

    id: str
    name: str
    url: str
    price: Price
    source: str
    availability: AvailabilityStatus = AvailabilityStatus.IN_STOCK
    description: str | None = None
    image_url: str | None = None
    brand: str | None = None
    category: str | None = None
    scraped_at: datetime = field(default_factory=datetime.now)

    @property
    def searchable_text(self) -> str:
        """Lowercased name, description and brand joined for matching."""
        return (
            f"{self.name} {self.description or ''} {self.brand or ''}"
        ).lower()

    def to_dict(self) -> dict[str, object]:
        """Serialise to a JSON-friendly dict."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "url": self.url,
            "imageUrl": self.image_url,
            "price": {
                "amount": float(self.price.amount),
                "formattedAmount": self.price.formatted_amount,
                "currency": self.price.currency,
            },
            "brand": self.brand,
            "category": self.category,
            "availability": self.availability.value,
            "source": self.source,
            "scrapedAt": self.scraped_at.isoformat(),
        }
