# src/models/scrape_outcome.py

"""Per-target result of one orchestration run."""

from dataclasses import dataclass, field

from src.models.product import Product


@dataclass
class ScrapeOutcome:
    """Success flag, products and timing for a single target."""

    source: str
    success: bool
    products: list[Product] = field(
        default_factory=lambda: list[Product]()
    )
    error: str | None = None
    processing_time: float = 0.0
    target_id: str = ""
    priority: int = 0
