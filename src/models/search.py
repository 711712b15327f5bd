# src/models/search.py

"""Search intent, final result and the response envelope."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from src.models.product import Product


def _clean_str(value: object) -> str | None:
    """Return a stripped string, or None for empty / null-ish values."""
    if value is None:
        return None
    text = str(value).strip()
    if not text or text.lower() in {"null", "none", "n/a"}:
        return None
    return text


@dataclass
class SearchIntent:
    """Structured reading of a free-text query."""

    item: str | None = None
    team: str | None = None
    driver: str | None = None
    budget: float | None = None
    category: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SearchIntent":
        """Build an intent from loosely-typed model output."""
        budget: float | None = None
        raw_budget = data.get("budget")
        if raw_budget is not None and not isinstance(raw_budget, bool):
            try:
                budget = float(str(raw_budget).replace("$", "").replace(",", ""))
            except ValueError:
                budget = None
            if budget is not None and budget <= 0:
                budget = None
        return cls(
            item=_clean_str(data.get("item")),
            team=_clean_str(data.get("team")),
            driver=_clean_str(data.get("driver")),
            budget=budget,
            category=_clean_str(data.get("category")),
        )

    def is_empty(self) -> bool:
        """True when no field carries a value."""
        return not any(
            (self.item, self.team, self.driver, self.budget, self.category)
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise, omitting unset fields."""
        data = {
            "item": self.item,
            "team": self.team,
            "driver": self.driver,
            "budget": self.budget,
            "category": self.category,
        }
        return {k: v for k, v in data.items() if v is not None}


@dataclass
class SearchResult:
    """Container for a completed search across all targets."""

    search_query: str
    products: list[Product] = field(
        default_factory=lambda: list[Product]()
    )
    intent: SearchIntent = field(default_factory=SearchIntent)
    summary: str = ""
    sources: list[str] = field(
        default_factory=lambda: list[str]()
    )
    total_found: int = 0
    processing_time: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a JSON-friendly dict."""
        return {
            "products": [p.to_dict() for p in self.products],
            "searchQuery": self.search_query,
            "intent": self.intent.to_dict(),
            "summary": self.summary,
            "sources": list(self.sources),
            "totalFound": self.total_found,
            "processingTime": round(self.processing_time, 3),
        }


@dataclass
class ApiError:
    """Machine-readable error code plus a human message."""

    code: str
    message: str
    details: str | None = None


@dataclass
class ApiResponse:
    """Result envelope handed to whatever surface consumes a search."""

    success: bool
    data: SearchResult | None = None
    error: ApiError | None = None
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    @classmethod
    def ok(cls, result: SearchResult) -> "ApiResponse":
        return cls(success=True, data=result)

    @classmethod
    def fail(
        cls, code: str, message: str, details: str | None = None,
    ) -> "ApiResponse":
        return cls(
            success=False,
            error=ApiError(code=code, message=message, details=details),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise the envelope, dropping absent sections."""
        body: dict[str, Any] = {
            "success": self.success,
            "timestamp": self.timestamp,
        }
        if self.data is not None:
            body["data"] = self.data.to_dict()
        if self.error is not None:
            err: dict[str, Any] = {
                "code": self.error.code,
                "message": self.error.message,
            }
            if self.error.details:
                err["details"] = self.error.details
            body["error"] = err
        return body
