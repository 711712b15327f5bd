# src/config/settings.py

"""Central configuration for the merch_search engine."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


def _env_float(name: str, default: float, scale: float = 1.0) -> float:
    """Read a numeric environment variable, falling back on bad input."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw) / scale
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    """Read a boolean environment variable ("1", "true", "yes")."""
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Settings:
    """Central configuration for the merch_search engine."""

    # --- Text generation collaborator ---
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-5-nano")
    OPENAI_TIMEOUT: float = _env_float("OPENAI_TIMEOUT", 30.0)
    SUMMARY_MAX_TOKENS: int = 500
    INTENT_MAX_TOKENS: int = 200
    EXTRACTION_MAX_TOKENS: int = 2000

    # --- Scraping ---
    REQUEST_TIMEOUT: float = _env_float(
        "SCRAPER_TIMEOUT_MS", 10.0, scale=1000.0
    )
    REQUEST_DELAY: float = _env_float(
        "SCRAPER_DELAY_MS", 1.0, scale=1000.0
    )
    MAX_RETRIES: int = 3                # Attempts per target
    RETRY_BASE_DELAY: float = 2.0       # Seconds, doubled per retry
    STATIC_MAX_PRODUCTS: int = 10       # Per-target cap (static pages)
    STRUCTURED_MAX_PRODUCTS: int = 20   # Per-target cap (embedded JSON)

    # --- Rendered pages ---
    SELECTOR_WAIT_TIMEOUT_MS: int = 10_000
    LOAD_MORE_MAX_CLICKS: int = 6
    LOAD_MORE_PRODUCT_CEILING: int = 42
    LOAD_MORE_CLICK_DELAY: float = 3.0
    VIEWPORT: dict[str, int] = {"width": 1920, "height": 1080}
    BROWSER_ARGS: list[str] = [
        "--no-sandbox",
        "--disable-setuid-sandbox",
        "--disable-dev-shm-usage",
        "--disable-accelerated-2d-canvas",
        "--no-first-run",
        "--no-zygote",
        "--disable-gpu",
    ]

    # --- AI extraction fallback ---
    AI_MARKUP_BUDGET: int = 150_000     # Characters sent to the model

    # --- Consolidation ---
    DEFAULT_MAX_RESULTS: int = 20
    MAX_QUERY_LENGTH: int = 500

    # --- Cache ---
    CACHE_ENABLED: bool = _env_bool("CACHE_ENABLED", True)
    CACHE_TTL: float = _env_float("CACHE_TTL_SECONDS", 300.0)

    # --- Logging ---
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "DEBUG").upper()
    LOG_CONSOLE_LEVEL: str = os.getenv("LOG_CONSOLE_LEVEL", "WARNING").upper()

    # --- Browser Impersonation ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/131.0.0.0 Safari/537.36"
    )
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/avif,"
            "image/webp,image/apng,*/*;q=0.8"
        ),
        "Accept-Language": "en-US,en;q=0.9",
        "sec-ch-ua": (
            '"Google Chrome";v="131", '
            '"Chromium";v="131", '
            '"Not_A Brand";v="24"'
        ),
        "sec-ch-ua-mobile": "?0",
        "sec-ch-ua-platform": '"Windows"',
        "sec-fetch-dest": "document",
        "sec-fetch-mode": "navigate",
        "sec-fetch-site": "none",
        "sec-fetch-user": "?1",
        "Upgrade-Insecure-Requests": "1",
    }
    CHALLENGE_MARKERS: list[str] = [
        "challenges.cloudflare.com",
        "cdn-cgi/challenge-platform",
        "cf-turnstile",
        "verify you are human",
        "unusual traffic",
    ]

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    LOGS_DIR: Path = BASE_DIR / "logs"

    REQUIRED_ENV: list[str] = ["OPENAI_API_KEY"]

    @classmethod
    def validate(cls) -> list[str]:
        """Return the names of required environment variables that are unset."""
        return [name for name in cls.REQUIRED_ENV if not os.getenv(name)]
