# src/scrapers/static_fetcher.py

"""Plain HTTP GET + HTML parse for server-rendered search pages."""

import asyncio
import time

from curl_cffi import requests as curl_requests

from src.config.settings import Settings
from src.config.targets import Target
from src.models.product import RawListing
from src.scrapers.ai_extractor import AIExtractor
from src.scrapers.base_fetcher import BaseFetcher
from src.scrapers.errors import FetchError


class StaticFetcher(BaseFetcher):
    """Fetch a search page over HTTP and parse it with BeautifulSoup.

    Uses a curl_cffi session with browser impersonation and realistic
    headers. The blocking request runs in a worker thread so sibling
    targets are never stalled.
    """

    def __init__(
        self,
        ai_extractor: AIExtractor | None = None,
        max_products: int | None = Settings.STATIC_MAX_PRODUCTS,
    ) -> None:
        super().__init__(ai_extractor, max_products)

    def _is_challenge_page(self, text: str) -> bool:
        """Detect interstitial bot-check pages served with HTTP 200."""
        lower = text.lower()
        # Real result pages can mention CDN hosts; only flag thin pages.
        if "<body" in lower and len(text) > 5000:
            return False
        return any(
            marker in lower for marker in self.settings.CHALLENGE_MARKERS
        )

    def _get(self, url: str, target: Target) -> str:
        """Blocking GET with courtesy delay; raises FetchError."""
        log = self._logger_for(target)
        time.sleep(target.delay)
        headers: dict[str, str] = {
            **self.settings.DEFAULT_HEADERS,
            "Referer": f"{target.base_url.rstrip('/')}/",
        }
        session = curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )
        try:
            resp = session.get(
                url,
                headers=headers,
                timeout=target.timeout,
            )
        except Exception as exc:
            log.warning(
                "[%s] Request error: %s", target.id, exc, exc_info=True
            )
            msg = f"Request to {url} failed: {exc}"
            raise FetchError(msg) from exc
        finally:
            session.close()

        if resp.status_code != 200:
            log.warning("[%s] HTTP %d", target.id, resp.status_code)
            msg = f"HTTP {resp.status_code} from {url}"
            raise FetchError(msg)

        if self._is_challenge_page(resp.text):
            log.warning("[%s] Challenge page served", target.id)
            msg = f"Challenge page served by {target.name}"
            raise FetchError(msg)
        return resp.text

    async def fetch(self, target: Target, query: str) -> list[RawListing]:
        """GET ``target.search_url(query)`` and extract listings."""
        url = target.search_url(query)
        self._logger_for(target).debug(
            "[%s] Static fetch: %s", target.id, url
        )
        html = await asyncio.to_thread(self._get, url, target)
        return await self._extract_with_fallback(html, target, query)
