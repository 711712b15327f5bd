# src/scrapers/browser.py

"""Single-owner headless browser shared by every rendered-page fetch."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from playwright.async_api import (
    Browser,
    Error as PlaywrightError,
    Page,
    Playwright,
    async_playwright,
)

from src.config.settings import Settings
from src.scrapers.errors import FetchError

logger = logging.getLogger("merch_search.browser")


class BrowserManager:
    """Own one Chromium process for the lifetime of a search request.

    The browser is launched lazily on the first :meth:`acquire` and kept
    until :meth:`shutdown`. Each fetch gets its own browser context, so
    cookies and viewport never leak between targets; only the process
    handle is shared. After shutdown the next acquire relaunches.
    """

    def __init__(self, headless: bool = True) -> None:
        self.headless = headless
        self.settings = Settings()
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._lock = asyncio.Lock()
        self._active_pages = 0

    @property
    def is_running(self) -> bool:
        """True while a browser process is held."""
        return self._browser is not None

    @property
    def active_pages(self) -> int:
        return self._active_pages

    async def acquire(self) -> Browser:
        """Return the shared browser, launching it on first use."""
        async with self._lock:
            browser = self._browser
            if browser is None or not browser.is_connected():
                browser = await self._launch()
            self._active_pages += 1
            return browser

    async def release(self) -> None:
        """Give back a handle obtained from :meth:`acquire`."""
        async with self._lock:
            self._active_pages = max(0, self._active_pages - 1)

    async def _launch(self) -> Browser:
        logger.info("Launching headless Chromium")
        try:
            if self._playwright is None:
                self._playwright = await async_playwright().start()
            browser = await self._playwright.chromium.launch(
                headless=self.headless,
                args=self.settings.BROWSER_ARGS,
            )
        except PlaywrightError as exc:
            logger.error(
                "Browser launch failed: %s", exc, exc_info=True
            )
            msg = f"Browser launch failed: {exc}"
            raise FetchError(msg) from exc
        self._browser = browser
        return browser

    @asynccontextmanager
    async def new_page(self) -> AsyncIterator[Page]:
        """Yield a fresh page in its own context; always torn down."""
        browser = await self.acquire()
        try:
            context = await browser.new_context(
                user_agent=self.settings.USER_AGENT,
                viewport=self.settings.VIEWPORT,  # type: ignore[arg-type]
                extra_http_headers={
                    "Accept-Language": self.settings.DEFAULT_HEADERS[
                        "Accept-Language"
                    ],
                },
            )
            try:
                page = await context.new_page()
                yield page
            finally:
                await context.close()
        finally:
            await self.release()

    async def shutdown(self) -> None:
        """Close the browser and Playwright driver if running."""
        async with self._lock:
            if self._browser is not None:
                logger.info("Closing headless Chromium")
                try:
                    await self._browser.close()
                except PlaywrightError as exc:
                    logger.warning("Browser close failed: %s", exc)
                self._browser = None
            if self._playwright is not None:
                await self._playwright.stop()
                self._playwright = None
            self._active_pages = 0
