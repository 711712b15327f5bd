# tests/test_browser.py

"""Tests for the shared headless browser lifecycle."""

import unittest
from unittest.mock import AsyncMock, MagicMock, patch

from playwright.async_api import Error as PlaywrightError

from src.scrapers.browser import BrowserManager
from src.scrapers.errors import FetchError

PLAYWRIGHT_PATH = "src.scrapers.browser.async_playwright"


def _fake_playwright() -> tuple[MagicMock, MagicMock, MagicMock]:
    """Return (async_playwright factory, browser, context) mocks."""
    context = MagicMock()
    context.new_page = AsyncMock(return_value=MagicMock(name="page"))
    context.close = AsyncMock()

    browser = MagicMock()
    browser.is_connected.return_value = True
    browser.new_context = AsyncMock(return_value=context)
    browser.close = AsyncMock()

    driver = MagicMock()
    driver.chromium.launch = AsyncMock(return_value=browser)
    driver.stop = AsyncMock()

    factory = MagicMock()
    factory.return_value.start = AsyncMock(return_value=driver)
    return factory, browser, context


class TestBrowserManager(unittest.IsolatedAsyncioTestCase):
    """Lazy launch, per-page contexts and shutdown."""

    async def test_lazy_single_launch(self) -> None:
        factory, _browser, _context = _fake_playwright()
        with patch(PLAYWRIGHT_PATH, factory):
            manager = BrowserManager()
            self.assertFalse(manager.is_running)
            async with manager.new_page():
                async with manager.new_page():
                    self.assertEqual(manager.active_pages, 2)
            self.assertEqual(manager.active_pages, 0)
            self.assertTrue(manager.is_running)

        driver = factory.return_value.start.return_value
        driver.chromium.launch.assert_awaited_once()

    async def test_context_closed_on_error(self) -> None:
        factory, _browser, context = _fake_playwright()
        with patch(PLAYWRIGHT_PATH, factory):
            manager = BrowserManager()
            with self.assertRaises(RuntimeError):
                async with manager.new_page():
                    msg = "navigation blew up"
                    raise RuntimeError(msg)
        context.close.assert_awaited_once()
        self.assertEqual(manager.active_pages, 0)

    async def test_shutdown_and_relaunch(self) -> None:
        factory, browser, _context = _fake_playwright()
        with patch(PLAYWRIGHT_PATH, factory):
            manager = BrowserManager()
            await manager.acquire()
            await manager.shutdown()
            self.assertFalse(manager.is_running)
            browser.close.assert_awaited_once()

            await manager.acquire()
            self.assertTrue(manager.is_running)
        self.assertEqual(factory.return_value.start.await_count, 2)

    async def test_disconnected_browser_is_relaunched(self) -> None:
        factory, browser, _context = _fake_playwright()
        driver = factory.return_value.start.return_value
        with patch(PLAYWRIGHT_PATH, factory):
            manager = BrowserManager()
            first = await manager.acquire()
            self.assertIs(await manager.acquire(), first)
            browser.is_connected.return_value = False
            await manager.acquire()
        self.assertEqual(driver.chromium.launch.await_count, 2)
        self.assertEqual(manager.active_pages, 3)

    async def test_shutdown_without_launch(self) -> None:
        manager = BrowserManager()
        await manager.shutdown()
        self.assertFalse(manager.is_running)

    async def test_launch_failure_is_fetch_error(self) -> None:
        factory, _browser, _context = _fake_playwright()
        driver = factory.return_value.start.return_value
        driver.chromium.launch.side_effect = PlaywrightError(
            "Executable doesn't exist"
        )
        with patch(PLAYWRIGHT_PATH, factory):
            with self.assertRaises(FetchError):
                await BrowserManager().acquire()


if __name__ == "__main__":
    unittest.main()
