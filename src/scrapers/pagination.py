# src/scrapers/pagination.py

"""Traversal of "load more" controls on rendered search pages.

Locating the control is an ordered chain of finders tried in sequence:
the target's own selector, then class-fragment selectors, then a
free-text scan of buttons and links. The first finder that returns an
element wins.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from playwright.async_api import Error as PlaywrightError

from src.config.targets import ExtractionRules

logger = logging.getLogger("merch_search.pagination")

Finder = Callable[[Any, ExtractionRules], Awaitable[Any | None]]

CLASS_FRAGMENT_SELECTORS: tuple[str, ...] = (
    'button[data-testid="load-more"]',
    '[data-testid*="load-more"]',
    ".load-more",
    ".show-more",
    'button[class*="load"]',
    'button[class*="more"]',
    'a[class*="load"]',
    'a[class*="more"]',
)

_TEXT_SCAN_JS = """
() => {
  const nodes = document.querySelectorAll('button, a');
  for (const node of nodes) {
    const text = (node.textContent || '').toLowerCase();
    if (text.includes('load more') || text.includes('show more')) {
      return node;
    }
  }
  return null;
}
"""


async def _first_visible(page: Any, selector: str) -> Any | None:
    """Return the first element for *selector* if it is visible."""
    handle = await page.query_selector(selector)
    if handle is None:
        return None
    if not await handle.is_visible():
        return None
    return handle


async def find_by_target_selector(
    page: Any, rules: ExtractionRules,
) -> Any | None:
    """Exact selector configured on the target."""
    if not rules.load_more_button:
        return None
    return await _first_visible(page, rules.load_more_button)


async def find_by_class_fragment(
    page: Any, rules: ExtractionRules,
) -> Any | None:
    """Common class / test-id fragments used for load-more controls."""
    for selector in CLASS_FRAGMENT_SELECTORS:
        try:
            handle = await _first_visible(page, selector)
        except PlaywrightError:
            continue
        if handle is not None:
            return handle
    return None


async def find_by_text(
    page: Any, rules: ExtractionRules,
) -> Any | None:
    """Any button or link whose text reads "load more" / "show more"."""
    js_handle = await page.evaluate_handle(_TEXT_SCAN_JS)
    return js_handle.as_element()


LOAD_MORE_FINDERS: tuple[Finder, ...] = (
    find_by_target_selector,
    find_by_class_fragment,
    find_by_text,
)


async def find_load_more(
    page: Any,
    rules: ExtractionRules,
    finders: Sequence[Finder] = LOAD_MORE_FINDERS,
) -> Any | None:
    """Try each finder in order and return the first control found."""
    for finder in finders:
        try:
            handle = await finder(page, rules)
        except PlaywrightError as exc:
            logger.debug(
                "Finder %s failed: %s",
                getattr(finder, "__name__", finder),
                exc,
            )
            continue
        if handle is not None:
            return handle
    return None


async def count_products(page: Any, selector: str) -> int:
    """Number of product containers currently in the DOM."""
    try:
        count = await page.eval_on_selector_all(
            selector, "els => els.length"
        )
    except PlaywrightError:
        return 0
    return int(count or 0)


async def traverse_load_more(
    page: Any,
    rules: ExtractionRules,
    max_clicks: int = 6,
    product_ceiling: int = 42,
    click_delay: float = 3.0,
    finders: Sequence[Finder] = LOAD_MORE_FINDERS,
) -> int:
    """Click "load more" until it disappears or a ceiling is hit.

    Returns the number of clicks issued.
    """
    clicks = 0
    for attempt in range(1, max_clicks + 1):
        loaded = await count_products(page, rules.product_container)
        logger.debug("Products loaded so far: %d", loaded)
        if loaded >= product_ceiling:
            logger.info(
                "Reached product ceiling (%d >= %d)",
                loaded,
                product_ceiling,
            )
            break

        control = await find_load_more(page, rules, finders)
        if control is None:
            logger.debug(
                "No load-more control on attempt %d, stopping", attempt
            )
            break

        try:
            await control.click()
        except PlaywrightError as exc:
            logger.debug(
                "Load-more click failed on attempt %d: %s", attempt, exc
            )
            break
        clicks += 1
        await asyncio.sleep(click_delay)

    return clicks
