# tests/test_search_coordinator.py

"""Tests for SearchCoordinator end-to-end sequencing."""

import json
import unittest
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.config.targets import ExtractionRules, Target, TargetRegistry
from src.models.product import Price, Product
from src.models.scrape_outcome import ScrapeOutcome
from src.scrapers.errors import CollaboratorError
from src.services.search_coordinator import SearchCoordinator
from src.storage.query_cache import ResultCache

RULES = ExtractionRules(product_container=".i", name="h3", price=".p")

TARGETS = [
    Target(
        id="a",
        name="Store A",
        base_url="https://a.example",
        search_path="/s?q={query}",
        selectors=RULES,
        priority=10,
    ),
    Target(
        id="b",
        name="Store B",
        base_url="https://b.example",
        search_path="/s?q={query}",
        selectors=RULES,
        priority=5,
    ),
]


def _product(name: str, source: str) -> Product:
    return Product(
        id=f"{source}-{name}",
        name=name,
        url=f"https://{source}.example/{name}",
        price=Price(Decimal("30.00"), "$30.00"),
        source=source,
    )


class FakeCollaborator:
    """Answers intent prompts with JSON and summary prompts with text."""

    def __init__(
        self, intent: dict[str, object] | None = None, fail: bool = False,
    ) -> None:
        self.intent = intent or {"item": "cap", "team": "Ferrari"}
        self.fail = fail
        self.prompts: list[str] = []

    def request(
        self,
        prompt: str,
        system: str | None = None,
        max_tokens: int | None = None,
    ) -> str:
        self.prompts.append(prompt)
        if self.fail:
            msg = "collaborator unreachable"
            raise CollaboratorError(msg)
        if system and "search intent" in system.lower():
            return json.dumps(self.intent)
        return "Great picks for you!"


def _orchestrator(outcomes: list[ScrapeOutcome]) -> MagicMock:
    orch = MagicMock()
    orch.run_all = AsyncMock(return_value=outcomes)
    return orch


def _browser() -> MagicMock:
    browser = MagicMock()
    browser.shutdown = AsyncMock()
    return browser


def _coordinator(
    outcomes: list[ScrapeOutcome],
    collaborator: FakeCollaborator | None = None,
    cache: ResultCache | None = None,
) -> SearchCoordinator:
    return SearchCoordinator(
        registry=TargetRegistry(TARGETS),
        collaborator=collaborator or FakeCollaborator(),
        cache=cache or ResultCache(ttl=60, enabled=False),
        browser=_browser(),
        orchestrator=_orchestrator(outcomes),
    )


class TestSearchCoordinator(unittest.IsolatedAsyncioTestCase):
    """SearchCoordinator.search integration tests."""

    async def test_happy_path(self) -> None:
        outcomes = [
            ScrapeOutcome(
                source="Store A",
                success=True,
                products=[_product("Ferrari Cap", "a")],
                priority=10,
            ),
            ScrapeOutcome(
                source="Store B", success=False, error="HTTP 403", priority=5,
            ),
        ]
        coordinator = _coordinator(outcomes)

        result = await coordinator.search("ferrari cap please", 20)

        self.assertEqual(result.search_query, "Formula 1 F1 Ferrari cap")
        self.assertEqual(result.intent.team, "Ferrari")
        self.assertEqual([p.name for p in result.products], ["Ferrari Cap"])
        self.assertEqual(result.sources, ["Store A"])
        self.assertEqual(result.total_found, 1)
        self.assertEqual(result.summary, "Great picks for you!")
        coordinator.orchestrator.run_all.assert_awaited_once()  # type: ignore[attr-defined]
        targets, query = coordinator.orchestrator.run_all.call_args.args  # type: ignore[attr-defined]
        self.assertEqual([t.id for t in targets], ["a", "b"])
        self.assertEqual(query, "Formula 1 F1 Ferrari cap")
        coordinator.browser.shutdown.assert_awaited_once()  # type: ignore[attr-defined]

    async def test_total_failure_is_not_an_error(self) -> None:
        """Every target failing yields zero products and a fallback summary."""
        outcomes = [
            ScrapeOutcome(source=t.name, success=False, error="down")
            for t in TARGETS
        ]
        result = await _coordinator(outcomes).search("ferrari cap", 20)
        self.assertEqual(result.products, [])
        self.assertEqual(result.sources, [])
        self.assertIn("couldn't find", result.summary)

    async def test_collaborator_down_uses_raw_query(self) -> None:
        """No intent → raw query is the search string; summary falls back."""
        outcomes = [
            ScrapeOutcome(
                source="Store A",
                success=True,
                products=[_product("Mercedes Jacket", "a")],
            )
        ]
        coordinator = _coordinator(
            outcomes, collaborator=FakeCollaborator(fail=True)
        )
        result = await coordinator.search("Mercedes jacket", 20)

        self.assertEqual(result.search_query, "Mercedes jacket")
        self.assertEqual(result.intent.item, "mercedes jacket")
        self.assertEqual(result.intent.category, "general")
        self.assertEqual(
            result.summary, "I found 1 F1 merchandise item from Store A for you!"
        )

    async def test_cache_hit_skips_scraping(self) -> None:
        outcomes = [
            ScrapeOutcome(
                source="Store A",
                success=True,
                products=[_product("Ferrari Cap", "a")],
            )
        ]
        cache = ResultCache(ttl=60, enabled=True)
        coordinator = _coordinator(outcomes, cache=cache)

        first = await coordinator.search("Ferrari cap", 20)
        second = await coordinator.search("  ferrari   CAP ", 20)

        self.assertIs(first, second)
        coordinator.orchestrator.run_all.assert_awaited_once()  # type: ignore[attr-defined]

    async def test_browser_shut_down_on_error(self) -> None:
        coordinator = _coordinator([])
        coordinator.orchestrator.run_all.side_effect = RuntimeError("boom")  # type: ignore[attr-defined]
        with self.assertRaises(RuntimeError):
            await coordinator.search("cap", 20)
        coordinator.browser.shutdown.assert_awaited_once()  # type: ignore[attr-defined]

    async def test_max_results_truncates(self) -> None:
        outcomes = [
            ScrapeOutcome(
                source="Store A",
                success=True,
                products=[_product(f"Cap {i}", "a") for i in range(5)],
            )
        ]
        result = await _coordinator(outcomes).search("cap", 2)
        self.assertEqual(len(result.products), 2)
        self.assertEqual(result.total_found, 5)


class TestSuggestions(unittest.TestCase):

    def test_filters_and_limits(self) -> None:
        self.assertEqual(
            SearchCoordinator.suggestions("ferrari"), ["Ferrari cap"]
        )
        self.assertEqual(len(SearchCoordinator.suggestions("", limit=3)), 3)


if __name__ == "__main__":
    unittest.main()
