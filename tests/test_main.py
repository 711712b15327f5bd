# tests/test_main.py

"""Tests for command-line parsing and mode dispatch."""

import io
import unittest
from unittest.mock import AsyncMock, patch

import main


class TestParser(unittest.TestCase):
    """_build_parser defaults and options."""

    def test_defaults(self) -> None:
        args = main._build_parser().parse_args(["Ferrari cap"])
        self.assertEqual(args.query, "Ferrari cap")
        self.assertEqual(args.max_results, 20)
        self.assertEqual(args.output_format, "json")
        self.assertFalse(args.filter_intent)
        self.assertFalse(args.health)
        self.assertIsNone(args.suggest)

    def test_options(self) -> None:
        args = main._build_parser().parse_args(
            ["cap", "-n", "5", "-f", "table", "--filter-intent"]
        )
        self.assertEqual(args.max_results, 5)
        self.assertEqual(args.output_format, "table")
        self.assertTrue(args.filter_intent)

    def test_health_and_suggest_exclusive(self) -> None:
        with patch("sys.stderr", io.StringIO()):
            with self.assertRaises(SystemExit):
                main._build_parser().parse_args(
                    ["--health", "--suggest", "cap"]
                )


class TestDispatch(unittest.TestCase):
    """_dispatch routes to the right runner."""

    def _dispatch(self, argv: list[str]) -> int:
        parser = main._build_parser()
        return main._dispatch(parser.parse_args(argv), parser)

    def test_suggest(self) -> None:
        out = io.StringIO()
        with patch("sys.stdout", out):
            code = self._dispatch(["--suggest", "mclaren"])
        self.assertEqual(code, 0)
        self.assertEqual(out.getvalue().strip(), "McLaren t-shirt")

    def test_suggest_no_match(self) -> None:
        with patch("sys.stdout", io.StringIO()):
            self.assertEqual(self._dispatch(["--suggest", "zzz"]), 1)

    def test_missing_query(self) -> None:
        with patch("sys.stderr", io.StringIO()):
            self.assertEqual(self._dispatch([]), 2)

    @patch("src.cli.runner.cli_search", new_callable=AsyncMock)
    def test_search(self, mock_search: AsyncMock) -> None:
        mock_search.return_value = 0
        self.assertEqual(self._dispatch(["Red Bull hoodie", "-n", "3"]), 0)
        mock_search.assert_awaited_once_with(
            query="Red Bull hoodie",
            max_results=3,
            output_format="json",
            filter_intent=False,
        )

    @patch("src.cli.runner.run_health_check", new_callable=AsyncMock)
    def test_health(self, mock_health: AsyncMock) -> None:
        mock_health.return_value = 1
        self.assertEqual(self._dispatch(["--health"]), 1)


if __name__ == "__main__":
    unittest.main()
