# tests/conftest.py

"""Shared pytest fixtures for all merch_search tests."""

from collections.abc import Generator
from unittest.mock import AsyncMock, patch

import pytest


@pytest.fixture(autouse=True)
def mock_sleep() -> Generator[None, None, None]:
    """Patch time.sleep globally so courtesy delays run instantly."""
    with patch("time.sleep"):
        yield


@pytest.fixture(autouse=True)
def mock_async_sleep() -> Generator[None, None, None]:
    """Patch asyncio.sleep so backoff, settle and click delays are instant."""
    with patch("asyncio.sleep", new_callable=AsyncMock):
        yield
