# src/services/health_checker.py

"""Target connectivity health checker."""

import asyncio
import logging
import time
from dataclasses import dataclass

from curl_cffi import requests as curl_requests

from src.config.settings import Settings
from src.config.targets import Target, TargetRegistry

logger = logging.getLogger("merch_search.health")

_HEALTH_TIMEOUT = 10  # seconds per target
_SLOW_THRESHOLD_MS = 5000


@dataclass
class HealthResult:
    """Result of a single target health check."""

    target_id: str
    status: str  # "ok", "slow", "down"
    latency_ms: float
    message: str


def probe_target(
    target: Target,
    session: curl_requests.Session | None = None,
) -> HealthResult:
    """GET the target's homepage and classify the response."""
    client = session or curl_requests.Session(
        impersonate=Settings.IMPERSONATE_BROWSER
    )
    homepage = f"{target.base_url.rstrip('/')}/"
    headers = {**Settings.DEFAULT_HEADERS, "Referer": homepage}

    start = time.monotonic()
    try:
        resp = client.get(
            homepage,
            headers=headers,
            timeout=_HEALTH_TIMEOUT,
        )
    except Exception as exc:
        elapsed_ms = (time.monotonic() - start) * 1000
        return HealthResult(
            target_id=target.id,
            status="down",
            latency_ms=elapsed_ms,
            message=f"Connection error: {exc}",
        )

    elapsed_ms = (time.monotonic() - start) * 1000
    if resp.status_code != 200:
        return HealthResult(
            target_id=target.id,
            status="down",
            latency_ms=elapsed_ms,
            message=f"HTTP {resp.status_code}",
        )
    if elapsed_ms > _SLOW_THRESHOLD_MS:
        return HealthResult(
            target_id=target.id,
            status="slow",
            latency_ms=elapsed_ms,
            message="High latency",
        )
    return HealthResult(
        target_id=target.id,
        status="ok",
        latency_ms=elapsed_ms,
        message="",
    )


class HealthChecker:
    """Check connectivity of every enabled target."""

    def __init__(self, registry: TargetRegistry | None = None) -> None:
        self.targets = (registry or TargetRegistry()).list_enabled()

    async def check_all(self) -> list[HealthResult]:
        """Probe every enabled target concurrently."""
        tasks = [
            asyncio.to_thread(probe_target, target)
            for target in self.targets
        ]
        results: list[HealthResult] = list(
            await asyncio.gather(*tasks)
        )
        for r in results:
            logger.info(
                "Health check %s: %s (%.0fms) %s",
                r.target_id,
                r.status,
                r.latency_ms,
                r.message,
            )
        return results
