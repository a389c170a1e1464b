"""Health prober — a timeout-bounded ``GET <url>/health``.

A probe never raises for network trouble: refused connections, DNS
failures and timeouts all come back as ``ProbeResult(healthy=False)``.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable

import httpx

from waypoint.discovery.models import ProbeResult

logger = logging.getLogger(__name__)

DEFAULT_HEALTH_TIMEOUT = 5.0


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class HealthProber:
    """Probes a service's ``/health`` endpoint.

    Args:
        timeout: Hard deadline for the whole request, in seconds.  The
                 in-flight request is cancelled when it expires.
        clock:   Returns the timestamp recorded on each result.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_HEALTH_TIMEOUT,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.timeout = timeout
        self._clock = clock
        self._client = httpx.AsyncClient(timeout=timeout)

    async def probe(self, base_url: str) -> ProbeResult:
        url = f"{base_url}/health"
        try:
            resp = await asyncio.wait_for(self._client.get(url), timeout=self.timeout)
            healthy = 200 <= resp.status_code < 300
            logger.debug("health probe %s -> %d", url, resp.status_code)
        except asyncio.TimeoutError:
            logger.debug("health probe %s timed out after %.1fs", url, self.timeout)
            healthy = False
        except Exception as exc:
            logger.debug("health probe %s failed: %s", url, exc)
            healthy = False
        return ProbeResult(healthy=healthy, checked_at=self._clock())

    async def aclose(self) -> None:
        await self._client.aclose()
