"""JSON-RPC relay — forwards a call to ``<url>/rpc`` and returns the raw reply."""

from __future__ import annotations

import logging
import uuid
from typing import Any

import httpx

from waypoint.discovery.errors import RelayError

logger = logging.getLogger(__name__)

DEFAULT_RELAY_TIMEOUT = 30.0


def build_envelope(method: str, params: Any) -> dict[str, Any]:
    """Wrap *method*/*params* in a JSON-RPC 2.0 request with a fresh id."""
    return {
        "jsonrpc": "2.0",
        "method": method,
        "params": params,
        "id": str(uuid.uuid4()),
    }


class RpcRelay:
    """Posts JSON-RPC envelopes to registered services.

    The remote reply is handed back untouched; whether it carries a
    JSON-RPC ``error`` member is the caller's business.  No retries.
    """

    def __init__(self, timeout: float | None = DEFAULT_RELAY_TIMEOUT) -> None:
        self.timeout = timeout
        self._client = httpx.AsyncClient(timeout=timeout)

    async def call(self, base_url: str, method: str, params: Any) -> Any:
        envelope = build_envelope(method, params)
        url = f"{base_url}/rpc"
        try:
            resp = await self._client.post(
                url,
                json=envelope,
                headers={"Content-Type": "application/json"},
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("relay to %s failed: %s", url, exc)
            raise RelayError(f"RPC call to {url} failed: {exc}") from exc

        logger.debug("relay %s id=%s -> %d", method, envelope["id"], resp.status_code)
        try:
            return resp.json()
        except ValueError as exc:
            logger.warning("relay to %s returned a non-JSON body (%d)", url, resp.status_code)
            raise RelayError(f"RPC call to {url} returned a non-JSON body") from exc

    async def aclose(self) -> None:
        await self._client.aclose()
