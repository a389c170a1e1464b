"""Discovery coordinator — the single serialization point for one partition.

register / unregister / discover / list_services / health_check each run
to completion under the partition lock, so no operation ever observes a
half-applied effect of another.  The health probe is awaited while the
lock is held.

Usage::

    from waypoint.discovery import get_coordinator

    registry = get_coordinator()              # the "global" partition
    await registry.register("billing", "http://billing:8080", {"zone": "a"})
    await registry.health_check("billing")
    reply = await registry.relay("billing", "charge", [42])
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Callable

from waypoint.discovery.errors import ServiceNotFoundError, ServiceUnhealthyError
from waypoint.discovery.models import ServiceRecord
from waypoint.discovery.prober import HealthProber, now_ms
from waypoint.discovery.relay import RpcRelay
from waypoint.discovery.store import RegistryStore

logger = logging.getLogger(__name__)

KEY_PREFIX = "service:"

DEFAULT_PARTITION = "global"


def _key(name: str) -> str:
    return f"{KEY_PREFIX}{name}"


class DiscoveryCoordinator:
    """Owns one :class:`RegistryStore` partition and every access to it.

    Args:
        store:  The partition's store.  Callers must not touch it directly.
        prober: Health prober; defaults to a 5-second :class:`HealthProber`.
        relay:  RPC relay; defaults to :class:`RpcRelay`.
        clock:  Epoch-millisecond clock used for ``registered_at``.
    """

    def __init__(
        self,
        store: RegistryStore,
        prober: HealthProber | None = None,
        relay: RpcRelay | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._store = store
        self._prober = prober or HealthProber(clock=clock)
        self._relay = relay or RpcRelay()
        self._clock = clock
        self._lock = asyncio.Lock()

    @property
    def partition(self) -> str:
        return self._store.partition

    # ------------------------------------------------------------------ #
    # Registry operations                                                  #
    # ------------------------------------------------------------------ #

    async def register(
        self,
        name: str,
        url: str,
        metadata: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Create (or wholesale replace) the record for *name*.

        Prior metadata and health history are discarded.
        """
        record = ServiceRecord(
            url=url,
            metadata=dict(metadata) if metadata else {},
            registered_at=self._clock(),
            healthy=True,
        )
        async with self._lock:
            self._store.put(_key(name), record.to_dict())
        logger.info("registered service=%s url=%s partition=%s", name, record.url, self.partition)
        return {"success": True, "serviceId": name}

    async def unregister(self, name: str) -> dict[str, Any]:
        """Remove *name*.  Idempotent: unknown names also report success."""
        async with self._lock:
            self._store.delete(_key(name))
        logger.info("unregistered service=%s partition=%s", name, self.partition)
        return {"success": True}

    async def discover(self, name: str) -> ServiceRecord | None:
        async with self._lock:
            data = self._store.get(_key(name))
        logger.debug("discover service=%s found=%s", name, data is not None)
        return ServiceRecord.from_dict(data) if data is not None else None

    async def list_services(self, prefix: str | None = None) -> list[tuple[str, ServiceRecord]]:
        """Return ``(name, record)`` pairs whose name starts with *prefix*."""
        async with self._lock:
            entries = self._store.list_by_prefix(_key(prefix or ""))
        return [
            (key[len(KEY_PREFIX):], ServiceRecord.from_dict(value))
            for key, value in entries
        ]

    async def health_check(self, name: str) -> dict[str, Any]:
        """Probe *name* and record the outcome.

        Returns ``{"success": False}`` only when *name* is unknown, in
        which case no probe is sent.  A failed probe is stored as
        ``healthy=False`` and still reports success.
        """
        async with self._lock:
            data = self._store.get(_key(name))
            if data is None:
                logger.debug("health_check service=%s not registered", name)
                return {"success": False}

            record = ServiceRecord.from_dict(data)
            result = await self._prober.probe(record.url)
            self._store.put(_key(name), record.with_probe(result).to_dict())

        if record.healthy != result.healthy:
            logger.info(
                "service=%s health %s -> %s",
                name,
                "unknown" if record.healthy is None else record.healthy,
                result.healthy,
            )
        return {"success": True}

    # ------------------------------------------------------------------ #
    # RPC relay                                                            #
    # ------------------------------------------------------------------ #

    async def relay(self, service_name: str, method: str, params: Any) -> Any:
        """Forward a JSON-RPC call to a healthy service and return its raw reply.

        The target is resolved under the partition lock; the outbound POST
        happens after the lock is released.

        Raises:
            ServiceNotFoundError:  *service_name* is not registered.
            ServiceUnhealthyError: the last health check failed.
            RelayError:            the POST failed or the reply was not JSON.
        """
        record = await self.discover(service_name)
        if record is None:
            raise ServiceNotFoundError(service_name)
        if not record.healthy:
            raise ServiceUnhealthyError(service_name)
        return await self._relay.call(record.url, method, params)

    async def aclose(self) -> None:
        await self._prober.aclose()
        await self._relay.aclose()


# ---------------------------------------------------------------------------
# Per-partition singletons
# ---------------------------------------------------------------------------

_coordinators: dict[str, DiscoveryCoordinator] = {}
_coordinators_lock = threading.Lock()


def get_coordinator(
    partition: str = DEFAULT_PARTITION,
    health_timeout: float | None = None,
    relay_timeout: float | None = None,
) -> DiscoveryCoordinator:
    """Return the process-wide coordinator for *partition*, creating it on first use.

    Timeouts only apply when the coordinator is created.
    """
    with _coordinators_lock:
        coordinator = _coordinators.get(partition)
        if coordinator is None:
            from waypoint.db import get_db

            prober = HealthProber(timeout=health_timeout) if health_timeout is not None else None
            relay = RpcRelay(timeout=relay_timeout) if relay_timeout is not None else None
            coordinator = DiscoveryCoordinator(
                RegistryStore(get_db(), partition),
                prober=prober,
                relay=relay,
            )
            _coordinators[partition] = coordinator
            logger.debug("created coordinator partition=%s", partition)
    return coordinator


def reset_coordinators() -> None:
    """Forget cached coordinators (useful for tests)."""
    with _coordinators_lock:
        _coordinators.clear()
