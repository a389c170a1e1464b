"""waypoint.discovery — registry core.

Exports:
    ServiceRecord         — dataclass persisted per registered name
    ProbeResult           — outcome of one health probe
    RegistryStore         — SQLite-backed key/value partition
    HealthProber          — timeout-bounded ``GET <url>/health``
    RpcRelay              — JSON-RPC 2.0 forwarder
    DiscoveryCoordinator  — serialized owner of one partition
    get_coordinator       — per-partition singleton accessor
"""

from __future__ import annotations

from waypoint.discovery.coordinator import (
    DiscoveryCoordinator,
    get_coordinator,
    reset_coordinators,
)
from waypoint.discovery.errors import (
    RegistryError,
    RelayError,
    ServiceNotFoundError,
    ServiceUnhealthyError,
)
from waypoint.discovery.models import ProbeResult, ServiceRecord
from waypoint.discovery.prober import HealthProber
from waypoint.discovery.relay import RpcRelay
from waypoint.discovery.store import RegistryStore

__all__ = [
    "DiscoveryCoordinator",
    "HealthProber",
    "ProbeResult",
    "RegistryError",
    "RegistryStore",
    "RelayError",
    "RpcRelay",
    "ServiceNotFoundError",
    "ServiceRecord",
    "ServiceUnhealthyError",
    "get_coordinator",
    "reset_coordinators",
]
