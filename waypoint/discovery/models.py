"""Data types shared by the registry store, prober and coordinator."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ServiceRecord:
    """Persisted state for one registered service name.

    Timestamps are epoch milliseconds.  ``healthy`` and ``last_health_check``
    are only ever written together (see :meth:`with_probe`).
    """

    url: str
    metadata: dict[str, Any] = field(default_factory=dict)
    registered_at: int = 0
    last_health_check: int | None = None
    healthy: bool | None = None

    def with_probe(self, result: ProbeResult) -> ServiceRecord:
        """Return a copy carrying the outcome of *result*."""
        return ServiceRecord(
            url=self.url,
            metadata=self.metadata,
            registered_at=self.registered_at,
            last_health_check=result.checked_at,
            healthy=result.healthy,
        )

    def to_dict(self) -> dict[str, Any]:
        """Wire/storage shape: camelCase keys, unset optionals omitted."""
        data: dict[str, Any] = {
            "url": self.url,
            "metadata": self.metadata,
            "registeredAt": self.registered_at,
        }
        if self.last_health_check is not None:
            data["lastHealthCheck"] = self.last_health_check
        if self.healthy is not None:
            data["healthy"] = self.healthy
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ServiceRecord:
        return cls(
            url=data["url"],
            metadata=data.get("metadata") or {},
            registered_at=int(data.get("registeredAt", 0)),
            last_health_check=data.get("lastHealthCheck"),
            healthy=data.get("healthy"),
        )


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of a single health probe.  A failed probe is data, not an error."""

    healthy: bool
    checked_at: int
