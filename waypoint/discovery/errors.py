"""Registry error types.

Only the relay path raises these; every other coordinator operation
reports its outcome as a return value.
"""

from __future__ import annotations


class RegistryError(Exception):
    """Base class for registry errors."""


class ServiceNotFoundError(RegistryError):
    """No record is registered under the requested name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Service not found: {name}")
        self.name = name


class ServiceUnhealthyError(RegistryError):
    """The record exists but its last health check failed."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Service unhealthy: {name}")
        self.name = name


class RelayError(RegistryError):
    """The outbound RPC POST failed or returned a body that is not JSON."""
