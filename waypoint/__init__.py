"""Waypoint — a minimal service registry.

Services advertise a name, a base URL and free-form metadata; other
clients resolve the name, ask for a health probe, or relay a JSON-RPC
call through the registry to a healthy instance.

Quickstart::

    from waypoint.discovery import get_coordinator

    registry = get_coordinator()
    await registry.register("billing", "http://billing:8080")
    record = await registry.discover("billing")
"""

__version__ = "0.1.0"
