"""Configuration for the Waypoint registry server."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path

logger = logging.getLogger(__name__)

# Environment variable → field name
_ENV_FIELDS = {
    "WAYPOINT_DATA_DIR": "data_dir",
    "WAYPOINT_HOST": "host",
    "WAYPOINT_PORT": "port",
    "WAYPOINT_PARTITION": "partition",
    "WAYPOINT_HEALTH_TIMEOUT": "health_timeout",
    "WAYPOINT_RELAY_TIMEOUT": "relay_timeout",
    "WAYPOINT_LOG_LEVEL": "log_level",
}


@dataclass
class RegistryConfig:
    """Registry server configuration — loaded from the environment or config.json."""

    data_dir: str = "./data"
    host: str = "0.0.0.0"
    port: int = 5200

    # Name of the partition this process owns
    partition: str = "global"

    # Outbound calls (seconds)
    health_timeout: float = 5.0
    relay_timeout: float = 30.0

    log_level: str = "INFO"

    @classmethod
    def load(cls, path: str | Path) -> RegistryConfig:
        path = Path(path)
        if path.exists():
            with open(path) as f:
                data = json.load(f)
            known = {k for k in cls.__dataclass_fields__}
            filtered = {k: v for k, v in data.items() if k in known}
            return cls(**filtered)._coerced()
        logger.warning("Config not found at %s, using defaults", path)
        return cls()

    @classmethod
    def from_env(cls) -> RegistryConfig:
        """Build a config from ``WAYPOINT_*`` environment variables."""
        values = {
            name: os.environ[var]
            for var, name in _ENV_FIELDS.items()
            if os.environ.get(var)
        }
        return cls(**values)._coerced()

    def _coerced(self) -> RegistryConfig:
        # Values from env/JSON may arrive as strings
        for f in fields(self):
            value = getattr(self, f.name)
            if f.type == "int" and not isinstance(value, int):
                setattr(self, f.name, int(value))
            elif f.type == "float" and not isinstance(value, float):
                setattr(self, f.name, float(value))
        return self
