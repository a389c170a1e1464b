"""Waypoint registry server entry point.

Usage::

    python -m waypoint [--config PATH] [--host HOST] [--port PORT] [--data-dir PATH]
"""

from __future__ import annotations

import argparse


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="python -m waypoint",
        description="Waypoint service registry",
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        default=None,
        help="JSON config file (default: WAYPOINT_* environment variables)",
    )
    parser.add_argument("--host", default=None, help="Bind address")
    parser.add_argument("--port", type=int, default=None, help="Listen port")
    parser.add_argument(
        "--data-dir",
        metavar="PATH",
        default=None,
        help="Override data directory (default: ./data or WAYPOINT_DATA_DIR env var)",
    )
    args = parser.parse_args()

    from waypoint.config import RegistryConfig
    from waypoint.server import main as serve

    config = RegistryConfig.load(args.config) if args.config else RegistryConfig.from_env()
    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.data_dir is not None:
        config.data_dir = args.data_dir
    serve(config)


if __name__ == "__main__":
    main()
