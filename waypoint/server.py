"""Waypoint — HTTP front end for the service registry.

Exposes:
  POST /register        — advertise {name, url, metadata?}
  POST /unregister      — remove {name}
  POST /discover        — resolve {name} to its record
  GET  /services        — list records, optional ?prefix=
  POST /health-check    — probe {name} and store the result
  POST /rpc             — relay {service, method, params} as JSON-RPC 2.0
  GET  /health          — liveness check

Start with::

    python -m waypoint
    # or
    uvicorn waypoint.server:app --host 0.0.0.0 --port 5200
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from waypoint import __version__
from waypoint.config import RegistryConfig
from waypoint.discovery import (
    DiscoveryCoordinator,
    RelayError,
    ServiceNotFoundError,
    ServiceUnhealthyError,
    get_coordinator,
)

logger = logging.getLogger(__name__)

# ──────────────────────────────────────────────────────────────────
# FastAPI app
# ──────────────────────────────────────────────────────────────────

app = FastAPI(title="Waypoint", version=__version__)

_config: RegistryConfig | None = None


def _get_config() -> RegistryConfig:
    global _config
    if _config is None:
        _config = RegistryConfig.from_env()
    return _config


async def get_registry() -> DiscoveryCoordinator:
    config = _get_config()
    return get_coordinator(
        config.partition,
        health_timeout=config.health_timeout,
        relay_timeout=config.relay_timeout,
    )


# ──────────────────────────────────────────────────────────────────
# Request models
# ──────────────────────────────────────────────────────────────────

class RegisterServiceRequest(BaseModel):
    name: str
    url: str
    metadata: dict[str, Any] | None = None


class ServiceNameRequest(BaseModel):
    name: str


class RpcRequest(BaseModel):
    service: str
    method: str
    params: list[Any] | dict[str, Any] = Field(default_factory=list)


# ──────────────────────────────────────────────────────────────────
# Error handlers
# ──────────────────────────────────────────────────────────────────

@app.exception_handler(StarletteHTTPException)
async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Unknown routes and wrong methods look the same to callers
    if exc.status_code in (404, 405):
        return JSONResponse({"error": "Not found"}, status_code=404)
    return JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def _invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = [f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in exc.errors()]
    return JSONResponse(
        {"error": "Invalid request", "message": "; ".join(messages)},
        status_code=400,
    )


@app.exception_handler(Exception)
async def _internal_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        {"error": "Internal server error", "message": str(exc) or type(exc).__name__},
        status_code=500,
    )


# ──────────────────────────────────────────────────────────────────
# Endpoints
# ──────────────────────────────────────────────────────────────────

@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/register")
async def register(body: RegisterServiceRequest, registry: DiscoveryCoordinator = Depends(get_registry)):
    return await registry.register(body.name, body.url, body.metadata)


@app.post("/unregister")
async def unregister(body: ServiceNameRequest, registry: DiscoveryCoordinator = Depends(get_registry)):
    return await registry.unregister(body.name)


@app.post("/discover")
async def discover(body: ServiceNameRequest, registry: DiscoveryCoordinator = Depends(get_registry)):
    record = await registry.discover(body.name)
    if record is None:
        return JSONResponse({"error": "Service not found"}, status_code=404)
    return record.to_dict()


@app.get("/services")
async def list_services(
    prefix: str | None = Query(default=None),
    registry: DiscoveryCoordinator = Depends(get_registry),
):
    services = await registry.list_services(prefix or None)
    return {"services": [[name, record.to_dict()] for name, record in services]}


@app.post("/health-check")
async def health_check(body: ServiceNameRequest, registry: DiscoveryCoordinator = Depends(get_registry)):
    return await registry.health_check(body.name)


@app.post("/rpc")
async def rpc(body: RpcRequest, registry: DiscoveryCoordinator = Depends(get_registry)):
    try:
        result = await registry.relay(body.service, body.method, body.params)
    except ServiceNotFoundError:
        return JSONResponse({"error": "Service not found"}, status_code=404)
    except ServiceUnhealthyError:
        return JSONResponse({"error": "Service unhealthy"}, status_code=503)
    except RelayError as exc:
        return JSONResponse({"error": "Relay failed", "message": str(exc)}, status_code=502)
    return JSONResponse(result)


# ──────────────────────────────────────────────────────────────────
# Entry point
# ──────────────────────────────────────────────────────────────────

def main(config: RegistryConfig | None = None):
    import uvicorn

    from waypoint.db import configure

    global _config
    if config is not None:
        _config = config
    config = _get_config()
    logging.basicConfig(level=getattr(logging, config.log_level.upper(), logging.INFO))
    configure(config.data_dir)
    logger.info("Starting Waypoint on %s:%d (partition=%s)", config.host, config.port, config.partition)
    uvicorn.run(app, host=config.host, port=config.port)


if __name__ == "__main__":
    main()
