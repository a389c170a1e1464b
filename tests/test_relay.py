"""Tests for RpcRelay and JSON-RPC envelope construction."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from waypoint.discovery import RelayError, RpcRelay
from waypoint.discovery.relay import build_envelope


class TestBuildEnvelope:
    def test_shape(self):
        env = build_envelope("getUser", [123])
        assert env["jsonrpc"] == "2.0"
        assert env["method"] == "getUser"
        assert env["params"] == [123]
        assert isinstance(env["id"], str) and env["id"]

    def test_ids_are_unique(self):
        ids = {build_envelope("m", [])["id"] for _ in range(50)}
        assert len(ids) == 50


class TestRpcRelay:
    async def test_posts_envelope_and_returns_body(self, make_response):
        relay = RpcRelay()
        reply = {"jsonrpc": "2.0", "result": {"userId": 123}, "id": "x"}
        with patch.object(relay._client, "post", new_callable=AsyncMock, return_value=make_response(200, reply)) as post:
            result = await relay.call("http://localhost:8080", "getUser", [123])

        assert result == reply
        post.assert_awaited_once()
        args, kwargs = post.call_args
        assert args[0] == "http://localhost:8080/rpc"
        assert kwargs["headers"] == {"Content-Type": "application/json"}
        sent = kwargs["json"]
        assert sent["jsonrpc"] == "2.0"
        assert sent["method"] == "getUser"
        assert sent["params"] == [123]
        assert sent["id"]

    async def test_remote_error_body_passed_through(self, make_response):
        relay = RpcRelay()
        reply = {"jsonrpc": "2.0", "error": {"code": -32601, "message": "Method not found"}, "id": "x"}
        with patch.object(relay._client, "post", new_callable=AsyncMock, return_value=make_response(500, reply)):
            result = await relay.call("http://localhost:8080", "nope", [])
        assert result == reply

    async def test_network_failure_raises_relay_error(self):
        relay = RpcRelay()
        with patch.object(relay._client, "post", side_effect=httpx.ConnectError("connection refused")):
            with pytest.raises(RelayError, match="failed"):
                await relay.call("http://localhost:8080", "getUser", [1])

    async def test_non_json_body_raises_relay_error(self, make_response):
        relay = RpcRelay()
        resp = make_response(200)
        resp.json.side_effect = json.JSONDecodeError("Expecting value", "<html>", 0)
        with patch.object(relay._client, "post", new_callable=AsyncMock, return_value=resp):
            with pytest.raises(RelayError, match="non-JSON"):
                await relay.call("http://localhost:8080", "getUser", [1])

    async def test_single_attempt_only(self):
        relay = RpcRelay()
        with patch.object(relay._client, "post", side_effect=httpx.ReadTimeout("slow")) as post:
            with pytest.raises(RelayError):
                await relay.call("http://localhost:8080", "getUser", [1])
        assert post.await_count == 1

    async def test_invalid_url_raises_relay_error(self):
        relay = RpcRelay()
        try:
            with pytest.raises(RelayError, match="failed"):
                await relay.call("http://[::1", "getUser", [1])
        finally:
            await relay.aclose()
