"""Tests for the HTTP bridge endpoints"""
import asyncio
import socket

import httpx
import pytest

from studiobridge.broker import BridgeError, CommandBroker, ManualClock
from studiobridge.config.schema import BridgeConfig
from studiobridge.transport.http import HttpBridge, create_app


@pytest.fixture
def broker():
    return CommandBroker(command_timeout=30.0, heartbeat_timeout=10.0, clock=ManualClock(start=100.0))


def make_client(broker: CommandBroker, config: BridgeConfig | None = None) -> httpx.AsyncClient:
    app = create_app(broker, config)
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://bridge")


@pytest.mark.asyncio
async def test_poll_empty_queue_returns_204(broker):
    async with make_client(broker) as client:
        response = await client.get("/poll")

    assert response.status_code == 204
    assert response.content == b""


@pytest.mark.asyncio
async def test_heartbeat_without_body(broker):
    async with make_client(broker) as client:
        response = await client.post("/heartbeat")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "waitingCount": 0, "pendingCount": 0, "connected": True}
    assert broker.is_connected()


@pytest.mark.asyncio
async def test_heartbeat_records_plugin_info(broker):
    async with make_client(broker) as client:
        await client.post("/heartbeat", json={"pluginVersion": "1.2.0", "studioSessionId": "s-1"})
        health = (await client.get("/health")).json()

    assert health["status"] == "ok"
    assert health["connection"]["connected"] is True
    assert health["connection"]["pluginVersion"] == "1.2.0"
    assert health["connection"]["studioSessionId"] == "s-1"
    assert health["queue"] == {"waitingCount": 0, "pendingCount": 0, "connected": True}
    assert health["uptime"] >= 0


@pytest.mark.asyncio
async def test_poll_and_result_round_trip(broker):
    broker.heartbeat()
    future = broker.enqueue("get_children", {"path": "game.Workspace"})

    async with make_client(broker) as client:
        polled = await client.get("/poll")
        assert polled.status_code == 200
        command = polled.json()
        assert command["type"] == "get_children"
        assert command["params"] == {"path": "game.Workspace"}

        answered = await client.post(
            "/result",
            json={"id": command["id"], "success": True, "data": [{"name": "Baseplate", "className": "Part"}]},
        )
        assert answered.status_code == 200
        assert answered.json() == {"status": "ok"}

        again = await client.post("/result", json={"id": command["id"], "success": True})
        assert again.status_code == 404

    result = await future
    assert result.data == [{"name": "Baseplate", "className": "Part"}]


@pytest.mark.asyncio
async def test_result_without_id_is_rejected(broker):
    async with make_client(broker) as client:
        missing = await client.post("/result", json={"success": True})
        garbage = await client.post(
            "/result", content=b"{not json", headers={"Content-Type": "application/json"}
        )

    assert missing.status_code == 400
    assert missing.json() == {"error": "Missing command id in result body"}
    assert garbage.status_code == 400


@pytest.mark.asyncio
async def test_result_for_unknown_command(broker):
    async with make_client(broker) as client:
        response = await client.post("/result", json={"id": "expired", "success": True})

    assert response.status_code == 404
    assert "may have already timed out" in response.json()["error"]


@pytest.mark.asyncio
async def test_oversized_body_is_rejected(broker):
    config = BridgeConfig(max_body_bytes=16)
    async with make_client(broker, config) as client:
        response = await client.post("/result", json={"id": "x", "success": True, "data": "x" * 100})

    assert response.status_code == 413


@pytest.mark.asyncio
async def test_oversized_chunked_body_is_rejected(broker):
    async def chunks():
        for _ in range(64):
            yield b"x" * 16

    config = BridgeConfig(max_body_bytes=16)
    async with make_client(broker, config) as client:
        result = await client.post("/result", content=chunks())
        heartbeat = await client.post("/heartbeat", content=chunks())

    assert result.status_code == 413
    assert heartbeat.status_code == 413
    assert broker.is_connected() is False


@pytest.mark.asyncio
async def test_cors_preflight_allows_studio(broker):
    async with make_client(broker) as client:
        response = await client.options(
            "/result",
            headers={
                "Origin": "http://studio.local",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Content-Type",
            },
        )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://studio.local"


def test_port_in_use_raises_bridge_error(broker):
    blocker = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    blocker.bind(("127.0.0.1", 0))
    blocker.listen()
    port = blocker.getsockname()[1]
    try:
        bridge = HttpBridge(broker, BridgeConfig(port=port))
        with pytest.raises(BridgeError, match="already in use"):
            bridge._bind()
    finally:
        blocker.close()


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.mark.asyncio
async def test_bridge_serves_and_stops():
    broker = CommandBroker(command_timeout=30.0, heartbeat_timeout=10.0)
    bridge = HttpBridge(broker, BridgeConfig(port=_free_port(), log_level="WARNING"))

    await bridge.start()
    try:
        for _ in range(200):
            if bridge.started:
                break
            await asyncio.sleep(0.01)
        assert bridge.started

        async with httpx.AsyncClient(base_url=bridge.config.base_url) as client:
            response = await client.post("/heartbeat")
        assert response.status_code == 200
        assert broker.is_connected()
    finally:
        await bridge.stop()
        broker.shutdown()
