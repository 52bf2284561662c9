"""HTTP bridge between the command broker and the Roblox Studio plugin.

The plugin polls ``GET /poll`` every ~200ms, executes commands against the
DataModel and posts results to ``POST /result``. It sends ``POST /heartbeat``
every ~3s.

Endpoints:
    GET  /poll       next command, or 204 when the queue is empty
    POST /result     execution result for a command
    POST /heartbeat  keepalive, answers with queue stats
    GET  /health     connection state, queue depths, uptime

Handlers are ``async def`` so they run on the broker's event loop.
"""
import asyncio
import errno
import json
import logging
import socket
import time
from typing import Any

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from studiobridge.broker.errors import BridgeError
from studiobridge.broker.models import CommandResult
from studiobridge.broker.queue import CommandBroker
from studiobridge.config.schema import BridgeConfig

logger = logging.getLogger(__name__)


class BodyTooLarge(Exception):
    """Request body exceeded ``max_body_bytes``."""

    pass


def _too_large() -> JSONResponse:
    return JSONResponse(status_code=413, content={"error": "Request body too large"})


async def _read_json(request: Request, limit: int) -> Any:
    """Decode a JSON body, reading at most ``limit`` bytes.

    Chunked uploads carry no Content-Length, so the size is checked while
    streaming.
    """
    body = bytearray()
    async for chunk in request.stream():
        body += chunk
        if len(body) > limit:
            raise BodyTooLarge()
    if not body:
        return None
    return json.loads(body)


def create_app(broker: CommandBroker, config: BridgeConfig | None = None) -> FastAPI:
    """Create the FastAPI app serving the plugin endpoints."""
    config = config or BridgeConfig()
    started_at = time.time()
    app = FastAPI(title="Roblox Studio MCP Bridge", version="1.0.0")

    # Studio's HttpService sends requests from an internal origin
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=".*",
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
    )

    @app.middleware("http")
    async def limit_body_size(request: Request, call_next):
        length = request.headers.get("content-length")
        if length is not None and length.isdigit() and int(length) > config.max_body_bytes:
            return _too_large()
        return await call_next(request)

    @app.get("/poll")
    async def poll() -> Response:
        command = broker.dequeue()
        if command is None:
            return Response(status_code=204)
        return JSONResponse(command.to_dict())

    @app.post("/result")
    async def result(request: Request) -> JSONResponse:
        try:
            body = await _read_json(request, config.max_body_bytes)
        except BodyTooLarge:
            return _too_large()
        except ValueError:
            return JSONResponse(status_code=400, content={"error": "Invalid JSON body"})

        if not isinstance(body, dict) or not body.get("id"):
            return JSONResponse(status_code=400, content={"error": "Missing command id in result body"})

        if broker.resolve(CommandResult.from_dict(body)):
            return JSONResponse({"status": "ok"})
        return JSONResponse(
            status_code=404,
            content={"error": "Unknown command id, it may have already timed out"},
        )

    @app.post("/heartbeat")
    async def heartbeat(request: Request) -> Response:
        try:
            body = await _read_json(request, config.max_body_bytes)
        except BodyTooLarge:
            return _too_large()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            body = {}

        broker.heartbeat(body.get("pluginVersion"), body.get("studioSessionId"))
        return JSONResponse({"status": "ok", **broker.get_stats().to_dict()})

    @app.get("/health")
    async def health() -> dict[str, Any]:
        return {
            "status": "ok",
            "uptime": time.time() - started_at,
            "connection": broker.get_connection_state().to_dict(),
            "queue": broker.get_stats().to_dict(),
        }

    return app


class HttpBridge:
    """Runs the bridge app under uvicorn on the current event loop."""

    def __init__(self, broker: CommandBroker, config: BridgeConfig):
        self.broker = broker
        self.config = config
        self.app = create_app(broker, config)
        self._server: uvicorn.Server | None = None
        self._task: asyncio.Task | None = None

    @property
    def started(self) -> bool:
        return self._server is not None and self._server.started

    def _bind(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((self.config.host, self.config.port))
        except OSError as e:
            sock.close()
            if e.errno == errno.EADDRINUSE:
                raise BridgeError(
                    f"Port {self.config.port} is already in use. "
                    "Is another MCP bridge instance running?"
                ) from e
            raise
        return sock

    async def start(self) -> None:
        """Bind the port and start serving in the background."""
        sock = self._bind()
        uv_config = uvicorn.Config(
            self.app,
            log_level=self.config.log_level.lower(),
            access_log=False,
        )
        self._server = uvicorn.Server(uv_config)
        self._task = asyncio.get_running_loop().create_task(self._server.serve(sockets=[sock]))
        logger.info("HTTP bridge listening on %s", self.config.base_url)

    async def wait(self) -> None:
        """Block until the server exits."""
        if self._task is not None:
            await asyncio.wait([self._task])

    async def stop(self) -> None:
        """Stop serving and free the port."""
        if self._server is None or self._task is None:
            return
        self._server.should_exit = True
        await self._task
        self._server = None
        self._task = None
        logger.info("HTTP bridge stopped")
