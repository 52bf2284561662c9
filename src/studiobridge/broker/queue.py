"""Future-based command queue between MCP tool handlers and the Studio plugin.

Commands flow producer to consumer:

- Tool handlers call :meth:`CommandBroker.enqueue` and await the returned future
- The HTTP bridge calls :meth:`CommandBroker.dequeue` for ``GET /poll``
- The HTTP bridge calls :meth:`CommandBroker.resolve` for ``POST /result``

The broker belongs to a single event loop. Every method runs to completion
without awaiting, so concurrent pollers can never dequeue the same command.

Example::

    broker = CommandBroker(command_timeout=30, heartbeat_timeout=10)
    broker.start()
    result = await broker.enqueue("get_children", {"path": "game.Workspace"})
"""
import asyncio
import logging
import uuid
from typing import Any

from studiobridge.broker.clock import Clock, SystemClock
from studiobridge.broker.errors import BrokerShutdownError, NotConnectedError
from studiobridge.broker.liveness import LivenessTracker
from studiobridge.broker.models import (
    CommandResult,
    ConnectionState,
    PendingCommand,
    QueueStats,
    SerializedCommand,
)
from studiobridge.broker.registry import PendingRegistry
from studiobridge.broker.sweeper import SWEEP_INTERVAL_SECONDS, TimeoutSweeper

logger = logging.getLogger(__name__)


class CommandBroker:
    """Manages the lifecycle of commands sent to the Studio plugin."""

    def __init__(
        self,
        command_timeout: float,
        heartbeat_timeout: float,
        clock: Clock | None = None,
        sweep_interval: float = SWEEP_INTERVAL_SECONDS,
    ):
        self._clock = clock or SystemClock()
        self._command_timeout = command_timeout
        self._registry = PendingRegistry()
        self._liveness = LivenessTracker(heartbeat_timeout, self._clock)
        self._sweeper = TimeoutSweeper(
            self._registry, self._clock, command_timeout, interval=sweep_interval
        )
        self._closed = False

    @classmethod
    def from_config(cls, config, clock: Clock | None = None) -> "CommandBroker":
        """Build a broker from a :class:`BridgeConfig`."""
        return cls(
            command_timeout=config.command_timeout,
            heartbeat_timeout=config.heartbeat_timeout,
            clock=clock,
        )

    @property
    def command_timeout(self) -> float:
        return self._command_timeout

    @property
    def heartbeat_timeout(self) -> float:
        return self._liveness.heartbeat_timeout

    @property
    def sweeper(self) -> TimeoutSweeper:
        return self._sweeper

    def start(self) -> None:
        """Start the timeout sweep. Must be called from inside the event loop."""
        self._sweeper.start()

    def enqueue(self, command_type: str, params: dict[str, Any] | None = None) -> "asyncio.Future[CommandResult]":
        """Queue a command and return a future for the plugin's result.

        Raises:
            NotConnectedError: The plugin is disconnected or the broker was
                shut down. Nothing is queued.
        """
        if self._closed:
            raise NotConnectedError("Command broker has been shut down")
        # Fail now instead of making the caller wait out the command timeout
        if not self._liveness.is_connected():
            raise NotConnectedError()

        future: asyncio.Future[CommandResult] = asyncio.get_running_loop().create_future()
        command = PendingCommand(
            id=str(uuid.uuid4()),
            type=command_type,
            params=dict(params or {}),
            created_at=self._clock.now(),
            future=future,
        )
        self._registry.add_waiting(command)
        logger.debug("Enqueued command %s (%s)", command.id, command_type)
        return future

    def dequeue(self) -> SerializedCommand | None:
        """Hand the next waiting command to the plugin, or None if there is none."""
        command = self._registry.pop_waiting()
        if command is None:
            return None
        logger.debug("Delivered command %s (%s)", command.id, command.type)
        return command.serialize()

    def resolve(self, result: CommandResult) -> bool:
        """Settle a delivered command with the plugin's result.

        Returns False when the id is not pending, for example because the
        command already timed out. The registry is left untouched then.
        """
        command = self._registry.pop_pending(result.id)
        if command is None:
            logger.warning("Ignoring result for unknown command id %s", result.id)
            return False
        command.settle_result(result)
        logger.debug("Resolved command %s (success=%s)", result.id, result.success)
        return True

    def heartbeat(
        self,
        plugin_version: str | None = None,
        studio_session_id: str | None = None,
    ) -> None:
        self._liveness.heartbeat(plugin_version, studio_session_id)

    def is_connected(self) -> bool:
        return not self._closed and self._liveness.is_connected()

    def get_connection_state(self) -> ConnectionState:
        """Connection state for diagnostics, with ``connected`` recomputed."""
        state = self._liveness.snapshot()
        state.connected = self.is_connected()
        return state

    def get_stats(self) -> QueueStats:
        return QueueStats(
            waiting_count=self._registry.waiting_count,
            pending_count=self._registry.pending_count,
            connected=self.is_connected(),
        )

    def sweep(self) -> int:
        """Run one timeout sweep immediately."""
        return self._sweeper.tick()

    def shutdown(self) -> None:
        """Stop the sweep and fail every open command.

        Safe to call more than once.
        """
        self._sweeper.stop()
        already_closed = self._closed
        self._closed = True

        open_commands = self._registry.drain()
        for cmd in open_commands:
            cmd.settle_error(BrokerShutdownError())
        if not already_closed:
            logger.info("Command broker shut down, %d open commands failed", len(open_commands))
