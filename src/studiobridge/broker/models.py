"""Data models shared by the broker, the HTTP bridge and the tool layer.

Command lifecycle:

1. A tool handler enqueues a command and awaits the returned future
2. The plugin polls ``GET /poll`` and receives the :class:`SerializedCommand`
3. The plugin executes it and posts a :class:`CommandResult` to ``POST /result``
4. The broker settles the pending future with that result
"""
import asyncio
from dataclasses import dataclass, field
from typing import Any


@dataclass
class CommandResult:
    """Result posted by the plugin for one command."""
    id: str
    success: bool
    data: Any = None
    error: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "CommandResult":
        """Build from a decoded JSON body"""
        return cls(
            id=str(data["id"]),
            success=data.get("success") is True,
            data=data.get("data"),
            error=data.get("error"),
        )


@dataclass(frozen=True)
class SerializedCommand:
    """The part of a command that is handed to the plugin.

    Never carries the caller's future.
    """
    id: str
    type: str
    params: dict[str, Any]

    def to_dict(self) -> dict:
        return {"id": self.id, "type": self.type, "params": self.params}


@dataclass
class PendingCommand:
    """A command owned by the broker until it settles"""
    id: str
    type: str
    params: dict[str, Any]
    created_at: float  # Clock seconds at enqueue time
    future: asyncio.Future = field(repr=False)

    @property
    def settled(self) -> bool:
        return self.future.done()

    def age(self, now: float) -> float:
        return now - self.created_at

    def serialize(self) -> SerializedCommand:
        return SerializedCommand(id=self.id, type=self.type, params=self.params)

    def settle_result(self, result: CommandResult) -> bool:
        """Resolve the caller's future. Returns False if it already settled."""
        if self.future.done():
            return False
        self.future.set_result(result)
        return True

    def settle_error(self, error: BaseException) -> bool:
        """Fail the caller's future. Returns False if it already settled."""
        if self.future.done():
            return False
        self.future.set_exception(error)
        return True


@dataclass
class ConnectionState:
    """Plugin connection state, updated by heartbeats"""
    connected: bool = False
    last_heartbeat: float | None = None  # epoch seconds
    plugin_version: str | None = None
    studio_session_id: str | None = None

    def to_dict(self) -> dict:
        return {
            "connected": self.connected,
            "lastHeartbeat": self.last_heartbeat,
            "pluginVersion": self.plugin_version,
            "studioSessionId": self.studio_session_id,
        }


@dataclass(frozen=True)
class QueueStats:
    """Queue depths for the health endpoint"""
    waiting_count: int
    pending_count: int
    connected: bool

    def to_dict(self) -> dict:
        return {
            "waitingCount": self.waiting_count,
            "pendingCount": self.pending_count,
            "connected": self.connected,
        }
