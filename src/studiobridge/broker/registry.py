"""In-flight command storage.

Commands live in exactly one of two places until they settle:

- the waiting queue (enqueued, not yet polled by the plugin), FIFO
- the pending map (polled, waiting for the plugin's result), keyed by id
"""
from collections import deque
from typing import Iterator

from studiobridge.broker.models import PendingCommand


class PendingRegistry:
    """Waiting queue plus pending map for one broker."""

    def __init__(self):
        self._waiting: deque[PendingCommand] = deque()
        self._pending: dict[str, PendingCommand] = {}

    @property
    def waiting_count(self) -> int:
        return len(self._waiting)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def __len__(self) -> int:
        return len(self._waiting) + len(self._pending)

    def __contains__(self, command_id: str) -> bool:
        return command_id in self._pending or any(
            cmd.id == command_id for cmd in self._waiting
        )

    def add_waiting(self, command: PendingCommand) -> None:
        self._waiting.append(command)

    def pop_waiting(self) -> PendingCommand | None:
        """Move the oldest waiting command into the pending map."""
        if not self._waiting:
            return None
        command = self._waiting.popleft()
        self._pending[command.id] = command
        return command

    def pop_pending(self, command_id: str) -> PendingCommand | None:
        return self._pending.pop(command_id, None)

    def expire_waiting(self, now: float, timeout: float) -> list[PendingCommand]:
        """Remove and return waiting commands whose age is at least ``timeout``."""
        expired = [cmd for cmd in self._waiting if cmd.age(now) >= timeout]
        if expired:
            self._waiting = deque(cmd for cmd in self._waiting if cmd.age(now) < timeout)
        return expired

    def expire_pending(self, now: float, timeout: float) -> list[PendingCommand]:
        """Remove and return pending commands whose age is at least ``timeout``."""
        expired = [cmd for cmd in self._pending.values() if cmd.age(now) >= timeout]
        for cmd in expired:
            del self._pending[cmd.id]
        return expired

    def drain(self) -> list[PendingCommand]:
        """Remove every command, waiting ones first."""
        commands = list(self._waiting) + list(self._pending.values())
        self._waiting.clear()
        self._pending.clear()
        return commands

    def iter_waiting(self) -> Iterator[PendingCommand]:
        return iter(list(self._waiting))
