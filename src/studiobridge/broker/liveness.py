"""Plugin liveness tracking based on heartbeats."""
import logging

from studiobridge.broker.clock import Clock
from studiobridge.broker.models import ConnectionState

logger = logging.getLogger(__name__)


class LivenessTracker:
    """Tracks whether the Studio plugin is reachable.

    The plugin counts as connected while the last heartbeat is younger than
    ``heartbeat_timeout`` seconds. The answer is recomputed from the clock on
    every call.
    """

    def __init__(self, heartbeat_timeout: float, clock: Clock):
        self.heartbeat_timeout = heartbeat_timeout
        self._clock = clock
        self._state = ConnectionState()
        self._last_seen: float | None = None  # clock.now() of the last heartbeat

    def heartbeat(
        self,
        plugin_version: str | None = None,
        studio_session_id: str | None = None,
    ) -> None:
        """Record a heartbeat. Last writer wins."""
        if not self.is_connected():
            logger.info(
                "Studio plugin connected (version=%s, session=%s)",
                plugin_version,
                studio_session_id,
            )
        self._last_seen = self._clock.now()
        self._state = ConnectionState(
            connected=True,
            last_heartbeat=self._clock.timestamp(),
            plugin_version=plugin_version,
            studio_session_id=studio_session_id,
        )

    def is_connected(self) -> bool:
        if not self._state.connected or self._last_seen is None:
            return False
        elapsed = self._clock.now() - self._last_seen
        return elapsed < self.heartbeat_timeout

    def snapshot(self) -> ConnectionState:
        """Copy of the connection state with ``connected`` recomputed."""
        return ConnectionState(
            connected=self.is_connected(),
            last_heartbeat=self._state.last_heartbeat,
            plugin_version=self._state.plugin_version,
            studio_session_id=self._state.studio_session_id,
        )
