"""Periodic timeout enforcement for queued and in-flight commands."""
import asyncio
import logging

from studiobridge.broker.clock import Clock
from studiobridge.broker.errors import UnansweredTimeoutError, UndeliveredTimeoutError
from studiobridge.broker.registry import PendingRegistry

logger = logging.getLogger(__name__)

SWEEP_INTERVAL_SECONDS = 1.0


class TimeoutSweeper:
    """Fails commands that outlived ``command_timeout``.

    Both the waiting queue and the pending map are checked on every tick, so a
    command fails at most one interval after its deadline.
    """

    def __init__(
        self,
        registry: PendingRegistry,
        clock: Clock,
        command_timeout: float,
        interval: float = SWEEP_INTERVAL_SECONDS,
    ):
        self.registry = registry
        self.clock = clock
        self.command_timeout = command_timeout
        self.interval = interval
        self._task: asyncio.Task | None = None
        self._stopped = False

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def tick(self) -> int:
        """Run one sweep. Returns how many commands were failed."""
        now = self.clock.now()
        timeout = self.command_timeout

        never_polled = self.registry.expire_waiting(now, timeout)
        unanswered = self.registry.expire_pending(now, timeout)

        for cmd in never_polled:
            logger.warning("Command %s (%s) was never picked up by the plugin", cmd.id, cmd.type)
            cmd.settle_error(UndeliveredTimeoutError(cmd.type, timeout))
        for cmd in unanswered:
            logger.warning("Command %s (%s) got no result from the plugin", cmd.id, cmd.type)
            cmd.settle_error(UnansweredTimeoutError(cmd.type, timeout))

        return len(never_polled) + len(unanswered)

    def start(self) -> None:
        """Start sweeping on the running event loop."""
        if self._stopped:
            raise RuntimeError("Timeout sweeper has been stopped")
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    def stop(self) -> None:
        """Stop sweeping for good."""
        self._stopped = True
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                self.tick()
            except Exception:
                logger.exception("Timeout sweep failed, retrying next interval")
