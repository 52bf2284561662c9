"""Command broker between tool callers and the polling Studio plugin."""
from studiobridge.broker.clock import Clock, ManualClock, SystemClock
from studiobridge.broker.errors import (
    BridgeError,
    BrokerShutdownError,
    CommandTimeoutError,
    ConfigError,
    NotConnectedError,
    UnansweredTimeoutError,
    UndeliveredTimeoutError,
)
from studiobridge.broker.liveness import LivenessTracker
from studiobridge.broker.models import (
    CommandResult,
    ConnectionState,
    PendingCommand,
    QueueStats,
    SerializedCommand,
)
from studiobridge.broker.queue import CommandBroker
from studiobridge.broker.registry import PendingRegistry
from studiobridge.broker.sweeper import SWEEP_INTERVAL_SECONDS, TimeoutSweeper

__all__ = [
    "SWEEP_INTERVAL_SECONDS",
    "BridgeError",
    "BrokerShutdownError",
    "Clock",
    "CommandBroker",
    "CommandResult",
    "CommandTimeoutError",
    "ConfigError",
    "ConnectionState",
    "LivenessTracker",
    "ManualClock",
    "NotConnectedError",
    "PendingCommand",
    "PendingRegistry",
    "QueueStats",
    "SerializedCommand",
    "SystemClock",
    "TimeoutSweeper",
    "UnansweredTimeoutError",
    "UndeliveredTimeoutError",
]
