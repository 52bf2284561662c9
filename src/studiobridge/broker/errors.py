"""Exceptions raised by the command broker."""


class BridgeError(Exception):
    """Base exception for bridge errors."""

    pass


class NotConnectedError(BridgeError):
    """The Studio plugin has not sent a heartbeat recently enough."""

    def __init__(self, message: str | None = None):
        super().__init__(
            message
            or "Roblox Studio plugin is not connected. "
            "Open Studio and ensure the MCP Bridge plugin is running."
        )


class CommandTimeoutError(BridgeError):
    """A command exceeded the configured command timeout."""

    reason = "timed out"

    def __init__(self, command_type: str, timeout: float):
        self.command_type = command_type
        self.timeout = timeout
        super().__init__(
            f"Command '{command_type}' timed out after {timeout:g}s: {self.reason}"
        )


class UndeliveredTimeoutError(CommandTimeoutError):
    """The plugin never polled the command."""

    reason = "plugin never picked it up"


class UnansweredTimeoutError(CommandTimeoutError):
    """The plugin polled the command but never posted a result."""

    reason = "plugin did not return a result"


class BrokerShutdownError(BridgeError):
    """The broker was shut down while the command was still open."""

    def __init__(self, message: str = "MCP server shutting down"):
        super().__init__(message)


class ConfigError(BridgeError):
    """Configuration file could not be loaded."""

    pass
