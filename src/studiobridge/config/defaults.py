"""Default configuration values."""

# Bind to localhost only, the bridge must never be exposed to the network
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3001

# Seconds before an unanswered command fails
DEFAULT_COMMAND_TIMEOUT = 30.0

# Seconds after the last heartbeat before the plugin counts as disconnected
DEFAULT_HEARTBEAT_TIMEOUT = 10.0

# Large DataModel dumps come back through POST /result
DEFAULT_MAX_BODY_BYTES = 10 * 1024 * 1024

DEFAULT_LOG_LEVEL = "INFO"

# Environment variable overriding the HTTP port
PORT_ENV_VAR = "STUDIO_BRIDGE_PORT"

PROJECT_CONFIG_NAME = ".studiobridge.toml"
