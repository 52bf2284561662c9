"""MCP tool layer on top of the command broker."""
from .catalog import COMMAND_TYPES, READ_COMMANDS, WRITE_COMMANDS, is_write_command
from .executor import execute_command
from .mcp_server import create_mcp_server

__all__ = [
    "COMMAND_TYPES",
    "READ_COMMANDS",
    "WRITE_COMMANDS",
    "create_mcp_server",
    "execute_command",
    "is_write_command",
]
