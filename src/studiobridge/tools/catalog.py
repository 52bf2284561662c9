"""Command types understood by the Studio plugin's command router."""

READ_COMMANDS = (
    "get_descendants",
    "get_children",
    "get_properties",
    "find_instances",
    "get_services",
    "get_selection",
)

WRITE_COMMANDS = (
    "create_instance",
    "set_properties",
    "delete_instance",
    "clone_instance",
    "move_instance",
    "set_selection",
    "insert_service",
    "execute_luau",
)

# Maps 1:1 to MCP tool names
COMMAND_TYPES = READ_COMMANDS + WRITE_COMMANDS


def is_write_command(command_type: str) -> bool:
    return command_type in WRITE_COMMANDS
