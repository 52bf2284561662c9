"""MCP server exposing Studio plugin commands as tools.

Each tool enqueues one command on the broker and returns the plugin's
answer as text. Parameters are forwarded to the plugin with the camelCase
names its command handlers expect.

Property values are either primitives or objects with a ``_type`` tag for
Roblox datatypes, e.g. ``{"Position": {"_type": "Vector3", "x": 0, "y": 5, "z": 0}}``.
"""
from typing import Annotated, Any

from mcp.server.fastmcp import FastMCP
from pydantic import Field

from studiobridge.broker.queue import CommandBroker
from studiobridge.tools.executor import execute_command

SERVER_NAME = "roblox-studio-bridge"

PathArg = Annotated[
    str,
    Field(description='Dot-notation path to the instance (e.g. "game.Workspace", "game.ServerStorage.Items")'),
]
PropertyMap = dict[str, str | int | float | bool | None | dict[str, Any]]


def create_mcp_server(broker: CommandBroker) -> FastMCP:
    """Create the MCP server with every plugin command registered as a tool."""
    mcp = FastMCP(SERVER_NAME)

    # --- Read tools ---

    @mcp.tool(description="Get all descendants of an instance at the given path, with their classNames and full paths")
    async def get_descendants(
        path: PathArg,
        max_depth: Annotated[int | None, Field(description="Maximum depth to traverse (default: unlimited)")] = None,
    ) -> str:
        return await execute_command(broker, "get_descendants", {"path": path, "maxDepth": max_depth})

    @mcp.tool(description="Get immediate children of an instance at the given path")
    async def get_children(path: PathArg) -> str:
        return await execute_command(broker, "get_children", {"path": path})

    @mcp.tool(description="Get serialized properties of an instance (with _type tags for Vector3, CFrame, etc.)")
    async def get_properties(
        path: PathArg,
        properties: Annotated[
            list[str] | None,
            Field(description="Specific property names to read (default: all readable properties)"),
        ] = None,
    ) -> str:
        return await execute_command(broker, "get_properties", {"path": path, "properties": properties})

    @mcp.tool(description="Search for instances by className and/or name pattern")
    async def find_instances(
        class_name: Annotated[str | None, Field(description='Class name to filter by (e.g. "Part", "RemoteEvent")')] = None,
        name_pattern: Annotated[str | None, Field(description='Lua pattern to match instance names (e.g. "^Button")')] = None,
        search_root: Annotated[str | None, Field(description='Dot-notation path to search from (default: "game")')] = None,
        max_results: Annotated[int | None, Field(description="Maximum number of results to return (default: 100)")] = None,
    ) -> str:
        return await execute_command(
            broker,
            "find_instances",
            {
                "className": class_name,
                "namePattern": name_pattern,
                "searchRoot": search_root,
                "maxResults": max_results,
            },
        )

    @mcp.tool(description="List all services currently in the DataModel (Workspace, ReplicatedStorage, etc.)")
    async def get_services() -> str:
        return await execute_command(broker, "get_services", {})

    @mcp.tool(description="Get the currently selected objects in Roblox Studio")
    async def get_selection() -> str:
        return await execute_command(broker, "get_selection", {})

    # --- Write tools ---

    @mcp.tool(description="Create a new Instance with the given className under the specified parent")
    async def create_instance(
        class_name: Annotated[str, Field(description='Roblox class name (e.g. "Part", "RemoteEvent", "Folder")')],
        parent: Annotated[str, Field(description='Dot-notation path to parent (e.g. "game.Workspace")')],
        properties: Annotated[
            PropertyMap | None,
            Field(description='Map of property names to values. Complex types use _type tags: {"Position": {"_type": "Vector3", "x": 0, "y": 5, "z": 0}}'),
        ] = None,
    ) -> str:
        return await execute_command(
            broker,
            "create_instance",
            {"className": class_name, "parent": parent, "properties": properties},
        )

    @mcp.tool(description="Set properties on an existing instance")
    async def set_properties(
        path: PathArg,
        properties: Annotated[PropertyMap, Field(description="Map of property names to new values")],
    ) -> str:
        return await execute_command(broker, "set_properties", {"path": path, "properties": properties})

    @mcp.tool(description="Destroy an instance (and all its descendants)")
    async def delete_instance(path: PathArg) -> str:
        return await execute_command(broker, "delete_instance", {"path": path})

    @mcp.tool(description="Clone an instance to a new parent location")
    async def clone_instance(
        source_path: Annotated[str, Field(description="Dot-notation path to the instance to clone")],
        destination_parent: Annotated[str, Field(description="Dot-notation path to the clone's new parent")],
    ) -> str:
        return await execute_command(
            broker,
            "clone_instance",
            {"sourcePath": source_path, "destinationParent": destination_parent},
        )

    @mcp.tool(description="Move (reparent) an instance to a new parent")
    async def move_instance(
        path: PathArg,
        new_parent: Annotated[str, Field(description="Dot-notation path to the new parent")],
    ) -> str:
        return await execute_command(broker, "move_instance", {"path": path, "newParent": new_parent})

    @mcp.tool(description="Set the Roblox Studio selection to the given instances")
    async def set_selection(
        paths: Annotated[list[str], Field(description="Dot-notation paths to select")],
    ) -> str:
        return await execute_command(broker, "set_selection", {"paths": paths})

    @mcp.tool(description="Insert/get a service via game:GetService() (e.g. TeleportService, Teams)")
    async def insert_service(
        service_name: Annotated[str, Field(description='Service class name (e.g. "TeleportService", "Teams", "Chat")')],
    ) -> str:
        return await execute_command(broker, "insert_service", {"serviceName": service_name})

    @mcp.tool(
        description="Execute arbitrary Luau code in the Studio plugin context. Returns the result of the last expression."
    )
    async def execute_luau(
        code: Annotated[str, Field(description="Luau source code to execute in the plugin context")],
    ) -> str:
        return await execute_command(broker, "execute_luau", {"code": code})

    return mcp
