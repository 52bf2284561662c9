"""Main CLI entry point for studio-bridge."""

import asyncio
import json
import logging

import click

from studiobridge.broker.errors import BridgeError
from studiobridge.broker.queue import CommandBroker
from studiobridge.config.manager import ConfigManager
from studiobridge.config.schema import BridgeConfig, get_config_file
from studiobridge.output.formatter import get_formatter
from studiobridge.transport.http import HttpBridge

logger = logging.getLogger(__name__)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose output")
@click.option("--no-color", is_flag=True, help="Disable colors")
@click.version_option(package_name="studio-bridge")
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    no_color: bool,
) -> None:
    """Studio Bridge - MCP tools for a running Roblox Studio.

    \b
    Examples:
        studio-bridge serve                 # HTTP bridge + MCP over stdio
        studio-bridge serve --no-mcp        # HTTP bridge only
        studio-bridge config show           # Effective configuration
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["no_color"] = no_color

    get_formatter(color=not no_color, verbose=verbose)


def _apply_overrides(config: BridgeConfig, **overrides) -> BridgeConfig:
    """Command-line options win over file and environment settings."""
    update = {key: value for key, value in overrides.items() if value is not None}
    if not update:
        return config
    return BridgeConfig.model_validate({**config.model_dump(), **update})


@cli.command()
@click.option("--host", help="Interface to bind (default: 127.0.0.1)")
@click.option("-p", "--port", type=click.IntRange(1, 65535), help="HTTP port for the plugin")
@click.option("--command-timeout", type=click.FloatRange(min=0, min_open=True), help="Seconds before a command fails")
@click.option("--heartbeat-timeout", type=click.FloatRange(min=0, min_open=True), help="Seconds without heartbeat before disconnect")
@click.option("--no-mcp", is_flag=True, help="Only run the HTTP bridge")
def serve(
    host: str | None,
    port: int | None,
    command_timeout: float | None,
    heartbeat_timeout: float | None,
    no_mcp: bool,
) -> None:
    """Run the HTTP bridge and the MCP server."""
    formatter = get_formatter()
    try:
        config = _apply_overrides(
            ConfigManager.get_config().bridge,
            host=host,
            port=port,
            command_timeout=command_timeout,
            heartbeat_timeout=heartbeat_timeout,
        )
    except BridgeError as e:
        formatter.print_error(str(e))
        raise SystemExit(1)

    formatter.configure_logging(config.log_level)
    formatter.print_banner(config, mcp_enabled=not no_mcp)

    try:
        asyncio.run(_serve(config, mcp_enabled=not no_mcp))
    except BridgeError as e:
        formatter.print_error(str(e))
        raise SystemExit(1)
    except KeyboardInterrupt:
        formatter.print_info("Shutting down...")


async def _serve(config: BridgeConfig, mcp_enabled: bool = True) -> None:
    """Run the bridge until the MCP client disconnects or the server stops."""
    broker = CommandBroker.from_config(config)
    broker.start()

    bridge = HttpBridge(broker, config)
    await bridge.start()

    tasks = [asyncio.create_task(bridge.wait())]
    if mcp_enabled:
        from studiobridge.tools.mcp_server import create_mcp_server

        tasks.append(asyncio.create_task(create_mcp_server(broker).run_stdio_async()))

    try:
        # Whichever side stops first takes the other down with it
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        for task in done:
            task.result()
    finally:
        broker.shutdown()
        await bridge.stop()


# --- Subcommands ---


@cli.group()
def config() -> None:
    """Manage configuration."""
    pass


@config.command("show")
def config_show() -> None:
    """Show current configuration."""
    try:
        config = ConfigManager.get_config()
    except BridgeError as e:
        get_formatter().print_error(str(e))
        raise SystemExit(1)
    click.echo(json.dumps(config.model_dump(), indent=2))


@config.command("path")
def config_path() -> None:
    """Print the user configuration file path."""
    click.echo(str(get_config_file()))


@config.command("set")
@click.argument("key")
@click.argument("value")
def config_set(key: str, value: str) -> None:
    """Set a value, e.g. `config set bridge.port 4000`."""
    formatter = get_formatter()
    try:
        parsed = json.loads(value)
    except ValueError:
        parsed = value

    try:
        ConfigManager.set_value(key, parsed)
    except BridgeError as e:
        formatter.print_error(str(e))
        raise SystemExit(1)
    formatter.print_success(f"{key} = {parsed!r}")


if __name__ == "__main__":
    cli()
