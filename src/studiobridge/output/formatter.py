"""Output formatting using Rich.

Everything goes to stderr: stdout carries the MCP stdio transport.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

from studiobridge.config.schema import BridgeConfig

BRIDGE_THEME = Theme(
    {
        "success": "green",
        "error": "red bold",
        "info": "blue",
        "metadata": "dim",
    }
)


class OutputFormatter:
    """Handles all terminal output for the bridge CLI."""

    def __init__(self, color: bool = True, verbose: bool = False) -> None:
        self.console = Console(theme=BRIDGE_THEME, stderr=True, no_color=not color)
        self.verbose = verbose

    def print_error(self, message: str) -> None:
        self.console.print(f"[error]Error: {escape(message)}[/error]")

    def print_success(self, message: str) -> None:
        self.console.print(f"[success]{escape(message)}[/success]")

    def print_info(self, message: str) -> None:
        self.console.print(f"[info]{escape(message)}[/info]")

    def print_banner(self, config: BridgeConfig, mcp_enabled: bool) -> None:
        """Print the startup summary."""
        table = Table(show_header=False, box=None)
        table.add_column("Key", style="metadata")
        table.add_column("Value")
        table.add_row("HTTP bridge", config.base_url)
        table.add_row("MCP server", "stdio" if mcp_enabled else "disabled")
        table.add_row("Command timeout", f"{config.command_timeout:g}s")
        table.add_row("Heartbeat timeout", f"{config.heartbeat_timeout:g}s")
        self.console.print(Panel(table, title="Roblox Studio MCP Bridge", border_style="info"))
        self.print_info("Waiting for Studio plugin to connect via heartbeat...")

    def configure_logging(self, level: str = "INFO") -> None:
        """Route the standard logging module through Rich."""
        if self.verbose:
            level = "DEBUG"
        logging.basicConfig(
            level=level,
            format="%(message)s",
            datefmt="[%X]",
            handlers=[RichHandler(console=self.console, show_path=self.verbose)],
            force=True,
        )


# Global formatter instance
_formatter: OutputFormatter | None = None


def get_formatter(color: bool = True, verbose: bool = False) -> OutputFormatter:
    """Get or create the global formatter instance."""
    global _formatter
    if _formatter is None:
        _formatter = OutputFormatter(color=color, verbose=verbose)
    return _formatter
