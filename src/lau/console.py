"""Shared rich consoles for user-facing output."""

from rich.console import Console

console = Console()
# Log records go to stderr so they never mix with command output
err_console = Console(stderr=True)
