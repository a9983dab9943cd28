"""Shared Rich console instance for CLI output."""

from rich.console import Console

console = Console()

# Diagnostics go to stderr so rendered values on stdout stay pipeable
err_console = Console(stderr=True)

__all__ = ["console", "err_console"]
