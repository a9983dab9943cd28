"""Clean error display for search path and settings errors."""

import sys

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from ..search_path import SearchPathEncodingError
from ..settings import SEARCH_PATHS_ENV
from ..settings import SettingsError

_MAX_ENTRY_LEN = 200


def _truncate(message: str, limit: int = _MAX_ENTRY_LEN) -> str:
    """Truncate a long value, adding an ellipsis if shortened."""
    if len(message) <= limit:
        return message
    return message[:limit] + "…"


def _print_panel(console: Console, content: Text, title: str, tip: str, verbose: bool) -> None:
    console.print()
    console.print(
        Panel(
            content,
            title=f"[bold red]{title}[/bold red]",
            border_style="red",
            padding=(1, 2),
        )
    )
    console.print(f"[dim]Tip: {tip}[/dim]")
    console.print()

    if verbose:
        console.print("[dim]——— Traceback ———[/dim]")
        if sys.exc_info()[0] is not None:
            console.print_exception()


def display_encoding_error(console: Console, error: Exception, verbose: bool = False) -> bool:
    """Display a SearchPathEncodingError with clean Rich formatting.

    Args:
        console: Rich console for output.
        error: The error to display.
        verbose: If True, also print traceback.

    Returns:
        True if error was handled, False if not (caller should handle).
    """
    if not isinstance(error, SearchPathEncodingError):
        return False

    content = Text()
    content.append(_truncate(error.entry), style="bold cyan")
    content.append("\n\n")
    content.append(f"This entry {error.reason} and cannot be placed in PATH.", style="white")

    if error.separator in error.entry:
        tip = (
            f"Remove the entry from your configured search paths or from PATH. "
            f"Entries may not contain {error.separator!r}."
        )
    else:
        tip = "Remove the entry from your configured search paths or from PATH."

    _print_panel(console, content, "Invalid Search Path", tip, verbose)
    return True


def display_settings_error(console: Console, error: Exception, verbose: bool = False) -> bool:
    """Display a SettingsError with clean Rich formatting.

    Returns:
        True if error was handled, False if not (caller should handle).
    """
    if not isinstance(error, SettingsError):
        return False

    content = Text()
    content.append(error.key, style="bold cyan")
    content.append("\n\n")
    content.append(error.message, style="white")

    tip = f"Fix the value in your settings file or unset {SEARCH_PATHS_ENV}."
    _print_panel(console, content, "Invalid Settings", tip, verbose)
    return True
