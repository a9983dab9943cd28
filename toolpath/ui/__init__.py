"""UI helpers for CLI output."""

from .error_display import display_encoding_error
from .error_display import display_settings_error

__all__ = ["display_encoding_error", "display_settings_error"]
