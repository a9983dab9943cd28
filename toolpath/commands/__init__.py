"""CLI command groups for toolpath."""

__all__ = [
    "logs",
    "paths",
]
