"""Settings management for toolpath.

Simple, scope-aware YAML settings. The only setting the search path builder
reads is ``search_paths``: extra directories searched before the platform
defaults.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from typing import Literal

import yaml

logger = logging.getLogger(__name__)

Scope = Literal["local", "project", "global"]

SEARCH_PATHS_KEY = "search_paths"
SEARCH_PATHS_ENV = "TOOLPATH_SEARCH_PATHS"


class SettingsError(Exception):
    """Raised when a configured value cannot be used."""

    def __init__(self, key: str, message: str):
        self.key = key
        self.message = message
        super().__init__(f"{key}: {message}")


@dataclass
class SettingsPaths:
    """Standard paths for settings files."""

    global_settings: Path
    project_settings: Path
    local_settings: Path

    @classmethod
    def default(cls) -> SettingsPaths:
        """Create default paths for standard toolpath layout."""
        return cls(
            global_settings=Path.home() / ".toolpath" / "settings.yaml",
            project_settings=Path.cwd() / ".toolpath" / "settings.yaml",
            local_settings=Path.cwd() / ".toolpath" / "settings.local.yaml",
        )


def _as_path_list(value: Any, source: str) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise SettingsError(SEARCH_PATHS_KEY, f"expected a list of strings in {source}, got {value!r}")
    return list(value)


class AppSettings:
    """Simple settings manager with scope-aware merging.

    Scope priority (most specific wins):
    1. local (.toolpath/settings.local.yaml) - gitignored, machine-specific
    2. project (.toolpath/settings.yaml) - committed, team-shared
    3. global (~/.toolpath/settings.yaml) - user defaults

    The TOOLPATH_SEARCH_PATHS environment variable overrides all scopes.

    Usage:
        settings = AppSettings()
        paths = settings.get_search_paths()  # Returns list or None
        settings.add_search_path("~/tools/bin", scope="global")
    """

    def __init__(self, paths: SettingsPaths | None = None, environ: Mapping[str, str] | None = None) -> None:
        self.paths = paths or SettingsPaths.default()
        self.environ = os.environ if environ is None else environ

    def get_merged_settings(self) -> dict[str, Any]:
        """Load and merge settings from all scopes."""
        result: dict[str, Any] = {}
        for path in [self.paths.global_settings, self.paths.project_settings, self.paths.local_settings]:
            if path.exists():
                try:
                    with open(path) as f:
                        content = yaml.safe_load(f) or {}
                    result = self._deep_merge(result, content)
                except (OSError, yaml.YAMLError, AttributeError) as e:
                    logger.debug(f"Skipping malformed settings file {path}: {e}")
        return result

    # ----- Search path settings -----

    def get_search_paths(self) -> list[str] | None:
        """Get configured extra search paths.

        An empty TOOLPATH_SEARCH_PATHS counts as unset; a single bare path
        is accepted as a one-entry list.

        Returns:
            The configured list, or None when nothing is configured.

        Raises:
            SettingsError: If the configured value is not a list of strings.
        """
        raw = self.environ.get(SEARCH_PATHS_ENV, "").strip()
        if raw:
            try:
                value = yaml.safe_load(raw)
            except yaml.YAMLError as e:
                raise SettingsError(SEARCH_PATHS_KEY, f"cannot parse {SEARCH_PATHS_ENV}: {e}") from e
            # A bare path is a one-entry list
            if isinstance(value, str):
                value = [value]
            return _as_path_list(value, SEARCH_PATHS_ENV)

        settings = self.get_merged_settings()
        if SEARCH_PATHS_KEY not in settings:
            return None
        return _as_path_list(settings[SEARCH_PATHS_KEY], "settings")

    def get_scope_search_paths(self, scope: Scope) -> list[str]:
        """Get search paths stored at a single scope (empty if unset)."""
        value = self._read_scope(scope).get(SEARCH_PATHS_KEY)
        if value is None:
            return []
        return _as_path_list(value, str(self._get_scope_path(scope)))

    def set_search_paths(self, paths: list[str], scope: Scope = "global") -> None:
        """Replace the search paths at specified scope."""
        self._update_setting(SEARCH_PATHS_KEY, list(paths), scope)

    def add_search_path(self, path: str, scope: Scope = "global") -> None:
        """Append a search path at specified scope."""
        paths = self.get_scope_search_paths(scope)
        paths.append(path)
        self.set_search_paths(paths, scope)

    def remove_search_path(self, path: str, scope: Scope = "global") -> bool:
        """Remove every occurrence of a search path at specified scope.

        Returns:
            True if the path was present.
        """
        paths = self.get_scope_search_paths(scope)
        remaining = [p for p in paths if p != path]
        if len(remaining) == len(paths):
            return False
        self.set_search_paths(remaining, scope)
        return True

    def clear_search_paths(self, scope: Scope = "global") -> None:
        """Clear search paths at specified scope."""
        self._remove_setting(SEARCH_PATHS_KEY, scope)

    # ----- Scope utilities -----

    def _get_scope_path(self, scope: Scope) -> Path:
        """Get settings file path for scope."""
        return {
            "local": self.paths.local_settings,
            "project": self.paths.project_settings,
            "global": self.paths.global_settings,
        }[scope]

    def _read_scope(self, scope: Scope) -> dict[str, Any]:
        """Read settings from a specific scope."""
        path = self._get_scope_path(scope)
        if not path.exists():
            return {}
        try:
            with open(path) as f:
                content = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise SettingsError(SEARCH_PATHS_KEY, f"cannot read {path}: {e}") from e
        if not isinstance(content, dict):
            raise SettingsError(SEARCH_PATHS_KEY, f"{path} does not contain a mapping")
        return content

    def _write_scope(self, scope: Scope, settings: dict[str, Any]) -> None:
        """Write settings to a specific scope."""
        path = self._get_scope_path(scope)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.safe_dump(settings, f, default_flow_style=False)

    def _update_setting(self, key: str, value: Any, scope: Scope) -> None:
        """Update a single setting at specified scope."""
        settings = self._read_scope(scope)
        settings[key] = value
        self._write_scope(scope, settings)

    def _remove_setting(self, key: str, scope: Scope) -> None:
        """Remove a setting from specified scope."""
        settings = self._read_scope(scope)
        if key in settings:
            del settings[key]
            self._write_scope(scope, settings)

    def _deep_merge(self, base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dicts, overlay wins."""
        result = base.copy()
        for key, value in overlay.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result

