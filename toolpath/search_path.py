"""Search path assembly for locating helper executables.

SearchPaths builds the ordered list of directories used when dispatching to
external tools, and renders it into a PATH value for a child process:

    env = SearchPaths.builder().with_npm().child_env()
    subprocess.run(["npx", "some-server"], env=env)

Entry order is fixed: configured paths, Unix defaults, the macOS default, the
npm location, then whatever PATH the caller already has. Nothing is sorted,
deduplicated or checked for existence.

A SearchPaths value is immutable. ``with_npm()`` returns a new value and
rendering leaves the value untouched, so a builder can never be observed half
way through a chain.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Iterator
from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path
from typing import Protocol

from .platform_facts import PlatformFacts
from .settings import AppSettings

logger = logging.getLogger(__name__)

PATH_VAR = "PATH"

UNIX_DEFAULT_PATHS = ("/usr/local/bin", "~/.local/bin")
MACOS_DEFAULT_PATHS = ("/opt/homebrew/bin",)
NPM_UNIX_SUBDIR = ".npm-global/bin"
NPM_WINDOWS_SUBDIR = "npm"


class SearchPathSource(Protocol):
    """Anything that can supply configured search paths."""

    def get_search_paths(self) -> list[str] | None: ...


class SearchPathEncodingError(ValueError):
    """Raised when a search path entry cannot be encoded into a PATH value."""

    def __init__(self, entry: str, separator: str, reason: str):
        self.entry = entry
        self.separator = separator
        self.reason = reason
        super().__init__(f"Cannot encode search path entry {entry!r}: {reason}")


def expand_tilde(path: str, home: str | None, windows: bool = False) -> str:
    """Replace a leading ``~`` with the home directory.

    Only ``~`` on its own or followed by a path separator is expanded.
    ``~user`` forms, and every path when home is unknown, pass through.
    """
    if home is None or not path.startswith("~"):
        return path
    rest = path[1:]
    if not rest or rest[0] == "/" or (windows and rest[0] == "\\"):
        return home + rest
    return path


def split_search_path(value: str, separator: str, windows: bool = False) -> list[str]:
    """Split a PATH value into entries.

    Empty entries are kept. On Windows, double-quoted segments may contain
    the separator and the quotes are dropped.
    """
    if not windows:
        return value.split(separator)

    entries: list[str] = []
    current: list[str] = []
    in_quotes = False
    for char in value:
        if char == '"':
            in_quotes = not in_quotes
        elif char == separator and not in_quotes:
            entries.append("".join(current))
            current = []
        else:
            current.append(char)
    entries.append("".join(current))
    return entries


def join_search_path(entries: list[str], separator: str, windows: bool = False) -> str:
    """Join entries into a PATH value.

    Raises:
        SearchPathEncodingError: If an entry contains the separator, a NUL
            character, or (on Windows) a double quote.
    """
    for entry in entries:
        if separator in entry:
            raise SearchPathEncodingError(entry, separator, f"contains the path separator {separator!r}")
        if "\0" in entry:
            raise SearchPathEncodingError(entry, separator, "contains a NUL character")
        if windows and '"' in entry:
            raise SearchPathEncodingError(entry, separator, "contains a double quote")
    return separator.join(entries)


@dataclass(frozen=True)
class SearchPaths:
    """Ordered directories to search for helper executables."""

    platform: PlatformFacts
    paths: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def builder(
        cls,
        settings: SearchPathSource | None = None,
        platform: PlatformFacts | None = None,
    ) -> SearchPaths:
        """Assemble configured paths and platform defaults.

        Never fails: a settings source that raises contributes no entries.

        Args:
            settings: Source of configured search paths (default: AppSettings()).
            platform: Platform description (default: the running platform).
        """
        platform = platform if platform is not None else PlatformFacts.current()

        try:
            source = settings if settings is not None else AppSettings()
            paths = list(source.get_search_paths() or [])
        except Exception as e:
            logger.warning(f"Ignoring configured search paths: {e}")
            paths = []

        if platform.is_unix:
            paths.extend(UNIX_DEFAULT_PATHS)

        if platform.is_macos:
            paths.extend(MACOS_DEFAULT_PATHS)

        expanded = tuple(expand_tilde(p, platform.home, windows=platform.is_windows) for p in paths)
        return cls(platform=platform, paths=expanded)

    def with_npm(self) -> SearchPaths:
        """Add the npm global binaries directory, if it can be located."""
        if self.platform.is_windows:
            if self.platform.app_data is not None:
                return self._append(self.platform.join(self.platform.app_data, NPM_WINDOWS_SUBDIR))
        elif self.platform.home is not None:
            return self._append(self.platform.join(self.platform.home, NPM_UNIX_SUBDIR))
        return self

    def env_var(self, environ: Mapping[str, str] | None = None) -> str:
        """Render the PATH value: these entries followed by the current PATH.

        Args:
            environ: Environment to read PATH from (default: os.environ).

        Raises:
            SearchPathEncodingError: If any entry cannot be encoded.
        """
        environ = os.environ if environ is None else environ
        current = environ.get(PATH_VAR)
        existing = [] if current is None else split_search_path(
            current, self.platform.separator, windows=self.platform.is_windows
        )
        return join_search_path(
            [*self.paths, *existing],
            self.platform.separator,
            windows=self.platform.is_windows,
        )

    def child_env(self, environ: Mapping[str, str] | None = None) -> dict[str, str]:
        """Copy of the environment with PATH replaced by the rendered value."""
        environ = os.environ if environ is None else environ
        env = dict(environ)
        env[PATH_VAR] = self.env_var(environ)
        return env

    def resolve(self, name: str, environ: Mapping[str, str] | None = None) -> Path | None:
        """Locate an executable on the rendered search path.

        Returns:
            Path to the first match, or None if not found.
        """
        found = shutil.which(name, path=self.env_var(environ))
        if found is None:
            logger.debug(f"Executable {name!r} not found on search path")
            return None
        return Path(found)

    def __iter__(self) -> Iterator[str]:
        return iter(self.paths)

    def __len__(self) -> int:
        return len(self.paths)

    def _append(self, entry: str) -> SearchPaths:
        return SearchPaths(platform=self.platform, paths=(*self.paths, entry))
