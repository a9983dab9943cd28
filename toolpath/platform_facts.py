"""Platform identity and per-user directory lookups.

Search path assembly branches on the platform family and needs the home and
application-data directories. These are gathered once into a PlatformFacts
value so callers (and tests) can describe any platform from any host.
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from pathlib import PurePath
from pathlib import PurePosixPath
from pathlib import PureWindowsPath
from typing import Literal

from platformdirs import user_data_dir

logger = logging.getLogger(__name__)

PlatformFamily = Literal["unix", "macos", "windows", "other"]


def current_platform_family() -> PlatformFamily:
    """Detect the family of the running platform."""
    if sys.platform == "darwin":
        return "macos"
    if os.name == "nt":
        return "windows"
    if os.name == "posix":
        return "unix"
    return "other"


def home_dir() -> str | None:
    """Get the user's home directory, or None if it cannot be determined."""
    try:
        return str(Path.home())
    except RuntimeError:
        logger.debug("Home directory could not be determined")
        return None


def user_app_data_dir() -> str | None:
    """Get the per-user roaming application-data directory (Windows only).

    Returns:
        e.g. ``C:\\Users\\u\\AppData\\Roaming`` on Windows, None elsewhere.
    """
    if os.name != "nt":
        return None
    try:
        return user_data_dir(appname=None, appauthor=False, roaming=True)
    except Exception as e:
        logger.debug(f"Application data directory lookup failed: {e}")
        return None


@dataclass(frozen=True)
class PlatformFacts:
    """What search path assembly needs to know about the platform.

    Attributes:
        family: Platform family. ``macos`` counts as Unix-family too.
        home: Home directory, if known.
        app_data: Per-user application-data directory, if known (Windows only).
    """

    family: PlatformFamily
    home: str | None = None
    app_data: str | None = None

    @classmethod
    def current(cls) -> PlatformFacts:
        """Describe the running platform."""
        family = current_platform_family()
        return cls(
            family=family,
            home=home_dir(),
            app_data=user_app_data_dir() if family == "windows" else None,
        )

    @property
    def is_unix(self) -> bool:
        return self.family in ("unix", "macos")

    @property
    def is_macos(self) -> bool:
        return self.family == "macos"

    @property
    def is_windows(self) -> bool:
        return self.family == "windows"

    @property
    def separator(self) -> str:
        """Path-list separator used in PATH."""
        return ";" if self.is_windows else ":"

    def join(self, base: str, *parts: str) -> str:
        """Join path components using this platform's path flavour."""
        flavour: type[PurePath] = PureWindowsPath if self.is_windows else PurePosixPath
        return str(flavour(base, *parts))
