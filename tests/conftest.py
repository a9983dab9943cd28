"""Pytest configuration for toolpath tests."""

from unittest.mock import MagicMock

import pytest

from toolpath.platform_facts import PlatformFacts


def make_settings(paths=None, error: Exception | None = None) -> MagicMock:
    """Settings double whose get_search_paths returns paths or raises error."""
    settings = MagicMock()
    if error is not None:
        settings.get_search_paths.side_effect = error
    else:
        settings.get_search_paths.return_value = paths
    return settings


@pytest.fixture
def linux() -> PlatformFacts:
    return PlatformFacts(family="unix", home="/home/u")


@pytest.fixture
def macos() -> PlatformFacts:
    return PlatformFacts(family="macos", home="/Users/u")


@pytest.fixture
def windows() -> PlatformFacts:
    return PlatformFacts(family="windows", home="C:\\Users\\u", app_data="C:\\Users\\u\\AppData\\Roaming")


@pytest.fixture
def settings_with():
    """Factory for settings doubles."""
    return make_settings
