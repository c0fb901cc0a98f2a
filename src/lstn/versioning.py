"""Version information of lstn itself."""

import platform

import semver

from . import __version__
from .constants import CHANGELOG_BASE_URL
from .errors import InputError


def short() -> str:
    return __version__


def long() -> str:
    """Version with the interpreter that runs it, e.g. ``0.1.0 (CPython 3.12.4)``."""
    return f"{__version__} ({platform.python_implementation()} {platform.python_version()})"


def changelog(version: str | None = None) -> str:
    """URL of the release notes of a version.

    Raises:
        InputError: If the version is not a semantic version
    """
    version = (version or __version__).removeprefix("v")
    try:
        semver.Version.parse(version)
    except ValueError:
        raise InputError("couldn't find a semver tag") from None
    return f"{CHANGELOG_BASE_URL}/releases/tag/v{version}"
