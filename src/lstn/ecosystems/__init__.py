"""Package ecosystems lstn knows about, and their lockfiles."""

from enum import Enum


class Ecosystem(str, Enum):
    NPM = "npm"
    PYPI = "pypi"


class Lockfile(str, Enum):
    """Lockfile names accepted by --lockfiles."""

    PACKAGE_LOCK = "package-lock.json"
    POETRY_LOCK = "poetry.lock"

    @property
    def ecosystem(self) -> Ecosystem:
        return _LOCKFILE_ECOSYSTEMS[self]

    @classmethod
    def from_name(cls, name: str) -> "Lockfile | None":
        """Recognize a lockfile from its (possibly path-prefixed) file name."""
        base = name.replace("\\", "/").rsplit("/", 1)[-1]
        try:
            return cls(base)
        except ValueError:
            return None


_LOCKFILE_ECOSYSTEMS = {
    Lockfile.PACKAGE_LOCK: Ecosystem.NPM,
    Lockfile.POETRY_LOCK: Ecosystem.PYPI,
}

__all__ = ["Ecosystem", "Lockfile"]
