"""PyPI ecosystem: poetry.lock files."""

import logging
import re
import tomllib
from pathlib import Path
from typing import Any

from ..errors import DecodingError, InputError

logger = logging.getLogger(__name__)

POETRY_LOCK = "poetry.lock"
_PACKAGE_HEADER = "[[package]]"
_SUB_TABLES = ("[package.", "[[package.")
_SEPARATORS_RE = re.compile(r"[-_.]+")


class PoetryLock:
    """A decoded poetry.lock, raw bytes kept for embedding in analysis requests."""

    def __init__(self, raw: bytes, data: dict[str, Any]) -> None:
        self.raw = raw
        self.data = data

    @classmethod
    def read(cls, directory: Path) -> "PoetryLock":
        """Read the poetry.lock file of a directory.

        Raises:
            InputError: If the directory has no readable poetry.lock
            DecodingError: If the file is not valid TOML
        """
        path = directory / POETRY_LOCK
        if not path.is_file():
            raise InputError(f"directory {directory} does not contain the {POETRY_LOCK} file")
        try:
            raw = path.read_bytes()
        except OSError:
            raise InputError(f"couldn't read the {POETRY_LOCK} file") from None
        return cls.parse(raw)

    @classmethod
    def parse(cls, raw: bytes) -> "PoetryLock":
        try:
            data = tomllib.loads(raw.decode("utf-8"))
        except (tomllib.TOMLDecodeError, UnicodeDecodeError):
            raise DecodingError(f"couldn't decode from the input {POETRY_LOCK} contents") from None
        return cls(raw, data)

    def names(self) -> set[str]:
        """Normalized names of the locked distributions."""
        return {
            canonical_name(str(p["name"]))
            for p in self.data.get("package", [])
            if isinstance(p, dict) and p.get("name")
        }

    def without(self, ignore_packages: list[str] | None = None) -> bytes:
        """Lockfile contents with the ``[[package]]`` tables of the ignored distributions removed.

        The raw bytes are returned untouched when nothing is ignored.
        """
        skip = {canonical_name(n) for n in ignore_packages or ()}
        if not skip & self.names():
            return self.raw

        kept: list[str] = []
        for block in _blocks(self.raw.decode("utf-8")):
            if block.startswith(_PACKAGE_HEADER):
                name = canonical_name(str(tomllib.loads(block)["package"][0].get("name", "")))
                if name in skip:
                    logger.debug(f"dropping {name} from the {POETRY_LOCK} file")
                    continue
            kept.append(block)
        return "".join(kept).encode("utf-8")


def canonical_name(name: str) -> str:
    """Distribution name normalized as in PEP 503."""
    return _SEPARATORS_RE.sub("-", name).lower()


def _blocks(text: str) -> list[str]:
    """Split the file before every top-level table: ``[[package]]`` and its sub-tables stay together."""
    blocks: list[str] = []
    current: list[str] = []
    for line in text.splitlines(keepends=True):
        header = line.strip()
        if header.startswith("[") and not header.startswith(_SUB_TABLES) and current:
            blocks.append("".join(current))
            current = []
        current.append(line)
    if current:
        blocks.append("".join(current))
    return blocks
