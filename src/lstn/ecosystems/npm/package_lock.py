"""Reader of package-lock.json files (lockfile versions 1, 2 and 3).

Whatever the on-disk format, the lockfile decodes into one canonical set of
entries. The raw bytes are kept as they are since listen.dev re-parses them,
unless ignored dependencies have to be dropped before sending.
"""

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ...errors import DecodingError, InputError
from .deptype import DepType

logger = logging.getLogger(__name__)

FILE_NAME = "package-lock.json"
SUPPORTED_VERSIONS = (1, 2, 3)
_MODULES_SEGMENT = "node_modules/"


@dataclass(frozen=True)
class LockfileEntry:
    """A dependency pinned by the lockfile."""

    name: str
    version: str
    integrity: str
    kind: DepType


def _kind(node: dict[str, Any]) -> DepType:
    if node.get("inBundle") or node.get("bundled"):
        return DepType.BUNDLE
    if node.get("dev") or node.get("devOptional"):
        return DepType.DEV
    if node.get("optional"):
        return DepType.OPTIONAL
    if node.get("peer"):
        return DepType.PEER
    return DepType.DEP


class PackageLock:
    """A decoded package-lock.json."""

    def __init__(self, raw: bytes, lockfile_version: int, entries: list[LockfileEntry]) -> None:
        self.raw = raw
        self.lockfile_version = lockfile_version
        self.entries = entries

    @classmethod
    def read(cls, directory: Path) -> "PackageLock":
        """Read the package-lock.json file of a directory.

        Raises:
            InputError: If the directory has no readable package-lock.json
            DecodingError: If the file is not a supported lockfile
        """
        path = directory / FILE_NAME
        if not path.is_file():
            raise InputError(f"directory {directory} does not contain the {FILE_NAME} file")
        try:
            raw = path.read_bytes()
        except OSError:
            raise InputError(f"couldn't read the {FILE_NAME} file") from None
        return cls.parse(raw)

    @classmethod
    def parse(cls, raw: bytes) -> "PackageLock":
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError):
            raise DecodingError(f"couldn't decode from the input {FILE_NAME} contents") from None
        if not isinstance(data, dict):
            raise DecodingError(f"couldn't decode from the input {FILE_NAME} contents")

        version = data.get("lockfileVersion", 1)
        if version not in SUPPORTED_VERSIONS:
            raise DecodingError(f"unsupported {FILE_NAME} version: {version}")

        if version == 1:
            entries = _entries_v1(data.get("dependencies") or {})
        else:
            entries = _entries_v2(data.get("packages") or {})
        return cls(raw, version, entries)

    def without(
        self,
        ignore_deptypes: list[DepType] | None = None,
        ignore_packages: list[str] | None = None,
    ) -> bytes:
        """Lockfile contents with the ignored entries removed.

        The raw bytes are returned untouched when nothing is ignored.
        """
        skip_types = set(ignore_deptypes or ())
        skip_names = set(ignore_packages or ())

        def ignored(name: str, node: dict[str, Any]) -> bool:
            return name in skip_names or _kind(node) in skip_types

        if not any(e.kind in skip_types or e.name in skip_names for e in self.entries):
            return self.raw

        data = json.loads(self.raw)
        _prune_v1(data.get("dependencies") or {}, ignored)
        if self.lockfile_version > 1:
            packages = data.get("packages") or {}
            dropped = [k for k, node in packages.items() if _is_module(k, node) and ignored(_module_name(k, node), node)]
            for key in dropped:
                logger.debug(f"dropping {key} from the {FILE_NAME} file")
                del packages[key]
        return (json.dumps(data, indent=2) + "\n").encode()


def _is_module(key: str, node: Any) -> bool:
    # "" is the project itself, keys without node_modules/ are workspaces
    return bool(key) and _MODULES_SEGMENT in key and isinstance(node, dict)


def _module_name(key: str, node: dict[str, Any]) -> str:
    return str(node.get("name") or "") or key.rsplit(_MODULES_SEGMENT, 1)[-1]


def _prune_v1(dependencies: dict[str, Any], ignored: Callable[[str, dict[str, Any]], bool]) -> None:
    for name in list(dependencies):
        node = dependencies[name]
        if not isinstance(node, dict):
            continue
        if ignored(name, node):
            del dependencies[name]
            continue
        _prune_v1(node.get("dependencies") or {}, ignored)


def _entries_v1(dependencies: dict[str, Any]) -> list[LockfileEntry]:
    seen: dict[tuple[str, str], LockfileEntry] = {}
    stack = list(dependencies.items())
    while stack:
        name, node = stack.pop(0)
        if not isinstance(node, dict):
            continue
        version = node.get("version") or ""
        if version and (name, version) not in seen:
            seen[(name, version)] = LockfileEntry(name, version, node.get("integrity") or "", _kind(node))
        stack.extend((node.get("dependencies") or {}).items())
    return list(seen.values())


def _entries_v2(packages: dict[str, Any]) -> list[LockfileEntry]:
    seen: dict[tuple[str, str], LockfileEntry] = {}
    for key, node in packages.items():
        if not _is_module(key, node) or node.get("link"):
            continue
        name = _module_name(key, node)
        version = node.get("version") or ""
        if not version or (name, version) in seen:
            continue
        seen[(name, version)] = LockfileEntry(name, version, node.get("integrity") or "", _kind(node))
    return list(seen.values())
