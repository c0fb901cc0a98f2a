"""Reader of package.json files, resolving declared dependencies to versions."""

import json
import logging
from pathlib import Path
from typing import Any

from ...context import RunContext
from ...errors import DecodingError, InputError
from .. import versions
from .deptype import ALWAYS_IGNORED, DepType
from .registry import Registry

logger = logging.getLogger(__name__)

FILE_NAME = "package.json"
_REMOTE_PREFIXES = ("http:", "https:", "git", "file:", "github:", "npm:", "link:", "workspace:")


def is_remote_specifier(specifier: str) -> bool:
    """Whether a specifier points to a URL, a git repository or a local path."""
    specifier = specifier.strip()
    return specifier.startswith(_REMOTE_PREFIXES) or "/" in specifier


class PackageJSON:
    """A decoded package.json."""

    def __init__(self, raw: bytes, data: dict[str, Any]) -> None:
        self.raw = raw
        self.data = data

    @property
    def name(self) -> str:
        return str(self.data.get("name") or "")

    @property
    def version(self) -> str:
        return str(self.data.get("version") or "")

    @classmethod
    def read(cls, directory: Path) -> "PackageJSON":
        """Read the package.json file of a directory.

        Raises:
            InputError: If the file is missing or unreadable
            DecodingError: If the file is not a JSON object
        """
        path = directory / FILE_NAME
        if not path.is_file():
            raise InputError(f"directory {directory} does not contain a {FILE_NAME} file")
        try:
            raw = path.read_bytes()
        except OSError:
            raise InputError(f"couldn't read the {FILE_NAME} file") from None
        return cls.parse(raw)

    @classmethod
    def parse(cls, raw: bytes) -> "PackageJSON":
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError):
            raise DecodingError(f"couldn't decode the {FILE_NAME} file") from None
        if not isinstance(data, dict):
            raise DecodingError(f"couldn't decode the {FILE_NAME} file")
        return cls(raw, data)

    def deps(self, kind: DepType) -> dict[str, str]:
        """Declared dependencies of a kind, name to specifier."""
        declared = self.data.get(kind.field)
        if kind is DepType.BUNDLE and declared is None:
            declared = self.data.get("bundledDependencies")
        if isinstance(declared, list):
            return {str(name): "*" for name in declared}
        if isinstance(declared, dict):
            return {str(k): str(v) for k, v in declared.items()}
        return {}

    def declared(
        self,
        ignore_deptypes: list[DepType] | None = None,
        ignore_packages: list[str] | None = None,
    ) -> dict[DepType, dict[str, str]]:
        """Declared dependencies grouped by kind, minus the ignored kinds and names."""
        skip_types = set(ignore_deptypes or ()) | {ALWAYS_IGNORED}
        skip_names = set(ignore_packages or ())
        ret: dict[DepType, dict[str, str]] = {}
        for kind in DepType:
            if kind in skip_types:
                continue
            deps = {name: specifier for name, specifier in self.deps(kind).items() if name not in skip_names}
            if deps:
                ret[kind] = deps
        return ret

    def resolve(
        self,
        ctx: RunContext,
        registry: Registry,
        ignore_deptypes: list[DepType] | None = None,
        ignore_packages: list[str] | None = None,
    ) -> dict[DepType, list[tuple[str, str]]]:
        """Resolve every declared specifier to the highest matching registry version.

        URL and git specifiers, unparseable constraints, and constraints
        matching no published version are skipped with a warning.

        Raises:
            NetworkError: If the registry cannot be queried
        """
        ret: dict[DepType, list[tuple[str, str]]] = {}
        for kind, deps in self.declared(ignore_deptypes, ignore_packages).items():
            resolved = []
            for name, specifier in deps.items():
                if is_remote_specifier(specifier):
                    logger.warning(f"skipping {name}: {specifier} is not a registry version")
                    continue
                try:
                    constraint = versions.parse_constraint(specifier)
                except ValueError:
                    logger.warning(f"skipping {name}: couldn't parse the version constraint {specifier}")
                    continue
                version = versions.highest(registry.versions(ctx, name, constraint))
                if version is None:
                    logger.warning(f"skipping {name}: no version matches {specifier}")
                    continue
                resolved.append((name, str(version)))
            if resolved:
                ret[kind] = resolved
        return ret
