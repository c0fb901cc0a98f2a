"""npm ecosystem: package.json, package-lock.json, registry and executable."""

from .deptype import ALWAYS_IGNORED, DepType
from .executable import NPM, find_npm, generate_package_lock, npm_version
from .package_json import PackageJSON, is_remote_specifier
from .package_lock import LockfileEntry, PackageLock
from .registry import Registry

__all__ = [
    "ALWAYS_IGNORED",
    "NPM",
    "DepType",
    "LockfileEntry",
    "PackageJSON",
    "PackageLock",
    "Registry",
    "find_npm",
    "generate_package_lock",
    "is_remote_specifier",
    "npm_version",
]
