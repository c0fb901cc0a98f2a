"""npm dependency types."""

from enum import Enum


class DepType(str, Enum):
    """Kind of an npm dependency, identified as in the --ignore-deptypes flag."""

    DEP = "dep"
    DEV = "dev"
    PEER = "peer"
    BUNDLE = "bundle"
    OPTIONAL = "optional"

    @property
    def field(self) -> str:
        """Key of the dependency map in package.json."""
        return _FIELDS[self]

    @property
    def label(self) -> str:
        return _LABELS[self]

    @classmethod
    def parse(cls, value: str) -> "DepType":
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f'couldn\'t parse "{value}" in an NPM dependency type') from None


_FIELDS = {
    DepType.DEP: "dependencies",
    DepType.DEV: "devDependencies",
    DepType.PEER: "peerDependencies",
    DepType.BUNDLE: "bundleDependencies",
    DepType.OPTIONAL: "optionalDependencies",
}

_LABELS = {
    DepType.DEP: "Dependencies",
    DepType.DEV: "DevDependencies",
    DepType.PEER: "PeerDependencies",
    DepType.BUNDLE: "BundleDependencies",
    DepType.OPTIONAL: "OptionalDependencies",
}

# Bundled dependencies ship inside their parent tarball: never queried on their own
ALWAYS_IGNORED = DepType.BUNDLE
