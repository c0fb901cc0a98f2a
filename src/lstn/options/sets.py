"""Option models of the subcommands, and the flags each one leaves out."""

from .fields import option
from .flags import ConfigFlags, DebugFlags, JSONFlags, MandatoryTokenFlags, OptionModel, TokenFlags


class In(JSONFlags, ConfigFlags, TokenFlags, DebugFlags):
    """Options of ``lstn in``."""


class Scan(In):
    """Options of ``lstn scan``."""


class To(In):
    """Options of ``lstn to``."""


class Version(DebugFlags):
    verbosity: int = option(
        0,
        json="verbosity",
        flag="verbose",
        shorthand="v",
        desc="increase the verbosity (-v, -vv)",
        count=True,
    )
    changelog: bool = option(
        False,
        json="changelog",
        flag="changelog",
        desc="output the URL of the release notes of this version",
    )


class CiReport(ConfigFlags, MandatoryTokenFlags, DebugFlags):
    """Options of ``lstn ci report``."""


class CiEnable(CiReport):
    """Options of ``lstn ci enable``."""

    directory: str = option(
        "",
        json="dir",
        flag="dir",
        desc="directory containing the jibril binary",
        name="directory",
        validate="omitempty,dir",
    )
    local: bool = option(
        False,
        json="local",
        flag="local",
        desc="write the jibril files under ./jibril instead of the system paths",
    )


SCAN_EXCLUSIONS = frozenset({"jwt-token", "lockfiles", "core-endpoint", "genlock"})
TO_EXCLUSIONS = SCAN_EXCLUSIONS | {"ignore-packages", "ignore-deptypes"}
CI_EXCLUSIONS = frozenset(
    {
        "ignore-packages",
        "ignore-deptypes",
        "select",
        "lockfiles",
        "npm-endpoint",
        "pypi-endpoint",
        "reporter",
        "npm-registry",
        "gh-owner",
        "gh-repo",
        "gh-pull-id",
        "genlock",
    }
)

__all__ = [
    "CI_EXCLUSIONS",
    "SCAN_EXCLUSIONS",
    "TO_EXCLUSIONS",
    "CiEnable",
    "CiReport",
    "In",
    "OptionModel",
    "Scan",
    "To",
    "Version",
]
