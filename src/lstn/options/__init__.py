"""Option models, their resolution and their flags."""

from .command import RootOptions, get_options, get_run_context, options_command
from .fields import Leaf, option, walk
from .resolver import EnvSource, Resolver, as_json, env_variable, precedence
from .sets import (
    CI_EXCLUSIONS,
    SCAN_EXCLUSIONS,
    TO_EXCLUSIONS,
    CiEnable,
    CiReport,
    In,
    Scan,
    To,
    Version,
)
from .transform import transform
from .validate import check_value, validate

__all__ = [
    "CI_EXCLUSIONS",
    "SCAN_EXCLUSIONS",
    "TO_EXCLUSIONS",
    "CiEnable",
    "CiReport",
    "EnvSource",
    "In",
    "Leaf",
    "Resolver",
    "RootOptions",
    "Scan",
    "To",
    "Version",
    "as_json",
    "check_value",
    "env_variable",
    "get_options",
    "get_run_context",
    "option",
    "options_command",
    "precedence",
    "transform",
    "validate",
    "walk",
]
