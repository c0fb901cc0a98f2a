"""CLI command implementations for lstn.

This package contains the implementation of each CLI command,
separated from the CLI framework setup in cli.py.
"""

from .ci import ci_app, enable, report
from .help import config, environment, exit_codes, manual, reporters
from .in_ import in_, validate_directory_args
from .scan import scan
from .to import to, validate_to_args
from .version import version

__all__ = [
    "ci_app",
    "config",
    "enable",
    "environment",
    "exit_codes",
    "in_",
    "manual",
    "report",
    "reporters",
    "scan",
    "to",
    "validate_directory_args",
    "validate_to_args",
    "version",
]
