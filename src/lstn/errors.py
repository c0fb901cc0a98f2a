"""Errors raised by lstn.

Every error carries the process exit code it maps to. Commands raise these
and the command wrapper turns them into a single ``Error: ...`` line on stderr.
"""

from .constants import EXIT_AUTH, EXIT_CANCEL, EXIT_ERROR, EXIT_JQ_HALT

MULTI_ERROR_SEPARATOR = "\n       "


class LstnError(Exception):
    """Base exception for lstn errors."""

    exit_code = EXIT_ERROR


class ConfigError(LstnError):
    """Raised when options fail to merge or validate."""


class InputError(LstnError):
    """Raised on bad arguments, missing or unparseable project files."""


class NetworkError(LstnError):
    """Raised when an HTTP call fails or answers with an unexpected status."""


class DecodingError(LstnError):
    """Raised when a server response or a lockfile cannot be decoded."""


class ProcessError(LstnError):
    """Raised when a child process cannot run or exits non-zero."""


class CancelledError(LstnError):
    """Raised when the run got cancelled or its deadline was exceeded."""

    exit_code = EXIT_CANCEL


class AuthError(LstnError):
    """Raised when a token is missing or gets rejected."""

    exit_code = EXIT_AUTH


class JQError(LstnError):
    """Raised when a jq expression fails to compile or to run."""


class HaltError(JQError):
    """Raised when a jq expression halts with an error value."""

    def __init__(self, value: str, code: int = EXIT_JQ_HALT) -> None:
        self.value = value
        self.exit_code = code
        super().__init__(value)


def compose(headline: str, errors: list[str] | list[Exception]) -> str:
    """Join a headline and a list of errors into one multi-line message."""
    return headline + "".join(f"{MULTI_ERROR_SEPARATOR}{e}" for e in errors)


class ReporterError(LstnError):
    """Raised when a reporter fails; keeps the exit code of the underlying error."""

    def __init__(self, reporter: str, cause: LstnError) -> None:
        self.exit_code = cause.exit_code
        super().__init__(f'error while executing the "{reporter}" reporter: {cause}')
