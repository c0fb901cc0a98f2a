"""Base class of the reporters sending results outside of the terminal."""

from typing import Any

from ..ci.info import Info
from ..context import RunContext
from ..errors import LstnError
from ..models.reporting import ReportType
from ..models.verdicts import Response

UNSUPPORTED_ENVIRONMENT = "the reporter is not running in a supported environment"
NOT_ON_PULL_REQUEST = "the reporter is not running against a GitHub pull request"
READONLY_TOKEN = "the GitHub token the reporter is running with is read-only"
ON_FORK = "the GitHub action is running on a pull request of a fork"


class ReporterUnavailable(LstnError):
    """Raised when a reporter cannot run in the current environment."""


class Reporter:
    """A reporter bound to the resolved options and the CI run it executes in."""

    report_type: ReportType

    def __init__(self, ctx: RunContext, options: Any, info: Info) -> None:
        self.ctx = ctx
        self.options = options
        self.info = info

    def check(self) -> None:
        """Raise ReporterUnavailable when the reporter cannot run here."""

    def run(self, response: Response, body: str | None = None) -> None:
        raise NotImplementedError
