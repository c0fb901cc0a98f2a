"""Reporters: terminal rendering and the reporters selected with --reporter."""

from typing import Any

from ..ci.info import Info, new_info
from ..context import RunContext
from ..errors import LstnError, ReporterError
from ..models.reporting import ReportType
from ..models.verdicts import Response
from ..output import OutputContext
from ..services.core import CoreClient
from ..services.github import GitHubClient
from .base import UNSUPPORTED_ENVIRONMENT, Reporter, ReporterUnavailable
from .comment import CommentReporter
from .console import render
from .markdown import full_report
from .pro import ProReporter
from .table import render_table

COMING_SOON = frozenset({ReportType.GH_PULL_REVIEW, ReportType.GH_PULL_CHECK})


def make(
    report_type: ReportType,
    ctx: RunContext,
    options: Any,
    info: Info | None = None,
    github: GitHubClient | None = None,
    core: CoreClient | None = None,
) -> Reporter:
    """Create a reporter, ensuring it can run in the current environment.

    Raises:
        ReporterUnavailable: If the reporter cannot run here
        LstnError: If the reporter is not supported
    """
    if info is None:
        try:
            info = new_info()
        except LstnError:
            raise ReporterUnavailable(UNSUPPORTED_ENVIRONMENT) from None

    reporter: Reporter
    if report_type is ReportType.GH_PULL_COMMENT:
        reporter = CommentReporter(ctx, options, info, github=github)
    elif report_type is ReportType.PRO:
        reporter = ProReporter(ctx, options, info, core=core)
    else:
        raise LstnError("unsupported reporter")
    reporter.check()
    return reporter


def execute(
    ctx: RunContext,
    options: Any,
    response: Response,
    out: OutputContext,
    body: str | None = None,
    info: Info | None = None,
    github: GitHubClient | None = None,
    core: CoreClient | None = None,
) -> None:
    """Run every reporter of ``options.reporter`` in order.

    Reporters that cannot run here are skipped with an ``Exiting:`` line.

    Raises:
        ReporterError: If a reporter fails
    """
    for report_type in options.reporter:
        name = f'"{report_type.value}"'
        out.info(f"Reporting using the {name} reporter...")
        if report_type in COMING_SOON:
            out.info(f"The {name} reporter is coming soon...")
            continue
        try:
            reporter = make(report_type, ctx, options, info=info, github=github, core=core)
        except ReporterUnavailable as e:
            out.info(f"Exiting: {e}.")
            continue
        try:
            reporter.run(response, body)
        except LstnError as e:
            raise ReporterError(report_type.value, e) from e
        out.success(f"The report has been successfully sent using the {name} reporter...")


__all__ = [
    "COMING_SOON",
    "CommentReporter",
    "ProReporter",
    "Reporter",
    "ReporterUnavailable",
    "execute",
    "full_report",
    "make",
    "render",
    "render_table",
]
