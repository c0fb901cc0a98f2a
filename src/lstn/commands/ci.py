"""CI commands: enable the runtime monitor, report what it observed."""

import typer

from ..ci import monitor
from ..ci import report as ci_report
from ..options import get_options, get_run_context
from ..output import get_output_context

ci_app = typer.Typer(
    help="Listen in on what your CI does",
    no_args_is_help=True,
)


def enable(ctx: typer.Context) -> None:
    """Enable the CI eavesdropping."""
    monitor.enable(get_run_context(ctx), get_options(ctx), get_output_context())


def report(ctx: typer.Context) -> None:
    """Report the most critical findings into GitHub pull requests."""
    ci_report.report(get_run_context(ctx), get_options(ctx), get_output_context())
