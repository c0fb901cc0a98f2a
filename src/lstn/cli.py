"""lstn CLI: analyze the behavior of your dependencies using listen.dev."""

from pathlib import Path

import typer
from rich.console import Console

from . import __version__
from .commands import (
    ci_app,
    config,
    enable,
    environment,
    exit_codes,
    in_,
    manual,
    report,
    reporters,
    scan,
    to,
    validate_directory_args,
    validate_to_args,
    version,
)
from .options import (
    CI_EXCLUSIONS,
    SCAN_EXCLUSIONS,
    TO_EXCLUSIONS,
    CiEnable,
    CiReport,
    In,
    RootOptions,
    Scan,
    To,
    Version,
    options_command,
)
from .output import OutputContext, set_output_context


def _version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"lstn {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="lstn",
    help="Analyze the behavior of your dependencies using listen.dev",
    no_args_is_help=True,
)


@app.callback()
def root(
    ctx: typer.Context,
    version_flag: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        help="config file (default is $HOME/.lstn.yaml)",
        dir_okay=False,
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
) -> None:
    """lstn - Analyze the behavior of your dependencies using listen.dev."""
    ctx.obj = RootOptions(config=config_path, no_color=no_color)
    set_output_context(OutputContext(Console(highlight=False, no_color=no_color)))


# Core commands
app.command("in", cls=options_command(In, args_validator=validate_directory_args))(in_)
app.command("scan", cls=options_command(Scan, SCAN_EXCLUSIONS, validate_directory_args))(scan)
app.command("to", cls=options_command(To, TO_EXCLUSIONS, validate_to_args))(to)

# CI commands
ci_app.command("enable", cls=options_command(CiEnable, CI_EXCLUSIONS))(enable)
ci_app.command("report", cls=options_command(CiReport, CI_EXCLUSIONS))(report)
app.add_typer(ci_app, name="ci")

app.command("version", cls=options_command(Version))(version)

# Help topics
app.command("config")(config)
app.command("environment")(environment)
app.command("env", hidden=True)(environment)
app.command("exit")(exit_codes)
app.command("manual")(manual)
app.command("reporters")(reporters)


def main() -> None:
    """Entry point of the lstn console script."""
    app()
