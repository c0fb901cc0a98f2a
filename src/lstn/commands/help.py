"""Help topics, printed as Markdown."""

from enum import Enum
from typing import Any

import click
import typer
import yaml

from ..constants import EXIT_AUTH, EXIT_CANCEL, EXIT_ERROR, EXIT_JQ_HALT, EXIT_OK
from ..models.reporting import ReportType
from ..options import In, env_variable, walk
from ..options.fields import get_value

EXIT_CODES = f"""# lstn exit codes

The lstn CLI follows the usual conventions regarding exit codes.

Meaning:

* when a command completes successfully, the exit code will be {EXIT_OK}
* when a command fails for any reason, the exit code will be {EXIT_ERROR}
* when a command is running but gets cancelled, the exit code will be {EXIT_CANCEL}
* when a command meets an authentication issue, the exit code will be {EXIT_AUTH}
* when a `--jq` expression halts with an error, the exit code will be the one it asks for ({EXIT_JQ_HALT} by default)

Notice that a particular command may have more exit codes,
so check the docs of the specific command in case you rely on them.
"""

# Options that make no sense in a configuration file
_NOT_CONFIGURABLE = frozenset({"debug-options"})


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


def config_defaults() -> dict[str, Any]:
    """Every configurable flag with its default value."""
    defaults = In()
    return {
        leaf.flag: _plain(get_value(defaults, leaf.path))
        for leaf in walk(In)
        if leaf.flag and leaf.flag not in _NOT_CONFIGURABLE
    }


def config_text() -> str:
    sample = yaml.safe_dump(config_defaults(), default_flow_style=False, sort_keys=False)
    return (
        "# lstn configuration file\n\n"
        "The `lstn` CLI looks for a `.listendev.yaml` (or `.listendev/config.yaml`) file in the working directory, "
        "then for a `.lstn.yaml` file in your `$HOME` directory when it starts.\n\n"
        "In this file you can set the values for the global `lstn` configurations.\n"
        "Environment variables and flags override the values in your configuration file.\n\n"
        "Here's an example of a configuration file (with the default values):\n\n"
        f"```yaml\n{sample}```\n"
    )


def environment_text() -> str:
    lines = [
        "# lstn environment variables",
        "",
        "The environment variables override any corresponding configuration setting.",
        "",
        "But flags override them.",
        "",
    ]
    for leaf in walk(In):
        if leaf.flag and leaf.flag not in _NOT_CONFIGURABLE:
            lines.append(f"`{env_variable(leaf.flag)}`: {leaf.desc}")
            lines.append("")
    return "\n".join(lines)


def reporters_text() -> str:
    lines = ["# lstn reporters", ""]
    for report_type in ReportType:
        lines.extend([f"## {report_type.value}", "", report_type.doc, ""])
    return "\n".join(lines)


def _options_usage(ctx: click.Context, command: click.Command) -> str:
    rows = []
    for param in command.get_params(ctx):
        record = param.get_help_record(ctx)
        if record is not None and not getattr(param, "hidden", False):
            rows.append(f"  {record[0]}  {record[1]}".rstrip())
    return "\n".join(rows)


def _is_group(command: click.Command) -> bool:
    return callable(getattr(command, "list_commands", None))


def _reference(ctx: click.Context, command: click.Command, path: str, depth: int, lines: list[str]) -> None:
    lines.append(f"{'#' * depth} `{path}`")
    lines.append("")
    description = (command.get_short_help_str(limit=200) or "").strip()
    if description and not description.endswith("."):
        description += "."
    if description:
        lines.extend([description, ""])
    sub_ctx = type(ctx)(command, info_name=path.rsplit(" ", 1)[-1], parent=ctx)
    usage = _options_usage(sub_ctx, command)
    if usage:
        lines.extend(["```", usage, "```", ""])
    if _is_group(command):
        for name in command.list_commands(sub_ctx):
            sub = command.get_command(sub_ctx, name)
            if sub is not None and not sub.hidden:
                _reference(sub_ctx, sub, f"{path} {name}", depth + 1, lines)


def manual_text(ctx: click.Context) -> str:
    """Reference of every command reachable from the root command."""
    root = ctx.find_root()
    lines = ["# lstn cheatsheet", ""]
    group = root.command
    if _is_group(group):
        usage = _options_usage(root, group)
        if usage:
            lines.extend(["## Global Flags", "", "Every child command inherits the following flags:", ""])
            lines.extend(["```", usage, "```", ""])
        for name in group.list_commands(root):
            command = group.get_command(root, name)
            if command is not None and not command.hidden:
                _reference(root, command, f"lstn {name}", 2, lines)
    return "\n".join(lines)


def config() -> None:
    """Details about the configuration file."""
    typer.echo(config_text(), nl=False)


def environment() -> None:
    """Which environment variables you can use with lstn."""
    typer.echo(environment_text())


def exit_codes() -> None:
    """Details about the lstn exit codes."""
    typer.echo(EXIT_CODES, nl=False)


def manual(ctx: typer.Context) -> None:
    """A comprehensive reference of all the lstn commands."""
    typer.echo(manual_text(ctx))


def reporters() -> None:
    """Details about the available reporters."""
    typer.echo(reporters_text())
