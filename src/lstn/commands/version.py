"""Version command."""

import platform

import typer

from .. import versioning
from ..options import get_options
from ..output import get_output_context


def version_lines(verbosity: int = 0) -> list[str]:
    lines = [f"lstn {versioning.short()}"]
    if verbosity > 0:
        lines.append(f"version: {versioning.long()}")
    if verbosity > 1:
        lines.append(f"python: {platform.python_implementation()} {platform.python_version()}")
        lines.append(f"platform: {platform.platform()}")
        lines.append(f"machine: {platform.machine()}")
    return lines


def version(ctx: typer.Context) -> None:
    """Print out version information."""
    options = get_options(ctx)
    out = get_output_context()
    if options.changelog:
        out.write(versioning.changelog() + "\n")
        return
    out.write("".join(f"{line}\n" for line in version_lines(options.verbosity)))
