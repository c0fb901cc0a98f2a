"""Output formatting for lstn CLI."""

import json
from dataclasses import dataclass
from typing import Any

import typer
from rich.console import Console

SUCCESS_ICON = "✓"
WARNING_ICON = "!"
FAILURE_ICON = "X"


@dataclass
class OutputContext:
    """Context for output formatting.

    Results go to stdout through the Rich console. Progress, status and
    error messages go to stderr as plain lines so they never mix with JSON.
    """

    console: Console
    json_mode: bool = False

    @property
    def interactive(self) -> bool:
        return self.console.is_terminal

    def print(self, message: str, style: str | None = None) -> None:
        """Print message respecting output mode."""
        if not self.json_mode:
            self.console.print(message, style=style, highlight=False)

    def write(self, text: str) -> None:
        """Write raw text to stdout, untouched by Rich."""
        typer.echo(text, nl=False)

    def print_json(self, data: Any) -> None:
        """Print JSON data on stdout."""
        typer.echo(json.dumps(data, indent=2, default=str))

    def info(self, message: str) -> None:
        """Print an informative line on stderr."""
        typer.echo(message, err=True)

    def success(self, message: str) -> None:
        typer.echo(self._with_icon(SUCCESS_ICON, message), err=True)

    def warning(self, message: str) -> None:
        typer.echo(self._with_icon(WARNING_ICON, message), err=True)

    def failure(self, message: str) -> None:
        typer.echo(self._with_icon(FAILURE_ICON, message), err=True)

    def error(self, message: str) -> None:
        """Print an error line on stderr."""
        typer.echo(f"Error: {message}", err=True)

    def _with_icon(self, icon: str, message: str) -> str:
        if self.interactive:
            return f"{icon} {message}"
        return message


# Global output context (set by cli.py main callback)
_ctx: OutputContext | None = None


def get_output_context() -> OutputContext:
    """Get the current output context.

    Returns a default OutputContext if not yet initialized by CLI.
    """
    if _ctx is None:
        return OutputContext(Console(highlight=False))
    return _ctx


def set_output_context(ctx: OutputContext) -> None:
    """Set the global output context. Called by CLI main callback."""
    global _ctx
    _ctx = ctx
