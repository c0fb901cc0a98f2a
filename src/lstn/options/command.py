"""Typer command class generating flags from an option model.

The generated command performs the pre-run of every subcommand: it validates
the positional arguments, discovers the configuration file, resolves the
options, configures logging, honors ``--debug-options`` and creates the run
context carrying the deadline. Domain errors become one ``Error:`` line on
stderr and the exit code they map to.
"""

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import click
import typer
from pydantic import BaseModel
from rich.console import Console
from typer.core import TyperCommand, TyperOption

from ..config import ConfigSource
from ..constants import EXIT_CANCEL
from ..context import CANCELED, RunContext
from ..errors import HaltError, LstnError
from ..logging import configure_logging
from ..output import OutputContext, get_output_context, set_output_context
from .fields import BOOL, COUNT, ENUM_LIST, LIST, Leaf, walk
from .resolver import EnvSource, Resolver, as_json

OPTIONS_KEY = "lstn.options"
RUN_KEY = "lstn.run"
CONFIG_PARAM = "config"

ArgsValidator = Callable[[dict[str, Any]], None]


@dataclass
class RootOptions:
    """Options of the root command, shared with the subcommands through ``ctx.obj``."""

    config: Path | None = None
    no_color: bool = False


def _help(leaf: Leaf) -> str:
    text = leaf.desc
    if leaf.kind == ENUM_LIST and leaf.choices is not None:
        text += f" (one of: {', '.join(c.value for c in leaf.choices)})"
    return text


def _show_default(leaf: Leaf, default: Any) -> str | bool:
    if default in (None, "", 0, False, []):
        return False
    if isinstance(default, list):
        return ",".join(getattr(v, "value", str(v)) for v in default)
    return str(default)


def make_option(leaf: Leaf, default: Any) -> TyperOption:
    """Click option of a leaf. Defaults stay unset so the resolver can tell what was given."""
    decls = [f"--{leaf.flag}"]
    if leaf.shorthand:
        decls.append(f"-{leaf.shorthand}")
    decls.append(leaf.param_name)
    kwargs: dict[str, Any] = {
        "param_decls": decls,
        "help": _help(leaf),
        "rich_help_panel": leaf.flagset,
        "show_default": _show_default(leaf, default),
    }
    if leaf.kind == BOOL:
        kwargs.update(is_flag=True, default=False)
    elif leaf.kind == COUNT:
        kwargs.update(count=True, default=0)
    elif leaf.kind in (LIST, ENUM_LIST):
        kwargs.update(multiple=True, type=click.STRING, default=())
    else:
        kwargs.update(type=click.INT if isinstance(default, int) else click.STRING, default=None)
    return TyperOption(**kwargs)


class OptionsCommand(TyperCommand):
    """A command whose flags come from ``model`` minus ``exclusions``."""

    model: type[BaseModel]
    exclusions: frozenset[str] = frozenset()
    args_validator: ArgsValidator | None = None

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        defaults = self.model()
        self._leaves = walk(self.model, self.exclusions)
        for leaf in self._leaves:
            value = defaults
            for attr in leaf.path:
                value = getattr(value, attr)
            self.params.append(make_option(leaf, value))
        self.params.append(
            TyperOption(
                param_decls=["--config", CONFIG_PARAM],
                type=click.Path(dir_okay=False, path_type=Path),
                default=None,
                help="config file (default is $HOME/.lstn.yaml)",
            )
        )

    def invoke(self, ctx: click.Context) -> Any:
        root = ctx.find_object(RootOptions) or RootOptions()
        flags = {leaf.param_name: ctx.params.pop(leaf.param_name, None) for leaf in self._leaves}
        explicit = ctx.params.pop(CONFIG_PARAM, None) or root.config
        debugging = bool(flags.get("debug_options"))
        out = get_output_context()
        run: RunContext | None = None

        try:
            if self.args_validator is not None and not debugging:
                self.args_validator(ctx.params)

            config = ConfigSource.discover(explicit=explicit)
            out.info(config.message())

            options = Resolver(self.model, self.exclusions, config, EnvSource()).resolve(flags)
            configure_logging(getattr(options, "loglevel", "info"), no_color=root.no_color)
            out = OutputContext(
                Console(highlight=False, no_color=root.no_color),
                json_mode=bool(getattr(options, "json_output", False)),
            )
            set_output_context(out)

            if getattr(options, "debug_options", False):
                typer.echo(as_json(options))
                return None

            run = RunContext(getattr(options, "timeout", None))
            ctx.meta[OPTIONS_KEY] = options
            ctx.meta[RUN_KEY] = run
            return super().invoke(ctx)
        except HaltError as e:
            typer.echo(e.value, err=True)
            raise typer.Exit(e.exit_code) from None
        except LstnError as e:
            out.error(str(e))
            raise typer.Exit(e.exit_code) from None
        except KeyboardInterrupt:
            if run is not None:
                run.cancel()
            out.error(CANCELED)
            raise typer.Exit(EXIT_CANCEL) from None


def options_command(
    model: type[BaseModel],
    exclusions: frozenset[str] = frozenset(),
    args_validator: ArgsValidator | None = None,
) -> type[OptionsCommand]:
    """Build the command class of a subcommand taking the options of ``model``."""
    return type(
        f"{model.__name__}Command",
        (OptionsCommand,),
        {
            "model": model,
            "exclusions": exclusions,
            "args_validator": staticmethod(args_validator) if args_validator else None,
        },
    )


def get_options(ctx: click.Context) -> Any:
    return ctx.meta[OPTIONS_KEY]


def get_run_context(ctx: click.Context) -> RunContext:
    return ctx.meta[RUN_KEY]
