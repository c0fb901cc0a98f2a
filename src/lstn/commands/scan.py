"""Scan command: verdicts for the direct dependencies declared in package.json."""

import logging
import sys
from pathlib import Path
from typing import Any

import typer

from .. import reporters
from ..context import RunContext
from ..core.analysis import new_context
from ..core.tracker import track_packages
from ..ecosystems import Ecosystem
from ..ecosystems.npm import PackageJSON, Registry
from ..models.requests import VerdictsRequest
from ..models.verdicts import Response
from ..options import get_options, get_run_context
from ..output import get_output_context
from ..services.listen import ListenClient
from .in_ import target_directory

logger = logging.getLogger(__name__)


def scan_directory(ctx: RunContext, options: Any, directory: Path, json_output: bool = False) -> Response:
    """Resolve the declared dependencies against the registry, then fan out the verdict requests.

    Raises:
        InputError: If the directory has no readable package.json
        CancelledError: If the run context gets done meanwhile
    """
    package_json = PackageJSON.read(directory)
    registry = Registry(options.npm_registry)
    try:
        deps = package_json.resolve(ctx, registry, options.ignore_deptypes, options.ignore_packages)
    finally:
        registry.close()

    context = new_context(directory)
    output = sys.stdout if json_output and options.jq else None
    client = ListenClient(options.endpoint.npm, Ecosystem.NPM, caller="scan")

    def retrieve(name: str, version: str | None) -> Response:
        request = VerdictsRequest(name=name, version=version, select=options.select or None, context=context)
        return client.verdicts(ctx, request, options.jq, output)

    try:
        return track_packages(ctx, {kind.label: items for kind, items in deps.items()}, retrieve)
    finally:
        client.close()


def scan(
    ctx: typer.Context,
    path: str | None = typer.Argument(None, help="Directory of the project (default: current directory)"),
) -> None:
    """Inspect the verdicts for your direct dependencies."""
    options = get_options(ctx)
    run = get_run_context(ctx)
    out = get_output_context()

    directory = target_directory(path)
    response = scan_directory(run, options, directory, out.json_mode)
    reporters.render(out, response, options.jq)
    reporters.execute(run, options, response, out)
