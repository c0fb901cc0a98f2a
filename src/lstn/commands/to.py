"""To command: verdicts for one package, one version or a range of versions."""

import logging
import sys
from typing import Any

import typer

from .. import reporters
from ..context import RunContext
from ..core.analysis import new_context
from ..core.tracker import track_packages
from ..ecosystems import Ecosystem, versions
from ..ecosystems.npm import Registry
from ..errors import InputError, compose
from ..models.requests import VerdictsRequest
from ..models.verdicts import Response
from ..options import get_options, get_run_context
from ..options.validate import SHASUM_RE, is_npm_package_name
from ..output import get_output_context
from ..services.listen import ListenClient

logger = logging.getLogger(__name__)

VERSIONS_KIND = "Versions"


def validate_to_args(params: dict[str, Any]) -> None:
    """Check ``<name> [<version> [<shasum>] | <constraint>]``.

    Raises:
        InputError: If the arguments are missing, too many, or invalid
    """
    args = list(params.get("args") or [])
    if not args:
        raise InputError("requires at least 1 arg (package name)")
    if len(args) > 3:
        raise InputError(f"accepts between 1 and 3 arg(s), received {len(args)}")

    errors = []
    name = args[0]
    if not is_npm_package_name(name):
        errors.append(f"{name} is not a valid npm package name")
    if len(args) == 3:
        if not versions.is_version(args[1]):
            errors.append(f"{args[1]} is not a valid semantic version")
        if not SHASUM_RE.match(args[2]):
            errors.append(f"{args[2]} is not a valid shasum")
    elif len(args) == 2 and not versions.is_version(args[1]) and not versions.is_constraint(args[1]):
        errors.append(f"{args[1]} is neither a valid version constraint nor an exact valid semantic version")
    if errors:
        raise InputError(compose("invalid arguments", errors))


def query(ctx: RunContext, options: Any, args: list[str], json_output: bool = False) -> Response:
    """Ask the verdicts of the package described by the arguments.

    A version constraint is expanded against the registry into one request
    per matching version.

    Raises:
        InputError: If no published version matches the constraint
        NetworkError: If the registry or the verdicts endpoint fails
    """
    name = args[0]
    version = args[1] if len(args) > 1 else None
    digest = args[2] if len(args) > 2 else None
    context = new_context()
    output = sys.stdout if json_output and options.jq else None
    client = ListenClient(options.endpoint.npm, Ecosystem.NPM, caller="to")

    def retrieve(package: str, package_version: str | None) -> Response:
        request = VerdictsRequest(
            name=package,
            version=package_version,
            digest=digest,
            select=options.select or None,
            context=context,
        )
        return client.verdicts(ctx, request, options.jq, output)

    try:
        if version is None or versions.is_version(version):
            return retrieve(name, version)

        registry = Registry(options.npm_registry)
        try:
            matching = registry.versions(ctx, name, versions.parse_constraint(version))
        finally:
            registry.close()
        if not matching:
            raise InputError(f"no version of {name} matches {version}")
        logger.debug(f"{version} matches {len(matching)} versions of {name}")
        return track_packages(ctx, {VERSIONS_KIND: [(name, str(v)) for v in matching]}, retrieve)
    finally:
        client.close()


def to(
    ctx: typer.Context,
    args: list[str] | None = typer.Argument(None, help="<name> [<version> [<shasum>] | <version constraint>]"),
) -> None:
    """Get the verdicts of a package."""
    options = get_options(ctx)
    run = get_run_context(ctx)
    out = get_output_context()

    response = query(run, options, list(args or []), out.json_mode)
    reporters.render(out, response, options.jq)
    reporters.execute(run, options, response, out)
