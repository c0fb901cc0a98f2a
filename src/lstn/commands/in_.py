"""In command: analyze the lockfiles of a project."""

import logging
import sys
from pathlib import Path
from typing import Any

import typer

from .. import reporters
from ..context import RunContext
from ..core.analysis import new_context
from ..ecosystems import Lockfile
from ..ecosystems.npm import PackageLock, generate_package_lock, npm_version
from ..ecosystems.pypi import PoetryLock
from ..errors import InputError, LstnError
from ..models.requests import AnalysisRequest
from ..models.verdicts import Response
from ..options import get_options, get_run_context
from ..output import get_output_context
from ..services.listen import ListenClient

logger = logging.getLogger(__name__)


def target_directory(path: str | None) -> Path:
    """Absolute path of the target directory, the working directory by default."""
    return Path(path or Path.cwd()).resolve()


def validate_directory_args(params: dict[str, Any]) -> None:
    """Check the optional path argument is an existing directory.

    Raises:
        InputError: If it is not
    """
    path = params.get("path")
    if path and not Path(path).is_dir():
        raise InputError("requires the argument to be an existing directory")


def read_lockfile(
    ctx: RunContext,
    lockfile: Lockfile,
    directory: Path,
    genlock: bool = False,
) -> PackageLock | PoetryLock:
    """Decoded lockfile of the directory.

    With ``genlock`` a package-lock.json is generated first; when that fails
    the file on disk is read instead and, if that fails too, its error wins.

    Raises:
        InputError: If the lockfile is missing
        DecodingError: If the lockfile cannot be decoded
        ProcessError: If the generation fails and no file can be read
    """
    if lockfile is Lockfile.POETRY_LOCK:
        return PoetryLock.read(directory)

    if genlock:
        try:
            return PackageLock.parse(generate_package_lock(directory, ctx))
        except LstnError as e:
            logger.warning(f"couldn't generate the {lockfile.value} file: {e}")
    return PackageLock.read(directory)


def manifest(lock: PackageLock | PoetryLock, options: Any) -> bytes:
    """Lockfile contents to send, without the ignored dependencies."""
    if isinstance(lock, PoetryLock):
        return lock.without(options.ignore_packages)
    return lock.without(options.ignore_deptypes, options.ignore_packages)


def endpoint_for(options: Any, lockfile: Lockfile) -> str:
    return str(getattr(options.endpoint, lockfile.ecosystem.value))


def analyze(ctx: RunContext, options: Any, directory: Path, json_output: bool = False) -> Response:
    """Send one analysis request per readable lockfile, combining the responses.

    Raises:
        LstnError: The error of the first configured lockfile when none can be read
    """
    manifests: list[tuple[Lockfile, bytes]] = []
    errors: dict[str, LstnError] = {}
    for name in options.lockfiles:
        lockfile = Lockfile.from_name(name)
        if lockfile is None:
            logger.warning(f"skipping {name}: unsupported lockfile")
            continue
        try:
            lock = read_lockfile(ctx, lockfile, (directory / name).parent, options.genlock)
            manifests.append((lockfile, manifest(lock, options)))
        except LstnError as e:
            logger.debug(f"{name}: {e}")
            errors[name] = e

    if not manifests:
        first = next((errors[n] for n in options.lockfiles if n in errors), None)
        raise first or InputError(f"directory {directory} contains none of the configured lockfiles")

    npm = npm_version(ctx) if any(lf is Lockfile.PACKAGE_LOCK for lf, _ in manifests) else None
    context = new_context(directory, npm)
    output = sys.stdout if json_output and options.jq else None

    combined: Response = []
    for lockfile, raw in manifests:
        client = ListenClient(endpoint_for(options, lockfile), lockfile.ecosystem, options.jwt_token, "in")
        try:
            request = AnalysisRequest.from_lockfile(raw, context)
            combined.extend(client.analysis(ctx, request, options.jq, output))
        finally:
            client.close()
    return combined


def in_(
    ctx: typer.Context,
    path: str | None = typer.Argument(None, help="Directory of the project (default: current directory)"),
) -> None:
    """Inspect the verdicts for your dependencies tree."""
    options = get_options(ctx)
    run = get_run_context(ctx)
    out = get_output_context()

    directory = target_directory(path)
    response = analyze(run, options, directory, out.json_mode)
    reporters.render(out, response, options.jq)
    reporters.execute(run, options, response, out)
