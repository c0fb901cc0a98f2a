"""The npm executable: discovery, version check and lockfile generation."""

import logging
import os
import shutil
import subprocess
import tempfile
from pathlib import Path

from ...constants import NPM_VERSION_TIMEOUT
from ...context import RunContext
from ...errors import CancelledError, InputError, ProcessError
from .. import versions

logger = logging.getLogger(__name__)

MIN_NPM_VERSION = ">= 6.x"
LOCK_ONLY_ARGS = ("install", "--package-lock-only", "--no-audit")


def _run(args: list[str], ctx: RunContext, cwd: Path | None = None, ceiling: float | None = None) -> subprocess.CompletedProcess[str]:
    ctx.check()
    try:
        return subprocess.run(
            args,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=ctx.timeout(ceiling),
        )
    except subprocess.TimeoutExpired as e:
        err = ctx.error()
        if err is not None:
            raise err from None
        raise ProcessError(f"{args[0]} timed out after {e.timeout:g}s") from None
    except FileNotFoundError:
        raise ProcessError(f"command not found: {args[0]}") from None


class NPM:
    """An invocable npm, either from the PATH or lazy-loaded through nvm."""

    def __init__(self, exe: str | None = None, nvm_init: str | None = None) -> None:
        self.exe = exe
        self.nvm_init = nvm_init

    def command(self, *args: str) -> list[str]:
        if self.nvm_init is not None:
            return ["bash", "-c", f"{self.nvm_init} && npm {' '.join(args)}"]
        return [self.exe or "npm", *args]

    def version(self, ctx: RunContext) -> str:
        """Return the npm version, checking it is at least 6.x.

        Raises:
            ProcessError: If the version cannot be obtained or is too old
        """
        result = _run(self.command("--version"), ctx, ceiling=NPM_VERSION_TIMEOUT)
        if result.returncode != 0:
            raise ProcessError("couldn't get the npm version")
        raw = result.stdout.strip()
        if not versions.is_version(raw):
            raise ProcessError("the npm version is not a valid semantic version")
        if not versions.parse_constraint(MIN_NPM_VERSION).matches(versions.parse_version(raw)):
            raise ProcessError(f"the npm version is not {MIN_NPM_VERSION}")
        return raw


def _from_path() -> NPM:
    exe = shutil.which("npm")
    if exe is None:
        raise ProcessError("couldn't find the npm executable in the PATH")
    return NPM(exe=exe)


def _from_nvm() -> NPM:
    nvm_dir = os.environ.get("NVM_DIR", "")
    if not nvm_dir:
        raise ProcessError("couldn't detect the nvm directory")
    if shutil.which("bash") is None:
        raise ProcessError("couldn't find bash in the PATH")
    init = f"source {nvm_dir}/nvm.sh"
    if os.environ.get("NVM_NO_USE") == "true":
        init += " --no-use"
    return NPM(nvm_init=init)


def find_npm(ctx: RunContext) -> NPM:
    """Locate a working npm (>= 6.x), falling back to nvm.

    Raises:
        CancelledError: If the run is done while looking for npm
        ProcessError: If no usable npm exists
    """
    try:
        npm = _from_path()
        npm.version(ctx)
        return npm
    except CancelledError:
        raise
    except ProcessError as e:
        logger.debug(f"npm not usable from the PATH: {e}")
    try:
        npm = _from_nvm()
        npm.version(ctx)
        return npm
    except ProcessError as e:
        raise ProcessError(f"couldn't find the npm executable in any way: {e}") from e


def npm_version(ctx: RunContext) -> str | None:
    """Version of the available npm, None when there is none."""
    try:
        return find_npm(ctx).version(ctx)
    except ProcessError:
        return None


def generate_package_lock(directory: Path, ctx: RunContext) -> bytes:
    """Generate a package-lock.json for the package.json in directory.

    npm runs in a scratch directory holding a copy of package.json, so the
    project is left untouched.

    Raises:
        InputError: If package.json cannot be read
        ProcessError: If npm is missing or fails
    """
    npm = find_npm(ctx)
    try:
        manifest = (directory / "package.json").read_bytes()
    except OSError:
        raise InputError("couldn't read the package.json file") from None

    with tempfile.TemporaryDirectory(prefix="lstn-") as tmp:
        scratch = Path(tmp)
        (scratch / "package.json").write_bytes(manifest)
        result = _run(npm.command(*LOCK_ONLY_ARGS), ctx, cwd=scratch)
        if result.returncode != 0:
            logger.debug(result.stderr)
            raise ProcessError("couldn't generate the package-lock.json file")
        try:
            return (scratch / "package-lock.json").read_bytes()
        except OSError:
            raise ProcessError("couldn't generate the package-lock.json file") from None
