"""Setup of the jibril runtime monitor on a CI runner.

``enable`` locates the monitor, installs it as a systemd service, writes its
configuration from the core API settings, then starts it. In local mode the
files land under ``./jibril/`` and the systemd install is skipped.
"""

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from ..constants import (
    MONITOR_BINARY,
    MONITOR_CONFIG_PATH,
    MONITOR_DIR_MODE,
    MONITOR_ENV_PATH,
    MONITOR_FILE_MODE,
    MONITOR_LOCAL_DIR,
    MONITOR_NETPOLICY_PATH,
    MONITOR_TIMEOUT,
)
from ..context import RunContext
from ..errors import InputError, ProcessError
from ..output import OutputContext
from ..services.core import CoreClient, settings_tokens
from .info import Info, new_info

logger = logging.getLogger(__name__)

FORK_WARNING = "lstn ci does not run on fork pull requests at the moment"


def find_monitor(directory: str = "") -> Path:
    """Locate the monitor binary, in ``directory`` when given, in the PATH otherwise.

    Raises:
        InputError: If the binary cannot be found or is not an executable file
    """
    if directory:
        path = Path(directory) / MONITOR_BINARY
        if not path.exists():
            raise InputError(f"couldn't find the {MONITOR_BINARY} binary in {directory}")
        if not path.is_file() or not os.access(path, os.X_OK):
            raise InputError(f"expecting {path} to be an executable file")
        return path
    exe = shutil.which(MONITOR_BINARY)
    if exe is None:
        raise InputError(f"couldn't find the {MONITOR_BINARY} executable in the PATH")
    return Path(exe)


class Monitor:
    """The monitor executable."""

    def __init__(self, exe: Path) -> None:
        self.exe = exe

    def _run(self, ctx: RunContext, *args: str) -> str:
        ctx.check()
        command = [str(self.exe), *args]
        logger.debug(f"Running {' '.join(command)}")
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=ctx.timeout(MONITOR_TIMEOUT),
            )
        except subprocess.TimeoutExpired as e:
            err = ctx.error()
            if err is not None:
                raise err from None
            raise ProcessError(f"{self.exe} timed out after {e.timeout:g}s") from None
        except OSError as e:
            raise ProcessError(f"couldn't run {self.exe}: {e}") from e
        if result.returncode != 0:
            output = (result.stderr or result.stdout).strip()
            raise ProcessError(f"{' '.join(args)} exited with code {result.returncode}: {output}")
        return result.stdout.strip()

    def install(self, ctx: RunContext) -> str:
        """Install the monitor as a systemd service.

        Raises:
            ProcessError: If the install fails
        """
        try:
            return self._run(ctx, "--systemd", "install")
        except ProcessError as e:
            raise ProcessError(f"couldn't install {MONITOR_BINARY}: {e}") from e

    def enable(self, ctx: RunContext) -> str:
        """Enable and start the monitor service.

        Raises:
            ProcessError: If the monitor cannot be started
        """
        try:
            return self._run(ctx, "-s", "enable-now")
        except ProcessError as e:
            raise ProcessError(f"couldn't enable {MONITOR_BINARY}: {e}") from e


@dataclass(frozen=True)
class MonitorPaths:
    config: Path
    netpolicy: Path
    env: Path

    @classmethod
    def system(cls) -> "MonitorPaths":
        return cls(Path(MONITOR_CONFIG_PATH), Path(MONITOR_NETPOLICY_PATH), Path(MONITOR_ENV_PATH))

    @classmethod
    def local(cls, cwd: Path | None = None) -> "MonitorPaths":
        root = (cwd or Path.cwd()) / MONITOR_LOCAL_DIR
        return cls(root / "config.yaml", root / "netpolicy.yaml", root / "default")

    @classmethod
    def for_mode(cls, local: bool, cwd: Path | None = None) -> "MonitorPaths":
        return cls.local(cwd) if local else cls.system()


def env_lines(settings: dict[str, Any], info: Info, jwt_token: str, gh_token: str) -> str:
    """Content of the env file: settings tokens, CI info, then the two tokens."""
    lines = settings_tokens(settings)
    dump = info.dump()
    if dump:
        lines.extend(dump.splitlines())
    lines.append(f"LISTENDEV_TOKEN={jwt_token}")
    lines.append(f"GITHUB_TOKEN={gh_token}")
    return "\n".join(lines) + "\n"


def write_file(path: Path, content: str) -> None:
    path.parent.mkdir(mode=MONITOR_DIR_MODE, parents=True, exist_ok=True)
    path.write_text(content)
    path.chmod(MONITOR_FILE_MODE)


def write_yaml(path: Path, data: Any) -> None:
    write_file(path, yaml.safe_dump(data, default_flow_style=False, sort_keys=False))


def enable(
    ctx: RunContext,
    options: Any,
    out: OutputContext,
    core: CoreClient | None = None,
    info: Info | None = None,
    cwd: Path | None = None,
) -> None:
    """Install, configure and start the monitor for the current CI run.

    Raises:
        InputError: If not running in a supported CI or the monitor is missing
        ProcessError: If the monitor install or start fails
        NetworkError: If a core API call fails
    """
    info = info or new_info()
    if info.has_readonly_github_token():
        out.warning(FORK_WARNING)
        return

    monitor = Monitor(find_monitor(options.directory))
    if options.local:
        logger.debug("Local mode, skipping the systemd install")
    else:
        output = monitor.install(ctx)
        if output:
            out.info(output)
        out.success(f"Installed {monitor.exe}")

    own_core = core is None
    if core is None:
        core = CoreClient(options.endpoint.core, options.jwt_token)
    try:
        settings = core.settings(ctx)
        out.success("Fetched settings")
        config = core.monitor_config(ctx)
        out.success("Fetched config")
        netpolicy = core.network_policy(ctx, info.repo_full_name or "", str(info.repo_id or ""))
        out.success("Fetched network policy")
    finally:
        if own_core:
            core.close()

    paths = MonitorPaths.for_mode(options.local, cwd)
    write_yaml(paths.config, config)
    out.success(f"Wrote config {paths.config}")
    write_yaml(paths.netpolicy, {"network_policy": netpolicy})
    out.success(f"Wrote network policy {paths.netpolicy}")
    write_file(paths.env, env_lines(settings, info, options.jwt_token, options.gh_token))
    out.success(f"Wrote environment {paths.env}")

    out.info(f"Enabling {monitor.exe} -s enable-now")
    output = monitor.enable(ctx)
    if output:
        out.info(output)
