"""Git repository information, read through the git executable."""

import logging
import os
import subprocess
from pathlib import Path

from ..constants import GIT_TIMEOUT
from ..errors import ProcessError
from ..models.context import GitContext, GitIdentity, GitRemote, GitURL

logger = logging.getLogger(__name__)


def run_git(*args: str, cwd: Path | None = None, timeout: int = GIT_TIMEOUT) -> str:
    """Run a git command and return its stdout.

    Raises:
        ProcessError: If git is missing, times out or exits non-zero
    """
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        raise ProcessError(f"git {args[0]} timed out after {timeout} seconds") from e
    except FileNotFoundError:
        raise ProcessError("couldn't find the git executable in the PATH") from None
    if result.returncode != 0:
        raise ProcessError(f"git {args[0]} failed: {result.stderr.strip()}")
    return result.stdout


def get_repo_root(cwd: Path | None = None) -> Path:
    return Path(run_git("rev-parse", "--show-toplevel", cwd=cwd).strip())


def _config(key: str, cwd: Path | None) -> str:
    try:
        return run_git("config", "--get", key, cwd=cwd).strip()
    except ProcessError:
        return ""


def get_user(cwd: Path | None = None) -> GitIdentity | None:
    """Identity configured in user.name and user.email."""
    name, email = _config("user.name", cwd), _config("user.email", cwd)
    if not name and not email:
        return None
    return GitIdentity(name=name, email=email)


def get_author(cwd: Path | None = None) -> GitIdentity | None:
    """Identity git would record as author: GIT_AUTHOR_* first, then the user."""
    user = get_user(cwd)
    name = os.environ.get("GIT_AUTHOR_NAME") or (user.name if user else "")
    email = os.environ.get("GIT_AUTHOR_EMAIL") or (user.email if user else "")
    if not name and not email:
        return None
    return GitIdentity(name=name, email=email)


def parse_remotes(output: str) -> dict[str, GitRemote]:
    """Parse ``git remote -v`` lines (``origin<TAB>url (fetch)``)."""
    remotes: dict[str, GitRemote] = {}
    for line in output.splitlines():
        parts = line.split()
        if len(parts) != 3:
            continue
        name, url, direction = parts
        remote = remotes.setdefault(name, GitRemote())
        if direction == "(fetch)":
            remote.fetch = GitURL(url=url)
        elif direction == "(push)":
            remote.push = GitURL(url=url)
    return remotes


def get_remotes(cwd: Path | None = None) -> dict[str, GitRemote]:
    return parse_remotes(run_git("remote", "-v", cwd=cwd))


def git_context(cwd: Path) -> GitContext | None:
    """Git context of the repository at cwd, None when it is not a repository."""
    try:
        root = get_repo_root(cwd)
        remotes = get_remotes(root)
    except ProcessError as e:
        logger.debug(f"no git context for {cwd}: {e}")
        return None
    return GitContext(user=get_user(root), author=get_author(root), remotes=remotes)
