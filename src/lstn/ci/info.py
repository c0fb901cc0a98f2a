"""Information about the CI run lstn executes in.

Only GitHub Actions is supported. The run is described by its environment
variables plus the webhook payload of the event that triggered it, which is
one of a pull request, a push, or a re-run (check suite) event.
"""

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from ..errors import DecodingError, InputError

PULL_REQUEST_TARGET = "pull_request_target"


class _Owner(BaseModel):
    login: str = ""


class _Repository(BaseModel):
    name: str = ""
    full_name: str = ""
    fork: bool = False
    owner: _Owner = Field(default_factory=_Owner)


class _Branch(BaseModel):
    ref: str = ""
    sha: str = ""
    repo: _Repository | None = None


class _PullRequest(BaseModel):
    number: int
    head: _Branch = Field(default_factory=_Branch)
    base: _Branch | None = None

    @property
    def is_fork(self) -> bool:
        if self.head.repo is None:
            return False
        if self.head.repo.fork:
            return True
        if self.base is not None and self.base.repo is not None:
            return self.head.repo.full_name != self.base.repo.full_name
        return False


class _HeadCommit(BaseModel):
    id: str = ""


class _CheckSuite(BaseModel):
    pull_requests: list[_PullRequest] = Field(default_factory=list)


class PullRequestEvent(BaseModel):
    repository: _Repository
    pull_request: _PullRequest


class RerunEvent(BaseModel):
    repository: _Repository
    check_suite: _CheckSuite


class PushEvent(BaseModel):
    repository: _Repository
    head_commit: _HeadCommit | None = None


Event = PullRequestEvent | RerunEvent | PushEvent


def parse_event(data: Any) -> Event:
    """Decode an event payload into the variant it matches.

    Raises:
        ValidationError: If the payload matches no variant
    """
    if isinstance(data, dict):
        if data.get("pull_request"):
            return PullRequestEvent.model_validate(data)
        if (data.get("check_suite") or {}).get("pull_requests"):
            return RerunEvent.model_validate(data)
    return PushEvent.model_validate(data)


def _env(name: str, dump: str | None = None) -> Any:
    return field(default=None, metadata={"env": name, "dump": dump or name})


@dataclass
class Info:
    """Canonical description of a CI run."""

    owner: str = ""
    repo: str = ""
    sha: str = field(default="", metadata={"dump": "GITHUB_SHA"})
    num: int = 0
    branch: str = ""
    fork: bool = False
    event_name: str = field(default="", metadata={"dump": "GITHUB_EVENT_NAME"})
    action: str | None = _env("GITHUB_ACTION")
    action_path: str | None = _env("GITHUB_ACTION_PATH")
    action_repository: str | None = _env("GITHUB_ACTION_REPOSITORY")
    actor: str | None = _env("GITHUB_ACTOR")
    actor_id: int | None = _env("GITHUB_ACTOR_ID")
    job: str | None = _env("GITHUB_JOB")
    ref: str | None = _env("GITHUB_REF")
    ref_name: str | None = _env("GITHUB_REF_NAME")
    ref_protected: bool | None = _env("GITHUB_REF_PROTECTED")
    ref_type: str | None = _env("GITHUB_REF_TYPE")
    repo_full_name: str | None = _env("GITHUB_REPOSITORY")
    repo_id: int | None = _env("GITHUB_REPOSITORY_ID")
    repo_owner: str | None = _env("GITHUB_REPOSITORY_OWNER")
    repo_owner_id: int | None = _env("GITHUB_REPOSITORY_OWNER_ID")
    run_attempt: int | None = _env("GITHUB_RUN_ATTEMPT")
    run_id: int | None = _env("GITHUB_RUN_ID")
    run_number: int | None = _env("GITHUB_RUN_NUMBER")
    runner_arch: str | None = _env("RUNNER_ARCH")
    runner_debug: bool | None = _env("RUNNER_DEBUG")
    runner_os: str | None = _env("RUNNER_OS")
    server_url: str | None = _env("GITHUB_SERVER_URL")
    triggering_actor: str | None = _env("GITHUB_TRIGGERING_ACTOR")
    workflow: str | None = _env("GITHUB_WORKFLOW")
    workflow_ref: str | None = _env("GITHUB_WORKFLOW_REF")
    workflow_sha: str | None = _env("GITHUB_WORKFLOW_SHA")
    workspace: str | None = _env("GITHUB_WORKSPACE")

    def is_github_pull_request(self) -> bool:
        return self.num != 0 and bool(self.owner) and bool(self.repo)

    def has_readonly_github_token(self) -> bool:
        """Whether this is a fork pull request run by pull_request_target, with a read-only token."""
        return self.fork and self.event_name == PULL_REQUEST_TARGET

    def dump(self) -> str:
        """Sorted ``KEY=VALUE`` lines of the non-empty fields."""
        lines = []
        for f in fields(self):
            value = getattr(self, f.name)
            if value in (None, "", 0, False):
                continue
            key = f.metadata.get("dump") or f.name.upper()
            if isinstance(value, bool):
                value = "true"
            lines.append(f"{key}={value}")
        return "\n".join(sorted(lines))

    def query_params(self) -> dict[str, str]:
        """Parameters identifying the run in core API queries (non-empty only)."""
        params = {
            "repository": self.repo_full_name,
            "repository_id": self.repo_id,
            "workflow": self.workflow,
            "job": self.job,
            "run_id": self.run_id,
            "run_number": self.run_number,
            "run_attempt": self.run_attempt,
            "sha": self.sha,
            "event_name": self.event_name,
        }
        return {k: str(v) for k, v in params.items() if v not in (None, "", 0)}

    def apply_event(self, event: Event) -> None:
        self.owner = event.repository.owner.login
        self.repo = event.repository.name
        if isinstance(event, PullRequestEvent):
            self._apply_pull_request(event.pull_request)
        elif isinstance(event, RerunEvent):
            self._apply_pull_request(event.check_suite.pull_requests[0])
        elif event.head_commit is not None:
            self.sha = event.head_commit.id

    def _apply_pull_request(self, pull_request: _PullRequest) -> None:
        self.num = pull_request.number
        self.branch = pull_request.head.ref
        self.sha = pull_request.head.sha
        self.fork = pull_request.is_fork


def _coerce(value: str, annotation: Any) -> Any:
    if "bool" in str(annotation):
        return value.strip().lower() in ("1", "true")
    if "int" in str(annotation):
        try:
            return int(value)
        except ValueError:
            return None
    return value


def is_github_actions(environ: Mapping[str, str] | None = None) -> bool:
    environ = os.environ if environ is None else environ
    return bool(environ.get("GITHUB_ACTIONS"))


def from_github(environ: Mapping[str, str] | None = None) -> Info:
    """Build the info of a GitHub Actions run.

    Raises:
        InputError: If GITHUB_EVENT_PATH is not set
        DecodingError: If the event payload cannot be decoded
    """
    environ = os.environ if environ is None else environ
    event_path = environ.get("GITHUB_EVENT_PATH", "")
    if not event_path:
        raise InputError("couldn't find the GITHUB_EVENT_PATH environment variable")
    try:
        event = parse_event(json.loads(Path(event_path).read_text()))
    except (OSError, json.JSONDecodeError, ValidationError):
        raise DecodingError("couldn't decode the GITHUB_EVENT_PATH file") from None

    info = Info(event_name=environ.get("GITHUB_EVENT_NAME", ""))
    info.apply_event(event)
    for f in fields(info):
        name = f.metadata.get("env")
        if name and environ.get(name):
            setattr(info, f.name, _coerce(environ[name], f.type))
    return info


def new_info(environ: Mapping[str, str] | None = None) -> Info:
    """Build the info of the current CI run.

    Raises:
        InputError: If not running in a supported CI
    """
    if is_github_actions(environ):
        return from_github(environ)
    raise InputError("CI systems other than GitHub Actions are not supported yet")


def try_info(environ: Mapping[str, str] | None = None) -> Info | None:
    """The CI info when running in a supported CI, None otherwise."""
    if not is_github_actions(environ):
        return None
    try:
        return from_github(environ)
    except (InputError, DecodingError):
        return None
