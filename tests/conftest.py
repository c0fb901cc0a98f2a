"""Shared test fixtures for lstn tests."""

import json
import os
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import httpx
import pytest
from typer.testing import CliRunner

from lstn.context import RunContext

PACKAGE_LOCK_V1 = {
    "name": "sample",
    "version": "1.0.0",
    "lockfileVersion": 1,
    "requires": True,
    "dependencies": {
        "js-tokens": {
            "version": "4.0.0",
            "resolved": "https://registry.npmjs.org/js-tokens/-/js-tokens-4.0.0.tgz",
            "integrity": "sha512-RdJUflcE3cUzKiMqQgsCu06FPu9UdIJO0beYbPhHN4k6apgJtifcoCtT9bcxOpYBtpD2kCM6Sbzg4CausW/PKQ==",
        },
        "loose-envify": {
            "version": "1.4.0",
            "integrity": "sha512-lyuxPGr/Wfhrlem2CL/UcnUc1zcqKAImBDzukY7Y5F/yQiNdko6+fRLevlw1HgMySw7f611UIY408EtxRSoK3Q==",
            "requires": {"js-tokens": "^3.0.0 || ^4.0.0"},
        },
        "typescript": {
            "version": "5.1.6",
            "dev": True,
        },
    },
}

PACKAGE_LOCK_V2 = {
    "name": "sample",
    "version": "1.0.0",
    "lockfileVersion": 2,
    "requires": True,
    "packages": {
        "": {"name": "sample", "version": "1.0.0", "dependencies": {"react": "^18.2.0"}},
        "node_modules/react": {"version": "18.2.0", "integrity": "sha512-react"},
        "node_modules/loose-envify": {"version": "1.4.0", "integrity": "sha512-le"},
        "node_modules/typescript": {"version": "5.1.6", "dev": True},
        "node_modules/fsevents": {"version": "2.3.2", "optional": True},
    },
    "dependencies": {
        "react": {"version": "18.2.0"},
    },
}

PACKAGE_LOCK_V3 = {
    "name": "sample",
    "version": "1.0.0",
    "lockfileVersion": 3,
    "requires": True,
    "packages": {
        "": {"name": "sample", "version": "1.0.0"},
        "node_modules/@vue/devtools": {"version": "6.5.0"},
        "node_modules/a/node_modules/b": {"version": "1.0.0"},
        "node_modules/bundled": {"version": "0.1.0", "inBundle": True},
        "node_modules/workspace-link": {"resolved": "packages/lib", "link": True},
        "packages/lib": {"version": "0.0.1"},
    },
}

PACKAGE_JSON = {
    "name": "sample",
    "version": "1.0.0",
    "dependencies": {"react": "^18.0.0", "local": "file:../local"},
    "devDependencies": {"typescript": "~5.1.0"},
    "peerDependencies": {"vue": "3.x"},
    "bundleDependencies": ["react"],
}

POETRY_LOCK = """\
[[package]]
name = "certifi"
version = "2023.7.22"
description = "Python package for providing Mozilla's CA Bundle."
optional = false
python-versions = ">=3.6"

[[package]]
name = "idna"
version = "3.4"
description = "Internationalized Domain Names in Applications (IDNA)"
optional = false
python-versions = ">=3.5"

[metadata]
lock-version = "2.0"
python-versions = "^3.11"
"""

PULL_REQUEST_EVENT = {
    "action": "synchronize",
    "number": 42,
    "pull_request": {
        "number": 42,
        "head": {
            "ref": "feature",
            "sha": "0123456789abcdef0123456789abcdef01234567",
            "repo": {"name": "lstn", "full_name": "listendev/lstn", "fork": False, "owner": {"login": "listendev"}},
        },
        "base": {
            "ref": "main",
            "sha": "fedcba9876543210fedcba9876543210fedcba98",
            "repo": {"name": "lstn", "full_name": "listendev/lstn", "fork": False, "owner": {"login": "listendev"}},
        },
    },
    "repository": {"name": "lstn", "full_name": "listendev/lstn", "fork": False, "owner": {"login": "listendev"}},
}

VERDICTS = [
    {
        "name": "react",
        "version": "18.2.0",
        "verdicts": [
            {
                "message": "unexpected outbound connection destination",
                "severity": "high",
                "code": "FNI001",
                "pkg": "react",
                "version": "18.2.0",
                "metadata": {"npm_package_name": "react", "npm_package_version": "18.2.0", "parent_name": "node"},
            },
            {
                "message": "typosquatting of react-dom",
                "severity": "MEDIUM",
                "code": "TSN002",
                "pkg": "react",
                "version": "18.2.0",
                "metadata": {"npm_package_name": "react-dom-x", "npm_package_version": "0.0.1"},
            },
        ],
        "problems": [],
    },
    {
        "name": "js-tokens",
        "version": "4.0.0",
        "verdicts": [],
        "problems": [{"type": "https://listen.dev/probs/does-not-exist", "title": "Package does not exist"}],
    },
]


@pytest.fixture
def runner() -> CliRunner:
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Path, None, None]:
    """Run every test in an empty directory, without lstn or GitHub environment variables.

    HOME points to a scratch directory so no user configuration file is found.
    """
    for name in list(os.environ):
        if name.startswith(("LSTN_", "GITHUB_", "RUNNER_")):
            monkeypatch.delenv(name, raising=False)
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    yield work


@pytest.fixture
def ctx() -> RunContext:
    """Run context without deadline."""
    return RunContext()


@pytest.fixture
def write_json() -> Callable[[Path, Any], Path]:
    """Write a JSON document, returning its path."""

    def write(path: Path, data: Any) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data))
        return path

    return write


@pytest.fixture
def npm_project(isolated_env: Path, write_json: Callable[[Path, Any], Path]) -> Path:
    """Working directory holding a package.json and a v2 package-lock.json."""
    write_json(isolated_env / "package.json", PACKAGE_JSON)
    write_json(isolated_env / "package-lock.json", PACKAGE_LOCK_V2)
    return isolated_env


@pytest.fixture
def github_event(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    write_json: Callable[[Path, Any], Path],
) -> Callable[..., Path]:
    """Simulate a GitHub Actions run triggered by the given event payload."""

    def setup(event: dict[str, Any] | None = None, event_name: str = "pull_request", **env: str) -> Path:
        path = write_json(tmp_path / "event.json", PULL_REQUEST_EVENT if event is None else event)
        monkeypatch.setenv("GITHUB_ACTIONS", "true")
        monkeypatch.setenv("GITHUB_EVENT_PATH", str(path))
        monkeypatch.setenv("GITHUB_EVENT_NAME", event_name)
        for name, value in env.items():
            monkeypatch.setenv(name, value)
        return path

    return setup


class Recorder:
    """MockTransport handler answering from a route table and recording every request."""

    def __init__(self, routes: dict[tuple[str, str], Any] | None = None) -> None:
        self.routes = routes or {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        answer = self.routes.get((request.method, request.url.path))
        if answer is None:
            return httpx.Response(404, json={"message": "not found"})
        if callable(answer):
            return answer(request)
        if isinstance(answer, httpx.Response):
            return answer
        return httpx.Response(200, json=answer)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self))

    def bodies(self) -> list[Any]:
        return [json.loads(r.content) for r in self.requests if r.content]


@pytest.fixture
def recorder() -> Recorder:
    """An empty request recorder; tests fill its routes."""
    return Recorder()
