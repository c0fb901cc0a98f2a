"""CLI integration tests for lstn."""

import base64
import json
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest
import semver
from conftest import POETRY_LOCK, VERDICTS
from typer.testing import CliRunner

from lstn.cli import app
from lstn.ecosystems.npm import DepType
from lstn.services import listen

REAL_CLIENT = listen.new_client


@pytest.fixture
def listen_dev() -> list[httpx.Request]:
    """Route every listen.dev call to an in-memory server answering VERDICTS."""
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=VERDICTS)

    def client() -> httpx.Client:
        return REAL_CLIENT(transport=httpx.MockTransport(handler))

    with (
        patch("lstn.services.listen.new_client", side_effect=client),
        patch("lstn.commands.in_.npm_version", return_value=None),
        patch("lstn.core.analysis.git_context", return_value=None),
    ):
        yield requests


class TestVersionCommand:
    """Tests for --version and the version subcommand."""

    def test_version_flag(self, runner: CliRunner) -> None:
        """--version should display version string."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert result.stdout == "lstn 0.1.0\n"

    def test_version_command(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert result.stdout == "lstn 0.1.0\n"

    def test_verbose_version(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["version", "-vv"])
        assert result.exit_code == 0
        lines = result.stdout.splitlines()
        assert lines[1].startswith("version: 0.1.0 (")
        assert any(line.startswith("python: ") for line in lines)

    def test_changelog(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["version", "--changelog"])
        assert result.exit_code == 0
        assert result.stdout == "https://github.com/listendev/lstn/releases/tag/v0.1.0\n"


class TestHelpTopics:
    """Tests for the help topics."""

    def test_no_args_shows_help(self, runner: CliRunner) -> None:
        result = runner.invoke(app, [])
        assert result.exit_code == 2
        assert "Usage:" in result.output

    def test_exit_codes(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["exit"])
        assert result.exit_code == 0
        assert "the exit code will be 4" in result.stdout

    def test_environment(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["environment"])
        assert result.exit_code == 0
        assert "`LSTN_TIMEOUT`: set the timeout, in seconds" in result.stdout
        assert "`LSTN_NPM_ENDPOINT`" in result.stdout
        assert "LSTN_DEBUG_OPTIONS" not in result.stdout

    def test_env_alias(self, runner: CliRunner) -> None:
        assert runner.invoke(app, ["env"]).stdout == runner.invoke(app, ["environment"]).stdout

    def test_config(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 0
        assert "```yaml" in result.stdout
        assert "timeout: 60" in result.stdout
        assert "- bundle" in result.stdout

    def test_reporters(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["reporters"])
        assert result.exit_code == 0
        assert "## gh-pull-comment" in result.stdout
        assert "## pro" in result.stdout

    def test_manual(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["manual"])
        assert result.exit_code == 0
        assert "## `lstn in`" in result.stdout
        assert "### `lstn ci enable`" in result.stdout
        assert "--ignore-deptypes" in result.stdout


class TestInCommand:
    """Tests for lstn in."""

    def test_missing_lockfile(self, runner: CliRunner, isolated_env: Path) -> None:
        result = runner.invoke(app, ["in"])
        assert result.exit_code == 1
        assert result.stderr.endswith(f"directory {isolated_env.resolve()} does not contain the package-lock.json file\n")

    def test_argument_must_be_a_directory(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["in", "missing"])
        assert result.exit_code == 1
        assert "Error: requires the argument to be an existing directory" in result.stderr

    def test_json_output(self, runner: CliRunner, npm_project: Path, listen_dev: list[httpx.Request]) -> None:
        result = runner.invoke(app, ["in", "--json"])
        assert result.exit_code == 0, result.stderr
        assert [p["name"] for p in json.loads(result.stdout)] == ["react", "js-tokens"]
        assert str(listen_dev[0].url) == "https://npm.listen.dev/api/analysis"
        body = json.loads(listen_dev[0].content)
        assert body["manifest"]
        assert body["context"]["version"]["short"] == "0.1.0"

    def test_manifest_is_the_lockfile(self, runner: CliRunner, npm_project: Path, listen_dev: list[httpx.Request]) -> None:
        result = runner.invoke(app, ["in", "--json"])
        assert result.exit_code == 0, result.stderr
        manifest = base64.b64decode(json.loads(listen_dev[0].content)["manifest"])
        assert manifest == (npm_project / "package-lock.json").read_bytes()

    def test_ignored_dependencies_are_not_sent(
        self,
        runner: CliRunner,
        npm_project: Path,
        listen_dev: list[httpx.Request],
    ) -> None:
        result = runner.invoke(app, ["in", "--json", "--ignore-packages", "react", "--ignore-deptypes", "dev"])
        assert result.exit_code == 0, result.stderr
        manifest = json.loads(base64.b64decode(json.loads(listen_dev[0].content)["manifest"]))
        assert sorted(manifest["packages"]) == ["", "node_modules/fsevents", "node_modules/loose-envify"]

    def test_jq_output(self, runner: CliRunner, npm_project: Path, listen_dev: list[httpx.Request]) -> None:
        result = runner.invoke(app, ["in", "--json", "--jq", ".[] | .name"])
        assert result.exit_code == 0, result.stderr
        assert result.stdout == "react\njs-tokens\n"

    def test_table_output(self, runner: CliRunner, npm_project: Path, listen_dev: list[httpx.Request]) -> None:
        result = runner.invoke(app, ["--no-color", "in"])
        assert result.exit_code == 0, result.stderr
        assert "unexpected outbound connection destination" in result.stdout

    def test_both_lockfiles(
        self,
        runner: CliRunner,
        npm_project: Path,
        listen_dev: list[httpx.Request],
    ) -> None:
        (npm_project / "poetry.lock").write_text(POETRY_LOCK)
        result = runner.invoke(app, ["in", "--json", "--pypi-endpoint", "http://localhost:3000"])
        assert result.exit_code == 0, result.stderr
        assert [str(r.url) for r in listen_dev] == [
            "https://npm.listen.dev/api/analysis",
            "http://localhost:3000/api/pypi/analysis",
        ]
        assert len(json.loads(result.stdout)) == 4

    def test_auth_error_exit_code(self, runner: CliRunner, npm_project: Path) -> None:
        def client() -> httpx.Client:
            return REAL_CLIENT(transport=httpx.MockTransport(lambda _: httpx.Response(401)))

        with (
            patch("lstn.services.listen.new_client", side_effect=client),
            patch("lstn.commands.in_.npm_version", return_value=None),
        ):
            result = runner.invoke(app, ["in", "--lockfiles", "package-lock.json"])
        assert result.exit_code == 4
        assert "Error: unexpected status code: 401" in result.stderr

    def test_reporter_outside_ci(self, runner: CliRunner, npm_project: Path, listen_dev: list[httpx.Request]) -> None:
        result = runner.invoke(app, ["in", "--json", "-r", "gh-pull-comment"])
        assert result.exit_code == 0
        assert "Exiting: the reporter is not running in a supported environment." in result.stderr


class TestToCommand:
    """Tests for lstn to."""

    def test_requires_a_name(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["to"])
        assert result.exit_code == 1
        assert result.stderr == "Error: requires at least 1 arg (package name)\n"

    def test_too_many_args(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["to", "a", "1.0.0", "f" * 40, "extra"])
        assert result.exit_code == 1
        assert "accepts between 1 and 3 arg(s), received 4" in result.stderr

    def test_invalid_args_are_listed(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["to", "Bad Name", "1.x", "nope"])
        assert result.exit_code == 1
        assert "Error: invalid arguments" in result.stderr
        assert "Bad Name is not a valid npm package name" in result.stderr
        assert "1.x is not a valid semantic version" in result.stderr
        assert "nope is not a valid shasum" in result.stderr

    def test_invalid_constraint(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["to", "react", "not-a-version"])
        assert result.exit_code == 1
        assert "is neither a valid version constraint nor an exact valid semantic version" in result.stderr

    def test_exact_version(self, runner: CliRunner, listen_dev: list[httpx.Request]) -> None:
        result = runner.invoke(app, ["to", "react", "18.2.0", "--json"])
        assert result.exit_code == 0, result.stderr
        assert len(listen_dev) == 1
        body = json.loads(listen_dev[0].content)
        assert (body["name"], body["version"]) == ("react", "18.2.0")
        assert str(listen_dev[0].url) == "https://npm.listen.dev/api/verdicts"

    def test_jq_halt_error_exit_code(self, runner: CliRunner, listen_dev: list[httpx.Request]) -> None:
        result = runner.invoke(app, ["to", "react", "18.2.0", "--json", "--jq", '"stop" | halt_error(3)'])
        assert result.exit_code == 3
        assert "stop" in result.stderr.splitlines()

    def test_version_constraint(self, runner: CliRunner, listen_dev: list[httpx.Request]) -> None:
        with patch(
            "lstn.commands.to.Registry.versions",
            return_value=[semver.Version(18, 0, 0), semver.Version(18, 2, 0)],
        ):
            result = runner.invoke(app, ["to", "react", "^18.0.0", "--json"])
        assert result.exit_code == 0, result.stderr
        versions = sorted(json.loads(r.content)["version"] for r in listen_dev)
        assert versions == ["18.0.0", "18.2.0"]

    def test_constraint_without_match(self, runner: CliRunner, listen_dev: list[httpx.Request]) -> None:
        with patch("lstn.commands.to.Registry.versions", return_value=[]):
            result = runner.invoke(app, ["to", "react", "^99"])
        assert result.exit_code == 1
        assert "Error: no version of react matches ^99" in result.stderr


class TestScanCommand:
    """Tests for lstn scan."""

    def test_missing_package_json(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["scan"])
        assert result.exit_code == 1
        assert "does not contain a package.json file" in result.stderr

    def test_resolves_then_fans_out(
        self,
        runner: CliRunner,
        npm_project: Path,
        listen_dev: list[httpx.Request],
    ) -> None:
        def resolve(self: object, ctx: object, registry: object, ignore_deptypes: object, ignore_packages: object) -> dict:
            return {DepType.DEP: [("react", "18.2.0")], DepType.DEV: [("typescript", "5.1.6")]}

        with patch("lstn.commands.scan.PackageJSON.resolve", resolve):
            result = runner.invoke(app, ["scan", "--json"])
        assert result.exit_code == 0, result.stderr
        assert sorted(json.loads(r.content)["name"] for r in listen_dev) == ["react", "typescript"]
        assert len(json.loads(result.stdout)) == 4
