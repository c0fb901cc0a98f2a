"""Tests for response rendering and the reporters."""

import io
import json
from types import SimpleNamespace
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
from conftest import VERDICTS
from rich.console import Console

from lstn.ci.info import Info
from lstn.context import RunContext
from lstn.errors import AuthError, NetworkError, ReporterError
from lstn.models.reporting import ReportType
from lstn.models.verdicts import Package, Verdict, decode_response
from lstn.output import OutputContext
from lstn.reporters import CommentReporter, ProReporter, ReporterUnavailable, execute, full_report, make, render
from lstn.reporters.markdown import TITLE, nest
from lstn.reporters.pro import dependency_event, github_context
from lstn.reporters.table import details, metadata_lines, summary_table


def response() -> list[Package]:
    return decode_response(json.dumps(VERDICTS))


def pr_info(**overrides: Any) -> Info:
    values: dict[str, Any] = {
        "owner": "listendev",
        "repo": "lstn",
        "num": 42,
        "event_name": "pull_request",
        "repo_full_name": "listendev/lstn",
        "repo_id": 123,
        "run_id": 456,
    }
    values.update(overrides)
    return Info(**values)


def options(*reporters: ReportType, **overrides: Any) -> SimpleNamespace:
    values: dict[str, Any] = {
        "reporter": list(reporters),
        "gh_token": "token",
        "jwt_token": "jwt",
        "gh_owner": "",
        "gh_repo": "",
        "gh_pull_id": 0,
        "endpoint": SimpleNamespace(core="https://core.listen.dev"),
    }
    values.update(overrides)
    return SimpleNamespace(**values)


def capture() -> tuple[Console, io.StringIO]:
    buffer = io.StringIO()
    return Console(file=buffer, width=200, no_color=True, highlight=False), buffer


class TestTable:
    """Tests for the terminal tables."""

    def test_summary_counts(self) -> None:
        console, buffer = capture()
        console.print(summary_table(response()))
        lines = buffer.getvalue().splitlines()
        assert "js-tokens" in lines[0]
        assert "0 verdicts" in lines[0]
        assert "1 problem" in lines[0]
        assert "react" in lines[1]
        assert "2 verdicts" in lines[1]

    def test_details_of_a_clean_package(self) -> None:
        assert details(Package(name="clean", version="1.0.0")) == []

    def test_details_mark_transitive_verdicts(self) -> None:
        react = response()[0]
        lines = details(react)
        assert "There are 2 verdicts and 0 problems" in lines[1]
        assert any("from transitive dependency react-dom-x@0.0.1" in line for line in lines)

    def test_metadata_lines_skip_hidden_keys(self) -> None:
        verdict = Verdict(
            message="m",
            metadata={"npm_package_name": "x", "parent_name": "node", "count": 3, "flag": True, "empty": ""},
        )
        assert metadata_lines(verdict) == ["count: 3", "parent_name: node"]

    def test_unknown_verdicts_are_not_counted(self) -> None:
        package = Package(name="x", version="1.0.0", verdicts=[Verdict(message="?", code="UNK")])
        assert details(package) == []


class TestRender:
    """Tests for the rendering on stdout."""

    def test_json_mode(self, capsys: pytest.CaptureFixture[str]) -> None:
        console, _ = capture()
        render(OutputContext(console, json_mode=True), response())
        printed = json.loads(capsys.readouterr().out)
        assert [p["name"] for p in printed] == ["react", "js-tokens"]

    def test_json_mode_with_jq_prints_nothing(self, capsys: pytest.CaptureFixture[str]) -> None:
        console, buffer = capture()
        render(OutputContext(console, json_mode=True), response(), ".[]")
        assert capsys.readouterr().out == ""
        assert buffer.getvalue() == ""

    def test_tables(self) -> None:
        console, buffer = capture()
        render(OutputContext(console), response())
        assert "unexpected outbound connection destination" in buffer.getvalue()
        assert "Package does not exist" in buffer.getvalue()


class TestMarkdown:
    """Tests for the full Markdown report."""

    def test_no_verdicts(self) -> None:
        report = full_report([Package(name="a", version="1.0.0"), Package(name="b", version="2.0.0")])
        assert report == f"{TITLE}\n\n✅ No signs of suspicious behavior in 2 packages.\n"

    def test_nesting(self) -> None:
        nested = nest(response())
        assert list(nested["high"]["FNI"]) == ["react@18.2.0"]
        bucket = nested["medium"]["TSN"]["react@18.2.0"]["TSN002"]
        assert len(bucket.transitive) == 1
        assert not bucket.direct

    def test_sections(self) -> None:
        report = full_report(response())
        assert "Found 2 verdicts and 1 problem." in report
        assert report.index("### 🚨 Critical severity (1)") < report.index("### ⚠️ Medium severity (1)")
        assert "<details><summary>📡 Dynamic instrumentation (1)</summary>" in report
        assert "- typosquatting of react-dom (from transitive dependency `react-dom-x@0.0.1`)" in report
        assert "### ❗ 1 problem" in report
        assert "- `js-tokens@4.0.0`: Package does not exist (https://listen.dev/probs/does-not-exist)" in report


class TestFactory:
    """Tests for the reporter factory."""

    def test_comment_reporter(self, ctx: RunContext) -> None:
        reporter = make(ReportType.GH_PULL_COMMENT, ctx, options(), info=pr_info(), github=MagicMock())
        assert isinstance(reporter, CommentReporter)

    def test_comment_needs_a_pull_request(self, ctx: RunContext) -> None:
        with pytest.raises(ReporterUnavailable, match="not running against a GitHub pull request"):
            make(ReportType.GH_PULL_COMMENT, ctx, options(), info=pr_info(num=0), github=MagicMock())

    def test_comment_needs_a_writable_token(self, ctx: RunContext) -> None:
        info = pr_info(fork=True, event_name="pull_request_target")
        with pytest.raises(ReporterUnavailable, match="read-only"):
            make(ReportType.GH_PULL_COMMENT, ctx, options(), info=info, github=MagicMock())

    def test_pro_reporter_on_fork(self, ctx: RunContext) -> None:
        info = pr_info(fork=True, event_name="pull_request_target")
        with pytest.raises(ReporterUnavailable, match="pull request of a fork"):
            make(ReportType.PRO, ctx, options(), info=info, core=MagicMock())

    def test_outside_ci(self, ctx: RunContext) -> None:
        with pytest.raises(ReporterUnavailable, match="not running in a supported environment"):
            make(ReportType.PRO, ctx, options())


class TestExecute:
    """Tests for running the selected reporters."""

    def test_comment_is_upserted(self, ctx: RunContext, capsys: pytest.CaptureFixture[str]) -> None:
        github = MagicMock()
        console, _ = capture()
        execute(ctx, options(ReportType.GH_PULL_COMMENT), response(), OutputContext(console), info=pr_info(), github=github)

        github.upsert_sticky_comment.assert_called_once()
        args = github.upsert_sticky_comment.call_args.args
        assert args[1:4] == ("listendev", "lstn", 42)
        assert args[4].startswith(TITLE)
        err = capsys.readouterr().err
        assert 'Reporting using the "gh-pull-comment" reporter...' in err
        assert 'successfully sent using the "gh-pull-comment" reporter' in err

    def test_flags_override_ci_coordinates(self, ctx: RunContext) -> None:
        github = MagicMock()
        console, _ = capture()
        opts = options(ReportType.GH_PULL_COMMENT, gh_owner="me", gh_repo="fork", gh_pull_id=7)
        execute(ctx, opts, response(), OutputContext(console), info=pr_info(), github=github)
        assert github.upsert_sticky_comment.call_args.args[1:4] == ("me", "fork", 7)

    def test_unavailable_reporter_is_skipped(self, ctx: RunContext, capsys: pytest.CaptureFixture[str]) -> None:
        github = MagicMock()
        console, _ = capture()
        execute(ctx, options(ReportType.GH_PULL_COMMENT), response(), OutputContext(console), info=pr_info(num=0), github=github)
        github.upsert_sticky_comment.assert_not_called()
        assert "Exiting: the reporter is not running against a GitHub pull request." in capsys.readouterr().err

    def test_coming_soon(self, ctx: RunContext, capsys: pytest.CaptureFixture[str]) -> None:
        console, _ = capture()
        execute(ctx, options(ReportType.GH_PULL_REVIEW), response(), OutputContext(console), info=pr_info())
        assert 'The "gh-pull-review" reporter is coming soon...' in capsys.readouterr().err

    def test_failure_is_wrapped(self, ctx: RunContext) -> None:
        github = MagicMock()
        github.upsert_sticky_comment.side_effect = AuthError("GitHub rejected the token (401)")
        console, _ = capture()
        with pytest.raises(ReporterError) as exc_info:
            execute(ctx, options(ReportType.GH_PULL_COMMENT), response(), OutputContext(console), info=pr_info(), github=github)
        assert str(exc_info.value).startswith('error while executing the "gh-pull-comment" reporter')
        assert exc_info.value.exit_code == 4

    def test_own_github_client_is_closed(self, ctx: RunContext) -> None:
        console, _ = capture()
        with patch("lstn.reporters.comment.GitHubClient") as client_class:
            client_class.return_value.upsert_sticky_comment.side_effect = NetworkError("boom")
            with pytest.raises(ReporterError):
                execute(ctx, options(ReportType.GH_PULL_COMMENT), response(), OutputContext(console), info=pr_info())
        client_class.assert_called_once_with("token")
        client_class.return_value.close.assert_called_once()

    def test_given_github_client_is_left_open(self, ctx: RunContext) -> None:
        github = MagicMock()
        console, _ = capture()
        execute(ctx, options(ReportType.GH_PULL_COMMENT), response(), OutputContext(console), info=pr_info(), github=github)
        github.close.assert_not_called()

    def test_no_reporters(self, ctx: RunContext, capsys: pytest.CaptureFixture[str]) -> None:
        console, _ = capture()
        execute(ctx, options(), response(), OutputContext(console))
        assert capsys.readouterr().err == ""


class TestProReporter:
    """Tests for the pro reporter."""

    def test_one_event_per_verdict(self, ctx: RunContext) -> None:
        core = MagicMock()
        reporter = ProReporter(ctx, options(), pr_info(), core=core)
        reporter.run(response())
        assert core.dependencies_event.call_count == 2
        payloads = [c.args[1] for c in core.dependencies_event.call_args_list]
        assert {p["verdict"]["code"] for p in payloads} == {"FNI001", "TSN002"}

    def test_requires_jwt(self, ctx: RunContext) -> None:
        reporter = ProReporter(ctx, options(jwt_token=""), pr_info())
        with pytest.raises(AuthError, match="requires the JWT token"):
            reporter.run(response())

    def test_first_failure_is_raised(self, ctx: RunContext) -> None:
        core = MagicMock()
        core.dependencies_event.side_effect = NetworkError("dependencies event request to the core API didn't work out (500)")
        with pytest.raises(NetworkError):
            ProReporter(ctx, options(), pr_info(), core=core).run(response())

    def test_github_context_identifiers_are_strings(self) -> None:
        context = github_context(pr_info())
        assert context["repository"] == "listendev/lstn"
        assert context["repository_id"] == "123"
        assert context["run_id"] == "456"
        assert context["event_name"] == "pull_request"
        assert "workflow" not in context

    def test_dependency_event(self) -> None:
        verdict = response()[0].verdicts[0]
        event = dependency_event(verdict, pr_info())
        assert event["verdict"]["message"] == "unexpected outbound connection destination"
        assert event["github_context"]["sha"] == ""

    def test_own_core_client_is_closed(self, ctx: RunContext) -> None:
        with patch("lstn.reporters.pro.CoreClient") as client_class:
            ProReporter(ctx, options(), pr_info()).run(response())
        client_class.assert_called_once_with("https://core.listen.dev", "jwt")
        assert client_class.return_value.dependencies_event.call_count == 2
        client_class.return_value.close.assert_called_once()
