"""Tests for the fan-out of verdict requests."""

import json
import threading

import httpx
import pytest
from conftest import Recorder

from lstn.context import RunContext
from lstn.core.tracker import PackagesTracker, track_packages
from lstn.errors import CancelledError, HaltError, JQError, NetworkError
from lstn.models.requests import VerdictsRequest
from lstn.models.verdicts import Package, Response
from lstn.services.listen import ListenClient


def found(name: str, version: str | None) -> Response:
    return [Package(name=name, version=version)]


class TestTrackPackages:
    """Tests for track_packages."""

    def test_combines_every_response(self, ctx: RunContext) -> None:
        deps = {
            "Dependencies": [("react", "18.2.0"), ("vue", "3.3.4")],
            "DevDependencies": [("typescript", "5.1.6")],
        }
        response = track_packages(ctx, deps, found)
        assert sorted(p.name for p in response) == ["react", "typescript", "vue"]

    def test_kinds_are_processed_in_order(self, ctx: RunContext) -> None:
        deps = {"First": [("a", "1.0.0")], "Second": [("b", "1.0.0")]}
        response = track_packages(ctx, deps, found)
        assert [p.name for p in response] == ["a", "b"]

    def test_empty_kinds_are_skipped(self, ctx: RunContext) -> None:
        assert track_packages(ctx, {"Dependencies": []}, found) == []

    def test_failures_are_counted_and_dropped(self, ctx: RunContext) -> None:
        def retrieve(name: str, version: str | None) -> Response:
            if name == "broken":
                raise NetworkError("unexpected status code: 500")
            return found(name, version)

        tracker = PackagesTracker(ctx, retrieve)
        response = tracker.track({"Dependencies": [("ok", "1.0.0"), ("broken", "1.0.0"), ("fine", None)]})

        assert sorted(p.name for p in response) == ["fine", "ok"]
        stats = tracker.stats["Dependencies"]
        assert (stats.total, stats.completed, stats.errors) == (3, 2, 1)

    def test_every_dependency_is_retrieved_once(self, ctx: RunContext) -> None:
        seen: list[str] = []
        lock = threading.Lock()

        def retrieve(name: str, version: str | None) -> Response:
            with lock:
                seen.append(name)
            return found(name, version)

        names = [f"pkg-{i}" for i in range(50)]
        tracker = PackagesTracker(ctx, retrieve, workers=4)
        tracker.track({"Dependencies": [(n, "1.0.0") for n in names]})

        assert sorted(seen) == sorted(names)

    def test_cancelled_context(self) -> None:
        ctx = RunContext()
        ctx.cancel()
        with pytest.raises(CancelledError, match="context canceled"):
            track_packages(ctx, {"Dependencies": [("react", "18.2.0")]}, found)

    def test_cancellation_while_running(self) -> None:
        ctx = RunContext()

        def retrieve(name: str, version: str | None) -> Response:
            ctx.cancel()
            return found(name, version)

        with pytest.raises(CancelledError):
            PackagesTracker(ctx, retrieve, workers=1).track({"Dependencies": [("a", None), ("b", None)]})

    def test_retrieval_cancelled(self, ctx: RunContext) -> None:
        def retrieve(name: str, version: str | None) -> Response:
            raise CancelledError("context deadline exceeded")

        with pytest.raises(CancelledError):
            track_packages(ctx, {"Dependencies": [("a", None)]}, retrieve)

    def test_jq_errors_abort(self, ctx: RunContext) -> None:
        def retrieve(name: str, version: str | None) -> Response:
            raise JQError("jq: error: cannot iterate over null")

        with pytest.raises(JQError, match="cannot iterate"):
            track_packages(ctx, {"Dependencies": [("a", None)]}, retrieve)

    def test_halt_keeps_its_exit_code(self, ctx: RunContext) -> None:
        def retrieve(name: str, version: str | None) -> Response:
            raise HaltError("stop", 3)

        with pytest.raises(HaltError) as exc_info:
            track_packages(ctx, {"Dependencies": [("a", None)]}, retrieve)
        assert exc_info.value.exit_code == 3

    def test_slow_endpoint_does_not_cancel_the_run(self, recorder: Recorder) -> None:
        def answer(request: httpx.Request) -> httpx.Response:
            if json.loads(request.content)["name"] == "slow":
                raise httpx.ReadTimeout("timed out", request=request)
            return httpx.Response(200, json=[{"name": "ok", "version": "1.0.0"}])

        recorder.routes[("POST", "/api/verdicts")] = answer
        ctx = RunContext(600)
        client = ListenClient("https://npm.listen.dev", client=recorder.client())

        def retrieve(name: str, version: str | None) -> Response:
            return client.verdicts(ctx, VerdictsRequest(name=name, version=version))

        tracker = PackagesTracker(ctx, retrieve, workers=1)
        response = tracker.track({"Dependencies": [("ok", "1.0.0"), ("slow", "1.0.0")]})

        assert [p.name for p in response] == ["ok"]
        stats = tracker.stats["Dependencies"]
        assert (stats.completed, stats.errors) == (1, 1)
