"""Reporter sending every verdict to the listen.dev core API as a dependency event."""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from ..ci.info import Info
from ..context import RunContext
from ..errors import AuthError
from ..models.reporting import ReportType
from ..models.verdicts import Response, Verdict, all_verdicts
from ..services.core import CoreClient
from .base import ON_FORK, Reporter, ReporterUnavailable

logger = logging.getLogger(__name__)

# GitHub context key -> Info attribute
GITHUB_CONTEXT_FIELDS = {
    "action": "action",
    "action_path": "action_path",
    "action_repository": "action_repository",
    "actor": "actor",
    "actor_id": "actor_id",
    "event_name": "event_name",
    "job": "job",
    "ref": "ref",
    "ref_name": "ref_name",
    "ref_protected": "ref_protected",
    "ref_type": "ref_type",
    "repository": "repo_full_name",
    "repository_id": "repo_id",
    "repository_owner": "repo_owner",
    "repository_owner_id": "repo_owner_id",
    "run_attempt": "run_attempt",
    "run_id": "run_id",
    "run_number": "run_number",
    "runner_arch": "runner_arch",
    "runner_debug": "runner_debug",
    "runner_os": "runner_os",
    "server_url": "server_url",
    "sha": "sha",
    "triggering_actor": "triggering_actor",
    "workflow": "workflow",
    "workflow_ref": "workflow_ref",
    "workspace": "workspace",
}

# Identifiers travel as strings
_STRING_IDS = {"actor_id", "repository_id", "repository_owner_id", "run_attempt", "run_id", "run_number"}


def github_context(info: Info) -> dict[str, Any]:
    context = {}
    for key, attr in GITHUB_CONTEXT_FIELDS.items():
        value = getattr(info, attr)
        if value is None:
            continue
        context[key] = str(value) if key in _STRING_IDS else value
    return context


def dependency_event(verdict: Verdict, info: Info) -> dict[str, Any]:
    return {
        "verdict": verdict.model_dump(mode="json", exclude_none=True),
        "github_context": github_context(info),
    }


class ProReporter(Reporter):
    report_type = ReportType.PRO

    def __init__(self, ctx: RunContext, options: Any, info: Info, core: CoreClient | None = None) -> None:
        super().__init__(ctx, options, info)
        self.core = core

    def check(self) -> None:
        if self.info.has_readonly_github_token():
            raise ReporterUnavailable(ON_FORK)

    def run(self, response: Response, body: str | None = None) -> None:
        """Post one dependency event per verdict, in parallel. The first failure is raised."""
        core = self.core
        if core is None:
            if not self.options.jwt_token:
                raise AuthError("the pro reporter requires the JWT token")
            core = CoreClient(self.options.endpoint.core, self.options.jwt_token)
        try:
            self._send(core, all_verdicts(response))
        finally:
            if core is not self.core:
                core.close()

    def _send(self, core: CoreClient, verdicts: list[Verdict]) -> None:
        if not verdicts:
            logger.debug("No verdicts to send")
            return

        def send(verdict: Verdict) -> None:
            core.dependencies_event(self.ctx, dependency_event(verdict, self.info))

        with ThreadPoolExecutor(max_workers=min(os.cpu_count() or 1, len(verdicts))) as executor:
            futures = [executor.submit(send, v) for v in verdicts]
        for future in futures:
            future.result()
