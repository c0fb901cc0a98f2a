"""Reporter keeping one sticky comment with the full report on the pull request."""

import logging
from typing import Any

from ..ci.info import Info
from ..context import RunContext
from ..models.reporting import ReportType
from ..models.verdicts import Response
from ..services.github import GitHubClient
from .base import NOT_ON_PULL_REQUEST, READONLY_TOKEN, Reporter, ReporterUnavailable
from .markdown import full_report

logger = logging.getLogger(__name__)


class CommentReporter(Reporter):
    report_type = ReportType.GH_PULL_COMMENT

    def __init__(self, ctx: RunContext, options: Any, info: Info, github: GitHubClient | None = None) -> None:
        super().__init__(ctx, options, info)
        self.github = github

    def check(self) -> None:
        if not self.info.is_github_pull_request():
            raise ReporterUnavailable(NOT_ON_PULL_REQUEST)
        if self.info.has_readonly_github_token():
            raise ReporterUnavailable(READONLY_TOKEN)

    def run(self, response: Response, body: str | None = None) -> None:
        """Upsert the sticky comment with ``body``, or with the full report of the response."""
        owner = self.options.gh_owner or self.info.owner
        repo = self.options.gh_repo or self.info.repo
        number = self.options.gh_pull_id or self.info.num
        if body is None:
            body = full_report(response)
        logger.debug(f"Commenting on {owner}/{repo}#{number}")
        github = self.github or GitHubClient(self.options.gh_token)
        try:
            github.upsert_sticky_comment(self.ctx, owner, repo, number, body)
        finally:
            if github is not self.github:
                github.close()
