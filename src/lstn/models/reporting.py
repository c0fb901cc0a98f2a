"""Reporter identifiers accepted by --reporter."""

from enum import Enum


class ReportType(str, Enum):
    GH_PULL_COMMENT = "gh-pull-comment"
    GH_PULL_REVIEW = "gh-pull-review"
    GH_PULL_CHECK = "gh-pull-check"
    PRO = "pro"

    @property
    def doc(self) -> str:
        return _DOCS[self]


_DOCS = {
    ReportType.GH_PULL_COMMENT: (
        "Create a summary comment on the pull request, "
        "updating it in place on the next runs instead of adding new comments."
    ),
    ReportType.GH_PULL_REVIEW: "Review the pull request with inline comments on the dependency changes (coming soon).",
    ReportType.GH_PULL_CHECK: "Report the verdicts as a GitHub check run (coming soon).",
    ReportType.PRO: "Send the verdicts to listen.dev so they show up in the dashboard of your project.",
}
