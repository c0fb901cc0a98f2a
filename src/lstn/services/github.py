"""GitHub REST API client, limited to what the reporters need."""

import re
from typing import Any

import httpx

from ..constants import GITHUB_API_URL, STICKY_COMMENT_MARKER
from ..context import RunContext
from ..errors import AuthError, DecodingError, NetworkError
from .http import decode_json, new_client, send
from .ua import user_agent

_NEXT_LINK_RE = re.compile(r'<([^>]+)>;\s*rel="next"')

PER_PAGE = 100


def sticky_body(body: str) -> str:
    return f"{STICKY_COMMENT_MARKER}\n\n{body}"


class GitHubClient:
    """Thin wrapper around the issue comments endpoints of the GitHub REST API."""

    def __init__(
        self,
        token: str,
        base_url: str = GITHUB_API_URL,
        client: httpx.Client | None = None,
    ) -> None:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": user_agent("github"),
        }
        if token:
            headers["Authorization"] = f"token {token}"
        self._client = client or new_client()
        self._base_url = base_url.rstrip("/")
        self._headers = headers

    def _request(self, ctx: RunContext, method: str, url: str, **kwargs: Any) -> httpx.Response:
        if not url.startswith("http"):
            url = f"{self._base_url}{url}"
        response = send(self._client, ctx, method, url, headers=self._headers, **kwargs)
        if response.status_code in (httpx.codes.UNAUTHORIZED, httpx.codes.FORBIDDEN):
            raise AuthError(f"GitHub rejected the token ({response.status_code})")
        if not response.is_success:
            raise NetworkError(f"GitHub {method} {url} answered {response.status_code}")
        return response

    def list_issue_comments(self, ctx: RunContext, owner: str, repo: str, number: int) -> list[dict[str, Any]]:
        """Every comment of an issue (or pull request), following pagination."""
        comments: list[dict[str, Any]] = []
        url: str | None = f"/repos/{owner}/{repo}/issues/{number}/comments"
        params: dict[str, Any] | None = {"per_page": PER_PAGE}
        while url:
            response = self._request(ctx, "GET", url, params=params)
            page = decode_json(response, "the GitHub comments")
            if not isinstance(page, list):
                raise DecodingError("couldn't decode the GitHub comments")
            comments.extend(page)
            match = _NEXT_LINK_RE.search(response.headers.get("Link", ""))
            url = match[1] if match else None
            params = None
        return comments

    def create_issue_comment(self, ctx: RunContext, owner: str, repo: str, number: int, body: str) -> dict[str, Any]:
        response = self._request(ctx, "POST", f"/repos/{owner}/{repo}/issues/{number}/comments", json={"body": body})
        return decode_json(response, "the created GitHub comment")

    def edit_issue_comment(self, ctx: RunContext, owner: str, repo: str, comment_id: int, body: str) -> dict[str, Any]:
        response = self._request(
            ctx, "PATCH", f"/repos/{owner}/{repo}/issues/comments/{comment_id}", json={"body": body}
        )
        return decode_json(response, "the updated GitHub comment")

    def upsert_sticky_comment(
        self,
        ctx: RunContext,
        owner: str,
        repo: str,
        number: int,
        body: str,
    ) -> dict[str, Any]:
        """Update the comment starting with the marker, or create it.

        The pull request ends up with exactly one comment carrying the marker.
        """
        content = sticky_body(body)
        for comment in self.list_issue_comments(ctx, owner, repo, number):
            if str(comment.get("body") or "").startswith(STICKY_COMMENT_MARKER):
                return self.edit_issue_comment(ctx, owner, repo, comment["id"], content)
        return self.create_issue_comment(ctx, owner, repo, number, content)

    def close(self) -> None:
        self._client.close()
