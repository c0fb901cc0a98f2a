"""Report the network activity the monitor observed into the pull request."""

import logging
from collections import Counter
from typing import Any

from ..context import RunContext
from ..errors import AuthError, NetworkError
from ..output import OutputContext
from ..reporters.base import NOT_ON_PULL_REQUEST
from ..services.core import CoreClient
from ..services.github import GitHubClient
from .info import Info, new_info

logger = logging.getLogger(__name__)

TITLE = "## listen.dev network activity"


def domain_name(event: dict[str, Any]) -> str:
    """Domain an event is about: the dropped remote name, else the resolved name."""
    body = ((event.get("data") or {}).get("body")) or {}
    dropped = (body.get("dropped") or {}).get("remote") or {}
    name = dropped.get("name") if isinstance(dropped, dict) else None
    if name:
        return str(name)
    resolve = body.get("resolve")
    return str(resolve) if resolve else ""


def count_domains(events: list[dict[str, Any]]) -> Counter[str]:
    domains: Counter[str] = Counter()
    for event in events:
        name = domain_name(event)
        if not name:
            logger.debug(f"Skipping event without a domain: {event.get('id', '')}")
            continue
        domains[name] += 1
    return domains


def success_body() -> str:
    return f"{TITLE}\n\n✅ No unexpected network activity during this run.\n"


def domains_body(domains: Counter[str], link: str) -> str:
    """Markdown table of the blocked domains, sorted by domain, with the dashboard link."""
    count = len(domains)
    noun = "domain" if count == 1 else "domains"
    lines = [TITLE, "", f"🚫 Blocked {count} {noun} during this run.", "", "| Domain | Events |", "| --- | --- |"]
    for name in sorted(domains):
        lines.append(f"| `{name}` | {domains[name]} |")
    if link:
        lines.extend(["", f"[Review in dashboard]({link})"])
    return "\n".join(lines) + "\n"


def notify_webhook(ctx: RunContext, core: CoreClient, payload: dict[str, Any], out: OutputContext) -> None:
    """Forward the events to the listen.dev webhook. Failures only warn."""
    try:
        delivered = core.webhook(ctx, payload)
    except (NetworkError, AuthError) as e:
        logger.debug(f"webhook: {e}")
        delivered = False
    if not delivered:
        out.warning("couldn't notify the listen.dev webhook")


def report(
    ctx: RunContext,
    options: Any,
    out: OutputContext,
    core: CoreClient | None = None,
    github: GitHubClient | None = None,
    info: Info | None = None,
) -> str:
    """Collect the network events of the run and post them as a sticky comment.

    Returns the comment body. Clients not given are created and closed here.

    Raises:
        InputError: If not running in a supported CI
        NetworkError: If a core API or GitHub call fails
    """
    info = info or new_info()
    params = info.query_params()

    own_core = core is None
    if core is None:
        core = CoreClient(options.endpoint.core, options.jwt_token)
    try:
        events = core.network_events(ctx, params)
        domains = count_domains(events)
        if not domains:
            body = success_body()
        else:
            notify_webhook(ctx, core, {"events": events, **params}, out)
            link = core.dashboard_link(ctx, params)
            body = domains_body(domains, link)
    finally:
        if own_core:
            core.close()

    if not info.is_github_pull_request():
        out.info(f"Exiting: {NOT_ON_PULL_REQUEST}.")
        return body

    owner = options.gh_owner or info.owner
    repo = options.gh_repo or info.repo
    number = options.gh_pull_id or info.num
    own_github = github is None
    if github is None:
        github = GitHubClient(options.gh_token)
    try:
        github.upsert_sticky_comment(ctx, owner, repo, number, body)
    finally:
        if own_github:
            github.close()
    out.success(f"Reported {len(domains)} domains on {owner}/{repo}#{number}")
    return body
