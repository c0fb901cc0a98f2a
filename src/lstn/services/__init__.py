"""External service integrations for lstn.

This package provides interfaces to external tools and services:
- listen: listen.dev verdicts and analysis APIs
- core: listen.dev core API (CI settings, events, dashboard)
- github: GitHub issue comments
- git: Git repository information
- system: Operating system details
- jq: jq expressions
- http: HTTP plumbing shared by the clients
"""

from .core import CoreClient, settings_tokens
from .git import get_author, get_remotes, get_repo_root, get_user, git_context, run_git
from .github import GitHubClient, sticky_body
from .http import new_client, send
from .listen import ListenClient, api_url, is_local
from .system import os_info
from .ua import user_agent

__all__ = [
    "CoreClient",
    "GitHubClient",
    "ListenClient",
    "api_url",
    "get_author",
    "get_remotes",
    "get_repo_root",
    "get_user",
    "git_context",
    "is_local",
    "new_client",
    "os_info",
    "run_git",
    "send",
    "settings_tokens",
    "sticky_body",
    "user_agent",
]
