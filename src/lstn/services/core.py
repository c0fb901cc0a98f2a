"""Client of the listen.dev core API used by the CI commands and the pro reporter."""

import logging
from typing import Any

import httpx

from ..context import RunContext
from ..errors import AuthError, DecodingError, NetworkError
from .http import decode_json, error_message, new_client, send
from .ua import user_agent

logger = logging.getLogger(__name__)

SETTINGS_PATH = "/api/v1/settings"
CONFIG_PATH = "/api/v1/config"
NETPOLICY_PATH = "/api/v1/netpolicy"
NETWORK_EVENTS_PATH = "/api/v1/network_events"
WEBHOOK_PATH = "/api/v1/webhook"
DASHBOARD_LINK_PATH = "/api/v1/dashboard/link"
DEPENDENCIES_EVENT_PATH = "/api/v1/dependencies/event"

WEBHOOK_ACCEPTED = (httpx.codes.ACCEPTED, httpx.codes.NO_CONTENT)


class CoreClient:
    """Authenticated calls to the core API with the JWT token."""

    def __init__(self, endpoint: str, token: str, client: httpx.Client | None = None) -> None:
        self.endpoint = endpoint.rstrip("/")
        self._client = client or new_client()
        self._headers = {
            "Accept": "application/json",
            "Authorization": f"Bearer {token}",
            "User-Agent": user_agent("core"),
        }

    def _request(self, ctx: RunContext, method: str, path: str, what: str, **kwargs: Any) -> httpx.Response:
        response = send(self._client, ctx, method, f"{self.endpoint}{path}", headers=self._headers, **kwargs)
        if response.status_code in (httpx.codes.UNAUTHORIZED, httpx.codes.FORBIDDEN):
            raise AuthError(f"{what} request to the core API was not authorized ({response.status_code})")
        return response

    def _get_ok(self, ctx: RunContext, path: str, what: str, params: dict[str, str] | None = None) -> Any:
        response = self._request(ctx, "GET", path, what, params=params)
        if response.status_code != httpx.codes.OK:
            message = error_message(response)
            if message:
                logger.debug(f"{what}: {message}")
            raise NetworkError(f"{what} request to the core API didn't work out ({response.status_code})")
        return decode_json(response, f"the {what} response")

    def settings(self, ctx: RunContext) -> dict[str, Any]:
        data = self._get_ok(ctx, SETTINGS_PATH, "settings")
        if not isinstance(data, dict) or not data:
            raise DecodingError("got empty settings from the core API")
        return data

    def monitor_config(self, ctx: RunContext) -> dict[str, Any]:
        data = self._get_ok(ctx, CONFIG_PATH, "config")
        if not isinstance(data, dict):
            raise DecodingError("couldn't decode the config response")
        return data

    def network_policy(self, ctx: RunContext, repository: str, repository_id: str) -> Any:
        params = {"repository": repository, "repository_id": repository_id}
        return self._get_ok(ctx, NETPOLICY_PATH, "netpolicy", params=params)

    def network_events(self, ctx: RunContext, params: dict[str, str]) -> list[dict[str, Any]]:
        data = self._get_ok(ctx, NETWORK_EVENTS_PATH, "network events", params=params)
        if data is None:
            return []
        if not isinstance(data, list):
            raise DecodingError("couldn't decode the network events response")
        return data

    def webhook(self, ctx: RunContext, payload: dict[str, Any]) -> bool:
        """Notify the webhook. Any answer but 202/204 is logged and reported as False."""
        response = self._request(ctx, "POST", WEBHOOK_PATH, "webhook", json=payload)
        if response.status_code not in WEBHOOK_ACCEPTED:
            logger.warning(f"webhook request to the core API didn't work out ({response.status_code})")
            return False
        return True

    def dashboard_link(self, ctx: RunContext, params: dict[str, str]) -> str:
        data = self._get_ok(ctx, DASHBOARD_LINK_PATH, "dashboard link", params=params)
        if isinstance(data, dict):
            return str(data.get("link") or data.get("url") or "")
        return str(data or "")

    def dependencies_event(self, ctx: RunContext, payload: dict[str, Any]) -> None:
        response = self._request(ctx, "POST", DEPENDENCIES_EVENT_PATH, "dependencies event", json=payload)
        if not response.is_success:
            raise NetworkError(f"dependencies event request to the core API didn't work out ({response.status_code})")

    def close(self) -> None:
        self._client.close()


def settings_tokens(settings: dict[str, Any]) -> list[str]:
    """``KEY=VALUE`` lines of the tokens carried by the settings, sorted by key."""
    tokens = settings.get("tokens")
    if not isinstance(tokens, dict):
        tokens = {k: v for k, v in settings.items() if isinstance(v, str)}
    return [f"{key}={tokens[key]}" for key in sorted(tokens)]
