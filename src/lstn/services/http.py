"""HTTP plumbing shared by the listen.dev, GitHub and npm registry clients."""

import json
import logging
from typing import Any

import httpx

from ..context import RunContext
from ..errors import DecodingError, NetworkError

logger = logging.getLogger(__name__)

# Upper bound of a single request when the run has no deadline
REQUEST_TIMEOUT = 30.0


def new_client(
    base_url: str = "",
    headers: dict[str, str] | None = None,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    return httpx.Client(base_url=base_url, headers=headers, transport=transport, timeout=REQUEST_TIMEOUT)


def send(client: httpx.Client, ctx: RunContext, method: str, url: str, **kwargs: Any) -> httpx.Response:
    """Perform a request bounded by the run deadline.

    Raises:
        CancelledError: If the run is done, before or while requesting
        NetworkError: If the request could not be performed or timed out on its own
    """
    ctx.check()
    try:
        response = client.request(method, url, timeout=ctx.timeout(REQUEST_TIMEOUT), **kwargs)
    except httpx.TimeoutException as e:
        # Only the run deadline cancels, a slow endpoint is a plain failure
        err = ctx.error()
        if err is not None:
            raise err from None
        raise NetworkError(f"the request to {url} timed out: {e}") from e
    except httpx.HTTPError as e:
        raise NetworkError(f"couldn't perform the request to {url}: {e}") from e
    logger.debug(f"{method} {response.request.url} -> {response.status_code}")
    return response


def decode_json(response: httpx.Response, what: str) -> Any:
    """Decode a JSON body.

    Raises:
        DecodingError: If the body is not JSON
    """
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DecodingError(f"couldn't decode {what}") from e


def error_message(response: httpx.Response) -> str:
    """Message carried by an error body (``{"message": ...}``), if any."""
    try:
        body = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return ""
    if isinstance(body, dict):
        return str(body.get("message") or "")
    return ""
