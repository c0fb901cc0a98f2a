"""Client of the listen.dev verdicts and analysis APIs."""

import logging
from typing import Any, TextIO
from urllib.parse import urlparse

import httpx
from pydantic import ValidationError

from ..context import RunContext
from ..ecosystems import Ecosystem
from ..errors import AuthError, DecodingError, NetworkError
from ..models.requests import AnalysisRequest, VerdictsRequest
from ..models.verdicts import Response, decode_response
from . import jq
from .http import error_message, new_client, send
from .ua import user_agent

logger = logging.getLogger(__name__)

VERDICTS = "verdicts"
ANALYSIS = "analysis"
_LOCAL_HOSTS = ("localhost", "127.0.0.1")


def is_local(endpoint: str) -> bool:
    return urlparse(endpoint).hostname in _LOCAL_HOSTS


def api_url(endpoint: str, ecosystem: Ecosystem, kind: str) -> str:
    """URL of an API on an endpoint.

    Remote endpoints are per ecosystem already. A local endpoint serves
    every ecosystem so the ecosystem goes into the path.
    """
    endpoint = endpoint.rstrip("/")
    if is_local(endpoint):
        return f"{endpoint}/api/{ecosystem.value}/{kind}"
    return f"{endpoint}/api/{kind}"


class ListenClient:
    """POST verdict and analysis requests for one ecosystem."""

    def __init__(
        self,
        endpoint: str,
        ecosystem: Ecosystem = Ecosystem.NPM,
        token: str = "",
        caller: str = "",
        client: httpx.Client | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.ecosystem = ecosystem
        self.token = token
        self.caller = caller
        self._client = client or new_client()

    def headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": user_agent(self.caller),
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def verdicts(
        self,
        ctx: RunContext,
        request: VerdictsRequest,
        jq_expression: str = "",
        output: TextIO | None = None,
    ) -> Response:
        """Get the verdicts of one package.

        When a jq expression and an output stream are given, the payload
        filtered through the expression is written there first.
        """
        return self._post(ctx, api_url(self.endpoint, self.ecosystem, VERDICTS), request.payload(), jq_expression, output)

    def analysis(
        self,
        ctx: RunContext,
        request: AnalysisRequest,
        jq_expression: str = "",
        output: TextIO | None = None,
    ) -> Response:
        """Get the verdicts of every package pinned by a lockfile."""
        return self._post(ctx, api_url(self.endpoint, self.ecosystem, ANALYSIS), request.payload(), jq_expression, output)

    def _post(
        self,
        ctx: RunContext,
        url: str,
        payload: dict[str, Any],
        jq_expression: str,
        output: TextIO | None,
    ) -> Response:
        response = send(self._client, ctx, "POST", url, json=payload, headers=self.headers())
        if response.status_code != httpx.codes.OK:
            message = error_message(response)
            if message:
                logger.debug(f"{url}: {message}")
            err = f"unexpected status code: {response.status_code}"
            if response.status_code in (httpx.codes.UNAUTHORIZED, httpx.codes.FORBIDDEN):
                raise AuthError(err)
            raise NetworkError(err)

        try:
            decoded = decode_response(response.content)
        except ValidationError as e:
            raise DecodingError(f"couldn't decode the response from {url}") from e

        if jq_expression and output is not None:
            jq.stream(jq_expression, response.json(), output)
        return decoded

    def close(self) -> None:
        self._client.close()
