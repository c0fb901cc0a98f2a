"""Client of the npm registry."""

from typing import Any

import httpx
import semver

from ...constants import DEFAULT_NPM_REGISTRY
from ...context import RunContext
from ...errors import DecodingError, InputError, NetworkError
from ...services.http import decode_json, new_client, send
from ...services.ua import user_agent
from .. import versions


class Registry:
    """Read package documents from an npm registry."""

    def __init__(self, base_url: str = DEFAULT_NPM_REGISTRY, client: httpx.Client | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = client or new_client()

    def fetch(self, ctx: RunContext, name: str, version: str | None = None) -> dict[str, Any]:
        """GET ``<registry>/<name>[/<version>]``.

        Raises:
            InputError: If the name is empty
            NetworkError: If the registry does not answer 200
        """
        if not name:
            raise InputError("the name is mandatory to query the npm registry")
        url = f"{self.base_url}/{name}"
        if version:
            url += f"/{version}"
        response = send(self._client, ctx, "GET", url, headers={"User-Agent": user_agent("npm")})
        if response.status_code != httpx.codes.OK:
            raise NetworkError(f"the npm registry response for {url} was not ok")
        data = decode_json(response, "the npm registry response")
        if not isinstance(data, dict):
            raise DecodingError("couldn't decode the npm registry response")
        return data

    def versions(
        self,
        ctx: RunContext,
        name: str,
        constraint: versions.Constraint | None = None,
    ) -> list[semver.Version]:
        """Published versions of a package matching the constraint, ascending."""
        data = self.fetch(ctx, name)
        return versions.select((data.get("versions") or {}).keys(), constraint)

    def shasum(self, ctx: RunContext, name: str, version: str) -> str:
        data = self.fetch(ctx, name, version)
        return str((data.get("dist") or {}).get("shasum") or "")

    def close(self) -> None:
        self._client.close()
