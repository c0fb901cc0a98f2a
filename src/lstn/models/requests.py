"""Request payloads for the listen.dev verdicts and analysis endpoints."""

import base64
from typing import Any

from pydantic import BaseModel, Field

from .context import AnalysisContext


class VerdictsRequest(BaseModel):
    """Ask for the verdicts of one package (optionally one version and digest)."""

    name: str = Field(min_length=1)
    version: str | None = None
    digest: str | None = None
    select: str | None = None
    context: AnalysisContext | None = None

    def payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class AnalysisRequest(BaseModel):
    """Ask for the analysis of a whole lockfile, embedded base64-encoded."""

    manifest: str = Field(min_length=1)
    context: AnalysisContext | None = None

    @classmethod
    def from_lockfile(cls, raw: bytes, context: AnalysisContext | None = None) -> "AnalysisRequest":
        return cls(manifest=base64.b64encode(raw).decode("ascii"), context=context)

    def payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
