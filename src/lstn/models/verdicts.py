"""Wire models for the verdicts returned by listen.dev.

A response is an ordered list of packages, each carrying its verdicts
(in server order) and its problems.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

SEVERITY_LOW = "low"
SEVERITY_MEDIUM = "medium"
SEVERITY_HIGH = "high"
SEVERITIES = (SEVERITY_HIGH, SEVERITY_MEDIUM, SEVERITY_LOW)

UNKNOWN_CODE = "UNK"

_ORIGIN_NAME_KEYS = ("npm_package_name", "pkg_name")
_ORIGIN_VERSION_KEYS = ("npm_package_version", "pkg_version")


class Verdict(BaseModel):
    """A single opinion about a package version."""

    model_config = ConfigDict(extra="allow")

    message: str = Field(description="Human readable verdict")
    severity: str = Field(default=SEVERITY_LOW, description="One of low, medium, high")
    code: str = Field(default="", description="Detector code (e.g. STN001)")
    pkg: str = Field(default="", description="Package name the verdict is about")
    org: str = Field(default="", description="Package scope (npm) if any")
    version: str = Field(default="", description="Package version the verdict is about")
    digest: str = Field(default="")
    ecosystem: str = Field(default="")
    file: str = Field(default="")
    fingerprint: str = Field(default="")
    categories: list[str] = Field(default_factory=list)
    created_at: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("severity", mode="before")
    @classmethod
    def _lowercase_severity(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value

    @property
    def code_group(self) -> str:
        """Three-letter detector family of the code (STN, TSN, ...)."""
        return self.code[:3]

    def origin(self) -> tuple[str, str]:
        """Name and version of the package that triggered the verdict, from its metadata."""
        name = next((self.metadata[k] for k in _ORIGIN_NAME_KEYS if self.metadata.get(k)), "")
        version = next((self.metadata[k] for k in _ORIGIN_VERSION_KEYS if self.metadata.get(k)), "")
        return str(name), str(version)

    def is_transitive(self, name: str | None = None, version: str | None = None) -> bool:
        """Whether the verdict comes from a dependency of the package it is attached to."""
        origin_name, origin_version = self.origin()
        if not origin_name or not origin_version:
            return False
        name = name if name is not None else self.pkg
        version = version if version is not None else self.version
        return origin_name != name and origin_version != version


class Problem(BaseModel):
    """A structured error surfaced for a package (RFC 7807 style)."""

    model_config = ConfigDict(extra="allow")

    type: str = Field(default="", description="Problem type URI")
    title: str = Field(default="")
    detail: str = Field(default="")


class Package(BaseModel):
    """Verdicts and problems of one package version."""

    model_config = ConfigDict(extra="allow")

    name: str
    version: str | None = None
    digest: str | None = None
    verdicts: list[Verdict] = Field(default_factory=list)
    problems: list[Problem] = Field(default_factory=list)

    def known_verdicts(self) -> list[Verdict]:
        return [v for v in self.verdicts if v.code != UNKNOWN_CODE]

    @property
    def label(self) -> str:
        return f"{self.name}@{self.version}" if self.version else self.name


Response = list[Package]

_response_adapter = TypeAdapter(list[Package])


def decode_response(data: bytes | str) -> Response:
    """Decode a JSON response body.

    Raises:
        pydantic.ValidationError: If the body does not match the response shape
    """
    return _response_adapter.validate_json(data)


def dump_response(response: Response) -> list[dict[str, Any]]:
    return _response_adapter.dump_python(response, mode="json", exclude_none=True)


def all_verdicts(response: Response) -> list[Verdict]:
    return [v for p in response for v in p.verdicts]
