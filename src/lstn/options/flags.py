"""Flag groups composing the option models of the subcommands.

Groups are mixed in by inheritance so their keys stay flat in the JSON form
of the options. The endpoints are the exception: they live under
``endpoint`` and name their own flags (``<ecosystem>-endpoint``).
"""

import dataclasses

from pydantic import BaseModel, ConfigDict, Field

from ..ci.info import try_info
from ..constants import (
    DEFAULT_CORE_ENDPOINT,
    DEFAULT_NPM_ENDPOINT,
    DEFAULT_NPM_REGISTRY,
    DEFAULT_PYPI_ENDPOINT,
    DEFAULT_TIMEOUT,
    MIN_TIMEOUT,
)
from ..ecosystems import Lockfile
from ..ecosystems.npm.deptype import ALWAYS_IGNORED, DepType
from ..models.reporting import ReportType
from .fields import Leaf, option, walk

CONFIG = "Config"
TOKEN = "Token"
REGISTRY = "Registry"
REPORTING = "Reporting"
FILTERING = "Filtering"
DEBUG = "Debug"


class OptionModel(BaseModel):
    """Base of every option model: populated by alias or attribute, assignments validated."""

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True, extra="forbid")


class EndpointFlags(OptionModel):
    npm: str = option(
        DEFAULT_NPM_ENDPOINT,
        json="npm",
        desc="the listen.dev endpoint emitting the verdicts for npm packages",
        flagset=CONFIG,
        validate="url,endpoint",
        transform="tsuffix=/",
    )
    pypi: str = option(
        DEFAULT_PYPI_ENDPOINT,
        json="pypi",
        desc="the listen.dev endpoint emitting the verdicts for PyPI packages",
        flagset=CONFIG,
        validate="url,endpoint",
        transform="tsuffix=/",
    )
    core: str = option(
        DEFAULT_CORE_ENDPOINT,
        json="core",
        desc="the listen.dev Core API endpoint",
        flagset=CONFIG,
        validate="url",
        transform="tsuffix=/",
    )

    @classmethod
    def define_flags(
        cls,
        prefix: tuple[str, ...],
        json_prefix: tuple[str, ...],
        exclusions: frozenset[str] | set[str],
    ) -> list[Leaf]:
        leaves = []
        for leaf in walk(cls, frozenset(), prefix, json_prefix):
            flag = f"{leaf.json_path[-1]}-{json_prefix[-1]}"
            if flag not in exclusions:
                leaves.append(dataclasses.replace(leaf, flag=flag))
        return leaves


class TokenFlags(OptionModel):
    gh_token: str = option(
        "",
        json="gh-token",
        flag="gh-token",
        desc="set the GitHub token",
        flagset=TOKEN,
        name="GitHub token",
        validate="omitempty,notblank",
    )
    jwt_token: str = option(
        "",
        json="jwt-token",
        flag="jwt-token",
        desc="set the listen.dev auth token",
        flagset=TOKEN,
        name="JWT token",
        validate="omitempty,notblank",
    )


class MandatoryTokenFlags(OptionModel):
    gh_token: str = option(
        "",
        json="gh-token",
        flag="gh-token",
        desc="set the GitHub token",
        flagset=TOKEN,
        name="GitHub token",
        validate="mandatory,notblank",
    )
    jwt_token: str = option(
        "",
        json="jwt-token",
        flag="jwt-token",
        desc="set the listen.dev auth token",
        flagset=TOKEN,
        name="JWT token",
        validate="mandatory,notblank",
    )


class RegistryFlags(OptionModel):
    npm_registry: str = option(
        DEFAULT_NPM_REGISTRY,
        json="npm-registry",
        flag="npm-registry",
        desc="set a custom NPM registry",
        flagset=REGISTRY,
        validate="url",
        transform="tsuffix=/",
    )


def _ci_owner() -> str:
    info = try_info()
    return info.owner if info else ""


def _ci_repo() -> str:
    info = try_info()
    return info.repo if info else ""


def _ci_pull_id() -> int:
    info = try_info()
    return info.num if info else 0


class ReportingFlags(OptionModel):
    reporter: list[ReportType] = option(
        json="reporter",
        flag="reporter",
        shorthand="r",
        desc="set one or more reporters to use",
        flagset=REPORTING,
        transform="unique",
        default_factory=list,
    )
    gh_owner: str = option(
        json="gh-owner",
        flag="gh-owner",
        desc="set the GitHub owner name (org|user)",
        flagset=REPORTING,
        default_factory=_ci_owner,
    )
    gh_repo: str = option(
        json="gh-repo",
        flag="gh-repo",
        desc="set the GitHub repository name",
        flagset=REPORTING,
        default_factory=_ci_repo,
    )
    gh_pull_id: int = option(
        json="gh-pull-id",
        flag="gh-pull-id",
        desc="set the GitHub pull request ID",
        flagset=REPORTING,
        default_factory=_ci_pull_id,
    )


class FilteringFlags(OptionModel):
    ignore_packages: list[str] = option(
        json="ignore-packages",
        flag="ignore-packages",
        desc="list of packages to not process",
        flagset=FILTERING,
        transform="unique",
        default_factory=list,
    )
    ignore_deptypes: list[DepType] = option(
        json="ignore-deptypes",
        flag="ignore-deptypes",
        desc="list of dependencies types to not process",
        flagset=FILTERING,
        transform="unique",
        default_factory=lambda: [ALWAYS_IGNORED],
    )
    select: str = option(
        "",
        json="select",
        flag="select",
        shorthand="s",
        desc="filter the output verdicts using a jsonpath script expression (server-side)",
        flagset=FILTERING,
    )


class ConfigFlags(RegistryFlags, ReportingFlags, FilteringFlags):
    loglevel: str = option(
        "info",
        json="loglevel",
        flag="loglevel",
        desc="set the logging level",
        flagset=CONFIG,
        transform="trim,lcase",
    )
    timeout: int = option(
        DEFAULT_TIMEOUT,
        json="timeout",
        flag="timeout",
        desc="set the timeout, in seconds",
        flagset=CONFIG,
        validate=f"number,min={MIN_TIMEOUT}",
    )
    endpoint: EndpointFlags = Field(default_factory=EndpointFlags, alias="endpoint")
    lockfiles: list[str] = option(
        json="lockfiles",
        flag="lockfiles",
        shorthand="l",
        desc="list of lockfiles to process",
        flagset=CONFIG,
        transform="unique",
        default_factory=lambda: [lf.value for lf in Lockfile],
    )
    genlock: bool = option(
        False,
        json="genlock",
        flag="genlock",
        desc="generate the package-lock.json on the fly (requires npm)",
        flagset=CONFIG,
    )


class DebugFlags(OptionModel):
    debug_options: bool = option(
        False,
        json="debug-options",
        flag="debug-options",
        desc="output the options, then exit",
        flagset=DEBUG,
    )


class JSONFlags(OptionModel):
    json_output: bool = option(
        False,
        json="json",
        flag="json",
        desc="output the verdicts (if any) in JSON form",
    )
    jq: str = option(
        "",
        json="jq",
        flag="jq",
        shorthand="q",
        desc="filter the output verdicts using a jq expression (requires --json)",
        validate="omitempty,excluded_without=json,jq",
    )
