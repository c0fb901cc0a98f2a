"""Tag-driven validation of option models and single values.

Rules are declared per field as a comma-separated string (``"omitempty,url"``),
each rule optionally carrying a parameter (``"min=30"``). Errors use the
humanized field name.
"""

import os
import re
from collections.abc import Callable
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from pydantic import BaseModel

from ..ecosystems import versions
from .fields import Leaf, get_value, walk

ENDPOINT_RE = re.compile(r"^(http://(localhost|127\.0\.0\.1)(:\d{1,5})?|https://.*\.listen\.dev)")
NPM_PACKAGE_NAME_RE = re.compile(r"^(?:@[a-z0-9-*~][a-z0-9-*._~]*/)?[a-z0-9-~][a-z0-9-._~]*$")
SHASUM_RE = re.compile(r"^[0-9a-f]{40}$")
DIGEST_RE = re.compile(r"^([0-9a-f]{40}|[0-9a-f]{64})$")
NPM_PACKAGE_NAME_MAX_LENGTH = 214


class Check:
    """Context handed to a rule: the value, the rule parameter, and its surroundings."""

    def __init__(self, value: Any, param: str, name: str, root: BaseModel | None, leaves: dict[str, Leaf]):
        self.value = value
        self.param = param
        self.name = name
        self.root = root
        self.leaves = leaves

    def sibling(self, key: str) -> Any:
        if self.root is None or key not in self.leaves:
            return None
        return get_value(self.root, self.leaves[key].path)


Rule = Callable[[Check], str | None]


def is_empty(value: Any) -> bool:
    return value is None or value == "" or value == 0 or value is False or value == [] or value == ()


def _mandatory(c: Check) -> str | None:
    if is_empty(c.value):
        return f"{c.name} is mandatory"
    return None


def _notblank(c: Check) -> str | None:
    if isinstance(c.value, str) and not c.value.strip():
        return f"{c.name} must not be blank"
    return None


def _min(c: Check) -> str | None:
    if c.value < int(c.param):
        return f"{c.name} must be {c.param} or greater"
    return None


def _max(c: Check) -> str | None:
    if c.value > int(c.param):
        return f"{c.name} must be {c.param} or less"
    return None


def _number(c: Check) -> str | None:
    if isinstance(c.value, bool) or not isinstance(c.value, int):
        return f"{c.name} must be a valid number"
    return None


def is_url(value: str) -> bool:
    parsed = urlparse(value)
    return bool(parsed.scheme) and bool(parsed.netloc or parsed.path)


def _url(c: Check) -> str | None:
    if not isinstance(c.value, str) or not is_url(c.value):
        return f"{c.name} must be a valid URL"
    return None


def is_endpoint(value: str) -> bool:
    return bool(ENDPOINT_RE.match(value))


def _endpoint(c: Check) -> str | None:
    if not is_endpoint(c.value):
        return f"{c.name} must be a valid listen.dev endpoint"
    return None


def _semver(c: Check) -> str | None:
    if not versions.is_version(c.value):
        return f"{c.name} must be a valid semver version"
    return None


def _constraint(c: Check) -> str | None:
    if not versions.is_constraint(c.value):
        return f"{c.name} must be a valid version constraint"
    return None


def is_npm_package_name(value: str) -> bool:
    if not value or len(value) > NPM_PACKAGE_NAME_MAX_LENGTH:
        return False
    return bool(NPM_PACKAGE_NAME_RE.match(value))


def _npm_package_name(c: Check) -> str | None:
    if not is_npm_package_name(c.value):
        return f"{c.name} must be a valid npm package name"
    return None


def _shasum(c: Check) -> str | None:
    if not SHASUM_RE.match(c.value):
        return f"{c.name} must be a valid shasum"
    return None


def _digest(c: Check) -> str | None:
    if not DIGEST_RE.match(c.value):
        return f"{c.name} must be a valid digest"
    return None


def _dir(c: Check) -> str | None:
    path = Path(c.value)
    if not path.is_dir() or not os.access(path, os.R_OK):
        return f"{c.name} must be a valid directory"
    return None


def _file(c: Check) -> str | None:
    path = Path(c.value)
    if not path.is_file() or not os.access(path, os.R_OK):
        return f"{c.name} must be a valid file"
    return None


def _excluded_without(c: Check) -> str | None:
    if is_empty(c.sibling(c.param)):
        return f"{c.name} is an excluded field"
    return None


def _jq(c: Check) -> str | None:
    from ..services import jq

    if not jq.compiles(c.value):
        return f"{c.name} must be a valid jq expression"
    return None


RULES: dict[str, Rule] = {
    "mandatory": _mandatory,
    "notblank": _notblank,
    "min": _min,
    "gte": _min,
    "max": _max,
    "number": _number,
    "url": _url,
    "endpoint": _endpoint,
    "semver": _semver,
    "version_constraint": _constraint,
    "npm_package_name": _npm_package_name,
    "shasum": _shasum,
    "digest": _digest,
    "dir": _dir,
    "file": _file,
    "excluded_without": _excluded_without,
    "jq": _jq,
}


def parse_rules(rules: str) -> list[tuple[str, str]]:
    parsed = []
    for rule in filter(None, (r.strip() for r in rules.split(","))):
        name, _, param = rule.partition("=")
        parsed.append((name, param))
    return parsed


def check_value(
    value: Any,
    rules: str,
    name: str,
    root: BaseModel | None = None,
    leaves: dict[str, Leaf] | None = None,
) -> str | None:
    """Validate a single value, returning the first error (if any)."""
    for rule, param in parse_rules(rules):
        if rule == "omitempty":
            if is_empty(value):
                return None
            continue
        if rule not in RULES:
            raise ValueError(f"unknown validation rule: {rule}")
        err = RULES[rule](Check(value, param, name, root, leaves or {}))
        if err:
            return err
    return None


def validate(options: BaseModel) -> list[str]:
    """Validate every field of an option model, in declaration order."""
    leaves = walk(type(options))
    by_key = {leaf.flag or leaf.fqn: leaf for leaf in leaves}
    by_key.update({leaf.path[-1]: leaf for leaf in leaves})
    errors = []
    for leaf in leaves:
        if not leaf.validate:
            continue
        err = check_value(get_value(options, leaf.path), leaf.validate, leaf.human_name, options, by_key)
        if err:
            errors.append(err)
    return errors
