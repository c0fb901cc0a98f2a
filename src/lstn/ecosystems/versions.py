"""Semantic versions and npm-style version constraints.

Versions are ``semver.Version`` objects. Constraints follow the npm range
grammar: x-ranges, caret and tilde ranges, primitive comparators, hyphen
ranges, space-joined intersections and ``||`` unions.
"""

import re
from collections.abc import Iterable

import semver

_PARTIAL_RE = re.compile(
    r"^(?P<op><=|>=|<|>|=|\^|~>|~|)\s*v?"
    r"(?P<major>\*|x|X|\d+)"
    r"(?:\.(?P<minor>\*|x|X|\d+))?"
    r"(?:\.(?P<patch>\*|x|X|\d+))?"
    r"(?:-(?P<pre>[0-9A-Za-z.-]+))?"
    r"(?:\+[0-9A-Za-z.-]+)?$"
)
_HYPHEN_RE = re.compile(r"^\s*(\S+)\s+-\s+(\S+)\s*$")
_SPACED_OP_RE = re.compile(r"(<=|>=|<|>|=|\^|~>|~)\s+")
_WILDCARDS = {"*", "x", "X"}

Comparator = tuple[str, semver.Version]


def parse_version(value: str) -> semver.Version:
    """Parse a strict semantic version.

    Raises:
        ValueError: If the value is not a semantic version
    """
    return semver.Version.parse(value.strip())


def is_version(value: str) -> bool:
    try:
        parse_version(value)
    except (ValueError, TypeError):
        return False
    return True


def _num(part: str | None) -> int | None:
    if part is None or part in _WILDCARDS:
        return None
    return int(part)


def _floor(major: int, minor: int | None, patch: int | None, pre: str | None = None) -> semver.Version:
    return semver.Version(major, minor or 0, patch or 0, prerelease=pre)


def _expand(token: str) -> list[Comparator]:
    """Turn one range token into a list of comparators (an intersection)."""
    match = _PARTIAL_RE.match(token)
    if match is None:
        raise ValueError(f"invalid version constraint: {token}")
    op = match["op"]
    major, minor, patch = _num(match["major"]), _num(match["minor"]), _num(match["patch"])
    pre = match["pre"]
    if major is None:
        minor = patch = None
    elif minor is None:
        patch = None

    if major is None:
        if op in ("<", ">"):
            return [("<", semver.Version(0, 0, 0))]
        return []

    if op in ("", "="):
        if patch is not None:
            return [("=", _floor(major, minor, patch, pre))]
        if minor is None:
            return [(">=", _floor(major, 0, 0)), ("<", semver.Version(major + 1, 0, 0))]
        return [(">=", _floor(major, minor, 0)), ("<", semver.Version(major, minor + 1, 0))]

    if op == "^":
        low = _floor(major, minor, patch, pre)
        if major > 0 or minor is None:
            high = semver.Version(major + 1, 0, 0)
        elif minor > 0 or patch is None:
            high = semver.Version(0, minor + 1, 0)
        else:
            high = semver.Version(0, 0, patch + 1)
        return [(">=", low), ("<", high)]

    if op in ("~", "~>"):
        low = _floor(major, minor, patch, pre)
        if minor is None:
            return [(">=", low), ("<", semver.Version(major + 1, 0, 0))]
        return [(">=", low), ("<", semver.Version(major, minor + 1, 0))]

    if op == ">":
        if patch is not None:
            return [(">", _floor(major, minor, patch, pre))]
        if minor is None:
            return [(">=", semver.Version(major + 1, 0, 0))]
        return [(">=", semver.Version(major, minor + 1, 0))]

    if op == ">=":
        return [(">=", _floor(major, minor, patch, pre))]

    if op == "<":
        return [("<", _floor(major, minor, patch, pre))]

    # <=
    if patch is not None:
        return [("<=", _floor(major, minor, patch, pre))]
    if minor is None:
        return [("<", semver.Version(major + 1, 0, 0))]
    return [("<", semver.Version(major, minor + 1, 0))]


def _hyphen(low: str, high: str) -> list[Comparator]:
    comparators = [c for c in _expand(low) if c[0] != "<"]
    if comparators and comparators[0][0] == "=":
        comparators = [(">=", comparators[0][1])]
    upper = _expand("<=" + high) if high not in _WILDCARDS else []
    return comparators + upper


def _satisfies(version: semver.Version, op: str, bound: semver.Version) -> bool:
    cmp = version.compare(bound)
    if op == "=":
        return cmp == 0
    if op == ">":
        return cmp > 0
    if op == ">=":
        return cmp >= 0
    if op == "<":
        return cmp < 0
    return cmp <= 0


class Constraint:
    """An npm-style version range: a union of comparator intersections."""

    def __init__(self, raw: str) -> None:
        self.raw = raw
        self.sets: list[list[Comparator]] = []
        for alternative in raw.split("||"):
            alternative = alternative.strip()
            if alternative in ("", "latest"):
                self.sets.append([])
                continue
            hyphen = _HYPHEN_RE.match(alternative)
            if hyphen:
                self.sets.append(_hyphen(hyphen[1], hyphen[2]))
                continue
            normalized = _SPACED_OP_RE.sub(lambda m: m[1], alternative)
            comparators: list[Comparator] = []
            for token in normalized.split():
                comparators.extend(_expand(token))
            self.sets.append(comparators)

    def __str__(self) -> str:
        return self.raw

    def matches(self, version: semver.Version) -> bool:
        for comparators in self.sets:
            if not all(_satisfies(version, op, bound) for op, bound in comparators):
                continue
            # Pre-releases only match comparators sharing their major.minor.patch
            if version.prerelease and not any(
                bound.prerelease and bound.finalize_version() == version.finalize_version()
                for _, bound in comparators
            ):
                continue
            return True
        return False


def parse_constraint(raw: str) -> Constraint:
    """Parse an npm-style version constraint.

    Raises:
        ValueError: If the constraint is malformed
    """
    return Constraint(raw)


def is_constraint(value: str) -> bool:
    try:
        parse_constraint(value)
    except ValueError:
        return False
    return True


def select(candidates: Iterable[str], constraint: Constraint | None = None) -> list[semver.Version]:
    """Parse the candidates, keep those matching the constraint, sorted ascending.

    Candidates that are not semantic versions are ignored.
    """
    selected = []
    for candidate in candidates:
        try:
            version = parse_version(candidate)
        except ValueError:
            continue
        if constraint is None or constraint.matches(version):
            selected.append(version)
    return sorted(selected)


def highest(candidates: Iterable[semver.Version]) -> semver.Version | None:
    """Default resolution strategy: the highest semantic version."""
    ordered = sorted(candidates)
    return ordered[-1] if ordered else None
