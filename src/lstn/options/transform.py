"""Tag-driven in-place transformations of option models."""

from collections.abc import Callable
from typing import Any

from pydantic import BaseModel

from .fields import get_value, set_value, walk


def _trim_suffix(value: Any, param: str) -> Any:
    if isinstance(value, str) and param:
        return value.removesuffix(param)
    return value


def _trim(value: Any, _: str) -> Any:
    return value.strip() if isinstance(value, str) else value


def _lower(value: Any, _: str) -> Any:
    return value.lower() if isinstance(value, str) else value


def _unique(value: Any, _: str) -> Any:
    if isinstance(value, list):
        return list(dict.fromkeys(value))
    return value


TRANSFORMS: dict[str, Callable[[Any, str], Any]] = {
    "tsuffix": _trim_suffix,
    "trim": _trim,
    "lcase": _lower,
    "unique": _unique,
}


def apply(value: Any, rules: str) -> Any:
    for rule in filter(None, (r.strip() for r in rules.split(","))):
        name, _, param = rule.partition("=")
        if name not in TRANSFORMS:
            raise ValueError(f"unknown transformation: {name}")
        value = TRANSFORMS[name](value, param)
    return value


def transform(options: BaseModel) -> None:
    for leaf in walk(type(options)):
        if leaf.transform:
            set_value(options, leaf.path, apply(get_value(options, leaf.path), leaf.transform))
