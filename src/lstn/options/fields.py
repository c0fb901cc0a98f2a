"""Option fields: pydantic fields carrying flag metadata, and the walker over them.

An option model is a pydantic model whose leaves are declared with :func:`option`.
Flag groups are mixed in by inheritance (so their keys stay flat in JSON) while
nested models (like ``endpoint``) keep their own JSON object.
"""

import inspect
import types
import typing
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field
from pydantic.fields import FieldInfo

BOOL = "bool"
INT = "int"
COUNT = "count"
STRING = "string"
LIST = "list"
ENUM_LIST = "enum_list"


def option(
    default: Any = None,
    *,
    json: str,
    flag: str | None = None,
    desc: str = "",
    shorthand: str | None = None,
    flagset: str | None = None,
    name: str | None = None,
    validate: str = "",
    transform: str = "",
    count: bool = False,
    default_factory: Any = None,
) -> Any:
    """Declare an option field.

    Args:
        default: Compiled-in default value
        json: Key used when dumping the options as JSON
        flag: Long flag name; fields without one get no flag
        desc: Flag description
        shorthand: One-letter flag
        flagset: Group label shown in the usage
        name: Humanized name used in validation errors
        validate: Comma-separated validation rules
        transform: Comma-separated transformation rules
        count: Whether an int flag counts its occurrences
        default_factory: Callable producing the default (for mutable or dynamic defaults)
    """
    extra = {
        "flag": flag,
        "desc": desc,
        "shorthand": shorthand,
        "flagset": flagset,
        "name": name,
        "validate": validate,
        "transform": transform,
        "count": count,
    }
    if default_factory is not None:
        return Field(default_factory=default_factory, alias=json, description=desc, json_schema_extra=extra)
    return Field(default, alias=json, description=desc, json_schema_extra=extra)


@dataclass(frozen=True)
class Leaf:
    """A primitive option field reachable from the root of an option model."""

    path: tuple[str, ...]
    json_path: tuple[str, ...]
    kind: str
    flag: str | None
    desc: str = ""
    shorthand: str | None = None
    flagset: str | None = None
    name: str | None = None
    validate: str = ""
    transform: str = ""
    choices: type[Enum] | None = None

    @property
    def fqn(self) -> str:
        """Fully-qualified name: the dot-joined JSON path."""
        return ".".join(self.json_path)

    @property
    def param_name(self) -> str:
        """Name of the click parameter bound to the flag."""
        return (self.flag or self.fqn).replace("-", "_").replace(".", "_")

    @property
    def human_name(self) -> str:
        return self.name or self.flag or self.fqn


def metadata(info: FieldInfo) -> dict[str, Any]:
    extra = info.json_schema_extra
    return extra if isinstance(extra, dict) else {}


def _unwrap_optional(annotation: Any) -> Any:
    origin = typing.get_origin(annotation)
    if origin in (typing.Union, types.UnionType):
        args = [a for a in typing.get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def _kind(annotation: Any, count: bool) -> tuple[str, type[Enum] | None]:
    annotation = _unwrap_optional(annotation)
    if annotation is bool:
        return BOOL, None
    if annotation is int:
        return (COUNT if count else INT), None
    if annotation is str:
        return STRING, None
    if typing.get_origin(annotation) is list:
        (item,) = typing.get_args(annotation)
        if inspect.isclass(item) and issubclass(item, Enum):
            return ENUM_LIST, item
        return LIST, None
    raise TypeError(f"unsupported option type: {annotation!r}")


def is_model(annotation: Any) -> bool:
    return inspect.isclass(annotation) and issubclass(annotation, BaseModel)


def walk(
    model: type[BaseModel],
    exclusions: frozenset[str] | set[str] = frozenset(),
    prefix: tuple[str, ...] = (),
    json_prefix: tuple[str, ...] = (),
) -> list[Leaf]:
    """Collect the leaves of an option model, skipping excluded flags.

    A nested model exposing a ``define_flags(prefix, json_prefix, exclusions)``
    classmethod owns its leaves: it is asked for them instead of being walked.
    """
    leaves: list[Leaf] = []
    for attr, info in model.model_fields.items():
        json_key = info.alias or attr
        annotation = _unwrap_optional(info.annotation)
        if is_model(annotation):
            define = getattr(annotation, "define_flags", None)
            if define is not None:
                leaves.extend(define(prefix + (attr,), json_prefix + (json_key,), exclusions))
            else:
                leaves.extend(walk(annotation, exclusions, prefix + (attr,), json_prefix + (json_key,)))
            continue

        meta = metadata(info)
        flag = meta.get("flag")
        if flag and flag in exclusions:
            continue
        kind, choices = _kind(annotation, bool(meta.get("count")))
        leaves.append(
            Leaf(
                path=prefix + (attr,),
                json_path=json_prefix + (json_key,),
                kind=kind,
                flag=flag,
                desc=meta.get("desc") or "",
                shorthand=meta.get("shorthand"),
                flagset=meta.get("flagset"),
                name=meta.get("name"),
                validate=meta.get("validate") or "",
                transform=meta.get("transform") or "",
                choices=choices,
            )
        )
    return leaves


def get_value(obj: BaseModel, path: tuple[str, ...]) -> Any:
    for attr in path:
        obj = getattr(obj, attr)
    return obj


def set_value(obj: BaseModel, path: tuple[str, ...], value: Any) -> None:
    *parents, last = path
    for attr in parents:
        obj = getattr(obj, attr)
    setattr(obj, last, value)


def names(model: type[BaseModel]) -> dict[str, Leaf]:
    """Map every flag name of an option model to its leaf."""
    return {leaf.flag: leaf for leaf in walk(model) if leaf.flag}
