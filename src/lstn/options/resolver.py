"""Resolution of option models from defaults, config file, environment and flags.

Precedence, lowest to highest: compiled-in defaults, the configuration file,
``LSTN_*`` environment variables, command-line flags. A value only overrides
the one below it when it differs from the default.
"""

import json
import os
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ValidationError

from ..config import ConfigSource
from ..constants import ENV_PREFIX
from ..errors import ConfigError, compose
from .fields import BOOL, COUNT, ENUM_LIST, INT, LIST, Leaf, get_value, set_value, walk
from .transform import transform
from .validate import is_empty, validate

_TRUE = ("1", "t", "true", "yes", "y", "on")
_FALSE = ("0", "f", "false", "no", "n", "off", "")


def env_variable(flag: str, prefix: str = ENV_PREFIX) -> str:
    """Environment variable of a flag: ``LSTN_`` plus the flag upper-cased, dashes and dots as underscores."""
    return f"{prefix}_{flag.upper().replace('-', '_').replace('.', '_')}"


class EnvSource:
    """Option values coming from the environment."""

    def __init__(self, environ: Mapping[str, str] | None = None, prefix: str = ENV_PREFIX) -> None:
        self.environ = os.environ if environ is None else environ
        self.prefix = prefix

    def lookup(self, flag: str | None) -> str | None:
        if not flag:
            return None
        return self.environ.get(env_variable(flag, self.prefix)) or None


def split_list(raw: Any) -> list[str]:
    """Split comma-separated values, accepting YAML lists too."""
    items = raw if isinstance(raw, list | tuple) else [raw]
    values = []
    for item in items:
        if item is None:
            continue
        text = str(item).strip()
        if text.startswith("[") and text.endswith("]"):
            text = text[1:-1]
        values.extend(v.strip() for v in text.split(",") if v.strip())
    return values


def _parse_choice(leaf: Leaf, value: str) -> Any:
    choices = leaf.choices
    assert choices is not None
    parse = getattr(choices, "parse", None)
    try:
        if parse is not None:
            return parse(value)
        return choices(value.strip().lower())
    except ValueError:
        allowed = ", ".join(c.value for c in choices)
        raise ConfigError(f'{leaf.flag}: "{value}" is not one of {allowed}') from None


def coerce(leaf: Leaf, raw: Any) -> Any:
    """Convert a raw value (env string, YAML value, flag value) to the type of a leaf.

    Raises:
        ConfigError: If the value cannot be converted
    """
    if leaf.kind == BOOL:
        if isinstance(raw, bool):
            return raw
        text = str(raw).strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
        raise ConfigError(f"{leaf.human_name} must be a boolean; got {raw}")
    if leaf.kind in (INT, COUNT):
        if isinstance(raw, bool):
            raise ConfigError(f"{leaf.human_name} must be a valid number; got {raw}")
        try:
            return int(str(raw).strip())
        except ValueError:
            raise ConfigError(f"{leaf.human_name} must be a valid number; got {raw}") from None
    if leaf.kind == LIST:
        return split_list(raw)
    if leaf.kind == ENUM_LIST:
        return [_parse_choice(leaf, v) for v in split_list(raw)]
    return str(raw)


def _union(current: list[Any], extra: list[Any]) -> list[Any]:
    return list(dict.fromkeys([*current, *extra]))


def precedence(default: Any, outer: Any, flag: Any, union: bool = False) -> Any:
    """Pick the value of one option.

    The outer value (environment or configuration file) applies when it is
    not empty and differs from the default. The flag value applies over it
    when it differs from the default. With ``union`` the values accumulate
    instead of replacing each other.
    """
    value = default
    if outer is not None and not is_empty(outer) and outer != default:
        value = _union(value, outer) if union else outer
    if flag is not None and flag != default:
        value = _union(value, flag) if union else flag
    return value


class Resolver:
    """Materialize the option model of one subcommand invocation."""

    def __init__(
        self,
        model: type[BaseModel],
        exclusions: frozenset[str] = frozenset(),
        config: ConfigSource | None = None,
        env: EnvSource | None = None,
    ) -> None:
        self.model = model
        self.exclusions = exclusions
        self.config = config or ConfigSource()
        self.env = env or EnvSource()

    def leaves(self) -> list[Leaf]:
        return walk(self.model, self.exclusions)

    def outer_value(self, leaf: Leaf, default: Any) -> Any:
        """Value from the environment when set and not the default, from the config file otherwise."""
        raw = self.env.lookup(leaf.flag)
        if raw is not None:
            value = coerce(leaf, raw)
            if not is_empty(value) and value != default:
                return value
        raw = self.config.lookup(leaf.flag, leaf.json_path)
        if raw is None:
            return None
        return coerce(leaf, raw)

    def flag_value(self, leaf: Leaf, given: Any, default: Any) -> Any:
        """Value of the flag, the default when it was not given."""
        if given is None or (leaf.kind in (LIST, ENUM_LIST) and not given):
            return default
        if leaf.kind == COUNT and not given:
            return default
        if leaf.kind == BOOL and given is False:
            return default
        return coerce(leaf, given)

    def resolve(self, flags: Mapping[str, Any] | None = None) -> BaseModel:
        """Merge, validate and transform.

        Raises:
            ConfigError: If a value cannot be converted or the options are invalid
        """
        flags = flags or {}
        options = self.model()
        for leaf in self.leaves():
            default = get_value(options, leaf.path)
            outer = self.outer_value(leaf, default)
            flag = self.flag_value(leaf, flags.get(leaf.param_name), default)
            value = precedence(default, outer, flag, union=leaf.kind == ENUM_LIST)
            try:
                set_value(options, leaf.path, value)
            except ValidationError as e:
                raise ConfigError(f"{leaf.human_name}: {e.errors()[0]['msg']}") from None

        errors = validate(options)
        if errors:
            raise ConfigError(compose("invalid configuration options/flags", errors))
        transform(options)
        return options


def as_json(options: BaseModel) -> str:
    """Pretty-printed JSON of the options, keys sorted."""
    return json.dumps(options.model_dump(by_alias=True, mode="json"), indent=2, sort_keys=True)
