"""jq expressions evaluated over JSON documents."""

import io
import json
import math
import re
from typing import Any, TextIO

import jq

from ..constants import EXIT_JQ_HALT
from ..errors import HaltError, JQError

_HALT_TAG = "__lstn_halt__"

# The binding ends the program silently on halt_error, so it is redefined to
# raise an error carrying the exit code and the value
_PRELUDE = (
    f'def halt_error($code): error("{_HALT_TAG}:\\($code):" + (if type == "string" then . else tojson end)); '
    f"def halt_error: halt_error({EXIT_JQ_HALT}); "
)

_HALT_RE = re.compile(rf"{_HALT_TAG}:(-?\d+):(.*)", re.DOTALL)


def compile_expression(expression: str) -> Any:
    """Compile a jq expression.

    Raises:
        JQError: If the expression does not compile
    """
    try:
        return jq.compile(_PRELUDE + expression)
    except ValueError as e:
        raise JQError(str(e)) from None


def compiles(expression: str) -> bool:
    try:
        compile_expression(expression)
    except JQError:
        return False
    return True


def _runtime_error(e: ValueError) -> JQError:
    match = _HALT_RE.search(str(e))
    if match is None:
        return JQError(str(e))
    return HaltError(match[2].rstrip("\n"), int(match[1]))


def scalar_to_string(value: Any) -> str | None:
    """Text of a scalar output, None for arrays and objects."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isfinite(value) and math.trunc(value) == value:
            return str(int(value))
        return f"{value:.2f}"
    return None


def format_value(value: Any) -> str:
    """Scalars as text, the rest as compact JSON."""
    text = scalar_to_string(value)
    return text if text is not None else json.dumps(value, separators=(",", ":"))


def stream(expression: str, data: Any, output: TextIO) -> None:
    """Run an expression against a decoded JSON value, writing one line per output as it comes.

    Outputs produced before a failure are written.

    Raises:
        HaltError: If the expression halts with an error value
        JQError: If the expression fails to compile or to run
    """
    program = compile_expression(expression)
    try:
        for value in program.input_value(data):
            output.write(f"{format_value(value)}\n")
    except ValueError as e:
        raise _runtime_error(e) from None


def render(expression: str, data: Any) -> str:
    """Evaluate and format every output, one per line."""
    buffer = io.StringIO()
    stream(expression, data, buffer)
    return buffer.getvalue()
