"""Turn structured spec values into Python literal expressions.

Test specifications carry arbitrary nested data (headers, params, expected
response bodies, variables). :func:`to_literal` renders such a value as a
libcst expression that evaluates back to an equal value:

* ``dict`` -> ``{...}`` with keys sorted by their string form, so output
  never depends on the order keys were loaded in;
* ``list``/``tuple`` -> ``[...]``;
* ``str`` -> a double-quoted string literal;
* ``bool``/``None`` -> ``True``/``False``/``None``;
* ``int``/``float`` -> numeric literals (negative numbers as unary minus,
  non-finite floats as ``float("inf")``-style calls);
* ``date``/``datetime`` (as produced by YAML) -> ISO-8601 strings.
"""

from __future__ import annotations

import datetime
import json
import math
from typing import Any

import libcst as cst

from apitestgen.exceptions import AssemblyError


def string_literal(value: str) -> cst.SimpleString:
    """A double-quoted string literal for *value*.

    JSON string escaping is a subset of Python's, so the result is always
    a valid literal.
    """
    return cst.SimpleString(json.dumps(value, ensure_ascii=False))


def int_literal(value: int) -> cst.BaseExpression:
    if value < 0:
        return cst.UnaryOperation(cst.Minus(), cst.Integer(str(-value)))
    return cst.Integer(str(value))


def _float_literal(value: float) -> cst.BaseExpression:
    if math.isnan(value) or math.isinf(value):
        return cst.Call(cst.Name("float"), [cst.Arg(string_literal(str(value)))])
    if value < 0 or (value == 0 and math.copysign(1.0, value) < 0):
        return cst.UnaryOperation(cst.Minus(), cst.Float(repr(-value)))
    return cst.Float(repr(value))


def _sort_key(item: tuple[Any, Any]) -> str:
    return str(item[0])


def to_literal(value: Any) -> cst.BaseExpression:
    """Render *value* as a literal expression, recursively.

    Raises:
        AssemblyError: If *value* (or something nested in it) has no literal form.
    """
    if value is None:
        return cst.Name("None")
    if isinstance(value, bool):
        return cst.Name("True" if value else "False")
    if isinstance(value, int):
        return int_literal(value)
    if isinstance(value, float):
        return _float_literal(value)
    if isinstance(value, str):
        return string_literal(value)
    if isinstance(value, (datetime.date, datetime.datetime)):
        return string_literal(value.isoformat())
    if isinstance(value, dict):
        return cst.Dict(
            [
                cst.DictElement(to_literal(key), to_literal(item))
                for key, item in sorted(value.items(), key=_sort_key)
            ]
        )
    if isinstance(value, (list, tuple)):
        return cst.List([cst.Element(to_literal(item)) for item in value])
    raise AssemblyError(
        f"Cannot render value of type {type(value).__name__} as a Python literal: {value!r}"
    )


def render(node: cst.CSTNode) -> str:
    """Source text of a single node (handy for logging and tests)."""
    return cst.Module(body=[]).code_for_node(node)
