"""Rewrite interpolation strings into lookups.

Two string forms in a test specification stand for runtime values rather
than text. A string literal whose whole value is one of them is replaced
by an expression:

``${name:type}``
    A lookup into the test function's variables, checked against ``type``::

        expect_type(atgen_vars["name"], type)

``$register[path]`` (also ``$atgenRegister[path]``)
    A walk through responses stored by earlier tests. ``path`` follows
    ``ident ('.' ident | '[' digit+ ']')*``; dotted segments are mapping
    keys, bracketed segments are list indices, and the result must be a
    string::

        $register[a.b[0].c]  ->  expect_type(atgen_register["a"]["b"][0]["c"], str)

``type`` is a dotted Python name. The Go spellings used by older
specifications (``string``, ``float64``, ``map[string]interface{}`` ...)
are mapped to their Python counterparts.
"""

from __future__ import annotations

import re
from typing import Optional

import libcst as cst

from apitestgen.exceptions import AssemblyError
from apitestgen.generator.literals import render, string_literal
from apitestgen.generator.sentinels import (
    REGISTER_STORE,
    TYPE_ASSERTION_HELPER,
    VARS_STORE,
    string_value,
)

_VAR_RE = re.compile(r"\$\{([^:}]+):(.+)\}")
_REGISTER_RE = re.compile(r"\$(?:register|atgenRegister)\[(.*)\]")
_REGISTER_PATH_RE = re.compile(r"[A-Za-z_]\w*(?:\.[A-Za-z_]\w*|\[\d+\])*")
_SEGMENT_RE = re.compile(r"\.?([A-Za-z_]\w*)|\[(\d+)\]")
_TYPE_NAME_RE = re.compile(r"[A-Za-z_]\w*(?:\.[A-Za-z_]\w*)*")

LEGACY_TYPES: dict[str, str] = {
    "string": "str",
    "int64": "int",
    "int32": "int",
    "float64": "float",
    "float32": "float",
    "map[string]interface{}": "dict",
    "[]interface{}": "list",
}


def _python_type(name: str) -> str:
    name = LEGACY_TYPES.get(name.strip(), name.strip())
    if not _TYPE_NAME_RE.fullmatch(name):
        raise AssemblyError(f"Unsupported type {name!r} in variable interpolation")
    return name


def var_lookup(name: str, type_name: str) -> str:
    """Source of the expression for ``${name:type_name}``.

    *name* is any variable key, quoted as a string literal.
    """
    key = render(string_literal(name))
    return f"{TYPE_ASSERTION_HELPER}({VARS_STORE}[{key}], {_python_type(type_name)})"


def register_lookup(path: str) -> str:
    """Source of the expression for ``$register[path]``.

    Raises:
        AssemblyError: If *path* does not follow the register path grammar.
    """
    if not _REGISTER_PATH_RE.fullmatch(path):
        raise AssemblyError(
            f"Invalid register path {path!r}: expected ident('.'ident|'['digits']')*"
        )
    chain = REGISTER_STORE
    for match in _SEGMENT_RE.finditer(path):
        key, index = match.groups()
        chain += f'["{key}"]' if key is not None else f"[{int(index)}]"
    return f"{TYPE_ASSERTION_HELPER}({chain}, str)"


def interpolate(text: str) -> Optional[str]:
    """Return the replacement source for *text*, or ``None`` if it is plain text."""
    match = _VAR_RE.fullmatch(text)
    if match:
        return var_lookup(match.group(1), match.group(2))
    match = _REGISTER_RE.fullmatch(text)
    if match:
        return register_lookup(match.group(1))
    return None


class InterpolationRewriter(cst.CSTTransformer):
    """Replace every interpolation string literal in a tree.

    After visiting, :attr:`rewritten` counts the replacements so callers
    know whether the type-assertion helper must be imported.
    """

    def __init__(self) -> None:
        super().__init__()
        self.rewritten = 0

    def leave_SimpleString(self, original_node, updated_node):
        value = string_value(updated_node)
        if value is None:
            return updated_node
        replacement = interpolate(value)
        if replacement is None:
            return updated_node
        self.rewritten += 1
        return cst.parse_expression(replacement)
