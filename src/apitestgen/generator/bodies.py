"""Request-body expressions, one synthesiser per content type.

The template calls ``atgen_request_body()`` wherever the request payload is
needed. The rewriter swaps that call for the expression built here:

* ``JSON`` -- ``json.dumps(atgen_req_params).encode()``
* ``FORM`` -- an inline function that URL-encodes every param and returns
  the encoded bytes
* ``RAW`` -- an inline function that renders ``req.body`` through a
  one-field Jinja2 template and returns the rendered bytes; render errors
  propagate to the generated test

Each variant also names the helper modules the generated file must import.
The set is fixed per variant and registered whether or not the synthesised
expression uses every module.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import libcst as cst

from apitestgen.generator.literals import string_literal
from apitestgen.generator.literals import render as render_node
from apitestgen.generator.sentinels import Slot, token
from apitestgen.models import ContentType, RequestSpec


@dataclass(frozen=True)
class BodySynthesis:
    expression: cst.BaseExpression
    imports: tuple[str, ...]
    # RAW bodies carry no structured params; the params assignment is dropped.
    drops_params: bool = False


def _json_body(req: RequestSpec) -> BodySynthesis:
    params = token(Slot.REQ_PARAMS)
    return BodySynthesis(cst.parse_expression(f"json.dumps({params}).encode()"), ())


def _form_body(req: RequestSpec) -> BodySynthesis:
    params = token(Slot.REQ_PARAMS)
    expression = cst.parse_expression(
        "(lambda params: urllib.parse.urlencode("
        "[(key, str(value)) for key, value in params.items()]"
        f").encode())({params})"
    )
    return BodySynthesis(expression, FORM_IMPORTS)


def _raw_body(req: RequestSpec) -> BodySynthesis:
    body = render_node(string_literal(req.body))
    expression = cst.parse_expression(
        f'(lambda: jinja2.Template("{{{{ body }}}}").render(body={body}).encode())()'
    )
    return BodySynthesis(expression, RAW_IMPORTS, drops_params=True)


FORM_IMPORTS: tuple[str, ...] = ("urllib.parse",)
RAW_IMPORTS: tuple[str, ...] = ("jinja2",)

_SYNTHESISERS: dict[ContentType, Callable[[RequestSpec], BodySynthesis]] = {
    ContentType.JSON: _json_body,
    ContentType.FORM: _form_body,
    ContentType.RAW: _raw_body,
}


def synthesize_body(req: RequestSpec) -> BodySynthesis:
    """Build the body expression and helper imports for *req*."""
    return _SYNTHESISERS[req.type](req)
