"""Tests for apitestgen.generator.bodies -- request body synthesis."""

from __future__ import annotations

import json
import urllib.parse

import jinja2
import libcst as cst
import pytest

from apitestgen.generator.bodies import FORM_IMPORTS, RAW_IMPORTS, synthesize_body
from apitestgen.generator.literals import render
from apitestgen.models import ContentType, RequestSpec


def _names(node: cst.CSTNode) -> set[str]:
    names: set[str] = set()

    class _Collect(cst.CSTVisitor):
        def visit_Name(self, name: cst.Name) -> None:
            names.add(name.value)

    node.visit(_Collect())
    return names


def _evaluate(expression: cst.BaseExpression, params: dict) -> bytes:
    namespace = {
        "json": json,
        "urllib": urllib,
        "jinja2": jinja2,
        "atgen_req_params": params,
    }
    return eval(render(expression), namespace)  # noqa: S307


class TestJsonBody:
    def test_serialises_params(self) -> None:
        body = synthesize_body(RequestSpec(type=ContentType.JSON))
        assert body.imports == ()
        assert not body.drops_params
        assert json.loads(_evaluate(body.expression, {"a": 1})) == {"a": 1}

    def test_is_the_default(self) -> None:
        assert synthesize_body(RequestSpec()).imports == ()


class TestFormBody:
    def test_references_only_params(self) -> None:
        body = synthesize_body(RequestSpec(type="form", params={"user": "alice"}))
        assert "atgen_req_params" in _names(body.expression)
        assert "jinja2" not in _names(body.expression)

    def test_fixed_imports(self) -> None:
        body = synthesize_body(RequestSpec(type="form"))
        assert body.imports == FORM_IMPORTS == ("urllib.parse",)
        assert not body.drops_params

    def test_url_encodes_every_param(self) -> None:
        body = synthesize_body(RequestSpec(type="form"))
        encoded = _evaluate(body.expression, {"user": "alice smith", "n": 2})
        assert urllib.parse.parse_qs(encoded.decode()) == {"user": ["alice smith"], "n": ["2"]}


class TestRawBody:
    def test_references_only_body(self) -> None:
        body = synthesize_body(RequestSpec(type="raw", body="hello", params={"x": 1}))
        assert "atgen_req_params" not in _names(body.expression)
        assert '"hello"' in render(body.expression)

    def test_fixed_imports_and_drops_params(self) -> None:
        body = synthesize_body(RequestSpec(type="raw"))
        assert body.imports == RAW_IMPORTS == ("jinja2",)
        assert body.drops_params

    def test_renders_body_verbatim(self) -> None:
        raw = 'user=alice&note="{{ not a variable }}"'
        body = synthesize_body(RequestSpec(type="raw", body=raw))
        assert _evaluate(body.expression, {}) == raw.encode()


class TestDispatch:
    @pytest.mark.parametrize("content_type", list(ContentType))
    def test_every_content_type_has_a_synthesiser(self, content_type: ContentType) -> None:
        body = synthesize_body(RequestSpec(type=content_type))
        assert isinstance(body.expression, cst.BaseExpression)

    def test_fresh_expression_per_call(self) -> None:
        req = RequestSpec(type="form")
        assert synthesize_body(req).expression is not synthesize_body(req).expression
