"""Tests for apitestgen.generator.interpolation."""

from __future__ import annotations

import libcst as cst
import pytest

from apitestgen.exceptions import AssemblyError
from apitestgen.generator.interpolation import (
    InterpolationRewriter,
    interpolate,
    register_lookup,
    var_lookup,
)
from apitestgen.runtime import expect_type


class TestVarLookup:
    def test_python_type(self) -> None:
        assert var_lookup("token", "str") == 'expect_type(atgen_vars["token"], str)'

    @pytest.mark.parametrize(
        "legacy,python",
        [
            ("string", "str"),
            ("int64", "int"),
            ("float64", "float"),
            ("map[string]interface{}", "dict"),
            ("[]interface{}", "list"),
        ],
    )
    def test_legacy_types(self, legacy: str, python: str) -> None:
        assert var_lookup("x", legacy).endswith(f", {python})")

    def test_dotted_type(self) -> None:
        assert var_lookup("when", "datetime.date").endswith(", datetime.date)")

    @pytest.mark.parametrize("name", ["user-id", "api.key", "two words", 'quo"te'])
    def test_any_key_is_quoted(self, name: str) -> None:
        namespace = {"expect_type": expect_type, "atgen_vars": {name: "value"}}
        assert eval(var_lookup(name, "str"), namespace) == "value"  # noqa: S307

    def test_bad_type_raises(self) -> None:
        with pytest.raises(AssemblyError, match="Unsupported type"):
            var_lookup("x", "str; import os")


class TestRegisterLookup:
    def test_mixed_path(self) -> None:
        assert register_lookup("a.b[0].c") == (
            'expect_type(atgen_register["a"]["b"][0]["c"], str)'
        )

    def test_single_key(self) -> None:
        assert register_lookup("login") == 'expect_type(atgen_register["login"], str)'

    def test_consecutive_indices(self) -> None:
        assert register_lookup("m[1][22]") == 'expect_type(atgen_register["m"][1][22], str)'

    def test_resolves_at_runtime(self) -> None:
        namespace = {
            "expect_type": expect_type,
            "atgen_register": {"a": {"b": [{"c": "found"}]}},
        }
        assert eval(register_lookup("a.b[0].c"), namespace) == "found"  # noqa: S307

    @pytest.mark.parametrize("path", ["", "a..b", "a[x]", "[0]", "a.", "a-b", "a[0"])
    def test_malformed_path_raises(self, path: str) -> None:
        with pytest.raises(AssemblyError, match="Invalid register path"):
            register_lookup(path)


class TestInterpolate:
    def test_plain_text_untouched(self) -> None:
        assert interpolate("/api/v1/login") is None

    def test_partial_match_untouched(self) -> None:
        assert interpolate("Bearer ${token:str}") is None

    def test_var(self) -> None:
        assert interpolate("${token:string}") == 'expect_type(atgen_vars["token"], str)'

    @pytest.mark.parametrize(
        "text,key",
        [("${user-id:string}", "user-id"), ("${api.key:str}", "api.key")],
    )
    def test_var_with_non_identifier_key(self, text: str, key: str) -> None:
        assert interpolate(text) == f'expect_type(atgen_vars["{key}"], str)'

    def test_var_with_legacy_map_type(self) -> None:
        assert interpolate("${cfg:map[string]interface{}}") == 'expect_type(atgen_vars["cfg"], dict)'

    def test_register_spellings(self) -> None:
        expected = 'expect_type(atgen_register["x"], str)'
        assert interpolate("$register[x]") == expected
        assert interpolate("$atgenRegister[x]") == expected


class TestInterpolationRewriter:
    def test_rewrites_and_counts(self) -> None:
        module = cst.parse_module('h = {"a": "${token:str}", "b": "$register[r.id]", "c": "keep"}\n')
        rewriter = InterpolationRewriter()
        result = module.visit(rewriter)
        assert rewriter.rewritten == 2
        assert result.code == (
            'h = {"a": expect_type(atgen_vars["token"], str), '
            '"b": expect_type(atgen_register["r"]["id"], str), "c": "keep"}\n'
        )

    def test_nothing_to_rewrite(self) -> None:
        module = cst.parse_module('x = "plain"\n')
        rewriter = InterpolationRewriter()
        assert module.visit(rewriter).code == 'x = "plain"\n'
        assert rewriter.rewritten == 0
