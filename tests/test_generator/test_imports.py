"""Tests for apitestgen.generator.imports -- import reconciliation."""

from __future__ import annotations

import libcst as cst

from apitestgen.generator.imports import ImportPlan, package_import


class TestPackageImport:
    def test_nested_package(self) -> None:
        assert package_import("myapp.api") == ("myapp", "api")
        assert package_import("a.b.c") == ("a.b", "c")

    def test_top_level_module(self) -> None:
        assert package_import("myapp") == ("myapp", None)


class TestImportPlan:
    def test_output_package_skipped(self) -> None:
        plan = ImportPlan("myapp.tests")
        plan.add_package("myapp.tests")
        assert len(plan) == 0

    def test_deduplicated_and_sorted(self) -> None:
        plan = ImportPlan("myapp.tests")
        plan.add_modules(["urllib.parse", "jinja2"])
        plan.add_package("myapp.api")
        plan.add_modules(["jinja2"])
        plan.add_runtime_helper()
        plan.add_runtime_helper()
        assert plan.imports == [
            ("apitestgen.runtime", "expect_type"),
            ("jinja2", None),
            ("myapp", "api"),
            ("urllib.parse", None),
        ]

    def test_apply_adds_missing_imports(self) -> None:
        module = cst.parse_module("import json\n\n\ndef f():\n    pass\n")
        plan = ImportPlan("myapp.tests")
        plan.add_package("myapp.api")
        plan.add_modules(["urllib.parse"])
        code = plan.apply(module).code
        assert "from myapp import api\n" in code
        assert "import urllib.parse\n" in code
        assert code.count("import json\n") == 1

    def test_apply_keeps_existing_imports(self) -> None:
        module = cst.parse_module("import jinja2\nfrom myapp import api\n\nx = 1\n")
        plan = ImportPlan("myapp.tests")
        plan.add_modules(["jinja2"])
        plan.add_package("myapp.api")
        assert plan.apply(module).code == module.code

    def test_apply_without_imports_is_identity(self) -> None:
        module = cst.parse_module("x = 1\n")
        assert ImportPlan("p").apply(module) is module
