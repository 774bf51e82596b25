"""Instantiate template skeletons for planned test functions.

For each planned :class:`~apitestgen.models.TestFunction` the
:class:`FunctionBuilder` works on fresh clones only:

1. clone the expansion skeleton and rename it after the function;
2. point the ``atgen_router_func(...)`` call at the function's router --
   unqualified when the router lives in the output package, otherwise
   qualified with the local name of its package;
3. clone the test skeleton once per test (and the subtest skeleton once per
   subtest group) and fill in method, path, status, register key, the
   composite literals and the request body;
4. rewrite ``${name:type}`` and ``$register[path]`` strings;
5. splice the rewritten tests into the skeleton's ``pass`` placeholder and
   fill ``atgen_vars`` with the function's variables.

Imports the generated code needs are accumulated on the builder's
:class:`~apitestgen.generator.imports.ImportPlan`.
"""

from __future__ import annotations

import keyword
import logging
from collections import Counter
from typing import Any, Callable, Sequence

import libcst as cst

from apitestgen.exceptions import AssemblyError
from apitestgen.generator.bodies import BodySynthesis, synthesize_body
from apitestgen.generator.imports import ImportPlan
from apitestgen.generator.interpolation import InterpolationRewriter
from apitestgen.generator.literals import int_literal, string_literal, to_literal
from apitestgen.generator.sentinels import (
    RegionRole,
    Slot,
    SlotKind,
    assign_slot,
    call_slot,
    is_placeholder,
    slot_for,
    string_value,
)
from apitestgen.generator.template import Template
from apitestgen.models import RouterReference, SubtestGroup, Test, TestFunction
from apitestgen.packages import PackageRegistry

logger = logging.getLogger(__name__)


class _PlaceholderSplice(cst.CSTTransformer):
    """Replace the region's ``pass`` placeholder with a list of statements.

    Only a ``pass`` directly in the body of the visited region counts; one
    nested in a ``try``/``except`` or ``if`` inside it is ordinary code.
    With no statements to splice the placeholder is kept so the block stays
    syntactically valid.
    """

    def __init__(self, statements: Sequence[cst.BaseStatement]) -> None:
        super().__init__()
        self._statements = list(statements)
        self._depth = 0

    def visit_IndentedBlock(self, node: cst.IndentedBlock) -> None:
        self._depth += 1

    def leave_IndentedBlock(self, original_node, updated_node):
        self._depth -= 1
        if self._depth or not self._statements:
            return updated_node
        body: list[cst.BaseStatement] = []
        spliced = False
        for stmt in updated_node.body:
            if not spliced and is_placeholder(stmt):
                body.extend(self._statements)
                spliced = True
            else:
                body.append(stmt)
        return updated_node.with_changes(body=body)


class FunctionRewriter(_PlaceholderSplice):
    """Fill the function-level sentinels of a cloned function skeleton."""

    def __init__(
        self,
        fn: TestFunction,
        callee: cst.BaseExpression,
        statements: Sequence[cst.BaseStatement],
    ) -> None:
        super().__init__(statements)
        self._fn = fn
        self._callee = callee

    def leave_Call(self, original_node, updated_node):
        if call_slot(updated_node) is Slot.ROUTER_CALL:
            return updated_node.with_changes(func=self._callee.deep_clone())
        return updated_node

    def leave_Assign(self, original_node, updated_node):
        if assign_slot(updated_node) is Slot.VARS:
            return updated_node.with_changes(value=to_literal(self._fn.vars))
        return updated_node


class SubtestRewriter(_PlaceholderSplice):
    """Name a cloned subtest skeleton and splice its tests in."""

    def __init__(self, group: SubtestGroup, statements: Sequence[cst.BaseStatement]) -> None:
        super().__init__(statements)
        self._group = group

    def leave_SimpleString(self, original_node, updated_node):
        value = string_value(updated_node)
        if value is not None and slot_for(SlotKind.STRING, value) is Slot.SUBTEST_NAME:
            return string_literal(self._group.name)
        return updated_node


class TestRewriter(cst.CSTTransformer):
    """Fill the sentinels of one cloned test skeleton.

    Attributes:
        body: The request-body synthesis chosen by the test's content type.
    """

    __test__ = False

    def __init__(self, test: Test) -> None:
        super().__init__()
        self._test = test
        self.body: BodySynthesis = synthesize_body(test.req)
        self._strings: dict[Slot, Callable[[], cst.BaseExpression]] = {
            Slot.METHOD: lambda: string_literal(test.method.upper()),
            Slot.PATH: lambda: string_literal(test.path),
            Slot.STATUS: lambda: int_literal(test.res.status),
            Slot.REGISTER_KEY: lambda: string_literal(test.register_key),
        }
        self._literals: dict[Slot, Any] = {
            Slot.REQ_HEADERS: test.req.headers,
            Slot.REQ_PARAMS: test.req.params,
            Slot.RES_HEADERS: test.res.headers,
            Slot.RES_PARAMS: test.res.params,
            Slot.RES_PARAMS_ARRAY: test.res.params_array,
            Slot.TEST_VARS: test.vars,
        }

    def leave_SimpleString(self, original_node, updated_node):
        value = string_value(updated_node)
        if value is None:
            return updated_node
        factory = self._strings.get(slot_for(SlotKind.STRING, value))
        return factory() if factory is not None else updated_node

    def leave_Call(self, original_node, updated_node):
        if call_slot(updated_node) is Slot.REQUEST_BODY:
            return self.body.expression.deep_clone()
        return updated_node

    def leave_Assign(self, original_node, updated_node):
        slot = assign_slot(updated_node)
        if slot in self._literals:
            return updated_node.with_changes(value=to_literal(self._literals[slot]))
        return updated_node

    def leave_SimpleStatementLine(self, original_node, updated_node):
        if not self.body.drops_params:
            return updated_node
        kept = [
            stmt
            for stmt in updated_node.body
            if not (isinstance(stmt, cst.Assign) and assign_slot(stmt) is Slot.REQ_PARAMS)
        ]
        if not kept:
            return cst.RemoveFromParent()
        if len(kept) != len(updated_node.body):
            # The last small statement must not keep a dangling semicolon.
            kept[-1] = kept[-1].with_changes(semicolon=cst.MaybeSentinel.DEFAULT)
            return updated_node.with_changes(body=kept)
        return updated_node


def router_callee(
    router: RouterReference, output_package: str, registry: PackageRegistry
) -> cst.BaseExpression:
    """The callee expression that invokes *router* from *output_package*.

    Raises:
        AssemblyError: If the router's package is not in *registry*.
    """
    if router.package == output_package:
        return cst.Name(router.name)
    package = registry.lookup(router.package)
    return cst.Attribute(value=cst.Name(package.name), attr=cst.Name(router.name))


def _check_identifier(name: str) -> None:
    if not name.isidentifier() or keyword.iskeyword(name):
        raise AssemblyError(f"Test function name {name!r} is not a valid Python identifier")


class FunctionBuilder:
    """Builds generated function definitions for one output module.

    Args:
        template: The loaded template.
        output_package: Dotted package the generated module belongs to.
        registry: Loaded packages used to qualify router calls.
        imports: Import plan to accumulate into; a fresh one by default.
    """

    def __init__(
        self,
        template: Template,
        output_package: str,
        registry: PackageRegistry,
        imports: ImportPlan | None = None,
    ) -> None:
        self.template = template
        self.output_package = output_package
        self.registry = registry
        self.imports = imports if imports is not None else ImportPlan(output_package)

    def build(self, fn: TestFunction) -> cst.FunctionDef:
        """Instantiate the function skeleton for *fn*."""
        _check_identifier(fn.name)
        self._warn_register_collisions(fn)

        callee = router_callee(fn.router, self.output_package, self.registry)
        self.imports.add_package(fn.router.package)

        statements = [self._build_item(item) for item in fn.tests]
        node = self.template.clone(RegionRole.FUNCTION)
        node = node.visit(FunctionRewriter(fn, callee, statements))
        logger.debug("Built %s with %d item(s)", fn.name, len(statements))
        return node.with_changes(name=cst.Name(fn.name))

    def _build_item(self, item: Test | SubtestGroup) -> cst.BaseStatement:
        if isinstance(item, SubtestGroup):
            return self.build_subtest(item)
        return self.build_test(item)

    def build_subtest(self, group: SubtestGroup) -> cst.BaseStatement:
        statements = [self.build_test(test) for test in group.tests]
        node = self.template.clone(RegionRole.SUBTEST)
        return node.visit(SubtestRewriter(group, statements))

    def build_test(self, test: Test) -> cst.BaseStatement:
        node = self.template.clone(RegionRole.TEST)
        rewriter = TestRewriter(test)
        node = node.visit(rewriter)
        self.imports.add_modules(rewriter.body.imports)

        interpolation = InterpolationRewriter()
        node = node.visit(interpolation)
        if interpolation.rewritten:
            self.imports.add_runtime_helper()
        return node

    @staticmethod
    def _warn_register_collisions(fn: TestFunction) -> None:
        counts = Counter(test.register_key for test in fn.iter_tests() if test.register_key)
        for key, count in sorted(counts.items()):
            if count > 1:
                logger.warning(
                    "Register key %r is written %d times in %s; later responses shadow earlier ones",
                    key,
                    count,
                    fn.name,
                )
