"""Generation run: plan, instantiate, assemble and emit one file per version.

:class:`Generator` ties the pipeline together::

    template  = load_template(template_path)          # once per run
    package   = resolve_package(root, output_dir)
    for version, functions in plan_all(test_functions).items():
        builder = FunctionBuilder(template, package, registry)
        nodes   = [builder.build(fn) for fn in functions]
        module  = assemble(template, nodes, builder.imports)
        emit(module, output_dir, version, base_name)

Versions are processed one after another and test functions one after
another within a version. The run is fail-fast: the first error aborts it,
and files already written for earlier versions stay in place.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

import libcst as cst

from apitestgen.generator.assembler import assemble
from apitestgen.generator.emitter import emit
from apitestgen.generator.planner import plan_all
from apitestgen.generator.rewriter import FunctionBuilder
from apitestgen.generator.template import Template, load_template
from apitestgen.models import TestFunction
from apitestgen.packages import PackageRegistry, resolve_package

logger = logging.getLogger(__name__)


def build_module(
    template: Template,
    functions: Sequence[TestFunction],
    output_package: str,
    registry: PackageRegistry,
) -> cst.Module:
    """Build the output module for one version's planned *functions*."""
    builder = FunctionBuilder(template, output_package, registry)
    nodes = [builder.build(fn) for fn in functions]
    return assemble(template, nodes, builder.imports)


class Generator:
    """Generates versioned test modules from a template and test functions.

    Args:
        template_path: Path of the template source file.
        output_dir: Directory generated files are written to.
        functions: Validated test functions, as loaded by
            :func:`~apitestgen.parser.parse_test_functions`.
        registry: Loaded router packages.
        root: Source root owning *output_dir*.
        name: Base name for generated files; defaults to the template's.
    """

    def __init__(
        self,
        template_path: str | Path,
        output_dir: str | Path,
        functions: Sequence[TestFunction],
        registry: PackageRegistry,
        root: str | Path,
        name: Optional[str] = None,
    ) -> None:
        self.template_path = Path(template_path)
        self.output_dir = Path(output_dir)
        self.functions = list(functions)
        self.registry = registry
        self.root = Path(root)
        self.name = name

    def generate(self) -> list[Path]:
        """Run the generation and return the written files in version order."""
        output_package = resolve_package(self.root, self.output_dir)
        template = load_template(self.template_path)
        base = self.name or template.name
        planned = plan_all(self.functions)
        logger.debug(
            "Generating %d version(s) into package %s", len(planned), output_package
        )

        written: list[Path] = []
        for version, functions in planned.items():
            module = build_module(template, functions, output_package, self.registry)
            written.append(emit(module, self.output_dir, version, base))
        return written
