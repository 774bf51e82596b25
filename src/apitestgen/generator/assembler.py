"""Splice generated functions into the template module.

The output module is the template with three edits:

* the generated functions are inserted into the top-level statement list
  immediately before the first function definition;
* the function skeleton is removed, and with it the nested test and
  subtest skeletons and every comment attached to any of them (libcst keeps
  comments on the statements they annotate);
* the planned imports are merged in.

Everything else in the template -- module docstring, imports, helpers,
constants -- is kept as written.
"""

from __future__ import annotations

import logging
from typing import Sequence

import libcst as cst

from apitestgen.generator.imports import ImportPlan
from apitestgen.generator.template import CommentIndex, Template, marker_role

logger = logging.getLogger(__name__)


def splice_functions(
    module: cst.Module, skeleton: cst.CSTNode, functions: Sequence[cst.FunctionDef]
) -> cst.Module:
    """Insert *functions* before the first top-level ``def`` and drop *skeleton*.

    When *skeleton* is the first statement its marker comment lives in the
    module header and is dropped from there.
    """
    header = list(module.header)
    if module.body and module.body[0] is skeleton:
        header = [
            line
            for line in header
            if line.comment is None or marker_role(line.comment.value) is None
        ]
    body: list[cst.BaseStatement] = []
    inserted = False
    for stmt in module.body:
        if not inserted and isinstance(stmt, cst.FunctionDef):
            body.extend(functions)
            inserted = True
        if stmt is skeleton:
            continue
        body.append(stmt)
    if not inserted:
        body.extend(functions)
    return module.with_changes(header=header, body=body)


def assemble(
    template: Template, functions: Sequence[cst.FunctionDef], imports: ImportPlan
) -> cst.Module:
    """Build the output module for one version."""
    module = splice_functions(template.module, template.function_node, functions)
    module = imports.apply(module)

    leftover = [entry.text for entry in CommentIndex.build(module) if marker_role(entry.text)]
    if leftover:
        logger.debug("Region markers outside the function skeleton kept: %s", leftover)
    return module
