"""Reconcile the imports a generated module needs with the template's.

Generated code references three kinds of outside names:

* the router's declaring package, when it is not the output package itself
  (``myapp.api`` is imported as ``from myapp import api`` and called as
  ``api.create_app()``; a top-level ``myapp`` as ``import myapp``);
* the helper modules of FORM and RAW request bodies;
* the type-assertion helper used by interpolated lookups.

:class:`ImportPlan` collects them and :meth:`ImportPlan.apply` merges them
into a module with libcst's ``AddImportsVisitor``, which skips imports the
template already has. Two packages whose local names collide (``a.api``
and ``b.api``) are not disambiguated.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

import libcst as cst
from libcst.codemod import CodemodContext
from libcst.codemod.visitors import AddImportsVisitor

from apitestgen.generator.sentinels import TYPE_ASSERTION_HELPER, TYPE_ASSERTION_MODULE

logger = logging.getLogger(__name__)

ImportSpec = tuple[str, Optional[str]]
"""``(module, None)`` for ``import module``; ``(module, name)`` for ``from module import name``."""


def package_import(path: str) -> ImportSpec:
    """How a router package is imported so that its last component is bound locally."""
    parent, _, leaf = path.rpartition(".")
    if not parent:
        return (path, None)
    return (parent, leaf)


class ImportPlan:
    """The set of imports required by one generated module."""

    def __init__(self, output_package: str) -> None:
        self.output_package = output_package
        self._imports: set[ImportSpec] = set()

    def add_package(self, path: str) -> None:
        """Require the router package *path*, unless it is the output package."""
        if path == self.output_package:
            return
        self._imports.add(package_import(path))

    def add_modules(self, modules: Iterable[str]) -> None:
        for module in modules:
            self._imports.add((module, None))

    def add_runtime_helper(self) -> None:
        self._imports.add((TYPE_ASSERTION_MODULE, TYPE_ASSERTION_HELPER))

    @property
    def imports(self) -> list[ImportSpec]:
        """Required imports in a stable order."""
        return sorted(self._imports, key=lambda spec: (spec[0], spec[1] or ""))

    def __len__(self) -> int:
        return len(self._imports)

    def apply(self, module: cst.Module) -> cst.Module:
        """Return *module* with every planned import present."""
        if not self._imports:
            return module
        context = CodemodContext()
        for module_name, obj in self.imports:
            logger.debug("Adding import %s%s", module_name, f".{obj}" if obj else "")
            AddImportsVisitor.add_needed_import(context, module_name, obj)
        return AddImportsVisitor(context).transform_module(module)
