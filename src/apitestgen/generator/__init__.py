"""Template-instantiation engine -- turn test functions into test modules.

This sub-package takes validated :class:`~apitestgen.models.TestFunction`
objects and a template file and writes one Python test module per API
version.

Typical usage::

    from apitestgen.generator import Generator
    from apitestgen.packages import load_packages

    registry = load_packages({fn.router.package for fn in functions}, ["src"])
    written = Generator("template.py", "src/myapp/tests", functions,
                        registry, root="src").generate()

Sub-modules:

* :mod:`~apitestgen.generator.sentinels` -- The token contract between
  templates and the rewriter.
* :mod:`~apitestgen.generator.template` -- Template parsing, comment index
  and region discovery.
* :mod:`~apitestgen.generator.planner` -- Version expansion and per-version
  filtering.
* :mod:`~apitestgen.generator.literals`,
  :mod:`~apitestgen.generator.bodies`,
  :mod:`~apitestgen.generator.interpolation` -- Expression synthesis.
* :mod:`~apitestgen.generator.rewriter` -- Skeleton cloning and sentinel
  rewriting.
* :mod:`~apitestgen.generator.imports` -- Import reconciliation.
* :mod:`~apitestgen.generator.assembler` and
  :mod:`~apitestgen.generator.emitter` -- Module assembly and atomic output.
* :mod:`~apitestgen.generator.engine` -- The :class:`Generator` run loop.
"""

from apitestgen.generator.engine import Generator, build_module
from apitestgen.generator.planner import expand_versions, plan, plan_all
from apitestgen.generator.template import load_template, parse_template

__all__ = [
    "Generator",
    "build_module",
    "expand_versions",
    "plan",
    "plan_all",
    "load_template",
    "parse_template",
]
