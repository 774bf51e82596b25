"""Test specification parser -- load and validate YAML/JSON test specs.

This sub-package is responsible for the first half of the apitestgen
pipeline: turning a raw test specification (JSON or YAML, local file,
remote URL or stdin) into validated
:class:`~apitestgen.models.TestFunction` objects the generator can consume.

Typical usage::

    from apitestgen.parser import load_spec, parse_test_functions

    raw = load_spec("tests/api.yaml")
    functions = parse_test_functions(raw)
"""

from apitestgen.parser.loader import load_spec, load_test_functions, parse_test_functions

__all__ = ["load_spec", "load_test_functions", "parse_test_functions"]
