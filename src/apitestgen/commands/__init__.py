"""Built-in CLI sub-commands for apitestgen.

This package groups the Typer command modules that form the CLI's
top-level command tree:

* :mod:`~apitestgen.commands.generate` -- write one test module per API
  version from a test specification and a template.
* :mod:`~apitestgen.commands.plan` -- show which functions and tests each
  version would receive, without writing anything.
* :mod:`~apitestgen.commands.init` -- write a starter template and a
  project-local ``apitestgen.json``.

Each module exports a plain callback function registered directly on the
root app.
"""
