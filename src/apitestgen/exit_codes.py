"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~apitestgen.exceptions.ApiTestGenError` subclass.
CI scripts can inspect the exit code to tell a broken template from a
broken test specification without parsing stderr.

Example::

    $ apitestgen generate tests.yaml --template template.py
    $ echo $?
    4   # EXIT_CONFIG_ERROR -- the template has no function skeleton
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_SPEC_PARSE_ERROR = 3
"""The test specification could not be loaded or validated."""

EXIT_CONFIG_ERROR = 4
"""The template or the project configuration is malformed."""

EXIT_ASSEMBLY_ERROR = 5
"""Generated code could not be assembled (unresolved package, bad register path)."""

EXIT_PATH_NOT_OWNED = 6
"""The output directory does not belong to any package under the source root."""
