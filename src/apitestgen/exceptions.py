"""Exception hierarchy for apitestgen.

All exceptions inherit from :class:`ApiTestGenError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`apitestgen.exit_codes`.
The top-level error handler in :func:`apitestgen.app.main` catches
``ApiTestGenError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Generation is fail-fast: the first error raised anywhere in the engine
aborts the whole run and nothing further is written.

Subclass hierarchy::

    ApiTestGenError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- SpecParseError      (exit 3)
    +-- ConfigError         (exit 4)
    +-- AssemblyError       (exit 5)
    +-- PathNotOwnedError   (exit 6)
"""

from apitestgen.exit_codes import (
    EXIT_ASSEMBLY_ERROR,
    EXIT_CONFIG_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_PATH_NOT_OWNED,
    EXIT_SPEC_PARSE_ERROR,
)


class ApiTestGenError(Exception):
    """Base exception for all apitestgen errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`apitestgen.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(ApiTestGenError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class SpecParseError(ApiTestGenError):
    """Raised when the test specification cannot be loaded or fails validation."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class ConfigError(ApiTestGenError):
    """Raised for a malformed template (missing or duplicated regions, missing
    sentinel slots) and for invalid project configuration."""

    exit_code = EXIT_CONFIG_ERROR


class AssemblyError(ApiTestGenError):
    """Raised when generated code cannot be assembled.

    Typical causes are a router reference whose declaring package is not in
    the loaded-package registry, a register path that does not follow the
    ``ident ('.' ident | '[' digit+ ']')*`` grammar, or a value that has no
    Python literal form.
    """

    exit_code = EXIT_ASSEMBLY_ERROR


class PathNotOwnedError(ApiTestGenError):
    """Raised when the output directory is not owned by any package under the source root."""

    exit_code = EXIT_PATH_NOT_OWNED
