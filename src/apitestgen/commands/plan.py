"""Plan command -- preview the per-version output of a test specification.

Implements ``apitestgen plan``. Nothing is written; the planner's result is
shown as a table (or JSON with the global ``--json`` flag).
"""

from __future__ import annotations

import typer

from apitestgen.exceptions import ApiTestGenError
from apitestgen.output import error, info, print_table


def plan_command(
    spec: str = typer.Argument(
        ..., help="Test specification file or URL (use '-' for stdin)."
    ),
) -> None:
    """Show which test functions each API version receives.

    One row per (version, function) pair with the number of tests and
    subtest groups that survive filtering for that version.

    Example::

        apitestgen plan tests.yaml
        apitestgen --json plan tests.yaml
    """
    from apitestgen.generator import plan_all
    from apitestgen.models import SubtestGroup
    from apitestgen.parser import load_test_functions

    try:
        functions = load_test_functions(spec)
    except ApiTestGenError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    planned = plan_all(functions)
    if not planned:
        info("No test is scoped to any API version.")
        return

    headers = ["Version", "Function", "Router", "Tests", "Subtests"]
    rows: list[list[str]] = []
    for version, version_functions in planned.items():
        for fn in version_functions:
            groups = sum(1 for item in fn.tests if isinstance(item, SubtestGroup))
            rows.append([
                version,
                fn.name,
                str(fn.router),
                str(len(fn.iter_tests())),
                str(groups),
            ])

    print_table(headers, rows, title=f"Plan ({len(planned)} version(s))")
