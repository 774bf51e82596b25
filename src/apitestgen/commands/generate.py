"""Generate command -- instantiate the template for every API version.

Implements ``apitestgen generate``. Settings come from
:func:`~apitestgen.config.resolve_config`; the router packages named in the
specification are looked up under the source root before the
:class:`~apitestgen.generator.Generator` runs.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from apitestgen.exceptions import ApiTestGenError, InvalidUsageError
from apitestgen.output import debug, error, print_paths, success, suggest


def generate_command(
    spec: str = typer.Argument(
        ..., help="Test specification file or URL (use '-' for stdin)."
    ),
    template: Optional[str] = typer.Option(
        None, "--template", "-t", help="Template source file."
    ),
    output_dir: Optional[str] = typer.Option(
        None, "--output-dir", "-o", help="Directory generated files are written to."
    ),
    root: Optional[str] = typer.Option(
        None, "--root", help="Source root owning the output directory."
    ),
    name: Optional[str] = typer.Option(
        None, "--name", help="Base name of generated files (default: template name)."
    ),
) -> None:
    """Generate versioned test modules from a test specification.

    Writes ``<version>_<name>_test.py`` into the output directory for every
    API version the specification mentions and prints the written paths
    to stdout, one per line.

    Example::

        apitestgen generate tests.yaml --template api_template.py \\
            --output-dir src/myapp/tests --root src
    """
    from apitestgen.config import resolve_config
    from apitestgen.generator import Generator
    from apitestgen.packages import load_packages
    from apitestgen.parser import load_test_functions

    try:
        config = resolve_config(template, output_dir, root, name)
        if config.template is None:
            raise InvalidUsageError(
                "No template given. Pass --template or set it in apitestgen.json"
            )

        functions = load_test_functions(spec)
        debug(f"Loaded {len(functions)} test function(s) from {spec}")

        registry = load_packages(
            {fn.router.package for fn in functions}, roots=[config.root]
        )
        debug(f"Resolved {len(registry)} router package(s)")

        Path(config.output_dir).mkdir(parents=True, exist_ok=True)
        written = Generator(
            config.template,
            config.output_dir,
            functions,
            registry,
            root=config.root,
            name=config.name,
        ).generate()
    except ApiTestGenError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    print_paths(written)

    if written:
        success(f"Generated {len(written)} file(s).")
        suggest(f"Run them: pytest {config.output_dir}")
    else:
        success("Nothing to generate: no test is scoped to any API version.")
