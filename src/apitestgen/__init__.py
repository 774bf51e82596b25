"""apitestgen -- generate versioned API test modules from a template.

A test specification (YAML or JSON) describes test functions, each a list
of HTTP requests with their expected responses, scoped to API versions. A
template is a runnable Python test module whose skeleton function is
marked with comments. apitestgen clones the skeleton for every test
function, fills in requests and expectations, and writes one module per
API version.

Typical workflow::

    apitestgen init                                   # starter template
    apitestgen plan tests.yaml                        # preview
    apitestgen generate tests.yaml -o src/myapp/tests --root src

Modules:
    app: Typer application factory and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: Project configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
    packages: Package ownership and router package lookup.
    runtime: Helpers imported by generated test modules.
"""

__version__ = "0.1.0"
