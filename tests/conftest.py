"""Shared test fixtures for apitestgen.

Provides reusable fixtures for loading the template and specification
fixtures, building a throwaway source tree with a router package, creating
isolated config environments, managing output state, and running CLI
commands. These fixtures are automatically discovered by pytest and
available to all test modules without explicit imports.
"""

from __future__ import annotations

import logging
import textwrap
from pathlib import Path

import pytest

from apitestgen.generator.template import Template, load_template
from apitestgen.models import Test, TestFunction
from apitestgen.output import reset_output
from apitestgen.packages import LoadedPackage, PackageRegistry


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


@pytest.fixture(autouse=True)
def _reset_logging_between_tests() -> None:
    """Undo the Rich handler the CLI callback installs on the package logger.

    Otherwise records stop propagating to the root logger and ``caplog``
    sees nothing in later tests.
    """
    yield
    logger = logging.getLogger("apitestgen")
    logger.handlers = []
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


# ---------------------------------------------------------------------------
# Template and specification fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def template_path() -> Path:
    """Path of the fixture template."""
    return FIXTURES_DIR / "api_template.py"


@pytest.fixture
def template(template_path: Path) -> Template:
    """The fixture template, parsed."""
    return load_template(template_path)


@pytest.fixture
def spec_path() -> Path:
    """Path of the YAML login specification fixture."""
    return FIXTURES_DIR / "login.yaml"


@pytest.fixture
def login_function() -> TestFunction:
    """A single-test function: POST /api/{apiVersion}/login for v1."""
    return TestFunction(
        name="Login",
        api_versions=["v1"],
        router="myapp.api:create_app",
        tests=[Test(method="post", path="/api/{apiVersion}/login")],
    )


# ---------------------------------------------------------------------------
# Source tree fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def src_root(tmp_path: Path) -> Path:
    """A source root holding ``myapp`` with an ``api`` module and a ``tests`` package.

    Layout::

        src/myapp/__init__.py
        src/myapp/api.py          # def create_app()
        src/myapp/tests/__init__.py
    """
    root = tmp_path / "src"
    package = root / "myapp"
    (package / "tests").mkdir(parents=True)
    (package / "__init__.py").write_text("", encoding="utf-8")
    (package / "tests" / "__init__.py").write_text("", encoding="utf-8")
    (package / "api.py").write_text(
        textwrap.dedent("""\
            def create_app():
                def app(environ, start_response):
                    start_response("200 OK", [])
                    return [b"{}"]
                return app
        """),
        encoding="utf-8",
    )
    return root


@pytest.fixture
def registry() -> PackageRegistry:
    """A registry holding ``myapp.api``."""
    return PackageRegistry([LoadedPackage.from_path("myapp.api")])


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_DATA_HOME to a subdirectory of tmp_path so that crash logs
    never land in the real user directory, clears all APITESTGEN_*
    environment variables and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in [
        "APITESTGEN_TEMPLATE",
        "APITESTGEN_OUTPUT_DIR",
        "APITESTGEN_ROOT",
        "APITESTGEN_NAME",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
