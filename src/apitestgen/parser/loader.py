"""Load test specifications from a URL, local file, or stdin.

This module handles all I/O for fetching raw test specifications and
turning them into validated :class:`~apitestgen.models.TestFunction`
objects. Both JSON and YAML are supported with automatic format detection.

The public functions are:

* :func:`load_spec` -- Load and parse a document from any supported source.
* :func:`parse_test_functions` -- Validate the parsed document into test
  functions.
* :func:`load_test_functions` -- Both steps at once.

A specification is a list of test functions (or a mapping holding that list
under ``test_funcs``)::

    - name: test_login
      api_versions: [v1, v2]
      router: myapp.api:create_app
      vars:
        password: secret
      tests:
        - method: post
          path: /api/{apiVersion}/login
          register: login
          req:
            params: {user: alice, password: "${password:str}"}
          res:
            status: 200
        - subtests:
            - name: wrong password
              tests:
                - method: post
                  path: /api/{apiVersion}/login
                  res: {status: 401}
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml
from pydantic import ValidationError

from apitestgen.exceptions import SpecParseError
from apitestgen.models import SubtestGroup, Test, TestFunction, TestItem


def load_spec(source: str) -> Any:
    """Load a test specification from URL, file path, or stdin ('-').

    Supports JSON and YAML formats.
    Auto-detects format from content/extension.

    Args:
        source: A URL (http/https), file path, or '-' for stdin.

    Returns:
        The parsed document (normally a list or a dict).

    Raises:
        SpecParseError: If the source cannot be loaded or parsed.
    """
    if source == "-":
        return _load_from_stdin()
    elif source.startswith(("http://", "https://")):
        return _load_from_url(source)
    else:
        return _load_from_file(source)


def _load_from_stdin() -> Any:
    """Read a specification from stdin.

    Raises:
        SpecParseError: If stdin is empty or content cannot be parsed.
    """
    try:
        content = sys.stdin.read()
    except Exception as exc:
        raise SpecParseError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise SpecParseError("No input received from stdin")

    return _parse_content(content, hint="stdin")


def _load_from_url(url: str) -> Any:
    """Fetch a specification from URL. Supports JSON and YAML responses.

    Raises:
        SpecParseError: If the URL cannot be fetched or content cannot be parsed.
    """
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(
            f"HTTP {exc.response.status_code} fetching spec from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecParseError(f"Failed to fetch spec from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"

    return _parse_content(response.text, hint=hint)


def _load_from_file(path: str) -> Any:
    """Load a specification from a local file.

    Supports .json, .yaml, and .yml extensions. Falls back to content-based
    detection if the extension is not recognized.

    Raises:
        SpecParseError: If the file cannot be read or content cannot be parsed.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecParseError(f"Spec file not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecParseError(f"Failed to read spec file {path}: {exc}") from exc

    if not content.strip():
        raise SpecParseError(f"Spec file is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    return _parse_content(content, hint=hint)


def _parse_content(content: str, hint: str = "") -> Any:
    """Parse content as JSON or YAML.

    Tries JSON first (unless hint is 'yaml'), then falls back to YAML.

    Raises:
        SpecParseError: If the content cannot be parsed as either format.
    """
    json_error: Exception | None = None
    yaml_error: Exception | None = None

    if hint != "yaml":
        try:
            return json.loads(content)
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc

    try:
        result = yaml.safe_load(content)
        if result is None:
            raise SpecParseError("Spec must not be an empty document")
        return result
    except yaml.YAMLError as exc:
        yaml_error = exc

    msg = "Failed to parse spec as JSON or YAML"
    if json_error:
        msg += f"\n  JSON error: {json_error}"
    if yaml_error:
        msg += f"\n  YAML error: {yaml_error}"
    raise SpecParseError(msg)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def _parse_items(raw_tests: Any, fn_name: str) -> list[TestItem]:
    """Validate the ``tests`` list of one function.

    An entry with a ``subtests`` key expands into one
    :class:`~apitestgen.models.SubtestGroup` per element.
    """
    if raw_tests is None:
        return []
    if not isinstance(raw_tests, list):
        raise SpecParseError(f"'tests' of {fn_name!r} must be a list")

    items: list[TestItem] = []
    for raw in raw_tests:
        if isinstance(raw, dict) and "subtests" in raw:
            groups = raw["subtests"] or []
            if not isinstance(groups, list):
                raise SpecParseError(f"'subtests' of {fn_name!r} must be a list")
            items.extend(SubtestGroup.model_validate(group) for group in groups)
        else:
            items.append(Test.model_validate(raw))
    return items


def parse_test_functions(data: Any) -> list[TestFunction]:
    """Validate a parsed specification document into test functions.

    Args:
        data: A list of function mappings, or a mapping with the list under
            ``test_funcs`` (legacy ``testFuncs``).

    Raises:
        SpecParseError: If the document shape is wrong or a function fails
            validation. The message names the offending function.
    """
    if isinstance(data, dict):
        data = data.get("test_funcs", data.get("testFuncs"))
    if not isinstance(data, list):
        raise SpecParseError(
            "Spec must be a list of test functions (or a mapping with 'test_funcs')"
        )

    functions: list[TestFunction] = []
    for index, raw in enumerate(data):
        if not isinstance(raw, dict):
            raise SpecParseError(f"Test function #{index} must be a mapping")
        fn_name = str(raw.get("name", f"#{index}"))
        try:
            fields = {key: value for key, value in raw.items() if key != "tests"}
            fields["tests"] = _parse_items(raw.get("tests"), fn_name)
            functions.append(TestFunction.model_validate(fields))
        except ValidationError as exc:
            raise SpecParseError(f"Invalid test function {fn_name!r}: {exc}") from exc
    return functions


def load_test_functions(source: str) -> list[TestFunction]:
    """Load *source* and validate it into test functions."""
    return parse_test_functions(load_spec(source))
