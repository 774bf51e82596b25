"""Canonical Pydantic models shared across all apitestgen modules.

This is the single source of truth for data shapes in the project. The
models fall into two groups:

**Specification models** -- produced by :mod:`apitestgen.parser` from a YAML
or JSON test specification and consumed, read-only, by the generator:
    :class:`ContentType`, :class:`RouterReference`, :class:`RequestSpec`,
    :class:`ResponseSpec`, :class:`Test`, :class:`SubtestGroup` and
    :class:`TestFunction`.

**Configuration models** -- the effective settings of one generation run:
    :class:`GeneratorConfig`.

Specification models are frozen: the planner derives per-version copies
with ``model_copy`` instead of editing them in place. Field names are
snake_case; the camelCase spellings of the legacy format (``apiVersions``,
``paramsArray``, ``routerFunc``) are accepted as aliases.
"""

from __future__ import annotations

import enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


# --- Specification models ---


class ContentType(str, enum.Enum):
    """How a test's request body is built.

    ``JSON`` serialises ``req.params``, ``FORM`` URL-encodes it and ``RAW``
    sends ``req.body`` verbatim after template rendering.
    """

    JSON = "json"
    FORM = "form"
    RAW = "raw"


class RouterReference(BaseModel):
    """The handler-dispatch callable a generated test invokes.

    Accepts either a mapping (``{"package": "myapp.api", "name": "create_app"}``)
    or an entry-point style string. Both ``"myapp.api:create_app"`` and the
    dotted ``"myapp.api.create_app"`` spelling are understood.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Callable name inside the declaring package")
    package: str = Field(description="Dotted path of the declaring module")

    @model_validator(mode="before")
    @classmethod
    def _parse_reference(cls, data: Any) -> Any:
        if not isinstance(data, str):
            return data
        if ":" in data:
            package, _, name = data.partition(":")
        else:
            package, _, name = data.rpartition(".")
        if not package or not name:
            raise ValueError(
                f"Router reference {data!r} must look like 'package.module:callable'"
            )
        return {"package": package, "name": name}

    def __str__(self) -> str:
        return f"{self.package}:{self.name}"


class RequestSpec(BaseModel):
    """Request side of a single test."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: ContentType = ContentType.JSON
    body: str = Field(default="", description="Raw body, used only by RAW requests")
    params: dict[str, Any] = Field(default_factory=dict)
    headers: dict[str, Any] = Field(default_factory=dict)


class ResponseSpec(BaseModel):
    """Expected response of a single test."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    status: int = 200
    headers: dict[str, Any] = Field(default_factory=dict)
    params: dict[str, Any] = Field(default_factory=dict)
    params_array: list[Any] = Field(default_factory=list, alias="paramsArray")


class Test(BaseModel):
    """One HTTP request/response expectation.

    ``path`` may contain the ``{apiVersion}`` placeholder, which the planner
    resolves per output version. An empty ``api_versions`` means the test
    inherits the enclosing function's versions. The register key is
    spelled ``register`` in specifications.
    """

    __test__ = False

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    method: str
    path: str
    register_key: str = Field(
        default="",
        alias="register",
        description="Register key the response is stored under",
    )
    req: RequestSpec = Field(default_factory=RequestSpec)
    res: ResponseSpec = Field(default_factory=ResponseSpec)
    vars: dict[str, Any] = Field(default_factory=dict)
    api_versions: list[str] = Field(default_factory=list, alias="apiVersions")


class SubtestGroup(BaseModel):
    """A named cluster of tests emitted as one subtest block.

    ``api_versions`` set to ``None`` inherits the function's versions; an
    explicit list (even an empty one) scopes the group on its own.
    """

    __test__ = False

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    api_versions: Optional[list[str]] = Field(default=None, alias="apiVersions")
    tests: list[Test] = Field(default_factory=list)


TestItem = Union[Test, SubtestGroup]
"""A direct child of a :class:`TestFunction`: a bare test or a subtest group."""


class TestFunction(BaseModel):
    """A generated test entry point.

    Carries shared variables (``${name:type}`` lookups resolve against
    ``vars``), the router to instantiate and the ordered test items.
    """

    __test__ = False

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    vars: dict[str, Any] = Field(default_factory=dict)
    router: RouterReference = Field(alias="routerFunc")
    api_versions: list[str] = Field(default_factory=list, alias="apiVersions")
    tests: list[TestItem] = Field(default_factory=list)

    def iter_tests(self) -> list[Test]:
        """Return every test, bare or nested in a subtest group, in order."""
        result: list[Test] = []
        for item in self.tests:
            if isinstance(item, SubtestGroup):
                result.extend(item.tests)
            else:
                result.append(item)
        return result


# --- Configuration models ---


class GeneratorConfig(BaseModel):
    """Effective settings of one generation run.

    Resolved by :func:`~apitestgen.config.resolve_config` from CLI flags,
    ``APITESTGEN_*`` environment variables and the project-local
    ``apitestgen.json``.
    """

    template: Optional[str] = Field(
        default=None, description="Path to the template source file"
    )
    output_dir: str = Field(
        default=".", description="Directory the generated test files are written to"
    )
    root: Optional[str] = Field(
        default=None,
        description="Source root that owns the output package (defaults to the working directory)",
    )
    name: Optional[str] = Field(
        default=None,
        description="Base name for generated files (defaults to the template's base name)",
    )
