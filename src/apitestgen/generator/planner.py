"""Version-driven test planning.

Every test function is generated once per API version it touches. The
planner works out which versions those are and, for each one, which tests
and subtest groups belong in that version's file.

Filtering rules:

* A bare test is kept when the version is in its own ``api_versions``, or
  when it has none and the version is in the function's ``api_versions``.
* A subtest group is kept when the version is in its own ``api_versions``
  (if it declares any), otherwise in the function's. The tests inside a
  kept group are filtered against the **function's** versions with the
  bare-test rule.
* ``{apiVersion}`` in a kept test's path is replaced by the version.

A function that keeps no test for a version is simply left out of that
version; this is not an error.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from apitestgen.models import SubtestGroup, Test, TestFunction, TestItem

logger = logging.getLogger(__name__)

VERSION_PLACEHOLDER = "{apiVersion}"


def _dedupe(values: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


def expand_versions(fn: TestFunction) -> list[str]:
    """Versions *fn* is generated for, deduplicated in first-seen order.

    The union of the function's own versions and those of the tests listed
    directly under it.

    Example::

        fn.api_versions == ["v1", "v1", "v2"], test.api_versions == ["v2", "v3"]
        expand_versions(fn) == ["v1", "v2", "v3"]
    """
    versions = list(fn.api_versions)
    for item in fn.tests:
        if isinstance(item, Test):
            versions.extend(item.api_versions)
    return _dedupe(versions)


def _filter_test(test: Test, versions: Sequence[str], version: str) -> Optional[Test]:
    if version in test.api_versions or (not test.api_versions and version in versions):
        return test.model_copy(
            update={"path": test.path.replace(VERSION_PLACEHOLDER, version)}
        )
    return None


def _filter_group(
    group: SubtestGroup, versions: Sequence[str], version: str
) -> Optional[SubtestGroup]:
    scope = group.api_versions if group.api_versions is not None else versions
    if version not in scope:
        return None
    tests = [
        kept
        for kept in (_filter_test(test, versions, version) for test in group.tests)
        if kept is not None
    ]
    return group.model_copy(update={"tests": tests})


def plan(fn: TestFunction, version: str) -> Optional[TestFunction]:
    """Return the copy of *fn* that belongs in *version*'s output, or ``None``.

    ``None`` is returned when no test, bare or grouped, is kept.
    """
    items: list[TestItem] = []
    kept_tests = 0
    for item in fn.tests:
        if isinstance(item, SubtestGroup):
            group = _filter_group(item, fn.api_versions, version)
            if group is not None:
                items.append(group)
                kept_tests += len(group.tests)
        else:
            test = _filter_test(item, fn.api_versions, version)
            if test is not None:
                items.append(test)
                kept_tests += 1

    if not kept_tests:
        logger.debug("%s has no tests for %s", fn.name, version)
        return None
    return fn.model_copy(update={"tests": items})


def plan_all(functions: Iterable[TestFunction]) -> dict[str, list[TestFunction]]:
    """Plan every function for every version it touches.

    Returns:
        Planned functions keyed by version. Versions appear in first-seen
        order across *functions*; within a version, functions keep their
        input order. Versions that end up with no function are omitted.
    """
    planned: dict[str, list[TestFunction]] = {}
    for fn in functions:
        for version in expand_versions(fn):
            result = plan(fn, version)
            if result is not None:
                planned.setdefault(version, []).append(result)
    return planned
