"""Support code imported by generated test modules.

Interpolated lookups in generated tests (``${name:type}`` and
``$register[path]``) are wrapped in :func:`expect_type` so that a value of
the wrong type fails the test where it is used instead of somewhere
downstream.
"""

from __future__ import annotations

from typing import Any, TypeVar

T = TypeVar("T")


def expect_type(value: Any, expected: type[T]) -> T:
    """Return *value* if it is an instance of *expected*, else raise ``TypeError``.

    Integers are accepted (and converted) where a ``float`` is expected,
    since JSON does not distinguish ``1`` from ``1.0``. Booleans are never
    accepted as numbers.
    """
    if expected is float and isinstance(value, int) and not isinstance(value, bool):
        return float(value)  # type: ignore[return-value]
    if isinstance(value, bool) and expected in (int, float):
        raise TypeError(f"expected {expected.__name__}, got bool {value!r}")
    if not isinstance(value, expected):
        raise TypeError(
            f"expected {getattr(expected, '__name__', expected)}, "
            f"got {type(value).__name__} {value!r}"
        )
    return value
