"""Tagged raw values for score breakdowns and scouting reports.

Score breakdowns arrive as arbitrary JSON whose shape changes every season.
Each raw entry is converted once, at the edge, into one of three tagged
values. A missing entry is represented by ``None`` (absent).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Number:
    """Numeric raw value, always stored as a float."""

    value: float


@dataclass(frozen=True)
class Bool:
    """Boolean raw value."""

    value: bool


@dataclass(frozen=True)
class String:
    """Categorical raw value (e.g. an endgame state)."""

    value: str


Value = Union[Number, Bool, String]

# Per-alliance breakdown with absent entries already dropped
ScoreBreakdown = Mapping[str, Value]


def from_raw(raw: Any) -> Value | None:
    """Convert a JSON-decoded value into a tagged value.

    Nested containers and ``null`` have no scalar meaning and are treated
    as absent.

    Args:
        raw: Value as decoded from JSON.

    Returns:
        Tagged value, or None if the value is absent.
    """
    # bool must be checked before int: bool is an int subclass
    if isinstance(raw, bool):
        return Bool(raw)
    if isinstance(raw, (int, float)):
        return Number(float(raw))
    if isinstance(raw, str):
        return String(raw)
    return None


def to_raw(value: Value | None) -> Any:
    """Convert a tagged value back to its JSON representation."""
    if value is None:
        return None
    if isinstance(value, Number):
        number = value.value
        return int(number) if number.is_integer() else number
    return value.value


def breakdown_from_raw(raw: Mapping[str, Any] | None) -> dict[str, Value]:
    """Build a score breakdown from a raw JSON object.

    Args:
        raw: Decoded breakdown object, or None when the match has not
            been played yet.

    Returns:
        Mapping of field name to tagged value, absent entries omitted.
    """
    breakdown: dict[str, Value] = {}
    if not raw:
        return breakdown

    for key, item in raw.items():
        value = from_raw(item)
        if value is not None:
            breakdown[key] = value
    return breakdown


def as_number(value: Value | None) -> float | None:
    """Project a tagged value onto a number for aggregation.

    Booleans count as 1/0. Strings cannot be aggregated and are absent.
    """
    if value is None:
        return None
    if isinstance(value, Number):
        return value.value
    if isinstance(value, Bool):
        return 1.0 if value.value else 0.0
    if isinstance(value, String):
        return None
    raise TypeError(f"unsupported value type: {type(value).__name__}")


def values_equal(left: Value, right: Value) -> bool:
    """Compare two tagged values.

    Strings only equal strings with the same text. Numbers and booleans
    compare numerically, so ``True`` equals ``1``.
    """
    if isinstance(left, String) or isinstance(right, String):
        return isinstance(left, String) and isinstance(right, String) and left.value == right.value
    return as_number(left) == as_number(right)
