"""
Category-aware equivalence checking.

Comparison rules:
- integers, byte, bool, typed-pointer dereference: exact equality
- enum: exact equality of the raw discriminant (UNKNOWN names still compare by value)
- raw pointer: identity of the reference token
- float32/float64/float: tolerance band, either a symmetric epsilon or an
  explicit open interval
- text and aggregate name fields: exact byte-sequence equality
- dispatch outcomes: exact string equality, recorded without a category

A failed comparison is data: `check()` always returns a CheckResult and
never raises for a mismatch.
"""
from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Any, Optional, Union

from arrayconf.semantics.typesys import AggregateRecord, Ref, TypeCategory


@dataclass(frozen=True)
class Epsilon:
    """Pass when |actual - expected| < bound."""
    bound: float

    def accepts(self, expected: float, actual: float) -> bool:
        return abs(actual - expected) < self.bound

    def __str__(self) -> str:
        return f"|d| < {self.bound:g}"


@dataclass(frozen=True)
class OpenInterval:
    """Pass when low < actual < high; the expected value is informational."""
    low: float
    high: float

    def __post_init__(self) -> None:
        if not self.low < self.high:
            raise ValueError(f"empty interval ({self.low}, {self.high})")

    def accepts(self, expected: float, actual: float) -> bool:
        return self.low < actual < self.high

    def __str__(self) -> str:
        return f"({self.low:g}, {self.high:g})"


Tolerance = Union[Epsilon, OpenInterval]

# Single precision keeps ~7 significant digits; the catalog stays below 10.
DEFAULT_EPSILONS = {
    TypeCategory.FLOAT32: Epsilon(1e-6),
    TypeCategory.FLOAT: Epsilon(1e-6),
    TypeCategory.FLOAT64: Epsilon(1e-9),
}


@dataclass(frozen=True)
class CheckResult:
    # None for label-only checks (dispatch outcomes)
    category: Optional[TypeCategory]
    index: int
    expected: Any
    actual: Any
    passed: bool
    rule: str = "exact"
    scenario: str = ""
    label: str = ""


class EquivalenceChecker:
    def __init__(self, epsilons: Optional[dict[TypeCategory, Epsilon]] = None) -> None:
        self.epsilons = dict(DEFAULT_EPSILONS)
        if epsilons:
            self.epsilons.update(epsilons)

    def check(self, category: TypeCategory, index: int, expected: Any, actual: Any,
              tolerance: Optional[Tolerance] = None, scenario: str = "",
              label: str = "") -> CheckResult:
        if category.is_float:
            band = tolerance or self.epsilons[category]
            passed = _float_equal(expected, actual, band)
            rule = str(band)
        elif tolerance is not None:
            raise ValueError(f"tolerance bands apply to float categories, not {category}")
        elif category == TypeCategory.ENUM:
            passed = _enum_equal(expected, actual)
            rule = "discriminant"
        elif category == TypeCategory.RAW_POINTER:
            passed = isinstance(actual, Ref) and actual == expected
            rule = "identity"
        elif category == TypeCategory.TEXT:
            passed = _bytes_equal(expected, actual)
            rule = "bytes"
        elif category in (TypeCategory.STRUCT, TypeCategory.OWNED_AGGREGATE_POINTER):
            passed = _record_equal(expected, actual)
            rule = "fields"
        else:
            passed = _exact_equal(expected, actual)
            rule = "exact"
        return CheckResult(category, index, expected, actual, passed, rule, scenario, label)

    def check_outcome(self, index: int, expected: str, actual: Any,
                      scenario: str = "", label: str = "") -> CheckResult:
        """Compare a dispatch outcome; identified by its label, not a category."""
        passed = isinstance(actual, str) and actual == expected
        return CheckResult(None, index, expected, actual, passed, "outcome", scenario, label)


def _exact_equal(expected: Any, actual: Any) -> bool:
    # bool and int are distinct kinds here: 1 is not True
    if isinstance(expected, bool) or isinstance(actual, bool):
        return isinstance(expected, bool) and isinstance(actual, bool) and expected == actual
    if isinstance(expected, float) or isinstance(actual, float):
        return False
    return expected == actual


def _float_equal(expected: Any, actual: Any, band: Tolerance) -> bool:
    if not isinstance(actual, (int, float)) or isinstance(actual, bool):
        return False
    if math.isnan(actual):
        return False
    return band.accepts(float(expected), float(actual))


def _enum_equal(expected: Any, actual: Any) -> bool:
    try:
        return int(expected) == int(actual)
    except (TypeError, ValueError):
        return False


def _bytes_equal(expected: Any, actual: Any) -> bool:
    return isinstance(actual, bytes) and isinstance(expected, bytes) and actual == expected


def _record_equal(expected: Any, actual: Any) -> bool:
    if not isinstance(actual, AggregateRecord) or not isinstance(expected, AggregateRecord):
        return False
    return (expected.x == actual.x and expected.y == actual.y
            and _bytes_equal(expected.name, actual.name))
