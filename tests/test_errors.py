from __future__ import annotations

import pytest

from arrayconf.internals import errors as er
from arrayconf.internals.errors import (
    ERR,
    BoundsViolation,
    Category,
    ConstructionDefect,
    ErrorMessage,
    HarnessError,
    LifecycleViolation,
    Severity,
    raise_error,
)


def test_codes_map_to_exception_classes() -> None:
    with pytest.raises(ConstructionDefect):
        raise_error("CD0001", category="int8")
    with pytest.raises(BoundsViolation):
        raise_error("BV0001", index=3, category="int8", length=3)
    with pytest.raises(LifecycleViolation):
        raise_error("LV0003", handle="#2")


def test_bounds_violation_is_an_index_error() -> None:
    with pytest.raises(IndexError) as info:
        raise_error("BV0001", index=-1, category="int8", length=3)
    assert isinstance(info.value, HarnessError)
    assert info.value.code == "BV0001"
    assert info.value.text == "index -1 out of range for int8 array of length 3"


def test_assertion_mismatch_is_never_raised() -> None:
    with pytest.raises(ValueError, match="not a raisable error"):
        raise_error("AM0001", category="int8", index=0, expected=1, actual=2)
    assert ERR.AM0001.severity is Severity.WARNING


def test_missing_format_key() -> None:
    with pytest.raises(KeyError, match="missing text key 'handle'"):
        raise_error("LV0002")


def test_unknown_code() -> None:
    with pytest.raises(KeyError):
        raise_error("ZZ9999")
    with pytest.raises(AttributeError):
        ERR.ZZ9999


def test_duplicate_codes_are_rejected() -> None:
    with pytest.raises(ValueError, match="duplicate error code"):
        er._add(ErrorMessage("CD0001", Severity.ERROR, "again", Category.CONSTRUCTION))


def test_code_ranges_match_categories() -> None:
    prefixes = {
        Category.CONSTRUCTION: "CD",
        Category.BOUNDS: "BV",
        Category.LIFECYCLE: "LV",
        Category.ASSERTION: "AM",
        Category.BACKEND: "BE",
    }
    for code, msg in er.REGISTRY.items():
        assert code == msg.code
        assert code.startswith(prefixes[msg.category])
