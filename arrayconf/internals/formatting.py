"""Console rendering of sample values, following C printf conventions per category."""
from __future__ import annotations
from typing import Any, Optional

from arrayconf.semantics.typesys import AggregateRecord, Ref, Handle, TypeCategory, color_name

# printf precision per float category
FLOAT_PRECISION = {
    TypeCategory.FLOAT: 2,
    TypeCategory.FLOAT32: 3,
    TypeCategory.FLOAT64: 6,
}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def format_value(category: Optional[TypeCategory], value: Any) -> str:
    """Render one element the way the C harness prints it.

    Values of an unexpected kind (e.g. a mismatch that produced None) fall
    back to repr() so nothing is hidden.
    """
    if category.is_float and _is_number(value):
        return f"{value:.{FLOAT_PRECISION[category]}f}"
    if category == TypeCategory.BYTE and isinstance(value, int) and 0 <= value < 256:
        return chr(value)
    if category == TypeCategory.BOOL and isinstance(value, bool):
        return "true" if value else "false"
    if category == TypeCategory.ENUM and isinstance(value, int):
        return f"{color_name(value)} ({int(value)})"
    if category == TypeCategory.TEXT and isinstance(value, bytes):
        return f'"{value.decode("latin-1")}"'
    if isinstance(value, (AggregateRecord, Ref, Handle)):
        return str(value)
    if category.is_integer and _is_number(value) and not isinstance(value, float):
        return str(int(value))
    if isinstance(value, str):
        return value
    return repr(value)


def jsonable(value: Any) -> Any:
    """Plain JSON-compatible form of a sample or read-back value."""
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, int):
        return int(value)
    if isinstance(value, float):
        return value
    if isinstance(value, bytes):
        return value.decode("latin-1")
    if isinstance(value, AggregateRecord):
        return {"x": value.x, "y": value.y, "name": value.name.decode("latin-1")}
    return str(value)
