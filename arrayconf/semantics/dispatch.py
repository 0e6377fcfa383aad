"""Guarded integer dispatch with grouped cases and an explicit default."""
from __future__ import annotations
from typing import Iterable, Mapping, Tuple


class Dispatch:
    """Total mapping int -> outcome.

    Cases are (labels, outcome) pairs; several labels may share one outcome
    (the fallthrough grouping of `case 2: case 3:`). Anything unmatched maps
    to the default.
    """

    def __init__(self, cases: Iterable[Tuple[Iterable[int], str]], default: str) -> None:
        table: dict[int, str] = {}
        for labels, outcome in cases:
            for label in labels:
                if label in table:
                    raise ValueError(f"duplicate case label {label}")
                table[label] = outcome
        self._table: Mapping[int, str] = table
        self.default = default

    def __call__(self, selector: int) -> str:
        return self._table.get(selector, self.default)

    @property
    def labels(self) -> Tuple[int, ...]:
        return tuple(self._table)


X_IS_ONE = "x is one"
X_IS_TWO_OR_THREE = "x is two or three"
X_IS_SOMETHING_ELSE = "x is something else"

SELECTOR_DISPATCH = Dispatch(
    [
        ((1,), X_IS_ONE),
        ((2, 3), X_IS_TWO_OR_THREE),
    ],
    default=X_IS_SOMETHING_ELSE,
)


def describe_selector(x: int) -> str:
    return SELECTOR_DISPATCH(x)
