"""
Scenario definitions.

A scenario builds its containers from scratch, reads every element back and
hands each comparison to the context's `check()`. Scenarios share nothing:
the runner gives each one a fresh ScenarioContext (its own builder,
referent table and lifecycle manager).

Declared order:
    integers, floats, booleans, pointers, structs, enums, heap-structs,
    dispatch, float-ops
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence, Tuple

from arrayconf.backend.containers import ArrayContainer, ContainerBuilder
from arrayconf.backend.memory import LifecycleManager
from arrayconf.semantics.catalog import ValueCatalog
from arrayconf.semantics.dispatch import (
    X_IS_ONE,
    X_IS_SOMETHING_ELSE,
    X_IS_TWO_OR_THREE,
    describe_selector,
)
from arrayconf.semantics.equivalence import CheckResult, EquivalenceChecker, OpenInterval, Tolerance
from arrayconf.semantics.typesys import TypeCategory

T = TypeCategory

INTEGER_CATEGORIES = (
    T.INT, T.INT8, T.INT16, T.INT32, T.INT64,
    T.UINT, T.UINT8, T.UINT16, T.UINT32, T.UINT64,
    T.BYTE,
)
FLOAT_CATEGORIES = (T.FLOAT, T.FLOAT32, T.FLOAT64)

# selector -> expected outcome; 0 and 4 exercise the default branch
DISPATCH_EXPECTATIONS: Tuple[Tuple[int, str], ...] = (
    (1, X_IS_ONE),
    (2, X_IS_TWO_OR_THREE),
    (3, X_IS_TWO_OR_THREE),
    (0, X_IS_SOMETHING_ELSE),
    (4, X_IS_SOMETHING_ELSE),
)

FLOAT_OPERANDS = (3.14, 2.71)
PRODUCT_EXPECTED, PRODUCT_BAND = 8.5094, OpenInterval(8.5, 8.51)
QUOTIENT_EXPECTED, QUOTIENT_BAND = 1.57, OpenInterval(1.56, 1.58)


@dataclass
class ScenarioContext:
    """Per-scenario state. Never reused across scenarios."""
    name: str
    catalog: ValueCatalog
    builder: ContainerBuilder
    lifecycle: LifecycleManager
    checker: EquivalenceChecker
    sink: Callable[[CheckResult], None]
    results: List[CheckResult] = field(default_factory=list)

    def check(self, category: TypeCategory, index: int, expected: Any, actual: Any,
              tolerance: Optional[Tolerance] = None, label: str = "") -> CheckResult:
        result = self.checker.check(category, index, expected, actual,
                                    tolerance=tolerance, scenario=self.name, label=label)
        self.results.append(result)
        self.sink(result)
        return result

    def check_outcome(self, selector: int, expected: str, actual: Any, label: str) -> CheckResult:
        result = self.checker.check_outcome(selector, expected, actual,
                                            scenario=self.name, label=label)
        self.results.append(result)
        self.sink(result)
        return result

    def check_container(self, container: ArrayContainer, expected: Sequence[Any]) -> None:
        for i, want in enumerate(expected):
            self.check(container.category, i, want, container[i])


@dataclass(frozen=True)
class Scenario:
    name: str
    title: str
    run: Callable[[ScenarioContext], None]


def _check_categories(ctx: ScenarioContext, categories: Sequence[TypeCategory]) -> None:
    for category in categories:
        container = ctx.builder.build(category)
        ctx.check_container(container, ctx.catalog.samples_for(category))


def run_integers(ctx: ScenarioContext) -> None:
    _check_categories(ctx, INTEGER_CATEGORIES)


def run_floats(ctx: ScenarioContext) -> None:
    _check_categories(ctx, FLOAT_CATEGORIES)


def run_booleans(ctx: ScenarioContext) -> None:
    _check_categories(ctx, (T.BOOL,))


def run_pointers(ctx: ScenarioContext) -> None:
    """Typed pointers by dereferenced value, text by bytes, raw pointers by identity."""
    _values, strings, typed, raw = ctx.builder.build_pointer_fixtures()
    referents = ctx.builder.referents
    pointees = ctx.catalog.pointee_values()

    for i, ref in enumerate(typed):
        ctx.check(T.TYPED_POINTER, i, pointees[i], referents.deref(ref))

    ctx.check_container(strings, ctx.catalog.samples_for(T.TEXT))

    for i, want in enumerate(ctx.catalog.samples_for(T.RAW_POINTER)):
        ref = raw[i]
        # the referent must still be live before identity is checked
        referents.validate(ref)
        ctx.check(T.RAW_POINTER, i, want, ref)


def run_structs(ctx: ScenarioContext) -> None:
    _check_categories(ctx, (T.STRUCT,))


def run_enums(ctx: ScenarioContext) -> None:
    _check_categories(ctx, (T.ENUM,))


def run_heap_structs(ctx: ScenarioContext) -> None:
    """Allocate, read back and release heap records inside one scope."""
    lifecycle = ctx.lifecycle
    expected = ctx.catalog.samples_for(T.OWNED_AGGREGATE_POINTER)
    with lifecycle.scope():
        container = ctx.builder.build(T.OWNED_AGGREGATE_POINTER)
        for i, handle in enumerate(container):
            ctx.check(T.OWNED_AGGREGATE_POINTER, i, expected[i], lifecycle.read(handle))
    lifecycle.check_balanced()


def run_dispatch(ctx: ScenarioContext) -> None:
    for selector, outcome in DISPATCH_EXPECTATIONS:
        ctx.check_outcome(selector, outcome, describe_selector(selector),
                          label=f"switch ({selector})")


def run_float_ops(ctx: ScenarioContext) -> None:
    y, z = FLOAT_OPERANDS
    ctx.check(T.FLOAT64, 0, PRODUCT_EXPECTED, y * z, tolerance=PRODUCT_BAND,
              label=f"{y:f} * {z:f}")
    ctx.check(T.FLOAT64, 1, QUOTIENT_EXPECTED, y / 2.0, tolerance=QUOTIENT_BAND,
              label=f"{y:f} / 2.0")


SCENARIOS: Tuple[Scenario, ...] = (
    Scenario("integers", "Integer arrays", run_integers),
    Scenario("floats", "Float arrays", run_floats),
    Scenario("booleans", "Bool arrays", run_booleans),
    Scenario("pointers", "Pointer arrays", run_pointers),
    Scenario("structs", "Struct arrays", run_structs),
    Scenario("enums", "Enum arrays", run_enums),
    Scenario("heap-structs", "Struct pointer arrays (dynamic)", run_heap_structs),
    Scenario("dispatch", "Testing Integer Switch", run_dispatch),
    Scenario("float-ops", "Testing Float Operations", run_float_ops),
)

SCENARIO_NAMES: Tuple[str, ...] = tuple(s.name for s in SCENARIOS)
