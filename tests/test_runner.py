from __future__ import annotations

import pytest

from arrayconf.harness.config import HarnessConfig, select_scenarios
from arrayconf.harness.runner import RunnerState, ScenarioRunner
from arrayconf.harness.scenarios import SCENARIO_NAMES, SCENARIOS, Scenario, ScenarioContext
from arrayconf.internals.errors import ConstructionDefect
from arrayconf.internals.report import Reporter
from arrayconf.semantics.catalog import ValueCatalog
from arrayconf.semantics.typesys import Handle, TypeCategory


def test_full_run_passes() -> None:
    outcome = ScenarioRunner().run()
    assert outcome.results
    assert outcome.failed == []
    assert outcome.faults == []


def test_scenarios_run_in_declared_order() -> None:
    assert SCENARIO_NAMES == (
        "integers", "floats", "booleans", "pointers", "structs",
        "enums", "heap-structs", "dispatch", "float-ops",
    )
    outcome = ScenarioRunner().run()
    seen = []
    for r in outcome.results:
        if not seen or seen[-1] != r.scenario:
            seen.append(r.scenario)
    assert tuple(seen) == SCENARIO_NAMES


def test_state_machine_transitions() -> None:
    runner = ScenarioRunner(SCENARIOS[:2])
    runner.run()
    assert runner.state is RunnerState.DONE
    assert runner.history == [
        (RunnerState.IDLE, None),
        (RunnerState.RUNNING, "integers"),
        (RunnerState.REPORTED, "integers"),
        (RunnerState.IDLE, None),
        (RunnerState.RUNNING, "floats"),
        (RunnerState.REPORTED, "floats"),
        (RunnerState.IDLE, None),
        (RunnerState.DONE, None),
    ]


def test_run_is_idempotent() -> None:
    first = ScenarioRunner().run().results
    second = ScenarioRunner().run().results
    assert first == second
    runner = ScenarioRunner()
    assert runner.run().results == runner.run().results


def test_check_counts_per_scenario() -> None:
    outcome = ScenarioRunner().run()
    counts = {}
    for r in outcome.results:
        counts[r.scenario] = counts.get(r.scenario, 0) + 1
    assert counts == {
        "integers": 33,
        "floats": 9,
        "booleans": 4,
        "pointers": 9,
        "structs": 3,
        "enums": 4,
        "heap-structs": 3,
        "dispatch": 5,
        "float-ops": 2,
    }


def _leaky(ctx: ScenarioContext) -> None:
    ctx.lifecycle.allocate(ctx.catalog.samples_for(TypeCategory.OWNED_AGGREGATE_POINTER)[0])
    ctx.lifecycle.check_balanced()


def _out_of_bounds(ctx: ScenarioContext) -> None:
    container = ctx.builder.build(TypeCategory.INT8)
    ctx.check_container(container, ctx.catalog.samples_for(TypeCategory.INT8))
    container[3]


def _double_free(ctx: ScenarioContext) -> None:
    handle = ctx.lifecycle.allocate(ctx.catalog.samples_for(TypeCategory.STRUCT)[0])
    ctx.lifecycle.release(handle)
    ctx.lifecycle.release(Handle(handle.id))


def test_faults_are_isolated_per_scenario() -> None:
    scenarios = [
        Scenario("bounds", "Bounds", _out_of_bounds),
        Scenario("leak", "Leak", _leaky),
        Scenario("double-free", "Double free", _double_free),
        SCENARIOS[0],
    ]
    reporter = Reporter()
    outcome = ScenarioRunner(scenarios, reporter=reporter).run()

    assert [name for name, _ in outcome.faults] == ["bounds", "leak", "double-free"]
    assert [exc.code for _, exc in outcome.faults] == ["BV0001", "LV0004", "LV0002"]
    # checks before the fault are kept, later scenarios still run
    assert [r.scenario for r in outcome.results].count("bounds") == 3
    assert [r.scenario for r in outcome.results].count("integers") == 33
    assert [(d.scenario, d.code) for d in reporter.items] == [
        ("bounds", "BV0001"), ("leak", "LV0004"), ("double-free", "LV0002"),
    ]


def test_mismatch_is_reported_not_raised() -> None:
    def wrong(ctx: ScenarioContext) -> None:
        container = ctx.builder.build(TypeCategory.INT8)
        ctx.check_container(container, (-50, 1, 50))

    reporter = Reporter()
    outcome = ScenarioRunner([Scenario("wrong", "Wrong", wrong)], reporter=reporter).run()
    assert [r.passed for r in outcome.results] == [True, False, True]
    assert outcome.faults == []
    assert [d.code for d in reporter.items] == ["AM0001"]
    assert reporter.items[0].kind == "warning"
    assert "int8[1]: expected 1, got 0" in reporter.items[0].message


def test_invalid_catalog_aborts_before_checks() -> None:
    with pytest.raises(ConstructionDefect):
        catalog = ValueCatalog(samples={TypeCategory.INT8: (-50, 0, 50)})
        ScenarioRunner(catalog=catalog).run()


def test_word_size_four() -> None:
    outcome = ScenarioRunner(word_size=4).run()
    assert outcome.failed == []


def test_select_scenarios_keeps_declared_order() -> None:
    assert select_scenarios(["float-ops", "integers"]) == ("integers", "float-ops")
    assert select_scenarios(None) == SCENARIO_NAMES
    with pytest.raises(ConstructionDefect, match="CD0004"):
        select_scenarios(["nope"])


def test_from_config_selects_scenarios() -> None:
    config = HarnessConfig(scenarios=("dispatch",))
    runner = ScenarioRunner.from_config(config)
    assert runner.codegen is None
    outcome = runner.run()
    assert {r.scenario for r in outcome.results} == {"dispatch"}


def _unregistered_referent(ctx: ScenarioContext) -> None:
    ctx.builder.build(TypeCategory.TYPED_POINTER)


def test_construction_defect_mid_run_is_a_fault() -> None:
    scenarios = [SCENARIOS[0], Scenario("dangling", "Dangling", _unregistered_referent), SCENARIOS[1]]
    reporter = Reporter()
    runner = ScenarioRunner(scenarios, reporter=reporter)
    outcome = runner.run()

    assert runner.state is RunnerState.DONE
    assert [(name, exc.code) for name, exc in outcome.faults] == [("dangling", "CD0006")]
    assert isinstance(outcome.faults[0][1], ConstructionDefect)
    assert {r.scenario for r in outcome.results} == {"integers", "floats"}
    assert outcome.failed == []
    assert [(d.scenario, d.code) for d in reporter.items] == [("dangling", "CD0006")]


def test_heap_records_released_when_scenario_faults() -> None:
    managers = []

    def heap_then_out_of_bounds(ctx: ScenarioContext) -> None:
        managers.append(ctx.lifecycle)
        container = ctx.builder.build(TypeCategory.OWNED_AGGREGATE_POINTER)
        container[3]

    outcome = ScenarioRunner([Scenario("faulty", "Faulty", heap_then_out_of_bounds)]).run()
    assert [(name, exc.code) for name, exc in outcome.faults] == [("faulty", "BV0001")]
    lifecycle = managers[0]
    assert lifecycle.live_handles == []
    assert lifecycle.allocations == lifecycle.releases == 3
