"""
Scenario Runner.

State machine over the declared scenario list:

    IDLE -> RUNNING(scenario) -> REPORTED -> IDLE -> ... -> DONE

The value catalog is validated before the first scenario; a
ConstructionDefect there propagates to the caller. Any HarnessError raised
inside a scenario (construction, bounds, lifecycle or backend) is a fault
local to that scenario: it is reported as an error diagnostic, the rest of
that scenario is skipped and the run moves on. Each scenario runs inside
one lifecycle scope, so its heap records are released on every exit path.
Failed checks are data: each one is reported as a result plus an AM0001
warning, never raised.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from tqdm import tqdm

from arrayconf.backend.codegen_llvm import LLVMCodegen
from arrayconf.backend.containers import ContainerBuilder, ReferentTable
from arrayconf.backend.memory import LifecycleManager
from arrayconf.harness.config import HarnessConfig
from arrayconf.harness.scenarios import SCENARIOS, Scenario, ScenarioContext
from arrayconf.internals.errors import ERR, HarnessError, emit
from arrayconf.internals.formatting import format_value
from arrayconf.internals.report import Reporter
from arrayconf.semantics.catalog import ValueCatalog
from arrayconf.semantics.equivalence import CheckResult, EquivalenceChecker


class RunnerState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    REPORTED = "reported"
    DONE = "done"


@dataclass
class RunOutcome:
    results: List[CheckResult] = field(default_factory=list)
    faults: List[Tuple[str, HarnessError]] = field(default_factory=list)

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r.passed)

    @property
    def failed(self) -> List[CheckResult]:
        return [r for r in self.results if not r.passed]


class ScenarioRunner:
    def __init__(self, scenarios: Sequence[Scenario] = SCENARIOS,
                 catalog: Optional[ValueCatalog] = None,
                 reporter: Optional[Reporter] = None,
                 checker: Optional[EquivalenceChecker] = None,
                 codegen: Optional[LLVMCodegen] = None,
                 word_size: int = 8,
                 progress: bool = False) -> None:
        self.scenarios = tuple(scenarios)
        self.word_size = catalog.word_size if catalog is not None else word_size
        self.catalog = catalog
        self.reporter = reporter if reporter is not None else Reporter()
        self.checker = checker or EquivalenceChecker()
        self.codegen = codegen
        self.progress = progress
        self.state = RunnerState.IDLE
        # (state, scenario name) for every transition of the last run
        self.history: List[Tuple[RunnerState, Optional[str]]] = []

    @classmethod
    def from_config(cls, config: HarnessConfig, reporter: Optional[Reporter] = None) -> 'ScenarioRunner':
        selected = [s for s in SCENARIOS if s.name in config.scenarios]
        codegen = LLVMCodegen(word_size=config.word_size) if config.backend == "llvm" else None
        return cls(selected, reporter=reporter, codegen=codegen,
                   word_size=config.word_size, progress=config.progress)

    def _transition(self, state: RunnerState, scenario: Optional[str] = None) -> None:
        self.state = state
        self.history.append((state, scenario))

    def run(self) -> RunOutcome:
        """Run every scenario once, in order.

        Raises:
            ConstructionDefect: If the catalog is invalid.
        """
        self.history = []
        self._transition(RunnerState.IDLE)
        if self.catalog is None:
            self.catalog = ValueCatalog(word_size=self.word_size)

        outcome = RunOutcome()
        bar = tqdm(self.scenarios, desc="Running scenarios", unit="scenario",
                   disable=not self.progress,
                   bar_format="{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}]")
        with bar:
            for scenario in bar:
                self._transition(RunnerState.RUNNING, scenario.name)
                self.reporter.section(scenario.name, scenario.title)
                ctx = self._context_for(scenario)
                try:
                    with ctx.lifecycle.scope():
                        scenario.run(ctx)
                    ctx.lifecycle.check_balanced()
                except HarnessError as exc:
                    self.reporter.error(exc.code, exc.text, scenario.name)
                    outcome.faults.append((scenario.name, exc))
                outcome.results.extend(ctx.results)
                self._transition(RunnerState.REPORTED, scenario.name)
                self._transition(RunnerState.IDLE)

        self._transition(RunnerState.DONE)
        return outcome

    def _context_for(self, scenario: Scenario) -> ScenarioContext:
        lifecycle = LifecycleManager()
        builder = ContainerBuilder(self.catalog, lifecycle=lifecycle,
                                   referents=ReferentTable(), codegen=self.codegen)
        return ScenarioContext(scenario.name, self.catalog, builder, lifecycle,
                               self.checker, self._report)

    def _report(self, result: CheckResult) -> None:
        self.reporter.report(result)
        if not result.passed:
            emit(self.reporter, ERR.AM0001,
                 category=result.label or result.category,
                 index=result.index,
                 expected=format_value(result.category, result.expected),
                 actual=format_value(result.category, result.actual))
