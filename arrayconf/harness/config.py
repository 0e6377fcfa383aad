"""Run configuration collected from the command line."""
from __future__ import annotations
import argparse
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from arrayconf.backend.platform_detect import word_size_for
from arrayconf.harness.scenarios import SCENARIO_NAMES
from arrayconf.internals.errors import raise_error

BACKENDS = ("ctypes", "llvm")


@dataclass(frozen=True)
class HarnessConfig:
    backend: str = "ctypes"
    word_size: int = 8
    scenarios: Tuple[str, ...] = SCENARIO_NAMES
    use_color: Optional[bool] = None   # None: decide from the output stream
    progress: bool = False

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> 'HarnessConfig':
        """Build a config from parsed CLI arguments.

        Raises:
            ConstructionDefect CD0004: If --only names an unknown scenario.
            ConstructionDefect CD0005: If --target-arch is not a known architecture.
        """
        return cls(
            backend=args.backend,
            word_size=word_size_for(args.target_arch),
            scenarios=select_scenarios(args.only),
            use_color=False if args.no_color else None,
            progress=args.progress,
        )


def select_scenarios(names: Optional[Iterable[str]]) -> Tuple[str, ...]:
    """Requested scenario names in declared order; all of them when names is empty."""
    if not names:
        return SCENARIO_NAMES
    names = list(names)
    wanted = set(names)
    for name in names:
        if name not in SCENARIO_NAMES:
            raise_error("CD0004", name=name, available=", ".join(SCENARIO_NAMES))
    return tuple(n for n in SCENARIO_NAMES if n in wanted)
