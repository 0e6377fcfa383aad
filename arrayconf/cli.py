"""CLI entry point and argument parsing."""
from __future__ import annotations

import argparse
import sys

from arrayconf.backend.constants import WORD_SIZE_BYTES
from arrayconf.harness.config import BACKENDS, HarnessConfig
from arrayconf.harness.scenarios import SCENARIOS
from arrayconf.internals.errors import BackendError, ConstructionDefect
from arrayconf.internals.version import print_banner


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="arrayconf",
                                 description="Array type-coverage conformance harness")
    ap.add_argument("--version", action="store_true", help="Show version and exit")
    ap.add_argument("--backend", choices=BACKENDS, default="ctypes",
                    help="Storage backend for scalar arrays (default: ctypes)")
    ap.add_argument("--target-arch", metavar="ARCH",
                    help=f"Target architecture for native int/uint width "
                         f"({', '.join(sorted(WORD_SIZE_BYTES))}; default: host)")
    ap.add_argument("--only", metavar="SCENARIO", action="append",
                    help="Run only this scenario (repeatable; declared order is kept)")
    ap.add_argument("--list", action="store_true", help="List scenarios and exit")
    ap.add_argument("--json", action="store_true", help="Print results as JSON")
    ap.add_argument("--dump-ll", action="store_true",
                    help="Dump generated LLVM IR to terminal (llvm backend)")
    ap.add_argument("--progress", action="store_true", help="Show a progress bar over scenarios")
    ap.add_argument("--no-color", action="store_true", help="Disable ANSI colors")
    return ap


def main(argv: list[str] | None = None) -> int:
    """Run the harness. Returns 0 when the run completes, 2 on construction errors."""
    ap = build_parser()
    try:
        args = ap.parse_args(argv)
    except SystemExit as exc:
        # --help exits 0, usage errors exit 2
        return exc.code if isinstance(exc.code, int) else 2

    if not args.json:
        print_banner(use_ansi=False if args.no_color else None)

    if args.version:
        return 0

    if args.list:
        for s in SCENARIOS:
            print(f"{s.name:<14} {s.title}")
        return 0

    from arrayconf.harness.runner import ScenarioRunner
    from arrayconf.internals.report import Reporter

    reporter = Reporter()
    try:
        config = HarnessConfig.from_args(args)
        runner = ScenarioRunner.from_config(config, reporter=reporter)
        runner.run()
    except (ConstructionDefect, BackendError) as exc:
        print(f"error [{exc.code}]: {exc.text}", file=sys.stderr)
        return 2

    if args.dump_ll:
        if runner.codegen is None:
            print("note: --dump-ll has no effect without --backend llvm", file=sys.stderr)
        else:
            # Keep stdout parseable under --json
            print(runner.codegen.dump_ir(), file=sys.stderr if args.json else sys.stdout)

    if args.json:
        print(reporter.to_json())
    else:
        reporter.print(use_color=config.use_color)
        print("\nDone.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
