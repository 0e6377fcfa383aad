from __future__ import annotations
import json
from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any

from arrayconf.internals.formatting import format_value, jsonable
from arrayconf.semantics.equivalence import CheckResult
from arrayconf.semantics.typesys import TypeCategory

class C:
    """ANSI color/style escape codes."""
    RESET = "\x1b[0m"
    BOLD  = "\x1b[1m"
    DIM   = "\x1b[2m"
    RED   = "\x1b[31m"
    GREEN = "\x1b[32m"
    YELLOW = "\x1b[33m"
    CYAN  = "\x1b[36m"
    GRAY  = "\x1b[90m"

@dataclass
class Diagnostic:
    kind: str
    code: str
    message: str
    scenario: Optional[str] = None  # Scenario that was running when the diagnostic was raised

@dataclass
class Section:
    name: str
    title: str
    results: List[CheckResult] = field(default_factory=list)


# Categories rendered one element per line instead of as a bracketed list
_ROW_TITLES = {
    TypeCategory.STRUCT: "Point array:",
    TypeCategory.ENUM: "Color array:",
    TypeCategory.OWNED_AGGREGATE_POINTER: "Dynamic Point* array:",
}

_LIST_LABELS = {
    TypeCategory.TYPED_POINTER: "int* array dereferenced",
    TypeCategory.TEXT: "string array",
}


class Reporter:
    """Collects check results and diagnostics, renders them at the end of a run.

    Results are appended in the order the runner produces them; reporting
    never blocks or fails on a result.
    """

    def __init__(self) -> None:
        self.sections: List[Section] = []
        self.items: List[Diagnostic] = []

    # --- collection ---

    def section(self, name: str, title: str) -> Section:
        s = Section(name, title)
        self.sections.append(s)
        return s

    def report(self, result: CheckResult) -> None:
        if not self.sections or self.sections[-1].name != result.scenario:
            self.section(result.scenario, result.scenario)
        self.sections[-1].results.append(result)

    def error(self, code: str, msg: str, scenario: Optional[str] = None):
        self.items.append(Diagnostic("error", code, msg, scenario or self._current()))

    def warn(self, code: str, msg: str, scenario: Optional[str] = None):
        self.items.append(Diagnostic("warning", code, msg, scenario or self._current()))

    def _current(self) -> Optional[str]:
        return self.sections[-1].name if self.sections else None

    @property
    def results(self) -> List[CheckResult]:
        return [r for s in self.sections for r in s.results]

    @property
    def has_errors(self) -> bool:
        return any(d.kind == "error" for d in self.items)

    @property
    def has_warnings(self) -> bool:
        return any(d.kind == "warning" for d in self.items)

    def summary(self) -> Dict[str, int]:
        results = self.results
        passed = sum(1 for r in results if r.passed)
        return {
            "checks": len(results),
            "passed": passed,
            "failed": len(results) - passed,
            "faults": sum(1 for d in self.items if d.kind == "error"),
        }

    # --- rendering ---

    def format(self, use_color: bool = True, use_unicode: bool = True) -> str:
        """Render results, diagnostics and a summary line.

        use_color   → ANSI colorize headings, diagnostics and the summary
        use_unicode → use ✓ / ✗ / • instead of their ASCII fallbacks
        """
        out: List[str] = []
        for s in self.sections:
            heading = f"-- {s.title} --"
            out.append("")
            out.append(f"{C.BOLD}{heading}{C.RESET}" if use_color else heading)
            out.extend(self._format_section(s, use_color, use_unicode))

        diags = self.format_diagnostics(use_color)
        if diags:
            out.append("")
            out.append(diags)

        out.append("")
        out.append(self._format_summary(use_color, use_unicode))
        return "\n".join(out)

    def _format_section(self, s: Section, use_color: bool, use_unicode: bool) -> List[str]:
        lines: List[str] = []
        groups: List[List[CheckResult]] = []
        for r in s.results:
            if (groups and groups[-1][0].category == r.category
                    and not r.label and not groups[-1][0].label):
                groups[-1].append(r)
            else:
                groups.append([r])

        for group in groups:
            category = group[0].category
            if group[0].label:
                # Labelled checks (dispatch, float operations) get one line each
                r = group[0]
                mark = self._mark(r.passed, use_color, use_unicode)
                lines.append(f"{r.label} = {format_value(category, r.actual)}  {mark}")
            elif category in _ROW_TITLES:
                lines.append(_ROW_TITLES[category])
                for r in group:
                    lines.append(f"  [{r.index}]: {format_value(category, r.actual)}")
            else:
                label = _LIST_LABELS.get(category, f"{category.value} array")
                values = ", ".join(format_value(category, r.actual) for r in group)
                lines.append(f"{label}: [{values}]")
        return lines

    @staticmethod
    def _mark(passed: bool, use_color: bool, use_unicode: bool) -> str:
        if use_unicode:
            text = "✓" if passed else "✗"
        else:
            text = "ok" if passed else "FAIL"
        if use_color:
            return f"{C.GREEN if passed else C.RED}{text}{C.RESET}"
        return text

    def format_diagnostics(self, use_color: bool = True) -> str:
        out: List[str] = []
        for d in self.items:
            loc = d.scenario or "<run>"
            # Ensure message ends with period
            message = d.message if d.message.endswith('.') else f"{d.message}."
            if use_color:
                kind = f"{C.BOLD}{C.RED}error{C.RESET}" if d.kind == "error" else f"{C.BOLD}{C.YELLOW}warning{C.RESET}"
                out.append(f"{C.CYAN}{loc}{C.RESET}: {kind} [{C.DIM}{d.code}{C.RESET}]: {message}")
            else:
                out.append(f"{loc}: {d.kind} [{d.code}]: {message}")
        return "\n".join(out)

    def _format_summary(self, use_color: bool, use_unicode: bool) -> str:
        s = self.summary()
        sep = " • " if use_unicode else " - "
        text = f"{s['passed']}/{s['checks']} checks passed{sep}{s['failed']} failed{sep}{s['faults']} fault(s)"
        if not use_color:
            return text
        color = C.GREEN if s["failed"] == 0 and s["faults"] == 0 else C.RED
        return f"{C.BOLD}{color}{text}{C.RESET}"

    def to_json(self, indent: Optional[int] = 2) -> str:
        doc: Dict[str, Any] = {
            "sections": [
                {
                    "name": s.name,
                    "title": s.title,
                    "results": [
                        {
                            "category": r.category.value if r.category is not None else None,
                            "index": r.index,
                            "label": r.label,
                            "expected": jsonable(r.expected),
                            "actual": jsonable(r.actual),
                            "passed": r.passed,
                            "rule": r.rule,
                        }
                        for r in s.results
                    ],
                }
                for s in self.sections
            ],
            "diagnostics": [
                {"kind": d.kind, "code": d.code, "message": d.message, "scenario": d.scenario}
                for d in self.items
            ],
            "summary": self.summary(),
        }
        return json.dumps(doc, indent=indent)

    def print(self, stream=None, use_color: Optional[bool] = None, use_unicode: Optional[bool] = None) -> None:
        """Print the report to `stream` (default: sys.stdout).

        Color is auto-enabled for TTY unless NO_COLOR or TERM=dumb.
        Unicode marks (✓ / ✗) are auto-enabled for TTY unless NO_UNICODE or TERM=dumb.
        """
        import os, sys
        stream = stream or sys.stdout

        if use_color is None:
            is_tty = getattr(stream, "isatty", lambda: False)()
            no_color = os.getenv("NO_COLOR") is not None
            dumb = os.getenv("TERM") == "dumb"
            use_color = bool(is_tty and not no_color and not dumb)

        if use_unicode is None:
            is_tty = getattr(stream, "isatty", lambda: False)()
            no_unicode = os.getenv("NO_UNICODE") is not None
            dumb = os.getenv("TERM") == "dumb"
            use_unicode = bool(is_tty and not no_unicode and not dumb)

        text = self.format(use_color=use_color, use_unicode=use_unicode)
        if text:
            print(text, file=stream)
