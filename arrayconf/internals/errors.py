# arrayconf/internals/errors.py
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Type, TYPE_CHECKING

if TYPE_CHECKING:
    from arrayconf.internals.report import Reporter


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class Category(str, Enum):
    CONSTRUCTION = "construction"
    BOUNDS       = "bounds"
    LIFECYCLE    = "lifecycle"
    ASSERTION    = "assertion"
    BACKEND      = "backend"


@dataclass(frozen=True)
class ErrorMessage:
    code: str
    severity: Severity
    text: str
    category: Category
    doc: str = ""


REGISTRY: Dict[str, ErrorMessage] = {}

class _ErrorCatalog:
    def __init__(self, backing: Dict[str, ErrorMessage]) -> None:
        self._registry = backing

    def __getattr__(self, name: str) -> ErrorMessage:
        try:
            return self._registry[name]
        except KeyError as e:
            raise AttributeError(name) from e

    def __getitem__(self, code: str) -> ErrorMessage:
        return self._registry[code]


ERR = _ErrorCatalog(REGISTRY)


class HarnessError(RuntimeError):
    """Base class for coded harness errors."""

    def __init__(self, code: str, text: str) -> None:
        super().__init__(f"{code}: {text}")
        self.code = code
        self.text = text


class ConstructionDefect(HarnessError):
    """The catalog or a container cannot be built as declared."""


class BoundsViolation(HarnessError, IndexError):
    """Container access outside its fixed length."""


class LifecycleViolation(HarnessError):
    """Heap handle released twice, unknown, leaked or used after release."""


class BackendError(HarnessError):
    """LLVM lowering or JIT failure."""


_EXCEPTIONS: Dict[Category, Type[HarnessError]] = {
    Category.CONSTRUCTION: ConstructionDefect,
    Category.BOUNDS: BoundsViolation,
    Category.LIFECYCLE: LifecycleViolation,
    Category.BACKEND: BackendError,
}


def emit(r: 'Reporter', em: ErrorMessage, **kwargs) -> None:
    text = _fmt(em.code, **kwargs)
    if em.severity == Severity.ERROR:
        r.error(em.code, text)
    else:
        r.warn(em.code, text)

def raise_error(code: str, **kwargs) -> None:
    """Raise the exception class registered for the code's category.

    Args:
        code: Error code (e.g., "LV0002")
        **kwargs: Format parameters for the error message

    Raises:
        HarnessError: Always; the concrete subclass follows the code's category.
            AssertionMismatch codes are not raisable (mismatches are data).
    """
    msg = _get(code)
    exc_type = _EXCEPTIONS.get(msg.category)
    if exc_type is None:
        raise ValueError(f"{code} ({msg.category.value}) is not a raisable error")
    raise exc_type(code, _fmt(code, **kwargs))


#
# --- Helpers
#

def _add(msg: ErrorMessage) -> None:
    if msg.code in REGISTRY:
        raise ValueError(f"duplicate error code {REGISTRY[msg.code]} in {msg}")
    REGISTRY[msg.code] = msg

def _get(code: str) -> ErrorMessage:
    try:
        return REGISTRY[code]
    except KeyError:
        raise KeyError(f"unknown error code: {code}")

def _fmt(code: str, **kwargs) -> str:
    msg = _get(code)
    try:
        return msg.text.format(**kwargs)
    except KeyError as key_error:
        missing = key_error.args[0]
        raise KeyError(f"missing text key '{missing}' for {code} "
                       f"(needed by: {msg.text!r})") from None

#
# --- Registry population
#

# Construction defects - CD0xxx range
_add(ErrorMessage("CD0001", Severity.ERROR,
    "category '{category}' is missing from the value catalog",
    Category.CONSTRUCTION, "Every declared type category needs a sample set before any check runs."))

_add(ErrorMessage("CD0002", Severity.ERROR,
    "sample {value!r} does not fit {category} ({bits}-bit {signedness})",
    Category.CONSTRUCTION, "Samples must be representable in the category's storage width."))

_add(ErrorMessage("CD0003", Severity.ERROR,
    "{category} declares {got} samples, expected {expected}",
    Category.CONSTRUCTION, "Sample sets hold exactly three values, or four for Bool and Enum."))

_add(ErrorMessage("CD0004", Severity.ERROR,
    "unknown scenario '{name}' (available: {available})",
    Category.CONSTRUCTION, "Scenario selection must name declared scenarios."))

_add(ErrorMessage("CD0005", Severity.ERROR,
    "unsupported target architecture '{arch}' (known: {known})",
    Category.CONSTRUCTION, "The native word size is derived from the target architecture."))

_add(ErrorMessage("CD0006", Severity.ERROR,
    "reference target '{target}' is not registered",
    Category.CONSTRUCTION, "Pointer entries must reference a registered, live container."))

# Bounds violations - BV0xxx range
_add(ErrorMessage("BV0001", Severity.ERROR,
    "index {index} out of range for {category} array of length {length}",
    Category.BOUNDS, "Containers have a fixed length; negative indices do not wrap."))

# Lifecycle violations - LV0xxx range
_add(ErrorMessage("LV0001", Severity.ERROR,
    "release of unknown handle {handle}",
    Category.LIFECYCLE, "The handle was never returned by this lifecycle manager."))

_add(ErrorMessage("LV0002", Severity.ERROR,
    "double release of handle {handle}",
    Category.LIFECYCLE, "Every allocation is released exactly once."))

_add(ErrorMessage("LV0003", Severity.ERROR,
    "access to released handle {handle}",
    Category.LIFECYCLE, "A handle is never dereferenced after release."))

_add(ErrorMessage("LV0004", Severity.ERROR,
    "{count} handle(s) still live at scope exit: {handles}",
    Category.LIFECYCLE, "All allocations are released by the end of the scenario."))

_add(ErrorMessage("LV0005", Severity.ERROR,
    "allocation of {size} bytes failed",
    Category.LIFECYCLE, "malloc returned NULL."))

# Assertion mismatches - AM0xxx range (reported, never raised)
_add(ErrorMessage("AM0001", Severity.WARNING,
    "{category}[{index}]: expected {expected}, got {actual}",
    Category.ASSERTION, "Equivalence check failed; the run continues."))

# Backend errors - BE0xxx range
_add(ErrorMessage("BE0001", Severity.ERROR,
    "LLVM IR verification failed: {message}",
    Category.BACKEND, "The lowered module did not pass LLVM verification."))

_add(ErrorMessage("BE0002", Severity.ERROR,
    "category {category} cannot be lowered to LLVM IR",
    Category.BACKEND, "Only scalar categories have an LLVM global array lowering."))

_add(ErrorMessage("CD0007", Severity.ERROR,
    "{category} storage {ctype} is {got} bytes, expected {expected}",
    Category.CONSTRUCTION, "The native element layout must match the category's storage width."))
