"""
Value catalog: the canonical sample set for every type category.

Samples are read-only fixtures. They are validated once at construction
(count and representability in the category's storage width) so that a
defective catalog is rejected before any container is built.

Pointer categories are described in terms of the referent containers they
point into; the Container Builder resolves those references at build time.
"""
from __future__ import annotations
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Tuple

from arrayconf.internals.errors import raise_error
from arrayconf.semantics.typesys import (
    AggregateRecord,
    Color,
    Ref,
    TypeCategory,
)

Samples = Tuple[object, ...]

# Referent container names used by the pointer categories.
VALUES_REFERENT = "values"
STRINGS_REFERENT = "strings"
INT_PTR_REFERENT = "int_ptr_array"

# Values stored in the referent Int container the typed pointers point into.
POINTEE_VALUES: Samples = (42, 84, 126)

_DEFAULT_SAMPLES: dict[TypeCategory, Samples] = {
    TypeCategory.INT: (-100, 0, 100),
    TypeCategory.INT8: (-50, 0, 50),
    TypeCategory.INT16: (-1000, 0, 1000),
    TypeCategory.INT32: (-100000, 0, 100000),
    TypeCategory.INT64: (-1000000, 0, 1000000),
    TypeCategory.UINT: (10, 20, 30),
    TypeCategory.UINT8: (100, 150, 200),
    TypeCategory.UINT16: (1000, 2000, 3000),
    TypeCategory.UINT32: (100000, 200000, 300000),
    TypeCategory.UINT64: (1000000, 2000000, 3000000),
    TypeCategory.BYTE: (ord("A"), ord("B"), ord("C")),
    TypeCategory.FLOAT: (1.1, 2.2, 3.3),
    TypeCategory.FLOAT32: (1.25, 2.75, 3.125),
    TypeCategory.FLOAT64: (1.123456, 2.789012, 3.456789),
    TypeCategory.BOOL: (True, False, True, False),
    TypeCategory.TEXT: (b"Hello", b"World", b"GBC"),
    TypeCategory.TYPED_POINTER: (
        Ref(VALUES_REFERENT, 0),
        Ref(VALUES_REFERENT, 1),
        Ref(VALUES_REFERENT, 2),
    ),
    TypeCategory.RAW_POINTER: (
        Ref(VALUES_REFERENT, 0),
        Ref(STRINGS_REFERENT, 0),
        Ref(INT_PTR_REFERENT),
    ),
    TypeCategory.STRUCT: (
        AggregateRecord(10, 20, b"Origin"),
        AggregateRecord(100, 200, b"Point A"),
        AggregateRecord(-50, 75, b"Point B"),
    ),
    TypeCategory.ENUM: (Color.RED, Color.GREEN, Color.BLUE, Color.YELLOW),
    TypeCategory.OWNED_AGGREGATE_POINTER: (
        AggregateRecord(300, 400, b"Dynamic A"),
        AggregateRecord(-150, 250, b"Dynamic B"),
        AggregateRecord(0, 0, b"Dynamic C"),
    ),
}

# Struct fields are C ints; their width does not follow the word size.
_STRUCT_FIELD_BITS = 32


def expected_count(category: TypeCategory) -> int:
    return 4 if category in (TypeCategory.BOOL, TypeCategory.ENUM) else 3


def int_range(bits: int, signed: bool) -> Tuple[int, int]:
    if signed:
        return -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    return 0, (1 << bits) - 1


class ValueCatalog:
    """Validated, immutable mapping of category -> samples."""

    def __init__(self, samples: Optional[Mapping[TypeCategory, Samples]] = None,
                 word_size: int = 8,
                 categories: Iterable[TypeCategory] = tuple(TypeCategory)) -> None:
        self.word_size = word_size
        table = dict(_DEFAULT_SAMPLES if samples is None else samples)
        for category in categories:
            if category not in table:
                raise_error("CD0001", category=category)
            table[category] = tuple(table[category])
            self.validate(category, table[category])
        self._samples: Mapping[TypeCategory, Samples] = MappingProxyType(table)

    def samples_for(self, category: TypeCategory) -> Samples:
        try:
            return self._samples[category]
        except KeyError:
            raise_error("CD0001", category=category)

    def pointee_values(self) -> Samples:
        return POINTEE_VALUES

    @property
    def categories(self) -> Tuple[TypeCategory, ...]:
        return tuple(self._samples)

    def validate(self, category: TypeCategory, samples: Samples, check_count: bool = True) -> None:
        """Reject wrong sample counts and values that do not fit the storage width."""
        want = expected_count(category)
        if check_count and len(samples) != want:
            raise_error("CD0003", category=category, got=len(samples), expected=want)

        if category.is_integer:
            bits = category.storage_bits(self.word_size)
            signed = category.is_signed_int
            for value in samples:
                self._check_int(category, value, bits, signed)
        elif category in (TypeCategory.STRUCT, TypeCategory.OWNED_AGGREGATE_POINTER):
            for record in samples:
                self._check_int(category, record.x, _STRUCT_FIELD_BITS, True)
                self._check_int(category, record.y, _STRUCT_FIELD_BITS, True)
        elif category == TypeCategory.ENUM:
            for value in samples:
                self._check_int(category, int(value), 32, True)

    @staticmethod
    def _check_int(category: TypeCategory, value: int, bits: int, signed: bool) -> None:
        lo, hi = int_range(bits, signed)
        if not (lo <= value <= hi):
            raise_error("CD0002", value=value, category=category, bits=bits,
                        signedness="signed" if signed else "unsigned")


def samples_for(category: TypeCategory, word_size: int = 8) -> Samples:
    """Pure lookup against the default catalog."""
    return ValueCatalog(word_size=word_size, categories=(category,)).samples_for(category)
