from __future__ import annotations
from enum import Enum, IntEnum
from typing import Optional, Union
from dataclasses import dataclass


class TypeCategory(Enum):
    INT = "int"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    UINT = "uint"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    BYTE = "byte"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    FLOAT = "float"
    BOOL = "bool"
    TEXT = "text"
    RAW_POINTER = "void*"
    TYPED_POINTER = "int*"
    OWNED_AGGREGATE_POINTER = "Point*"
    STRUCT = "Point"
    ENUM = "Color"

    def __str__(self) -> str:
        return self.value

    @property
    def is_signed_int(self) -> bool:
        return self in SIGNED_INTS

    @property
    def is_unsigned_int(self) -> bool:
        return self in UNSIGNED_INTS

    @property
    def is_integer(self) -> bool:
        return self in SIGNED_INTS or self in UNSIGNED_INTS

    @property
    def is_float(self) -> bool:
        return self in FLOATS

    @property
    def is_scalar(self) -> bool:
        """Categories stored as a plain number (the LLVM-lowerable set)."""
        return self.is_integer or self.is_float or self in (TypeCategory.BOOL, TypeCategory.ENUM)

    def storage_bits(self, word_size: int = 8) -> Optional[int]:
        """Storage width in bits; native-width integers follow the target word size.

        Returns None for categories without a fixed scalar width
        (text, pointers, aggregates).
        """
        if self in (TypeCategory.INT, TypeCategory.UINT):
            return word_size * 8
        return _FIXED_BITS.get(self)


SIGNED_INTS = frozenset({
    TypeCategory.INT, TypeCategory.INT8, TypeCategory.INT16,
    TypeCategory.INT32, TypeCategory.INT64,
})

# Byte is an unsigned 8-bit value rendered as a character.
UNSIGNED_INTS = frozenset({
    TypeCategory.UINT, TypeCategory.UINT8, TypeCategory.UINT16,
    TypeCategory.UINT32, TypeCategory.UINT64, TypeCategory.BYTE,
})

FLOATS = frozenset({TypeCategory.FLOAT32, TypeCategory.FLOAT64, TypeCategory.FLOAT})

_FIXED_BITS = {
    TypeCategory.INT8: 8,
    TypeCategory.INT16: 16,
    TypeCategory.INT32: 32,
    TypeCategory.INT64: 64,
    TypeCategory.UINT8: 8,
    TypeCategory.UINT16: 16,
    TypeCategory.UINT32: 32,
    TypeCategory.UINT64: 64,
    TypeCategory.BYTE: 8,
    TypeCategory.FLOAT32: 32,
    TypeCategory.FLOAT64: 64,
    TypeCategory.FLOAT: 32,   # `float` is single precision, like float32
    TypeCategory.BOOL: 8,
    TypeCategory.ENUM: 32,
}


class Color(IntEnum):
    RED = 0
    GREEN = 1
    BLUE = 2
    YELLOW = 3


UNKNOWN_COLOR = "UNKNOWN"


def color_name(value: Union[int, Color]) -> str:
    """Total name mapping: discriminants outside the enum map to UNKNOWN."""
    try:
        return Color(int(value)).name
    except ValueError:
        return UNKNOWN_COLOR


@dataclass(frozen=True)
class AggregateRecord:
    """Point-equivalent aggregate: two signed ints and a byte-string name."""
    x: int
    y: int
    name: bytes

    def __str__(self) -> str:
        return f'({self.x}, {self.y}) "{self.name.decode("latin-1")}"'


@dataclass(frozen=True)
class Ref:
    """Reference token standing in for an address.

    `target` names a registered container; `index` selects one element,
    or is None when the token refers to the container as a whole.
    """
    target: str
    index: Optional[int] = None

    def __str__(self) -> str:
        if self.index is None:
            return f"&{self.target}"
        return f"&{self.target}[{self.index}]"


@dataclass(frozen=True)
class Handle:
    """Opaque reference to a heap-allocated AggregateRecord."""
    id: int

    def __str__(self) -> str:
        return f"#{self.id}"


@dataclass(frozen=True)
class ArrayType:
    category: TypeCategory
    size: int

    def __str__(self) -> str:
        return f"{self.category}[{self.size}]"
