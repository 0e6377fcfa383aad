"""
Native type mapping for the array backends.

Maps each TypeCategory to:
- its ctypes element type (the storage actually written and read back)
- its LLVM IR type (for global array lowering of scalar categories)
- its expected storage size in bytes, used to cross-check the ctypes layout
"""
from __future__ import annotations
import ctypes
from typing import Optional

from llvmlite import ir

from arrayconf.backend.constants import (
    INT8_BIT_WIDTH,
    INT16_BIT_WIDTH,
    INT32_BIT_WIDTH,
    INT64_BIT_WIDTH,
    I8_SIZE_BYTES,
    I16_SIZE_BYTES,
    I32_SIZE_BYTES,
    I64_SIZE_BYTES,
    F32_SIZE_BYTES,
    F64_SIZE_BYTES,
    BOOL_SIZE_BYTES,
    ENUM_TAG_SIZE_BYTES,
)
from arrayconf.internals.errors import raise_error
from arrayconf.semantics.typesys import TypeCategory


class Point(ctypes.Structure):
    """C layout of the aggregate record: {int x; int y; unsigned char *name;}"""
    _fields_ = [
        ("x", ctypes.c_int32),
        ("y", ctypes.c_int32),
        ("name", ctypes.c_char_p),
    ]


_FIXED_CTYPES = {
    TypeCategory.INT8: ctypes.c_int8,
    TypeCategory.INT16: ctypes.c_int16,
    TypeCategory.INT32: ctypes.c_int32,
    TypeCategory.INT64: ctypes.c_int64,
    TypeCategory.UINT8: ctypes.c_uint8,
    TypeCategory.UINT16: ctypes.c_uint16,
    TypeCategory.UINT32: ctypes.c_uint32,
    TypeCategory.UINT64: ctypes.c_uint64,
    TypeCategory.BYTE: ctypes.c_uint8,
    TypeCategory.FLOAT32: ctypes.c_float,
    TypeCategory.FLOAT: ctypes.c_float,
    TypeCategory.FLOAT64: ctypes.c_double,
    TypeCategory.BOOL: ctypes.c_bool,
    TypeCategory.ENUM: ctypes.c_int32,
    TypeCategory.TEXT: ctypes.c_char_p,
    TypeCategory.STRUCT: Point,
}

_FIXED_SIZES = {
    TypeCategory.INT8: I8_SIZE_BYTES,
    TypeCategory.INT16: I16_SIZE_BYTES,
    TypeCategory.INT32: I32_SIZE_BYTES,
    TypeCategory.INT64: I64_SIZE_BYTES,
    TypeCategory.UINT8: I8_SIZE_BYTES,
    TypeCategory.UINT16: I16_SIZE_BYTES,
    TypeCategory.UINT32: I32_SIZE_BYTES,
    TypeCategory.UINT64: I64_SIZE_BYTES,
    TypeCategory.BYTE: I8_SIZE_BYTES,
    TypeCategory.FLOAT32: F32_SIZE_BYTES,
    TypeCategory.FLOAT: F32_SIZE_BYTES,
    TypeCategory.FLOAT64: F64_SIZE_BYTES,
    TypeCategory.BOOL: BOOL_SIZE_BYTES,
    TypeCategory.ENUM: ENUM_TAG_SIZE_BYTES,
}

_INT_WIDTHS = {
    I32_SIZE_BYTES: INT32_BIT_WIDTH,
    I64_SIZE_BYTES: INT64_BIT_WIDTH,
}


def ctype_for(category: TypeCategory, word_size: int = 8) -> Optional[type]:
    """ctypes element type, or None for categories stored as reference tokens."""
    if category == TypeCategory.INT:
        return ctypes.c_int64 if word_size == I64_SIZE_BYTES else ctypes.c_int32
    if category == TypeCategory.UINT:
        return ctypes.c_uint64 if word_size == I64_SIZE_BYTES else ctypes.c_uint32
    return _FIXED_CTYPES.get(category)


def size_bytes(category: TypeCategory, word_size: int = 8) -> Optional[int]:
    if category in (TypeCategory.INT, TypeCategory.UINT):
        return word_size
    return _FIXED_SIZES.get(category)


def llvm_type_for(category: TypeCategory, word_size: int = 8) -> ir.Type:
    """LLVM element type for a scalar category.

    Bool is stored as i8 (matching C `bool`), not i1.

    Raises:
        BackendError BE0002: If the category has no scalar lowering.
    """
    if category in (TypeCategory.INT, TypeCategory.UINT):
        return ir.IntType(_INT_WIDTHS[word_size])
    if category in (TypeCategory.FLOAT32, TypeCategory.FLOAT):
        return ir.FloatType()
    if category == TypeCategory.FLOAT64:
        return ir.DoubleType()
    if category in (TypeCategory.INT8, TypeCategory.UINT8, TypeCategory.BYTE, TypeCategory.BOOL):
        return ir.IntType(INT8_BIT_WIDTH)
    if category in (TypeCategory.INT16, TypeCategory.UINT16):
        return ir.IntType(INT16_BIT_WIDTH)
    if category in (TypeCategory.INT32, TypeCategory.UINT32, TypeCategory.ENUM):
        return ir.IntType(INT32_BIT_WIDTH)
    if category in (TypeCategory.INT64, TypeCategory.UINT64):
        return ir.IntType(INT64_BIT_WIDTH)
    raise_error("BE0002", category=category)


def llvm_constant_for(category: TypeCategory, ty: ir.Type, value) -> ir.Constant:
    """Build the IR constant for one sample.

    Unsigned values above the signed range are emitted in two's complement
    so the IR text always carries an in-range signed literal.
    """
    if category.is_float:
        return ir.Constant(ty, float(value))
    raw = int(value)
    if isinstance(ty, ir.IntType) and raw >= 1 << (ty.width - 1):
        raw -= 1 << ty.width
    return ir.Constant(ty, raw)
