"""LLVM integer type bit widths.

This module provides centralized constants for LLVM IR integer type bit widths.
Used with ir.IntType(width) throughout the backend.
"""

# Integer type bit widths
INT8_BIT_WIDTH = 8      # i8 type (int8, uint8, byte, bool storage)
INT16_BIT_WIDTH = 16    # i16 type
INT32_BIT_WIDTH = 32    # i32 type (enum discriminants, struct fields)
INT64_BIT_WIDTH = 64    # i64 type (int64, uint64, native int on 64-bit targets)
