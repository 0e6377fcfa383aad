"""Backend constants facade.

Organized by category:
- bit_widths: LLVM integer type bit widths
- sizes: primitive type sizes and per-architecture word sizes
"""

from arrayconf.backend.constants.bit_widths import (
    INT8_BIT_WIDTH,
    INT16_BIT_WIDTH,
    INT32_BIT_WIDTH,
    INT64_BIT_WIDTH,
)

from arrayconf.backend.constants.sizes import (
    I8_SIZE_BYTES,
    I16_SIZE_BYTES,
    I32_SIZE_BYTES,
    I64_SIZE_BYTES,
    F32_SIZE_BYTES,
    F64_SIZE_BYTES,
    BOOL_SIZE_BYTES,
    ENUM_TAG_SIZE_BYTES,
    WORD_SIZE_BYTES,
)

__all__ = [
    'INT8_BIT_WIDTH',
    'INT16_BIT_WIDTH',
    'INT32_BIT_WIDTH',
    'INT64_BIT_WIDTH',
    'I8_SIZE_BYTES',
    'I16_SIZE_BYTES',
    'I32_SIZE_BYTES',
    'I64_SIZE_BYTES',
    'F32_SIZE_BYTES',
    'F64_SIZE_BYTES',
    'BOOL_SIZE_BYTES',
    'ENUM_TAG_SIZE_BYTES',
    'WORD_SIZE_BYTES',
]
