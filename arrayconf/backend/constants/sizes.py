"""Type and struct size constants.

All sizes are in bytes. Native int/uint and pointer sizes depend on the
target word size (see arrayconf.backend.platform_detect).
"""

# ============================================================================
# Primitive Type Sizes (bytes)
# ============================================================================

I8_SIZE_BYTES = 1
I16_SIZE_BYTES = 2
I32_SIZE_BYTES = 4
I64_SIZE_BYTES = 8

F32_SIZE_BYTES = 4
F64_SIZE_BYTES = 8

BOOL_SIZE_BYTES = 1

# Enum tag size (discriminant field)
ENUM_TAG_SIZE_BYTES = 4

# ============================================================================
# Word sizes per target architecture
# ============================================================================

WORD_SIZE_BYTES = {
    "amd64": 8,
    "arm64": 8,
    "riscv64": 8,
    "386": 4,
    "arm": 4,
}
