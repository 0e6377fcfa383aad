"""
Platform detection and target triple parsing.

Resolves the native word size (the width of `int`, `uint` and pointers)
either from an explicit target architecture name or from the host LLVM
default triple.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from llvmlite import binding as llvm

from arrayconf.backend.constants import WORD_SIZE_BYTES
from arrayconf.internals.errors import raise_error


# LLVM triple arch component -> architecture name used by --target-arch
_TRIPLE_ARCH_ALIASES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "riscv64": "riscv64",
    "i386": "386",
    "i486": "386",
    "i586": "386",
    "i686": "386",
}


@dataclass
class TargetPlatform:
    """Represents a target platform."""
    arch: str      # arm64, x86_64, riscv64, etc.
    vendor: str    # apple, pc, unknown, etc.
    os: str        # darwin, linux, windows, etc.
    abi: str       # (empty), gnu, musl, etc.

    @property
    def triple(self) -> str:
        """Reconstruct the target triple string."""
        parts = [self.arch, self.vendor, self.os]
        if self.abi:
            parts.append(self.abi)
        return '-'.join(parts)

    @property
    def arch_name(self) -> str:
        """Architecture name in the --target-arch vocabulary."""
        if self.arch in _TRIPLE_ARCH_ALIASES:
            return _TRIPLE_ARCH_ALIASES[self.arch]
        if self.arch.startswith("arm") or self.arch.startswith("thumb"):
            return "arm"
        return self.arch


def parse_triple(triple: str) -> TargetPlatform:
    """
    Parse an LLVM target triple into components.

    Examples:
        arm64-apple-darwin25.0.0 -> TargetPlatform(arm64, apple, darwin, '')
        x86_64-pc-linux-gnu -> TargetPlatform(x86_64, pc, linux, gnu)
    """
    parts = triple.split('-')

    # Handle version numbers in OS (e.g., darwin25.0.0)
    os_part = parts[2] if len(parts) > 2 else 'unknown'
    if '.' in os_part:
        os_part = os_part.split('.')[0]
    if os_part.startswith('darwin'):
        os_part = 'darwin'

    return TargetPlatform(
        arch=parts[0] if len(parts) > 0 else 'unknown',
        vendor=parts[1] if len(parts) > 1 else 'unknown',
        os=os_part,
        abi=parts[3] if len(parts) > 3 else '',
    )


def get_current_platform() -> TargetPlatform:
    """Get the host platform from the LLVM default triple."""
    return parse_triple(llvm.get_default_triple())


def word_size_for(arch: Optional[str] = None) -> int:
    """Word size in bytes for `arch`, or for the host when arch is None.

    Raises:
        ConstructionDefect CD0005: If the architecture is not known.
    """
    name = arch if arch is not None else get_current_platform().arch_name
    try:
        return WORD_SIZE_BYTES[name]
    except KeyError:
        raise_error("CD0005", arch=name, known=", ".join(sorted(WORD_SIZE_BYTES)))
