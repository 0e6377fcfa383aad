"""
LLVM target setup, verification and JIT compilation.

This module handles native target initialization, target machine creation
(cached per triple), module verification and MCJIT execution engines used
to materialize lowered array globals in process memory.
"""
from __future__ import annotations

from typing import Optional, Any, Dict

from llvmlite import ir, binding as llvm
from arrayconf.internals.errors import raise_error


class LLVMOptimizer:
    """Handles target setup, verification and JIT engines."""

    def __init__(self) -> None:
        self._llvm_init = False
        self._tm_cache: Dict[str, llvm.TargetMachine] = {}

    @staticmethod
    def verify(llmod: llvm.ModuleRef, when: str = "unspecified") -> None:
        """Verify LLVM IR correctness.

        Raises:
            BackendError BE0001: If verification fails.
        """
        try:
            llmod.verify()
        except RuntimeError as e:
            raise_error("BE0001", message=f"{when}: {e}")

    def ensure_llvm(self) -> None:
        """Initialize LLVM native target and assembly printer.

        Performs one-time initialization of LLVM's native target support
        and assembly printing capabilities. Safe to call multiple times.
        """
        if self._llvm_init:
            return
        llvm.initialize_native_target()
        llvm.initialize_native_asmprinter()
        self._llvm_init = True

    def _create_target_machine_with_reloc(self, target_triple: str | None = None) -> llvm.TargetMachine:
        """Create target machine with appropriate relocation model for the platform.

        Linux requires PIC for both ARM64 and x86_64; other platforms use
        the default relocation model.
        """
        self.ensure_llvm()
        triple = target_triple or llvm.get_default_triple()
        target = llvm.Target.from_triple(triple)

        reloc = "default"
        if "linux" in triple.lower():
            reloc = "pic"

        return target.create_target_machine(reloc=reloc)

    def ensure_target(self, mod: Optional[Any] = None, target_triple: str | None = None) -> llvm.TargetMachine:
        """Ensure module has target triple and data layout, return TargetMachine.

        Args:
            mod: The module to configure (ir.Module or ModuleRef, or None).
            target_triple: Specific target triple, or None for default.

        Returns:
            Configured TargetMachine for the target triple.
        """
        self.ensure_llvm()

        triple = target_triple or llvm.get_default_triple()

        tm = self._tm_cache.get(triple)
        if tm is None:
            tm = self._create_target_machine_with_reloc(triple)
            self._tm_cache[triple] = tm

        if mod is not None:
            mod.triple = triple
            mod.data_layout = str(tm.target_data)

        return tm

    def jit(self, module: ir.Module) -> llvm.ExecutionEngine:
        """Compile an IR module into a finalized MCJIT execution engine.

        The engine owns the parsed module and its target machine; callers
        keep the engine alive for as long as they read memory it materialized.
        """
        self.ensure_target(module)
        triple = module.triple
        llmod = llvm.parse_assembly(str(module))
        self.verify(llmod, module.name)
        # An engine takes ownership of its target machine, so it never gets a cached one
        tm = self._create_target_machine_with_reloc(triple)
        engine = llvm.create_mcjit_compiler(llmod, tm)
        engine.finalize_object()
        engine.run_static_constructors()
        return engine
