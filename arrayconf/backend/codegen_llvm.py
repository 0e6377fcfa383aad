"""
LLVM backend for scalar array containers.

Each scalar container is lowered to an LLVM global array initialized with
its samples, JIT-compiled with MCJIT, and read back through a ctypes view
over the global's address. Every emitted global is also collected into
`self.module` so the whole run can be dumped as one `.ll` file.

API:
    from arrayconf.backend.codegen_llvm import LLVMCodegen
    cg = LLVMCodegen(word_size=8)
    view, engine = cg.materialize("int8_array", TypeCategory.INT8, (-50, 0, 50))

`view` stays valid for as long as `engine` is referenced.
"""
from __future__ import annotations
from typing import Any, Sequence, Tuple

from llvmlite import ir, binding as llvm

from arrayconf.backend.llvm_optimization import LLVMOptimizer
from arrayconf.backend.llvm_types import ctype_for, llvm_constant_for, llvm_type_for
from arrayconf.semantics.typesys import TypeCategory


class LLVMCodegen:
    """Lowers scalar sample arrays to JIT-backed LLVM globals."""

    def __init__(self, module_name: str = "arrayconf_arrays", word_size: int = 8) -> None:
        self.module: ir.Module = ir.Module(name=module_name)
        self.word_size = word_size
        self.optimizer = LLVMOptimizer()

    def emit_global(self, module: ir.Module, name: str, category: TypeCategory,
                    samples: Sequence[Any]) -> ir.GlobalVariable:
        """Declare `@name = global [N x T] [...]` in the given module."""
        elem = llvm_type_for(category, self.word_size)
        arr_ty = ir.ArrayType(elem, len(samples))
        init = ir.Constant(arr_ty, [llvm_constant_for(category, elem, v) for v in samples])
        gv = ir.GlobalVariable(module, arr_ty, name=name)
        gv.initializer = init
        gv.global_constant = False
        return gv

    def materialize(self, name: str, category: TypeCategory,
                    samples: Sequence[Any]) -> Tuple[Any, llvm.ExecutionEngine]:
        """JIT a global array holding `samples` and return a ctypes view of it.

        Raises:
            BackendError BE0002: If the category has no scalar lowering.
            BackendError BE0001: If the lowered module fails verification.
        """
        self.emit_global(self.module, self.module.get_unique_name(name), category, samples)

        unit = ir.Module(name=f"{self.module.name}.{name}")
        self.emit_global(unit, name, category, samples)
        engine = self.optimizer.jit(unit)

        address = engine.get_global_value_address(name)
        view = (ctype_for(category, self.word_size) * len(samples)).from_address(address)
        return view, engine

    def dump_ir(self) -> str:
        """Textual IR for every global emitted so far."""
        self.optimizer.ensure_target(self.module)
        return str(self.module)
