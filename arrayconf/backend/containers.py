"""
Fixed-length array containers and the Container Builder.

An ArrayContainer holds exactly as many elements as it was built with and
never resizes. Scalar, text and struct categories are backed by a native
ctypes array (or, on the llvm backend, by a ctypes view over a JIT-compiled
global array); pointer categories hold reference tokens (Ref for raw/typed
pointers, Handle for heap aggregates) resolved through the ReferentTable or
the LifecycleManager.

Every index access is bounds checked. Negative indices are violations,
not Python-style offsets from the end.
"""
from __future__ import annotations
import ctypes
from typing import Any, Dict, Iterator, List, Optional, Sequence, TYPE_CHECKING

from arrayconf.backend.llvm_types import Point, ctype_for, size_bytes
from arrayconf.internals.errors import raise_error
from arrayconf.semantics.catalog import (
    INT_PTR_REFERENT,
    STRINGS_REFERENT,
    VALUES_REFERENT,
    ValueCatalog,
)
from arrayconf.semantics.typesys import (
    AggregateRecord,
    ArrayType,
    Color,
    Ref,
    TypeCategory,
)

if TYPE_CHECKING:
    from arrayconf.backend.codegen_llvm import LLVMCodegen
    from arrayconf.backend.memory.heap import LifecycleManager


TOKEN_CATEGORIES = (
    TypeCategory.RAW_POINTER,
    TypeCategory.TYPED_POINTER,
    TypeCategory.OWNED_AGGREGATE_POINTER,
)


class ArrayContainer:
    """Ordered, fixed-length sequence of values of one category."""

    def __init__(self, category: TypeCategory, length: int, name: str,
                 word_size: int = 8, storage: Any = None, keepalive: Any = None) -> None:
        self.category = category
        self.name = name
        self.word_size = word_size
        self._length = length
        if storage is not None:
            self._storage = storage
        elif category in TOKEN_CATEGORIES:
            self._storage = [None] * length
        else:
            self._storage = (ctype_for(category, word_size) * length)()
        # Owner of externally provided storage (e.g. a JIT execution engine).
        self._keepalive = keepalive

    def __len__(self) -> int:
        return self._length

    def __iter__(self) -> Iterator[Any]:
        for i in range(self._length):
            yield self[i]

    @property
    def array_type(self) -> ArrayType:
        return ArrayType(self.category, self._length)

    def __repr__(self) -> str:
        return f"ArrayContainer({self.array_type}, name={self.name!r})"

    @property
    def is_native(self) -> bool:
        return self.category not in TOKEN_CATEGORIES

    @property
    def storage(self) -> Any:
        return self._storage

    def _check_index(self, index: int) -> None:
        if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < self._length:
            raise_error("BV0001", index=index, category=self.category, length=self._length)

    def __getitem__(self, index: int) -> Any:
        self._check_index(index)
        raw = self._storage[index]
        return self._decode(raw)

    def __setitem__(self, index: int, value: Any) -> None:
        self._check_index(index)
        if self.category == TypeCategory.STRUCT:
            slot = self._storage[index]
            slot.x = value.x
            slot.y = value.y
            slot.name = value.name
        elif self.category == TypeCategory.ENUM:
            self._storage[index] = int(value)
        else:
            self._storage[index] = value

    def _decode(self, raw: Any) -> Any:
        category = self.category
        if category == TypeCategory.STRUCT:
            return AggregateRecord(raw.x, raw.y, raw.name or b"")
        if category == TypeCategory.ENUM:
            try:
                return Color(raw)
            except ValueError:
                # Out-of-set discriminants are preserved unchanged.
                return int(raw)
        if category == TypeCategory.BOOL:
            return bool(raw)
        if category.is_float:
            return float(raw)
        if category.is_integer:
            return int(raw)
        return raw


class ReferentTable:
    """Registry of containers that reference tokens may point into."""

    def __init__(self) -> None:
        self._containers: Dict[str, ArrayContainer] = {}

    def register(self, container: ArrayContainer) -> ArrayContainer:
        self._containers[container.name] = container
        return container

    def __contains__(self, name: str) -> bool:
        return name in self._containers

    def get(self, name: str) -> ArrayContainer:
        try:
            return self._containers[name]
        except KeyError:
            raise_error("CD0006", target=name)

    def deref(self, ref: Ref) -> Any:
        """Element a token points at; a whole-container token yields the container."""
        container = self.get(ref.target)
        if ref.index is None:
            return container
        return container[ref.index]

    def validate(self, ref: Ref) -> None:
        container = self.get(ref.target)
        if ref.index is not None:
            container._check_index(ref.index)


class ContainerBuilder:
    """Builds containers populated with catalog samples, in catalog order.

    With a LLVMCodegen attached, scalar categories are lowered to JIT
    globals and read back through ctypes; every other category keeps
    ctypes storage.
    """

    def __init__(self, catalog: ValueCatalog,
                 lifecycle: Optional['LifecycleManager'] = None,
                 referents: Optional[ReferentTable] = None,
                 codegen: Optional['LLVMCodegen'] = None) -> None:
        self.catalog = catalog
        self.word_size = catalog.word_size
        self.lifecycle = lifecycle
        self.referents = referents if referents is not None else ReferentTable()
        self.codegen = codegen

    def build(self, category: TypeCategory, name: Optional[str] = None) -> ArrayContainer:
        return self.build_from(category, self.catalog.samples_for(category), name)

    def build_from(self, category: TypeCategory, samples: Sequence[Any],
                   name: Optional[str] = None) -> ArrayContainer:
        name = name or default_array_name(category)
        self.catalog.validate(category, tuple(samples), check_count=False)
        self._check_layout(category)

        if category == TypeCategory.OWNED_AGGREGATE_POINTER:
            container = self._build_heap(category, samples, name)
        elif category in (TypeCategory.RAW_POINTER, TypeCategory.TYPED_POINTER):
            for ref in samples:
                self.referents.validate(ref)
            container = self._fill(ArrayContainer(category, len(samples), name, self.word_size), samples)
        elif self.codegen is not None and category.is_scalar:
            storage, engine = self.codegen.materialize(name, category, samples)
            container = ArrayContainer(category, len(samples), name, self.word_size,
                                       storage=storage, keepalive=engine)
        else:
            container = self._fill(ArrayContainer(category, len(samples), name, self.word_size), samples)
        return container

    def build_pointer_fixtures(self) -> List[ArrayContainer]:
        """Referents and pointer arrays, registered in dependency order.

        Returns [values, strings, typed pointers, raw pointers].
        """
        values = self.referents.register(
            self.build_from(TypeCategory.INT, self.catalog.pointee_values(), VALUES_REFERENT))
        strings = self.referents.register(
            self.build(TypeCategory.TEXT, STRINGS_REFERENT))
        typed = self.referents.register(
            self.build(TypeCategory.TYPED_POINTER, INT_PTR_REFERENT))
        raw = self.referents.register(
            self.build(TypeCategory.RAW_POINTER))
        return [values, strings, typed, raw]

    def _build_heap(self, category: TypeCategory, samples: Sequence[AggregateRecord],
                    name: str) -> ArrayContainer:
        if self.lifecycle is None:
            raise ValueError(f"building {category} requires a LifecycleManager")
        container = ArrayContainer(category, len(samples), name, self.word_size)
        for i, record in enumerate(samples):
            container[i] = self.lifecycle.allocate(record)
        return container

    @staticmethod
    def _fill(container: ArrayContainer, samples: Sequence[Any]) -> ArrayContainer:
        for i, value in enumerate(samples):
            container[i] = value
        return container

    def _check_layout(self, category: TypeCategory) -> None:
        want = size_bytes(category, self.word_size)
        ctype = ctype_for(category, self.word_size)
        if want is not None and ctypes.sizeof(ctype) != want:
            raise_error("CD0007", category=category, ctype=ctype.__name__,
                        got=ctypes.sizeof(ctype), expected=want)


def default_array_name(category: TypeCategory) -> str:
    return {
        TypeCategory.RAW_POINTER: "void_ptr_array",
        TypeCategory.TYPED_POINTER: "int_ptr_array",
        TypeCategory.OWNED_AGGREGATE_POINTER: "point_ptr_array",
        TypeCategory.STRUCT: "point_array",
        TypeCategory.ENUM: "color_array",
        TypeCategory.TEXT: "string_array",
    }.get(category, f"{category.value}_array")


__all__ = [
    'ArrayContainer',
    'ContainerBuilder',
    'ReferentTable',
    'Point',
    'default_array_name',
]
