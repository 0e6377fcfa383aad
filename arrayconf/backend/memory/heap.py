"""
Heap allocation of aggregate records with exactly-once release.

Records live in memory obtained from the C allocator (malloc/free through
ctypes), laid out as the `Point` struct. The LifecycleManager hands out
opaque Handles and tracks their state:

- live handles can be read and released
- releasing an unknown or already released handle is a LifecycleViolation
- reading a released handle is a LifecycleViolation, memory is never touched

Scopes give RAII-style cleanup: every handle allocated inside a scope that
is still live when the scope exits is released on that exit path,
including exceptional ones.
"""
from __future__ import annotations
import ctypes
import ctypes.util
import sys
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Set

from arrayconf.backend.llvm_types import Point
from arrayconf.internals.errors import raise_error
from arrayconf.semantics.typesys import AggregateRecord, Handle


def _load_libc() -> ctypes.CDLL:
    if sys.platform == "win32":
        return ctypes.cdll.msvcrt
    # find_library may come back empty in minimal images; CDLL(None) is the process itself.
    return ctypes.CDLL(ctypes.util.find_library("c"))


class CAllocator:
    """malloc/free from the C runtime."""

    def __init__(self) -> None:
        libc = _load_libc()
        self._malloc = libc.malloc
        self._malloc.restype = ctypes.c_void_p
        self._malloc.argtypes = [ctypes.c_size_t]
        self._free = libc.free
        self._free.restype = None
        self._free.argtypes = [ctypes.c_void_p]

    def malloc(self, size: int) -> Optional[int]:
        return self._malloc(size)

    def free(self, address: int) -> None:
        self._free(address)


@dataclass
class _Allocation:
    """Runtime descriptor for one heap record."""
    address: int
    name_buffer: ctypes.Array    # keeps the name bytes alive while the record is live


class LifecycleManager:
    """Owns creation and destruction of heap-allocated aggregate records."""

    def __init__(self, allocator: Optional[CAllocator] = None) -> None:
        self.allocator = allocator or CAllocator()
        self._live: Dict[int, _Allocation] = {}
        self._released: Set[int] = set()
        self._next_id = 1
        # Stack of scopes, each holding the handle ids allocated in it
        self._scope_stack: List[Set[int]] = []
        self.allocations = 0
        self.releases = 0

    @property
    def live_handles(self) -> List[Handle]:
        return [Handle(i) for i in sorted(self._live)]

    def allocate(self, record: AggregateRecord) -> Handle:
        size = ctypes.sizeof(Point)
        address = self.allocator.malloc(size)
        if not address:
            raise_error("LV0005", size=size)

        name_buffer = ctypes.create_string_buffer(record.name)
        point = Point.from_address(address)
        point.x = record.x
        point.y = record.y
        point.name = ctypes.addressof(name_buffer)

        handle = Handle(self._next_id)
        self._next_id += 1
        self._live[handle.id] = _Allocation(address, name_buffer)
        self.allocations += 1
        if self._scope_stack:
            self._scope_stack[-1].add(handle.id)
        return handle

    def read(self, handle: Handle) -> AggregateRecord:
        allocation = self._lookup(handle, released_code="LV0003")
        point = Point.from_address(allocation.address)
        return AggregateRecord(point.x, point.y, point.name or b"")

    def release(self, handle: Handle) -> None:
        allocation = self._lookup(handle, released_code="LV0002")
        self.allocator.free(allocation.address)
        del self._live[handle.id]
        self._released.add(handle.id)
        self.releases += 1
        for scope in self._scope_stack:
            scope.discard(handle.id)

    def _lookup(self, handle: Handle, released_code: str) -> _Allocation:
        if handle.id in self._released:
            raise_error(released_code, handle=handle)
        allocation = self._live.get(handle.id)
        if allocation is None:
            raise_error("LV0001", handle=handle)
        return allocation

    def push_scope(self) -> None:
        self._scope_stack.append(set())

    def pop_scope(self) -> None:
        """Exit current scope, releasing every handle it still owns.

        Raises:
            IndexError: If there are no scopes to pop.
        """
        if not self._scope_stack:
            raise IndexError("No scopes to pop")
        current = self._scope_stack.pop()
        for handle_id in sorted(current):
            if handle_id in self._live:
                self.release(Handle(handle_id))

    @contextmanager
    def scope(self) -> Iterator['LifecycleManager']:
        self.push_scope()
        try:
            yield self
        finally:
            self.pop_scope()

    def check_balanced(self) -> None:
        """Every allocation has had exactly one release.

        Raises:
            LifecycleViolation LV0004: If any handle is still live.
        """
        if self._live:
            handles = ", ".join(str(h) for h in self.live_handles)
            raise_error("LV0004", count=len(self._live), handles=handles)
