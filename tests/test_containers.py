from __future__ import annotations

import ctypes

import pytest

from arrayconf.backend.containers import (
    ArrayContainer,
    ContainerBuilder,
    ReferentTable,
    default_array_name,
)
from arrayconf.backend.llvm_types import Point, ctype_for, size_bytes
from arrayconf.backend.memory import LifecycleManager
from arrayconf.internals.errors import BoundsViolation, ConstructionDefect
from arrayconf.semantics.catalog import ValueCatalog
from arrayconf.semantics.typesys import AggregateRecord, Color, Handle, Ref, TypeCategory

NATIVE = [
    c for c in TypeCategory
    if c not in (TypeCategory.RAW_POINTER, TypeCategory.TYPED_POINTER,
                 TypeCategory.OWNED_AGGREGATE_POINTER)
]
EXACT = [c for c in NATIVE if c not in (TypeCategory.FLOAT, TypeCategory.FLOAT32)]


@pytest.fixture
def catalog() -> ValueCatalog:
    return ValueCatalog()


@pytest.mark.parametrize("category", NATIVE, ids=str)
def test_build_length_matches_samples(catalog: ValueCatalog, category: TypeCategory) -> None:
    container = ContainerBuilder(catalog).build(category)
    assert len(container) == len(catalog.samples_for(category))
    assert container.is_native


@pytest.mark.parametrize("category", EXACT, ids=str)
def test_build_stores_samples_exactly(catalog: ValueCatalog, category: TypeCategory) -> None:
    container = ContainerBuilder(catalog).build(category)
    assert list(container) == list(catalog.samples_for(category))


def test_float32_storage_truncates(catalog: ValueCatalog) -> None:
    container = ContainerBuilder(catalog).build(TypeCategory.FLOAT)
    assert container[0] != 1.1
    assert container[0] == pytest.approx(1.1, abs=1e-6)
    # 1.25, 2.75 and 3.125 are exact in single precision
    assert list(ContainerBuilder(catalog).build(TypeCategory.FLOAT32)) == [1.25, 2.75, 3.125]


def test_storage_is_real_ctypes_array(catalog: ValueCatalog) -> None:
    container = ContainerBuilder(catalog).build(TypeCategory.INT16)
    assert isinstance(container.storage, ctypes.Array)
    assert container.storage._type_ is ctypes.c_int16
    assert ctypes.sizeof(container.storage) == 3 * 2


def test_decoded_kinds(catalog: ValueCatalog) -> None:
    builder = ContainerBuilder(catalog)
    assert all(type(v) is bool for v in builder.build(TypeCategory.BOOL))
    assert all(isinstance(v, Color) for v in builder.build(TypeCategory.ENUM))
    assert builder.build(TypeCategory.STRUCT)[1] == AggregateRecord(100, 200, b"Point A")
    assert builder.build(TypeCategory.TEXT)[2] == b"GBC"


def test_out_of_set_enum_is_preserved(catalog: ValueCatalog) -> None:
    container = ContainerBuilder(catalog).build(TypeCategory.ENUM)
    container[3] = 7
    assert container[3] == 7
    assert not isinstance(container[3], Color)


@pytest.mark.parametrize("index", [3, 4, 100, -1, -3])
def test_out_of_range_access_is_bounds_violation(catalog: ValueCatalog, index: int) -> None:
    container = ContainerBuilder(catalog).build(TypeCategory.INT32)
    with pytest.raises(BoundsViolation) as info:
        container[index]
    assert info.value.code == "BV0001"
    with pytest.raises(IndexError):
        container[index] = 0


def test_non_int_index_is_bounds_violation(catalog: ValueCatalog) -> None:
    container = ContainerBuilder(catalog).build(TypeCategory.INT32)
    with pytest.raises(BoundsViolation):
        container[True]
    with pytest.raises(BoundsViolation):
        container["0"]  # type: ignore[index]


def test_build_rejects_unrepresentable_samples(catalog: ValueCatalog) -> None:
    with pytest.raises(ConstructionDefect, match="CD0002"):
        ContainerBuilder(catalog).build_from(TypeCategory.UINT8, (1, 256, 3))


def test_native_width_follows_word_size() -> None:
    assert ctype_for(TypeCategory.INT, 8) is ctypes.c_int64
    assert ctype_for(TypeCategory.INT, 4) is ctypes.c_int32
    assert ctype_for(TypeCategory.UINT, 4) is ctypes.c_uint32
    assert size_bytes(TypeCategory.UINT, 4) == 4
    container = ContainerBuilder(ValueCatalog(word_size=4)).build(TypeCategory.INT)
    assert container.storage._type_ is ctypes.c_int32


def test_point_layout() -> None:
    assert [name for name, _ in Point._fields_] == ["x", "y", "name"]
    assert Point.y.offset == 4
    assert ctypes.sizeof(Point) == 8 + ctypes.sizeof(ctypes.c_char_p)


def test_pointer_fixtures_resolve(catalog: ValueCatalog) -> None:
    builder = ContainerBuilder(catalog)
    values, strings, typed, raw = builder.build_pointer_fixtures()
    assert values.name == "values" and list(values) == [42, 84, 126]
    assert list(typed) == list(catalog.samples_for(TypeCategory.TYPED_POINTER))
    assert list(raw) == list(catalog.samples_for(TypeCategory.RAW_POINTER))
    assert [builder.referents.deref(ref) for ref in typed] == [42, 84, 126]
    assert builder.referents.deref(raw[1]) == b"Hello"
    assert builder.referents.deref(raw[2]) is typed


def test_pointer_to_unregistered_target_is_rejected(catalog: ValueCatalog) -> None:
    with pytest.raises(ConstructionDefect, match="CD0006"):
        ContainerBuilder(catalog).build(TypeCategory.TYPED_POINTER)


def test_pointer_to_missing_index_is_rejected(catalog: ValueCatalog) -> None:
    builder = ContainerBuilder(catalog)
    builder.referents.register(builder.build_from(TypeCategory.INT, (1, 2, 3), "values"))
    with pytest.raises(BoundsViolation):
        builder.build_from(TypeCategory.TYPED_POINTER, (Ref("values", 3),), "bad")


def test_heap_build_registers_handles(catalog: ValueCatalog) -> None:
    lifecycle = LifecycleManager()
    container = ContainerBuilder(catalog, lifecycle=lifecycle).build(
        TypeCategory.OWNED_AGGREGATE_POINTER)
    assert list(container) == [Handle(1), Handle(2), Handle(3)]
    assert lifecycle.read(container[2]) == AggregateRecord(0, 0, b"Dynamic C")
    for handle in container:
        lifecycle.release(handle)
    lifecycle.check_balanced()


def test_heap_build_requires_lifecycle(catalog: ValueCatalog) -> None:
    with pytest.raises(ValueError):
        ContainerBuilder(catalog).build(TypeCategory.OWNED_AGGREGATE_POINTER)


def test_referent_table_lookup() -> None:
    table = ReferentTable()
    container = table.register(ArrayContainer(TypeCategory.INT8, 3, "small"))
    assert "small" in table
    assert table.get("small") is container
    assert table.deref(Ref("small", 0)) == 0
    with pytest.raises(ConstructionDefect):
        table.get("missing")


def test_default_names() -> None:
    assert default_array_name(TypeCategory.INT8) == "int8_array"
    assert default_array_name(TypeCategory.RAW_POINTER) == "void_ptr_array"
    assert default_array_name(TypeCategory.ENUM) == "color_array"


def test_array_type(catalog: ValueCatalog) -> None:
    container = ContainerBuilder(catalog).build(TypeCategory.BOOL)
    assert str(container.array_type) == "bool[4]"
    assert repr(container) == "ArrayContainer(bool[4], name='bool_array')"
