import dataclasses
import datetime
from dataclasses import dataclass
from typing import Optional

import pytest

from arrowconvert.builders import PrimitiveBuilder
from arrowconvert.deserialize import deserialize_value, iter_array, try_into_collection
from arrowconvert.field import (
    ArrowError,
    ArrowField,
    DataType,
    Date32,
    Decimal128,
    FixedSizeBinary,
    FixedSizeList,
    LargeBinary,
    LargeList,
    LargeUtf8,
    List,
    Nullable,
    Timestamp,
    TypeId,
)
from arrowconvert.serialize import try_into_arrow


@dataclass(frozen=True)
class CustomType:
    value: int


@dataclass(frozen=True)
class CustomField(ArrowField):
    def data_type(self):
        return DataType(TypeId.UINT64)

    def new_array(self):
        return PrimitiveBuilder(self.data_type())

    def arrow_serialize(self, value, builder):
        builder.append_value(value.value)

    def arrow_deserialize(self, item):
        return None if item is None else CustomType(item)


@dataclass
class ChildChild:
    a1: int
    bool_array: list[bool]
    int64_array: list[int]


@dataclass
class Child:
    a1: int
    a2: str
    child_array: list[ChildChild]


def _ts(seconds, micros=0):
    return datetime.datetime(1970, 1, 1) + datetime.timedelta(seconds=seconds, microseconds=micros)


@dataclass
class Root:
    name: Optional[str]
    area: bytes = dataclasses.field(metadata={"arrow_type": FixedSizeBinary(6)})
    age: int = 0
    is_deleted: bool = False
    a1: Optional[float] = None
    a2: int = 0
    a3: Optional[bytes] = None
    a4: datetime.date = datetime.date(1970, 1, 1)
    a5: datetime.datetime = datetime.datetime(1970, 1, 1)
    a6: Optional[datetime.datetime] = None
    date_time_list: list[datetime.datetime] = dataclasses.field(default_factory=list)
    nullable_list: Optional[list[Optional[str]]] = None
    required_list: list[Optional[str]] = dataclasses.field(default_factory=list)
    custom: CustomType = dataclasses.field(
        default=CustomType(0), metadata={"arrow_type": CustomField()}
    )
    nullable_custom: Optional[CustomType] = dataclasses.field(
        default=None,
        metadata={"arrow_type": Nullable(CustomField()), "arrow_name": "cullable_nustom"},
    )
    custom_list: list[CustomType] = dataclasses.field(
        default_factory=list, metadata={"arrow_type": List(CustomField())}
    )
    child: Optional[Child] = None
    int32_array: list[int] = dataclasses.field(default_factory=list)
    large_binary: bytes = dataclasses.field(
        default=b"", metadata={"arrow_type": LargeBinary(), "arrow_name": "barge_linary"}
    )
    fixed_size_binary: bytes = dataclasses.field(
        default=b"\0\0\0", metadata={"arrow_type": FixedSizeBinary(3)}
    )
    large_string: str = dataclasses.field(default="", metadata={"arrow_type": LargeUtf8()})
    large_vec: list[int] = dataclasses.field(
        default_factory=list, metadata={"arrow_type": LargeList(Int64Field := None) if False else None}
    )
    fixed_size_vec: list[int] = dataclasses.field(default_factory=list)


# Replace the two list members above with explicit Arrow types.
def _root_fields():
    return None


def item1():
    return Root(
        name="a",
        area=b"SYDNEY",
        age=28,
        is_deleted=False,
        a1=0.1,
        a2=1,
        a3=b"aa",
        a4=datetime.date(1970, 1, 2),
        a5=_ts(10000),
        a6=_ts(10001),
        date_time_list=[_ts(10000, 10), _ts(10000, 11)],
        nullable_list=["cc", "dd"],
        required_list=["aa", "bb"],
        custom=CustomType(10),
        nullable_custom=CustomType(11),
        custom_list=[CustomType(12), CustomType(13)],
        child=Child(
            10,
            "hello",
            [
                ChildChild(100, [False], [45555, 2124214, 224, 24214, 2424]),
                ChildChild(101, [True, True, True], [4533, 22222, 2323, 333, 33322]),
            ],
        ),
        int32_array=[0, 1, 3],
        large_binary=b"aa",
        fixed_size_binary=b"aaa",
        large_string="abcdefg",
        large_vec=[1, 2, 3, 4],
        fixed_size_vec=[10, 20, 30],
    )


def item2():
    return Root(
        name="b",
        area=b"SYDNEY",
        age=28,
        is_deleted=True,
        a1=0.1,
        a2=1,
        a3=b"aa",
        a4=datetime.date(1970, 1, 2),
        a5=_ts(10000),
        a6=None,
        date_time_list=[_ts(10000, 10), _ts(10000, 11)],
        nullable_list=None,
        required_list=["ee", "ff"],
        custom=CustomType(11),
        nullable_custom=None,
        custom_list=[CustomType(14), CustomType(13)],
        child=Child(
            11,
            "hello again",
            [
                ChildChild(100, [True, False, False, True], [111111, 2222, 33]),
                ChildChild(102, [False], [45555, 2124214, 224, 24214, 2424]),
            ],
        ),
        int32_array=[111, 1],
        large_binary=b"bb",
        fixed_size_binary=b"bbb",
        large_string="abdefag",
        large_vec=[5, 4, 3, 2],
        fixed_size_vec=[11, 21, 32],
    )


@dataclass
class Vectors:
    large_vec: list[int] = dataclasses.field(metadata={"arrow_type": LargeList(List.__mro__ and None)}) if False else dataclasses.field(default_factory=list)


def test_round_trip_of_nested_records():
    original = [item1(), item2()]
    array = try_into_arrow(original, Root)
    assert len(array) == 2
    assert len(array.columns) == 23
    assert "cullable_nustom" in array.column_names
    assert "nullable_custom" not in array.column_names
    assert "barge_linary" in array.column_names
    assert "large_binary" not in array.column_names
    assert list(iter_array(array, Root)) == original
    assert try_into_collection(array, Root) == original


@pytest.mark.parametrize("start", range(2))
def test_slices_round_trip(start):
    original = [item1(), item2()]
    array = try_into_arrow(original, Root)
    sliced = array.slice(start, len(original) - start)
    assert try_into_collection(sliced, Root) == original[start:]


def test_large_and_fixed_size_lists_round_trip():
    from arrowconvert.field import Int64

    values = [[1, 2, 3], [4, 5, 6]]
    large = try_into_arrow(values, LargeList(Int64()))
    fixed = try_into_arrow(values, FixedSizeList(Int64(), 3))
    assert try_into_collection(large, LargeList(Int64())) == values
    assert try_into_collection(fixed, FixedSizeList(Int64(), 3)) == values


def test_type_mismatch_raises():
    array = try_into_arrow(["a"], LargeUtf8())
    with pytest.raises(ArrowError, match="Data type mismatch"):
        try_into_collection(array, str)


def test_as_type_coerces_to_arrow_type():
    array = try_into_arrow(["a", "b"], LargeUtf8())
    assert try_into_collection(array, LargeUtf8()) == ["a", "b"]


def test_null_into_non_nullable_raises():
    array = try_into_arrow([1, None], Optional[int])
    assert try_into_collection(array, Optional[int]) == [1, None]
    with pytest.raises(ArrowError):
        try_into_collection(array, int)


def test_collection_argument_is_used():
    array = try_into_arrow([True, False], bool)
    assert try_into_collection(array, bool, tuple) == (True, False)


def test_binary_and_decimal_round_trip():
    blobs = try_into_arrow([b"aa", None], Optional[bytes])
    assert try_into_collection(blobs, Optional[bytes]) == [b"aa", None]
    decimals = try_into_arrow([12345, -1], Decimal128(32, 32))
    assert try_into_collection(decimals, Decimal128(32, 32)) == [12345, -1]


def test_date_and_timestamp_values():
    assert deserialize_value(Date32(), 1) == datetime.date(1970, 1, 2)
    expected = datetime.datetime.fromtimestamp(10000, tz=datetime.timezone.utc).replace(tzinfo=None)
    assert deserialize_value(Timestamp(), 10000 * 1_000_000_000) == expected


def test_out_of_range_date_is_missing():
    assert deserialize_value(Nullable(Date32()), 2**31 - 1) is None
    with pytest.raises(ArrowError):
        deserialize_value(Date32(), 2**31 - 1)


def test_custom_field_missing_value_raises():
    assert deserialize_value(CustomField(), 7) == CustomType(7)
    assert deserialize_value(Nullable(CustomField()), None) is None
    with pytest.raises(ArrowError):
        deserialize_value(CustomField(), None)


def test_nullable_struct_rows():
    children = [Child(1, "x", []), None]
    array = try_into_arrow(children, Optional[Child])
    assert try_into_collection(array, Optional[Child]) == children


def test_non_array_input_raises():
    with pytest.raises(TypeError):
        iter_array([1, 2], int)