"""Mutable builders that accumulate values and finish into arrays."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any

from .arrays import (
    Array,
    BinaryArray,
    BooleanArray,
    FixedSizeBinaryArray,
    FixedSizeListArray,
    ListArray,
    PrimitiveArray,
    StringArray,
)
from .field import DEFAULT_FIELD_NAME, ArrowError, DataType, Field, TypeId

_INT_RANGES = {
    TypeId.UINT8: (0, 2**8 - 1),
    TypeId.UINT16: (0, 2**16 - 1),
    TypeId.UINT32: (0, 2**32 - 1),
    TypeId.UINT64: (0, 2**64 - 1),
    TypeId.INT8: (-(2**7), 2**7 - 1),
    TypeId.INT16: (-(2**15), 2**15 - 1),
    TypeId.INT32: (-(2**31), 2**31 - 1),
    TypeId.INT64: (-(2**63), 2**63 - 1),
    TypeId.DATE32: (-(2**31), 2**31 - 1),
    TypeId.TIMESTAMP: (-(2**63), 2**63 - 1),
    TypeId.DECIMAL128: (-(2**127), 2**127 - 1),
}
_FLOATS = {TypeId.FLOAT16, TypeId.FLOAT32, TypeId.FLOAT64}


class ArrayBuilder(ABC):
    """Collects values, then produces an immutable array."""

    data_type: DataType

    @abstractmethod
    def append_value(self, value: Any) -> None:
        """Append one non-null value."""

    @abstractmethod
    def append_null(self) -> None:
        """Append one null."""

    @abstractmethod
    def finish(self) -> Array:
        """Return the built array and reset the builder."""

    @abstractmethod
    def __len__(self) -> int: ...


class _ValuesBuilder(ArrayBuilder):
    def __init__(self) -> None:
        self._values: list[Any] = []

    def __len__(self) -> int:
        return len(self._values)

    def append_null(self) -> None:
        self._values.append(None)

    def _take(self) -> list[Any]:
        values, self._values = self._values, []
        return values


class PrimitiveBuilder(_ValuesBuilder):
    """Builds integer, float, decimal, date and timestamp arrays."""

    def __init__(self, data_type: DataType) -> None:
        if data_type.type_id not in _INT_RANGES and data_type.type_id not in _FLOATS:
            raise ArrowError(f"{data_type.type_id.value} is not a primitive type")
        super().__init__()
        self.data_type = data_type

    def append_value(self, value: Any) -> None:
        kind = self.data_type.type_id
        if kind in _FLOATS:
            self._values.append(float(value))
            return
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeError(f"expected int for {kind.value}, got {type(value).__name__}")
        low, high = _INT_RANGES[kind]
        if not low <= value <= high:
            raise ArrowError(f"{value} does not fit in {kind.value}")
        self._values.append(value)

    def finish(self) -> PrimitiveArray:
        return PrimitiveArray(self.data_type, self._take())


class BooleanBuilder(_ValuesBuilder):
    data_type = DataType(TypeId.BOOLEAN)

    def append_value(self, value: bool) -> None:
        self._values.append(bool(value))

    def finish(self) -> BooleanArray:
        return BooleanArray(self._take())


class StringBuilder(_ValuesBuilder):
    def __init__(self, large: bool = False) -> None:
        super().__init__()
        self.large = large
        self.data_type = DataType(TypeId.LARGE_UTF8 if large else TypeId.UTF8)

    def append_value(self, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError(f"expected str, got {type(value).__name__}")
        self._values.append(value)

    def finish(self) -> StringArray:
        return StringArray(self._take(), self.large)


class BinaryBuilder(_ValuesBuilder):
    def __init__(self, large: bool = False) -> None:
        super().__init__()
        self.large = large
        self.data_type = DataType(TypeId.LARGE_BINARY if large else TypeId.BINARY)

    def append_value(self, value: bytes) -> None:
        self._values.append(bytes(value))

    def finish(self) -> BinaryArray:
        return BinaryArray(self._take(), self.large)


class FixedSizeBinaryBuilder(_ValuesBuilder):
    def __init__(self, size: int) -> None:
        if size < 0:
            raise ArrowError(f"fixed size binary width must be non-negative, got {size}")
        super().__init__()
        self.size = size
        self.data_type = DataType(TypeId.FIXED_SIZE_BINARY, size=size)

    def append_value(self, value: bytes) -> None:
        value = bytes(value)
        if len(value) != self.size:
            raise ArrowError(
                f"Byte slice does not have the same length as FixedSizeBinaryBuilder value "
                f"lengths: expected {self.size}, got {len(value)}"
            )
        self._values.append(value)

    def finish(self) -> FixedSizeBinaryArray:
        return FixedSizeBinaryArray(self.size, self._take())


def _push_items(values: ArrayBuilder, items: Iterable[Any]) -> None:
    for item in items:
        if item is None:
            values.append_null()
        else:
            values.append_value(item)


class ListBuilder(ArrayBuilder):
    """Builds variable-length lists over a child builder."""

    def __init__(
        self, values: ArrayBuilder, field: Field | None = None, large: bool = False
    ) -> None:
        self.values = values
        self.item = field if field is not None else Field(DEFAULT_FIELD_NAME, values.data_type, True)
        self.large = large
        self.data_type = DataType(TypeId.LARGE_LIST if large else TypeId.LIST, item=self.item)
        self._offsets = [len(values)]
        self._validity: list[bool] = []

    def __len__(self) -> int:
        return len(self._validity)

    def append(self, is_valid: bool) -> None:
        """Close the current list, made of the child values appended since the last one."""
        self._offsets.append(len(self.values))
        self._validity.append(bool(is_valid))

    def append_null(self) -> None:
        self.append(False)

    def append_value(self, value: Iterable[Any]) -> None:
        _push_items(self.values, value)
        self.append(True)

    def finish(self) -> ListArray:
        child = self.values.finish()
        base = self._offsets[0]
        offsets = [o - base for o in self._offsets]
        result = ListArray(self.item, offsets, child, self._validity, self.large)
        self._offsets = [0]
        self._validity = []
        return result


class FixedSizeListBuilder(ArrayBuilder):
    """Builds lists of one fixed length over a child builder."""

    def __init__(self, values: ArrayBuilder, size: int, field: Field | None = None) -> None:
        if size < 0:
            raise ArrowError(f"list size must be non-negative, got {size}")
        self.values = values
        self.size = size
        self.item = field if field is not None else Field(DEFAULT_FIELD_NAME, values.data_type, True)
        self.data_type = DataType(TypeId.FIXED_SIZE_LIST, size=size, item=self.item)
        self._validity: list[bool] = []

    def __len__(self) -> int:
        return len(self._validity)

    def append(self, is_valid: bool) -> None:
        """Close the current list; the child must hold exactly ``size`` values per list."""
        expected = (len(self._validity) + 1) * self.size
        if len(self.values) != expected:
            raise ArrowError(
                f"Length of the child array ({len(self.values)}) must be {expected} "
                f"for lists of length {self.size}"
            )
        self._validity.append(bool(is_valid))

    def append_null(self) -> None:
        for _ in range(self.size):
            self.values.append_null()
        self.append(False)

    def append_value(self, value: Iterable[Any]) -> None:
        items = list(value)
        if len(items) != self.size:
            raise ArrowError(f"expected {self.size} items, got {len(items)}")
        _push_items(self.values, items)
        self.append(True)

    def finish(self) -> FixedSizeListArray:
        result = FixedSizeListArray(self.item, self.size, self.values.finish(), self._validity)
        self._validity = []
        return result