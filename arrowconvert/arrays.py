"""Immutable in-memory Arrow arrays."""

from __future__ import annotations

import copy
from collections.abc import Iterable, Iterator, Sequence
from typing import Any

from .field import ArrowError, DataType, Field, TypeId


class Array:
    """A sequence of possibly-null values of one data type."""

    def __init__(self, data_type: DataType, validity: Iterable[bool]) -> None:
        self.data_type = data_type
        self._validity = [bool(v) for v in validity]

    def __len__(self) -> int:
        return len(self._validity)

    def _check(self, index: int) -> None:
        if not 0 <= index < len(self):
            raise IndexError(f"index {index} out of range for array of length {len(self)}")

    def is_valid(self, index: int) -> bool:
        self._check(index)
        return self._validity[index]

    def is_null(self, index: int) -> bool:
        return not self.is_valid(index)

    @property
    def null_count(self) -> int:
        return self._validity.count(False)

    def value(self, index: int) -> Any:
        self._check(index)
        return self._value(index)

    def _value(self, index: int) -> Any:
        raise NotImplementedError

    def __iter__(self) -> Iterator[Any]:
        for index, valid in enumerate(self._validity):
            yield self._value(index) if valid else None

    def slice(self, offset: int, length: int) -> Array:
        if offset < 0 or length < 0 or offset + length > len(self):
            raise IndexError(
                f"slice [{offset}, {offset + length}) out of range for length {len(self)}"
            )
        return self._slice(offset, length)

    def _slice(self, offset: int, length: int) -> Array:
        raise NotImplementedError

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Array) or type(other) is not type(self):
            return NotImplemented
        return self.data_type == other.data_type and list(self) == list(other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.data_type.type_id.value}, {list(self)!r})"


class _ValuesArray(Array):
    def __init__(self, data_type: DataType, values: Iterable[Any]) -> None:
        self._values = list(values)
        super().__init__(data_type, (v is not None for v in self._values))

    def _value(self, index: int) -> Any:
        return self._values[index]

    def _slice(self, offset: int, length: int) -> Array:
        result = copy.copy(self)
        result._values = self._values[offset : offset + length]
        result._validity = self._validity[offset : offset + length]
        return result


class PrimitiveArray(_ValuesArray):
    """Numbers, decimals, dates and timestamps; ``None`` marks a null."""


class BooleanArray(_ValuesArray):
    def __init__(self, values: Iterable[bool | None]) -> None:
        super().__init__(
            DataType(TypeId.BOOLEAN), (None if v is None else bool(v) for v in values)
        )


class StringArray(_ValuesArray):
    def __init__(self, values: Iterable[str | None], large: bool = False) -> None:
        values = list(values)
        for v in values:
            if v is not None and not isinstance(v, str):
                raise TypeError(f"expected str, got {type(v).__name__}")
        super().__init__(DataType(TypeId.LARGE_UTF8 if large else TypeId.UTF8), values)


class BinaryArray(_ValuesArray):
    def __init__(self, values: Iterable[bytes | None], large: bool = False) -> None:
        super().__init__(
            DataType(TypeId.LARGE_BINARY if large else TypeId.BINARY),
            (None if v is None else bytes(v) for v in values),
        )


class FixedSizeBinaryArray(_ValuesArray):
    def __init__(self, size: int, values: Iterable[bytes | None]) -> None:
        values = [None if v is None else bytes(v) for v in values]
        for v in values:
            if v is not None and len(v) != size:
                raise ArrowError(f"expected {size} bytes, got {len(v)}")
        super().__init__(DataType(TypeId.FIXED_SIZE_BINARY, size=size), values)


class ListArray(Array):
    """Variable-length lists held as offsets into one child array."""

    def __init__(
        self,
        item: Field,
        offsets: Sequence[int],
        values: Array,
        validity: Iterable[bool] | None = None,
        large: bool = False,
    ) -> None:
        offsets = list(offsets)
        if not offsets:
            raise ArrowError("list offsets must hold at least one entry")
        if any(b < a for a, b in zip(offsets, offsets[1:])) or offsets[0] < 0:
            raise ArrowError("list offsets must be non-negative and non-decreasing")
        if offsets[-1] > len(values):
            raise ArrowError("list offsets exceed the child array length")
        count = len(offsets) - 1
        validity = [True] * count if validity is None else list(validity)
        if len(validity) != count:
            raise ArrowError("validity length does not match the number of lists")
        kind = TypeId.LARGE_LIST if large else TypeId.LIST
        super().__init__(DataType(kind, item=item), validity)
        self.item = item
        self.offsets = offsets
        self.values = values
        self.large = large

    def _value(self, index: int) -> Array:
        start, end = self.offsets[index], self.offsets[index + 1]
        return self.values.slice(start, end - start)

    def _slice(self, offset: int, length: int) -> Array:
        return ListArray(
            self.item,
            self.offsets[offset : offset + length + 1],
            self.values,
            self._validity[offset : offset + length],
            self.large,
        )


class FixedSizeListArray(Array):
    """Lists of one fixed length laid end to end in a child array."""

    def __init__(
        self,
        item: Field,
        size: int,
        values: Array,
        validity: Iterable[bool] | None = None,
    ) -> None:
        if size < 0:
            raise ArrowError(f"list size must be non-negative, got {size}")
        if size and len(values) % size:
            raise ArrowError(f"child length {len(values)} is not a multiple of {size}")
        if validity is None:
            validity = [True] * (len(values) // size if size else 0)
        validity = list(validity)
        if size and len(validity) != len(values) // size:
            raise ArrowError("validity length does not match the number of lists")
        super().__init__(DataType(TypeId.FIXED_SIZE_LIST, size=size, item=item), validity)
        self.item = item
        self.size = size
        self.values = values

    def _value(self, index: int) -> Array:
        return self.values.slice(index * self.size, self.size)

    def _slice(self, offset: int, length: int) -> Array:
        return FixedSizeListArray(
            self.item,
            self.size,
            self.values.slice(offset * self.size, length * self.size),
            self._validity[offset : offset + length],
        )


class StructArray(Array):
    """Named child columns of equal length; each row reads as a dict."""

    def __init__(
        self,
        fields: Sequence[Field],
        columns: Sequence[Array],
        validity: Iterable[bool] | None = None,
    ) -> None:
        fields, columns = tuple(fields), list(columns)
        if len(fields) != len(columns):
            raise ArrowError("struct needs one column per field")
        lengths = {len(c) for c in columns}
        if len(lengths) > 1:
            raise ArrowError("struct columns must all have the same length")
        length = lengths.pop() if lengths else 0
        validity = [True] * length if validity is None else list(validity)
        if len(validity) != length:
            raise ArrowError("validity length does not match the column length")
        super().__init__(DataType(TypeId.STRUCT, fields=fields), validity)
        self.fields = fields
        self.columns = columns

    @property
    def column_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def column(self, name: str) -> Array:
        for field, column in zip(self.fields, self.columns):
            if field.name == name:
                return column
        raise KeyError(name)

    def _value(self, index: int) -> dict[str, Any]:
        return {
            f.name: (c.value(index) if c.is_valid(index) else None)
            for f, c in zip(self.fields, self.columns)
        }

    def _slice(self, offset: int, length: int) -> Array:
        return StructArray(
            self.fields,
            [c.slice(offset, length) for c in self.columns],
            self._validity[offset : offset + length],
        )


class RecordBatch:
    """A table of named columns with the same number of rows."""

    def __init__(self, fields: Sequence[Field], columns: Sequence[Array]) -> None:
        self.fields = tuple(fields)
        self.columns = list(columns)
        if len(self.fields) != len(self.columns):
            raise ArrowError("record batch needs one column per field")
        lengths = {len(c) for c in self.columns}
        if len(lengths) > 1:
            raise ArrowError("all columns in a record batch must have the same length")
        for field, column in zip(self.fields, self.columns):
            if field.data_type != column.data_type:
                raise ArrowError(f"column {field.name!r} does not match its field type")
            if not field.nullable and column.null_count:
                raise ArrowError(f"column {field.name!r} is not nullable but holds nulls")
        self.num_rows = lengths.pop() if lengths else 0

    @property
    def num_columns(self) -> int:
        return len(self.columns)

    def column(self, name: str) -> Array:
        for field, column in zip(self.fields, self.columns):
            if field.name == name:
                return column
        raise KeyError(name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RecordBatch):
            return NotImplemented
        return self.fields == other.fields and self.columns == other.columns

    __hash__ = None  # type: ignore[assignment]