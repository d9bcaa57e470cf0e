"""Deserializing Arrow arrays back into Python values."""

from __future__ import annotations

import dataclasses
import datetime
from collections.abc import Callable, Iterable, Iterator
from typing import Any

from .arrays import Array
from .field import (
    ArrowError,
    ArrowField,
    Binary,
    Boolean,
    Date32,
    Decimal128,
    FixedSizeBinary,
    FixedSizeList,
    Float16,
    Float32,
    Float64,
    Int8,
    Int16,
    Int32,
    Int64,
    LargeBinary,
    LargeList,
    LargeUtf8,
    List,
    Nullable,
    Timestamp,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
    Utf8,
    _Struct,
    field_for,
)

_NUMBERS = (
    UInt8,
    UInt16,
    UInt32,
    UInt64,
    Int8,
    Int16,
    Int32,
    Int64,
    Float16,
    Float32,
    Float64,
    Decimal128,
)

_EPOCH = datetime.datetime(1970, 1, 1)
_EPOCH_DAY = datetime.date(1970, 1, 1).toordinal()


def _datetime_from_ns(nanos: int) -> datetime.datetime | None:
    try:
        return _EPOCH + datetime.timedelta(microseconds=nanos // 1000)
    except OverflowError:
        return None


def _date_from_days(days: int) -> datetime.date | None:
    try:
        return datetime.date.fromordinal(_EPOCH_DAY + days)
    except (ValueError, OverflowError):
        return None


def _build_struct(kind: _Struct, item: dict[str, Any]) -> Any:
    values = {
        attribute: deserialize_value(member, item[column])
        for attribute, column, member in kind.members
    }
    init_names = {f.name for f in dataclasses.fields(kind.cls) if f.init}
    result = kind.cls(**{k: v for k, v in values.items() if k in init_names})
    for name, value in values.items():
        if name not in init_names:
            object.__setattr__(result, name, value)
    return result


def _optional(kind: ArrowField, item: Any) -> Any:
    """Deserialize ``item``; ``None`` stands for a missing value."""
    if isinstance(kind, Nullable):
        return _optional(kind.inner, item)
    custom = getattr(kind, "arrow_deserialize", None)
    if callable(custom):
        return custom(item)
    if item is None:
        return None
    match kind:
        case Boolean():
            return bool(item)
        case Utf8() | LargeUtf8():
            return str(item)
        case Binary() | LargeBinary() | FixedSizeBinary():
            return bytes(item)
        case Timestamp():
            return _datetime_from_ns(item)
        case Date32():
            return _date_from_days(item)
        case List() | LargeList() | FixedSizeList():
            return list(_iter_unchecked(item, kind.item))
        case _Struct():
            return _build_struct(kind, item)
        case _ if isinstance(kind, _NUMBERS):
            return item
    raise TypeError(f"cannot deserialize values of {kind!r}")


def deserialize_value(field_type: Any, item: Any) -> Any:
    """Turn one item read from an array into a value of ``field_type``.

    A missing value is returned as ``None`` for nullable types and raises
    ``ArrowError`` otherwise.
    """
    kind = field_for(field_type)
    if isinstance(kind, Nullable):
        return _optional(kind.inner, item)
    result = _optional(kind, item)
    if result is None:
        raise ArrowError(f"missing value for non-nullable {kind!r}")
    return result


def _iter_unchecked(array: Array, kind: ArrowField) -> Iterator[Any]:
    for item in array:
        yield deserialize_value(kind, item)


def iter_array(array: Array, field_type: Any) -> Iterator[Any]:
    """Return an iterator of ``field_type`` values read from ``array``.

    Raises ``ArrowError`` at once if the array's type differs from the one
    ``field_type`` maps to.
    """
    if not isinstance(array, Array):
        raise TypeError(f"expected an Array, got {type(array).__name__}")
    kind = field_for(field_type)
    expected = kind.data_type()
    if expected != array.data_type:
        raise ArrowError(
            f"Data type mismatch. Expected type={expected!r} is_nullable={kind.is_nullable()}, "
            f"but was type={array.data_type!r} is_nullable={array.null_count > 0}"
        )
    return _iter_unchecked(array, kind)


def try_into_collection(
    array: Array,
    field_type: Any,
    collection: Callable[[Iterable[Any]], Any] = list,
) -> Any:
    """Deserialize every element of ``array`` into ``collection`` (a list by default)."""
    return collection(iter_array(array, field_type))