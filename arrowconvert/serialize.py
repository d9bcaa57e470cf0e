"""Serializing Python values into Arrow arrays and record batches."""

from __future__ import annotations

import datetime
from collections.abc import Iterable
from typing import Any

from .arrays import Array, RecordBatch, StructArray
from .builders import (
    ArrayBuilder,
    BinaryBuilder,
    BooleanBuilder,
    FixedSizeBinaryBuilder,
    FixedSizeListBuilder,
    ListBuilder,
    PrimitiveBuilder,
    StringBuilder,
)
from .field import (
    DEFAULT_FIELD_NAME,
    ArrowError,
    ArrowField,
    Binary,
    Boolean,
    Date32,
    Decimal128,
    Field,
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
    TypeId,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
    Utf8,
    _Struct,
    field_for,
)

RECORD_BATCH_ITEM = "record_batch_item"

_PRIMITIVES = (
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
    Timestamp,
    Date32,
)

_EPOCH = datetime.datetime(1970, 1, 1)
_EPOCH_DAY = datetime.date(1970, 1, 1).toordinal()
_I64_MIN, _I64_MAX = -(2**63), 2**63 - 1


class _StructBuilder(ArrayBuilder):
    """Builds a struct array with one child builder per dataclass member."""

    def __init__(self, kind: _Struct) -> None:
        self.kind = kind
        self.data_type = kind.data_type()
        self.children = [new_builder(member) for _, _, member in kind.members]
        self._validity: list[bool] = []

    def __len__(self) -> int:
        return len(self._validity)

    def append(self, is_valid: bool) -> None:
        self._validity.append(bool(is_valid))

    def append_value(self, value: Any) -> None:
        _serialize_struct(self.kind, value, self)

    def append_null(self) -> None:
        for child in self.children:
            child.append_null()
        self.append(False)

    def finish(self) -> StructArray:
        result = StructArray(
            self.data_type.fields,
            [child.finish() for child in self.children],
            self._validity,
        )
        self._validity = []
        return result


def new_builder(field_type: Any) -> ArrayBuilder:
    """Return an empty builder for values of ``field_type``."""
    kind = field_for(field_type)
    custom = getattr(kind, "new_array", None)
    if callable(custom):
        return custom()
    match kind:
        case Nullable(inner):
            return new_builder(inner)
        case Boolean():
            return BooleanBuilder()
        case Utf8():
            return StringBuilder()
        case LargeUtf8():
            return StringBuilder(large=True)
        case Binary():
            return BinaryBuilder()
        case LargeBinary():
            return BinaryBuilder(large=True)
        case FixedSizeBinary(size):
            return FixedSizeBinaryBuilder(size)
        case List(item):
            return ListBuilder(new_builder(item), item.field(DEFAULT_FIELD_NAME))
        case LargeList(item):
            return ListBuilder(new_builder(item), item.field(DEFAULT_FIELD_NAME), large=True)
        case FixedSizeList(item, size):
            return FixedSizeListBuilder(new_builder(item), size, item.field(DEFAULT_FIELD_NAME))
        case _Struct():
            return _StructBuilder(kind)
        case _ if isinstance(kind, _PRIMITIVES):
            return PrimitiveBuilder(kind.data_type())
    raise TypeError(f"no builder for {kind!r}")


def _timestamp_ns(value: Any) -> int | None:
    if not isinstance(value, datetime.datetime):
        raise TypeError(f"expected datetime, got {type(value).__name__}")
    if value.tzinfo is not None:
        value = value.astimezone(datetime.timezone.utc).replace(tzinfo=None)
    delta = value - _EPOCH
    nanos = (delta.days * 86_400 + delta.seconds) * 1_000_000_000 + delta.microseconds * 1_000
    return nanos if _I64_MIN <= nanos <= _I64_MAX else None


def _epoch_days(value: Any) -> int:
    if isinstance(value, datetime.datetime) or not isinstance(value, datetime.date):
        raise TypeError(f"expected date, got {type(value).__name__}")
    return value.toordinal() - _EPOCH_DAY


def _as_bytes(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, (str, int)):
        raise TypeError(f"expected bytes, got {type(value).__name__}")
    return bytes(value)


def _serialize_list(kind: ArrowField, value: Any, builder: ArrayBuilder) -> None:
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        raise TypeError(f"expected a sequence, got {type(value).__name__}")
    items = list(value)
    if isinstance(kind, FixedSizeList) and len(items) != kind.size:
        raise ArrowError(f"expected {kind.size} items, got {len(items)}")
    for item in items:
        serialize_value(kind.item, item, builder.values)
    builder.append(True)


def _serialize_struct(kind: _Struct, value: Any, builder: _StructBuilder) -> None:
    if not isinstance(value, kind.cls):
        raise TypeError(f"expected {kind.cls.__name__}, got {type(value).__name__}")
    for (attribute, _, member), child in zip(kind.members, builder.children):
        serialize_value(member, getattr(value, attribute), child)
    builder.append(True)


def serialize_value(field_type: Any, value: Any, builder: ArrayBuilder) -> None:
    """Append ``value``, typed as ``field_type``, to ``builder``."""
    kind = field_for(field_type)
    if isinstance(kind, Nullable):
        if value is None:
            builder.append_null()
        else:
            serialize_value(kind.inner, value, builder)
        return
    if value is None:
        raise ArrowError(f"null value for non-nullable {kind!r}")
    custom = getattr(kind, "arrow_serialize", None)
    if callable(custom):
        custom(value, builder)
        return
    match kind:
        case Boolean():
            if not isinstance(value, bool):
                raise TypeError(f"expected bool, got {type(value).__name__}")
            builder.append_value(value)
        case Utf8() | LargeUtf8():
            builder.append_value(value)
        case Binary() | LargeBinary() | FixedSizeBinary():
            builder.append_value(_as_bytes(value))
        case Timestamp():
            nanos = _timestamp_ns(value)
            if nanos is None:
                builder.append_null()
            else:
                builder.append_value(nanos)
        case Date32():
            builder.append_value(_epoch_days(value))
        case List() | LargeList() | FixedSizeList():
            _serialize_list(kind, value, builder)
        case _Struct():
            _serialize_struct(kind, value, builder)
        case _ if isinstance(kind, _PRIMITIVES):
            builder.append_value(value)
        case _:
            raise TypeError(f"cannot serialize values of {kind!r}")


def _resolve(values: Iterable[Any], field_type: Any) -> tuple[list[Any], ArrowField]:
    values = list(values)
    if field_type is not None:
        return values, field_for(field_type)
    present = [v for v in values if v is not None]
    if not present:
        raise TypeError("cannot infer an Arrow type without a non-null value")
    kind = field_for(type(present[0]))
    return values, (Nullable(kind) if len(present) < len(values) else kind)


def serialize_to_builder(values: Iterable[Any], field_type: Any = None) -> ArrayBuilder:
    """Return a builder holding every value; the type is inferred when not given."""
    values, kind = _resolve(values, field_type)
    builder = new_builder(kind)
    for value in values:
        serialize_value(kind, value, builder)
    return builder


def try_into_arrow(values: Iterable[Any], field_type: Any = None) -> Array:
    """Serialize ``values`` into an Arrow array."""
    return serialize_to_builder(values, field_type).finish()


def try_into_record_batch(values: Iterable[Any], field_type: Any = None) -> RecordBatch:
    """Serialize ``values`` into a one-column record batch."""
    array = try_into_arrow(values, field_type)
    field = Field(RECORD_BATCH_ITEM, array.data_type, array.null_count > 0)
    return RecordBatch([field], [array])


def flatten(batch: RecordBatch) -> RecordBatch:
    """Turn a batch holding one struct column into a batch of its child columns."""
    if batch.num_columns != 1:
        raise ArrowError("RecordBatch must contain a single Array")
    column = batch.columns[0]
    if column.data_type.type_id is not TypeId.STRUCT:
        raise ArrowError("Array in RecordBatch must be of type Struct")
    return RecordBatch(column.fields, column.columns)