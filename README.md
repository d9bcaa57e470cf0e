# arrowconvert

`arrowconvert` turns sequences of plain Python values, dataclasses
included, into Arrow-style columnar arrays held in memory, and turns those
arrays back into Python values. What goes in and what comes out is
described by *field types*: small objects that name an Arrow data type and
know whether a value may be missing.

It has no third-party dependencies.

## Installation

```
pip install arrowconvert
```

## Field types

`arrowconvert.field` holds the field types:

- integers and floats: `UInt8`, `UInt16`, `UInt32`, `UInt64`, `Int8`,
  `Int16`, `Int32`, `Int64`, `Float16`, `Float32`, `Float64`
- 128-bit integers read as decimals of a given precision and scale:
  `Decimal128(precision, scale)`
- text: `Utf8`, `LargeUtf8`
- `Boolean`
- time: `Timestamp` (naive datetimes as nanoseconds since the epoch) and
  `Date32` (dates as days since the epoch)
- bytes: `Binary`, `LargeBinary`, `FixedSizeBinary(size)`
- nested lists: `List(item)`, `LargeList(item)`, `FixedSizeList(item, size)`
- `Nullable(inner)`, which allows `None` where `inner` does not

Each field type gives its `data_type()` (a `DataType`), tells whether it
`is_nullable()`, and builds a named `Field` with `field(name)`. List items
are named `"item"`. `UInt8` cannot be a list item; a `list[UInt8]`
annotation maps to `Binary` instead.

`field_for(annotation)` picks a field type for an ordinary annotation:
`bool`, `int` (Int64), `float` (Float64), `str`, `bytes`,
`datetime.datetime`, `datetime.date`, `list[...]`, `X | None` /
`Optional[X]`, a field type class or instance, or a dataclass.

```python
from arrowconvert.field import List, Nullable, Utf8, field_for

tags = List(Nullable(Utf8()))
print(tags.data_type())          # a list of nullable "item" strings
print(tags.field("tags"))
print(field_for(list[int] | None))
```

### Dataclasses as structs

A dataclass maps to an Arrow struct with one column per field, in
declaration order. Field metadata can rename a column (`"arrow_name"`) or
choose its field type (`"arrow_type"`):

```python
import dataclasses
from arrowconvert.field import LargeUtf8

@dataclasses.dataclass
class Point:
    x: float
    y: float
    label: str | None = None
    note: str = dataclasses.field(
        default="", metadata={"arrow_type": LargeUtf8(), "arrow_name": "comment"}
    )
```

A dataclass with no fields cannot be mapped and raises `TypeError`.

## Serializing

```python
from arrowconvert.field import Int64, Nullable
from arrowconvert.serialize import try_into_arrow, try_into_record_batch

array = try_into_arrow([1, None, 3], Nullable(Int64()))
print(len(array), array.is_null(1))   # 3 True

batch = try_into_record_batch([1, 2, 3], Int64())
print(batch.column("record_batch_item"))

points = try_into_arrow([Point(1.0, 2.0), Point(3.0, 4.0, "b")], Point)
print(points.column_names)            # ['x', 'y', 'label', 'comment']
```

When no field type is given, it is inferred from the first non-null value,
and made nullable if any value is `None`.

`serialize_to_builder` returns the filled builder instead of a finished
array; `new_builder` and `serialize_value` work one value at a time.
`flatten` turns a record batch that holds a single struct column into a
batch of that struct's columns. Values that do not fit their type (an
out-of-range integer, `None` for a non-nullable type, bytes of the wrong
width) raise `ArrowError` or `TypeError`.

## Deserializing

```python
from arrowconvert.deserialize import iter_array, try_into_collection

for value in iter_array(array, Nullable(Int64())):
    print(value)

values = try_into_collection(array, Nullable(Int64()))   # a list by default
again = try_into_collection(points, Point)               # Point instances
```

If the array's data type differs from the one the field type maps to,
`iter_array` raises `ArrowError` at once. A null read for a non-nullable
type also raises `ArrowError`.

## Arrays and builders

`arrowconvert.arrays` has the immutable arrays (`PrimitiveArray`,
`BooleanArray`, `StringArray`, `BinaryArray`, `FixedSizeBinaryArray`,
`ListArray`, `FixedSizeListArray`, `StructArray`) and `RecordBatch`.
Arrays support `len`, iteration (nulls come out as `None`), `value`,
`is_valid`, `is_null`, `null_count` and `slice`.

`arrowconvert.builders` has the matching builders, each with
`append_value`, `append_null` and `finish`; `ListBuilder` and
`FixedSizeListBuilder` also have `append(is_valid)` to close a list
made of the child values appended since the last one.

## Extras

- `arrowconvert.decimals.DecimalField` stores `decimal.Decimal` values as
  `Decimal128` with precision 38 and scale 10; digits past the tenth
  decimal place are truncated toward zero. `decimal_to_scaled_int` shows
  the integer that is stored.
- `arrowconvert.tinystr.TinyAsciiStr(size)` stores ASCII strings of exactly
  `size` characters as fixed-size binary; slots that do not hold a valid
  string read back as `None`.

Your own field type can subclass `ArrowField` and define `new_array()`,
`arrow_serialize(value, builder)` and `arrow_deserialize(item)`, as these
two do.

## What it does not do

Arrays live only in memory as Python objects. There is no reading or
writing of Arrow IPC streams, files or any other on-disk format, no
exchange with other Arrow libraries, and no union or dictionary types.

## Running the tests

```
pip install -e ".[test]"
pytest
```