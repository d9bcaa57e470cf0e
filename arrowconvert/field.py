"""Arrow data types, fields and the mapping from Python types to them."""

from __future__ import annotations

import ast
import builtins
import dataclasses
import datetime
import inspect
import operator
import types
import typing
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Union

DEFAULT_FIELD_NAME = "item"


class ArrowError(Exception):
    """Raised when data does not fit the Arrow layout or type it is meant for."""


class TimeUnit(Enum):
    SECOND = "s"
    MILLISECOND = "ms"
    MICROSECOND = "us"
    NANOSECOND = "ns"


class TypeId(Enum):
    UINT8 = "UInt8"
    UINT16 = "UInt16"
    UINT32 = "UInt32"
    UINT64 = "UInt64"
    INT8 = "Int8"
    INT16 = "Int16"
    INT32 = "Int32"
    INT64 = "Int64"
    FLOAT16 = "Float16"
    FLOAT32 = "Float32"
    FLOAT64 = "Float64"
    DECIMAL128 = "Decimal128"
    UTF8 = "Utf8"
    LARGE_UTF8 = "LargeUtf8"
    BOOLEAN = "Boolean"
    TIMESTAMP = "Timestamp"
    DATE32 = "Date32"
    BINARY = "Binary"
    LARGE_BINARY = "LargeBinary"
    FIXED_SIZE_BINARY = "FixedSizeBinary"
    LIST = "List"
    LARGE_LIST = "LargeList"
    FIXED_SIZE_LIST = "FixedSizeList"
    STRUCT = "Struct"


@dataclass(frozen=True)
class Field:
    """A named, possibly nullable, slot of a given data type."""

    name: str
    data_type: DataType
    nullable: bool = False


@dataclass(frozen=True)
class DataType:
    """An Arrow logical type; only the attributes relevant to ``type_id`` are set."""

    type_id: TypeId
    precision: int | None = None
    scale: int | None = None
    unit: TimeUnit | None = None
    timezone: str | None = None
    size: int | None = None
    item: Field | None = None
    fields: tuple[Field, ...] = ()


class ArrowField(ABC):
    """Describes how a Python value maps onto an Arrow type."""

    vec_enabled: ClassVar[bool] = True

    @abstractmethod
    def data_type(self) -> DataType:
        """The Arrow data type of this field."""

    def is_nullable(self) -> bool:
        return False

    def field(self, name: str) -> Field:
        return Field(name, self.data_type(), self.is_nullable())


class _Simple(ArrowField):
    _type_id: ClassVar[TypeId]

    def data_type(self) -> DataType:
        return DataType(self._type_id)


@dataclass(frozen=True)
class UInt8(_Simple):
    # A list of UInt8 is Binary, so UInt8 cannot be a list item.
    _type_id: ClassVar[TypeId] = TypeId.UINT8
    vec_enabled: ClassVar[bool] = False


@dataclass(frozen=True)
class UInt16(_Simple):
    _type_id: ClassVar[TypeId] = TypeId.UINT16


@dataclass(frozen=True)
class UInt32(_Simple):
    _type_id: ClassVar[TypeId] = TypeId.UINT32


@dataclass(frozen=True)
class UInt64(_Simple):
    _type_id: ClassVar[TypeId] = TypeId.UINT64


@dataclass(frozen=True)
class Int8(_Simple):
    _type_id: ClassVar[TypeId] = TypeId.INT8


@dataclass(frozen=True)
class Int16(_Simple):
    _type_id: ClassVar[TypeId] = TypeId.INT16


@dataclass(frozen=True)
class Int32(_Simple):
    _type_id: ClassVar[TypeId] = TypeId.INT32


@dataclass(frozen=True)
class Int64(_Simple):
    _type_id: ClassVar[TypeId] = TypeId.INT64


@dataclass(frozen=True)
class Float16(_Simple):
    _type_id: ClassVar[TypeId] = TypeId.FLOAT16


@dataclass(frozen=True)
class Float32(_Simple):
    _type_id: ClassVar[TypeId] = TypeId.FLOAT32


@dataclass(frozen=True)
class Float64(_Simple):
    _type_id: ClassVar[TypeId] = TypeId.FLOAT64


@dataclass(frozen=True)
class Utf8(_Simple):
    _type_id: ClassVar[TypeId] = TypeId.UTF8


@dataclass(frozen=True)
class LargeUtf8(_Simple):
    _type_id: ClassVar[TypeId] = TypeId.LARGE_UTF8


@dataclass(frozen=True)
class Boolean(_Simple):
    _type_id: ClassVar[TypeId] = TypeId.BOOLEAN


@dataclass(frozen=True)
class Date32(_Simple):
    _type_id: ClassVar[TypeId] = TypeId.DATE32


@dataclass(frozen=True)
class Binary(_Simple):
    _type_id: ClassVar[TypeId] = TypeId.BINARY


@dataclass(frozen=True)
class LargeBinary(_Simple):
    _type_id: ClassVar[TypeId] = TypeId.LARGE_BINARY


@dataclass(frozen=True)
class Timestamp(ArrowField):
    """A naive datetime stored as nanoseconds since the epoch."""

    def data_type(self) -> DataType:
        return DataType(TypeId.TIMESTAMP, unit=TimeUnit.NANOSECOND)


@dataclass(frozen=True)
class Decimal128(ArrowField):
    """A 128-bit integer read as a decimal of the given precision and scale."""

    precision: int
    scale: int

    def data_type(self) -> DataType:
        return DataType(TypeId.DECIMAL128, precision=self.precision, scale=self.scale)


@dataclass(frozen=True)
class FixedSizeBinary(ArrowField):
    size: int

    def __post_init__(self) -> None:
        if self.size < 0:
            raise ArrowError(f"fixed size binary width must be non-negative, got {self.size}")

    def data_type(self) -> DataType:
        return DataType(TypeId.FIXED_SIZE_BINARY, size=self.size)


def _require_vec(item: ArrowField) -> None:
    if not isinstance(item, ArrowField):
        raise TypeError(f"{item!r} is not an ArrowField")
    if not item.vec_enabled:
        raise TypeError(f"{item!r} cannot be used as a list item")


@dataclass(frozen=True)
class List(ArrowField):
    item: ArrowField

    def __post_init__(self) -> None:
        _require_vec(self.item)

    def data_type(self) -> DataType:
        return DataType(TypeId.LIST, item=self.item.field(DEFAULT_FIELD_NAME))


@dataclass(frozen=True)
class LargeList(ArrowField):
    item: ArrowField

    def __post_init__(self) -> None:
        _require_vec(self.item)

    def data_type(self) -> DataType:
        return DataType(TypeId.LARGE_LIST, item=self.item.field(DEFAULT_FIELD_NAME))


@dataclass(frozen=True)
class FixedSizeList(ArrowField):
    item: ArrowField
    size: int

    def __post_init__(self) -> None:
        _require_vec(self.item)
        if self.size < 0:
            raise ArrowError(f"fixed size list length must be non-negative, got {self.size}")

    def data_type(self) -> DataType:
        return DataType(
            TypeId.FIXED_SIZE_LIST, size=self.size, item=self.item.field(DEFAULT_FIELD_NAME)
        )


@dataclass(frozen=True)
class Nullable(ArrowField):
    """The inner type, with missing values allowed."""

    inner: ArrowField

    def __post_init__(self) -> None:
        if not isinstance(self.inner, ArrowField):
            raise TypeError(f"{self.inner!r} is not an ArrowField")

    @property
    def vec_enabled(self) -> bool:  # type: ignore[override]
        return self.inner.vec_enabled

    def data_type(self) -> DataType:
        return self.inner.data_type()

    def is_nullable(self) -> bool:
        return True


@dataclass(frozen=True)
class _Struct(ArrowField):
    """A dataclass mapped onto an Arrow struct; members are (attribute, column, type)."""

    cls: type
    members: tuple[tuple[str, str, ArrowField], ...]

    def data_type(self) -> DataType:
        return DataType(
            TypeId.STRUCT,
            fields=tuple(kind.field(column) for _, column, kind in self.members),
        )


_SCALARS: dict[object, type[ArrowField]] = {
    bool: Boolean,
    int: Int64,
    float: Float64,
    str: Utf8,
    bytes: Binary,
    datetime.datetime: Timestamp,
    datetime.date: Date32,
}


def _members_of(obj: object) -> dict[str, Any]:
    try:
        return dict(inspect.getmembers(obj))
    except Exception:  # some objects raise on attribute enumeration
        return {}


_BUILTINS: dict[str, Any] = _members_of(builtins)


def _namespace_of(cls: type) -> dict[str, Any]:
    module = inspect.getmodule(cls)
    namespace: dict[str, Any] = _members_of(module) if module is not None else {}
    namespace.setdefault(cls.__name__, cls)
    return namespace


def _resolve_node(node: ast.AST, namespace: dict[str, Any]) -> Any:
    if isinstance(node, ast.Constant):
        if isinstance(node.value, str):
            return _resolve_annotation(node.value, namespace)
        return node.value
    if isinstance(node, ast.Name):
        if node.id in namespace:
            return namespace[node.id]
        if node.id in _BUILTINS:
            return _BUILTINS[node.id]
        raise TypeError(f"cannot resolve the name {node.id!r} in an annotation")
    if isinstance(node, ast.Attribute):
        owner = _resolve_node(node.value, namespace)
        members = _members_of(owner)
        if node.attr not in members:
            raise TypeError(f"cannot resolve the attribute {node.attr!r} in an annotation")
        return members[node.attr]
    if isinstance(node, ast.Subscript):
        base = _resolve_node(node.value, namespace)
        inner = node.slice
        if isinstance(inner, ast.Tuple):
            args = tuple(_resolve_node(element, namespace) for element in inner.elts)
            return base[args]
        return base[_resolve_node(inner, namespace)]
    if isinstance(node, ast.BinOp) and isinstance(node.op, ast.BitOr):
        left = _resolve_node(node.left, namespace)
        right = _resolve_node(node.right, namespace)
        return operator.or_(left, right)
    if isinstance(node, ast.Call):
        func = _resolve_node(node.func, namespace)
        args = [_resolve_node(arg, namespace) for arg in node.args]
        kwargs = {kw.arg: _resolve_node(kw.value, namespace) for kw in node.keywords if kw.arg}
        return func(*args, **kwargs)
    raise TypeError(f"unsupported annotation syntax: {ast.dump(node)}")


def _resolve_annotation(annotation: object, namespace: dict[str, Any]) -> object:
    if not isinstance(annotation, str):
        return annotation
    try:
        tree = ast.parse(annotation, mode="eval")
    except SyntaxError as exc:
        raise TypeError(f"cannot parse annotation {annotation!r}") from exc
    return _resolve_node(tree.body, namespace)


def _struct_for(cls: type) -> _Struct:
    members = dataclasses.fields(cls)
    if not members:
        raise TypeError(f"{cls.__name__} has no fields to map")
    namespace = _namespace_of(cls)
    resolved = []
    for member in members:
        override = member.metadata.get("arrow_type")
        annotation = override if override is not None else member.type
        kind = field_for(_resolve_annotation(annotation, namespace))
        resolved.append((member.name, member.metadata.get("arrow_name", member.name), kind))
    return _Struct(cls, tuple(resolved))


def field_for(annotation: object) -> ArrowField:
    """Return the ArrowField describing a Python type annotation."""
    if isinstance(annotation, ArrowField):
        return annotation
    if isinstance(annotation, type) and issubclass(annotation, ArrowField):
        return annotation()
    origin = typing.get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = typing.get_args(annotation)
        present = [arg for arg in args if arg is not type(None)]
        if len(present) != 1 or len(args) != 2:
            raise TypeError(f"only Optional unions can be mapped, got {annotation!r}")
        return Nullable(field_for(present[0]))
    if origin is list:
        args = typing.get_args(annotation)
        if len(args) != 1:
            raise TypeError(f"list annotation needs one item type, got {annotation!r}")
        item = field_for(args[0])
        if item == UInt8():
            return Binary()
        return List(item)
    if annotation in _SCALARS:
        return _SCALARS[annotation]()
    if isinstance(annotation, type) and dataclasses.is_dataclass(annotation):
        return _struct_for(annotation)
    raise TypeError(f"no Arrow mapping for {annotation!r}")