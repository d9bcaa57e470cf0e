"""Short ASCII strings stored as Arrow fixed-size binary values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar

from .builders import ArrayBuilder, FixedSizeBinaryBuilder
from .field import ArrowError, ArrowField, DataType, TypeId


def _parse(data: bytes, size: int) -> str | None:
    if len(data) > size or b"\x00" in data:
        return None
    try:
        return data.decode("ascii")
    except UnicodeDecodeError:
        return None


@dataclass(frozen=True)
class TinyAsciiStr(ArrowField):
    """ASCII strings of at most ``size`` characters, stored in ``size``-byte slots.

    Only strings of exactly ``size`` characters fit a slot when serializing;
    slots that do not hold a valid string read back as missing.
    """

    size: int
    vec_enabled: ClassVar[bool] = False

    def __post_init__(self) -> None:
        if self.size < 0:
            raise ArrowError(f"string capacity must be non-negative, got {self.size}")

    def data_type(self) -> DataType:
        return DataType(TypeId.FIXED_SIZE_BINARY, size=self.size)

    def new_array(self) -> FixedSizeBinaryBuilder:
        return FixedSizeBinaryBuilder(self.size)

    def arrow_serialize(self, value: Any, builder: ArrayBuilder) -> None:
        if not isinstance(value, str):
            raise TypeError(f"expected str, got {type(value).__name__}")
        try:
            encoded = value.encode("ascii")
        except UnicodeEncodeError as exc:
            raise ArrowError(f"{value!r} is not an ASCII string") from exc
        if _parse(encoded, self.size) is None:
            raise ArrowError(f"{value!r} is not a valid string of capacity {self.size}")
        builder.append_value(encoded)

    def arrow_deserialize(self, item: bytes | None) -> str | None:
        if item is None:
            return None
        return _parse(bytes(item), self.size)