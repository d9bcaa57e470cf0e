"""Mapping of ``decimal.Decimal`` values onto Arrow Decimal128 columns."""

from __future__ import annotations

import decimal
from dataclasses import dataclass
from typing import Any

from .builders import ArrayBuilder, PrimitiveBuilder
from .field import ArrowError, ArrowField, DataType, TypeId

DECIMAL128_MAX_PRECISION = 38
DECIMAL_DEFAULT_SCALE = 10

# Largest mantissa a 96-bit decimal coefficient can hold.
_MAX_MANTISSA = 2**96 - 1


def _mantissa_and_scale(value: decimal.Decimal) -> tuple[int, int]:
    sign, digits, exponent = value.as_tuple()
    mantissa = int("".join(map(str, digits)) or "0")
    if sign:
        mantissa = -mantissa
    if exponent >= 0:
        return mantissa * 10**exponent, 0
    return mantissa, -exponent


def decimal_to_scaled_int(value: decimal.Decimal | int) -> int:
    """Return ``value`` as an integer scaled to the default scale.

    Digits beyond the default scale are truncated toward zero.
    """
    if isinstance(value, bool) or not isinstance(value, (decimal.Decimal, int)):
        raise TypeError(f"expected Decimal, got {type(value).__name__}")
    value = decimal.Decimal(value)
    if not value.is_finite():
        raise ArrowError(f"cannot store non-finite decimal {value}")
    mantissa, scale = _mantissa_and_scale(value)
    scale_diff = DECIMAL_DEFAULT_SCALE - scale
    if scale_diff == 0:
        return mantissa
    if scale_diff < 0:
        quotient = abs(mantissa) // 10 ** (-scale_diff)
        return -quotient if mantissa < 0 else quotient
    return mantissa * 10**scale_diff


def _decimal_from_scaled_int(scaled: int) -> decimal.Decimal:
    if abs(scaled) > _MAX_MANTISSA:
        raise ArrowError(f"decimal mantissa {scaled} is out of range")
    digits = tuple(int(c) for c in str(abs(scaled)))
    return decimal.Decimal((1 if scaled < 0 else 0, digits, -DECIMAL_DEFAULT_SCALE))


@dataclass(frozen=True)
class DecimalField(ArrowField):
    """Decimals stored as Decimal128 with maximum precision and the default scale."""

    def data_type(self) -> DataType:
        return DataType(
            TypeId.DECIMAL128,
            precision=DECIMAL128_MAX_PRECISION,
            scale=DECIMAL_DEFAULT_SCALE,
        )

    def new_array(self) -> PrimitiveBuilder:
        return PrimitiveBuilder(self.data_type())

    def arrow_serialize(self, value: Any, builder: ArrayBuilder) -> None:
        builder.append_value(decimal_to_scaled_int(value))

    def arrow_deserialize(self, item: int | None) -> decimal.Decimal | None:
        if item is None:
            return None
        return _decimal_from_scaled_int(item)