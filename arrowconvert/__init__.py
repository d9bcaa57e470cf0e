"""Conversion between Python values and in-memory Arrow-style columnar arrays."""

__version__ = "0.8.1"

__all__ = [
    "field",
    "arrays",
    "builders",
    "serialize",
    "deserialize",
    "decimals",
    "tinystr",
]