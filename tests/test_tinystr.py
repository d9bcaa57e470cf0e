import pytest

from arrowconvert.arrays import FixedSizeBinaryArray
from arrowconvert.deserialize import iter_array, try_into_collection
from arrowconvert.field import ArrowError, FixedSizeBinary, List, Nullable, TypeId
from arrowconvert.serialize import try_into_arrow
from arrowconvert.tinystr import TinyAsciiStr


def test_data_type_is_fixed_size_binary():
    data_type = TinyAsciiStr(4).data_type()
    assert data_type.type_id is TypeId.FIXED_SIZE_BINARY
    assert data_type.size == 4
    assert data_type == FixedSizeBinary(4).data_type()


def test_roundtrip():
    original = ["abcd", "wxyz", "AB12"]
    array = try_into_arrow(original, TinyAsciiStr(4))
    assert list(array) == [b"abcd", b"wxyz", b"AB12"]
    assert try_into_collection(array, TinyAsciiStr(4)) == original


def test_nullable_roundtrip():
    original = ["abc", None, "xyz"]
    array = try_into_arrow(original, Nullable(TinyAsciiStr(3)))
    assert array.null_count == 1
    assert try_into_collection(array, Nullable(TinyAsciiStr(3))) == original


def test_short_string_does_not_fit_slot():
    with pytest.raises(ArrowError):
        try_into_arrow(["ab"], TinyAsciiStr(4))


def test_too_long_string_rejected():
    with pytest.raises(ArrowError):
        try_into_arrow(["abcde"], TinyAsciiStr(4))


def test_non_ascii_rejected():
    with pytest.raises(ArrowError):
        try_into_arrow(["abc\u00e9"], TinyAsciiStr(4))


def test_non_string_rejected():
    with pytest.raises(TypeError):
        try_into_arrow([b"abcd"], TinyAsciiStr(4))


def test_invalid_bytes_read_as_missing():
    array = FixedSizeBinaryArray(4, [b"ab\x00\x00", b"\xffabc", b"good"])
    assert try_into_collection(array, Nullable(TinyAsciiStr(4))) == [None, None, "good"]


def test_invalid_bytes_in_non_nullable_raises():
    array = FixedSizeBinaryArray(4, [b"ab\x00\x00"])
    with pytest.raises(ArrowError):
        try_into_collection(array, TinyAsciiStr(4))


def test_arrow_deserialize_direct():
    field = TinyAsciiStr(4)
    assert field.arrow_deserialize(b"abcd") == "abcd"
    assert field.arrow_deserialize(None) is None
    assert field.arrow_deserialize(b"abcde") is None


def test_size_mismatch_rejected_on_read():
    array = try_into_arrow(["abcd"], TinyAsciiStr(4))
    with pytest.raises(ArrowError):
        iter_array(array, TinyAsciiStr(8))


def test_cannot_be_list_item():
    with pytest.raises(TypeError):
        List(TinyAsciiStr(4))


def test_negative_size_rejected():
    with pytest.raises(ArrowError):
        TinyAsciiStr(-1)