from __future__ import annotations

import pytest

from dexmap.core.errors import OffsetOutOfRangeError, TruncatedStreamError
from dexmap.core.models import RegionCategory
from dexmap.parsers.cursor import (
    DexCursor,
    checked_region,
    encode_uleb128,
    read_u4,
    read_uleb128,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        (b"\x00", (0, 1)),
        (b"\x01", (1, 1)),
        (b"\x7f", (127, 1)),
        (b"\x80\x7f", (16256, 2)),
        (b"\xb4\x07", (948, 2)),
    ],
)
def test_read_uleb128_reference_values(raw: bytes, expected: tuple[int, int]) -> None:
    assert read_uleb128(raw, 0) == expected


@pytest.mark.parametrize("value", [0, 1, 127, 128, 300, 2**21, 2**28 - 1, 2**32 - 1])
def test_uleb128_round_trip(value: int) -> None:
    encoded = encode_uleb128(value)
    assert read_uleb128(encoded, 0) == (value, len(encoded))


def test_fifth_byte_is_taken_whole_and_masked() -> None:
    value, consumed = read_uleb128(b"\x80\x80\x80\x80\xff\x55", 0)
    assert consumed == 5
    assert value == 0xF0000000


def test_read_uleb128_at_offset() -> None:
    assert read_uleb128(b"\xff\xff\x2a", 2) == (42, 1)


def test_read_uleb128_truncated() -> None:
    with pytest.raises(TruncatedStreamError):
        read_uleb128(b"\x80\x80", 0)


def test_encode_rejects_negative() -> None:
    with pytest.raises(ValueError):
        encode_uleb128(-1)


def test_cursor_reads_advance_position() -> None:
    data = b"\x01" + b"\x02\x00" + b"\x03\x00\x00\x00" + b"\x81\x01"
    cursor = DexCursor(data, 0)
    assert cursor.u1() == 1
    assert cursor.u2() == 2
    assert cursor.u4() == 3
    assert cursor.uleb128() == 129
    assert cursor.position == len(data)


def test_cursor_rejects_offset_outside_buffer() -> None:
    with pytest.raises(OffsetOutOfRangeError):
        DexCursor(b"\x00\x00", 2, "code_off")


def test_cursor_skip_past_end() -> None:
    cursor = DexCursor(b"\x00\x00\x00", 1)
    with pytest.raises(TruncatedStreamError):
        cursor.skip(3)


def test_read_u4_bounds() -> None:
    assert read_u4(b"\x78\x56\x34\x12", 0) == 0x12345678
    with pytest.raises(TruncatedStreamError):
        read_u4(b"\x00\x00\x00", 0)


def test_checked_region_bounds() -> None:
    data = bytes(8)
    region = checked_region(data, 2, 6, RegionCategory.LINK)
    assert (region.start, region.length, region.end) == (2, 6, 8)

    with pytest.raises(TruncatedStreamError):
        checked_region(data, 2, 7, RegionCategory.LINK)
    with pytest.raises(OffsetOutOfRangeError):
        checked_region(data, 9, 1, RegionCategory.LINK)


def test_checked_region_allows_empty_range_at_end() -> None:
    region = checked_region(bytes(4), 4, 0, RegionCategory.STRING_DATA)
    assert region.length == 0
