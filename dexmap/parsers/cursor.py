"""
Bounds-Checked Byte Cursor
===========================

ULEB128 decoding and a small cursor over an immutable DEX buffer.

DEX substructures carry no end markers: the only way to know where a
class_data_item or a debug_info_item ends is to decode it.  The cursor is
advanced explicitly by every read, so ``cursor.position - start`` after a
walk is the walked structure's length.

All fixed-width reads are little-endian and go through
:func:`struct.unpack_from` after an explicit bounds check; a read that
would leave the buffer raises :class:`TruncatedStreamError` instead of
returning short data.

References:
    - Google. (2024). DEX Format -- LEB128.
      https://source.android.com/docs/core/runtime/dex-format#leb128
    - Android libdex ``Leb128.h`` (readUnsignedLeb128).
"""

from __future__ import annotations

import struct

from dexmap.core.errors import OffsetOutOfRangeError, TruncatedStreamError
from dexmap.core.models import Region, RegionCategory

ULEB128_MAX_BYTES: int = 5


def read_uleb128(data: bytes, offset: int) -> tuple[int, int]:
    """Decode an unsigned LEB128 value.

    Up to five bytes are read.  The fifth byte is shifted in whole and its
    continuation bit is ignored; the value is then truncated to 32 bits.
    Garbage in the high nibble of the fifth byte is therefore tolerated,
    exactly as Dalvik's ``readUnsignedLeb128`` tolerates it.

    Args:
        data: Buffer to read from.
        offset: Offset of the first byte.

    Returns:
        Tuple of ``(value, bytes_consumed)``.

    Raises:
        TruncatedStreamError: A byte that must be read lies past the end
            of *data*.
    """
    limit = len(data)
    result = 0
    pos = offset
    for shift in (0, 7, 14, 21):
        if not 0 <= pos < limit:
            raise TruncatedStreamError(pos, 1, limit)
        byte = data[pos]
        pos += 1
        result |= (byte & 0x7F) << shift
        if byte < 0x80:
            return result, pos - offset

    if pos >= limit:
        raise TruncatedStreamError(pos, 1, limit)
    result |= data[pos] << 28
    return result & 0xFFFFFFFF, ULEB128_MAX_BYTES


def encode_uleb128(value: int) -> bytes:
    """Encode *value* with the minimal number of 7-bit groups."""
    if value < 0:
        raise ValueError(f"ULEB128 cannot encode negative value {value}")
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


class DexCursor:
    """Explicitly advanced read position over a DEX buffer.

    Usage::

        cursor = DexCursor(data, class_data_off)
        static_fields = cursor.uleb128()
        ...
        length = cursor.position - class_data_off

    Args:
        data: Complete file contents.
        offset: Starting position; must lie inside *data*.
        field: Name of the offset field, used in the error message when
               *offset* is outside the buffer.

    Raises:
        OffsetOutOfRangeError: *offset* is not inside *data*.
    """

    __slots__ = ("_data", "_limit", "_pos")

    def __init__(self, data: bytes, offset: int, field: str = "offset") -> None:
        check_offset(data, offset, field)
        self._data = data
        self._limit = len(data)
        self._pos = offset

    @property
    def position(self) -> int:
        return self._pos

    def _require(self, count: int) -> int:
        pos = self._pos
        if pos + count > self._limit:
            raise TruncatedStreamError(pos, count, self._limit)
        self._pos = pos + count
        return pos

    def u1(self) -> int:
        return self._data[self._require(1)]

    def u2(self) -> int:
        return struct.unpack_from("<H", self._data, self._require(2))[0]

    def u4(self) -> int:
        return struct.unpack_from("<I", self._data, self._require(4))[0]

    def uleb128(self) -> int:
        value, consumed = read_uleb128(self._data, self._pos)
        self._pos += consumed
        return value

    def skip(self, count: int) -> None:
        """Advance over *count* bytes that must exist in the buffer."""
        self._require(count)


def check_offset(data: bytes, offset: int, field: str) -> None:
    """Raise :class:`OffsetOutOfRangeError` unless ``0 <= offset < len(data)``."""
    if not 0 <= offset < len(data):
        raise OffsetOutOfRangeError(field, offset, len(data))


def read_u4(data: bytes, offset: int) -> int:
    """Read a little-endian uint32, bounds-checked."""
    if offset < 0 or offset + 4 > len(data):
        raise TruncatedStreamError(offset, 4, len(data))
    return struct.unpack_from("<I", data, offset)[0]


def checked_region(
    data: bytes,
    start: int,
    length: int,
    category: RegionCategory,
) -> Region:
    """Build a :class:`Region` after checking it lies inside *data*.

    An empty region may start at ``len(data)``.

    Raises:
        OffsetOutOfRangeError: *start* is outside the buffer.
        TruncatedStreamError: The range runs past the end of the buffer.
    """
    if length or start != len(data):
        check_offset(data, start, category.value)
    if start + length > len(data):
        raise TruncatedStreamError(start, length, len(data))
    return Region.of(start, length, category)
