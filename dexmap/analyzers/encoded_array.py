"""
Encoded Array Decoder
======================

Measures the ``encoded_array_item`` that holds a class's static field
initialisers (``class_def_item.static_values_off``).

Each element is an ``encoded_value``: one tag byte packing
``(value_arg << 5) | value_type`` followed by a payload.  Two sizing rules
are offered:

* **heuristic** (default) -- every payload is ``(value_arg & 0x7) + 1``
  bytes.  This is what droidcolors does and keeps images comparable with
  it, but it over-reads NULL and BOOLEAN values (no payload) and
  mis-measures nested arrays and annotations.
* **strict** -- sizes each payload from its value type, recursing into
  nested ``encoded_array`` and ``encoded_annotation`` values up to
  ``MAX_VALUE_DEPTH`` levels.

References:
    - Google. (2024). DEX Format -- encoded_value encoding.
      https://source.android.com/docs/core/runtime/dex-format#encoding
"""

from __future__ import annotations

import enum

from dexmap.core.errors import NestingTooDeepError
from dexmap.core.models import Region, RegionCategory
from dexmap.parsers.cursor import DexCursor, checked_region


class ValueType(enum.IntEnum):
    """``value_type`` codes of an encoded_value."""
    BYTE = 0x00
    SHORT = 0x02
    CHAR = 0x03
    INT = 0x04
    LONG = 0x06
    FLOAT = 0x10
    DOUBLE = 0x11
    METHOD_TYPE = 0x15
    METHOD_HANDLE = 0x16
    STRING = 0x17
    TYPE = 0x18
    FIELD = 0x19
    METHOD = 0x1A
    ENUM = 0x1B
    ARRAY = 0x1C
    ANNOTATION = 0x1D
    NULL = 0x1E
    BOOLEAN = 0x1F


_NO_PAYLOAD: frozenset[int] = frozenset({ValueType.NULL, ValueType.BOOLEAN})

# Nested arrays and annotations deeper than this abort the item.
MAX_VALUE_DEPTH: int = 64


class EncodedArrayDecoder:
    """Measure encoded_array_items.

    Args:
        data: Complete file contents.
        strict: Size values by type instead of the droidcolors heuristic.
    """

    def __init__(self, data: bytes, strict: bool = False) -> None:
        self._data = data
        self._strict = strict

    def decode(self, offset: int) -> Region:
        """Return the ``STATIC_VALUES`` region of the array at *offset*.

        Raises:
            OffsetOutOfRangeError: *offset* is outside the buffer.
            TruncatedStreamError: The array runs off the buffer.
            NestingTooDeepError: Strict sizing met values nested deeper
                than ``MAX_VALUE_DEPTH``.
        """
        cursor = DexCursor(self._data, offset, "static_values_off")
        if self._strict:
            self._walk_array(cursor)
        else:
            count = cursor.uleb128()
            for _ in range(count):
                tag = cursor.u1()
                value_arg = tag >> 5
                cursor.skip((value_arg & 0x7) + 1)
        return checked_region(
            self._data, offset, cursor.position - offset, RegionCategory.STATIC_VALUES
        )

    # ------------------------------------------------------------------ #
    #  Strict sizing
    # ------------------------------------------------------------------ #

    def _walk_array(self, cursor: DexCursor, depth: int = 0) -> None:
        for _ in range(cursor.uleb128()):
            self._walk_value(cursor, depth)

    def _walk_annotation(self, cursor: DexCursor, depth: int) -> None:
        cursor.uleb128()  # type_idx
        for _ in range(cursor.uleb128()):
            cursor.uleb128()  # name_idx
            self._walk_value(cursor, depth)

    def _walk_value(self, cursor: DexCursor, depth: int) -> None:
        start = cursor.position
        tag = cursor.u1()
        value_arg, value_type = tag >> 5, tag & 0x1F
        if value_type in (ValueType.ARRAY, ValueType.ANNOTATION):
            if depth >= MAX_VALUE_DEPTH:
                raise NestingTooDeepError(start, MAX_VALUE_DEPTH)
            if value_type == ValueType.ARRAY:
                self._walk_array(cursor, depth + 1)
            else:
                self._walk_annotation(cursor, depth + 1)
        elif value_type in _NO_PAYLOAD:
            pass
        elif value_type == ValueType.BYTE:
            cursor.skip(1)
        else:
            cursor.skip(value_arg + 1)
