"""
Class Data Decoder
===================

Measures a ``class_data_item`` and every ``code_item`` it points at.

A class_data_item is four ULEB128 counts followed by the encoded fields
and methods::

    static_fields_size    uleb128
    instance_fields_size  uleb128
    direct_methods_size   uleb128
    virtual_methods_size  uleb128
    static_fields         encoded_field[static_fields_size]     (idx_diff, flags)
    instance_fields       encoded_field[instance_fields_size]
    direct_methods        encoded_method[direct_methods_size]   (idx_diff, flags, code_off)
    virtual_methods       encoded_method[virtual_methods_size]

Fields contribute nothing of their own; the whole member stream is painted
as one ``CLASS_DATA`` region once the cursor has walked past it.  Each
method with a nonzero ``code_off`` adds its code_item: the 16-byte header,
the instruction array, the try table (after a 2-byte pad when the
instruction count is odd) and the head of its debug_info_item.

References:
    - Google. (2024). DEX Format -- class_data_item, code_item,
      debug_info_item.
      https://source.android.com/docs/core/runtime/dex-format
"""

from __future__ import annotations

from typing import NamedTuple

from dexmap.core.errors import OffsetOutOfRangeError, TruncatedStreamError
from dexmap.core.models import DecodeIssue, Region, RegionCategory
from dexmap.parsers.cursor import DexCursor, checked_region


CODE_ITEM_HEADER_SIZE: int = 16
TRY_ITEM_SIZE: int = 8
CODE_UNIT_SIZE: int = 2


class MethodPalette(NamedTuple):
    """Region categories used for one kind of method."""
    head: RegionCategory
    code: RegionCategory
    debug: RegionCategory


DIRECT_METHODS = MethodPalette(
    RegionCategory.DIRECT_METHOD_HEAD,
    RegionCategory.DIRECT_METHOD_CODE,
    RegionCategory.DIRECT_DEBUG_INFO,
)
VIRTUAL_METHODS = MethodPalette(
    RegionCategory.VIRTUAL_METHOD_HEAD,
    RegionCategory.VIRTUAL_METHOD_CODE,
    RegionCategory.VIRTUAL_DEBUG_INFO,
)


class ClassDataDecoder:
    """Walk class_data_items and the code they reference.

    A broken code_item or debug_info_item is recorded in the caller's
    *issues* list; its regions up to the failure are kept and the rest of
    the class keeps decoding.  A
    broken member stream ends the walk: code items already measured are
    kept and the ``CLASS_DATA`` region is dropped, since its end is unknown.

    Usage::

        decoder = ClassDataDecoder(data)
        issues: list[DecodeIssue] = []
        regions = decoder.decode(class_def.class_data_off, issues)
    """

    def __init__(self, data: bytes) -> None:
        self._data = data

    def decode(self, offset: int, issues: list[DecodeIssue]) -> list[Region]:
        """Decode the class_data_item at *offset*.

        Returns:
            Code-item regions in method order, then the ``CLASS_DATA``
            region covering ``[offset, end of member stream)``.

        Raises:
            OffsetOutOfRangeError: *offset* is outside the buffer.
        """
        cursor = DexCursor(self._data, offset, "class_data_off")
        regions: list[Region] = []
        try:
            self._walk_members(cursor, regions, issues)
        except TruncatedStreamError as exc:
            issues.append(DecodeIssue("class_data_item", offset, str(exc)))
            return regions

        regions.append(
            checked_region(
                self._data, offset, cursor.position - offset, RegionCategory.CLASS_DATA
            )
        )
        return regions

    def _walk_members(
        self,
        cursor: DexCursor,
        regions: list[Region],
        issues: list[DecodeIssue],
    ) -> None:
        static_fields = cursor.uleb128()
        instance_fields = cursor.uleb128()
        direct_methods = cursor.uleb128()
        virtual_methods = cursor.uleb128()

        for _ in range(static_fields + instance_fields):
            cursor.uleb128()  # field_idx_diff
            cursor.uleb128()  # access_flags

        for count, palette in (
            (direct_methods, DIRECT_METHODS),
            (virtual_methods, VIRTUAL_METHODS),
        ):
            for _ in range(count):
                cursor.uleb128()  # method_idx_diff
                cursor.uleb128()  # access_flags
                code_off = cursor.uleb128()
                if code_off == 0:
                    continue  # abstract or native
                regions.extend(self.decode_code_item(code_off, palette, issues))

    def decode_code_item(
        self,
        offset: int,
        palette: MethodPalette,
        issues: list[DecodeIssue],
    ) -> list[Region]:
        """Measure the code_item at *offset*.

        A header, instruction array or try table that runs off the buffer
        ends the item with a ``code_item`` issue; regions measured before
        that point are kept.
        """
        regions: list[Region] = []
        try:
            self._measure_code_item(offset, palette, regions, issues)
        except (TruncatedStreamError, OffsetOutOfRangeError) as exc:
            issues.append(DecodeIssue("code_item", offset, str(exc)))
        return regions

    def _measure_code_item(
        self,
        offset: int,
        palette: MethodPalette,
        regions: list[Region],
        issues: list[DecodeIssue],
    ) -> None:
        cursor = DexCursor(self._data, offset, "code_off")
        cursor.skip(6)  # registers_size, ins_size, outs_size
        tries_size = cursor.u2()
        debug_info_off = cursor.u4()
        insns_size = cursor.u4()

        insns_start = offset + CODE_ITEM_HEADER_SIZE
        insns_length = insns_size * CODE_UNIT_SIZE
        regions.append(Region.of(offset, CODE_ITEM_HEADER_SIZE, palette.head))
        if insns_length:
            regions.append(
                checked_region(self._data, insns_start, insns_length, palette.code)
            )

        if tries_size > 0:
            padding = 2 if insns_size % 2 == 1 else 0
            regions.append(
                checked_region(
                    self._data,
                    insns_start + insns_length + padding,
                    tries_size * TRY_ITEM_SIZE,
                    RegionCategory.TRY_ITEMS,
                )
            )

        if debug_info_off != 0:
            try:
                length = self.debug_info_length(debug_info_off)
            except (TruncatedStreamError, OffsetOutOfRangeError) as exc:
                issues.append(DecodeIssue("debug_info_item", debug_info_off, str(exc)))
            else:
                regions.append(Region.of(debug_info_off, length, palette.debug))

    def debug_info_length(self, offset: int) -> int:
        """Bytes taken by a debug_info_item's header and parameter names.

        Only ``line_start``, ``parameters_size`` and the
        ``parameter_names`` array are walked; the state-machine bytecode
        that follows is not.
        """
        cursor = DexCursor(self._data, offset, "debug_info_off")
        cursor.uleb128()  # line_start
        parameters_size = cursor.uleb128()
        for _ in range(parameters_size):
            cursor.uleb128()  # parameter_names (uleb128p1)
        return cursor.position - offset
