"""
Section Walker
===============

Turns a parsed header into the ordered list of coloured regions that make
up the DEX map.

Regions are emitted in droidcolors' paint order so that overlaps resolve
the same way in both tools (the painter applies them last-write-wins):

    1. header ``[0, header_size)``
    2. link section, at ``data_off + data_size + link_off``
    3. map_list (u4 count, 12-byte items)
    4. the six fixed-stride index tables
    5. string_data_items (ULEB128 length prefix, then the MUTF-8 bytes)
    6. proto parameter type_lists
    7. per class_def: interfaces, annotations directory, class_data_item,
       static values

Every substructure is decoded in isolation.  A truncated stream or an
offset pointing outside the file drops that substructure's regions, is
recorded as a :class:`DecodeIssue`, and the walk moves on to the next row.

References:
    - Google. (2024). DEX Format -- map_list, string_data_item, type_list,
      annotations_directory_item, class_def_item.
      https://source.android.com/docs/core/runtime/dex-format
"""

from __future__ import annotations

from typing import Callable, Iterator

from dexmap.analyzers.class_data import ClassDataDecoder
from dexmap.analyzers.encoded_array import EncodedArrayDecoder
from dexmap.core.errors import (
    NestingTooDeepError,
    OffsetOutOfRangeError,
    TruncatedStreamError,
)
from dexmap.core.models import DecodeIssue, DexHeader, Region, RegionCategory
from dexmap.parsers.cursor import check_offset, checked_region, read_u4, read_uleb128


# ---------------------------------------------------------------------------
# Record layouts
# ---------------------------------------------------------------------------

MAP_ITEM_SIZE: int = 12
TYPE_ITEM_SIZE: int = 4
ANNOTATIONS_DIRECTORY_HEAD: int = 16
ANNOTATION_ENTRY_SIZE: int = 8

_PROTO_PARAMETERS_OFFSET: int = 8
_CLASS_INTERFACES_OFFSET: int = 12
_CLASS_ANNOTATIONS_OFFSET: int = 20
_CLASS_DATA_OFFSET: int = 24
_CLASS_STATIC_VALUES_OFFSET: int = 28

_LOCAL_ERRORS = (TruncatedStreamError, OffsetOutOfRangeError, NestingTooDeepError)


class SectionWalker:
    """Walk every structure reachable from the header.

    Usage::

        walker = SectionWalker(data, header)
        regions, issues = walker.walk()

    Args:
        data: Complete file contents.
        header: Header parsed from *data*.
        strict_values: Size static-value arrays by value type.
    """

    def __init__(
        self,
        data: bytes,
        header: DexHeader,
        strict_values: bool = False,
    ) -> None:
        self._data = data
        self._header = header
        self._class_data = ClassDataDecoder(data)
        self._encoded_arrays = EncodedArrayDecoder(data, strict=strict_values)
        self._regions: list[Region] = []
        self._issues: list[DecodeIssue] = []

    def walk(self) -> tuple[list[Region], list[DecodeIssue]]:
        """Return all regions in paint order and the substructures dropped."""
        self._regions = []
        self._issues = []
        hdr = self._header

        self._attempt("header_item", 0, lambda: [
            checked_region(self._data, 0, hdr.header_size, RegionCategory.HEADER)
        ])

        if hdr.link_size != 0 and hdr.link_off != 0:
            link_start = hdr.data_off + hdr.data_size + hdr.link_off
            self._attempt("link_data", link_start, lambda: [
                checked_region(self._data, link_start, hdr.link_size, RegionCategory.LINK)
            ])

        if hdr.map_off != 0:
            self._attempt("map_list", hdr.map_off, lambda: [
                self._counted_list(hdr.map_off, MAP_ITEM_SIZE, RegionCategory.MAP_LIST)
            ])

        for section in hdr.sections():
            if section.count == 0:
                continue
            self._attempt(section.name, section.offset, lambda s=section: [
                checked_region(self._data, s.offset, s.byte_size, s.category)
            ])

        self._walk_strings()
        self._walk_protos()
        self._walk_class_defs()
        return self._regions, self._issues

    # ------------------------------------------------------------------ #
    #  Per-table walks
    # ------------------------------------------------------------------ #

    def _walk_strings(self) -> None:
        hdr = self._header
        previous = 0
        for row in self._rows("string_ids", hdr.string_ids_off, 4, hdr.string_ids_size):
            # droidcolors compares the table offset, not the string offset,
            # so only the first row is ever painted as "ordered".
            ordered = hdr.string_ids_off > previous
            previous = hdr.string_ids_off

            target = read_u4(self._data, row)
            self._attempt("string_data_item", target,
                          lambda t=target, o=ordered: self._string_data(t, o))

    def _walk_protos(self) -> None:
        hdr = self._header
        for row in self._rows("proto_ids", hdr.proto_ids_off, 12, hdr.proto_ids_size):
            parameters_off = read_u4(self._data, row + _PROTO_PARAMETERS_OFFSET)
            if parameters_off == 0:
                continue
            self._attempt("proto_parameters", parameters_off, lambda p=parameters_off: [
                self._counted_list(p, TYPE_ITEM_SIZE, RegionCategory.PROTO_PARAMETERS)
            ])

    def _walk_class_defs(self) -> None:
        hdr = self._header
        for row in self._rows("class_defs", hdr.class_defs_off, 32, hdr.class_defs_size):
            interfaces_off = read_u4(self._data, row + _CLASS_INTERFACES_OFFSET)
            annotations_off = read_u4(self._data, row + _CLASS_ANNOTATIONS_OFFSET)
            class_data_off = read_u4(self._data, row + _CLASS_DATA_OFFSET)
            static_values_off = read_u4(self._data, row + _CLASS_STATIC_VALUES_OFFSET)

            if interfaces_off:
                self._attempt("class_interfaces", interfaces_off, lambda: [
                    self._counted_list(
                        interfaces_off, TYPE_ITEM_SIZE, RegionCategory.CLASS_INTERFACES
                    )
                ])
            if annotations_off:
                self._attempt("annotations_directory_item", annotations_off,
                              lambda: [self._annotations_directory(annotations_off)])
            if class_data_off:
                self._attempt("class_data_item", class_data_off,
                              lambda: self._class_data.decode(class_data_off, self._issues))
            if static_values_off:
                self._attempt("encoded_array_item", static_values_off,
                              lambda: [self._encoded_arrays.decode(static_values_off)])

    # ------------------------------------------------------------------ #
    #  Substructure sizing
    # ------------------------------------------------------------------ #

    def _string_data(self, offset: int, ordered: bool) -> list[Region]:
        check_offset(self._data, offset, "string_data_off")
        length, consumed = read_uleb128(self._data, offset)
        category = (
            RegionCategory.STRING_DATA_ORDERED if ordered else RegionCategory.STRING_DATA
        )
        return [
            checked_region(self._data, offset, consumed, RegionCategory.STRING_LENGTH),
            checked_region(self._data, offset + consumed, length, category),
        ]

    def _counted_list(self, offset: int, item_size: int, category: RegionCategory) -> Region:
        """Region of a u4 ``size`` followed by ``size`` fixed-width items."""
        check_offset(self._data, offset, category.value)
        count = read_u4(self._data, offset)
        return checked_region(self._data, offset, count * item_size + 4, category)

    def _annotations_directory(self, offset: int) -> Region:
        check_offset(self._data, offset, "annotations_off")
        entries = (
            read_u4(self._data, offset + 4)     # fields_size
            + read_u4(self._data, offset + 8)   # annotated_methods_size
            + read_u4(self._data, offset + 12)  # annotated_parameters_size
        )
        # droidcolors sizes the directory with a trailing 4 bytes.
        length = ANNOTATIONS_DIRECTORY_HEAD + entries * ANNOTATION_ENTRY_SIZE + 4
        return checked_region(
            self._data, offset, length, RegionCategory.ANNOTATIONS_DIRECTORY
        )

    # ------------------------------------------------------------------ #
    #  Helpers
    # ------------------------------------------------------------------ #

    def _rows(self, name: str, offset: int, stride: int, count: int) -> Iterator[int]:
        """Yield the offset of each row of a fixed-stride table.

        Stops, with one issue, at the first row that is not entirely inside
        the file; every later row would be out of range too.
        """
        limit = len(self._data)
        for index in range(count):
            row = offset + index * stride
            if row + stride > limit:
                self._issues.append(DecodeIssue(
                    name, row,
                    f"Row {index} of {count} at 0x{row:x} exceeds buffer end 0x{limit:x}",
                ))
                return
            yield row

    def _attempt(
        self,
        structure: str,
        offset: int,
        decode: Callable[[], list[Region]],
    ) -> None:
        try:
            regions = decode()
        except _LOCAL_ERRORS as exc:
            self._issues.append(DecodeIssue(structure, offset, str(exc)))
            return
        self._regions.extend(r for r in regions if r.length > 0)
