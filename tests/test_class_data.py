from __future__ import annotations

import pytest

from dexmap.analyzers.class_data import (
    DIRECT_METHODS,
    VIRTUAL_METHODS,
    ClassDataDecoder,
)
from dexmap.core.errors import OffsetOutOfRangeError
from dexmap.core.models import DecodeIssue, RegionCategory
from dexmap.parsers.cursor import encode_uleb128

from tests.dexfactory import code_item


def _spans(regions) -> list[tuple[RegionCategory, int, int]]:
    return [(r.category, r.start, r.length) for r in regions]


def test_empty_class_body_is_one_four_byte_region() -> None:
    issues: list[DecodeIssue] = []
    regions = ClassDataDecoder(b"\x00\x00\x00\x00").decode(0, issues)
    assert _spans(regions) == [(RegionCategory.CLASS_DATA, 0, 4)]
    assert issues == []


def test_fields_are_skipped_but_counted_in_class_data() -> None:
    # 1 static field, 1 instance field, two ULEBs each (one of them 2 bytes).
    data = b"\x01\x01\x00\x00" + b"\x00\x81\x01" + b"\x01\x02"
    regions = ClassDataDecoder(data).decode(0, [])
    assert _spans(regions) == [(RegionCategory.CLASS_DATA, 0, len(data))]


def test_odd_instruction_count_shifts_try_table_by_two() -> None:
    odd = ClassDataDecoder(code_item(insns_size=3, tries_size=1))
    regions = odd.decode_code_item(0, DIRECT_METHODS, [])
    assert _spans(regions) == [
        (RegionCategory.DIRECT_METHOD_HEAD, 0, 16),
        (RegionCategory.DIRECT_METHOD_CODE, 16, 6),
        (RegionCategory.TRY_ITEMS, 24, 8),
    ]

    even = ClassDataDecoder(code_item(insns_size=2, tries_size=1))
    regions = even.decode_code_item(0, DIRECT_METHODS, [])
    assert regions[-1].start == 16 + 4


def test_padding_is_recomputed_per_method() -> None:
    first = code_item(insns_size=1, tries_size=1)   # padded
    second = code_item(insns_size=2, tries_size=1)  # not padded
    data = first + second
    decoder = ClassDataDecoder(data)

    second_regions = decoder.decode_code_item(len(first), VIRTUAL_METHODS, [])
    assert second_regions[-1].start == len(first) + 16 + 4


def test_debug_info_length_is_exact() -> None:
    # line_start=129 (2 bytes), parameters_size=2, names: 0 (1 byte), 261 (2 bytes)
    debug = b"\x81\x01" + b"\x02" + b"\x00" + b"\x85\x02"
    trailer = b"\x07\x00\x01"  # state machine opcodes, not measured
    head = code_item(insns_size=1)
    debug_off = len(head)
    data = code_item(insns_size=1, debug_info_off=debug_off) + debug + trailer

    decoder = ClassDataDecoder(data)
    assert decoder.debug_info_length(debug_off) == len(debug)

    regions = decoder.decode_code_item(0, VIRTUAL_METHODS, [])
    assert _spans(regions) == [
        (RegionCategory.VIRTUAL_METHOD_HEAD, 0, 16),
        (RegionCategory.VIRTUAL_METHOD_CODE, 16, 2),
        (RegionCategory.VIRTUAL_DEBUG_INFO, debug_off, len(debug)),
    ]


def test_methods_emit_code_items_before_class_data() -> None:
    body = code_item(insns_size=2)
    members = (
        b"\x00\x00\x01\x01"
        + b"\x00\x01" + encode_uleb128(16)  # direct method, code at 16
        + b"\x00\x01" + encode_uleb128(0)   # virtual method, abstract
    )
    data = members.ljust(16, b"\x00") + body
    regions = ClassDataDecoder(data).decode(0, [])

    assert _spans(regions) == [
        (RegionCategory.DIRECT_METHOD_HEAD, 16, 16),
        (RegionCategory.DIRECT_METHOD_CODE, 32, 4),
        (RegionCategory.CLASS_DATA, 0, len(members)),
    ]


def test_bad_code_offset_is_an_issue_not_a_failure() -> None:
    data = b"\x00\x00\x01\x00" + b"\x00\x01" + encode_uleb128(0x7FFF)
    issues: list[DecodeIssue] = []
    regions = ClassDataDecoder(data).decode(0, issues)

    assert _spans(regions) == [(RegionCategory.CLASS_DATA, 0, len(data))]
    assert [(i.structure, i.offset) for i in issues] == [("code_item", 0x7FFF)]


def test_broken_debug_info_keeps_code_regions() -> None:
    data = code_item(insns_size=1, debug_info_off=0x1000)
    issues: list[DecodeIssue] = []
    regions = ClassDataDecoder(data).decode_code_item(0, DIRECT_METHODS, issues)

    assert [r.category for r in regions] == [
        RegionCategory.DIRECT_METHOD_HEAD,
        RegionCategory.DIRECT_METHOD_CODE,
    ]
    assert issues[0].structure == "debug_info_item"


def test_try_table_past_end_keeps_head_and_instructions() -> None:
    data = code_item(insns_size=2, tries_size=1)[:-8]
    issues: list[DecodeIssue] = []
    regions = ClassDataDecoder(data).decode_code_item(0, DIRECT_METHODS, issues)

    assert _spans(regions) == [
        (RegionCategory.DIRECT_METHOD_HEAD, 0, 16),
        (RegionCategory.DIRECT_METHOD_CODE, 16, 4),
    ]
    assert [(i.structure, i.offset) for i in issues] == [("code_item", 0)]


def test_instructions_past_end_keep_head_inside_class() -> None:
    body = code_item(insns_size=8)[:18]
    members = b"\x00\x00\x01\x00" + b"\x00\x01" + encode_uleb128(2)
    data = b"\x00\x00" + body + members
    class_data_off = 2 + len(body)

    issues: list[DecodeIssue] = []
    regions = ClassDataDecoder(data).decode(class_data_off, issues)

    assert _spans(regions) == [
        (RegionCategory.DIRECT_METHOD_HEAD, 2, 16),
        (RegionCategory.CLASS_DATA, class_data_off, len(members)),
    ]
    assert [(i.structure, i.offset) for i in issues] == [("code_item", 2)]


def test_truncated_member_stream_drops_class_data_region() -> None:
    # Two direct methods; the stream ends inside the second record.
    body = code_item(insns_size=1)
    members = b"\x00\x00\x02\x00" + b"\x00\x01" + encode_uleb128(2) + b"\x01"
    data = b"\x00\x00" + body + members
    class_data_off = 2 + len(body)

    issues: list[DecodeIssue] = []
    regions = ClassDataDecoder(data).decode(class_data_off, issues)

    assert _spans(regions) == [
        (RegionCategory.DIRECT_METHOD_HEAD, 2, 16),
        (RegionCategory.DIRECT_METHOD_CODE, 18, 2),
    ]
    assert [(i.structure, i.offset) for i in issues] == [
        ("class_data_item", class_data_off)
    ]


def test_class_data_offset_outside_buffer_raises() -> None:
    with pytest.raises(OffsetOutOfRangeError):
        ClassDataDecoder(b"\x00\x00\x00\x00").decode(4, [])
