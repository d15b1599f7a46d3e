from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import pytest

from shared.models import Severity

from dexmap.core.engine import DexMapEngine
from dexmap.core.errors import FileTooLargeError, MalformedHeaderError, SizeMismatchError
from dexmap.core.models import CATEGORY_COLOURS, RegionCategory

from tests.dexfactory import build_dex, u4


def test_single_string_end_to_end(engine: DexMapEngine, single_string_dex: bytes) -> None:
    result, canvas = engine.analyze_data(single_string_dex)

    assert (result.width, result.height) == (256, 2)
    spans = [(r.category, r.start, r.length) for r in result.regions]
    assert spans == [
        (RegionCategory.HEADER, 0, 0x70),
        (RegionCategory.STRING_IDS, 0x70, 4),
        (RegionCategory.STRING_LENGTH, 0x74, 1),
        (RegionCategory.STRING_DATA_ORDERED, 0x75, 3),
    ]
    assert canvas.pixel(0x74) == CATEGORY_COLOURS[RegionCategory.STRING_LENGTH]
    assert canvas.pixel(0x77) == (100, 109, 44)
    assert canvas.pixel(0x78) == (0, 0, 0)
    assert result.painted_pixels == len(single_string_dex)
    assert result.findings == []


def test_header_warning_becomes_low_finding(engine: DexMapEngine) -> None:
    result, _ = engine.analyze_data(build_dex(version=b"040"))
    assert [f.severity for f in result.findings] == [Severity.LOW]
    assert result.header_warnings[0].value == "version"


def test_skipped_structure_becomes_info_finding(engine: DexMapEngine) -> None:
    body = u4(0x9999)
    result, _ = engine.analyze_data(
        build_dex(body, string_ids_size=1, string_ids_off=0x70)
    )
    assert [f.severity for f in result.findings] == [Severity.INFO]
    assert "string_data_item" in result.findings[0].title


def test_fatal_errors_propagate(engine: DexMapEngine) -> None:
    with pytest.raises(MalformedHeaderError):
        engine.analyze_data(b"PK\x03\x04" + bytes(200))
    with pytest.raises(SizeMismatchError):
        engine.analyze_data(build_dex(bytes(8))[:-1])


def test_strict_values_setting_is_honoured(engine: DexMapEngine, config) -> None:
    body = u4(0, 0, 0, 0, 0, 0, 0, 0x90) + b"\x01\x1e\xff"
    data = build_dex(body, class_defs_size=1, class_defs_off=0x70)

    lengths = {}
    for strict in (False, True):
        config.dexmap.strict_encoded_values = strict
        result, _ = engine.analyze_data(data)
        lengths[strict] = result.regions[-1].length
    assert lengths == {False: 3, True: 2}


def test_canvas_width_setting(engine: DexMapEngine, config, single_string_dex: bytes) -> None:
    config.dexmap.canvas_width = 16
    result, _ = engine.analyze_data(single_string_dex)
    assert (result.width, result.height) == (16, 9)


def test_analyze_reads_file(engine: DexMapEngine, tmp_path, single_string_dex: bytes) -> None:
    path = tmp_path / "classes.dex"
    path.write_bytes(single_string_dex)

    result, _ = asyncio.run(engine.analyze(path))
    assert result.path == str(path.resolve())
    assert len(result.regions) == 4


def test_analyze_rejects_oversized_file(engine: DexMapEngine, config, tmp_path) -> None:
    path = tmp_path / "big.dex"
    path.write_bytes(build_dex(bytes(64)))
    config.dexmap.max_file_size = 100

    with pytest.raises(FileTooLargeError):
        engine.analyze_sync(path)


def test_scan_envelope(engine: DexMapEngine) -> None:
    result, _ = engine.analyze_data(build_dex(endian_tag=0x78563412))
    scan = engine.to_scan_result(result, datetime.now(timezone.utc))

    assert scan.tool_name == "dexmap"
    assert scan.finding_count == 1
    assert scan.metadata["dexmap"]["header"]["endian_tag"] == 0x78563412
    assert scan.end_time is not None
