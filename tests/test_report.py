from __future__ import annotations

import json

from dexmap.core.engine import DexMapEngine
from dexmap.output.report import DexMapReportGenerator


def test_ppm_layout(engine: DexMapEngine, single_string_dex: bytes, tmp_path) -> None:
    result, canvas = engine.analyze_data(single_string_dex)
    path = DexMapReportGenerator().generate_ppm(canvas, tmp_path / "out" / "x.ppn")

    raw = open(path, "rb").read()
    header = b"P6\n256 2\n255\n"
    assert raw.startswith(header)
    pixels = raw[len(header):]
    assert len(pixels) == 256 * 2 * 3
    assert pixels[0:3] == bytes([255, 0, 0])
    assert pixels[0x75 * 3:0x75 * 3 + 3] == bytes([100, 109, 44])
    assert pixels[-3:] == b"\x00\x00\x00"


def test_json_report(engine: DexMapEngine, single_string_dex: bytes, tmp_path) -> None:
    result, _ = engine.analyze_data(single_string_dex, "classes.dex")
    path = DexMapReportGenerator().generate_json(result, tmp_path / "regions.json")

    report = json.loads(open(path, encoding="utf-8").read())
    assert report["report_type"] == "dexmap_structure_map"
    assert report["path"] == "classes.dex"
    assert report["canvas"] == {"width": 256, "height": 2, "painted_pixels": 120}
    assert report["regions"][-1] == {
        "start": 0x75, "length": 3, "category": "string_data_ordered",
    }
    coverage = {c["category"]: c["pixels"] for c in report["coverage"]}
    assert coverage["header"] == 0x70
