"""
DexMap Report Generator
========================

Writes the painted canvas as a binary PPM image and, optionally, a JSON
region report describing how the image was built.

The image is a plain ``P6`` netpbm file (``P6\\n<w> <h>\\n255\\n`` followed by
raw RGB triplets, row-major).  droidcolors names these files ``.ppn``; the
extension is configurable.

The JSON report is meant for downstream tooling that wants to work with
the structure map directly instead of re-deriving it from pixels.

References:
    - Netpbm PPM format. https://netpbm.sourceforge.net/doc/ppm.html
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from PIL import Image

from dexmap.core.models import CATEGORY_COLOURS, DexMapResult
from dexmap.output.canvas import Canvas


class DexMapReportGenerator:
    """Generate the PPM image and JSON region report.

    Usage::

        generator = DexMapReportGenerator()
        generator.generate_ppm(canvas, "classes.dex.ppn")
        generator.generate_json(result, "classes.dex.json")
    """

    def generate_ppm(self, canvas: Canvas, output_path: str | Path) -> str:
        """Write *canvas* as a binary (P6) PPM, whatever the file extension.

        Returns:
            The absolute path of the written image.
        """
        image = Image.fromarray(canvas.snapshot())

        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        image.save(path, format="PPM")

        return str(path.resolve())

    def generate_json(self, result: DexMapResult, output_path: str | Path) -> str:
        """Write a structured JSON report of the map.

        Args:
            result: The DexMapResult to report.
            output_path: Filesystem path for the output JSON file.

        Returns:
            The absolute path of the generated report.
        """
        report_data: dict[str, Any] = {
            "report_type": "dexmap_structure_map",
            "version": "1.0.0",
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "path": result.path,
            "header": result.header.model_dump(mode="json"),
            "header_warnings": [w.value for w in result.header_warnings],
            "canvas": {
                "width": result.width,
                "height": result.height,
                "painted_pixels": result.painted_pixels,
            },
            "coverage": [
                {
                    "category": category.value,
                    "colour": list(CATEGORY_COLOURS[category]),
                    "pixels": pixels,
                }
                for category, pixels in result.coverage.items()
            ],
            "regions": [
                {
                    "start": r.start,
                    "length": r.length,
                    "category": r.category.value,
                }
                for r in result.regions
            ],
            "findings": [f.model_dump(mode="json") for f in result.findings],
        }

        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            json.dump(report_data, f, indent=2, ensure_ascii=False, default=str)

        return str(path.resolve())
