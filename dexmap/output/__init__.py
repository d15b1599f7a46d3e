"""
DexMap Output
==============

Canvas painting, PPM/JSON reports and Rich console display.
"""

from dexmap.output.canvas import Canvas, RegionPainter
from dexmap.output.console import DexMapConsoleOutput
from dexmap.output.report import DexMapReportGenerator

__all__ = ["Canvas", "DexMapConsoleOutput", "DexMapReportGenerator", "RegionPainter"]
