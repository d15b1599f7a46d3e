"""
DexMap Canvas
==============

The pixel grid the map is painted on, and the painter that applies the
walker's regions to it.

Pixel ``d`` (row-major, ``width`` pixels per row) stands for file byte
``d``.  The grid has one spare row: ``height = ceil(file_size / width) + 1``.
Unpainted pixels stay black.

Alongside the RGB buffer the canvas keeps one category index per pixel so
the painter can report, after all overlaps are resolved, how many pixels
each category ended up owning.
"""

from __future__ import annotations

from typing import Iterable

import numpy as np

from dexmap.core.models import RGB, Region, RegionCategory

_CATEGORIES: list[RegionCategory] = list(RegionCategory)
_CATEGORY_INDEX: dict[RegionCategory, int] = {c: i for i, c in enumerate(_CATEGORIES)}
_UNPAINTED: int = -1


class Canvas:
    """RGB pixel buffer sized for one DEX file.

    Args:
        width: Pixels per row.
        file_size: File length in bytes.
    """

    def __init__(self, width: int, file_size: int) -> None:
        if width <= 0:
            raise ValueError(f"Canvas width must be positive, got {width}")
        self.width = width
        self.height = -(-file_size // width) + 1
        self._pixels = np.zeros((self.pixel_count, 3), dtype=np.uint8)
        self._owners = np.full(self.pixel_count, _UNPAINTED, dtype=np.int16)

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def paint(
        self,
        offset: int,
        length: int,
        colour: RGB,
        category: RegionCategory | None = None,
    ) -> int:
        """Overwrite pixels ``[offset, offset + length)`` with *colour*.

        The range is clipped to the canvas.

        Returns:
            Number of pixels actually written.
        """
        start = max(offset, 0)
        end = min(offset + length, self.pixel_count)
        if start >= end:
            return 0
        self._pixels[start:end] = colour
        if category is not None:
            self._owners[start:end] = _CATEGORY_INDEX[category]
        return end - start

    def pixel(self, index: int) -> RGB:
        r, g, b = (int(v) for v in self._pixels[index])
        return (r, g, b)

    def snapshot(self) -> np.ndarray:
        """Read-only ``(height, width, 3)`` view of the pixel buffer."""
        view = self._pixels.reshape(self.height, self.width, 3).view()
        view.flags.writeable = False
        return view

    def coverage(self) -> dict[RegionCategory, int]:
        """Pixels currently owned by each painted category."""
        owned = self._owners[self._owners != _UNPAINTED]
        counts = np.bincount(owned, minlength=len(_CATEGORIES))
        return {
            category: int(counts[idx])
            for idx, category in enumerate(_CATEGORIES)
            if counts[idx]
        }


class RegionPainter:
    """Apply regions to a :class:`Canvas` in emission order.

    Later regions overwrite earlier ones where they overlap.
    """

    def __init__(self, canvas: Canvas) -> None:
        self._canvas = canvas

    def apply(self, regions: Iterable[Region]) -> dict[RegionCategory, int]:
        """Paint *regions* and return the final per-category pixel counts."""
        for region in regions:
            if region.length == 0:
                continue
            self._canvas.paint(region.start, region.length, region.colour, region.category)
        return self._canvas.coverage()
