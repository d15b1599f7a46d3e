from __future__ import annotations

import pytest

from dexmap.core.models import CATEGORY_COLOURS, Region, RegionCategory
from dexmap.output.canvas import Canvas, RegionPainter


@pytest.mark.parametrize(
    "file_size, height",
    [(0, 1), (1, 2), (256, 2), (257, 3), (0x78, 2)],
)
def test_height_has_one_spare_row(file_size: int, height: int) -> None:
    canvas = Canvas(256, file_size)
    assert canvas.height == height
    assert canvas.pixel_count == 256 * height


def test_width_must_be_positive() -> None:
    with pytest.raises(ValueError):
        Canvas(0, 10)


def test_canvas_starts_black() -> None:
    canvas = Canvas(4, 8)
    assert canvas.pixel(0) == (0, 0, 0)
    assert canvas.coverage() == {}


def test_paint_clips_to_canvas() -> None:
    canvas = Canvas(4, 4)  # 2 rows, 8 pixels
    written = canvas.paint(6, 10, (1, 2, 3))
    assert written == 2
    assert canvas.pixel(7) == (1, 2, 3)
    assert canvas.paint(100, 4, (1, 2, 3)) == 0


def test_overlap_last_write_wins() -> None:
    canvas = Canvas(8, 16)
    regions = [
        Region.of(0, 8, RegionCategory.HEADER),
        Region.of(4, 4, RegionCategory.LINK),
        Region.of(2, 0, RegionCategory.MAP_LIST),
    ]
    coverage = RegionPainter(canvas).apply(regions)

    assert canvas.pixel(3) == CATEGORY_COLOURS[RegionCategory.HEADER]
    assert canvas.pixel(4) == CATEGORY_COLOURS[RegionCategory.LINK]
    assert coverage == {RegionCategory.HEADER: 4, RegionCategory.LINK: 4}


def test_snapshot_is_read_only_grid() -> None:
    canvas = Canvas(4, 4)
    canvas.paint(0, 1, (9, 9, 9))
    grid = canvas.snapshot()

    assert grid.shape == (2, 4, 3)
    assert tuple(grid[0, 0]) == (9, 9, 9)
    with pytest.raises(ValueError):
        grid[0, 0] = (1, 1, 1)
