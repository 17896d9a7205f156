"""Trim decoded chunk columns to a fully generated rectangle."""

from __future__ import annotations

from typing import Iterable, Set

from .chunks import SECTION_SIZE
from .geometry import Point, Rectangle


BOUNDS_MARGIN = 5


def find_bounding_box(columns: Iterable[Point], margin: int = BOUNDS_MARGIN) -> Rectangle:
    """Find a horizontal area of chunk columns that is fully generated.

    Z is trimmed by ``margin`` columns at both ends. Every gap found in the
    remaining rows then pulls in the X edge on its side of the midpoint. This
    is a heuristic trim, not the largest empty-free rectangle.
    """
    points: Set[Point] = set(columns)
    if not points:
        raise ValueError("no chunk columns to bound")

    min_x = min(p.x for p in points)
    max_x = max(p.x for p in points)
    min_z = min(p.y for p in points) + margin
    max_z = max(p.y for p in points) - margin
    if min_z > max_z:
        raise ValueError(f"world is too small to trim {margin} columns off each Z edge")

    valid_min_x = min_x
    valid_max_x = max_x
    mid_x = (min_x + max_x) // 2

    for z in range(min_z, max_z + 1):
        for x in range(min_x, max_x + 1):
            if Point(x, z) in points:
                continue
            if x > mid_x:
                valid_max_x = min(valid_max_x, x - 1)
            else:
                valid_min_x = max(valid_min_x, x + 1)

    if valid_min_x > valid_max_x:
        raise ValueError("no gap-free column range found")
    return Rectangle(valid_min_x, min_z, valid_max_x, max_z)


def chunk_box_to_block_box(box: Rectangle) -> Rectangle:
    return Rectangle(
        box.x1 * SECTION_SIZE,
        box.y1 * SECTION_SIZE,
        box.x2 * SECTION_SIZE + SECTION_SIZE - 1,
        box.y2 * SECTION_SIZE + SECTION_SIZE - 1,
    )
