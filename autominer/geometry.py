"""Plain coordinate value types."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Point:
    """Horizontal position. ``y`` carries the world Z axis."""

    x: int
    y: int


@dataclass(frozen=True)
class Vector:
    x: int
    y: int
    z: int

    def offset(self, dx: int = 0, dy: int = 0, dz: int = 0) -> "Vector":
        return Vector(self.x + dx, self.y + dy, self.z + dz)

    def step(self, direction: Point, n: int) -> "Vector":
        return Vector(self.x + direction.x * n, self.y, self.z + direction.y * n)


@dataclass(frozen=True)
class Rectangle:
    """Axis-aligned rectangle with inclusive bounds."""

    x1: int
    y1: int
    x2: int
    y2: int

    @property
    def width(self) -> int:
        return self.x2 - self.x1 + 1

    @property
    def height(self) -> int:
        return self.y2 - self.y1 + 1

    def contains(self, point: Point) -> bool:
        return self.x1 <= point.x <= self.x2 and self.y1 <= point.y <= self.y2
