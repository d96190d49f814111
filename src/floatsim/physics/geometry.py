"""
Planar geometry helpers for floatsim.

Polygons are (N, 2) arrays of (x, y) vertices in counter-clockwise or
clockwise order; nothing here depends on the winding.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class Bounds3:
    """Axis-aligned box, (min_x, min_y, min_z) to (max_x, max_y, max_z) in m."""

    min_x: float
    min_y: float
    min_z: float
    max_x: float
    max_y: float
    max_z: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def depth(self) -> float:
        return self.max_z - self.min_z

    @property
    def volume(self) -> float:
        return self.width * self.height * self.depth

    def contains_x(self, x: float) -> bool:
        return self.min_x <= x <= self.max_x


def as_polygon(vertices) -> np.ndarray:
    """Return *vertices* as a float (N, 2) array."""
    polygon = np.asarray(vertices, dtype=float)
    if polygon.ndim != 2 or polygon.shape[1] != 2:
        raise ValueError(f"Expected (N, 2) vertices, got shape {polygon.shape}")
    return polygon


def polygon_bounds(vertices) -> tuple[float, float, float, float]:
    """(min_x, min_y, max_x, max_y) of a polygon."""
    polygon = as_polygon(vertices)
    min_x, min_y = polygon.min(axis=0)
    max_x, max_y = polygon.max(axis=0)
    return (float(min_x), float(min_y), float(max_x), float(max_y))


def polygon_area(vertices) -> float:
    """Unsigned area via the shoelace formula."""
    polygon = as_polygon(vertices)
    x = polygon[:, 0]
    y = polygon[:, 1]
    return float(0.5 * abs(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1))))


def bounds_contain_point(bounds: tuple[float, float, float, float], x: float, y: float) -> bool:
    min_x, min_y, max_x, max_y = bounds
    return min_x <= x <= max_x and min_y <= y <= max_y


def polygon_contains_point(vertices, x: float, y: float) -> bool:
    """
    Even-odd ray casting test.

    Points exactly on an edge may land on either side; callers that care
    about the boundary test a slightly shifted point as well.
    """
    polygon = as_polygon(vertices)
    inside = False
    n = len(polygon)
    j = n - 1
    for i in range(n):
        xi, yi = polygon[i]
        xj, yj = polygon[j]
        if (yi > y) != (yj > y):
            x_cross = (xj - xi) * (y - yi) / (yj - yi) + xi
            if x < x_cross:
                inside = not inside
        j = i
    return inside


def scaled_polygon(vertices, multiplier: float) -> np.ndarray:
    return as_polygon(vertices) * multiplier
