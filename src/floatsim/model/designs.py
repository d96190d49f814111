"""
Reference hull designs for the irregular shapes (boat and bottle).

Each design is described once at a reference size and sampled into evenly
spaced tables over the hull's vertical extent (ratio 0 = hull bottom, ratio 1 =
hull top):

    displaced_areas / displaced_volumes   - outer envelope, in m² / m³
    internal_areas / internal_volumes     - hollow interior (boat only)

The boat is designed at one liter of envelope volume; a boat of volume V uses
the same tables scaled by m² and m³ with m = (V / 1 L) ** (1/3).

Coordinate frame: x across, y up, origin at the middle of the hull height.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from ..physics.geometry import polygon_bounds


TABLE_SAMPLES = 41

# Boat cross-section (trapezoid, extruded over BOAT_DEPTH)
BOAT_HEIGHT = 0.1         # m
BOAT_DEPTH = 0.1          # m
BOAT_BOTTOM_WIDTH = 0.08  # m
BOAT_TOP_WIDTH = 0.12     # m
BOAT_WALL = 0.005         # m, side and end walls
BOAT_FLOOR_SAMPLE = 4     # interior floor sits on this table sample

# Bottle profile: (height above bottom, radius) in m, round cross-section
BOTTLE_PROFILE = (
    (0.00, 0.085),
    (0.30, 0.085),
    (0.38, 0.03),
    (0.44, 0.03),
)
BOTTLE_INTERIOR_FRACTION = 0.9
BOTTLE_DENSE_FACTOR = 50


@dataclass(frozen=True)
class HullDesign:
    """Sampled profile tables and outlines of one reference hull."""

    name: str
    outline: np.ndarray
    displaced_areas: np.ndarray
    displaced_volumes: np.ndarray
    internal_areas: np.ndarray
    internal_volumes: np.ndarray
    interior_outline: np.ndarray | None = None

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        return polygon_bounds(self.outline)

    @property
    def interior_bounds(self) -> tuple[float, float, float, float] | None:
        if self.interior_outline is None:
            return None
        return polygon_bounds(self.interior_outline)

    @property
    def envelope_volume(self) -> float:
        return float(self.displaced_volumes[-1])

    @property
    def internal_volume(self) -> float:
        return float(self.internal_volumes[-1])

    @property
    def hull_volume(self) -> float:
        """Volume of the hull material itself (envelope minus interior)."""
        return self.envelope_volume - self.internal_volume


def _linear_width(bottom: float, top: float, height: float):
    def width(h):
        return bottom + (top - bottom) * np.asarray(h, dtype=float) / height
    return width


def build_boat_design() -> HullDesign:
    """One-liter boat: trapezoid hull with a hollow interior."""
    h = np.linspace(0.0, BOAT_HEIGHT, TABLE_SAMPLES)  # above the hull bottom
    outer_width = _linear_width(BOAT_BOTTOM_WIDTH, BOAT_TOP_WIDTH, BOAT_HEIGHT)

    # Outer widths are linear in height, so trapezoids integrate exactly
    displaced_areas = outer_width(h) * BOAT_DEPTH
    displaced_volumes = (outer_width(0.0) + outer_width(h)) / 2 * h * BOAT_DEPTH

    floor = h[BOAT_FLOOR_SAMPLE]
    interior_depth = BOAT_DEPTH - 2 * BOAT_WALL
    interior_width = outer_width(h) - 2 * BOAT_WALL
    above_floor = np.arange(TABLE_SAMPLES) >= BOAT_FLOOR_SAMPLE
    internal_areas = np.where(above_floor, interior_width * interior_depth, 0.0)
    floor_width = float(outer_width(floor)) - 2 * BOAT_WALL
    internal_volumes = np.where(
        above_floor,
        (floor_width + interior_width) / 2 * (h - floor) * interior_depth,
        0.0,
    )

    half = BOAT_HEIGHT / 2
    outline = np.array([
        [-BOAT_BOTTOM_WIDTH / 2, -half],
        [BOAT_BOTTOM_WIDTH / 2, -half],
        [BOAT_TOP_WIDTH / 2, half],
        [-BOAT_TOP_WIDTH / 2, half],
    ])
    top_inner = BOAT_TOP_WIDTH - 2 * BOAT_WALL
    interior_outline = np.array([
        [-floor_width / 2, floor - half],
        [floor_width / 2, floor - half],
        [top_inner / 2, half],
        [-top_inner / 2, half],
    ])

    return HullDesign(
        name="boat",
        outline=outline,
        displaced_areas=displaced_areas,
        displaced_volumes=displaced_volumes,
        internal_areas=internal_areas,
        internal_volumes=internal_volumes,
        interior_outline=interior_outline,
    )


def build_bottle_design() -> HullDesign:
    """Sealed round bottle; its contents are carried as mass, not as a basin."""
    profile = np.array(BOTTLE_PROFILE)
    height = float(profile[-1, 0])

    dense = np.linspace(0.0, height, (TABLE_SAMPLES - 1) * BOTTLE_DENSE_FACTOR + 1)
    radii = np.interp(dense, profile[:, 0], profile[:, 1])
    areas = math.pi * radii ** 2
    step = dense[1] - dense[0]
    volumes = np.concatenate([[0.0], np.cumsum((areas[1:] + areas[:-1]) / 2 * step)])

    samples = slice(None, None, BOTTLE_DENSE_FACTOR)
    half = height / 2
    right = np.column_stack([profile[:, 1], profile[:, 0] - half])
    left = np.column_stack([-profile[::-1, 1], profile[::-1, 0] - half])
    outline = np.vstack([right, left])

    zeros = np.zeros(TABLE_SAMPLES)
    return HullDesign(
        name="bottle",
        outline=outline,
        displaced_areas=areas[samples].copy(),
        displaced_volumes=volumes[samples].copy(),
        internal_areas=zeros,
        internal_volumes=zeros.copy(),
    )


ONE_LITER_BOAT = build_boat_design()
BOTTLE = build_bottle_design()
