"""
Shape profile evaluator - submerged area and volume as a function of depth.

Every displacing shape maps a submersion ratio r in [0, 1] (0 = liquid at the
shape's bottom, 1 = liquid at its top) to:

- the cross-sectional area cut by the liquid surface, as a fraction of the
  shape's maximum horizontal cross-section;
- the cumulative submerged volume, as a fraction of the shape's volume.

Closed-form shapes are dispatched on MassShape.  Irregular hulls (boat,
bottle) carry sampled tables that are read with evaluate_piecewise_linear().

All functions are pure; ratios outside [0, 1] are clamped.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Sequence


class MassShape(Enum):
    BLOCK = "block"
    VERTICAL_CYLINDER = "vertical_cylinder"
    HORIZONTAL_CYLINDER = "horizontal_cylinder"
    ELLIPSOID = "ellipsoid"
    CONE = "cone"
    INVERTED_CONE = "inverted_cone"
    HULL = "hull"


def clamp_ratio(ratio: float) -> float:
    return min(max(ratio, 0.0), 1.0)


def evaluate_piecewise_linear(values: Sequence[float], ratio: float) -> float:
    """
    Linearly interpolate evenly spaced samples at *ratio*.

    The samples cover [0, 1]; the logical index is ratio * (n - 1) and the
    result blends the two bracketing samples.  No extrapolation.
    """
    n = len(values)
    if n == 1:
        return float(values[0])
    logical_index = clamp_ratio(ratio) * (n - 1)
    if logical_index >= n - 1:
        return float(values[n - 1])
    index = int(math.floor(logical_index))
    fraction = logical_index - index
    a = float(values[index])
    b = float(values[index + 1])
    return a + (b - a) * fraction


def area_fraction(shape: MassShape, ratio: float) -> float:
    """Area cut at *ratio*, relative to the shape's maximum cross-section."""
    r = clamp_ratio(ratio)
    if shape in (MassShape.BLOCK, MassShape.VERTICAL_CYLINDER):
        return 1.0
    if shape is MassShape.HORIZONTAL_CYLINDER:
        return 2.0 * math.sqrt(max(r - r * r, 0.0))
    if shape is MassShape.ELLIPSOID:
        return 4.0 * (r - r * r)
    if shape is MassShape.CONE:
        return (1.0 - r) ** 2
    if shape is MassShape.INVERTED_CONE:
        return r * r
    raise ValueError(f"{shape} has no closed-form profile; use its table")


def volume_fraction(shape: MassShape, ratio: float) -> float:
    """Submerged volume below *ratio*, relative to the shape's volume."""
    r = clamp_ratio(ratio)
    if shape in (MassShape.BLOCK, MassShape.VERTICAL_CYLINDER):
        return r
    if shape is MassShape.HORIZONTAL_CYLINDER:
        # Circular segment area over the full circle area
        chord = 2.0 * math.sqrt(max(r - r * r, 0.0))
        return (chord * (2.0 * r - 1.0) + math.acos(1.0 - 2.0 * r)) / math.pi
    if shape is MassShape.ELLIPSOID:
        return r * r * (3.0 - 2.0 * r)
    if shape is MassShape.CONE:
        return 1.0 - (1.0 - r) ** 3
    if shape is MassShape.INVERTED_CONE:
        return r ** 3
    raise ValueError(f"{shape} has no closed-form profile; use its table")
