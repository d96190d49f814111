"""
Displacing bodies ("masses") and their per-step cached geometry.

A Mass owns an engine body, a material and a volume.  Once per simulation
step the model calls refresh_step(), which caches the body's horizontal
position and vertical extent (StepInfo); every displacement query reads that
cache, so the profile math never touches the engine mid-step.

Usage:
    from floatsim.model.mass import Cuboid

    block = Cuboid.from_volume(engine, 0.01, get_solid("wood"), position=(0.0, 0.1))
    block.refresh_step()
    block.get_displaced_volume(liquid_height)
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..constants import MAX_SHAPE_DIMENSION, MIN_SHAPE_DIMENSION
from ..physics.engine import PhysicsEngine
from ..physics.geometry import scaled_polygon
from .designs import BOTTLE, BOTTLE_INTERIOR_FRACTION, HullDesign
from .material import BOTTLE_BODY, FLUIDS, Material
from .profiles import MassShape, area_fraction, clamp_ratio, evaluate_piecewise_linear, volume_fraction

logger = logging.getLogger(__name__)

CIRCLE_SEGMENTS = 24
MIN_DENSITY = 1e-3  # kg/m³


@dataclass
class StepInfo:
    """Geometry of a body frozen for the current step."""

    x: float
    y: float
    bottom: float
    top: float
    maximum_area: float


def ratio_to_dimension(ratio: float) -> float:
    return MIN_SHAPE_DIMENSION + clamp_ratio(ratio) * (MAX_SHAPE_DIMENSION - MIN_SHAPE_DIMENSION)


def _ellipse(half_width: float, half_height: float, segments: int = CIRCLE_SEGMENTS) -> np.ndarray:
    angles = np.linspace(0.0, 2 * math.pi, segments, endpoint=False)
    return np.column_stack([half_width * np.cos(angles), half_height * np.sin(angles)])


def _rectangle(width: float, height: float) -> np.ndarray:
    return np.array([
        [-width / 2, -height / 2],
        [width / 2, -height / 2],
        [width / 2, height / 2],
        [-width / 2, height / 2],
    ])


class Mass:
    """Base displacing body.

    Subclasses set ``shape`` and implement _outline() and _step_extent();
    hull-shaped subclasses also override the _area_at/_volume_at hooks.
    """

    shape = MassShape.BLOCK

    def __init__(self, engine: PhysicsEngine, material: Material, volume: float,
                 position=(0.0, 0.0), name: Optional[str] = None,
                 can_move: bool = True, visible: bool = True):
        if volume <= 0:
            raise ValueError(f"Mass volume must be positive, got {volume}")
        self.engine = engine
        self.name = name or type(self).__name__.lower()
        self.material = material
        self.volume = float(volume)
        self.contained_mass = 0.0
        self.can_move = can_move
        self.visible = visible

        self.original_position = np.asarray(position, dtype=float).copy()
        self.original_material = material
        self.original_volume = self.volume

        self.body = engine.create_from_vertices(self._outline(), static=not can_move)
        engine.body_set_position(self.body, self.original_position)

        self.containing_basin = None
        self._step: Optional[StepInfo] = None
        self._step_valid = False
        self.clear_readouts()
        self.sync_body_mass()

    # ------------------------------------------------------------------
    # Material, mass and engine state
    # ------------------------------------------------------------------

    @property
    def density(self) -> float:
        return self.material.density

    @property
    def mass(self) -> float:
        """Rigid-body mass: material plus anything carried (kg)."""
        return self.material.density * self.volume + self.contained_mass

    @property
    def displacement_volume(self) -> float:
        """Volume displaced when fully submerged (m³)."""
        return self.volume

    def set_material(self, material: Material) -> None:
        self.material = material
        self.sync_body_mass()

    def set_density(self, density: float) -> None:
        if density < MIN_DENSITY:
            logger.warning("Clamped %s density %.4g to %.4g", self.name, density, MIN_DENSITY)
            density = MIN_DENSITY
        self.set_material(self.material.with_density(density))

    def sync_body_mass(self) -> None:
        self.engine.body_set_mass(self.body, self.mass)

    @property
    def position(self) -> np.ndarray:
        return self.engine.body_get_position(self.body)

    def set_position(self, position) -> None:
        self.engine.body_set_position(self.body, np.asarray(position, dtype=float))

    @property
    def velocity(self) -> np.ndarray:
        return self.engine.body_get_velocity(self.body)

    def _update_outline(self) -> None:
        self.engine.update_from_vertices(self.body, self._outline())
        self.sync_body_mass()

    # ------------------------------------------------------------------
    # Step cache
    # ------------------------------------------------------------------

    def invalidate_step(self) -> None:
        self._step_valid = False

    def refresh_step(self) -> StepInfo:
        """Cache this step's extent from the engine's current transform."""
        x, y = self.position
        bottom, top, maximum_area = self._step_extent(float(y))
        self._step = StepInfo(x=float(x), y=float(y), bottom=bottom, top=top, maximum_area=maximum_area)
        self._step_valid = True
        return self._step

    @property
    def step_info(self) -> StepInfo:
        assert self._step_valid, f"{self.name}: step geometry read before refresh_step()"
        return self._step

    @property
    def step_x(self) -> float:
        return self.step_info.x

    @property
    def step_bottom(self) -> float:
        return self.step_info.bottom

    @property
    def step_top(self) -> float:
        return self.step_info.top

    @property
    def step_height(self) -> float:
        info = self.step_info
        return info.top - info.bottom

    # ------------------------------------------------------------------
    # Displacement
    # ------------------------------------------------------------------

    def get_displaced_area(self, liquid_level: float) -> float:
        """Horizontal cross-section (m²) cut by a liquid surface at *liquid_level*."""
        info = self.step_info
        if liquid_level <= info.bottom or liquid_level >= info.top:
            return 0.0
        return self._area_at((liquid_level - info.bottom) / (info.top - info.bottom))

    def get_displaced_volume(self, liquid_level: float) -> float:
        """Volume (m³) of this body below *liquid_level*."""
        info = self.step_info
        if liquid_level <= info.bottom:
            return 0.0
        if liquid_level >= info.top:
            return self.displacement_volume
        return self._volume_at((liquid_level - info.bottom) / (info.top - info.bottom))

    def _area_at(self, ratio: float) -> float:
        return self.step_info.maximum_area * area_fraction(self.shape, ratio)

    def _volume_at(self, ratio: float) -> float:
        return self.displacement_volume * volume_fraction(self.shape, ratio)

    def is_fully_submerged(self, liquid_level: float, tolerance: float) -> bool:
        return self.step_top < liquid_level - tolerance

    # ------------------------------------------------------------------
    # Readouts and reset
    # ------------------------------------------------------------------

    def clear_readouts(self) -> None:
        self.buoyancy_force = np.zeros(2)
        self.gravity_force = np.zeros(2)
        self.viscous_force = np.zeros(2)
        self.contact_force = np.zeros(2)
        self.submerged_volume = 0.0
        self.percent_submerged = 0.0

    def reset_position(self) -> None:
        self.set_position(self.original_position)
        self.engine.body_set_velocity(self.body, np.zeros(2))

    def reset(self) -> None:
        self.material = self.original_material
        self.volume = self.original_volume
        self.reset_position()
        self.containing_basin = None
        self.clear_readouts()
        self.sync_body_mass()

    def snapshot(self) -> dict:
        x, y = self.position
        return {
            'name': self.name,
            'shape': self.shape.value,
            'material': self.material.name,
            'density_kg_m3': round(self.density, 3),
            'volume_liters': round(self.volume * 1000, 4),
            'mass_kg': round(self.mass, 4),
            'position_m': {'x': round(float(x), 5), 'y': round(float(y), 5)},
            'submerged_volume_liters': round(self.submerged_volume * 1000, 4),
            'percent_submerged': round(self.percent_submerged, 2),
            'buoyancy_force_N': round(float(self.buoyancy_force[1]), 4),
            'gravity_force_N': round(float(self.gravity_force[1]), 4),
            'contact_force_N': round(float(self.contact_force[1]), 4),
        }

    # Hooks
    def _outline(self) -> np.ndarray:
        raise NotImplementedError

    def _step_extent(self, y: float) -> tuple[float, float, float]:
        raise NotImplementedError


# =============================================================================
# CLOSED-FORM SHAPES
# =============================================================================

class Cuboid(Mass):
    shape = MassShape.BLOCK

    def __init__(self, engine, width: float, height: float, depth: float,
                 material: Material, **kwargs):
        self.width = width
        self.height = height
        self.depth = depth
        super().__init__(engine, material, width * height * depth, **kwargs)
        self.original_size = (width, height, depth)

    @classmethod
    def from_volume(cls, engine, volume: float, material: Material, **kwargs) -> "Cuboid":
        """A cube of the given volume."""
        edge = volume ** (1 / 3)
        return cls(engine, edge, edge, edge, material, **kwargs)

    def set_size(self, width: float, height: float, depth: float) -> None:
        self.width, self.height, self.depth = width, height, depth
        self.volume = width * height * depth
        self._update_outline()

    def set_ratios(self, width_ratio: float, height_ratio: float) -> None:
        width = ratio_to_dimension(width_ratio)
        self.set_size(width, ratio_to_dimension(height_ratio), width)

    def reset(self) -> None:
        super().reset()
        self.set_size(*self.original_size)

    def _outline(self):
        return _rectangle(self.width, self.height)

    def _step_extent(self, y):
        return (y - self.height / 2, y + self.height / 2, self.width * self.depth)


class Scale(Cuboid):
    """Static cuboid that reports the weight of whatever rests on it."""

    WIDTH = 0.15
    HEIGHT = 0.06
    DEPTH = 0.2

    def __init__(self, engine, material: Material, position=(0.0, 0.0), **kwargs):
        kwargs.setdefault('can_move', False)
        super().__init__(engine, self.WIDTH, self.HEIGHT, self.DEPTH, material,
                         position=position, **kwargs)
        engine.set_support_surface(self.body, self.HEIGHT / 2, self.WIDTH / 2)
        self.measured_weight = 0.0

    def update_measurement(self) -> float:
        """Read the load pressed onto the scale during the last engine step (N)."""
        self.measured_weight = self.engine.body_get_stacked_weight(self.body)
        return self.measured_weight

    def snapshot(self) -> dict:
        result = super().snapshot()
        result['measured_weight_N'] = round(self.measured_weight, 4)
        return result


class VerticalCylinder(Mass):
    shape = MassShape.VERTICAL_CYLINDER

    def __init__(self, engine, radius: float, height: float, material: Material, **kwargs):
        self.radius = radius
        self.height = height
        super().__init__(engine, material, math.pi * radius ** 2 * height, **kwargs)
        self.original_size = (radius, height)

    def set_size(self, radius: float, height: float) -> None:
        self.radius, self.height = radius, height
        self.volume = math.pi * radius ** 2 * height
        self._update_outline()

    def set_ratios(self, width_ratio: float, height_ratio: float) -> None:
        self.set_size(ratio_to_dimension(width_ratio) / 2, ratio_to_dimension(height_ratio))

    def reset(self) -> None:
        super().reset()
        self.set_size(*self.original_size)

    def _outline(self):
        return _rectangle(2 * self.radius, self.height)

    def _step_extent(self, y):
        return (y - self.height / 2, y + self.height / 2, math.pi * self.radius ** 2)


class HorizontalCylinder(Mass):
    shape = MassShape.HORIZONTAL_CYLINDER

    def __init__(self, engine, radius: float, length: float, material: Material, **kwargs):
        self.radius = radius
        self.length = length
        super().__init__(engine, material, math.pi * radius ** 2 * length, **kwargs)
        self.original_size = (radius, length)

    def set_size(self, radius: float, length: float) -> None:
        self.radius, self.length = radius, length
        self.volume = math.pi * radius ** 2 * length
        self._update_outline()

    def set_ratios(self, width_ratio: float, height_ratio: float) -> None:
        self.set_size(ratio_to_dimension(height_ratio) / 2, ratio_to_dimension(width_ratio))

    def reset(self) -> None:
        super().reset()
        self.set_size(*self.original_size)

    def _outline(self):
        return _ellipse(self.radius, self.radius)

    def _step_extent(self, y):
        return (y - self.radius, y + self.radius, 2 * self.radius * self.length)


class Ellipsoid(Mass):
    shape = MassShape.ELLIPSOID

    def __init__(self, engine, width: float, height: float, depth: float,
                 material: Material, **kwargs):
        self.width = width
        self.height = height
        self.depth = depth
        super().__init__(engine, material, self._volume(width, height, depth), **kwargs)
        self.original_size = (width, height, depth)

    @staticmethod
    def _volume(width, height, depth):
        return 4 / 3 * math.pi * (width / 2) * (height / 2) * (depth / 2)

    def set_size(self, width: float, height: float, depth: float) -> None:
        self.width, self.height, self.depth = width, height, depth
        self.volume = self._volume(width, height, depth)
        self._update_outline()

    def set_ratios(self, width_ratio: float, height_ratio: float) -> None:
        width = ratio_to_dimension(width_ratio)
        self.set_size(width, ratio_to_dimension(height_ratio), width)

    def reset(self) -> None:
        super().reset()
        self.set_size(*self.original_size)

    def _outline(self):
        return _ellipse(self.width / 2, self.height / 2)

    def _step_extent(self, y):
        return (y - self.height / 2, y + self.height / 2,
                math.pi * (self.width / 2) * (self.depth / 2))


class Cone(Mass):
    """Right circular cone; the body origin sits at its centroid."""

    def __init__(self, engine, radius: float, height: float, material: Material,
                 inverted: bool = False, **kwargs):
        self.radius = radius
        self.height = height
        self.inverted = inverted
        super().__init__(engine, material, math.pi * radius ** 2 * height / 3, **kwargs)
        self.original_size = (radius, height)

    @property
    def shape(self):
        return MassShape.INVERTED_CONE if self.inverted else MassShape.CONE

    def set_size(self, radius: float, height: float) -> None:
        self.radius, self.height = radius, height
        self.volume = math.pi * radius ** 2 * height / 3
        self._update_outline()

    def set_ratios(self, width_ratio: float, height_ratio: float) -> None:
        self.set_size(ratio_to_dimension(width_ratio) / 2, ratio_to_dimension(height_ratio))

    def reset(self) -> None:
        super().reset()
        self.set_size(*self.original_size)

    def _bottom_offset(self) -> float:
        return self.height * (0.75 if self.inverted else 0.25)

    def _outline(self):
        bottom = -self._bottom_offset()
        top = bottom + self.height
        if self.inverted:
            return np.array([[0.0, bottom], [self.radius, top], [-self.radius, top]])
        return np.array([[-self.radius, bottom], [self.radius, bottom], [0.0, top]])

    def _step_extent(self, y):
        bottom = y - self._bottom_offset()
        return (bottom, bottom + self.height, math.pi * self.radius ** 2)


# =============================================================================
# HULLS
# =============================================================================

class HullMass(Mass):
    """Irregular shape read from a HullDesign's sampled tables."""

    shape = MassShape.HULL

    def __init__(self, engine, design: HullDesign, material: Material, volume: float, **kwargs):
        self.design = design
        super().__init__(engine, material, volume, **kwargs)

    @property
    def step_multiplier(self) -> float:
        return 1.0

    @property
    def displacement_volume(self) -> float:
        return self.design.envelope_volume * self.step_multiplier ** 3

    def _outline(self):
        return scaled_polygon(self.design.outline, self.step_multiplier)

    def _step_extent(self, y):
        _, min_y, _, max_y = self.design.bounds
        m = self.step_multiplier
        return (y + m * min_y, y + m * max_y, float(np.max(self.design.displaced_areas)) * m * m)

    def _area_at(self, ratio):
        return evaluate_piecewise_linear(self.design.displaced_areas, ratio) * self.step_multiplier ** 2

    def _volume_at(self, ratio):
        return evaluate_piecewise_linear(self.design.displaced_volumes, ratio) * self.step_multiplier ** 3


class Bottle(HullMass):
    """Sealed bottle whose interior holds a user-chosen material."""

    def __init__(self, engine, interior_material: Optional[Material] = None,
                 interior_volume: float = 0.0, material: Material = BOTTLE_BODY, **kwargs):
        shell = BOTTLE.envelope_volume * (1 - BOTTLE_INTERIOR_FRACTION)
        self.interior_material = interior_material or FLUIDS["water"]
        self.interior_volume = 0.0
        super().__init__(engine, BOTTLE, material, shell, **kwargs)
        self.original_interior = (self.interior_material, interior_volume)
        self.set_interior_volume(interior_volume)

    @property
    def max_interior_volume(self) -> float:
        return BOTTLE.envelope_volume * BOTTLE_INTERIOR_FRACTION

    def set_interior_volume(self, volume: float) -> None:
        clamped = min(max(volume, 0.0), self.max_interior_volume)
        if clamped != volume:
            logger.warning("Clamped bottle interior volume %.4g to %.4g m³", volume, clamped)
        self.interior_volume = clamped
        self._update_contents()

    def set_interior_material(self, material: Material) -> None:
        self.interior_material = material
        self._update_contents()

    def _update_contents(self) -> None:
        air = FLUIDS["air"].density * (self.max_interior_volume - self.interior_volume)
        self.contained_mass = self.interior_material.density * self.interior_volume + air
        self.sync_body_mass()

    def reset(self) -> None:
        super().reset()
        self.interior_material, volume = self.original_interior
        self.set_interior_volume(volume)
