"""
The boat: a displacing hull that also carries a basin in its hollow interior.

All boat geometry is defined once at one liter (see designs.ONE_LITER_BOAT)
and rescaled by the step multiplier m = (V / 1 L) ** (1/3): lengths by m,
areas by m², volumes by m³.

Containment in the interior basin works in that one-liter frame: a point is
translated into the boat's local frame, divided by m and tested against the
interior outline (bounds first, then point-in-polygon).
"""

from __future__ import annotations

import logging

from ..constants import (BOAT_DEFAULT_VOLUME, BOAT_MAX_VOLUME, BOAT_MIN_VOLUME, ONE_LITER, SLIP)
from ..physics.geometry import bounds_contain_point, polygon_contains_point
from .basin import Basin
from .designs import ONE_LITER_BOAT
from .mass import HullMass
from .material import BOAT_BODY, Material
from .profiles import evaluate_piecewise_linear

logger = logging.getLogger(__name__)


class BoatBasin(Basin):
    """Liquid held inside a boat's hull."""

    def __init__(self, boat: "Boat", slip: float = SLIP):
        super().__init__(0.0, name="boat basin")
        self.boat = boat
        self.slip = slip

    @property
    def step_multiplier(self) -> float:
        return self.boat.step_multiplier

    def refresh_step(self) -> None:
        """Follow the boat; called from Boat.refresh_step()."""
        info = self.boat.step_info
        _, floor_y, _, _ = self.boat.design.interior_bounds
        self.step_bottom = info.y + floor_y * self.step_multiplier
        self.step_top = info.top

    def _ratio(self, y: float) -> float:
        info = self.boat.step_info
        return (y - info.bottom) / (info.top - info.bottom)

    def maximum_area(self, y: float) -> float:
        if y < self.step_bottom or y > self.step_top:
            return 0.0
        m = self.step_multiplier
        return evaluate_piecewise_linear(self.boat.design.internal_areas, self._ratio(y)) * m * m

    def maximum_volume(self, y: float) -> float:
        m = self.step_multiplier
        if y <= self.step_bottom:
            return 0.0
        if y >= self.step_top:
            return self.boat.design.internal_volume * m ** 3
        return evaluate_piecewise_linear(self.boat.design.internal_volumes, self._ratio(y)) * m ** 3

    def contains_point(self, x: float, y: float) -> bool:
        """Whether (x, y) lies in the boat's interior.

        The point is also tested shifted up by the slip tolerance, so a point
        resting on (or sunk slightly into) the interior floor still counts.
        """
        info = self.boat.step_info
        m = self.step_multiplier
        local_x = (x - info.x) / m
        for offset in (0.0, self.slip):
            local_y = (y + offset - info.y) / m
            if self._contains_local(local_x, local_y):
                return True
        return False

    def _contains_local(self, x: float, y: float) -> bool:
        design = self.boat.design
        if not bounds_contain_point(design.interior_bounds, x, y):
            return False
        return polygon_contains_point(design.interior_outline, x, y)

    def is_mass_inside(self, mass) -> bool:
        if mass is self.boat:
            return False
        if mass.step_bottom >= self.step_top or mass.step_top <= self.step_bottom - self.slip:
            return False
        x = mass.step_x
        middle = (mass.step_bottom + mass.step_top) / 2
        return self.contains_point(x, mass.step_bottom) or self.contains_point(x, middle)


class Boat(HullMass):
    """Hull of adjustable size with an interior basin."""

    def __init__(self, engine, max_volume_displaced: float = BOAT_DEFAULT_VOLUME,
                 material: Material = BOAT_BODY, slip: float = SLIP, **kwargs):
        self.max_volume_displaced = self._clamp_volume(max_volume_displaced)
        kwargs.setdefault('name', 'boat')
        super().__init__(engine, ONE_LITER_BOAT, material,
                         ONE_LITER_BOAT.hull_volume * self.step_multiplier ** 3, **kwargs)
        self.original_max_volume = self.max_volume_displaced
        self.basin = BoatBasin(self, slip=slip)
        self.vertical_velocity = 0.0
        self.vertical_acceleration = 0.0
        self._update_support()

    @staticmethod
    def _clamp_volume(volume: float) -> float:
        clamped = min(max(volume, BOAT_MIN_VOLUME), BOAT_MAX_VOLUME)
        if clamped != volume:
            logger.warning("Clamped boat volume %.4g to %.4g m³", volume, clamped)
        return clamped

    @property
    def step_multiplier(self) -> float:
        return (self.max_volume_displaced / ONE_LITER) ** (1 / 3)

    @property
    def displacement_volume(self) -> float:
        """Hull plus interior, i.e. the envelope (m³)."""
        return self.max_volume_displaced

    @property
    def internal_volume(self) -> float:
        return self.design.internal_volume * self.step_multiplier ** 3

    def set_max_volume_displaced(self, volume: float) -> None:
        """Resize the boat; the hull material volume scales with it."""
        self.max_volume_displaced = self._clamp_volume(volume)
        self.volume = self.design.hull_volume * self.step_multiplier ** 3
        self._update_outline()
        self._update_support()

    def _update_support(self) -> None:
        _, floor_y, max_x, _ = self.design.interior_bounds
        m = self.step_multiplier
        self.engine.set_support_surface(self.body, floor_y * m, max_x * m)

    def refresh_step(self):
        info = super().refresh_step()
        self.basin.refresh_step()
        return info

    def update_contained_mass(self, fluid_density: float) -> None:
        self.contained_mass = fluid_density * self.basin.liquid_volume
        self.sync_body_mass()

    def update_vertical_motion(self, dt: float) -> None:
        velocity = float(self.velocity[1])
        self.vertical_acceleration = (velocity - self.vertical_velocity) / dt if dt > 0 else 0.0
        self.vertical_velocity = velocity

    def effective_submerged(self, submerged_volume: float, liquid_level: float,
                            tolerance: float) -> tuple[float, float]:
        """(submerged volume, mass) the boat presents to the liquid.

        Fully submerged, the carried liquid is part of the surrounding liquid:
        only the hull displaces and only the hull weighs.
        """
        if self.is_fully_submerged(liquid_level, tolerance):
            return self.volume, self.material.density * self.volume
        return submerged_volume, self.mass

    def reset(self) -> None:
        self.max_volume_displaced = self.original_max_volume
        super().reset()
        self.volume = self.design.hull_volume * self.step_multiplier ** 3
        self._update_outline()
        self._update_support()
        self.contained_mass = 0.0
        self.vertical_velocity = 0.0
        self.vertical_acceleration = 0.0
        self.basin.reset()
        self.sync_body_mass()

    def snapshot(self) -> dict:
        result = super().snapshot()
        result['max_volume_displaced_liters'] = round(self.max_volume_displaced * 1000, 4)
        result['basin_liquid_volume_liters'] = round(self.basin.liquid_volume * 1000, 4)
        result['basin_capacity_liters'] = round(self.internal_volume * 1000, 4)
        return result
