"""The pool: a rectangular tank sunk into the ground, top at ground level."""

from __future__ import annotations

import logging

from ..constants import DESIRED_STARTING_POOL_VOLUME, POOL_DEPTH, POOL_HEIGHT, POOL_WIDTH, SLIP
from ..physics.geometry import Bounds3
from .basin import Basin
from .material import FLUIDS, Material

logger = logging.getLogger(__name__)


def default_pool_bounds() -> Bounds3:
    return Bounds3(
        min_x=-POOL_WIDTH / 2, min_y=-POOL_HEIGHT, min_z=-POOL_DEPTH / 2,
        max_x=POOL_WIDTH / 2, max_y=0.0, max_z=POOL_DEPTH / 2,
    )


class Pool(Basin):
    def __init__(self, bounds: Bounds3 | None = None,
                 initial_volume: float = DESIRED_STARTING_POOL_VOLUME,
                 fluid: Material | None = None, slip: float = SLIP):
        self.bounds = bounds or default_pool_bounds()
        super().__init__(initial_volume, name="pool")
        self.fluid = fluid or FLUIDS["water"]
        self.initial_fluid = self.fluid
        self.slip = slip
        self.step_bottom = self.bounds.min_y
        self.step_top = self.bounds.max_y
        self.liquid_volume = min(max(initial_volume, 0.0), self.capacity)
        self.compute_liquid_height()

    @property
    def floor_area(self) -> float:
        return self.bounds.width * self.bounds.depth

    def maximum_area(self, y: float) -> float:
        if y < self.bounds.min_y or y > self.bounds.max_y:
            return 0.0
        return self.floor_area

    def maximum_volume(self, y: float) -> float:
        clamped = min(max(y, self.bounds.min_y), self.bounds.max_y)
        return (clamped - self.bounds.min_y) * self.floor_area

    def is_mass_inside(self, mass) -> bool:
        return mass.step_bottom < self.step_top - self.slip

    def set_fluid(self, fluid: Material) -> None:
        logger.info("Pool fluid set to %s (%.1f kg/m³)", fluid.name, fluid.density)
        self.fluid = fluid

    def clamp_to_capacity(self) -> float:
        """Drop liquid that no longer fits above the displacing bodies.

        Returns the volume removed (m³).
        """
        room = self.get_empty_volume(self.step_top)
        overflow = self.liquid_volume - room
        if overflow > 0:
            self.liquid_volume = max(room, 0.0)
            logger.debug("Pool overflowed by %.6g m³", overflow)
            return overflow
        return 0.0

    def reset(self) -> None:
        self.fluid = self.initial_fluid
        super().reset()
