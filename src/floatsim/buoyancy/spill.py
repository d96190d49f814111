"""
Spill controller - liquid transfer between the pool and the boat's interior.

Transfers are rate-limited: at most fill_speed * boat volume per second moves
in either direction.  Filling starts once the pool's liquid stands above the
boat's rim; spilling starts once a boat carrying liquid has its rim well clear
of the surrounding liquid (spill_height_ratio of the boat's height).  Liquid
beyond the boat's capacity, or in a boat that leaves the scene, goes back to
the pool at once.

Transfers only move volume between the two basins; pool + boat volume is
unchanged by this module.
"""

from __future__ import annotations

import logging
from enum import Enum

from ..constants import BOAT_FILL_SPEED, SPILL_HEIGHT_RATIO, VOLUME_EPSILON
from .step import Stage, StepContext

logger = logging.getLogger(__name__)


class SpillState(Enum):
    EMPTY = "empty"
    FILLING = "filling"
    FULL = "full"
    SPILLING = "spilling"
    HOLDING = "holding"  # carrying liquid, no transfer condition met


class SpillController:
    def __init__(self, fill_speed: float = BOAT_FILL_SPEED,
                 spill_height_ratio: float = SPILL_HEIGHT_RATIO):
        self.fill_speed = fill_speed
        self.spill_height_ratio = spill_height_ratio
        self.state = SpillState.EMPTY
        self.last_transfer = 0.0  # m³ into the boat last step, negative when spilling

    def reset(self) -> None:
        self.state = SpillState.EMPTY
        self.last_transfer = 0.0

    def empty_into_pool(self, pool, boat) -> float:
        """Move everything in the boat to the pool immediately.

        Used when the boat leaves the scene.  Returns the volume moved (m³).
        """
        volume = boat.basin.liquid_volume
        if volume > 0:
            pool.liquid_volume += volume
            boat.basin.liquid_volume = 0.0
            logger.info("Returned %.6g m³ from the hidden boat to the pool", volume)
        boat.basin.liquid_height = boat.basin.step_bottom
        self.reset()
        return volume

    def step(self, context: StepContext) -> SpillState:
        """Run one tick of fill/spill transfer, then re-derive both heights."""
        context.advance(Stage.TRANSFERRED)
        self.last_transfer = 0.0

        boat = context.boat
        pool = context.pool
        if boat is None:
            return self.state
        if not boat.visible:
            self.empty_into_pool(pool, boat)
            pool.compute_liquid_height()
            return self.state

        basin = boat.basin
        capacity = max(basin.get_empty_volume(basin.step_top), 0.0)

        # Hard cap: whatever no longer fits goes straight back
        overflow = basin.liquid_volume - capacity
        if overflow > 0:
            self._move(pool, basin, -overflow)

        rate = self.fill_speed * boat.max_volume_displaced * context.dt
        rim_clearance = boat.step_top - pool.liquid_height
        spilling = (basin.liquid_volume > VOLUME_EPSILON
                    and rim_clearance > self.spill_height_ratio * boat.step_height)

        filled = False
        if spilling:
            self._move(pool, basin, -min(rate, basin.liquid_volume))
        else:
            rim = min(boat.step_top, pool.step_top)
            pool_excess = pool.liquid_volume - pool.get_empty_volume(rim)
            remaining = capacity - basin.liquid_volume
            if pool_excess > 0 and remaining > VOLUME_EPSILON:
                self._move(pool, basin, min(rate, remaining, pool_excess, pool.liquid_volume))
                filled = True

        if self.last_transfer != 0.0:
            pool.compute_liquid_height()
            basin.compute_liquid_height()
            logger.debug("Boat transfer %.6g m³ (boat now %.6g m³)",
                         self.last_transfer, basin.liquid_volume)

        remaining = capacity - basin.liquid_volume
        if basin.liquid_volume <= VOLUME_EPSILON:
            state = SpillState.EMPTY
        elif spilling:
            state = SpillState.SPILLING
        elif remaining <= VOLUME_EPSILON:
            state = SpillState.FULL
        elif filled:
            state = SpillState.FILLING
        else:
            state = SpillState.HOLDING

        if state is not self.state:
            logger.debug("Spill state %s -> %s", self.state.value, state.value)
        self.state = state
        return state

    def _move(self, pool, basin, volume: float) -> None:
        """Move *volume* from the pool into the boat (negative: boat to pool)."""
        pool.liquid_volume -= volume
        basin.liquid_volume += volume
        self.last_transfer += volume
