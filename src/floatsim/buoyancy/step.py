"""
Per-tick step context.

One StepContext is built at the start of every tick, after the engine has
moved the bodies.  It refreshes every visible body's step cache and then
travels through the pipeline:

    begin_step -> assign_basins -> update_fluid_for_basins
               -> SpillController.step -> apply_fluid_forces

Each stage calls advance() with its own Stage value; running a stage out of
order trips an assertion instead of silently using last tick's geometry.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional

from ..model.boat import Boat
from ..model.mass import Mass
from ..model.pool import Pool


class Stage(IntEnum):
    REFRESHED = 0
    CONTAINED = 1
    SOLVED = 2
    TRANSFERRED = 3
    FORCED = 4


@dataclass
class StepContext:
    dt: float
    gravity: float
    pool: Pool
    masses: List[Mass] = field(default_factory=list)
    boat: Optional[Boat] = None
    stage: Stage = Stage.REFRESHED

    @property
    def boat_active(self) -> bool:
        return self.boat is not None and self.boat.visible

    @property
    def basins(self) -> list:
        """Basins whose liquid height is solved this step."""
        if self.boat_active:
            return [self.pool, self.boat.basin]
        return [self.pool]

    @property
    def assignable_basins(self) -> list:
        """Basins in containment precedence order (innermost first)."""
        if self.boat_active:
            return [self.boat.basin, self.pool]
        return [self.pool]

    @property
    def fluid_density(self) -> float:
        return self.pool.fluid.density

    def advance(self, stage: Stage) -> None:
        assert stage == self.stage + 1, (
            f"step stage {stage.name} run after {self.stage.name}")
        self.stage = stage


def begin_step(dt: float, gravity: float, pool: Pool, masses: List[Mass],
               boat: Optional[Boat] = None) -> StepContext:
    """Invalidate and refresh every body's step cache for a new tick."""
    for mass in masses:
        mass.invalidate_step()
        if not mass.visible:
            mass.containing_basin = None

    visible = [mass for mass in masses if mass.visible]
    for mass in visible:
        mass.refresh_step()

    return StepContext(dt=dt, gravity=gravity, pool=pool, masses=visible, boat=boat)
