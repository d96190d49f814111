"""
Simulation models - own the pool, the bodies and the engine, and run ticks.

BuoyancyModel.step(dt) runs one tick in fixed order:

    1. engine step (bodies move under last tick's forces)
    2. step caches refreshed           (buoyancy.step.begin_step)
    3. containment                     (buoyancy.solve.assign_basins)
    4. liquid heights                  (buoyancy.solve.update_fluid_for_basins)
    5. pool <-> boat transfer          (buoyancy.spill.SpillController)
    6. forces for the next tick        (buoyancy.forces.apply_fluid_forces)

ApplicationsModel adds the two scenes of the applications screen (a bottle on
a scale, or a boat with a block) and switching between them.

Usage:
    from floatsim.simulation import BuoyancyModel
    from floatsim.model.mass import Cuboid
    from floatsim.model.material import get_solid

    model = BuoyancyModel()
    block = model.add_mass(Cuboid.from_volume(model.engine, 0.01, get_solid("wood")))
    for _ in range(600):
        model.step(1 / 60)
    print(block.percent_submerged)
"""

from __future__ import annotations

import logging
from typing import List, Optional

from .buoyancy.forces import apply_fluid_forces
from .buoyancy.solve import assign_basins, update_fluid_for_basins
from .buoyancy.spill import SpillController
from .buoyancy.step import StepContext, begin_step
from .constants import (BOAT_DEFAULT_VOLUME, BOAT_FILL_SPEED, DESIRED_STARTING_POOL_VOLUME,
                        MAX_VELOCITY, ONE_LITER, SPILL_HEIGHT_RATIO, TOLERANCE)
from .model.boat import Boat
from .model.designs import ONE_LITER_BOAT
from .model.mass import Bottle, Cuboid, Mass, Scale
from .model.material import GRAVITIES, SOLIDS, Gravity, Material
from .model.pool import Pool
from .physics.engine import PhysicsEngine, create_engine
from .physics.geometry import Bounds3

logger = logging.getLogger(__name__)


class BuoyancyModel:
    def __init__(self, pool_volume: float = DESIRED_STARTING_POOL_VOLUME,
                 fluid: Optional[Material] = None, gravity: Optional[Gravity] = None,
                 engine: Optional[PhysicsEngine] = None, pool_bounds: Optional[Bounds3] = None,
                 fill_speed: float = BOAT_FILL_SPEED,
                 spill_height_ratio: float = SPILL_HEIGHT_RATIO,
                 tolerance: float = TOLERANCE, max_velocity: float = MAX_VELOCITY):
        self.pool = Pool(pool_bounds, pool_volume, fluid)
        self.engine = engine if engine is not None else create_engine(self.pool.bounds)
        self.gravity = GRAVITIES["earth"]
        if gravity is not None:
            self.set_gravity(gravity)
        self.initial_gravity = self.gravity
        self.masses: List[Mass] = []
        self.boat: Optional[Boat] = None
        self.spill_controller = SpillController(fill_speed, spill_height_ratio)
        self.tolerance = tolerance
        self.max_velocity = max_velocity
        self.time = 0.0
        self.step_count = 0

    # ------------------------------------------------------------------
    # Bodies
    # ------------------------------------------------------------------

    def add_mass(self, mass: Mass) -> Mass:
        if isinstance(mass, Boat):
            if self.boat is not None:
                raise ValueError(f"Model already holds a boat ({self.boat.name})")
            self.boat = mass
        self.masses.append(mass)
        if mass.visible:
            self.engine.add_body(mass.body)
        self.refresh_fluid()
        return mass

    def remove_mass(self, mass: Mass) -> None:
        if mass is self.boat:
            self.spill_controller.empty_into_pool(self.pool, mass)
            self.boat = None
        self.engine.remove_body(mass.body)
        self.masses.remove(mass)
        mass.containing_basin = None
        self.refresh_fluid()

    def set_mass_visible(self, mass: Mass, visible: bool) -> None:
        """Show or hide a body; a hidden body neither moves nor displaces."""
        if mass.visible == visible:
            return
        mass.visible = visible
        if visible:
            self.engine.add_body(mass.body)
        else:
            self.engine.remove_body(mass.body)
            if mass is self.boat:
                self.spill_controller.empty_into_pool(self.pool, mass)
        self.refresh_fluid()

    @property
    def visible_masses(self) -> List[Mass]:
        return [mass for mass in self.masses if mass.visible]

    # ------------------------------------------------------------------
    # User edits
    # ------------------------------------------------------------------

    def set_fluid(self, fluid: Material) -> None:
        self.pool.set_fluid(fluid)

    def set_gravity(self, gravity: Gravity) -> None:
        if gravity.value < 0:
            logger.warning("Clamped gravity %.4g to 0", gravity.value)
            gravity = Gravity(gravity.name, 0.0)
        logger.info("Gravity set to %s (%.2f m/s²)", gravity.name, gravity.value)
        self.gravity = gravity

    def set_pool_volume(self, volume: float) -> None:
        self.pool.set_liquid_volume(volume)

    # ------------------------------------------------------------------
    # Stepping
    # ------------------------------------------------------------------

    def _begin(self, dt: float) -> StepContext:
        return begin_step(dt, self.gravity.value, self.pool, self.masses, self.boat)

    def refresh_fluid(self) -> StepContext:
        """Re-derive containment and heights without moving anything."""
        context = self._begin(0.0)
        assign_basins(context)
        update_fluid_for_basins(context)
        return context

    def step(self, dt: float) -> Optional[StepContext]:
        """Advance the simulation by *dt* seconds."""
        if dt <= 0:
            return None

        self.engine.step(dt)
        self.time += dt
        self.step_count += 1

        for mass in self.visible_masses:
            if isinstance(mass, Scale):
                mass.update_measurement()

        context = self._begin(dt)
        assign_basins(context)
        update_fluid_for_basins(context)
        self.spill_controller.step(context)
        apply_fluid_forces(context, tolerance=self.tolerance, max_velocity=self.max_velocity)
        return context

    def run(self, steps: int, dt: float) -> None:
        for _ in range(steps):
            self.step(dt)

    # ------------------------------------------------------------------
    # Reset and readouts
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Restore volumes, bodies and controller state in one go."""
        for mass in self.masses:
            mass.reset()
        self.pool.reset()
        self.spill_controller.reset()
        self.gravity = self.initial_gravity
        self.time = 0.0
        self.step_count = 0
        self.refresh_fluid()
        logger.info("Simulation reset")

    def total_liquid_volume(self) -> float:
        total = self.pool.liquid_volume
        if self.boat is not None:
            total += self.boat.basin.liquid_volume
        return total

    def snapshot(self) -> dict:
        basins = {
            self.pool.name: {
                'liquid_volume_liters': round(self.pool.liquid_volume * 1000, 4),
                'liquid_height_m': round(self.pool.liquid_height, 6),
                'fluid': self.pool.fluid.name,
            },
        }
        if self.boat is not None:
            basin = self.boat.basin
            basins[basin.name] = {
                'liquid_volume_liters': round(basin.liquid_volume * 1000, 4),
                'liquid_height_m': round(basin.liquid_height, 6),
                'spill_state': self.spill_controller.state.value,
            }
        return {
            'time_s': round(self.time, 4),
            'steps': self.step_count,
            'gravity_m_s2': self.gravity.value,
            'basins': basins,
            'masses': [mass.snapshot() for mass in self.visible_masses],
        }


# =============================================================================
# APPLICATIONS SCENES
# =============================================================================

SCENES = ("bottle", "boat")


class ApplicationsModel(BuoyancyModel):
    """Bottle-or-boat scenes sharing one pool."""

    BLOCK_VOLUME = 0.005  # m³

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        pool = self.pool.bounds
        engine = self.engine

        self.bottle = self.add_mass(Bottle(engine, position=(0.0, 0.3)))
        self.scale = self.add_mass(Scale(engine, SOLIDS["pvc"], name="pool scale",
                                         position=(pool.max_x - 0.15, pool.min_y + Scale.HEIGHT / 2)))

        # Boat starts with its keel at the liquid surface
        keel = ONE_LITER_BOAT.bounds[1] * (BOAT_DEFAULT_VOLUME / ONE_LITER) ** (1 / 3)
        self.add_mass(Boat(engine, visible=False,
                           position=(0.0, self.pool.liquid_height - keel)))

        edge = self.BLOCK_VOLUME ** (1 / 3)
        self.block = self.add_mass(Cuboid.from_volume(
            engine, self.BLOCK_VOLUME, SOLIDS["wood"], name="block", visible=False,
            position=(pool.min_x - 0.2, edge / 2)))

        self.scene = "bottle"

    def set_scene(self, scene: str) -> None:
        if scene not in SCENES:
            raise ValueError(f"Unknown scene '{scene}'. Known: {', '.join(SCENES)}")
        boat_scene = scene == "boat"
        self.set_mass_visible(self.bottle, not boat_scene)
        self.set_mass_visible(self.scale, not boat_scene)
        self.set_mass_visible(self.boat, boat_scene)
        self.set_mass_visible(self.block, boat_scene)
        self.scene = scene
        self.refresh_fluid()
        logger.info("Scene switched to %s", scene)

    def reset_boat_scene(self) -> None:
        """Return the boat scene to its start positions, keeping size and material edits."""
        self.boat.basin.reset()
        self.boat.update_contained_mass(self.pool.fluid.density)
        self.boat.reset_position()
        self.boat.vertical_velocity = 0.0
        self.boat.vertical_acceleration = 0.0
        self.block.reset_position()
        self.pool.reset()
        self.spill_controller.reset()
        self.refresh_fluid()
        logger.info("Boat scene reset")

    def reset(self) -> None:
        super().reset()
        self.set_scene("bottle")

