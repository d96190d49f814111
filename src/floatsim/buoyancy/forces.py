"""
Buoyancy / force integrator.

For every visible body, using the liquid heights that the solver and the
spill controller settled this tick:

    buoyancy = submerged volume * fluid density * g        (upward)
    gravity  = -mass * g
    viscous  = -velocity * damping, never strong enough to reverse velocity

The forces are accumulated on the engine bodies and act during the next
engine step.  Readouts (forces, percent submerged) are stored on the masses.
"""

import logging

import numpy as np

from ..constants import (MAX_VELOCITY, TOLERANCE, VISCOSITY_EXPONENT, VISCOSITY_FORCE_SCALE,
                         VISCOSITY_MASS_CUTOFF, VISCOSITY_MULTIPLIER, VISCOSITY_REFERENCE,
                         VISCOSITY_SUBMERGED_RATIO)
from ..model.boat import Boat
from .step import Stage, StepContext

logger = logging.getLogger(__name__)


def damping_coefficient(viscosity: float, mass_value: float, submerged_ratio: float) -> float:
    """Viscous drag coefficient (N·s/m) for a partly submerged body.

    The fluid viscosity is compressed towards VISCOSITY_REFERENCE so that
    thin and thick fluids both give a visible, stable damping.
    """
    ratio = (1 - VISCOSITY_SUBMERGED_RATIO) + VISCOSITY_SUBMERGED_RATIO * submerged_ratio
    softened = VISCOSITY_REFERENCE * (viscosity / VISCOSITY_REFERENCE) ** VISCOSITY_EXPONENT
    return (softened * max(VISCOSITY_MASS_CUTOFF, mass_value) * ratio
            * VISCOSITY_FORCE_SCALE * VISCOSITY_MULTIPLIER)


def clamp_velocity(velocity: np.ndarray, max_velocity: float = MAX_VELOCITY) -> np.ndarray:
    speed = float(np.linalg.norm(velocity))
    if speed > max_velocity:
        return velocity * (max_velocity / speed)
    return velocity


def percent_submerged(mass, submerged_volume: float, liquid_level,
                      tolerance: float = TOLERANCE) -> float:
    """Displayed submerged fraction, 0..100.

    A body whose top is below the surface by more than *tolerance* reads
    exactly 100.
    """
    if liquid_level is not None and mass.is_fully_submerged(liquid_level, tolerance):
        return 100.0
    total = mass.displacement_volume
    if total <= 0:
        return 0.0
    return min(max(100.0 * submerged_volume / total, 0.0), 100.0)


def apply_fluid_forces(context: StepContext, tolerance: float = TOLERANCE,
                       max_velocity: float = MAX_VELOCITY) -> dict:
    """
    Compute and apply buoyancy, viscous and gravity forces for one tick.

    Returns:
        dict mapping body name to its vertical forces (N) and percent submerged
    """
    context.advance(Stage.FORCED)

    g = context.gravity
    rho = context.fluid_density
    viscosity = context.pool.fluid.viscosity
    dt = context.dt

    boat = context.boat if context.boat_active else None
    if boat is not None:
        boat.update_vertical_motion(dt)
        boat.update_contained_mass(rho)

    results = {}
    for mass in context.masses:
        engine = mass.engine
        velocity = clamp_velocity(mass.velocity, max_velocity)
        engine.body_set_velocity(mass.body, velocity)

        basin = mass.containing_basin
        level = None
        submerged = 0.0
        if basin is not None:
            level = basin.liquid_height
            # Cannot displace more liquid than the basin holds
            submerged = min(mass.get_displaced_volume(level), basin.liquid_volume)

        displayed = percent_submerged(mass, submerged, level, tolerance)

        mass_value = mass.mass
        if isinstance(mass, Boat) and level is not None:
            submerged, mass_value = mass.effective_submerged(submerged, level, tolerance)

        buoyancy = np.zeros(2)
        viscous = np.zeros(2)
        if submerged > 0:
            acceleration = g
            if boat is not None and basin is boat.basin:
                acceleration = min(max(g + boat.vertical_acceleration, 0.0), 2 * g)
            buoyancy = np.array([0.0, submerged * rho * acceleration])

            coefficient = damping_coefficient(viscosity, mass_value,
                                              submerged / mass.displacement_volume)
            drag = -velocity * coefficient
            drag_magnitude = float(np.linalg.norm(drag))
            if drag_magnitude > 1e-6:
                limit = float(np.linalg.norm(velocity)) * mass_value / dt
                viscous = drag / drag_magnitude * min(drag_magnitude, limit)

        gravity = np.array([0.0, -mass_value * g])
        engine.body_apply_force(mass.body, buoyancy + viscous + gravity)

        mass.submerged_volume = submerged
        mass.percent_submerged = displayed
        mass.buoyancy_force = buoyancy
        mass.viscous_force = viscous
        mass.gravity_force = gravity
        mass.contact_force = engine.body_get_contact_force(mass.body)

        results[mass.name] = {
            'buoyancy_N': float(buoyancy[1]),
            'viscous_N': float(viscous[1]),
            'gravity_N': float(gravity[1]),
            'percent_submerged': displayed,
        }

    return results
