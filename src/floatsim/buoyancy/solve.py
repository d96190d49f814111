#!/usr/bin/env python3
"""
Fluid-level solver - containment and liquid heights for every active basin.

Per tick, after the step caches are refreshed:

1. Containment: each basin collects the bodies that displace liquid into it
   (basin.is_mass_inside), and each body is attributed to the first basin in
   precedence order (boat interior, then pool).
2. Heights: each basin solves empty_volume(height) == liquid_volume.  The pool
   routes around the boat's hull through the hull's own displacement profile,
   and the boat's position changes every step, so nothing is cached between
   ticks.
"""

import logging

from .step import Stage, StepContext

logger = logging.getLogger(__name__)


def assign_basins(context: StepContext) -> dict:
    """
    Decide which bodies displace into which basin.

    Returns:
        dict mapping basin name to the names of the bodies it contains
    """
    context.advance(Stage.CONTAINED)

    pool = context.pool
    pool.child_basin = context.boat.basin if context.boat_active else None

    for basin in context.basins:
        basin.step_masses = [mass for mass in context.masses if basin.is_mass_inside(mass)]

    for mass in context.masses:
        mass.containing_basin = None
        for basin in context.assignable_basins:
            if mass in basin.step_masses:
                mass.containing_basin = basin
                break

    return {basin.name: [mass.name for mass in basin.step_masses] for basin in context.basins}


def update_fluid_for_basins(context: StepContext) -> dict:
    """
    Solve the liquid height of every active basin.

    Returns:
        dict mapping basin name to its liquid volume (m³) and height (m)
    """
    context.advance(Stage.SOLVED)

    overflow = context.pool.clamp_to_capacity()
    if overflow > 0:
        logger.debug("Pool overflow of %.6g m³ removed", overflow)

    results = {}
    for basin in context.basins:
        height = basin.compute_liquid_height()
        results[basin.name] = {
            'liquid_volume_m3': basin.liquid_volume,
            'liquid_height_m': height,
        }
        logger.debug("%s: volume=%.6g m³ height=%.6f m (%d bodies)",
                     basin.name, basin.liquid_volume, height, len(basin.step_masses))

    return results


def update_fluid(context: StepContext) -> dict:
    """Containment followed by the height solve."""
    membership = assign_basins(context)
    levels = update_fluid_for_basins(context)
    for name, members in membership.items():
        levels[name]['bodies'] = members
    return levels
