"""
Materials (solids and fluids) and gravity presets.

Densities are kg/m³, viscosities Pa·s, gravity m/s².  Extra or overriding
materials can be loaded from a JSON file of the form::

    {"cedar": {"density": 380}, "brine": {"density": 1200, "viscosity": 1.3e-3}}
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, replace
from typing import Dict

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Material:
    name: str
    density: float
    viscosity: float = 1e-3
    custom: bool = False

    def with_density(self, density: float) -> "Material":
        """A custom copy with a different density."""
        return replace(self, name="custom", density=density, custom=True)


@dataclass(frozen=True)
class Gravity:
    name: str
    value: float


# =============================================================================
# CATALOGS
# =============================================================================

SOLIDS: Dict[str, Material] = {m.name: m for m in [
    Material("styrofoam", 150),
    Material("wood", 400),
    Material("ice", 919),
    Material("human", 950),
    Material("pvc", 1440),
    Material("brick", 2000),
    Material("aluminum", 2700),
    Material("glass", 2700),
    Material("concrete", 3150),
    Material("titanium", 4500),
    Material("steel", 7800),
    Material("copper", 8960),
    Material("silver", 10490),
    Material("lead", 11342),
    Material("gold", 19320),
    Material("platinum", 21450),
]}

FLUIDS: Dict[str, Material] = {m.name: m for m in [
    Material("air", 1.2, viscosity=0.0),
    Material("gasoline", 680, viscosity=6e-4),
    Material("oil", 920, viscosity=0.02),
    Material("water", 1000, viscosity=8.9e-4),
    Material("seawater", 1029, viscosity=1.88e-3),
    Material("honey", 1440, viscosity=0.03),
    Material("sand", 1442, viscosity=0.03),
    Material("mercury", 13593, viscosity=1.53e-3),
]}

GRAVITIES: Dict[str, Gravity] = {g.name: g for g in [
    Gravity("moon", 1.6),
    Gravity("earth", 9.8),
    Gravity("planet_x", 19.6),
    Gravity("jupiter", 24.8),
]}

BOAT_BODY = replace(SOLIDS["aluminum"], name="boat_body")
BOTTLE_BODY = replace(SOLIDS["glass"], name="bottle_body")


def get_solid(name: str) -> Material:
    try:
        return SOLIDS[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown solid material '{name}'. "
                         f"Known: {', '.join(sorted(SOLIDS))}") from None


def get_fluid(name: str) -> Material:
    try:
        return FLUIDS[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown fluid '{name}'. "
                         f"Known: {', '.join(sorted(FLUIDS))}") from None


def get_gravity(name_or_value) -> Gravity:
    """Preset by name, or a custom gravity from a number."""
    if isinstance(name_or_value, (int, float)):
        return Gravity("custom", float(name_or_value))
    try:
        return GRAVITIES[str(name_or_value).lower()]
    except KeyError:
        raise ValueError(f"Unknown gravity '{name_or_value}'. "
                         f"Known: {', '.join(sorted(GRAVITIES))}") from None


def load_materials(path: str) -> Dict[str, Material]:
    """Read a materials JSON file and register its entries.

    Entries with a "viscosity" key are registered as fluids, others as solids.
    Returns the materials that were read.
    """
    with open(path, 'r') as f:
        data = json.load(f)

    loaded = {}
    for name, props in data.items():
        density = props.get('density')
        if density is None or density <= 0:
            raise ValueError(f"Material '{name}' needs a positive density")
        if 'viscosity' in props:
            material = Material(name, float(density), viscosity=float(props['viscosity']))
            FLUIDS[name.lower()] = material
        else:
            material = Material(name, float(density))
            SOLIDS[name.lower()] = material
        loaded[name] = material
        logger.debug("Registered material %s (%.1f kg/m³)", name, material.density)

    return loaded
