"""Bodies, materials and liquid basins."""

from .basin import Basin, find_root
from .boat import Boat, BoatBasin
from .mass import (Bottle, Cone, Cuboid, Ellipsoid, HorizontalCylinder, HullMass, Mass,
                   Scale, StepInfo, VerticalCylinder)
from .material import Gravity, Material, get_fluid, get_gravity, get_solid, load_materials
from .pool import Pool
from .profiles import MassShape, area_fraction, evaluate_piecewise_linear, volume_fraction

__all__ = [
    "Basin", "find_root", "Pool", "Boat", "BoatBasin",
    "Mass", "StepInfo", "Cuboid", "Scale", "VerticalCylinder", "HorizontalCylinder",
    "Ellipsoid", "Cone", "HullMass", "Bottle",
    "Material", "Gravity", "get_solid", "get_fluid", "get_gravity", "load_materials",
    "MassShape", "area_fraction", "volume_fraction", "evaluate_piecewise_linear",
]
