# Rigid-body engine seam and plane geometry helpers
#
# The buoyancy model never steps bodies itself; it talks to a PhysicsEngine
# through the protocol in engine.py. SimpleEngine is picked automatically
# unless another factory is registered with set_engine_factory().

from .engine import (
    PhysicsEngine,
    set_engine_factory,
    get_engine_factory,
    create_engine,
)

from .engine_simple import SimpleEngine

from .geometry import (
    Bounds3,
    polygon_area,
    polygon_bounds,
    polygon_contains_point,
)

__all__ = [
    # Engine seam
    'PhysicsEngine',
    'set_engine_factory',
    'get_engine_factory',
    'create_engine',
    'SimpleEngine',
    # Geometry
    'Bounds3',
    'polygon_area',
    'polygon_bounds',
    'polygon_contains_point',
]
