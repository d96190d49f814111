"""
floatsim test configuration and fixtures.

Positions below are in the default pool frame: ground at y = 0, pool floor
at y = -POOL_HEIGHT, 0.1 m³ of water standing about 0.139 m below ground.
"""

import pytest

from floatsim.model.boat import Boat
from floatsim.model.material import get_solid
from floatsim.model.pool import Pool, default_pool_bounds
from floatsim.physics.engine_simple import SimpleEngine
from floatsim.simulation import BuoyancyModel

DT = 1 / 60


def surface_position(mass, level, x=0.0):
    """Position that puts *mass*'s bottom exactly at *level*."""
    info = mass.refresh_step()
    return (x, info.y + level - info.bottom)


def add_kinematic_boat(model, y, volume=0.01):
    """Add a boat the test moves by hand, centred at height *y*."""
    boat = Boat(model.engine, max_volume_displaced=volume, position=(0.0, y))
    model.engine.set_kinematic(boat.body, True)
    model.add_mass(boat)
    return boat


@pytest.fixture
def engine():
    """SimpleEngine around the default pool."""
    return SimpleEngine(default_pool_bounds())


@pytest.fixture
def pool():
    """Default pool holding 0.1 m³ of water, no bodies."""
    return Pool()


@pytest.fixture
def model():
    """Empty BuoyancyModel with the default pool."""
    return BuoyancyModel()


@pytest.fixture
def wood():
    return get_solid("wood")


@pytest.fixture
def submerged_boat_model(model):
    """Model with a kinematic 10 L boat held well below the surface."""
    boat = add_kinematic_boat(model, -0.30)
    return model, boat
