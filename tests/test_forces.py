"""
Tests for the buoyancy / force integrator.
"""

import numpy as np
import pytest

from floatsim.buoyancy.forces import clamp_velocity, damping_coefficient, percent_submerged
from floatsim.model.mass import Cuboid
from floatsim.model.material import Gravity, get_fluid, get_gravity, get_solid

from conftest import DT, add_kinematic_boat


class TestHelpers:
    def test_clamp_velocity(self):
        clamped = clamp_velocity(np.array([0.0, -10.0]), max_velocity=5.0)
        assert np.linalg.norm(clamped) == pytest.approx(5.0)
        assert clamped[1] < 0

    def test_slow_velocity_untouched(self):
        velocity = np.array([0.3, -0.4])
        assert clamp_velocity(velocity) is velocity

    def test_damping_grows_with_viscosity(self):
        water = damping_coefficient(get_fluid("water").viscosity, 5.0, 0.5)
        honey = damping_coefficient(get_fluid("honey").viscosity, 5.0, 0.5)
        assert 0 < water < honey

    def test_damping_mass_cutoff(self):
        light = damping_coefficient(1e-3, 0.01, 1.0)
        cutoff = damping_coefficient(1e-3, 0.5, 1.0)
        assert light == pytest.approx(cutoff)


class TestSubmergedReadouts:
    """Test forces and percent submerged after one model step."""

    def test_fully_submerged_block(self, model):
        block = model.add_mass(Cuboid.from_volume(model.engine, 0.001, get_solid("steel"),
                                                  position=(0.0, -0.3)))
        model.step(DT)

        assert block.percent_submerged == 100.0
        assert block.submerged_volume == pytest.approx(0.001)
        assert block.buoyancy_force[1] == pytest.approx(0.001 * 1000 * 9.8)
        assert block.gravity_force[1] == pytest.approx(-7.8 * 9.8)

    def test_block_on_ground_is_dry(self, model):
        block = model.add_mass(Cuboid.from_volume(model.engine, 0.001, get_solid("wood"),
                                                  position=(0.7, 0.05)))
        model.step(DT)

        assert block.percent_submerged == 0.0
        assert block.buoyancy_force[1] == 0.0
        assert block.gravity_force[1] == pytest.approx(-0.4 * 9.8)

    def test_half_submerged_percent(self, model):
        block = Cuboid.from_volume(model.engine, 0.001, get_solid("wood"))
        level = model.pool.liquid_height
        block.set_position((0.0, level))
        block.refresh_step()
        assert percent_submerged(block, block.get_displaced_volume(level), level) == pytest.approx(50.0)

    def test_denser_fluid_more_buoyancy(self, model):
        block = model.add_mass(Cuboid.from_volume(model.engine, 0.001, get_solid("steel"),
                                                  position=(0.0, -0.3)))
        model.set_fluid(get_fluid("mercury"))
        model.step(DT)
        assert block.buoyancy_force[1] == pytest.approx(0.001 * 13593 * 9.8)


class TestGravity:
    def test_moon_gravity(self, model):
        block = model.add_mass(Cuboid.from_volume(model.engine, 0.001, get_solid("steel"),
                                                  position=(0.0, -0.3)))
        model.set_gravity(get_gravity("moon"))
        model.step(DT)
        assert block.gravity_force[1] == pytest.approx(-7.8 * 1.6)

    def test_negative_gravity_clamped(self, model):
        model.set_gravity(Gravity("custom", -3.0))
        assert model.gravity.value == 0.0


class TestBoatForces:
    """Test the boat's effective volume and mass."""

    def test_full_submerged_boat_uses_hull_only(self, submerged_boat_model):
        model, boat = submerged_boat_model
        for _ in range(150):
            model.step(DT)

        hull_mass = boat.material.density * boat.volume
        assert boat.percent_submerged == 100.0
        assert boat.submerged_volume == pytest.approx(boat.volume)
        assert boat.gravity_force[1] == pytest.approx(-hull_mass * 9.8)

    def test_floating_boat_carries_liquid_mass(self, model):
        boat = add_kinematic_boat(model, model.pool.liquid_height + 0.05)
        model.pool.liquid_volume -= 0.002
        boat.basin.liquid_volume = 0.002
        model.step(DT)

        hull_mass = boat.material.density * boat.volume
        assert boat.contained_mass == pytest.approx(2.0)
        assert boat.mass == pytest.approx(hull_mass + 2.0)
        assert boat.gravity_force[1] == pytest.approx(-(hull_mass + 2.0) * 9.8)
        assert 0 < boat.percent_submerged < 100

    def test_block_in_boat_feels_boat_basin(self, model):
        boat = add_kinematic_boat(model, model.pool.liquid_height + 0.05)
        boat.refresh_step()
        edge = 0.04
        block = model.add_mass(Cuboid(model.engine, edge, edge, edge, get_solid("steel"),
                                      position=(0.0, boat.basin.step_bottom + edge / 2)))
        boat.basin.liquid_volume = 0.003
        model.pool.liquid_volume -= 0.003
        model.step(DT)

        assert block.containing_basin is boat.basin
        assert block.percent_submerged == 100.0
        assert block.buoyancy_force[1] > 0
