"""
Tests for basins: find_root, height/volume conversion, displacement and
liquid-height solving for the pool and the boat interior.
"""

import numpy as np
import pytest

from floatsim.model.basin import find_root
from floatsim.model.boat import Boat
from floatsim.model.mass import Cuboid
from floatsim.model.material import get_solid
from floatsim.constants import POOL_DEPTH, POOL_HEIGHT, POOL_WIDTH

POOL_AREA = POOL_WIDTH * POOL_DEPTH


# =============================================================================
# ROOT FINDING
# =============================================================================

class TestFindRoot:
    """Test the bracketed Newton/bisection search."""

    def test_linear(self):
        root = find_root(0.0, 1.0, 1e-12, lambda x: x - 0.3, lambda x: 1.0)
        assert root == pytest.approx(0.3, abs=1e-12)

    def test_nonlinear_with_newton(self):
        root = find_root(0.0, 1.0, 1e-12, lambda x: x ** 3 - 0.001, lambda x: 3 * x ** 2)
        assert root == pytest.approx(0.1, abs=1e-9)

    def test_zero_derivative_falls_back_to_bisection(self):
        root = find_root(0.0, 1.0, 1e-10, lambda x: x ** 3 - 0.001, lambda x: 0.0)
        assert root == pytest.approx(0.1, abs=1e-8)

    def test_misleading_derivative_stays_in_bracket(self):
        # Newton steps from a tiny slope would jump far outside [0, 1]
        root = find_root(0.0, 1.0, 1e-10, lambda x: x - 0.7, lambda x: 1e-6)
        assert 0.0 <= root <= 1.0
        assert root == pytest.approx(0.7, abs=1e-8)

    def test_clamps_when_no_sign_change(self):
        assert find_root(0.0, 1.0, 1e-10, lambda x: x + 1.0, lambda x: 1.0) == 0.0
        assert find_root(0.0, 1.0, 1e-10, lambda x: x - 5.0, lambda x: 1.0) == 1.0

    def test_decreasing_function_is_rejected(self):
        with pytest.raises(AssertionError):
            find_root(0.0, 1.0, 1e-10, lambda x: -x, lambda x: -1.0)


# =============================================================================
# POOL
# =============================================================================

class TestPoolConversion:
    """Test volume_for_height / height_for_volume on the empty pool."""

    def test_initial_level(self, pool):
        expected = -POOL_HEIGHT + 0.1 / POOL_AREA
        assert pool.liquid_height == pytest.approx(expected, abs=1e-9)

    def test_round_trip(self, pool):
        span = pool.step_top - pool.step_bottom
        for h in np.linspace(pool.step_bottom, pool.step_top, 1001):
            back = pool.height_for_volume(pool.volume_for_height(h))
            assert abs(back - h) / span < 1e-6

    def test_monotonic(self, pool):
        volumes = np.linspace(0.0, pool.capacity, 40)
        heights = [pool.height_for_volume(v) for v in volumes]
        assert all(b >= a for a, b in zip(heights, heights[1:]))

    def test_out_of_range(self, pool):
        assert pool.height_for_volume(-1.0) == pool.step_bottom
        assert pool.height_for_volume(10.0) == pool.step_top
        assert pool.volume_for_height(-10.0) == 0.0
        assert pool.volume_for_height(10.0) == pytest.approx(pool.capacity)

    def test_capacity(self, pool):
        assert pool.capacity == pytest.approx(0.15)


class TestPoolEdits:
    """Test clamped user edits of the pool volume and level."""

    def test_set_liquid_volume_clamps(self, pool):
        pool.set_liquid_volume(-1.0)
        assert pool.liquid_volume == 0.0
        assert pool.liquid_height == pool.step_bottom

        pool.set_liquid_volume(1.0)
        assert pool.liquid_volume == pytest.approx(pool.capacity)
        assert pool.liquid_height == pool.step_top

    def test_set_liquid_height(self, pool):
        pool.set_liquid_height(-0.2)
        assert pool.liquid_volume == pytest.approx((POOL_HEIGHT - 0.2) * POOL_AREA)
        assert pool.liquid_height == pytest.approx(-0.2, abs=1e-7)

    def test_reset(self, pool):
        pool.set_liquid_volume(0.05)
        pool.reset()
        assert pool.liquid_volume == pytest.approx(0.1)


class TestPoolDisplacement:
    """Test liquid heights with bodies in the pool."""

    def test_submerged_block_raises_level(self, engine, pool):
        block = Cuboid.from_volume(engine, 0.001, get_solid("steel"), position=(0.0, -0.3))
        block.refresh_step()
        pool.step_masses = [block]

        pool.compute_liquid_height()
        expected = -POOL_HEIGHT + 0.101 / POOL_AREA
        assert pool.liquid_height == pytest.approx(expected, abs=1e-7)

    def test_partly_submerged_block(self, engine, pool):
        # 0.2 x 0.2 footprint straddling the surface
        block = Cuboid(engine, 0.2, 0.4, 0.2, get_solid("wood"), position=(0.0, -0.1))
        block.refresh_step()
        pool.step_masses = [block]

        height = pool.compute_liquid_height()
        free_area = POOL_AREA - 0.04
        # Volume below the block bottom (-0.3) plus the part beside the block
        below = (POOL_HEIGHT - 0.3) * POOL_AREA
        assert height == pytest.approx(-0.3 + (0.1 - below) / free_area, abs=1e-7)
        assert pool.get_empty_volume(height) == pytest.approx(0.1, abs=1e-9)

    def test_heights_monotonic_with_bodies(self, engine, pool):
        wood = get_solid("wood")
        blocks = [
            Cuboid.from_volume(engine, 0.01, wood, position=(-0.25, -0.15)),
            Cuboid(engine, 0.1, 0.3, 0.1, wood, position=(0.25, -0.2)),
        ]
        for block in blocks:
            block.refresh_step()
        pool.step_masses = blocks

        previous = pool.step_bottom
        for volume in np.linspace(0.0, 0.13, 40):
            pool.liquid_volume = volume
            height = pool.compute_liquid_height()
            assert height >= previous
            previous = height

    def test_overfull_pool_is_clamped(self, engine, pool):
        block = Cuboid.from_volume(engine, 0.01, get_solid("steel"), position=(0.0, -0.3))
        block.refresh_step()
        pool.step_masses = [block]
        pool.liquid_volume = 0.149

        overflow = pool.clamp_to_capacity()
        assert overflow == pytest.approx(0.149 - 0.14)
        assert pool.liquid_volume == pytest.approx(0.14)
        assert pool.compute_liquid_height() == pool.step_top


# =============================================================================
# BOAT BASIN
# =============================================================================

class TestBoatBasin:
    """Test the boat interior's geometry, scaled from the one-liter design."""

    @pytest.fixture
    def boat(self, engine):
        boat = Boat(engine, max_volume_displaced=0.01, position=(0.0, -0.2))
        boat.refresh_step()
        return boat

    def test_capacity_scales_with_volume(self, boat):
        assert boat.step_multiplier == pytest.approx(10 ** (1 / 3))
        assert boat.basin.capacity == pytest.approx(0.007452, rel=1e-9)
        assert boat.internal_volume == pytest.approx(0.007452, rel=1e-9)
        assert boat.volume == pytest.approx(0.01 - 0.007452, rel=1e-9)

    def test_step_range_follows_boat(self, boat):
        m = boat.step_multiplier
        assert boat.basin.step_top == pytest.approx(-0.2 + 0.05 * m)
        assert boat.basin.step_bottom == pytest.approx(-0.2 - 0.04 * m)

    @pytest.mark.parametrize("volume", [0.005, 0.01, 0.03])
    def test_round_trip(self, engine, volume):
        boat = Boat(engine, max_volume_displaced=volume, position=(0.0, -0.2))
        boat.refresh_step()
        basin = boat.basin
        span = basin.step_top - basin.step_bottom
        for h in np.linspace(basin.step_bottom, basin.step_top, 1001):
            back = basin.height_for_volume(basin.volume_for_height(h))
            assert abs(back - h) / span < 1e-6

    def test_monotonic(self, boat):
        basin = boat.basin
        volumes = np.linspace(0.0, basin.capacity, 40)
        heights = [basin.height_for_volume(v) for v in volumes]
        assert all(b >= a for a, b in zip(heights, heights[1:]))

    def test_liquid_height_from_volume(self, boat):
        basin = boat.basin
        basin.liquid_volume = basin.capacity / 2
        height = basin.compute_liquid_height()
        assert basin.step_bottom < height < basin.step_top
        assert basin.maximum_volume(height) == pytest.approx(basin.capacity / 2, abs=1e-9)

    def test_resize_clamps(self, boat):
        boat.set_max_volume_displaced(1.0)
        assert boat.max_volume_displaced == 0.03
        boat.set_max_volume_displaced(0.0)
        assert boat.max_volume_displaced == 0.005

    def test_child_basin_contents_counted_once(self, engine, pool, boat):
        # A block resting inside the boat: the pool sees only the boat envelope
        edge = 0.04
        block = Cuboid(engine, edge, edge, edge, get_solid("steel"),
                       position=(0.0, boat.basin.step_bottom + edge / 2))
        block.refresh_step()
        boat.basin.step_masses = [block]
        pool.step_masses = [boat, block]
        pool.child_basin = boat.basin

        above_boat = boat.step_top + 0.01
        assert pool.get_displaced_volume(above_boat) == pytest.approx(0.01)
