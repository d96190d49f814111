"""
Tests for per-tick stage ordering and step-cache guards.
"""

import pytest

from floatsim.buoyancy.forces import apply_fluid_forces
from floatsim.buoyancy.solve import assign_basins, update_fluid, update_fluid_for_basins
from floatsim.buoyancy.spill import SpillController
from floatsim.buoyancy.step import Stage, begin_step
from floatsim.model.mass import Cuboid
from floatsim.model.material import get_solid

from conftest import DT


@pytest.fixture
def context(model):
    model.add_mass(Cuboid.from_volume(model.engine, 0.001, get_solid("wood"), position=(0.0, -0.1)))
    return begin_step(DT, 9.8, model.pool, model.masses)


class TestStageOrder:
    """Stages must run in the fixed order within one tick."""

    def test_solver_before_containment(self, context):
        with pytest.raises(AssertionError):
            update_fluid_for_basins(context)

    def test_forces_before_solver(self, context):
        assign_basins(context)
        with pytest.raises(AssertionError):
            apply_fluid_forces(context)

    def test_spill_before_solver(self, context):
        assign_basins(context)
        with pytest.raises(AssertionError):
            SpillController().step(context)

    def test_stage_cannot_repeat(self, context):
        assign_basins(context)
        with pytest.raises(AssertionError):
            assign_basins(context)

    def test_full_order(self, context):
        levels = update_fluid(context)
        assert context.stage is Stage.SOLVED
        assert "pool" in levels
        SpillController().step(context)
        apply_fluid_forces(context)
        assert context.stage is Stage.FORCED

    def test_model_step_runs_every_stage(self, model):
        context = model.step(DT)
        assert context.stage is Stage.FORCED

    def test_zero_dt_is_ignored(self, model):
        assert model.step(0.0) is None
        assert model.time == 0.0


class TestStepCache:
    """Step geometry is only readable after the tick's refresh."""

    def test_read_before_refresh(self, engine):
        block = Cuboid.from_volume(engine, 0.001, get_solid("wood"))
        with pytest.raises(AssertionError):
            block.step_bottom

    def test_invalidated_cache(self, engine):
        block = Cuboid.from_volume(engine, 0.001, get_solid("wood"))
        block.refresh_step()
        block.invalidate_step()
        with pytest.raises(AssertionError):
            block.get_displaced_volume(0.0)

    def test_refresh_follows_engine(self, engine):
        block = Cuboid.from_volume(engine, 0.001, get_solid("wood"), position=(0.0, 0.0))
        block.refresh_step()
        block.set_position((0.0, 1.0))
        assert block.step_info.y == 0.0
        block.refresh_step()
        assert block.step_info.y == 1.0

    def test_begin_step_skips_hidden(self, model):
        hidden = model.add_mass(Cuboid.from_volume(model.engine, 0.001, get_solid("wood"),
                                                   visible=False))
        context = begin_step(DT, 9.8, model.pool, model.masses)
        assert hidden not in context.masses
        assert hidden.containing_basin is None
