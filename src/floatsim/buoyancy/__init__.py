"""Per-tick fluid pipeline: containment, liquid heights, boat transfer, forces."""

from .forces import apply_fluid_forces
from .solve import assign_basins, update_fluid, update_fluid_for_basins
from .spill import SpillController, SpillState
from .step import Stage, StepContext, begin_step

__all__ = [
    "StepContext", "Stage", "begin_step",
    "assign_basins", "update_fluid_for_basins", "update_fluid",
    "SpillController", "SpillState",
    "apply_fluid_forces",
]
