"""
Rigid-body engine abstraction layer for floatsim.

Defines the PhysicsEngine protocol so the fluid and buoyancy code never
depends on a specific rigid-body solver.  The core only asks an engine to
create/update body shapes from vertex lists, to report a body's transform and
linear velocity, and to apply an external force for the next integration step.

Auto-detection: the first call to get_engine_factory() or create_engine()
lazily imports the bundled SimpleEngine.  Use set_engine_factory() to override
(e.g. for tests or an alternative engine).
"""

from __future__ import annotations

from typing import Any, Callable, Protocol, runtime_checkable

import numpy as np

from .geometry import Bounds3


# "body" is an engine-specific opaque object.
Body = Any


@runtime_checkable
class PhysicsEngine(Protocol):
    """Operations the simulation core needs from a rigid-body engine."""

    def create_from_vertices(self, vertices: np.ndarray, static: bool = False) -> Body:
        """New body whose collision outline is *vertices* (local frame, m)."""
        ...

    def update_from_vertices(self, body: Body, vertices: np.ndarray) -> None:
        """Replace a body's collision outline (after a resize)."""
        ...

    def add_body(self, body: Body) -> None:
        ...

    def remove_body(self, body: Body) -> None:
        ...

    def body_get_position(self, body: Body) -> np.ndarray:
        """(x, y) of the body's local origin, in m."""
        ...

    def body_set_position(self, body: Body, position: np.ndarray) -> None:
        ...

    def body_get_velocity(self, body: Body) -> np.ndarray:
        """(vx, vy) in m/s."""
        ...

    def body_set_velocity(self, body: Body, velocity: np.ndarray) -> None:
        ...

    def body_set_mass(self, body: Body, mass: float) -> None:
        ...

    def body_apply_force(self, body: Body, force: np.ndarray) -> None:
        """Accumulate *force* (N) for the next step."""
        ...

    def body_get_contact_force(self, body: Body) -> np.ndarray:
        """Net contact force (N) the body received during the last step."""
        ...

    def body_get_stacked_weight(self, body: Body) -> float:
        """Downward force (N) other bodies pressed onto *body* last step."""
        ...

    def set_kinematic(self, body: Body, kinematic: bool) -> None:
        """Kinematic bodies ignore forces and move only via body_set_position."""
        ...

    def set_support_surface(self, body: Body, local_y: float, half_width: float) -> None:
        """Let other bodies rest on a horizontal segment carried by *body*.

        Replaces any support surface the body already had.
        """
        ...

    def step(self, dt: float) -> None:
        """Advance all bodies by *dt* seconds."""
        ...


EngineFactory = Callable[[Bounds3], PhysicsEngine]


# ---------------------------------------------------------------------------
# Module-level registry
# ---------------------------------------------------------------------------

_factory: EngineFactory | None = None


def _auto_detect() -> EngineFactory:
    """Try to import known engines in priority order."""
    try:
        from .engine_simple import SimpleEngine
        return SimpleEngine
    except ImportError:
        pass

    raise RuntimeError(
        "No physics engine available. Call set_engine_factory() with a "
        "callable that builds a PhysicsEngine from the pool bounds."
    )


def set_engine_factory(factory: EngineFactory | None) -> None:
    """Explicitly set the engine factory (None restores auto-detection)."""
    global _factory
    _factory = factory


def get_engine_factory() -> EngineFactory:
    """Return the active engine factory, auto-detecting if needed."""
    global _factory
    if _factory is None:
        _factory = _auto_detect()
    return _factory


def create_engine(pool_bounds: Bounds3) -> PhysicsEngine:
    """Build an engine whose ground has a pool cut out at *pool_bounds*."""
    return get_engine_factory()(pool_bounds)
