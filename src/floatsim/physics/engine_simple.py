"""
Minimal rigid-body engine implementing the PhysicsEngine protocol.

Bodies translate in the x/y plane (no rotation) under accumulated external
forces, integrated with semi-implicit Euler.  Contacts are limited to what the
buoyancy scenes need:

- the ground, with a rectangular pool cut out of it;
- horizontal support surfaces carried by other bodies (a boat's interior
  floor, the top of a scale), resolved as perfectly inelastic impacts.

Kinematic bodies are positioned from outside (e.g. a user dragging a boat
underwater) and report the velocity implied by their motion.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from .geometry import Bounds3, as_polygon


# A body whose bottom was at most this far below a support surface at the
# start of the step can still land on it.
SUPPORT_CATCH = 0.02  # m


def _zero() -> np.ndarray:
    return np.zeros(2)


@dataclass(eq=False)
class SimpleBody:
    vertices: np.ndarray
    static: bool = False
    mass: float = 1.0
    kinematic: bool = False
    position: np.ndarray = field(default_factory=_zero)
    velocity: np.ndarray = field(default_factory=_zero)
    force: np.ndarray = field(default_factory=_zero)
    contact_force: np.ndarray = field(default_factory=_zero)
    stacked_weight: float = 0.0
    support: tuple | None = None
    step_start_position: np.ndarray = field(default_factory=_zero)

    @property
    def local_bounds(self) -> tuple[float, float, float, float]:
        min_x, min_y = self.vertices.min(axis=0)
        max_x, max_y = self.vertices.max(axis=0)
        return (float(min_x), float(min_y), float(max_x), float(max_y))

    @property
    def bottom(self) -> float:
        return float(self.position[1]) + self.local_bounds[1]

    def bottom_at(self, position: np.ndarray) -> float:
        return float(position[1]) + self.local_bounds[1]


class SimpleEngine:
    """PhysicsEngine for a flat ground with one pool, plus body supports."""

    def __init__(self, pool_bounds: Bounds3):
        self.pool_bounds = pool_bounds
        self.ground_y = pool_bounds.max_y
        self.bodies: list[SimpleBody] = []

    # ------------------------------------------------------------------
    # Body management
    # ------------------------------------------------------------------

    def create_from_vertices(self, vertices, static: bool = False) -> SimpleBody:
        return SimpleBody(vertices=as_polygon(vertices).copy(), static=static)

    def update_from_vertices(self, body: SimpleBody, vertices) -> None:
        body.vertices = as_polygon(vertices).copy()

    def add_body(self, body: SimpleBody) -> None:
        if body not in self.bodies:
            body.step_start_position = body.position.copy()
            self.bodies.append(body)

    def remove_body(self, body: SimpleBody) -> None:
        if body in self.bodies:
            self.bodies.remove(body)

    def body_get_position(self, body: SimpleBody) -> np.ndarray:
        return body.position.copy()

    def body_set_position(self, body: SimpleBody, position) -> None:
        body.position = np.asarray(position, dtype=float).copy()
        if not body.kinematic:
            body.step_start_position = body.position.copy()

    def body_get_velocity(self, body: SimpleBody) -> np.ndarray:
        return body.velocity.copy()

    def body_set_velocity(self, body: SimpleBody, velocity) -> None:
        body.velocity = np.asarray(velocity, dtype=float).copy()

    def body_set_mass(self, body: SimpleBody, mass: float) -> None:
        body.mass = max(float(mass), 1e-9)

    def body_apply_force(self, body: SimpleBody, force) -> None:
        body.force = body.force + np.asarray(force, dtype=float)

    def body_get_contact_force(self, body: SimpleBody) -> np.ndarray:
        return body.contact_force.copy()

    def body_get_stacked_weight(self, body: SimpleBody) -> float:
        return body.stacked_weight

    def set_kinematic(self, body: SimpleBody, kinematic: bool) -> None:
        body.kinematic = kinematic
        body.velocity = _zero()
        body.step_start_position = body.position.copy()

    def set_support_surface(self, body: SimpleBody, local_y: float, half_width: float) -> None:
        body.support = (float(local_y), float(half_width))

    # ------------------------------------------------------------------
    # Stepping
    # ------------------------------------------------------------------

    def step(self, dt: float) -> None:
        previous = {}
        for body in self.bodies:
            previous[body] = body.step_start_position.copy()
            body.contact_force = _zero()
            body.stacked_weight = 0.0

            if body.static:
                body.velocity = _zero()
            elif body.kinematic:
                body.velocity = (body.position - body.step_start_position) / dt
            else:
                body.velocity = body.velocity + body.force / body.mass * dt
                body.position = body.position + body.velocity * dt
            body.force = _zero()

        dynamic = [b for b in self.bodies if not (b.static or b.kinematic)]
        for body in sorted(dynamic, key=lambda b: b.bottom):
            self._resolve_walls(body)
            self._resolve_floor(body, dt)
            self._resolve_supports(body, previous, dt)

        for body in self.bodies:
            body.step_start_position = body.position.copy()

    def floor_height(self, x: float) -> float:
        pool = self.pool_bounds
        if pool.min_x < x < pool.max_x:
            return pool.min_y
        return self.ground_y

    def _resolve_walls(self, body: SimpleBody) -> None:
        pool = self.pool_bounds
        x = float(body.position[0])
        if body.bottom >= self.ground_y or not pool.contains_x(x):
            return
        min_x, _, max_x, _ = body.local_bounds
        low = pool.min_x - min_x
        high = pool.max_x - max_x
        if low > high:
            clamped = (pool.min_x + pool.max_x) / 2
        else:
            clamped = min(max(x, low), high)
        if clamped != x:
            body.position[0] = clamped
            body.velocity[0] = 0.0

    def _resolve_floor(self, body: SimpleBody, dt: float) -> None:
        floor = self.floor_height(float(body.position[0]))
        bottom = body.bottom
        if bottom >= floor:
            return
        body.position[1] += floor - bottom
        if body.velocity[1] < 0:
            impulse = -body.mass * body.velocity[1]
            body.velocity[1] = 0.0
            body.contact_force = body.contact_force + np.array([0.0, impulse / dt])

    def _resolve_supports(self, body: SimpleBody, previous: dict, dt: float) -> None:
        for support in self.bodies:
            if support is body or support.support is None:
                continue
            local_y, half_width = support.support
            surface = float(support.position[1]) + local_y
            previous_surface = float(previous[support][1]) + local_y
            if abs(float(body.position[0] - support.position[0])) > half_width:
                continue
            if body.bottom >= surface:
                continue
            if body.bottom_at(previous[body]) < previous_surface - SUPPORT_CATCH:
                continue
            self._land(body, support, surface, dt)

    def _land(self, body: SimpleBody, support: SimpleBody, surface: float, dt: float) -> None:
        body.position[1] += surface - body.bottom
        relative = body.velocity[1] - support.velocity[1]
        if relative >= 0:
            return
        before = body.velocity[1]
        if support.static or support.kinematic:
            body.velocity[1] = support.velocity[1]
        else:
            total = body.mass + support.mass
            common = (body.mass * body.velocity[1] + support.mass * support.velocity[1]) / total
            body.velocity[1] = common
            support.velocity[1] = common
        contact = body.mass * (body.velocity[1] - before) / dt
        body.contact_force = body.contact_force + np.array([0.0, contact])
        support.contact_force = support.contact_force - np.array([0.0, contact])
        support.stacked_weight += contact
