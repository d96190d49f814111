"""
Liquid basins - reservoirs with a height-dependent capacity.

A Basin stores its liquid volume; the liquid height is always derived from
that volume by solving

    empty_volume(height) == liquid_volume

where empty_volume is the container's maximum volume below *height* minus what
the bodies currently inside the basin displace below that height.  The
container itself is described by two geometry hooks, maximum_area(y) and
maximum_volume(y), supplied by subclasses (Pool, BoatBasin).

A basin may reference one child basin (the pool references the boat's
interior while the boat is in the scene).  The child's contained bodies are
already inside the child's owner, so their displacement is subtracted once.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from ..constants import DEFAULT_MAX_ITERATIONS, HEIGHT_TOLERANCE, VOLUME_TOLERANCE

logger = logging.getLogger(__name__)

# Bracket width at which the root search gives up refining
ROOT_BRACKET_EPSILON = 1e-13


def find_root(min_x: float, max_x: float, tolerance: float,
              value_fn: Callable[[float], float],
              derivative_fn: Callable[[float], float],
              max_iterations: int = DEFAULT_MAX_ITERATIONS) -> float:
    """
    Root of a non-decreasing function on [min_x, max_x].

    Hybrid Newton/bisection: a bracketing interval is kept at all times and a
    Newton step is taken only when it lands strictly inside it, otherwise the
    interval is halved.  Stops when |value_fn(x)| <= tolerance.

    If the function has no sign change on the interval the nearer end is
    returned (clamping).
    """
    low, high = min_x, max_x
    f_low = value_fn(low)
    f_high = value_fn(high)
    assert f_low <= f_high + tolerance, (
        f"value function decreases over [{min_x}, {max_x}]: {f_low} > {f_high}")

    if f_low >= 0:
        return low
    if f_high <= 0:
        return high

    x = (low + high) / 2
    for iteration in range(max_iterations):
        f = value_fn(x)
        if abs(f) <= tolerance:
            return x

        if f < 0:
            low = x
        else:
            high = x
        if high - low <= ROOT_BRACKET_EPSILON:
            return x

        slope = derivative_fn(x)
        candidate = x - f / slope if slope > 0 else None
        if candidate is None or not (low < candidate < high):
            candidate = (low + high) / 2
        x = candidate

    if high - low > HEIGHT_TOLERANCE:
        logger.warning("find_root hit %d iterations on [%g, %g], bracket %.3g wide",
                       max_iterations, min_x, max_x, high - low)
    return x


class Basin:
    """Abstract liquid reservoir."""

    def __init__(self, initial_volume: float = 0.0, name: str = "basin"):
        self.name = name
        self.initial_volume = initial_volume
        self.liquid_volume = initial_volume
        self.liquid_height = 0.0
        self.step_bottom = 0.0
        self.step_top = 0.0
        self.step_masses: List = []
        self.child_basin: Optional["Basin"] = None

    # ------------------------------------------------------------------
    # Container geometry (subclasses)
    # ------------------------------------------------------------------

    def maximum_area(self, y: float) -> float:
        """Horizontal area of the empty container at height *y* (m²)."""
        raise NotImplementedError

    def maximum_volume(self, y: float) -> float:
        """Volume of the empty container below height *y* (m³)."""
        raise NotImplementedError

    def is_mass_inside(self, mass) -> bool:
        raise NotImplementedError

    @property
    def capacity(self) -> float:
        return self.maximum_volume(self.step_top)

    # ------------------------------------------------------------------
    # Height <-> volume on the empty container
    # ------------------------------------------------------------------

    def volume_for_height(self, height: float) -> float:
        """Container volume below *height*, clamped to the container's range."""
        clamped = min(max(height, self.step_bottom), self.step_top)
        return self.maximum_volume(clamped)

    def height_for_volume(self, volume: float) -> float:
        """Height at which the empty container holds *volume*."""
        capacity = self.capacity
        if volume <= 0:
            return self.step_bottom
        if volume >= capacity:
            return self.step_top
        return find_root(
            self.step_bottom, self.step_top, VOLUME_TOLERANCE,
            lambda y: self.maximum_volume(y) - volume,
            self.maximum_area,
        )

    # ------------------------------------------------------------------
    # Displacement by contained bodies
    # ------------------------------------------------------------------

    def get_displaced_area(self, y: float) -> float:
        area = 0.0
        for mass in self.step_masses:
            area += mass.get_displaced_area(y)
        if self.child_basin is not None and y < self.child_basin.step_top:
            area -= self.child_basin.get_displaced_area(y)
        return area

    def get_displaced_volume(self, y: float) -> float:
        volume = 0.0
        for mass in self.step_masses:
            volume += mass.get_displaced_volume(y)
        if self.child_basin is not None:
            volume -= self.child_basin.get_displaced_volume(min(y, self.child_basin.step_top))
        return volume

    def get_empty_area(self, y: float) -> float:
        return self.maximum_area(y) - self.get_displaced_area(y)

    def get_empty_volume(self, y: float) -> float:
        return self.maximum_volume(y) - self.get_displaced_volume(y)

    # ------------------------------------------------------------------
    # Liquid state
    # ------------------------------------------------------------------

    def compute_liquid_height(self) -> float:
        """Derive liquid_height from liquid_volume and the current contents."""
        volume = self.liquid_volume
        if volume <= 0:
            self.liquid_height = self.step_bottom
        elif volume >= self.get_empty_volume(self.step_top):
            self.liquid_height = self.step_top
        else:
            self.liquid_height = find_root(
                self.step_bottom, self.step_top, VOLUME_TOLERANCE,
                lambda y: self.get_empty_volume(y) - volume,
                self.get_empty_area,
            )
        return self.liquid_height

    def set_liquid_volume(self, volume: float) -> None:
        """User edit of the liquid volume, clamped to the container."""
        clamped = min(max(volume, 0.0), self.capacity)
        if clamped != volume:
            logger.warning("Clamped %s volume %.6g to %.6g m³", self.name, volume, clamped)
        self.liquid_volume = clamped
        self.compute_liquid_height()

    def set_liquid_height(self, height: float) -> None:
        """Set the level by converting it to the volume that produces it."""
        clamped = min(max(height, self.step_bottom), self.step_top)
        self.liquid_volume = max(self.get_empty_volume(clamped), 0.0)
        self.compute_liquid_height()

    def reset(self) -> None:
        self.liquid_volume = self.initial_volume
        self.step_masses = []
        self.compute_liquid_height()
