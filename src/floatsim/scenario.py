"""
JSON scenarios - build a BuoyancyModel from a description and run it.

Scenario format (all keys optional, but a scenario needs "masses" or "scene"):

    {
      "fluid": "water",                 # name, or {"density": ..., "viscosity": ...}
      "gravity": "earth",               # name, or a number in m/s²
      "pool_volume_liters": 100,
      "fill_speed": 0.5,
      "spill_height_ratio": 0.9,
      "scene": "boat",                  # optional applications scene (bottle, boat)
      "masses": [
        {"type": "cuboid", "material": "wood", "volume_liters": 10,
         "position": [0.0, 0.0], "place": "surface"},
        {"type": "boat", "volume_liters": 10, "position": [0.0, 0.0],
         "path": [[0.0, 0.0, -0.03], [2.0, 0.0, -0.3]]}
      ]
    }

"scene" starts from the applications screen's bodies and shows that scene;
the "masses" entries are added on top.
"place": "surface" puts the body's bottom at the pool's liquid surface.
"path" is a list of [time_s, x, y] waypoints; the body becomes kinematic and
follows the waypoints linearly, holding the last one.
"""

import json
import logging
import math

import numpy as np

from .model.boat import Boat
from .model.mass import Bottle, Cone, Cuboid, Ellipsoid, HorizontalCylinder, Scale, VerticalCylinder
from .model.material import SOLIDS, Material, get_fluid, get_gravity, get_solid
from .simulation import ApplicationsModel, BuoyancyModel

logger = logging.getLogger(__name__)

DEFAULT_DT = 1 / 60
DEFAULT_STEPS = 600
DEFAULT_RECORD_EVERY = 10


def load_scenario(path: str) -> dict:
    with open(path, 'r') as f:
        scenario = json.load(f)
    scenario.setdefault('masses', [])
    if not isinstance(scenario['masses'], list):
        raise ValueError(f"Scenario {path}: 'masses' must be a list")
    if not scenario['masses'] and 'scene' not in scenario:
        raise ValueError(f"Scenario {path} needs a 'masses' list or a 'scene'")
    return scenario


def _material(value, default: Material) -> Material:
    if value is None:
        return default
    if isinstance(value, dict):
        density = value.get('density')
        if density is None or density <= 0:
            raise ValueError(f"Material {value} needs a positive density")
        return Material(value.get('name', 'custom'), float(density),
                        viscosity=float(value.get('viscosity', 1e-3)), custom=True)
    return get_solid(value)


def _fluid(value) -> Material:
    if isinstance(value, dict):
        return _material(value, default=None)
    return get_fluid(value or 'water')


def _volume(entry: dict):
    liters = entry.get('volume_liters')
    if liters is None:
        return None
    if liters <= 0:
        raise ValueError(f"Mass '{entry.get('name') or entry.get('type')}' needs a positive volume")
    return liters / 1000.0


def build_mass(engine, entry: dict):
    """Create one mass from its scenario entry (not yet added to a model)."""
    kind = entry.get('type')
    volume = _volume(entry)
    material = _material(entry.get('material'), SOLIDS['wood'])
    if 'density' in entry:
        material = material.with_density(float(entry['density']))
    common = {
        'position': tuple(entry.get('position', (0.0, 0.0))),
        'name': entry.get('name'),
    }

    if kind in ('cuboid', 'block'):
        if volume is not None:
            return Cuboid.from_volume(engine, volume, material, **common)
        return Cuboid(engine, entry['width'], entry['height'], entry['depth'], material, **common)
    if kind == 'vertical_cylinder':
        if volume is not None:
            radius = (volume / (2 * math.pi)) ** (1 / 3)
            return VerticalCylinder(engine, radius, 2 * radius, material, **common)
        return VerticalCylinder(engine, entry['radius'], entry['height'], material, **common)
    if kind == 'horizontal_cylinder':
        if volume is not None:
            radius = (volume / (2 * math.pi)) ** (1 / 3)
            return HorizontalCylinder(engine, radius, 2 * radius, material, **common)
        return HorizontalCylinder(engine, entry['radius'], entry['length'], material, **common)
    if kind == 'ellipsoid':
        if volume is not None:
            diameter = (6 * volume / math.pi) ** (1 / 3)
            return Ellipsoid(engine, diameter, diameter, diameter, material, **common)
        return Ellipsoid(engine, entry['width'], entry['height'], entry['depth'], material, **common)
    if kind in ('cone', 'inverted_cone'):
        inverted = kind == 'inverted_cone'
        if volume is not None:
            radius = (3 * volume / (2 * math.pi)) ** (1 / 3)
            return Cone(engine, radius, 2 * radius, material, inverted=inverted, **common)
        return Cone(engine, entry['radius'], entry['height'], material, inverted=inverted, **common)
    if kind == 'scale':
        return Scale(engine, _material(entry.get('material'), SOLIDS['pvc']), **common)
    if kind == 'bottle':
        interior = _fluid(entry.get('interior_material', 'water'))
        liters = entry.get('interior_volume_liters', 0.0)
        return Bottle(engine, interior_material=interior, interior_volume=liters / 1000.0, **common)
    if kind == 'boat':
        kwargs = dict(common)
        if volume is not None:
            kwargs['max_volume_displaced'] = volume
        return Boat(engine, **kwargs)

    raise ValueError(f"Unknown mass type '{kind}'")


def build_model(scenario: dict) -> BuoyancyModel:
    kwargs = {
        'fluid': _fluid(scenario.get('fluid')),
        'gravity': get_gravity(scenario.get('gravity', 'earth')),
    }
    if 'pool_volume_liters' in scenario:
        kwargs['pool_volume'] = scenario['pool_volume_liters'] / 1000.0
    for key in ('fill_speed', 'spill_height_ratio'):
        if key in scenario:
            kwargs[key] = float(scenario[key])
    scene = scenario.get('scene')
    if scene is not None:
        model = ApplicationsModel(**kwargs)
        model.set_scene(scene)
    else:
        model = BuoyancyModel(**kwargs)

    for entry in scenario.get('masses', []):
        mass = build_mass(model.engine, entry)
        if entry.get('place') == 'surface':
            info = mass.refresh_step()
            x, y = mass.position
            mass.set_position((x, y + model.pool.liquid_height - info.bottom))
            mass.original_position = np.array(mass.position, dtype=float)
        if entry.get('path'):
            model.engine.set_kinematic(mass.body, True)
        model.add_mass(mass)

    return model


def _kinematic_paths(model: BuoyancyModel, scenario: dict) -> list:
    """(mass, waypoints) for every scenario body that follows a path."""
    entries = scenario.get('masses', [])
    added = model.masses[len(model.masses) - len(entries):]
    return [(mass, entry['path']) for entry, mass in zip(entries, added) if entry.get('path')]


def _path_position(path, t: float) -> np.ndarray:
    waypoints = np.asarray(path, dtype=float)
    return np.array([
        np.interp(t, waypoints[:, 0], waypoints[:, 1]),
        np.interp(t, waypoints[:, 0], waypoints[:, 2]),
    ])


def run_scenario(model: BuoyancyModel, scenario: dict,
                 steps: int = DEFAULT_STEPS, dt: float = DEFAULT_DT,
                 record_every: int = DEFAULT_RECORD_EVERY, verbose: bool = False) -> dict:
    """
    Step *model* and collect snapshots.

    Returns:
        Dictionary with the run settings, periodic snapshots and the final state
    """
    paths = _kinematic_paths(model, scenario)

    start_volume = model.total_liquid_volume()
    history = []
    for step in range(steps):
        t_next = model.time + dt
        for mass, path in paths:
            mass.set_position(_path_position(path, t_next))
        model.step(dt)

        if record_every and (step + 1) % record_every == 0:
            history.append(model.snapshot())
            if verbose:
                pool = model.pool
                print(f"  t={model.time:.2f}s: pool level {pool.liquid_height:.4f} m, "
                      f"{pool.liquid_volume * 1000:.2f} L")

    end_volume = model.total_liquid_volume()
    logger.info("Ran %d steps of %.4g s", steps, dt)

    return {
        'steps': steps,
        'dt_s': dt,
        'liquid_liters_start': round(start_volume * 1000, 6),
        'liquid_liters_end': round(end_volume * 1000, 6),
        'spill_state': model.spill_controller.state.value,
        'history': history,
        'final': model.snapshot(),
    }
