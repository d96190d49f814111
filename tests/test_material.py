"""
Tests for the material and gravity catalogs.
"""

import json

import pytest

from floatsim.model import material
from floatsim.model.material import (FLUIDS, GRAVITIES, SOLIDS, Material, get_fluid, get_gravity,
                                     get_solid, load_materials)
from floatsim.model.mass import MIN_DENSITY, Cuboid


@pytest.fixture
def isolated_catalogs(monkeypatch):
    """Let a test register materials without leaking them to other tests."""
    monkeypatch.setattr(material, "SOLIDS", dict(SOLIDS))
    monkeypatch.setattr(material, "FLUIDS", dict(FLUIDS))


class TestCatalogs:
    def test_known_densities(self):
        assert get_solid("wood").density == 400
        assert get_solid("Steel").density == 7800
        assert get_fluid("water").density == 1000
        assert get_fluid("mercury").density == 13593

    def test_fluids_have_viscosity(self):
        assert get_fluid("honey").viscosity > get_fluid("water").viscosity
        assert get_fluid("air").viscosity == 0.0

    def test_unknown_names(self):
        with pytest.raises(ValueError, match="Unknown solid"):
            get_solid("unobtainium")
        with pytest.raises(ValueError, match="Unknown fluid"):
            get_fluid("lava")
        with pytest.raises(ValueError, match="Unknown gravity"):
            get_gravity("mars")

    def test_gravity_presets(self):
        assert get_gravity("moon").value == 1.6
        assert get_gravity("earth").value == 9.8
        assert set(GRAVITIES) == {"moon", "earth", "planet_x", "jupiter"}

    def test_custom_gravity(self):
        gravity = get_gravity(3.7)
        assert gravity.name == "custom"
        assert gravity.value == 3.7


class TestCustomMaterials:
    def test_with_density(self):
        custom = get_solid("wood").with_density(650)
        assert custom.custom
        assert custom.density == 650
        assert get_solid("wood").density == 400

    def test_set_density_clamps(self, engine):
        block = Cuboid.from_volume(engine, 0.001, get_solid("wood"))
        block.set_density(-5.0)
        assert block.density == MIN_DENSITY
        assert block.mass > 0

    def test_set_material_updates_mass(self, engine):
        block = Cuboid.from_volume(engine, 0.001, get_solid("wood"))
        block.set_material(Material("lead", 11342))
        assert block.mass == pytest.approx(11.342)

    def test_load_materials(self, tmp_path, isolated_catalogs):
        path = tmp_path / "materials.json"
        path.write_text(json.dumps({
            "cedar": {"density": 380},
            "brine": {"density": 1200, "viscosity": 1.3e-3},
        }))

        loaded = load_materials(str(path))
        assert set(loaded) == {"cedar", "brine"}
        assert get_solid("cedar").density == 380
        assert get_fluid("brine").viscosity == pytest.approx(1.3e-3)

    def test_load_materials_rejects_bad_density(self, tmp_path, isolated_catalogs):
        path = tmp_path / "materials.json"
        path.write_text(json.dumps({"void": {"density": 0}}))
        with pytest.raises(ValueError, match="positive density"):
            load_materials(str(path))
