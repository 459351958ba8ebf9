"""Tests for orbital boundaries and delta-v budgets."""

import pytest

from starforge.models import Atmosphere, CelestialBody, RulePack, load_starter_rulepack
from starforge.physics.flight import PlanetData, calculate_delta_v_budgets, calculate_orbital_boundaries
from starforge.utils.constants import AU_KM, EARTH_MASS_KG, EARTH_RADIUS_KM, SOLAR_MASS_KG

PACK = load_starter_rulepack()


def earth_data(**overrides) -> PlanetData:
    fields = dict(
        gravity=9.81,
        surface_temp_k=288.0,
        molar_mass_kg=0.029,
        surface_pressure_pa=101_325.0,
        mass_kg=EARTH_MASS_KG,
        rotation_period_s=86_164.0,
        distance_to_host_km=AU_KM,
        host_mass_kg=SOLAR_MASS_KG,
        radius_km=EARTH_RADIUS_KM,
    )
    fields.update(overrides)
    return PlanetData(**fields)


class TestOrbitalBoundaries:
    """Test calculate_orbital_boundaries."""

    def test_earth(self):
        """Earth gets a geostationary orbit near 35,800 km and a Hill-sphere ceiling."""
        bounds = calculate_orbital_boundaries(earth_data(), PACK)
        assert bounds.geostationary_km == pytest.approx(35_786, rel=0.01)
        assert not bounds.is_geo_fallback
        assert bounds.heo_upper_boundary_km == pytest.approx(1.49e6, rel=0.05)
        assert 100 < bounds.min_leo_km < 250
        assert bounds.min_leo_km <= bounds.leo_meo_boundary_km <= bounds.meo_heo_boundary_km
        assert bounds.meo_heo_boundary_km <= bounds.heo_upper_boundary_km

    def test_airless(self):
        """Airless bodies use the fixed minimum altitude."""
        bounds = calculate_orbital_boundaries(earth_data(surface_pressure_pa=0.0), PACK)
        assert bounds.min_leo_km == 30.0

    def test_geo_outside_soi(self):
        """A synchronous orbit beyond the sphere of influence falls back to defaults."""
        bounds = calculate_orbital_boundaries(earth_data(rotation_period_s=1e9), PACK)
        assert bounds.geostationary_km is None
        assert bounds.is_geo_fallback

    def test_micro_system(self):
        """A tiny sphere of influence collapses into one band."""
        bounds = calculate_orbital_boundaries(
            earth_data(mass_kg=1e18, radius_km=50.0, gravity=0.03, distance_to_host_km=0.1 * AU_KM), PACK
        )
        assert bounds.is_geo_fallback
        assert bounds.leo_meo_boundary_km == bounds.heo_upper_boundary_km
        assert bounds.min_leo_km < bounds.heo_upper_boundary_km

    def test_rulepack_overrides(self):
        """orbitalConstants in the rulepack replace the defaults."""
        pack = RulePack(id="p", version="1", orbitalConstants={"DEFAULT_NO_ATMOSPHERE_LEO_KM": 80.0})
        bounds = calculate_orbital_boundaries(earth_data(surface_pressure_pa=0.0), pack)
        assert bounds.min_leo_km == 80.0


class TestDeltaV:
    """Test calculate_delta_v_budgets."""

    def planet(self, pressure_bar: float) -> CelestialBody:
        body = CelestialBody(
            id="p",
            name="p",
            parent_id="sun",
            role_hint="planet",
            mass_kg=EARTH_MASS_KG,
            radius_km=EARTH_RADIUS_KM,
            atmosphere=Atmosphere(composition={"N2": 1.0}, pressure_bar=pressure_bar) if pressure_bar else Atmosphere(),
        )
        body.surface_gravity_ms2 = 9.81
        return body

    def test_earth(self):
        """Ascent costs orbital speed plus gravity and drag losses."""
        body = self.planet(1.0)
        calculate_delta_v_budgets(body)
        assert 9_000 < body.lo_delta_v_ms < 11_000
        assert body.propulsive_land_delta_v_ms < body.lo_delta_v_ms
        assert body.aerobrake_land_delta_v_ms > 0

    def test_airless(self):
        """No air means no drag and no aerobraking."""
        body = self.planet(0.0)
        calculate_delta_v_budgets(body)
        assert body.lo_delta_v_ms == body.propulsive_land_delta_v_ms
        assert body.aerobrake_land_delta_v_ms == -1

    def test_non_surface_body(self):
        """Stars get -1 for every budget."""
        star = CelestialBody(id="s", name="s", parent_id=None, role_hint="star", mass_kg=SOLAR_MASS_KG)
        calculate_delta_v_budgets(star)
        assert star.lo_delta_v_ms == star.propulsive_land_delta_v_ms == star.aerobrake_land_delta_v_ms == -1
