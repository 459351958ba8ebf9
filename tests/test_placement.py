"""Tests for orbital slot placement and binary stability."""

import pytest

from starforge.engine.placement import (
    P_TYPE_MARGIN,
    P_TYPE_STABILITY,
    S_TYPE_STABILITY,
    binary_critical_radii,
    binary_placement_options,
    calculate_orbital_slots,
)
from starforge.models import CelestialBody, RulePack, load_starter_rulepack
from starforge.physics.zones import minimum_orbit_au, system_limit_au
from starforge.utils import SeededRNG
from starforge.utils.constants import SOLAR_MASS_KG, SOLAR_RADIUS_KM

PACK = load_starter_rulepack()


def make_star(node_id: str = "star", mass_solar: float = 1.0, temp_k: float = 5778) -> CelestialBody:
    star = CelestialBody(
        id=node_id,
        name=node_id,
        parent_id=None,
        role_hint="star",
        mass_kg=mass_solar * SOLAR_MASS_KG,
        radius_km=SOLAR_RADIUS_KM * mass_solar**0.8,
        temperature_k=temp_k,
    )
    star.classes = ["star/G"]
    return star


class TestCalculateOrbitalSlots:
    """Test calculate_orbital_slots."""

    def test_zero_bodies(self):
        """Asking for nothing returns nothing."""
        assert calculate_orbital_slots(make_star(), PACK, SeededRNG("z"), 0) == []

    def test_bounded(self):
        """Slots stay within the jittered usable range."""
        star = make_star()
        slots = calculate_orbital_slots(star, PACK, SeededRNG("titius"), 6)
        jitter = PACK.titius_bode_law.jitter
        assert 0 < len(slots) <= 6
        for au in slots:
            assert minimum_orbit_au(star) * (1 - jitter) <= au <= system_limit_au(star) * (1 + jitter)

    def test_geometric_fallback(self):
        """Packs without Titius-Bode grow slots geometrically from the minimum orbit."""
        star = make_star()
        pack = RulePack(id="p", version="1")
        slots = calculate_orbital_slots(star, pack, SeededRNG("geo"), 5)
        assert len(slots) == 5
        assert min(slots) >= minimum_orbit_au(star) * 0.9

    def test_deterministic(self):
        """Same seed, same slots."""
        star = make_star()
        a = calculate_orbital_slots(star, PACK, SeededRNG("same"), 4)
        b = calculate_orbital_slots(star, PACK, SeededRNG("same"), 4)
        assert a == b


class TestBinaryStability:
    """Test Holman-Wiegert limits."""

    def test_critical_radii(self):
        """S-type limits scale with the mass ratio; P-type with separation."""
        a = make_star("a", 1.0)
        b = make_star("b", 0.5)
        around_a, around_b, circumbinary = binary_critical_radii(a, b, 10.0)
        mu = 0.5 / 1.5
        assert around_a == pytest.approx(S_TYPE_STABILITY * (1 - mu) * 10)
        assert around_b == pytest.approx(S_TYPE_STABILITY * mu * 10)
        assert circumbinary == pytest.approx(P_TYPE_STABILITY * 10)

    def test_close_binary_allows_circumbinary(self):
        """A tight pair leaves room for circumbinary planets only."""
        a = make_star("a", 1.0)
        b = make_star("b", 0.9)
        options = binary_placement_options(a, b, 0.05)
        assert "circumbinary" in options
        assert "around_primary" not in options

    def test_wide_binary_allows_s_type(self):
        """A wide pair allows orbits around each star."""
        a = make_star("a", 1.0)
        b = make_star("b", 0.8)
        separation = system_limit_au(a) / (P_TYPE_MARGIN * P_TYPE_STABILITY) * 2
        options = binary_placement_options(a, b, separation)
        assert "around_primary" in options
        assert "around_secondary" in options
        assert "circumbinary" not in options
