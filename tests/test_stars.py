"""Tests for star and binary setup."""

import math

import pytest

from starforge.engine import BodyFactory
from starforge.engine.stars import generate_star, parse_star_choice, setup_stars
from starforge.models import Barycenter, load_starter_rulepack
from starforge.utils import SeededRNG
from starforge.utils.constants import AU_M, SOLAR_MASS_KG, G

PACK = load_starter_rulepack()


class TestParseStarChoice:
    """Test star choice parsing."""

    @pytest.mark.parametrize(
        "choice,expected",
        [
            (None, (None, None)),
            ("Random", (None, None)),
            ("Type G", ("star/G", False)),
            ("Type M Binary", ("star/M", True)),
        ],
    )
    def test_parse(self, choice, expected):
        """UI choices map to a class and a binarity override."""
        assert parse_star_choice(choice) == expected


class TestGenerateStar:
    """Test generate_star."""

    def test_template_ranges(self):
        """A G star's mass and temperature come from its template."""
        star = generate_star("s", None, PACK, SeededRNG("g"), BodyFactory(), "star/G")
        assert 0.8 * SOLAR_MASS_KG <= star.mass_kg <= 1.04 * SOLAR_MASS_KG
        assert 5200 <= star.temperature_k <= 6000
        assert star.classes == ["star/G"]
        assert star.role_hint == "star"

    def test_drawn_class_is_known(self):
        """Drawn classes come from the star_types table."""
        known = {entry.value for entry in PACK.table("star_types")}
        for i in range(20):
            star = generate_star("s", None, PACK, SeededRNG(f"draw-{i}"), BodyFactory())
            assert star.classes[0] in known


class TestSetupStars:
    """Test setup_stars."""

    def test_single_star(self):
        """A forced single star is the root and names the system."""
        setup = setup_stars("single", PACK, SeededRNG("single"), BodyFactory(), "Type K")
        assert not setup.is_binary
        assert setup.root is setup.star_a
        assert setup.star_a.parent_id is None
        assert setup.star_a.name == setup.system_name

    def test_binary_pair(self):
        """A forced binary has a barycenter root and mass-ratio distances."""
        setup = setup_stars("pair", PACK, SeededRNG("pair"), BodyFactory(), "Type G Binary")
        assert setup.is_binary
        barycenter = setup.root
        assert isinstance(barycenter, Barycenter)
        a, b = setup.star_a, setup.star_b
        assert barycenter.member_ids == [a.id, b.id]
        assert a.parent_id == b.parent_id == barycenter.id
        assert barycenter.effective_mass_kg == pytest.approx(a.mass_kg + b.mass_kg)

        separation = barycenter.separation_au
        total = a.mass_kg + b.mass_kg
        assert a.orbit.elements.a_au == pytest.approx(separation * b.mass_kg / total)
        assert b.orbit.elements.a_au == pytest.approx(separation * a.mass_kg / total)
        assert a.orbit.elements.a_au + b.orbit.elements.a_au == pytest.approx(separation)

        n = math.sqrt(G * total / (separation * AU_M) ** 3)
        assert a.orbit.mean_motion_rad_s == pytest.approx(n)
        assert b.orbit.elements.mean_anomaly_rad == pytest.approx(math.pi)

    def test_binary_names(self):
        """Binary members are named A and B after the base name."""
        setup = setup_stars("names", PACK, SeededRNG("names"), BodyFactory(), "Type M Binary")
        assert setup.star_a.name.endswith(" A")
        assert setup.star_b.name.endswith(" B")
        assert setup.system_name.endswith(" System")

    def test_active_black_hole_gets_disk(self):
        """An active black hole primary is given an accretion disk."""
        setup = setup_stars("bh", PACK, SeededRNG("bh"), BodyFactory(), "Type BH_active")
        disks = [node for node in setup.nodes if getattr(node, "role_hint", None) == "ring"]
        assert len(disks) == 1
        assert disks[0].parent_id == setup.star_a.id
        assert disks[0].radius_outer_km > disks[0].radius_inner_km

    def test_deterministic(self):
        """The same seed gives the same stars."""
        a = setup_stars("same", PACK, SeededRNG("same"), BodyFactory())
        b = setup_stars("same", PACK, SeededRNG("same"), BodyFactory())
        assert [(n.id, n.name) for n in a.nodes] == [(n.id, n.name) for n in b.nodes]
        assert a.star_a.mass_kg == b.star_a.mass_kg
