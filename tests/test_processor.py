"""Tests for the multi-pass system processor."""

import copy

import pytest

from starforge.engine import SystemProcessor, generate_system
from starforge.models import (
    Atmosphere,
    CelestialBody,
    Hydrosphere,
    MagneticField,
    Orbit,
    OrbitalElements,
    System,
    load_starter_rulepack,
)
from starforge.utils.constants import EARTH_MASS_KG, EARTH_RADIUS_KM, SOLAR_MASS_KG, SOLAR_RADIUS_KM, G
from starforge.utils.serialization import system_to_dict

PACK = load_starter_rulepack()


def sol() -> System:
    system = System(id="sol", name="Sol", seed="sol", age_gyr=4.6)
    sun = CelestialBody(
        id="sun",
        name="Sol",
        parent_id=None,
        role_hint="star",
        mass_kg=SOLAR_MASS_KG,
        radius_km=SOLAR_RADIUS_KM,
        temperature_k=5778,
        radiation_output=1.0,
    )
    sun.classes = ["star/G"]
    system.add(sun)
    return system


def add_planet(system: System, node_id: str, a_au: float, mass_earths: float, radius_earths: float, **fields):
    planet = CelestialBody(
        id=node_id,
        name=node_id.title(),
        parent_id="sun",
        role_hint="planet",
        mass_kg=mass_earths * EARTH_MASS_KG,
        radius_km=radius_earths * EARTH_RADIUS_KM,
        rotation_period_hours=24.0,
        orbit=Orbit(host_id="sun", host_mu=G * SOLAR_MASS_KG, elements=OrbitalElements(a_au=a_au, e=0.0167)),
        **fields,
    )
    system.add(planet)
    return planet


def earth(system: System) -> CelestialBody:
    return add_planet(
        system,
        "earth",
        1.0,
        1.0,
        1.0,
        archetype="planet/terrestrial",
        atmosphere=Atmosphere(
            name="Nitrogen-Oxygen (Earth-like)",
            composition={"N2": 0.78, "O2": 0.21, "Ar": 0.01},
            pressure_bar=1.0,
        ),
        hydrosphere=Hydrosphere(coverage=0.7, composition="water"),
        magnetic_field=MagneticField(strength_gauss=0.5),
    )


def jupiter(system: System) -> CelestialBody:
    return add_planet(
        system,
        "jupiter",
        5.2,
        317.8,
        11.2,
        archetype="planet/gas-giant",
        atmosphere=Atmosphere(
            name="Hydrogen-Helium (Jupiter-like)",
            composition={"H2": 0.86, "He": 0.14},
            pressure_bar=100.0,
        ),
        magnetic_field=MagneticField(strength_gauss=4.2),
    )


class TestScenarios:
    """Processing hand-built solar-system analogues."""

    def test_earth(self):
        """An Earth analogue is temperate and human habitable.

        The 2 mSv/yr crustal background alone keeps the radiation sub-score
        below the earth-like threshold.
        """
        system = sol()
        planet = earth(system)
        SystemProcessor().process(system, PACK)

        assert planet.surface_gravity_ms2 == pytest.approx(9.8, rel=0.02)
        assert planet.orbital_period_days == pytest.approx(365.25, rel=0.01)
        assert 250 < planet.equilibrium_temp_k < 260
        assert 270 < planet.temperature_k < 300
        assert planet.atmosphere.main == "N2"
        assert planet.atmosphere.molar_mass_kg == pytest.approx(0.029, rel=0.02)
        assert 2 < planet.surface_radiation < 3
        assert planet.habitability_tier == "human"
        assert "habitability/human" in planet.tags
        assert not planet.tidally_locked

    def test_venus(self):
        """A thick CO2 atmosphere makes a runaway greenhouse."""
        system = sol()
        planet = add_planet(
            system,
            "venus",
            0.72,
            0.815,
            0.95,
            archetype="planet/terrestrial",
            atmosphere=Atmosphere(
                name="Carbon Dioxide (Venus-like)",
                composition={"CO2": 0.965, "N2": 0.035},
                pressure_bar=92.0,
            ),
        )
        SystemProcessor().process(system, PACK)
        assert planet.greenhouse_temp_k > 300
        assert planet.temperature_k > 600
        assert planet.habitability_tier == "none"

    def test_jupiter(self):
        """A cold Jupiter classifies as a gas giant."""
        system = sol()
        planet = jupiter(system)
        SystemProcessor().process(system, PACK)
        assert planet.classes[0] in ("planet/gas-giant", "planet/cold-jupiter")
        assert "planet/terrestrial" not in planet.classes
        assert planet.radiogenic_heat_k == 0.0

    def test_io(self):
        """A close eccentric moon of a giant is tidally heated and locked."""
        system = sol()
        host = jupiter(system)
        io = CelestialBody(
            id="io",
            name="Io",
            parent_id=host.id,
            role_hint="moon",
            mass_kg=8.93e22,
            radius_km=1821.6,
            rotation_period_hours=42.5,
            orbit=Orbit(
                host_id=host.id,
                host_mu=G * host.mass_kg,
                elements=OrbitalElements(a_au=421_700 / 149_597_870.7, e=0.0041),
            ),
        )
        system.add(io)
        SystemProcessor().process(system, PACK)
        assert io.tidal_heat_k > 50
        assert io.tidally_locked
        assert io.radiogenic_heat_k > 0
        assert io.temperature_k > io.equilibrium_temp_k


class TestProcessor:
    """General processor behaviour."""

    def test_idempotent(self):
        """Processing twice gives the same result as processing once."""
        system = generate_system("idempotent", PACK, star_choice="Type G")
        once = system_to_dict(system)
        SystemProcessor().process(system, PACK)
        assert system_to_dict(system) == once

    def test_never_adds_or_removes_nodes(self):
        """Node ids are unchanged by processing."""
        system = generate_system("stable-ids", PACK)
        before = set(system.nodes)
        SystemProcessor().process(copy.deepcopy(system), PACK)
        SystemProcessor().process(system, PACK)
        assert set(system.nodes) == before

    def test_flight_fields(self):
        """Planets get orbital boundaries; stars get sentinel delta-v."""
        system = sol()
        planet = earth(system)
        SystemProcessor().process(system, PACK)
        star = system.get_body("sun")
        assert planet.orbital_boundaries is not None
        assert planet.lo_delta_v_ms > 7000
        assert star.lo_delta_v_ms == -1

    def test_missing_inputs_do_not_raise(self):
        """Bodies with zero mass or radius are processed without error."""
        system = sol()
        add_planet(system, "ghost", 1.0, 0.0, 0.0)
        SystemProcessor().process(system, PACK)
        assert system.get_body("ghost").surface_gravity_ms2 is None

    def test_without_classifier(self):
        """A pack without a classifier replaces old classes with the archetype."""
        system = sol()
        planet = earth(system)
        planet.classes = ["planet/hot-jupiter"]
        SystemProcessor().process(system, PACK.model_copy(update={"classifier": None}))
        assert planet.classes == ["planet/terrestrial"]

