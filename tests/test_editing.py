"""Tests for manual system edits."""

import pytest

from starforge.engine import (
    EditError,
    GenerationOptions,
    SystemProcessor,
    add_habitable_planet,
    add_planetary_body,
    delete_node,
    generate_system,
    rename_node,
    valid_planet_types,
)
from starforge.models import (
    Barycenter,
    CelestialBody,
    Orbit,
    OrbitalElements,
    System,
    load_starter_rulepack,
)
from starforge.utils.constants import SOLAR_MASS_KG, SOLAR_RADIUS_KM, G
from starforge.utils.serialization import system_to_dict

PACK = load_starter_rulepack()


def sun_like(seed: str = "edit", planet_count: int = 3):
    return generate_system(seed, PACK, GenerationOptions(planet_count=planet_count), star_choice="Type G")


def first_planet(system) -> CelestialBody:
    return next(body for body in system.bodies() if body.role_hint == "planet")


def twin_binary(separation_au: float, companion_output: float) -> System:
    """Two Sun-like stars around a barycenter; the companion may be brighter."""
    system = System(id="twin", name="Twin", seed="twin", age_gyr=4.6)
    system.add(
        Barycenter(id="bary", name="Twin", parent_id=None, member_ids=["a", "b"], effective_mass_kg=2 * SOLAR_MASS_KG)
    )
    for star_id, output in (("a", 1.0), ("b", companion_output)):
        star = CelestialBody(
            id=star_id,
            name=f"Twin {star_id.upper()}",
            parent_id="bary",
            role_hint="star",
            mass_kg=SOLAR_MASS_KG,
            radius_km=SOLAR_RADIUS_KM,
            temperature_k=5778,
            radiation_output=output,
            orbit=Orbit(
                host_id="bary",
                host_mu=G * 2 * SOLAR_MASS_KG,
                elements=OrbitalElements(a_au=separation_au / 2),
            ),
        )
        star.classes = ["star/G"]
        system.add(star)
    return system


class TestEditBookkeeping:
    """Edits copy the system and count themselves."""

    def test_copy_semantics(self):
        """The original system is never modified."""
        system = sun_like()
        before = system_to_dict(system)
        rename_node(system, system.root().id, "Renamed")
        delete_node(system, next(iter(system.children(system.root().id))).id)
        assert system_to_dict(system) == before

    def test_counter_and_flag(self):
        """Each edit bumps the counter and marks the system as edited."""
        system = sun_like()
        once = rename_node(system, system.root().id, "One")
        twice = rename_node(once, once.root().id, "Two")
        assert once.edit_counter == 1
        assert twice.edit_counter == 2
        assert twice.is_manually_edited
        assert not system.is_manually_edited

    def test_replayable(self):
        """Replaying the same edit on the same system gives the same result."""
        system = generate_system("replay", PACK, star_choice="Type G", empty=True)
        root_id = system.root().id
        first = add_planetary_body(system, root_id, "planet/terrestrial", PACK)
        second = add_planetary_body(system, root_id, "planet/terrestrial", PACK)
        assert system_to_dict(first) == system_to_dict(second)


class TestDeleteNode:
    """Test delete_node."""

    def test_removes_subtree(self):
        """Deleting a planet removes its moons and rings too."""
        for i in range(10):
            system = generate_system(f"moons-{i}", PACK, star_choice="Type G")
            hosts = [body for body in system.bodies() if body.role_hint == "planet" and system.children(body.id)]
            if hosts:
                break
        else:
            pytest.skip("no planet with children in sampled seeds")
        planet = hosts[0]
        doomed = {planet.id, *system.descendants(planet.id)}
        edited = delete_node(system, planet.id)
        assert not doomed & set(edited.nodes)
        assert len(edited.nodes) == len(system.nodes) - len(doomed)

    def test_removes_barycenter_member(self):
        """Deleting a binary star drops it from the members and from the barycenter's mass."""
        system = generate_system("binary-delete", PACK, star_choice="Type K Binary")
        barycenter = system.root()
        assert isinstance(barycenter, Barycenter)
        star_a, star_b = barycenter.member_ids
        edited = delete_node(system, star_b)
        assert edited.root().member_ids == [star_a]

        SystemProcessor().process(edited, PACK)
        remaining = edited.get_body(star_a)
        root = edited.root()
        assert root.effective_mass_kg == pytest.approx(remaining.mass_kg)
        assert root.mean_motion_rad_s == 0.0
        for child in edited.children(root.id):
            if child.orbit is not None:
                assert child.orbit.host_mu == pytest.approx(G * remaining.mass_kg)

    def test_root_forbidden(self):
        """The root cannot be deleted."""
        system = sun_like()
        with pytest.raises(EditError, match="root of a system cannot be deleted"):
            delete_node(system, system.root().id)

    def test_missing_node(self):
        """Unknown ids are reported."""
        with pytest.raises(EditError, match="Node nope not found"):
            delete_node(sun_like(), "nope")


class TestRenameNode:
    """Test rename_node."""

    def test_propagates_to_children(self):
        """Automatically named descendants follow the new name."""
        system = sun_like()
        root = system.root()
        edited = rename_node(system, root.id, "Aurora")
        assert edited.name == "Aurora"
        for node_id in edited.descendants(root.id):
            assert system.nodes[node_id].name.replace(root.name, "Aurora", 1) == edited.nodes[node_id].name

    def test_user_names_preserved(self):
        """A name set by the user is not overwritten by a parent rename."""
        system = sun_like()
        planet = first_planet(system)
        named = rename_node(system, planet.id, "Homeworld")
        renamed = rename_node(named, named.root().id, "Aurora")
        assert renamed.nodes[planet.id].name == "Homeworld"
        assert renamed.nodes[planet.id].name_user_defined

    def test_blank_name(self):
        """Blank names are rejected."""
        system = sun_like()
        with pytest.raises(EditError, match="Name cannot be empty"):
            rename_node(system, system.root().id, "   ")

    def test_missing_node(self):
        """Renaming an unknown node fails."""
        with pytest.raises(EditError, match="not found"):
            rename_node(sun_like(), "ghost", "Name")


class TestAddPlanetaryBody:
    """Test add_planetary_body."""

    def test_adds_outside_existing_orbits(self):
        """Each new planet orbits beyond the previous one."""
        system = generate_system("add-body", PACK, star_choice="Type G", empty=True)
        root = system.root()
        once = add_planetary_body(system, root.id, "planet/terrestrial", PACK)
        twice = add_planetary_body(once, root.id, "planet/ice-giant", PACK)
        first = twice.get_body(f"{system.seed}-custom-1-body-1")
        second = twice.get_body(f"{system.seed}-custom-2-body-1")
        assert first.parent_id == second.parent_id == root.id
        assert first.archetype == "planet/terrestrial"
        assert second.archetype == "planet/ice-giant"
        assert second.orbit.elements.periapsis_au > first.orbit.elements.apoapsis_au
        assert twice.children(second.id) == []
        assert second.name != first.name

    def test_moon_around_planet(self):
        """Planets accept small bodies as moons."""
        for i in range(10):
            system = generate_system(f"giant-host-{i}", PACK, star_choice="Type G")
            giants = [b for b in system.bodies() if b.role_hint == "planet" and b.archetype == "planet/gas-giant"]
            if giants:
                break
        else:
            pytest.skip("no gas giant in sampled seeds")
        giant = giants[0]
        types = valid_planet_types(giant, PACK)
        assert "planet/gas-giant" not in types
        assert "planet/dwarf-planet" in types
        try:
            edited = add_planetary_body(system, giant.id, "planet/dwarf-planet", PACK)
        except EditError as e:
            assert "Hill sphere" in e.reason
        else:
            moon = edited.get_body(f"{system.seed}-custom-1-body-1")
            assert moon.role_hint == "moon"

    def test_star_accepts_every_planet_type(self):
        """Stars accept every planet template."""
        system = sun_like()
        types = valid_planet_types(system.root(), PACK)
        assert set(types) == {key for key in PACK.stat_templates if key.startswith("planet/")}

    def test_unknown_type(self):
        """Archetypes the host cannot carry are rejected."""
        system = sun_like()
        with pytest.raises(EditError, match="cannot orbit"):
            add_planetary_body(system, system.root().id, "planet/unobtainium", PACK)

    def test_belt_cannot_host(self):
        """Belts and rings cannot host bodies."""
        system = sun_like()
        ring = CelestialBody(id="ring", name="Ring", parent_id=system.root().id, role_hint="ring")
        system.add(ring)
        with pytest.raises(EditError, match="A ring cannot host other bodies"):
            add_planetary_body(system, "ring", "planet/terrestrial", PACK)


class TestAddHabitablePlanet:
    """Test add_habitable_planet."""

    @pytest.mark.parametrize("tier", ["earth-like", "human", "alien"])
    def test_adds_in_habitable_zone(self, tier):
        """A Sun-like star gets a habitable terrestrial planet."""
        system = generate_system(f"habitable-{tier}", PACK, star_choice="Type G", empty=True)
        star = system.root()
        edited = add_habitable_planet(system, star.id, tier, PACK)
        SystemProcessor().process(edited, PACK)
        body = edited.get_body(f"{system.seed}-custom-1-body-1")
        assert body.archetype == "planet/terrestrial"
        assert body.parent_id == star.id
        if tier != "alien":
            assert body.hydrosphere.composition == "water"
            assert body.atmosphere.is_present
        if tier == "earth-like":
            assert body.atmosphere.composition.get("O2", 0) > 0.1

    def test_distant_companion_counts_at_its_distance(self):
        """A bright companion 100 AU away barely adds to the dose."""
        system = twin_binary(100.0, companion_output=50.0)
        edited = add_habitable_planet(system, "a", "human", PACK)
        body = edited.get_body("twin-custom-1-body-1")
        assert body.parent_id == "a"
        assert body.orbit.elements.a_au < 2

    def test_close_companion_rejected(self):
        """A bright companion 2 AU away makes the habitable zone too hot."""
        system = twin_binary(2.0, companion_output=50.0)
        with pytest.raises(EditError, match="excess ionising radiation"):
            add_habitable_planet(system, "a", "human", PACK)

    def test_requires_star(self):
        """Only stars can host habitable planets."""
        system = sun_like()
        with pytest.raises(EditError, match="only be added around a star"):
            add_habitable_planet(system, first_planet(system).id, "human", PACK)

    def test_unknown_tier(self):
        """Unknown tiers are rejected."""
        system = sun_like()
        with pytest.raises(EditError, match="Unknown habitability tier"):
            add_habitable_planet(system, system.root().id, "paradise", PACK)

    def test_edit_error_is_value_error(self):
        """EditError carries its reason and is a ValueError."""
        error = EditError("because")
        assert isinstance(error, ValueError)
        assert error.reason == "because"
