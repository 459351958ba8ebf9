"""Manual editing operations on a generated system.

Every operation works on a deep copy and returns it; the caller must pass
the result through ``SystemProcessor.process`` before using derived fields.
Each edit bumps the system's edit counter and draws from an RNG seeded by
the system seed and that counter, so replaying the same edits on the same
system reproduces the same result.
"""

import copy
import logging
import math

from ..models import (
    Barycenter,
    CelestialBody,
    Hydrosphere,
    MagneticField,
    Node,
    Orbit,
    OrbitalElements,
    RulePack,
    System,
)
from ..physics.atmosphere import atmosphere_from_definition
from ..physics.habitability import find_viable_habitable_orbit
from ..physics.radiation import total_stellar_radiation
from ..physics.zones import hill_radius_km, roche_limit_km, system_limit_au
from ..utils.constants import AU_KM, EARTH_MASS_KG, EARTH_RADIUS_KM, G
from ..utils.rng import SeededRNG
from ..utils.tables import to_roman
from .planets import MOON_DENSITY, TERRESTRIAL, GenerationContext, generate_planetary_body

logger = logging.getLogger(__name__)

EARTH_LIKE_ATMOSPHERE_ID = "earth-like"
HYPOXIC_ATMOSPHERE_ID = "hypoxic-inert"
HABITABLE_TIERS = ("earth-like", "human", "alien")
MAX_HABITABLE_RADIATION = 10.0  # Stellar radiation from every star at the chosen orbit
MOON_HOST_MASS_FRACTION = 0.1


class EditError(ValueError):
    """A manual edit could not be applied.

    Attributes:
        reason: Human-readable explanation suitable for showing to the user
    """

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


def _begin_edit(system: System) -> tuple[System, SeededRNG]:
    edited = copy.deepcopy(system)
    edited.edit_counter += 1
    edited.is_manually_edited = True
    return edited, SeededRNG(f"{edited.seed}-edit-{edited.edit_counter}")


def _require_node(system: System, node_id: str) -> Node:
    node = system.get(node_id)
    if node is None:
        raise EditError(f"Node {node_id} not found.")
    return node


def _child_name(host: Node, sibling_count: int) -> str:
    if isinstance(host, Barycenter) or host.is_star:
        return f"{host.name} {chr(ord('b') + sibling_count)}"
    return f"{host.name} {to_roman(sibling_count + 1)}"


def valid_planet_types(host: Node, pack: RulePack) -> list[str]:
    """Planet archetypes that may be added around a host.

    Stars and barycenters accept every ``planet/*`` template. Planets and
    moons only accept templates whose heaviest body stays under 10% of the
    host's mass.
    """
    types = [key for key in pack.stat_templates if key.startswith("planet/")]
    if isinstance(host, CelestialBody) and host.is_planet_or_moon:
        limit = host.mass_kg * MOON_HOST_MASS_FRACTION
        types = [
            key
            for key in types
            if (pack.template_range(key, "mass_earth") or (math.inf, math.inf))[1] * EARTH_MASS_KG < limit
        ]
    return types


def delete_node(system: System, node_id: str) -> System:
    """Remove a node and its whole subtree.

    Raises:
        EditError: If the node does not exist or is the system root
    """
    node = _require_node(system, node_id)
    if node.parent_id is None:
        raise EditError("The root of a system cannot be deleted.")

    edited, _ = _begin_edit(system)
    doomed = {node_id, *edited.descendants(node_id)}
    for doomed_id in doomed:
        del edited.nodes[doomed_id]
    for barycenter in edited.barycenters():
        barycenter.member_ids = [member for member in barycenter.member_ids if member not in doomed]

    logger.debug(f"Deleted {len(doomed)} node(s) under {node_id}")
    return edited


def rename_node(system: System, node_id: str, new_name: str) -> System:
    """Rename a node and carry the change into automatically named descendants.

    Descendants whose name contains their parent's old name get the new name
    substituted; anything renamed by the user is left alone, along with its
    subtree. Renaming the root renames the system.

    Raises:
        EditError: If the node does not exist or the name is blank
    """
    _require_node(system, node_id)
    if not new_name or not new_name.strip():
        raise EditError("Name cannot be empty.")

    edited, _ = _begin_edit(system)
    target = edited.nodes[node_id]
    old_name = target.name
    target.name = new_name
    if isinstance(target, CelestialBody):
        target.name_user_defined = True

    queue = [(node_id, old_name, new_name)]
    while queue:
        parent_id, parent_old, parent_new = queue.pop(0)
        for child in edited.children(parent_id):
            if isinstance(child, CelestialBody) and child.name_user_defined:
                continue
            child_old = child.name
            child.name = child_old.replace(parent_old, parent_new, 1)
            queue.append((child.id, child_old, child.name))

    if target.parent_id is None:
        edited.name = new_name
    logger.debug(f"Renamed {node_id}: {old_name!r} -> {new_name!r}")
    return edited


def _next_orbit(system: System, host: Node, rng: SeededRNG) -> Orbit:
    children = [
        child
        for child in system.children(host.id)
        if isinstance(child, CelestialBody) and child.orbit is not None
    ]
    if children:
        last_apoapsis = max(child.orbit.elements.apoapsis_au for child in children)
    elif isinstance(host, CelestialBody):
        last_apoapsis = roche_limit_km(host.radius_km, host.mass_kg, MOON_DENSITY) / AU_KM * 1.5
    else:
        last_apoapsis = 1.6 * (host.separation_au or 0.0) * 1.5

    gap = last_apoapsis * 0.2 if last_apoapsis > 0 else 0.1
    periapsis = last_apoapsis + rng.uniform(gap, gap * 5)
    e = rng.uniform(0.01, 0.15)
    return Orbit(
        host_id=host.id,
        host_mu=G * system.mass_of(host.id),
        t0=system.epoch_t0,
        elements=OrbitalElements(
            a_au=periapsis / (1 - e),
            e=e,
            inclination_deg=rng.next_float() ** 3 * 15,
            mean_anomaly_rad=rng.uniform(0, 2 * math.pi),
        ),
    )


def add_planetary_body(system: System, host_id: str, planet_type: str, pack: RulePack) -> System:
    """Add one planet (or moon) of a given archetype outside the host's last orbit.

    Args:
        system: System to edit
        host_id: Star, barycenter or planet to orbit
        planet_type: Archetype such as "planet/terrestrial"
        pack: Rulepack

    Returns:
        Edited copy of the system (unprocessed)

    Raises:
        EditError: Missing host, massless or non-orbitable host, unsupported
            archetype, or no stable orbit left
    """
    host = _require_node(system, host_id)
    if isinstance(host, CelestialBody) and host.role_hint in ("belt", "ring"):
        raise EditError(f"A {host.role_hint} cannot host other bodies.")
    if system.mass_of(host_id) <= 0:
        raise EditError(f"Host {host_id} has no mass.")
    if planet_type not in valid_planet_types(host, pack):
        raise EditError(f"{planet_type} cannot orbit {host.name}.")

    edited, rng = _begin_edit(system)
    host = edited.nodes[host_id]
    orbit = _next_orbit(edited, host, rng)
    apoapsis = orbit.elements.apoapsis_au

    if isinstance(host, CelestialBody) and host.is_star and apoapsis > system_limit_au(host):
        raise EditError("No stable orbit is left inside the system limit.")
    if isinstance(host, CelestialBody) and host.is_planet_or_moon and host.orbit is not None:
        elements = host.orbit.elements
        stable_au = 0.5 * hill_radius_km(
            host.mass_kg, host.orbit.host_mu / G, elements.a_au * AU_KM, elements.e
        ) / AU_KM
        if apoapsis > stable_au:
            raise EditError(f"No stable orbit is left inside the Hill sphere of {host.name}.")

    siblings = edited.children(host_id)
    ctx = GenerationContext(rng=rng, pack=pack, system=edited, age_gyr=edited.age_gyr)
    created = generate_planetary_body(
        ctx,
        host,
        orbit,
        _child_name(host, len(siblings)),
        0,
        f"{edited.seed}-custom-{edited.edit_counter}",
        planet_type=planet_type,
        generate_children=False,
    )
    logger.debug(f"Added {planet_type} {created[0].id} around {host_id}")
    return edited


def _habitable_overrides(tier: str, pack: RulePack, rng: SeededRNG) -> dict:
    if tier == "alien":
        return {
            "mass_kg": rng.uniform(0.5, 3.0) * EARTH_MASS_KG,
            "radius_km": rng.uniform(0.8, 2.0) * EARTH_RADIUS_KM,
        }

    atmosphere_id = EARTH_LIKE_ATMOSPHERE_ID if tier == "earth-like" else HYPOXIC_ATMOSPHERE_ID
    definition = pack.find_atmosphere_by_id(atmosphere_id)
    if definition is None:
        raise EditError(f"The rulepack has no '{atmosphere_id}' atmosphere definition.")

    overrides = {
        "atmosphere": atmosphere_from_definition(definition, rng, pack),
        "mass_kg": rng.uniform(0.5, 1.5) * EARTH_MASS_KG,
        "radius_km": rng.uniform(0.8, 1.2) * EARTH_RADIUS_KM,
        "tags": list(definition.tags),
    }
    if tier == "earth-like":
        overrides["hydrosphere"] = Hydrosphere(coverage=0.7, composition="water")
        overrides["magnetic_field"] = MagneticField(strength_gauss=rng.uniform(0.25, 0.65))
    else:
        overrides["hydrosphere"] = Hydrosphere(coverage=rng.uniform(0.2, 0.8), composition="water")
    return overrides


def add_habitable_planet(system: System, host_id: str, tier: str, pack: RulePack) -> System:
    """Add a terrestrial planet in a free habitable-zone orbit around a star.

    Args:
        system: System to edit
        host_id: Star to orbit
        tier: "earth-like", "human" or "alien"
        pack: Rulepack (must define the earth-like and hypoxic-inert
            atmospheres for the first two tiers)

    Returns:
        Edited copy of the system (unprocessed)

    Raises:
        EditError: Host missing or not a star, unknown tier, no free orbit,
            or too much ionising radiation at the chosen orbit
    """
    host = _require_node(system, host_id)
    if not isinstance(host, CelestialBody) or not host.is_star:
        raise EditError("Habitable planets can only be added around a star.")
    if tier not in HABITABLE_TIERS:
        raise EditError(f"Unknown habitability tier: {tier}")

    edited, rng = _begin_edit(system)
    host = edited.nodes[host_id]
    result = find_viable_habitable_orbit(host, edited, pack, rng)
    if not result.success:
        raise EditError(result.reason)

    a_au = result.orbit.elements.a_au
    candidate = CelestialBody(
        id=f"{edited.seed}-candidate", name="", parent_id=host_id, role_hint="planet", orbit=result.orbit
    )
    radiation = total_stellar_radiation(candidate, edited)
    if radiation > MAX_HABITABLE_RADIATION:
        raise EditError("Could not create a habitable planet due to excess ionising radiation.")

    overrides = _habitable_overrides(tier, pack, rng)
    siblings = edited.children(host_id)
    ctx = GenerationContext(rng=rng, pack=pack, system=edited, age_gyr=edited.age_gyr)
    created = generate_planetary_body(
        ctx,
        host,
        result.orbit,
        _child_name(host, len(siblings)),
        0,
        f"{edited.seed}-custom-{edited.edit_counter}",
        planet_type=TERRESTRIAL,
        generate_children=False,
        overrides=overrides,
    )
    logger.debug(f"Added {tier} planet {created[0].id} at {a_au:.3f} AU around {host_id}")
    return edited
