"""Planetary body generator: planets, moons, rings and belts."""

import logging
import math
from dataclasses import dataclass, field
from typing import Any

from ..models import (
    Atmosphere,
    CelestialBody,
    Hydrosphere,
    MagneticField,
    Node,
    Orbit,
    OrbitalElements,
    RulePack,
    System,
)
from ..physics.atmosphere import atmosphere_from_definition, recalculate_atmosphere_properties
from ..physics.habitability import calculate_habitability, generate_biosphere
from ..physics.radiation import calculate_surface_radiation
from ..physics.temperature import equilibrium_temperature, tidal_heating_k, total_temperature
from ..physics.zones import hill_radius_km, roche_limit_km
from ..utils.constants import (
    AU_KM,
    CHTHONIAN_MAX_DISTANCE_AU,
    CHTHONIAN_MIN_AGE_GYR,
    EARTH_MASS_KG,
    EARTH_RADIUS_KM,
    FROST_LINE_BASE_AU,
    G,
    HYDROSPHERE_CHANCE,
    LIQUIDS,
    MAX_MOONS,
    MOON_MASS_CAP,
    MOON_RADIUS_CAP,
    PLANET_MIGRATION_CHANCE,
    RADIOGENIC_HEAT_K,
    SOLAR_MASS_KG,
    STRIPPING_RADIATION_FLUX,
    STRIPPING_TEMPERATURE_K,
    TERRESTRIAL_MAGNETIC_FIELD_CHANCE,
    TERRESTRIAL_MIN_MASS_FOR_ATMOSPHERE,
)
from ..utils.rng import SeededRNG
from ..utils.tables import to_roman, weighted_choice
from .body_factory import BodyCreationConfig, BodyFactory
from .classification import build_feature_vector, classify_body

logger = logging.getLogger(__name__)

TERRESTRIAL = "planet/terrestrial"
GAS_GIANT = "planet/gas-giant"
ICE_GIANT = "planet/ice-giant"
BROWN_DWARF = "planet/brown-dwarf"
GIANT_ARCHETYPES = (GAS_GIANT, ICE_GIANT, BROWN_DWARF)
ROCKY_ARCHETYPES = (TERRESTRIAL, "planet/dwarf-planet")

# Archetype odds either side of the frost line
OUTER_ARCHETYPES = [
    {"weight": 40, "value": GAS_GIANT},
    {"weight": 30, "value": ICE_GIANT},
    {"weight": 30, "value": TERRESTRIAL},
]
INNER_ARCHETYPES = [
    {"weight": 80, "value": TERRESTRIAL},
    {"weight": 10, "value": GAS_GIANT},
    {"weight": 10, "value": ICE_GIANT},
]

BROWN_DWARF_CHANCE = 0.01
BROWN_DWARF_MASS_EARTHS = (4000.0, 26000.0)
MIGRATION_RANGE_AU = (0.1, 0.5)
DEFAULT_BELT_WIDTH_AU = (0.5, 1.5)
DEFAULT_RING_INNER_MULTIPLE = 1.5
DEFAULT_RING_OUTER_MULTIPLE = 2.5
MOON_DENSITY = 3344.0  # kg/m^3, Moon-like
HYDROSPHERE_COVERAGE = (0.05, 1.0)

DEFAULT_GIANT_ATMOSPHERE = "Hydrogen-Helium (Jupiter-like)"
DEFAULT_GIANT_COMPOSITION = {"H2": 0.86, "He": 0.14}
DEFAULT_GIANT_PRESSURE_BAR = 100.0

OVERRIDE_KEYS = ("mass_kg", "radius_km", "atmosphere", "hydrosphere", "magnetic_field", "tags")


@dataclass
class GenerationContext:
    """Shared state for one generation or edit call.

    Every random decision goes through ``rng``; generated nodes are added to
    ``system`` as soon as they exist so later bodies see their siblings.
    """

    rng: SeededRNG
    pack: RulePack
    system: System
    factory: BodyFactory = field(default_factory=BodyFactory)
    age_gyr: float = 0.0


def is_giant(archetype: str | None) -> bool:
    return archetype in GIANT_ARCHETYPES


def receives_radiogenic_heat(body: CelestialBody) -> bool:
    """Moons and rocky planets carry a flat radiogenic heating term."""
    if body.role_hint == "moon":
        return True
    if body.archetype:
        return body.archetype in ROCKY_ARCHETYPES
    return body.mass_kg < 10 * EARTH_MASS_KG


def tidal_lock_limit_au(host_mass_kg: float) -> float:
    """Semi-major axis inside which a body is assumed tidally locked."""
    return 0.1 * (host_mass_kg / SOLAR_MASS_KG) ** (1 / 3)


def _is_planetary(host: Node) -> bool:
    return isinstance(host, CelestialBody) and host.is_planet_or_moon


def _roll(ctx: GenerationContext, table_name: str, default: Any = False) -> Any:
    table = ctx.pack.table(table_name)
    return weighted_choice(ctx.rng, table) if table else default


def _log_uniform(rng: SeededRNG, low: float, high: float) -> float:
    return math.exp(rng.uniform(math.log(low), math.log(high)))


def _generate_belt(
    ctx: GenerationContext, host: Node, orbit: Orbit, name: str, index: int, id_prefix: str
) -> CelestialBody:
    width_table = ctx.pack.table("belt_width_au_range")
    low, high = width_table[0].value if width_table else DEFAULT_BELT_WIDTH_AU
    width_au = ctx.rng.uniform(low, high)
    center_au = orbit.elements.a_au

    belt = ctx.factory.create_body(
        BodyCreationConfig(
            node_id=f"{id_prefix}-belt-{index + 1}",
            name=f"{name} Belt",
            role_hint="belt",
            parent_id=host.id,
        )
    )
    belt.classes = ["belt/asteroid"]
    belt.orbit = orbit
    belt.radius_inner_km = max(0.0, center_au - width_au / 2) * AU_KM
    belt.radius_outer_km = (center_au + width_au / 2) * AU_KM
    ctx.system.add(belt)
    logger.debug(f"Belt {belt.id} at {center_au:.3f} AU, width {width_au:.3f} AU")
    return belt


def _choose_archetype(ctx: GenerationContext, role_hint: str, host: Node, a_au: float) -> str:
    if role_hint == "moon":
        return TERRESTRIAL
    frost_base = ctx.pack.param("frost_line_base_au", FROST_LINE_BASE_AU)
    host_mass = ctx.system.mass_of(host.id) or SOLAR_MASS_KG
    frost_line_au = frost_base * math.sqrt(host_mass / SOLAR_MASS_KG)
    table = OUTER_ARCHETYPES if a_au > frost_line_au else INNER_ARCHETYPES
    return weighted_choice(ctx.rng, table)


def _apply_template(ctx: GenerationContext, body: CelestialBody, archetype: str, overrides: dict) -> None:
    pack, rng = ctx.pack, ctx.rng
    if archetype not in pack.stat_templates:
        logger.warning(f"No template for {archetype}; leaving mass and radius at zero")
        return

    if "mass_kg" not in overrides:
        mass_range = pack.template_range(archetype, "mass_earth", (0.1, 10.0))
        if archetype == GAS_GIANT:
            if rng.next_float() < 1 - BROWN_DWARF_CHANCE:
                mass_earths = _log_uniform(rng, *mass_range)
            else:
                dwarf_range = pack.template_range(BROWN_DWARF, "mass_earth", BROWN_DWARF_MASS_EARTHS)
                mass_earths = _log_uniform(rng, *dwarf_range)
        else:
            mass_earths = rng.uniform(*mass_range)
        body.mass_kg = mass_earths * EARTH_MASS_KG

    if "radius_km" not in overrides:
        radius_range = pack.template_range(archetype, "radius_earth", (0.5, 2.0))
        body.radius_km = rng.uniform(*radius_range) * EARTH_RADIUS_KM

    if "magnetic_field" not in overrides:
        field_chance = pack.param("terrestrial_magnetic_field_chance", TERRESTRIAL_MAGNETIC_FIELD_CHANCE)
        mag_range = pack.template_range(archetype, "mag_gauss")
        if archetype == TERRESTRIAL and body.mass_kg > 0.1 * EARTH_MASS_KG and rng.next_float() < field_chance:
            body.magnetic_field = MagneticField(strength_gauss=rng.uniform(0.1, 1.5))
        elif mag_range:
            body.magnetic_field = MagneticField(strength_gauss=rng.uniform(*mag_range))


def _apply_overrides(body: CelestialBody, overrides: dict) -> None:
    for key in OVERRIDE_KEYS:
        if key not in overrides:
            continue
        if key == "tags":
            body.tags.extend(overrides["tags"])
        else:
            setattr(body, key, overrides[key])


def _select_atmosphere(ctx: GenerationContext, body: CelestialBody, archetype: str) -> None:
    """Pick and instantiate an atmosphere for a freshly generated body.

    Terrestrial bodies below the minimum mass, or failing the presence roll,
    stay airless. Definitions are filtered by host archetype, mass,
    provisional equilibrium temperature and tidal lock before the weighted
    pick. Giants with no matching definition get a reducing H2/He envelope.
    """
    pack, rng = ctx.pack, ctx.rng
    terrestrial = not is_giant(archetype)
    mass_earths = body.mass_kg / EARTH_MASS_KG

    if terrestrial:
        min_mass = pack.param("terrestrial_min_mass_for_atmosphere_earth", TERRESTRIAL_MIN_MASS_FOR_ATMOSPHERE)
        has_atmosphere = _roll(ctx, "terrestrial_atmosphere_chance", True)
        if mass_earths < min_mass or not has_atmosphere:
            body.atmosphere = Atmosphere()
            body.tags.append("Airless Rock")
            return

    teq = body.equilibrium_temp_k or 0.0
    candidates = []
    for weight, definition in pack.atmosphere_definitions:
        if terrestrial and definition.occurs_on not in ("terrestrial", "both"):
            continue
        if not terrestrial and definition.occurs_on not in ("gas giants", "both"):
            continue
        if definition.mass_range_earths and not (
            definition.mass_range_earths[0] <= mass_earths <= definition.mass_range_earths[1]
        ):
            continue
        if definition.temp_range_k and not (definition.temp_range_k[0] <= teq <= definition.temp_range_k[1]):
            continue
        if definition.tidally_locked is not None and definition.tidally_locked != body.tidally_locked:
            continue
        candidates.append({"weight": weight, "value": definition})

    if candidates:
        definition = weighted_choice(rng, candidates)
        body.atmosphere = atmosphere_from_definition(definition, rng, pack)
        body.tags.extend(definition.tags)
    elif not terrestrial:
        body.atmosphere = Atmosphere(
            name=DEFAULT_GIANT_ATMOSPHERE,
            composition=dict(DEFAULT_GIANT_COMPOSITION),
            pressure_bar=DEFAULT_GIANT_PRESSURE_BAR,
            main="H2",
        )
        body.tags.append("reducing")
    else:
        body.atmosphere = Atmosphere()
        body.tags.append("Airless Rock")


def _select_hydrosphere(ctx: GenerationContext, body: CelestialBody, archetype: str) -> None:
    if is_giant(archetype) or not body.atmosphere.is_present:
        return
    chance = ctx.pack.param("hydrosphere_chance", HYDROSPHERE_CHANCE)
    if ctx.rng.next_float() >= chance:
        return
    temperature = body.temperature_k or 0.0
    liquids = ctx.pack.liquid_ranges() or LIQUIDS
    for solvent in ("water", "ammonia", "methane"):
        melt_k, boil_k = liquids.get(solvent, LIQUIDS[solvent])
        if melt_k <= temperature <= boil_k:
            body.hydrosphere = Hydrosphere(
                coverage=ctx.rng.uniform(*HYDROSPHERE_COVERAGE), composition=solvent
            )
            return


def _update_environment(ctx: GenerationContext, body: CelestialBody, host: Node) -> None:
    """Provisional thermal and radiation state used to steer generation."""
    pack, system = ctx.pack, ctx.system
    body.surface_gravity_ms2 = (
        G * body.mass_kg / (body.radius_km * 1000) ** 2 if body.radius_km > 0 else 0.0
    )
    body.equilibrium_temp_k = equilibrium_temperature(body, system)
    body.tidal_heat_k = tidal_heating_k(body, ctx.system.mass_of(host.id)) if body.role_hint == "moon" else 0.0
    body.radiogenic_heat_k = (
        pack.param("radiogenic_heat_k", RADIOGENIC_HEAT_K) if receives_radiogenic_heat(body) else 0.0
    )
    recalculate_atmosphere_properties(body, pack)
    body.temperature_k = total_temperature(body)
    calculate_surface_radiation(body, system, pack)


def _apply_post_generation_rules(ctx: GenerationContext, body: CelestialBody, archetype: str) -> bool:
    """Chthonian remnants and stripped rocks. Returns True if the body changed."""
    pack = ctx.pack
    a_au = body.orbit.elements.a_au if body.orbit else 0.0

    if (
        archetype == GAS_GIANT
        and ctx.age_gyr > pack.param("chthonian_min_age_gyr", CHTHONIAN_MIN_AGE_GYR)
        and a_au < pack.param("chthonian_max_distance_au", CHTHONIAN_MAX_DISTANCE_AU)
    ):
        body.atmosphere = Atmosphere()
        body.radius_km *= 0.2
        body.tags.append("Chthonian")
        return True

    if not is_giant(archetype) and body.atmosphere.is_present:
        flux_limit = pack.param("stripping_radiation_flux", STRIPPING_RADIATION_FLUX)
        temp_limit = pack.param("stripping_temperature_k", STRIPPING_TEMPERATURE_K)
        if (body.stellar_radiation or 0.0) > flux_limit or (body.temperature_k or 0.0) > temp_limit:
            body.atmosphere = Atmosphere()
            body.hydrosphere = Hydrosphere()
            body.tags.append("Stripped")
            return True
    return False


def _generate_ring(ctx: GenerationContext, planet: CelestialBody) -> CelestialBody:
    inner = ctx.pack.template_range("ring/planetary", "radius_inner_multiple")
    outer = ctx.pack.template_range("ring/planetary", "radius_outer_multiple")
    inner_multiple = ctx.rng.uniform(*inner) if inner else DEFAULT_RING_INNER_MULTIPLE
    outer_multiple = ctx.rng.uniform(*outer) if outer else DEFAULT_RING_OUTER_MULTIPLE

    ring = ctx.factory.create_body(
        BodyCreationConfig(
            node_id=f"{planet.id}-ring-1",
            name=f"{planet.name} Ring",
            role_hint="ring",
            parent_id=planet.id,
        )
    )
    ring.classes = ["ring/planetary"]
    ring.radius_inner_km = planet.radius_km * inner_multiple
    ring.radius_outer_km = planet.radius_km * outer_multiple
    ctx.system.add(ring)
    return ring


def _moon_count(ctx: GenerationContext, planet: CelestialBody, archetype: str) -> int:
    giant = is_giant(archetype)
    count = int(_roll(ctx, "gas_giant_moon_count" if giant else "terrestrial_moon_count", 0))
    if giant:
        mass_earths = planet.mass_kg / EARTH_MASS_KG
        count = math.floor(count * math.log10(max(1.0, mass_earths)))
    return min(count, MAX_MOONS)


def _generate_moons(ctx: GenerationContext, planet: CelestialBody, archetype: str) -> list[CelestialBody]:
    """Chain moon orbits outward from the Roche limit until the stable region ends.

    The stable region is half the planet's Hill radius at periapsis; each
    moon's periapsis sits a random gap beyond the previous moon's apoapsis.
    """
    created: list[CelestialBody] = []
    count = _moon_count(ctx, planet, archetype)
    if count <= 0:
        return created

    roche_au = roche_limit_km(planet.radius_km, planet.mass_kg, MOON_DENSITY) / AU_KM
    stable_limit_au = 0.0
    if planet.orbit and planet.orbit.host_mu > 0:
        host_mass = planet.orbit.host_mu / G
        elements = planet.orbit.elements
        stable_limit_au = 0.5 * hill_radius_km(planet.mass_kg, host_mass, elements.a_au * AU_KM, elements.e) / AU_KM

    min_gap = roche_au * 0.5
    last_apoapsis = roche_au * 1.5
    for j in range(count):
        periapsis = last_apoapsis + ctx.rng.uniform(min_gap, min_gap * 3)
        if stable_limit_au > 0 and periapsis > stable_limit_au:
            break
        e = ctx.rng.uniform(0, 0.05)
        a_au = periapsis / (1 - e)
        if stable_limit_au > 0 and a_au * (1 + e) > stable_limit_au:
            break
        last_apoapsis = a_au * (1 + e)

        orbit = Orbit(
            host_id=planet.id,
            host_mu=G * planet.mass_kg,
            t0=ctx.system.epoch_t0,
            elements=OrbitalElements(
                a_au=a_au,
                e=e,
                inclination_deg=ctx.rng.next_float() ** 2 * 10,
                mean_anomaly_rad=ctx.rng.uniform(0, 2 * math.pi),
            ),
        )
        orbit.retrograde = bool(_roll(ctx, "retrograde_orbit_chance_moon", False))
        created.extend(
            generate_planetary_body(
                ctx, planet, orbit, f"{planet.name} {to_roman(j + 1)}", j, f"{planet.id}-moon"
            )
        )
    return created


def generate_planetary_body(
    ctx: GenerationContext,
    host: Node,
    orbit: Orbit,
    name: str,
    index: int,
    id_prefix: str,
    planet_type: str | None = None,
    generate_children: bool = True,
    overrides: dict | None = None,
) -> list[CelestialBody]:
    """Materialise one planet, moon or belt on a given orbit.

    Algorithm:
    1. Roll belt-vs-planet (belts only around stars and barycenters, and only
       when no explicit type was requested)
    2. Choose the archetype (moons are always terrestrial) and draw mass,
       radius and magnetic field from its template; cap moons against their
       parent
    3. Migration: a gas giant may be moved to a hot-Jupiter orbit
    4. Apply overrides, rotation, retrograde tags and tidal lock
    5. Estimate temperature, then pick atmosphere and hydrosphere
    6. Apply chthonian and stripping rules, then score habitability, roll a
       biosphere and classify
    7. For planets: add a ring and chain moons outward (recursively)

    Args:
        ctx: Generation context (nodes are added to ``ctx.system``)
        host: Star, barycenter or planet being orbited
        orbit: Orbit around ``host``
        name: Display name
        index: Position among the host's generated children (drives the id)
        id_prefix: Id prefix, e.g. the seed or "<planet id>-moon"
        planet_type: Force an archetype such as "planet/gas-giant"
        generate_children: Whether to add rings and moons
        overrides: Fields to force: mass_kg, radius_km, atmosphere,
            hydrosphere, magnetic_field, tags (appended)

    Returns:
        Every node created, the body first
    """
    overrides = overrides or {}
    rng, pack = ctx.rng, ctx.pack

    if planet_type is None and not _is_planetary(host):
        if _roll(ctx, "belt_chance", False):
            return [_generate_belt(ctx, host, orbit, name, index, id_prefix)]

    role_hint = "moon" if _is_planetary(host) else "planet"
    body = ctx.factory.create_body(
        BodyCreationConfig(
            node_id=f"{id_prefix}-body-{index + 1}",
            name=name,
            role_hint=role_hint,
            parent_id=host.id,
        )
    )
    body.orbit = orbit

    archetype = planet_type or _choose_archetype(ctx, role_hint, host, orbit.elements.a_au)
    body.archetype = archetype
    body.classes = [archetype]
    _apply_template(ctx, body, archetype, overrides)

    if role_hint == "moon":
        body.mass_kg = min(body.mass_kg, host.mass_kg * MOON_MASS_CAP)
        body.radius_km = min(body.radius_km, host.radius_km * MOON_RADIUS_CAP)

    migration_chance = pack.param("planet_migration_chance", PLANET_MIGRATION_CHANCE)
    if rng.next_float() < migration_chance and archetype == GAS_GIANT:
        orbit.elements.a_au = rng.uniform(*MIGRATION_RANGE_AU)
        body.tags.append("Migrated Planet")

    _apply_overrides(body, overrides)

    if is_giant(archetype):
        body.rotation_period_hours = rng.uniform(8, 15)
    else:
        body.rotation_period_hours = rng.uniform(10, 30)

    if orbit.retrograde:
        body.tags.extend(["Captured Body", "Retrograde Orbit"])

    host_mass = ctx.system.mass_of(host.id)
    body.tidally_locked = host_mass > 0 and orbit.elements.a_au < tidal_lock_limit_au(host_mass)

    ctx.system.add(body)
    created = [body]

    _update_environment(ctx, body, host)
    if "atmosphere" not in overrides:
        _select_atmosphere(ctx, body, archetype)
    _update_environment(ctx, body, host)
    if "hydrosphere" not in overrides:
        _select_hydrosphere(ctx, body, archetype)

    if _apply_post_generation_rules(ctx, body, archetype):
        _update_environment(ctx, body, host)

    calculate_habitability(body)
    body.biosphere = generate_biosphere(body, ctx.system.seed)
    body.classes = classify_body(body, build_feature_vector(body, ctx.system), pack, ctx.system) or body.classes
    logger.debug(f"Generated {role_hint} {body.id} ({archetype}) at {orbit.elements.a_au:.4f} AU")

    if generate_children and role_hint == "planet":
        ring_table = "gas_giant_ring_chance" if is_giant(archetype) else "terrestrial_ring_chance"
        if _roll(ctx, ring_table, False):
            created.append(_generate_ring(ctx, body))
        created.extend(_generate_moons(ctx, body, archetype))

    return created
