"""System generation entry point."""

import logging
import math
from dataclasses import dataclass

from ..models import Barycenter, CelestialBody, Orbit, OrbitalElements, RulePack, System
from ..physics.zones import minimum_orbit_au
from ..utils.constants import SYSTEM_AGE_RANGE_GYR, G
from ..utils.rng import SeededRNG
from ..utils.tables import to_roman, weighted_choice
from .body_factory import BodyFactory
from .placement import binary_critical_radii, binary_placement_options, calculate_orbital_slots
from .planets import GenerationContext, generate_planetary_body
from .processor import SystemProcessor
from .stars import StarSetup, setup_stars

logger = logging.getLogger(__name__)

DEFAULT_PLACEMENT_TABLE = [
    {"weight": 40, "value": "circumbinary"},
    {"weight": 40, "value": "around_primary"},
    {"weight": 20, "value": "around_secondary"},
]


@dataclass
class GenerationOptions:
    """Caller options for generate_system."""

    epoch_t0: float = 0.0  # Epoch for every generated orbit (seconds)
    planet_count: int | None = None  # Force the number of planet slots


def planet_count_table(star_class: str) -> str:
    """Name of the planet-count distribution for a primary's class."""
    letter = star_class.split("/", 1)[-1]
    if letter[:1] in ("O", "B", "A"):
        return "planet_count_massive"
    if letter[:1] in ("G", "K", "M", "F") or letter == "red-giant":
        return "planet_count_main_sequence"
    return "planet_count_remnant"


def _planet_count(ctx: GenerationContext, star: CelestialBody, options: GenerationOptions) -> int:
    if options.planet_count is not None:
        return options.planet_count
    table = ctx.pack.table(planet_count_table(star.classes[0]))
    return int(weighted_choice(ctx.rng, table)) if table else ctx.rng.next_int(0, 8)


def _planet_orbit(ctx: GenerationContext, host_id: str, host_mass_kg: float, a_au: float, e: float) -> Orbit:
    orbit = Orbit(
        host_id=host_id,
        host_mu=G * host_mass_kg,
        t0=ctx.system.epoch_t0,
        elements=OrbitalElements(
            a_au=a_au,
            e=e,
            inclination_deg=ctx.rng.next_float() ** 3 * 15,
            mean_anomaly_rad=ctx.rng.uniform(0, 2 * math.pi),
        ),
    )
    table = ctx.pack.table("retrograde_orbit_chance")
    orbit.retrograde = bool(weighted_choice(ctx.rng, table)) if table else False
    return orbit


def _max_eccentricity(age_gyr: float) -> float:
    return 0.1 if age_gyr > 5 else 0.15


def _generate_single_star_planets(ctx: GenerationContext, setup: StarSetup, count: int) -> None:
    star = setup.star_a
    for i, a_au in enumerate(calculate_orbital_slots(star, ctx.pack, ctx.rng, count)):
        e = ctx.rng.uniform(0.01, _max_eccentricity(ctx.age_gyr))
        orbit = _planet_orbit(ctx, star.id, star.mass_kg, a_au, e)
        generate_planetary_body(ctx, star, orbit, f"{setup.system_name} {chr(ord('b') + i)}", i, ctx.system.seed)


def _generate_binary_planets(ctx: GenerationContext, setup: StarSetup, count: int) -> None:
    """Place planets in a binary on circumbinary (P-type) or circumstellar (S-type) orbits.

    Each placement keeps its own chain of orbits; a new orbit's periapsis is
    a random gap beyond the previous apoapsis on that chain and is dropped if
    it leaves the stable region.
    """
    star_a, star_b = setup.star_a, setup.star_b
    barycenter: Barycenter = setup.root
    separation = barycenter.separation_au or 0.0
    around_a, around_b, circumbinary = binary_critical_radii(star_a, star_b, separation)

    allowed = binary_placement_options(star_a, star_b, separation)
    table = [
        entry
        for entry in (ctx.pack.table("binary_planet_placement") or DEFAULT_PLACEMENT_TABLE)
        if (entry["value"] if isinstance(entry, dict) else entry.value) in allowed
    ]
    if not table:
        logger.debug(f"No stable planet placement in binary separated by {separation:.3f} AU")
        return

    last_apoapsis = {
        "circumbinary": circumbinary * 1.5,
        "around_primary": minimum_orbit_au(star_a),
        "around_secondary": minimum_orbit_au(star_b),
    }
    limits = {"circumbinary": None, "around_primary": around_a, "around_secondary": around_b}

    for i in range(count):
        placement = weighted_choice(ctx.rng, table)
        if placement == "circumbinary":
            host, prefix = barycenter, f"{setup.system_name} P"
        elif placement == "around_primary":
            host, prefix = star_a, f"{star_a.name} "
        else:
            host, prefix = star_b, f"{star_b.name} "
        host_mass = ctx.system.mass_of(host.id)
        max_apoapsis = limits[placement]

        min_gap = 0.1 * (separation if placement == "circumbinary" else 1.0)
        periapsis = last_apoapsis[placement] + ctx.rng.uniform(min_gap, min_gap * 3)
        if max_apoapsis is not None and periapsis > max_apoapsis:
            continue
        e = ctx.rng.uniform(0.01, _max_eccentricity(ctx.age_gyr))
        a_au = periapsis / (1 - e)
        apoapsis = a_au * (1 + e)
        if max_apoapsis is not None and apoapsis > max_apoapsis:
            continue

        orbit = _planet_orbit(ctx, host.id, host_mass, a_au, e)
        generate_planetary_body(ctx, host, orbit, f"{prefix}{to_roman(i + 1)}", i, ctx.system.seed)
        last_apoapsis[placement] = apoapsis


def generate_planets(ctx: GenerationContext, setup: StarSetup, options: GenerationOptions) -> None:
    """Populate a freshly set-up system with planets, belts and their children."""
    count = _planet_count(ctx, setup.star_a, options)
    if setup.is_binary and setup.star_b is not None:
        _generate_binary_planets(ctx, setup, count)
    else:
        _generate_single_star_planets(ctx, setup, count)


def generate_system(
    seed: str,
    pack: RulePack,
    options: GenerationOptions | None = None,
    star_choice: str | None = None,
    empty: bool = False,
    toytown_factor: float = 0.0,
    *,
    factory: BodyFactory | None = None,
    processor: SystemProcessor | None = None,
) -> System:
    """Generate a complete, processed star system from a seed.

    The same seed, rulepack and options always produce the same system.

    Args:
        seed: Seed string (also the system id)
        pack: Rulepack driving every distribution
        options: Epoch and optional planet count
        star_choice: Optional star override such as "Type K" or "Type M Binary"
        empty: Create only the stars
        toytown_factor: Display compression hint stored on the system
        factory: Body factory (a fresh one by default)
        processor: System processor (a fresh one by default)

    Returns:
        Processed System
    """
    options = options or GenerationOptions()
    factory = factory or BodyFactory()
    processor = processor or SystemProcessor()
    rng = SeededRNG(seed)

    setup = setup_stars(seed, pack, rng, factory, star_choice, options.epoch_t0)
    age_gyr = rng.uniform(*SYSTEM_AGE_RANGE_GYR)

    system = System(
        id=seed,
        name=setup.system_name,
        seed=seed,
        age_gyr=age_gyr,
        epoch_t0=options.epoch_t0,
        rulepack_id=pack.id,
        rulepack_version=pack.version,
        toytown_factor=toytown_factor,
    )
    for node in setup.nodes:
        system.add(node)

    if not empty:
        ctx = GenerationContext(rng=rng, pack=pack, system=system, factory=factory, age_gyr=age_gyr)
        generate_planets(ctx, setup, options)

    processor.process(system, pack)
    logger.info(
        f"Generated system {system.name} (seed {seed}): "
        f"{len(system.stars())} star(s), {len(system.nodes)} nodes, age {age_gyr:.2f} Gyr"
    )
    return system
