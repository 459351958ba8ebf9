"""Habitability scoring, biosphere generation and habitable-orbit search.

The biosphere roll does not draw from the generation RNG. Each body gets
its own stream seeded from the system seed and its id, so processing the
same system again, in any order, rolls the same life.
"""

import math
from dataclasses import dataclass

from ..models import Biosphere, CelestialBody, Orbit, OrbitalElements, RulePack, System
from ..utils.constants import EARTH_GRAVITY, G
from ..utils.rng import SeededRNG
from .zones import calculate_stellar_zones

HABITABILITY_TIERS = ("earth-like", "human", "alien", "none")
TIER_TAG_PREFIX = "habitability/"

# (optimum K, tolerance K) for surface temperature by solvent
SOLVENT_TEMPERATURE = {
    "water": (288.0, 50.0),
    "methane": (111.0, 30.0),
    "ammonia": (218.0, 30.0),
}
PRESSURE_OPTIMUM_BAR = (1.0, 2.0)
RADIATION_TOLERANCE_MSV = 10.0  # Dose at which the radiation sub-score reaches zero
GRAVITY_OPTIMUM_G = (1.0, 1.5)

BIOCHEMISTRY = {
    "water": "water-carbon",
    "ammonia": "ammonia-silicon",
    "methane": "methane-carbon",
}

HABITABLE_SEARCH_STEPS = 50


@dataclass
class HabitabilityFactors:
    """Sub-scores in [0, 1] behind a habitability score."""

    temperature: float = 0.0
    pressure: float = 0.0
    solvent: float = 0.0
    radiation: float = 0.0
    gravity: float = 0.0


@dataclass
class ViableOrbitResult:
    """Outcome of a habitable-orbit search: an orbit or a reason it failed."""

    success: bool
    orbit: Orbit | None = None
    reason: str | None = None


def score_from_range(value: float, optimum: float, tolerance: float) -> float:
    return max(0.0, 1 - abs(value - optimum) / tolerance)


def surface_gravity_g(body: CelestialBody) -> float:
    if body.mass_kg <= 0 or body.radius_km <= 0:
        return 0.0
    return G * body.mass_kg / (body.radius_km * 1000) ** 2 / EARTH_GRAVITY


def calculate_habitability(body: CelestialBody) -> tuple[float, str, HabitabilityFactors]:
    """Score a planet or moon for habitability and record the tier.

    Score = 30*temperature + 20*pressure + 15*solvent (+5 if water)
    + 15*radiation + 15*gravity, clamped to [0, 100]. The tier is decided by
    compound conditions on the sub-scores, not by score cutoffs alone, and is
    stored both on ``habitability_tier`` and as a ``habitability/<tier>`` tag.

    Args:
        body: Body with current temperature, radiation and atmosphere

    Returns:
        (score, tier, factors)
    """
    factors = HabitabilityFactors()
    hydrosphere = body.hydrosphere
    has_solvent = hydrosphere.coverage > 0.1
    solvent = hydrosphere.composition if has_solvent else "water"

    score = 0.0
    if body.temperature_k:
        optimum, tolerance = SOLVENT_TEMPERATURE[solvent]
        factors.temperature = score_from_range(body.temperature_k, optimum, tolerance)
    score += factors.temperature * 30

    if body.atmosphere.pressure_bar > 0:
        factors.pressure = score_from_range(body.atmosphere.pressure_bar, *PRESSURE_OPTIMUM_BAR)
    score += factors.pressure * 20

    if has_solvent:
        factors.solvent = 1.0
        if hydrosphere.composition == "water":
            score += 5
    score += factors.solvent * 15

    factors.radiation = score_from_range(body.surface_radiation or 0.0, 0.0, RADIATION_TOLERANCE_MSV)
    score += factors.radiation * 15

    gravity = surface_gravity_g(body)
    if gravity > 0:
        factors.gravity = score_from_range(gravity, *GRAVITY_OPTIMUM_G)
    score += factors.gravity * 15

    score = max(0.0, min(100.0, score))
    water = has_solvent and hydrosphere.composition == "water"
    oxygen = body.atmosphere.composition.get("O2", 0.0)

    if (
        water
        and factors.temperature > 0.9
        and factors.pressure > 0.8
        and factors.radiation > 0.9
        and factors.gravity > 0.8
        and oxygen > 0.1
    ):
        tier = "earth-like"
    elif (
        water
        and factors.temperature > 0.7
        and factors.pressure > 0.6
        and factors.radiation > 0.7
        and factors.gravity > 0.6
    ):
        tier = "human"
    elif score > 40:
        tier = "alien"
    else:
        tier = "none"

    body.habitability_score = score
    body.habitability_tier = tier
    body.tags = [tag for tag in body.tags if not tag.startswith(TIER_TAG_PREFIX)]
    body.tags.append(f"{TIER_TAG_PREFIX}{tier}")
    return score, tier, factors


def generate_biosphere(body: CelestialBody, seed: str) -> Biosphere | None:
    """Roll native life for a scored body.

    Uses its own RNG seeded from the system seed and body id, so the outcome
    is stable across repeated processing of the same body.

    Args:
        body: Body with a current habitability score
        seed: System seed

    Returns:
        Biosphere, or None when life does not take hold
    """
    score = body.habitability_score or 0.0
    if score <= 0 or not body.is_planet_or_moon:
        return None

    rng = SeededRNG(f"{seed}:{body.id}:biosphere")
    if rng.next_float() >= score / 100:
        return None

    morphologies = ["microbial"]
    if score > 60:
        morphologies.append("flora" if rng.chance(0.5) else "fungal")
    if score > 85 and "flora" in morphologies:
        morphologies.append("fauna")

    solvent = body.hydrosphere.composition if body.hydrosphere.coverage > 0 else "water"
    pressure = body.atmosphere.pressure_bar
    if (body.stellar_radiation or 0.0) > 0.01 and pressure < 100:
        energy_source = "photosynthesis"
    elif body.tidal_heat_k > 20:
        energy_source = "thermosynthesis"
    else:
        energy_source = "chemosynthesis"

    return Biosphere(
        complexity="simple" if morphologies == ["microbial"] else "complex",
        coverage=min(1.0, score / 100 * rng.uniform(0.3, 1.0)),
        biochemistry=BIOCHEMISTRY[solvent],
        energy_source=energy_source,
        morphologies=morphologies,
    )


def find_viable_habitable_orbit(
    host: CelestialBody, system: System, pack: RulePack, rng: SeededRNG
) -> ViableOrbitResult:
    """Find a free orbit inside a star's habitable zone.

    Scans 50 radii from the outer to the inner goldilocks bound and returns
    the first that does not fall within 0.95*periapsis..1.05*apoapsis of an
    existing child of the host.

    Args:
        host: Star to orbit
        system: System holding the host's current children
        pack: Rulepack for zone parameters
        rng: Random source for the mean anomaly at epoch

    Returns:
        ViableOrbitResult with either an orbit or a human-readable reason
    """
    zones = calculate_stellar_zones(host, pack)
    if zones.kill_zone > zones.goldilocks_outer:
        return ViableOrbitResult(
            False,
            reason="The star's radiation is too high, and its 'Kill Zone' completely overlaps the habitable zone.",
        )
    if zones.danger_zone > zones.goldilocks_outer:
        return ViableOrbitResult(
            False,
            reason="No viable orbit for complex life. The entire habitable zone is within the 'Danger Zone'.",
        )

    inner, outer = zones.goldilocks_inner, zones.goldilocks_outer
    if inner <= 0 or outer <= 0 or inner >= outer:
        return ViableOrbitResult(False, reason="The host star is too cool to support a habitable planet.")

    siblings = [
        child for child in system.children(host.id) if isinstance(child, CelestialBody) and child.orbit
    ]
    step = (outer - inner) / HABITABLE_SEARCH_STEPS
    for i in range(HABITABLE_SEARCH_STEPS):
        radius_au = outer - i * step
        if radius_au <= 0:
            continue
        collides = any(
            child.orbit.elements.periapsis_au * 0.95 < radius_au < child.orbit.elements.apoapsis_au * 1.05
            for child in siblings
        )
        if collides:
            continue
        return ViableOrbitResult(
            True,
            orbit=Orbit(
                host_id=host.id,
                host_mu=G * host.mass_kg,
                t0=system.epoch_t0,
                elements=OrbitalElements(
                    a_au=radius_au, e=0.01, mean_anomaly_rad=rng.uniform(0, 2 * math.pi)
                ),
            ),
        )

    return ViableOrbitResult(
        False,
        reason="The habitable zone is too crowded. A GM may need to delete a planet to make room.",
    )
