"""Orbital slot placement for planets around a primary."""

import logging

from ..models import CelestialBody, RulePack
from ..physics.zones import minimum_orbit_au, system_limit_au
from ..utils.constants import DEFAULT_JITTER
from ..utils.rng import SeededRNG

logger = logging.getLogger(__name__)

MIN_SLOT_FLOOR_AU = 0.05
GEOMETRIC_GROWTH = (1.4, 2.0)  # Ratio band between successive slots
MAX_GEOMETRIC_SLOTS = 64
TITIUS_BODE_ZERO_POWER = -999  # Sequence marker meaning c**n == 0

# Holman & Wiegert (1999) stability coefficients for near-circular binaries
S_TYPE_STABILITY = 0.464
P_TYPE_STABILITY = 1.60
P_TYPE_MARGIN = 1.5

PLACEMENTS = ("circumbinary", "around_primary", "around_secondary")


def _titius_bode_slots(pack: RulePack, min_au: float, limit_au: float) -> list[float]:
    law = pack.titius_bode_law
    slots = []
    for n in law.sequence:
        power = 0.0 if n == TITIUS_BODE_ZERO_POWER else law.c**n
        au = law.a + law.b * power
        if min_au < au < limit_au:
            slots.append(au)
    return slots


def _geometric_slots(rng: SeededRNG, min_au: float, limit_au: float) -> list[float]:
    current = max(min_au, MIN_SLOT_FLOOR_AU)
    slots = []
    while current < limit_au and len(slots) < MAX_GEOMETRIC_SLOTS:
        slots.append(current)
        current *= rng.uniform(*GEOMETRIC_GROWTH)
    return slots


def calculate_orbital_slots(
    star: CelestialBody, pack: RulePack, rng: SeededRNG, num_bodies: int
) -> list[float]:
    """Choose semi-major axes for ``num_bodies`` planets around a star.

    Algorithm:
    1. Bound the usable range by the minimum safe orbit and the system limit
    2. Generate candidate radii from the Titius-Bode law (a + b*c^n) when the
       rulepack supplies one, otherwise grow geometrically from the minimum
    3. Shuffle and truncate to the wanted count so some slots stay empty
    4. Sort ascending (archetype selection depends on frost-line distance)
    5. Jitter every slot independently by up to +/- jitter

    Args:
        star: Primary the slots orbit
        pack: Rulepack (optional ``titius_bode_law``)
        rng: Random source
        num_bodies: Wanted number of slots

    Returns:
        Ascending list of semi-major axes in AU (may be shorter than asked)
    """
    if num_bodies <= 0:
        return []

    min_au = minimum_orbit_au(star)
    limit_au = system_limit_au(star)

    if pack.titius_bode_law is not None:
        candidates = _titius_bode_slots(pack, min_au, limit_au)
        jitter = pack.titius_bode_law.jitter
    else:
        candidates = _geometric_slots(rng, min_au, limit_au)
        jitter = DEFAULT_JITTER

    rng.shuffle(candidates)
    slots = sorted(candidates[:num_bodies])
    slots = [au * (1 + rng.uniform(-jitter, jitter)) for au in slots]
    logger.debug(f"Slots around {star.id}: {', '.join(f'{au:.3f}' for au in slots)}")
    return slots


def binary_critical_radii(
    star_a: CelestialBody, star_b: CelestialBody, separation_au: float
) -> tuple[float, float, float]:
    """Stability limits of a binary pair.

    Returns:
        (max S-type radius around A, max S-type radius around B,
        min P-type radius around the barycenter), all in AU
    """
    total = star_a.mass_kg + star_b.mass_kg
    mu = star_b.mass_kg / total if total > 0 else 0.5
    return (
        S_TYPE_STABILITY * (1 - mu) * separation_au,
        S_TYPE_STABILITY * mu * separation_au,
        P_TYPE_STABILITY * separation_au,
    )


def binary_placement_options(
    star_a: CelestialBody, star_b: CelestialBody, separation_au: float
) -> list[str]:
    """Planet placements that can hold a stable orbit in this binary.

    Circumbinary orbits need room between the P-type limit (with margin) and
    the primary's system limit; S-type orbits need the critical radius around
    the star to exceed its minimum safe orbit. Tight pairs therefore favour
    circumbinary planets and wide pairs favour circumstellar ones.
    """
    around_a, around_b, circumbinary = binary_critical_radii(star_a, star_b, separation_au)
    options = []
    if circumbinary * P_TYPE_MARGIN < system_limit_au(star_a):
        options.append("circumbinary")
    if around_a > minimum_orbit_au(star_a):
        options.append("around_primary")
    if around_b > minimum_orbit_au(star_b):
        options.append("around_secondary")
    return options
