"""Surface radiation and atmosphere retention."""

import math

from ..models import CelestialBody, RulePack, System
from ..utils.constants import (
    ATMOSPHERE_RETENTION_FACTOR,
    DEFAULT_GAS_SHIELDING,
    PHOTON_FRACTION,
    RADIATION_BACKGROUND_MSV_YR,
    RADIATION_UNSHIELDED_DOSE_MSV_YR,
)
from .temperature import distance_to_star_au


def total_stellar_radiation(body: CelestialBody, system: System) -> float:
    """Sum of radiation_output / d^2 over every star (Earth at 1 AU from the Sun = 1)."""
    total = 0.0
    for star in system.stars():
        if star.id == body.id:
            continue
        distance_au = distance_to_star_au(body, star, system)
        if distance_au > 0:
            total += (star.radiation_output or 1.0) / distance_au**2
    return total


def magnetic_deflection(strength_gauss: float) -> float:
    """Fraction of charged particles deflected by a magnetosphere."""
    if strength_gauss <= 0:
        return 0.0
    return min(0.99, (math.log10(strength_gauss + 0.01) + 2) / 3)


def atmospheric_transmission(body: CelestialBody, pack: RulePack) -> float:
    """Fraction of radiation reaching the surface through the atmosphere."""
    atmosphere = body.atmosphere
    if not atmosphere.is_present:
        return 1.0

    total_shielding = 0.0
    total_gas = 0.0
    for gas, fraction in atmosphere.composition.items():
        coefficient = pack.shielding_of(gas)
        if coefficient is None:
            coefficient = DEFAULT_GAS_SHIELDING
        total_shielding += coefficient * fraction
        total_gas += fraction
    if total_gas <= 0:
        return 1.0
    return math.exp(-(total_shielding / total_gas) * atmosphere.pressure_bar)


def calculate_surface_radiation(body: CelestialBody, system: System, pack: RulePack) -> float:
    """Compute the surface dose of a body and store the breakdown on it.

    Incoming flux is split into photons (90%) and particles (10%). The
    magnetosphere deflects part of the particles, then the atmosphere
    attenuates both. Planets and moons also receive a fixed crustal
    background dose.

    Args:
        body: Body to evaluate (its radiation fields are updated)
        system: System supplying the stars
        pack: Rulepack supplying per-gas shielding coefficients

    Returns:
        Surface dose in mSv/yr
    """
    flux = total_stellar_radiation(body, system)
    body.stellar_radiation = flux

    deflection = magnetic_deflection(body.magnetic_field.strength_gauss)
    transmission = atmospheric_transmission(body, pack)
    body.radiation_shielding_mag = deflection
    body.radiation_shielding_atmo = 1 - transmission

    photons = flux * PHOTON_FRACTION * transmission
    particles = flux * (1 - PHOTON_FRACTION) * (1 - deflection) * transmission
    body.photon_radiation = photons * RADIATION_UNSHIELDED_DOSE_MSV_YR
    body.particle_radiation = particles * RADIATION_UNSHIELDED_DOSE_MSV_YR

    background = RADIATION_BACKGROUND_MSV_YR if body.is_planet_or_moon else 0.0
    body.surface_radiation = max(0.0, (photons + particles) * RADIATION_UNSHIELDED_DOSE_MSV_YR + background)
    return body.surface_radiation


def retains_atmosphere(body: CelestialBody, system: System, pack: RulePack) -> bool:
    """Whether the magnetosphere outweighs the stellar wind (informational only)."""
    factor = pack.param("atmosphere_retention_factor", ATMOSPHERE_RETENTION_FACTOR)
    return body.magnetic_field.strength_gauss * factor > total_stellar_radiation(body, system)
