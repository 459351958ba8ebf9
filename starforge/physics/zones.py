"""Stellar zone calculations: condensation lines, habitable and kill zones."""

import math
from dataclasses import dataclass

from ..models import CelestialBody, RulePack
from ..utils.constants import (
    AU_KM,
    DANGER_ZONE_MULTIPLIER,
    SOLAR_RADIUS_KM,
    SOLAR_TEMP_K,
    STEFAN_BOLTZMANN,
)

SOLAR_LUMINOSITY_W = (
    4 * math.pi * (SOLAR_RADIUS_KM * 1000) ** 2 * STEFAN_BOLTZMANN * SOLAR_TEMP_K**4
)

# UV output relative to a G star, by spectral class
UV_FACTORS = {
    "O": 100.0,
    "B": 50.0,
    "A": 10.0,
    "F": 5.0,
    "G": 1.0,
    "K": 0.5,
    "M": 0.1,
}

# Kopparapu et al. (2013) effective-flux coefficients: (S0, a, b, c, d)
HZ_INNER_COEFFS = (1.107, 1.332e-4, 1.58e-8, -8.308e-12, -1.931e-15)
HZ_OUTER_COEFFS = (0.356, 6.171e-5, 1.698e-9, -3.198e-12, -5.575e-16)

# Condensation temperatures (K)
SILICATE_LINE_K = 1400
SOOT_LINE_K = 500
FROST_LINE_K = 170
CO2_ICE_LINE_K = 70
CO_ICE_LINE_K = 30

ROCHE_SATELLITE_DENSITY = 3000.0  # kg/m^3


@dataclass
class StellarZones:
    """Characteristic distances around one star (AU)."""

    kill_zone: float  # Inside this nothing survives
    danger_zone: float
    goldilocks_inner: float
    goldilocks_outer: float
    roche_limit: float
    silicate_line: float
    soot_line: float
    frost_line: float
    co2_ice_line: float
    co_ice_line: float
    system_limit: float  # Outer edge for planet placement


def star_temperature(star: CelestialBody) -> float:
    return star.temperature_k or SOLAR_TEMP_K


def star_radius_km(star: CelestialBody) -> float:
    return star.radius_km or SOLAR_RADIUS_KM


def luminosity_watts(star: CelestialBody) -> float:
    """Blackbody luminosity 4*pi*R^2*sigma*T^4 (W)."""
    radius_m = star_radius_km(star) * 1000
    return 4 * math.pi * radius_m**2 * STEFAN_BOLTZMANN * star_temperature(star) ** 4


def luminosity_solar(star: CelestialBody) -> float:
    return luminosity_watts(star) / SOLAR_LUMINOSITY_W


def distance_for_temperature_au(star: CelestialBody, temp_k: float) -> float:
    """Distance at which a blackbody reaches ``temp_k`` (no albedo)."""
    if temp_k <= 0:
        return math.inf
    return star_radius_km(star) * (star_temperature(star) / temp_k) ** 2 / 2 / AU_KM


def roche_limit_km(
    primary_radius_km: float, primary_mass_kg: float, satellite_density: float
) -> float:
    """Rigid-body Roche limit 2.44 * R * (rho_primary / rho_satellite)^(1/3)."""
    if primary_radius_km <= 0 or satellite_density <= 0:
        return 0.0
    radius_m = primary_radius_km * 1000
    primary_density = primary_mass_kg / (4 / 3 * math.pi * radius_m**3)
    return 2.44 * primary_radius_km * (primary_density / satellite_density) ** (1 / 3)


def hill_radius_km(body_mass_kg: float, host_mass_kg: float, a_km: float, e: float = 0.0) -> float:
    if host_mass_kg <= 0 or body_mass_kg <= 0:
        return 0.0
    return a_km * (1 - e) * (body_mass_kg / (3 * host_mass_kg)) ** (1 / 3)


def kill_zone_au(star: CelestialBody) -> float:
    uv_factor = UV_FACTORS.get((star.spectral_class or "G")[:1], 1.0)
    return 0.1 * math.sqrt(uv_factor * (star.radiation_output or 1.0) * luminosity_solar(star))


def goldilocks_zone_au(star: CelestialBody) -> tuple[float, float]:
    """Conservative habitable zone (inner, outer) in AU."""
    t_star = min(max(star_temperature(star), 2600), 7200) - 5780
    luminosity = luminosity_solar(star)

    def seff(coeffs: tuple[float, ...]) -> float:
        s0, a, b, c, d = coeffs
        return s0 + a * t_star + b * t_star**2 + c * t_star**3 + d * t_star**4

    return math.sqrt(luminosity / seff(HZ_INNER_COEFFS)), math.sqrt(
        luminosity / seff(HZ_OUTER_COEFFS)
    )


def minimum_orbit_au(star: CelestialBody) -> float:
    """Innermost safe planetary orbit: 1.2 x max(Roche estimate, soot line)."""
    roche_au = star.radius_km * 2.44 / AU_KM
    soot_au = (star.radius_km / 2) * (star_temperature(star) / 1800) ** 2 / AU_KM
    return max(roche_au, soot_au) * 1.2


def system_limit_au(star: CelestialBody) -> float:
    return distance_for_temperature_au(star, CO_ICE_LINE_K) * 2


def calculate_stellar_zones(star: CelestialBody, pack: RulePack | None = None) -> StellarZones:
    """Compute all characteristic distances for a star.

    Args:
        star: Star body (temperature and radius default to solar values)
        pack: Optional rulepack supplying ``danger_zone_multiplier``

    Returns:
        StellarZones in AU
    """
    multiplier = pack.param("danger_zone_multiplier", DANGER_ZONE_MULTIPLIER) if pack else DANGER_ZONE_MULTIPLIER
    kill = kill_zone_au(star)
    inner, outer = goldilocks_zone_au(star)
    roche = roche_limit_km(star_radius_km(star), star.mass_kg, ROCHE_SATELLITE_DENSITY) / AU_KM
    return StellarZones(
        kill_zone=kill,
        danger_zone=kill * multiplier,
        goldilocks_inner=inner,
        goldilocks_outer=outer,
        roche_limit=roche,
        silicate_line=distance_for_temperature_au(star, SILICATE_LINE_K),
        soot_line=distance_for_temperature_au(star, SOOT_LINE_K),
        frost_line=distance_for_temperature_au(star, FROST_LINE_K),
        co2_ice_line=distance_for_temperature_au(star, CO2_ICE_LINE_K),
        co_ice_line=distance_for_temperature_au(star, CO_ICE_LINE_K),
        system_limit=system_limit_au(star),
    )
