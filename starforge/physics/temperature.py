"""Thermal model: stellar flux, equilibrium temperature and internal heating.

Distances between a body and stars on other branches of the tree are
approximated by summing semi-major axes along the tree path rather than
using vector positions. Every lookup scans the node arena, so a full pass is
O(n^2) in the number of nodes.
"""

import math

from ..models import Barycenter, CelestialBody, System
from ..utils.constants import (
    AU_M,
    DEFAULT_ALBEDO,
    STEFAN_BOLTZMANN,
    TIDAL_HEATING_CONSTANT,
)
from .zones import luminosity_watts


def _a_au(node) -> float:
    if node is None or node.orbit is None:
        return 0.0
    return node.orbit.elements.a_au


def distance_to_star_au(body: CelestialBody, star: CelestialBody, system: System) -> float:
    """Effective distance between a body and a star, for flux purposes.

    Handles planets orbiting the star directly, circumbinary (P-type) orbits,
    circumstellar (S-type) orbits receiving light from the companion, and
    moons, which use their planet's distance.

    Args:
        body: Body receiving the light
        star: Star emitting it
        system: System holding both

    Returns:
        Distance in AU, or 0.0 when no path applies
    """
    parent = system.get(body.parent_id)
    if parent is None:
        return 0.0

    if body.parent_id == star.id:
        return _a_au(body)

    if isinstance(parent, Barycenter) and star.parent_id == parent.id:
        return _a_au(body)

    if isinstance(parent, CelestialBody):
        if parent.role_hint == "star" and parent.parent_id:
            barycenter = system.get(parent.parent_id)
            if isinstance(barycenter, Barycenter) and star.parent_id == barycenter.id:
                return _a_au(parent) + _a_au(star)
            return 0.0
        return distance_to_star_au(parent, star, system)

    return 0.0


def stellar_flux_wm2(body: CelestialBody, system: System) -> float:
    """Total bolometric flux reaching a body from every star (W/m^2)."""
    total = 0.0
    for star in system.stars():
        if star.id == body.id:
            continue
        distance_au = distance_to_star_au(body, star, system)
        if distance_au > 0:
            distance_m = distance_au * AU_M
            total += luminosity_watts(star) / (4 * math.pi * distance_m**2)
    return total


def equilibrium_temperature(
    body: CelestialBody, system: System, albedo: float = DEFAULT_ALBEDO
) -> float:
    """Blackbody equilibrium temperature from summed stellar flux (K)."""
    flux = stellar_flux_wm2(body, system)
    if flux <= 0:
        return 0.0
    return (flux * (1 - albedo) / (4 * STEFAN_BOLTZMANN)) ** 0.25


def tidal_heating_k(moon: CelestialBody, host_mass_kg: float) -> float:
    """Empirical tidal heating of a moon (K).

    heating = C * M_host^0.625 * R_moon^0.75 * e^0.5 * a^-1.875, with the
    moon radius and semi-major axis in km. Zero for circular orbits.
    """
    if moon.orbit is None or host_mass_kg <= 0:
        return 0.0
    e = moon.orbit.elements.e
    a_km = moon.orbit.elements.a_au * AU_M / 1000
    radius_km = moon.radius_km
    if e <= 0 or a_km <= 0 or radius_km <= 0:
        return 0.0
    return (
        TIDAL_HEATING_CONSTANT
        * host_mass_kg**0.625
        * radius_km**0.75
        * e**0.5
        * a_km**-1.875
    )


def total_temperature(body: CelestialBody) -> float:
    return (
        (body.equilibrium_temp_k or 0.0)
        + (body.greenhouse_temp_k or 0.0)
        + (body.tidal_heat_k or 0.0)
        + (body.radiogenic_heat_k or 0.0)
    )
