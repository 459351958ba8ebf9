"""Flight dynamics: orbital altitude bands and delta-v budgets."""

import math
from dataclasses import dataclass

from ..models import CelestialBody, OrbitalBoundaries, RulePack
from ..utils.constants import GAS_CONSTANT, G

DEFAULT_NO_ATMOSPHERE_LEO_KM = 30.0
DEFAULT_LEO_MEO_BOUNDARY_KM = 2000.0
DEFAULT_MEO_HEO_BOUNDARY_KM = 50000.0
TARGET_ORBITAL_PRESSURE_PA = 1e-4
NEGLIGIBLE_ATMOSPHERE_PA = 1.0
MICRO_SYSTEM_THRESHOLD_KM = 1000.0


@dataclass
class PlanetData:
    """Inputs for orbital-boundary calculation."""

    gravity: float  # m/s^2
    surface_temp_k: float
    molar_mass_kg: float
    surface_pressure_pa: float
    mass_kg: float
    rotation_period_s: float
    distance_to_host_km: float
    host_mass_kg: float
    radius_km: float | None = None


def calculate_orbital_boundaries(planet: PlanetData, pack: RulePack) -> OrbitalBoundaries:
    """Derive LEO/MEO/HEO altitude bands and the synchronous orbit.

    The upper bound is the Hill sphere. The lowest orbit sits where the
    atmosphere thins to a target pressure, or at a fixed altitude for airless
    bodies. Bodies whose sphere of influence is smaller than the micro-system
    threshold collapse into a single low-orbit band.

    Args:
        planet: Physical inputs
        pack: Rulepack whose ``orbitalConstants`` may override the defaults

    Returns:
        OrbitalBoundaries, altitudes in km above the surface
    """
    constants = pack.orbital_constants
    no_atmo_leo_km = constants.get("DEFAULT_NO_ATMOSPHERE_LEO_KM", DEFAULT_NO_ATMOSPHERE_LEO_KM)
    leo_meo_km = constants.get("DEFAULT_LEO_MEO_BOUNDARY_KM", DEFAULT_LEO_MEO_BOUNDARY_KM)
    meo_heo_default_km = constants.get("DEFAULT_MEO_HEO_BOUNDARY_KM", DEFAULT_MEO_HEO_BOUNDARY_KM)
    target_pressure_pa = constants.get("TARGET_ORBITAL_PRESSURE_PA", TARGET_ORBITAL_PRESSURE_PA)
    negligible_pa = constants.get("NEGLIGIBLE_ATMOSPHERE_PA", NEGLIGIBLE_ATMOSPHERE_PA)
    micro_threshold_km = constants.get("MICRO_SYSTEM_THRESHOLD_KM", MICRO_SYSTEM_THRESHOLD_KM)

    radius_km = planet.radius_km
    if not radius_km:
        radius_km = math.sqrt(G * planet.mass_kg / planet.gravity) / 1000

    if planet.host_mass_kg > 0:
        soi_km = planet.distance_to_host_km * (planet.mass_kg / (3 * planet.host_mass_kg)) ** (1 / 3)
    else:
        soi_km = planet.distance_to_host_km * 0.01
    heo_upper_km = max(0.1, soi_km - radius_km)

    if planet.surface_pressure_pa < negligible_pa:
        min_leo_km = min(no_atmo_leo_km, heo_upper_km * 0.2)
    else:
        scale_height_m = GAS_CONSTANT * planet.surface_temp_k / (planet.molar_mass_kg * planet.gravity)
        pressure_ratio = planet.surface_pressure_pa / target_pressure_pa
        altitude_m = scale_height_m * math.log(pressure_ratio) if pressure_ratio > 1 else 0.0
        min_leo_km = altitude_m / 1000
    if min_leo_km >= heo_upper_km:
        min_leo_km = heo_upper_km * 0.9

    if heo_upper_km < micro_threshold_km:
        return OrbitalBoundaries(
            min_leo_km=min_leo_km,
            leo_meo_boundary_km=heo_upper_km,
            meo_heo_boundary_km=heo_upper_km,
            heo_upper_boundary_km=heo_upper_km,
            geostationary_km=None,
            is_geo_fallback=True,
        )

    leo_meo_boundary_km = min_leo_km + leo_meo_km if min_leo_km >= leo_meo_km else leo_meo_km
    leo_meo_boundary_km = min(leo_meo_boundary_km, heo_upper_km)

    geo_km = None
    period = abs(planet.rotation_period_s)
    if period > 0:
        geo_radius_m = (G * planet.mass_kg * period**2 / (4 * math.pi**2)) ** (1 / 3)
        geo_km = geo_radius_m / 1000 - radius_km

    if geo_km is None or geo_km < min_leo_km or geo_km > heo_upper_km:
        geo_km = None
        is_geo_fallback = True
        meo_heo_boundary_km = meo_heo_default_km
    else:
        is_geo_fallback = False
        meo_heo_boundary_km = geo_km

    leo_meo_boundary_km = max(min_leo_km, min(leo_meo_boundary_km, heo_upper_km))
    meo_heo_boundary_km = max(leo_meo_boundary_km, min(meo_heo_boundary_km, heo_upper_km))
    return OrbitalBoundaries(
        min_leo_km=min_leo_km,
        leo_meo_boundary_km=leo_meo_boundary_km,
        meo_heo_boundary_km=meo_heo_boundary_km,
        heo_upper_boundary_km=heo_upper_km,
        geostationary_km=geo_km,
        is_geo_fallback=is_geo_fallback,
    )


def calculate_delta_v_budgets(body: CelestialBody) -> None:
    """Set ascent and landing delta-v budgets (m/s) on a planet or moon.

    Non-surface bodies get -1 for every budget; aerobraking is -1 on
    effectively airless bodies.
    """
    if not body.is_planet_or_moon:
        body.lo_delta_v_ms = -1.0
        body.propulsive_land_delta_v_ms = -1.0
        body.aerobrake_land_delta_v_ms = -1.0
        return
    if not body.surface_gravity_ms2 or not body.radius_km:
        return

    pressure_bar = body.atmosphere.pressure_bar
    v_orbit = math.sqrt(body.surface_gravity_ms2 * body.radius_km * 1000)
    pressure_penalty = math.log10(pressure_bar) * 0.1 if pressure_bar > 1 else 0.0
    gravity_loss = v_orbit * (0.15 + pressure_penalty)
    drag_loss = 1300 * pressure_bar**0.6 if pressure_bar > 0.001 else 0.0

    body.lo_delta_v_ms = v_orbit + gravity_loss + drag_loss
    body.propulsive_land_delta_v_ms = v_orbit + gravity_loss
    if pressure_bar < 0.001:
        body.aerobrake_land_delta_v_ms = -1.0
    else:
        body.aerobrake_land_delta_v_ms = 150 + 1000 * math.exp(-0.5 * pressure_bar) + 50
