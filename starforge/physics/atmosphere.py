"""Atmosphere composition, molar mass, greenhouse warming and scale height."""

import logging
import math

from ..models import Atmosphere, AtmosphereDefinition, CelestialBody, RulePack
from ..utils.constants import CLOUD_TOP_REFERENCE_BAR, DENSE_ATMOSPHERE_BAR, GAS_CONSTANT
from ..utils.rng import SeededRNG
from ..utils.tables import weighted_choice

logger = logging.getLogger(__name__)

DEFAULT_MOLAR_MASS_KG = 0.028
TRACE_GAS = "Other Trace"

# Greenhouse warming per unit fraction, used when no definition matches (K)
FALLBACK_GREENHOUSE_FACTORS = {
    "CO2": 10.0,
    "CH4": 25.0,
    "H2O": 20.0,
    "NH3": 15.0,
    "SO2": 15.0,
}


def normalize_composition(
    ranges: dict[str, tuple[float, float]], rng: SeededRNG
) -> dict[str, float]:
    """Draw a concrete fraction for each gas and renormalize to sum to 1.

    Args:
        ranges: Gas -> (min, max) fraction
        rng: Random source (one draw per gas, in document order)

    Returns:
        Gas -> fraction, summing to 1 (empty if every draw was zero)
    """
    drawn = {gas: rng.uniform(low, high) for gas, (low, high) in ranges.items()}
    total = sum(drawn.values())
    if total <= 0:
        return {}
    return {gas: value / total for gas, value in drawn.items()}


def main_gas(composition: dict[str, float]) -> str | None:
    if not composition:
        return None
    return max(composition.items(), key=lambda item: item[1])[0]


def molar_mass_kg(atmosphere: Atmosphere, pack: RulePack) -> float:
    """Fraction-weighted mean molar mass (kg/mol)."""
    total = 0.0
    for gas, fraction in atmosphere.composition.items():
        molar_mass = pack.molar_mass_of(gas)
        if molar_mass is None:
            molar_mass = pack.molar_mass_of(TRACE_GAS) or DEFAULT_MOLAR_MASS_KG
        total += fraction * molar_mass
    return total


def greenhouse_effect_k(atmosphere: Atmosphere, pack: RulePack) -> float:
    """Greenhouse warming of an atmosphere (K).

    When the atmosphere matches a rulepack definition, that definition's
    warming is scaled by actual/nominal pressure, damped logarithmically past
    10x. Pressures above 1000 bar are read at the 1 bar cloud-top reference
    level. Unmatched atmospheres use per-gas fallback factors.
    """
    if not atmosphere.is_present:
        return 0.0

    definition = pack.find_atmosphere(atmosphere.name)
    if definition is not None and definition.greenhouse_effect_k:
        return max(0.0, _scaled_definition_greenhouse(atmosphere.pressure_bar, definition))

    total_factor = 0.0
    for gas, fraction in atmosphere.composition.items():
        factor = FALLBACK_GREENHOUSE_FACTORS.get(gas, FALLBACK_GREENHOUSE_FACTORS.get(gas.upper(), 0.0))
        total_factor += factor * fraction

    pressure = _reference_pressure(atmosphere.pressure_bar)
    if pressure < 0.01:
        warming = total_factor * pressure
    else:
        warming = total_factor * pressure**0.7
    if pressure > 0.1:
        warming += math.log10(pressure) * 5
    return max(0.0, warming)


def _reference_pressure(pressure_bar: float) -> float:
    if pressure_bar > DENSE_ATMOSPHERE_BAR:
        return CLOUD_TOP_REFERENCE_BAR
    return pressure_bar


def _scaled_definition_greenhouse(pressure_bar: float, definition: AtmosphereDefinition) -> float:
    nominal = definition.nominal_pressure_bar or 1.0
    if nominal <= 0:
        nominal = 1.0
    ratio = _reference_pressure(pressure_bar) / nominal
    if ratio > 10:
        ratio = 10 + math.log10(ratio / 10) * 10
    return definition.greenhouse_effect_k * ratio


def scale_height_km(atmosphere: Atmosphere, temperature_k: float, gravity_ms2: float) -> float | None:
    """Isothermal scale height H = R*T / (M*g) in km."""
    molar_mass = atmosphere.molar_mass_kg
    if not atmosphere.is_present or not molar_mass or gravity_ms2 <= 0 or temperature_k <= 0:
        return None
    return GAS_CONSTANT * temperature_k / (molar_mass * gravity_ms2) / 1000


def recalculate_atmosphere_properties(body: CelestialBody, pack: RulePack) -> None:
    """Refresh every atmosphere-derived field on a body in place.

    Expects ``equilibrium_temp_k`` and ``surface_gravity_ms2`` to be current.
    """
    atmosphere = body.atmosphere
    if not atmosphere.is_present:
        body.greenhouse_temp_k = 0.0
        atmosphere.main = None
        atmosphere.scale_height_km = None
        return

    atmosphere.main = main_gas(atmosphere.composition)
    atmosphere.molar_mass_kg = molar_mass_kg(atmosphere, pack)
    body.greenhouse_temp_k = greenhouse_effect_k(atmosphere, pack)
    surface_temp = (body.equilibrium_temp_k or 0.0) + body.greenhouse_temp_k
    atmosphere.scale_height_km = scale_height_km(
        atmosphere, surface_temp, body.surface_gravity_ms2 or 0.0
    )


def atmosphere_from_definition(
    definition: AtmosphereDefinition, rng: SeededRNG, pack: RulePack
) -> Atmosphere:
    """Instantiate a concrete atmosphere from a rulepack definition.

    Pressure comes from the definition's own range, else the
    ``atmosphere_pressure_bar`` table, else 1 bar.
    """
    composition = normalize_composition(definition.composition, rng)
    if definition.pressure_range_bar:
        pressure = rng.uniform(*definition.pressure_range_bar)
    else:
        pressure_table = pack.table("atmosphere_pressure_bar")
        if pressure_table:
            low, high = weighted_choice(rng, pressure_table)
            pressure = rng.uniform(low, high)
        else:
            pressure = 1.0
    atmosphere = Atmosphere(
        name=definition.name,
        composition=composition,
        pressure_bar=pressure,
        main=main_gas(composition),
        tags=list(definition.tags),
    )
    atmosphere.molar_mass_kg = molar_mass_kg(atmosphere, pack)
    logger.debug(f"Atmosphere {definition.name} at {pressure:.3g} bar")
    return atmosphere
