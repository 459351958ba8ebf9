"""Physics models: zones, temperature, atmosphere, radiation, habitability, orbits."""

from .habitability import (
    ViableOrbitResult,
    calculate_habitability,
    find_viable_habitable_orbit,
    generate_biosphere,
)
from .orbits import StateVector, orbital_period_days, position_at, propagate_state, solve_kepler
from .zones import StellarZones, calculate_stellar_zones

__all__ = [
    "ViableOrbitResult",
    "calculate_habitability",
    "find_viable_habitable_orbit",
    "generate_biosphere",
    "StateVector",
    "orbital_period_days",
    "position_at",
    "propagate_state",
    "solve_kepler",
    "StellarZones",
    "calculate_stellar_zones",
]
