"""Data models for starforge."""

from .body import (
    ROLE_HINTS,
    Atmosphere,
    Barycenter,
    Biosphere,
    CelestialBody,
    Hydrosphere,
    MagneticField,
    Node,
    Orbit,
    OrbitalBoundaries,
    OrbitalElements,
)
from .expressions import AllOf, AnyOf, Between, Eq, Expr, Gt, HasTag, Lt, Not, parse_expr
from .rulepack import (
    AtmosphereDefinition,
    RulePack,
    TitiusBodeLaw,
    load_rulepack,
    load_starter_rulepack,
)
from .system import System

__all__ = [
    "ROLE_HINTS",
    "Atmosphere",
    "Barycenter",
    "Biosphere",
    "CelestialBody",
    "Hydrosphere",
    "MagneticField",
    "Node",
    "Orbit",
    "OrbitalBoundaries",
    "OrbitalElements",
    "AllOf",
    "AnyOf",
    "Between",
    "Eq",
    "Expr",
    "Gt",
    "HasTag",
    "Lt",
    "Not",
    "parse_expr",
    "AtmosphereDefinition",
    "RulePack",
    "TitiusBodeLaw",
    "load_rulepack",
    "load_starter_rulepack",
    "System",
]
