"""Celestial body, barycenter and orbit data models."""

from dataclasses import dataclass, field
from typing import ClassVar

from ..utils.constants import HYDROSPHERE_COMPOSITIONS

ROLE_HINTS = ("star", "planet", "moon", "belt", "ring")


@dataclass
class OrbitalElements:
    """Keplerian elements of an orbit around its host.

    Angles are in degrees except the mean anomaly, which is in radians
    because it feeds straight into the Kepler solver.
    """

    a_au: float  # Semi-major axis (AU)
    e: float = 0.0  # Eccentricity, 0 <= e < 1
    inclination_deg: float = 0.0
    arg_periapsis_deg: float = 0.0  # Argument of periapsis (omega)
    ascending_node_deg: float = 0.0  # Longitude of ascending node (Omega)
    mean_anomaly_rad: float = 0.0  # Mean anomaly at epoch t0

    def __post_init__(self):
        """Validate orbital elements after initialization."""
        if self.a_au < 0:
            raise ValueError(f"Invalid semi-major axis: {self.a_au} (must be >= 0)")
        if not (0 <= self.e < 1):
            raise ValueError(f"Invalid eccentricity: {self.e} (must be in [0, 1))")

    @property
    def periapsis_au(self) -> float:
        return self.a_au * (1 - self.e)

    @property
    def apoapsis_au(self) -> float:
        return self.a_au * (1 + self.e)


@dataclass
class Orbit:
    """Orbit of a node around its host.

    ``host_id`` always equals the owning node's ``parent_id``; the processor
    resyncs ``host_mu`` from the live host mass on every run.
    """

    host_id: str  # Parent node ID
    host_mu: float  # G * host mass (m^3/s^2)
    elements: OrbitalElements
    t0: float = 0.0  # Epoch (seconds)
    mean_motion_rad_s: float | None = None  # Precomputed n (binary members)
    retrograde: bool = False


@dataclass
class Atmosphere:
    """Gas envelope of a body. An empty composition means no atmosphere."""

    name: str = "None"
    composition: dict[str, float] = field(default_factory=dict)  # Gas -> fraction (sums to 1)
    pressure_bar: float = 0.0
    main: str | None = None  # Dominant gas
    molar_mass_kg: float | None = None  # Mean molar mass (kg/mol)
    scale_height_km: float | None = None
    tags: list[str] = field(default_factory=list)

    def __post_init__(self):
        """Validate atmosphere data after initialization."""
        if self.pressure_bar < 0:
            raise ValueError(f"Invalid pressure: {self.pressure_bar} (must be >= 0)")

    @property
    def is_present(self) -> bool:
        return self.pressure_bar > 0 and bool(self.composition)


@dataclass
class Hydrosphere:
    """Surface liquid coverage."""

    coverage: float = 0.0  # Fraction of surface, 0-1
    composition: str = "water"  # "water", "ammonia" or "methane"

    def __post_init__(self):
        """Validate hydrosphere data after initialization."""
        if not (0 <= self.coverage <= 1):
            raise ValueError(f"Invalid coverage: {self.coverage} (must be 0-1)")
        if self.composition not in HYDROSPHERE_COMPOSITIONS:
            raise ValueError(
                f"Invalid hydrosphere composition: {self.composition} "
                f"(must be one of {', '.join(HYDROSPHERE_COMPOSITIONS)})"
            )


@dataclass
class Biosphere:
    """Native life on a body."""

    complexity: str  # "simple" (microbial only) or "complex"
    coverage: float  # Fraction of surface, 0-1
    biochemistry: str  # e.g. "water-carbon"
    energy_source: str  # "photosynthesis", "chemosynthesis" or "thermosynthesis"
    morphologies: list[str] = field(default_factory=list)  # "microbial", "flora", "fungal", "fauna"


@dataclass
class MagneticField:
    strength_gauss: float = 0.0


@dataclass
class OrbitalBoundaries:
    """Altitude bands around a body (km above the surface)."""

    min_leo_km: float
    leo_meo_boundary_km: float
    meo_heo_boundary_km: float
    heo_upper_boundary_km: float  # Sphere of influence
    geostationary_km: float | None
    is_geo_fallback: bool = False  # True when the synchronous orbit lies outside the SOI


@dataclass
class CelestialBody:
    """A star, planet, moon, belt or ring.

    Generated and manually-added bodies share this shape. Fields below the
    ``derived`` marker are owned by the SystemProcessor and recomputed on
    every processing pass.
    """

    kind: ClassVar[str] = "body"

    id: str  # Unique node ID
    name: str
    parent_id: str | None  # None only for the root
    role_hint: str  # One of ROLE_HINTS
    mass_kg: float = 0.0
    radius_km: float = 0.0
    orbit: Orbit | None = None
    atmosphere: Atmosphere = field(default_factory=Atmosphere)
    hydrosphere: Hydrosphere = field(default_factory=Hydrosphere)
    biosphere: Biosphere | None = None
    magnetic_field: MagneticField = field(default_factory=MagneticField)
    classes: list[str] = field(default_factory=list)  # Taxonomy, e.g. "planet/terrestrial"
    tags: list[str] = field(default_factory=list)
    archetype: str | None = None  # Generation archetype, e.g. "planet/gas-giant"
    name_user_defined: bool = False  # Set by rename; stops automatic renames
    rotation_period_hours: float = 0.0
    axial_tilt_deg: float = 0.0
    radiation_output: float = 1.0  # Stars: particle/UV output relative to the Sun
    temperature_k: float | None = None  # Stars: surface temp; others: total surface temp
    radius_inner_km: float | None = None  # Rings and belts
    radius_outer_km: float | None = None

    # derived
    surface_gravity_ms2: float | None = None
    rotation_period_s: float | None = None
    orbital_period_days: float | None = None
    tidally_locked: bool = False
    equilibrium_temp_k: float | None = None
    greenhouse_temp_k: float = 0.0
    tidal_heat_k: float = 0.0
    radiogenic_heat_k: float = 0.0
    stellar_radiation: float | None = None  # Summed radiation_output / d^2
    surface_radiation: float | None = None  # mSv/yr
    photon_radiation: float | None = None
    particle_radiation: float | None = None
    radiation_shielding_atmo: float | None = None
    radiation_shielding_mag: float | None = None
    retains_atmosphere: bool | None = None
    habitability_score: float | None = None
    habitability_tier: str | None = None
    orbital_boundaries: OrbitalBoundaries | None = None
    lo_delta_v_ms: float | None = None
    propulsive_land_delta_v_ms: float | None = None
    aerobrake_land_delta_v_ms: float | None = None

    def __post_init__(self):
        """Validate body data after initialization."""
        if not self.id:
            raise ValueError("id cannot be empty")
        if self.role_hint not in ROLE_HINTS:
            raise ValueError(
                f"Invalid role_hint: {self.role_hint} (must be one of {', '.join(ROLE_HINTS)})"
            )
        if self.mass_kg < 0:
            raise ValueError(f"Invalid mass_kg: {self.mass_kg} (must be >= 0)")
        if self.radius_km < 0:
            raise ValueError(f"Invalid radius_km: {self.radius_km} (must be >= 0)")

    @property
    def is_star(self) -> bool:
        return self.role_hint == "star"

    @property
    def is_planet_or_moon(self) -> bool:
        return self.role_hint in ("planet", "moon")

    @property
    def spectral_class(self) -> str | None:
        """Spectral class of a star ("G", "M", "BH_active"...), from its classes."""
        for cls in self.classes:
            if cls.startswith("star/"):
                return cls.split("/", 1)[1]
        return None


@dataclass
class Barycenter:
    """Common center of mass of two or more bodies.

    Member orbits are derived from the barycenter; ``effective_mass_kg`` is
    resynced to the live member sum on every processing pass.
    """

    kind: ClassVar[str] = "barycenter"

    id: str
    name: str
    parent_id: str | None
    member_ids: list[str] = field(default_factory=list)
    effective_mass_kg: float = 0.0
    orbit: Orbit | None = None
    separation_au: float | None = None  # Total separation of a binary pair
    mean_motion_rad_s: float | None = None  # Shared n of the members
    tags: list[str] = field(default_factory=list)

    def __post_init__(self):
        """Validate barycenter data after initialization."""
        if not self.id:
            raise ValueError("id cannot be empty")
        if self.effective_mass_kg < 0:
            raise ValueError(
                f"Invalid effective_mass_kg: {self.effective_mass_kg} (must be >= 0)"
            )


Node = CelestialBody | Barycenter
