"""Physical constants and generation defaults."""

# Physical constants (SI unless noted)
G = 6.67430e-11  # Gravitational constant (m^3 kg^-1 s^-2)
STEFAN_BOLTZMANN = 5.670374419e-8  # W m^-2 K^-4
GAS_CONSTANT = 8.314462618  # J mol^-1 K^-1
AU_KM = 149_597_870.7
AU_M = AU_KM * 1000
SOLAR_MASS_KG = 1.989e30
SOLAR_RADIUS_KM = 696_340
SOLAR_TEMP_K = 5778
EARTH_MASS_KG = 5.972e24
EARTH_RADIUS_KM = 6371
EARTH_GRAVITY = 9.80665  # m/s^2
SECONDS_PER_DAY = 86_400

# Radiation
RADIATION_UNSHIELDED_DOSE_MSV_YR = 500  # Dose from 1 unit of flux with no shielding
RADIATION_BACKGROUND_MSV_YR = 2.0  # Crustal/cosmic background on planets and moons
PHOTON_FRACTION = 0.9
DEFAULT_GAS_SHIELDING = 0.5

# Thermal model
DEFAULT_ALBEDO = 0.3
RADIOGENIC_HEAT_K = 10.0
TIDAL_HEATING_CONSTANT = 4.06e-6
DENSE_ATMOSPHERE_BAR = 1000.0  # Above this the greenhouse reference level is clamped
CLOUD_TOP_REFERENCE_BAR = 1.0

# Liquids a hydrosphere can be made of, with melt/boil points at ~1 bar (K)
LIQUIDS = {
    "water": (273.0, 373.0),
    "ammonia": (195.0, 240.0),
    "methane": (90.0, 112.0),
}
HYDROSPHERE_COMPOSITIONS = tuple(LIQUIDS)

# Generation defaults (overridable from rulepack generation_parameters)
FROST_LINE_BASE_AU = 2.7
PLANET_MIGRATION_CHANCE = 0.1
TERRESTRIAL_MAGNETIC_FIELD_CHANCE = 0.8
TERRESTRIAL_MIN_MASS_FOR_ATMOSPHERE = 0.1  # Earth masses
ATMOSPHERE_RETENTION_FACTOR = 100.0
HYDROSPHERE_CHANCE = 0.6
CHTHONIAN_MIN_AGE_GYR = 5.0
CHTHONIAN_MAX_DISTANCE_AU = 0.1
STRIPPING_RADIATION_FLUX = 50.0
STRIPPING_TEMPERATURE_K = 1000.0
DANGER_ZONE_MULTIPLIER = 5.0
DEFAULT_JITTER = 0.1
MAX_MOONS = 30
MOON_MASS_CAP = 0.05  # Fraction of parent mass
MOON_RADIUS_CAP = 0.5  # Fraction of parent radius
SYSTEM_AGE_RANGE_GYR = (0.1, 10.0)
