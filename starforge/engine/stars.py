"""Star and binary-pair setup for a new system."""

import logging
import math
from dataclasses import dataclass, field

from ..models import Barycenter, CelestialBody, MagneticField, Node, Orbit, OrbitalElements, RulePack
from ..utils.constants import AU_M, SOLAR_MASS_KG, SOLAR_RADIUS_KM, SOLAR_TEMP_K, G
from ..utils.rng import SeededRNG
from ..utils.tables import weighted_choice
from .body_factory import BodyCreationConfig, BodyFactory

logger = logging.getLogger(__name__)

DEFAULT_STAR_CLASS = "star/G"
ACCRETION_DISK_CLASS = "ring/accretion_disk"
ACTIVE_BLACK_HOLE_CLASS = "star/BH_active"

# Spectral classes by binary-fraction bucket
MASSIVE_CLASSES = ("O", "B")
SUNLIKE_CLASSES = ("A", "F", "G", "K")


@dataclass
class StarSetup:
    """Stars (and barycenter) created for a system, plus naming."""

    nodes: list[Node] = field(default_factory=list)
    root: Node | None = None
    system_name: str = ""
    is_binary: bool = False
    star_a: CelestialBody | None = None
    star_b: CelestialBody | None = None


def parse_star_choice(choice: str | None) -> tuple[str | None, bool | None]:
    """Turn a UI choice like "Type M Binary" into ("star/M", True).

    Returns (None, None) for no choice or "Random".
    """
    if not choice or choice == "Random":
        return None, None
    force_binary = choice.endswith(" Binary")
    star_class = choice.removesuffix(" Binary").replace("Type ", "star/", 1)
    return star_class, force_binary


def generate_star(
    node_id: str,
    parent_id: str | None,
    pack: RulePack,
    rng: SeededRNG,
    factory: BodyFactory,
    star_class: str | None = None,
) -> CelestialBody:
    """Generate one star from its spectral-class template.

    The name is left empty; the caller names stars from system context.

    Args:
        node_id: ID for the star
        parent_id: Barycenter ID, or None for a single-star root
        pack: Rulepack with ``star_types`` and ``star/<class>`` templates
        rng: Random source
        factory: Body factory
        star_class: Explicit class such as "star/M" (drawn when None)

    Returns:
        Star body
    """
    if star_class is None:
        star_types = pack.table("star_types")
        star_class = weighted_choice(rng, star_types) if star_types else DEFAULT_STAR_CLASS

    template_id = star_class if star_class in pack.stat_templates else "star/default"
    if template_id not in pack.stat_templates:
        logger.warning(f"No template for {star_class}; using solar values")

    star = factory.create_body(
        BodyCreationConfig(node_id=node_id, name="", role_hint="star", parent_id=parent_id)
    )
    star.classes = [star_class]
    star.archetype = star_class

    mass_range = pack.template_range(template_id, "mass_solar")
    radius_range = pack.template_range(template_id, "radius_solar")
    temp_range = pack.template_range(template_id, "temp_k")
    star.mass_kg = rng.uniform(*mass_range) * SOLAR_MASS_KG if mass_range else SOLAR_MASS_KG
    star.radius_km = rng.uniform(*radius_range) * SOLAR_RADIUS_KM if radius_range else SOLAR_RADIUS_KM
    star.temperature_k = rng.uniform(*temp_range) if temp_range else SOLAR_TEMP_K

    mag_range = pack.template_range(template_id, "mag_gauss")
    if mag_range:
        star.magnetic_field = MagneticField(strength_gauss=rng.uniform(*mag_range))
    radiation_range = pack.template_range(template_id, "radiation_output")
    star.radiation_output = rng.uniform(*radiation_range) if radiation_range else 1.0
    return star


def _base_name(seed: str, pack: RulePack, rng: SeededRNG) -> str:
    prefixes = pack.table("star_name_prefix")
    digit_counts = pack.table("star_name_number_digits")
    if not prefixes or not digit_counts:
        return f"System {seed}"
    prefix = weighted_choice(rng, prefixes)
    digits = int(weighted_choice(rng, digit_counts))
    return prefix + "".join(str(rng.next_int(0, 9)) for _ in range(digits))


def _binary_table(star_class: str) -> str:
    letter = star_class.split("/", 1)[-1]
    if letter in MASSIVE_CLASSES:
        return "is_binary_chance_massive"
    if letter in SUNLIKE_CLASSES:
        return "is_binary_chance_sunlike"
    return "is_binary_chance_lowmass"


def _accretion_disk(star: CelestialBody, rng: SeededRNG, factory: BodyFactory) -> CelestialBody:
    disk = factory.create_body(
        BodyCreationConfig(
            node_id=f"{star.id}-accretion-disk",
            name=f"{star.name} Accretion Disk",
            role_hint="ring",
            parent_id=star.id,
        )
    )
    disk.classes = [ACCRETION_DISK_CLASS]
    disk.radius_inner_km = star.radius_km * 1.1
    disk.radius_outer_km = star.radius_km * rng.uniform(5, 20)
    return disk


def setup_stars(
    seed: str,
    pack: RulePack,
    rng: SeededRNG,
    factory: BodyFactory,
    star_choice: str | None = None,
    epoch_t0: float = 0.0,
) -> StarSetup:
    """Create the root star, or a barycenter with two stars.

    Algorithm:
    1. Draw a base name (prefix + digits) and the primary's spectral class
    2. Decide binarity from the class bucket's table (or the explicit choice)
    3. For a binary, draw the total separation, compute the shared mean motion
       n = sqrt(G*M / a^3) and place each star at a * m_other / M, half an
       orbit apart
    4. Give an active black hole primary an accretion disk

    Args:
        seed: System seed (used for ids)
        pack: Rulepack
        rng: Random source
        factory: Body factory
        star_choice: Optional override such as "Type G" or "Type M Binary"
        epoch_t0: Epoch for the stars' orbits

    Returns:
        StarSetup with nodes in insertion order
    """
    base_name = _base_name(seed, pack, rng)
    star_class, force_binary = parse_star_choice(star_choice)

    star_a = generate_star(f"{seed}-star-a", None, pack, rng, factory, star_class)
    primary_class = star_a.classes[0]

    if force_binary is None:
        table = pack.table(_binary_table(primary_class))
        is_binary = bool(weighted_choice(rng, table)) if table else False
    else:
        is_binary = force_binary

    setup = StarSetup(is_binary=is_binary, star_a=star_a)

    if not is_binary:
        star_a.name = base_name
        setup.nodes.append(star_a)
        setup.root = star_a
        setup.system_name = base_name
    else:
        barycenter_id = f"{seed}-barycenter-0"
        barycenter = Barycenter(
            id=barycenter_id,
            name=f"{base_name} System Barycenter",
            parent_id=None,
            member_ids=[star_a.id],
        )
        star_a.parent_id = barycenter_id
        star_a.name = f"{base_name} A"

        star_b = generate_star(f"{seed}-star-b", barycenter_id, pack, rng, factory)
        star_b.name = f"{base_name} B"
        barycenter.member_ids.append(star_b.id)

        m1, m2 = star_a.mass_kg, star_b.mass_kg
        total_mass = m1 + m2
        barycenter.effective_mass_kg = total_mass

        separation_table = pack.table("binary_star_separation_au")
        low, high = weighted_choice(rng, separation_table) if separation_table else (1.0, 50.0)
        separation_au = rng.uniform(low, high)
        n = math.sqrt(G * total_mass / (separation_au * AU_M) ** 3)
        barycenter.separation_au = separation_au
        barycenter.mean_motion_rad_s = n

        for star, other_mass, mean_anomaly in ((star_a, m2, 0.0), (star_b, m1, math.pi)):
            star.orbit = Orbit(
                host_id=barycenter_id,
                host_mu=G * total_mass,
                t0=epoch_t0,
                mean_motion_rad_s=n,
                elements=OrbitalElements(
                    a_au=separation_au * other_mass / total_mass, mean_anomaly_rad=mean_anomaly
                ),
            )

        setup.nodes.extend([barycenter, star_a, star_b])
        setup.root = barycenter
        setup.system_name = f"{base_name} System"
        setup.star_b = star_b
        logger.debug(f"Binary {primary_class}+{star_b.classes[0]} separated by {separation_au:.3f} AU")

    if primary_class == ACTIVE_BLACK_HOLE_CLASS:
        setup.nodes.append(_accretion_disk(star_a, rng, factory))

    return setup
