"""Multi-pass physics processor for an existing node graph."""

import logging
import math

from ..models import CelestialBody, RulePack, System
from ..physics.atmosphere import molar_mass_kg, recalculate_atmosphere_properties
from ..physics.flight import PlanetData, calculate_delta_v_budgets, calculate_orbital_boundaries
from ..physics.habitability import calculate_habitability, generate_biosphere
from ..physics.orbits import orbital_period_days
from ..physics.radiation import calculate_surface_radiation, retains_atmosphere
from ..physics.temperature import equilibrium_temperature, tidal_heating_k, total_temperature
from ..utils.constants import AU_KM, AU_M, RADIOGENIC_HEAT_K, SECONDS_PER_DAY, G
from .classification import build_feature_vector, classify_body
from .planets import receives_radiogenic_heat, tidal_lock_limit_au

logger = logging.getLogger(__name__)

DEFAULT_MOLAR_MASS_KG = 0.028


class SystemProcessor:
    """Recomputes every derived field of a system.

    Passes run in a fixed order, each reading what the previous one wrote:

    0. Barycenters: member mass sum, separation, shared mean motion
    1. Physical basics: orbit host sync, gravity, rotation, period, molar mass
    2. Environment: radiation, temperature components, atmosphere properties
    3. Classification, habitability and biosphere
    4. Flight dynamics: orbital boundaries and delta-v

    The processor never adds or removes nodes. Missing or zero inputs are
    treated as absent rather than raising, so a pass always completes.
    Running it twice on an unchanged system gives the same result.
    """

    def process(self, system: System, pack: RulePack) -> System:
        """Run every pass over ``system`` in place.

        Args:
            system: System to update
            pack: Rulepack for physics lookups and classification

        Returns:
            The same system, for chaining
        """
        self._process_barycenters(system)
        logger.debug(f"Pass 0 complete for {system.id}")

        bodies = system.bodies()
        for body in bodies:
            self._process_physical_basics(body, system, pack)
        for body in bodies:
            self._process_environment(body, system, pack)
        for body in bodies:
            self._process_classification(body, system, pack)
        for body in bodies:
            self._process_flight_dynamics(body, system, pack)

        logger.debug(f"Processed {len(bodies)} bodies in {system.id}")
        return system

    def _process_barycenters(self, system: System) -> None:
        for barycenter in system.barycenters():
            members = [system.get(member_id) for member_id in barycenter.member_ids]
            members = [member for member in members if member is not None]

            total_mass = sum(system.mass_of(member.id) for member in members)
            barycenter.effective_mass_kg = total_mass
            if len(members) < 2:
                logger.warning(f"Barycenter {barycenter.id} has fewer than two live members; no shared orbit")
                barycenter.separation_au = 0.0
                barycenter.mean_motion_rad_s = 0.0
                for member in members:
                    if member.orbit is not None:
                        member.orbit.host_mu = G * total_mass
                        member.orbit.mean_motion_rad_s = None
                continue

            separation_au = sum(member.orbit.elements.a_au for member in members if member.orbit)
            barycenter.separation_au = separation_au
            separation_m = separation_au * AU_M
            n = math.sqrt(G * total_mass / separation_m**3) if separation_m > 0 and total_mass > 0 else 0.0
            barycenter.mean_motion_rad_s = n

            for member in members:
                if member.orbit is None:
                    continue
                if len(members) == 2 and total_mass > 0:
                    other = members[1] if member is members[0] else members[0]
                    member.orbit.elements.a_au = separation_au * system.mass_of(other.id) / total_mass
                member.orbit.host_mu = G * total_mass
                member.orbit.mean_motion_rad_s = n

    def _process_physical_basics(self, body: CelestialBody, system: System, pack: RulePack) -> None:
        if body.mass_kg > 0 and body.radius_km > 0:
            body.surface_gravity_ms2 = G * body.mass_kg / (body.radius_km * 1000) ** 2
        else:
            body.surface_gravity_ms2 = None

        body.rotation_period_s = body.rotation_period_hours * 3600 if body.rotation_period_hours else None

        if body.orbit is not None and body.parent_id is not None:
            host_mass = system.mass_of(body.parent_id)
            body.orbit.host_id = body.parent_id
            body.orbit.host_mu = G * host_mass
            if body.orbit.mean_motion_rad_s:
                # Binary members share the pair's n; equal to Kepler III on the pair's total mass
                body.orbital_period_days = 2 * math.pi / body.orbit.mean_motion_rad_s / SECONDS_PER_DAY
            else:
                body.orbital_period_days = orbital_period_days(body.orbit.elements.a_au, host_mass)
            if body.is_planet_or_moon:
                body.tidally_locked = host_mass > 0 and body.orbit.elements.a_au < tidal_lock_limit_au(host_mass)

        if body.atmosphere.is_present:
            body.atmosphere.molar_mass_kg = molar_mass_kg(body.atmosphere, pack)

    def _process_environment(self, body: CelestialBody, system: System, pack: RulePack) -> None:
        if body.is_star:
            return

        calculate_surface_radiation(body, system, pack)
        body.equilibrium_temp_k = equilibrium_temperature(body, system) if system.stars() else 0.0

        body.tidal_heat_k = 0.0
        if body.role_hint == "moon":
            host = system.get_body(body.parent_id)
            if host is not None:
                body.tidal_heat_k = tidal_heating_k(body, host.mass_kg)

        body.radiogenic_heat_k = (
            pack.param("radiogenic_heat_k", RADIOGENIC_HEAT_K)
            if body.is_planet_or_moon and receives_radiogenic_heat(body)
            else 0.0
        )
        recalculate_atmosphere_properties(body, pack)
        body.temperature_k = total_temperature(body)

        # Stored for display; atmospheres are not stripped on this basis
        body.retains_atmosphere = retains_atmosphere(body, system, pack)

    def _process_classification(self, body: CelestialBody, system: System, pack: RulePack) -> None:
        if not body.is_planet_or_moon:
            return
        features = build_feature_vector(body, system)
        classes = classify_body(body, features, pack, system)
        # No classifier: fall back to the generated archetype
        body.classes = classes or ([body.archetype] if body.archetype else [])
        calculate_habitability(body)
        body.biosphere = generate_biosphere(body, system.seed)

    def _process_flight_dynamics(self, body: CelestialBody, system: System, pack: RulePack) -> None:
        host = system.get(body.parent_id)
        if (
            host is not None
            and body.surface_gravity_ms2
            and body.temperature_k is not None
            and body.mass_kg > 0
            and body.rotation_period_s is not None
        ):
            atmosphere = body.atmosphere
            planet = PlanetData(
                gravity=body.surface_gravity_ms2,
                surface_temp_k=body.temperature_k,
                molar_mass_kg=atmosphere.molar_mass_kg or DEFAULT_MOLAR_MASS_KG,
                surface_pressure_pa=atmosphere.pressure_bar * 100_000,
                mass_kg=body.mass_kg,
                rotation_period_s=body.rotation_period_s,
                distance_to_host_km=(body.orbit.elements.a_au if body.orbit else 0.0) * AU_KM,
                host_mass_kg=system.mass_of(host.id),
                radius_km=body.radius_km or None,
            )
            body.orbital_boundaries = calculate_orbital_boundaries(planet, pack)

        calculate_delta_v_budgets(body)
