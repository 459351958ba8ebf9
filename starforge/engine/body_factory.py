"""Factory for default-safe celestial body records."""

from dataclasses import dataclass

from ..models import CelestialBody, RulePack
from ..utils.constants import SOLAR_TEMP_K


@dataclass
class BodyCreationConfig:
    """What a caller must say about a new body; everything else is defaulted."""

    node_id: str
    name: str
    role_hint: str  # "star", "planet", "moon", "belt" or "ring"
    parent_id: str | None
    mass_kg: float | None = None
    radius_km: float | None = None


class BodyFactory:
    """Builds bodies with every optional structure initialised.

    Generated and manually-added bodies both come through here so they share
    one shape: zero mass and radius rather than missing values, an empty
    atmosphere and hydrosphere, no biosphere and empty tag/class lists.
    """

    def create_body(self, config: BodyCreationConfig) -> CelestialBody:
        """Create a body from a creation config.

        Args:
            config: Identity, role and optional mass/radius overrides

        Returns:
            New CelestialBody; stars default to a Sun-like surface temperature
        """
        body = CelestialBody(
            id=config.node_id,
            name=config.name,
            parent_id=config.parent_id,
            role_hint=config.role_hint,
            mass_kg=config.mass_kg or 0.0,
            radius_km=config.radius_km or 0.0,
        )
        if config.role_hint == "star":
            body.temperature_k = SOLAR_TEMP_K
        return body

    def create_from_template(self, template_id: str, pack: RulePack) -> CelestialBody:
        """Instantiate a body from a rulepack template.

        Raises:
            NotImplementedError: Always; template instantiation is not available
        """
        raise NotImplementedError(
            f"Creating bodies from rulepack templates is not implemented (template {template_id})"
        )
