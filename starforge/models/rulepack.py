"""RulePack: the data-driven configuration consumed by generation and physics.

A rulepack is treated as an opaque, versioned document. Only the fields the
engine needs are modelled; unknown keys are ignored and absent optional
fields fall back to the defaults in ``starforge.utils.constants``.
"""

import json
import logging
from importlib import resources
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator, model_validator

from .expressions import Expr, parse_expr

logger = logging.getLogger(__name__)

STARTER_RULEPACK = "starter.json"


class WeightedEntry(BaseModel):
    """One row of a weighted-choice table."""

    weight: float = Field(ge=0, description="Relative weight")
    value: Any = Field(description="Value returned when this row is chosen")


class TableSpec(BaseModel):
    """Named weighted-choice distribution."""

    model_config = ConfigDict(extra="ignore")

    name: str = ""
    entries: list[WeightedEntry] = Field(default_factory=list)


class AtmosphereDefinition(BaseModel):
    """An atmosphere archetype a body may receive."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str | None = Field(default=None, description="Stable key used by editing operations")
    name: str
    occurs_on: str = Field(
        default="both", description="\"terrestrial\", \"gas giants\" or \"both\""
    )
    mass_range_earths: tuple[float, float] | None = None
    temp_range_k: tuple[float, float] | None = Field(default=None, alias="temp_range_K")
    pressure_range_bar: tuple[float, float] | None = None
    tidally_locked: bool | None = Field(
        default=None, description="Required tidal-lock state (None = either)"
    )
    composition: dict[str, tuple[float, float]] = Field(
        default_factory=dict, description="Gas -> (min, max) fraction before normalisation"
    )
    greenhouse_effect_k: float = Field(default=0.0, alias="greenhouse_effect_K")
    tags: list[str] = Field(default_factory=list)

    @property
    def nominal_pressure_bar(self) -> float | None:
        if not self.pressure_range_bar:
            return None
        low, high = self.pressure_range_bar
        return (low + high) / 2


class GasPhysics(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    molar_mass: float | None = Field(default=None, alias="molarMass")
    shielding: float | None = None
    greenhouse: float | None = None


class LiquidDef(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str
    melt_k: float = Field(alias="meltK")
    boil_k: float = Field(alias="boilK")


class TitiusBodeLaw(BaseModel):
    """Parameters for a + b * c**n slot placement (n == -999 means c**n == 0)."""

    a: float
    b: float
    c: float
    sequence: list[int]
    jitter: float = 0.1


class ClassifierRule(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    when: Any = Field(description="Parsed condition expression")
    add_class: str = Field(alias="addClass")
    score: float

    @field_validator("when", mode="before")
    @classmethod
    def parse_when(cls, v: Any) -> Expr:
        """Parse the JSON condition into an expression tree."""
        return parse_expr(v)


class ClassifierSpec(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    rules: list[ClassifierRule] = Field(default_factory=list)
    max_classes: int = Field(default=3, alias="maxClasses")
    min_score: float = Field(default=10, alias="minScore")


class RulePack(BaseModel):
    """Versioned generation and physics configuration."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    version: str
    name: str = ""
    distributions: dict[str, TableSpec] = Field(default_factory=dict)
    stat_templates: dict[str, dict[str, list[float]]] = Field(
        default_factory=dict, alias="statTemplates"
    )
    generation_parameters: dict[str, float] = Field(default_factory=dict)
    gas_molar_masses_kg: dict[str, float] = Field(default_factory=dict, alias="gasMolarMassesKg")
    gas_shielding: dict[str, float] = Field(default_factory=dict, alias="gasShielding")
    gas_physics: dict[str, GasPhysics] = Field(default_factory=dict, alias="gasPhysics")
    liquids: list[LiquidDef] | None = None
    orbital_constants: dict[str, float] = Field(default_factory=dict, alias="orbitalConstants")
    titius_bode_law: TitiusBodeLaw | None = None
    classifier: ClassifierSpec | None = None

    _atmospheres: list[tuple[float, AtmosphereDefinition]] = PrivateAttr(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def lift_titius_bode(cls, data: Any) -> Any:
        """Accept Titius-Bode parameters stored among the distributions."""
        if isinstance(data, dict):
            distributions = data.get("distributions")
            if isinstance(distributions, dict) and "titius_bode_law" in distributions:
                data = dict(data)
                distributions = dict(distributions)
                data.setdefault("titius_bode_law", distributions.pop("titius_bode_law"))
                data["distributions"] = distributions
        return data

    def model_post_init(self, __context: Any) -> None:
        table = self.distributions.get("atmosphere_composition")
        if table is None:
            return
        for entry in table.entries:
            self._atmospheres.append((entry.weight, AtmosphereDefinition.model_validate(entry.value)))

    def table(self, name: str) -> list[WeightedEntry]:
        """Entries of a named distribution, or an empty list when absent."""
        table_spec = self.distributions.get(name)
        return table_spec.entries if table_spec else []

    def param(self, name: str, default: float) -> float:
        return self.generation_parameters.get(name, default)

    def template_range(
        self, template_id: str, key: str, default: tuple[float, float] | None = None
    ) -> tuple[float, float] | None:
        """Look up a (min, max) range on a statistical template."""
        values = self.stat_templates.get(template_id, {}).get(key)
        if not values or len(values) < 2:
            return default
        return values[0], values[1]

    @property
    def atmosphere_definitions(self) -> list[tuple[float, AtmosphereDefinition]]:
        """(weight, definition) pairs from the atmosphere_composition table."""
        return self._atmospheres

    def find_atmosphere(self, name: str) -> AtmosphereDefinition | None:
        for _, definition in self._atmospheres:
            if definition.name == name:
                return definition
        return None

    def find_atmosphere_by_id(self, atmosphere_id: str) -> AtmosphereDefinition | None:
        for _, definition in self._atmospheres:
            if definition.id == atmosphere_id:
                return definition
        return None

    def molar_mass_of(self, gas: str) -> float | None:
        physics = self.gas_physics.get(gas)
        if physics and physics.molar_mass is not None:
            return physics.molar_mass
        return self.gas_molar_masses_kg.get(gas)

    def shielding_of(self, gas: str) -> float | None:
        physics = self.gas_physics.get(gas)
        if physics and physics.shielding is not None:
            return physics.shielding
        return self.gas_shielding.get(gas)

    def liquid_ranges(self) -> dict[str, tuple[float, float]] | None:
        if not self.liquids:
            return None
        return {liquid.name: (liquid.melt_k, liquid.boil_k) for liquid in self.liquids}


def load_rulepack(filepath: str | Path) -> RulePack:
    """Load a rulepack from a JSON file.

    Args:
        filepath: Path to the rulepack document

    Returns:
        Parsed RulePack

    Raises:
        FileNotFoundError: If the file does not exist
        pydantic.ValidationError: If the document is structurally invalid
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"Rulepack not found: {filepath}")

    with open(filepath) as f:
        data = json.load(f)

    pack = RulePack.model_validate(data)
    logger.info(f"Loaded rulepack {pack.id} v{pack.version} from {filepath}")
    return pack


def load_starter_rulepack() -> RulePack:
    """Load the rulepack bundled with the package."""
    text = resources.files("starforge.rulepacks").joinpath(STARTER_RULEPACK).read_text()
    pack = RulePack.model_validate(json.loads(text))
    logger.debug(f"Loaded bundled rulepack {pack.id} v{pack.version}")
    return pack
