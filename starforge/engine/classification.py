"""Rule-based taxonomy classification of planets and moons."""

from typing import Any

from ..models import (
    AllOf,
    AnyOf,
    Between,
    CelestialBody,
    Eq,
    Expr,
    Gt,
    HasTag,
    Lt,
    Not,
    RulePack,
    System,
)
from ..utils.constants import EARTH_MASS_KG, EARTH_RADIUS_KM

# Mutually exclusive classes: a body keeps at most one of these
BASE_ARCHETYPES = frozenset(
    {
        "planet/terrestrial",
        "planet/gas-giant",
        "planet/ice-giant",
        "planet/dwarf-planet",
        "planet/super-earth",
        "planet/mini-neptune",
        "planet/hot-jupiter",
        "planet/cold-jupiter",
        "planet/warm-jupiter",
        "planet/cloudless-gas-giant",
        "planet/ammonia-clouds-gas-giant",
        "planet/water-clouds-gas-giant",
        "planet/silicate-clouds-gas-giant",
        "planet/alkali-metal-clouds-gas-giant",
        "planet/protoplanet",
        "planet/brown-dwarf",
        "planet/rogue",
    }
)

DEFAULT_MAX_CLASSES = 3
DEFAULT_MIN_SCORE = 10.0

Features = dict[str, Any]


def _number(value: Any) -> float | None:
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    return None


def evaluate_expr(expr: Expr, features: Features, tags: list[str]) -> bool:
    """Evaluate a rule expression against a feature vector and tag list.

    Comparisons on a missing or non-numeric feature are false.
    """
    if isinstance(expr, AllOf):
        return all(evaluate_expr(item, features, tags) for item in expr.items)
    if isinstance(expr, AnyOf):
        return any(evaluate_expr(item, features, tags) for item in expr.items)
    if isinstance(expr, Not):
        return not evaluate_expr(expr.item, features, tags)
    if isinstance(expr, Gt):
        value = _number(features.get(expr.feature))
        return value is not None and value > expr.value
    if isinstance(expr, Lt):
        value = _number(features.get(expr.feature))
        return value is not None and value < expr.value
    if isinstance(expr, Between):
        value = _number(features.get(expr.feature))
        return value is not None and expr.low <= value <= expr.high
    if isinstance(expr, Eq):
        return expr.feature in features and features[expr.feature] == expr.value
    if isinstance(expr, HasTag):
        return expr.tag in tags
    raise TypeError(f"Unknown expression node: {expr!r}")


def has_ring_child(body: CelestialBody, system: System) -> bool:
    return any(
        isinstance(child, CelestialBody) and child.role_hint == "ring"
        for child in system.children(body.id)
    )


def build_feature_vector(body: CelestialBody, system: System) -> Features:
    """Collect the classifier inputs for a body from its current fields.

    Args:
        body: Planet or moon
        system: Owning system (for age and ring children)

    Returns:
        Feature name -> number or string
    """
    radius_m = body.radius_km * 1000
    density = body.mass_kg / (4 / 3 * 3.141592653589793 * radius_m**3) / 1000 if radius_m > 0 else 0.0
    features: Features = {
        "id": body.id,
        "mass_Me": body.mass_kg / EARTH_MASS_KG,
        "radius_Re": body.radius_km / EARTH_RADIUS_KM,
        "density": density,  # g/cm^3
        "a_AU": body.orbit.elements.a_au if body.orbit else 0.0,
        "radiation_flux": body.surface_radiation or 0.0,
        "stellar_flux": body.stellar_radiation or 0.0,
        "tidalHeating": body.tidal_heat_k or 0.0,
        "Teq_K": body.temperature_k or 0.0,
        "equilibrium_K": body.equilibrium_temp_k or 0.0,
        "orbital_period_days": body.orbital_period_days or 0.0,
        "rotation_period_hours": body.rotation_period_hours or 0.0,
        "tidallyLocked": 1 if body.tidally_locked else 0,
        "age_Gyr": system.age_gyr,
        "has_ring_child": 1 if has_ring_child(body, system) else 0,
    }

    atmosphere = body.atmosphere
    if atmosphere.is_present:
        features["atm.main"] = atmosphere.main
        features["atm.pressure_bar"] = atmosphere.pressure_bar
        for gas, fraction in atmosphere.composition.items():
            features[f"atm.composition.{gas}"] = fraction

    if body.hydrosphere.coverage > 0:
        features["hydrosphere.coverage"] = body.hydrosphere.coverage
        features["hydrosphere.composition"] = body.hydrosphere.composition

    return features


def classify_body(
    body: CelestialBody, features: Features, pack: RulePack, system: System
) -> list[str]:
    """Assign taxonomy classes to a body.

    Each matching rule adds its score to its class. Classes at or above the
    minimum score are ranked by score; only the best base archetype is kept,
    while modifier classes are all kept up to the maximum class count. A
    body no rule fits falls back to gas giant (over 10 Earth masses) or
    terrestrial.

    Args:
        body: Body being classified (supplies tags)
        features: Output of build_feature_vector
        pack: Rulepack holding the classifier
        system: Owning system (ring children are looked up live)

    Returns:
        Ordered class list; empty when the pack has no classifier, otherwise
        never empty
    """
    if pack.classifier is None:
        return []

    features["has_ring_child"] = 1 if has_ring_child(body, system) else 0
    max_classes = pack.classifier.max_classes or DEFAULT_MAX_CLASSES
    min_score = pack.classifier.min_score or DEFAULT_MIN_SCORE

    scores: dict[str, float] = {}
    for rule in pack.classifier.rules:
        if evaluate_expr(rule.when, features, body.tags):
            scores[rule.add_class] = scores.get(rule.add_class, 0.0) + rule.score

    ranked = sorted(
        ((cls, score) for cls, score in scores.items() if score >= min_score),
        key=lambda item: item[1],
        reverse=True,
    )

    classes: list[str] = []
    has_base = False
    for cls, _ in ranked:
        if cls in BASE_ARCHETYPES:
            if has_base:
                continue
            has_base = True
        classes.append(cls)
        if len(classes) >= max_classes:
            break

    if not classes:
        classes.append("planet/gas-giant" if features.get("mass_Me", 0) > 10 else "planet/terrestrial")
    return classes
