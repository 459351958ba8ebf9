"""Tests for rule-based classification."""

import pytest

from starforge.engine import BASE_ARCHETYPES, build_feature_vector, classify_body, evaluate_expr
from starforge.models import (
    Atmosphere,
    CelestialBody,
    Gt,
    HasTag,
    Hydrosphere,
    Lt,
    Orbit,
    OrbitalElements,
    RulePack,
    System,
    load_starter_rulepack,
    parse_expr,
)
from starforge.utils.constants import EARTH_MASS_KG, EARTH_RADIUS_KM, G, SOLAR_MASS_KG


def make_system(mass_earths: float, radius_earths: float, a_au: float = 1.0) -> tuple[System, CelestialBody]:
    system = System(id="c", name="C", seed="c", age_gyr=4.6)
    system.add(CelestialBody(id="star", name="Sun", parent_id=None, role_hint="star", mass_kg=SOLAR_MASS_KG))
    body = CelestialBody(
        id="planet",
        name="Planet",
        parent_id="star",
        role_hint="planet",
        mass_kg=mass_earths * EARTH_MASS_KG,
        radius_km=radius_earths * EARTH_RADIUS_KM,
        orbit=Orbit(host_id="star", host_mu=G * SOLAR_MASS_KG, elements=OrbitalElements(a_au=a_au)),
    )
    system.add(body)
    return system, body


def pack_with_rules(rules: list[dict], **classifier) -> RulePack:
    return RulePack.model_validate(
        {"id": "rules", "version": "1", "classifier": {"rules": rules, **classifier}}
    )


class TestEvaluateExpr:
    """Test expression evaluation."""

    def test_missing_feature_is_false(self):
        """Comparisons on absent features are false, never errors."""
        assert not evaluate_expr(Gt("atm.pressure_bar", 0), {}, [])
        assert not evaluate_expr(Lt("atm.pressure_bar", 10), {}, [])

    def test_non_numeric_feature_is_false(self):
        """Comparisons on strings are false."""
        assert not evaluate_expr(Gt("atm.main", 0), {"atm.main": "CO2"}, [])

    def test_eq_on_strings(self):
        """eq compares any value and needs the key present."""
        expr = parse_expr({"eq": ["atm.main", "CO2"]})
        assert evaluate_expr(expr, {"atm.main": "CO2"}, [])
        assert not evaluate_expr(expr, {}, [])

    def test_tags_and_negation(self):
        """hasTag reads the body's tags; not inverts."""
        expr = parse_expr({"not": {"hasTag": "Stripped"}})
        assert evaluate_expr(expr, {}, [])
        assert not evaluate_expr(expr, {}, ["Stripped"])
        assert evaluate_expr(HasTag("Stripped"), {}, ["Stripped"])

    def test_between_inclusive(self):
        """between includes both bounds."""
        expr = parse_expr({"between": ["x", 1, 2]})
        assert evaluate_expr(expr, {"x": 1}, [])
        assert evaluate_expr(expr, {"x": 2}, [])
        assert not evaluate_expr(expr, {"x": 2.01}, [])

    def test_unknown_node(self):
        """Anything that is not an expression node is rejected."""
        with pytest.raises(TypeError, match="Unknown expression node"):
            evaluate_expr("gt", {}, [])


class TestFeatureVector:
    """Test build_feature_vector."""

    def test_basic_features(self):
        """Mass, radius, density and distance are in Earth/AU units."""
        system, body = make_system(1.0, 1.0)
        features = build_feature_vector(body, system)
        assert features["mass_Me"] == pytest.approx(1.0)
        assert features["radius_Re"] == pytest.approx(1.0)
        assert features["density"] == pytest.approx(5.5, rel=0.01)
        assert features["a_AU"] == 1.0
        assert features["age_Gyr"] == 4.6
        assert features["has_ring_child"] == 0

    def test_atmosphere_features_only_when_present(self):
        """atm.* keys appear only for a present atmosphere."""
        system, body = make_system(1.0, 1.0)
        assert "atm.main" not in build_feature_vector(body, system)

        body.atmosphere = Atmosphere(name="x", composition={"CO2": 0.9, "N2": 0.1}, pressure_bar=2.0, main="CO2")
        features = build_feature_vector(body, system)
        assert features["atm.main"] == "CO2"
        assert features["atm.pressure_bar"] == 2.0
        assert features["atm.composition.CO2"] == 0.9

    def test_hydrosphere_features(self):
        """hydrosphere.* keys appear only with surface liquid."""
        system, body = make_system(1.0, 1.0)
        body.hydrosphere = Hydrosphere(coverage=0.7, composition="water")
        features = build_feature_vector(body, system)
        assert features["hydrosphere.coverage"] == 0.7
        assert features["hydrosphere.composition"] == "water"


class TestClassifyBody:
    """Test classify_body."""

    def test_no_classifier(self):
        """Packs without a classifier produce no classes."""
        system, body = make_system(1.0, 1.0)
        pack = RulePack(id="p", version="1")
        assert classify_body(body, build_feature_vector(body, system), pack, system) == []

    def test_scores_accumulate(self):
        """Several matching rules for one class add up past the threshold."""
        system, body = make_system(1.0, 1.0)
        pack = pack_with_rules(
            [
                {"when": {"gt": ["mass_Me", 0.5]}, "addClass": "planet/wet", "score": 6},
                {"when": {"lt": ["mass_Me", 2]}, "addClass": "planet/wet", "score": 6},
                {"when": {"lt": ["mass_Me", 2]}, "addClass": "planet/weak", "score": 6},
            ]
        )
        classes = classify_body(body, build_feature_vector(body, system), pack, system)
        assert "planet/wet" in classes
        assert "planet/weak" not in classes

    def test_single_base_archetype(self):
        """Only the best-scoring base archetype is kept; modifiers stay."""
        system, body = make_system(1.0, 1.0)
        pack = pack_with_rules(
            [
                {"when": {"gt": ["mass_Me", 0]}, "addClass": "planet/terrestrial", "score": 20},
                {"when": {"gt": ["mass_Me", 0]}, "addClass": "planet/super-earth", "score": 30},
                {"when": {"gt": ["mass_Me", 0]}, "addClass": "planet/cratered", "score": 15},
            ]
        )
        classes = classify_body(body, build_feature_vector(body, system), pack, system)
        assert classes == ["planet/super-earth", "planet/cratered"]
        assert sum(1 for cls in classes if cls in BASE_ARCHETYPES) == 1

    def test_max_classes(self):
        """The list is capped at maxClasses."""
        system, body = make_system(1.0, 1.0)
        rules = [
            {"when": {"gt": ["mass_Me", 0]}, "addClass": f"planet/mod-{i}", "score": 10 + i}
            for i in range(5)
        ]
        pack = pack_with_rules(rules, maxClasses=2)
        classes = classify_body(body, build_feature_vector(body, system), pack, system)
        assert classes == ["planet/mod-4", "planet/mod-3"]

    @pytest.mark.parametrize("mass,expected", [(0.5, "planet/terrestrial"), (50.0, "planet/gas-giant")])
    def test_fallback(self, mass, expected):
        """Bodies no rule fits fall back on mass."""
        system, body = make_system(mass, 1.0)
        pack = pack_with_rules([{"when": {"hasTag": "never"}, "addClass": "planet/x", "score": 99}])
        assert classify_body(body, build_feature_vector(body, system), pack, system) == [expected]

    def test_ring_child_is_read_live(self):
        """has_ring_child reflects the ring currently in the system."""
        system, body = make_system(300.0, 11.0, a_au=5.2)
        pack = pack_with_rules(
            [{"when": {"eq": ["has_ring_child", 1]}, "addClass": "planet/ringed", "score": 10}]
        )
        features = build_feature_vector(body, system)
        system.add(CelestialBody(id="ring", name="Ring", parent_id="planet", role_hint="ring"))
        assert "planet/ringed" in classify_body(body, features, pack, system)

    def test_starter_pack_earth(self):
        """The starter classifier labels an Earth-sized rock terrestrial."""
        system, body = make_system(1.0, 1.0)
        pack = load_starter_rulepack()
        classes = classify_body(body, build_feature_vector(body, system), pack, system)
        assert classes[0] == "planet/terrestrial"
