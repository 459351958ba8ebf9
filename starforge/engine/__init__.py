"""Generation, classification, processing and editing engine."""

from .body_factory import BodyCreationConfig, BodyFactory
from .classification import BASE_ARCHETYPES, build_feature_vector, classify_body, evaluate_expr
from .editing import (
    EditError,
    add_habitable_planet,
    add_planetary_body,
    delete_node,
    rename_node,
    valid_planet_types,
)
from .generator import GenerationOptions, generate_system
from .processor import SystemProcessor

__all__ = [
    "BodyCreationConfig",
    "BodyFactory",
    "BASE_ARCHETYPES",
    "build_feature_vector",
    "classify_body",
    "evaluate_expr",
    "EditError",
    "add_habitable_planet",
    "add_planetary_body",
    "delete_node",
    "rename_node",
    "valid_planet_types",
    "GenerationOptions",
    "generate_system",
    "SystemProcessor",
]
