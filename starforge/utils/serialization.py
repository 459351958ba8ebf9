"""System serialization to/from JSON.

Systems are stored as system metadata plus a flat node list; the tree is
rebuilt from each node's ``parent_id``. Unknown keys are ignored on load so
older or richer documents still open.
"""

import dataclasses
import json
import logging
from pathlib import Path
from typing import Any

from ..models import (
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
    System,
)

logger = logging.getLogger(__name__)

STATE_DIR = Path(__file__).parent.parent.parent / "state"


def _resolve(filepath: str | Path) -> Path:
    path = Path(filepath)
    if not path.is_absolute():
        path = STATE_DIR / filepath
    return path


def save_system(system: System, filepath: str | Path) -> Path:
    """Save a system to a JSON file.

    Args:
        system: System to save
        filepath: Path to save file (will be created in /state directory if relative)

    Returns:
        The path written

    Example:
        save_system(system, "sol.json")  # Saves to state/sol.json
    """
    path = _resolve(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        json.dump(system_to_dict(system), f, indent=2)

    logger.info(f"Saved system {system.id} ({len(system.nodes)} nodes) to {path}")
    return path


def load_system(filepath: str | Path) -> System:
    """Load a system from a JSON file.

    Args:
        filepath: Path to saved system (relative paths resolve under /state)

    Returns:
        Loaded System

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If JSON is invalid or malformed
    """
    path = _resolve(filepath)
    with open(path) as f:
        data = json.load(f)

    system = system_from_dict(data)
    logger.info(f"Loaded system {system.id} ({len(system.nodes)} nodes) from {path}")
    return system


def system_to_dict(system: System) -> dict[str, Any]:
    """Convert a System to a JSON-compatible dictionary."""
    return {
        "id": system.id,
        "name": system.name,
        "seed": system.seed,
        "age_gyr": system.age_gyr,
        "epoch_t0": system.epoch_t0,
        "rulepack_id": system.rulepack_id,
        "rulepack_version": system.rulepack_version,
        "tags": list(system.tags),
        "toytown_factor": system.toytown_factor,
        "is_manually_edited": system.is_manually_edited,
        "edit_counter": system.edit_counter,
        "nodes": [node_to_dict(node) for node in system.nodes.values()],
    }


def system_from_dict(data: dict[str, Any]) -> System:
    """Reconstruct a System from a dictionary.

    Raises:
        ValueError: If required keys are missing or a node is malformed
    """
    try:
        system = System(
            id=data["id"],
            name=data["name"],
            seed=data["seed"],
            age_gyr=data["age_gyr"],
            epoch_t0=data.get("epoch_t0", 0.0),
            rulepack_id=data.get("rulepack_id", ""),
            rulepack_version=data.get("rulepack_version", ""),
            tags=data.get("tags", []),
            toytown_factor=data.get("toytown_factor", 0.0),
            is_manually_edited=data.get("is_manually_edited", False),
            edit_counter=data.get("edit_counter", 0),
        )
    except KeyError as e:
        raise ValueError(f"System document is missing {e}") from e

    for node_data in data.get("nodes", []):
        system.add(node_from_dict(node_data))
    return system


def node_to_dict(node: Node) -> dict[str, Any]:
    """Convert a body or barycenter to a dictionary tagged with its kind."""
    data = dataclasses.asdict(node)
    data["kind"] = node.kind
    return data


def node_from_dict(data: dict[str, Any]) -> Node:
    """Reconstruct a body or barycenter from a dictionary.

    Raises:
        ValueError: If the kind is unknown or a required field is missing
    """
    kind = data.get("kind", "body")
    if kind == "barycenter":
        fields = _known_fields(Barycenter, data)
        fields["orbit"] = _orbit_from_dict(data.get("orbit"))
        return _build(Barycenter, fields)
    if kind != "body":
        raise ValueError(f"Unknown node kind: {kind}")

    fields = _known_fields(CelestialBody, data)
    fields["orbit"] = _orbit_from_dict(data.get("orbit"))
    fields["atmosphere"] = _build(Atmosphere, _known_fields(Atmosphere, data.get("atmosphere") or {}))
    fields["hydrosphere"] = _build(Hydrosphere, _known_fields(Hydrosphere, data.get("hydrosphere") or {}))
    fields["magnetic_field"] = _build(
        MagneticField, _known_fields(MagneticField, data.get("magnetic_field") or {})
    )
    if data.get("biosphere"):
        fields["biosphere"] = _build(Biosphere, _known_fields(Biosphere, data["biosphere"]))
    if data.get("orbital_boundaries"):
        fields["orbital_boundaries"] = _build(
            OrbitalBoundaries, _known_fields(OrbitalBoundaries, data["orbital_boundaries"])
        )
    return _build(CelestialBody, fields)


def _orbit_from_dict(data: dict[str, Any] | None) -> Orbit | None:
    if not data:
        return None
    fields = _known_fields(Orbit, data)
    fields["elements"] = _build(OrbitalElements, _known_fields(OrbitalElements, data.get("elements") or {}))
    return _build(Orbit, fields)


def _known_fields(cls: type, data: dict[str, Any]) -> dict[str, Any]:
    names = {f.name for f in dataclasses.fields(cls)}
    return {key: value for key, value in data.items() if key in names}


def _build(cls: type, fields: dict[str, Any]):
    try:
        return cls(**fields)
    except TypeError as e:
        raise ValueError(f"Malformed {cls.__name__}: {e}") from e
