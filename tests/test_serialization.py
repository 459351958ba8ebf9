"""Tests for system save/load."""

import json
import tempfile
from pathlib import Path

import pytest

from starforge.engine import generate_system, rename_node
from starforge.models import Barycenter, CelestialBody, load_starter_rulepack
from starforge.utils.serialization import (
    load_system,
    node_from_dict,
    node_to_dict,
    save_system,
    system_from_dict,
    system_to_dict,
)

PACK = load_starter_rulepack()


class TestSaveLoad:
    """Test saving and loading systems."""

    def test_file_round_trip(self):
        """A saved system loads back identical."""
        system = generate_system("saved", PACK)
        with tempfile.TemporaryDirectory() as tmpdir:
            path = save_system(system, Path(tmpdir) / "saved.json")
            assert path.exists()
            loaded = load_system(path)
        assert system_to_dict(loaded) == system_to_dict(system)

    def test_binary_round_trip(self):
        """Barycenters and their members survive a round trip."""
        system = generate_system("saved-binary", PACK, star_choice="Type M Binary")
        loaded = system_from_dict(json.loads(json.dumps(system_to_dict(system))))
        root = loaded.root()
        assert isinstance(root, Barycenter)
        assert root.member_ids == system.root().member_ids
        assert all(isinstance(loaded.get(member), CelestialBody) for member in root.member_ids)

    def test_edit_state_preserved(self):
        """Edit counters and user-defined names are saved."""
        system = rename_node(generate_system("saved-edit", PACK), "saved-edit-star-a", "Renamed")
        loaded = system_from_dict(system_to_dict(system))
        assert loaded.edit_counter == 1
        assert loaded.is_manually_edited
        assert loaded.get_body("saved-edit-star-a").name_user_defined

    def test_missing_file(self):
        """Loading a missing file raises FileNotFoundError."""
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(FileNotFoundError):
                load_system(Path(tmpdir) / "missing.json")


class TestMalformedDocuments:
    """Test rejection of malformed input."""

    def test_missing_system_key(self):
        """Documents without core system keys are rejected."""
        with pytest.raises(ValueError, match="System document is missing"):
            system_from_dict({"id": "x", "name": "x"})

    def test_unknown_kind(self):
        """Nodes of an unknown kind are rejected."""
        with pytest.raises(ValueError, match="Unknown node kind"):
            node_from_dict({"kind": "comet", "id": "c"})

    def test_missing_node_field(self):
        """Bodies missing required fields are rejected."""
        with pytest.raises(ValueError, match="Malformed CelestialBody"):
            node_from_dict({"kind": "body", "name": "No id"})

    def test_duplicate_ids(self):
        """Two nodes with one id are rejected."""
        node = node_to_dict(CelestialBody(id="a", name="A", parent_id=None, role_hint="star"))
        data = {"id": "s", "name": "S", "seed": "s", "age_gyr": 1.0, "nodes": [node, node]}
        with pytest.raises(ValueError, match="Duplicate node id"):
            system_from_dict(data)

    def test_unknown_keys_ignored(self):
        """Extra keys from richer documents are ignored."""
        data = node_to_dict(CelestialBody(id="a", name="A", parent_id=None, role_hint="star"))
        data["future_field"] = 42
        node = node_from_dict(data)
        assert node.id == "a"

    def test_invalid_values(self):
        """Field validation still applies on load."""
        data = node_to_dict(CelestialBody(id="a", name="A", parent_id=None, role_hint="star"))
        data["atmosphere"]["pressure_bar"] = -1
        with pytest.raises(ValueError, match="Invalid pressure"):
            node_from_dict(data)
