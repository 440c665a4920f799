"""
Tests for schema.py - search document and seed validation.
"""

import json

import pytest

from relatedfeed.schema import validate_result, validate_seed


class TestValidateResult:
    """Test validation of a single search document."""

    def test_valid_document(self):
        assert validate_result({"resourceType": "authorizable", "path": "bob"}) == []

    def test_resource_type_is_optional(self):
        """Test that a document with only a path is valid."""
        assert validate_result({"path": "/p/1"}) == []

    def test_missing_path(self):
        """Test that a missing path is reported."""
        errors = validate_result({"resourceType": "authorizable"})
        assert "Missing required field: path" in errors

    def test_blank_path(self):
        """Test that a whitespace-only path is reported."""
        errors = validate_result({"path": "   "})
        assert any("path" in e for e in errors)

    def test_non_string_resource_type(self):
        """Test that a numeric resourceType is reported."""
        errors = validate_result({"path": "bob", "resourceType": 3})
        assert any("resourceType" in e for e in errors)

    def test_non_object(self):
        """Test that a document that is not an object is reported."""
        assert validate_result(["bob"]) != []


class TestValidateSeed:
    """Test validation of a directory seed."""

    def test_valid_seed(self, seed_file):
        """Test that the shared seed file validates cleanly."""
        assert validate_seed(json.loads(seed_file.read_text())) == []

    def test_empty_seed_is_valid(self):
        assert validate_seed({}) == []

    def test_bad_account(self):
        """Test that an unknown kind and a non-string email are both reported."""
        errors = validate_seed({"accounts": [{"id": "bob", "kind": "robot", "email": 5}]})
        assert len(errors) == 2

    def test_bad_membership(self):
        """Test that a membership without a member is reported."""
        errors = validate_seed({"memberships": [{"group": "g-1"}]})
        assert errors == ["memberships[0]: field 'member' must be a non-empty string"]

    def test_bad_connection_state(self):
        """Test that an unknown connection state is reported."""
        errors = validate_seed({"connections": [{"owner": "a", "target": "b", "state": "FRIENDS"}]})
        assert errors == ["connections[0]: unknown state 'FRIENDS'"]

    def test_non_object(self):
        """Test that a seed that is not an object is reported."""
        assert validate_seed([]) == ["Seed must be a JSON object"]

    @pytest.mark.parametrize("section", ["accounts", "memberships", "connections"])
    def test_non_object_entries_are_reported(self, section):
        """Test that bare strings in a section are reported instead of crashing."""
        errors = validate_seed({section: ["bob"]})
        assert errors == [f"{section}[0]: must be an object"]

    @pytest.mark.parametrize("value", ["bob", {"id": "bob"}, 3])
    def test_non_list_sections_are_reported(self, value):
        """Test that a section that is not a list is reported."""
        errors = validate_seed({"accounts": value, "memberships": [], "connections": []})
        assert errors == ["Field 'accounts' must be a list"]

    def test_unhashable_kind_and_state_are_reported(self):
        """Test that list-valued kind and state are reported as unknown values."""
        errors = validate_seed({
            "accounts": [{"id": "bob", "kind": ["user"]}],
            "connections": [{"owner": "a", "target": "b", "state": ["ACCEPTED"]}],
        })
        assert errors == [
            "accounts[0]: unknown kind ['user']",
            "connections[0]: unknown state ['ACCEPTED']",
        ]

    def test_valid_entries_after_bad_ones_are_still_checked(self):
        """Test that a bad entry does not stop validation of later ones."""
        errors = validate_seed({"accounts": ["bob", {"id": ""}]})
        assert errors == [
            "accounts[0]: must be an object",
            "accounts[1]: field 'id' must be a non-empty string",
        ]
