"""
Unit tests for state entry envelopes and key building.
"""

import json
import uuid

import pytest

from statebridge.services.account import Account
from statebridge.state import InvalidArgumentError, StateEntry, make_state_key, serialize_entries
from statebridge.state.entry import type_adapter


class TestStateKey:
    """Test store key construction."""

    def test_key_uses_lowercased_type_name(self):
        """Test the prefix is the lowercased type name."""
        assert make_state_key(Account, "42") == "account-42"

    def test_key_is_deterministic(self):
        """Test the same inputs always give the same key."""
        assert make_state_key(Account, "abc") == make_state_key(Account, "abc")

    def test_key_for_builtin_type(self):
        """Test builtin types work as prefixes too."""
        assert make_state_key(dict, "x") == "dict-x"


class TestStateEntry:
    """Test StateEntry construction and serialization."""

    def test_create_from_value(self):
        """Test the entry key derives from the value's runtime type."""
        entry = StateEntry.create(Account(account_id=42), "42")

        assert entry.key == "account-42"
        assert entry.value.account_id == 42

    def test_create_without_key_generates_uuid(self):
        """Test a UUID4 logical key is generated when none is given."""
        entry = StateEntry.create({"a": 1})

        prefix, _, logical_key = entry.key.partition("-")
        assert prefix == "dict"
        assert uuid.UUID(logical_key).version == 4

    def test_generated_keys_differ(self):
        """Test two generated keys are distinct."""
        assert StateEntry.create({"a": 1}).key != StateEntry.create({"a": 1}).key

    def test_to_wire_uses_aliases(self):
        """Test the value is dumped with camelCase aliases."""
        entry = StateEntry.create(Account(account_id=42, name="Ada", email="ada@x.io"), "42")

        wire = entry.to_wire()

        assert wire["key"] == "account-42"
        assert wire["value"]["accountId"] == 42
        assert wire["value"]["name"] == "Ada"
        assert "createdAt" in wire["value"]

    def test_serialize_entries_is_json_array(self):
        """Test serialization gives a compact JSON array."""
        payload = serialize_entries([StateEntry.create({"a": 1}, "k")])

        assert payload == b'[{"key":"dict-k","value":{"a":1}}]'
        assert json.loads(payload) == [{"key": "dict-k", "value": {"a": 1}}]

    def test_to_wire_rejects_unserializable_value(self):
        """Test values without a JSON representation raise InvalidArgumentError."""
        class Opaque:
            pass

        with pytest.raises(InvalidArgumentError) as exc_info:
            StateEntry.create(Opaque(), "1").to_wire()

        assert exc_info.value.argument == "value"


class TestTypeAdapterCache:
    """Test adapters are built once per type."""

    def test_same_adapter_for_same_type(self):
        assert type_adapter(Account) is type_adapter(Account)

    def test_distinct_adapters_per_type(self):
        assert type_adapter(Account) is not type_adapter(dict)
