"""
State entry envelope sent to the sidecar state API.
"""

import uuid
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, Generic, Iterable, List, Optional, Type, TypeVar

from pydantic import PydanticSchemaGenerationError, TypeAdapter
from pydantic_core import PydanticSerializationError

from .exceptions import InvalidArgumentError

T = TypeVar("T")


@lru_cache(maxsize=128)
def type_adapter(value_type: Any) -> TypeAdapter:
    """Shared ``TypeAdapter`` per type; building one compiles a schema."""
    return TypeAdapter(value_type)


def type_prefix(value_type: Type[Any]) -> str:
    """Lowercased type name used as the store key prefix."""
    return value_type.__name__.lower()


def make_state_key(value_type: Type[Any], key: str) -> str:
    """
    Build the store-facing key for a logical key.

    Example: ``make_state_key(Account, "42") == "account-42"``
    """
    return f"{type_prefix(value_type)}-{key}"


@dataclass(frozen=True)
class StateEntry(Generic[T]):
    """One ``{"key", "value"}`` pair of a state save request."""

    key: str
    value: T

    @classmethod
    def create(cls, value: T, key: Optional[str] = None) -> "StateEntry[T]":
        """Build an entry from the value's runtime type; a UUID4 is used when no key is given."""
        logical_key = key if key is not None else str(uuid.uuid4())
        return cls(key=make_state_key(type(value), logical_key), value=value)

    def to_wire(self) -> Dict[str, Any]:
        """
        Dump the entry as JSON-ready data.

        Raises:
            InvalidArgumentError: If the value cannot be represented as JSON
        """
        value_type = type(self.value)
        try:
            value = type_adapter(value_type).dump_python(self.value, mode="json", by_alias=True)
        except (PydanticSchemaGenerationError, PydanticSerializationError) as e:
            raise InvalidArgumentError(
                "value", f"Values of type {value_type.__name__} cannot be serialized to JSON."
            ) from e
        return {"key": self.key, "value": value}


def serialize_entries(entries: Iterable[StateEntry[Any]]) -> bytes:
    """Serialize entries as the JSON array the state API expects."""
    payload: List[Dict[str, Any]] = [entry.to_wire() for entry in entries]
    return type_adapter(List[Dict[str, Any]]).dump_json(payload)
