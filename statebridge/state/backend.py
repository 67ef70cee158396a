"""
Abstract State Service Interface.

Defines the contract the account routes depend on, so the HTTP sidecar
client can be swapped for a test double.

Author: StateBridge Team
Date: 2026-10-17
"""

from abc import ABC, abstractmethod
from typing import Any, Optional, Type, TypeVar

T = TypeVar("T")


class StateService(ABC):
    """
    Abstract base class for key-value state access.

    Keys are logical keys; implementations derive the store-facing key from
    the value type and the logical key.
    """

    @abstractmethod
    async def save(self, key: str, value: Any) -> None:
        """
        Create or update the state stored under ``key``.

        Args:
            key: Logical key (non-empty)
            value: Value to store (not None)

        Raises:
            InvalidArgumentError: If key is empty or value is None
            StateClientError: If the store rejects the write
        """
        pass

    @abstractmethod
    async def get(self, key: str, value_type: Type[T]) -> Optional[T]:
        """
        Retrieve the state stored under ``key``.

        Args:
            key: Logical key (non-empty)
            value_type: Type the stored value is parsed into

        Returns:
            The stored value, or None when the store has nothing for the key

        Raises:
            InvalidArgumentError: If key is empty
            StateClientError: If the store reports a failure
        """
        pass

    @abstractmethod
    async def delete(self, key: str, value_type: Type[Any]) -> None:
        """
        Delete the state stored under ``key``.

        Args:
            key: Logical key (non-empty)
            value_type: Type of the stored value, used to build the store key

        Raises:
            InvalidArgumentError: If key is empty
            StateClientError: If the store reports a failure
        """
        pass
