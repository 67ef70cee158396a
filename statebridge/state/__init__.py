"""
State Client Module.

Key-value state access through a sidecar state API: the abstract
``StateService`` port, the HTTP ``StateClient`` and its typed failures.

Author: StateBridge Team
Date: 2026-10-17
"""

from .backend import StateService
from .client import StateClient, interpret_read_response, interpret_write_response
from .entry import StateEntry, make_state_key, serialize_entries
from .exceptions import (
    StateClientError,
    InvalidArgumentError,
    StoreMisconfiguredError,
    StoreUnavailableError,
    StoreError,
    UnexpectedStatusError,
)

__all__ = [
    # Abstract interface
    "StateService",
    # Implementation
    "StateClient",
    "interpret_read_response",
    "interpret_write_response",
    # Envelope
    "StateEntry",
    "make_state_key",
    "serialize_entries",
    # Exceptions
    "StateClientError",
    "InvalidArgumentError",
    "StoreMisconfiguredError",
    "StoreUnavailableError",
    "StoreError",
    "UnexpectedStatusError",
]
