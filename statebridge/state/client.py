"""
Sidecar State Client.

HTTP implementation of ``StateService`` against a sidecar state API
(``POST {endpoint}/state``, ``GET``/``DELETE {endpoint}/state/{key}``).

Every call opens its own ``httpx.AsyncClient`` and sends a single request.
Nothing is retried and nothing is shielded from cancellation: cancelling the
awaiting task cancels the request in flight.

Author: StateBridge Team
Date: 2026-10-17
"""

import logging
from typing import Any, Optional, Type, TypeVar

import httpx
from pydantic import ValidationError

from ..core.config_manager import StateEndpointConfig
from ..core.logging_config import log_with_context
from .backend import StateService
from .entry import StateEntry, make_state_key, serialize_entries, type_adapter
from .exceptions import (
    InvalidArgumentError,
    StoreError,
    StoreMisconfiguredError,
    StoreUnavailableError,
    UnexpectedStatusError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

CONTENT_TYPE = "application/json"
JSON_BODY_CONTENT_TYPE = "application/json; charset=utf-8"


def interpret_write_response(response: httpx.Response, operation: str = "save") -> None:
    """
    Map a state save response onto success or a typed failure.

    Args:
        response: Sidecar response to the POST
        operation: Operation name used in messages

    Raises:
        StoreUnavailableError: On 500
        StoreMisconfiguredError: On 400 (body text as detail)
        UnexpectedStatusError: On any other non-2xx status
    """
    status_code = response.status_code

    if status_code == httpx.codes.CREATED:
        return
    if status_code == httpx.codes.INTERNAL_SERVER_ERROR:
        raise StoreUnavailableError(operation, status_code=status_code)
    if status_code == httpx.codes.BAD_REQUEST:
        raise StoreMisconfiguredError(operation, status_code, response.text)
    if response.is_success:
        logger.warning(f"State {operation} returned unexpected success status code '{status_code}'")
        return

    raise UnexpectedStatusError(operation, status_code, response.text)


def interpret_read_response(
    response: httpx.Response,
    value_type: Type[T],
    operation: str = "get",
) -> Optional[T]:
    """
    Map a state read/delete response onto a value, None, or a typed failure.

    Checked in order:
    1. success status with an empty body -> None (warning logged)
    2. 204 No Content -> StoreError
    3. 400 Bad Request -> StoreMisconfiguredError
    4. 500 Internal Server Error -> error logged, body still parsed
    5. body parsed as ``value_type``; an unparseable body gives None

    Raises:
        StoreError: On 204 carrying a body
        StoreMisconfiguredError: On 400
    """
    status_code = response.status_code

    if response.is_success and len(response.content) == 0:
        logger.warning(f"Failed to {operation} state with status code '{status_code}': {response.text}.")
        return None
    if status_code == httpx.codes.NO_CONTENT:
        raise StoreError(operation, status_code, response.text)
    if status_code == httpx.codes.BAD_REQUEST:
        raise StoreMisconfiguredError(operation, status_code, response.text)
    if status_code == httpx.codes.INTERNAL_SERVER_ERROR:
        logger.error(f"Failed to {operation} state with status code '{status_code}'")

    return _parse_value(response.content, value_type)


def _parse_value(content: bytes, value_type: Type[T]) -> Optional[T]:
    try:
        return type_adapter(value_type).validate_json(content)
    except ValidationError as e:
        logger.warning(
            f"Could not parse state as {value_type.__name__}; treating it as absent: "
            f"{e.error_count()} validation error(s)"
        )
        return None


class StateClient(StateService):
    """
    State service backed by the sidecar HTTP state API.

    Store keys are ``<lowercased type name>-<logical key>``.
    """

    def __init__(
        self,
        endpoint: str,
        *,
        timeout: Optional[float] = 5.0,
        verify_before_delete: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the state client.

        Args:
            endpoint: Sidecar HTTP API base URL (e.g. http://localhost:3500/v1.0)
            timeout: Per-request timeout in seconds (None disables it)
            verify_before_delete: Read the state before deleting it
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout
        self.verify_before_delete = verify_before_delete
        self._transport = transport

        logger.info(f"StateClient initialized: {self.state_url}")

    @classmethod
    def from_config(
        cls,
        config: StateEndpointConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "StateClient":
        """Build a client from the ``state`` configuration section."""
        return cls(
            config.endpoint,
            timeout=config.timeout_seconds,
            verify_before_delete=config.verify_before_delete,
            transport=transport,
        )

    @property
    def state_url(self) -> str:
        return f"{self.endpoint}/state"

    def item_url(self, value_type: Type[Any], key: str) -> str:
        return f"{self.state_url}/{make_state_key(value_type, key)}"

    async def save(self, key: str, value: Any) -> None:
        if not key:
            raise InvalidArgumentError("key")
        if value is None:
            raise InvalidArgumentError("value")

        entry = StateEntry.create(value, key)
        response = await self._send(
            "POST", self.state_url, "save", entry.key, content=serialize_entries([entry])
        )
        interpret_write_response(response, "save")

    async def get(self, key: str, value_type: Type[T]) -> Optional[T]:
        if not key:
            raise InvalidArgumentError("key")

        state_key = make_state_key(value_type, key)
        response = await self._send("GET", f"{self.state_url}/{state_key}", "get", state_key)
        return interpret_read_response(response, value_type, "get")

    async def delete(self, key: str, value_type: Type[Any]) -> None:
        if not key:
            raise InvalidArgumentError("key")

        if self.verify_before_delete:
            await self.get(key, value_type)

        state_key = make_state_key(value_type, key)
        response = await self._send("DELETE", f"{self.state_url}/{state_key}", "delete", state_key)
        interpret_read_response(response, value_type, "delete")

    def _build_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=self._transport,
            timeout=self.timeout,
            headers={"Accept": CONTENT_TYPE},
        )

    async def _send(
        self,
        method: str,
        url: str,
        operation: str,
        state_key: str,
        content: Optional[bytes] = None,
    ) -> httpx.Response:
        headers = {"Content-Type": JSON_BODY_CONTENT_TYPE} if content is not None else None

        try:
            async with self._build_client() as client:
                response = await client.request(method, url, content=content, headers=headers)
        except httpx.TransportError as e:
            log_with_context(
                logger, logging.ERROR, f"State {operation} request failed: {e}",
                operation=operation, state_key=state_key, url=url,
            )
            raise StoreUnavailableError(operation, reason=str(e)) from e

        log_with_context(
            logger, logging.DEBUG, f"{method} {url} -> {response.status_code}",
            operation=operation, state_key=state_key, sidecar_status=response.status_code,
        )
        return response
