"""
Account Routes.

FastAPI routes that store accounts through the configured state service.

Author: StateBridge Team
Date: 2026-10-17
"""

import logging

from fastapi import APIRouter, Depends, Path, Request, Response, status

from ...state import StateService
from .models import Account

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/account", tags=["account"])


def get_state_service(request: Request) -> StateService:
    """Return the state service attached to the running application."""
    service = getattr(request.app.state, "state_service", None)
    if service is None:
        raise RuntimeError("State service not configured on application")
    return service


@router.post("", status_code=status.HTTP_201_CREATED, response_model=Account)
async def create_account(
    account: Account,
    state: StateService = Depends(get_state_service),
) -> Account:
    """Create or update an account.

    Store failures propagate to the exception handlers as server errors.
    """
    await state.save(account.state_key, account)
    logger.info(f"Account {account.account_id} saved")
    return account


@router.get(
    "/{account_id}",
    response_model=Account,
    responses={status.HTTP_204_NO_CONTENT: {"description": "Account not found"}},
)
async def get_account(
    account_id: int = Path(..., description="Account identifier"),
    state: StateService = Depends(get_state_service),
):
    """Get an account, or 204 when the store holds nothing for it."""
    account = await state.get(str(account_id), Account)
    if account is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return account


@router.delete("/{account_id}", status_code=status.HTTP_200_OK)
async def delete_account(
    account_id: int = Path(..., description="Account identifier"),
    state: StateService = Depends(get_state_service),
) -> Response:
    """Delete an account."""
    await state.delete(str(account_id), Account)
    logger.info(f"Account {account_id} deleted")
    return Response(status_code=status.HTTP_200_OK)
