"""
Account Models.

Pydantic model for the account entity stored through the state API.

Author: StateBridge Team
Date: 2026-10-17
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel


class Account(BaseModel):
    """Account entity.

    Attributes:
        account_id: Numeric identifier; its string form is the state key
        name: Display name
        email: Contact email
        created_at: Time the object is read (never taken from input)
    """

    account_id: int = Field(..., description="Account identifier")
    name: Optional[str] = None
    email: Optional[str] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @computed_field(alias="createdAt")
    @property
    def created_at(self) -> datetime:
        return datetime.now(timezone.utc)

    @property
    def state_key(self) -> str:
        return str(self.account_id)
