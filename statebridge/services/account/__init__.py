"""
Account Service.

HTTP façade for the account entity, persisted through the state service.

Author: StateBridge Team
Date: 2026-10-17
"""

from .models import Account
from .routes import router, get_state_service

__all__ = [
    "Account",
    "router",
    "get_state_service",
]
