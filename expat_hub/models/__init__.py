"""Database models and configuration"""

from expat_hub.models.db import Database
from expat_hub.models.user_account import (
    UserAccount,
    UserRole,
    UserSession,
    UserStatus,
    utcnow,
)

__all__ = [
    # Database
    "Database",
    # Models
    "UserAccount",
    "UserSession",
    "UserRole",
    "UserStatus",
    "utcnow",
]
