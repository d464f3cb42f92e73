"""
Electro Settings - Schemas.

System-wide settings stored one document per key.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel

from electro.schemas import CamelModel


class SettingsKey(str, Enum):
    USER_REGISTRATION = "userRegistration"
    EMAIL_VERIFICATION_REQUIRED = "emailVerificationRequired"
    BUSINESS_ACCOUNT_APPROVAL = "businessAccountApproval"
    MAINTENANCE_MODE = "maintenanceMode"
    EMAIL_NOTIFICATIONS = "emailNotifications"
    SESSION_TIMEOUT = "sessionTimeout"
    AUTO_BACKUP = "autoBackup"
    ANALYTICS_ENABLED = "analyticsEnabled"
    MAX_FILE_SIZE = "maxFileSize"
    ALLOWED_FILE_TYPES = "allowedFileTypes"


class Setting(CamelModel):
    key: SettingsKey
    value: Any = None
    is_active: bool = True
    is_deleted: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None
    updated_by: str | None = None


@dataclass(frozen=True)
class SettingFilter:
    """Which settings a cached view holds; None means "any"."""

    is_active: bool | None = None
    is_deleted: bool | None = None

    def admits(self, setting: Setting) -> bool:
        if self.is_active is not None and setting.is_active != self.is_active:
            return False
        if self.is_deleted is not None and setting.is_deleted != self.is_deleted:
            return False
        return True

    def as_query(self) -> dict[str, Any]:
        return {"isActive": self.is_active, "isDeleted": self.is_deleted}


class SettingUpdateRequest(BaseModel):
    value: Any
