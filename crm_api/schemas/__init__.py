"""Pydantic schemas for API requests and responses."""

from crm_api.schemas.common import MessageResponse, OperationResult, RowsAffected
from crm_api.schemas.prospect import (
    Prospect,
    ProspectConversion,
    ProspectCreate,
    ProspectExternalPolicy,
    ProspectPolicyCreate,
    ProspectStatistics,
    ProspectUpdate,
)
from crm_api.schemas.reminder import (
    PaginatedReminders,
    Reminder,
    ReminderCreate,
    ReminderFilters,
    ReminderSettings,
    ReminderSettingsUpdate,
    ReminderStatistics,
    ReminderUpdate,
)

__all__ = [
    "MessageResponse",
    "OperationResult",
    "RowsAffected",
    "Reminder",
    "ReminderCreate",
    "ReminderUpdate",
    "ReminderFilters",
    "PaginatedReminders",
    "ReminderSettings",
    "ReminderSettingsUpdate",
    "ReminderStatistics",
    "Prospect",
    "ProspectCreate",
    "ProspectUpdate",
    "ProspectConversion",
    "ProspectExternalPolicy",
    "ProspectPolicyCreate",
    "ProspectStatistics",
]
