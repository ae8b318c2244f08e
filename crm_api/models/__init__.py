"""SQLAlchemy models."""

from crm_api.models.prospect import Prospect, ProspectExternalPolicy
from crm_api.models.reminder import Reminder, ReminderSetting

__all__ = [
    "Reminder",
    "ReminderSetting",
    "Prospect",
    "ProspectExternalPolicy",
]
