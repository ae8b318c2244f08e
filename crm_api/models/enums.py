"""Enums for model fields."""

from enum import Enum


class ReminderType(str, Enum):
    """Kinds of reminder an agent can schedule."""

    CALL = "Call"
    VISIT = "Visit"
    POLICY_EXPIRY = "Policy Expiry"
    MATURING_POLICY = "Maturing Policy"
    BIRTHDAY = "Birthday"
    HOLIDAY = "Holiday"
    CUSTOM = "Custom"
    APPOINTMENT = "Appointment"

    @classmethod
    def values(cls) -> list[str]:
        """All accepted type strings."""
        return [member.value for member in cls]


class ReminderPriority(str, Enum):
    """Reminder priority levels."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class ReminderStatus(str, Enum):
    """Reminder lifecycle states."""

    ACTIVE = "Active"
    COMPLETED = "Completed"
