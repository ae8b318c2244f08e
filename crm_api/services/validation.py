"""Input checks shared by the services. All failures raise ValidationError."""

from uuid import UUID

from crm_api.exceptions import ValidationError
from crm_api.models.enums import ReminderType


def is_valid_uuid(value: object) -> bool:
    """Check whether ``value`` is a UUID or a string holding one."""
    if isinstance(value, UUID):
        return True
    if not isinstance(value, str) or not value:
        return False
    try:
        UUID(value)
    except ValueError:
        return False
    return True


def require_uuid(value: object, label: str) -> UUID:
    """Return ``value`` as a UUID or raise ``ValidationError``."""
    if not is_valid_uuid(value):
        raise ValidationError(f"Valid {label} is required")
    return value if isinstance(value, UUID) else UUID(value)


def is_valid_reminder_type(value: str | None) -> bool:
    """Check ``value`` against the fixed set of reminder types."""
    return value in ReminderType.values()


def require_reminder_type(value: str | None) -> str:
    """Return ``value`` if it is a known reminder type, else raise ``ValidationError``."""
    if not value:
        raise ValidationError("Reminder type is required")
    if not is_valid_reminder_type(value):
        raise ValidationError(f"Invalid reminder type: {value}")
    return value
