"""Reminder schemas."""

from datetime import date
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from crm_api.models.enums import ReminderPriority
from crm_api.schemas.common import PascalModel


class ReminderCreate(PascalModel):
    """Create a new reminder."""

    client_id: UUID | None = None
    appointment_id: UUID | None = None
    # Presence and value are checked by the service so the error is a ValidationError
    reminder_type: str | None = None
    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    reminder_date: date
    # Free-form; normalized to HH:MM:SS or dropped
    reminder_time: str | None = None
    client_name: str | None = Field(None, max_length=150)
    priority: ReminderPriority = ReminderPriority.MEDIUM
    enable_sms: bool = Field(False, alias="EnableSMS")
    enable_whatsapp: bool = Field(False, alias="EnableWhatsApp")
    enable_push_notification: bool = True
    advance_notice: str = Field("1 day", max_length=20)
    custom_message: str | None = None
    auto_send: bool = False
    notes: str | None = None


class ReminderUpdate(PascalModel):
    """Partial update: only the fields sent are changed."""

    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    reminder_date: date | None = None
    reminder_time: str | None = None
    priority: ReminderPriority | None = None
    status: str | None = Field(None, max_length=20)
    enable_sms: bool | None = Field(None, alias="EnableSMS")
    enable_whatsapp: bool | None = Field(None, alias="EnableWhatsApp")
    enable_push_notification: bool | None = None
    advance_notice: str | None = Field(None, max_length=20)
    custom_message: str | None = None
    auto_send: bool | None = None
    notes: str | None = None


class Reminder(PascalModel):
    """Reminder view model."""

    reminder_id: str
    client_id: str = ""
    appointment_id: str = ""
    agent_id: str
    reminder_type: str = ""
    title: str = ""
    description: str = ""
    reminder_date: str = ""
    reminder_time: str | None = None
    client_name: str = ""
    priority: str = ReminderPriority.MEDIUM.value
    status: str = "Active"
    enable_sms: bool = Field(False, alias="EnableSMS")
    enable_whatsapp: bool = Field(False, alias="EnableWhatsApp")
    enable_push_notification: bool = True
    advance_notice: str = "1 day"
    custom_message: str = ""
    auto_send: bool = False
    notes: str = ""
    created_date: str = ""
    modified_date: str = ""
    completed_date: str | None = None
    # Computed by the database, read only
    client_phone: str = ""
    client_email: str = ""
    full_client_name: str = ""


class ReminderFilters(BaseModel):
    """Filters and paging for listing reminders."""

    reminder_type: str | None = None
    status: str | None = None
    priority: str | None = None
    client_id: UUID | None = None
    start_date: date | None = None
    end_date: date | None = None
    page_number: int = Field(1, ge=1)
    page_size: int = Field(20, ge=1)

    @property
    def has_attribute_filters(self) -> bool:
        """True when anything beyond the date range narrows the result."""
        return bool(self.reminder_type or self.status or self.priority or self.client_id)


class PaginatedReminders(BaseModel):
    """One page of reminders plus paging metadata."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    reminders: list[Reminder]
    total_records: int
    current_page: int
    total_pages: int
    page_size: int


class ReminderSettings(PascalModel):
    """Per-type reminder settings view model."""

    reminder_setting_id: str = ""
    agent_id: str = ""
    reminder_type: str = ""
    is_enabled: bool = False
    days_before: int = 0
    time_of_day: str | None = None
    repeat_daily: bool = False
    created_date: str = ""
    modified_date: str = ""


class ReminderSettingsUpdate(PascalModel):
    """Upsert of the settings for one reminder type."""

    reminder_type: str
    is_enabled: bool = True
    days_before: int = Field(1, ge=0)
    time_of_day: str | None = None
    repeat_daily: bool = False


class ReminderStatistics(PascalModel):
    """Aggregate reminder counts for an agent."""

    total_active: int = 0
    total_completed: int = 0
    today_reminders: int = 0
    upcoming_reminders: int = 0
    high_priority: int = 0
    overdue: int = 0


class BirthdayReminder(PascalModel):
    """A client whose birthday is today."""

    client_id: str
    first_name: str = ""
    surname: str = ""
    last_name: str = ""
    phone_number: str = ""
    email: str = ""
    date_of_birth: str = ""
    age: int = 0


class PolicyExpiryReminder(PascalModel):
    """A client policy ending within the look-ahead window."""

    policy_id: str
    client_id: str = ""
    policy_name: str = ""
    policy_type: str = ""
    company_name: str = ""
    end_date: str = ""
    first_name: str = ""
    surname: str = ""
    phone_number: str = ""
    email: str = ""
    days_until_expiry: int = 0


class CompleteReminderRequest(PascalModel):
    """Optional closing note for a completed reminder."""

    notes: str | None = None


class PhoneValidationRequest(PascalModel):
    """Phone number to validate and format."""

    phone_number: str = Field(..., min_length=1, max_length=50)
    country_code: str | None = Field(None, max_length=5)


class PhoneValidationResult(PascalModel):
    """Outcome of phone number validation."""

    is_valid: bool
    formatted_number: str | None = None
    validation_message: str | None = None
