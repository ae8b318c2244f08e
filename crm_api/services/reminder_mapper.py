"""Translation between database rows and reminder view models.

Rows are mappings of column name to raw driver value. The functions here
never raise on missing columns: absent text degrades to an empty string and
absent flags to their documented defaults.
"""

from collections.abc import Mapping
from datetime import date, datetime, time
from typing import Any

from crm_api.schemas.reminder import (
    BirthdayReminder,
    PolicyExpiryReminder,
    Reminder,
    ReminderSettings,
    ReminderStatistics,
)

Row = Mapping[str, Any]


def format_date(value: Any) -> str:
    """Render a date-only value as ``YYYY-MM-DD``."""
    if value is None or value == "":
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str) and "-" in value:
        return value.split("T")[0]
    return str(value)


def format_datetime(value: Any) -> str:
    """Render a timestamp as an ISO-8601 string."""
    if value is None or value == "":
        return ""
    if isinstance(value, datetime | date):
        return value.isoformat()
    return str(value)


def format_time(value: Any) -> str | None:
    """Render a time of day as ``HH:MM:SS``; None stays None."""
    if value is None or value == "":
        return None
    if isinstance(value, time):
        return value.strftime("%H:%M:%S")
    return str(value)


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _flag(value: Any, default: bool) -> bool:
    return default if value is None else bool(value)


def _or_default(value: Any, default: str) -> str:
    return default if value is None else str(value)


def _count(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def map_row_to_reminder(row: Row) -> Reminder:
    """Build the Reminder view model from a reminder row."""
    completed = row.get("completed_date")
    return Reminder(
        reminder_id=_text(row.get("reminder_id")),
        client_id=_text(row.get("client_id")),
        appointment_id=_text(row.get("appointment_id")),
        agent_id=_text(row.get("agent_id")),
        reminder_type=_text(row.get("reminder_type")),
        title=_text(row.get("title")),
        description=_text(row.get("description")),
        reminder_date=format_date(row.get("reminder_date")),
        reminder_time=format_time(row.get("reminder_time")),
        client_name=_text(row.get("client_name")),
        priority=_or_default(row.get("priority"), "Medium"),
        status=_or_default(row.get("status"), "Active"),
        enable_sms=_flag(row.get("enable_sms"), False),
        enable_whatsapp=_flag(row.get("enable_whatsapp"), False),
        enable_push_notification=_flag(row.get("enable_push_notification"), True),
        advance_notice=_or_default(row.get("advance_notice"), "1 day"),
        custom_message=_text(row.get("custom_message")),
        auto_send=_flag(row.get("auto_send"), False),
        notes=_text(row.get("notes")),
        created_date=format_datetime(row.get("created_date")),
        modified_date=format_datetime(row.get("modified_date")),
        completed_date=format_datetime(completed) if completed else None,
        client_phone=_text(row.get("client_phone")),
        client_email=_text(row.get("client_email")),
        full_client_name=_or_default(row.get("full_client_name"), _text(row.get("client_name"))),
    )


def reminder_to_row(reminder: Reminder) -> dict[str, Any]:
    """Inverse of ``map_row_to_reminder`` for the columns the mapper reads."""
    return {
        "reminder_id": reminder.reminder_id,
        "client_id": reminder.client_id or None,
        "appointment_id": reminder.appointment_id or None,
        "agent_id": reminder.agent_id,
        "reminder_type": reminder.reminder_type,
        "title": reminder.title,
        "description": reminder.description or None,
        "reminder_date": reminder.reminder_date or None,
        "reminder_time": reminder.reminder_time,
        "client_name": reminder.client_name or None,
        "priority": reminder.priority,
        "status": reminder.status,
        "enable_sms": reminder.enable_sms,
        "enable_whatsapp": reminder.enable_whatsapp,
        "enable_push_notification": reminder.enable_push_notification,
        "advance_notice": reminder.advance_notice,
        "custom_message": reminder.custom_message or None,
        "auto_send": reminder.auto_send,
        "notes": reminder.notes or None,
        "created_date": reminder.created_date or None,
        "modified_date": reminder.modified_date or None,
        "completed_date": reminder.completed_date,
        "client_phone": reminder.client_phone or None,
        "client_email": reminder.client_email or None,
        "full_client_name": reminder.full_client_name,
    }


def map_row_to_reminder_settings(row: Row) -> ReminderSettings:
    """Build the ReminderSettings view model from a settings row."""
    return ReminderSettings(
        reminder_setting_id=_text(row.get("reminder_setting_id")),
        agent_id=_text(row.get("agent_id")),
        reminder_type=_text(row.get("reminder_type")),
        is_enabled=_flag(row.get("is_enabled"), False),
        days_before=_count(row.get("days_before")),
        time_of_day=format_time(row.get("time_of_day")),
        repeat_daily=_flag(row.get("repeat_daily"), False),
        created_date=format_datetime(row.get("created_date")),
        modified_date=format_datetime(row.get("modified_date")),
    )


def map_row_to_statistics(row: Row | None) -> ReminderStatistics:
    """Build reminder statistics; a missing row means all zeros."""
    if row is None:
        return ReminderStatistics()
    return ReminderStatistics(
        total_active=_count(row.get("total_active")),
        total_completed=_count(row.get("total_completed")),
        today_reminders=_count(row.get("today_reminders")),
        upcoming_reminders=_count(row.get("upcoming_reminders")),
        high_priority=_count(row.get("high_priority")),
        overdue=_count(row.get("overdue")),
    )


def map_row_to_birthday_reminder(row: Row) -> BirthdayReminder:
    """Build a birthday projection row."""
    return BirthdayReminder(
        client_id=_text(row.get("client_id")),
        first_name=_text(row.get("first_name")),
        surname=_text(row.get("last_name")),
        last_name=_text(row.get("last_name")),
        phone_number=_text(row.get("phone")),
        email=_text(row.get("email")),
        date_of_birth=format_date(row.get("date_of_birth")),
        age=_count(row.get("age")),
    )


def map_row_to_policy_expiry_reminder(row: Row) -> PolicyExpiryReminder:
    """Build a policy-expiry projection row."""
    return PolicyExpiryReminder(
        policy_id=_text(row.get("policy_id")),
        client_id=_text(row.get("client_id")),
        policy_name=_text(row.get("policy_name")),
        policy_type=_text(row.get("policy_type")),
        company_name=_text(row.get("company_name")),
        end_date=format_date(row.get("end_date")),
        first_name=_text(row.get("first_name")),
        surname=_text(row.get("last_name")),
        phone_number=_text(row.get("phone")),
        email=_text(row.get("email")),
        days_until_expiry=_count(row.get("days_until_expiry")),
    )
