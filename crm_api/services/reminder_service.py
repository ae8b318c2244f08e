"""Reminder lifecycle service: the single read/write path for reminders."""

import logging
import math
from collections.abc import Callable
from typing import Any
from uuid import UUID

from sqlalchemy.engine import RowMapping
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection

from crm_api.database import Database
from crm_api.exceptions import NotFoundError, PersistenceError, ValidationError
from crm_api.schemas.reminder import (
    BirthdayReminder,
    PaginatedReminders,
    PhoneValidationResult,
    PolicyExpiryReminder,
    Reminder,
    ReminderCreate,
    ReminderFilters,
    ReminderSettings,
    ReminderSettingsUpdate,
    ReminderStatistics,
    ReminderUpdate,
)
from crm_api.services.base import DEFAULT_DAYS_AHEAD, GatewayService
from crm_api.services.reminder_gateway import ReminderGateway
from crm_api.services.reminder_mapper import (
    map_row_to_birthday_reminder,
    map_row_to_policy_expiry_reminder,
    map_row_to_reminder,
    map_row_to_reminder_settings,
    map_row_to_statistics,
)
from crm_api.services.time_normalizer import normalize_time
from crm_api.services.validation import require_reminder_type, require_uuid

logger = logging.getLogger(__name__)

DEFAULT_COUNTRY_CODE = "+254"

# Order matches sp_update_reminder after the two ids
UPDATE_FIELDS = (
    "title",
    "description",
    "reminder_date",
    "reminder_time",
    "priority",
    "status",
    "enable_sms",
    "enable_whatsapp",
    "enable_push_notification",
    "advance_notice",
    "custom_message",
    "auto_send",
    "notes",
)


class ReminderService(GatewayService[ReminderGateway]):
    """Service for reminder, reminder settings and reminder projection operations.

    Every operation validates its identifiers first, then borrows one
    connection for its whole duration. Database failures surface as
    ``PersistenceError`` except where a method documents otherwise.
    """

    def __init__(
        self,
        database: Database,
        gateway_factory: Callable[[AsyncConnection], ReminderGateway] = ReminderGateway,
    ):
        super().__init__(database, gateway_factory)

    async def create_reminder(self, agent_id: str | UUID, data: ReminderCreate) -> Reminder:
        """Create a reminder and return it as stored, server defaults included."""
        agent = require_uuid(agent_id, "Agent ID")
        require_reminder_type(data.reminder_type)

        reminder_time = normalize_time(data.reminder_time)
        if data.reminder_time and reminder_time is None:
            logger.info(f"Dropping unusable reminder time {data.reminder_time!r}")

        values = {
            "agent_id": agent,
            "client_id": data.client_id,
            "appointment_id": data.appointment_id,
            "reminder_type": data.reminder_type,
            "title": data.title,
            "description": data.description,
            "reminder_date": data.reminder_date,
            "reminder_time": reminder_time,
            "client_name": data.client_name,
            "priority": data.priority.value,
            "enable_sms": data.enable_sms,
            "enable_whatsapp": data.enable_whatsapp,
            "enable_push_notification": data.enable_push_notification,
            "advance_notice": data.advance_notice,
            "custom_message": data.custom_message,
            "auto_send": data.auto_send,
            "notes": data.notes,
        }

        async with self._gateway("create_reminder", **values) as gateway:
            reminder_id = await gateway.create_reminder(values)
            logger.info(f"Created reminder {reminder_id} for agent {agent}")
            # Same connection and transaction, so the new row is visible
            row = await gateway.get_reminder_by_id(reminder_id, agent) if reminder_id else None

        if row is None:
            raise NotFoundError("Failed to retrieve created reminder")
        return map_row_to_reminder(row)

    async def update_reminder(
        self, reminder_id: str | UUID, agent_id: str | UUID, data: ReminderUpdate
    ) -> Reminder:
        """Change only the supplied fields and return the updated reminder.

        Status is written as given; no transition check is made here.
        """
        reminder = require_uuid(reminder_id, "Reminder ID")
        agent = require_uuid(agent_id, "Agent ID")

        changes = data.model_dump(exclude_unset=True)
        values: dict[str, Any] = {"reminder_id": reminder, "agent_id": agent}
        for field in UPDATE_FIELDS:
            values[field] = changes.get(field)
        if values["priority"] is not None:
            values["priority"] = data.priority.value
        if "reminder_time" in changes:
            values["reminder_time"] = normalize_time(changes["reminder_time"])

        async with self._gateway("update_reminder", **values) as gateway:
            rows_affected = await gateway.update_reminder(values)
            logger.info(f"Updated reminder {reminder}: {rows_affected} row(s) affected")
            row = await gateway.get_reminder_by_id(reminder, agent)

        if row is None:
            raise NotFoundError(f"Reminder not found: {reminder}")
        return map_row_to_reminder(row)

    async def delete_reminder(self, reminder_id: str | UUID, agent_id: str | UUID) -> int:
        """Delete a reminder. Returns rows affected; 0 means not found or not owned."""
        reminder = require_uuid(reminder_id, "Reminder ID")
        agent = require_uuid(agent_id, "Agent ID")

        async with self._gateway("delete_reminder", reminder_id=reminder, agent_id=agent) as gateway:
            rows_affected = await gateway.delete_reminder(reminder, agent)

        logger.info(f"Deleted reminder {reminder}: {rows_affected} row(s) affected")
        return rows_affected

    async def complete_reminder(
        self, reminder_id: str | UUID, agent_id: str | UUID, notes: str | None = None
    ) -> int:
        """Mark a reminder completed. Returns rows affected; 0 means not found or not owned."""
        reminder = require_uuid(reminder_id, "Reminder ID")
        agent = require_uuid(agent_id, "Agent ID")

        async with self._gateway(
            "complete_reminder", reminder_id=reminder, agent_id=agent, notes=notes
        ) as gateway:
            rows_affected = await gateway.complete_reminder(reminder, agent, notes or None)

        logger.info(f"Completed reminder {reminder}: {rows_affected} row(s) affected")
        return rows_affected

    async def get_reminder_by_id(
        self, reminder_id: str | UUID, agent_id: str | UUID
    ) -> Reminder | None:
        """Get one of the agent's reminders, or None."""
        reminder = require_uuid(reminder_id, "Reminder ID")
        agent = require_uuid(agent_id, "Agent ID")

        async with self._gateway("get_reminder_by_id", reminder_id=reminder, agent_id=agent) as gateway:
            row = await gateway.get_reminder_by_id(reminder, agent)

        if row is None:
            logger.debug(f"No reminder {reminder} for agent {agent}")
            return None
        return map_row_to_reminder(row)

    async def get_all_reminders(
        self, agent_id: str | UUID, filters: ReminderFilters | None = None
    ) -> PaginatedReminders:
        """Get one page of the agent's reminders with accurate paging metadata."""
        agent = require_uuid(agent_id, "Agent ID")
        filters = filters or ReminderFilters()

        paging = {
            "agent_id": agent,
            "start_date": filters.start_date,
            "end_date": filters.end_date,
            "page_number": filters.page_number,
            "page_size": filters.page_size,
        }

        async with self._gateway("get_all_reminders", **paging) as gateway:
            if filters.has_attribute_filters:
                rows = await gateway.get_all_reminders_with_filters(
                    {
                        **paging,
                        "reminder_type": filters.reminder_type,
                        "status": filters.status,
                        "priority": filters.priority,
                        "client_id": filters.client_id,
                    }
                )
            else:
                rows = await gateway.get_all_reminders(paging)

            total_records = self._reported_total(rows)
            if total_records is None and filters.page_number == 1 and filters.has_attribute_filters:
                # An empty first page of the filtered procedure means nothing matches
                total_records = 0
            if total_records is None:
                total_records = await gateway.count_reminders(
                    agent,
                    start_date=filters.start_date,
                    end_date=filters.end_date,
                    reminder_type=filters.reminder_type,
                    status=filters.status,
                    priority=filters.priority,
                    client_id=filters.client_id,
                )

        reminders = [map_row_to_reminder(row) for row in rows]
        logger.debug(
            f"Listed {len(reminders)} of {total_records} reminders for agent {agent} "
            f"(page {filters.page_number})"
        )
        return PaginatedReminders(
            reminders=reminders,
            total_records=total_records,
            current_page=filters.page_number,
            total_pages=math.ceil(total_records / filters.page_size),
            page_size=filters.page_size,
        )

    @staticmethod
    def _reported_total(rows: list[RowMapping]) -> int | None:
        """The ``total_records`` column of the first row, when the procedure provides one."""
        if rows and "total_records" in rows[0]:
            return int(rows[0]["total_records"] or 0)
        return None

    async def get_today_reminders(self, agent_id: str | UUID) -> list[Reminder]:
        """Get today's active reminders ordered by time (untimed last), then creation.

        Falls back to a direct table query when the procedure fails; callers
        see the same result either way.
        """
        agent = require_uuid(agent_id, "Agent ID")

        async with self._gateway("get_today_reminders", agent_id=agent) as gateway:
            try:
                rows = await gateway.get_today_reminders(agent)
            except SQLAlchemyError as e:
                logger.warning(f"Today's reminders procedure failed, using direct query: {e}")
                rows = await gateway.get_today_reminders_direct(agent)

        return [map_row_to_reminder(row) for row in rows]

    async def get_reminder_settings(self, agent_id: str | UUID) -> list[ReminderSettings]:
        """Get the agent's per-type reminder settings."""
        agent = require_uuid(agent_id, "Agent ID")

        async with self._gateway("get_reminder_settings", agent_id=agent) as gateway:
            rows = await gateway.get_reminder_settings(agent)

        return [map_row_to_reminder_settings(row) for row in rows]

    async def update_reminder_settings(
        self, agent_id: str | UUID, settings: ReminderSettingsUpdate
    ) -> None:
        """Upsert the settings for one reminder type. Nothing is read back."""
        agent = require_uuid(agent_id, "Agent ID")
        require_reminder_type(settings.reminder_type)

        values = {
            "agent_id": agent,
            "reminder_type": settings.reminder_type,
            "is_enabled": settings.is_enabled,
            "days_before": settings.days_before,
            "time_of_day": normalize_time(settings.time_of_day),
            "repeat_daily": settings.repeat_daily,
        }
        async with self._gateway("update_reminder_settings", **values) as gateway:
            await gateway.update_reminder_settings(values)

        logger.info(f"Updated {settings.reminder_type} reminder settings for agent {agent}")

    async def get_reminder_statistics(self, agent_id: str | UUID) -> ReminderStatistics:
        """Get aggregate reminder counts; all zero when there is no data."""
        agent = require_uuid(agent_id, "Agent ID")

        async with self._gateway("get_reminder_statistics", agent_id=agent) as gateway:
            row = await gateway.get_reminder_statistics(agent)

        return map_row_to_statistics(row)

    async def get_reminders_by_type(self, agent_id: str | UUID, reminder_type: str) -> list[Reminder]:
        """Get the agent's reminders of one type. Unknown types are rejected."""
        agent = require_uuid(agent_id, "Agent ID")
        require_reminder_type(reminder_type)

        async with self._gateway(
            "get_reminders_by_type", agent_id=agent, reminder_type=reminder_type
        ) as gateway:
            rows = await gateway.get_reminders_by_type(agent, reminder_type)

        return [map_row_to_reminder(row) for row in rows]

    async def get_reminders_by_status(self, agent_id: str | UUID, status: str) -> list[Reminder]:
        """Get the agent's reminders in one status.

        The status is passed through as given, so statuses the database knows
        about beyond Active/Completed still work.
        """
        agent = require_uuid(agent_id, "Agent ID")
        if not status:
            raise ValidationError("Status is required")

        async with self._gateway("get_reminders_by_status", agent_id=agent, status=status) as gateway:
            rows = await gateway.get_reminders_by_status(agent, status)

        return [map_row_to_reminder(row) for row in rows]

    async def get_birthday_reminders(self, agent_id: str | UUID) -> list[BirthdayReminder]:
        """Get clients with a birthday today.

        Returns an empty list when the database call fails, so dashboards
        depending on it keep rendering.
        """
        agent = require_uuid(agent_id, "Agent ID")

        try:
            async with self._gateway("get_birthday_reminders", agent_id=agent) as gateway:
                rows = await gateway.get_birthday_reminders(agent)
        except PersistenceError as e:
            logger.error(f"Error fetching birthday reminders, returning none: {e.__cause__}")
            return []

        return [map_row_to_birthday_reminder(row) for row in rows]

    async def get_policy_expiry_reminders(
        self, agent_id: str | UUID, days_ahead: int = DEFAULT_DAYS_AHEAD
    ) -> list[PolicyExpiryReminder]:
        """Get client policies ending within ``days_ahead`` days.

        Returns an empty list when the database call fails.
        """
        agent = require_uuid(agent_id, "Agent ID")
        if days_ahead < 0:
            raise ValidationError("Days ahead must not be negative")

        try:
            async with self._gateway(
                "get_policy_expiry_reminders", agent_id=agent, days_ahead=days_ahead
            ) as gateway:
                rows = await gateway.get_policy_expiry_reminders(agent, days_ahead)
        except PersistenceError as e:
            logger.error(f"Error fetching policy expiry reminders, returning none: {e.__cause__}")
            return []

        return [map_row_to_policy_expiry_reminder(row) for row in rows]

    async def validate_phone_number(
        self, phone_number: str, country_code: str = DEFAULT_COUNTRY_CODE
    ) -> PhoneValidationResult:
        """Validate and format a phone number using the database's rules."""
        if not phone_number or not phone_number.strip():
            raise ValidationError("Phone number is required")

        async with self._gateway(
            "validate_phone_number", phone_number=phone_number, country_code=country_code
        ) as gateway:
            row = await gateway.validate_phone_number(phone_number.strip(), country_code)

        if row is None:
            return PhoneValidationResult(
                is_valid=False,
                formatted_number=None,
                validation_message="Phone number could not be validated",
            )
        return PhoneValidationResult(
            is_valid=bool(row.get("is_valid")),
            formatted_number=row.get("formatted_number"),
            validation_message=row.get("validation_message"),
        )
