"""Stored-procedure and direct-query access for reminders.

A gateway wraps one borrowed connection; the service creates it inside
``Database.connection()`` so every call of one operation shares the same
transaction. Procedure names and argument order are the backend's contract.
"""

from collections.abc import Mapping
from datetime import date, time
from typing import Any
from uuid import UUID

from sqlalchemy import func, select, text
from sqlalchemy.engine import RowMapping
from sqlalchemy.ext.asyncio import AsyncConnection
from sqlalchemy.sql import Executable

from crm_api.models.enums import ReminderStatus
from crm_api.models.reminder import Reminder

reminders_table = Reminder.__table__

CREATE_REMINDER = text("""
    SELECT sp_create_reminder(
        CAST(:agent_id AS uuid), CAST(:client_id AS uuid), CAST(:appointment_id AS uuid),
        CAST(:reminder_type AS varchar(50)), CAST(:title AS varchar(200)),
        CAST(:description AS text), CAST(:reminder_date AS date), CAST(:reminder_time AS time),
        CAST(:client_name AS varchar(150)), CAST(:priority AS varchar(10)),
        CAST(:enable_sms AS boolean), CAST(:enable_whatsapp AS boolean),
        CAST(:enable_push_notification AS boolean), CAST(:advance_notice AS varchar(20)),
        CAST(:custom_message AS text), CAST(:auto_send AS boolean), CAST(:notes AS text)
    ) AS reminder_id
""")

UPDATE_REMINDER = text("""
    SELECT sp_update_reminder(
        CAST(:reminder_id AS uuid), CAST(:agent_id AS uuid), CAST(:title AS varchar(200)),
        CAST(:description AS text), CAST(:reminder_date AS date), CAST(:reminder_time AS time),
        CAST(:priority AS varchar(10)), CAST(:status AS varchar(20)),
        CAST(:enable_sms AS boolean), CAST(:enable_whatsapp AS boolean),
        CAST(:enable_push_notification AS boolean), CAST(:advance_notice AS varchar(20)),
        CAST(:custom_message AS text), CAST(:auto_send AS boolean), CAST(:notes AS text)
    ) AS rows_affected
""")

DELETE_REMINDER = text("""
    SELECT sp_delete_reminder(CAST(:reminder_id AS uuid), CAST(:agent_id AS uuid)) AS rows_affected
""")

COMPLETE_REMINDER = text("""
    SELECT sp_complete_reminder(
        CAST(:reminder_id AS uuid), CAST(:agent_id AS uuid), CAST(:notes AS text)
    ) AS rows_affected
""")

GET_REMINDER_BY_ID = text("""
    SELECT * FROM sp_get_reminder_by_id(CAST(:reminder_id AS uuid), CAST(:agent_id AS uuid))
""")

GET_ALL_REMINDERS = text("""
    SELECT * FROM sp_get_all_reminders(
        CAST(:agent_id AS uuid), CAST(:start_date AS date), CAST(:end_date AS date),
        CAST(:page_number AS integer), CAST(:page_size AS integer)
    )
""")

GET_ALL_REMINDERS_WITH_FILTERS = text("""
    SELECT * FROM sp_get_all_reminders_with_filters(
        CAST(:agent_id AS uuid), CAST(:reminder_type AS varchar), CAST(:status AS varchar),
        CAST(:priority AS varchar), CAST(:start_date AS date), CAST(:end_date AS date),
        CAST(:client_id AS uuid), CAST(:page_number AS integer), CAST(:page_size AS integer)
    )
""")

GET_TODAY_REMINDERS = text("""
    SELECT * FROM sp_get_today_reminders_direct(CAST(:agent_id AS uuid))
""")

GET_REMINDER_SETTINGS = text("""
    SELECT * FROM sp_get_reminder_settings(CAST(:agent_id AS uuid))
""")

UPDATE_REMINDER_SETTINGS = text("""
    SELECT sp_update_reminder_settings(
        CAST(:agent_id AS uuid), CAST(:reminder_type AS varchar(50)), CAST(:is_enabled AS boolean),
        CAST(:days_before AS integer), CAST(:time_of_day AS time), CAST(:repeat_daily AS boolean)
    )
""")

GET_REMINDER_STATISTICS = text("""
    SELECT * FROM sp_get_reminder_statistics(CAST(:agent_id AS uuid))
""")

GET_REMINDERS_BY_TYPE = text("""
    SELECT * FROM sp_get_reminders_by_type(CAST(:agent_id AS uuid), CAST(:reminder_type AS varchar(50)))
""")

GET_REMINDERS_BY_STATUS = text("""
    SELECT * FROM sp_get_reminders_by_status(CAST(:agent_id AS uuid), CAST(:status AS varchar(20)))
""")

GET_BIRTHDAY_REMINDERS = text("""
    SELECT client_id, first_name, last_name, phone, email, date_of_birth, age
    FROM sp_get_today_birthday_reminders(CAST(:agent_id AS uuid))
""")

GET_POLICY_EXPIRY_REMINDERS = text("""
    SELECT policy_id, client_id, policy_name, policy_type, company_name, end_date,
           first_name, last_name, phone, email, days_until_expiry
    FROM sp_get_policy_expiry_reminders(CAST(:agent_id AS uuid), CAST(:days_ahead AS integer))
""")

VALIDATE_PHONE_NUMBER = text("""
    SELECT * FROM sp_validate_phone_number(
        CAST(:phone_number AS varchar(50)), CAST(:country_code AS varchar(5))
    )
""")


def as_time(value: str | None) -> time | None:
    """Canonical ``HH:MM:SS`` string to a ``time`` for the driver."""
    return time.fromisoformat(value) if value else None


class ReminderGateway:
    """Named reminder procedures over a single scoped connection."""

    def __init__(self, conn: AsyncConnection):
        self.conn = conn

    async def _fetch_all(self, statement: Executable, params: Mapping[str, Any]) -> list[RowMapping]:
        result = await self.conn.execute(statement, dict(params))
        return list(result.mappings().all())

    async def _fetch_one(self, statement: Executable, params: Mapping[str, Any]) -> RowMapping | None:
        result = await self.conn.execute(statement, dict(params))
        return result.mappings().first()

    async def _scalar(self, statement: Executable, params: Mapping[str, Any]) -> Any:
        result = await self.conn.execute(statement, dict(params))
        return result.scalar()

    async def create_reminder(self, values: Mapping[str, Any]) -> Any:
        """Insert a reminder and return the id the database assigned."""
        params = dict(values)
        params["reminder_time"] = as_time(params.get("reminder_time"))
        return await self._scalar(CREATE_REMINDER, params)

    async def update_reminder(self, values: Mapping[str, Any]) -> int:
        """Apply a partial update; NULL arguments leave stored values as they are."""
        params = dict(values)
        params["reminder_time"] = as_time(params.get("reminder_time"))
        return int(await self._scalar(UPDATE_REMINDER, params) or 0)

    async def delete_reminder(self, reminder_id: UUID, agent_id: UUID) -> int:
        rows = await self._scalar(
            DELETE_REMINDER, {"reminder_id": reminder_id, "agent_id": agent_id}
        )
        return int(rows or 0)

    async def complete_reminder(self, reminder_id: UUID, agent_id: UUID, notes: str | None) -> int:
        rows = await self._scalar(
            COMPLETE_REMINDER,
            {"reminder_id": reminder_id, "agent_id": agent_id, "notes": notes},
        )
        return int(rows or 0)

    async def get_reminder_by_id(self, reminder_id: UUID, agent_id: UUID) -> RowMapping | None:
        return await self._fetch_one(
            GET_REMINDER_BY_ID, {"reminder_id": reminder_id, "agent_id": agent_id}
        )

    async def get_all_reminders(self, values: Mapping[str, Any]) -> list[RowMapping]:
        """Plain listing: agent, optional date range, page."""
        return await self._fetch_all(GET_ALL_REMINDERS, values)

    async def get_all_reminders_with_filters(self, values: Mapping[str, Any]) -> list[RowMapping]:
        """Filtered listing; rows carry a ``total_records`` column."""
        return await self._fetch_all(GET_ALL_REMINDERS_WITH_FILTERS, values)

    async def count_reminders(
        self,
        agent_id: UUID,
        start_date: date | None = None,
        end_date: date | None = None,
        reminder_type: str | None = None,
        status: str | None = None,
        priority: str | None = None,
        client_id: UUID | None = None,
    ) -> int:
        """Count an agent's reminders matching the same filters the listings take."""
        table = reminders_table
        stmt = select(func.count()).select_from(table).where(table.c.agent_id == agent_id)
        if start_date is not None:
            stmt = stmt.where(table.c.reminder_date >= start_date)
        if end_date is not None:
            stmt = stmt.where(table.c.reminder_date <= end_date)
        if reminder_type:
            stmt = stmt.where(table.c.reminder_type == reminder_type)
        if status:
            stmt = stmt.where(table.c.status == status)
        if priority:
            stmt = stmt.where(table.c.priority == priority)
        if client_id is not None:
            stmt = stmt.where(table.c.client_id == client_id)
        result = await self.conn.execute(stmt)
        return int(result.scalar() or 0)

    async def get_today_reminders(self, agent_id: UUID) -> list[RowMapping]:
        """Today's active reminders via the procedure.

        Runs inside a savepoint so a failure leaves the connection usable for
        ``get_today_reminders_direct``.
        """
        async with self.conn.begin_nested():
            return await self._fetch_all(GET_TODAY_REMINDERS, {"agent_id": agent_id})

    async def get_today_reminders_direct(
        self, agent_id: UUID, on_date: date | None = None
    ) -> list[RowMapping]:
        """Same result as the procedure, read straight from the reminders table.

        Active reminders dated ``on_date`` (the database's current date by
        default), by time of day with untimed ones last, then by creation.
        """
        day = on_date if on_date is not None else func.current_date()
        stmt = (
            select(reminders_table)
            .where(
                reminders_table.c.agent_id == agent_id,
                reminders_table.c.reminder_date == day,
                reminders_table.c.status == ReminderStatus.ACTIVE.value,
            )
            .order_by(
                reminders_table.c.reminder_time.asc().nullslast(),
                reminders_table.c.created_date.asc(),
            )
        )
        result = await self.conn.execute(stmt)
        return list(result.mappings().all())

    async def get_reminder_settings(self, agent_id: UUID) -> list[RowMapping]:
        return await self._fetch_all(GET_REMINDER_SETTINGS, {"agent_id": agent_id})

    async def update_reminder_settings(self, values: Mapping[str, Any]) -> None:
        params = dict(values)
        params["time_of_day"] = as_time(params.get("time_of_day"))
        await self.conn.execute(UPDATE_REMINDER_SETTINGS, params)

    async def get_reminder_statistics(self, agent_id: UUID) -> RowMapping | None:
        return await self._fetch_one(GET_REMINDER_STATISTICS, {"agent_id": agent_id})

    async def get_reminders_by_type(self, agent_id: UUID, reminder_type: str) -> list[RowMapping]:
        return await self._fetch_all(
            GET_REMINDERS_BY_TYPE, {"agent_id": agent_id, "reminder_type": reminder_type}
        )

    async def get_reminders_by_status(self, agent_id: UUID, status: str) -> list[RowMapping]:
        return await self._fetch_all(
            GET_REMINDERS_BY_STATUS, {"agent_id": agent_id, "status": status}
        )

    async def get_birthday_reminders(self, agent_id: UUID) -> list[RowMapping]:
        return await self._fetch_all(GET_BIRTHDAY_REMINDERS, {"agent_id": agent_id})

    async def get_policy_expiry_reminders(self, agent_id: UUID, days_ahead: int) -> list[RowMapping]:
        return await self._fetch_all(
            GET_POLICY_EXPIRY_REMINDERS, {"agent_id": agent_id, "days_ahead": days_ahead}
        )

    async def validate_phone_number(self, phone_number: str, country_code: str) -> RowMapping | None:
        return await self._fetch_one(
            VALIDATE_PHONE_NUMBER, {"phone_number": phone_number, "country_code": country_code}
        )
