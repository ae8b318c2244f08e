"""Tests for the ORM direct queries, against SQLite."""

import uuid
from datetime import UTC, date, datetime, time

import pytest
import pytest_asyncio
from sqlalchemy.pool import StaticPool

from crm_api.database import Database
from crm_api.models.prospect import Prospect, ProspectExternalPolicy
from crm_api.models.reminder import Reminder
from crm_api.services.prospect_gateway import ProspectGateway
from crm_api.services.reminder_gateway import ReminderGateway
from crm_api.services.reminder_service import ReminderService

reminders_table = Reminder.__table__


@pytest_asyncio.fixture
async def database():
    db = Database("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    await db.create_all()
    yield db
    await db.dispose()


def reminder_row(agent_id, title, on_date, at=None, status="Active", reminder_type="Call", minute=0):
    return {
        "reminder_id": uuid.uuid4(),
        "agent_id": agent_id,
        "reminder_type": reminder_type,
        "title": title,
        "reminder_date": on_date,
        "reminder_time": at,
        "status": status,
        "priority": "Medium",
        "created_date": datetime(2024, 1, 1, 8, minute),
        "modified_date": datetime(2024, 1, 1, 8, minute),
    }


async def insert_reminders(database, rows):
    async with database.connection() as conn:
        await conn.execute(reminders_table.insert(), rows)


class TestCountReminders:
    """Tests for ReminderGateway.count_reminders."""

    @pytest.mark.asyncio
    async def test_counts_with_filters(self, database):
        agent_id = uuid.uuid4()
        await insert_reminders(
            database,
            [
                reminder_row(agent_id, "a", date(2024, 3, 1)),
                reminder_row(agent_id, "b", date(2024, 3, 5), reminder_type="Visit"),
                reminder_row(agent_id, "c", date(2024, 4, 1), status="Completed"),
                reminder_row(uuid.uuid4(), "other agent", date(2024, 3, 1)),
            ],
        )

        async with database.connection() as conn:
            gateway = ReminderGateway(conn)
            assert await gateway.count_reminders(agent_id) == 3
            assert await gateway.count_reminders(agent_id, reminder_type="Visit") == 1
            assert await gateway.count_reminders(agent_id, status="Active") == 2
            assert (
                await gateway.count_reminders(
                    agent_id, start_date=date(2024, 3, 2), end_date=date(2024, 3, 31)
                )
                == 1
            )


class TestTodayRemindersDirect:
    """Tests for ReminderGateway.get_today_reminders_direct."""

    @pytest.mark.asyncio
    async def test_active_reminders_ordered_with_untimed_last(self, database):
        agent_id = uuid.uuid4()
        day = date(2024, 3, 1)
        await insert_reminders(
            database,
            [
                reminder_row(agent_id, "untimed", day, minute=1),
                reminder_row(agent_id, "late", day, time(16, 0), minute=2),
                reminder_row(agent_id, "early", day, time(8, 0), minute=3),
                reminder_row(agent_id, "done", day, time(7, 0), status="Completed"),
                reminder_row(agent_id, "tomorrow", date(2024, 3, 2), time(7, 0)),
            ],
        )

        async with database.connection() as conn:
            rows = await ReminderGateway(conn).get_today_reminders_direct(agent_id, on_date=day)

        assert [row["title"] for row in rows] == ["early", "late", "untimed"]

    @pytest.mark.asyncio
    async def test_service_falls_back_when_procedure_missing(self, database):
        agent_id = uuid.uuid4()
        today = datetime.now(UTC).date()
        await insert_reminders(database, [reminder_row(agent_id, "today", today, time(9, 0))])

        reminders = await ReminderService(database).get_today_reminders(agent_id)

        assert [reminder.title for reminder in reminders] == ["today"]
        assert reminders[0].reminder_time == "09:00:00"


class TestProspectQueries:
    """Tests for the prospect direct queries."""

    @pytest.mark.asyncio
    async def test_agent_prospects_newest_first(self, database):
        agent_id = uuid.uuid4()
        async with database.connection() as conn:
            await conn.execute(
                Prospect.__table__.insert(),
                [
                    {
                        "prospect_id": uuid.uuid4(),
                        "agent_id": agent_id,
                        "first_name": name,
                        "is_active": active,
                        "created_date": datetime(2024, 1, day),
                        "modified_date": datetime(2024, 1, day),
                    }
                    for name, day, active in [("Old", 1, True), ("New", 9, True), ("Gone", 5, False)]
                ],
            )

        async with database.connection() as conn:
            rows = await ProspectGateway(conn).get_agent_prospects(agent_id)

        assert [row["first_name"] for row in rows] == ["New", "Old"]

    @pytest.mark.asyncio
    async def test_prospect_policies_by_expiry(self, database):
        prospect_id = uuid.uuid4()
        async with database.connection() as conn:
            await conn.execute(
                Prospect.__table__.insert(),
                {"prospect_id": prospect_id, "agent_id": uuid.uuid4(), "first_name": "Brian"},
            )
            await conn.execute(
                ProspectExternalPolicy.__table__.insert(),
                [
                    {
                        "ext_policy_id": uuid.uuid4(),
                        "prospect_id": prospect_id,
                        "company_name": company,
                        "expiry_date": expiry,
                        "is_active": active,
                    }
                    for company, expiry, active in [
                        ("Jubilee", date(2024, 9, 1), True),
                        ("Britam", date(2024, 4, 1), True),
                        ("Old Mutual", date(2024, 2, 1), False),
                    ]
                ],
            )

        async with database.connection() as conn:
            rows = await ProspectGateway(conn).get_prospect_policies(prospect_id)

        assert [row["company_name"] for row in rows] == ["Britam", "Jubilee"]
