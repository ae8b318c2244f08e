"""Pytest configuration and fixtures.

The stored procedures live in PostgreSQL only, so service and API tests run
against in-memory gateways that mimic what the procedures return. The ORM
direct queries are exercised against SQLite in ``test_gateways.py``.
"""

import uuid
from contextlib import asynccontextmanager
from datetime import UTC, date, datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from crm_api.api.dependencies import get_prospect_service, get_reminder_service
from crm_api.main import app
from crm_api.services.prospect_service import ProspectService
from crm_api.services.reminder_service import ReminderService


class FakeDatabase:
    """Stands in for ``Database`` and counts borrowed and returned connections."""

    def __init__(self):
        self.acquired = 0
        self.released = 0

    @asynccontextmanager
    async def connection(self):
        self.acquired += 1
        try:
            yield object()
        finally:
            self.released += 1


class BackendState:
    """Shared state behind the fake gateways.

    ``failing`` holds gateway method names that should raise a driver error.
    ``calls`` records every gateway method invoked, in order.
    """

    def __init__(self):
        self.calls: list[str] = []
        self.failing: set[str] = set()
        self.reminders: dict[uuid.UUID, dict] = {}
        self.settings: list[dict] = []
        self.statistics: dict | None = None
        self.birthdays: list[dict] = []
        self.policy_expiries: list[dict] = []
        self.phone_result: dict | None = None
        self.phone_requests: list[tuple[str, str]] = []
        self.prospects: dict[uuid.UUID, dict] = {}
        self.prospect_policies: dict[uuid.UUID, dict] = {}
        self.prospect_statistics: dict | None = None
        self.expiring_prospect_policies: list[dict] = []
        self.days_ahead_requests: list[int] = []
        self.reject_writes = False
        self.auto_created = 0

    def record(self, name: str) -> None:
        self.calls.append(name)
        if name in self.failing:
            raise OperationalError(name, {}, Exception("backend unavailable"))


class FakeReminderGateway:
    """Reminder procedures over a dict, with the procedures' observable behavior."""

    def __init__(self, state: BackendState):
        self.state = state

    def _owned(self, reminder_id, agent_id):
        row = self.state.reminders.get(reminder_id)
        if row is None or row["agent_id"] != agent_id:
            return None
        return row

    def _listing(self, values, **filters):
        rows = [
            row
            for row in self.state.reminders.values()
            if row["agent_id"] == values["agent_id"]
            and (values["start_date"] is None or row["reminder_date"] >= values["start_date"])
            and (values["end_date"] is None or row["reminder_date"] <= values["end_date"])
            and all(value is None or row.get(key) == value for key, value in filters.items())
        ]
        return sorted(rows, key=lambda row: (row["reminder_date"], row["reminder_time"] or "99"))

    @staticmethod
    def _page(rows, values):
        start = (values["page_number"] - 1) * values["page_size"]
        return [dict(row) for row in rows[start : start + values["page_size"]]]

    async def create_reminder(self, values):
        self.state.record("create_reminder")
        reminder_id = uuid.uuid4()
        now = datetime.now(UTC)
        self.state.reminders[reminder_id] = {
            **values,
            "reminder_id": reminder_id,
            "status": "Active",
            "created_date": now,
            "modified_date": now,
            "completed_date": None,
        }
        return reminder_id

    async def update_reminder(self, values):
        self.state.record("update_reminder")
        row = self._owned(values["reminder_id"], values["agent_id"])
        if row is None:
            return 0
        for key, value in values.items():
            if value is not None:
                row[key] = value
        row["modified_date"] = datetime.now(UTC)
        return 1

    async def delete_reminder(self, reminder_id, agent_id):
        self.state.record("delete_reminder")
        if self._owned(reminder_id, agent_id) is None:
            return 0
        del self.state.reminders[reminder_id]
        return 1

    async def complete_reminder(self, reminder_id, agent_id, notes):
        self.state.record("complete_reminder")
        row = self._owned(reminder_id, agent_id)
        if row is None:
            return 0
        row["status"] = "Completed"
        row["completed_date"] = datetime.now(UTC)
        if notes:
            row["notes"] = notes
        return 1

    async def get_reminder_by_id(self, reminder_id, agent_id):
        self.state.record("get_reminder_by_id")
        row = self._owned(reminder_id, agent_id)
        return dict(row) if row is not None else None

    async def get_all_reminders(self, values):
        self.state.record("get_all_reminders")
        return self._page(self._listing(values), values)

    async def get_all_reminders_with_filters(self, values):
        self.state.record("get_all_reminders_with_filters")
        rows = self._listing(
            values,
            reminder_type=values["reminder_type"],
            status=values["status"],
            priority=values["priority"],
            client_id=values["client_id"],
        )
        page = self._page(rows, values)
        for row in page:
            row["total_records"] = len(rows)
        return page

    async def count_reminders(self, agent_id, start_date=None, end_date=None, **filters):
        self.state.record("count_reminders")
        values = {"agent_id": agent_id, "start_date": start_date, "end_date": end_date}
        return len(self._listing(values, **filters))

    def _today(self, agent_id):
        today = date.today()
        rows = [
            dict(row)
            for row in self.state.reminders.values()
            if row["agent_id"] == agent_id
            and row["reminder_date"] == today
            and row["status"] == "Active"
        ]
        return sorted(rows, key=lambda row: row["reminder_time"] or "99")

    async def get_today_reminders(self, agent_id):
        self.state.record("get_today_reminders")
        return self._today(agent_id)

    async def get_today_reminders_direct(self, agent_id, on_date=None):
        self.state.record("get_today_reminders_direct")
        return self._today(agent_id)

    async def get_reminder_settings(self, agent_id):
        self.state.record("get_reminder_settings")
        return [row for row in self.state.settings if row["agent_id"] == agent_id]

    async def update_reminder_settings(self, values):
        self.state.record("update_reminder_settings")
        self.state.settings = [
            row
            for row in self.state.settings
            if (row["agent_id"], row["reminder_type"])
            != (values["agent_id"], values["reminder_type"])
        ]
        self.state.settings.append(dict(values))

    async def get_reminder_statistics(self, agent_id):
        self.state.record("get_reminder_statistics")
        return self.state.statistics

    async def get_reminders_by_type(self, agent_id, reminder_type):
        self.state.record("get_reminders_by_type")
        values = {"agent_id": agent_id, "start_date": None, "end_date": None}
        return self._listing(values, reminder_type=reminder_type)

    async def get_reminders_by_status(self, agent_id, status):
        self.state.record("get_reminders_by_status")
        values = {"agent_id": agent_id, "start_date": None, "end_date": None}
        return self._listing(values, status=status)

    async def get_birthday_reminders(self, agent_id):
        self.state.record("get_birthday_reminders")
        return self.state.birthdays

    async def get_policy_expiry_reminders(self, agent_id, days_ahead):
        self.state.record("get_policy_expiry_reminders")
        self.state.days_ahead_requests.append(days_ahead)
        return [row for row in self.state.policy_expiries if row["days_until_expiry"] <= days_ahead]

    async def validate_phone_number(self, phone_number, country_code):
        self.state.record("validate_phone_number")
        self.state.phone_requests.append((phone_number, country_code))
        return self.state.phone_result


class FakeProspectGateway:
    """Prospect procedures over a dict."""

    def __init__(self, state: BackendState):
        self.state = state

    async def add_prospect(self, values):
        self.state.record("add_prospect")
        if self.state.reject_writes:
            return None
        prospect_id = uuid.uuid4()
        self.state.prospects[prospect_id] = {
            **values,
            "prospect_id": prospect_id,
            "created_date": datetime.now(UTC),
            "modified_date": datetime.now(UTC),
            "is_active": True,
        }
        return prospect_id

    async def add_prospect_policy(self, values):
        self.state.record("add_prospect_policy")
        if self.state.reject_writes:
            return None
        ext_policy_id = uuid.uuid4()
        self.state.prospect_policies[ext_policy_id] = {
            **values,
            "ext_policy_id": ext_policy_id,
            "is_active": True,
        }
        return ext_policy_id

    async def update_prospect(self, values):
        self.state.record("update_prospect")
        self.state.prospects[values["prospect_id"]].update(values)

    async def delete_prospect(self, prospect_id):
        self.state.record("delete_prospect")
        self.state.prospects[prospect_id]["is_active"] = False

    async def convert_prospect_to_client(self, values):
        self.state.record("convert_prospect_to_client")
        if self.state.reject_writes:
            return None
        self.state.prospects[values["prospect_id"]]["conversion"] = dict(values)
        return uuid.uuid4()

    async def get_prospect_statistics(self, agent_id):
        self.state.record("get_prospect_statistics")
        return self.state.prospect_statistics

    async def get_expiring_prospect_policies(self, agent_id, days_ahead):
        self.state.record("get_expiring_prospect_policies")
        self.state.days_ahead_requests.append(days_ahead)
        return self.state.expiring_prospect_policies

    async def auto_create_prospect_reminders(self, agent_id):
        self.state.record("auto_create_prospect_reminders")
        return self.state.auto_created

    async def get_agent_prospects(self, agent_id):
        self.state.record("get_agent_prospects")
        rows = [
            row
            for row in self.state.prospects.values()
            if row["agent_id"] == agent_id and row["is_active"]
        ]
        return sorted(rows, key=lambda row: row["created_date"], reverse=True)

    async def get_prospect_policies(self, prospect_id):
        self.state.record("get_prospect_policies")
        rows = [
            row
            for row in self.state.prospect_policies.values()
            if row["prospect_id"] == prospect_id and row["is_active"]
        ]
        return sorted(rows, key=lambda row: row["expiry_date"] or date.max)


@pytest.fixture
def agent_id():
    return uuid.uuid4()


@pytest.fixture
def backend():
    return BackendState()


@pytest.fixture
def fake_database():
    return FakeDatabase()


@pytest.fixture
def reminder_service(fake_database, backend):
    return ReminderService(fake_database, lambda conn: FakeReminderGateway(backend))


@pytest.fixture
def prospect_service(fake_database, backend):
    return ProspectService(fake_database, lambda conn: FakeProspectGateway(backend))


@pytest.fixture(scope="function")
def client(reminder_service, prospect_service):
    """Create a test client with the services wired to the fake backend."""
    app.dependency_overrides[get_reminder_service] = lambda: reminder_service
    app.dependency_overrides[get_prospect_service] = lambda: prospect_service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
