"""Tests for the prospect service."""

import uuid
from datetime import date

import pytest

from crm_api.exceptions import PersistenceError, ValidationError
from crm_api.schemas.prospect import (
    ProspectConversion,
    ProspectCreate,
    ProspectPolicyCreate,
    ProspectUpdate,
)
from crm_api.services.base import DEFAULT_DAYS_AHEAD


def new_prospect(agent_id, **overrides):
    data = {"AgentId": agent_id, "FirstName": "Brian", "PhoneNumber": "0712345678"}
    data.update(overrides)
    return ProspectCreate(**data)


class TestAddProspect:
    """Tests for add_prospect and listing."""

    @pytest.mark.asyncio
    async def test_add_and_list(self, prospect_service, agent_id):
        result = await prospect_service.add_prospect(new_prospect(agent_id))

        assert result.success is True
        assert result.message == "Prospect added successfully"
        assert result.prospect_id

        prospects = await prospect_service.get_agent_prospects(agent_id)
        assert [prospect.prospect_id for prospect in prospects] == [result.prospect_id]
        assert prospects[0].first_name == "Brian"

    @pytest.mark.asyncio
    async def test_no_identifier_is_failed_write(self, prospect_service, agent_id, backend):
        backend.reject_writes = True

        result = await prospect_service.add_prospect(new_prospect(agent_id))

        assert result.success is False
        assert result.prospect_id is None

    @pytest.mark.asyncio
    async def test_backend_failure_propagates(self, prospect_service, agent_id, backend):
        backend.failing.add("add_prospect")

        with pytest.raises(PersistenceError):
            await prospect_service.add_prospect(new_prospect(agent_id))

    @pytest.mark.asyncio
    async def test_deleted_prospects_not_listed(self, prospect_service, agent_id):
        result = await prospect_service.add_prospect(new_prospect(agent_id))

        deleted = await prospect_service.delete_prospect(result.prospect_id)

        assert deleted.success is True
        assert await prospect_service.get_agent_prospects(agent_id) == []


class TestUpdateProspect:
    """Tests for update_prospect."""

    @pytest.mark.asyncio
    async def test_update(self, prospect_service, agent_id):
        added = await prospect_service.add_prospect(new_prospect(agent_id))

        result = await prospect_service.update_prospect(
            added.prospect_id, ProspectUpdate(FirstName="Brian", Email="brian@example.com")
        )

        assert result.success is True
        prospects = await prospect_service.get_agent_prospects(agent_id)
        assert prospects[0].email == "brian@example.com"

    @pytest.mark.asyncio
    async def test_invalid_prospect_id(self, prospect_service, backend):
        with pytest.raises(ValidationError, match="Prospect ID"):
            await prospect_service.update_prospect("nope", ProspectUpdate(FirstName="Brian"))
        assert backend.calls == []


class TestPolicies:
    """Tests for external policies."""

    @pytest.mark.asyncio
    async def test_policies_ordered_by_expiry(self, prospect_service, agent_id):
        added = await prospect_service.add_prospect(new_prospect(agent_id))
        for company, expiry in [("Jubilee", date(2024, 9, 1)), ("Britam", date(2024, 4, 1))]:
            result = await prospect_service.add_prospect_policy(
                ProspectPolicyCreate(
                    ProspectId=added.prospect_id, CompanyName=company, ExpiryDate=expiry
                )
            )
            assert result.success is True

        policies = await prospect_service.get_prospect_policies(added.prospect_id)
        assert [policy.company_name for policy in policies] == ["Britam", "Jubilee"]

    @pytest.mark.asyncio
    async def test_expiring_policies(self, prospect_service, agent_id, backend):
        prospect_id = uuid.uuid4()
        backend.expiring_prospect_policies = [
            {
                "prospect_id": prospect_id,
                "full_name": "Brian Kiptoo",
                "company_name": "Britam",
                "expiry_date": date(2024, 4, 1),
                "days_until_expiry": 6,
                "priority": "High",
            }
        ]

        policies = await prospect_service.get_expiring_prospect_policies(agent_id)

        assert policies[0].prospect_id == str(prospect_id)
        assert policies[0].priority == "High"
        assert policies[0].days_until_expiry == 6

    @pytest.mark.asyncio
    async def test_expiring_policies_default_window(self, prospect_service, agent_id, backend):
        await prospect_service.get_expiring_prospect_policies(agent_id)
        assert backend.days_ahead_requests == [DEFAULT_DAYS_AHEAD]


class TestConversion:
    """Tests for convert_prospect_to_client."""

    @pytest.mark.asyncio
    async def test_missing_details_get_placeholder(self, prospect_service, agent_id, backend):
        added = await prospect_service.add_prospect(new_prospect(agent_id))

        result = await prospect_service.convert_prospect_to_client(added.prospect_id)

        assert result.success is True
        assert result.client_id
        conversion = backend.prospects[uuid.UUID(added.prospect_id)]["conversion"]
        assert conversion["address"] == "To be provided"
        assert conversion["national_id"] == "To be provided"

    @pytest.mark.asyncio
    async def test_given_details_kept(self, prospect_service, agent_id, backend):
        added = await prospect_service.add_prospect(new_prospect(agent_id))

        await prospect_service.convert_prospect_to_client(
            added.prospect_id, ProspectConversion(Address="Nairobi", NationalId="12345678")
        )

        conversion = backend.prospects[uuid.UUID(added.prospect_id)]["conversion"]
        assert conversion["address"] == "Nairobi"
        assert conversion["national_id"] == "12345678"


class TestStatisticsAndReminders:
    """Tests for statistics and auto-created reminders."""

    @pytest.mark.asyncio
    async def test_statistics_zero_without_row(self, prospect_service, agent_id):
        stats = await prospect_service.get_prospect_statistics(agent_id)

        assert stats.total_prospects == 0
        assert stats.model_dump(by_alias=True)["ExpiringIn7Days"] == 0

    @pytest.mark.asyncio
    async def test_statistics(self, prospect_service, agent_id, backend):
        backend.prospect_statistics = {"total_prospects": 12, "expiring_in_30_days": 3}

        stats = await prospect_service.get_prospect_statistics(agent_id)

        assert stats.total_prospects == 12
        assert stats.expiring_in_30_days == 3

    @pytest.mark.asyncio
    async def test_auto_create_reminders(self, prospect_service, agent_id, backend):
        backend.auto_created = 4

        result = await prospect_service.auto_create_prospect_reminders(agent_id)

        assert result.success is True
        assert result.reminders_created == 4
        assert result.message == "Created 4 reminder(s) for expiring prospect policies"
