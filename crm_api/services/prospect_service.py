"""Prospect pipeline service: prospects, their outside policies and conversion."""

import logging
from collections.abc import Callable
from uuid import UUID

from sqlalchemy.engine import RowMapping
from sqlalchemy.ext.asyncio import AsyncConnection

from crm_api.database import Database
from crm_api.exceptions import ValidationError
from crm_api.schemas.common import OperationResult
from crm_api.schemas.prospect import (
    AddProspectPolicyResult,
    AddProspectResult,
    AutoCreateRemindersResult,
    ConvertProspectResult,
    ExpiringProspectPolicy,
    Prospect,
    ProspectConversion,
    ProspectCreate,
    ProspectExternalPolicy,
    ProspectPolicyCreate,
    ProspectStatistics,
    ProspectUpdate,
)
from crm_api.services.base import DEFAULT_DAYS_AHEAD, GatewayService
from crm_api.services.prospect_gateway import ProspectGateway
from crm_api.services.validation import require_uuid

logger = logging.getLogger(__name__)

PLACEHOLDER_VALUE = "To be provided"


def _row_to_prospect(row: RowMapping) -> Prospect:
    return Prospect(
        prospect_id=str(row["prospect_id"]),
        agent_id=str(row["agent_id"]),
        first_name=row["first_name"],
        surname=row.get("surname"),
        last_name=row.get("last_name"),
        phone_number=row.get("phone_number"),
        email=row.get("email"),
        notes=row.get("notes"),
        created_date=row.get("created_date"),
        modified_date=row.get("modified_date"),
        is_active=bool(row.get("is_active", True)),
    )


def _row_to_policy(row: RowMapping) -> ProspectExternalPolicy:
    return ProspectExternalPolicy(
        ext_policy_id=str(row["ext_policy_id"]),
        prospect_id=str(row["prospect_id"]),
        company_name=row["company_name"],
        policy_number=row.get("policy_number"),
        policy_type=row.get("policy_type"),
        expiry_date=row.get("expiry_date"),
        notes=row.get("notes"),
        created_date=row.get("created_date"),
        modified_date=row.get("modified_date"),
        is_active=bool(row.get("is_active", True)),
    )


def _row_to_expiring_policy(row: RowMapping) -> ExpiringProspectPolicy:
    return ExpiringProspectPolicy(
        prospect_id=str(row["prospect_id"]),
        full_name=row.get("full_name") or "",
        phone_number=row.get("phone_number"),
        email=row.get("email"),
        policy_type=row.get("policy_type"),
        company_name=row.get("company_name") or "",
        expiry_date=row.get("expiry_date"),
        days_until_expiry=int(row.get("days_until_expiry") or 0),
        priority=row.get("priority") or "Medium",
    )


class ProspectService(GatewayService[ProspectGateway]):
    """Service for prospect operations.

    Write operations report ``Success``/``Message`` results; a procedure that
    hands back no identifier is a failed write, not an exception. Database
    failures propagate as ``PersistenceError``.
    """

    def __init__(
        self,
        database: Database,
        gateway_factory: Callable[[AsyncConnection], ProspectGateway] = ProspectGateway,
    ):
        super().__init__(database, gateway_factory)

    async def add_prospect(self, data: ProspectCreate) -> AddProspectResult:
        values = {
            "agent_id": require_uuid(data.agent_id, "Agent ID"),
            "first_name": data.first_name,
            "surname": data.surname,
            "last_name": data.last_name,
            "phone_number": data.phone_number,
            "email": data.email,
            "notes": data.notes,
        }
        async with self._gateway("add_prospect", **values) as gateway:
            prospect_id = await gateway.add_prospect(values)

        if not prospect_id:
            return AddProspectResult(success=False, message="Failed to add prospect")
        logger.info(f"Added prospect {prospect_id} for agent {values['agent_id']}")
        return AddProspectResult(
            success=True, message="Prospect added successfully", prospect_id=str(prospect_id)
        )

    async def add_prospect_policy(self, data: ProspectPolicyCreate) -> AddProspectPolicyResult:
        values = {
            "prospect_id": require_uuid(data.prospect_id, "Prospect ID"),
            "company_name": data.company_name,
            "policy_number": data.policy_number,
            "policy_type": data.policy_type,
            "expiry_date": data.expiry_date,
            "notes": data.notes,
        }
        async with self._gateway("add_prospect_policy", **values) as gateway:
            ext_policy_id = await gateway.add_prospect_policy(values)

        if not ext_policy_id:
            return AddProspectPolicyResult(success=False, message="Failed to add prospect policy")
        logger.info(f"Added external policy {ext_policy_id} to prospect {values['prospect_id']}")
        return AddProspectPolicyResult(
            success=True,
            message="Prospect policy added successfully",
            ext_policy_id=str(ext_policy_id),
        )

    async def update_prospect(self, prospect_id: str | UUID, data: ProspectUpdate) -> OperationResult:
        values = {
            "prospect_id": require_uuid(prospect_id, "Prospect ID"),
            "first_name": data.first_name,
            "surname": data.surname,
            "last_name": data.last_name,
            "phone_number": data.phone_number,
            "email": data.email,
            "notes": data.notes,
        }
        async with self._gateway("update_prospect", **values) as gateway:
            await gateway.update_prospect(values)

        logger.info(f"Updated prospect {values['prospect_id']}")
        return OperationResult(success=True, message="Prospect updated successfully")

    async def delete_prospect(self, prospect_id: str | UUID) -> OperationResult:
        prospect = require_uuid(prospect_id, "Prospect ID")

        async with self._gateway("delete_prospect", prospect_id=prospect) as gateway:
            await gateway.delete_prospect(prospect)

        logger.info(f"Deleted prospect {prospect}")
        return OperationResult(success=True, message="Prospect deleted successfully")

    async def convert_prospect_to_client(
        self, prospect_id: str | UUID, data: ProspectConversion | None = None
    ) -> ConvertProspectResult:
        """Turn a prospect into a client; missing address or ID get a placeholder."""
        data = data or ProspectConversion()
        values = {
            "prospect_id": require_uuid(prospect_id, "Prospect ID"),
            "address": data.address or PLACEHOLDER_VALUE,
            "national_id": data.national_id or PLACEHOLDER_VALUE,
            "date_of_birth": data.date_of_birth,
        }
        async with self._gateway("convert_prospect_to_client", **values) as gateway:
            client_id = await gateway.convert_prospect_to_client(values)

        if not client_id:
            return ConvertProspectResult(
                success=False, message="Failed to convert prospect to client"
            )
        logger.info(f"Converted prospect {values['prospect_id']} to client {client_id}")
        return ConvertProspectResult(
            success=True,
            message="Prospect converted to client successfully",
            client_id=str(client_id),
        )

    async def get_prospect_statistics(self, agent_id: str | UUID) -> ProspectStatistics:
        agent = require_uuid(agent_id, "Agent ID")

        async with self._gateway("get_prospect_statistics", agent_id=agent) as gateway:
            row = await gateway.get_prospect_statistics(agent)

        if row is None:
            return ProspectStatistics()
        return ProspectStatistics(
            total_prospects=int(row.get("total_prospects") or 0),
            prospects_with_policies=int(row.get("prospects_with_policies") or 0),
            expiring_in_7_days=int(row.get("expiring_in_7_days") or 0),
            expiring_in_30_days=int(row.get("expiring_in_30_days") or 0),
            expired_policies=int(row.get("expired_policies") or 0),
        )

    async def get_expiring_prospect_policies(
        self, agent_id: str | UUID, days_ahead: int = DEFAULT_DAYS_AHEAD
    ) -> list[ExpiringProspectPolicy]:
        agent = require_uuid(agent_id, "Agent ID")
        if days_ahead < 0:
            raise ValidationError("Days ahead must not be negative")

        async with self._gateway(
            "get_expiring_prospect_policies", agent_id=agent, days_ahead=days_ahead
        ) as gateway:
            rows = await gateway.get_expiring_prospect_policies(agent, days_ahead)

        return [_row_to_expiring_policy(row) for row in rows]

    async def auto_create_prospect_reminders(self, agent_id: str | UUID) -> AutoCreateRemindersResult:
        """Generate reminders for the agent's expiring prospect policies."""
        agent = require_uuid(agent_id, "Agent ID")

        async with self._gateway("auto_create_prospect_reminders", agent_id=agent) as gateway:
            count = await gateway.auto_create_prospect_reminders(agent)

        logger.info(f"Auto-created {count} prospect reminder(s) for agent {agent}")
        return AutoCreateRemindersResult(
            success=True,
            message=f"Created {count} reminder(s) for expiring prospect policies",
            reminders_created=count,
        )

    async def get_agent_prospects(self, agent_id: str | UUID) -> list[Prospect]:
        agent = require_uuid(agent_id, "Agent ID")

        async with self._gateway("get_agent_prospects", agent_id=agent) as gateway:
            rows = await gateway.get_agent_prospects(agent)

        return [_row_to_prospect(row) for row in rows]

    async def get_prospect_policies(self, prospect_id: str | UUID) -> list[ProspectExternalPolicy]:
        prospect = require_uuid(prospect_id, "Prospect ID")

        async with self._gateway("get_prospect_policies", prospect_id=prospect) as gateway:
            rows = await gateway.get_prospect_policies(prospect)

        return [_row_to_policy(row) for row in rows]
