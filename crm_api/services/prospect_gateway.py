"""Stored-procedure and direct-query access for prospects."""

from collections.abc import Mapping
from typing import Any
from uuid import UUID

from sqlalchemy import select, text
from sqlalchemy.engine import RowMapping
from sqlalchemy.ext.asyncio import AsyncConnection
from sqlalchemy.sql import Executable

from crm_api.models.prospect import Prospect, ProspectExternalPolicy

prospects_table = Prospect.__table__
policies_table = ProspectExternalPolicy.__table__

ADD_PROSPECT = text("""
    SELECT sp_add_prospect(
        CAST(:agent_id AS uuid), CAST(:first_name AS varchar(50)), CAST(:surname AS varchar(50)),
        CAST(:last_name AS varchar(50)), CAST(:phone_number AS varchar(20)),
        CAST(:email AS varchar(100)), CAST(:notes AS text)
    ) AS prospect_id
""")

ADD_PROSPECT_POLICY = text("""
    SELECT sp_add_prospect_policy(
        CAST(:prospect_id AS uuid), CAST(:company_name AS varchar(100)),
        CAST(:policy_number AS varchar(100)), CAST(:policy_type AS varchar(100)),
        CAST(:expiry_date AS date), CAST(:notes AS text)
    ) AS ext_policy_id
""")

UPDATE_PROSPECT = text("""
    SELECT sp_update_prospect(
        CAST(:prospect_id AS uuid), CAST(:first_name AS varchar(50)), CAST(:surname AS varchar(50)),
        CAST(:last_name AS varchar(50)), CAST(:phone_number AS varchar(20)),
        CAST(:email AS varchar(100)), CAST(:notes AS text)
    )
""")

DELETE_PROSPECT = text("SELECT sp_delete_prospect(CAST(:prospect_id AS uuid))")

CONVERT_PROSPECT_TO_CLIENT = text("""
    SELECT sp_convert_prospect_to_client(
        CAST(:prospect_id AS uuid), CAST(:address AS varchar), CAST(:national_id AS varchar),
        CAST(:date_of_birth AS date)
    ) AS client_id
""")

GET_PROSPECT_STATISTICS = text("""
    SELECT * FROM sp_get_prospect_statistics(CAST(:agent_id AS uuid))
""")

GET_EXPIRING_PROSPECT_POLICIES = text("""
    SELECT * FROM sp_get_expiring_prospect_policies(CAST(:agent_id AS uuid), CAST(:days_ahead AS integer))
""")

AUTO_CREATE_PROSPECT_REMINDERS = text("""
    SELECT sp_auto_create_prospect_reminders(CAST(:agent_id AS uuid)) AS reminder_count
""")


class ProspectGateway:
    """Named prospect procedures over a single scoped connection."""

    def __init__(self, conn: AsyncConnection):
        self.conn = conn

    async def _scalar(self, statement: Executable, params: Mapping[str, Any]) -> Any:
        result = await self.conn.execute(statement, dict(params))
        return result.scalar()

    async def _fetch_all(
        self, statement: Executable, params: Mapping[str, Any] | None = None
    ) -> list[RowMapping]:
        result = await self.conn.execute(statement, dict(params or {}))
        return list(result.mappings().all())

    async def add_prospect(self, values: Mapping[str, Any]) -> Any:
        return await self._scalar(ADD_PROSPECT, values)

    async def add_prospect_policy(self, values: Mapping[str, Any]) -> Any:
        return await self._scalar(ADD_PROSPECT_POLICY, values)

    async def update_prospect(self, values: Mapping[str, Any]) -> None:
        await self.conn.execute(UPDATE_PROSPECT, dict(values))

    async def delete_prospect(self, prospect_id: UUID) -> None:
        await self.conn.execute(DELETE_PROSPECT, {"prospect_id": prospect_id})

    async def convert_prospect_to_client(self, values: Mapping[str, Any]) -> Any:
        return await self._scalar(CONVERT_PROSPECT_TO_CLIENT, values)

    async def get_prospect_statistics(self, agent_id: UUID) -> RowMapping | None:
        result = await self.conn.execute(GET_PROSPECT_STATISTICS, {"agent_id": agent_id})
        return result.mappings().first()

    async def get_expiring_prospect_policies(self, agent_id: UUID, days_ahead: int) -> list[RowMapping]:
        return await self._fetch_all(
            GET_EXPIRING_PROSPECT_POLICIES, {"agent_id": agent_id, "days_ahead": days_ahead}
        )

    async def auto_create_prospect_reminders(self, agent_id: UUID) -> int:
        count = await self._scalar(AUTO_CREATE_PROSPECT_REMINDERS, {"agent_id": agent_id})
        return int(count or 0)

    async def get_agent_prospects(self, agent_id: UUID) -> list[RowMapping]:
        """Active prospects of an agent, newest first."""
        stmt = (
            select(prospects_table)
            .where(
                prospects_table.c.agent_id == agent_id,
                prospects_table.c.is_active.is_(True),
            )
            .order_by(prospects_table.c.created_date.desc())
        )
        return await self._fetch_all(stmt)

    async def get_prospect_policies(self, prospect_id: UUID) -> list[RowMapping]:
        """Active external policies of a prospect, soonest expiry first."""
        stmt = (
            select(policies_table)
            .where(
                policies_table.c.prospect_id == prospect_id,
                policies_table.c.is_active.is_(True),
            )
            .order_by(policies_table.c.expiry_date.asc())
        )
        return await self._fetch_all(stmt)
