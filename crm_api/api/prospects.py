"""Prospect API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from crm_api.api.dependencies import get_prospect_service
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
from crm_api.services.base import DEFAULT_DAYS_AHEAD
from crm_api.services.prospect_service import ProspectService

router = APIRouter(prefix="/api/prospects", tags=["prospects"])

Service = Annotated[ProspectService, Depends(get_prospect_service)]


def _rejected(result: OperationResult) -> JSONResponse:
    """A write the database declined is reported with its message and a 400."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST, content=result.model_dump(by_alias=True)
    )


@router.get("/agent/{agent_id}/statistics", response_model=ProspectStatistics)
async def get_prospect_statistics(agent_id: str, service: Service):
    return await service.get_prospect_statistics(agent_id)


@router.get("/agent/{agent_id}/expiring-policies", response_model=list[ExpiringProspectPolicy])
async def get_expiring_prospect_policies(
    agent_id: str,
    service: Service,
    days_ahead: Annotated[int, Query(alias="daysAhead", ge=0)] = DEFAULT_DAYS_AHEAD,
):
    return await service.get_expiring_prospect_policies(agent_id, days_ahead)


@router.post("/agent/{agent_id}/reminders/auto-create", response_model=AutoCreateRemindersResult)
async def auto_create_prospect_reminders(agent_id: str, service: Service):
    """Create reminders for the agent's prospect policies nearing expiry."""
    return await service.auto_create_prospect_reminders(agent_id)


@router.get("/agent/{agent_id}", response_model=list[Prospect])
async def get_agent_prospects(agent_id: str, service: Service):
    return await service.get_agent_prospects(agent_id)


@router.post(
    "/policy", response_model=AddProspectPolicyResult, status_code=status.HTTP_201_CREATED
)
async def add_prospect_policy(payload: ProspectPolicyCreate, service: Service):
    result = await service.add_prospect_policy(payload)
    if not result.success:
        return _rejected(result)
    return result


@router.get("/{prospect_id}/policies", response_model=list[ProspectExternalPolicy])
async def get_prospect_policies(prospect_id: str, service: Service):
    return await service.get_prospect_policies(prospect_id)


@router.post("/{prospect_id}/convert", response_model=ConvertProspectResult)
async def convert_prospect_to_client(
    prospect_id: str, service: Service, payload: ProspectConversion | None = None
):
    """Convert a prospect to a client; address and national ID may come later."""
    result = await service.convert_prospect_to_client(prospect_id, payload)
    if not result.success:
        return _rejected(result)
    return result


@router.put("/{prospect_id}", response_model=OperationResult)
async def update_prospect(prospect_id: str, payload: ProspectUpdate, service: Service):
    return await service.update_prospect(prospect_id, payload)


@router.delete("/{prospect_id}", response_model=OperationResult)
async def delete_prospect(prospect_id: str, service: Service):
    return await service.delete_prospect(prospect_id)


@router.post("/", response_model=AddProspectResult, status_code=status.HTTP_201_CREATED)
async def add_prospect(payload: ProspectCreate, service: Service):
    result = await service.add_prospect(payload)
    if not result.success:
        return _rejected(result)
    return result
