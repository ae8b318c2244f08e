"""Reminder API endpoints.

Literal segments (``statistics``, ``settings``, ``today``...) are registered
before the ``/{agent_id}/{reminder_id}`` routes so they are never captured as
a reminder id.
"""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from crm_api.api.dependencies import get_reminder_service
from crm_api.config import Settings, get_settings
from crm_api.schemas.common import MessageResponse, RowsAffected
from crm_api.schemas.reminder import (
    BirthdayReminder,
    CompleteReminderRequest,
    PaginatedReminders,
    PhoneValidationRequest,
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
from crm_api.services.base import DEFAULT_DAYS_AHEAD
from crm_api.services.reminder_service import ReminderService

router = APIRouter(prefix="/api/reminders", tags=["reminders"])

Service = Annotated[ReminderService, Depends(get_reminder_service)]


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reminder not found")


@router.post("/validate-phone", response_model=PhoneValidationResult)
async def validate_phone_number(
    payload: PhoneValidationRequest,
    service: Service,
    settings: Annotated[Settings, Depends(get_settings)],
):
    """Validate and format a phone number."""
    country_code = payload.country_code or settings.default_country_code
    return await service.validate_phone_number(payload.phone_number, country_code)


@router.get("/{agent_id}/statistics", response_model=ReminderStatistics)
async def get_reminder_statistics(agent_id: str, service: Service):
    return await service.get_reminder_statistics(agent_id)


@router.get("/{agent_id}/settings", response_model=list[ReminderSettings])
async def get_reminder_settings(agent_id: str, service: Service):
    return await service.get_reminder_settings(agent_id)


@router.put("/{agent_id}/settings", response_model=MessageResponse)
async def update_reminder_settings(
    agent_id: str, payload: ReminderSettingsUpdate, service: Service
):
    await service.update_reminder_settings(agent_id, payload)
    return MessageResponse(message="Reminder settings updated successfully")


@router.get("/{agent_id}/today", response_model=list[Reminder])
async def get_today_reminders(agent_id: str, service: Service):
    """Today's active reminders, earliest first, untimed last."""
    return await service.get_today_reminders(agent_id)


@router.get("/{agent_id}/birthdays", response_model=list[BirthdayReminder])
async def get_birthday_reminders(agent_id: str, service: Service):
    return await service.get_birthday_reminders(agent_id)


@router.get("/{agent_id}/policy-expiry", response_model=list[PolicyExpiryReminder])
async def get_policy_expiry_reminders(
    agent_id: str,
    service: Service,
    days_ahead: Annotated[int, Query(alias="daysAhead", ge=0)] = DEFAULT_DAYS_AHEAD,
):
    return await service.get_policy_expiry_reminders(agent_id, days_ahead)


@router.get("/{agent_id}/type/{reminder_type}", response_model=list[Reminder])
async def get_reminders_by_type(agent_id: str, reminder_type: str, service: Service):
    return await service.get_reminders_by_type(agent_id, reminder_type)


@router.get("/{agent_id}/status/{reminder_status}", response_model=list[Reminder])
async def get_reminders_by_status(agent_id: str, reminder_status: str, service: Service):
    return await service.get_reminders_by_status(agent_id, reminder_status)


@router.post("/{agent_id}/{reminder_id}/complete", response_model=RowsAffected)
async def complete_reminder(
    agent_id: str,
    reminder_id: str,
    service: Service,
    payload: CompleteReminderRequest | None = None,
):
    """Mark a reminder completed, optionally with a closing note."""
    notes = payload.notes if payload else None
    rows_affected = await service.complete_reminder(reminder_id, agent_id, notes)
    if rows_affected == 0:
        raise _not_found()
    return RowsAffected(rows_affected=rows_affected)


@router.put("/{agent_id}/{reminder_id}", response_model=Reminder)
async def update_reminder(
    agent_id: str, reminder_id: str, payload: ReminderUpdate, service: Service
):
    """Change only the fields present in the body."""
    return await service.update_reminder(reminder_id, agent_id, payload)


@router.delete("/{agent_id}/{reminder_id}", response_model=RowsAffected)
async def delete_reminder(agent_id: str, reminder_id: str, service: Service):
    rows_affected = await service.delete_reminder(reminder_id, agent_id)
    if rows_affected == 0:
        raise _not_found()
    return RowsAffected(rows_affected=rows_affected)


@router.get("/{agent_id}/{reminder_id}", response_model=Reminder)
async def get_reminder(agent_id: str, reminder_id: str, service: Service):
    reminder = await service.get_reminder_by_id(reminder_id, agent_id)
    if reminder is None:
        raise _not_found()
    return reminder


@router.post("/{agent_id}", response_model=Reminder, status_code=status.HTTP_201_CREATED)
async def create_reminder(agent_id: str, payload: ReminderCreate, service: Service):
    return await service.create_reminder(agent_id, payload)


@router.get("/{agent_id}", response_model=PaginatedReminders)
async def get_all_reminders(
    agent_id: str,
    service: Service,
    settings: Annotated[Settings, Depends(get_settings)],
    reminder_type: Annotated[str | None, Query(alias="ReminderType")] = None,
    reminder_status: Annotated[str | None, Query(alias="Status")] = None,
    priority: Annotated[str | None, Query(alias="Priority")] = None,
    client_id: Annotated[UUID | None, Query(alias="ClientId")] = None,
    start_date: Annotated[date | None, Query(alias="StartDate")] = None,
    end_date: Annotated[date | None, Query(alias="EndDate")] = None,
    page_number: Annotated[int, Query(alias="PageNumber", ge=1)] = 1,
    page_size: Annotated[int | None, Query(alias="PageSize", ge=1)] = None,
):
    """List the agent's reminders, one page at a time.

    Type, status, priority and client narrow the result; the date range
    applies either way.
    """
    filters = ReminderFilters(
        reminder_type=reminder_type,
        status=reminder_status,
        priority=priority,
        client_id=client_id,
        start_date=start_date,
        end_date=end_date,
        page_number=page_number,
        page_size=page_size or settings.default_page_size,
    )
    return await service.get_all_reminders(agent_id, filters)
