"""FastAPI dependencies for the service layer."""

from typing import Annotated

from fastapi import Depends

from crm_api.database import Database, get_database
from crm_api.services.prospect_service import ProspectService
from crm_api.services.reminder_service import ReminderService


def get_reminder_service(
    database: Annotated[Database, Depends(get_database)],
) -> ReminderService:
    """Get reminder service with dependencies."""
    return ReminderService(database)


def get_prospect_service(
    database: Annotated[Database, Depends(get_database)],
) -> ProspectService:
    """Get prospect service with dependencies."""
    return ProspectService(database)
