"""Prospect schemas."""

from datetime import date, datetime
from uuid import UUID

from pydantic import Field

from crm_api.models.enums import ReminderPriority
from crm_api.schemas.common import OperationResult, PascalModel


class ProspectCreate(PascalModel):
    """Create a new prospect."""

    agent_id: UUID
    first_name: str = Field(..., min_length=1, max_length=50)
    surname: str | None = Field(None, max_length=50)
    last_name: str | None = Field(None, max_length=50)
    phone_number: str | None = Field(None, max_length=20)
    email: str | None = Field(None, max_length=100)
    notes: str | None = None


class ProspectUpdate(PascalModel):
    """Replace a prospect's contact details."""

    first_name: str = Field(..., min_length=1, max_length=50)
    surname: str | None = Field(None, max_length=50)
    last_name: str | None = Field(None, max_length=50)
    phone_number: str | None = Field(None, max_length=20)
    email: str | None = Field(None, max_length=100)
    notes: str | None = None


class ProspectPolicyCreate(PascalModel):
    """Record a policy the prospect holds elsewhere."""

    prospect_id: UUID
    company_name: str = Field(..., min_length=1, max_length=100)
    policy_number: str | None = Field(None, max_length=100)
    policy_type: str | None = Field(None, max_length=100)
    expiry_date: date | None = None
    notes: str | None = None


class ProspectConversion(PascalModel):
    """Details needed to turn a prospect into a client."""

    address: str | None = None
    national_id: str | None = None
    date_of_birth: date | None = None


class Prospect(PascalModel):
    """Prospect view model."""

    prospect_id: str
    agent_id: str
    first_name: str
    surname: str | None = None
    last_name: str | None = None
    phone_number: str | None = None
    email: str | None = None
    notes: str | None = None
    created_date: datetime | None = None
    modified_date: datetime | None = None
    is_active: bool = True


class ProspectExternalPolicy(PascalModel):
    """External policy view model."""

    ext_policy_id: str
    prospect_id: str
    company_name: str
    policy_number: str | None = None
    policy_type: str | None = None
    expiry_date: date | None = None
    notes: str | None = None
    created_date: datetime | None = None
    modified_date: datetime | None = None
    is_active: bool = True


class ProspectStatistics(PascalModel):
    """Prospect pipeline counts for an agent."""

    total_prospects: int = 0
    prospects_with_policies: int = 0
    expiring_in_7_days: int = Field(0, alias="ExpiringIn7Days")
    expiring_in_30_days: int = Field(0, alias="ExpiringIn30Days")
    expired_policies: int = 0


class ExpiringProspectPolicy(PascalModel):
    """A prospect policy close to expiry."""

    prospect_id: str
    full_name: str = ""
    phone_number: str | None = None
    email: str | None = None
    policy_type: str | None = None
    company_name: str = ""
    expiry_date: date | None = None
    days_until_expiry: int = 0
    priority: ReminderPriority = ReminderPriority.MEDIUM


class AddProspectResult(OperationResult):
    """Result of adding a prospect."""

    prospect_id: str | None = None


class AddProspectPolicyResult(OperationResult):
    """Result of adding an external policy."""

    ext_policy_id: str | None = None


class ConvertProspectResult(OperationResult):
    """Result of converting a prospect to a client."""

    client_id: str | None = None


class AutoCreateRemindersResult(OperationResult):
    """Result of generating reminders for expiring prospect policies."""

    reminders_created: int = 0
