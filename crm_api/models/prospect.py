"""Prospect models."""

import uuid

from sqlalchemy import Column, Date, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import relationship

from crm_api.database import Base
from crm_api.models.mixins import ActiveFlagMixin, TimestampMixin


class Prospect(Base, TimestampMixin, ActiveFlagMixin):
    """A potential client an agent is working on."""

    __tablename__ = "prospects"

    prospect_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    agent_id = Column(Uuid, nullable=False, index=True)
    first_name = Column(String(50), nullable=False)
    surname = Column(String(50), nullable=True)
    last_name = Column(String(50), nullable=True)
    phone_number = Column(String(20), nullable=True)
    email = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)

    # Relationships
    policies = relationship("ProspectExternalPolicy", back_populates="prospect")


class ProspectExternalPolicy(Base, TimestampMixin, ActiveFlagMixin):
    """A policy a prospect holds with another insurer."""

    __tablename__ = "prospect_external_policies"

    ext_policy_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    prospect_id = Column(Uuid, ForeignKey("prospects.prospect_id"), nullable=False, index=True)
    company_name = Column(String(100), nullable=False)
    policy_number = Column(String(100), nullable=True)
    policy_type = Column(String(100), nullable=True)
    expiry_date = Column(Date, nullable=True, index=True)
    notes = Column(Text, nullable=True)

    # Relationships
    prospect = relationship("Prospect", back_populates="policies")
