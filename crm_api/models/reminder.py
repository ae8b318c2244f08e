"""Reminder and reminder settings models."""

import uuid

from sqlalchemy import Boolean, Column, Date, DateTime, Integer, String, Text, Time, Uuid

from crm_api.database import Base
from crm_api.models.mixins import TimestampMixin


class Reminder(Base, TimestampMixin):
    """A follow-up task owned by one agent, optionally tied to a client or appointment."""

    __tablename__ = "reminders"

    reminder_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    agent_id = Column(Uuid, nullable=False, index=True)
    # Weak references: not enforced here
    client_id = Column(Uuid, nullable=True, index=True)
    appointment_id = Column(Uuid, nullable=True)
    reminder_type = Column(String(50), nullable=False)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    reminder_date = Column(Date, nullable=False, index=True)
    reminder_time = Column(Time, nullable=True)
    client_name = Column(String(150), nullable=True)
    priority = Column(String(10), default="Medium")
    status = Column(String(20), default="Active", index=True)
    enable_sms = Column(Boolean, default=False)
    enable_whatsapp = Column(Boolean, default=False)
    enable_push_notification = Column(Boolean, default=True)
    advance_notice = Column(String(20), default="1 day")
    custom_message = Column(Text, nullable=True)
    auto_send = Column(Boolean, default=False)
    notes = Column(Text, nullable=True)
    completed_date = Column(DateTime(timezone=True), nullable=True)


class ReminderSetting(Base, TimestampMixin):
    """Per-agent, per-type auto-generation settings."""

    __tablename__ = "reminder_settings"

    reminder_setting_id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    agent_id = Column(Uuid, nullable=False, index=True)
    reminder_type = Column(String(50), nullable=False)
    is_enabled = Column(Boolean, default=True)
    days_before = Column(Integer, default=1)
    time_of_day = Column(Time, nullable=True)
    repeat_daily = Column(Boolean, default=False)
