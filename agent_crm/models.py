import uuid

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    Time,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


def generate_id():
    """Generate a UUID primary key as a string"""
    return str(uuid.uuid4())


class Client(Base):
    __tablename__ = "clients"

    client_id = Column(String(36), primary_key=True, default=generate_id)
    agent_id = Column(String(36), index=True, nullable=False)
    first_name = Column(String(50), nullable=False)
    surname = Column(String(50), nullable=True)
    last_name = Column(String(50), nullable=True)
    phone_number = Column(String(20), nullable=True)
    email = Column(String(100), nullable=True)
    address = Column(String(500), nullable=True)
    national_id = Column(String(20), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    is_client = Column(Boolean, default=True, nullable=False)  # False for prospects
    insurance_type = Column(String(50), nullable=True)
    notes = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_date = Column(DateTime, server_default=func.now())
    modified_date = Column(DateTime, server_default=func.now(), onupdate=func.now())

    policies = relationship("ClientPolicy", back_populates="client")
    appointments = relationship("Appointment", back_populates="client")


class ClientPolicy(Base):
    __tablename__ = "client_policies"

    policy_id = Column(String(36), primary_key=True, default=generate_id)
    client_id = Column(String(36), ForeignKey("clients.client_id"), nullable=False, index=True)
    policy_name = Column(String(100), nullable=False)
    policy_type = Column(String(50), nullable=True)
    company_name = Column(String(100), nullable=True)
    status = Column(String(20), default="Active")
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_date = Column(DateTime, server_default=func.now())
    modified_date = Column(DateTime, server_default=func.now(), onupdate=func.now())

    client = relationship("Client", back_populates="policies")


class Appointment(Base):
    __tablename__ = "appointments"

    appointment_id = Column(String(36), primary_key=True, default=generate_id)
    agent_id = Column(String(36), index=True, nullable=False)
    client_id = Column(String(36), ForeignKey("clients.client_id"), nullable=False)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    appointment_date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    location = Column(String(200), nullable=True)
    type = Column(String(50), nullable=False)  # Call, Meeting, Site Visit, Policy Review, Claims
    status = Column(String(50), default="Scheduled")  # Scheduled, Confirmed, Completed, Cancelled
    priority = Column(String(20), default="Medium")
    notes = Column(Text, nullable=True)
    reminder_set = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)  # Soft delete flag
    created_date = Column(DateTime, server_default=func.now())
    modified_date = Column(DateTime, server_default=func.now(), onupdate=func.now())

    client = relationship("Client", back_populates="appointments")


class Reminder(Base):
    __tablename__ = "reminders"

    reminder_id = Column(String(36), primary_key=True, default=generate_id)
    agent_id = Column(String(36), index=True, nullable=False)
    client_id = Column(String(36), ForeignKey("clients.client_id"), nullable=True)
    appointment_id = Column(String(36), ForeignKey("appointments.appointment_id"), nullable=True)
    reminder_type = Column(String(50), nullable=False)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    reminder_date = Column(Date, nullable=False, index=True)
    reminder_time = Column(Time, nullable=True)
    client_name = Column(String(150), nullable=True)
    priority = Column(String(10), default="Medium")
    status = Column(String(20), default="Active")  # Active, Completed, Cancelled
    enable_sms = Column(Boolean, default=False, nullable=False)
    enable_whatsapp = Column(Boolean, default=False, nullable=False)
    enable_push_notification = Column(Boolean, default=True, nullable=False)
    advance_notice = Column(String(20), default="1 day")
    custom_message = Column(Text, nullable=True)
    auto_send = Column(Boolean, default=False, nullable=False)
    notes = Column(Text, nullable=True)
    created_date = Column(DateTime, server_default=func.now())
    modified_date = Column(DateTime, server_default=func.now(), onupdate=func.now())
    completed_date = Column(DateTime, nullable=True)


class ReminderSetting(Base):
    __tablename__ = "reminder_settings"
    __table_args__ = (UniqueConstraint("agent_id", "reminder_type", name="uq_reminder_settings_agent_type"),)

    reminder_setting_id = Column(String(36), primary_key=True, default=generate_id)
    agent_id = Column(String(36), index=True, nullable=False)
    reminder_type = Column(String(50), nullable=False)
    is_enabled = Column(Boolean, default=True, nullable=False)
    days_before = Column(Integer, default=1)
    time_of_day = Column(Time, nullable=True)
    repeat_daily = Column(Boolean, default=False, nullable=False)
    created_date = Column(DateTime, server_default=func.now())
    modified_date = Column(DateTime, server_default=func.now(), onupdate=func.now())
