"""Appointment domain schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import APPOINTMENT_STATUSES, REMINDER_PRIORITIES, validate_choice, validate_uuid


def _stringify(v):
    return None if v is None else str(v)


class AppointmentCreate(BaseModel):
    """Schema for creating an appointment (required fields checked by the service)"""

    clientId: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    appointmentDate: Optional[str] = None
    startTime: Optional[str] = None
    endTime: Optional[str] = None
    location: Optional[str] = None
    type: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    notes: Optional[str] = None
    reminderSet: Optional[bool] = None

    @field_validator("clientId")
    @classmethod
    def validate_client_id(cls, v):
        if v and not validate_uuid(v):
            raise ValueError("clientId must be a valid UUID")
        return v

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return validate_choice(v, APPOINTMENT_STATUSES, "status") if v else v

    @field_validator("priority")
    @classmethod
    def validate_priority(cls, v):
        return validate_choice(v, REMINDER_PRIORITIES, "priority") if v else v

    @field_validator("startTime", "endTime", "appointmentDate", mode="before")
    @classmethod
    def stringify(cls, v):
        return _stringify(v)


class AppointmentUpdate(AppointmentCreate):
    """Schema for a partial appointment update"""


class AppointmentStatusUpdate(BaseModel):
    status: Optional[str] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return validate_choice(v, APPOINTMENT_STATUSES, "status") if v else v


class ConflictCheckRequest(BaseModel):
    appointmentDate: Optional[str] = None
    startTime: Optional[str] = None
    endTime: Optional[str] = None
    excludeAppointmentId: Optional[str] = None

    @field_validator("startTime", "endTime", "appointmentDate", mode="before")
    @classmethod
    def stringify(cls, v):
        return _stringify(v)
