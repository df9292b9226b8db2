"""Reminder domain schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import (
    REMINDER_PRIORITIES,
    REMINDER_STATUSES,
    normalize_reminder_type,
    validate_choice,
    validate_uuid,
)


def _validate_priority(v):
    return validate_choice(v, REMINDER_PRIORITIES, "priority") if v else v


def _validate_optional_uuid(v, label):
    if v and not validate_uuid(v):
        raise ValueError(f"{label} must be a valid UUID")
    return v or None


class ReminderCreate(BaseModel):
    """Schema for creating a reminder (Title, ReminderType and ReminderDate checked by the service)"""

    ClientId: Optional[str] = None
    AppointmentId: Optional[str] = None
    ReminderType: Optional[str] = None
    Title: Optional[str] = None
    Description: Optional[str] = None
    ReminderDate: Optional[str] = None
    ReminderTime: Optional[str] = None
    ClientName: Optional[str] = None
    Priority: Optional[str] = None
    EnableSMS: Optional[bool] = None
    EnableWhatsApp: Optional[bool] = None
    EnablePushNotification: Optional[bool] = None
    AdvanceNotice: Optional[str] = None
    CustomMessage: Optional[str] = None
    AutoSend: Optional[bool] = None
    Notes: Optional[str] = None

    @field_validator("ReminderType")
    @classmethod
    def validate_reminder_type(cls, v):
        return normalize_reminder_type(v) if v else v

    @field_validator("Priority")
    @classmethod
    def validate_priority(cls, v):
        return _validate_priority(v)

    @field_validator("ClientId")
    @classmethod
    def validate_client_id(cls, v):
        return _validate_optional_uuid(v, "ClientId")

    @field_validator("AppointmentId")
    @classmethod
    def validate_appointment_id(cls, v):
        return _validate_optional_uuid(v, "AppointmentId")

    @field_validator("ReminderTime", mode="before")
    @classmethod
    def stringify_time(cls, v):
        # Malformed times are dropped later, never rejected here
        return None if v is None else str(v)


class ReminderUpdate(BaseModel):
    """Schema for a partial reminder update"""

    Title: Optional[str] = None
    Description: Optional[str] = None
    ReminderDate: Optional[str] = None
    ReminderTime: Optional[str] = None
    Priority: Optional[str] = None
    Status: Optional[str] = None
    EnableSMS: Optional[bool] = None
    EnableWhatsApp: Optional[bool] = None
    EnablePushNotification: Optional[bool] = None
    AdvanceNotice: Optional[str] = None
    CustomMessage: Optional[str] = None
    AutoSend: Optional[bool] = None
    Notes: Optional[str] = None

    @field_validator("Priority")
    @classmethod
    def validate_priority(cls, v):
        return _validate_priority(v)

    @field_validator("Status")
    @classmethod
    def validate_status(cls, v):
        return validate_choice(v, REMINDER_STATUSES, "status") if v else v

    @field_validator("ReminderTime", mode="before")
    @classmethod
    def stringify_time(cls, v):
        return None if v is None else str(v)


class ReminderComplete(BaseModel):
    Notes: Optional[str] = None


class ReminderStatusUpdate(BaseModel):
    Status: str

    @field_validator("Status")
    @classmethod
    def validate_status(cls, v):
        status = validate_choice(v, REMINDER_STATUSES, "status")
        if status == "Active":
            raise ValueError("Status can only be changed to Completed or Cancelled")
        return status


class ReminderSettingsUpdate(BaseModel):
    """Upsert of one per-type settings row"""

    ReminderType: Optional[str] = None
    IsEnabled: Optional[bool] = None
    DaysBefore: Optional[int] = None
    TimeOfDay: Optional[str] = None
    RepeatDaily: Optional[bool] = None

    @field_validator("ReminderType")
    @classmethod
    def validate_reminder_type(cls, v):
        return normalize_reminder_type(v) if v else v

    @field_validator("DaysBefore")
    @classmethod
    def validate_days_before(cls, v):
        if v is not None and v < 0:
            raise ValueError("DaysBefore cannot be negative")
        return v


class PhoneValidationRequest(BaseModel):
    phoneNumber: Optional[str] = None
    countryCode: Optional[str] = None
