"""Reminder router - FastAPI endpoints for reminder operations"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from ...auth import get_agent_id, get_path_agent_id
from ...config import POLICY_EXPIRY_DEFAULT_DAYS
from ...database import get_db
from .schemas import (
    PhoneValidationRequest,
    ReminderComplete,
    ReminderCreate,
    ReminderSettingsUpdate,
    ReminderStatusUpdate,
    ReminderUpdate,
)
from .service import ReminderService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reminders", tags=["Reminders"])


def get_reminder_service(db: Session = Depends(get_db)) -> ReminderService:
    """Dependency injection for ReminderService"""
    return ReminderService(db)


# ============================================================================
# LISTING
# ============================================================================


@router.get("")
async def get_all_reminders(
    request: Request,
    agent_id: str = Depends(get_agent_id),
    service: ReminderService = Depends(get_reminder_service),
):
    """Paginated reminders; filters accepted in PascalCase or camelCase"""
    filters = service.parse_filters(request.query_params)
    return service.list_reminders(agent_id, filters)


@router.get("/agent/{agent_id}")
async def get_all_reminders_for_agent(
    request: Request,
    agent_id: str = Depends(get_path_agent_id),
    service: ReminderService = Depends(get_reminder_service),
):
    """Paginated reminders for the agent in the path"""
    filters = service.parse_filters(request.query_params)
    return service.list_reminders(agent_id, filters)


@router.get("/statistics")
async def get_reminder_statistics(
    agent_id: str = Depends(get_agent_id),
    service: ReminderService = Depends(get_reminder_service),
):
    return service.get_statistics(agent_id)


@router.get("/settings")
async def get_reminder_settings(
    agent_id: str = Depends(get_agent_id),
    service: ReminderService = Depends(get_reminder_service),
):
    return service.get_settings(agent_id)


@router.put("/settings")
async def update_reminder_settings(
    data: ReminderSettingsUpdate,
    agent_id: str = Depends(get_agent_id),
    service: ReminderService = Depends(get_reminder_service),
):
    service.update_settings(agent_id, data)
    return {"success": True, "message": "Reminder settings updated successfully"}


@router.get("/today")
async def get_today_reminders(
    agent_id: str = Depends(get_agent_id),
    service: ReminderService = Depends(get_reminder_service),
):
    """Active reminders dated today in the reference timezone"""
    return service.get_today_reminders(agent_id)


@router.get("/birthdays")
async def get_birthday_reminders(
    agent_id: str = Depends(get_agent_id),
    service: ReminderService = Depends(get_reminder_service),
):
    return service.get_birthday_reminders(agent_id)


@router.get("/policy-expiries")
async def get_policy_expiry_reminders(
    daysAhead: Optional[str] = Query(None),
    agent_id: str = Depends(get_agent_id),
    service: ReminderService = Depends(get_reminder_service),
):
    """Policies ending within daysAhead days (1-365, default 30)"""
    days = daysAhead if daysAhead is not None else POLICY_EXPIRY_DEFAULT_DAYS
    return service.get_policy_expiry_reminders(agent_id, days)


@router.post("/validate-phone")
async def validate_phone_number(
    data: PhoneValidationRequest,
    agent_id: str = Depends(get_agent_id),
    service: ReminderService = Depends(get_reminder_service),
):
    result = service.validate_phone(data.phoneNumber, data.countryCode)
    return {"success": True, "message": "Phone number validation completed", "data": result}


@router.get("/type/{reminder_type}")
async def get_reminders_by_type(
    reminder_type: str,
    agent_id: str = Depends(get_agent_id),
    service: ReminderService = Depends(get_reminder_service),
):
    return service.get_reminders_by_type(agent_id, reminder_type)


@router.get("/status/{status}")
async def get_reminders_by_status(
    status: str,
    agent_id: str = Depends(get_agent_id),
    service: ReminderService = Depends(get_reminder_service),
):
    return service.get_reminders_by_status(agent_id, status)


# ============================================================================
# SINGLE REMINDER OPERATIONS
# ============================================================================


@router.post("", status_code=201)
async def create_reminder(
    data: ReminderCreate,
    agent_id: str = Depends(get_agent_id),
    service: ReminderService = Depends(get_reminder_service),
):
    result = service.create_reminder(agent_id, data)
    return {"success": True, "message": "Reminder created successfully", "data": result}


@router.post("/{reminder_id}/complete")
async def complete_reminder(
    reminder_id: str,
    data: Optional[ReminderComplete] = None,
    agent_id: str = Depends(get_agent_id),
    service: ReminderService = Depends(get_reminder_service),
):
    notes = data.Notes if data else None
    result = service.complete_reminder(agent_id, reminder_id, notes)
    return {"success": True, "message": "Reminder completed successfully", "data": result}


@router.put("/{reminder_id}/status")
async def update_reminder_status(
    reminder_id: str,
    data: ReminderStatusUpdate,
    agent_id: str = Depends(get_agent_id),
    service: ReminderService = Depends(get_reminder_service),
):
    result = service.update_reminder_status(agent_id, reminder_id, data.Status)
    return {"success": True, "message": f"Reminder marked as {data.Status.lower()}", "data": result}


@router.get("/{reminder_id}")
async def get_reminder(
    reminder_id: str,
    agent_id: str = Depends(get_agent_id),
    service: ReminderService = Depends(get_reminder_service),
):
    return service.get_reminder(agent_id, reminder_id)


@router.put("/{reminder_id}")
async def update_reminder(
    reminder_id: str,
    data: ReminderUpdate,
    agent_id: str = Depends(get_agent_id),
    service: ReminderService = Depends(get_reminder_service),
):
    return service.update_reminder(agent_id, reminder_id, data)


@router.delete("/{reminder_id}")
async def delete_reminder(
    reminder_id: str,
    agent_id: str = Depends(get_agent_id),
    service: ReminderService = Depends(get_reminder_service),
):
    result = service.delete_reminder(agent_id, reminder_id)
    return {"success": True, "message": "Reminder deleted successfully", "data": result}
