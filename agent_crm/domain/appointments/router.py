"""Appointment router - FastAPI endpoints for appointment operations"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request
from sqlalchemy.orm import Session

from ...auth import get_path_agent_id
from ...database import get_db
from .schemas import AppointmentCreate, AppointmentStatusUpdate, AppointmentUpdate, ConflictCheckRequest
from .service import AppointmentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["Appointments"])


def get_appointment_service(db: Session = Depends(get_db)) -> AppointmentService:
    """Dependency injection for AppointmentService"""
    return AppointmentService(db)


# ============================================================================
# VIEWS AND LOOKUPS
# ============================================================================


@router.get("/{agent_id}/week")
async def get_week_view(
    weekStartDate: Optional[str] = Query(None),
    agent_id: str = Depends(get_path_agent_id),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Seven days of appointments; days without appointments are included"""
    return service.get_week_view(agent_id, weekStartDate)


@router.get("/{agent_id}/calendar")
async def get_calendar_view(
    month: Optional[str] = Query(None),
    year: Optional[str] = Query(None),
    agent_id: str = Depends(get_path_agent_id),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Dates in the month that have appointments"""
    return service.get_calendar_view(agent_id, month, year)


@router.get("/{agent_id}/statistics")
async def get_appointment_statistics(
    agent_id: str = Depends(get_path_agent_id),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.get_statistics(agent_id)


@router.get("/{agent_id}/today")
async def get_today_appointments(
    agent_id: str = Depends(get_path_agent_id),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.get_today_appointments(agent_id)


@router.get("/{agent_id}/date")
async def get_appointments_for_date(
    appointmentDate: Optional[str] = Query(None),
    agent_id: str = Depends(get_path_agent_id),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.get_appointments_for_date(agent_id, appointmentDate)


@router.get("/{agent_id}/search")
async def search_appointments(
    searchTerm: Optional[str] = Query(None),
    agent_id: str = Depends(get_path_agent_id),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.search_appointments(agent_id, searchTerm)


@router.get("/{agent_id}/clients/search")
async def search_clients(
    q: Optional[str] = Query(None),
    agent_id: str = Depends(get_path_agent_id),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Client autocomplete for the booking form"""
    return service.search_clients(agent_id, q)


@router.post("/{agent_id}/check-conflicts")
async def check_conflicts(
    data: ConflictCheckRequest,
    agent_id: str = Depends(get_path_agent_id),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.check_conflicts(agent_id, data)


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("/{agent_id}")
async def get_appointments(
    request: Request,
    agent_id: str = Depends(get_path_agent_id),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Appointments with optional status/type/priority/date/client/search filters"""
    return service.list_appointments(agent_id, request.query_params)


@router.post("/{agent_id}", status_code=201)
async def create_appointment(
    data: AppointmentCreate,
    background_tasks: BackgroundTasks,
    agent_id: str = Depends(get_path_agent_id),
    service: AppointmentService = Depends(get_appointment_service),
):
    result = service.create_appointment(agent_id, data, background_tasks)
    return {"success": True, "message": "Appointment created successfully", "data": result}


@router.put("/{agent_id}/{appointment_id}/status")
async def update_appointment_status(
    appointment_id: str,
    data: AppointmentStatusUpdate,
    agent_id: str = Depends(get_path_agent_id),
    service: AppointmentService = Depends(get_appointment_service),
):
    result = service.update_status(agent_id, appointment_id, data.status)
    return {"success": True, "message": "Status updated successfully", "data": result}


@router.get("/{agent_id}/{appointment_id}")
async def get_appointment(
    appointment_id: str,
    agent_id: str = Depends(get_path_agent_id),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.get_appointment(agent_id, appointment_id)


@router.put("/{agent_id}/{appointment_id}")
async def update_appointment(
    appointment_id: str,
    data: AppointmentUpdate,
    agent_id: str = Depends(get_path_agent_id),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.update_appointment(agent_id, appointment_id, data)


@router.delete("/{agent_id}/{appointment_id}")
async def delete_appointment(
    appointment_id: str,
    agent_id: str = Depends(get_path_agent_id),
    service: AppointmentService = Depends(get_appointment_service),
):
    result = service.delete_appointment(agent_id, appointment_id)
    return {"success": True, "message": "Appointment deleted successfully", "data": result}
