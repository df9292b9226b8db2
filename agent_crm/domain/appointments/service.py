"""Appointment service - Business logic for appointment operations"""

import logging
from datetime import date, timedelta
from typing import Any, Mapping, Optional

from fastapi import BackgroundTasks, HTTPException
from sqlalchemy.orm import Session

from ...config import APPOINTMENT_DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ...services.notification_service import send_appointment_confirmation_safely
from ...shared.db_errors import run_write
from ...shared.row_mapper import CLIENT_SEARCH_RESULT, map_appointment
from ...shared.temporal import parse_iso_date, start_of_week, today_in_reference_tz
from ...shared.validators import validate_uuid
from .conflicts import INACTIVE_STATUSES, TimeWindow, conflict_result, find_conflicts, resolve_window
from .repository import AppointmentRepository
from .schemas import AppointmentCreate, AppointmentUpdate, ConflictCheckRequest
from .views import build_calendar_view, build_week_view, month_bounds, parse_month_year

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS_MESSAGE = (
    "Missing required fields: clientId, title, appointmentDate, startTime, endTime, and type are required"
)

# Request field -> column for plain (untransformed) updates
_UPDATABLE_FIELDS = {
    "clientId": "client_id",
    "title": "title",
    "description": "description",
    "location": "location",
    "type": "type",
    "status": "status",
    "priority": "priority",
    "notes": "notes",
    "reminderSet": "reminder_set",
}


def _bad_request(error: ValueError) -> HTTPException:
    return HTTPException(status_code=400, detail=str(error))


def _is_revival(current_status: Optional[str], new_status: Optional[str]) -> bool:
    """Cancelled -> any active status; the appointment needs its slot back"""
    return current_status in INACTIVE_STATUSES and new_status not in INACTIVE_STATUSES


def _optional_date(value: Optional[str], label: str) -> Optional[date]:
    if not value:
        return None
    try:
        return parse_iso_date(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"{label} must be a valid date (YYYY-MM-DD)")


class AppointmentService:
    """Service layer for appointment business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AppointmentRepository()

    # ------------------------------------------------------------------
    # Conflict detection
    # ------------------------------------------------------------------

    def find_conflicting(
        self, agent_id: str, window: TimeWindow, exclude_appointment_id: Optional[str] = None
    ) -> dict:
        candidates = self.repo.conflict_candidates(self.db, agent_id, window.appointment_date)
        conflicting = find_conflicts(window, candidates, exclude_appointment_id)
        return conflict_result([map_appointment(row) for row in conflicting])

    def check_conflicts(self, agent_id: str, data: ConflictCheckRequest) -> dict:
        if not data.appointmentDate or not data.startTime or not data.endTime:
            raise HTTPException(status_code=400, detail="appointmentDate, startTime, and endTime are required")
        try:
            window = resolve_window(data.appointmentDate, data.startTime, data.endTime)
        except ValueError as e:
            raise _bad_request(e)
        return self.find_conflicting(agent_id, window, data.excludeAppointmentId)

    def _reject_on_conflict(
        self, agent_id: str, window: TimeWindow, exclude_appointment_id: Optional[str] = None
    ) -> None:
        result = self.find_conflicting(agent_id, window, exclude_appointment_id)
        if result["hasConflicts"]:
            logger.warning(
                f"⚠️ Appointment conflict for agent {agent_id} on {window.appointment_date} "
                f"{window.start}-{window.end}: {len(result['conflictingAppointments'])} overlapping"
            )
            raise HTTPException(status_code=409, detail=result)

    def _require_client(self, agent_id: str, client_id: str) -> None:
        if not self.repo.client_belongs_to_agent(self.db, agent_id, client_id):
            raise HTTPException(status_code=400, detail="Invalid client or agent ID provided")

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_appointment(
        self, agent_id: str, data: AppointmentCreate, background_tasks: BackgroundTasks
    ) -> dict:
        """Create an appointment after the conflict check; queues the client confirmation"""
        if not all((data.clientId, data.title, data.appointmentDate, data.startTime, data.endTime, data.type)):
            raise HTTPException(status_code=400, detail=_REQUIRED_FIELDS_MESSAGE)

        try:
            window = resolve_window(data.appointmentDate, data.startTime, data.endTime)
        except ValueError as e:
            raise _bad_request(e)

        self._require_client(agent_id, data.clientId)
        self._reject_on_conflict(agent_id, window)

        appointment_data = {
            "client_id": data.clientId,
            "title": data.title,
            "description": data.description,
            "appointment_date": window.appointment_date,
            "start_time": window.start,
            "end_time": window.end,
            "location": data.location,
            "type": data.type,
            "status": data.status or "Scheduled",
            "priority": data.priority or "Medium",
            "notes": data.notes,
            "reminder_set": data.reminderSet if data.reminderSet is not None else False,
        }

        logger.info(f"📅 Creating appointment for agent {agent_id} on {window.appointment_date}")
        appointment = run_write(
            self.db,
            "Create appointment",
            "appointment",
            self.repo.create,
            self.db,
            agent_id,
            **appointment_data,
        )
        logger.info(f"✅ Appointment created: {appointment.appointment_id}")

        details = self.repo.get_by_id(self.db, agent_id, appointment.appointment_id)
        if details and details.get("client_email"):
            background_tasks.add_task(
                send_appointment_confirmation_safely,
                client_email=details["client_email"],
                client_name=details.get("client_name"),
                title=appointment.title,
                appointment_date=window.appointment_date,
                start_time=window.start,
                location=appointment.location,
            )

        return {"appointmentId": appointment.appointment_id}

    def update_appointment(self, agent_id: str, appointment_id: str, data: AppointmentUpdate) -> dict:
        """Partial update; re-checks conflicts when the window moves or a cancelled appointment is revived"""
        existing = self.repo.get_by_id(self.db, agent_id, appointment_id)
        if not existing:
            raise HTTPException(status_code=404, detail="Appointment not found")

        fields = {key: value for key, value in data.model_dump(exclude_unset=True).items() if value is not None}
        updates: dict[str, Any] = {
            column: fields[field] for field, column in _UPDATABLE_FIELDS.items() if field in fields
        }

        if "clientId" in fields:
            self._require_client(agent_id, fields["clientId"])

        moves_window = any(key in fields for key in ("appointmentDate", "startTime", "endTime"))
        new_status = fields.get("status", existing["status"])
        reviving = _is_revival(existing["status"], new_status)

        if moves_window or reviving:
            try:
                window = resolve_window(
                    fields.get("appointmentDate", existing["appointment_date"]),
                    fields.get("startTime", existing["start_time"]),
                    fields.get("endTime", existing["end_time"]),
                )
            except ValueError as e:
                raise _bad_request(e)

            # Cancelled appointments hold no slot
            if new_status not in INACTIVE_STATUSES:
                self._reject_on_conflict(agent_id, window, exclude_appointment_id=appointment_id)

        if moves_window:
            updates.update(
                appointment_date=window.appointment_date,
                start_time=window.start,
                end_time=window.end,
            )

        if updates:
            rows = run_write(
                self.db,
                "Update appointment",
                "appointment",
                self.repo.update,
                self.db,
                agent_id,
                appointment_id,
                **updates,
            )
            if rows == 0:
                raise HTTPException(status_code=404, detail="Appointment not found")
            logger.info(f"✅ Appointment updated: {appointment_id}")

        return self.get_appointment(agent_id, appointment_id)

    def delete_appointment(self, agent_id: str, appointment_id: str) -> dict:
        """Soft delete (is_active = false)"""
        rows = run_write(
            self.db,
            "Delete appointment",
            "appointment",
            self.repo.soft_delete,
            self.db,
            agent_id,
            appointment_id,
        )
        if rows == 0:
            raise HTTPException(status_code=404, detail="Appointment not found")
        logger.info(f"🗑️ Appointment deactivated: {appointment_id}")
        return {"appointmentId": appointment_id}

    def update_status(self, agent_id: str, appointment_id: str, status: Optional[str]) -> dict:
        if not status:
            raise HTTPException(status_code=400, detail="Status is required")

        existing = self.repo.get_by_id(self.db, agent_id, appointment_id)
        if not existing:
            raise HTTPException(status_code=404, detail="Appointment not found")

        if _is_revival(existing["status"], status):
            try:
                window = resolve_window(existing["appointment_date"], existing["start_time"], existing["end_time"])
            except ValueError as e:
                raise _bad_request(e)
            self._reject_on_conflict(agent_id, window, exclude_appointment_id=appointment_id)

        rows = run_write(
            self.db,
            "Update appointment status",
            "appointment",
            self.repo.update,
            self.db,
            agent_id,
            appointment_id,
            status=status,
        )
        if rows == 0:
            raise HTTPException(status_code=404, detail="Appointment not found")
        return {"appointmentId": appointment_id, "status": status}

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_appointment(self, agent_id: str, appointment_id: str) -> dict:
        row = self.repo.get_by_id(self.db, agent_id, appointment_id)
        if not row:
            raise HTTPException(status_code=404, detail="Appointment not found")
        return map_appointment(row)

    def list_appointments(self, agent_id: str, params: Mapping[str, Any]) -> list[dict]:
        try:
            page_number = int(params.get("pageNumber") or 1)
            page_size = int(params.get("pageSize") or APPOINTMENT_DEFAULT_PAGE_SIZE)
        except ValueError:
            raise HTTPException(status_code=400, detail="pageNumber and pageSize must be integers")
        if page_number < 1:
            raise HTTPException(status_code=400, detail="pageNumber must be at least 1")
        if page_size < 1 or page_size > MAX_PAGE_SIZE:
            raise HTTPException(status_code=400, detail=f"pageSize must be between 1 and {MAX_PAGE_SIZE}")

        client_id = params.get("clientId") or None
        if client_id and not validate_uuid(client_id):
            raise HTTPException(status_code=400, detail="clientId must be a valid UUID")

        rows = self.repo.list_filtered(
            self.db,
            agent_id,
            page_number,
            page_size,
            status=params.get("status") or None,
            appointment_type=params.get("type") or None,
            priority=params.get("priority") or None,
            start_date=_optional_date(params.get("startDate"), "startDate"),
            end_date=_optional_date(params.get("endDate"), "endDate"),
            client_id=client_id,
            search_term=params.get("searchTerm") or None,
        )
        return [map_appointment(row) for row in rows]

    def get_today_appointments(self, agent_id: str) -> list[dict]:
        today = today_in_reference_tz()
        return [map_appointment(row) for row in self.repo.list_for_date(self.db, agent_id, today)]

    def get_appointments_for_date(self, agent_id: str, appointment_date: Optional[str]) -> list[dict]:
        if not appointment_date:
            raise HTTPException(status_code=400, detail="appointmentDate query parameter is required")
        day = _optional_date(appointment_date, "appointmentDate")
        return [map_appointment(row) for row in self.repo.list_for_date(self.db, agent_id, day)]

    def search_appointments(self, agent_id: str, search_term: Optional[str]) -> list[dict]:
        if not search_term or not search_term.strip():
            raise HTTPException(status_code=400, detail="searchTerm query parameter is required")
        return [map_appointment(row) for row in self.repo.search(self.db, agent_id, search_term.strip())]

    def search_clients(self, agent_id: str, query: Optional[str]) -> list[dict]:
        if not query or not query.strip():
            raise HTTPException(status_code=400, detail="Search query (q) is required")
        return CLIENT_SEARCH_RESULT.map_rows(self.repo.search_clients(self.db, agent_id, query.strip()))

    def get_week_view(self, agent_id: str, week_start_date: Optional[str] = None) -> list[dict]:
        """Seven consecutive days from weekStartDate (default Monday of this week)"""
        week_start = _optional_date(week_start_date, "weekStartDate") or start_of_week(today_in_reference_tz())
        rows = self.repo.list_between(self.db, agent_id, week_start, week_start + timedelta(days=6))
        return build_week_view(rows, week_start, map_appointment)

    def get_calendar_view(self, agent_id: str, month: Any, year: Any) -> list[dict]:
        """Only dates that have appointments"""
        try:
            month_value, year_value = parse_month_year(month, year)
        except ValueError as e:
            raise _bad_request(e)
        first, last = month_bounds(month_value, year_value)
        rows = self.repo.list_between(self.db, agent_id, first, last)
        return build_calendar_view(rows, map_appointment)

    def get_statistics(self, agent_id: str) -> dict:
        today = today_in_reference_tz()
        week_start = start_of_week(today)
        stats = self.repo.statistics(
            self.db,
            agent_id,
            today,
            (week_start, week_start + timedelta(days=6)),
            month_bounds(today.month, today.year),
        )
        # Short aliases kept for older dashboard widgets
        stats.update(
            todayCount=stats["todayAppointments"],
            weekCount=stats["weekAppointments"],
            monthCount=stats["monthAppointments"],
            completedCount=stats["completedAppointments"],
        )
        return stats
