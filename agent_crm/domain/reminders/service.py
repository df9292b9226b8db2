"""Reminder service - Business logic for reminder operations"""

import logging
from datetime import date
from typing import Any, Mapping

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...config import (
    BIRTHDAY_COUNT_WINDOW_DAYS,
    DEFAULT_COUNTRY_CODE,
    POLICY_EXPIRY_COUNT_WINDOW_DAYS,
)
from ...shared.db_errors import run_write
from ...shared.row_mapper import (
    map_birthday_reminder,
    map_policy_expiry_reminder,
    map_reminder,
    map_reminder_settings,
)
from ...shared.temporal import parse_iso_date, parse_time, today_in_reference_tz
from ...shared.validators import normalize_reminder_type, validate_days_ahead, validate_phone_number
from .query import (
    ReminderFilters,
    build_page,
    parse_reminder_filters,
    total_from_filtered_rows,
)
from .repository import ReminderRepository
from .schemas import ReminderCreate, ReminderSettingsUpdate, ReminderUpdate

logger = logging.getLogger(__name__)

# Request field -> column for plain (untransformed) updates
_UPDATABLE_FIELDS = {
    "Title": "title",
    "Description": "description",
    "Priority": "priority",
    "EnableSMS": "enable_sms",
    "EnableWhatsApp": "enable_whatsapp",
    "EnablePushNotification": "enable_push_notification",
    "AdvanceNotice": "advance_notice",
    "CustomMessage": "custom_message",
    "AutoSend": "auto_send",
    "Notes": "notes",
}


def _parse_date_or_400(value: str, label: str) -> date:
    try:
        return parse_iso_date(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"{label} must be a valid date (YYYY-MM-DD)")


class ReminderService:
    """Service layer for reminder business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ReminderRepository()

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def parse_filters(self, params: Mapping[str, Any]) -> ReminderFilters:
        try:
            return parse_reminder_filters(params)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    def list_reminders(self, agent_id: str, filters: ReminderFilters) -> dict:
        """Paginated reminders, choosing the retrieval path from the filters"""
        if filters.uses_filtered_path:
            rows = self.repo.list_filtered(self.db, agent_id, filters)
            total = total_from_filtered_rows(rows)
            logger.info(f"🔍 Filtered reminders for agent {agent_id}: {len(rows)} rows, total {total}")
        else:
            rows = self.repo.list_unfiltered(self.db, agent_id, filters)
            counts = self.repo.source_counts(
                self.db,
                agent_id,
                today_in_reference_tz(),
                POLICY_EXPIRY_COUNT_WINDOW_DAYS,
                BIRTHDAY_COUNT_WINDOW_DAYS,
            )
            total = counts.total
            logger.info(
                f"🔍 Unfiltered reminders for agent {agent_id}: {len(rows)} rows, "
                f"total {total} (reminders={counts.native_reminders}, policies={counts.policy_expiries}, "
                f"birthdays={counts.birthdays}, appointments={counts.appointments})"
            )

        return build_page([map_reminder(row) for row in rows], total, filters)

    def get_reminders_by_type(self, agent_id: str, reminder_type: str) -> list[dict]:
        try:
            canonical = normalize_reminder_type(reminder_type)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return [map_reminder(row) for row in self.repo.list_by_type(self.db, agent_id, canonical)]

    def get_reminders_by_status(self, agent_id: str, status: str) -> list[dict]:
        if not status or not status.strip():
            raise HTTPException(status_code=400, detail="Status is required")
        return [map_reminder(row) for row in self.repo.list_by_status(self.db, agent_id, status.strip())]

    def get_today_reminders(self, agent_id: str) -> list[dict]:
        today = today_in_reference_tz()
        return [map_reminder(row) for row in self.repo.list_for_date(self.db, agent_id, today)]

    def get_reminder(self, agent_id: str, reminder_id: str) -> dict:
        row = self.repo.get_by_id(self.db, agent_id, reminder_id)
        if not row:
            raise HTTPException(status_code=404, detail="Reminder not found")
        return map_reminder(row)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_reminder(self, agent_id: str, data: ReminderCreate) -> dict:
        """Create a reminder, returning its id"""
        if not data.Title or not data.ReminderType or not data.ReminderDate:
            raise HTTPException(status_code=400, detail="Title, ReminderType, and ReminderDate are required")

        reminder_date = _parse_date_or_400(data.ReminderDate, "ReminderDate")

        if data.ClientId and not self.repo.client_belongs_to_agent(self.db, agent_id, data.ClientId):
            raise HTTPException(status_code=400, detail="Invalid client or agent ID provided")

        reminder_data = {
            "client_id": data.ClientId,
            "appointment_id": data.AppointmentId,
            "reminder_type": data.ReminderType,
            "title": data.Title,
            "description": data.Description,
            "reminder_date": reminder_date,
            "reminder_time": parse_time(data.ReminderTime),
            "client_name": data.ClientName,
            "priority": data.Priority or "Medium",
            "status": "Active",
            "enable_sms": data.EnableSMS if data.EnableSMS is not None else False,
            "enable_whatsapp": data.EnableWhatsApp if data.EnableWhatsApp is not None else False,
            "enable_push_notification": (
                data.EnablePushNotification if data.EnablePushNotification is not None else True
            ),
            "advance_notice": data.AdvanceNotice or "1 day",
            "custom_message": data.CustomMessage,
            "auto_send": data.AutoSend if data.AutoSend is not None else False,
            "notes": data.Notes,
        }

        logger.info(f"📝 Creating {data.ReminderType} reminder for agent {agent_id}")
        reminder = run_write(
            self.db, "Create reminder", "reminder", self.repo.create, self.db, agent_id, **reminder_data
        )
        logger.info(f"✅ Reminder created: {reminder.reminder_id}")
        return {"ReminderId": reminder.reminder_id}

    def update_reminder(self, agent_id: str, reminder_id: str, data: ReminderUpdate) -> dict:
        """Partial update; returns the updated reminder"""
        current_status = self.repo.get_status(self.db, agent_id, reminder_id)
        if current_status is None:
            raise HTTPException(status_code=404, detail="Reminder not found")

        fields = data.model_dump(exclude_unset=True)
        updates: dict[str, Any] = {
            column: fields[field]
            for field, column in _UPDATABLE_FIELDS.items()
            if fields.get(field) is not None
        }

        if fields.get("ReminderDate"):
            updates["reminder_date"] = _parse_date_or_400(fields["ReminderDate"], "ReminderDate")

        if fields.get("ReminderTime"):
            reminder_time = parse_time(fields["ReminderTime"])
            if reminder_time is not None:
                updates["reminder_time"] = reminder_time

        new_status = fields.get("Status")
        if new_status and new_status != current_status:
            if current_status != "Active":
                raise HTTPException(
                    status_code=400, detail=f"Cannot change status of a {current_status.lower()} reminder"
                )
            if new_status == "Active":
                raise HTTPException(status_code=400, detail="Reminder is already active")
            return self._apply_status_then_fetch(agent_id, reminder_id, new_status, updates)

        if updates:
            rows = run_write(
                self.db, "Update reminder", "reminder", self.repo.update, self.db, agent_id, reminder_id, **updates
            )
            if rows == 0:
                raise HTTPException(status_code=404, detail="Reminder not found or no changes made")

        return self.get_reminder(agent_id, reminder_id)

    def _apply_status_then_fetch(self, agent_id: str, reminder_id: str, new_status: str, updates: dict) -> dict:
        if updates:
            run_write(
                self.db, "Update reminder", "reminder", self.repo.update, self.db, agent_id, reminder_id, **updates
            )
        self._transition(agent_id, reminder_id, new_status, notes=None)
        return self.get_reminder(agent_id, reminder_id)

    def _transition(self, agent_id: str, reminder_id: str, new_status: str, notes) -> int:
        rows = run_write(
            self.db,
            "Update reminder status",
            "reminder",
            self.repo.transition_status,
            self.db,
            agent_id,
            reminder_id,
            new_status,
            notes,
        )
        if rows == 0:
            if self.repo.get_status(self.db, agent_id, reminder_id) is None:
                raise HTTPException(status_code=404, detail="Reminder not found")
            raise HTTPException(status_code=400, detail="Only active reminders can change status")
        logger.info(f"✅ Reminder {reminder_id} -> {new_status}")
        return rows

    def complete_reminder(self, agent_id: str, reminder_id: str, notes=None) -> dict:
        rows = self._transition(agent_id, reminder_id, "Completed", notes)
        return {"RowsAffected": rows}

    def update_reminder_status(self, agent_id: str, reminder_id: str, status: str) -> dict:
        rows = self._transition(agent_id, reminder_id, status, notes=None)
        return {"RowsAffected": rows, "Status": status}

    def delete_reminder(self, agent_id: str, reminder_id: str) -> dict:
        rows = run_write(
            self.db, "Delete reminder", "reminder", self.repo.delete, self.db, agent_id, reminder_id
        )
        if rows == 0:
            raise HTTPException(status_code=404, detail="Reminder not found")
        logger.info(f"🗑️ Reminder deleted: {reminder_id}")
        return {"RowsAffected": rows}

    # ------------------------------------------------------------------
    # Settings and statistics
    # ------------------------------------------------------------------

    def get_settings(self, agent_id: str) -> list[dict]:
        return [map_reminder_settings(row) for row in self.repo.get_settings(self.db, agent_id)]

    def update_settings(self, agent_id: str, data: ReminderSettingsUpdate) -> None:
        if not data.ReminderType or data.IsEnabled is None:
            raise HTTPException(status_code=400, detail="ReminderType and IsEnabled are required")

        run_write(
            self.db,
            "Update reminder settings",
            "reminder settings",
            self.repo.upsert_setting,
            self.db,
            agent_id,
            data.ReminderType,
            is_enabled=data.IsEnabled,
            days_before=data.DaysBefore,
            time_of_day=parse_time(data.TimeOfDay),
            repeat_daily=data.RepeatDaily,
        )
        logger.info(f"⚙️ Settings for {data.ReminderType} updated for agent {agent_id}")

    def get_statistics(self, agent_id: str) -> dict:
        return self.repo.statistics(self.db, agent_id, today_in_reference_tz())

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def get_birthday_reminders(self, agent_id: str) -> list[dict]:
        today = today_in_reference_tz()
        return [map_birthday_reminder(row) for row in self.repo.birthdays_on(self.db, agent_id, today)]

    def get_policy_expiry_reminders(self, agent_id: str, days_ahead: Any) -> list[dict]:
        try:
            days = validate_days_ahead(days_ahead)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        today = today_in_reference_tz()
        reminders = []
        for row in self.repo.policies_expiring(self.db, agent_id, today, days):
            row["days_until_expiry"] = (row["end_date"] - today).days
            reminders.append(map_policy_expiry_reminder(row))
        return reminders

    def validate_phone(self, phone_number, country_code=None) -> dict:
        if not phone_number:
            raise HTTPException(status_code=400, detail="Phone number is required")
        return validate_phone_number(phone_number, country_code or DEFAULT_COUNTRY_CODE)
