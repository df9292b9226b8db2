"""
Appointment conflict detection.

Two appointments conflict when they belong to the same agent, fall on the same
date, are both active (active flag set and not Cancelled) and their
[start, end) windows intersect. Windows that merely touch (one ends exactly
when the other starts) do not conflict. The appointment being edited is
excluded from its own check.

The check runs before the write and is not atomic with it; two concurrent
bookings of the same slot can both pass.
"""

import logging
from dataclasses import dataclass
from datetime import date, time
from typing import Any, Iterable, Mapping, Optional

from ...shared.temporal import parse_iso_date, parse_time

logger = logging.getLogger(__name__)

INACTIVE_STATUSES = ("Cancelled",)


@dataclass(frozen=True)
class TimeWindow:
    appointment_date: date
    start: time
    end: time


def resolve_window(appointment_date: Any, start_time: Any, end_time: Any) -> TimeWindow:
    """
    Parse and validate a candidate window.

    Raises:
        ValueError: If the date or either time is unparseable, or end <= start
    """
    try:
        day = parse_iso_date(appointment_date)
    except (TypeError, ValueError):
        raise ValueError("appointmentDate must be a valid date (YYYY-MM-DD)")

    start = parse_time(start_time)
    end = parse_time(end_time)
    if start is None or end is None:
        raise ValueError("startTime and endTime must be valid times (HH:MM or HH:MM:SS)")
    if end <= start:
        raise ValueError("endTime must be after startTime")
    return TimeWindow(day, start, end)


def intervals_overlap(start_a: time, end_a: time, start_b: time, end_b: time) -> bool:
    """Half-open [start, end) intersection"""
    return start_a < end_b and start_b < end_a


def is_active_appointment(row: Mapping[str, Any]) -> bool:
    is_active = row.get("is_active")
    return (is_active is None or bool(is_active)) and row.get("status") not in INACTIVE_STATUSES


def find_conflicts(
    window: TimeWindow,
    candidates: Iterable[Mapping[str, Any]],
    exclude_appointment_id: Optional[str] = None,
) -> list[Mapping[str, Any]]:
    """Candidates (same agent) whose window overlaps the requested one"""
    conflicts = []
    for row in candidates:
        if exclude_appointment_id and str(row.get("appointment_id")) == str(exclude_appointment_id):
            continue
        if not is_active_appointment(row):
            continue
        if parse_iso_date(row["appointment_date"]) != window.appointment_date:
            continue

        start = parse_time(row.get("start_time"))
        end = parse_time(row.get("end_time"))
        if start is None or end is None:
            logger.warning(f"⚠️ Appointment {row.get('appointment_id')} has an unreadable window, skipping")
            continue

        if intervals_overlap(window.start, window.end, start, end):
            conflicts.append(row)
    return conflicts


def conflict_result(conflicting_appointments: list[dict]) -> dict:
    has_conflicts = bool(conflicting_appointments)
    if has_conflicts:
        count = len(conflicting_appointments)
        message = f"Time conflicts found with {count} existing appointment{'s' if count != 1 else ''}"
    else:
        message = "No conflicts"
    return {
        "hasConflicts": has_conflicts,
        "conflictingAppointments": conflicting_appointments,
        "message": message,
        "conflicts": has_conflicts,
    }
