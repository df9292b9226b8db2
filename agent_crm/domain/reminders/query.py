"""
Reminder query composition - retrieval path selection and pagination.

A reminder listing narrowed by type, status, priority or client goes through
the filtered path, whose rows each carry the total match count. Without any of
those the unfiltered path is used and the total is an aggregate across four
reminder sources (native reminders, expiring policies, upcoming birthdays,
active appointments). That aggregate is an estimate: it is not the number of
rows the unfiltered listing can return, and page counts follow the estimate.
"""

import math
from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping, Optional

from ...config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ...shared.temporal import parse_iso_date
from ...shared.validators import (
    REMINDER_PRIORITIES,
    REMINDER_STATUSES,
    normalize_reminder_type,
    validate_choice,
    validate_uuid,
)


@dataclass(frozen=True)
class ReminderFilters:
    reminder_type: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    client_id: Optional[str] = None
    page_number: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    @property
    def offset(self) -> int:
        return (self.page_number - 1) * self.page_size

    @property
    def uses_filtered_path(self) -> bool:
        return uses_filtered_path(self)


@dataclass(frozen=True)
class ReminderSourceCounts:
    """Independently computed counts behind the unfiltered reminder total"""

    native_reminders: int = 0
    policy_expiries: int = 0
    birthdays: int = 0
    appointments: int = 0

    @property
    def total(self) -> int:
        return self.native_reminders + self.policy_expiries + self.birthdays + self.appointments


def _param(params: Mapping[str, Any], *names: str) -> Optional[str]:
    """First non-empty value among the accepted spellings of a query parameter"""
    for name in names:
        value = params.get(name)
        if value is not None and str(value).strip() != "":
            return str(value).strip()
    return None


def _parse_int(value: Optional[str], default: int, label: str) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{label} must be an integer")


def parse_reminder_filters(params: Mapping[str, Any]) -> ReminderFilters:
    """
    Build filters from query parameters given in PascalCase or camelCase.

    Raises:
        ValueError: On bad paging values, unparseable dates or unknown enum values
    """
    page_number = _parse_int(_param(params, "PageNumber", "pageNumber"), 1, "PageNumber")
    page_size = _parse_int(_param(params, "PageSize", "pageSize"), DEFAULT_PAGE_SIZE, "PageSize")

    if page_number < 1:
        raise ValueError("PageNumber must be at least 1")
    if page_size < 1 or page_size > MAX_PAGE_SIZE:
        raise ValueError(f"PageSize must be between 1 and {MAX_PAGE_SIZE}")

    start_date = _param(params, "StartDate", "startDate")
    end_date = _param(params, "EndDate", "endDate")
    try:
        start = parse_iso_date(start_date) if start_date else None
        end = parse_iso_date(end_date) if end_date else None
    except ValueError:
        raise ValueError("StartDate and EndDate must be valid dates (YYYY-MM-DD)")

    client_id = _param(params, "ClientId", "clientId")
    if client_id and not validate_uuid(client_id):
        raise ValueError("ClientId must be a valid UUID")

    return ReminderFilters(
        reminder_type=normalize_reminder_type(_param(params, "ReminderType", "reminderType")),
        status=validate_choice(_param(params, "Status", "status"), REMINDER_STATUSES, "status"),
        priority=validate_choice(_param(params, "Priority", "priority"), REMINDER_PRIORITIES, "priority"),
        start_date=start,
        end_date=end,
        client_id=client_id,
        page_number=page_number,
        page_size=page_size,
    )


def uses_filtered_path(filters: ReminderFilters) -> bool:
    """Date range and paging alone never narrow the source"""
    return any((filters.reminder_type, filters.status, filters.priority, filters.client_id))


def compute_total_pages(total_records: int, page_size: int) -> int:
    if total_records <= 0:
        return 0
    return math.ceil(total_records / page_size)


def total_from_filtered_rows(rows: list[Mapping[str, Any]]) -> int:
    """Every filtered row carries the same window count; no rows means no matches"""
    if not rows:
        return 0
    try:
        return int(rows[0].get("total_records") or 0)
    except (TypeError, ValueError):
        return 0


def build_page(reminders: list[dict], total_records: int, filters: ReminderFilters) -> dict:
    return {
        "reminders": reminders,
        "totalRecords": total_records,
        "currentPage": filters.page_number,
        "totalPages": compute_total_pages(total_records, filters.page_size),
        "pageSize": filters.page_size,
    }
