"""
Week and calendar groupings of appointments.

The week view always has seven entries, including days without appointments.
The calendar view lists only the dates that have appointments. Both shapes
are what the agent-facing calendar expects; they are not meant to match.
"""

import calendar
from collections import OrderedDict
from datetime import date, timedelta
from typing import Any, Callable, Iterable, Mapping

from ...shared.temporal import normalize_date_to_iso_date

Row = Mapping[str, Any]
Mapper = Callable[[Row], dict]


def week_dates(week_start: date) -> list[date]:
    return [week_start + timedelta(days=offset) for offset in range(7)]


def month_bounds(month: int, year: int) -> tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def parse_month_year(month: Any, year: Any) -> tuple[int, int]:
    """
    Validate calendar-view parameters.

    Raises:
        ValueError: If either is missing or non-numeric, or month is outside 1-12
    """
    if month is None or year is None or str(month).strip() == "" or str(year).strip() == "":
        raise ValueError("Month and year are required")
    try:
        month_value = int(str(month).strip())
        year_value = int(str(year).strip())
    except ValueError:
        raise ValueError("Month and year must be valid numbers")
    if not 1 <= month_value <= 12:
        raise ValueError("Month must be between 1 and 12")
    if not 1 <= year_value <= 9999:
        raise ValueError("Year is out of range")
    return month_value, year_value


def _group_by_date(rows: Iterable[Row], mapper: Mapper) -> "OrderedDict[str, list[dict]]":
    grouped: "OrderedDict[str, list[dict]]" = OrderedDict()
    for row in rows:
        key = normalize_date_to_iso_date(row.get("appointment_date"))
        if not key:
            continue
        grouped.setdefault(key, []).append(mapper(row))
    return grouped


def build_week_view(rows: Iterable[Row], week_start: date, mapper: Mapper) -> list[dict]:
    grouped = _group_by_date(rows, mapper)
    return [
        {
            "date": day.isoformat(),
            "dayName": day.strftime("%A"),
            "appointments": grouped.get(day.isoformat(), []),
        }
        for day in week_dates(week_start)
    ]


def build_calendar_view(rows: Iterable[Row], mapper: Mapper) -> list[dict]:
    grouped = _group_by_date(rows, mapper)
    return [
        {"date": key, "appointmentCount": len(appointments), "appointments": appointments}
        for key, appointments in sorted(grouped.items())
    ]
