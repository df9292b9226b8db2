from datetime import date

import pytest

from agent_crm.domain.appointments.views import (
    build_calendar_view,
    build_week_view,
    month_bounds,
    parse_month_year,
)


def _mapper(row):
    return {"appointmentId": row["appointment_id"]}


def _row(appointment_id, day):
    return {"appointment_id": appointment_id, "appointment_date": day}


def test_week_view_always_has_seven_days():
    rows = [_row("a", date(2025, 1, 8)), _row("b", date(2025, 1, 8)), _row("c", date(2025, 1, 10))]
    week = build_week_view(rows, date(2025, 1, 6), _mapper)

    assert [entry["date"] for entry in week] == [
        "2025-01-06",
        "2025-01-07",
        "2025-01-08",
        "2025-01-09",
        "2025-01-10",
        "2025-01-11",
        "2025-01-12",
    ]
    assert week[0]["dayName"] == "Monday"
    assert week[6]["dayName"] == "Sunday"
    assert week[0]["appointments"] == []
    assert [a["appointmentId"] for a in week[2]["appointments"]] == ["a", "b"]
    assert [a["appointmentId"] for a in week[4]["appointments"]] == ["c"]


def test_empty_week_still_lists_every_day():
    week = build_week_view([], date(2025, 1, 6), _mapper)
    assert len(week) == 7
    assert all(entry["appointments"] == [] for entry in week)


def test_calendar_view_lists_only_dates_with_appointments():
    rows = [_row("b", "2025-01-20"), _row("a", date(2025, 1, 3)), _row("c", date(2025, 1, 20))]
    calendar = build_calendar_view(rows, _mapper)

    assert [entry["date"] for entry in calendar] == ["2025-01-03", "2025-01-20"]
    assert calendar[1]["appointmentCount"] == 2
    assert build_calendar_view([], _mapper) == []


def test_month_bounds():
    assert month_bounds(2, 2024) == (date(2024, 2, 1), date(2024, 2, 29))
    assert month_bounds(2, 2025) == (date(2025, 2, 1), date(2025, 2, 28))
    assert month_bounds(12, 2025) == (date(2025, 12, 1), date(2025, 12, 31))


def test_parse_month_year():
    assert parse_month_year("6", "2025") == (6, 2025)
    assert parse_month_year(12, 2024) == (12, 2024)


@pytest.mark.parametrize(
    "month,year",
    [(None, "2025"), ("6", None), ("", "2025"), ("June", "2025"), ("0", "2025"), ("13", "2025"), ("6", "0")],
)
def test_parse_month_year_rejects_bad_input(month, year):
    with pytest.raises(ValueError):
        parse_month_year(month, year)
