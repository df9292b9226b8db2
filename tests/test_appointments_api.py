from datetime import time, timedelta

import pytest

from agent_crm import email_service
from tests.conftest import AGENT_ID, FIXED_TODAY, OTHER_AGENT_ID

BASE = f"/appointments/{AGENT_ID}"
MISSING_ID = "00000000-0000-4000-8000-000000000000"


@pytest.fixture(autouse=True)
def _pinned_today(fixed_today, sent_emails):
    return fixed_today


def _payload(client_id, **overrides):
    payload = {
        "clientId": client_id,
        "title": "Policy review",
        "appointmentDate": "2025-06-10",
        "startTime": "09:00",
        "endTime": "10:00",
        "type": "Meeting",
        "location": "Westlands office",
    }
    payload.update(overrides)
    return payload


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


def test_create_queues_confirmation_email(client, make_client, sent_emails):
    owner = make_client()
    response = client.post(BASE, json=_payload(owner.client_id))
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    appointment_id = body["data"]["appointmentId"]

    stored = client.get(f"{BASE}/{appointment_id}").json()
    assert stored["startTime"] == "09:00:00"
    assert stored["endTime"] == "10:00:00"
    assert stored["status"] == "Scheduled"
    assert stored["priority"] == "Medium"
    assert stored["clientName"] == "Jane Wanjiru"
    assert stored["isActive"] is True

    assert sent_emails == [
        {
            "client_email": "jane@example.com",
            "client_name": "Jane Wanjiru",
            "title": "Policy review",
            "formatted_time": "Tuesday, 10 June 2025 at 09:00",
            "location": "Westlands office",
        }
    ]


def test_create_without_client_email_sends_nothing(client, make_client, sent_emails):
    owner = make_client(email=None)
    assert client.post(BASE, json=_payload(owner.client_id)).status_code == 201
    assert sent_emails == []


def test_email_failure_does_not_fail_create(client, make_client, monkeypatch):
    async def failing_send(**kwargs):
        raise email_service.EmailDeliveryError("provider down")

    monkeypatch.setattr(email_service, "send_appointment_confirmation", failing_send)
    owner = make_client()
    response = client.post(BASE, json=_payload(owner.client_id))
    assert response.status_code == 201
    assert client.get(f"{BASE}/{response.json()['data']['appointmentId']}").status_code == 200


def test_overlap_is_rejected_with_details(client, make_client, make_appointment):
    owner = make_client()
    existing = make_appointment(client=owner)

    response = client.post(BASE, json=_payload(owner.client_id, startTime="09:30", endTime="10:30"))
    assert response.status_code == 409
    detail = response.json()["detail"]
    assert detail["hasConflicts"] is True
    assert detail["message"] == "Time conflicts found with 1 existing appointment"
    assert [a["appointmentId"] for a in detail["conflictingAppointments"]] == [existing.appointment_id]


def test_touching_windows_are_allowed(client, make_client, make_appointment):
    owner = make_client()
    make_appointment(client=owner)
    response = client.post(BASE, json=_payload(owner.client_id, startTime="10:00", endTime="11:00"))
    assert response.status_code == 201


def test_cancelled_and_other_agents_do_not_block(client, make_client, make_appointment):
    owner = make_client()
    make_appointment(client=owner, status="Cancelled")
    make_appointment(agent_id=OTHER_AGENT_ID)
    assert client.post(BASE, json=_payload(owner.client_id)).status_code == 201


def test_end_before_start_is_rejected(client, make_client):
    owner = make_client()
    response = client.post(BASE, json=_payload(owner.client_id, startTime="11:00", endTime="10:00"))
    assert response.status_code == 400
    assert response.json()["detail"] == "endTime must be after startTime"
    assert client.post(BASE, json=_payload(owner.client_id, endTime="09:00")).status_code == 400


def test_unparseable_window_is_rejected(client, make_client):
    owner = make_client()
    assert client.post(BASE, json=_payload(owner.client_id, startTime="nine")).status_code == 400
    assert client.post(BASE, json=_payload(owner.client_id, appointmentDate="10/06/2025")).status_code == 400


@pytest.mark.parametrize("missing", ["clientId", "title", "appointmentDate", "startTime", "endTime", "type"])
def test_create_requires_fields(client, make_client, missing):
    payload = _payload(make_client().client_id)
    del payload[missing]
    response = client.post(BASE, json=payload)
    assert response.status_code == 400
    assert response.json()["detail"].startswith("Missing required fields")


def test_create_rejects_foreign_or_malformed_client(client, make_client):
    foreign = make_client(agent_id=OTHER_AGENT_ID)
    response = client.post(BASE, json=_payload(foreign.client_id))
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid client or agent ID provided"
    assert client.post(BASE, json=_payload("client-1")).status_code == 400


def test_create_rejects_unknown_status(client, make_client):
    owner = make_client()
    assert client.post(BASE, json=_payload(owner.client_id, status="Pending")).status_code == 400


def test_malformed_agent_in_path(client):
    assert client.get("/appointments/not-a-uuid").status_code == 400
    assert client.get("/appointments/not-a-uuid/today").status_code == 400


# ---------------------------------------------------------------------------
# Update / delete / status
# ---------------------------------------------------------------------------


def test_update_excludes_itself_from_conflicts(client, make_appointment):
    appointment = make_appointment()
    response = client.put(
        f"{BASE}/{appointment.appointment_id}",
        json={"title": "Renewal chat", "startTime": "09:00", "endTime": "10:00"},
    )
    assert response.status_code == 200
    assert response.json()["title"] == "Renewal chat"


def test_update_into_occupied_slot_is_rejected(client, make_client, make_appointment):
    owner = make_client()
    make_appointment(client=owner)
    later = make_appointment(client=owner, start_time=time(11, 0), end_time=time(12, 0))

    response = client.put(f"{BASE}/{later.appointment_id}", json={"startTime": "09:30", "endTime": "10:30"})
    assert response.status_code == 409
    assert response.json()["detail"]["hasConflicts"] is True


def test_partial_window_update_keeps_stored_bounds(client, make_appointment):
    appointment = make_appointment()
    response = client.put(f"{BASE}/{appointment.appointment_id}", json={"startTime": "08:00"})
    assert response.status_code == 200
    body = response.json()
    assert body["startTime"] == "08:00:00"
    assert body["endTime"] == "10:00:00"

    assert client.put(f"{BASE}/{appointment.appointment_id}", json={"startTime": "10:30"}).status_code == 400


def test_update_missing_appointment(client):
    assert client.put(f"{BASE}/{MISSING_ID}", json={"title": "x"}).status_code == 404


def test_soft_delete_frees_the_slot(client, make_client, make_appointment):
    owner = make_client()
    appointment = make_appointment(client=owner)

    response = client.delete(f"{BASE}/{appointment.appointment_id}")
    assert response.status_code == 200
    assert client.get(f"{BASE}/{appointment.appointment_id}").status_code == 404
    assert client.delete(f"{BASE}/{appointment.appointment_id}").status_code == 404
    assert client.post(BASE, json=_payload(owner.client_id)).status_code == 201


def test_status_update(client, make_appointment):
    appointment = make_appointment()
    response = client.put(f"{BASE}/{appointment.appointment_id}/status", json={"status": "confirmed"})
    assert response.status_code == 200
    assert response.json()["data"] == {"appointmentId": appointment.appointment_id, "status": "Confirmed"}
    assert client.get(f"{BASE}/{appointment.appointment_id}").json()["status"] == "Confirmed"


def test_status_update_errors(client, make_appointment):
    appointment = make_appointment()
    missing = client.put(f"{BASE}/{appointment.appointment_id}/status", json={})
    assert missing.status_code == 400
    assert missing.json()["detail"] == "Status is required"
    assert client.put(f"{BASE}/{appointment.appointment_id}/status", json={"status": "Pending"}).status_code == 400
    assert client.put(f"{BASE}/{MISSING_ID}/status", json={"status": "Completed"}).status_code == 404


def test_reviving_cancelled_appointment_rechecks_conflicts(client, make_client, make_appointment):
    owner = make_client()
    cancelled = make_appointment(client=owner, status="Cancelled")
    assert client.post(BASE, json=_payload(owner.client_id, startTime="09:30", endTime="10:30")).status_code == 201

    response = client.put(f"{BASE}/{cancelled.appointment_id}/status", json={"status": "Scheduled"})
    assert response.status_code == 409
    assert response.json()["detail"]["hasConflicts"] is True
    assert client.get(f"{BASE}/{cancelled.appointment_id}").json()["status"] == "Cancelled"


def test_reviving_through_full_update_rechecks_conflicts(client, make_client, make_appointment):
    owner = make_client()
    cancelled = make_appointment(client=owner, status="Cancelled")
    make_appointment(client=owner, start_time=time(9, 30), end_time=time(10, 30))

    response = client.put(f"{BASE}/{cancelled.appointment_id}", json={"status": "Scheduled"})
    assert response.status_code == 409
    assert response.json()["detail"]["conflictingAppointments"][0]["startTime"] == "09:30:00"
    assert client.get(f"{BASE}/{cancelled.appointment_id}").json()["status"] == "Cancelled"


def test_reviving_into_free_slot(client, make_client, make_appointment):
    owner = make_client()
    cancelled = make_appointment(client=owner, status="Cancelled")
    make_appointment(client=owner, start_time=time(11, 0), end_time=time(12, 0))

    response = client.put(f"{BASE}/{cancelled.appointment_id}/status", json={"status": "Confirmed"})
    assert response.status_code == 200
    assert client.put(f"{BASE}/{cancelled.appointment_id}", json={"status": "Scheduled"}).status_code == 200


def test_cancelling_never_conflicts(client, make_client, make_appointment):
    owner = make_client()
    first = make_appointment(client=owner)
    second = make_appointment(client=owner, start_time=time(9, 30), end_time=time(10, 30))

    assert client.put(f"{BASE}/{second.appointment_id}/status", json={"status": "Cancelled"}).status_code == 200
    response = client.put(
        f"{BASE}/{first.appointment_id}", json={"status": "Cancelled", "startTime": "09:15", "endTime": "10:15"}
    )
    assert response.status_code == 200
    assert response.json()["status"] == "Cancelled"


# ---------------------------------------------------------------------------
# Conflict check endpoint
# ---------------------------------------------------------------------------


def test_check_conflicts(client, make_appointment):
    appointment = make_appointment()
    request = {"appointmentDate": "2025-06-10", "startTime": "09:45", "endTime": "10:15"}

    result = client.post(f"{BASE}/check-conflicts", json=request).json()
    assert result["hasConflicts"] is True
    assert result["conflictingAppointments"][0]["appointmentId"] == appointment.appointment_id

    excluded = client.post(
        f"{BASE}/check-conflicts", json={**request, "excludeAppointmentId": appointment.appointment_id}
    ).json()
    assert excluded == {
        "hasConflicts": False,
        "conflictingAppointments": [],
        "message": "No conflicts",
        "conflicts": False,
    }


def test_check_conflicts_validation(client):
    assert client.post(f"{BASE}/check-conflicts", json={"appointmentDate": "2025-06-10"}).status_code == 400
    assert client.post(
        f"{BASE}/check-conflicts", json={"appointmentDate": "2025-06-10", "startTime": "10:00", "endTime": "10:00"}
    ).status_code == 400


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------


def test_week_view(client, make_client, make_appointment):
    owner = make_client()
    make_appointment(client=owner, title="Tuesday")
    make_appointment(client=owner, title="Thursday", appointment_date=FIXED_TODAY + timedelta(days=2))
    make_appointment(client=owner, title="Next week", appointment_date=FIXED_TODAY + timedelta(days=10))

    week = client.get(f"{BASE}/week", params={"weekStartDate": "2025-06-09"}).json()
    assert len(week) == 7
    assert week[0] == {"date": "2025-06-09", "dayName": "Monday", "appointments": []}
    assert [a["title"] for a in week[1]["appointments"]] == ["Tuesday"]
    assert [a["title"] for a in week[3]["appointments"]] == ["Thursday"]
    assert sum(len(day["appointments"]) for day in week) == 2

    default = client.get(f"{BASE}/week").json()
    assert default[0]["date"] == "2025-06-09"


def test_week_view_rejects_bad_start(client):
    assert client.get(f"{BASE}/week", params={"weekStartDate": "next monday"}).status_code == 400


def test_calendar_view_lists_only_busy_dates(client, make_client, make_appointment):
    owner = make_client()
    make_appointment(client=owner)
    make_appointment(client=owner, start_time=time(14, 0), end_time=time(15, 0))
    make_appointment(client=owner, appointment_date=FIXED_TODAY + timedelta(days=15))
    make_appointment(client=owner, appointment_date=FIXED_TODAY + timedelta(days=30))

    calendar = client.get(f"{BASE}/calendar", params={"month": 6, "year": 2025}).json()
    assert [day["date"] for day in calendar] == ["2025-06-10", "2025-06-25"]
    assert calendar[0]["appointmentCount"] == 2


def test_week_and_calendar_views_agree(client, make_client):
    owner = make_client()
    for day, start, end in [
        ("2025-06-10", "09:00", "10:00"),
        ("2025-06-10", "14:00", "15:00"),
        ("2025-06-12", "09:00", "10:00"),
        ("2025-06-20", "09:00", "10:00"),
    ]:
        payload = _payload(owner.client_id, appointmentDate=day, startTime=start, endTime=end)
        assert client.post(BASE, json=payload).status_code == 201

    week = client.get(f"{BASE}/week", params={"weekStartDate": "2025-06-09"}).json()
    calendar = client.get(f"{BASE}/calendar", params={"month": 6, "year": 2025}).json()

    assert [day["date"] for day in week] == [f"2025-06-{n:02d}" for n in range(9, 16)]
    assert [len(day["appointments"]) for day in week] == [0, 2, 0, 1, 0, 0, 0]
    assert [day["date"] for day in calendar] == ["2025-06-10", "2025-06-12", "2025-06-20"]
    assert [day["appointmentCount"] for day in calendar] == [2, 1, 1]

    busy_in_week = {day["date"]: len(day["appointments"]) for day in week if day["appointments"]}
    calendar_in_week = {day["date"]: day["appointmentCount"] for day in calendar if day["date"] <= "2025-06-15"}
    assert busy_in_week == calendar_in_week


@pytest.mark.parametrize("params", [{}, {"month": 6}, {"month": 13, "year": 2025}, {"month": "June", "year": 2025}])
def test_calendar_view_validation(client, params):
    assert client.get(f"{BASE}/calendar", params=params).status_code == 400


# ---------------------------------------------------------------------------
# Listings and search
# ---------------------------------------------------------------------------


def test_list_with_filters_and_paging(client, make_client, make_appointment):
    owner = make_client()
    make_appointment(client=owner)
    make_appointment(client=owner, status="Confirmed", appointment_date=FIXED_TODAY + timedelta(days=1))
    make_appointment(client=owner, is_active=False, appointment_date=FIXED_TODAY + timedelta(days=2))

    everything = client.get(BASE).json()
    assert len(everything) == 2
    # Newest date first
    assert everything[0]["appointmentDate"] == "2025-06-11"

    confirmed = client.get(BASE, params={"status": "Confirmed"}).json()
    assert [a["status"] for a in confirmed] == ["Confirmed"]

    assert len(client.get(BASE, params={"pageSize": 1}).json()) == 1
    assert client.get(BASE, params={"pageSize": 101}).status_code == 400
    assert client.get(BASE, params={"pageNumber": 0}).status_code == 400


def test_today_and_date(client, make_client, make_appointment):
    owner = make_client()
    make_appointment(client=owner, title="Today")
    make_appointment(client=owner, title="Tomorrow", appointment_date=FIXED_TODAY + timedelta(days=1))

    assert [a["title"] for a in client.get(f"{BASE}/today").json()] == ["Today"]
    on_date = client.get(f"{BASE}/date", params={"appointmentDate": "2025-06-11"}).json()
    assert [a["title"] for a in on_date] == ["Tomorrow"]
    assert client.get(f"{BASE}/date").status_code == 400


def test_search(client, make_client, make_appointment):
    make_appointment(client=make_client(), title="Policy review")
    make_appointment(client=make_client(first_name="Peter", surname="Kamau"), title="Claim visit")

    by_title = client.get(f"{BASE}/search", params={"searchTerm": "REVIEW"}).json()
    assert [a["title"] for a in by_title] == ["Policy review"]
    by_client = client.get(f"{BASE}/search", params={"searchTerm": "kamau"}).json()
    assert [a["title"] for a in by_client] == ["Claim visit"]
    assert client.get(f"{BASE}/search").status_code == 400


def test_client_search(client, make_client):
    make_client()
    make_client(first_name="Janet", surname="Mwangi", is_client=False, email="janet@example.com")
    make_client(first_name="Jane", agent_id=OTHER_AGENT_ID)

    results = client.get(f"{BASE}/clients/search", params={"q": "jan"}).json()
    assert [(r["clientName"], r["status"]) for r in results] == [
        ("Jane Wanjiru", "Client"),
        ("Janet Mwangi", "Prospect"),
    ]
    assert client.get(f"{BASE}/clients/search").status_code == 400


def test_statistics(client, make_client, make_appointment):
    owner = make_client()
    make_appointment(client=owner)
    make_appointment(client=owner, status="Completed", appointment_date=FIXED_TODAY + timedelta(days=2))
    make_appointment(client=owner, status="Confirmed", appointment_date=FIXED_TODAY + timedelta(days=15))
    make_appointment(client=owner, appointment_date=FIXED_TODAY + timedelta(days=35))
    make_appointment(client=owner, is_active=False)

    stats = client.get(f"{BASE}/statistics").json()
    assert stats["totalAppointments"] == 4
    assert stats["todayAppointments"] == 1
    assert stats["weekAppointments"] == 2
    assert stats["monthAppointments"] == 3
    assert stats["completedAppointments"] == 1
    assert stats["pendingAppointments"] == 3
    assert stats["scheduledCount"] == 2
    assert stats["confirmedCount"] == 1
    assert stats["cancelledCount"] == 0
    assert stats["statusBreakdown"] == {"Scheduled": 2, "Completed": 1, "Confirmed": 1}
    assert stats["typeBreakdown"] == {"Meeting": 4}
    assert stats["todayCount"] == stats["todayAppointments"]
    assert stats["completedCount"] == 1
