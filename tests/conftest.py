import os

# Point the application engine at an in-memory database before it is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import date, time  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from agent_crm import email_service  # noqa: E402
from agent_crm.database import Base, get_db  # noqa: E402
from agent_crm.domain.appointments import service as appointment_service_module  # noqa: E402
from agent_crm.domain.reminders import service as reminder_service_module  # noqa: E402
from agent_crm.main import app  # noqa: E402
from agent_crm.models import Appointment, Client, ClientPolicy, Reminder  # noqa: E402

AGENT_ID = "2f1c6a0e-8a44-4f0f-9a57-0c8f3f6d1a11"
OTHER_AGENT_ID = "7b9d2c34-5e61-4d2a-8f0b-3c4e5d6f7a82"

# A Tuesday, so week and month boundaries are easy to reason about
FIXED_TODAY = date(2025, 6, 10)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    yield session
    session.close()


@pytest.fixture
def client(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def headers():
    return {"X-Agent-Id": AGENT_ID}


@pytest.fixture
def fixed_today(monkeypatch):
    """Pin 'today' for both services; returns a setter for tests that need another day"""

    def set_today(day: date):
        monkeypatch.setattr(reminder_service_module, "today_in_reference_tz", lambda: day)
        monkeypatch.setattr(appointment_service_module, "today_in_reference_tz", lambda: day)
        return day

    set_today(FIXED_TODAY)
    return set_today


@pytest.fixture
def sent_emails(monkeypatch):
    """Replace the confirmation sender; records every call"""
    calls = []

    async def fake_send(**kwargs):
        calls.append(kwargs)
        return {"id": "test-email"}

    monkeypatch.setattr(email_service, "send_appointment_confirmation", fake_send)
    return calls


@pytest.fixture
def make_client(db_session):
    def factory(agent_id=AGENT_ID, **overrides):
        data = {
            "agent_id": agent_id,
            "first_name": "Jane",
            "surname": "Wanjiru",
            "phone_number": "+254712345678",
            "email": "jane@example.com",
            "address": "Ngong Road, Nairobi",
        }
        data.update(overrides)
        record = Client(**data)
        db_session.add(record)
        db_session.commit()
        db_session.refresh(record)
        return record

    return factory


@pytest.fixture
def make_appointment(db_session, make_client):
    def factory(agent_id=AGENT_ID, client=None, **overrides):
        client = client or make_client(agent_id=agent_id)
        data = {
            "agent_id": agent_id,
            "client_id": client.client_id,
            "title": "Policy review",
            "appointment_date": FIXED_TODAY,
            "start_time": time(9, 0),
            "end_time": time(10, 0),
            "type": "Meeting",
            "status": "Scheduled",
        }
        data.update(overrides)
        record = Appointment(**data)
        db_session.add(record)
        db_session.commit()
        db_session.refresh(record)
        return record

    return factory


@pytest.fixture
def make_reminder(db_session):
    def factory(agent_id=AGENT_ID, **overrides):
        data = {
            "agent_id": agent_id,
            "reminder_type": "Call",
            "title": "Call client",
            "reminder_date": FIXED_TODAY,
            "priority": "Medium",
            "status": "Active",
        }
        data.update(overrides)
        record = Reminder(**data)
        db_session.add(record)
        db_session.commit()
        db_session.refresh(record)
        return record

    return factory


@pytest.fixture
def make_policy(db_session, make_client):
    def factory(client=None, **overrides):
        client = client or make_client()
        data = {
            "client_id": client.client_id,
            "policy_name": "Motor Comprehensive",
            "policy_type": "Motor",
            "company_name": "Jubilee Insurance",
            "status": "Active",
            "end_date": FIXED_TODAY,
        }
        data.update(overrides)
        record = ClientPolicy(**data)
        db_session.add(record)
        db_session.commit()
        db_session.refresh(record)
        return record

    return factory
