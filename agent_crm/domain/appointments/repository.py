"""Appointment repository - Database operations for appointments"""

from datetime import date
from typing import Any, Optional

from sqlalchemy import case, func, or_
from sqlalchemy.orm import Session

from ...models import Appointment, Client

AppointmentRow = dict[str, Any]


def _client_name():
    name = func.coalesce(Client.first_name, "") + " " + func.coalesce(Client.surname, Client.last_name, "")
    return func.nullif(func.trim(name), "")


def _appointment_columns():
    return (
        Appointment.appointment_id,
        Appointment.client_id,
        Appointment.agent_id,
        Appointment.title,
        Appointment.description,
        Appointment.appointment_date,
        Appointment.start_time,
        Appointment.end_time,
        Appointment.location,
        Appointment.type,
        Appointment.status,
        Appointment.priority,
        Appointment.notes,
        Appointment.reminder_set,
        Appointment.is_active,
        Appointment.created_date,
        Appointment.modified_date,
        _client_name().label("client_name"),
        Client.phone_number.label("client_phone"),
        Client.email.label("client_email"),
        Client.address.label("client_address"),
    )


class AppointmentRepository:
    """Repository for appointment database operations"""

    @staticmethod
    def _base_query(db: Session, agent_id: str):
        """Active (not soft-deleted) appointments of one agent, joined to their client"""
        return (
            db.query(*_appointment_columns())
            .outerjoin(Client, Client.client_id == Appointment.client_id)
            .filter(Appointment.agent_id == agent_id, Appointment.is_active.is_(True))
        )

    @staticmethod
    def _rows(query) -> list[AppointmentRow]:
        rows = query.order_by(Appointment.appointment_date.asc(), Appointment.start_time.asc()).all()
        return [row._asdict() for row in rows]

    @staticmethod
    def get_by_id(db: Session, agent_id: str, appointment_id: str) -> Optional[AppointmentRow]:
        row = (
            AppointmentRepository._base_query(db, agent_id)
            .filter(Appointment.appointment_id == appointment_id)
            .first()
        )
        return row._asdict() if row else None

    @staticmethod
    def list_for_date(db: Session, agent_id: str, day: date) -> list[AppointmentRow]:
        query = AppointmentRepository._base_query(db, agent_id).filter(Appointment.appointment_date == day)
        return AppointmentRepository._rows(query)

    @staticmethod
    def list_between(db: Session, agent_id: str, start: date, end: date) -> list[AppointmentRow]:
        query = AppointmentRepository._base_query(db, agent_id).filter(
            Appointment.appointment_date.between(start, end)
        )
        return AppointmentRepository._rows(query)

    @staticmethod
    def list_filtered(
        db: Session,
        agent_id: str,
        page_number: int,
        page_size: int,
        status: Optional[str] = None,
        appointment_type: Optional[str] = None,
        priority: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        client_id: Optional[str] = None,
        search_term: Optional[str] = None,
    ) -> list[AppointmentRow]:
        query = AppointmentRepository._base_query(db, agent_id)

        if status:
            query = query.filter(Appointment.status == status)
        if appointment_type:
            query = query.filter(Appointment.type == appointment_type)
        if priority:
            query = query.filter(Appointment.priority == priority)
        if start_date:
            query = query.filter(Appointment.appointment_date >= start_date)
        if end_date:
            query = query.filter(Appointment.appointment_date <= end_date)
        if client_id:
            query = query.filter(Appointment.client_id == client_id)
        if search_term:
            query = AppointmentRepository._apply_search(query, search_term)

        rows = (
            query.order_by(Appointment.appointment_date.desc(), Appointment.start_time.asc())
            .offset((page_number - 1) * page_size)
            .limit(page_size)
            .all()
        )
        return [row._asdict() for row in rows]

    @staticmethod
    def _apply_search(query, search_term: str):
        term = f"%{search_term.lower()}%"
        return query.filter(
            or_(
                Appointment.title.ilike(term),
                Appointment.description.ilike(term),
                Appointment.location.ilike(term),
                Appointment.notes.ilike(term),
                Client.first_name.ilike(term),
                Client.surname.ilike(term),
                Client.last_name.ilike(term),
            )
        )

    @staticmethod
    def search(db: Session, agent_id: str, search_term: str, limit: int = 50) -> list[AppointmentRow]:
        query = AppointmentRepository._apply_search(AppointmentRepository._base_query(db, agent_id), search_term)
        rows = (
            query.order_by(Appointment.appointment_date.desc(), Appointment.start_time.asc())
            .limit(limit)
            .all()
        )
        return [row._asdict() for row in rows]

    @staticmethod
    def conflict_candidates(db: Session, agent_id: str, day: date) -> list[AppointmentRow]:
        """Same-day appointments that can block a slot (active flag set, not cancelled)"""
        rows = (
            AppointmentRepository._base_query(db, agent_id)
            .filter(Appointment.appointment_date == day, Appointment.status != "Cancelled")
            .order_by(Appointment.start_time.asc())
            .all()
        )
        return [row._asdict() for row in rows]

    # Writes
    @staticmethod
    def create(db: Session, agent_id: str, **appointment_data) -> Appointment:
        appointment = Appointment(agent_id=agent_id, **appointment_data)
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def update(db: Session, agent_id: str, appointment_id: str, **updates) -> int:
        rows = (
            db.query(Appointment)
            .filter(
                Appointment.appointment_id == appointment_id,
                Appointment.agent_id == agent_id,
                Appointment.is_active.is_(True),
            )
            .update(updates, synchronize_session=False)
        )
        db.commit()
        return rows

    @staticmethod
    def soft_delete(db: Session, agent_id: str, appointment_id: str) -> int:
        return AppointmentRepository.update(db, agent_id, appointment_id, is_active=False)

    # Clients
    @staticmethod
    def client_belongs_to_agent(db: Session, agent_id: str, client_id: str) -> bool:
        return (
            db.query(Client.client_id)
            .filter(Client.client_id == client_id, Client.agent_id == agent_id, Client.is_active.is_(True))
            .first()
            is not None
        )

    @staticmethod
    def search_clients(db: Session, agent_id: str, search_term: str, limit: int = 20) -> list[AppointmentRow]:
        term = f"%{search_term.lower()}%"
        rows = (
            db.query(
                Client.client_id,
                _client_name().label("client_name"),
                Client.phone_number.label("phone"),
                Client.email,
                Client.address,
                case((Client.is_client.is_(True), "Client"), else_="Prospect").label("status"),
            )
            .filter(
                Client.agent_id == agent_id,
                Client.is_active.is_(True),
                or_(
                    Client.first_name.ilike(term),
                    Client.surname.ilike(term),
                    Client.last_name.ilike(term),
                    Client.phone_number.ilike(term),
                    Client.email.ilike(term),
                ),
            )
            .order_by(Client.first_name.asc())
            .limit(limit)
            .all()
        )
        return [row._asdict() for row in rows]

    # Statistics
    @staticmethod
    def statistics(
        db: Session, agent_id: str, today: date, week: tuple[date, date], month: tuple[date, date]
    ) -> dict[str, Any]:
        base = db.query(func.count(Appointment.appointment_id)).filter(
            Appointment.agent_id == agent_id, Appointment.is_active.is_(True)
        )

        def count(*criteria) -> int:
            return base.filter(*criteria).scalar() or 0

        status_rows = (
            db.query(Appointment.status, func.count(Appointment.appointment_id))
            .filter(Appointment.agent_id == agent_id, Appointment.is_active.is_(True))
            .group_by(Appointment.status)
            .all()
        )
        type_rows = (
            db.query(Appointment.type, func.count(Appointment.appointment_id))
            .filter(Appointment.agent_id == agent_id, Appointment.is_active.is_(True))
            .group_by(Appointment.type)
            .all()
        )
        status_breakdown = {status or "Unknown": total for status, total in status_rows}
        type_breakdown = {kind or "Unknown": total for kind, total in type_rows}

        return {
            "totalAppointments": count(),
            "todayAppointments": count(Appointment.appointment_date == today),
            "weekAppointments": count(Appointment.appointment_date.between(*week)),
            "monthAppointments": count(Appointment.appointment_date.between(*month)),
            "completedAppointments": status_breakdown.get("Completed", 0),
            "pendingAppointments": count(
                Appointment.status.in_(("Scheduled", "Confirmed")), Appointment.appointment_date >= today
            ),
            "scheduledCount": status_breakdown.get("Scheduled", 0),
            "confirmedCount": status_breakdown.get("Confirmed", 0),
            "cancelledCount": status_breakdown.get("Cancelled", 0),
            "statusBreakdown": status_breakdown,
            "typeBreakdown": type_breakdown,
        }
