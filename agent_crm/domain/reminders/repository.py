"""Reminder repository - Database operations for reminders and their derived views"""

from datetime import date, timedelta
from typing import Any, Optional

from sqlalchemy import and_, func
from sqlalchemy.orm import Session

from ...models import Appointment, Client, ClientPolicy, Reminder, ReminderSetting
from ...shared.temporal import calculate_age, has_birthday_within, is_birthday_on
from .query import ReminderFilters, ReminderSourceCounts

ReminderRow = dict[str, Any]


def _full_client_name():
    name = func.coalesce(Client.first_name, "") + " " + func.coalesce(Client.surname, Client.last_name, "")
    return func.nullif(func.trim(name), "")


def _reminder_columns():
    return (
        Reminder.reminder_id,
        Reminder.client_id,
        Reminder.appointment_id,
        Reminder.agent_id,
        Reminder.reminder_type,
        Reminder.title,
        Reminder.description,
        Reminder.reminder_date,
        Reminder.reminder_time,
        Reminder.client_name,
        Reminder.priority,
        Reminder.status,
        Reminder.enable_sms,
        Reminder.enable_whatsapp,
        Reminder.enable_push_notification,
        Reminder.advance_notice,
        Reminder.custom_message,
        Reminder.auto_send,
        Reminder.notes,
        Reminder.created_date,
        Reminder.modified_date,
        Reminder.completed_date,
        Client.phone_number.label("client_phone"),
        Client.email.label("client_email"),
        _full_client_name().label("full_client_name"),
    )


def _ordered(query):
    return query.order_by(Reminder.reminder_date.asc(), Reminder.reminder_time.asc(), Reminder.created_date.desc())


class ReminderRepository:
    """Repository for reminder database operations"""

    @staticmethod
    def _base_query(db: Session, agent_id: str, *extra_columns):
        return (
            db.query(*_reminder_columns(), *extra_columns)
            .outerjoin(Client, Client.client_id == Reminder.client_id)
            .filter(Reminder.agent_id == agent_id)
        )

    @staticmethod
    def _apply_date_range(query, filters: ReminderFilters):
        if filters.start_date:
            query = query.filter(Reminder.reminder_date >= filters.start_date)
        if filters.end_date:
            query = query.filter(Reminder.reminder_date <= filters.end_date)
        return query

    # Listing
    @staticmethod
    def list_filtered(db: Session, agent_id: str, filters: ReminderFilters) -> list[ReminderRow]:
        """Filtered path: every row carries total_records for the whole match set"""
        query = ReminderRepository._base_query(db, agent_id, func.count().over().label("total_records"))

        if filters.reminder_type:
            query = query.filter(Reminder.reminder_type == filters.reminder_type)
        if filters.status:
            query = query.filter(Reminder.status == filters.status)
        if filters.priority:
            query = query.filter(Reminder.priority == filters.priority)
        if filters.client_id:
            query = query.filter(Reminder.client_id == filters.client_id)
        query = ReminderRepository._apply_date_range(query, filters)

        rows = _ordered(query).offset(filters.offset).limit(filters.page_size).all()
        return [row._asdict() for row in rows]

    @staticmethod
    def list_unfiltered(db: Session, agent_id: str, filters: ReminderFilters) -> list[ReminderRow]:
        query = ReminderRepository._base_query(db, agent_id)
        query = ReminderRepository._apply_date_range(query, filters)
        rows = _ordered(query).offset(filters.offset).limit(filters.page_size).all()
        return [row._asdict() for row in rows]

    @staticmethod
    def list_by_type(db: Session, agent_id: str, reminder_type: str) -> list[ReminderRow]:
        query = ReminderRepository._base_query(db, agent_id).filter(Reminder.reminder_type == reminder_type)
        return [row._asdict() for row in _ordered(query).all()]

    @staticmethod
    def list_by_status(db: Session, agent_id: str, status: str) -> list[ReminderRow]:
        query = ReminderRepository._base_query(db, agent_id).filter(Reminder.status == status)
        return [row._asdict() for row in _ordered(query).all()]

    @staticmethod
    def list_for_date(db: Session, agent_id: str, day: date) -> list[ReminderRow]:
        query = ReminderRepository._base_query(db, agent_id).filter(
            Reminder.reminder_date == day, Reminder.status == "Active"
        )
        return [row._asdict() for row in _ordered(query).all()]

    @staticmethod
    def get_by_id(db: Session, agent_id: str, reminder_id: str) -> Optional[ReminderRow]:
        row = ReminderRepository._base_query(db, agent_id).filter(Reminder.reminder_id == reminder_id).first()
        return row._asdict() if row else None

    @staticmethod
    def get_status(db: Session, agent_id: str, reminder_id: str) -> Optional[str]:
        """Current status, or None when the reminder does not exist for the agent"""
        return (
            db.query(Reminder.status)
            .filter(Reminder.reminder_id == reminder_id, Reminder.agent_id == agent_id)
            .scalar()
        )

    # Source counts for the unfiltered total
    @staticmethod
    def count_native_reminders(db: Session, agent_id: str) -> int:
        return db.query(func.count(Reminder.reminder_id)).filter(Reminder.agent_id == agent_id).scalar() or 0

    @staticmethod
    def count_expiring_policies(db: Session, agent_id: str, today: date, window_days: int) -> int:
        return (
            db.query(func.count(ClientPolicy.policy_id))
            .join(Client, Client.client_id == ClientPolicy.client_id)
            .filter(
                Client.agent_id == agent_id,
                ClientPolicy.is_active.is_(True),
                ClientPolicy.end_date.between(today, today + timedelta(days=window_days)),
            )
            .scalar()
            or 0
        )

    @staticmethod
    def count_upcoming_birthdays(db: Session, agent_id: str, today: date, window_days: int) -> int:
        # Month/day matching with the Feb 29 rule is done in Python for portability
        birth_dates = (
            db.query(Client.date_of_birth)
            .filter(
                Client.agent_id == agent_id,
                Client.is_active.is_(True),
                Client.date_of_birth.isnot(None),
            )
            .all()
        )
        return sum(1 for (dob,) in birth_dates if has_birthday_within(dob, today, window_days))

    @staticmethod
    def count_active_appointments(db: Session, agent_id: str) -> int:
        return (
            db.query(func.count(Appointment.appointment_id))
            .filter(Appointment.agent_id == agent_id, Appointment.is_active.is_(True))
            .scalar()
            or 0
        )

    @staticmethod
    def source_counts(
        db: Session, agent_id: str, today: date, policy_window_days: int, birthday_window_days: int
    ) -> ReminderSourceCounts:
        return ReminderSourceCounts(
            native_reminders=ReminderRepository.count_native_reminders(db, agent_id),
            policy_expiries=ReminderRepository.count_expiring_policies(db, agent_id, today, policy_window_days),
            birthdays=ReminderRepository.count_upcoming_birthdays(db, agent_id, today, birthday_window_days),
            appointments=ReminderRepository.count_active_appointments(db, agent_id),
        )

    # Writes
    @staticmethod
    def create(db: Session, agent_id: str, **reminder_data) -> Reminder:
        reminder = Reminder(agent_id=agent_id, **reminder_data)
        db.add(reminder)
        db.commit()
        db.refresh(reminder)
        return reminder

    @staticmethod
    def update(db: Session, agent_id: str, reminder_id: str, **updates) -> int:
        """Apply updates, returning the number of rows affected"""
        rows = (
            db.query(Reminder)
            .filter(Reminder.reminder_id == reminder_id, Reminder.agent_id == agent_id)
            .update(updates, synchronize_session=False)
        )
        db.commit()
        return rows

    @staticmethod
    def transition_status(
        db: Session, agent_id: str, reminder_id: str, new_status: str, notes: Optional[str] = None
    ) -> int:
        """Move an Active reminder to a terminal status"""
        values: dict[str, Any] = {"status": new_status}
        if new_status == "Completed":
            values["completed_date"] = func.now()
        if notes is not None:
            values["notes"] = notes

        rows = (
            db.query(Reminder)
            .filter(
                Reminder.reminder_id == reminder_id,
                Reminder.agent_id == agent_id,
                Reminder.status == "Active",
            )
            .update(values, synchronize_session=False)
        )
        db.commit()
        return rows

    @staticmethod
    def delete(db: Session, agent_id: str, reminder_id: str) -> int:
        rows = (
            db.query(Reminder)
            .filter(Reminder.reminder_id == reminder_id, Reminder.agent_id == agent_id)
            .delete(synchronize_session=False)
        )
        db.commit()
        return rows

    # Statistics
    @staticmethod
    def statistics(db: Session, agent_id: str, today: date, upcoming_days: int = 7) -> dict[str, int]:
        def count(*criteria) -> int:
            return (
                db.query(func.count(Reminder.reminder_id))
                .filter(Reminder.agent_id == agent_id, *criteria)
                .scalar()
                or 0
            )

        active = Reminder.status == "Active"
        return {
            "TotalActive": count(active),
            "TotalCompleted": count(Reminder.status == "Completed"),
            "TodayReminders": count(active, Reminder.reminder_date == today),
            "UpcomingReminders": count(
                active,
                and_(Reminder.reminder_date > today, Reminder.reminder_date <= today + timedelta(days=upcoming_days)),
            ),
            "HighPriority": count(active, Reminder.priority == "High"),
            "Overdue": count(active, Reminder.reminder_date < today),
        }

    # Settings
    @staticmethod
    def get_settings(db: Session, agent_id: str) -> list[ReminderRow]:
        rows = (
            db.query(
                ReminderSetting.reminder_setting_id,
                ReminderSetting.agent_id,
                ReminderSetting.reminder_type,
                ReminderSetting.is_enabled,
                ReminderSetting.days_before,
                ReminderSetting.time_of_day,
                ReminderSetting.repeat_daily,
                ReminderSetting.created_date,
                ReminderSetting.modified_date,
            )
            .filter(ReminderSetting.agent_id == agent_id)
            .order_by(ReminderSetting.reminder_type.asc())
            .all()
        )
        return [row._asdict() for row in rows]

    @staticmethod
    def upsert_setting(db: Session, agent_id: str, reminder_type: str, **values) -> ReminderSetting:
        setting = (
            db.query(ReminderSetting)
            .filter(ReminderSetting.agent_id == agent_id, ReminderSetting.reminder_type == reminder_type)
            .first()
        )
        if setting is None:
            setting = ReminderSetting(agent_id=agent_id, reminder_type=reminder_type)
            db.add(setting)

        for key, value in values.items():
            if value is not None and hasattr(setting, key):
                setattr(setting, key, value)

        db.commit()
        db.refresh(setting)
        return setting

    # Derived views
    @staticmethod
    def birthdays_on(db: Session, agent_id: str, today: date) -> list[ReminderRow]:
        clients = (
            db.query(
                Client.client_id,
                Client.first_name,
                Client.surname,
                Client.last_name,
                Client.phone_number,
                Client.email,
                Client.date_of_birth,
            )
            .filter(
                Client.agent_id == agent_id,
                Client.is_active.is_(True),
                Client.date_of_birth.isnot(None),
            )
            .order_by(Client.first_name.asc())
            .all()
        )

        rows = []
        for client in clients:
            if is_birthday_on(client.date_of_birth, today):
                row = client._asdict()
                row["age"] = calculate_age(client.date_of_birth, today)
                rows.append(row)
        return rows

    @staticmethod
    def policies_expiring(db: Session, agent_id: str, today: date, days_ahead: int) -> list[ReminderRow]:
        rows = (
            db.query(
                ClientPolicy.policy_id,
                ClientPolicy.client_id,
                ClientPolicy.policy_name,
                ClientPolicy.policy_type,
                ClientPolicy.company_name,
                ClientPolicy.end_date,
                Client.first_name,
                Client.surname,
                Client.last_name,
                Client.phone_number,
                Client.email,
            )
            .join(Client, Client.client_id == ClientPolicy.client_id)
            .filter(
                Client.agent_id == agent_id,
                ClientPolicy.is_active.is_(True),
                ClientPolicy.end_date.between(today, today + timedelta(days=days_ahead)),
            )
            .order_by(ClientPolicy.end_date.asc())
            .all()
        )
        return [row._asdict() for row in rows]

    @staticmethod
    def client_belongs_to_agent(db: Session, agent_id: str, client_id: str) -> bool:
        return (
            db.query(Client.client_id)
            .filter(Client.client_id == client_id, Client.agent_id == agent_id)
            .first()
            is not None
        )
