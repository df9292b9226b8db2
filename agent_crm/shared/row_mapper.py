"""
Row mapping from storage rows to wire entities.

Storage rows are not consistent about key casing (snake_case from the tables,
camelCase or all-lowercase from older procedures), so every wire field is
declared once with the list of storage keys it may come from. The first alias
holding a non-None value wins. A field with none of its aliases present is
left out of the result unless it declares a default.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional

from .temporal import (
    normalize_date_to_iso_date,
    normalize_datetime_to_iso_string,
    normalize_time,
)

_MISSING = object()


def _variants(snake: str) -> tuple[str, ...]:
    """snake_case key -> (snake_case, camelCase, lowercase) aliases"""
    head, *rest = snake.split("_")
    camel = head + "".join(part.capitalize() for part in rest)
    flat = snake.replace("_", "")
    return tuple(dict.fromkeys((snake, camel, flat)))


@dataclass(frozen=True)
class FieldSpec:
    name: str
    aliases: tuple[str, ...]
    default: Any = _MISSING
    transform: Optional[Callable[[Any], Any]] = None
    # Drop the field when the value is falsy (e.g. no completion timestamp yet)
    omit_empty: bool = False


def column(name: str, *storage_keys: str, **options) -> FieldSpec:
    """Declare a wire field backed by one or more snake_case storage keys"""
    aliases: list[str] = []
    for key in storage_keys:
        aliases.extend(_variants(key))
    return FieldSpec(name=name, aliases=tuple(dict.fromkeys(aliases)), **options)


@dataclass(frozen=True)
class EntityMap:
    name: str
    fields: tuple[FieldSpec, ...] = field(default_factory=tuple)

    def map_row(self, row: Mapping[str, Any]) -> dict[str, Any]:
        return map_row(row, self)

    def map_rows(self, rows) -> list[dict[str, Any]]:
        return [map_row(row, self) for row in rows]


def _lookup(row: Mapping[str, Any], aliases: tuple[str, ...]) -> Any:
    found = _MISSING
    for alias in aliases:
        if alias in row:
            value = row[alias]
            if value is not None:
                return value
            found = None
    return found


def map_row(row: Mapping[str, Any], entity: EntityMap) -> dict[str, Any]:
    """Map one storage row to the entity's wire shape"""
    result: dict[str, Any] = {}
    for wire_field in entity.fields:
        value = _lookup(row, wire_field.aliases)
        if value is _MISSING or value is None:
            if wire_field.default is not _MISSING:
                result[wire_field.name] = wire_field.default
            elif value is None and not wire_field.omit_empty:
                result[wire_field.name] = None
            continue
        if wire_field.omit_empty and not value:
            continue
        result[wire_field.name] = wire_field.transform(value) if wire_field.transform else value
    return result


_date = normalize_date_to_iso_date
_timestamp = normalize_datetime_to_iso_string
_time = normalize_time


def _int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


REMINDER = EntityMap(
    "reminder",
    (
        column("ReminderId", "reminder_id"),
        column("ClientId", "client_id"),
        column("AppointmentId", "appointment_id"),
        column("AgentId", "agent_id"),
        column("ReminderType", "reminder_type"),
        column("Title", "title"),
        column("Description", "description"),
        column("ReminderDate", "reminder_date", transform=_date, default=""),
        column("ReminderTime", "reminder_time", transform=_time),
        column("ClientName", "client_name"),
        column("Priority", "priority"),
        column("Status", "status"),
        column("EnableSMS", "enable_sms", default=False),
        column("EnableWhatsApp", "enable_whatsapp", default=False),
        column("EnablePushNotification", "enable_push_notification", default=True),
        column("AdvanceNotice", "advance_notice"),
        column("CustomMessage", "custom_message"),
        column("AutoSend", "auto_send", default=False),
        column("Notes", "notes"),
        column("CreatedDate", "created_date", transform=_timestamp, default=""),
        column("ModifiedDate", "modified_date", transform=_timestamp, default=""),
        column("CompletedDate", "completed_date", transform=_timestamp, omit_empty=True),
        column("ClientPhone", "client_phone"),
        column("ClientEmail", "client_email"),
        column("FullClientName", "full_client_name", "client_name"),
    ),
)

REMINDER_SETTINGS = EntityMap(
    "reminder_settings",
    (
        column("ReminderSettingId", "reminder_setting_id"),
        column("AgentId", "agent_id"),
        column("ReminderType", "reminder_type"),
        column("IsEnabled", "is_enabled", default=True),
        column("DaysBefore", "days_before"),
        column("TimeOfDay", "time_of_day", transform=_time),
        column("RepeatDaily", "repeat_daily", default=False),
        column("CreatedDate", "created_date", transform=_timestamp, default=""),
        column("ModifiedDate", "modified_date", transform=_timestamp, default=""),
    ),
)

BIRTHDAY_REMINDER = EntityMap(
    "birthday_reminder",
    (
        column("ClientId", "client_id"),
        column("FirstName", "first_name"),
        column("Surname", "surname", "last_name"),
        column("LastName", "last_name", "surname"),
        column("PhoneNumber", "phone_number", "phone"),
        column("Email", "email"),
        column("DateOfBirth", "date_of_birth", transform=_date, default=""),
        column("Age", "age", transform=_int),
    ),
)

POLICY_EXPIRY_REMINDER = EntityMap(
    "policy_expiry_reminder",
    (
        column("PolicyId", "policy_id"),
        column("ClientId", "client_id"),
        column("PolicyName", "policy_name"),
        column("PolicyType", "policy_type"),
        column("CompanyName", "company_name"),
        column("EndDate", "end_date", transform=_date, default=""),
        column("FirstName", "first_name"),
        column("Surname", "surname", "last_name"),
        column("PhoneNumber", "phone_number", "phone"),
        column("Email", "email"),
        column("DaysUntilExpiry", "days_until_expiry", transform=_int),
    ),
)

APPOINTMENT = EntityMap(
    "appointment",
    (
        column("appointmentId", "appointment_id"),
        column("clientId", "client_id"),
        column("agentId", "agent_id"),
        column("clientName", "client_name"),
        column("clientPhone", "client_phone"),
        column("title", "title"),
        column("description", "description"),
        column("appointmentDate", "appointment_date", transform=_date),
        column("startTime", "start_time", transform=_time),
        column("endTime", "end_time", transform=_time),
        column("location", "location"),
        column("type", "type"),
        column("status", "status"),
        column("priority", "priority"),
        column("notes", "notes"),
        column("reminderSet", "reminder_set", default=False),
        column("createdDate", "created_date", transform=_timestamp),
        column("modifiedDate", "modified_date", transform=_timestamp),
        column("isActive", "is_active", default=True),
        column("clientEmail", "client_email"),
        column("clientAddress", "client_address"),
        column("formattedTime", "formatted_time"),
    ),
)

CLIENT_SEARCH_RESULT = EntityMap(
    "client_search_result",
    (
        column("clientId", "client_id"),
        column("clientName", "client_name"),
        column("phone", "phone", "phone_number"),
        column("email", "email"),
        column("address", "address"),
        column("policyNumber", "policy_number"),
        column("status", "status"),
    ),
)


def map_reminder(row: Mapping[str, Any]) -> dict[str, Any]:
    return REMINDER.map_row(row)


def map_reminder_settings(row: Mapping[str, Any]) -> dict[str, Any]:
    return REMINDER_SETTINGS.map_row(row)


def map_birthday_reminder(row: Mapping[str, Any]) -> dict[str, Any]:
    return BIRTHDAY_REMINDER.map_row(row)


def map_policy_expiry_reminder(row: Mapping[str, Any]) -> dict[str, Any]:
    return POLICY_EXPIRY_REMINDER.map_row(row)


def map_appointment(row: Mapping[str, Any]) -> dict[str, Any]:
    return APPOINTMENT.map_row(row)
