from datetime import date, datetime, time

from agent_crm.shared.row_mapper import (
    CLIENT_SEARCH_RESULT,
    map_appointment,
    map_birthday_reminder,
    map_policy_expiry_reminder,
    map_reminder,
    map_reminder_settings,
)


def test_first_non_null_alias_wins():
    mapped = map_reminder({"reminder_id": None, "reminderId": "r-1", "reminderid": "r-2"})
    assert mapped["ReminderId"] == "r-1"


def test_lowercase_alias_is_accepted():
    assert map_appointment({"appointmentid": "a-1"})["appointmentId"] == "a-1"


def test_absent_fields_are_omitted():
    mapped = map_reminder({"reminder_id": "r-1"})
    assert "Title" not in mapped
    assert "ClientPhone" not in mapped
    assert "CompletedDate" not in mapped


def test_reminder_defaults():
    mapped = map_reminder({"reminder_id": "r-1"})
    assert mapped["EnableSMS"] is False
    assert mapped["EnableWhatsApp"] is False
    assert mapped["EnablePushNotification"] is True
    assert mapped["AutoSend"] is False
    assert mapped["ReminderDate"] == ""


def test_reminder_normalizes_temporal_fields():
    mapped = map_reminder(
        {
            "reminder_id": "r-1",
            "reminder_date": date(2025, 6, 10),
            "reminder_time": time(14, 5),
            "created_date": datetime(2025, 6, 1, 8, 0, 0),
            "completed_date": datetime(2025, 6, 2, 9, 30, 0),
        }
    )
    assert mapped["ReminderDate"] == "2025-06-10"
    assert mapped["ReminderTime"] == "14:05:00"
    assert mapped["CreatedDate"] == "2025-06-01T08:00:00.000Z"
    assert mapped["CompletedDate"] == "2025-06-02T09:30:00.000Z"


def test_null_time_stays_null():
    assert map_reminder({"reminder_id": "r-1", "reminder_time": None})["ReminderTime"] is None


def test_full_client_name_falls_back_to_client_name():
    assert map_reminder({"client_name": "Jane W"})["FullClientName"] == "Jane W"
    assert map_reminder({"full_client_name": "Jane Wanjiru", "client_name": "Jane W"})["FullClientName"] == "Jane Wanjiru"


def test_appointment_defaults_and_explicit_false():
    assert map_appointment({"appointment_id": "a-1"})["isActive"] is True
    assert map_appointment({"appointment_id": "a-1"})["reminderSet"] is False
    assert map_appointment({"appointment_id": "a-1", "is_active": False})["isActive"] is False


def test_appointment_times_are_canonical():
    mapped = map_appointment(
        {"appointment_date": date(2025, 6, 10), "start_time": time(9, 0), "end_time": "10:30"}
    )
    assert mapped["appointmentDate"] == "2025-06-10"
    assert mapped["startTime"] == "09:00:00"
    assert mapped["endTime"] == "10:30:00"


def test_settings_mapping():
    mapped = map_reminder_settings(
        {"reminder_type": "Birthday", "is_enabled": False, "days_before": 2, "time_of_day": time(9, 0)}
    )
    assert mapped["ReminderType"] == "Birthday"
    assert mapped["IsEnabled"] is False
    assert mapped["DaysBefore"] == 2
    assert mapped["TimeOfDay"] == "09:00:00"


def test_birthday_view_names_and_age():
    mapped = map_birthday_reminder(
        {
            "client_id": "c-1",
            "first_name": "Jane",
            "surname": "Wanjiru",
            "last_name": "Achieng",
            "phone_number": "+254712345678",
            "date_of_birth": date(2000, 2, 29),
            "age": 25,
        }
    )
    assert mapped["Surname"] == "Wanjiru"
    assert mapped["LastName"] == "Achieng"
    assert mapped["PhoneNumber"] == "+254712345678"
    assert mapped["DateOfBirth"] == "2000-02-29"
    assert mapped["Age"] == 25


def test_policy_expiry_view():
    mapped = map_policy_expiry_reminder(
        {"policy_id": "p-1", "end_date": date(2025, 6, 20), "last_name": "Otieno", "days_until_expiry": 10}
    )
    assert mapped["EndDate"] == "2025-06-20"
    assert mapped["Surname"] == "Otieno"
    assert mapped["DaysUntilExpiry"] == 10


def test_client_search_result():
    mapped = CLIENT_SEARCH_RESULT.map_row({"client_id": "c-1", "client_name": "Jane Wanjiru", "phone": "0712"})
    assert mapped == {"clientId": "c-1", "clientName": "Jane Wanjiru", "phone": "0712"}
