"""Shared validation utilities"""

import re
import uuid
from typing import Any, Optional

from ..config import DEFAULT_COUNTRY_CODE, POLICY_EXPIRY_MAX_DAYS

REMINDER_TYPES = (
    "Call",
    "Visit",
    "Policy Expiry",
    "Maturing Policy",
    "Birthday",
    "Holiday",
    "Custom",
    "Appointment",
)
REMINDER_PRIORITIES = ("High", "Medium", "Low")
REMINDER_STATUSES = ("Active", "Completed", "Cancelled")
APPOINTMENT_STATUSES = ("Scheduled", "Confirmed", "In Progress", "Completed", "Cancelled", "Rescheduled")

_REMINDER_TYPE_LOOKUP = {t.replace(" ", "").lower(): t for t in REMINDER_TYPES}


def validate_uuid(value: str) -> bool:
    """Validate UUID format"""
    try:
        uuid.UUID(value)
        return True
    except (ValueError, AttributeError, TypeError):
        return False


def normalize_reminder_type(value: Optional[str]) -> Optional[str]:
    """
    Map a reminder type to its canonical spelling.

    "PolicyExpiry", "policy expiry" and "Policy Expiry" all map to "Policy Expiry".

    Raises:
        ValueError: If the value is not a known reminder type
    """
    if value is None:
        return None
    key = value.replace(" ", "").replace("_", "").lower()
    if key not in _REMINDER_TYPE_LOOKUP:
        raise ValueError(f"Invalid reminder type: {value}")
    return _REMINDER_TYPE_LOOKUP[key]


def validate_choice(value: Optional[str], choices: tuple[str, ...], label: str) -> Optional[str]:
    """Case-insensitive match against a fixed set, returning the canonical value"""
    if value is None:
        return None
    for choice in choices:
        if choice.lower() == value.strip().lower():
            return choice
    raise ValueError(f"Invalid {label}: {value}")


def validate_days_ahead(value: Any) -> int:
    """
    Validate the policy-expiry horizon.

    Raises:
        ValueError: If the value is not an integer in [1, 365]
    """
    if isinstance(value, bool):
        raise ValueError("daysAhead must be a valid number between 1 and 365")
    try:
        days = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValueError("daysAhead must be a valid number between 1 and 365")
    if days < 1 or days > POLICY_EXPIRY_MAX_DAYS:
        raise ValueError("daysAhead must be a valid number between 1 and 365")
    return days


def validate_phone_number(phone: Optional[str], country_code: Optional[str] = None) -> dict:
    """
    Validate and format a phone number to E.164.

    A leading 0 is treated as a local number under the country code. Numbers
    already carrying the country code (with or without "+") are kept as is.

    Returns:
        dict with IsValid, FormattedNumber and ValidationMessage
    """
    country_code = (country_code or DEFAULT_COUNTRY_CODE).strip()
    if not country_code.startswith("+"):
        country_code = f"+{country_code}"
    country_digits = re.sub(r"\D", "", country_code)

    if not phone or not phone.strip():
        return {
            "IsValid": False,
            "FormattedNumber": None,
            "ValidationMessage": "Phone number is required",
        }

    raw = phone.strip()
    if re.search(r"[^\d\s\-\(\)\+\.]", raw):
        return {
            "IsValid": False,
            "FormattedNumber": None,
            "ValidationMessage": "Phone number contains invalid characters",
        }

    # Remove all non-digit characters
    digits = re.sub(r"\D", "", raw)

    if raw.startswith("+"):
        national = digits[len(country_digits):] if digits.startswith(country_digits) else None
        if national is None:
            formatted = f"+{digits}"
            valid = 8 <= len(digits) <= 15
            return {
                "IsValid": valid,
                "FormattedNumber": formatted if valid else None,
                "ValidationMessage": "Valid international number" if valid else "Invalid international number length",
            }
    elif digits.startswith("0"):
        national = digits[1:]
    elif digits.startswith(country_digits) and len(digits) > len(country_digits) + 6:
        national = digits[len(country_digits):]
    else:
        national = digits

    # Kenyan mobile and landline numbers carry 9 national digits
    expected = 9 if country_digits == "254" else None
    if expected is not None and len(national) != expected:
        return {
            "IsValid": False,
            "FormattedNumber": None,
            "ValidationMessage": f"Phone number must have {expected} digits after the country code",
        }
    if expected is None and not 6 <= len(national) <= 12:
        return {
            "IsValid": False,
            "FormattedNumber": None,
            "ValidationMessage": "Invalid phone number length",
        }

    return {
        "IsValid": True,
        "FormattedNumber": f"+{country_digits}{national}",
        "ValidationMessage": "Valid phone number",
    }
