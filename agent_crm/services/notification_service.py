"""
Appointment Notification Service
Best-effort client notifications queued after the primary write has committed
"""

import logging
from datetime import date, datetime, time
from typing import Optional

from .. import email_service

logger = logging.getLogger(__name__)

FORMATTED_TIME = "%A, %d %B %Y at %H:%M"


def format_appointment_time(appointment_date: date, start_time: time) -> str:
    """e.g. 'Monday, 06 January 2025 at 09:30'"""
    return datetime.combine(appointment_date, start_time).strftime(FORMATTED_TIME)


async def send_appointment_confirmation_safely(
    client_email: Optional[str],
    client_name: Optional[str],
    title: str,
    appointment_date: date,
    start_time: time,
    location: Optional[str] = None,
) -> bool:
    """
    Send the appointment confirmation email; never raises.

    Runs as a background task after the response is sent. It receives plain
    values only, never a database session.

    Returns:
        True when the email was handed to the provider
    """
    if not client_email:
        logger.debug(f"⚠️ No email address for appointment confirmation to {client_name}")
        return False

    try:
        formatted_time = format_appointment_time(appointment_date, start_time)
        logger.info(f"📧 Sending appointment confirmation email to {client_email}")
        await email_service.send_appointment_confirmation(
            client_email=client_email,
            client_name=client_name or "there",
            title=title,
            formatted_time=formatted_time,
            location=location,
        )
        logger.info(f"✅ Appointment confirmation email sent successfully to {client_email}")
        return True
    except Exception as e:
        logger.error(f"❌ Failed to send appointment confirmation email to {client_email}: {e}")
        return False
