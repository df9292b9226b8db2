import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./agent_crm.db")

# Reference timezone for "today" (today's reminders, birthdays, week view default)
REMINDER_TIMEZONE = os.getenv("REMINDER_TIMEZONE", "Africa/Nairobi")

# Default country code for phone validation
DEFAULT_COUNTRY_CODE = os.getenv("DEFAULT_COUNTRY_CODE", "+254")

# Reminder listing
DEFAULT_PAGE_SIZE = int(os.getenv("REMINDER_DEFAULT_PAGE_SIZE", "20"))
MAX_PAGE_SIZE = int(os.getenv("REMINDER_MAX_PAGE_SIZE", "100"))
APPOINTMENT_DEFAULT_PAGE_SIZE = int(os.getenv("APPOINTMENT_DEFAULT_PAGE_SIZE", "50"))

# Windows used by the cross-source reminder total
POLICY_EXPIRY_COUNT_WINDOW_DAYS = 30
BIRTHDAY_COUNT_WINDOW_DAYS = 7

# Policy expiry horizon accepted from callers
POLICY_EXPIRY_DEFAULT_DAYS = 30
POLICY_EXPIRY_MAX_DAYS = 365

# Resend Email Configuration
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", "Aminius App <noreply@aminius.app>")
APP_NAME = os.getenv("APP_NAME", "Aminius App")

# Comma separated list of allowed origins
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]
