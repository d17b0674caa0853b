import os

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEBUG = LOG_LEVEL == "DEBUG"

# When set, confirmation emails are rendered and logged but never sent.
DRY_RUN = os.getenv("DRY_RUN", "false").lower() == "true"

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise ValueError("DATABASE_URL must be set in the environment")

# Optional PostgreSQL schema; SQLite and plain setups keep tables unqualified.
SCHEMA: str | None = os.getenv("DB_SCHEMA") or None

ALLOWED_ORIGINS_RAW = os.getenv("ALLOWED_ORIGINS")
if not ALLOWED_ORIGINS_RAW:
    raise ValueError("ALLOWED_ORIGINS must be set in the environment")

ALLOWED_ORIGINS: list[str] = [
    origin.strip() for origin in ALLOWED_ORIGINS_RAW.split(",")
]

NOTIFICATION_QUEUE_MAXSIZE = int(os.getenv("NOTIFICATION_QUEUE_MAXSIZE", "1000"))

MAIL_API_URL = os.getenv("MAIL_API_URL")
MAIL_API_KEY = os.getenv("MAIL_API_KEY")
MAIL_SENDER = os.getenv("MAIL_SENDER", "Sistema de Reservas <reservas@example.com>")
MAIL_TIMEOUT_SECONDS = float(os.getenv("MAIL_TIMEOUT_SECONDS", "10"))
