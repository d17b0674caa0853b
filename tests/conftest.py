"""
Test-wide environment.

config.py reads DATABASE_URL and ALLOWED_ORIGINS at import time, so they are
set here before any booking_service module is imported. Tests always run
against SQLite and never send mail.
"""

from __future__ import annotations

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ALLOWED_ORIGINS"] = "*"
os.environ["DB_SCHEMA"] = ""
os.environ["DRY_RUN"] = "true"
os.environ.pop("MAIL_API_URL", None)
