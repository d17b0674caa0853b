"""
Confirmation notification jobs and their rendering.

A job is a snapshot taken when the purchase commits: it carries everything
the email needs so the worker never reads the store again.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from booking_service.utils.datetime import nights_between

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

# HTML templates are autoescaped; the plain-text body is not.
templates = Environment(
    loader=FileSystemLoader(TEMPLATES_DIR),
    autoescape=select_autoescape(enabled_extensions=("html",), default_for_string=False),
    undefined=StrictUndefined,
)


class NotificationKind(str, Enum):
    LODGING_CONFIRMATION = "lodging_confirmation"
    EXPERIENCE_CONFIRMATION = "experience_confirmation"


@dataclass(frozen=True)
class NotificationJob:
    """A queued confirmation message for one purchase."""

    recipient_email: str
    recipient_name: str
    kind: NotificationKind
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RenderedMessage:
    to: str
    subject: str
    text: str
    html: str


def _format_date(value: date | str | None) -> str:
    if value is None:
        return "Por confirmar"
    if isinstance(value, str):
        value = date.fromisoformat(value)
    return value.strftime("%d/%m/%Y")


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def _detail_lines(job: NotificationJob) -> list[tuple[str, str]]:
    p = job.payload
    party_size = int(p.get("party_size") or 1)

    if job.kind is NotificationKind.EXPERIENCE_CONFIRMATION:
        return [
            ("Experiencia", p.get("target_name") or "Experiencia"),
            ("Ubicación", p.get("target_location") or "Por confirmar"),
            ("Fecha", _format_date(p.get("start_date"))),
            ("Hora", p.get("time") or "Por confirmar"),
            ("Participantes", _plural(party_size, "persona")),
            ("Punto de encuentro", p.get("meeting_point") or "Se informará después"),
        ]

    start = p.get("start_date")
    end = p.get("end_date")
    nights = nights_between(
        date.fromisoformat(start) if isinstance(start, str) else start,
        date.fromisoformat(end) if isinstance(end, str) else end,
    )
    return [
        ("Propiedad", p.get("target_name") or "Propiedad"),
        ("Ubicación", p.get("target_location") or "Por confirmar"),
        ("Check-in", _format_date(start)),
        ("Check-out", _format_date(end)),
        ("Estancia", _plural(nights, "noche")),
        ("Huéspedes", _plural(party_size, "persona")),
    ]


def render_message(job: NotificationJob) -> RenderedMessage:
    """
    Render the confirmation email for a job.

    Args:
        job: Notification job built by the booking orchestrator

    Returns:
        RenderedMessage: Recipient, subject and text/HTML bodies
    """
    p = job.payload
    code = str(p.get("reservation_code") or f"R-{p.get('reservation_id')}")
    total = Decimal(str(p.get("total", "0"))).quantize(Decimal("0.01"))

    lines = _detail_lines(job) + [
        ("Reserva", f"#{p.get('reservation_id')}"),
        ("Pago", f"#{p.get('payment_id')}"),
        ("Total", f"${total}"),
    ]

    context = {"recipient_name": job.recipient_name, "code": code, "lines": lines}

    return RenderedMessage(
        to=job.recipient_email,
        subject=f"Confirmación de Reserva {code}",
        text=templates.get_template("confirmation.txt").render(context),
        html=templates.get_template("confirmation.html").render(context),
    )
