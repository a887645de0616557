"""
Pure renderers that turn a NotificationEvent into (subject, html) per recipient.

Markup lives in physiome/templates/email and is rendered with Jinja2. Nothing
here performs I/O or reads the clock; every value comes from the event or
from the constructor.
"""
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from jinja2 import Environment, PackageLoader, StrictUndefined, select_autoescape
from markupsafe import Markup, escape

from physiome.schemas.notification import NotificationEvent
from physiome.services.status_classifier import classify_status

# English names regardless of the process locale
_WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
_MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

DEFAULT_FRONTEND_URL = "http://localhost:5173"


def long_date(value) -> str:
    """2025-03-14 -> 'Friday, March 14, 2025'."""
    if isinstance(value, datetime):
        value = value.date()
    elif isinstance(value, str):
        value = date.fromisoformat(value[:10])
    return f"{_WEEKDAYS[value.weekday()]}, {_MONTHS[value.month - 1]} {value.day}, {value.year}"


def nl2br(value) -> Markup:
    if value is None:
        return Markup("")
    lines = str(value).replace("\r\n", "\n").split("\n")
    return Markup("<br>").join(escape(line) for line in lines)


def visit_label(visit_type) -> str:
    return "Home Visit" if visit_type == "home" else "Clinic Visit"


def build_environment() -> Environment:
    env = Environment(
        loader=PackageLoader("physiome", "templates/email"),
        autoescape=select_autoescape(["html"]),
        undefined=StrictUndefined,
    )
    env.filters["long_date"] = long_date
    env.filters["nl2br"] = nl2br
    env.filters["visit_label"] = visit_label
    return env


@dataclass(frozen=True)
class Recipient:
    role: str                 # "admin" | "submitter" | "patient" | "therapist" | "tester"
    address: Optional[str]


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html: str


class EmailRenderer:
    def __init__(self, admin_address: Optional[str] = None, frontend_url: Optional[str] = None):
        # admin_address doubles as the support mailbox linked from patient mails
        self.admin_address = admin_address
        self.frontend_url = (frontend_url or DEFAULT_FRONTEND_URL).rstrip("/")
        self.env = build_environment()

    def recipients(self, event: NotificationEvent) -> list[Recipient]:
        """Recipients in the order they must be notified."""
        if event.kind == "contact":
            return [Recipient("admin", self.admin_address), Recipient("submitter", event.contact.email)]
        if event.kind == "booking":
            return [Recipient("patient", event.patient.email), Recipient("therapist", event.therapist.email)]
        if event.kind == "statusUpdate":
            return [Recipient("patient", event.patient.email)]
        if event.kind == "test":
            return [Recipient("tester", event.recipient or self.admin_address)]
        raise ValueError(f"Unknown notification kind: {event.kind}")

    def render(self, event: NotificationEvent, recipient: Recipient) -> RenderedEmail:
        handler = getattr(self, f"_render_{event.kind}_{recipient.role}", None)
        if handler is None:
            raise ValueError(f"No template for {event.kind} -> {recipient.role}")
        return handler(event)

    def _html(self, template: str, **context) -> str:
        return self.env.get_template(template).render(**context)

    def _render_contact_admin(self, event: NotificationEvent) -> RenderedEmail:
        return RenderedEmail(
            subject=f"Contact Form: {event.contact.subject}",
            html=self._html("contact_admin.html", contact=event.contact),
        )

    def _render_contact_submitter(self, event: NotificationEvent) -> RenderedEmail:
        return RenderedEmail(
            subject="Thank you for contacting PhysioMe",
            html=self._html("contact_submitter.html", contact=event.contact),
        )

    def _render_booking_patient(self, event: NotificationEvent) -> RenderedEmail:
        return RenderedEmail(
            subject="Appointment Booking Confirmation - PhysioMe",
            html=self._html(
                "booking_patient.html",
                appointment=event.appointment,
                patient=event.patient,
                therapist=event.therapist,
                support_address=self.admin_address,
            ),
        )

    def _render_booking_therapist(self, event: NotificationEvent) -> RenderedEmail:
        return RenderedEmail(
            subject="New Appointment Booking - Action Required",
            html=self._html(
                "booking_therapist.html",
                appointment=event.appointment,
                patient=event.patient,
                therapist=event.therapist,
                dashboard_url=f"{self.frontend_url}/therapist/appointments",
            ),
        )

    def _render_statusUpdate_patient(self, event: NotificationEvent) -> RenderedEmail:
        status_info = classify_status(event.appointment.status)
        return RenderedEmail(
            subject=f"Appointment {status_info.label} - PhysioMe",
            html=self._html(
                "status_update.html",
                appointment=event.appointment,
                patient=event.patient,
                therapist=event.therapist,
                status_info=status_info,
                support_address=self.admin_address,
            ),
        )

    def _render_test_tester(self, event: NotificationEvent) -> RenderedEmail:
        return RenderedEmail(
            subject="🧪 PhysioMe Email Test",
            html=self._html(
                "test.html",
                timestamp=event.timestamp.isoformat() if event.timestamp else "",
                environment=event.environment or "development",
            ),
        )
