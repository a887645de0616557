"""Notification dispatch: recipients -> render -> send, one event at a time."""
import logging
from datetime import datetime, timezone
from functools import lru_cache
from typing import Optional

from physiome.config import Settings, get_settings
from physiome.schemas.notification import (
    ContactSubmission,
    DispatchResult,
    NotificationEvent,
    RecipientOutcome,
)
from physiome.services.email_renderer import EmailRenderer
from physiome.services.mail_transport import EmailMessageData, SMTPTransport, TransportResult

logger = logging.getLogger(__name__)

_SUCCESS_MESSAGES = {
    "contact": "Contact emails sent successfully",
    "booking": "Appointment booking emails sent successfully",
    "statusUpdate": "Appointment {status} notification sent successfully",
    "test": "Test email sent successfully",
}

_FAILURE_MESSAGES = {
    "contact": "Failed to send contact email",
    "booking": "Failed to send appointment booking emails",
    "statusUpdate": "Failed to send appointment status update emails",
    "test": "Test email failed",
}


class NotificationService:
    """
    Sends every recipient of an event in declared order. A failed send is
    logged and reported but does not stop the remaining sends; nothing is
    retried and nothing the caller persisted is undone.
    """

    def __init__(self, transport: SMTPTransport, renderer: EmailRenderer, settings: Settings):
        self.transport = transport
        self.renderer = renderer
        self.settings = settings
        self.sender = settings.mail.from_address

    async def dispatch(self, event: NotificationEvent) -> DispatchResult:
        recipients = self.renderer.recipients(event)
        outcomes: list[RecipientOutcome] = []

        for recipient in recipients:
            if not recipient.address:
                logger.error("%s email for %s skipped: no address configured", event.kind, recipient.role)
                outcomes.append(
                    RecipientOutcome(address=None, role=recipient.role, ok=False, error="No recipient address")
                )
                continue
            rendered = self.renderer.render(event, recipient)
            result = await self.transport.asend(
                EmailMessageData(
                    sender=self.sender,
                    to=recipient.address,
                    subject=rendered.subject,
                    html=rendered.html,
                )
            )
            if result.ok:
                logger.info("%s email sent to %s (%s)", event.kind, recipient.address, recipient.role)
            else:
                logger.error(
                    "%s email to %s (%s) failed: %s",
                    event.kind, recipient.address, recipient.role, result.error,
                )
            outcomes.append(
                RecipientOutcome(address=recipient.address, role=recipient.role, ok=result.ok, error=result.error)
            )

        ok = all(o.ok for o in outcomes)
        if ok:
            message = _SUCCESS_MESSAGES[event.kind].format(status=event.status)
        else:
            errors = "; ".join(f"{o.address}: {o.error}" for o in outcomes if not o.ok)
            message = f"{_FAILURE_MESSAGES[event.kind]}: {errors}"
        return DispatchResult(
            ok=ok,
            kind=event.kind,
            message=message,
            recipients=[r.address for r in recipients],
            per_recipient=outcomes,
        )

    async def send_contact_emails(self, submission: ContactSubmission) -> DispatchResult:
        return await self.dispatch(NotificationEvent.for_contact(submission))

    async def send_booking_emails(self, appointment, patient, therapist) -> DispatchResult:
        return await self.dispatch(NotificationEvent.for_booking(appointment, patient, therapist))

    async def send_status_update_email(
        self, appointment, patient, therapist, previous_status: Optional[str] = None
    ) -> DispatchResult:
        return await self.dispatch(
            NotificationEvent.for_status_update(appointment, patient, therapist, previous_status)
        )

    async def send_test_email(self, to: Optional[str] = None) -> DispatchResult:
        event = NotificationEvent.for_test(
            recipient=to or self.sender,
            timestamp=datetime.now(timezone.utc),
            environment=self.settings.node_env or "development",
        )
        return await self.dispatch(event)

    async def test_connection(self) -> TransportResult:
        return await self.transport.averify()


def build_notification_service(settings: Settings) -> NotificationService:
    mail = settings.mail
    if not settings.is_production:
        logger.debug("Email config: %s", mail.masked())
    return NotificationService(
        transport=SMTPTransport(mail),
        renderer=EmailRenderer(admin_address=mail.from_address, frontend_url=settings.frontend_url),
        settings=settings,
    )


@lru_cache()
def get_notification_service() -> NotificationService:
    """Process-wide dispatcher built once from the cached settings."""
    return build_notification_service(get_settings())
