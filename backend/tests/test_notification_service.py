"""Tests for notification dispatch ordering and failure reporting."""

from unittest.mock import patch

import pytest
from pydantic import ValidationError

from physiome.config import MailSettings
from physiome.schemas.notification import ContactSubmission, NotificationEvent
from physiome.services.email_renderer import EmailRenderer
from physiome.services.mail_transport import SMTPTransport
from physiome.services.notification_service import NotificationService
from tests.factories import FakeTransport

APPOINTMENT = {"date": "2025-03-14", "time": "10:30", "visit_type": "home", "status": "pending"}
PATIENT = {"name": "Asha", "email": "a@x"}
THERAPIST = {"name": "Ravi", "email": "r@x"}


class TestDispatch:
    @pytest.mark.asyncio
    async def test_booking_notifies_patient_then_therapist(self, notifier, transport):
        result = await notifier.send_booking_emails(APPOINTMENT, PATIENT, THERAPIST)

        assert result.ok
        assert result.recipients == ["a@x", "r@x"]
        assert [m.to for m in transport.sent] == ["a@x", "r@x"]
        assert transport.sent[0].subject == "Appointment Booking Confirmation - PhysioMe"
        assert transport.sent[1].subject == "New Appointment Booking - Action Required"
        assert result.message == "Appointment booking emails sent successfully"

    @pytest.mark.asyncio
    async def test_sender_is_configured_from_address(self, notifier, transport):
        await notifier.send_booking_emails(APPOINTMENT, PATIENT, THERAPIST)

        assert {m.sender for m in transport.sent} == {"support@physiome.test"}

    @pytest.mark.asyncio
    async def test_failed_send_does_not_stop_later_recipients(self, renderer, settings):
        transport = FakeTransport(fail_for={"a@x"})
        notifier = NotificationService(transport, renderer, settings)

        result = await notifier.send_booking_emails(APPOINTMENT, PATIENT, THERAPIST)

        assert not result.ok
        assert [m.to for m in transport.sent] == ["a@x", "r@x"]
        assert [o.ok for o in result.per_recipient] == [False, True]
        assert result.per_recipient[0].error == "550 mailbox unavailable"
        assert "a@x" in result.message

    @pytest.mark.asyncio
    async def test_contact_notifies_admin_then_submitter(self, notifier, transport):
        submission = ContactSubmission(
            first_name="Mina", email="mina@example.com", subject="Hello", message="Hi there"
        )

        result = await notifier.send_contact_emails(submission)

        assert result.ok
        assert [m.to for m in transport.sent] == ["support@physiome.test", "mina@example.com"]

    @pytest.mark.asyncio
    async def test_status_update_goes_to_patient_only(self, notifier, transport):
        appointment = {**APPOINTMENT, "status": "confirmed"}

        result = await notifier.send_status_update_email(appointment, PATIENT, THERAPIST, "pending")

        assert result.ok
        assert [m.to for m in transport.sent] == ["a@x"]
        assert transport.sent[0].subject == "Appointment Confirmed - PhysioMe"
        assert result.message == "Appointment confirmed notification sent successfully"

    @pytest.mark.asyncio
    async def test_test_email_defaults_to_sender(self, notifier, transport):
        result = await notifier.send_test_email()

        assert result.ok
        assert transport.sent[0].to == "support@physiome.test"
        assert transport.sent[0].subject == "🧪 PhysioMe Email Test"

    @pytest.mark.asyncio
    async def test_missing_admin_address_is_reported(self, transport, settings):
        notifier = NotificationService(transport, EmailRenderer(admin_address=None), settings)
        submission = ContactSubmission(
            first_name="Mina", email="mina@example.com", subject="Hello", message="Hi there"
        )

        result = await notifier.dispatch(NotificationEvent.for_contact(submission))

        assert not result.ok
        assert result.per_recipient[0].error == "No recipient address"
        assert [m.to for m in transport.sent] == ["mina@example.com"]

    @pytest.mark.asyncio
    async def test_connection_check(self, renderer, settings):
        notifier = NotificationService(FakeTransport(verify_ok=False), renderer, settings)

        result = await notifier.test_connection()

        assert not result.ok
        assert result.error == "535 auth failed"


class TestMalformedMessages:
    @pytest.mark.asyncio
    async def test_unbuildable_subject_is_reported_per_recipient(self, renderer, settings):
        # Skips validation so the transport sees a subject the schema would refuse
        submission = ContactSubmission.model_construct(
            first_name="Mina",
            last_name="",
            email="mina@example.com",
            phone=None,
            subject="Hi\r\nBcc: victim@example.com",
            message="Hello",
        )
        mail = MailSettings(user="bot@physiome.test", password="app-pass", from_address="support@physiome.test")
        notifier = NotificationService(SMTPTransport(mail), renderer, settings)

        with patch("physiome.services.mail_transport.smtplib.SMTP") as smtp_cls:
            smtp_cls.return_value.send_message.side_effect = lambda mime: mime.as_bytes()
            result = await notifier.send_contact_emails(submission)

        assert not result.ok
        assert [(o.role, o.ok) for o in result.per_recipient] == [("admin", False), ("submitter", True)]
        assert result.message.startswith("Failed to send contact email")


class TestContactSubmission:
    def test_multiline_subject_is_refused(self):
        with pytest.raises(ValidationError, match="single line"):
            ContactSubmission(
                first_name="Mina", email="mina@example.com", subject="Hi\nBcc: victim@example.com", message="x"
            )

    def test_camel_case_body_is_accepted(self):
        submission = ContactSubmission.model_validate(
            {"firstName": "Mina", "lastName": "Otieno", "email": "mina@example.com", "subject": "Hi", "message": "x"}
        )

        assert submission.full_name == "Mina Otieno"
