from datetime import date as Date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, field_validator

from physiome.schemas.common import CamelModel

NotificationKind = Literal["contact", "booking", "statusUpdate", "test"]


class PersonSnapshot(BaseModel):
    name: str
    email: str
    phone: Optional[str] = None

    class Config:
        frozen = True
        from_attributes = True


class AppointmentSnapshot(CamelModel):
    id: Optional[int] = None
    date: Date
    time: str
    visit_type: str = "clinic"
    type: Optional[str] = None
    notes: Optional[str] = None
    status: str = "pending"

    class Config:
        frozen = True
        from_attributes = True

    @property
    def type_label(self) -> str:
        return self.type or "Initial Consultation"


class ContactSubmission(CamelModel):
    first_name: str
    last_name: str = ""
    email: EmailStr
    phone: Optional[str] = None
    subject: str
    message: str

    @field_validator("subject")
    @classmethod
    def single_line_subject(cls, value: str) -> str:
        # The subject ends up in a mail header
        if "\r" in value or "\n" in value:
            raise ValueError("subject must be a single line")
        return value

    class Config:
        frozen = True

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class NotificationEvent(BaseModel):
    """
    One email-worthy occurrence. Snapshots are captured when the triggering
    state change happens and are frozen for the lifetime of the event.
    """
    kind: NotificationKind
    appointment: Optional[AppointmentSnapshot] = None
    patient: Optional[PersonSnapshot] = None
    therapist: Optional[PersonSnapshot] = None
    previous_status: Optional[str] = None
    contact: Optional[ContactSubmission] = None
    # test mails only
    recipient: Optional[str] = None
    timestamp: Optional[datetime] = None
    environment: Optional[str] = None

    class Config:
        frozen = True

    @classmethod
    def for_contact(cls, submission: ContactSubmission) -> "NotificationEvent":
        return cls(kind="contact", contact=submission)

    @classmethod
    def for_booking(cls, appointment, patient, therapist) -> "NotificationEvent":
        return cls(
            kind="booking",
            appointment=AppointmentSnapshot.model_validate(appointment),
            patient=PersonSnapshot.model_validate(patient),
            therapist=PersonSnapshot.model_validate(therapist),
        )

    @classmethod
    def for_status_update(cls, appointment, patient, therapist, previous_status: str = None) -> "NotificationEvent":
        return cls(
            kind="statusUpdate",
            appointment=AppointmentSnapshot.model_validate(appointment),
            patient=PersonSnapshot.model_validate(patient),
            therapist=PersonSnapshot.model_validate(therapist),
            previous_status=previous_status,
        )

    @classmethod
    def for_test(cls, recipient: str, timestamp: datetime, environment: str) -> "NotificationEvent":
        return cls(kind="test", recipient=recipient, timestamp=timestamp, environment=environment)

    @property
    def status(self) -> Optional[str]:
        return self.appointment.status if self.appointment else None


class RecipientOutcome(CamelModel):
    address: Optional[str]
    role: str
    ok: bool
    error: Optional[str] = None


class DispatchResult(CamelModel):
    ok: bool
    kind: NotificationKind
    message: str
    recipients: list[Optional[str]] = []
    per_recipient: list[RecipientOutcome] = []


class EmailTestRequest(BaseModel):
    email: Optional[EmailStr] = None
