import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from physiome.exceptions import Conflict, Forbidden, NotFound
from physiome.models.appointment import Appointment
from physiome.models.user import User
from physiome.schemas.notification import AppointmentSnapshot, DispatchResult
from physiome.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

# pending -> confirmed -> completed, and anything not completed may be cancelled
ALLOWED_TRANSITIONS = {
    "pending": {"confirmed", "cancelled"},
    "confirmed": {"completed", "cancelled"},
    "cancelled": set(),
    "completed": set(),
}


def can_transition(current: str, target: str) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, set())


@dataclass
class StatusChange:
    appointment: AppointmentSnapshot
    previous_status: str
    changed: bool
    notification: Optional[DispatchResult] = None


class AppointmentService:
    def __init__(self, db: AsyncSession, notifier: NotificationService):
        self.db = db
        self.notifier = notifier

    async def update_status(self, appointment_id: int, status: str, actor: User) -> StatusChange:
        appointment = await self.db.scalar(select(Appointment).where(Appointment.id == appointment_id))
        if appointment is None:
            raise NotFound("Appointment not found")
        if actor.is_therapist and appointment.therapist_id != actor.id:
            raise Forbidden("Not authorized to update this appointment")

        previous = appointment.status
        if previous == status:
            # Repeated transitions are suppressed here so no duplicate mail goes out.
            return StatusChange(AppointmentSnapshot.model_validate(appointment), previous, changed=False)
        if not can_transition(previous, status):
            raise Conflict(f"Cannot change appointment status from {previous} to {status}")

        appointment.status = status
        await self.db.flush()
        snapshot = AppointmentSnapshot.model_validate(appointment)
        patient = await self.db.get(User, appointment.patient_id)
        therapist = await self.db.get(User, appointment.therapist_id)
        # Persist before talking to SMTP; a failed send never undoes the change.
        await self.db.commit()
        logger.info("Appointment %s: %s -> %s", appointment_id, previous, status)

        if patient is None or therapist is None:
            logger.warning("Appointment %s references a missing user; no notification sent", appointment_id)
            return StatusChange(snapshot, previous, changed=True)

        result = await self.notifier.send_status_update_email(snapshot, patient, therapist, previous)
        return StatusChange(snapshot, previous, changed=True, notification=result)
