from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from physiome.auth import require_roles
from physiome.database import get_db
from physiome.models.user import User
from physiome.schemas.appointment import AppointmentStatusUpdate
from physiome.schemas.common import envelope
from physiome.services.appointment_service import AppointmentService
from physiome.services.notification_service import NotificationService, get_notification_service

router = APIRouter()


@router.put("/{appointment_id}/status")
async def update_appointment_status(
    appointment_id: int,
    body: AppointmentStatusUpdate,
    db: AsyncSession = Depends(get_db),
    notifier: NotificationService = Depends(get_notification_service),
    current_user: User = Depends(require_roles("physiotherapist", "admin")),
):
    service = AppointmentService(db, notifier)
    change = await service.update_status(appointment_id, body.status, current_user)

    if not change.changed:
        message = f"Appointment is already {change.appointment.status}"
    else:
        message = f"Appointment status updated to {change.appointment.status}"
    return envelope(
        {
            "appointment": change.appointment,
            "previousStatus": change.previous_status,
            "notification": change.notification,
        },
        message=message,
    )
