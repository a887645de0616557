from typing import Literal

from pydantic import BaseModel

from physiome.models.appointment import APPOINTMENT_STATUSES


class AppointmentStatusUpdate(BaseModel):
    status: Literal[APPOINTMENT_STATUSES]
