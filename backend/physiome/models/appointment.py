from sqlalchemy import Column, Integer, String, Text, Date, DateTime, ForeignKey

from physiome.database import Base
from physiome.models.user import _utcnow

APPOINTMENT_STATUSES = ("pending", "confirmed", "cancelled", "completed")


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(String(32), ForeignKey("users.id"), nullable=False, index=True)
    therapist_id = Column(String(32), ForeignKey("users.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    time = Column(String(20), nullable=False)  # local time of day, e.g. "10:30"
    visit_type = Column(String(10), nullable=False, default="clinic")  # "home" | "clinic"
    type = Column(String(100), default="Initial Consultation")
    notes = Column(Text)
    status = Column(String(20), nullable=False, default="pending")
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)
