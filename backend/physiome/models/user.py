import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.orm import relationship

from physiome.database import Base

ROLES = ("patient", "physiotherapist", "admin")


def _new_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=_new_id)
    name = Column(String(200), nullable=False)
    email = Column(String(200), unique=True, nullable=False, index=True)
    phone = Column(String(30))
    password = Column(String(255), nullable=False)  # hash, never projected
    role = Column(String(20), nullable=False, index=True)  # "patient" | "physiotherapist" | "admin"
    status = Column(String(20), index=True)  # therapists only: "pending" | "approved" | "rejected"

    # Therapist profile
    specialization = Column(String(200))
    experience = Column(String(100))
    bio = Column(Text)

    created_at = Column(DateTime(timezone=True), default=_utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    patient_profile = relationship(
        "PatientProfile", back_populates="user", uselist=False, passive_deletes=True
    )

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        if self.role == "physiotherapist" and not self.status:
            self.status = "pending"

    @property
    def is_therapist(self) -> bool:
        return self.role == "physiotherapist"

    @property
    def is_patient(self) -> bool:
        return self.role == "patient"
