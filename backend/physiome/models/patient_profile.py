from sqlalchemy import Column, Integer, String, Text, JSON, ForeignKey
from sqlalchemy.orm import relationship

from physiome.database import Base


class PatientProfile(Base):
    __tablename__ = "patient_profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    gender = Column(String(20))
    address = Column(Text)
    allergies = Column(Text)
    medications = Column(Text)
    emergency_contact = Column(JSON)  # {name, relationship, phone}
    insurance_info = Column(JSON)     # {provider, policy_number, expiry_date}

    user = relationship("User", back_populates="patient_profile")
