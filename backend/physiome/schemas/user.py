from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from physiome.schemas.common import CamelModel


class UserResponse(CamelModel):
    """Outbound user projection. Has no credential field by construction."""
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    role: str
    status: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TherapistProfileResponse(UserResponse):
    specialization: str = ""
    experience: str = ""
    bio: str = ""


class EmergencyContact(CamelModel):
    name: str = ""
    relationship: str = ""
    phone: str = ""


class InsuranceInfo(CamelModel):
    provider: str = ""
    policy_number: str = ""
    expiry_date: str = ""


class PatientDetailResponse(UserResponse):
    gender: str = ""
    address: str = ""
    allergies: str = ""
    medications: str = ""
    emergency_contact: EmergencyContact = Field(default_factory=EmergencyContact)
    insurance_info: InsuranceInfo = Field(default_factory=InsuranceInfo)


class DashboardStats(CamelModel):
    total_therapists: int = 0
    pending_approvals: int = 0
    approved_therapists: int = 0
    rejected_therapists: int = 0
    total_patients: int = 0


class ManageUserRequest(BaseModel):
    action: Literal["APPROVE", "REJECT", "DELETE"]
    permanent: bool = False
    reason: Optional[str] = None


class RejectTherapistRequest(BaseModel):
    """Legacy body of PUT /therapists/{id}/reject."""
    reason: Optional[str] = None
    permanent: bool = False
