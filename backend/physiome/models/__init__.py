from physiome.models.user import User
from physiome.models.patient_profile import PatientProfile
from physiome.models.appointment import Appointment

__all__ = ["User", "PatientProfile", "Appointment"]
