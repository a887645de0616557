"""
Administrator operations over the two user populations.

Every method returns credential-free projections (schemas.user) and raises
physiome.exceptions errors; the router turns those into envelopes.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from physiome.exceptions import NotFound
from physiome.models.patient_profile import PatientProfile
from physiome.models.user import User
from physiome.schemas.user import (
    DashboardStats,
    EmergencyContact,
    InsuranceInfo,
    PatientDetailResponse,
    TherapistProfileResponse,
    UserResponse,
)

logger = logging.getLogger(__name__)

THERAPIST = "physiotherapist"
PATIENT = "patient"

_NOT_FOUND = {
    THERAPIST: "Therapist not found",
    PATIENT: "Patient not found",
    None: "User not found",
}


class CommandKind(str, Enum):
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    DELETE = "DELETE"


@dataclass(frozen=True)
class UserCommand:
    """
    Tagged admin command. `role` restricts the target population (None means
    any role); a DELETE cascades to the patient profile iff the target turns
    out to be a patient.
    """
    kind: CommandKind
    permanent: bool = False
    role: Optional[str] = None


@dataclass
class CommandResult:
    message: str
    user: Optional[UserResponse] = None


def command_from_reject_request(reason: Optional[str], permanent: bool) -> UserCommand:
    """
    Adapter for the legacy reject body. Only ADMIN_DELETE / ADMIN_DELETE_PATIENT
    together with permanent=true delete; every other combination, including
    ADMIN_DELETE without permanent, is a plain rejection.
    """
    if permanent and reason == "ADMIN_DELETE":
        return UserCommand(CommandKind.DELETE, permanent=True, role=THERAPIST)
    if permanent and reason == "ADMIN_DELETE_PATIENT":
        return UserCommand(CommandKind.DELETE, permanent=True, role=PATIENT)
    return UserCommand(CommandKind.REJECT, role=THERAPIST)


def _blank_if_none(data: Optional[dict]) -> dict:
    return {k: ("" if v is None else v) for k, v in (data or {}).items()}


class AdminService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _count(self, *conditions) -> int:
        return await self.db.scalar(select(func.count(User.id)).where(*conditions)) or 0

    async def _find(self, user_id: str, role: Optional[str] = None) -> User:
        query = select(User).where(User.id == user_id)
        if role is not None:
            query = query.where(User.role == role)
        user = await self.db.scalar(query)
        if user is None:
            raise NotFound(_NOT_FOUND.get(role, "User not found"))
        return user

    async def dashboard_counts(self) -> DashboardStats:
        # Independent counts; the aggregate is not a consistent snapshot.
        return DashboardStats(
            total_therapists=await self._count(User.role == THERAPIST),
            pending_approvals=await self._count(User.role == THERAPIST, User.status == "pending"),
            approved_therapists=await self._count(User.role == THERAPIST, User.status == "approved"),
            rejected_therapists=await self._count(User.role == THERAPIST, User.status == "rejected"),
            total_patients=await self._count(User.role == PATIENT),
        )

    async def list_therapists(self) -> list[TherapistProfileResponse]:
        result = await self.db.execute(
            select(User).where(User.role == THERAPIST).order_by(User.created_at.desc())
        )
        return [self._therapist_profile(u) for u in result.scalars().all()]

    async def list_pending_therapists(self) -> list[TherapistProfileResponse]:
        result = await self.db.execute(
            select(User).where(User.role == THERAPIST, User.status == "pending")
        )
        return [self._therapist_profile(u) for u in result.scalars().all()]

    async def list_patients(self) -> list[UserResponse]:
        result = await self.db.execute(
            select(User).where(User.role == PATIENT).order_by(User.created_at.desc())
        )
        return [UserResponse.model_validate(u) for u in result.scalars().all()]

    async def get_therapist(self, user_id: str) -> TherapistProfileResponse:
        return self._therapist_profile(await self._find(user_id, THERAPIST))

    async def get_patient(self, user_id: str) -> PatientDetailResponse:
        user = await self._find(user_id, PATIENT)
        profile = await self.db.scalar(select(PatientProfile).where(PatientProfile.user_id == user_id))

        detail = UserResponse.model_validate(user).model_dump()
        if profile is not None:
            detail.update(
                gender=profile.gender or "",
                address=profile.address or "",
                allergies=profile.allergies or "",
                medications=profile.medications or "",
                emergency_contact=EmergencyContact(**_blank_if_none(profile.emergency_contact)),
                insurance_info=InsuranceInfo(**_blank_if_none(profile.insurance_info)),
            )
        return PatientDetailResponse(**detail)

    async def _set_status(self, user: User, status: str) -> UserResponse:
        if user.status != status:
            user.status = status
            await self.db.flush()
            logger.info("Therapist %s status set to %s", user.id, status)
        return UserResponse.model_validate(user)

    async def approve_therapist(self, user_id: str) -> UserResponse:
        return await self._set_status(await self._find(user_id, THERAPIST), "approved")

    async def reject_therapist(self, user_id: str) -> UserResponse:
        return await self._set_status(await self._find(user_id, THERAPIST), "rejected")

    async def _delete(self, user: User) -> None:
        if user.is_patient:
            # Profile first so a profile never outlives its user
            await self.db.execute(delete(PatientProfile).where(PatientProfile.user_id == user.id))
        await self.db.delete(user)
        await self.db.flush()
        logger.info("Deleted %s %s", user.role, user.id)

    async def delete_therapist(self, user_id: str) -> None:
        await self._delete(await self._find(user_id, THERAPIST))

    async def delete_patient(self, user_id: str) -> None:
        await self._delete(await self._find(user_id, PATIENT))

    async def manage_user(self, user_id: str, command: UserCommand) -> CommandResult:
        user = await self._find(user_id, command.role)

        if command.kind == CommandKind.DELETE:
            if not command.permanent:
                return CommandResult("User not deleted: permanent flag required", UserResponse.model_validate(user))
            label = "Patient" if user.is_patient else "Therapist"
            await self._delete(user)
            return CommandResult(f"{label} deleted successfully")

        status = "approved" if command.kind == CommandKind.APPROVE else "rejected"
        if user.is_therapist:
            projection = await self._set_status(user, status)
        else:
            projection = UserResponse.model_validate(user)

        if command.role == THERAPIST:
            return CommandResult(f"Therapist {status} successfully", projection)
        return CommandResult(f"User {status} successfully", projection)

    @staticmethod
    def _therapist_profile(user: User) -> TherapistProfileResponse:
        return TherapistProfileResponse(
            **UserResponse.model_validate(user).model_dump(),
            specialization=user.specialization or "",
            experience=user.experience or "",
            bio=user.bio or "",
        )
