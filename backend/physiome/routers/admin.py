from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from physiome.auth import require_admin
from physiome.database import get_db
from physiome.schemas.common import envelope
from physiome.schemas.user import ManageUserRequest, RejectTherapistRequest
from physiome.services.admin_service import (
    AdminService,
    CommandKind,
    UserCommand,
    command_from_reject_request,
)

router = APIRouter(dependencies=[Depends(require_admin)])


def get_admin_service(db: AsyncSession = Depends(get_db)) -> AdminService:
    return AdminService(db)


@router.get("/stats")
async def get_dashboard_stats(service: AdminService = Depends(get_admin_service)):
    return envelope(await service.dashboard_counts())


@router.get("/therapists")
async def list_therapists(service: AdminService = Depends(get_admin_service)):
    return envelope(await service.list_therapists())


# Declared before /therapists/{therapist_id} so "pending" is not taken for an id
@router.get("/therapists/pending")
async def list_pending_therapists(service: AdminService = Depends(get_admin_service)):
    return envelope(await service.list_pending_therapists())


@router.get("/therapists/{therapist_id}")
async def get_therapist(therapist_id: str, service: AdminService = Depends(get_admin_service)):
    return envelope(await service.get_therapist(therapist_id))


@router.put("/therapists/{therapist_id}/approve")
async def approve_therapist(therapist_id: str, service: AdminService = Depends(get_admin_service)):
    therapist = await service.approve_therapist(therapist_id)
    return envelope(therapist, message="Therapist approved successfully")


@router.put("/therapists/{therapist_id}/reject")
async def reject_therapist(
    therapist_id: str,
    body: RejectTherapistRequest = RejectTherapistRequest(),
    service: AdminService = Depends(get_admin_service),
):
    """Reject, or delete when called with the legacy ADMIN_DELETE* reasons."""
    command = command_from_reject_request(body.reason, body.permanent)
    result = await service.manage_user(therapist_id, command)
    return envelope(result.user, message=result.message)


@router.delete("/therapists/{therapist_id}")
async def delete_therapist(therapist_id: str, service: AdminService = Depends(get_admin_service)):
    await service.delete_therapist(therapist_id)
    return envelope(message="Therapist deleted successfully")


@router.get("/patients")
async def list_patients(service: AdminService = Depends(get_admin_service)):
    return envelope(await service.list_patients())


@router.get("/patients/{patient_id}")
async def get_patient(patient_id: str, service: AdminService = Depends(get_admin_service)):
    return envelope(await service.get_patient(patient_id))


@router.delete("/patients/{patient_id}")
async def delete_patient(patient_id: str, service: AdminService = Depends(get_admin_service)):
    await service.delete_patient(patient_id)
    return envelope(message="Patient deleted successfully")


@router.put("/users/{user_id}")
async def manage_user(
    user_id: str,
    body: ManageUserRequest,
    service: AdminService = Depends(get_admin_service),
):
    command = UserCommand(CommandKind(body.action), permanent=body.permanent)
    result = await service.manage_user(user_id, command)
    return envelope(result.user, message=result.message)
