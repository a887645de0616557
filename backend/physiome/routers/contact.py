from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from physiome.schemas.common import envelope
from physiome.schemas.notification import ContactSubmission
from physiome.services.notification_service import NotificationService, get_notification_service

router = APIRouter()


@router.post("")
async def submit_contact_form(
    submission: ContactSubmission,
    notifier: NotificationService = Depends(get_notification_service),
):
    result = await notifier.send_contact_emails(submission)
    if not result.ok:
        return JSONResponse(status_code=500, content=envelope(result, result.message, success=False))
    return envelope(message="Thank you for your message. We will get back to you soon!")
