"""One-click unsubscribe endpoint used by links in notification emails.

No sign-in is required: the encrypted token identifies the member and category.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from gallery_notifications.core.database import get_db
from gallery_notifications.modules.notifications.schemas import (
    UnsubscribeRequest,
    UnsubscribeResult,
)
from gallery_notifications.modules.notifications.service import UnsubscribeService

router = APIRouter(prefix="/unsubscribe", tags=["Unsubscribe"])


@router.post("", response_model=UnsubscribeResult)
async def unsubscribe(payload: UnsubscribeRequest, db: Session = Depends(get_db)):
    return await UnsubscribeService(db).redeem(payload.token)
