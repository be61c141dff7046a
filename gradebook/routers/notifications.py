from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from gradebook.core.security.auth import get_current_user
from gradebook.db.session import get_db
from gradebook.models.notification import Notification
from gradebook.services import notifications as notification_service

router = APIRouter(prefix="/notifications", tags=["notifications"])

def format_notification(n: Notification):
    return {
        "id": n.id,
        "title": n.title,
        "message": n.message,
        "type": n.type,
        "action_link": n.action_link,
        "date": n.created_at,
        "read": n.read,
    }

@router.get("/")
async def list_notifications(
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return [format_notification(n) for n in notification_service.list_notifications(db, current_user["user"])]

@router.post("/{notification_id}/read")
async def mark_notification_read(
    notification_id: int,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    notification = notification_service.mark_read(db, current_user["user"], notification_id)
    return format_notification(notification)
