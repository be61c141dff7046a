"""Fire-and-forget notification writes.

Each notification is committed on its own, after the state change it
reports has already been committed. A failed write is logged and
dropped; it never undoes the state change.
"""
import logging
from typing import Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gradebook.core.exceptions import NotFound
from gradebook.models.course import Course
from gradebook.models.notification import Notification, NotificationType
from gradebook.models.user import User

logger = logging.getLogger(__name__)


def _dispatch(db: Session, user_ids: Iterable[int], title: str, message: str,
              type: NotificationType, action_link: Optional[str]) -> int:
    user_ids = list(user_ids)
    if not user_ids:
        return 0
    try:
        for user_id in user_ids:
            db.add(Notification(
                user_id=user_id,
                title=title,
                message=message,
                type=type.value,
                action_link=action_link,
                read=False
            ))
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to deliver '{title}' notification to {len(user_ids)} user(s): {e}")
        return 0
    logger.info(f"Delivered '{title}' notification to {len(user_ids)} user(s)")
    return len(user_ids)

def notify_user(db: Session, user_id: int, title: str, message: str,
                type: NotificationType = NotificationType.SYSTEM,
                action_link: Optional[str] = None) -> bool:
    return _dispatch(db, [user_id], title, message, type, action_link) == 1

def notify_users(db: Session, user_ids: Iterable[int], title: str, message: str,
                 type: NotificationType = NotificationType.SYSTEM,
                 action_link: Optional[str] = None) -> int:
    return _dispatch(db, user_ids, title, message, type, action_link)

def broadcast_to_course(db: Session, course: Course, title: str, message: str,
                        type: NotificationType = NotificationType.SYSTEM) -> int:
    """One notification per student on the roster at call time."""
    student_ids = [student.id for student in course.students]
    return _dispatch(db, student_ids, title, message, type, str(course.id))

def list_notifications(db: Session, user: User) -> List[Notification]:
    return (
        db.query(Notification)
        .filter(Notification.user_id == user.id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .all()
    )

def mark_read(db: Session, user: User, notification_id: int) -> Notification:
    notification = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.user_id == user.id
    ).first()
    if not notification:
        raise NotFound("Notification not found")
    notification.read = True
    db.commit()
    db.refresh(notification)
    return notification
