"""Storage quota accounting.

Every upload is billed to a single owner account: course uploads
(materials, recordings and student submissions) to the course
instructor, publications to their author. The counter only grows;
deleting content never gives bytes back.
"""
import logging
from typing import Dict, Any, List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from gradebook.core.config.settings import get_settings
from gradebook.core.exceptions import NotFound, QuotaExceeded, Unauthorized, ValidationFailed
from gradebook.models.course import Course, Material, Recording
from gradebook.models.publication import Publication
from gradebook.models.user import User, RoleType
from gradebook.services.lookups import get_publication_or_404, get_user_or_404, require_instructor

logger = logging.getLogger(__name__)


def storage_limit(user: User) -> int:
    settings = get_settings()
    return settings.STORAGE_LIMIT_PREMIUM if user.is_premium else settings.STORAGE_LIMIT_FREE

def storage_summary(user: User) -> Dict[str, Any]:
    used = user.storage_used or 0
    limit = storage_limit(user)
    return {
        "user_id": user.id,
        "storage_used": used,
        "storage_limit": limit,
        "percentage": min(used / limit * 100, 100.0) if limit else 100.0,
        "over_limit": used > limit,
    }

def charge_storage(db: Session, owner_id: int, byte_delta: int) -> None:
    """Add ``byte_delta`` bytes to the owner's counter.

    The increment runs as a single UPDATE inside the caller's
    transaction; the caller commits. Nothing is written for a
    non-positive delta.
    """
    if byte_delta is None or byte_delta <= 0:
        return
    if get_settings().ENFORCE_STORAGE_QUOTA:
        owner = get_user_or_404(db, owner_id)
        if (owner.storage_used or 0) + byte_delta > storage_limit(owner):
            raise QuotaExceeded("Storage limit exceeded for the account that owns this upload")
    result = db.execute(
        update(User)
        .where(User.id == owner_id)
        .values(storage_used=User.storage_used + byte_delta)
        .execution_options(synchronize_session="fetch")
    )
    if result.rowcount == 0:
        raise NotFound("Storage owner not found")
    logger.info(f"Charged {byte_delta} bytes to user {owner_id}")

def add_material(db: Session, user: User, course: Course, title: str, type: str, url: str, file_size: int = 0) -> Material:
    require_instructor(course, user)
    material = Material(course_id=course.id, title=title, type=type, url=url, size=file_size)
    db.add(material)
    charge_storage(db, course.instructor_id, file_size)
    db.commit()
    db.refresh(material)
    return material

def add_recording(db: Session, user: User, course: Course, title: str, url: str, file_size: int = 0) -> Recording:
    require_instructor(course, user)
    if not url.startswith(("http://", "https://")):
        url = "https://" + url
    recording = Recording(course_id=course.id, title=title, url=url, size=file_size)
    db.add(recording)
    charge_storage(db, course.instructor_id, file_size)
    db.commit()
    db.refresh(recording)
    return recording

def upload_publication(db: Session, user: User, title: str, abstract: str = None,
                       type: str = "Paper", file_url: str = None, file_size: int = 0) -> Publication:
    if not title or not title.strip():
        raise ValidationFailed("Title is required")
    publication = Publication(
        author_id=user.id,
        title=title.strip(),
        abstract=abstract,
        type=type,
        file_url=file_url,
        size=file_size
    )
    db.add(publication)
    charge_storage(db, user.id, file_size)
    db.commit()
    db.refresh(publication)
    return publication

def list_publications(db: Session, author_id: Optional[int] = None) -> List[Publication]:
    """Published research, newest first; optionally one author's only."""
    query = db.query(Publication)
    if author_id is not None:
        query = query.filter(Publication.author_id == author_id)
    return query.order_by(Publication.created_at.desc(), Publication.id.desc()).all()

def delete_publication(db: Session, user: User, publication_id: int) -> None:
    publication = get_publication_or_404(db, publication_id)
    if publication.author_id != user.id and user.role.role != RoleType.ADMIN and not user.is_superadmin:
        raise Unauthorized("Only the author can delete this publication")
    size, author_id = publication.size, publication.author_id
    db.delete(publication)
    db.commit()
    logger.info(f"Deleted publication {publication_id}; {size} bytes stay charged to user {author_id}")
