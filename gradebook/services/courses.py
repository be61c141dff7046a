import logging
from typing import List, Dict, Any

from sqlalchemy import or_
from sqlalchemy.orm import Session

from gradebook.core.config.settings import get_settings
from gradebook.core.exceptions import NotFound, ValidationFailed
from gradebook.models.course import Course, course_students
from gradebook.models.notification import NotificationType
from gradebook.models.user import User, Role, RoleType, UserStatus
from gradebook.services import notifications
from gradebook.services.lookups import is_enrolled, require_instructor
from gradebook.utils.helpers import get_utc_now, normalize_email

logger = logging.getLogger(__name__)


def create_course(db: Session, user: User, title: str, description: str = None) -> Course:
    if not title or not title.strip():
        raise ValidationFailed("Title is required")
    course = Course(title=title.strip(), description=description, instructor_id=user.id)
    db.add(course)
    db.commit()
    db.refresh(course)
    logger.info(f"Course {course.id} created by user {user.id}")
    return course

def list_courses(db: Session, user: User) -> List[Course]:
    """Courses the user teaches or is enrolled in, newest first."""
    return (
        db.query(Course)
        .outerjoin(course_students, course_students.c.course_id == Course.id)
        .filter(or_(Course.instructor_id == user.id, course_students.c.student_id == user.id))
        .distinct()
        .order_by(Course.created_at.desc(), Course.id.desc())
        .all()
    )

def update_course(db: Session, user: User, course: Course, changes: Dict[str, Any]) -> Course:
    require_instructor(course, user)
    if "title" in changes:
        title = (changes["title"] or "").strip()
        if not title:
            raise ValidationFailed("Title is required")
        course.title = title
    if "description" in changes:
        course.description = changes["description"]
    db.commit()
    db.refresh(course)
    logger.info(f"Course {course.id} updated by user {user.id}")
    return course

def delete_course(db: Session, user: User, course: Course) -> None:
    """Delete the course with its assignments, submissions and materials.

    Notifications already sent and storage already charged are left as they are.
    """
    require_instructor(course, user)
    course_id = course.id
    db.delete(course)
    db.commit()
    logger.info(f"Course {course_id} deleted by user {user.id}")

def _create_invited_student(db: Session, email: str) -> User:
    student_role = db.query(Role).filter(Role.role == RoleType.STUDENT).first()
    if not student_role:
        raise NotFound("Student role not found in database")
    user = User(
        name=email.split("@")[0],
        email=email,
        username=email,
        hashed_password=None,
        role_id=student_role.id,
        status=UserStatus.INVITED.value,
        storage_used=0,
        ai_credits=get_settings().AI_FREE_MONTHLY_CREDITS,
        last_credit_reset=get_utc_now()
    )
    db.add(user)
    db.flush()
    return user

def batch_add_students(db: Session, user: User, course: Course, lines: List[str]) -> Dict[str, Any]:
    """Enroll students from lines whose first comma-separated field is an e-mail.

    Unknown addresses get an invited student account. Everyone processed
    receives an invite notification.
    """
    require_instructor(course, user)

    processed: List[User] = []
    ignored: List[str] = []
    seen = set()
    try:
        for line in lines:
            email = normalize_email(line.split(",")[0])
            if not email:
                continue
            if "@" not in email or email == course.instructor.email:
                ignored.append(email)
                continue
            if email in seen:
                continue
            seen.add(email)

            student = db.query(User).filter(User.email == email).first()
            if student is None:
                student = _create_invited_student(db, email)
            if not is_enrolled(course, student.id):
                course.students.append(student)
            processed.append(student)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info(f"Enrolled {len(processed)} student(s) in course {course.id}, ignored {len(ignored)}")

    notifications.notify_users(
        db, [student.id for student in processed],
        title="New course assigned",
        message=f"You have been enrolled in the course: {course.title}. Welcome!",
        type=NotificationType.INVITE,
        action_link=str(course.id)
    )
    return {"valid_users": processed, "ignored_emails": ignored}

def remove_student(db: Session, user: User, course: Course, student_id: int) -> None:
    """Drop a student from the roster. Their submissions and grades are kept."""
    require_instructor(course, user)
    student = next((s for s in course.students if s.id == student_id), None)
    if student is None:
        raise NotFound("Student is not enrolled in this course")
    course.students.remove(student)
    db.commit()
    logger.info(f"Student {student_id} removed from course {course.id}")
