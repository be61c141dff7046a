from typing import Iterable, Optional

from sqlalchemy.orm import Session

from gradebook.core.exceptions import NotFound, Unauthorized
from gradebook.models.assignment import Assignment
from gradebook.models.course import Course
from gradebook.models.publication import Publication
from gradebook.models.user import User


def get_course_or_404(db: Session, course_id: int) -> Course:
    course = db.query(Course).filter(Course.id == course_id).first()
    if not course:
        raise NotFound("Course not found")
    return course

def get_assignment_or_404(db: Session, course: Course, assignment_id: int) -> Assignment:
    assignment = db.query(Assignment).filter(
        Assignment.id == assignment_id,
        Assignment.course_id == course.id
    ).first()
    if not assignment:
        raise NotFound("Assignment not found")
    return assignment

def get_user_or_404(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFound("User not found")
    return user

def is_instructor(course: Course, user: User) -> bool:
    return course.instructor_id == user.id

def is_enrolled(course: Course, user_id: int) -> bool:
    return any(student.id == user_id for student in course.students)

def require_instructor(course: Course, user: User) -> None:
    """Only the instructor of record may manage a course."""
    if not is_instructor(course, user):
        raise Unauthorized("Only the course instructor can perform this action")

def require_enrolled_student(course: Course, user: User) -> None:
    if not is_enrolled(course, user.id):
        raise Unauthorized("You are not enrolled in this course")

def require_course_access(course: Course, user: User) -> None:
    if is_instructor(course, user) or is_enrolled(course, user.id) or user.is_superadmin:
        return
    raise Unauthorized("You do not have access to this course")

def rubric_total(rubric: Optional[Iterable[dict]]) -> int:
    """Sum of the ``points`` of every rubric item; other fields are opaque."""
    total = 0
    for item in rubric or []:
        try:
            total += int(item.get("points") or 0)
        except (TypeError, ValueError):
            continue
    return total

def get_publication_or_404(db: Session, publication_id: int) -> Publication:
    publication = db.query(Publication).filter(Publication.id == publication_id).first()
    if not publication:
        raise NotFound("Publication not found")
    return publication
