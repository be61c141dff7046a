"""Assignment submission and grading workflow.

Per (assignment, student) the status is never stored; it is derived
from the submission timestamp, the due date and the grade by
:func:`classify`, and every listing goes through it.
"""
import enum
import logging
from datetime import datetime
from typing import Dict, List, Optional, Any

from sqlalchemy.orm import Session

from gradebook.core.exceptions import DeadlinePassed, ValidationFailed
from gradebook.models.assignment import Assignment, AssignmentView
from gradebook.models.course import Course
from gradebook.models.notification import NotificationType
from gradebook.models.submission import Submission, SUBMITTED
from gradebook.models.user import User
from gradebook.services import notifications
from gradebook.services.lookups import (
    get_assignment_or_404,
    get_course_or_404,
    is_enrolled,
    is_instructor,
    require_enrolled_student,
    require_instructor,
    rubric_total,
)
from gradebook.services.storage import charge_storage
from gradebook.utils.helpers import ensure_utc, format_datetime, get_utc_now, parse_datetime

logger = logging.getLogger(__name__)

PASSING_RATIO = 0.7


class SubmissionStatus(str, enum.Enum):
    PENDING = "pending"
    ON_TIME = "on_time"
    LATE = "late"
    GRADED = "graded"


def classify(due_date, submitted_at, grade: Optional[int] = None) -> SubmissionStatus:
    """Derive the status of one student's work on one assignment.

    ``due_date`` and ``submitted_at`` may be datetimes or ISO strings.
    A submission made exactly at the due date is on time.
    """
    if grade is not None:
        return SubmissionStatus.GRADED
    if isinstance(submitted_at, str):
        submitted_at = parse_datetime(submitted_at)
    if submitted_at is None:
        return SubmissionStatus.PENDING
    if isinstance(due_date, str):
        due_date = parse_datetime(due_date)
    if due_date is None or submitted_at <= due_date:
        return SubmissionStatus.ON_TIME
    return SubmissionStatus.LATE

def submission_status(assignment: Assignment, submission: Optional[Submission]) -> SubmissionStatus:
    if submission is None:
        return SubmissionStatus.PENDING
    return classify(assignment.due_date, submission.submitted_at, submission.grade)

def default_rubric(max_grade: int) -> List[dict]:
    return [{
        "criteria": "General Compliance",
        "description": "The work meets the basic requirements.",
        "points": max_grade,
    }]

def _get_submission(db: Session, assignment_id: int, student_id: int) -> Optional[Submission]:
    return db.query(Submission).filter(
        Submission.assignment_id == assignment_id,
        Submission.student_id == student_id
    ).first()


def create_assignment(db: Session, user: User, course: Course, title: str, description: Optional[str],
                      due_date: datetime, max_grade: int = 100, rubric: Optional[List[dict]] = None) -> Assignment:
    require_instructor(course, user)
    if not title or not title.strip():
        raise ValidationFailed("Title is required")
    if max_grade is None or max_grade <= 0:
        raise ValidationFailed("Maximum grade must be a positive integer")

    assignment = Assignment(
        course_id=course.id,
        title=title.strip(),
        description=description,
        due_date=format_datetime(due_date),
        max_grade=max_grade,
        rubric=list(rubric) if rubric else default_rubric(max_grade)
    )
    db.add(assignment)
    db.commit()
    db.refresh(assignment)
    logger.info(f"Assignment {assignment.id} created in course {course.id}")

    notifications.broadcast_to_course(
        db, course,
        title="New Assignment",
        message=f"A new assignment has been published: {assignment.title}",
        type=NotificationType.DEADLINE
    )
    return assignment

def track_assignment_view(db: Session, user: User, course_id: int, assignment_id: int) -> bool:
    """Record that a student opened the assignment. Returns False if already recorded."""
    course = get_course_or_404(db, course_id)
    assignment = get_assignment_or_404(db, course, assignment_id)
    require_enrolled_student(course, user)

    existing = db.query(AssignmentView).filter(
        AssignmentView.assignment_id == assignment.id,
        AssignmentView.student_id == user.id
    ).first()
    if existing:
        return False
    db.add(AssignmentView(assignment_id=assignment.id, student_id=user.id))
    db.commit()
    return True

def submit_assignment(db: Session, user: User, course_id: int, assignment_id: int,
                      file_urls: List[str], total_file_size: int = 0,
                      now: Optional[datetime] = None) -> Submission:
    """Record the caller's submission, replacing any earlier one.

    The course instructor is charged ``total_file_size`` bytes in the
    same transaction, then notified.
    """
    course = get_course_or_404(db, course_id)
    assignment = get_assignment_or_404(db, course, assignment_id)
    require_enrolled_student(course, user)

    file_urls = [url.strip() for url in file_urls or [] if url and url.strip()]
    if not file_urls:
        raise ValidationFailed("At least one file is required")
    if total_file_size is None or total_file_size < 0:
        raise ValidationFailed("File size cannot be negative")

    now = ensure_utc(now) if now else get_utc_now()
    submission = _get_submission(db, assignment.id, user.id)
    has_submitted = submission is not None and submission.submitted_at is not None
    if not has_submitted and now > parse_datetime(assignment.due_date):
        raise DeadlinePassed("The submission deadline has passed. Contact your instructor.")

    try:
        charge_storage(db, course.instructor_id, total_file_size)
        if submission is None:
            submission = Submission(assignment_id=assignment.id, student_id=user.id)
            db.add(submission)
        submission.status = SUBMITTED
        submission.files = file_urls
        submission.total_size = total_file_size
        submission.submitted_at = format_datetime(now)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(submission)
    logger.info(
        f"Student {user.id} submitted assignment {assignment.id} "
        f"({len(file_urls)} file(s), {total_file_size} bytes charged to user {course.instructor_id})"
    )

    notifications.notify_user(
        db, course.instructor_id,
        title="New submission received",
        message=f"{user.name} submitted their work for: {assignment.title}",
        type=NotificationType.GRADE,
        action_link=str(course.id)
    )
    return submission

def update_assignment_grades(db: Session, user: User, course_id: int, assignment_id: int,
                             grades: Dict[int, int], comments: Optional[Dict[int, str]] = None) -> List[Submission]:
    """Upsert grades and comments per student.

    Students missing from ``grades`` keep whatever grade they had.
    Every student present in ``grades`` is notified.
    """
    course = get_course_or_404(db, course_id)
    assignment = get_assignment_or_404(db, course, assignment_id)
    require_instructor(course, user)

    grades = dict(grades or {})
    comments = dict(comments or {})
    if not grades and not comments:
        raise ValidationFailed("No grades or comments provided")

    for student_id in set(grades) | set(comments):
        if not is_enrolled(course, student_id):
            raise ValidationFailed(f"Student {student_id} is not enrolled in this course")
    for student_id, grade in grades.items():
        if grade is None or grade < 0 or grade > assignment.max_grade:
            raise ValidationFailed(
                f"Invalid grade {grade} for student {student_id}. "
                f"Grade must be between 0 and {assignment.max_grade}"
            )

    now = format_datetime(get_utc_now())
    updated = []
    try:
        for student_id in sorted(set(grades) | set(comments)):
            submission = _get_submission(db, assignment.id, student_id)
            if submission is None:
                submission = Submission(assignment_id=assignment.id, student_id=student_id, files=[])
                db.add(submission)
            if student_id in grades:
                submission.grade = grades[student_id]
                submission.graded_by = user.id
                submission.graded_at = now
            if student_id in comments:
                submission.comment = comments[student_id]
            updated.append(submission)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info(f"Saved {len(grades)} grade(s) and {len(comments)} comment(s) for assignment {assignment.id}")

    notifications.notify_users(
        db, sorted(grades),
        title="Assignment Graded",
        message=f'Your work for "{course.title}" has been reviewed by the instructor.',
        type=NotificationType.GRADE,
        action_link=str(course.id)
    )
    return updated


def serialize_submission(assignment: Assignment, student: User, submission: Optional[Submission],
                         viewed: bool = False) -> Dict[str, Any]:
    return {
        "student_id": student.id,
        "student_name": student.name,
        "status": submission_status(assignment, submission).value,
        "submission": submission.status if submission and submission.status else "pending",
        "files": list(submission.files or []) if submission else [],
        "submitted_at": submission.submitted_at if submission else None,
        "grade": submission.grade if submission else None,
        "comment": submission.comment if submission else None,
        "viewed": viewed,
    }

def list_submissions(db: Session, user: User, course: Course, assignment: Assignment) -> List[Dict[str, Any]]:
    """The instructor sees the whole roster; a student sees only their own row."""
    if is_instructor(course, user):
        students = list(course.students)
    else:
        require_enrolled_student(course, user)
        students = [user]

    by_student = {s.student_id: s for s in assignment.submissions}
    viewed = {v.student_id for v in assignment.views}
    return [
        serialize_submission(assignment, student, by_student.get(student.id), student.id in viewed)
        for student in students
    ]

def assignment_overview(course: Course, assignment: Assignment, user: User) -> Dict[str, Any]:
    total = rubric_total(assignment.rubric)
    data = {
        "id": assignment.id,
        "course_id": assignment.course_id,
        "title": assignment.title,
        "description": assignment.description,
        "due_date": assignment.due_date,
        "max_grade": assignment.max_grade,
        "rubric": assignment.rubric or [],
        "rubric_total": total,
        "rubric_complete": total == 100,
    }
    if is_instructor(course, user):
        submitted = [s for s in assignment.submissions if s.submitted_at]
        data["submitted_count"] = len(submitted)
        data["graded_count"] = len([s for s in assignment.submissions if s.grade is not None])
        data["viewed_count"] = len(assignment.views)
    else:
        mine = next((s for s in assignment.submissions if s.student_id == user.id), None)
        data["my_submission"] = serialize_submission(
            assignment, user, mine, any(v.student_id == user.id for v in assignment.views)
        )
    return data

def gradebook(db: Session, user: User, course: Course) -> List[Dict[str, Any]]:
    """Per-student totals across every assignment of the course."""
    require_instructor(course, user)
    rows = []
    for student in course.students:
        obtained = 0
        possible = 0
        cells = []
        for assignment in course.assignments:
            submission = next((s for s in assignment.submissions if s.student_id == student.id), None)
            status = submission_status(assignment, submission)
            grade = submission.grade if submission else None
            if grade is not None:
                obtained += grade
            possible += assignment.max_grade
            cells.append({"assignment_id": assignment.id, "status": status.value, "grade": grade})
        percentage = round(obtained / possible * 100) if possible else 0
        rows.append({
            "student_id": student.id,
            "student_name": student.name,
            "email": student.email,
            "assignments": cells,
            "points_obtained": obtained,
            "points_possible": possible,
            "percentage": percentage,
            "passed": bool(possible) and obtained / possible >= PASSING_RATIO,
        })
    return rows
