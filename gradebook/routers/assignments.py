from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from gradebook.core.security.auth import get_current_user
from gradebook.db.session import get_db
from gradebook.schemas.assignment import AssignmentCreate, GradeUpdateRequest, RubricRequest, SubmitRequest
from gradebook.services import grading
from gradebook.services.lookups import (
    get_assignment_or_404,
    get_course_or_404,
    require_course_access,
    require_instructor,
)
from gradebook.services.rubrics import generate_rubric

router = APIRouter(prefix="/courses/{course_id}/assignments", tags=["assignments"])

@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_assignment(
    course_id: int,
    request: AssignmentCreate,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        user = current_user["user"]
        course = get_course_or_404(db, course_id)
        assignment = grading.create_assignment(
            db, user, course,
            title=request.title,
            description=request.description,
            due_date=request.due_date,
            max_grade=request.max_grade,
            rubric=[item.model_dump() for item in request.rubric]
        )
        return grading.assignment_overview(course, assignment, user)
    except HTTPException as he:
        raise he
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

@router.get("/")
async def list_assignments(
    course_id: int,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    user = current_user["user"]
    course = get_course_or_404(db, course_id)
    require_course_access(course, user)
    return [grading.assignment_overview(course, a, user) for a in course.assignments]

@router.post("/rubric")
async def create_rubric(
    course_id: int,
    request: RubricRequest,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        user = current_user["user"]
        course = get_course_or_404(db, course_id)
        require_instructor(course, user)
        return await generate_rubric(db, user, request.title, request.description, request.max_points)
    except HTTPException as he:
        raise he
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

@router.post("/{assignment_id}/view")
async def view_assignment(
    course_id: int,
    assignment_id: int,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        recorded = grading.track_assignment_view(db, current_user["user"], course_id, assignment_id)
        return {"recorded": recorded}
    except HTTPException as he:
        raise he
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

@router.post("/{assignment_id}/submit")
async def submit_assignment(
    course_id: int,
    assignment_id: int,
    request: SubmitRequest,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        user = current_user["user"]
        submission = grading.submit_assignment(
            db, user, course_id, assignment_id,
            file_urls=request.file_urls,
            total_file_size=request.total_file_size
        )
        return {
            "message": "Assignment submitted successfully",
            "submission_id": submission.id,
            "files": submission.files,
            "submitted_at": submission.submitted_at,
            "status": grading.submission_status(submission.assignment, submission).value,
        }
    except HTTPException as he:
        raise he
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

@router.put("/{assignment_id}/grades")
async def update_grades(
    course_id: int,
    assignment_id: int,
    request: GradeUpdateRequest,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        updated = grading.update_assignment_grades(
            db, current_user["user"], course_id, assignment_id,
            grades=request.grades,
            comments=request.comments
        )
        return {
            "message": "Grades and feedback published successfully",
            "updated": [
                {"student_id": s.student_id, "grade": s.grade, "comment": s.comment} for s in updated
            ],
        }
    except HTTPException as he:
        raise he
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

@router.get("/{assignment_id}/submissions")
async def list_submissions(
    course_id: int,
    assignment_id: int,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    course = get_course_or_404(db, course_id)
    assignment = get_assignment_or_404(db, course, assignment_id)
    return grading.list_submissions(db, current_user["user"], course, assignment)
