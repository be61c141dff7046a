from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from gradebook.core.security.auth import get_current_user, teacher_required
from gradebook.db.session import get_db
from gradebook.models.course import Course
from gradebook.schemas.course import CourseCreate, CourseUpdate, InviteStudentsRequest, MaterialCreate, RecordingCreate
from gradebook.services import courses as course_service
from gradebook.services import storage as storage_service
from gradebook.services.grading import gradebook
from gradebook.services.lookups import get_course_or_404, require_course_access

router = APIRouter(prefix="/courses", tags=["courses"])

def format_course(course: Course):
    return {
        "id": course.id,
        "title": course.title,
        "description": course.description,
        "instructor_id": course.instructor_id,
        "instructor": course.instructor.name if course.instructor else None,
        "created_at": course.created_at,
        "students": [s.id for s in course.students],
        "assignment_count": len(course.assignments),
    }

@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_course(
    request: CourseCreate,
    current_user: dict = Depends(teacher_required),
    db: Session = Depends(get_db)
):
    try:
        course = course_service.create_course(db, current_user["user"], request.title, request.description)
        return format_course(course)
    except HTTPException as he:
        raise he
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

@router.get("/")
async def list_courses(
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return [format_course(c) for c in course_service.list_courses(db, current_user["user"])]

@router.get("/{course_id}")
async def get_course(
    course_id: int,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    course = get_course_or_404(db, course_id)
    require_course_access(course, current_user["user"])
    return format_course(course)

@router.patch("/{course_id}")
async def update_course(
    course_id: int,
    request: CourseUpdate,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        course = get_course_or_404(db, course_id)
        course = course_service.update_course(
            db, current_user["user"], course, request.model_dump(exclude_unset=True)
        )
        return format_course(course)
    except HTTPException as he:
        raise he
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

@router.delete("/{course_id}")
async def delete_course(
    course_id: int,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        course = get_course_or_404(db, course_id)
        course_service.delete_course(db, current_user["user"], course)
        return {"message": "Course deleted successfully"}
    except HTTPException as he:
        raise he
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

@router.post("/{course_id}/students")
async def invite_students(
    course_id: int,
    request: InviteStudentsRequest,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        course = get_course_or_404(db, course_id)
        result = course_service.batch_add_students(db, current_user["user"], course, request.lines)
        return {
            "message": f"{len(result['valid_users'])} invitations processed",
            "valid_users": [
                {"id": u.id, "name": u.name, "email": u.email, "status": u.status}
                for u in result["valid_users"]
            ],
            "ignored_emails": result["ignored_emails"],
        }
    except HTTPException as he:
        raise he
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

@router.delete("/{course_id}/students/{student_id}")
async def remove_student(
    course_id: int,
    student_id: int,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        course = get_course_or_404(db, course_id)
        course_service.remove_student(db, current_user["user"], course, student_id)
        return {"message": "Student removed from course"}
    except HTTPException as he:
        raise he
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

@router.post("/{course_id}/materials", status_code=status.HTTP_201_CREATED)
async def add_material(
    course_id: int,
    request: MaterialCreate,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        course = get_course_or_404(db, course_id)
        material = storage_service.add_material(
            db, current_user["user"], course,
            title=request.title, type=request.type, url=request.url, file_size=request.file_size
        )
        return {"id": material.id, "title": material.title, "type": material.type, "url": material.url}
    except HTTPException as he:
        raise he
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

@router.post("/{course_id}/recordings", status_code=status.HTTP_201_CREATED)
async def add_recording(
    course_id: int,
    request: RecordingCreate,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        course = get_course_or_404(db, course_id)
        recording = storage_service.add_recording(
            db, current_user["user"], course,
            title=request.title, url=request.url, file_size=request.file_size
        )
        return {"id": recording.id, "title": recording.title, "url": recording.url}
    except HTTPException as he:
        raise he
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

@router.get("/{course_id}/gradebook")
async def get_gradebook(
    course_id: int,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    course = get_course_or_404(db, course_id)
    return {
        "course_id": course.id,
        "assignments": [
            {"id": a.id, "title": a.title, "max_grade": a.max_grade} for a in course.assignments
        ],
        "students": gradebook(db, current_user["user"], course),
    }
