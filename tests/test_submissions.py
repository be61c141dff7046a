from datetime import timedelta

from gradebook.core.config.settings import get_settings
from gradebook.models.assignment import Assignment
from gradebook.models.notification import Notification
from gradebook.models.submission import Submission
from gradebook.models.user import User
from gradebook.services.grading import SubmissionStatus, submission_status, submit_assignment
from gradebook.utils.helpers import format_datetime, get_utc_now, parse_datetime

from conftest import API


def submit_url(course, assignment):
    return f"{API}/courses/{course.id}/assignments/{assignment.id}/submit"

def get_submission(db, assignment, student):
    db.expire_all()
    return db.query(Submission).filter(
        Submission.assignment_id == assignment.id,
        Submission.student_id == student.id
    ).first()


def test_submit_records_files_and_charges_instructor(client, db, auth, course, assignment, instructor, student1):
    response = client.post(
        submit_url(course, assignment),
        json={"file_urls": ["https://files.example.edu/a.pdf"], "total_file_size": 500},
        headers=auth(student1),
    )
    assert response.status_code == 200
    assert response.json()["status"] == "on_time"

    submission = get_submission(db, assignment, student1)
    assert submission.status == "submitted"
    assert submission.files == ["https://files.example.edu/a.pdf"]
    assert submission.submitted_at is not None

    assert db.get(User, instructor.id).storage_used == 500
    assert db.get(User, student1.id).storage_used == 0

    notes = db.query(Notification).filter(Notification.user_id == instructor.id).all()
    assert len(notes) == 1
    assert notes[0].type == "grade"
    assert "Essay" in notes[0].message

def test_resubmission_replaces_previous_files(client, db, auth, course, assignment, instructor, student1):
    for urls in (["https://f/1.pdf", "https://f/2.pdf"], ["https://f/3.pdf"]):
        response = client.post(
            submit_url(course, assignment),
            json={"file_urls": urls, "total_file_size": 100},
            headers=auth(student1),
        )
        assert response.status_code == 200

    rows = db.query(Submission).filter(Submission.assignment_id == assignment.id).all()
    assert len(rows) == 1
    assert get_submission(db, assignment, student1).files == ["https://f/3.pdf"]
    # each upload is billed, nothing is given back for the replaced files
    assert db.get(User, instructor.id).storage_used == 200

def test_empty_file_list_is_rejected_without_side_effects(client, db, auth, course, assignment, instructor, student1):
    response = client.post(
        submit_url(course, assignment),
        json={"file_urls": ["  "], "total_file_size": 300},
        headers=auth(student1),
    )
    assert response.status_code == 400
    assert get_submission(db, assignment, student1) is None
    assert db.get(User, instructor.id).storage_used == 0
    assert db.query(Notification).count() == 0

def test_negative_size_is_rejected(client, auth, course, assignment, student1):
    response = client.post(
        submit_url(course, assignment),
        json={"file_urls": ["https://f/1.pdf"], "total_file_size": -1},
        headers=auth(student1),
    )
    assert response.status_code == 400

def test_only_enrolled_students_can_submit(client, db, auth, make_user, course, assignment, instructor):
    outsider = make_user("Out Sider")
    for user in (outsider, instructor):
        response = client.post(
            submit_url(course, assignment),
            json={"file_urls": ["https://f/1.pdf"], "total_file_size": 10},
            headers=auth(user),
        )
        assert response.status_code == 403
    db.expire_all()
    assert db.query(Submission).count() == 0

def test_submit_requires_authentication(client, course, assignment):
    response = client.post(submit_url(course, assignment), json={"file_urls": ["https://f/1.pdf"]})
    assert response.status_code == 401

def test_unknown_assignment_is_not_found(client, auth, course, student1):
    response = client.post(
        f"{API}/courses/{course.id}/assignments/9999/submit",
        json={"file_urls": ["https://f/1.pdf"]},
        headers=auth(student1),
    )
    assert response.status_code == 404

def test_first_submission_after_deadline_is_refused(client, db, auth, course, instructor, student1):
    closed = Assignment(
        course_id=course.id,
        title="Closed",
        due_date=format_datetime(get_utc_now() - timedelta(hours=1)),
        max_grade=10,
        rubric=[],
    )
    db.add(closed)
    db.commit()

    response = client.post(
        submit_url(course, closed),
        json={"file_urls": ["https://f/late.pdf"], "total_file_size": 50},
        headers=auth(student1),
    )
    assert response.status_code == 409
    assert get_submission(db, closed, student1) is None
    assert db.get(User, instructor.id).storage_used == 0

def test_resubmission_after_deadline_is_accepted_as_late(client, db, auth, course, student1):
    closing = Assignment(
        course_id=course.id,
        title="Closing",
        due_date=format_datetime(get_utc_now() - timedelta(minutes=5)),
        max_grade=10,
        rubric=[],
    )
    db.add(closing)
    db.flush()
    db.add(Submission(
        assignment_id=closing.id,
        student_id=student1.id,
        status="submitted",
        files=["https://f/first.pdf"],
        submitted_at=format_datetime(get_utc_now() - timedelta(hours=1)),
    ))
    db.commit()

    response = client.post(
        submit_url(course, closing),
        json={"file_urls": ["https://f/second.pdf"]},
        headers=auth(student1),
    )
    assert response.status_code == 200
    assert response.json()["status"] == "late"
    submission = get_submission(db, closing, student1)
    assert submission.status == "submitted"
    assert submission.files == ["https://f/second.pdf"]

def test_view_tracking_is_write_once(client, auth, course, assignment, student1, instructor):
    url = f"{API}/courses/{course.id}/assignments/{assignment.id}/view"
    assert client.post(url, headers=auth(student1)).json() == {"recorded": True}
    assert client.post(url, headers=auth(student1)).json() == {"recorded": False}
    assert client.post(url, headers=auth(instructor)).status_code == 403

    listing = client.get(f"{API}/courses/{course.id}/assignments/", headers=auth(instructor)).json()
    assert listing[0]["viewed_count"] == 1

def test_student_listing_only_shows_own_row(client, auth, course, assignment, student1, student2):
    client.post(
        submit_url(course, assignment),
        json={"file_urls": ["https://f/1.pdf"], "total_file_size": 1},
        headers=auth(student1),
    )
    url = f"{API}/courses/{course.id}/assignments/{assignment.id}/submissions"

    mine = client.get(url, headers=auth(student2)).json()
    assert [row["student_id"] for row in mine] == [student2.id]
    assert mine[0]["status"] == "pending"
    assert mine[0]["files"] == []

    overview = client.get(f"{API}/courses/{course.id}/assignments/", headers=auth(student1)).json()
    assert overview[0]["my_submission"]["status"] == "on_time"
    assert overview[0]["rubric_total"] == 100
    assert overview[0]["rubric_complete"] is True

def test_over_quota_submit_writes_nothing(client, db, auth, monkeypatch, course, assignment, instructor, student1):
    settings = get_settings()
    monkeypatch.setattr(settings, "ENFORCE_STORAGE_QUOTA", True)
    monkeypatch.setattr(settings, "STORAGE_LIMIT_FREE", 1000)

    response = client.post(
        submit_url(course, assignment),
        json={"file_urls": ["https://f/huge.zip"], "total_file_size": 1001},
        headers=auth(student1),
    )
    assert response.status_code == 413
    assert get_submission(db, assignment, student1) is None
    assert db.get(User, instructor.id).storage_used == 0
    assert db.query(Notification).count() == 0

def test_submission_at_the_exact_due_date_is_accepted(db, course, assignment, student1):
    due = parse_datetime(assignment.due_date)
    submission = submit_assignment(
        db, student1, course.id, assignment.id, ["https://f/on-the-dot.pdf"], 10, now=due
    )
    assert parse_datetime(submission.submitted_at) == due
    assert submission_status(assignment, submission) == SubmissionStatus.ON_TIME
