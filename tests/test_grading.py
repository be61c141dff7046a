from gradebook.models.notification import Notification
from gradebook.models.submission import Submission
from gradebook.models.user import RoleType

from conftest import API


def grades_url(course, assignment):
    return f"{API}/courses/{course.id}/assignments/{assignment.id}/grades"

def rows_by_student(db, assignment):
    db.expire_all()
    rows = db.query(Submission).filter(Submission.assignment_id == assignment.id).all()
    return {row.student_id: row for row in rows}

def notifications_for(db, user):
    db.expire_all()
    return db.query(Notification).filter(Notification.user_id == user.id).all()


def test_instructor_grades_and_students_are_notified(client, db, auth, course, assignment, instructor, student1, student2):
    response = client.put(
        grades_url(course, assignment),
        json={
            "grades": {str(student1.id): 85, str(student2.id): 60},
            "comments": {str(student1.id): "Good work"},
        },
        headers=auth(instructor),
    )
    assert response.status_code == 200

    rows = rows_by_student(db, assignment)
    assert rows[student1.id].grade == 85
    assert rows[student1.id].comment == "Good work"
    assert rows[student1.id].graded_by == instructor.id
    assert rows[student2.id].grade == 60
    assert rows[student2.id].comment is None

    for student in (student1, student2):
        notes = notifications_for(db, student)
        assert len(notes) == 1
        assert notes[0].title == "Assignment Graded"
        assert notes[0].type == "grade"
        assert notes[0].action_link == str(course.id)

def test_omitted_students_keep_their_grades(client, db, auth, course, assignment, instructor, student1, student2):
    client.put(
        grades_url(course, assignment),
        json={"grades": {str(student1.id): 70, str(student2.id): 90}},
        headers=auth(instructor),
    )
    response = client.put(
        grades_url(course, assignment),
        json={"grades": {str(student1.id): 75}},
        headers=auth(instructor),
    )
    assert response.status_code == 200

    rows = rows_by_student(db, assignment)
    assert rows[student1.id].grade == 75
    assert rows[student2.id].grade == 90
    # the second save only notified the student it listed
    assert len(notifications_for(db, student1)) == 2
    assert len(notifications_for(db, student2)) == 1

def test_grades_outside_range_are_rejected(client, db, auth, course, assignment, instructor, student1):
    for grade in (-1, 101):
        response = client.put(
            grades_url(course, assignment),
            json={"grades": {str(student1.id): grade}},
            headers=auth(instructor),
        )
        assert response.status_code == 400
    assert rows_by_student(db, assignment) == {}

def test_boundary_grades_are_accepted(client, db, auth, course, assignment, instructor, student1, student2):
    response = client.put(
        grades_url(course, assignment),
        json={"grades": {str(student1.id): 0, str(student2.id): 100}},
        headers=auth(instructor),
    )
    assert response.status_code == 200
    rows = rows_by_student(db, assignment)
    assert rows[student1.id].grade == 0
    assert rows[student2.id].grade == 100

def test_grading_a_student_outside_the_roster_is_rejected(client, db, auth, make_user, course, assignment, instructor, student1):
    outsider = make_user("Out Sider")
    response = client.put(
        grades_url(course, assignment),
        json={"grades": {str(student1.id): 50, str(outsider.id): 50}},
        headers=auth(instructor),
    )
    assert response.status_code == 400
    # nothing from the rejected batch is written
    assert rows_by_student(db, assignment) == {}

def test_only_the_instructor_can_grade(client, db, auth, make_user, course, assignment, student1, student2):
    other_teacher = make_user("Other Teacher", role=RoleType.TEACHER)
    for user in (student1, other_teacher):
        response = client.put(
            grades_url(course, assignment),
            json={"grades": {str(student2.id): 100}},
            headers=auth(user),
        )
        assert response.status_code == 403
    assert rows_by_student(db, assignment) == {}

def test_empty_grade_update_is_rejected(client, auth, course, assignment, instructor):
    response = client.put(grades_url(course, assignment), json={}, headers=auth(instructor))
    assert response.status_code == 400

def test_comment_only_update_sends_no_notification(client, db, auth, course, assignment, instructor, student1):
    response = client.put(
        grades_url(course, assignment),
        json={"comments": {str(student1.id): "Please add sources"}},
        headers=auth(instructor),
    )
    assert response.status_code == 200
    rows = rows_by_student(db, assignment)
    assert rows[student1.id].comment == "Please add sources"
    assert rows[student1.id].grade is None
    assert notifications_for(db, student1) == []

def test_manual_grade_without_submission(client, db, auth, course, assignment, instructor, student2):
    client.put(
        grades_url(course, assignment),
        json={"grades": {str(student2.id): 40}},
        headers=auth(instructor),
    )
    row = rows_by_student(db, assignment)[student2.id]
    assert row.submitted_at is None
    assert row.files == []

    listing = client.get(
        f"{API}/courses/{course.id}/assignments/{assignment.id}/submissions",
        headers=auth(instructor),
    ).json()
    by_student = {item["student_id"]: item for item in listing}
    assert by_student[student2.id]["status"] == "graded"
    assert by_student[student2.id]["submission"] == "pending"

def test_gradebook_totals(client, auth, course, assignment, instructor, student1, student2):
    client.put(
        grades_url(course, assignment),
        json={"grades": {str(student1.id): 80, str(student2.id): 50}},
        headers=auth(instructor),
    )
    response = client.get(f"{API}/courses/{course.id}/gradebook", headers=auth(instructor))
    assert response.status_code == 200
    students = {row["student_id"]: row for row in response.json()["students"]}
    assert students[student1.id]["percentage"] == 80
    assert students[student1.id]["passed"] is True
    assert students[student2.id]["percentage"] == 50
    assert students[student2.id]["passed"] is False
    assert students[student1.id]["assignments"][0]["status"] == "graded"

    assert client.get(f"{API}/courses/{course.id}/gradebook", headers=auth(student1)).status_code == 403
