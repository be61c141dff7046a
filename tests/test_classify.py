from datetime import datetime, timedelta, timezone

from gradebook.services.grading import SubmissionStatus, classify

DUE = datetime(2026, 3, 1, 23, 59, tzinfo=timezone.utc)


def test_no_submission_is_pending():
    assert classify(DUE, None) == SubmissionStatus.PENDING

def test_submission_before_due_date_is_on_time():
    assert classify(DUE, DUE - timedelta(hours=5)) == SubmissionStatus.ON_TIME

def test_submission_exactly_at_due_date_is_on_time():
    assert classify(DUE, DUE) == SubmissionStatus.ON_TIME

def test_submission_after_due_date_is_late():
    assert classify(DUE, DUE + timedelta(seconds=1)) == SubmissionStatus.LATE

def test_grade_wins_over_dates():
    assert classify(DUE, DUE + timedelta(days=2), grade=70) == SubmissionStatus.GRADED
    # manual grade without any submission
    assert classify(DUE, None, grade=0) == SubmissionStatus.GRADED

def test_accepts_iso_strings():
    assert classify("2026-03-01T23:59:00Z", "2026-03-01T23:59:00+00:00") == SubmissionStatus.ON_TIME
    assert classify("2026-03-01T23:59:00+00:00", "2026-03-02T00:00:00+00:00") == SubmissionStatus.LATE

def test_naive_strings_are_treated_as_utc():
    assert classify("2026-03-01T12:00:00", "2026-03-01T13:00:00+01:00") == SubmissionStatus.ON_TIME
