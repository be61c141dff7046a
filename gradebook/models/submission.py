from sqlalchemy import Column, Integer, String, ForeignKey, Text, JSON, BigInteger, UniqueConstraint
from sqlalchemy.orm import relationship
from gradebook.db.base import Base

SUBMITTED = "submitted"

class Submission(Base):
    """One row per (assignment, student).

    A row may exist without a submission when an instructor grades a
    student manually; ``submitted_at`` is then null.
    """
    __tablename__ = "submissions"
    __table_args__ = (UniqueConstraint("assignment_id", "student_id", name="uq_submission_student"),)

    id = Column(Integer, primary_key=True)
    assignment_id = Column(Integer, ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    status = Column(String, nullable=True)
    files = Column(JSON, nullable=False, default=list)
    total_size = Column(BigInteger, nullable=False, default=0)
    submitted_at = Column(String, nullable=True)  # ISO 8601, UTC
    grade = Column(Integer, nullable=True)
    comment = Column(Text, nullable=True)
    graded_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    graded_at = Column(String, nullable=True)

    assignment = relationship("Assignment", back_populates="submissions")
    student = relationship("User", foreign_keys=[student_id])
    grader = relationship("User", foreign_keys=[graded_by])
