from sqlalchemy import Column, Integer, String, ForeignKey, Text, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from gradebook.db.base import Base

class Assignment(Base):
    __tablename__ = "assignments"
    id = Column(Integer, primary_key=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    due_date = Column(String, nullable=False)  # ISO 8601, UTC
    max_grade = Column(Integer, nullable=False, default=100)
    # List of {"criteria", "description", "points"}; stored as given
    rubric = Column(JSON, nullable=False, default=list)
    created_at = Column(String, default=lambda: datetime.now(timezone.utc).isoformat())

    course = relationship("Course", back_populates="assignments")
    submissions = relationship("Submission", back_populates="assignment", cascade="all, delete-orphan")
    views = relationship("AssignmentView", back_populates="assignment", cascade="all, delete-orphan")

class AssignmentView(Base):
    __tablename__ = "assignment_views"
    __table_args__ = (UniqueConstraint("assignment_id", "student_id", name="uq_assignment_view"),)

    id = Column(Integer, primary_key=True)
    assignment_id = Column(Integer, ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    viewed_at = Column(String, default=lambda: datetime.now(timezone.utc).isoformat())

    assignment = relationship("Assignment", back_populates="views")
