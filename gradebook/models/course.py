from sqlalchemy import Column, Integer, String, ForeignKey, Table, Text, BigInteger
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from gradebook.db.base import Base

# Association tables
course_students = Table(
    "course_students", Base.metadata,
    Column("course_id", Integer, ForeignKey("courses.id", ondelete="CASCADE"), primary_key=True),
    Column("student_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
)

class Course(Base):
    __tablename__ = "courses"
    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    instructor_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(String, default=lambda: datetime.now(timezone.utc).isoformat())

    instructor = relationship("User", back_populates="taught_courses")
    students = relationship("User", secondary=course_students, back_populates="enrolled_courses")
    assignments = relationship(
        "Assignment",
        back_populates="course",
        cascade="all, delete-orphan",
        order_by="Assignment.id",
    )
    materials = relationship("Material", back_populates="course", cascade="all, delete-orphan")
    recordings = relationship("Recording", back_populates="course", cascade="all, delete-orphan")

class Material(Base):
    __tablename__ = "materials"
    id = Column(Integer, primary_key=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    title = Column(String, nullable=False)
    type = Column(String, nullable=False, default="pdf")  # video | pdf | link
    url = Column(String, nullable=False)
    size = Column(BigInteger, nullable=False, default=0)
    created_at = Column(String, default=lambda: datetime.now(timezone.utc).isoformat())

    course = relationship("Course", back_populates="materials")

class Recording(Base):
    __tablename__ = "recordings"
    id = Column(Integer, primary_key=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    title = Column(String, nullable=False)
    url = Column(String, nullable=False)
    size = Column(BigInteger, nullable=False, default=0)
    created_at = Column(String, default=lambda: datetime.now(timezone.utc).isoformat())

    course = relationship("Course", back_populates="recordings")
