from sqlalchemy import Column, Integer, String, ForeignKey, Enum, Boolean, BigInteger, DateTime
from sqlalchemy.orm import relationship
import enum
from gradebook.db.base import Base
from gradebook.models.course import course_students

class RoleType(enum.Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"

class UserStatus(str, enum.Enum):
    ACTIVE = "active"
    INVITED = "invited"

class Role(Base):
    __tablename__ = "roles"
    id = Column(Integer, primary_key=True)
    role = Column(Enum(RoleType), nullable=False, unique=True)
    users = relationship("User", back_populates="role")

class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False, unique=True)
    username = Column(String, nullable=False, unique=True)
    role_id = Column(Integer, ForeignKey("roles.id"), nullable=False)
    # Null for invited accounts that have not registered yet
    hashed_password = Column(String, nullable=True)
    status = Column(String, nullable=False, default=UserStatus.ACTIVE.value)

    is_premium = Column(Boolean, nullable=False, default=False)
    is_superadmin = Column(Boolean, nullable=False, default=False)

    # Bytes billed to this account; only ever incremented
    storage_used = Column(BigInteger, nullable=False, default=0)

    ai_credits = Column(Integer, nullable=False, default=0)
    last_credit_reset = Column(DateTime(timezone=True), nullable=True)

    role = relationship("Role", back_populates="users", lazy="joined")
    taught_courses = relationship("Course", back_populates="instructor")
    enrolled_courses = relationship("Course", secondary=course_students, back_populates="students")
    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan")
