from sqlalchemy import Column, Integer, String, ForeignKey, Text, Boolean
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
import enum
from gradebook.db.base import Base

class NotificationType(str, enum.Enum):
    INVITE = "invite"
    GRADE = "grade"
    SYSTEM = "system"
    DEADLINE = "deadline"

class Notification(Base):
    __tablename__ = "notifications"
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String, nullable=False, default=NotificationType.SYSTEM.value)
    action_link = Column(String, nullable=True)
    created_at = Column(String, default=lambda: datetime.now(timezone.utc).isoformat())
    read = Column(Boolean, nullable=False, default=False)

    user = relationship("User", back_populates="notifications")
