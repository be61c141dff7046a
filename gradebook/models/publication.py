from sqlalchemy import Column, Integer, String, ForeignKey, Text, BigInteger
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from gradebook.db.base import Base

class Publication(Base):
    __tablename__ = "publications"
    id = Column(Integer, primary_key=True)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    title = Column(String, nullable=False)
    abstract = Column(Text, nullable=True)
    type = Column(String, nullable=False, default="Paper")  # Thesis | Paper | Journal | Article
    file_url = Column(String, nullable=True)
    size = Column(BigInteger, nullable=False, default=0)
    created_at = Column(String, default=lambda: datetime.now(timezone.utc).isoformat())

    author = relationship("User")
