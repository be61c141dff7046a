from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class RubricItem(BaseModel):
    criteria: str
    description: str = ""
    points: int


class AssignmentCreate(BaseModel):
    title: str
    description: Optional[str] = None
    due_date: datetime
    max_grade: int = Field(100, gt=0)
    rubric: List[RubricItem] = []


class RubricRequest(BaseModel):
    title: str
    description: Optional[str] = None
    max_points: int = Field(100, gt=0)


class SubmitRequest(BaseModel):
    file_urls: List[str]
    total_file_size: int = 0


class GradeUpdateRequest(BaseModel):
    """Grades and comments keyed by student id; only listed students change."""
    grades: Dict[int, int] = {}
    comments: Dict[int, str] = {}
