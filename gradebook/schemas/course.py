from pydantic import BaseModel, Field
from typing import List, Literal, Optional

class CourseCreate(BaseModel):
    title: str
    description: Optional[str] = None

class CourseUpdate(BaseModel):
    # Only the fields sent are changed
    title: Optional[str] = None
    description: Optional[str] = None

class InviteStudentsRequest(BaseModel):
    # One entry per line; the first comma-separated field is the e-mail
    lines: List[str]

class MaterialCreate(BaseModel):
    title: str
    type: Literal["video", "pdf", "link"] = "pdf"
    url: str
    file_size: int = Field(0, ge=0)

class RecordingCreate(BaseModel):
    title: str
    url: str
    file_size: int = Field(0, ge=0)
