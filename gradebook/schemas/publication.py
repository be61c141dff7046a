from pydantic import BaseModel, Field
from typing import Literal, Optional

class PublicationCreate(BaseModel):
    title: str
    abstract: Optional[str] = None
    type: Literal["Thesis", "Paper", "Journal", "Article"] = "Paper"
    file_url: Optional[str] = None
    file_size: int = Field(0, ge=0)
