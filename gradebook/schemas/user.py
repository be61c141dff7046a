from pydantic import BaseModel, EmailStr
from gradebook.models.user import RoleType

class RegisterRequest(BaseModel):
    name: str
    email: EmailStr
    password: str
    confirm_password: str
    role: RoleType = RoleType.STUDENT

class StorageSummary(BaseModel):
    user_id: int
    storage_used: int
    storage_limit: int
    percentage: float
    over_limit: bool
