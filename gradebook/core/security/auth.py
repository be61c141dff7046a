from datetime import timedelta
from typing import Optional
import jwt
from passlib.context import CryptContext
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from gradebook.core.config.settings import get_settings
from gradebook.core.exceptions import Unauthenticated, Unauthorized
from gradebook.db.session import get_db
from gradebook.models.user import User, RoleType
from gradebook.utils.helpers import get_utc_now

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{get_settings().API_V1_PREFIX}/login")


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)

def create_hashed_password(password: str) -> str:
    return pwd_context.hash(password)

def generate_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    settings = get_settings()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode = data.copy()
    to_encode.update({"exp": get_utc_now() + expires_delta})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def decode_token(token: str) -> str:
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise Unauthenticated("Token has expired")
    except jwt.PyJWTError:
        raise Unauthenticated()
    username = payload.get("sub")
    if username is None:
        raise Unauthenticated("Invalid token payload")
    return username

def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)):
    username = decode_token(token)
    user = db.query(User).filter(User.username == username).first()
    if user is None:
        raise Unauthenticated()
    return {"user": user, "role": user.role.role}

def teacher_required(current_user: dict = Depends(get_current_user)):
    if current_user["role"] not in (RoleType.TEACHER, RoleType.ADMIN):
        raise Unauthorized("Not authorized, teacher access required")
    return current_user

def superadmin_required(current_user: dict = Depends(get_current_user)):
    if not current_user["user"].is_superadmin:
        raise Unauthorized("Not authorized, administrator access required")
    return current_user
