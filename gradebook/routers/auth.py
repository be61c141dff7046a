import logging
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy import or_
from sqlalchemy.orm import Session
from typing import Annotated

from gradebook.core.config.settings import get_settings
from gradebook.core.security.auth import verify_password, generate_token, create_hashed_password
from gradebook.db.session import get_db
from gradebook.models.user import User, Role, RoleType, UserStatus
from gradebook.schemas.user import RegisterRequest
from gradebook.services.credits import check_and_reset_credits
from gradebook.utils.helpers import get_utc_now, normalize_email

router = APIRouter(tags=["authentication"])
logger = logging.getLogger(__name__)

@router.post("/login")
def login(request: Annotated[OAuth2PasswordRequestForm, Depends()], db: Session = Depends(get_db)):
    try:
        user = db.query(User).filter(or_(
            User.username == request.username,
            User.email == normalize_email(request.username)
        )).first()

        # Verify credentials
        if not user or not verify_password(request.password, user.hashed_password):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid username or password"
            )

        user = check_and_reset_credits(db, user)

        # Generate token
        token = generate_token({"sub": user.username})

        return {
            "access_token": token,
            "token_type": "bearer",
            "role": user.role.role.value
        }
    except HTTPException as he:
        raise he
    except Exception as e:
        logger.error(f"Login error: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error"
        )

@router.post("/register")
def register(request: RegisterRequest, db: Session = Depends(get_db)):
    if request.password != request.confirm_password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Passwords don't match"
        )
    if request.role == RoleType.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator accounts cannot be self-registered"
        )

    email = normalize_email(request.email)
    role = db.query(Role).filter(Role.role == request.role).first()
    if not role:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Role {request.role.value} does not exist"
        )

    # An instructor may already have invited this address
    existing = db.query(User).filter(User.email == email).first()
    if existing and existing.status != UserStatus.INVITED.value:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Email {email} is already registered"
        )

    # Generate username from email
    username = email.split('@')[0]
    taken = db.query(User).filter(User.username == username).first()
    if taken and (existing is None or taken.id != existing.id):
        if existing is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Username {username} already exists"
            )
        username = existing.username

    try:
        if existing:
            user = existing
            user.name = request.name
            user.username = username
            user.role_id = role.id
            user.status = UserStatus.ACTIVE.value
            user.hashed_password = create_hashed_password(request.password)
        else:
            user = User(
                name=request.name,
                email=email,
                username=username,
                hashed_password=create_hashed_password(request.password),
                role_id=role.id,
                status=UserStatus.ACTIVE.value,
                storage_used=0,
                ai_credits=get_settings().AI_FREE_MONTHLY_CREDITS,
                last_credit_reset=get_utc_now()
            )
            db.add(user)
        db.commit()
        db.refresh(user)
    except Exception as e:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )

    logger.info(f"Registered user {user.id} as {request.role.value}")
    return {
        "message": f"User registered successfully as {request.role.value}",
        "username": user.username
    }
