from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from gradebook.core.exceptions import Unauthorized
from gradebook.core.security.auth import get_current_user, superadmin_required
from gradebook.db.session import get_db
from gradebook.models.user import User
from gradebook.schemas.user import StorageSummary
from gradebook.services.lookups import get_user_or_404
from gradebook.services.storage import storage_summary
from gradebook.utils.helpers import paginate_results

router = APIRouter(prefix="/users", tags=["users"])

def serialize_user(user: User):
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "username": user.username,
        "role": user.role.role.value,
        "status": user.status,
        "is_premium": user.is_premium,
        "ai_credits": user.ai_credits,
    }

@router.get("/me")
async def get_current_user_info(current_user: dict = Depends(get_current_user)):
    user = current_user["user"]
    return {**serialize_user(user), "storage": storage_summary(user)}

@router.get("/")
async def list_users(
    page: int = 1,
    page_size: int = 50,
    current_user: dict = Depends(superadmin_required),
    db: Session = Depends(get_db)
):
    users = db.query(User).order_by(User.id).all()
    return paginate_results([serialize_user(u) for u in users], page, page_size)

@router.get("/{user_id}/storage", response_model=StorageSummary)
async def get_storage(
    user_id: int,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        caller = current_user["user"]
        if caller.id != user_id and not caller.is_superadmin:
            raise Unauthorized("You can only view your own storage usage")
        return storage_summary(get_user_or_404(db, user_id))
    except HTTPException as he:
        raise he
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )
