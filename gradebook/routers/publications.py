from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from gradebook.core.security.auth import get_current_user
from gradebook.db.session import get_db
from gradebook.models.publication import Publication
from gradebook.schemas.publication import PublicationCreate
from gradebook.services import storage as storage_service
from gradebook.services.lookups import get_publication_or_404

router = APIRouter(prefix="/publications", tags=["publications"])

def format_publication(publication: Publication):
    return {
        "id": publication.id,
        "title": publication.title,
        "abstract": publication.abstract,
        "author_id": publication.author_id,
        "author": publication.author.name if publication.author else None,
        "type": publication.type,
        "file_url": publication.file_url,
        "created_at": publication.created_at,
    }

# Reading publications needs no account
@router.get("/")
async def list_publications(author_id: Optional[int] = None, db: Session = Depends(get_db)):
    return [format_publication(p) for p in storage_service.list_publications(db, author_id)]

@router.get("/{publication_id}")
async def get_publication(publication_id: int, db: Session = Depends(get_db)):
    return format_publication(get_publication_or_404(db, publication_id))

@router.post("/", status_code=status.HTTP_201_CREATED)
async def upload_publication(
    request: PublicationCreate,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        publication = storage_service.upload_publication(
            db, current_user["user"],
            title=request.title,
            abstract=request.abstract,
            type=request.type,
            file_url=request.file_url,
            file_size=request.file_size
        )
        return format_publication(publication)
    except HTTPException as he:
        raise he
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

@router.delete("/{publication_id}")
async def delete_publication(
    publication_id: int,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        storage_service.delete_publication(db, current_user["user"], publication_id)
        return {"message": "Publication deleted successfully"}
    except HTTPException as he:
        raise he
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
