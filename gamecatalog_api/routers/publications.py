from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..db import get_db
from ..schemas.common import Count, Pagination, pagination
from ..schemas.publication import Publication, PublicationCreate, PublicationUpdate
from ..utils.auth import get_current_admin, get_current_user
from ..utils.errors import NotFound
from ..utils.publication import (
    count_publications,
    create_publication,
    delete_publication,
    get_publication,
    get_publications,
    update_publication,
)

router = APIRouter(prefix="/publications", tags=["Publications"], dependencies=[Depends(get_current_user)])


@router.get("/", response_model=List[Publication])
def list_publications(
        id: Optional[int] = Query(None),
        video_game_id: Optional[int] = Query(None),
        platform_code: Optional[str] = Query(None),
        pages: Pagination = Depends(pagination),
        db: Session = Depends(get_db),
):
    return get_publications(
        db,
        publication_id=id,
        video_game_id=video_game_id,
        platform_code=platform_code,
        page=pages.page,
        limit=pages.limit,
    )


@router.get("/count", response_model=Count)
def publications_count(
        video_game_id: Optional[int] = Query(None),
        platform_code: Optional[str] = Query(None),
        db: Session = Depends(get_db),
):
    return {"count": count_publications(db, video_game_id=video_game_id, platform_code=platform_code)}


@router.get("/{publication_id}", response_model=Publication)
def get_publication_by_id(publication_id: int, db: Session = Depends(get_db)):
    publication = get_publication(db, publication_id)
    if not publication:
        raise NotFound("Publication not found")
    return publication


@router.post("/", response_model=Publication, status_code=201, dependencies=[Depends(get_current_admin)])
def create_publication_endpoint(data: PublicationCreate, db: Session = Depends(get_db)):
    publication_id = create_publication(db, **data.model_dump())
    return get_publication(db, publication_id)


@router.patch("/{publication_id}", response_model=Publication, dependencies=[Depends(get_current_admin)])
def update_publication_endpoint(publication_id: int, data: PublicationUpdate, db: Session = Depends(get_db)):
    update_publication(db, publication_id, data.model_dump(exclude_unset=True))
    return get_publication(db, publication_id)


@router.delete("/{publication_id}", status_code=204, dependencies=[Depends(get_current_admin)])
def delete_publication_endpoint(publication_id: int, db: Session = Depends(get_db)) -> None:
    delete_publication(db, publication_id)
