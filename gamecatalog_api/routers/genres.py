from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..db import get_db
from ..schemas.common import Count, Pagination, pagination
from ..schemas.genre import Genre, GenreCreate, GenreUpdate
from ..utils.auth import get_current_admin
from ..utils.errors import NotFound
from ..utils.genre import count_genres, create_genre, delete_genre, get_genre, get_genres, update_genre

router = APIRouter(prefix="/genres", tags=["Genres"])


@router.get("/", response_model=List[Genre])
def list_genres(
        id: Optional[int] = Query(None),
        alphabetical: bool = Query(False, description="Order by name instead of id"),
        pages: Pagination = Depends(pagination),
        db: Session = Depends(get_db),
):
    return get_genres(db, genre_id=id, alphabetical=alphabetical, page=pages.page, limit=pages.limit)


@router.get("/count", response_model=Count)
def genres_count(db: Session = Depends(get_db)):
    return {"count": count_genres(db)}


@router.get("/{genre_id}", response_model=Genre)
def get_genre_by_id(genre_id: int, db: Session = Depends(get_db)):
    genre = get_genre(db, genre_id)
    if not genre:
        raise NotFound("Genre not found")
    return genre


@router.post("/", response_model=Genre, status_code=201, dependencies=[Depends(get_current_admin)])
def create_genre_endpoint(data: GenreCreate, db: Session = Depends(get_db)):
    return get_genre(db, create_genre(db, data.name.strip(), data.description))


@router.patch("/{genre_id}", response_model=Genre, dependencies=[Depends(get_current_admin)])
def update_genre_endpoint(genre_id: int, data: GenreUpdate, db: Session = Depends(get_db)):
    update_genre(db, genre_id, data.model_dump(exclude_unset=True))
    return get_genre(db, genre_id)


@router.delete("/{genre_id}", status_code=204, dependencies=[Depends(get_current_admin)])
def delete_genre_endpoint(genre_id: int, db: Session = Depends(get_db)) -> None:
    delete_genre(db, genre_id)
