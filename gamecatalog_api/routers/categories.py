from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..db import get_db
from ..schemas.category import Category, CategoryCreate, CategoryLink, CategoryUpdate
from ..schemas.common import Count, Pagination, pagination
from ..schemas.video_game import VideoGame
from ..utils.auth import get_current_admin
from ..utils.errors import NotFound
from ..utils.category import (
    count_categories,
    create_category,
    delete_category,
    get_categories,
    get_category,
    get_category_video_games,
    link_video_game,
    unlink_video_game,
    update_category,
)

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get("/", response_model=List[Category])
def list_categories(
        id: Optional[int] = Query(None),
        name: Optional[str] = Query(None),
        pages: Pagination = Depends(pagination),
        db: Session = Depends(get_db),
):
    return get_categories(db, category_id=id, name=name, page=pages.page, limit=pages.limit)


@router.get("/count", response_model=Count)
def categories_count(name: Optional[str] = Query(None), db: Session = Depends(get_db)):
    return {"count": count_categories(db, name=name)}


@router.get("/{category_id}", response_model=Category)
def get_category_by_id(category_id: int, db: Session = Depends(get_db)):
    category = get_category(db, category_id)
    if not category:
        raise NotFound("Category not found")
    return category


@router.get("/{category_id}/video_games", response_model=List[VideoGame])
def list_category_video_games(category_id: int, db: Session = Depends(get_db)):
    return get_category_video_games(db, category_id)


@router.post("/", response_model=Category, status_code=201, dependencies=[Depends(get_current_admin)])
def create_category_endpoint(data: CategoryCreate, db: Session = Depends(get_db)):
    return get_category(db, create_category(db, data.name.strip()))


@router.patch("/{category_id}", response_model=Category, dependencies=[Depends(get_current_admin)])
def update_category_endpoint(category_id: int, data: CategoryUpdate, db: Session = Depends(get_db)):
    update_category(db, category_id, data.model_dump(exclude_unset=True))
    return get_category(db, category_id)


@router.delete("/{category_id}", status_code=204, dependencies=[Depends(get_current_admin)])
def delete_category_endpoint(category_id: int, db: Session = Depends(get_db)) -> None:
    delete_category(db, category_id)


@router.post("/{category_id}/video_games", status_code=204, dependencies=[Depends(get_current_admin)])
def link_video_game_endpoint(category_id: int, data: CategoryLink, db: Session = Depends(get_db)) -> None:
    link_video_game(db, category_id, data.video_game_id)


@router.delete(
    "/{category_id}/video_games/{video_game_id}",
    status_code=204,
    dependencies=[Depends(get_current_admin)],
)
def unlink_video_game_endpoint(category_id: int, video_game_id: int, db: Session = Depends(get_db)) -> None:
    unlink_video_game(db, category_id, video_game_id)
