from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..db import get_db
from ..models.user import User
from ..schemas.common import Count, Pagination, pagination
from ..schemas.game import Game, GameCreate
from ..utils.auth import get_current_admin, get_current_user
from ..utils.game import count_games, create_game, delete_game, get_games

router = APIRouter(prefix="/games", tags=["Games"])


@router.get("/", response_model=List[Game], dependencies=[Depends(get_current_admin)])
def list_games(
        user_id: Optional[int] = Query(None),
        publication_id: Optional[int] = Query(None),
        pages: Pagination = Depends(pagination),
        db: Session = Depends(get_db),
):
    return get_games(db, user_id=user_id, publication_id=publication_id, page=pages.page, limit=pages.limit)


@router.get("/count", response_model=Count, dependencies=[Depends(get_current_admin)])
def games_count(
        user_id: Optional[int] = Query(None),
        publication_id: Optional[int] = Query(None),
        db: Session = Depends(get_db),
):
    return {"count": count_games(db, user_id=user_id, publication_id=publication_id)}


@router.get("/me", response_model=List[Game])
def list_my_games(
        pages: Pagination = Depends(pagination),
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
):
    return get_games(db, user_id=user.id, page=pages.page, limit=pages.limit)


@router.post("/me", response_model=Game, status_code=201)
def add_my_game(data: GameCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    user_id, publication_id = create_game(db, user.id, data.publication_id)
    return {"user_id": user_id, "publication_id": publication_id}


@router.delete("/me/{publication_id}", status_code=204)
def remove_my_game(publication_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> None:
    delete_game(db, user.id, publication_id)


@router.delete("/{user_id}/{publication_id}", status_code=204, dependencies=[Depends(get_current_admin)])
def remove_game(user_id: int, publication_id: int, db: Session = Depends(get_db)) -> None:
    delete_game(db, user_id, publication_id)
