from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from sqlalchemy.orm import Session

from ..db import get_db
from ..schemas.common import Count, Pagination, pagination
from ..schemas.video_game import VideoGame
from ..utils.auth import get_current_admin
from ..utils.errors import NotFound
from ..utils.images import ImageStore, get_image_store
from ..utils.video_game import (
    count_video_games,
    create_video_game,
    delete_video_game,
    get_video_game,
    get_video_games,
    update_video_game,
)

router = APIRouter(prefix="/video_games", tags=["Video Games"])


@router.get("/", response_model=List[VideoGame])
def list_video_games(
        id: Optional[int] = Query(None),
        name: Optional[str] = Query(None, description="Case-insensitive substring of the name"),
        pages: Pagination = Depends(pagination),
        db: Session = Depends(get_db),
):
    return get_video_games(db, video_game_id=id, name=name, page=pages.page, limit=pages.limit)


@router.get("/count", response_model=Count)
def video_games_count(name: Optional[str] = Query(None), db: Session = Depends(get_db)):
    return {"count": count_video_games(db, name=name)}


@router.get("/{video_game_id}", response_model=VideoGame)
def get_video_game_by_id(video_game_id: int, db: Session = Depends(get_db)):
    video_game = get_video_game(db, video_game_id)
    if not video_game:
        raise NotFound("Video game not found")
    return video_game


@router.post("/", response_model=VideoGame, status_code=201, dependencies=[Depends(get_current_admin)])
def create_video_game_endpoint(
        name: str = Form(..., min_length=1),
        description: str = Form(""),
        picture: UploadFile = File(...),
        db: Session = Depends(get_db),
        store: ImageStore = Depends(get_image_store),
):
    if not name.strip():
        raise HTTPException(status_code=422, detail="Name must not be blank")
    video_game_id = create_video_game(db, store, name.strip(), description, picture.file.read())
    return get_video_game(db, video_game_id)


@router.patch("/{video_game_id}", response_model=VideoGame, dependencies=[Depends(get_current_admin)])
def update_video_game_endpoint(
        video_game_id: int,
        name: Optional[str] = Form(None, min_length=1),
        description: Optional[str] = Form(None),
        picture: Optional[UploadFile] = File(None),
        db: Session = Depends(get_db),
        store: ImageStore = Depends(get_image_store),
):
    if name is not None:
        name = name.strip()
        if not name:
            raise HTTPException(status_code=422, detail="Name must not be blank")
    fields = {
        field: value
        for field, value in (("name", name), ("description", description))
        if value is not None
    }
    data = picture.file.read() if picture is not None else None
    update_video_game(db, store, video_game_id, fields, data)
    return get_video_game(db, video_game_id)


@router.delete("/{video_game_id}", status_code=204, dependencies=[Depends(get_current_admin)])
def delete_video_game_endpoint(
        video_game_id: int,
        db: Session = Depends(get_db),
        store: ImageStore = Depends(get_image_store),
) -> None:
    delete_video_game(db, store, video_game_id)
