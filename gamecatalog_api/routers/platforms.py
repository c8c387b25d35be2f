from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from pydantic import ValidationError
from sqlalchemy.orm import Session

from ..db import get_db
from ..schemas.common import Count, Pagination, pagination
from ..schemas.platform import CODE_PATTERN, Platform, PlatformCreate
from ..schemas.video_game import PlatformWithVideoGamesCreate
from ..utils.auth import get_current_admin
from ..utils.errors import NotFound
from ..utils.images import ImageStore, get_image_store
from ..utils.platform import (
    count_platforms,
    create_platform,
    create_platform_with_video_games,
    delete_platform,
    get_platform,
    get_platforms,
    update_platform,
)

router = APIRouter(prefix="/platforms", tags=["Platforms"])


@router.get("/", response_model=List[Platform])
def list_platforms(
        code: Optional[str] = Query(None, description="Exact platform code"),
        pages: Pagination = Depends(pagination),
        db: Session = Depends(get_db),
):
    return get_platforms(db, code=code, page=pages.page, limit=pages.limit)


@router.get("/count", response_model=Count)
def platforms_count(db: Session = Depends(get_db)):
    return {"count": count_platforms(db)}


@router.get("/{code}", response_model=Platform)
def get_platform_by_code(code: str, db: Session = Depends(get_db)):
    platform = get_platform(db, code)
    if not platform:
        raise NotFound("Platform not found")
    return platform


@router.post("/", response_model=Platform, status_code=201, dependencies=[Depends(get_current_admin)])
def create_platform_endpoint(
        code: str = Form(...),
        description: str = Form(...),
        abbreviation: str = Form(...),
        picture: UploadFile = File(...),
        db: Session = Depends(get_db),
        store: ImageStore = Depends(get_image_store),
):
    data = _validated(PlatformCreate, {"code": code, "description": description, "abbreviation": abbreviation})
    new_code = create_platform(db, store, data.code, data.description, data.abbreviation, picture.file.read())
    return get_platform(db, new_code)


@router.post("/with_video_games", response_model=Platform, status_code=201, dependencies=[Depends(get_current_admin)])
def create_platform_with_video_games_endpoint(
        data: str = Form(..., description="JSON: {platform: {...}, video_games: [{...}]}"),
        platform_picture: UploadFile = File(...),
        video_game_pictures: List[UploadFile] = File(...),
        db: Session = Depends(get_db),
        store: ImageStore = Depends(get_image_store),
):
    """
    Create a platform and its new video games in one go.
    `video_game_pictures` must hold one image per video game, in the same order.
    """
    try:
        payload = PlatformWithVideoGamesCreate.model_validate_json(data)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))

    if len(video_game_pictures) != len(payload.video_games):
        raise HTTPException(
            status_code=400,
            detail=f"Expected {len(payload.video_games)} video game picture(s), got {len(video_game_pictures)}",
        )

    video_games = [
        {**entry.model_dump(), "picture": upload.file.read()}
        for entry, upload in zip(payload.video_games, video_game_pictures)
    ]
    new_code = create_platform_with_video_games(
        db, store, payload.platform.model_dump(), platform_picture.file.read(), video_games,
    )
    return get_platform(db, new_code)


@router.patch("/{platform_code}", response_model=Platform, dependencies=[Depends(get_current_admin)])
def update_platform_endpoint(
        platform_code: str,
        code: Optional[str] = Form(None, pattern=CODE_PATTERN),
        description: Optional[str] = Form(None),
        abbreviation: Optional[str] = Form(None),
        picture: Optional[UploadFile] = File(None),
        db: Session = Depends(get_db),
        store: ImageStore = Depends(get_image_store),
):
    fields = {
        name: value
        for name, value in (("code", code), ("description", description), ("abbreviation", abbreviation))
        if value is not None
    }
    data = picture.file.read() if picture is not None else None
    update_platform(db, store, platform_code, fields, data)
    return get_platform(db, fields.get("code", platform_code))


@router.delete("/{code}", status_code=204, dependencies=[Depends(get_current_admin)])
def delete_platform_endpoint(
        code: str,
        db: Session = Depends(get_db),
        store: ImageStore = Depends(get_image_store),
) -> None:
    delete_platform(db, store, code)


def _validated(schema, values: dict):
    try:
        return schema.model_validate(values)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))
