from typing import Any, Mapping, Optional

from sqlalchemy.orm import Session

from ..models.video_game import VideoGame
from .cascade import delete_with_cascade
from .errors import NotFound
from .images import VIDEO_GAME_FOLDER, ImageStore, ImageSync
from .lookup import contains, count_rows, exact, find_one, find_rows
from .partial_update import apply_partial_update, build_assignments, provided_fields
from .transaction import Transaction

UPDATABLE_FIELDS = ("name", "description")


def get_video_games(
        session: Session,
        video_game_id: Optional[int] = None,
        name: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
) -> list[VideoGame]:
    return find_rows(
        session, VideoGame,
        exact(VideoGame.id, video_game_id),
        contains(VideoGame.name, name),
        page=page, limit=limit,
    )


def get_video_game(session: Session, video_game_id: int) -> Optional[VideoGame]:
    return find_one(session, VideoGame, exact(VideoGame.id, video_game_id))


def count_video_games(session: Session, name: Optional[str] = None) -> int:
    return count_rows(session, VideoGame, contains(VideoGame.name, name))


def create_video_game(
        session: Session,
        store: ImageStore,
        name: str,
        description: str,
        picture: bytes,
) -> int:
    """Insert a video game and its picture; neither exists unless both succeed."""
    with Transaction(session, name="video_game") as tx:
        images = ImageSync(store, tx)
        video_game = tx.insert(VideoGame(name=name, description=description))
        images.put(VIDEO_GAME_FOLDER, video_game.id, picture)
    return video_game.id


def update_video_game(
        session: Session,
        store: ImageStore,
        video_game_id: int,
        fields: Mapping[str, Any],
        picture: Optional[bytes] = None,
) -> int:
    """
    Apply the provided fields and, when given, replace the picture.
    A picture alone is a valid update; nothing at all raises NoFieldsToUpdate.
    """
    if provided_fields(fields) or picture is None:
        assignments = build_assignments(UPDATABLE_FIELDS, fields)
    else:
        assignments = {}

    with Transaction(session, name="video_game") as tx:
        images = ImageSync(store, tx)
        if assignments:
            affected = tx.step(
                apply_partial_update, session, VideoGame, VideoGame.id, video_game_id,
                UPDATABLE_FIELDS, assignments,
            )
        else:
            locked = tx.step(find_one, session, VideoGame, exact(VideoGame.id, video_game_id), for_update=True)
            affected = 1 if locked is not None else 0
        if affected == 0:
            raise NotFound("No video game found")
        if picture is not None:
            images.put(VIDEO_GAME_FOLDER, video_game_id, picture)
    return affected


def delete_video_game(session: Session, store: ImageStore, video_game_id: int) -> int:
    """
    Delete a video game with its publications, the games owning those publications
    and its category links. The picture goes once the rows are committed.
    """
    def remove_picture(tx: Transaction) -> None:
        ImageSync(store, tx).delete(VIDEO_GAME_FOLDER, video_game_id)

    affected = delete_with_cascade(session, VideoGame, "id", video_game_id, on_plan=remove_picture)
    return affected[VideoGame.__tablename__]
