import logging
from typing import Any, Mapping, Optional

from sqlalchemy.orm import Session

from ..models.platform import Platform
from ..models.publication import Publication
from ..models.video_game import VideoGame
from .cascade import delete_with_cascade, insertion_order
from .errors import NotFound
from .images import PLATFORM_FOLDER, VIDEO_GAME_FOLDER, ImageStore, ImageSync
from .lookup import count_rows, exact, find_one, find_rows
from .partial_update import apply_partial_update, build_assignments, provided_fields
from .transaction import Transaction

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("code", "description", "abbreviation")


def normalize_code(code: str) -> str:
    return code.strip().upper()


def get_platforms(
        session: Session,
        code: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
) -> list[Platform]:
    if code is not None:
        code = normalize_code(code)
    return find_rows(session, Platform, exact(Platform.code, code), page=page, limit=limit)


def get_platform(session: Session, code: str) -> Optional[Platform]:
    return find_one(session, Platform, exact(Platform.code, normalize_code(code)))


def count_platforms(session: Session) -> int:
    return count_rows(session, Platform)


def create_platform(
        session: Session,
        store: ImageStore,
        code: str,
        description: str,
        abbreviation: str,
        picture: bytes,
) -> str:
    code = normalize_code(code)
    with Transaction(session, name="platform") as tx:
        images = ImageSync(store, tx)
        tx.insert(Platform(code=code, description=description, abbreviation=abbreviation))
        images.put(PLATFORM_FOLDER, code, picture)
    return code


def update_platform(
        session: Session,
        store: ImageStore,
        code: str,
        fields: Mapping[str, Any],
        picture: Optional[bytes] = None,
) -> int:
    """
    Update a platform and keep its picture under the right code.

    A new picture is stored under the resulting code (and the old file dropped when the
    code changed); without one, a code change renames the existing picture. Both happen
    only once the update is committed.
    """
    code = normalize_code(code)
    if provided_fields(fields) or picture is None:
        assignments = build_assignments(UPDATABLE_FIELDS, fields)
    else:
        assignments = {}
    if assignments.get("code") is not None:
        assignments["code"] = normalize_code(assignments["code"])
    new_code = assignments.get("code") or code

    with Transaction(session, name="platform") as tx:
        images = ImageSync(store, tx)
        if assignments:
            affected = tx.step(
                apply_partial_update, session, Platform, Platform.code, code,
                UPDATABLE_FIELDS, assignments,
            )
        else:
            locked = tx.step(find_one, session, Platform, exact(Platform.code, code), for_update=True)
            affected = 1 if locked is not None else 0
        if affected == 0:
            raise NotFound("No platform found")

        if picture is not None:
            images.put(PLATFORM_FOLDER, new_code, picture)
            if new_code != code:
                images.delete(PLATFORM_FOLDER, code)
        elif new_code != code:
            images.rename(PLATFORM_FOLDER, code, new_code)
    return affected


def delete_platform(session: Session, store: ImageStore, code: str) -> int:
    code = normalize_code(code)

    def remove_picture(tx: Transaction) -> None:
        ImageSync(store, tx).delete(PLATFORM_FOLDER, code)

    affected = delete_with_cascade(session, Platform, "code", code, on_plan=remove_picture)
    return affected[Platform.__tablename__]


def create_platform_with_video_games(
        session: Session,
        store: ImageStore,
        platform: Mapping[str, Any],
        platform_image: bytes,
        video_games: list[Mapping[str, Any]],
) -> str:
    """
    Create a platform together with new video games released on it.

    `platform` holds code, description and abbreviation. Each entry of `video_games`
    holds name, description, picture and the publication data (release_date,
    release_price, store_page_url). One transaction covers every row; every picture is
    staged before commit, so a bad image leaves neither rows nor files behind.
    """
    code = normalize_code(platform["code"])
    created: list[VideoGame] = []

    with Transaction(session, name="platform") as tx:
        images = ImageSync(store, tx)

        def insert_platform():
            tx.insert(Platform(
                code=code,
                description=platform["description"],
                abbreviation=platform["abbreviation"],
            ))
            images.put(PLATFORM_FOLDER, code, platform_image)

        def insert_video_games():
            for entry in video_games:
                video_game = tx.insert(VideoGame(name=entry["name"], description=entry["description"]))
                images.put(VIDEO_GAME_FOLDER, video_game.id, entry["picture"])
                created.append(video_game)

        def insert_publications():
            for video_game, entry in zip(created, video_games):
                tx.insert(Publication(
                    video_game_id=video_game.id,
                    platform_code=code,
                    release_date=entry["release_date"],
                    release_price=entry.get("release_price"),
                    store_page_url=entry.get("store_page_url"),
                ))

        inserters = {
            Platform: insert_platform,
            VideoGame: insert_video_games,
            Publication: insert_publications,
        }
        for target in insertion_order(inserters):
            inserters[target]()

    logger.info("Created platform %s with %d video game(s)", code, len(created))
    return code
