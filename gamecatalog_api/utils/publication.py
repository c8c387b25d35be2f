from datetime import date
from typing import Any, Mapping, Optional

from sqlalchemy.orm import Session

from ..models.publication import Publication
from .cascade import delete_with_cascade
from .errors import NotFound
from .lookup import count_rows, exact, find_one, find_rows
from .partial_update import apply_partial_update, build_assignments
from .platform import normalize_code
from .transaction import Transaction

UPDATABLE_FIELDS = ("video_game_id", "platform_code", "release_date", "release_price", "store_page_url")


def get_publications(
        session: Session,
        publication_id: Optional[int] = None,
        video_game_id: Optional[int] = None,
        platform_code: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
) -> list[Publication]:
    if platform_code is not None:
        platform_code = normalize_code(platform_code)
    return find_rows(
        session, Publication,
        exact(Publication.id, publication_id),
        exact(Publication.video_game_id, video_game_id),
        exact(Publication.platform_code, platform_code),
        page=page, limit=limit,
    )


def get_publication(session: Session, publication_id: int) -> Optional[Publication]:
    return find_one(session, Publication, exact(Publication.id, publication_id))


def count_publications(
        session: Session,
        video_game_id: Optional[int] = None,
        platform_code: Optional[str] = None,
) -> int:
    if platform_code is not None:
        platform_code = normalize_code(platform_code)
    return count_rows(
        session, Publication,
        exact(Publication.video_game_id, video_game_id),
        exact(Publication.platform_code, platform_code),
    )


def create_publication(
        session: Session,
        video_game_id: int,
        platform_code: str,
        release_date: date,
        release_price: Optional[float] = None,
        store_page_url: Optional[str] = None,
) -> int:
    """
    A missing video game or platform surfaces as ForeignKeyNotFound, a second
    publication of the same game on the same platform as DuplicateEntry.
    """
    with Transaction(session, name="publication") as tx:
        publication = tx.insert(Publication(
            video_game_id=video_game_id,
            platform_code=normalize_code(platform_code),
            release_date=release_date,
            release_price=release_price,
            store_page_url=store_page_url,
        ))
    return publication.id


def update_publication(session: Session, publication_id: int, fields: Mapping[str, Any]) -> int:
    assignments = build_assignments(UPDATABLE_FIELDS, fields)
    if assignments.get("platform_code") is not None:
        assignments["platform_code"] = normalize_code(assignments["platform_code"])

    with Transaction(session, name="publication") as tx:
        affected = tx.step(
            apply_partial_update, session, Publication, Publication.id, publication_id,
            UPDATABLE_FIELDS, assignments,
        )
        if affected == 0:
            raise NotFound("No publication found")
    return affected


def delete_publication(session: Session, publication_id: int) -> int:
    affected = delete_with_cascade(session, Publication, "id", publication_id)
    return affected[Publication.__tablename__]
