from typing import Any, Mapping, Optional

from sqlalchemy.orm import Session

from ..models.genre import Genre
from .errors import NotFound
from .lookup import count_rows, exact, find_one, find_rows, row_exists
from .partial_update import apply_partial_update, build_assignments
from .transaction import Transaction

UPDATABLE_FIELDS = ("name", "description")


def get_genres(
        session: Session,
        genre_id: Optional[int] = None,
        alphabetical: bool = False,
        page: Optional[int] = None,
        limit: Optional[int] = None,
) -> list[Genre]:
    order_by = (Genre.name, Genre.id) if alphabetical else None
    return find_rows(session, Genre, exact(Genre.id, genre_id), page=page, limit=limit, order_by=order_by)


def get_genre(session: Session, genre_id: int) -> Optional[Genre]:
    return find_one(session, Genre, exact(Genre.id, genre_id))


def count_genres(session: Session) -> int:
    return count_rows(session, Genre)


def create_genre(session: Session, name: str, description: str = "") -> int:
    with Transaction(session, name="genre") as tx:
        genre = tx.insert(Genre(name=name, description=description))
    return genre.id


def update_genre(session: Session, genre_id: int, fields: Mapping[str, Any]) -> int:
    assignments = build_assignments(UPDATABLE_FIELDS, fields)
    with Transaction(session, name="genre") as tx:
        affected = tx.step(
            apply_partial_update, session, Genre, Genre.id, genre_id,
            UPDATABLE_FIELDS, assignments,
        )
        if affected == 0:
            raise NotFound("No genre found")
    return affected


def delete_genre(session: Session, genre_id: int) -> int:
    if not row_exists(session, Genre, exact(Genre.id, genre_id)):
        raise NotFound("No genre found")

    with Transaction(session, name="genre") as tx:
        affected = tx.step(
            session.query(Genre).filter(Genre.id == genre_id).delete,
            synchronize_session=False,
        )
        if affected == 0:
            raise NotFound("No genre found")
    return affected
