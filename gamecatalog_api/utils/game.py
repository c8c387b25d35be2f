from typing import Optional

from sqlalchemy.orm import Session

from ..models.game import Game
from .errors import DuplicateEntry, NotFound
from .lookup import count_rows, exact, find_rows, row_exists
from .transaction import Transaction


def get_games(
        session: Session,
        user_id: Optional[int] = None,
        publication_id: Optional[int] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
) -> list[Game]:
    return find_rows(
        session, Game,
        exact(Game.user_id, user_id),
        exact(Game.publication_id, publication_id),
        page=page, limit=limit,
    )


def game_exists(session: Session, user_id: int, publication_id: int) -> bool:
    return row_exists(session, Game, exact(Game.user_id, user_id), exact(Game.publication_id, publication_id))


def count_games(
        session: Session,
        user_id: Optional[int] = None,
        publication_id: Optional[int] = None,
) -> int:
    return count_rows(session, Game, exact(Game.user_id, user_id), exact(Game.publication_id, publication_id))


def create_game(session: Session, user_id: int, publication_id: int) -> tuple[int, int]:
    """Record that a user owns a publication."""
    if game_exists(session, user_id, publication_id):
        raise DuplicateEntry("Game already owned", fields=["user_id", "publication_id"])
    with Transaction(session, name="game") as tx:
        tx.insert(Game(user_id=user_id, publication_id=publication_id))
    return user_id, publication_id


def delete_game(session: Session, user_id: int, publication_id: int) -> int:
    if not game_exists(session, user_id, publication_id):
        raise NotFound("No game found")

    with Transaction(session, name="game") as tx:
        affected = tx.step(
            session.query(Game)
            .filter(Game.user_id == user_id, Game.publication_id == publication_id)
            .delete,
            synchronize_session=False,
        )
        if affected == 0:
            raise NotFound("No game found")
    return affected
