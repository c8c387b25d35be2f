from typing import Any, Mapping, Optional

from sqlalchemy import delete, insert
from sqlalchemy.orm import Session

from ..models.category import Category
from ..models.video_game import VideoGame
from ..models.video_game_category import video_game_categories
from .cascade import delete_with_cascade
from .errors import DuplicateEntry, NotFound
from .lookup import contains, count_rows, exact, find_one, find_rows, row_exists
from .partial_update import apply_partial_update, build_assignments
from .transaction import Transaction

UPDATABLE_FIELDS = ("name",)


def get_categories(
        session: Session,
        category_id: Optional[int] = None,
        name: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
) -> list[Category]:
    return find_rows(
        session, Category,
        exact(Category.id, category_id),
        contains(Category.name, name),
        page=page, limit=limit,
    )


def get_category(session: Session, category_id: int) -> Optional[Category]:
    return find_one(session, Category, exact(Category.id, category_id))


def count_categories(session: Session, name: Optional[str] = None) -> int:
    return count_rows(session, Category, contains(Category.name, name))


def get_category_video_games(session: Session, category_id: int) -> list[VideoGame]:
    if not row_exists(session, Category, exact(Category.id, category_id)):
        raise NotFound("No category found")
    return (
        session.query(VideoGame)
        .join(video_game_categories, video_game_categories.c.video_game_id == VideoGame.id)
        .filter(video_game_categories.c.category_id == category_id)
        .order_by(VideoGame.id)
        .all()
    )


def create_category(session: Session, name: str) -> int:
    with Transaction(session, name="category") as tx:
        category = tx.insert(Category(name=name))
    return category.id


def update_category(session: Session, category_id: int, fields: Mapping[str, Any]) -> int:
    assignments = build_assignments(UPDATABLE_FIELDS, fields)
    with Transaction(session, name="category") as tx:
        affected = tx.step(
            apply_partial_update, session, Category, Category.id, category_id,
            UPDATABLE_FIELDS, assignments,
        )
        if affected == 0:
            raise NotFound("No category found")
    return affected


def delete_category(session: Session, category_id: int) -> int:
    affected = delete_with_cascade(session, Category, "id", category_id)
    return affected[Category.__tablename__]


def link_video_game(session: Session, category_id: int, video_game_id: int) -> None:
    """Attach a video game to a category. Unknown ids raise ForeignKeyNotFound."""
    link = (
        exact(video_game_categories.c.category_id, category_id),
        exact(video_game_categories.c.video_game_id, video_game_id),
    )
    if row_exists(session, video_game_categories, *link):
        raise DuplicateEntry("Video game already in category", fields=["category_id", "video_game_id"])

    with Transaction(session, name="video_game_category") as tx:
        tx.step(
            session.execute,
            insert(video_game_categories).values(category_id=category_id, video_game_id=video_game_id),
        )


def unlink_video_game(session: Session, category_id: int, video_game_id: int) -> int:
    with Transaction(session, name="video_game_category") as tx:
        result = tx.step(
            session.execute,
            delete(video_game_categories).where(
                video_game_categories.c.category_id == category_id,
                video_game_categories.c.video_game_id == video_game_id,
            ),
        )
        if not result.rowcount:
            raise NotFound("Video game is not in category")
    return result.rowcount
