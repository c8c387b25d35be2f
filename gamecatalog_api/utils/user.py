import logging
from typing import Any, Iterable, Mapping, Optional

from sqlalchemy.orm import Session

from ..models.game import Game
from ..models.publication import Publication
from ..models.user import User
from .auth import hash_password, verify_password
from .cascade import delete_with_cascade
from .errors import DeleteForbidden, NotFound
from .lookup import count_rows, exact, find_one, find_rows, row_exists
from .partial_update import apply_partial_update, build_assignments, provided_fields
from .transaction import Transaction

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("username", "email", "hashed_password", "firstname", "lastname", "is_admin")


def get_users(
        session: Session,
        user_id: Optional[int] = None,
        username: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
) -> list[User]:
    return find_rows(
        session, User,
        exact(User.id, user_id),
        exact(User.username, username),
        page=page, limit=limit,
    )


def get_user(session: Session, user_id: int) -> Optional[User]:
    return find_one(session, User, exact(User.id, user_id))


def get_user_by_login(session: Session, login: str) -> Optional[User]:
    """`login` is an email when it contains '@', a username otherwise."""
    if "@" in login:
        return find_one(session, User, exact(User.email, login))
    return find_one(session, User, exact(User.username, login))


def authenticate(session: Session, login: str, password: str) -> Optional[User]:
    user = get_user_by_login(session, login)
    if user is None or not verify_password(password, user.hashed_password):
        return None
    return user


def count_users(session: Session) -> int:
    return count_rows(session, User)


def _new_user(fields: Mapping[str, Any]) -> User:
    return User(
        username=fields["username"],
        email=fields["email"],
        hashed_password=hash_password(fields["password"]),
        firstname=fields.get("firstname"),
        lastname=fields.get("lastname"),
        is_admin=bool(fields.get("is_admin", False)),
    )


def create_user(session: Session, user: Mapping[str, Any]) -> int:
    """
    `user` holds username, email, password and optionally firstname, lastname, is_admin.
    A taken username or email raises DuplicateEntry naming the column.
    """
    with Transaction(session, name="user") as tx:
        row = tx.insert(_new_user(user))
    return row.id


def create_user_with_games(session: Session, user: Mapping[str, Any], publication_ids: Iterable[int]) -> int:
    """
    Create a user who already owns the given publications.
    One unknown publication id rolls back the user as well.
    """
    publication_ids = list(dict.fromkeys(publication_ids))

    with Transaction(session, name="user") as tx:
        row = tx.insert(_new_user(user))
        for publication_id in publication_ids:
            if not tx.step(row_exists, session, Publication, exact(Publication.id, publication_id)):
                raise NotFound(f"No publication found with id {publication_id}", fields=["publication_id"])
            tx.insert(Game(user_id=row.id, publication_id=publication_id))

    logger.info("Created user %s owning %d publication(s)", row.id, len(publication_ids))
    return row.id


def update_user(session: Session, user_id: int, fields: Mapping[str, Any]) -> int:
    """A plain `password` field is hashed into `hashed_password` before the update."""
    fields = provided_fields(fields)
    if "password" in fields:
        fields["hashed_password"] = hash_password(fields.pop("password"))
    assignments = build_assignments(UPDATABLE_FIELDS, fields)

    with Transaction(session, name="user") as tx:
        affected = tx.step(
            apply_partial_update, session, User, User.id, user_id,
            UPDATABLE_FIELDS, assignments,
        )
        if affected == 0:
            raise NotFound("No user found")
    return affected


def _refuse_admin(user: User) -> None:
    if user.is_admin:
        raise DeleteForbidden("An administrator cannot be deleted")


def delete_user(session: Session, user_id: int) -> int:
    """Delete a non-admin user and the games they own."""
    affected = delete_with_cascade(session, User, "id", user_id, guard=_refuse_admin)
    return affected[User.__tablename__]
