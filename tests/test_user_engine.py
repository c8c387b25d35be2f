import pytest

from gamecatalog_api.models.game import Game
from gamecatalog_api.models.user import User
from gamecatalog_api.utils.errors import DeleteForbidden, DuplicateEntry, NotFound
from gamecatalog_api.utils.game import count_games, get_games
from gamecatalog_api.utils.user import (
    authenticate,
    count_users,
    create_user,
    create_user_with_games,
    delete_user,
    get_user,
    get_users,
    update_user,
)


def user_fields(username, **extra):
    return {"username": username, "email": f"{username}@example.com", "password": "hunter22", **extra}


def test_create_user_hashes_the_password(db):
    user_id = create_user(db, user_fields("alice", firstname="Alice"))

    user = get_user(db, user_id)
    assert user.hashed_password != "hunter22"
    assert user.firstname == "Alice"
    assert user.is_admin is False


def test_login_by_username_or_email(db):
    create_user(db, user_fields("alice"))

    assert authenticate(db, "alice", "hunter22").username == "alice"
    assert authenticate(db, "alice@example.com", "hunter22").username == "alice"
    assert authenticate(db, "alice", "wrong") is None
    assert authenticate(db, "nobody@example.com", "hunter22") is None


def test_duplicate_email_names_the_column(db):
    create_user(db, user_fields("alice"))

    with pytest.raises(DuplicateEntry) as excinfo:
        create_user(db, {**user_fields("bob"), "email": "alice@example.com"})

    assert excinfo.value.fields == ["email"]
    assert count_users(db) == 1


def test_update_rehashes_a_new_password(db):
    user_id = create_user(db, user_fields("alice"))

    update_user(db, user_id, {"password": "new-secret", "lastname": "Liddell"})

    assert authenticate(db, "alice", "new-secret") is not None
    assert authenticate(db, "alice", "hunter22") is None
    assert get_user(db, user_id).lastname == "Liddell"


def test_update_unknown_user(db):
    with pytest.raises(NotFound):
        update_user(db, 999, {"firstname": "Nobody"})


def test_create_user_with_games(db, catalog):
    publication_id = catalog["publication_id"]

    user_id = create_user_with_games(db, user_fields("carol"), [publication_id, publication_id])

    assert [g.publication_id for g in get_games(db, user_id=user_id)] == [publication_id]


def test_unknown_publication_rolls_back_the_user(db, catalog):
    with pytest.raises(NotFound):
        create_user_with_games(db, user_fields("dave"), [catalog["publication_id"], 4242])

    assert get_users(db, username="dave") == []
    assert count_games(db) == 1


def test_admin_cannot_be_deleted(db, admin, statements):
    statements.clear()

    with pytest.raises(DeleteForbidden):
        delete_user(db, admin.id)

    assert not any(s.lstrip().upper().startswith("DELETE") for s in statements)
    assert db.get(User, admin.id) is not None


def test_promoted_user_is_protected_under_lock(db, member, monkeypatch):
    from gamecatalog_api.utils import cascade

    real_find_one = cascade.find_one

    def promote_then_find(session, model, *filters, for_update=False):
        if for_update:
            session.query(User).filter(User.id == member.id).update({User.is_admin: True})
        return real_find_one(session, model, *filters, for_update=for_update)

    monkeypatch.setattr(cascade, "find_one", promote_then_find)

    with pytest.raises(DeleteForbidden):
        delete_user(db, member.id)

    monkeypatch.undo()
    assert db.get(User, member.id).is_admin is False


def test_delete_user_cascades_their_games(db, catalog):
    assert delete_user(db, catalog["user_id"]) == 1

    assert db.query(Game).count() == 0
    assert get_user(db, catalog["user_id"]) is None
