import io
import os
import sys
from datetime import date

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from gamecatalog_api.db import get_db
from gamecatalog_api.main import app
from gamecatalog_api.models import Base
from gamecatalog_api.models.user import User
from gamecatalog_api.utils.auth import hash_password, issue_token
from gamecatalog_api.utils.images import ImageStore, get_image_store
from gamecatalog_api.utils.category import create_category, link_video_game
from gamecatalog_api.utils.game import create_game
from gamecatalog_api.utils.platform import create_platform
from gamecatalog_api.utils.publication import create_publication
from gamecatalog_api.utils.video_game import create_video_game


def make_image(fmt: str = "PNG", color=(200, 30, 30)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (4, 4), color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(tmp_path):
    store = ImageStore(tmp_path / "pictures")
    store.ensure_folders()
    return store


@pytest.fixture
def png():
    return make_image()


def add_user(db, username: str, is_admin: bool = False, password: str = "secret123") -> User:
    user = User(
        username=username,
        email=f"{username}@example.com",
        hashed_password=hash_password(password),
        is_admin=is_admin,
    )
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def admin(db):
    return add_user(db, "admin", is_admin=True)


@pytest.fixture
def member(db):
    return add_user(db, "member")


@pytest.fixture
def client(session_factory, store):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_image_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


def bearer(user: User) -> dict:
    return {"Authorization": f"Bearer {issue_token(user)}"}


@pytest.fixture
def admin_headers(admin):
    return bearer(admin)


@pytest.fixture
def member_headers(member):
    return bearer(member)


@pytest.fixture
def statements(engine):
    """SQL statements sent to the database while the test runs."""
    seen = []

    def record(conn, cursor, statement, parameters, context, executemany):
        seen.append(statement)

    event.listen(engine, "before_cursor_execute", record)
    yield seen
    event.remove(engine, "before_cursor_execute", record)


@pytest.fixture
def fail_on(engine):
    """Make the first statement starting with the given prefix raise."""
    installed = []

    def install(prefix: str):
        def boom(conn, cursor, statement, parameters, context, executemany):
            if statement.lstrip().upper().startswith(prefix.upper()):
                raise RuntimeError(f"injected failure on {prefix}")

        event.listen(engine, "before_cursor_execute", boom)
        installed.append(boom)

    yield install
    for boom in installed:
        event.remove(engine, "before_cursor_execute", boom)


@pytest.fixture
def catalog(db, store, member):
    """
    One platform (PS5) with one video game published on it, owned by `member`,
    the video game sitting in one category.
    """
    create_platform(db, store, "ps5", "PlayStation 5", "PS5", make_image())
    video_game_id = create_video_game(db, store, "Astro Bot", "Platformer", make_image())
    publication_id = create_publication(db, video_game_id, "PS5", date(2024, 9, 6), 59.99)
    create_game(db, member.id, publication_id)
    category_id = create_category(db, "Platformers")
    link_video_game(db, category_id, video_game_id)
    return {
        "platform_code": "PS5",
        "video_game_id": video_game_id,
        "publication_id": publication_id,
        "category_id": category_id,
        "user_id": member.id,
    }
