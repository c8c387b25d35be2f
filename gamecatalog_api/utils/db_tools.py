from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session

from ..db import get_db


@contextmanager
def with_db() -> Iterator[Session]:
    """
    Borrow a session outside of a request, e.g. for startup work:

        with with_db() as db:
            sweep_images(db, store)
    """
    db_gen = get_db()
    db = next(db_gen)
    try:
        yield db
    finally:
        db_gen.close()
