import logging

from sqlalchemy.engine import Engine

from .db import engine
from .models import Base

logger = logging.getLogger(__name__)


def init_db(bind: Engine = engine) -> None:
    """Create every catalog table that does not exist yet."""
    Base.metadata.create_all(bind=bind)
    logger.info("Database tables ensured: %s", ", ".join(sorted(Base.metadata.tables)))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
