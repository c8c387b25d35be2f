import logging
import re
from enum import Enum

from sqlalchemy.exc import IntegrityError

from .errors import (
    CatalogError,
    DuplicateEntry,
    ForeignKeyNotFound,
    InternalFailure,
    InvalidArtifactFormat,
)
from .images import InvalidImageFormat

logger = logging.getLogger(__name__)


# https://www.postgresql.org/docs/current/errcodes-appendix.html
class PostgresErrorCodes(str, Enum):
    UNIQUE_VIOLATION = "23505"
    FOREIGN_KEY_VIOLATION = "23503"


UNIQUE = "unique"
FOREIGN_KEY = "foreign_key"

_UNIQUE_KEYWORDS = ("unique constraint", "unique violation", "duplicate")
_FOREIGN_KEY_KEYWORDS = ("foreign key constraint", "foreign key", "is not present in table")


def _pgcode(orig) -> str | None:
    # psycopg2 exposes pgcode, psycopg 3 exposes sqlstate
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


def _detail(orig) -> str | None:
    diag = getattr(orig, "diag", None)
    return getattr(diag, "message_detail", None) if diag else None


def classify_integrity_error(exc: IntegrityError) -> str | None:
    """
    Return UNIQUE, FOREIGN_KEY or None for an IntegrityError.
    SQLSTATE wins when the driver reports one; otherwise the message is matched.
    """
    pgcode = _pgcode(exc.orig)
    if pgcode == PostgresErrorCodes.UNIQUE_VIOLATION:
        return UNIQUE
    if pgcode == PostgresErrorCodes.FOREIGN_KEY_VIOLATION:
        return FOREIGN_KEY
    if pgcode:
        logger.warning("Unknown Postgres integrity error code encountered", extra={"pgcode": pgcode})
        return None

    msg = str(exc.orig).lower()
    if any(k in msg for k in _UNIQUE_KEYWORDS):
        return UNIQUE
    if any(k in msg for k in _FOREIGN_KEY_KEYWORDS):
        return FOREIGN_KEY
    logger.warning("Unknown integrity error message encountered", extra={"message_snippet": msg[:200]})
    return None


def extract_columns(msg: str) -> list[str] | None:
    """
    Best-effort column names from a constraint message:
      - Postgres: 'Key (video_game_id, platform_code)=(1, PS5) already exists.'
      - SQLite:   'UNIQUE constraint failed: platform.code'
    """
    if not msg:
        return None

    m = re.search(r"key \((?P<cols>[^)]+)\)=", msg, flags=re.IGNORECASE)
    if m:
        return [c.strip().strip('"') for c in m.group("cols").split(",")]

    m = re.search(r"UNIQUE constraint failed: (?P<cols>.+)$", msg, flags=re.IGNORECASE | re.MULTILINE)
    if m:
        return [c.split(".")[-1].strip() for c in re.split(r",\s*", m.group("cols"))]

    return None


def classify_failure(exc: BaseException, model_name: str | None = None) -> CatalogError:
    """
    Map any exception raised while executing a unit of work to exactly one taxonomy value.
    Taxonomy values pass through untouched.
    """
    if isinstance(exc, CatalogError):
        return exc

    model_part = model_name or "Record"

    if isinstance(exc, IntegrityError):
        kind = classify_integrity_error(exc)
        detail = _detail(exc.orig)
        columns = extract_columns(detail or str(exc.orig))

        if kind == UNIQUE:
            logger.info("duplicate entry", extra={"model": model_part, "fields": columns})
            if columns:
                message = f"{model_part} already exists for field(s): {', '.join(columns)}"
            else:
                message = f"{model_part} already exists"
            return DuplicateEntry(message, fields=columns, detail=detail)

        if kind == FOREIGN_KEY:
            logger.info("foreign key violation", extra={"model": model_part, "fields": columns})
            return ForeignKeyNotFound(f"{model_part} references a resource that does not exist", fields=columns)

    if isinstance(exc, InvalidImageFormat):
        logger.info("rejected image", extra={"model": model_part})
        return InvalidArtifactFormat()

    if isinstance(exc, OSError):
        logger.error("Image storage I/O failed for %s", model_part, exc_info=exc)
        return InternalFailure()

    logger.error("Unexpected failure for %s", model_part, exc_info=exc)
    return InternalFailure()
