from typing import Optional

from fastapi import Query
from pydantic import BaseModel

from ..utils.config import QUERY_LIMIT


class Pagination(BaseModel):
    page: Optional[int] = None
    limit: Optional[int] = None


def pagination(
        page: Optional[int] = Query(None, ge=1, description="1-based page number"),
        limit: Optional[int] = Query(None, ge=1, le=QUERY_LIMIT, description="Rows per page"),
) -> Pagination:
    return Pagination(page=page, limit=limit)


class Count(BaseModel):
    count: int


def reject_null(value):
    if value is None:
        raise ValueError("may not be null")
    return value
