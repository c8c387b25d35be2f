from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy import func, inspect
from sqlalchemy.orm import Query, Session

EXACT = "exact"
CONTAINS = "contains"


@dataclass(frozen=True)
class Filter:
    column: Any
    value: Any
    kind: str = EXACT

    def clause(self):
        if self.kind == CONTAINS:
            return func.lower(self.column).contains(str(self.value).lower(), autoescape=True)
        return self.column == self.value


def exact(column, value) -> Filter:
    return Filter(column, value, EXACT)


def contains(column, value) -> Filter:
    """Case-insensitive substring match."""
    return Filter(column, value, CONTAINS)


def apply_filters(query: Query, filters) -> Query:
    for f in filters:
        if f.value is not None:
            query = query.filter(f.clause())
    return query


def paginate(query: Query, page: Optional[int], limit: Optional[int]) -> Query:
    """1-based pages; nothing is applied unless both page and limit are given."""
    if page is None or limit is None:
        return query
    if page < 1 or limit < 1:
        raise ValueError("page and limit must be positive")
    return query.offset((page - 1) * limit).limit(limit)


def find_rows(
        session: Session,
        model,
        *filters: Filter,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        order_by=None,
) -> list:
    """
    Rows of `model` matching every non-None filter.
    Ordered by primary key ascending unless `order_by` is given.
    """
    query = apply_filters(session.query(model), filters)
    if order_by is None:
        order_by = inspect(model).primary_key
    elif not isinstance(order_by, (list, tuple)):
        order_by = (order_by,)
    query = query.order_by(*order_by)
    return paginate(query, page, limit).all()


def find_one(session: Session, model, *filters: Filter, for_update: bool = False):
    query = apply_filters(session.query(model), filters)
    if for_update:
        # re-read the row under lock instead of trusting the identity map
        query = query.with_for_update().populate_existing()
    return query.first()


def count_rows(session: Session, model, *filters: Filter) -> int:
    query = apply_filters(session.query(func.count()).select_from(model), filters)
    return int(query.scalar() or 0)


def row_exists(session: Session, model, *filters: Filter) -> bool:
    return count_rows(session, model, *filters) > 0
