from typing import Any, Iterable, Mapping

from sqlalchemy.orm import Session

from .errors import NoFieldsToUpdate


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


# marks a field the caller did not provide; None means "set to NULL"
UNSET: Any = _Unset()


def provided_fields(fields: Mapping[str, Any] | Iterable[tuple[str, Any]]) -> dict[str, Any]:
    """Drop UNSET entries, keeping the caller's order."""
    items = fields.items() if isinstance(fields, Mapping) else fields
    return {name: value for name, value in items if value is not UNSET}


def build_assignments(
        allowed: Iterable[str],
        fields: Mapping[str, Any] | Iterable[tuple[str, Any]],
) -> dict[str, Any]:
    """
    Turn a sparse field set into the assignment list of an UPDATE.

    Raises NoFieldsToUpdate when nothing is provided and ValueError for a column
    outside `allowed`. Both happen before any statement exists.
    """
    assignments = provided_fields(fields)
    if not assignments:
        raise NoFieldsToUpdate()

    allowed = set(allowed)
    unknown = [name for name in assignments if name not in allowed]
    if unknown:
        raise ValueError(f"Unknown field(s) for update: {', '.join(unknown)}")

    return assignments


def apply_partial_update(
        session: Session,
        model,
        key_column,
        key: Any,
        allowed: Iterable[str],
        fields: Mapping[str, Any] | Iterable[tuple[str, Any]],
) -> int:
    """
    UPDATE <model> SET <provided columns> WHERE <key_column> = :key

    Values are always bound parameters; only allow-listed column names shape the
    statement. Returns the backend's rows-affected count unchanged, so 0 means the
    key matched nothing.
    """
    assignments = build_assignments(allowed, fields)
    values = {getattr(model, name): value for name, value in assignments.items()}
    affected = (
        session.query(model)
        .filter(key_column == key)
        .update(values, synchronize_session=False)
    )
    return int(affected or 0)
