"""
Foreign-key dependency graph and the cascades derived from it.

The graph is plain data: each Dependency says "rows of `child` point at `parent`
through `child.column -> parent.parent_column`". Delete plans visit dependents
depth-first and emit children before their parent, so every statement runs after
the rows referencing it are gone. Insert order is the opposite: parents first.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from sqlalchemy import Table, delete, select
from sqlalchemy.orm import Session

from ..models.category import Category
from ..models.game import Game
from ..models.platform import Platform
from ..models.publication import Publication
from ..models.user import User
from ..models.video_game import VideoGame
from ..models.video_game_category import video_game_categories
from .errors import NotFound
from .lookup import exact, find_one, row_exists
from .transaction import Transaction

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Dependency:
    child: Any
    column: str
    parent: Any
    parent_column: str


# Sibling order matters: publications (and their games) go before category links.
DEPENDENCIES: tuple[Dependency, ...] = (
    Dependency(Publication, "video_game_id", VideoGame, "id"),
    Dependency(video_game_categories, "video_game_id", VideoGame, "id"),
    Dependency(Publication, "platform_code", Platform, "code"),
    Dependency(Game, "publication_id", Publication, "id"),
    Dependency(Game, "user_id", User, "id"),
    Dependency(video_game_categories, "category_id", Category, "id"),
)


def table_of(target) -> Table:
    return target if isinstance(target, Table) else target.__table__


def column_of(target, name: str):
    return table_of(target).c[name]


def dependents_of(target, dependencies=DEPENDENCIES) -> list[Dependency]:
    return [dep for dep in dependencies if dep.parent is target]


@dataclass
class CascadeStep:
    target: Any
    condition: Any
    is_root: bool = False

    @property
    def name(self) -> str:
        return table_of(self.target).name

    def statement(self):
        return delete(self.target).where(self.condition).execution_options(synchronize_session=False)


@dataclass
class CascadePlan:
    root: Any
    key: Any
    steps: list[CascadeStep] = field(default_factory=list)

    @property
    def order(self) -> list[str]:
        return [step.name for step in self.steps]


def plan_delete(root, key_column: str, key, dependencies=DEPENDENCIES) -> CascadePlan:
    """
    Ordered delete steps for removing the `root` row whose `key_column` equals `key`.

    Each dependent step selects its rows through the keys of its parent step, e.g. for
    a video game: games whose publication belongs to the video game, then those
    publications, then the category links, then the video game itself.
    """
    plan = CascadePlan(root=root, key=key)

    def visit(target, condition, path: tuple):
        if target in path:
            names = " -> ".join(table_of(t).name for t in path + (target,))
            raise ValueError(f"Dependency cycle: {names}")
        for dep in dependents_of(target, dependencies):
            parent_keys = select(column_of(target, dep.parent_column)).where(condition)
            visit(dep.child, column_of(dep.child, dep.column).in_(parent_keys), path + (target,))
        plan.steps.append(CascadeStep(target, condition, is_root=not path))

    visit(root, column_of(root, key_column) == key, ())
    return plan


def insertion_order(targets, dependencies=DEPENDENCIES) -> list:
    """Order `targets` so every parent comes before the children that reference it."""
    pending = list(targets)
    ordered: list = []
    while pending:
        for target in pending:
            parents = {
                dep.parent for dep in dependencies
                if dep.child is target and dep.parent in pending and dep.parent is not target
            }
            if not parents:
                ordered.append(target)
                pending.remove(target)
                break
        else:
            names = ", ".join(table_of(t).name for t in pending)
            raise ValueError(f"Dependency cycle among: {names}")
    return ordered


def execute_plan(tx: Transaction, plan: CascadePlan) -> dict[str, int]:
    """
    Run every step of `plan` in order inside `tx`. A root step touching no row
    means the row disappeared after planning: NotFound, and the transaction rolls back.
    """
    affected: dict[str, int] = {}
    for step in plan.steps:
        result = tx.step(tx.session.execute, step.statement())
        count = int(result.rowcount or 0)
        affected[step.name] = affected.get(step.name, 0) + count
        if step.is_root and count == 0:
            raise NotFound(f"No {step.name} found")
    return affected


def delete_with_cascade(
        session: Session,
        model,
        key_column: str,
        key,
        *,
        guard: Optional[Callable[[Any], None]] = None,
        on_plan: Optional[Callable[[Transaction], None]] = None,
        timeout: Optional[float] = None,
) -> dict[str, int]:
    """
    Delete one root row and everything that depends on it, atomically.

    - `guard(row)` runs on the current row before the transaction and again on the
      locked row inside it; it raises to refuse the delete.
    - `on_plan(tx)` lets the caller attach post-commit work (image removal).
    Returns rows deleted per table.
    """
    name = table_of(model).name
    key_filter = exact(column_of(model, key_column), key)

    if guard is None:
        if not row_exists(session, model, key_filter):
            raise NotFound(f"No {name} found")
    else:
        row = find_one(session, model, key_filter)
        if row is None:
            raise NotFound(f"No {name} found")
        guard(row)

    plan = plan_delete(model, key_column, key)

    with Transaction(session, name=name, timeout=timeout) as tx:
        locked = tx.step(find_one, session, model, key_filter, for_update=True)
        if locked is None:
            raise NotFound(f"No {name} found")
        if guard is not None:
            guard(locked)
        if on_plan is not None:
            on_plan(tx)
        affected = execute_plan(tx, plan)

    logger.info("Deleted %s %s with cascade: %s", name, key, affected)
    return affected
