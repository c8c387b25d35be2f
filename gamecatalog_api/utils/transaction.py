import logging
import time
from enum import Enum
from typing import Callable

from sqlalchemy import text
from sqlalchemy.orm import Session

from .config import TRANSACTION_TIMEOUT
from .errors import CatalogError
from .failures import classify_failure

logger = logging.getLogger(__name__)


class TransactionState(str, Enum):
    PLANNED = "planned"
    EXECUTING = "executing"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class TransactionTimeout(Exception):
    """The unit of work ran past its deadline."""


class Transaction:
    """
    One atomic unit of work on an explicitly passed session.

        with Transaction(db, name="Platform") as tx:
            tx.step(...)
            tx.step(...)

    Leaving the block without an exception commits; any exception (backend error,
    image failure, timeout, NotFound raised mid-cascade) is classified first, then the
    session is rolled back and the classified CatalogError is raised. Callbacks
    registered with after_commit / after_rollback run once the outcome is final.
    """

    def __init__(self, session: Session, *, name: str | None = None, timeout: float | None = None):
        self.session = session
        self.name = name
        self.timeout = TRANSACTION_TIMEOUT if timeout is None else timeout
        self.state = TransactionState.PLANNED
        self._deadline: float | None = None
        self._on_commit: list[Callable[[], None]] = []
        self._on_rollback: list[Callable[[], None]] = []

    def after_commit(self, callback: Callable[[], None]) -> None:
        self._on_commit.append(callback)

    def after_rollback(self, callback: Callable[[], None]) -> None:
        self._on_rollback.append(callback)

    def __enter__(self) -> "Transaction":
        if self.state is not TransactionState.PLANNED:
            raise RuntimeError(f"Transaction already {self.state.value}")
        self.state = TransactionState.EXECUTING
        if self.timeout and self.timeout > 0:
            self._deadline = time.monotonic() + self.timeout
            try:
                self._apply_statement_timeout()
            except Exception as e:
                failure = self._abort(e)
                if failure is e:
                    raise
                raise failure from e
        return self

    def _apply_statement_timeout(self) -> None:
        if self.session.get_bind().dialect.name == "postgresql":
            self.session.execute(text(f"SET LOCAL statement_timeout = {int(self.timeout * 1000)}"))

    def check_deadline(self) -> None:
        if self._deadline is not None and time.monotonic() >= self._deadline:
            raise TransactionTimeout(f"{self.name or 'transaction'} exceeded {self.timeout}s")

    def step(self, fn: Callable, *args, **kwargs):
        """Run one planned operation after checking the deadline."""
        if self.state is not TransactionState.EXECUTING:
            raise RuntimeError("Transaction is not executing")
        self.check_deadline()
        return fn(*args, **kwargs)

    def insert(self, row):
        """Add `row` and flush it so generated keys are available to later steps."""
        def _insert():
            self.session.add(row)
            self.session.flush()
            return row
        return self.step(_insert)

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc is None:
            try:
                self.check_deadline()
                self.session.commit()
            except Exception as commit_exc:
                failure = self._abort(commit_exc)
                if failure is commit_exc:
                    raise
                raise failure from commit_exc
            self.state = TransactionState.COMMITTED
            # bulk statements bypass the identity map; reload on next access
            self.session.expire_all()
            self._run_callbacks(self._on_commit)
            logger.debug("Transaction committed", extra={"model": self.name})
            return False

        if not isinstance(exc, Exception):
            # KeyboardInterrupt and friends: roll back, let them through untouched
            self._rollback()
            return False

        failure = self._abort(exc)
        if failure is exc:
            return False
        raise failure from exc

    def _abort(self, exc: Exception) -> CatalogError:
        failure = classify_failure(exc, self.name)
        self._rollback()
        return failure

    def _rollback(self) -> None:
        try:
            self.session.rollback()
        except Exception:
            logger.exception("Failed to rollback session", extra={"model": self.name})
        self.state = TransactionState.ROLLED_BACK
        self._run_callbacks(self._on_rollback)

    def _run_callbacks(self, callbacks: list[Callable[[], None]]) -> None:
        for callback in callbacks:
            try:
                callback()
            except Exception:
                logger.exception("Transaction callback failed", extra={"model": self.name})


__all__ = ["Transaction", "TransactionState", "TransactionTimeout"]
