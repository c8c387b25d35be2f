import time

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from gamecatalog_api.models.genre import Genre
from gamecatalog_api.utils.errors import DuplicateEntry, NotFound, InternalFailure
from gamecatalog_api.utils.transaction import Transaction, TransactionState


def test_commit_runs_commit_callbacks(db):
    events = []
    tx = Transaction(db, name="genre")
    tx.after_commit(lambda: events.append("commit"))
    tx.after_rollback(lambda: events.append("rollback"))

    with tx:
        tx.insert(Genre(name="Shooter"))
        assert tx.state is TransactionState.EXECUTING

    assert tx.state is TransactionState.COMMITTED
    assert events == ["commit"]
    assert db.query(Genre).count() == 1


def test_taxonomy_errors_pass_through_and_roll_back(db):
    events = []
    tx = Transaction(db, name="genre")
    tx.after_rollback(lambda: events.append("rollback"))

    with pytest.raises(NotFound):
        with tx:
            tx.insert(Genre(name="Shooter"))
            raise NotFound("gone")

    assert tx.state is TransactionState.ROLLED_BACK
    assert events == ["rollback"]
    assert db.query(Genre).count() == 0


def test_backend_errors_are_classified(db):
    with Transaction(db) as tx:
        tx.insert(Genre(name="Shooter"))

    with pytest.raises(DuplicateEntry) as excinfo:
        with Transaction(db, name="genre") as tx:
            tx.insert(Genre(name="Shooter"))

    assert excinfo.value.fields == ["name"]
    assert isinstance(excinfo.value.__cause__, IntegrityError)
    assert db.query(Genre).count() == 1


def test_unexpected_errors_become_internal_failures(db):
    with pytest.raises(InternalFailure) as excinfo:
        with Transaction(db) as tx:
            tx.insert(Genre(name="Shooter"))
            raise KeyError("secret detail")

    assert excinfo.value.to_payload() == {"code": "INTERNAL_ERROR", "error": "Internal server error"}
    assert db.query(Genre).count() == 0


def test_deadline_between_steps_rolls_back(db):
    tx = Transaction(db, name="genre", timeout=0.01)
    with pytest.raises(InternalFailure):
        with tx:
            tx.insert(Genre(name="Slow"))
            time.sleep(0.05)
            tx.insert(Genre(name="Slower"))

    assert tx.state is TransactionState.ROLLED_BACK
    assert db.query(Genre).count() == 0


def test_deadline_is_checked_at_commit(db):
    with pytest.raises(InternalFailure):
        with Transaction(db, timeout=0.01) as tx:
            tx.insert(Genre(name="Slow"))
            time.sleep(0.05)

    assert db.query(Genre).count() == 0


def test_zero_timeout_disables_the_deadline(db):
    with Transaction(db, timeout=0) as tx:
        tx.insert(Genre(name="Patient"))
    assert db.query(Genre).count() == 1


def test_transaction_is_single_use(db):
    tx = Transaction(db)
    with tx:
        pass
    with pytest.raises(RuntimeError):
        with tx:
            pass


def test_steps_outside_the_block_are_refused(db):
    tx = Transaction(db)
    with pytest.raises(RuntimeError):
        tx.step(lambda: None)


def test_failing_callback_does_not_undo_the_commit(db):
    tx = Transaction(db)
    tx.after_commit(lambda: 1 / 0)

    with tx:
        tx.insert(Genre(name="Kept"))

    assert tx.state is TransactionState.COMMITTED
    assert db.query(Genre).count() == 1


def test_statement_timeout_failure_rolls_back(db, monkeypatch):
    events = []
    tx = Transaction(db, name="genre")
    tx.after_rollback(lambda: events.append("rollback"))

    def refuse():
        raise OperationalError("SET LOCAL statement_timeout = 30000", {}, Exception("server closed"))

    monkeypatch.setattr(tx, "_apply_statement_timeout", refuse)

    with pytest.raises(InternalFailure):
        with tx:
            tx.insert(Genre(name="Never"))

    assert tx.state is TransactionState.ROLLED_BACK
    assert events == ["rollback"]
    assert db.query(Genre).count() == 0
