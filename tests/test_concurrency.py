"""
Operações concorrentes em conexões separadas ao mesmo banco SQLite.
"""
import threading
from decimal import Decimal

from conftest import reported
from models.cash_ledger import CashLedgerEntry
from models.cash_session import STATUS_OPEN, CashSession
from services.cash_session_service import CashSessionService
from services.exceptions import ConflictError, InvalidStateError
from services.settlement_service import SettlementService


def _run_concurrently(session_factory, count, target):
    """Executa `target(db, index)` em `count` threads, cada uma com sua sessão."""
    barrier = threading.Barrier(count)
    results = [None] * count

    def worker(index):
        db = session_factory()
        try:
            barrier.wait()
            results[index] = ("ok", target(db, index))
        except Exception as exc:  # noqa: BLE001
            results[index] = ("error", exc)
        finally:
            db.close()

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)
    return results


def test_concurrent_open_only_one_succeeds(session_factory, db, clock, cashier):
    results = _run_concurrently(
        session_factory,
        2,
        lambda s, i: CashSessionService(s, clock=clock).open_session(str(10 * (i + 1)), cashier).id,
    )

    successes = [value for status, value in results if status == "ok"]
    errors = [value for status, value in results if status == "error"]
    assert len(successes) == 1
    assert len(errors) == 1
    assert isinstance(errors[0], ConflictError)
    assert db.query(CashSession).filter(CashSession.status == STATUS_OPEN).count() == 1


def test_concurrent_close_only_one_succeeds(session_factory, db, clock, open_session, add_order, cashier):
    add_order(100, "DINHEIRO")
    session_id = open_session.id

    results = _run_concurrently(
        session_factory,
        2,
        lambda s, i: CashSessionService(s, clock=clock).close_session(session_id, reported(cash=100 + i), None, cashier).id,
    )

    errors = [value for status, value in results if status == "error"]
    assert [status for status, _ in results].count("ok") == 1
    assert len(errors) == 1
    assert isinstance(errors[0], InvalidStateError)

    db.expire_all()
    closed = db.get(CashSession, session_id)
    assert closed.total_sales == Decimal("100.00")
    assert closed.reported_cash in (Decimal("100.00"), Decimal("101.00"))


def test_concurrent_settlements_are_not_lost(session_factory, db, open_session, cashier):
    session_id = open_session.id
    count = 6
    results = _run_concurrently(
        session_factory,
        count,
        lambda s, i: SettlementService(s).apply_settlement("10", "DINHEIRO", f"Cliente {i}", cashier).id,
    )

    assert all(status == "ok" for status, _ in results), results
    db.expire_all()
    assert db.get(CashSession, session_id).settlement_total == Decimal("60.00")
    assert db.query(CashLedgerEntry).count() == count
