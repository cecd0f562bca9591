from datetime import datetime, timedelta
from decimal import Decimal

from models.cash_ledger import CashLedgerEntry
from models.order import Order
from services.payment_methods import PaymentBucket
from services.reconciliation_service import aggregate_orders, compute_expected_totals


def _order(order_id, total, method, split=None):
    return Order(
        id=order_id,
        total=Decimal(total),
        payment_method=method,
        split_amount1=Decimal(split) if split is not None else None,
    )


def test_aggregate_orders_sums_by_bucket():
    amounts, count, issues = aggregate_orders(
        [
            _order(1, "100", "DINHEIRO"),
            _order(2, "50", "PIX"),
            _order(3, "90", "CRÉDITO + DÉBITO", "40"),
        ]
    )
    assert count == 3
    assert issues == []
    assert amounts[PaymentBucket.CASH] == Decimal("100.00")
    assert amounts[PaymentBucket.PIX] == Decimal("50.00")
    assert amounts[PaymentBucket.CREDIT] == Decimal("40.00")
    assert amounts[PaymentBucket.DEBIT] == Decimal("50.00")


def test_aggregate_orders_reports_inconsistent_orders():
    amounts, count, issues = aggregate_orders([_order(7, "20", "PIX + DINHEIRO", "25")])
    assert count == 1
    assert [issue.order_id for issue in issues] == [7]
    assert issues[0].code == "INCONSISTENT_PAYMENT_DATA"
    assert amounts[PaymentBucket.PIX] == Decimal("20.00")
    assert amounts[PaymentBucket.CASH] == Decimal("0.00")


def test_upper_bound_excludes_later_orders(db, open_session, add_order, clock):
    add_order(10, "PIX")
    cutoff = clock()
    add_order(99, "PIX", created_at=cutoff + timedelta(minutes=1))

    totals = compute_expected_totals(db, open_session, until=cutoff)

    assert totals.pix == Decimal("10.00")
    assert totals.order_count == 1


def test_ledger_entries_are_added_to_expected(db, open_session, add_order):
    add_order(3, "DINHEIRO")
    db.add(CashLedgerEntry(session_id=open_session.id, bucket="CASH", amount=Decimal("7.00")))
    db.commit()

    totals = compute_expected_totals(db, open_session, until=datetime(2030, 1, 1))

    assert totals.cash == Decimal("10.00")
    assert totals.settlement_total == Decimal("7.00")
    assert totals.as_dict()["total"] == Decimal("10.00")
