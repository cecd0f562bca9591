"""
Apuração do valor esperado de uma sessão de caixa.

Soma, por categoria de pagamento:
- os pedidos finalizados criados desde a abertura (lidos no momento da
  apuração, não no momento da abertura)
- os lançamentos avulsos da sessão (recebimentos de fiado)
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from sqlalchemy.orm import Session

from config.logging_config import get_logger
from config.settings import ORDER_COMPLETED_STATUSES
from models.cash_ledger import CashLedgerEntry
from models.cash_session import CashSession
from models.order import Order
from services.exceptions import InconsistentPaymentDataError
from services.payment_methods import PaymentBucket, empty_amounts, split_payment
from utils.money import ZERO, to_money

logger = get_logger(__name__)


@dataclass
class ReconciliationTotals:
    cash: Decimal = ZERO
    pix: Decimal = ZERO
    credit: Decimal = ZERO
    debit: Decimal = ZERO
    other: Decimal = ZERO
    order_count: int = 0
    settlement_total: Decimal = ZERO
    issues: list[InconsistentPaymentDataError] = field(default_factory=list)

    @property
    def total(self) -> Decimal:
        return self.cash + self.pix + self.credit + self.debit + self.other

    @classmethod
    def from_amounts(cls, amounts: dict[PaymentBucket, Decimal], **extra) -> "ReconciliationTotals":
        return cls(
            cash=amounts[PaymentBucket.CASH],
            pix=amounts[PaymentBucket.PIX],
            credit=amounts[PaymentBucket.CREDIT],
            debit=amounts[PaymentBucket.DEBIT],
            other=amounts[PaymentBucket.OTHER],
            **extra,
        )

    @classmethod
    def from_session(cls, session: CashSession) -> "ReconciliationTotals":
        """Totais gravados no fechamento de uma sessão fechada."""
        return cls(
            cash=to_money(session.system_cash),
            pix=to_money(session.system_pix),
            credit=to_money(session.system_credit),
            debit=to_money(session.system_debit),
            other=to_money(session.system_other),
            settlement_total=to_money(session.settlement_total),
        )

    def as_dict(self) -> dict:
        return {
            "cash": self.cash,
            "pix": self.pix,
            "credit": self.credit,
            "debit": self.debit,
            "other": self.other,
            "total": self.total,
        }


def aggregate_orders(
    orders: Iterable[Order], amounts: Optional[dict[PaymentBucket, Decimal]] = None
) -> tuple[dict[PaymentBucket, Decimal], int, list[InconsistentPaymentDataError]]:
    """Soma pedidos por categoria. Pedidos inconsistentes são ajustados e sinalizados."""
    amounts = amounts if amounts is not None else empty_amounts()
    issues = []
    count = 0
    for order in orders:
        breakdown = split_payment(order.payment_method, order.total, order.split_amount1)
        for bucket, value in breakdown.amounts.items():
            amounts[bucket] += value
        count += 1
        if breakdown.inconsistent:
            issue = InconsistentPaymentDataError(
                f"Pedido {order.id}: {breakdown.reason}",
                order_id=order.id,
                payment_method=order.payment_method,
                total=to_money(order.total),
                split_amount=order.split_amount1,
            )
            logger.warning(
                "Pagamento inconsistente no pedido %s (%s): %s",
                order.id,
                order.payment_method,
                breakdown.reason,
            )
            issues.append(issue)
    return amounts, count, issues


def completed_orders_query(
    db: Session,
    opened_at: datetime,
    until: datetime,
    statuses: Sequence[str] = ORDER_COMPLETED_STATUSES,
):
    return (
        db.query(Order)
        .filter(Order.created_at >= opened_at)
        .filter(Order.created_at <= until)
        .filter(Order.status.in_(statuses))
        .order_by(Order.id)
    )


def compute_expected_totals(
    db: Session,
    session: CashSession,
    until: Optional[datetime] = None,
    statuses: Sequence[str] = ORDER_COMPLETED_STATUSES,
) -> ReconciliationTotals:
    """
    Valor esperado da sessão entre opened_at e `until` (padrão: agora).
    """
    until = until or datetime.utcnow()
    orders = completed_orders_query(db, session.opened_at, until, statuses).all()
    amounts, order_count, issues = aggregate_orders(orders)

    entries = (
        db.query(CashLedgerEntry)
        .filter(CashLedgerEntry.session_id == session.id)
        .order_by(CashLedgerEntry.id)
        .all()
    )
    settlement_total = ZERO
    for entry in entries:
        value = to_money(entry.amount)
        amounts[PaymentBucket(entry.bucket)] += value
        settlement_total += value

    totals = ReconciliationTotals.from_amounts(
        amounts,
        order_count=order_count,
        settlement_total=settlement_total,
        issues=issues,
    )
    logger.debug(
        "Apuração da sessão %s: %s pedidos, %s lançamentos, total %s",
        session.id,
        order_count,
        len(entries),
        totals.total,
    )
    return totals
