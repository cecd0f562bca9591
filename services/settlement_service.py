"""
Recebimentos fora do fluxo de pedidos (baixa de fiado).

O valor recebido entra no caixa aberto como lançamento avulso
(CashLedgerEntry), somado ao esperado no fechamento junto com os pedidos.
Sem caixa aberto o recebimento é recusado: nada é gravado.
"""
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from config.logging_config import get_logger
from models.cash_ledger import SOURCE_SETTLEMENT, CashLedgerEntry
from models.cash_session import STATUS_OPEN, CashSession
from models.receivable import STATUS_PAID, STATUS_PENDING, Receivable
from services.audit_service import ACTION_SETTLEMENT, AuditService
from services.exceptions import InvalidStateError, NoOpenSessionError, NotFoundError, ValidationError
from services.payment_methods import classify_method
from services.permissions import Actor
from utils.money import parse_amount

logger = get_logger(__name__)

MSG_NO_OPEN_SESSION = "Nenhum caixa aberto: abra o caixa antes de registrar o recebimento."


class SettlementService:
    def __init__(self, db: Session, clock: Callable[[], datetime] = datetime.utcnow):
        self.db = db
        self.clock = clock

    def apply_settlement(
        self,
        amount,
        payment_method: str,
        debtor_reference: str,
        actor: Optional[Actor] = None,
        receivable_id: Optional[int] = None,
        commit: bool = True,
    ) -> CashLedgerEntry:
        """
        Lança o recebimento no caixa aberto.

        O contador da sessão é incrementado no próprio UPDATE (sem
        ler-modificar-gravar em Python) e o UPDATE só vale se a sessão
        ainda estiver OPEN, o que também trava a linha até o commit.
        """
        value = parse_amount(amount, "amount", allow_zero=False)
        if not payment_method or not payment_method.strip():
            raise ValidationError("Método de pagamento obrigatório.", field="payment_method")
        bucket = classify_method(payment_method)

        open_session_id = (
            self.db.query(CashSession.id).filter(CashSession.status == STATUS_OPEN).scalar()
        )
        if open_session_id is None:
            raise NoOpenSessionError(MSG_NO_OPEN_SESSION)

        result = self.db.execute(
            update(CashSession)
            .where(CashSession.id == open_session_id, CashSession.status == STATUS_OPEN)
            .values(settlement_total=CashSession.settlement_total + value)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            self.db.rollback()
            raise NoOpenSessionError(MSG_NO_OPEN_SESSION)

        entry = CashLedgerEntry(
            session_id=open_session_id,
            source=SOURCE_SETTLEMENT,
            bucket=bucket.value,
            payment_method=payment_method.strip(),
            amount=value,
            reference=debtor_reference,
            receivable_id=receivable_id,
            actor_id=actor.id if actor else None,
            actor_name=actor.name if actor else None,
            created_at=self.clock(),
        )
        self.db.add(entry)
        AuditService.record(
            self.db,
            actor,
            ACTION_SETTLEMENT,
            f"Baixa de fiado R$ {value:.2f} do cliente {debtor_reference or 'N/A'} "
            f"em {payment_method.strip()} (caixa {open_session_id})",
        )
        if commit:
            self.db.commit()
            self.db.refresh(entry)
        else:
            self.db.flush()

        logger.info(
            "Recebimento de %s (%s) lançado no caixa %s para %s",
            value,
            bucket.value,
            open_session_id,
            debtor_reference,
        )
        return entry

    def receive_payment(self, receivable_id: int, payment_method: str, actor: Optional[Actor] = None) -> Receivable:
        """
        Dá baixa em um fiado e lança o valor no caixa aberto, na mesma
        transação: ou os dois acontecem ou nenhum.
        """
        if not payment_method or not payment_method.strip():
            raise ValidationError("Método de pagamento obrigatório.", field="payment_method")

        receivable = self.db.get(Receivable, receivable_id)
        if receivable is None:
            raise NotFoundError("Recebimento não encontrado.", entity="Receivable", entity_id=receivable_id)
        if receivable.status == STATUS_PAID:
            raise InvalidStateError("Este título já foi pago.", status=STATUS_PAID)

        result = self.db.execute(
            update(Receivable)
            .where(Receivable.id == receivable_id, Receivable.status == STATUS_PENDING)
            .values(status=STATUS_PAID, payment_method=payment_method.strip(), paid_at=self.clock())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            self.db.rollback()
            raise InvalidStateError("Este título já foi pago.", status=STATUS_PAID)

        try:
            self.apply_settlement(
                receivable.amount,
                payment_method,
                receivable.debtor_name,
                actor=actor,
                receivable_id=receivable.id,
                commit=False,
            )
        except Exception:
            self.db.rollback()
            raise

        self.db.commit()
        self.db.refresh(receivable)
        return receivable

