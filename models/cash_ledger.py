from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String

from config.database import Base

SOURCE_SETTLEMENT = "SETTLEMENT"


class CashLedgerEntry(Base):
    """
    Lançamento de crédito no caixa fora do fluxo de pedidos
    (ex.: recebimento de fiado). Somado ao esperado no fechamento.
    """

    __tablename__ = "cash_ledger_entries"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("cash_sessions.id"), nullable=False, index=True)
    source = Column(String(20), nullable=False, default=SOURCE_SETTLEMENT)
    bucket = Column(String(10), nullable=False)  # CASH / PIX / CREDIT / DEBIT / OTHER
    payment_method = Column(String(50), nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)
    reference = Column(String(200), nullable=True)
    receivable_id = Column(Integer, ForeignKey("receivables.id"), nullable=True)
    actor_id = Column(Integer, nullable=True)
    actor_name = Column(String(100), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
