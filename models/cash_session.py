from datetime import datetime

from sqlalchemy import Column, DateTime, Index, Integer, Numeric, String, text

from config.database import Base

STATUS_OPEN = "OPEN"
STATUS_CLOSED = "CLOSED"

# Campos preenchidos juntos no fechamento e limpos juntos na reabertura
CLOSE_SNAPSHOT_FIELDS = (
    "closed_at",
    "closed_by_id",
    "closed_by_name",
    "reported_cash",
    "reported_pix",
    "reported_credit",
    "reported_debit",
    "system_cash",
    "system_pix",
    "system_credit",
    "system_debit",
    "system_other",
    "total_sales",
    "difference",
)


class CashSession(Base):
    """
    Sessões de caixa (abertura/fechamento/reabertura).
    Apenas uma sessão com status 'OPEN' pode existir por vez; o índice
    único parcial garante isso também no banco.
    """

    __tablename__ = "cash_sessions"
    __table_args__ = (
        Index(
            "uq_cash_sessions_single_open",
            "status",
            unique=True,
            sqlite_where=text("status = 'OPEN'"),
            postgresql_where=text("status = 'OPEN'"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    opened_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    opened_by_id = Column(Integer, nullable=True)
    opened_by_name = Column(String(100), nullable=True)
    initial_balance = Column(Numeric(12, 2), nullable=False, default=0)
    status = Column(String(20), nullable=False, default=STATUS_OPEN)  # OPEN / CLOSED

    # Contador de recebimentos de fiado lançados enquanto aberta
    settlement_total = Column(Numeric(12, 2), nullable=False, default=0)

    # Fechamento (todos nulos enquanto OPEN)
    closed_at = Column(DateTime, nullable=True)
    closed_by_id = Column(Integer, nullable=True)
    closed_by_name = Column(String(200), nullable=True)
    reported_cash = Column(Numeric(12, 2), nullable=True)
    reported_pix = Column(Numeric(12, 2), nullable=True)
    reported_credit = Column(Numeric(12, 2), nullable=True)
    reported_debit = Column(Numeric(12, 2), nullable=True)
    system_cash = Column(Numeric(12, 2), nullable=True)
    system_pix = Column(Numeric(12, 2), nullable=True)
    system_credit = Column(Numeric(12, 2), nullable=True)
    system_debit = Column(Numeric(12, 2), nullable=True)
    system_other = Column(Numeric(12, 2), nullable=True)
    total_sales = Column(Numeric(12, 2), nullable=True)
    difference = Column(Numeric(12, 2), nullable=True)
    observations = Column(String(500), nullable=True)

    @property
    def is_open(self) -> bool:
        return self.status == STATUS_OPEN

    @property
    def reported_total(self):
        values = (self.reported_cash, self.reported_pix, self.reported_credit, self.reported_debit)
        if any(v is None for v in values):
            return None
        return sum(values)

    def __repr__(self) -> str:
        return f"<CashSession id={self.id} status={self.status} opened_at={self.opened_at}>"
