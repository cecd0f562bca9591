from datetime import date, datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String

from config.database import Base

STATUS_PENDING = "PENDING"
STATUS_PAID = "PAID"


class Receivable(Base):
    """
    Contas a receber (fiado).
    """

    __tablename__ = "receivables"

    id = Column(Integer, primary_key=True, index=True)
    debtor_name = Column(String(200), nullable=False)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=True)
    amount = Column(Numeric(12, 2), nullable=False, default=0)
    due_date = Column(Date, nullable=True)
    status = Column(String(20), nullable=False, default=STATUS_PENDING)  # PENDING / PAID
    payment_method = Column(String(50), nullable=True)
    paid_at = Column(DateTime, nullable=True)
    observations = Column(String(255), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    @property
    def is_overdue(self) -> bool:
        return (
            self.status == STATUS_PENDING
            and self.due_date is not None
            and self.due_date < date.today()
        )
