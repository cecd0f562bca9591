from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, Numeric, String

from config.database import Base


class Order(Base):
    """
    Pedido (mesa, balcão ou entrega). Mantido pelo módulo de pedidos;
    o caixa apenas lê os pedidos finalizados.
    payment_method pode ser composto: "DINHEIRO + PIX", com split_amount1
    sendo o valor pago na primeira forma.
    """

    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    status = Column(String(20), nullable=False, default="PENDING")  # PENDING ... DELIVERED / CANCELED
    total = Column(Numeric(12, 2), nullable=False, default=0)
    payment_method = Column(String(100), nullable=True)
    split_amount1 = Column(Numeric(12, 2), nullable=True)
    table_number = Column(Integer, nullable=True)
    customer_name = Column(String(200), nullable=True)
