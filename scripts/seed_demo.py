"""
Cria pedidos entregues e fiados de teste para validar o fechamento
de caixa no Streamlit. Rode com o caixa já aberto: só entram no
esperado pedidos criados depois da abertura.
"""
import sys
from datetime import date, datetime, timedelta
from decimal import Decimal
from pathlib import Path

# Garante que o diretório raiz esteja no sys.path
_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from config.database import SessionLocal, init_db
from config.logging_config import configure_logging
from models.order import Order
from models.receivable import Receivable

# (total, forma de pagamento, valor da primeira forma, status)
DEMO_ORDERS = [
    ("100.00", "DINHEIRO", None, "DELIVERED"),
    ("50.00", "PIX", None, "DELIVERED"),
    ("80.00", "DINHEIRO + PIX", "30.00", "DELIVERED"),
    ("65.90", "CRÉDITO", None, "DELIVERED"),
    ("42.00", "DÉBITO", None, "DELIVERED"),
    ("120.00", "PIX + CRÉDITO", "20.00", "DELIVERED"),
    ("35.00", "DINHEIRO", None, "CANCELED"),
    ("28.00", "VALE REFEIÇÃO", None, "DELIVERED"),
]

DEMO_RECEIVABLES = [
    ("João da Silva", "45.00", 3),
    ("Maria Souza", "120.50", -2),
]


def main() -> None:
    logger = configure_logging()
    init_db()
    db = SessionLocal()
    try:
        agora = datetime.utcnow()
        for i, (total, metodo, split, status) in enumerate(DEMO_ORDERS):
            db.add(
                Order(
                    created_at=agora,
                    status=status,
                    total=Decimal(total),
                    payment_method=metodo,
                    split_amount1=Decimal(split) if split else None,
                    table_number=i + 1,
                )
            )
        for nome, valor, dias in DEMO_RECEIVABLES:
            db.add(
                Receivable(
                    debtor_name=nome,
                    amount=Decimal(valor),
                    due_date=date.today() + timedelta(days=dias),
                )
            )
        db.commit()
        logger.info(
            "Criados %s pedidos e %s fiados de teste.", len(DEMO_ORDERS), len(DEMO_RECEIVABLES)
        )
    finally:
        db.close()


if __name__ == "__main__":
    main()
