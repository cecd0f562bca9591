"""
Fixtures do Caixa.

Cada teste usa um banco SQLite próprio em arquivo (tmp_path), para que os
testes de concorrência possam abrir várias conexões ao mesmo banco.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from sqlalchemy.orm import sessionmaker

from config.database import init_db, make_engine
from models.order import Order
from models.receivable import Receivable
from services.cash_session_service import CashSessionService
from services.permissions import Actor
from services.settlement_service import SettlementService


class FakeClock:
    """Relógio controlado pelos testes (UTC sem fuso, como no banco)."""

    def __init__(self, start: datetime = datetime(2026, 3, 10, 18, 0, 0)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def engine(tmp_path):
    test_engine = make_engine(f"sqlite:///{tmp_path / 'caixa_test.db'}")
    init_db(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def admin():
    return Actor(id=1, name="Ana Admin", role="admin")


@pytest.fixture
def cashier():
    return Actor(id=2, name="Carlos Caixa", role="caixa")


@pytest.fixture
def cash_service(db, clock):
    return CashSessionService(db, clock=clock)


@pytest.fixture
def settlement_service(db, clock):
    return SettlementService(db, clock=clock)


@pytest.fixture
def add_order(db, clock):
    """Cria um pedido; por padrão entregue e criado "agora" no relógio dos testes."""

    def _add_order(total, payment_method="DINHEIRO", split_amount1=None, status="DELIVERED", created_at=None):
        order = Order(
            created_at=created_at or clock(),
            status=status,
            total=Decimal(str(total)),
            payment_method=payment_method,
            split_amount1=Decimal(str(split_amount1)) if split_amount1 is not None else None,
        )
        db.add(order)
        db.commit()
        db.refresh(order)
        return order

    return _add_order


@pytest.fixture
def add_receivable(db):
    def _add_receivable(amount, debtor_name="João da Silva"):
        receivable = Receivable(debtor_name=debtor_name, amount=Decimal(str(amount)))
        db.add(receivable)
        db.commit()
        db.refresh(receivable)
        return receivable

    return _add_receivable


@pytest.fixture
def open_session(cash_service, cashier, clock):
    """Caixa aberto uma hora antes do relógio atual dos testes."""
    session = cash_service.open_session("100.00", cashier)
    clock.advance(hours=1)
    return session


def reported(cash=0, pix=0, credit=0, debit=0) -> dict:
    return {"cash": cash, "pix": pix, "credit": credit, "debit": debit}
