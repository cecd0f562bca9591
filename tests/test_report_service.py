from datetime import date, datetime
from decimal import Decimal

import pytest

from conftest import reported
from services.exceptions import ValidationError
from services.report_service import (
    DATAFRAME_COLUMNS,
    overlapping_sessions,
    period_range,
    sessions_to_dataframe,
    summarize_period,
)


@pytest.mark.parametrize(
    "preset, expected",
    [
        ("hoje", (date(2026, 3, 10), date(2026, 3, 10))),
        ("semana", (date(2026, 3, 4), date(2026, 3, 10))),
        ("mes", (date(2026, 3, 1), date(2026, 3, 10))),
        ("mes_anterior", (date(2026, 2, 1), date(2026, 2, 28))),
        ("geral", (None, date(2026, 3, 10))),
    ],
)
def test_period_range(preset, expected):
    assert period_range(preset, today=date(2026, 3, 10)) == expected


def test_unknown_period():
    with pytest.raises(ValidationError):
        period_range("trimestre", today=date(2026, 3, 10))


@pytest.fixture
def two_sessions(cash_service, add_order, clock, cashier):
    """Um caixa fechado com falta de 5 e um caixa aberto."""
    first = cash_service.open_session("50", cashier)
    clock.advance(hours=1)
    add_order(100, "DINHEIRO + PIX", split_amount1=60)
    cash_service.close_session(first.id, reported(cash=55, pix=40), None, cashier)

    clock.now = datetime(2026, 3, 11, 18, 0)
    cash_service.open_session("20", cashier)
    clock.advance(hours=1)
    add_order(30, "DÉBITO")
    return cash_service.list_sessions()


def test_sessions_to_dataframe(two_sessions):
    df = sessions_to_dataframe(two_sessions)

    assert list(df.columns) == DATAFRAME_COLUMNS
    assert len(df) == 2
    open_row, closed_row = df.iloc[0], df.iloc[1]
    assert open_row["status"] == "OPEN"
    assert open_row["esperado_debito"] == 30.0
    assert closed_row["esperado_dinheiro"] == 60.0
    assert closed_row["esperado_pix"] == 40.0
    assert closed_row["informado_total"] == 95.0
    assert closed_row["diferenca"] == -5.0


def test_empty_dataframe_keeps_columns():
    df = sessions_to_dataframe([])
    assert df.empty
    assert list(df.columns) == DATAFRAME_COLUMNS


def test_summarize_period(two_sessions):
    summary = summarize_period(two_sessions)

    assert summary.session_count == 2
    assert summary.open_count == 1
    assert summary.expected_total == Decimal("130.00")
    assert summary.reported_total == Decimal("95.00")
    assert summary.difference_total == Decimal("-5.00")
    assert summary.shortfall_sessions == 1
    assert summary.surplus_sessions == 0


def test_sequential_sessions_do_not_overlap(two_sessions, clock):
    assert overlapping_sessions(two_sessions, now=clock()) == []


def test_reopened_session_overlaps_the_shift_in_between(cash_service, add_order, clock, cashier, admin):
    first = cash_service.open_session("0", cashier)
    clock.advance(hours=1)
    add_order(50, "DINHEIRO")
    cash_service.close_session(first.id, reported(cash=50), None, cashier)

    clock.advance(hours=1)
    second = cash_service.open_session("0", cashier)
    clock.advance(minutes=30)
    add_order(30, "PIX")
    cash_service.close_session(second.id, reported(pix=30), None, cashier)

    clock.advance(minutes=10)
    cash_service.reopen_session(first.id, admin)
    clock.advance(minutes=10)
    reclosed = cash_service.close_session(first.id, reported(cash=50), None, cashier)

    # o esperado segue a abertura original e inclui o pedido do segundo caixa
    assert reclosed.total_sales == Decimal("80.00")
    assert overlapping_sessions(cash_service.list_sessions(), now=clock()) == [(first.id, second.id)]
