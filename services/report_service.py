"""
Relatórios de sessões de caixa por período.
"""
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

import pandas as pd
from dateutil.relativedelta import relativedelta

from services.cash_session_service import SessionSummary
from services.exceptions import ValidationError
from utils.money import ZERO, to_money

PERIOD_PRESETS = ("hoje", "semana", "mes", "mes_anterior", "geral")

DATAFRAME_COLUMNS = [
    "id",
    "status",
    "aberto_em",
    "aberto_por",
    "fechado_em",
    "fechado_por",
    "troco_inicial",
    "esperado_dinheiro",
    "esperado_pix",
    "esperado_credito",
    "esperado_debito",
    "esperado_outros",
    "esperado_total",
    "informado_total",
    "diferenca",
    "recebimentos_fiado",
]


def period_range(preset: str, today: Optional[date] = None) -> tuple[Optional[date], date]:
    """
    Intervalo de datas para os filtros do relatório.
    "geral" não tem data inicial.
    """
    today = today or date.today()
    if preset == "hoje":
        return today, today
    if preset == "semana":
        return today - relativedelta(days=6), today
    if preset == "mes":
        return today.replace(day=1), today
    if preset == "mes_anterior":
        first_this_month = today.replace(day=1)
        start = first_this_month - relativedelta(months=1)
        return start, first_this_month - relativedelta(days=1)
    if preset == "geral":
        return None, today
    raise ValidationError(f"Período desconhecido: {preset}", field="preset", value=preset)


def sessions_to_dataframe(summaries: Sequence[SessionSummary]) -> pd.DataFrame:
    rows = []
    for summary in summaries:
        s = summary.session
        rows.append(
            {
                "id": s.id,
                "status": s.status,
                "aberto_em": s.opened_at,
                "aberto_por": s.opened_by_name,
                "fechado_em": s.closed_at,
                "fechado_por": s.closed_by_name,
                "troco_inicial": float(to_money(s.initial_balance)),
                "esperado_dinheiro": float(summary.expected.cash),
                "esperado_pix": float(summary.expected.pix),
                "esperado_credito": float(summary.expected.credit),
                "esperado_debito": float(summary.expected.debit),
                "esperado_outros": float(summary.expected.other),
                "esperado_total": float(summary.expected.total),
                "informado_total": _optional_float(summary.reported_total),
                "diferenca": _optional_float(summary.difference),
                "recebimentos_fiado": float(summary.expected.settlement_total),
            }
        )
    return pd.DataFrame(rows, columns=DATAFRAME_COLUMNS)


@dataclass
class PeriodSummary:
    session_count: int
    open_count: int
    expected_total: Decimal
    reported_total: Decimal
    difference_total: Decimal
    shortfall_sessions: int
    surplus_sessions: int


def summarize_period(summaries: Sequence[SessionSummary]) -> PeriodSummary:
    """
    Totais do período. Informado e diferença consideram só caixas fechados.
    """
    expected_total = ZERO
    reported_total = ZERO
    difference_total = ZERO
    shortfall = surplus = open_count = 0
    for summary in summaries:
        expected_total += summary.expected.total
        if summary.live:
            open_count += 1
            continue
        reported_total += to_money(summary.reported_total)
        difference = summary.difference or ZERO
        difference_total += difference
        if difference < 0:
            shortfall += 1
        elif difference > 0:
            surplus += 1
    return PeriodSummary(
        session_count=len(summaries),
        open_count=open_count,
        expected_total=expected_total,
        reported_total=reported_total,
        difference_total=difference_total,
        shortfall_sessions=shortfall,
        surplus_sessions=surplus,
    )


def overlapping_sessions(
    summaries: Sequence[SessionSummary], now: Optional[datetime] = None
) -> list[tuple[int, int]]:
    """
    Pares de ids (aberto antes, aberto depois) de caixas com períodos sobrepostos.
    Acontece quando um caixa é reaberto depois de outro turno: o esperado
    dele inclui de novo os pedidos daquele turno.
    """
    now = now or datetime.utcnow()
    intervals = sorted(
        (s.session.opened_at, s.session.closed_at or now, s.session.id) for s in summaries
    )
    pairs = []
    for i, (start, end, session_id) in enumerate(intervals):
        for other_start, _, other_id in intervals[i + 1 :]:
            if other_start >= end:
                break
            pairs.append((session_id, other_id))
    return pairs


def _optional_float(value) -> Optional[float]:
    return None if value is None else float(value)
