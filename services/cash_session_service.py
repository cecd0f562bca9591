"""
Controle do ciclo de vida das sessões de caixa.

Estados: OPEN -> CLOSED -> OPEN (reabertura) -> CLOSED ...

- Apenas uma sessão OPEN no sistema todo (consulta + índice único parcial).
- O fechamento grava informado, esperado, diferença e dados de fechamento
  em um único UPDATE, na mesma transação da apuração.
- Reabrir e revisar são ações privilegiadas: a permissão é verificada pelo
  `authorizer` recebido, não por perfis fixos aqui dentro.
"""
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from typing import Callable, Mapping, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config.logging_config import get_logger
from models.cash_session import (
    CLOSE_SNAPSHOT_FIELDS,
    STATUS_CLOSED,
    STATUS_OPEN,
    CashSession,
)
from services.audit_service import (
    ACTION_CLOSE,
    ACTION_INCONSISTENT_PAYMENT,
    ACTION_OPEN,
    ACTION_REOPEN,
    ACTION_REVIEW,
    AuditService,
)
from services.exceptions import (
    ConflictError,
    InvalidStateError,
    NoOpenSessionError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from services.permissions import (
    ACTION_REOPEN_SESSION,
    ACTION_REVIEW_SESSION,
    Actor,
    Authorizer,
    role_allows,
)
from services.reconciliation_service import ReconciliationTotals, compute_expected_totals
from utils.money import ZERO, parse_amount, to_money

logger = get_logger(__name__)

REPORTED_FIELDS = ("cash", "pix", "credit", "debit")
MSG_ALREADY_OPEN = "Já existe um caixa aberto."


def parse_reported_amounts(reported: Optional[Mapping]) -> dict[str, Decimal]:
    """
    Valida os valores contados pelo operador. Todos os quatro campos são
    obrigatórios: assumir zero distorceria a diferença.
    """
    if reported is None:
        raise ValidationError("Informe os valores contados no caixa.", field="reported")
    return {name: parse_amount(reported.get(name), name) for name in REPORTED_FIELDS}


@dataclass
class SessionSummary:
    """Sessão com os totais esperados (gravados ou apurados agora)."""

    session: CashSession
    expected: ReconciliationTotals
    live: bool = False

    @property
    def reported_total(self) -> Optional[Decimal]:
        return self.session.reported_total

    @property
    def difference(self) -> Optional[Decimal]:
        if self.session.difference is None:
            return None
        return to_money(self.session.difference)


class CashSessionService:
    def __init__(
        self,
        db: Session,
        authorizer: Authorizer = role_allows,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.db = db
        self.authorizer = authorizer
        self.clock = clock

    # ----- Consultas -----

    def get_active_session(self) -> Optional[CashSession]:
        return self.db.query(CashSession).filter(CashSession.status == STATUS_OPEN).first()

    def get_session(self, session_id: int) -> CashSession:
        session = self.db.get(CashSession, session_id)
        if session is None:
            raise NotFoundError("Caixa não encontrado.", entity="CashSession", entity_id=session_id)
        return session

    def preview_closure(self) -> ReconciliationTotals:
        """Valores esperados do caixa aberto, apurados agora."""
        session = self.get_active_session()
        if session is None:
            raise NoOpenSessionError()
        return compute_expected_totals(self.db, session, until=self.clock())

    def list_sessions(
        self,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[SessionSummary]:
        """
        Sessões com abertura no intervalo [start, end] (datas inclusivas),
        da mais recente para a mais antiga. Sessões abertas são apuradas agora.
        """
        start_dt = _as_bound(start, time.min)
        end_dt = _as_bound(end, time.max)
        if start_dt and end_dt and start_dt > end_dt:
            raise ValidationError("Data inicial maior que a data final.", field="start", value=start)

        query = self.db.query(CashSession)
        if start_dt:
            query = query.filter(CashSession.opened_at >= start_dt)
        if end_dt:
            query = query.filter(CashSession.opened_at <= end_dt)
        sessions = query.order_by(CashSession.opened_at.desc(), CashSession.id.desc()).all()

        now = self.clock()
        summaries = []
        for session in sessions:
            if session.status == STATUS_OPEN:
                totals = compute_expected_totals(self.db, session, until=now)
                summaries.append(SessionSummary(session, totals, live=True))
            else:
                summaries.append(SessionSummary(session, ReconciliationTotals.from_session(session)))
        return summaries

    # ----- Transições -----

    def open_session(
        self,
        initial_balance,
        actor: Actor,
        observations: Optional[str] = None,
    ) -> CashSession:
        balance = parse_amount(initial_balance, "initial_balance")

        active = self.get_active_session()
        if active is not None:
            raise ConflictError(MSG_ALREADY_OPEN, open_session_id=active.id)

        session = CashSession(
            opened_at=self.clock(),
            opened_by_id=actor.id,
            opened_by_name=actor.name,
            initial_balance=balance,
            settlement_total=ZERO,
            status=STATUS_OPEN,
            observations=observations or None,
        )
        self.db.add(session)
        try:
            self.db.flush()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError(MSG_ALREADY_OPEN) from None

        AuditService.record(
            self.db,
            actor,
            ACTION_OPEN,
            f"Abertura do caixa {session.id} com troco inicial R$ {balance:.2f}",
        )
        self.db.commit()
        self.db.refresh(session)
        logger.info("Caixa %s aberto por %s (troco %s)", session.id, actor.name, balance)
        return session

    def close_session(
        self,
        session_id: int,
        reported: Mapping,
        observations: Optional[str],
        actor: Actor,
    ) -> CashSession:
        if actor is None:
            raise ValidationError("Informe o operador do fechamento.", field="actor")
        amounts = parse_reported_amounts(reported)
        session = self.get_session(session_id)
        if session.status != STATUS_OPEN:
            raise InvalidStateError(
                "Caixa já está fechado.", session_id=session_id, status=session.status
            )

        # Trava a linha antes de apurar: outro fechamento ou recebimento
        # concorrente espera esta transação terminar.
        if not self._claim(session_id, STATUS_OPEN):
            self.db.rollback()
            raise InvalidStateError("Caixa já está fechado.", session_id=session_id, status=STATUS_CLOSED)

        closed_at = self.clock()
        totals = compute_expected_totals(self.db, session, until=closed_at)
        reported_total = sum(amounts.values(), ZERO)
        difference = reported_total - totals.total

        self.db.execute(
            update(CashSession)
            .where(CashSession.id == session_id, CashSession.status == STATUS_OPEN)
            .values(
                status=STATUS_CLOSED,
                closed_at=closed_at,
                closed_by_id=actor.id,
                closed_by_name=actor.name,
                reported_cash=amounts["cash"],
                reported_pix=amounts["pix"],
                reported_credit=amounts["credit"],
                reported_debit=amounts["debit"],
                system_cash=totals.cash,
                system_pix=totals.pix,
                system_credit=totals.credit,
                system_debit=totals.debit,
                system_other=totals.other,
                total_sales=totals.total,
                difference=difference,
                observations=observations if observations is not None else session.observations,
            )
            .execution_options(synchronize_session=False)
        )

        AuditService.record(
            self.db,
            actor,
            ACTION_CLOSE,
            f"Fechamento do caixa {session_id}: informado R$ {reported_total:.2f}, "
            f"esperado R$ {totals.total:.2f}, diferença R$ {difference:.2f}",
        )
        for issue in totals.issues:
            AuditService.record(self.db, actor, ACTION_INCONSISTENT_PAYMENT, issue.message)

        self.db.commit()
        self.db.refresh(session)
        logger.info(
            "Caixa %s fechado: esperado %s, informado %s, diferença %s",
            session_id,
            totals.total,
            reported_total,
            difference,
        )
        return session

    def reopen_session(self, session_id: int, actor: Actor) -> CashSession:
        """
        Reabre um caixa fechado (ação privilegiada). O turno continua:
        abertura, operador e troco inicial não mudam.

        O esperado continua sendo apurado a partir da abertura original.
        Se outro caixa funcionou entre o fechamento e a reabertura, os
        pedidos dele entram de novo no esperado deste caixa; o histórico
        aponta esses casos (report_service.overlapping_sessions).
        """
        self._authorize(actor, ACTION_REOPEN_SESSION)
        session = self.get_session(session_id)
        if session.status == STATUS_OPEN:
            raise InvalidStateError("Este caixa já está aberto.", session_id=session_id, status=STATUS_OPEN)

        active = self.get_active_session()
        if active is not None:
            raise ConflictError(
                "Já existe um caixa aberto. Feche o atual antes de reabrir este.",
                open_session_id=active.id,
            )

        values = {name: None for name in CLOSE_SNAPSHOT_FIELDS}
        values["status"] = STATUS_OPEN
        try:
            result = self.db.execute(
                update(CashSession)
                .where(CashSession.id == session_id, CashSession.status == STATUS_CLOSED)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
        except IntegrityError:
            self.db.rollback()
            raise ConflictError(
                "Já existe um caixa aberto. Feche o atual antes de reabrir este."
            ) from None
        if result.rowcount != 1:
            self.db.rollback()
            raise InvalidStateError("Este caixa já está aberto.", session_id=session_id, status=STATUS_OPEN)

        AuditService.record(self.db, actor, ACTION_REOPEN, f"Reabertura do caixa {session_id}")
        self.db.commit()
        self.db.refresh(session)
        logger.info("Caixa %s reaberto por %s", session_id, actor.name)
        return session

    def review_session(
        self,
        session_id: int,
        reported: Mapping,
        observations: Optional[str],
        actor: Actor,
    ) -> CashSession:
        """
        Corrige os valores informados de um caixa fechado. O esperado
        gravado no fechamento não muda; a diferença é recalculada.
        """
        self._authorize(actor, ACTION_REVIEW_SESSION)
        amounts = parse_reported_amounts(reported)
        session = self.get_session(session_id)
        if session.status != STATUS_CLOSED:
            raise InvalidStateError(
                "Apenas caixas fechados podem ser revisados.", session_id=session_id, status=session.status
            )

        reported_total = sum(amounts.values(), ZERO)
        difference = reported_total - to_money(session.total_sales)
        closed_by_name = f"{session.closed_by_name or ''} (Alt: {actor.name})".strip()[:200]

        result = self.db.execute(
            update(CashSession)
            .where(CashSession.id == session_id, CashSession.status == STATUS_CLOSED)
            .values(
                reported_cash=amounts["cash"],
                reported_pix=amounts["pix"],
                reported_credit=amounts["credit"],
                reported_debit=amounts["debit"],
                difference=difference,
                observations=observations,
                closed_by_name=closed_by_name,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            self.db.rollback()
            raise InvalidStateError(
                "Apenas caixas fechados podem ser revisados.", session_id=session_id, status=STATUS_OPEN
            )

        AuditService.record(
            self.db,
            actor,
            ACTION_REVIEW,
            f"Revisão do caixa {session_id}: informado R$ {reported_total:.2f}, diferença R$ {difference:.2f}",
        )
        self.db.commit()
        self.db.refresh(session)
        logger.info("Caixa %s revisado por %s (diferença %s)", session_id, actor.name, difference)
        return session

    # ----- Internos -----

    def _authorize(self, actor: Actor, action: str) -> None:
        if actor is None or not self.authorizer(actor, action):
            raise PermissionDeniedError(
                "Você não tem permissão para esta operação.",
                action=action,
                actor_id=actor.id if actor else None,
            )

    def _claim(self, session_id: int, status: str) -> bool:
        """
        Escrita neutra condicionada ao status: trava a linha (PostgreSQL)
        ou o banco (SQLite) até o fim da transação.
        """
        result = self.db.execute(
            update(CashSession)
            .where(CashSession.id == session_id, CashSession.status == status)
            .values(status=CashSession.status)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1


def _as_bound(value, bound: time) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, bound)
