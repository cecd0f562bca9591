"""
Registro de auditoria das operações do caixa.
"""
from typing import Optional

from sqlalchemy.orm import Session

from models.audit_log import AuditLog
from services.permissions import Actor

ACTION_OPEN = "ABERTURA_CAIXA"
ACTION_CLOSE = "FECHAMENTO_CAIXA"
ACTION_REOPEN = "REABERTURA_CAIXA"
ACTION_REVIEW = "REVISAO_CAIXA"
ACTION_SETTLEMENT = "RECEBIMENTO_FIADO"
ACTION_INCONSISTENT_PAYMENT = "PAGAMENTO_INCONSISTENTE"


class AuditService:
    """
    Grava entradas na trilha de auditoria. Não faz commit: a entrada
    entra na mesma transação da operação auditada.
    """

    @staticmethod
    def record(db: Session, actor: Optional[Actor], action: str, details: str) -> AuditLog:
        entry = AuditLog(
            user_id=actor.id if actor else None,
            user_name=(actor.name if actor and actor.name else "Sistema"),
            action=action,
            details=details,
        )
        db.add(entry)
        return entry

    @staticmethod
    def list_recent(db: Session, action: Optional[str] = None, limit: int = 100) -> list[AuditLog]:
        query = db.query(AuditLog)
        if action:
            query = query.filter(AuditLog.action == action)
        return query.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()).limit(limit).all()
