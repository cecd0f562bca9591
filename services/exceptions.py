"""
Exceções tipadas do Caixa.

Cada exceção tem um `code` estável (para API/UI) e carrega os dados
relevantes como atributos, para que quem chama trate por tipo e não
por texto da mensagem:

    CashError
    |
    +-- ConflictError              (viola "apenas um caixa aberto")
    +-- InvalidStateError          (operação inválida para o status atual)
    |   +-- NoOpenSessionError     (nenhum caixa aberto)
    +-- NotFoundError              (registro inexistente)
    +-- ValidationError            (valor monetário inválido ou ausente)
    +-- PermissionDeniedError      (ação restrita a perfil privilegiado)
    +-- InconsistentPaymentDataError  (soft: registrado, nunca lançado
                                       pela apuração)
"""
from decimal import Decimal
from typing import Any, Optional


class CashError(Exception):
    """Base de todos os erros do Caixa."""

    code: str = "CASH_ERROR"

    def __init__(self, message: str, **data: Any):
        super().__init__(message)
        self.message = message
        self.data = data

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, **self.data}


class ConflictError(CashError):
    code = "CONFLICT"

    def __init__(self, message: str, open_session_id: Optional[int] = None):
        super().__init__(message, open_session_id=open_session_id)
        self.open_session_id = open_session_id


class InvalidStateError(CashError):
    code = "INVALID_STATE"

    def __init__(self, message: str, session_id: Optional[int] = None, status: Optional[str] = None):
        super().__init__(message, session_id=session_id, status=status)
        self.session_id = session_id
        self.status = status


class NoOpenSessionError(InvalidStateError):
    code = "NO_OPEN_SESSION"

    def __init__(self, message: str = "Nenhum caixa aberto no momento."):
        super().__init__(message)


class NotFoundError(CashError):
    code = "NOT_FOUND"

    def __init__(self, message: str, entity: str = "", entity_id: Any = None):
        super().__init__(message, entity=entity, entity_id=entity_id)
        self.entity = entity
        self.entity_id = entity_id


class ValidationError(CashError):
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        super().__init__(message, field=field, value=value)
        self.field = field
        self.value = value


class PermissionDeniedError(CashError):
    code = "PERMISSION_DENIED"

    def __init__(self, message: str, action: str = "", actor_id: Optional[int] = None):
        super().__init__(message, action=action, actor_id=actor_id)
        self.action = action
        self.actor_id = actor_id


class InconsistentPaymentDataError(CashError):
    """
    Forma de pagamento composta cuja divisão gera restante negativo
    (ou divisão ausente). O valor é ajustado e o pedido é sinalizado.
    """

    code = "INCONSISTENT_PAYMENT_DATA"

    def __init__(
        self,
        message: str,
        order_id: Optional[int] = None,
        payment_method: Optional[str] = None,
        total: Optional[Decimal] = None,
        split_amount: Optional[Decimal] = None,
    ):
        super().__init__(
            message,
            order_id=order_id,
            payment_method=payment_method,
            total=total,
            split_amount=split_amount,
        )
        self.order_id = order_id
        self.payment_method = payment_method
        self.total = total
        self.split_amount = split_amount
