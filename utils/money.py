from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from services.exceptions import ValidationError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
# Limite das colunas Numeric(12, 2)
MAX_AMOUNT = Decimal("9999999999.99")


def to_money(value: Any) -> Decimal:
    """
    Converte para Decimal com 2 casas. None vira zero (dados de pedido).
    Para entradas do operador use parse_amount.
    """
    if value is None:
        return ZERO
    if isinstance(value, float):
        value = repr(value)
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def parse_amount(value: Any, field: str, allow_zero: bool = True) -> Decimal:
    """
    Valida um valor monetário informado pelo operador.
    Rejeita ausente, não numérico, NaN/infinito, negativo e acima de MAX_AMOUNT.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"Valor obrigatório não informado: {field}.", field=field)
    if isinstance(value, bool):
        raise ValidationError(f"Valor inválido em {field}.", field=field, value=value)
    try:
        if isinstance(value, str):
            amount = Decimal(value.strip().replace(",", "."))
        elif isinstance(value, float):
            amount = Decimal(repr(value))
        else:
            amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"Valor inválido em {field}.", field=field, value=value) from None

    if not amount.is_finite():
        raise ValidationError(f"Valor inválido em {field}.", field=field, value=value)
    if amount < 0:
        raise ValidationError(f"Valor negativo não permitido em {field}.", field=field, value=value)
    if amount > MAX_AMOUNT:
        raise ValidationError(f"Valor acima do limite em {field}.", field=field, value=value)
    try:
        amount = amount.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValidationError(f"Valor inválido em {field}.", field=field, value=value) from None
    if not allow_zero and amount == 0:
        raise ValidationError(f"Valor deve ser maior que zero em {field}.", field=field, value=value)
    return amount
