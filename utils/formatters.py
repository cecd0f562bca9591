from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Union

import locale

# Tenta usar locale pt_BR para formatação monetária, se disponível
try:
    locale.setlocale(locale.LC_ALL, "pt_BR.UTF-8")
except locale.Error:
    # Em alguns ambientes o locale pode ter outro nome ou não estar disponível.
    pass

Number = Union[int, float, Decimal]


def format_currency(value: Optional[Number]) -> str:
    """
    Formata um número como moeda em reais.
    """
    if value is None:
        return "-"
    try:
        return locale.currency(value, grouping=True)
    except ValueError:
        return f"R$ {value:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")


def format_difference(value: Optional[Number]) -> str:
    """
    Diferença do fechamento: positiva = sobra, negativa = falta.
    """
    if value is None:
        return "-"
    if value > 0:
        return f"Sobra {format_currency(value)}"
    if value < 0:
        return f"Falta {format_currency(-value)}"
    return "Sem diferença"


def format_date(d: Optional[Union[date, datetime]]) -> str:
    """
    Formata datas no padrão brasileiro.
    """
    if d is None:
        return "-"
    if isinstance(d, datetime):
        return d.strftime("%d/%m/%Y %H:%M")
    return d.strftime("%d/%m/%Y")
