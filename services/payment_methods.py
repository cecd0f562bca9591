"""
Classificação das formas de pagamento em categorias fixas do caixa.

O rótulo vem do pedido como texto livre ("DINHEIRO", "Cartão de Crédito",
"DINHEIRO + PIX"). Rótulos compostos dividem o total entre duas formas:
a primeira recebe split_amount1 e a segunda o restante.
"""
import unicodedata
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from utils.money import ZERO, to_money

SEPARATOR = "+"


class PaymentBucket(str, Enum):
    CASH = "CASH"
    PIX = "PIX"
    CREDIT = "CREDIT"
    DEBIT = "DEBIT"
    OTHER = "OTHER"


# Ordem importa: o primeiro token encontrado define a categoria
_TOKENS = (
    ("DINHEIRO", PaymentBucket.CASH),
    ("CASH", PaymentBucket.CASH),
    ("PIX", PaymentBucket.PIX),
    ("CREDITO", PaymentBucket.CREDIT),
    ("CREDIT", PaymentBucket.CREDIT),
    ("DEBITO", PaymentBucket.DEBIT),
    ("DEBIT", PaymentBucket.DEBIT),
)


def _normalize(label: str) -> str:
    decomposed = unicodedata.normalize("NFKD", label)
    return "".join(c for c in decomposed if not unicodedata.combining(c)).upper()


def classify_method(label: Optional[str]) -> PaymentBucket:
    """Categoria de um rótulo simples; sem correspondência vai para OTHER."""
    if not label:
        return PaymentBucket.OTHER
    normalized = _normalize(label)
    for token, bucket in _TOKENS:
        if token in normalized:
            return bucket
    return PaymentBucket.OTHER


def empty_amounts() -> dict[PaymentBucket, Decimal]:
    return {bucket: ZERO for bucket in PaymentBucket}


@dataclass
class PaymentBreakdown:
    amounts: dict[PaymentBucket, Decimal] = field(default_factory=empty_amounts)
    inconsistent: bool = False
    reason: Optional[str] = None

    @property
    def total(self) -> Decimal:
        return sum(self.amounts.values(), ZERO)

    def add(self, bucket: PaymentBucket, amount: Decimal) -> None:
        self.amounts[bucket] += amount


def is_composite(label: Optional[str]) -> bool:
    return bool(label) and SEPARATOR in label


def split_payment(label: Optional[str], total: Any, split_amount1: Any = None) -> PaymentBreakdown:
    """
    Distribui o total de um pedido entre as categorias.

    >>> split_payment("DINHEIRO + PIX", 100, 40).amounts[PaymentBucket.PIX]
    Decimal('60.00')
    """
    total = to_money(total)
    breakdown = PaymentBreakdown()

    if not is_composite(label):
        breakdown.add(classify_method(label), total)
        return breakdown

    first_label, _, second_label = label.partition(SEPARATOR)
    first_label, second_label = first_label.strip(), second_label.strip()

    if split_amount1 is None:
        first_share = ZERO
        breakdown.inconsistent = True
        breakdown.reason = "pagamento composto sem valor da primeira forma"
    else:
        first_share = to_money(split_amount1)
        if first_share < 0:
            breakdown.inconsistent = True
            breakdown.reason = f"valor da primeira forma negativo ({first_share})"
            first_share = ZERO
        elif first_share > total:
            breakdown.inconsistent = True
            breakdown.reason = (
                f"valor da primeira forma ({first_share}) maior que o total ({total})"
            )
            first_share = total

    second_share = total - first_share
    if second_share < 0:
        # Total negativo no pedido
        breakdown.inconsistent = True
        breakdown.reason = breakdown.reason or f"restante negativo ({second_share})"
        second_share = ZERO

    breakdown.add(classify_method(first_label), first_share)
    breakdown.add(classify_method(second_label), second_share)
    return breakdown
