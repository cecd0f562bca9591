from decimal import Decimal

import pytest

from services.payment_methods import PaymentBucket, classify_method, split_payment


@pytest.mark.parametrize(
    "label, bucket",
    [
        ("DINHEIRO", PaymentBucket.CASH),
        ("dinheiro", PaymentBucket.CASH),
        ("PIX", PaymentBucket.PIX),
        ("Pix QR", PaymentBucket.PIX),
        ("CRÉDITO", PaymentBucket.CREDIT),
        ("Cartão de Crédito", PaymentBucket.CREDIT),
        ("CREDITO", PaymentBucket.CREDIT),
        ("DÉBITO", PaymentBucket.DEBIT),
        ("cartao de debito", PaymentBucket.DEBIT),
        ("VALE REFEIÇÃO", PaymentBucket.OTHER),
        ("FIADO", PaymentBucket.OTHER),
        ("", PaymentBucket.OTHER),
        (None, PaymentBucket.OTHER),
    ],
)
def test_classify_method(label, bucket):
    assert classify_method(label) is bucket


def test_single_method_gets_full_total():
    breakdown = split_payment("PIX", "50")
    assert breakdown.amounts[PaymentBucket.PIX] == Decimal("50.00")
    assert breakdown.total == Decimal("50.00")
    assert not breakdown.inconsistent


def test_composite_method_splits_total():
    breakdown = split_payment("DINHEIRO + PIX", 100, 40)
    assert breakdown.amounts[PaymentBucket.CASH] == Decimal("40.00")
    assert breakdown.amounts[PaymentBucket.PIX] == Decimal("60.00")
    assert breakdown.amounts[PaymentBucket.CREDIT] == Decimal("0.00")
    assert not breakdown.inconsistent


def test_composite_without_spaces_and_lowercase():
    breakdown = split_payment("crédito+débito", Decimal("75.50"), Decimal("25.50"))
    assert breakdown.amounts[PaymentBucket.CREDIT] == Decimal("25.50")
    assert breakdown.amounts[PaymentBucket.DEBIT] == Decimal("50.00")


def test_composite_same_bucket_is_summed():
    breakdown = split_payment("PIX + PIX", 80, 30)
    assert breakdown.amounts[PaymentBucket.PIX] == Decimal("80.00")


def test_composite_unknown_leg_goes_to_other():
    breakdown = split_payment("DINHEIRO + VALE", 60, 10)
    assert breakdown.amounts[PaymentBucket.CASH] == Decimal("10.00")
    assert breakdown.amounts[PaymentBucket.OTHER] == Decimal("50.00")


def test_split_greater_than_total_is_clamped_and_flagged():
    breakdown = split_payment("DINHEIRO + PIX", 100, 130)
    assert breakdown.inconsistent
    assert breakdown.amounts[PaymentBucket.CASH] == Decimal("100.00")
    assert breakdown.amounts[PaymentBucket.PIX] == Decimal("0.00")
    assert all(value >= 0 for value in breakdown.amounts.values())
    assert breakdown.total == Decimal("100.00")


def test_negative_split_is_clamped_and_flagged():
    breakdown = split_payment("DINHEIRO + PIX", 100, -20)
    assert breakdown.inconsistent
    assert breakdown.amounts[PaymentBucket.CASH] == Decimal("0.00")
    assert breakdown.amounts[PaymentBucket.PIX] == Decimal("100.00")


def test_missing_split_sends_total_to_second_leg_and_flags():
    breakdown = split_payment("DINHEIRO + PIX", 100)
    assert breakdown.inconsistent
    assert breakdown.amounts[PaymentBucket.PIX] == Decimal("100.00")
    assert breakdown.reason
