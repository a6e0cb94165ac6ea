from decimal import Decimal

from estate_ledger.utils import from_minor_units, quantize_money, to_minor_units


def test_quantize_money_rounds_half_up():
    assert quantize_money(Decimal("137.423")) == Decimal("137.42")
    assert quantize_money(Decimal("137.425")) == Decimal("137.43")


def test_quantize_money_accepts_common_types_and_none():
    assert quantize_money(12) == Decimal("12.00")
    assert quantize_money(12.3) == Decimal("12.30")
    assert quantize_money("12.345") == Decimal("12.35")
    assert quantize_money(None) is None


def test_minor_unit_conversion():
    assert to_minor_units("500.00") == 50000
    assert to_minor_units(Decimal("0.1") + Decimal("0.2")) == 30
    assert to_minor_units(0.1 + 0.2) == 30
    assert from_minor_units(50000) == Decimal("500.00")
    assert from_minor_units(-125) == Decimal("-1.25")
    assert from_minor_units(None) == Decimal("0.00")
