"""
Incredicer - Catalog and Validator Tests

Tests for the dice catalog and input validation utilities.
"""

import math

import pytest

from src.engine.base import DiceType, RollResult
from src.engine.catalog import DEFAULT_DICE_CATALOG, DiceTypeConfig
from src.engine.validators import clamp, validate_amount, validate_balance, validate_count


class TestDiceCatalog:
    """Tests for DEFAULT_DICE_CATALOG and DiceTypeConfig."""

    def test_every_dice_type_present(self):
        assert set(DEFAULT_DICE_CATALOG) == set(DiceType)

    def test_catalog_is_read_only(self):
        with pytest.raises(TypeError):
            DEFAULT_DICE_CATALOG[DiceType.BASIC] = None  # type: ignore[index]

    def test_basic_curve(self):
        basic = DEFAULT_DICE_CATALOG[DiceType.BASIC]
        assert basic.shop_base_cost == 10
        assert basic.shop_cost_growth == 1.15
        assert basic.price_for(0) == 10

    def test_costs_increase_by_tier(self):
        costs = [DEFAULT_DICE_CATALOG[t].shop_base_cost for t in DiceType]
        assert costs == sorted(costs)

    def test_rejects_non_positive_cost(self):
        with pytest.raises(ValueError):
            DiceTypeConfig(DiceType.BASIC, "Broken", 1, 0, 0, 1.1)

    def test_rejects_shrinking_growth(self):
        with pytest.raises(ValueError):
            DiceTypeConfig(DiceType.BASIC, "Broken", 1, 0, 10, 0.9)


class TestRollResult:
    """Tests for RollResult."""

    def test_total_money_includes_bonus(self):
        assert RollResult(money=6, table_tax_bonus=50).total_money == 56


class TestValidateAmount:
    """Tests for validate_amount / validate_balance."""

    def test_accepts_int_and_float(self):
        assert validate_amount(3) == 3.0
        assert validate_amount(-2.5) == -2.5

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
    def test_rejects_non_finite(self, value):
        with pytest.raises(ValueError, match="finite"):
            validate_amount(value)

    def test_rejects_bool(self):
        with pytest.raises(ValueError):
            validate_amount(True)

    def test_balance_rejects_negative(self):
        with pytest.raises(ValueError, match="negative"):
            validate_balance(-0.01)


class TestValidateCount:
    """Tests for validate_count."""

    def test_valid(self):
        assert validate_count(0) == 0
        assert validate_count(7) == 7

    @pytest.mark.parametrize("value", [-1, 1.5, "2", False])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            validate_count(value)


class TestClamp:
    """Tests for clamp."""

    def test_bounds(self):
        assert clamp(5, 0, 1) == 1
        assert clamp(-5, 0, 1) == 0
        assert clamp(0.5, 0, 1) == 0.5

    def test_open_bounds(self):
        assert clamp(1e9, minimum=0) == 1e9
