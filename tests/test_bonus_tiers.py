"""
Tests for weekly bonus tier assignment.

Default tiers:
- below 1,200: none, 0
- 1,200: tier_1, 35
- 1,500: tier_2, 60
- 1,800: tier_3, 95
- 2,100: tier_4, 130
- 2,400: tier_5, 180
"""
import json
import pytest
from decimal import Decimal

from services.bonus_tiers import (
    BonusTier,
    DEFAULT_BONUS_TIERS,
    NO_TIER,
    calculate_bonus_tier,
    parse_bonus_tiers,
    validate_tiers,
)
from services.exceptions import BonusValidationError


CUSTOM_TIERS = [
    BonusTier("tier_1", Decimal("500"), Decimal("25")),
    BonusTier("tier_2", Decimal("800"), Decimal("50")),
    BonusTier("tier_3", Decimal("1200"), Decimal("75")),
    BonusTier("tier_4", Decimal("1800"), Decimal("100")),
    BonusTier("tier_5", Decimal("2400"), Decimal("150")),
]


class TestCalculateBonusTier:
    """Test suite for calculate_bonus_tier with the default table."""

    # =========================================================================
    # Below the lowest threshold
    # =========================================================================

    def test_zero_revenue_not_eligible(self):
        result = calculate_bonus_tier(Decimal("0"))
        assert result.tier == NO_TIER
        assert result.bonus_amount == Decimal("0.00")
        assert result.is_eligible is False

    def test_just_below_first_threshold(self):
        result = calculate_bonus_tier(Decimal("1199.99"))
        assert result.tier == NO_TIER
        assert result.is_eligible is False

    # =========================================================================
    # Thresholds are inclusive
    # =========================================================================

    @pytest.mark.parametrize("revenue,tier,amount", [
        ("1200", "tier_1", "35.00"),
        ("1500", "tier_2", "60.00"),
        ("1800", "tier_3", "95.00"),
        ("2100", "tier_4", "130.00"),
        ("2400", "tier_5", "180.00"),
    ])
    def test_exact_threshold_reaches_tier(self, revenue, tier, amount):
        result = calculate_bonus_tier(Decimal(revenue))
        assert result.tier == tier
        assert result.bonus_amount == Decimal(amount)
        assert result.is_eligible is True

    def test_mid_band_takes_lower_tier(self):
        result = calculate_bonus_tier(Decimal("1650"))
        assert result.tier == "tier_2"
        assert result.bonus_amount == Decimal("60.00")

    def test_above_top_tier_stays_at_top(self):
        result = calculate_bonus_tier(Decimal("100000"))
        assert result.tier == "tier_5"
        assert result.bonus_amount == Decimal("180.00")

    # =========================================================================
    # Custom tables
    # =========================================================================

    def test_custom_table_900_is_tier_2(self):
        result = calculate_bonus_tier(Decimal("900"), CUSTOM_TIERS)
        assert result.tier == "tier_2"
        assert result.bonus_amount == Decimal("50.00")

    def test_custom_table_1950_is_tier_4(self):
        result = calculate_bonus_tier(Decimal("1950"), CUSTOM_TIERS)
        assert result.tier == "tier_4"
        assert result.bonus_amount == Decimal("100.00")

    def test_single_tier_table(self):
        tiers = [BonusTier("only", Decimal("100"), Decimal("10"))]
        assert calculate_bonus_tier(Decimal("99.99"), tiers).tier == NO_TIER
        assert calculate_bonus_tier(Decimal("100"), tiers).tier == "only"

    def test_default_table_is_valid(self):
        assert validate_tiers(DEFAULT_BONUS_TIERS) == list(DEFAULT_BONUS_TIERS)

    def test_unordered_table_is_rejected(self):
        """A descending table would otherwise stop at the first tier and pick none."""
        with pytest.raises(BonusValidationError, match="ascending"):
            calculate_bonus_tier(Decimal("1950"), list(reversed(CUSTOM_TIERS)))

    def test_empty_table_is_rejected(self):
        with pytest.raises(BonusValidationError):
            calculate_bonus_tier(Decimal("1950"), [])


class TestValidateTiers:
    def test_empty_table_rejected(self):
        with pytest.raises(BonusValidationError):
            validate_tiers([])

    def test_descending_thresholds_rejected(self):
        with pytest.raises(BonusValidationError, match="ascending"):
            validate_tiers([
                BonusTier("a", Decimal("1000"), Decimal("10")),
                BonusTier("b", Decimal("900"), Decimal("20")),
            ])

    def test_equal_thresholds_rejected(self):
        with pytest.raises(BonusValidationError):
            validate_tiers([
                BonusTier("a", Decimal("1000"), Decimal("10")),
                BonusTier("b", Decimal("1000"), Decimal("20")),
            ])

    def test_negative_amount_rejected(self):
        with pytest.raises(BonusValidationError):
            validate_tiers([BonusTier("a", Decimal("1000"), Decimal("-1"))])

    def test_reserved_name_rejected(self):
        with pytest.raises(BonusValidationError):
            validate_tiers([BonusTier(NO_TIER, Decimal("1000"), Decimal("10"))])


class TestParseBonusTiers:
    def test_parses_json_table(self):
        raw = json.dumps([
            {"tier": "bronze", "min_revenue": "1000", "amount": "20"},
            {"tier": "gold", "min_revenue": 2000, "amount": 50.5},
        ])
        tiers = parse_bonus_tiers(raw)
        assert [t.name for t in tiers] == ["bronze", "gold"]
        assert tiers[1].min_revenue == Decimal("2000.00")
        assert tiers[1].amount == Decimal("50.50")

    def test_invalid_json_rejected(self):
        with pytest.raises(BonusValidationError, match="not valid JSON"):
            parse_bonus_tiers("[{")

    def test_missing_key_rejected(self):
        with pytest.raises(BonusValidationError):
            parse_bonus_tiers(json.dumps([{"tier": "x", "amount": "1"}]))

    def test_non_list_rejected(self):
        with pytest.raises(BonusValidationError):
            parse_bonus_tiers(json.dumps({"tier": "x"}))
