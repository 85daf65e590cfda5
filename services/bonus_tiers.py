"""
Tiered weekly bonus table.

A tier table is an ascending list of (name, min_revenue, amount). An
employee earns the amount of the highest tier whose threshold their weekly
revenue reaches; below the lowest threshold they get tier "none" and no
bonus. The table is configuration and is passed in by the caller.
"""
import json
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from functools import lru_cache
from typing import List, Optional, Sequence

from app_config.settings import BONUS_TIERS
from services.accounting import MoneyLike, to_money
from services.exceptions import BonusValidationError

NO_TIER = "none"


@dataclass(frozen=True)
class BonusTier:
    name: str
    min_revenue: Decimal
    amount: Decimal


@dataclass(frozen=True)
class TierAssignment:
    tier: str
    bonus_amount: Decimal
    is_eligible: bool


DEFAULT_BONUS_TIERS = (
    BonusTier("tier_1", Decimal("1200.00"), Decimal("35.00")),
    BonusTier("tier_2", Decimal("1500.00"), Decimal("60.00")),
    BonusTier("tier_3", Decimal("1800.00"), Decimal("95.00")),
    BonusTier("tier_4", Decimal("2100.00"), Decimal("130.00")),
    BonusTier("tier_5", Decimal("2400.00"), Decimal("180.00")),
)


def validate_tiers(tiers: Sequence[BonusTier]) -> List[BonusTier]:
    """
    Check a tier table and return it as a list.

    Thresholds must be strictly ascending and non-negative, amounts
    non-negative, names unique and different from "none".
    """
    if not tiers:
        raise BonusValidationError("Bonus tier table must contain at least one tier")

    names = set()
    previous: Optional[BonusTier] = None
    for tier in tiers:
        if tier.name == NO_TIER or tier.name in names:
            raise BonusValidationError(f"Invalid or duplicate tier name '{tier.name}'")
        names.add(tier.name)
        if tier.min_revenue < 0 or tier.amount < 0:
            raise BonusValidationError(f"Tier '{tier.name}' has a negative threshold or amount")
        if previous is not None and tier.min_revenue <= previous.min_revenue:
            raise BonusValidationError(
                f"Tier thresholds must be ascending: '{tier.name}' ({tier.min_revenue}) "
                f"is not above '{previous.name}' ({previous.min_revenue})"
            )
        previous = tier

    return list(tiers)


def calculate_bonus_tier(
    weekly_revenue: MoneyLike,
    tiers: Sequence[BonusTier] = DEFAULT_BONUS_TIERS,
) -> TierAssignment:
    """
    Assign a tier and bonus amount to one employee's weekly revenue.

    The tier table is checked with validate_tiers first, so an unordered
    or malformed table raises BonusValidationError.

    Example with the default table:
        calculate_bonus_tier(Decimal("1650"))  -> tier_2, 60.00
        calculate_bonus_tier(Decimal("900"))   -> none, 0.00, not eligible
    """
    tiers = validate_tiers(tiers)
    revenue = to_money(weekly_revenue)

    assigned = None
    for tier in tiers:
        if revenue >= tier.min_revenue:
            assigned = tier
        else:
            break

    if assigned is None:
        return TierAssignment(tier=NO_TIER, bonus_amount=Decimal("0.00"), is_eligible=False)

    return TierAssignment(
        tier=assigned.name,
        bonus_amount=to_money(assigned.amount),
        is_eligible=True,
    )


def parse_bonus_tiers(raw: str) -> List[BonusTier]:
    """
    Parse a JSON tier table.

    Expected shape:
        [{"tier": "tier_1", "min_revenue": "1200", "amount": "35"}, ...]
    """
    try:
        entries = json.loads(raw)
    except json.JSONDecodeError as e:
        raise BonusValidationError(f"Bonus tier table is not valid JSON: {e}") from e

    if not isinstance(entries, list):
        raise BonusValidationError("Bonus tier table must be a JSON list")

    tiers = []
    for entry in entries:
        try:
            tiers.append(BonusTier(
                name=str(entry["tier"]),
                min_revenue=to_money(entry["min_revenue"]),
                amount=to_money(entry["amount"]),
            ))
        except (KeyError, TypeError, InvalidOperation) as e:
            raise BonusValidationError(f"Invalid bonus tier entry {entry!r}") from e

    return validate_tiers(tiers)


@lru_cache(maxsize=1)
def configured_bonus_tiers() -> List[BonusTier]:
    """Tier table from the BONUS_TIERS setting, or the default table."""
    if BONUS_TIERS:
        return parse_bonus_tiers(BONUS_TIERS)
    return list(DEFAULT_BONUS_TIERS)
