"""
Money arithmetic and the daily revenue accounting check.

All amounts are Decimal with two places. Floats are converted through str
so binary representation error never reaches a comparison.
"""
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Union

from constants import MONEY_QUANT, MONEY_TOLERANCE

MoneyLike = Union[Decimal, int, str, float]


@dataclass
class RevenueValidation:
    is_matched: bool
    reasons: List[str] = field(default_factory=list)


def to_money(value: MoneyLike) -> Decimal:
    """Convert to a Decimal rounded half-up to cents."""
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)


def money_equal(a: MoneyLike, b: MoneyLike, tolerance: Decimal = MONEY_TOLERANCE) -> bool:
    """True when |a - b| <= tolerance."""
    return abs(to_money(a) - to_money(b)) <= tolerance


def money_sum(values) -> Decimal:
    total = Decimal("0")
    for value in values:
        total += to_money(value)
    return to_money(total)


def calculate_total(cash: MoneyLike, network: MoneyLike) -> Decimal:
    """Total revenue = cash + network."""
    return to_money(to_money(cash) + to_money(network))


def calculate_balance(employee_total: MoneyLike, cash: MoneyLike) -> Decimal:
    """Balance = employee total - cash; a matched day has balance == network."""
    return to_money(to_money(employee_total) - to_money(cash))


def validate_revenue_matching(
    cash: MoneyLike,
    network: MoneyLike,
    total: MoneyLike,
    balance: MoneyLike,
    employee_total: MoneyLike,
) -> RevenueValidation:
    """
    Check a daily revenue entry against the accounting identity.

    Rules, each reported independently:
    1. balance == network
    2. total == cash + network
    3. employee_total == total

    Returns RevenueValidation(is_matched, reasons) with one reason per
    violated rule, in rule order.
    """
    reasons = []

    if not money_equal(balance, network):
        reasons.append(
            f"Balance ({to_money(balance)}) does not equal network ({to_money(network)})"
        )

    expected_total = calculate_total(cash, network)
    if not money_equal(total, expected_total):
        reasons.append(
            f"Total ({to_money(total)}) does not equal cash + network ({expected_total})"
        )

    if not money_equal(employee_total, total):
        reasons.append(
            f"Employee total ({to_money(employee_total)}) does not equal total ({to_money(total)})"
        )

    return RevenueValidation(is_matched=not reasons, reasons=reasons)
