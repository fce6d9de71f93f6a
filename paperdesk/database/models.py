"""
Data models for the coupon and deal catalog.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Any


def to_money(value: Any) -> Decimal:
    """Convert a number (or numeric string) to Decimal without float noise."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def format_amount(value: Decimal) -> str:
    """Plain number without trailing zeros, e.g. 50.0 -> '50', 12.50 -> '12.5'."""
    text = f"{value:f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


class Plan(str, Enum):
    """Subscription plan."""

    MONTHLY = "monthly"
    YEARLY = "yearly"


class DiscountType(str, Enum):
    """How a coupon's value is interpreted."""

    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"


class ValidationFailure(str, Enum):
    """Reasons a coupon can be rejected."""

    INVALID_CODE = "invalid_code"
    EXPIRED = "expired"
    PLAN_MISMATCH = "plan_mismatch"
    NOT_FIRST_TIME = "not_first_time"
    BELOW_MINIMUM = "below_minimum"
    USAGE_LIMIT_REACHED = "usage_limit_reached"


@dataclass
class Coupon:
    """Discount code with eligibility constraints and a usage ceiling."""

    id: str
    code: str
    name: str
    type: DiscountType
    value: Decimal
    valid_from: datetime
    valid_until: datetime
    description: str = ""
    min_amount: Optional[Decimal] = None
    max_discount: Optional[Decimal] = None
    usage_limit: Optional[int] = None
    used_count: int = 0
    is_active: bool = True
    applicable_plans: list[Plan] = field(default_factory=list)  # empty = all plans
    is_first_time_only: bool = False
    created_at: Optional[datetime] = None
    version: int = 0

    def __post_init__(self):
        self.type = DiscountType(self.type)
        self.value = to_money(self.value)
        if self.min_amount is not None:
            self.min_amount = to_money(self.min_amount)
        if self.max_discount is not None:
            self.max_discount = to_money(self.max_discount)
        self.applicable_plans = [Plan(p) for p in self.applicable_plans]
        if self.used_count < 0:
            raise ValueError("used_count cannot be negative")
        if self.valid_from > self.valid_until:
            raise ValueError("valid_from must not be after valid_until")

    def matches_code(self, code: str) -> bool:
        """Case-insensitive code comparison."""
        return self.code.lower() == code.strip().lower()


@dataclass
class Deal:
    """Time-boxed price and coupon bundle shown on the pricing page."""

    id: str
    name: str
    coupon_code: str
    original_price: Decimal
    discounted_price: Decimal
    discount_percentage: Decimal
    valid_from: datetime
    valid_until: datetime
    plan: Plan
    description: str = ""
    is_active: bool = True
    is_featured: bool = False

    def __post_init__(self):
        self.original_price = to_money(self.original_price)
        self.discounted_price = to_money(self.discounted_price)
        self.discount_percentage = to_money(self.discount_percentage)
        self.plan = Plan(self.plan)

    @property
    def savings(self) -> Decimal:
        """Amount saved against the original price."""
        return self.original_price - self.discounted_price


@dataclass
class CouponValidationResult:
    """Outcome of validating a coupon against a purchase."""

    is_valid: bool
    discount_amount: Decimal
    final_amount: Decimal
    coupon: Optional[Coupon] = None
    error: Optional[str] = None
    reason: Optional[ValidationFailure] = None
