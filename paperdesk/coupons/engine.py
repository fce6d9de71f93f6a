"""
Coupon validation and deal catalog engine.
"""

import logging
import uuid
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Callable, Optional, Union

from paperdesk.database.connection import CatalogStorageError
from paperdesk.database.models import (
    Coupon,
    CouponValidationResult,
    Deal,
    DiscountType,
    Plan,
    ValidationFailure,
    format_amount,
    to_money,
)
from paperdesk.database.repository import CouponRepository, DealRepository
from .defaults import default_coupons, default_deals

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
ZERO = Decimal("0")


class RedemptionConflictError(RuntimeError):
    """Raised when a coupon keeps changing underneath a redemption."""

    pass


class CouponEngine:
    """Validates coupon codes and serves the deal catalog."""

    def __init__(
        self,
        coupon_repo: CouponRepository,
        deal_repo: DealRepository,
        clock: Callable[[], datetime] = datetime.now,
        respect_deal_start: bool = False,
        max_redeem_retries: int = 3,
    ):
        """
        Initialize the engine.

        Args:
            coupon_repo: Coupon storage
            deal_repo: Deal storage
            clock: Returns the current time
            respect_deal_start: Hide deals whose valid_from is in the future
            max_redeem_retries: Retries when a redemption loses a race
        """
        self.coupon_repo = coupon_repo
        self.deal_repo = deal_repo
        self.clock = clock
        self.respect_deal_start = respect_deal_start
        self.max_redeem_retries = max_redeem_retries

    # Catalog

    def get_coupons(self) -> list[Coupon]:
        """All coupons, or the built-in catalog if storage is empty or unreadable."""
        try:
            coupons = self.coupon_repo.list_all()
        except CatalogStorageError as e:
            logger.error(f"Error loading coupons, using defaults: {e}")
            return default_coupons(self.clock())

        if not coupons:
            return default_coupons(self.clock())
        return coupons

    def get_coupon_by_code(self, code: str) -> Optional[Coupon]:
        """Find a coupon (active or not) by case-insensitive code."""
        for coupon in self.get_coupons():
            if coupon.matches_code(code):
                return coupon
        return None

    def create_coupon(
        self,
        code: str,
        name: str,
        type: Union[DiscountType, str],
        value: Any,
        valid_from: datetime,
        valid_until: datetime,
        **options: Any,
    ) -> Coupon:
        """
        Create a new coupon with zero uses.

        Raises:
            DuplicateCouponError: If the code is already taken
        """
        now = self.clock()
        coupon = Coupon(
            id=f"coupon_{now:%Y%m%d%H%M%S}_{uuid.uuid4().hex[:8]}",
            code=code.strip(),
            name=name,
            type=type,
            value=value,
            valid_from=valid_from,
            valid_until=valid_until,
            used_count=0,
            created_at=now,
            **options,
        )
        self.coupon_repo.create(coupon)
        logger.info(f"Created coupon {coupon.code} ({self.format_discount(coupon)})")
        return coupon

    def deactivate_coupon(self, code: str) -> bool:
        """Deactivate a coupon. Coupons are never deleted."""
        updated = self.coupon_repo.set_active(code, False)
        if updated:
            logger.info(f"Deactivated coupon {code.upper()}")
        return updated

    # Validation

    def validate_coupon(
        self,
        code: str,
        plan: Union[Plan, str],
        amount: Any = 0,
        is_first_time: bool = False,
    ) -> CouponValidationResult:
        """
        Validate a coupon code against a purchase.

        Args:
            code: Coupon code as entered (case-insensitive)
            plan: Plan being purchased
            amount: Order amount before discount
            is_first_time: Whether the buyer has never subscribed before

        Returns:
            CouponValidationResult; failures carry an error message, never raise
        """
        coupon = next(
            (c for c in self.get_coupons() if c.is_active and c.matches_code(code)),
            None,
        )
        return self._evaluate(coupon, Plan(plan), to_money(amount), is_first_time)

    def apply_coupon(self, code: str) -> None:
        """Record one use of a coupon."""
        self._store_default_catalog()
        if self.coupon_repo.increment_usage(code):
            logger.info(f"Applied coupon {code.upper()}")
        else:
            logger.warning(f"Cannot apply unknown coupon {code!r}")

    def redeem_coupon(
        self,
        code: str,
        plan: Union[Plan, str],
        amount: Any = 0,
        is_first_time: bool = False,
    ) -> CouponValidationResult:
        """
        Validate a coupon and reserve one use atomically.

        Unlike validate_coupon followed by apply_coupon, two buyers racing for
        the last use of a limited coupon cannot both succeed.

        Raises:
            RedemptionConflictError: If every retry lost a race
            CatalogStorageError: If storage is unavailable
        """
        plan = Plan(plan)
        amount = to_money(amount)
        self._store_default_catalog()

        for attempt in range(self.max_redeem_retries + 1):
            coupon = self.coupon_repo.get_active_by_code(code)
            result = self._evaluate(coupon, plan, amount, is_first_time)
            if not result.is_valid:
                return result

            if self.coupon_repo.reserve_usage(coupon.id, coupon.version):
                coupon.used_count += 1
                coupon.version += 1
                logger.info(
                    f"Redeemed coupon {coupon.code}: "
                    f"{result.discount_amount} off {amount}"
                )
                return result

            logger.warning(
                f"Coupon {coupon.code} changed during redemption "
                f"(attempt {attempt + 1})"
            )

        raise RedemptionConflictError(f"Could not redeem coupon {code!r}")

    def _evaluate(
        self,
        coupon: Optional[Coupon],
        plan: Plan,
        amount: Decimal,
        is_first_time: bool,
    ) -> CouponValidationResult:
        """Run eligibility checks in order, then compute the discount."""
        if coupon is None:
            return _rejected(amount, ValidationFailure.INVALID_CODE, "Invalid coupon code")

        now = self.clock()
        if now < coupon.valid_from or now > coupon.valid_until:
            return _rejected(amount, ValidationFailure.EXPIRED, "Coupon has expired")

        if coupon.applicable_plans and plan not in coupon.applicable_plans:
            return _rejected(
                amount,
                ValidationFailure.PLAN_MISMATCH,
                f"Coupon not valid for {plan.value} plan",
            )

        if coupon.is_first_time_only and not is_first_time:
            return _rejected(
                amount,
                ValidationFailure.NOT_FIRST_TIME,
                "Coupon is only valid for first-time subscribers",
            )

        if coupon.min_amount is not None and amount < coupon.min_amount:
            return _rejected(
                amount,
                ValidationFailure.BELOW_MINIMUM,
                f"Minimum order amount is ${format_amount(coupon.min_amount)}",
            )

        if coupon.usage_limit is not None and coupon.used_count >= coupon.usage_limit:
            return _rejected(
                amount,
                ValidationFailure.USAGE_LIMIT_REACHED,
                "Coupon usage limit reached",
            )

        discount = calculate_discount(coupon, amount)
        return CouponValidationResult(
            is_valid=True,
            coupon=coupon,
            discount_amount=discount,
            final_amount=max(ZERO, amount - discount),
        )

    # Deals

    def get_active_deals(self) -> list[Deal]:
        """
        Deals that are switched on and not yet over.

        Deals that have not started yet are still listed unless the engine
        was built with respect_deal_start=True.
        """
        now = self.clock()
        return [
            deal
            for deal in self._load_deals()
            if deal.is_active
            and now <= deal.valid_until
            and (not self.respect_deal_start or deal.valid_from <= now)
        ]

    def get_featured_deal(self) -> Optional[Deal]:
        """First active deal flagged as featured."""
        return next((d for d in self.get_active_deals() if d.is_featured), None)

    def has_active_deals(self) -> bool:
        """Check if any deal is currently active."""
        return len(self.get_active_deals()) > 0

    def get_deal_by_plan(self, plan: Union[Plan, str]) -> Optional[Deal]:
        """First active deal for a plan."""
        plan = Plan(plan)
        return next((d for d in self.get_active_deals() if d.plan == plan), None)

    def deactivate_deal(self, deal_id: str) -> bool:
        """Deactivate a deal. Deals are never deleted."""
        updated = self.deal_repo.set_active(deal_id, False)
        if updated:
            logger.info(f"Deactivated deal {deal_id}")
        return updated

    def _load_deals(self) -> list[Deal]:
        try:
            deals = self.deal_repo.list_all()
        except CatalogStorageError as e:
            logger.error(f"Error loading deals, using defaults: {e}")
            return default_deals(self.clock())

        if not deals:
            return default_deals(self.clock())
        return deals

    # Display

    @staticmethod
    def format_discount(coupon: Coupon) -> str:
        """Short label such as '50% OFF' or '$20 OFF'."""
        if coupon.type is DiscountType.PERCENTAGE:
            return f"{format_amount(coupon.value)}% OFF"
        return f"${format_amount(coupon.value)} OFF"

    def format_time_remaining(self, deal: Deal) -> str:
        """Countdown label for a deal banner."""
        remaining = (deal.valid_until - self.clock()).total_seconds()
        if remaining <= 0:
            return "Ending soon!"

        days = int(remaining // 86400)
        hours = int((remaining % 86400) // 3600)
        if days > 0:
            return f"{days}d {hours}h left"
        elif hours > 0:
            return f"{hours}h left"
        return "Ending soon!"

    # Seeding

    def initialize_default_data(self) -> None:
        """Seed the built-in catalog into empty stores."""
        now = self.clock()
        if self.coupon_repo.count() == 0:
            for coupon in default_coupons(now):
                self.coupon_repo.create(coupon)
            logger.info("Seeded default coupons")
        if self.deal_repo.count() == 0:
            for deal in default_deals(now):
                self.deal_repo.create(deal)
            logger.info("Seeded default deals")

    def _store_default_catalog(self) -> None:
        # Writes need stored rows; an empty store is only backed by defaults
        if self.coupon_repo.count() == 0:
            self.initialize_default_data()

    def clear_data(self) -> None:
        """Remove every coupon and deal."""
        self.coupon_repo.clear()
        self.deal_repo.clear()


def calculate_discount(coupon: Coupon, amount: Decimal) -> Decimal:
    """
    Discount for an eligible amount, rounded to cents and never above amount.
    """
    if coupon.type is DiscountType.PERCENTAGE:
        discount = amount * coupon.value / 100
        if coupon.max_discount is not None:
            discount = min(discount, coupon.max_discount)
    else:
        discount = coupon.value

    discount = discount.quantize(CENT, rounding=ROUND_HALF_UP)
    return max(ZERO, min(discount, amount))


def _rejected(
    amount: Decimal, reason: ValidationFailure, error: str
) -> CouponValidationResult:
    return CouponValidationResult(
        is_valid=False,
        discount_amount=ZERO,
        final_amount=amount,
        error=error,
        reason=reason,
    )
