"""
Built-in coupon and deal catalog.

Seeded into an empty store on first start, and used as the fallback when the
store cannot be read.
"""

from datetime import datetime, timedelta

from paperdesk.database.models import Coupon, Deal, DiscountType, Plan


def default_coupons(now: datetime) -> list[Coupon]:
    """Launch coupons, valid from ``now``."""
    next_week = now + timedelta(days=7)
    next_month = now + timedelta(days=30)

    return [
        Coupon(
            id="welcome50",
            code="WELCOME50",
            name="Welcome Discount",
            description="50% off your first month",
            type=DiscountType.PERCENTAGE,
            value=50,
            valid_from=now,
            valid_until=next_month,
            usage_limit=1000,
            used_count=245,
            applicable_plans=[Plan.MONTHLY],
            is_first_time_only=True,
            created_at=now,
        ),
        Coupon(
            id="blackfriday",
            code="BLACKFRIDAY",
            name="Black Friday Special",
            description="70% off yearly subscription",
            type=DiscountType.PERCENTAGE,
            value=70,
            valid_from=now,
            valid_until=next_week,
            usage_limit=500,
            used_count=123,
            applicable_plans=[Plan.YEARLY],
            created_at=now,
        ),
        Coupon(
            id="save20",
            code="SAVE20",
            name="Save $20",
            description="$20 off any plan",
            type=DiscountType.FIXED_AMOUNT,
            value=20,
            min_amount=50,
            valid_from=now,
            valid_until=next_month,
            usage_limit=200,
            used_count=67,
            created_at=now,
        ),
        Coupon(
            id="student",
            code="STUDENT",
            name="Student Discount",
            description="30% off for students",
            type=DiscountType.PERCENTAGE,
            value=30,
            max_discount=50,
            valid_from=now,
            valid_until=next_month,
            used_count=89,
            created_at=now,
        ),
    ]


def default_deals(now: datetime) -> list[Deal]:
    """Launch deals, valid from ``now``."""
    next_week = now + timedelta(days=7)
    next_month = now + timedelta(days=30)

    return [
        Deal(
            id="blackfriday_monthly",
            name="Black Friday - Monthly",
            description="Limited time: 50% off your first 3 months",
            coupon_code="BLACKFRIDAY50",
            original_price=29,
            discounted_price="14.50",
            discount_percentage=50,
            valid_from=now,
            valid_until=next_week,
            is_featured=True,
            plan=Plan.MONTHLY,
        ),
        Deal(
            id="blackfriday_yearly",
            name="Black Friday - Yearly",
            description="Massive savings: 70% off yearly subscription",
            coupon_code="BLACKFRIDAY70",
            original_price=290,
            discounted_price=87,
            discount_percentage=70,
            valid_from=now,
            valid_until=next_week,
            plan=Plan.YEARLY,
        ),
        Deal(
            id="welcome_deal",
            name="Welcome Deal",
            description="New user special: 40% off first month",
            coupon_code="WELCOME40",
            original_price=29,
            discounted_price="17.40",
            discount_percentage=40,
            valid_from=now,
            valid_until=next_month,
            plan=Plan.MONTHLY,
        ),
    ]
