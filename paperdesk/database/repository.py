"""
Repository classes for catalog CRUD operations.
"""

import json
import sqlite3
from datetime import datetime
from typing import Optional

from .connection import Database
from .models import Coupon, Deal


class DuplicateCouponError(ValueError):
    """Raised when a coupon code (case-insensitive) already exists."""

    pass


class DuplicateDealError(ValueError):
    """Raised when a deal ID already exists."""

    pass


class CouponRepository:
    """CRUD operations for coupons."""

    def __init__(self, db: Database):
        self.db = db

    def create(self, coupon: Coupon) -> Coupon:
        """Create a new coupon."""
        try:
            with self.db.transaction() as cursor:
                cursor.execute(
                    """
                    INSERT INTO coupons
                    (id, code, name, description, type, value, min_amount,
                     max_discount, valid_from, valid_until, usage_limit,
                     used_count, is_active, applicable_plans,
                     is_first_time_only, created_at, version)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        coupon.id,
                        coupon.code,
                        coupon.name,
                        coupon.description,
                        coupon.type.value,
                        str(coupon.value),
                        _money_or_none(coupon.min_amount),
                        _money_or_none(coupon.max_discount),
                        coupon.valid_from.isoformat(),
                        coupon.valid_until.isoformat(),
                        coupon.usage_limit,
                        coupon.used_count,
                        1 if coupon.is_active else 0,
                        json.dumps([p.value for p in coupon.applicable_plans]),
                        1 if coupon.is_first_time_only else 0,
                        (coupon.created_at or datetime.now()).isoformat(),
                        coupon.version,
                    ),
                )
        except sqlite3.IntegrityError as e:
            raise DuplicateCouponError(
                f"Coupon already exists: {coupon.code}"
            ) from e
        return coupon

    def get_by_id(self, coupon_id: str) -> Optional[Coupon]:
        """Get coupon by ID."""
        with self.db.transaction() as cursor:
            cursor.execute("SELECT * FROM coupons WHERE id = ?", (coupon_id,))
            row = cursor.fetchone()
        if row is None:
            return None
        return self._row_to_coupon(row)

    def get_by_code(self, code: str) -> Optional[Coupon]:
        """Get coupon by code, ignoring case."""
        with self.db.transaction() as cursor:
            cursor.execute(
                "SELECT * FROM coupons WHERE lower(code) = ?",
                (code.strip().lower(),),
            )
            row = cursor.fetchone()
        if row is None:
            return None
        return self._row_to_coupon(row)

    def get_active_by_code(self, code: str) -> Optional[Coupon]:
        """Get an active coupon by code, ignoring case."""
        coupon = self.get_by_code(code)
        if coupon is None or not coupon.is_active:
            return None
        return coupon

    def list_all(self) -> list[Coupon]:
        """List all coupons in insertion order."""
        with self.db.transaction() as cursor:
            cursor.execute("SELECT * FROM coupons ORDER BY rowid")
            rows = cursor.fetchall()
        return [self._row_to_coupon(row) for row in rows]

    def count(self) -> int:
        """Number of stored coupons."""
        with self.db.transaction() as cursor:
            cursor.execute("SELECT COUNT(*) FROM coupons")
            return cursor.fetchone()[0]

    def update(self, coupon: Coupon) -> None:
        """Update coupon details."""
        with self.db.transaction() as cursor:
            cursor.execute(
                """
                UPDATE coupons
                SET name = ?, description = ?, type = ?, value = ?,
                    min_amount = ?, max_discount = ?, valid_from = ?,
                    valid_until = ?, usage_limit = ?, is_active = ?,
                    applicable_plans = ?, is_first_time_only = ?,
                    version = version + 1
                WHERE id = ?
                """,
                (
                    coupon.name,
                    coupon.description,
                    coupon.type.value,
                    str(coupon.value),
                    _money_or_none(coupon.min_amount),
                    _money_or_none(coupon.max_discount),
                    coupon.valid_from.isoformat(),
                    coupon.valid_until.isoformat(),
                    coupon.usage_limit,
                    1 if coupon.is_active else 0,
                    json.dumps([p.value for p in coupon.applicable_plans]),
                    1 if coupon.is_first_time_only else 0,
                    coupon.id,
                ),
            )

    def set_active(self, code: str, is_active: bool) -> bool:
        """Activate or deactivate a coupon. Returns False if it doesn't exist."""
        with self.db.transaction() as cursor:
            cursor.execute(
                """
                UPDATE coupons
                SET is_active = ?, version = version + 1
                WHERE lower(code) = ?
                """,
                (1 if is_active else 0, code.strip().lower()),
            )
            return cursor.rowcount > 0

    def increment_usage(self, code: str) -> bool:
        """
        Add one use to a coupon in a single statement.

        Returns:
            True if a coupon was updated
        """
        with self.db.transaction() as cursor:
            cursor.execute(
                """
                UPDATE coupons
                SET used_count = used_count + 1, version = version + 1
                WHERE lower(code) = ?
                """,
                (code.strip().lower(),),
            )
            return cursor.rowcount > 0

    def reserve_usage(self, coupon_id: str, expected_version: int) -> bool:
        """
        Compare-and-swap one use onto a coupon.

        The update only lands if nobody changed the coupon since it was read
        and the usage limit still has room.

        Returns:
            True if the use was reserved, False on conflict or exhaustion
        """
        with self.db.transaction() as cursor:
            cursor.execute(
                """
                UPDATE coupons
                SET used_count = used_count + 1, version = version + 1
                WHERE id = ?
                  AND version = ?
                  AND is_active = 1
                  AND (usage_limit IS NULL OR used_count < usage_limit)
                """,
                (coupon_id, expected_version),
            )
            return cursor.rowcount == 1

    def clear(self) -> None:
        """Remove all coupons."""
        with self.db.transaction() as cursor:
            cursor.execute("DELETE FROM coupons")

    def _row_to_coupon(self, row) -> Coupon:
        """Convert database row to Coupon."""
        return Coupon(
            id=row["id"],
            code=row["code"],
            name=row["name"],
            description=row["description"],
            type=row["type"],
            value=row["value"],
            min_amount=row["min_amount"],
            max_discount=row["max_discount"],
            valid_from=datetime.fromisoformat(row["valid_from"]),
            valid_until=datetime.fromisoformat(row["valid_until"]),
            usage_limit=row["usage_limit"],
            used_count=row["used_count"],
            is_active=bool(row["is_active"]),
            applicable_plans=json.loads(row["applicable_plans"]),
            is_first_time_only=bool(row["is_first_time_only"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            version=row["version"],
        )


class DealRepository:
    """CRUD operations for deals."""

    def __init__(self, db: Database):
        self.db = db

    def create(self, deal: Deal) -> Deal:
        """Create a new deal."""
        try:
            with self.db.transaction() as cursor:
                cursor.execute(
                    """
                    INSERT INTO deals
                    (id, name, description, coupon_code, original_price,
                     discounted_price, discount_percentage, valid_from,
                     valid_until, is_active, is_featured, plan)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        deal.id,
                        deal.name,
                        deal.description,
                        deal.coupon_code,
                        str(deal.original_price),
                        str(deal.discounted_price),
                        str(deal.discount_percentage),
                        deal.valid_from.isoformat(),
                        deal.valid_until.isoformat(),
                        1 if deal.is_active else 0,
                        1 if deal.is_featured else 0,
                        deal.plan.value,
                    ),
                )
        except sqlite3.IntegrityError as e:
            raise DuplicateDealError(f"Deal already exists: {deal.id}") from e
        return deal

    def get_by_id(self, deal_id: str) -> Optional[Deal]:
        """Get deal by ID."""
        with self.db.transaction() as cursor:
            cursor.execute("SELECT * FROM deals WHERE id = ?", (deal_id,))
            row = cursor.fetchone()
        if row is None:
            return None
        return self._row_to_deal(row)

    def list_all(self) -> list[Deal]:
        """List all deals in insertion order."""
        with self.db.transaction() as cursor:
            cursor.execute("SELECT * FROM deals ORDER BY rowid")
            rows = cursor.fetchall()
        return [self._row_to_deal(row) for row in rows]

    def count(self) -> int:
        """Number of stored deals."""
        with self.db.transaction() as cursor:
            cursor.execute("SELECT COUNT(*) FROM deals")
            return cursor.fetchone()[0]

    def update(self, deal: Deal) -> None:
        """Update deal details."""
        with self.db.transaction() as cursor:
            cursor.execute(
                """
                UPDATE deals
                SET name = ?, description = ?, coupon_code = ?,
                    original_price = ?, discounted_price = ?,
                    discount_percentage = ?, valid_from = ?, valid_until = ?,
                    is_active = ?, is_featured = ?, plan = ?
                WHERE id = ?
                """,
                (
                    deal.name,
                    deal.description,
                    deal.coupon_code,
                    str(deal.original_price),
                    str(deal.discounted_price),
                    str(deal.discount_percentage),
                    deal.valid_from.isoformat(),
                    deal.valid_until.isoformat(),
                    1 if deal.is_active else 0,
                    1 if deal.is_featured else 0,
                    deal.plan.value,
                    deal.id,
                ),
            )

    def set_active(self, deal_id: str, is_active: bool) -> bool:
        """Activate or deactivate a deal. Returns False if it doesn't exist."""
        with self.db.transaction() as cursor:
            cursor.execute(
                "UPDATE deals SET is_active = ? WHERE id = ?",
                (1 if is_active else 0, deal_id),
            )
            return cursor.rowcount > 0

    def clear(self) -> None:
        """Remove all deals."""
        with self.db.transaction() as cursor:
            cursor.execute("DELETE FROM deals")

    def _row_to_deal(self, row) -> Deal:
        """Convert database row to Deal."""
        return Deal(
            id=row["id"],
            name=row["name"],
            description=row["description"],
            coupon_code=row["coupon_code"],
            original_price=row["original_price"],
            discounted_price=row["discounted_price"],
            discount_percentage=row["discount_percentage"],
            valid_from=datetime.fromisoformat(row["valid_from"]),
            valid_until=datetime.fromisoformat(row["valid_until"]),
            is_active=bool(row["is_active"]),
            is_featured=bool(row["is_featured"]),
            plan=row["plan"],
        )


def _money_or_none(value) -> Optional[str]:
    return None if value is None else str(value)
