"""
SQLite database connection and schema management.
"""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

logger = logging.getLogger(__name__)


class CatalogStorageError(Exception):
    """Raised when the coupon/deal catalog cannot be read or written."""

    pass


class Database:
    """SQLite database connection manager."""

    def __init__(self, db_path: str):
        """
        Initialize database connection.

        Args:
            db_path: Path to SQLite database file, or ":memory:" for in-memory DB.
        """
        self.db_path = db_path
        self._connection: Optional[sqlite3.Connection] = None
        self._connect()

    def _connect(self) -> None:
        """Establish database connection."""
        if self.db_path != ":memory:":
            # Ensure parent directory exists
            path = Path(self.db_path)
            path.parent.mkdir(parents=True, exist_ok=True)

        self._connection = sqlite3.connect(self.db_path)
        self._connection.row_factory = sqlite3.Row

    @property
    def connection(self) -> sqlite3.Connection:
        """Get the database connection."""
        if self._connection is None:
            raise sqlite3.ProgrammingError("Database connection is closed")
        return self._connection

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Cursor]:
        """
        Scoped read/write against the catalog.

        Commits on success and rolls back on failure. Integrity errors are
        re-raised unchanged so repositories can translate them; any other
        sqlite error becomes CatalogStorageError.
        """
        try:
            connection = self.connection
            cursor = connection.cursor()
        except sqlite3.Error as e:
            raise CatalogStorageError(f"Catalog unavailable: {e}") from e

        try:
            yield cursor
            connection.commit()
        except sqlite3.IntegrityError:
            connection.rollback()
            raise
        except sqlite3.Error as e:
            connection.rollback()
            logger.error(f"Catalog storage error: {e}")
            raise CatalogStorageError(f"Catalog storage error: {e}") from e
        except Exception:
            connection.rollback()
            raise
        finally:
            cursor.close()

    def initialize(self) -> None:
        """Create database schema if it doesn't exist."""
        with self.transaction() as cursor:
            # Create coupons table
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS coupons (
                    id TEXT PRIMARY KEY,
                    code TEXT NOT NULL,
                    name TEXT NOT NULL,
                    description TEXT NOT NULL DEFAULT '',
                    type TEXT NOT NULL,
                    value TEXT NOT NULL,
                    min_amount TEXT,
                    max_discount TEXT,
                    valid_from TIMESTAMP NOT NULL,
                    valid_until TIMESTAMP NOT NULL,
                    usage_limit INTEGER,
                    used_count INTEGER NOT NULL DEFAULT 0 CHECK (used_count >= 0),
                    is_active INTEGER NOT NULL DEFAULT 1,
                    applicable_plans TEXT NOT NULL DEFAULT '[]',
                    is_first_time_only INTEGER NOT NULL DEFAULT 0,
                    created_at TIMESTAMP NOT NULL,
                    version INTEGER NOT NULL DEFAULT 0
                )
            """)

            # Create deals table
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS deals (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    description TEXT NOT NULL DEFAULT '',
                    coupon_code TEXT NOT NULL,
                    original_price TEXT NOT NULL,
                    discounted_price TEXT NOT NULL,
                    discount_percentage TEXT NOT NULL,
                    valid_from TIMESTAMP NOT NULL,
                    valid_until TIMESTAMP NOT NULL,
                    is_active INTEGER NOT NULL DEFAULT 1,
                    is_featured INTEGER NOT NULL DEFAULT 0,
                    plan TEXT NOT NULL
                )
            """)

            # Codes are unique regardless of case
            cursor.execute("""
                CREATE UNIQUE INDEX IF NOT EXISTS idx_coupons_code
                ON coupons(lower(code))
            """)

    def close(self) -> None:
        """Close the database connection."""
        if self._connection:
            self._connection.close()
            self._connection = None
