"""
Pytest configuration and shared fixtures.
"""

import pytest
from datetime import datetime

from paperdesk.coupons.engine import CouponEngine
from paperdesk.database.connection import Database
from paperdesk.database.repository import CouponRepository, DealRepository


NOW = datetime(2026, 3, 2, 12, 0, 0)


@pytest.fixture
def now():
    """Fixed point in time used by the engines."""
    return NOW


@pytest.fixture
def db():
    """Create in-memory database with schema."""
    db = Database(":memory:")
    db.initialize()
    yield db
    db.close()


@pytest.fixture
def coupon_repo(db):
    """Coupon repository on the in-memory database."""
    return CouponRepository(db)


@pytest.fixture
def deal_repo(db):
    """Deal repository on the in-memory database."""
    return DealRepository(db)


@pytest.fixture
def engine(coupon_repo, deal_repo):
    """Coupon engine with a fixed clock and the default catalog seeded."""
    engine = CouponEngine(coupon_repo, deal_repo, clock=lambda: NOW)
    engine.initialize_default_data()
    return engine


@pytest.fixture
def market_payload():
    """Bullish market snapshot as a plain dictionary."""
    return {
        "price": 580.0,
        "volume": 2_000_000,
        "volatility": 0.15,
        "rsi": 85.0,
        "macd": 3.0,
        "bollinger_bands": {"upper": 591.6, "middle": 580.0, "lower": 568.4},
        "moving_averages": {"sma20": 575.0, "sma50": 565.0, "sma200": 550.0},
        "vix": 12.0,
        "timestamp": "2026-03-02T12:00:00",
    }


@pytest.fixture
def sample_discord_webhook_url():
    """Sample Discord webhook URL for testing."""
    return "https://discord.com/api/webhooks/123456789/abcdefghijklmnop"
