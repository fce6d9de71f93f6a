"""
Main application entry point.
"""

import logging
import random
from datetime import datetime
from typing import Callable, Optional

from dotenv import load_dotenv

load_dotenv()

from paperdesk.config import AppConfig
from paperdesk.coupons.engine import CouponEngine
from paperdesk.data.fetcher import MarketDataFetcher, generate_mock_market_data
from paperdesk.database.connection import Database
from paperdesk.database.repository import CouponRepository, DealRepository
from paperdesk.regimes.engine import RegimeEngine
from paperdesk.regimes.models import MarketData, RegimeAnalysis

logger = logging.getLogger(__name__)


class PaperDeskApp:
    """Wires storage, the coupon engine and the regime engine together."""

    def __init__(
        self,
        db: Database,
        config: Optional[AppConfig] = None,
        fetcher: Optional[MarketDataFetcher] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize the app.

        Args:
            db: Database instance (already initialized)
            config: Application configuration (defaults if omitted)
            fetcher: Market data source
            clock: Returns the current time
        """
        self.db = db
        self.config = config or AppConfig()

        # Initialize repositories
        self.coupon_repo = CouponRepository(db)
        self.deal_repo = DealRepository(db)

        # Initialize services
        self.rng = random.Random(self.config.regime.random_seed)
        self.coupons = CouponEngine(
            self.coupon_repo,
            self.deal_repo,
            clock=clock,
            respect_deal_start=self.config.coupons.respect_deal_start,
            max_redeem_retries=self.config.advanced.max_retries,
        )
        self.regimes = RegimeEngine(rng=self.rng)
        self.fetcher = fetcher or MarketDataFetcher()

    def start(self) -> None:
        """Seed the catalog on first run."""
        if self.config.coupons.seed_defaults:
            self.coupons.initialize_default_data()

    def load_market_data(self, mock: bool = False) -> MarketData:
        """Live snapshot for the configured ticker, or a mock one."""
        if mock:
            return generate_mock_market_data(self.rng)
        return self.fetcher.get_market_data(
            self.config.regime.ticker, self.config.regime.vix_ticker
        )

    def run_analysis(self, mock: bool = False) -> RegimeAnalysis:
        """Fetch market data and classify the current regime."""
        market_data = self.load_market_data(mock=mock)
        analysis = self.regimes.analyze_regime(market_data)

        logger.info(
            f"Current regime: {analysis.current_regime.name} "
            f"({analysis.confidence:.0%} confidence, "
            f"~{analysis.time_in_regime} days)"
        )
        for warning in analysis.warnings:
            logger.warning(warning)
        return analysis

    def log_deals(self) -> None:
        """Log the deal board as shown on the pricing page."""
        featured = self.coupons.get_featured_deal()
        for deal in self.coupons.get_active_deals():
            marker = "*" if featured and deal.id == featured.id else " "
            logger.info(
                f"{marker} {deal.name}: ${deal.discounted_price} "
                f"(was ${deal.original_price}, {deal.discount_percentage}% off) "
                f"- {self.coupons.format_time_remaining(deal)}"
            )


def main():
    """CLI entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="PaperDesk regime and deals runner")
    parser.add_argument(
        "--config", default="config.yaml", help="Path to config file"
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug mode")
    parser.add_argument(
        "--mock", action="store_true", help="Use generated market data"
    )

    args = parser.parse_args()

    # Load config
    from paperdesk.config import load_config

    config = load_config(args.config)

    # Setup logging
    log_level = logging.DEBUG if args.debug else getattr(logging, config.advanced.log_level)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    # Initialize database
    db = Database(config.database.path)
    db.initialize()

    app = PaperDeskApp(db=db, config=config)
    try:
        app.start()
        app.log_deals()
        app.run_analysis(mock=args.mock)
    except ValueError as e:
        logger.error(f"Regime analysis failed: {e}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
