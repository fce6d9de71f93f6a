"""
Integration tests.
End-to-end tests for the app, CLI helpers, health check and configuration.
"""

import random

import pytest
from unittest.mock import MagicMock, Mock, patch
from datetime import timedelta
from decimal import Decimal

from paperdesk.config import AppConfig, RegimeConfig
from paperdesk.database.connection import Database
from paperdesk.database.models import Plan, ValidationFailure
from paperdesk.database.repository import DuplicateCouponError
from paperdesk.main import PaperDeskApp
from paperdesk.regimes.models import MarketData, RegimeAnalysis


@pytest.fixture
def app(db, now):
    """App on the in-memory database with a fixed clock and seed."""
    config = AppConfig(regime=RegimeConfig(random_seed=11))
    app = PaperDeskApp(db=db, config=config, clock=lambda: now)
    app.start()
    return app


class TestPaperDeskApp:
    """Test application wiring."""

    def test_start_seeds_catalog(self, app):
        """Should seed the default coupons and deals."""
        assert app.coupon_repo.count() == 4
        assert app.deal_repo.count() == 3

    def test_start_without_seeding(self, db, now):
        """Should leave the store empty when seeding is disabled."""
        config = AppConfig()
        config.coupons.seed_defaults = False
        app = PaperDeskApp(db=db, config=config, clock=lambda: now)
        app.start()
        assert app.coupon_repo.count() == 0

    def test_run_analysis_with_mock_data(self, app):
        """Should analyze a generated snapshot."""
        analysis = app.run_analysis(mock=True)

        assert isinstance(analysis, RegimeAnalysis)
        assert 0.0 <= analysis.confidence <= 1.0
        assert len(analysis.next_regime_prob) == 2
        assert all(
            s.regime_id == analysis.current_regime.id
            for s in analysis.recommended_strategies
        )

    def test_run_analysis_uses_fetcher(self, db, now, market_payload):
        """Should analyze the configured ticker with live data."""
        fetcher = Mock()
        fetcher.get_market_data.return_value = MarketData.from_dict(market_payload)
        app = PaperDeskApp(db=db, fetcher=fetcher, clock=lambda: now)

        analysis = app.run_analysis()

        fetcher.get_market_data.assert_called_once_with("SPY", "^VIX")
        assert analysis.current_regime.id == "bull_trending"

    def test_run_analysis_propagates_fetch_errors(self, db, now):
        """Should surface data errors to the caller."""
        fetcher = Mock()
        fetcher.get_market_data.side_effect = ValueError("No historical data available: XYZ")
        app = PaperDeskApp(db=db, fetcher=fetcher, clock=lambda: now)

        with pytest.raises(ValueError):
            app.run_analysis()

    def test_seeded_mock_analysis_is_reproducible(self, db, now):
        """Should repeat the same analysis for the same seed."""
        config = AppConfig(regime=RegimeConfig(random_seed=3))
        first = PaperDeskApp(db=db, config=config, clock=lambda: now).run_analysis(mock=True)
        second = PaperDeskApp(db=db, config=config, clock=lambda: now).run_analysis(mock=True)

        assert first.current_regime.id == second.current_regime.id
        assert first.time_in_regime == second.time_in_regime

    def test_purchase_flow(self, app):
        """Should validate, redeem and exhaust a limited coupon."""
        from paperdesk.cli import add_coupon

        add_coupon(app, "launch", "fixed_amount", "10", usage_limit=2, plans=["yearly"])

        quote = app.coupons.validate_coupon("LAUNCH", Plan.YEARLY, 290)
        assert quote.final_amount == Decimal("280")

        assert app.coupons.redeem_coupon("launch", "yearly", 290).is_valid
        assert app.coupons.redeem_coupon("launch", "yearly", 290).is_valid

        result = app.coupons.redeem_coupon("launch", "yearly", 290)
        assert result.reason is ValidationFailure.USAGE_LIMIT_REACHED
        assert app.coupons.get_coupon_by_code("LAUNCH").used_count == 2


class TestCLICommands:
    """Test CLI command functionality."""

    @pytest.fixture
    def file_app(self, tmp_path, now):
        """App on a file-based database."""
        db = Database(str(tmp_path / "test.db"))
        db.initialize()
        app = PaperDeskApp(db=db, clock=lambda: now)
        app.start()
        yield app
        db.close()

    def test_add_coupon_command(self, file_app, now):
        """Should add a coupon valid for the given number of days."""
        from paperdesk.cli import add_coupon

        coupon = add_coupon(
            file_app,
            code="spring15",
            discount_type="percentage",
            value="15",
            days=10,
            max_discount="20",
        )

        stored = file_app.coupons.get_coupon_by_code("SPRING15")
        assert stored.id == coupon.id
        assert stored.name == "SPRING15"
        assert stored.max_discount == Decimal("20")
        assert stored.valid_until == now + timedelta(days=10)

    def test_add_duplicate_coupon_command(self, file_app):
        """Should refuse to add an existing code."""
        from paperdesk.cli import add_coupon

        with pytest.raises(DuplicateCouponError):
            add_coupon(file_app, code="save20", discount_type="fixed_amount", value="5")

    def test_check_coupon_uses_list_price(self, file_app):
        """Should price the check at the plan's list price by default."""
        from paperdesk.cli import add_coupon, check_coupon, format_result

        add_coupon(file_app, code="spring15", discount_type="percentage", value="15")

        result = check_coupon(file_app, "spring15", "monthly")

        assert result.is_valid
        assert format_result(result) == "Valid: SPRING15 - discount $4.35, pay $24.65"

    def test_check_coupon_redeem(self, file_app):
        """Should record a use when redeeming."""
        from paperdesk.cli import check_coupon

        check_coupon(file_app, "SAVE20", "yearly", redeem=True)
        assert file_app.coupons.get_coupon_by_code("SAVE20").used_count == 68

    def test_format_invalid_result(self, file_app):
        """Should show the rejection reason."""
        from paperdesk.cli import check_coupon, format_result

        result = check_coupon(file_app, "BLACKFRIDAY", "monthly")
        assert format_result(result) == "Invalid: Coupon not valid for monthly plan"

    def test_format_analysis(self, market_payload):
        """Should render regime, indicators, strategies and warnings."""
        from paperdesk.cli import format_analysis
        from paperdesk.regimes.engine import RegimeEngine

        analysis = RegimeEngine(rng=random.Random(1)).analyze_regime(
            MarketData.from_dict(market_payload)
        )
        lines = format_analysis(analysis)

        assert lines[0] == "Regime: Bull Trending (100% confidence)"
        assert any(line.startswith("  VIX: 12.00") for line in lines)
        assert "Strategy: Bull Call Spread [medium risk, 65% win rate]" in lines
        assert "Warning: Market may be overbought - watch for reversal signals" in lines


class TestHealthcheck:
    """Test Discord health check."""

    def test_payload_summarizes_catalog(self, app):
        """Should list active coupons and deals."""
        from paperdesk.healthcheck import build_payload

        payload = build_payload(app)
        embed = payload["embeds"][0]
        fields = {f["name"]: f["value"] for f in embed["fields"]}

        assert embed["title"] == "PaperDesk Health Check"
        assert "SAVE20: $20 OFF (used 67/200)" in fields["Active Coupons"]
        assert "STUDENT: 30% OFF (used 89)" in fields["Active Coupons"]
        assert fields["Featured Deal"] == "Black Friday - Monthly"
        assert "Regime" not in fields

    def test_payload_includes_analysis(self, app, market_payload):
        """Should add the regime and warnings when given an analysis."""
        from paperdesk.healthcheck import build_payload

        analysis = app.regimes.analyze_regime(MarketData.from_dict(market_payload))
        fields = {f["name"]: f["value"] for f in build_payload(app, analysis)["embeds"][0]["fields"]}

        assert fields["Regime"] == "Bull Trending (100%) - Bull Call Spread, Covered Call"
        assert "overbought" in fields["Warnings"]

    def test_sends_to_webhook(self, app, monkeypatch, sample_discord_webhook_url):
        """Should POST the embed to the webhook."""
        from paperdesk.healthcheck import run_healthcheck

        monkeypatch.setenv("DISCORD_WEBHOOK_URL", sample_discord_webhook_url)
        mock_response = MagicMock(status_code=204)

        with patch("requests.post", return_value=mock_response) as mock_post:
            run_healthcheck(app)

        mock_post.assert_called_once()
        args, kwargs = mock_post.call_args
        assert args[0] == sample_discord_webhook_url
        assert kwargs["timeout"] == 10
        assert "embeds" in kwargs["json"]

    def test_skips_without_webhook(self, app, monkeypatch, capsys):
        """Should do nothing when no webhook is configured."""
        from paperdesk.healthcheck import run_healthcheck

        monkeypatch.delenv("DISCORD_WEBHOOK_URL", raising=False)

        with patch("requests.post") as mock_post:
            run_healthcheck(app)

        mock_post.assert_not_called()
        assert "DISCORD_WEBHOOK_URL not set" in capsys.readouterr().out


class TestConfigValidation:
    """Test configuration loading and validation."""

    def test_load_valid_config(self, tmp_path):
        """Should load valid configuration."""
        from paperdesk.config import load_config

        config_content = """
database:
  path: "data/paperdesk.db"

pricing:
  monthly_price: 19.5

coupons:
  respect_deal_start: true

advanced:
  log_level: debug
"""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(config_content)

        config = load_config(str(config_file))

        assert config.database.path == "data/paperdesk.db"
        assert config.pricing.price_for("monthly") == 19.5
        assert config.pricing.price_for("yearly") == 290.0
        assert config.coupons.respect_deal_start is True
        assert config.coupons.seed_defaults is True
        assert config.advanced.log_level == "DEBUG"
        assert config.healthcheck.webhook_url is None

    def test_load_config_with_env_vars(self, tmp_path, monkeypatch):
        """Should substitute environment variables."""
        from paperdesk.config import load_config

        monkeypatch.setenv("DB_PATH", "/custom/path/paperdesk.db")
        monkeypatch.setenv("DISCORD_WEBHOOK_URL", "https://discord.com/api/webhooks/1/x")

        config_content = """
database:
  path: ${DB_PATH}

healthcheck:
  webhook_url: ${DISCORD_WEBHOOK_URL}
"""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(config_content)

        config = load_config(str(config_file))

        assert config.database.path == "/custom/path/paperdesk.db"
        assert config.healthcheck.webhook_url == "https://discord.com/api/webhooks/1/x"

    def test_unset_env_var_is_none(self, tmp_path, monkeypatch):
        """Should treat an unset webhook variable as not configured."""
        from paperdesk.config import load_config

        monkeypatch.delenv("DISCORD_WEBHOOK_URL", raising=False)
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "database:\n  path: data/paperdesk.db\n"
            "healthcheck:\n  webhook_url: ${DISCORD_WEBHOOK_URL}\n"
        )

        assert load_config(str(config_file)).healthcheck.webhook_url is None

    @pytest.mark.parametrize(
        "config_content",
        [
            "database:\n  # Missing required path\n",
            "database:\n  path: data/paperdesk.db\npricing:\n  monthly_price: -5\n",
            "database:\n  path: data/paperdesk.db\npricing:\n  yearly_price: free\n",
            "database:\n  path: data/paperdesk.db\nadvanced:\n  log_level: LOUD\n",
            "database:\n  path: data/paperdesk.db\nregime:\n  symbol: QQQ\n",
        ],
    )
    def test_invalid_config_raises_error(self, tmp_path, config_content):
        """Should raise error for invalid configuration."""
        from paperdesk.config import load_config, ConfigValidationError

        config_file = tmp_path / "config.yaml"
        config_file.write_text(config_content)

        with pytest.raises(ConfigValidationError):
            load_config(str(config_file))

    def test_missing_config_file(self, tmp_path):
        """Should raise when the file does not exist."""
        from paperdesk.config import load_config

        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "missing.yaml"))
