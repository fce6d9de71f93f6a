"""
Regime engine tests.
Tests for indicator signals, regime scoring and recommendations.
"""

import random

import pytest

from paperdesk.data.fetcher import generate_mock_market_data
from paperdesk.regimes.catalog import default_regimes, default_strategies
from paperdesk.regimes.engine import RegimeEngine
from paperdesk.regimes.indicators import CALCULATORS, evaluate_indicator
from paperdesk.regimes.models import (
    IndicatorKind,
    Level,
    MarketData,
    MarketRegime,
    RegimeIndicator,
    Signal,
    Trend,
)


@pytest.fixture
def regime_engine():
    """Regime engine with a seeded random source."""
    return RegimeEngine(rng=random.Random(7))


@pytest.fixture
def bull_data(market_payload):
    """Price above SMA200, low VIX, positive MACD, overbought RSI."""
    return MarketData.from_dict(market_payload)


@pytest.fixture
def bear_data(market_payload):
    """Price well below SMA200, high VIX, negative MACD, oversold RSI."""
    market_payload.update(price=500.0, rsi=18.0, macd=-4.0, vix=35.0)
    return MarketData.from_dict(market_payload)


class TestIndicators:
    """Test per-indicator calculations."""

    def test_every_kind_has_calculator(self):
        """Should register a calculator for every indicator kind."""
        assert set(CALCULATORS) == set(IndicatorKind)

    def test_price_vs_sma200(self, bull_data):
        """Should compare price to the 200-day average."""
        indicator = RegimeIndicator(IndicatorKind.PRICE_VS_SMA200, threshold=1.05, weight=0.3)
        value, signal = evaluate_indicator(indicator, bull_data, "bull_trending")
        assert value == pytest.approx(580 / 550)
        assert signal is Signal.BULLISH

        indicator.threshold = 1.10
        _, signal = evaluate_indicator(indicator, bull_data, "bull_trending")
        assert signal is Signal.BEARISH

    def test_rsi_depends_on_regime(self, bull_data):
        """Should read RSI differently per regime."""
        indicator = RegimeIndicator(IndicatorKind.RSI, threshold=50, weight=0.2)
        assert evaluate_indicator(indicator, bull_data, "bull_trending")[1] is Signal.BULLISH

        bear_indicator = RegimeIndicator(IndicatorKind.RSI, threshold=30, weight=0.2)
        # 85 is not below 30
        assert evaluate_indicator(bear_indicator, bull_data, "bear_trending")[1] is Signal.BULLISH

        # Outside 30-70 on any other regime
        assert evaluate_indicator(indicator, bull_data, "sideways_range")[1] is Signal.BEARISH

    def test_rsi_neutral_band(self, market_payload):
        """Should be neutral between 30 and 70 outside trend regimes."""
        market_payload["rsi"] = 50
        data = MarketData.from_dict(market_payload)
        indicator = RegimeIndicator(IndicatorKind.RSI, threshold=40, weight=0.2)
        assert evaluate_indicator(indicator, data, "sideways_range")[1] is Signal.NEUTRAL

    def test_macd(self, bull_data, bear_data):
        """Should be bullish above the threshold."""
        indicator = RegimeIndicator(IndicatorKind.MACD, threshold=0, weight=0.2)
        assert evaluate_indicator(indicator, bull_data, "bull_trending") == (3.0, Signal.BULLISH)
        assert evaluate_indicator(indicator, bear_data, "bear_trending") == (-4.0, Signal.BEARISH)

    @pytest.mark.parametrize(
        "regime_id,vix,expected",
        [
            ("bull_trending", 12, Signal.BULLISH),
            ("bull_trending", 25, Signal.BEARISH),
            ("low_volatility", 12, Signal.BULLISH),
            ("bear_trending", 35, Signal.BEARISH),
            ("bear_trending", 25, Signal.BULLISH),
            ("high_volatility", 35, Signal.BEARISH),
            ("sideways_range", 35, Signal.NEUTRAL),
        ],
    )
    def test_vix(self, market_payload, regime_id, vix, expected):
        """Should read VIX according to the regime."""
        market_payload["vix"] = vix
        data = MarketData.from_dict(market_payload)
        thresholds = {
            "bull_trending": 20,
            "low_volatility": 15,
            "bear_trending": 30,
            "high_volatility": 25,
            "sideways_range": 20,
        }
        indicator = RegimeIndicator(IndicatorKind.VIX, threshold=thresholds[regime_id], weight=0.3)
        value, signal = evaluate_indicator(indicator, data, regime_id)
        assert value == vix
        assert signal is expected

    def test_placeholders_are_neutral(self, bull_data):
        """Should score range and volume indicators as neutral."""
        for kind in (
            IndicatorKind.DAILY_RANGE,
            IndicatorKind.VOLUME,
            IndicatorKind.PRICE_RANGE,
            IndicatorKind.RSI_RANGE,
            IndicatorKind.VOLUME_SPIKE,
        ):
            indicator = RegimeIndicator(kind, threshold=1, weight=0.1)
            assert evaluate_indicator(indicator, bull_data, "sideways_range")[1] is Signal.NEUTRAL

    def test_volume_in_millions(self, bull_data):
        """Should normalize volume to millions of shares."""
        indicator = RegimeIndicator(IndicatorKind.VOLUME, threshold=0.8, weight=0.2)
        assert evaluate_indicator(indicator, bull_data, "sideways_range")[0] == 2.0

    def test_daily_range(self, bull_data):
        """Should assume a 2% daily range."""
        indicator = RegimeIndicator(IndicatorKind.DAILY_RANGE, threshold=0.02, weight=0.3)
        assert evaluate_indicator(indicator, bull_data, "high_volatility")[0] == pytest.approx(0.02)


class TestRegimeScoring:
    """Test regime probability calculation."""

    def test_bull_snapshot_scores(self, regime_engine, bull_data):
        """Should score each regime by matched weight."""
        scored = {r.id: r.probability for r in regime_engine.calculate_regime_probabilities(bull_data)}

        assert scored["bull_trending"] == pytest.approx(1.0)
        assert scored["bear_trending"] == pytest.approx(0.0)
        assert scored["sideways_range"] == pytest.approx(1.0)
        assert scored["high_volatility"] == pytest.approx(0.6)
        assert scored["low_volatility"] == pytest.approx(0.6)

    def test_bear_snapshot_scores(self, regime_engine, bear_data):
        """Should fully match the bear regime on a bear snapshot."""
        scored = {r.id: r.probability for r in regime_engine.calculate_regime_probabilities(bear_data)}
        assert scored["bear_trending"] == pytest.approx(1.0)
        assert scored["bull_trending"] == pytest.approx(0.0)

    def test_scored_indicators_carry_values(self, regime_engine, bull_data):
        """Should record each indicator's value and signal."""
        bull = regime_engine.calculate_regime_probabilities(bull_data)[0]
        vix = next(i for i in bull.indicators if i.kind is IndicatorKind.VIX)
        assert vix.value == 12.0
        assert vix.signal is Signal.BULLISH

    def test_catalog_not_mutated(self, regime_engine, bull_data):
        """Should leave catalog regimes untouched."""
        regime_engine.analyze_regime(bull_data)
        for regime in regime_engine.get_all_regimes():
            assert regime.probability == 0.0
            assert all(i.value == 0.0 for i in regime.indicators)
            assert all(i.signal is Signal.NEUTRAL for i in regime.indicators)

    def test_probabilities_bounded(self, regime_engine):
        """Should keep every probability within [0, 1]."""
        rng = random.Random(1234)
        for _ in range(200):
            data = generate_mock_market_data(rng)
            for regime in regime_engine.calculate_regime_probabilities(data):
                assert 0.0 <= regime.probability <= 1.0

    def test_zero_weight_regime(self, bull_data):
        """Should score a weightless regime as zero."""
        regime = MarketRegime(
            id="empty",
            name="Empty",
            description="",
            characteristics=[],
            indicators=[],
            volatility=Level.MEDIUM,
            trend=Trend.SIDEWAYS,
            duration="",
        )
        engine = RegimeEngine(regimes=[regime], strategies=[])
        analysis = engine.analyze_regime(bull_data)
        assert analysis.current_regime.id == "empty"
        assert analysis.confidence == 0.0
        assert analysis.next_regime_prob == []


class TestAnalyzeRegime:
    """Test full regime analysis."""

    def test_bull_market(self, regime_engine, bull_data):
        """Should pick bull trending and warn about overbought RSI."""
        analysis = regime_engine.analyze_regime(bull_data)

        assert analysis.current_regime.id == "bull_trending"
        assert analysis.confidence == pytest.approx(1.0)
        assert "Market may be overbought - watch for reversal signals" in analysis.warnings
        assert [s.id for s in analysis.recommended_strategies] == [
            "bull_call_spread",
            "covered_call",
        ]

    def test_tie_goes_to_first_regime(self, regime_engine, bull_data):
        """Should prefer catalog order when probabilities tie."""
        # bull_trending and sideways_range both score 1.0
        analysis = regime_engine.analyze_regime(bull_data)
        assert analysis.current_regime.id == "bull_trending"
        assert analysis.next_regime_prob[0].regime.id == "sideways_range"

    def test_next_regimes(self, regime_engine, bull_data):
        """Should list the two next most likely regimes, highest first."""
        analysis = regime_engine.analyze_regime(bull_data)

        assert len(analysis.next_regime_prob) == 2
        assert all(p.regime.id != "bull_trending" for p in analysis.next_regime_prob)
        probabilities = [p.probability for p in analysis.next_regime_prob]
        assert probabilities == sorted(probabilities, reverse=True)
        assert probabilities == [pytest.approx(1.0), pytest.approx(0.6)]
        assert analysis.next_regime_prob[1].regime.id == "high_volatility"

    def test_extreme_fear_warning(self, regime_engine, market_payload):
        """Should warn about extreme fear whenever VIX is above 30."""
        market_payload.update(vix=35.0, rsi=50.0)
        analysis = regime_engine.analyze_regime(MarketData.from_dict(market_payload))
        assert "Extreme fear in market - consider protective strategies" in analysis.warnings

    def test_bear_market_warnings(self, regime_engine, bear_data):
        """Should emit every matching warning in order."""
        analysis = regime_engine.analyze_regime(bear_data)

        assert analysis.current_regime.id == "bear_trending"
        assert analysis.warnings == [
            "High volatility detected - use smaller position sizes",
            "Extreme fear in market - consider protective strategies",
            "Market may be oversold - potential bounce opportunity",
            "High volume selling - trend may accelerate",
        ]
        assert [s.id for s in analysis.recommended_strategies] == [
            "bear_put_spread",
            "protective_put",
        ]

    def test_no_warnings_in_calm_market(self, regime_engine, market_payload):
        """Should stay quiet when nothing is extreme."""
        market_payload.update(rsi=60.0, vix=14.0)
        analysis = regime_engine.analyze_regime(MarketData.from_dict(market_payload))
        assert analysis.warnings == []

    def test_time_in_regime_range(self, bull_data, bear_data):
        """Should keep the estimate within the volatility-scaled range."""
        engine = RegimeEngine()
        for _ in range(50):
            medium = engine.analyze_regime(bull_data).time_in_regime
            high = engine.analyze_regime(bear_data).time_in_regime
            assert 10 <= medium <= 40
            assert 5 <= high <= 20

    def test_time_in_regime_low_volatility(self, regime_engine):
        """Should stretch estimates for low-volatility regimes."""
        low = next(r for r in regime_engine.get_all_regimes() if r.id == "low_volatility")
        for _ in range(50):
            assert 15 <= regime_engine.estimate_time_in_regime(low) <= 60

    def test_seeded_estimate_is_reproducible(self, bull_data):
        """Should repeat estimates with the same seed."""
        first = RegimeEngine(rng=random.Random(42)).analyze_regime(bull_data)
        second = RegimeEngine(rng=random.Random(42)).analyze_regime(bull_data)
        assert first.time_in_regime == second.time_in_regime


class TestCatalogAccess:
    """Test regime and strategy accessors."""

    def test_all_regimes(self, regime_engine):
        """Should list the five regimes in order."""
        assert [r.id for r in regime_engine.get_all_regimes()] == [
            "bull_trending",
            "bear_trending",
            "sideways_range",
            "high_volatility",
            "low_volatility",
        ]

    def test_all_strategies(self, regime_engine):
        """Should list every strategy."""
        assert len(regime_engine.get_all_strategies()) == 7

    def test_accessors_return_copies(self, regime_engine):
        """Should not expose the internal lists."""
        regime_engine.get_all_strategies().clear()
        regime_engine.get_all_regimes().clear()
        assert len(regime_engine.get_all_strategies()) == 7
        assert len(regime_engine.get_all_regimes()) == 5

    def test_get_strategy(self, regime_engine):
        """Should find a strategy by ID."""
        strategy = regime_engine.get_strategy("iron_condor")
        assert strategy.regime_id == "sideways_range"
        assert [i.step for i in strategy.instructions] == [1, 2, 3, 4]
        assert regime_engine.get_strategy("missing") is None

    def test_strategies_for_regime(self, regime_engine):
        """Should filter strategies by regime."""
        assert [s.id for s in regime_engine.get_strategies_for_regime("high_volatility")] == [
            "long_straddle"
        ]
        assert regime_engine.get_strategies_for_regime("unknown") == []

    def test_every_strategy_has_a_regime(self):
        """Should only reference regimes in the catalog."""
        regime_ids = {r.id for r in default_regimes()}
        assert all(s.regime_id in regime_ids for s in default_strategies())
