"""
Market regime scoring engine.
"""

import logging
import math
import random
from dataclasses import replace
from typing import Optional

from .catalog import default_regimes, default_strategies
from .indicators import BEAR_TRENDING, evaluate_indicator
from .models import (
    Level,
    MarketData,
    MarketRegime,
    RegimeAnalysis,
    RegimeProbability,
    TradingStrategy,
)

logger = logging.getLogger(__name__)

VOLATILITY_DURATION_MULTIPLIER = {
    Level.HIGH: 0.5,
    Level.MEDIUM: 1.0,
    Level.LOW: 1.5,
}

EXTREME_FEAR_VIX = 30
OVERBOUGHT_RSI = 80
OVERSOLD_RSI = 20
# Compared against raw share volume, so it fires on practically any bear day.
HIGH_VOLUME_SELLING_THRESHOLD = 1.5


class RegimeEngine:
    """Scores market regimes and recommends strategies."""

    def __init__(
        self,
        regimes: Optional[list[MarketRegime]] = None,
        strategies: Optional[list[TradingStrategy]] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize the engine.

        Args:
            regimes: Regime catalog in scoring order (defaults to built-in)
            strategies: Strategy catalog (defaults to built-in)
            rng: Random source for the time-in-regime estimate
        """
        self._regimes = regimes if regimes is not None else default_regimes()
        self._strategies = strategies if strategies is not None else default_strategies()
        self.rng = rng or random.Random()

    def analyze_regime(self, market_data: MarketData) -> RegimeAnalysis:
        """
        Classify the market and build recommendations.

        Args:
            market_data: Validated market snapshot

        Returns:
            RegimeAnalysis for the best-matching regime
        """
        scored = self.calculate_regime_probabilities(market_data)

        # Strictly greater keeps the first regime on ties
        current = scored[0]
        for regime in scored[1:]:
            if regime.probability > current.probability:
                current = regime

        others = [r for r in scored if r.id != current.id]
        others.sort(key=lambda r: r.probability, reverse=True)
        next_regimes = [RegimeProbability(r, r.probability) for r in others[:2]]

        analysis = RegimeAnalysis(
            current_regime=current,
            confidence=current.probability,
            time_in_regime=self.estimate_time_in_regime(current),
            next_regime_prob=next_regimes,
            recommended_strategies=self.get_strategies_for_regime(current.id),
            warnings=self.generate_warnings(current, market_data),
        )
        logger.debug(
            f"Regime {current.id} (confidence {analysis.confidence:.2f}), "
            f"{len(analysis.warnings)} warnings"
        )
        return analysis

    def calculate_regime_probabilities(
        self, market_data: MarketData
    ) -> list[MarketRegime]:
        """
        Score every regime against a snapshot.

        Returns scored copies; the catalog itself is left untouched.
        """
        scored = []
        for regime in self._regimes:
            score = 0.0
            total_weight = 0.0
            indicators = []

            for indicator in regime.indicators:
                value, signal = evaluate_indicator(indicator, market_data, regime.id)
                if regime.trend.matches(signal):
                    score += indicator.weight
                total_weight += indicator.weight
                indicators.append(replace(indicator, value=value, signal=signal))

            probability = score / total_weight if total_weight > 0 else 0.0
            probability = max(0.0, min(1.0, probability))
            scored.append(replace(regime, indicators=indicators, probability=probability))

        return scored

    def estimate_time_in_regime(self, regime: MarketRegime) -> int:
        """
        Rough number of days the market has been in a regime.

        Regime history isn't tracked, so this is a random 10-40 day base
        scaled by volatility: high-volatility regimes are shorter lived.
        """
        base = self.rng.random() * 30 + 10
        multiplier = VOLATILITY_DURATION_MULTIPLIER[regime.volatility]
        return math.floor(base * multiplier + 0.5)

    def generate_warnings(
        self, regime: MarketRegime, market_data: MarketData
    ) -> list[str]:
        """Risk warnings for the selected regime and snapshot."""
        warnings = []

        if regime.volatility is Level.HIGH:
            warnings.append("High volatility detected - use smaller position sizes")

        if market_data.vix > EXTREME_FEAR_VIX:
            warnings.append("Extreme fear in market - consider protective strategies")

        if market_data.rsi > OVERBOUGHT_RSI:
            warnings.append("Market may be overbought - watch for reversal signals")
        elif market_data.rsi < OVERSOLD_RSI:
            warnings.append("Market may be oversold - potential bounce opportunity")

        if (
            regime.id == BEAR_TRENDING
            and market_data.volume > HIGH_VOLUME_SELLING_THRESHOLD
        ):
            warnings.append("High volume selling - trend may accelerate")

        return warnings

    def get_all_regimes(self) -> list[MarketRegime]:
        """All regimes in scoring order."""
        return list(self._regimes)

    def get_all_strategies(self) -> list[TradingStrategy]:
        """All strategies."""
        return list(self._strategies)

    def get_strategy(self, strategy_id: str) -> Optional[TradingStrategy]:
        """Get strategy by ID."""
        return next((s for s in self._strategies if s.id == strategy_id), None)

    def get_strategies_for_regime(self, regime_id: str) -> list[TradingStrategy]:
        """Strategies attached to a regime."""
        return [s for s in self._strategies if s.regime_id == regime_id]
