"""
Per-indicator value and signal calculations.

Each calculator takes the snapshot, the indicator threshold and the id of the
regime being scored, and returns ``(value, signal)``. RSI and VIX read
differently depending on the regime: a low VIX confirms a bull market while a
high VIX confirms a bear market.
"""

from typing import Callable

from .models import IndicatorKind, MarketData, RegimeIndicator, Signal

BULL_TRENDING = "bull_trending"
BEAR_TRENDING = "bear_trending"
HIGH_VOLATILITY = "high_volatility"
LOW_VOLATILITY = "low_volatility"

# Daily range is not part of the snapshot yet; assume a 2% swing.
ASSUMED_DAILY_RANGE = 0.02

Calculator = Callable[[MarketData, float, str], tuple[float, Signal]]


def price_vs_sma200(data: MarketData, threshold: float, regime_id: str) -> tuple[float, Signal]:
    value = data.price / data.moving_averages.sma200
    return value, Signal.BULLISH if value > threshold else Signal.BEARISH


def rsi(data: MarketData, threshold: float, regime_id: str) -> tuple[float, Signal]:
    value = data.rsi
    if regime_id == BULL_TRENDING:
        signal = Signal.BULLISH if value > threshold else Signal.BEARISH
    elif regime_id == BEAR_TRENDING:
        signal = Signal.BEARISH if value < threshold else Signal.BULLISH
    else:
        signal = Signal.NEUTRAL if 30 < value < 70 else Signal.BEARISH
    return value, signal


def macd(data: MarketData, threshold: float, regime_id: str) -> tuple[float, Signal]:
    value = data.macd
    return value, Signal.BULLISH if value > threshold else Signal.BEARISH


def vix(data: MarketData, threshold: float, regime_id: str) -> tuple[float, Signal]:
    value = data.vix
    if regime_id in (BULL_TRENDING, LOW_VOLATILITY):
        signal = Signal.BULLISH if value < threshold else Signal.BEARISH
    elif regime_id in (BEAR_TRENDING, HIGH_VOLATILITY):
        signal = Signal.BEARISH if value > threshold else Signal.BULLISH
    else:
        signal = Signal.NEUTRAL
    return value, signal


def daily_range(data: MarketData, threshold: float, regime_id: str) -> tuple[float, Signal]:
    value = abs(data.price * ASSUMED_DAILY_RANGE) / data.price
    return value, Signal.NEUTRAL


def volume(data: MarketData, threshold: float, regime_id: str) -> tuple[float, Signal]:
    # Millions of shares
    return data.volume / 1_000_000, Signal.NEUTRAL


def placeholder(data: MarketData, threshold: float, regime_id: str) -> tuple[float, Signal]:
    """Indicators with no calculation yet score as neutral with value 0."""
    return 0.0, Signal.NEUTRAL


CALCULATORS: dict[IndicatorKind, Calculator] = {
    IndicatorKind.PRICE_VS_SMA200: price_vs_sma200,
    IndicatorKind.RSI: rsi,
    IndicatorKind.MACD: macd,
    IndicatorKind.VIX: vix,
    IndicatorKind.DAILY_RANGE: daily_range,
    IndicatorKind.VOLUME: volume,
    IndicatorKind.PRICE_RANGE: placeholder,
    IndicatorKind.RSI_RANGE: placeholder,
    IndicatorKind.VOLUME_SPIKE: placeholder,
}


def evaluate_indicator(
    indicator: RegimeIndicator, data: MarketData, regime_id: str
) -> tuple[float, Signal]:
    """
    Compute an indicator's value and signal for one regime.

    Raises:
        KeyError: If no calculator is registered for the indicator kind
    """
    calculator = CALCULATORS[indicator.kind]
    return calculator(data, indicator.threshold, regime_id)
