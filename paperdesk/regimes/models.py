"""
Market regime, strategy and market-data models.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class Signal(str, Enum):
    """Direction an indicator points to."""

    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class Trend(str, Enum):
    """Declared direction of a regime."""

    BULLISH = "bullish"
    BEARISH = "bearish"
    SIDEWAYS = "sideways"

    def matches(self, signal: Signal) -> bool:
        """Whether an indicator signal supports this trend."""
        return _TREND_SIGNALS[self] is signal


_TREND_SIGNALS = {
    Trend.BULLISH: Signal.BULLISH,
    Trend.BEARISH: Signal.BEARISH,
    Trend.SIDEWAYS: Signal.NEUTRAL,
}


class Level(str, Enum):
    """Low / medium / high scale used for volatility and risk."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Timeframe(str, Enum):
    """Holding period of a strategy."""

    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


class IndicatorKind(str, Enum):
    """Technical indicators a regime can be scored on."""

    PRICE_VS_SMA200 = "Price vs SMA200"
    RSI = "RSI"
    MACD = "MACD"
    VIX = "VIX"
    DAILY_RANGE = "Daily Range"
    VOLUME = "Volume"
    PRICE_RANGE = "Price Range"
    RSI_RANGE = "RSI Range"
    VOLUME_SPIKE = "Volume Spike"


@dataclass
class RegimeIndicator:
    """Indicator with its matching threshold and weight inside one regime."""

    kind: IndicatorKind
    threshold: float
    weight: float
    value: float = 0.0
    signal: Signal = Signal.NEUTRAL

    @property
    def name(self) -> str:
        return self.kind.value


@dataclass
class MarketRegime:
    """Named characterization of overall market behavior."""

    id: str
    name: str
    description: str
    characteristics: list[str]
    indicators: list[RegimeIndicator]
    volatility: Level
    trend: Trend
    duration: str  # free-text estimate, e.g. "2-6 months"
    probability: float = 0.0


@dataclass
class StrategyInstruction:
    """One step of a strategy playbook."""

    step: int
    action: str
    description: str
    timing: str
    conditions: list[str] = field(default_factory=list)


@dataclass
class StrategyExample:
    """Worked example of a strategy."""

    scenario: str
    setup: str
    entry: str
    exit: str
    result: str
    pnl: float


@dataclass
class TradingStrategy:
    """Options playbook tied to a regime."""

    id: str
    name: str
    description: str
    regime_id: str
    timeframe: Timeframe
    risk_level: Level
    expected_return: float  # percent
    max_drawdown: float  # percent
    win_rate: float  # percent
    instructions: list[StrategyInstruction] = field(default_factory=list)
    examples: list[StrategyExample] = field(default_factory=list)
    risks: list[str] = field(default_factory=list)
    benefits: list[str] = field(default_factory=list)


@dataclass
class RegimeProbability:
    """Regime paired with its scored probability."""

    regime: MarketRegime
    probability: float


@dataclass
class RegimeAnalysis:
    """Result of scoring the regime catalog against a market snapshot."""

    current_regime: MarketRegime
    confidence: float
    time_in_regime: int  # days, heuristic estimate
    next_regime_prob: list[RegimeProbability]
    recommended_strategies: list[TradingStrategy]
    warnings: list[str]


class DataErrorKind(str, Enum):
    """Why a market snapshot was rejected."""

    MISSING_FIELD = "missing_field"
    INVALID_VALUE = "invalid_value"


class MarketDataError(ValueError):
    """Raised when a market snapshot is incomplete or malformed."""

    def __init__(self, field_name: str, kind: DataErrorKind, message: str):
        super().__init__(message)
        self.field = field_name
        self.kind = kind


def _check_number(field_name: str, value: Any, positive: bool = False) -> float:
    if value is None:
        raise MarketDataError(
            field_name, DataErrorKind.MISSING_FIELD, f"Missing market data field: {field_name}"
        )
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MarketDataError(
            field_name,
            DataErrorKind.INVALID_VALUE,
            f"Market data field {field_name} must be a number, got {value!r}",
        )
    if not math.isfinite(value):
        raise MarketDataError(
            field_name,
            DataErrorKind.INVALID_VALUE,
            f"Market data field {field_name} is not finite: {value}",
        )
    if positive and value <= 0:
        raise MarketDataError(
            field_name,
            DataErrorKind.INVALID_VALUE,
            f"Market data field {field_name} must be positive: {value}",
        )
    return float(value)


@dataclass
class BollingerBands:
    """Bollinger band levels."""

    upper: float
    middle: float
    lower: float

    def __post_init__(self):
        self.upper = _check_number("bollinger_bands.upper", self.upper)
        self.middle = _check_number("bollinger_bands.middle", self.middle)
        self.lower = _check_number("bollinger_bands.lower", self.lower)


@dataclass
class MovingAverages:
    """Simple moving averages."""

    sma20: float
    sma50: float
    sma200: float

    def __post_init__(self):
        self.sma20 = _check_number("moving_averages.sma20", self.sma20)
        self.sma50 = _check_number("moving_averages.sma50", self.sma50)
        self.sma200 = _check_number("moving_averages.sma200", self.sma200, positive=True)


@dataclass
class MarketData:
    """
    Snapshot of market indicators for one instrument.

    Every field is validated on construction; a missing or non-finite value
    raises MarketDataError instead of leaking NaN into regime scores.
    """

    price: float
    volume: float
    volatility: float
    rsi: float
    macd: float
    bollinger_bands: BollingerBands
    moving_averages: MovingAverages
    vix: float
    timestamp: Optional[datetime] = None

    def __post_init__(self):
        self.price = _check_number("price", self.price, positive=True)
        self.volume = _check_number("volume", self.volume)
        self.volatility = _check_number("volatility", self.volatility)
        self.rsi = _check_number("rsi", self.rsi)
        self.macd = _check_number("macd", self.macd)
        self.vix = _check_number("vix", self.vix)
        if not isinstance(self.bollinger_bands, BollingerBands):
            raise MarketDataError(
                "bollinger_bands",
                DataErrorKind.MISSING_FIELD,
                "Missing market data field: bollinger_bands",
            )
        if not isinstance(self.moving_averages, MovingAverages):
            raise MarketDataError(
                "moving_averages",
                DataErrorKind.MISSING_FIELD,
                "Missing market data field: moving_averages",
            )
        if self.timestamp is None:
            self.timestamp = datetime.now()

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "MarketData":
        """
        Build a snapshot from a plain dictionary.

        Raises:
            MarketDataError: If a field is missing or malformed
        """
        bands = payload.get("bollinger_bands")
        averages = payload.get("moving_averages")
        if not isinstance(bands, dict):
            raise MarketDataError(
                "bollinger_bands",
                DataErrorKind.MISSING_FIELD,
                "Missing market data field: bollinger_bands",
            )
        if not isinstance(averages, dict):
            raise MarketDataError(
                "moving_averages",
                DataErrorKind.MISSING_FIELD,
                "Missing market data field: moving_averages",
            )

        timestamp = payload.get("timestamp")
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp)

        return cls(
            price=payload.get("price"),
            volume=payload.get("volume"),
            volatility=payload.get("volatility"),
            rsi=payload.get("rsi"),
            macd=payload.get("macd"),
            bollinger_bands=BollingerBands(
                upper=bands.get("upper"),
                middle=bands.get("middle"),
                lower=bands.get("lower"),
            ),
            moving_averages=MovingAverages(
                sma20=averages.get("sma20"),
                sma50=averages.get("sma50"),
                sma200=averages.get("sma200"),
            ),
            vix=payload.get("vix"),
            timestamp=timestamp,
        )
