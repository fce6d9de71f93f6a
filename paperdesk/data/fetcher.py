"""
Yahoo Finance market data fetcher.
"""

import random
from datetime import datetime
from typing import Optional

import pandas as pd
import yfinance as yf

from paperdesk.regimes.models import BollingerBands, MarketData, MovingAverages

TRADING_DAYS_PER_YEAR = 252
MIN_SESSIONS = 200


def sma(closes: pd.Series, window: int) -> float:
    """Simple moving average of the last ``window`` closes."""
    return float(closes.rolling(window).mean().iloc[-1])


def rsi(closes: pd.Series, period: int = 14) -> float:
    """Relative Strength Index with Wilder smoothing."""
    delta = closes.diff()
    gains = delta.clip(lower=0)
    losses = -delta.clip(upper=0)
    avg_gain = gains.ewm(alpha=1 / period, min_periods=period, adjust=False).mean()
    avg_loss = losses.ewm(alpha=1 / period, min_periods=period, adjust=False).mean()

    last_gain = float(avg_gain.iloc[-1])
    last_loss = float(avg_loss.iloc[-1])
    if last_loss == 0:
        return 100.0 if last_gain > 0 else 50.0
    rs = last_gain / last_loss
    return 100 - 100 / (1 + rs)


def macd(closes: pd.Series, fast: int = 12, slow: int = 26) -> float:
    """MACD line (fast EMA minus slow EMA)."""
    fast_ema = closes.ewm(span=fast, adjust=False).mean()
    slow_ema = closes.ewm(span=slow, adjust=False).mean()
    return float(fast_ema.iloc[-1] - slow_ema.iloc[-1])


def bollinger_bands(
    closes: pd.Series, window: int = 20, num_std: float = 2.0
) -> BollingerBands:
    """Bollinger bands around the ``window``-day SMA."""
    middle = closes.rolling(window).mean().iloc[-1]
    std = closes.rolling(window).std().iloc[-1]
    return BollingerBands(
        upper=float(middle + num_std * std),
        middle=float(middle),
        lower=float(middle - num_std * std),
    )


def annualized_volatility(closes: pd.Series, window: int = 20) -> float:
    """Annualized standard deviation of daily returns."""
    returns = closes.pct_change().dropna().tail(window)
    if returns.empty:
        return 0.0
    return float(returns.std() * TRADING_DAYS_PER_YEAR ** 0.5)


class MarketDataFetcher:
    """Builds market snapshots from Yahoo Finance history."""

    def __init__(self, period: str = "1y"):
        self.period = period

    def get_market_data(self, ticker: str = "SPY", vix_ticker: str = "^VIX") -> MarketData:
        """
        Fetch a snapshot for regime analysis.

        Args:
            ticker: Instrument to analyze
            vix_ticker: Volatility index symbol

        Returns:
            MarketData with indicators computed from daily closes

        Raises:
            ValueError: If the symbol is invalid or history is too short
        """
        hist = yf.Ticker(ticker).history(period=self.period)
        if hist.empty:
            raise ValueError(f"No historical data available: {ticker}")
        if len(hist) < MIN_SESSIONS:
            raise ValueError(
                f"Not enough history for {ticker}: {len(hist)} sessions, "
                f"need {MIN_SESSIONS}"
            )

        closes = hist["Close"]
        price = float(closes.iloc[-1])

        return MarketData(
            price=price,
            volume=float(hist["Volume"].iloc[-1]),
            volatility=annualized_volatility(closes),
            rsi=rsi(closes),
            macd=macd(closes),
            bollinger_bands=bollinger_bands(closes),
            moving_averages=MovingAverages(
                sma20=sma(closes, 20),
                sma50=sma(closes, 50),
                sma200=sma(closes, 200),
            ),
            vix=self.get_vix(vix_ticker),
            timestamp=datetime.now(),
        )

    def get_vix(self, vix_ticker: str = "^VIX") -> float:
        """
        Latest volatility index close.

        Raises:
            ValueError: If no data is available
        """
        hist = yf.Ticker(vix_ticker).history(period="5d")
        if hist.empty:
            raise ValueError(f"No historical data available: {vix_ticker}")
        return float(hist["Close"].iloc[-1])


def generate_mock_market_data(rng: Optional[random.Random] = None) -> MarketData:
    """
    Plausible random snapshot around SPY levels, for demos and dry runs.
    """
    rng = rng or random.Random()
    price = 580 + (rng.random() - 0.5) * 20

    return MarketData(
        price=price,
        volume=rng.random() * 2_000_000 + 500_000,
        volatility=rng.random() * 0.3 + 0.1,
        rsi=rng.random() * 100,
        macd=(rng.random() - 0.5) * 10,
        bollinger_bands=BollingerBands(
            upper=price * 1.02,
            middle=price,
            lower=price * 0.98,
        ),
        moving_averages=MovingAverages(
            sma20=price * (0.98 + rng.random() * 0.04),
            sma50=price * (0.96 + rng.random() * 0.08),
            sma200=price * (0.92 + rng.random() * 0.16),
        ),
        vix=rng.random() * 40 + 10,
        timestamp=datetime.now(),
    )
