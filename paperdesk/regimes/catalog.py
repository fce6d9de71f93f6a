"""
Built-in regime and strategy catalog.

Functions return fresh objects on every call so callers can't corrupt the
shared catalog.
"""

from .models import (
    IndicatorKind,
    Level,
    MarketRegime,
    RegimeIndicator,
    StrategyExample,
    StrategyInstruction,
    Timeframe,
    TradingStrategy,
    Trend,
)


def default_regimes() -> list[MarketRegime]:
    """The five market regimes, in scoring order."""
    return [
        MarketRegime(
            id="bull_trending",
            name="Bull Trending",
            description="Strong upward price movement with high momentum and increasing volume",
            characteristics=[
                "Price above all major moving averages",
                "RSI between 50-80",
                "MACD positive and rising",
                "Volume increasing on up days",
                "VIX below 20",
            ],
            indicators=[
                RegimeIndicator(IndicatorKind.PRICE_VS_SMA200, threshold=1.05, weight=0.3),
                RegimeIndicator(IndicatorKind.RSI, threshold=50, weight=0.2),
                RegimeIndicator(IndicatorKind.MACD, threshold=0, weight=0.2),
                RegimeIndicator(IndicatorKind.VIX, threshold=20, weight=0.3),
            ],
            volatility=Level.MEDIUM,
            trend=Trend.BULLISH,
            duration="2-6 months",
        ),
        MarketRegime(
            id="bear_trending",
            name="Bear Trending",
            description="Strong downward price movement with high momentum and panic selling",
            characteristics=[
                "Price below all major moving averages",
                "RSI below 30",
                "MACD negative and falling",
                "Volume increasing on down days",
                "VIX above 30",
            ],
            indicators=[
                RegimeIndicator(IndicatorKind.PRICE_VS_SMA200, threshold=0.95, weight=0.3),
                RegimeIndicator(IndicatorKind.RSI, threshold=30, weight=0.2),
                RegimeIndicator(IndicatorKind.MACD, threshold=0, weight=0.2),
                RegimeIndicator(IndicatorKind.VIX, threshold=30, weight=0.3),
            ],
            volatility=Level.HIGH,
            trend=Trend.BEARISH,
            duration="1-4 months",
        ),
        MarketRegime(
            id="sideways_range",
            name="Sideways Range",
            description="Price moving within a defined range with no clear directional bias",
            characteristics=[
                "Price oscillating between support and resistance",
                "RSI between 30-70",
                "MACD oscillating around zero",
                "Low volume",
                "VIX between 15-25",
            ],
            indicators=[
                RegimeIndicator(IndicatorKind.PRICE_RANGE, threshold=0.05, weight=0.4),
                RegimeIndicator(IndicatorKind.RSI_RANGE, threshold=40, weight=0.2),
                RegimeIndicator(IndicatorKind.VOLUME, threshold=0.8, weight=0.2),
                RegimeIndicator(IndicatorKind.VIX, threshold=20, weight=0.2),
            ],
            volatility=Level.LOW,
            trend=Trend.SIDEWAYS,
            duration="1-3 months",
        ),
        MarketRegime(
            id="high_volatility",
            name="High Volatility",
            description="Extreme price swings with uncertainty and emotional trading",
            characteristics=[
                "Large daily price movements (>2%)",
                "VIX above 25",
                "Whipsaw price action",
                "High volume spikes",
                "News-driven moves",
            ],
            indicators=[
                RegimeIndicator(IndicatorKind.DAILY_RANGE, threshold=0.02, weight=0.3),
                RegimeIndicator(IndicatorKind.VIX, threshold=25, weight=0.4),
                RegimeIndicator(IndicatorKind.VOLUME_SPIKE, threshold=1.5, weight=0.3),
            ],
            volatility=Level.HIGH,
            trend=Trend.SIDEWAYS,
            duration="2-8 weeks",
        ),
        MarketRegime(
            id="low_volatility",
            name="Low Volatility",
            description="Calm market conditions with minimal price movement and low volume",
            characteristics=[
                "Small daily price movements (<1%)",
                "VIX below 15",
                "Low volume",
                "Tight trading ranges",
                "Complacent sentiment",
            ],
            indicators=[
                RegimeIndicator(IndicatorKind.DAILY_RANGE, threshold=0.01, weight=0.3),
                RegimeIndicator(IndicatorKind.VIX, threshold=15, weight=0.4),
                RegimeIndicator(IndicatorKind.VOLUME, threshold=0.7, weight=0.3),
            ],
            volatility=Level.LOW,
            trend=Trend.SIDEWAYS,
            duration="1-6 months",
        ),
    ]


def default_strategies() -> list[TradingStrategy]:
    """Options playbooks, grouped by regime."""
    return [
        # Bull trending
        TradingStrategy(
            id="bull_call_spread",
            name="Bull Call Spread",
            description="Buy lower strike call, sell higher strike call to profit from moderate upward movement",
            regime_id="bull_trending",
            timeframe=Timeframe.SHORT,
            risk_level=Level.MEDIUM,
            expected_return=15,
            max_drawdown=8,
            win_rate=65,
            instructions=[
                StrategyInstruction(
                    1,
                    "Buy Call Option",
                    "Purchase a call option at or slightly out-of-the-money",
                    "When regime is confirmed",
                    ["RSI > 50", "Price above SMA20", "MACD positive"],
                ),
                StrategyInstruction(
                    2,
                    "Sell Call Option",
                    "Sell a call option with higher strike price (same expiration)",
                    "Immediately after buying the lower strike",
                    ["Strike price 5-10% above current price"],
                ),
                StrategyInstruction(
                    3,
                    "Monitor Position",
                    "Track price movement and regime indicators",
                    "Daily",
                    ["Watch for regime change signals"],
                ),
                StrategyInstruction(
                    4,
                    "Exit Strategy",
                    "Close position when target is reached or regime changes",
                    "At 50% profit or regime change",
                    ["Take profit at 50% max gain", "Exit if RSI < 40"],
                ),
            ],
            examples=[
                StrategyExample(
                    scenario="SPY Bull Call Spread",
                    setup="SPY at $580, buy $580 call, sell $590 call",
                    entry="Net debit: $3.50",
                    exit="SPY moves to $588, close for $7.00",
                    result="Profit: $3.50 (100% return)",
                    pnl=350,
                )
            ],
            risks=[
                "Limited profit potential",
                "Time decay affects both legs",
                "Early assignment risk on short call",
            ],
            benefits=[
                "Lower cost than buying call outright",
                "Defined maximum risk",
                "Profits from moderate upward movement",
            ],
        ),
        TradingStrategy(
            id="covered_call",
            name="Covered Call",
            description="Own stock and sell call options to generate income in moderately bullish markets",
            regime_id="bull_trending",
            timeframe=Timeframe.MEDIUM,
            risk_level=Level.LOW,
            expected_return=8,
            max_drawdown=5,
            win_rate=75,
            instructions=[
                StrategyInstruction(
                    1,
                    "Own the Stock",
                    "Hold 100 shares of the underlying stock",
                    "Before implementing strategy",
                    ["Bullish on stock long-term"],
                ),
                StrategyInstruction(
                    2,
                    "Sell Call Option",
                    "Sell out-of-the-money call option",
                    "When IV is elevated",
                    ["Strike 5-10% above current price", "High implied volatility"],
                ),
                StrategyInstruction(
                    3,
                    "Collect Premium",
                    "Receive premium income immediately",
                    "At trade execution",
                    ["Premium > 1% of stock value"],
                ),
                StrategyInstruction(
                    4,
                    "Manage Assignment",
                    "Be prepared to sell stock if called away",
                    "At expiration or early assignment",
                    ["Stock price above strike price"],
                ),
            ],
            examples=[
                StrategyExample(
                    scenario="AAPL Covered Call",
                    setup="Own 100 AAPL at $185, sell $195 call",
                    entry="Collect $2.50 premium",
                    exit="AAPL stays below $195, keep premium",
                    result="Income: $250 (1.35% return)",
                    pnl=250,
                )
            ],
            risks=[
                "Limited upside if stock rallies strongly",
                "Still exposed to downside risk",
                "Opportunity cost if stock soars",
            ],
            benefits=[
                "Generate income from stock holdings",
                "Lower breakeven point",
                "Works well in sideways to moderately bullish markets",
            ],
        ),
        # Bear trending
        TradingStrategy(
            id="bear_put_spread",
            name="Bear Put Spread",
            description="Buy higher strike put, sell lower strike put to profit from moderate downward movement",
            regime_id="bear_trending",
            timeframe=Timeframe.SHORT,
            risk_level=Level.MEDIUM,
            expected_return=18,
            max_drawdown=10,
            win_rate=60,
            instructions=[
                StrategyInstruction(
                    1,
                    "Buy Put Option",
                    "Purchase a put option at or slightly out-of-the-money",
                    "When bear regime is confirmed",
                    ["RSI < 50", "Price below SMA20", "MACD negative"],
                ),
                StrategyInstruction(
                    2,
                    "Sell Put Option",
                    "Sell a put option with lower strike price (same expiration)",
                    "Immediately after buying the higher strike",
                    ["Strike price 5-10% below current price"],
                ),
                StrategyInstruction(
                    3,
                    "Monitor Position",
                    "Track price movement and regime indicators",
                    "Daily",
                    ["Watch for regime change signals"],
                ),
                StrategyInstruction(
                    4,
                    "Exit Strategy",
                    "Close position when target is reached or regime changes",
                    "At 50% profit or regime change",
                    ["Take profit at 50% max gain", "Exit if RSI > 60"],
                ),
            ],
            examples=[
                StrategyExample(
                    scenario="QQQ Bear Put Spread",
                    setup="QQQ at $500, buy $500 put, sell $490 put",
                    entry="Net debit: $4.00",
                    exit="QQQ drops to $492, close for $8.00",
                    result="Profit: $4.00 (100% return)",
                    pnl=400,
                )
            ],
            risks=[
                "Limited profit potential",
                "Time decay affects both legs",
                "Early assignment risk on short put",
            ],
            benefits=[
                "Lower cost than buying put outright",
                "Defined maximum risk",
                "Profits from moderate downward movement",
            ],
        ),
        TradingStrategy(
            id="protective_put",
            name="Protective Put",
            description="Buy put options to protect existing stock positions during bear markets",
            regime_id="bear_trending",
            timeframe=Timeframe.MEDIUM,
            risk_level=Level.LOW,
            expected_return=-5,
            max_drawdown=3,
            win_rate=85,
            instructions=[
                StrategyInstruction(
                    1,
                    "Own the Stock",
                    "Hold stock position you want to protect",
                    "Before bear regime begins",
                    ["Long-term bullish on stock"],
                ),
                StrategyInstruction(
                    2,
                    "Buy Put Option",
                    "Purchase put option as insurance",
                    "When bear signals appear",
                    ["Strike price 5-10% below current price"],
                ),
                StrategyInstruction(
                    3,
                    "Monitor Protection",
                    "Track how put value changes with stock price",
                    "Daily",
                    ["Put gains value as stock falls"],
                ),
                StrategyInstruction(
                    4,
                    "Decide on Exercise",
                    "Exercise put if stock falls significantly",
                    "Near expiration or major decline",
                    ["Stock price below strike price"],
                ),
            ],
            examples=[
                StrategyExample(
                    scenario="TSLA Protective Put",
                    setup="Own 100 TSLA at $250, buy $240 put for $8",
                    entry="Insurance cost: $800",
                    exit="TSLA drops to $220, put worth $20",
                    result="Protection: Limited loss to $18/share",
                    pnl=-800,
                )
            ],
            risks=[
                "Cost of insurance reduces returns",
                "Put expires worthless if stock rises",
                "Time decay erodes put value",
            ],
            benefits=[
                "Limits downside risk",
                "Allows keeping stock position",
                "Peace of mind during volatility",
            ],
        ),
        # Sideways range
        TradingStrategy(
            id="iron_condor",
            name="Iron Condor",
            description="Sell call and put spreads to profit from low volatility and range-bound movement",
            regime_id="sideways_range",
            timeframe=Timeframe.SHORT,
            risk_level=Level.MEDIUM,
            expected_return=12,
            max_drawdown=15,
            win_rate=70,
            instructions=[
                StrategyInstruction(
                    1,
                    "Sell Call Spread",
                    "Sell call, buy higher strike call",
                    "When range is established",
                    ["Price in middle of range", "High IV"],
                ),
                StrategyInstruction(
                    2,
                    "Sell Put Spread",
                    "Sell put, buy lower strike put",
                    "Simultaneously with call spread",
                    ["Strikes equidistant from current price"],
                ),
                StrategyInstruction(
                    3,
                    "Collect Premium",
                    "Receive net credit from both spreads",
                    "At trade execution",
                    ["Credit > 30% of spread width"],
                ),
                StrategyInstruction(
                    4,
                    "Manage Position",
                    "Close early if profit target hit or range breaks",
                    "At 25-50% profit or range break",
                    ["Price stays within range"],
                ),
            ],
            examples=[
                StrategyExample(
                    scenario="SPY Iron Condor",
                    setup="SPY at $580, sell $570/$575 put spread, sell $585/$590 call spread",
                    entry="Net credit: $1.50",
                    exit="SPY stays between $575-$585, keep credit",
                    result="Profit: $150 (30% return)",
                    pnl=150,
                )
            ],
            risks=[
                "Large losses if price moves outside range",
                "Multiple legs increase complexity",
                "Assignment risk on short options",
            ],
            benefits=[
                "Profits from time decay",
                "High probability of success",
                "Works well in low volatility",
            ],
        ),
        # Low volatility
        TradingStrategy(
            id="short_straddle",
            name="Short Straddle",
            description="Sell call and put at same strike to profit from low volatility",
            regime_id="low_volatility",
            timeframe=Timeframe.SHORT,
            risk_level=Level.HIGH,
            expected_return=20,
            max_drawdown=25,
            win_rate=55,
            instructions=[
                StrategyInstruction(
                    1,
                    "Sell Call Option",
                    "Sell at-the-money call option",
                    "When IV is high relative to expected movement",
                    ["High implied volatility", "Low expected movement"],
                ),
                StrategyInstruction(
                    2,
                    "Sell Put Option",
                    "Sell at-the-money put option (same strike and expiration)",
                    "Simultaneously with call",
                    ["Same strike as call option"],
                ),
                StrategyInstruction(
                    3,
                    "Collect Premium",
                    "Receive premium from both options",
                    "At trade execution",
                    ["Total premium > 3% of stock price"],
                ),
                StrategyInstruction(
                    4,
                    "Manage Risk",
                    "Close position if price moves significantly",
                    "If price moves beyond breakeven",
                    ["Price stays near strike price"],
                ),
            ],
            examples=[
                StrategyExample(
                    scenario="AAPL Short Straddle",
                    setup="AAPL at $185, sell $185 call and put",
                    entry="Collect $8.00 total premium",
                    exit="AAPL stays near $185, options expire worthless",
                    result="Profit: $800 (keep full premium)",
                    pnl=800,
                )
            ],
            risks=[
                "Unlimited risk if stock moves significantly",
                "Assignment risk on both sides",
                "Requires precise timing",
            ],
            benefits=[
                "High premium collection",
                "Profits from time decay",
                "Benefits from volatility crush",
            ],
        ),
        # High volatility
        TradingStrategy(
            id="long_straddle",
            name="Long Straddle",
            description="Buy call and put at same strike to profit from large price movements",
            regime_id="high_volatility",
            timeframe=Timeframe.SHORT,
            risk_level=Level.MEDIUM,
            expected_return=25,
            max_drawdown=12,
            win_rate=45,
            instructions=[
                StrategyInstruction(
                    1,
                    "Buy Call Option",
                    "Purchase at-the-money call option",
                    "Before expected volatility event",
                    ["Low implied volatility", "Expected big move"],
                ),
                StrategyInstruction(
                    2,
                    "Buy Put Option",
                    "Purchase at-the-money put option (same strike and expiration)",
                    "Simultaneously with call",
                    ["Same strike as call option"],
                ),
                StrategyInstruction(
                    3,
                    "Wait for Movement",
                    "Hold position through volatility event",
                    "Until significant price movement occurs",
                    ["Price moves beyond breakeven points"],
                ),
                StrategyInstruction(
                    4,
                    "Exit Strategy",
                    "Close profitable leg or both legs",
                    "When target profit reached",
                    ["Price moves significantly in either direction"],
                ),
            ],
            examples=[
                StrategyExample(
                    scenario="NVDA Earnings Straddle",
                    setup="NVDA at $1400, buy $1400 call and put before earnings",
                    entry="Total cost: $80",
                    exit="NVDA moves to $1520 after earnings",
                    result="Call worth $120, profit: $40",
                    pnl=4000,
                )
            ],
            risks=[
                "High cost to enter position",
                "Time decay hurts both options",
                "Needs large movement to profit",
            ],
            benefits=[
                "Profits from big moves in either direction",
                "Limited risk (premium paid)",
                "Great for earnings or events",
            ],
        ),
    ]
