"""
CLI commands for PaperDesk.
"""

import argparse
import logging
from datetime import datetime, timedelta
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

from paperdesk.config import AppConfig, RegimeConfig
from paperdesk.database.connection import Database
from paperdesk.database.models import Coupon, CouponValidationResult, DiscountType, Plan
from paperdesk.database.repository import DuplicateCouponError
from paperdesk.main import PaperDeskApp
from paperdesk.regimes.models import RegimeAnalysis


def add_coupon(
    app: PaperDeskApp,
    code: str,
    discount_type: str,
    value: str,
    days: int = 30,
    name: Optional[str] = None,
    plans: Optional[list[str]] = None,
    min_amount: Optional[str] = None,
    max_discount: Optional[str] = None,
    usage_limit: Optional[int] = None,
    first_time_only: bool = False,
) -> Coupon:
    """Create a coupon valid from now for ``days`` days."""
    now = app.coupons.clock()
    return app.coupons.create_coupon(
        code=code.upper(),
        name=name or code.upper(),
        type=DiscountType(discount_type),
        value=value,
        valid_from=now,
        valid_until=now + timedelta(days=days),
        min_amount=min_amount,
        max_discount=max_discount,
        usage_limit=usage_limit,
        applicable_plans=plans or [],
        is_first_time_only=first_time_only,
    )


def check_coupon(
    app: PaperDeskApp,
    code: str,
    plan: str,
    amount: Optional[float] = None,
    first_time: bool = False,
    redeem: bool = False,
) -> CouponValidationResult:
    """Validate (or redeem) a coupon at the plan's list price by default."""
    if amount is None:
        amount = app.config.pricing.price_for(plan)
    if redeem:
        return app.coupons.redeem_coupon(code, plan, amount, first_time)
    return app.coupons.validate_coupon(code, plan, amount, first_time)


def format_result(result: CouponValidationResult) -> str:
    """One-line summary of a validation result."""
    if not result.is_valid:
        return f"Invalid: {result.error}"
    return (
        f"Valid: {result.coupon.code} - "
        f"discount ${result.discount_amount}, pay ${result.final_amount}"
    )


def format_analysis(analysis: RegimeAnalysis) -> list[str]:
    """Printable lines for a regime analysis."""
    regime = analysis.current_regime
    lines = [
        f"Regime: {regime.name} ({analysis.confidence:.0%} confidence)",
        f"Trend: {regime.trend.value}, volatility: {regime.volatility.value}, "
        f"~{analysis.time_in_regime} days in regime",
    ]
    for indicator in regime.indicators:
        lines.append(
            f"  {indicator.name}: {indicator.value:.2f} "
            f"(threshold {indicator.threshold}, {indicator.signal.value})"
        )
    for alt in analysis.next_regime_prob:
        lines.append(f"Next: {alt.regime.name} ({alt.probability:.0%})")
    for strategy in analysis.recommended_strategies:
        lines.append(
            f"Strategy: {strategy.name} [{strategy.risk_level.value} risk, "
            f"{strategy.win_rate:.0f}% win rate]"
        )
    for warning in analysis.warnings:
        lines.append(f"Warning: {warning}")
    return lines


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="PaperDesk CLI")
    parser.add_argument("--db", default="data/paperdesk.db", help="Database path")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command")

    # Coupon commands
    coupon_parser = subparsers.add_parser("coupons", help="Coupon management")
    coupon_subparsers = coupon_parser.add_subparsers(dest="action")

    coupon_subparsers.add_parser("list", help="List coupons")

    add_coupon_parser = coupon_subparsers.add_parser("add", help="Add coupon")
    add_coupon_parser.add_argument("--code", required=True, help="Coupon code")
    add_coupon_parser.add_argument(
        "--type", required=True, choices=[t.value for t in DiscountType]
    )
    add_coupon_parser.add_argument("--value", required=True, help="Percent or dollars")
    add_coupon_parser.add_argument("--name", help="Display name")
    add_coupon_parser.add_argument("--days", type=int, default=30, help="Days valid")
    add_coupon_parser.add_argument(
        "--plans", help="Comma-separated plans (default: all)"
    )
    add_coupon_parser.add_argument("--min-amount", help="Minimum order amount")
    add_coupon_parser.add_argument("--max-discount", help="Discount cap")
    add_coupon_parser.add_argument("--limit", type=int, help="Usage limit")
    add_coupon_parser.add_argument(
        "--first-time", action="store_true", help="First-time subscribers only"
    )

    for action, help_text in (
        ("validate", "Validate coupon"),
        ("redeem", "Validate and use coupon"),
    ):
        check_parser = coupon_subparsers.add_parser(action, help=help_text)
        check_parser.add_argument("code", help="Coupon code")
        check_parser.add_argument(
            "--plan", default="monthly", choices=[p.value for p in Plan]
        )
        check_parser.add_argument("--amount", type=float, help="Order amount")
        check_parser.add_argument(
            "--first-time", action="store_true", help="Buyer is a first-time subscriber"
        )

    apply_parser = coupon_subparsers.add_parser("apply", help="Record a coupon use")
    apply_parser.add_argument("code", help="Coupon code")

    deactivate_parser = coupon_subparsers.add_parser("deactivate", help="Deactivate coupon")
    deactivate_parser.add_argument("code", help="Coupon code")

    # Deal commands
    deal_parser = subparsers.add_parser("deals", help="Deals")
    deal_subparsers = deal_parser.add_subparsers(dest="action")
    deal_subparsers.add_parser("list", help="List active deals")
    deal_subparsers.add_parser("featured", help="Show featured deal")

    # Regime commands
    regime_parser = subparsers.add_parser("regime", help="Regime analysis")
    regime_subparsers = regime_parser.add_subparsers(dest="action")
    analyze_parser = regime_subparsers.add_parser("analyze", help="Analyze market regime")
    analyze_parser.add_argument("--ticker", default="SPY", help="Ticker to analyze")
    analyze_parser.add_argument("--mock", action="store_true", help="Use mock data")
    analyze_parser.add_argument("--seed", type=int, help="Random seed")

    # Strategy commands
    strategy_parser = subparsers.add_parser("strategies", help="Strategy catalog")
    strategy_subparsers = strategy_parser.add_subparsers(dest="action")
    list_strategies_parser = strategy_subparsers.add_parser("list", help="List strategies")
    list_strategies_parser.add_argument("--regime", help="Regime ID filter")

    # Health check
    subparsers.add_parser("healthcheck", help="Send status report to Discord")

    # DB commands
    db_parser = subparsers.add_parser("db", help="Database management")
    db_subparsers = db_parser.add_subparsers(dest="action")
    db_subparsers.add_parser("init", help="Create schema and seed defaults")
    db_subparsers.add_parser("reset", help="Remove all coupons and deals")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    # Initialize database
    db = Database(args.db)
    db.initialize()

    config = AppConfig()
    if args.command == "regime" and args.action == "analyze":
        config.regime = RegimeConfig(ticker=args.ticker, random_seed=args.seed)
    app = PaperDeskApp(db=db, config=config)

    # Handle commands
    if args.command == "coupons":
        if args.action == "list":
            for c in app.coupons.get_coupons():
                status = "active" if c.is_active else "inactive"
                limit = c.usage_limit if c.usage_limit is not None else "-"
                print(
                    f"{c.code}: {app.coupons.format_discount(c)} "
                    f"({status}, used {c.used_count}/{limit}, "
                    f"until {c.valid_until:%Y-%m-%d})"
                )
        elif args.action == "add":
            plans = [p.strip() for p in args.plans.split(",")] if args.plans else []
            try:
                coupon = add_coupon(
                    app,
                    code=args.code,
                    discount_type=args.type,
                    value=args.value,
                    days=args.days,
                    name=args.name,
                    plans=plans,
                    min_amount=args.min_amount,
                    max_discount=args.max_discount,
                    usage_limit=args.limit,
                    first_time_only=args.first_time,
                )
                print(f"Created coupon {coupon.code} with ID: {coupon.id}")
            except DuplicateCouponError as e:
                print(str(e))
        elif args.action in ("validate", "redeem"):
            result = check_coupon(
                app,
                code=args.code,
                plan=args.plan,
                amount=args.amount,
                first_time=args.first_time,
                redeem=args.action == "redeem",
            )
            print(format_result(result))
        elif args.action == "apply":
            app.coupons.apply_coupon(args.code)
            print(f"Applied {args.code.upper()}")
        elif args.action == "deactivate":
            if app.coupons.deactivate_coupon(args.code):
                print(f"Deactivated {args.code.upper()}")
            else:
                print(f"Coupon not found: {args.code}")

    elif args.command == "deals":
        if args.action == "list":
            for d in app.coupons.get_active_deals():
                print(
                    f"{d.id}: {d.name} ${d.discounted_price} "
                    f"(was ${d.original_price}) - {app.coupons.format_time_remaining(d)}"
                )
        elif args.action == "featured":
            deal = app.coupons.get_featured_deal()
            print(f"{deal.name}: {deal.description}" if deal else "No featured deal")

    elif args.command == "regime":
        if args.action == "analyze":
            try:
                analysis = app.run_analysis(mock=args.mock)
            except ValueError as e:
                print(f"Analysis failed: {e}")
            else:
                for line in format_analysis(analysis):
                    print(line)

    elif args.command == "strategies":
        if args.action == "list":
            if args.regime:
                strategies = app.regimes.get_strategies_for_regime(args.regime)
            else:
                strategies = app.regimes.get_all_strategies()
            for s in strategies:
                print(f"{s.id}: {s.name} ({s.regime_id}, {s.timeframe.value} term)")

    elif args.command == "healthcheck":
        from paperdesk.healthcheck import run_healthcheck

        run_healthcheck(app)

    elif args.command == "db":
        if args.action == "init":
            app.start()
            print("Database initialized")
        elif args.action == "reset":
            app.coupons.clear_data()
            print("Catalog cleared")

    db.close()


if __name__ == "__main__":
    main()
