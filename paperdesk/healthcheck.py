"""
Catalog health check - sends a status message to Discord.
"""

import os
from datetime import datetime, timezone
from typing import Optional

import requests

from paperdesk.main import PaperDeskApp
from paperdesk.regimes.models import RegimeAnalysis


def build_payload(app: PaperDeskApp, analysis: Optional[RegimeAnalysis] = None) -> dict:
    """Discord embed summarizing coupons, deals and the latest regime."""
    coupons = app.coupons.get_coupons()
    active_coupons = [c for c in coupons if c.is_active]
    coupon_lines = []
    for c in active_coupons:
        usage = f"{c.used_count}/{c.usage_limit}" if c.usage_limit is not None else str(c.used_count)
        coupon_lines.append(f"{c.code}: {app.coupons.format_discount(c)} (used {usage})")
    coupon_list = "\n".join(coupon_lines) or "None"

    deals = app.coupons.get_active_deals()
    featured = app.coupons.get_featured_deal()
    deal_list = ", ".join(d.name for d in deals) or "None"

    fields = [
        {"name": "Active Coupons", "value": coupon_list, "inline": False},
        {"name": "Active Deals", "value": deal_list, "inline": True},
        {
            "name": "Featured Deal",
            "value": featured.name if featured else "None",
            "inline": True,
        },
    ]

    if analysis is not None:
        strategies = ", ".join(s.name for s in analysis.recommended_strategies) or "None"
        fields.append(
            {
                "name": "Regime",
                "value": (
                    f"{analysis.current_regime.name} "
                    f"({analysis.confidence:.0%}) - {strategies}"
                ),
                "inline": False,
            }
        )
        if analysis.warnings:
            fields.append(
                {"name": "Warnings", "value": "\n".join(analysis.warnings), "inline": False}
            )

    return {
        "embeds": [{
            "title": "PaperDesk Health Check",
            "description": "System is running normally.",
            "color": 0x2ECC71,
            "fields": fields,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }]
    }


def run_healthcheck(app: PaperDeskApp, analysis: Optional[RegimeAnalysis] = None) -> None:
    """Run health check and send status to Discord.

    Args:
        app: Application instance (database already initialized)
        analysis: Latest regime analysis to include, if any
    """
    webhook_url = os.getenv("DISCORD_WEBHOOK_URL") or app.config.healthcheck.webhook_url
    if not webhook_url:
        print("DISCORD_WEBHOOK_URL not set")
        return

    payload = build_payload(app, analysis)

    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    response = requests.post(webhook_url, json=payload, timeout=10)
    print(f"{now} - Health check sent (status: {response.status_code})")
