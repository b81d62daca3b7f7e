"""Presentation helpers for the review screen."""
from __future__ import annotations

from typing import Any

from campaign_studio.models import CampaignGoal, ContentType

from .draft import CampaignDraft
from .estimator import ReachEstimate
from .payment_methods import PaymentMethodInfo
from .validation import parse_number

GOAL_LABELS = {
    CampaignGoal.awareness: "Brand Awareness",
    CampaignGoal.consideration: "Product Consideration",
    CampaignGoal.conversion: "Conversions & Sales",
    CampaignGoal.engagement: "Community Engagement",
    CampaignGoal.launch: "Product Launch",
    CampaignGoal.event: "Event Promotion",
    CampaignGoal.other: "Other",
}

CONTENT_TYPE_LABELS = {
    ContentType.original: "Original content",
    ContentType.repurposed: "Repurposed content",
    ContentType.both: "Original & repurposed content",
}


def format_money(amount: float | None) -> str:
    """Whole dollars with thousands separators: 5000 -> "$5,000"."""
    if amount is None:
        return "-"
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.0f}"


def format_millions(views: float) -> str:
    """7_000_000 -> "7.0M"."""
    return f"{views / 1_000_000:.1f}M"


def build_review_summary(
    draft: CampaignDraft,
    estimate: ReachEstimate,
    payment_methods: list[PaymentMethodInfo] | None = None,
) -> dict[str, Any]:
    card = None
    for method in payment_methods or []:
        if method.id == draft.payment_method_id:
            card = f"{method.brand.title()} ending in {method.last4}"
            break

    min_views = parse_number(draft.min_views)
    start, end = draft.date_range.start, draft.date_range.end
    return {
        "title": draft.title,
        "goal": GOAL_LABELS.get(draft.goal, "-") if draft.goal else "-",
        "platforms": [p.value for p in draft.ordered_platforms()],
        "content_type": CONTENT_TYPE_LABELS[draft.content_type],
        "schedule": f"{start.isoformat() if start else '-'} to {end.isoformat() if end else '-'}",
        "budget": format_money(parse_number(draft.budget)),
        "payout_rate_original": format_money(parse_number(draft.payout_rate.original)),
        "payout_rate_repurposed": format_money(parse_number(draft.payout_rate.repurposed)),
        "allocation": f"{draft.budget_allocation.original}% / {draft.budget_allocation.repurposed}%",
        "min_views": f"{int(min_views):,} views" if min_views is not None else "-",
        "estimated_reach": format_millions(estimate.total_views),
        "estimated_original_reach": format_millions(estimate.original_views),
        "estimated_repurposed_reach": format_millions(estimate.repurposed_views),
        "hashtags": {
            "original": draft.hashtags.original,
            "repurposed": draft.hashtags.repurposed,
        },
        "guidelines": [g for g in draft.guidelines if g.strip()],
        "asset_count": len(draft.assets),
        "payment_method": card or "-",
    }
