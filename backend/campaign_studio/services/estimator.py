"""
Reach Estimator

Projects how many views a campaign budget buys:
- payout rates are currency units per 1,000,000 views
- views = budget / rate * 1,000,000
- with content type "both" the budget is split by the allocation percentages
  and each segment is estimated on its own

Degenerate input (non-positive or unparsable budget, missing rate for an
active content type, a projection that overflows) yields an all-zero
estimate. No rounding is applied.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from campaign_studio.models import ContentType

from .draft import BudgetAllocation, CampaignDraft
from .validation import parse_number

VIEWS_PER_RATE_UNIT = 1_000_000


@dataclass(frozen=True)
class ReachEstimate:
    original_views: float = 0.0
    repurposed_views: float = 0.0
    total_views: float = 0.0
    original_spend: float = 0.0
    repurposed_spend: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return {
            "original_views": self.original_views,
            "repurposed_views": self.repurposed_views,
            "total_views": self.total_views,
            "original_spend": self.original_spend,
            "repurposed_spend": self.repurposed_spend,
        }


ZERO_ESTIMATE = ReachEstimate()


def _positive(value: Any) -> float | None:
    number = parse_number(value)
    if number is None or number <= 0:
        return None
    return number


def _views(spend: float, rate: float) -> float:
    return (spend / rate) * VIEWS_PER_RATE_UNIT


def estimate_reach(
    budget: Any,
    rate_original: Any,
    rate_repurposed: Any,
    content_type: ContentType | str,
    allocation: BudgetAllocation,
) -> ReachEstimate:
    """Estimate projected views for a budget and payout rates.

    Inputs so large that the projection overflows count as degenerate.
    """
    estimate = _estimate(budget, rate_original, rate_repurposed, ContentType(content_type), allocation)
    if not all(math.isfinite(value) for value in estimate.to_dict().values()):
        return ZERO_ESTIMATE
    return estimate


def _estimate(
    budget: Any,
    rate_original: Any,
    rate_repurposed: Any,
    content_type: ContentType,
    allocation: BudgetAllocation,
) -> ReachEstimate:
    budget_value = _positive(budget)
    if budget_value is None:
        return ZERO_ESTIMATE

    if content_type == ContentType.original:
        rate = _positive(rate_original)
        if rate is None:
            return ZERO_ESTIMATE
        views = _views(budget_value, rate)
        return ReachEstimate(
            original_views=views,
            total_views=views,
            original_spend=budget_value,
        )

    if content_type == ContentType.repurposed:
        rate = _positive(rate_repurposed)
        if rate is None:
            return ZERO_ESTIMATE
        views = _views(budget_value, rate)
        return ReachEstimate(
            repurposed_views=views,
            total_views=views,
            repurposed_spend=budget_value,
        )

    original_rate = _positive(rate_original)
    repurposed_rate = _positive(rate_repurposed)
    if original_rate is None or repurposed_rate is None:
        return ZERO_ESTIMATE

    original_budget = budget_value * allocation.original / 100
    repurposed_budget = budget_value * allocation.repurposed / 100
    original_views = _views(original_budget, original_rate)
    repurposed_views = _views(repurposed_budget, repurposed_rate)
    return ReachEstimate(
        original_views=original_views,
        repurposed_views=repurposed_views,
        total_views=original_views + repurposed_views,
        original_spend=original_budget,
        repurposed_spend=repurposed_budget,
    )


def estimate_for_draft(draft: CampaignDraft) -> ReachEstimate:
    return estimate_reach(
        draft.budget,
        draft.payout_rate.original,
        draft.payout_rate.repurposed,
        draft.content_type,
        draft.budget_allocation,
    )
