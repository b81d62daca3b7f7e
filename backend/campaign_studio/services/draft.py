"""
Campaign draft record built up across the creation wizard.

Numeric inputs (budget, payout rates, min views) are kept as the raw strings
the brand typed; the validation rules and the reach estimator parse them.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any

from campaign_studio.models import CampaignGoal, CampaignStatus, ContentType, Platform
from campaign_studio.settings import Settings


@dataclass
class BudgetAllocation:
    original: int = 70
    repurposed: int = 30


@dataclass
class PayoutRate:
    """Currency per 1,000,000 views, per content type."""
    original: str = ""
    repurposed: str = ""


@dataclass
class Hashtags:
    original: str = ""
    repurposed: str = ""


@dataclass
class DateRange:
    start: date | None = None
    end: date | None = None


@dataclass(frozen=True)
class AssetReference:
    """Opaque handle returned by the asset intake."""
    id: str
    filename: str
    size: int
    content_type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "filename": self.filename,
            "size": self.size,
            "content_type": self.content_type,
        }


@dataclass
class CampaignDraft:
    title: str = ""
    brief: str = ""
    goal: CampaignGoal | None = None
    platforms: set[Platform] = field(default_factory=set)
    content_type: ContentType = ContentType.original
    budget_allocation: BudgetAllocation = field(default_factory=BudgetAllocation)
    date_range: DateRange = field(default_factory=DateRange)
    budget: str = ""
    payout_rate: PayoutRate = field(default_factory=PayoutRate)
    min_views: str = ""
    hashtags: Hashtags = field(default_factory=Hashtags)
    guidelines: list[str] = field(default_factory=lambda: [""])
    assets: list[AssetReference] = field(default_factory=list)
    payment_method_id: str | None = None
    terms_accepted: bool = False

    @classmethod
    def initial(cls, settings: Settings, today: date) -> "CampaignDraft":
        """Draft as the wizard opens it: dates, rates and hashtags pre-filled."""
        allocation = settings.default_allocation_original
        return cls(
            budget_allocation=BudgetAllocation(original=allocation, repurposed=100 - allocation),
            date_range=DateRange(start=today, end=today + timedelta(days=settings.default_campaign_days)),
            payout_rate=PayoutRate(
                original=settings.default_rate_original,
                repurposed=settings.default_rate_repurposed,
            ),
            min_views=settings.default_min_views,
            hashtags=Hashtags(original=settings.default_hashtag, repurposed=settings.default_hashtag),
        )

    def ordered_platforms(self) -> list[Platform]:
        return [p for p in Platform if p in self.platforms]

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "brief": self.brief,
            "goal": self.goal.value if self.goal else None,
            "platforms": [p.value for p in self.ordered_platforms()],
            "content_type": self.content_type.value,
            "budget_allocation": {
                "original": self.budget_allocation.original,
                "repurposed": self.budget_allocation.repurposed,
            },
            "date_range": {
                "start": self.date_range.start.isoformat() if self.date_range.start else None,
                "end": self.date_range.end.isoformat() if self.date_range.end else None,
            },
            "budget": self.budget,
            "payout_rate": {
                "original": self.payout_rate.original,
                "repurposed": self.payout_rate.repurposed,
            },
            "min_views": self.min_views,
            "hashtags": {
                "original": self.hashtags.original,
                "repurposed": self.hashtags.repurposed,
            },
            "guidelines": list(self.guidelines),
            "assets": [a.to_dict() for a in self.assets],
            "payment_method_id": self.payment_method_id,
            "terms_accepted": self.terms_accepted,
        }


@dataclass(frozen=True)
class PersistedCampaign:
    """A finalized draft as handed to the campaign store. Never mutated."""
    id: str
    status: CampaignStatus
    created_at: datetime
    draft: CampaignDraft

    def to_dict(self) -> dict[str, Any]:
        data = self.draft.to_dict()
        data.update({
            "id": self.id,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
        })
        return data
