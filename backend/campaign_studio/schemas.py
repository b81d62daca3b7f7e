from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field

from .models import CampaignStatus, ContentType, FinalizeMode


# Wizard inputs
class FieldUpdate(BaseModel):
    path: str
    value: Any = None


class HashtagUpdate(BaseModel):
    value: str


class AllocationUpdate(BaseModel):
    original: int


class GuidelineCreate(BaseModel):
    text: str = ""


class GuidelineUpdate(BaseModel):
    text: str


class FinalizeRequest(BaseModel):
    mode: FinalizeMode = FinalizeMode.draft


# Wizard state
class ValidationFailureRead(BaseModel):
    field: str
    reason: str


class StepRead(BaseModel):
    index: int
    title: str
    subtitle: str
    complete: bool


class StepDetailRead(StepRead):
    failures: list[ValidationFailureRead] = []


class BudgetAllocationRead(BaseModel):
    original: int
    repurposed: int


class ContentPairRead(BaseModel):
    original: str
    repurposed: str


class DateRangeRead(BaseModel):
    start: date | None = None
    end: date | None = None


class AssetRead(BaseModel):
    id: str
    filename: str
    size: int
    content_type: str | None = None


class DraftRead(BaseModel):
    title: str
    brief: str
    goal: str | None = None
    platforms: list[str]
    content_type: ContentType
    budget_allocation: BudgetAllocationRead
    date_range: DateRangeRead
    budget: str
    payout_rate: ContentPairRead
    min_views: str
    hashtags: ContentPairRead
    guidelines: list[str]
    assets: list[AssetRead]
    payment_method_id: str | None = None
    terms_accepted: bool


class EstimateRead(BaseModel):
    original_views: float
    repurposed_views: float
    total_views: float
    original_spend: float
    repurposed_spend: float


class PaymentMethodRead(BaseModel):
    id: str
    brand: str
    last4: str
    expiry: str
    is_default: bool


class WizardRead(BaseModel):
    session_id: str
    current_step: int
    last_step: int
    review_ready: bool
    can_finalize: bool
    steps: list[StepRead]
    draft: DraftRead
    estimate: EstimateRead
    payment_methods: list[PaymentMethodRead] | None = None


class RetreatRead(BaseModel):
    moved: bool
    current_step: int


# Stateless estimator
class EstimateRequest(BaseModel):
    budget: str | float
    rate_original: str | float = ""
    rate_repurposed: str | float = ""
    content_type: ContentType = ContentType.original
    allocation_original: int = Field(default=70, ge=0, le=100)


# Campaigns
class CampaignRead(BaseModel):
    id: str
    status: CampaignStatus
    title: str
    brief: str
    goal: str | None = None
    platforms: list[str]
    content_type: ContentType
    budget_allocation: BudgetAllocationRead
    start_date: date | None = None
    end_date: date | None = None
    budget: str
    payout_rate: ContentPairRead
    min_views: str
    hashtags: ContentPairRead
    guidelines: list[str]
    assets: list[AssetRead]
    payment_method_id: str | None = None
    terms_accepted: bool
    created_at: datetime

    class Config:
        from_attributes = True
