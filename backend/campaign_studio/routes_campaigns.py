from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from .dependencies import get_campaign_store, get_payment_provider
from .models import CampaignStatus
from .routes_auth import require_auth
from .schemas import CampaignRead, EstimateRead, EstimateRequest, PaymentMethodRead
from .services.campaign_store import SqlCampaignStore
from .services.draft import BudgetAllocation
from .services.estimator import estimate_reach
from .services.payment_methods import PaymentMethodProvider

router = APIRouter(prefix="/api", tags=["campaigns"])
StoreDep = Depends(get_campaign_store)


@router.get("/campaigns", response_model=list[CampaignRead], dependencies=[Depends(require_auth)])
async def list_campaigns(
    status: CampaignStatus | None = Query(default=None),
    store: SqlCampaignStore = StoreDep,
):
    return await store.list_campaigns(status)


@router.get("/campaigns/{campaign_id}", response_model=CampaignRead, dependencies=[Depends(require_auth)])
async def get_campaign(campaign_id: str, store: SqlCampaignStore = StoreDep):
    campaign = await store.get(campaign_id)
    if not campaign:
        raise HTTPException(status_code=404, detail="Campaign not found")
    return campaign


@router.get("/payment-methods", response_model=list[PaymentMethodRead], dependencies=[Depends(require_auth)])
async def list_payment_methods(provider: PaymentMethodProvider = Depends(get_payment_provider)):
    return [m.to_dict() for m in await provider.list_payment_methods()]


@router.post("/estimate", response_model=EstimateRead)
async def estimate(data: EstimateRequest):
    """Reach projection for arbitrary inputs, without a wizard session."""
    allocation = BudgetAllocation(original=data.allocation_original, repurposed=100 - data.allocation_original)
    return estimate_reach(
        data.budget,
        data.rate_original,
        data.rate_repurposed,
        data.content_type,
        allocation,
    ).to_dict()
