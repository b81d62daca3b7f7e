"""
Campaign store: where finalized campaigns are appended.

The wizard calls append() exactly once per finalize. Failures surface as
StoreError and are never retried here.
"""
from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Callable

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from campaign_studio.db import AsyncSessionLocal
from campaign_studio.models import Campaign, CampaignStatus

from .draft import PersistedCampaign

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when the campaign store cannot accept a campaign."""
    pass


class CampaignStore(ABC):
    """Append-only sink for finalized campaigns."""

    @abstractmethod
    async def append(self, campaign: PersistedCampaign) -> str:
        """Persist the campaign and return its id. Raises StoreError."""
        ...


def campaign_to_row(campaign: PersistedCampaign) -> Campaign:
    draft = campaign.draft
    data = draft.to_dict()
    return Campaign(
        id=campaign.id,
        status=campaign.status.value,
        title=draft.title,
        brief=draft.brief,
        goal=data["goal"],
        platforms=data["platforms"],
        content_type=draft.content_type.value,
        budget_allocation=data["budget_allocation"],
        start_date=draft.date_range.start,
        end_date=draft.date_range.end,
        budget=draft.budget,
        payout_rate=data["payout_rate"],
        min_views=draft.min_views,
        hashtags=data["hashtags"],
        guidelines=data["guidelines"],
        assets=data["assets"],
        payment_method_id=draft.payment_method_id,
        terms_accepted=draft.terms_accepted,
        created_at=campaign.created_at,
    )


class SqlCampaignStore(CampaignStore):
    """Stores campaigns in the `campaigns` table."""

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession] = AsyncSessionLocal,
        *,
        latency_sec: float = 0.0,
    ):
        self._session_factory = session_factory
        self._latency_sec = latency_sec

    async def append(self, campaign: PersistedCampaign) -> str:
        if self._latency_sec > 0:
            await asyncio.sleep(self._latency_sec)
        row = campaign_to_row(campaign)
        try:
            async with self._session_factory() as session:
                session.add(row)
                await session.commit()
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not store campaign {campaign.id}: {exc}") from exc
        logger.debug(f"[campaign_store] Stored campaign {campaign.id} ({campaign.status.value})")
        return campaign.id

    async def list_campaigns(self, status: CampaignStatus | None = None) -> list[Campaign]:
        stmt = select(Campaign).order_by(Campaign.created_at.desc())
        if status is not None:
            stmt = stmt.where(Campaign.status == status.value)
        async with self._session_factory() as session:
            res = await session.execute(stmt)
            return list(res.scalars().all())

    async def get(self, campaign_id: str) -> Campaign | None:
        async with self._session_factory() as session:
            return await session.get(Campaign, campaign_id)
