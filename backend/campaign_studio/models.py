from __future__ import annotations

from datetime import date, datetime
from enum import Enum

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base


class Platform(str, Enum):
    tiktok = "tiktok"
    instagram = "instagram"
    youtube = "youtube"
    twitter = "twitter"


class ContentType(str, Enum):
    original = "original"
    repurposed = "repurposed"
    both = "both"


class CampaignGoal(str, Enum):
    awareness = "awareness"
    consideration = "consideration"
    conversion = "conversion"
    engagement = "engagement"
    launch = "launch"
    event = "event"
    other = "other"


class CampaignStatus(str, Enum):
    draft = "draft"
    pending_approval = "pending-approval"


class FinalizeMode(str, Enum):
    draft = "draft"
    submit = "submit"


class Campaign(Base):
    __tablename__ = "campaigns"

    id: Mapped[str] = mapped_column(sa.String(64), primary_key=True)
    status: Mapped[CampaignStatus] = mapped_column(sa.String(32), nullable=False, index=True)
    title: Mapped[str] = mapped_column(sa.String(512), nullable=False)
    brief: Mapped[str] = mapped_column(sa.Text(), nullable=False, server_default="")
    goal: Mapped[str | None] = mapped_column(sa.String(32), nullable=True)
    platforms: Mapped[list] = mapped_column(sa.JSON(), nullable=False)
    content_type: Mapped[ContentType] = mapped_column(sa.String(16), nullable=False)
    budget_allocation: Mapped[dict] = mapped_column(sa.JSON(), nullable=False)
    start_date: Mapped[date | None] = mapped_column(sa.Date(), nullable=True)
    end_date: Mapped[date | None] = mapped_column(sa.Date(), nullable=True)
    budget: Mapped[str] = mapped_column(sa.String(32), nullable=False, server_default="")
    payout_rate: Mapped[dict] = mapped_column(sa.JSON(), nullable=False)
    min_views: Mapped[str] = mapped_column(sa.String(32), nullable=False, server_default="")
    hashtags: Mapped[dict] = mapped_column(sa.JSON(), nullable=False)
    guidelines: Mapped[list] = mapped_column(sa.JSON(), nullable=False)
    assets: Mapped[list] = mapped_column(sa.JSON(), nullable=False)
    payment_method_id: Mapped[str | None] = mapped_column(sa.String(64), nullable=True)
    terms_accepted: Mapped[bool] = mapped_column(sa.Boolean(), nullable=False, server_default=sa.false())
    created_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False, index=True)


class PaymentMethod(Base):
    __tablename__ = "payment_methods"

    id: Mapped[str] = mapped_column(sa.String(64), primary_key=True)
    brand: Mapped[str] = mapped_column(sa.String(32), nullable=False)
    last4: Mapped[str] = mapped_column(sa.String(4), nullable=False)
    expiry: Mapped[str] = mapped_column(sa.String(8), nullable=False)
    is_default: Mapped[bool] = mapped_column(sa.Boolean(), nullable=False, server_default=sa.false())
    position: Mapped[int] = mapped_column(sa.Integer(), nullable=False, server_default="0")
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
    )
