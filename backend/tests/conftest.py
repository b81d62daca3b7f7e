"""
Shared fixtures for the campaign wizard tests.

The app settings are read from the environment at import time, so the test
database, asset directory and dev-mode auth are configured before any
campaign_studio module is imported.
"""

import os
import tempfile
from datetime import date, timedelta
from pathlib import Path

_TMP_DIR = Path(tempfile.mkdtemp(prefix="campaign_studio_tests_"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP_DIR / 'api.db'}"
os.environ["ASSET_DIR"] = str(_TMP_DIR / "assets")
os.environ["AUTO_CREATE_TABLES"] = "true"
os.environ["ADMIN_PASSWORD"] = ""
os.environ["TELEGRAM_BOT_TOKEN"] = ""
os.environ["TELEGRAM_CHAT_ID"] = ""
os.environ["ENFORCE_MIN_CAMPAIGN_DAYS"] = "false"

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from campaign_studio import models  # noqa: F401
from campaign_studio.db import Base
from campaign_studio.services.campaign_store import CampaignStore, StoreError
from campaign_studio.services.draft import PersistedCampaign
from campaign_studio.services.wizard import CampaignWizard
from campaign_studio.settings import get_settings

FIXED_TODAY = date(2026, 3, 2)


class RecordingStore(CampaignStore):
    """Keeps appended campaigns in memory."""

    def __init__(self):
        self.appended: list[PersistedCampaign] = []

    async def append(self, campaign: PersistedCampaign) -> str:
        self.appended.append(campaign)
        return campaign.id


class FailingStore(CampaignStore):
    def __init__(self):
        self.calls = 0

    async def append(self, campaign: PersistedCampaign) -> str:
        self.calls += 1
        raise StoreError("storage unavailable")


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def wizard(settings) -> CampaignWizard:
    return CampaignWizard(settings=settings, today=lambda: FIXED_TODAY)


def fill_until_review(wizard: CampaignWizard) -> CampaignWizard:
    """Fill every step with valid data and advance to the review step."""
    wizard.update_field("title", "Summer Collection Launch")
    wizard.update_field("goal", "awareness")
    wizard.advance()
    wizard.toggle_platform("tiktok")
    wizard.toggle_platform("instagram")
    wizard.advance()
    wizard.update_field("brief", "Show the new collection in everyday outfits.")
    wizard.update_field("guidelines", ["Tag the brand account", ""])
    wizard.update_field("date_range.start", FIXED_TODAY.isoformat())
    wizard.update_field("date_range.end", (FIXED_TODAY + timedelta(days=30)).isoformat())
    wizard.advance()
    wizard.update_field("budget", "5000")
    wizard.advance()
    wizard.update_field("payment_method_id", "pm_1")
    wizard.advance()
    return wizard


@pytest.fixture
def review_wizard(wizard) -> CampaignWizard:
    return fill_until_review(wizard)


@pytest.fixture
def recording_store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture
def failing_store() -> FailingStore:
    return FailingStore()


@pytest.fixture
async def session_factory(tmp_path):
    """Session factory bound to a fresh SQLite database."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'store.db'}", future=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()
