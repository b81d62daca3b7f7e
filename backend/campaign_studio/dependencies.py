"""FastAPI dependencies for the wizard collaborators."""
from __future__ import annotations

from functools import lru_cache

from .services.assets import AssetIntake, LocalAssetIntake
from .services.campaign_store import SqlCampaignStore
from .services.payment_methods import PaymentMethodProvider, SqlPaymentMethodProvider, StaticPaymentMethodProvider
from .services.wizard_sessions import WizardSessionRegistry, wizard_sessions
from .settings import get_settings


@lru_cache(maxsize=1)
def get_campaign_store() -> SqlCampaignStore:
    return SqlCampaignStore(latency_sec=get_settings().store_latency_sec)


@lru_cache(maxsize=1)
def get_payment_provider() -> PaymentMethodProvider:
    if get_settings().payment_methods_source == "sql":
        return SqlPaymentMethodProvider()
    return StaticPaymentMethodProvider()


@lru_cache(maxsize=1)
def get_asset_intake() -> AssetIntake:
    return LocalAssetIntake(get_settings().asset_dir)


def get_wizard_sessions() -> WizardSessionRegistry:
    return wizard_sessions
