"""
Notification service — Telegram alerts for campaign reviewers.

Env:
  TELEGRAM_BOT_TOKEN, TELEGRAM_CHAT_ID

Sending is best effort: failures are logged and never reach the caller.
"""
from __future__ import annotations

import html
import logging

import httpx

from .draft import PersistedCampaign
from .review import format_money
from .validation import parse_number

logger = logging.getLogger(__name__)


def _get_config() -> tuple[str | None, str | None]:
    from campaign_studio.settings import get_settings
    s = get_settings()
    return s.telegram_bot_token, s.telegram_chat_id


async def _send_telegram(text: str) -> bool:
    token, chat_id = _get_config()
    if not token or not chat_id:
        logger.debug("[notify] Telegram not configured, skipping")
        return False
    url = f"https://api.telegram.org/bot{token}/sendMessage"
    try:
        async with httpx.AsyncClient(timeout=10) as client:
            r = await client.post(url, json={
                "chat_id": chat_id,
                "text": text[:4000],
                "parse_mode": "HTML",
                "disable_web_page_preview": True,
            })
            if r.status_code == 200:
                return True
            logger.warning(f"[notify] Telegram API {r.status_code}: {r.text[:200]}")
    except httpx.HTTPError as e:
        logger.warning(f"[notify] Telegram send failed: {e}")
    return False


def format_submission(campaign: PersistedCampaign) -> str:
    draft = campaign.draft
    platforms = ", ".join(p.value for p in draft.ordered_platforms()) or "-"
    return (
        f"🟢 <b>Campaign awaiting approval</b>\n"
        f"{html.escape(draft.title)} (<code>{campaign.id}</code>)\n"
        f"Budget: {format_money(parse_number(draft.budget))}\n"
        f"Platforms: {platforms}\n"
        f"Content: {draft.content_type.value}"
    )


async def notify_campaign_submitted(campaign: PersistedCampaign) -> bool:
    """Tell reviewers a campaign is waiting for approval."""
    return await _send_telegram(format_submission(campaign))
