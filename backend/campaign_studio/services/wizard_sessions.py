"""
In-memory registry of open wizard sessions (in production use Redis or DB).

Sessions idle for longer than SESSION_TTL_HOURS are dropped.
"""
from __future__ import annotations

import secrets
from datetime import datetime, timedelta

from .wizard import CampaignWizard

SESSION_TTL_HOURS = 12


class WizardSessionRegistry:
    def __init__(self, ttl: timedelta = timedelta(hours=SESSION_TTL_HOURS)):
        self._ttl = ttl
        self._sessions: dict[str, tuple[CampaignWizard, datetime]] = {}

    def _cleanup_expired(self) -> None:
        cutoff = datetime.utcnow() - self._ttl
        expired = [sid for sid, (_, touched) in self._sessions.items() if touched < cutoff]
        for sid in expired:
            del self._sessions[sid]

    def open(self, wizard: CampaignWizard) -> str:
        self._cleanup_expired()
        session_id = secrets.token_urlsafe(16)
        self._sessions[session_id] = (wizard, datetime.utcnow())
        return session_id

    def get(self, session_id: str) -> CampaignWizard | None:
        self._cleanup_expired()
        entry = self._sessions.get(session_id)
        if entry is None:
            return None
        wizard = entry[0]
        self._sessions[session_id] = (wizard, datetime.utcnow())
        return wizard

    def close(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def __len__(self) -> int:
        return len(self._sessions)


wizard_sessions = WizardSessionRegistry()
