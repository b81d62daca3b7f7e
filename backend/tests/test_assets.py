from datetime import timedelta

import pytest

from campaign_studio.services.assets import LocalAssetIntake, sanitize_filename
from campaign_studio.services.wizard import CampaignWizard
from campaign_studio.services.wizard_sessions import WizardSessionRegistry


@pytest.mark.parametrize("raw,expected", [
    ("logo.png", "logo.png"),
    ("../../etc/passwd", "passwd"),
    ("brand kit (final).pdf", "brand_kit_final_.pdf"),
    ("", "asset"),
    ("...", "asset"),
])
def test_sanitize_filename(raw, expected):
    assert sanitize_filename(raw) == expected


def test_local_intake_writes_file(tmp_path):
    intake = LocalAssetIntake(tmp_path)

    ref = intake.accept("Brand Guide.pdf", b"%PDF-1.4", "application/pdf")

    stored = tmp_path / ref.id / ref.filename
    assert stored.read_bytes() == b"%PDF-1.4"
    assert ref.filename == "Brand_Guide.pdf"
    assert ref.size == 8
    assert ref.content_type == "application/pdf"


def test_each_upload_gets_own_id(tmp_path):
    intake = LocalAssetIntake(tmp_path)
    first = intake.accept("a.png", b"1")
    second = intake.accept("a.png", b"2")
    assert first.id != second.id


def test_session_registry(settings):
    registry = WizardSessionRegistry()
    wizard = CampaignWizard(settings=settings)

    sid = registry.open(wizard)

    assert registry.get(sid) is wizard
    assert len(registry) == 1
    assert registry.close(sid) is True
    assert registry.get(sid) is None
    assert registry.close(sid) is False


def test_session_registry_expires_idle_sessions(settings):
    registry = WizardSessionRegistry(ttl=timedelta(seconds=-1))
    sid = registry.open(CampaignWizard(settings=settings))

    assert registry.get(sid) is None
