import asyncio
from datetime import timedelta

import pytest

from campaign_studio.models import CampaignStatus, ContentType, Platform
from campaign_studio.services.campaign_store import CampaignStore, StoreError
from campaign_studio.services.draft import AssetReference, PersistedCampaign
from campaign_studio.services.payment_methods import DEMO_PAYMENT_METHODS
from campaign_studio.services.validation import ValidationError
from campaign_studio.services.wizard import (
    CampaignWizard,
    FinalizeInProgress,
    NotAuthenticated,
    StepIncomplete,
    normalize_path,
)

from conftest import FIXED_TODAY


class _Auth:
    def __init__(self, ok: bool):
        self.ok = ok

    def is_authenticated(self) -> bool:
        return self.ok


class SlowStore(CampaignStore):
    """Yields to the event loop before handing the campaign on."""

    def __init__(self, inner: CampaignStore):
        self.inner = inner

    async def append(self, campaign: PersistedCampaign) -> str:
        await asyncio.sleep(0.01)
        return await self.inner.append(campaign)


# ── Start ────────────────────────────────────────────────────

def test_start_requires_authenticated_session(settings):
    with pytest.raises(NotAuthenticated):
        CampaignWizard.start(_Auth(False), settings=settings)


def test_start_opens_prefilled_draft(settings):
    wizard = CampaignWizard.start(_Auth(True), settings=settings, today=lambda: FIXED_TODAY)

    assert wizard.current_step == 0
    assert not wizard.review_ready
    draft = wizard.draft
    assert draft.date_range.start == FIXED_TODAY
    assert draft.date_range.end == FIXED_TODAY + timedelta(days=30)
    assert draft.payout_rate.original == "500"
    assert draft.payout_rate.repurposed == "250"
    assert draft.min_views == "10000"
    assert draft.hashtags.original == draft.hashtags.repurposed == "#YourBrand #ad"
    assert draft.budget_allocation.original == 70
    assert draft.guidelines == [""]


# ── Field updates ────────────────────────────────────────────

def test_unknown_field_is_rejected(wizard):
    with pytest.raises(ValidationError) as exc:
        wizard.update_field("favourite_colour", "blue")
    assert exc.value.failures[0].reason == "unknown field"


def test_assets_cannot_be_set_directly(wizard):
    with pytest.raises(ValidationError):
        wizard.update_field("assets", [])


@pytest.mark.parametrize("raw,expected", [
    ("payoutRate.original", "payout_rate.original"),
    ("dateRange.start", "date_range.start"),
    ("startDate", "date_range.start"),
    ("paymentMethod", "payment_method_id"),
    ("title", "title"),
])
def test_normalize_path(raw, expected):
    assert normalize_path(raw) == expected


def test_camel_case_paths_update_draft(wizard):
    wizard.update_field("payoutRate.original", "800")
    wizard.update_field("minViews", "5000")

    assert wizard.draft.payout_rate.original == "800"
    assert wizard.draft.min_views == "5000"


def test_malformed_number_leaves_draft_unchanged(wizard):
    wizard.update_field("budget", "2000")
    with pytest.raises(ValidationError):
        wizard.update_field("budget", "two thousand")
    assert wizard.draft.budget == "2000"


def test_unknown_goal_rejected(wizard):
    with pytest.raises(ValidationError):
        wizard.update_field("goal", "world-domination")
    assert wizard.draft.goal is None


def test_hashtag_update_appends_ad_tag(wizard):
    assert wizard.update_hashtag("original", "#Summer") == "#Summer #ad"
    wizard.update_field("hashtags.repurposed", "")
    assert wizard.draft.hashtags.repurposed == "#ad"


def test_hashtag_update_rejects_both(wizard):
    with pytest.raises(ValidationError):
        wizard.update_hashtag(ContentType.both, "#Summer")


def test_switching_to_both_disambiguates_equal_hashtags(wizard):
    wizard.update_field("hashtags.original", "#Summer")
    wizard.update_field("hashtags.repurposed", "#Summer")

    wizard.set_content_type("both")

    tags = wizard.draft.hashtags
    assert tags.original == "#Summer #ad"
    assert tags.repurposed == "#Summer #Repurposed #ad"


def test_switching_to_both_keeps_distinct_hashtags(wizard):
    wizard.update_hashtag("original", "#A")
    wizard.update_hashtag("repurposed", "#B")

    wizard.set_content_type("both")

    assert wizard.draft.hashtags.original == "#A #ad"
    assert wizard.draft.hashtags.repurposed == "#B #ad"


@pytest.mark.parametrize("percent", [0, 35, 70, 100, "40"])
def test_allocation_always_sums_to_100(wizard, percent):
    allocation = wizard.set_allocation(percent)
    assert allocation.original + allocation.repurposed == 100


def test_allocation_from_repurposed_side(wizard):
    wizard.update_field("budget_allocation.repurposed", 45)
    assert wizard.draft.budget_allocation.original == 55
    assert wizard.draft.budget_allocation.repurposed == 45


@pytest.mark.parametrize("percent", [-1, 101, 33.5, "lots", True])
def test_allocation_rejects_invalid_percent(wizard, percent):
    with pytest.raises(ValidationError):
        wizard.set_allocation(percent)
    assert wizard.draft.budget_allocation.original == 70


def test_toggle_platform(wizard):
    assert wizard.toggle_platform("youtube") is True
    assert wizard.toggle_platform(Platform.youtube) is False
    assert wizard.draft.platforms == set()
    with pytest.raises(ValidationError):
        wizard.toggle_platform("myspace")


def test_platform_flag_paths(wizard):
    wizard.update_field("platforms.tiktok", True)
    wizard.update_field("platforms.twitter", True)
    wizard.update_field("platforms.tiktok", False)
    assert wizard.draft.ordered_platforms() == [Platform.twitter]


def test_start_date_in_past_rejected(wizard):
    with pytest.raises(ValidationError):
        wizard.update_field("date_range.start", (FIXED_TODAY - timedelta(days=1)).isoformat())
    assert wizard.draft.date_range.start == FIXED_TODAY


def test_end_before_start_rejected(wizard):
    with pytest.raises(ValidationError):
        wizard.update_field("date_range.end", (FIXED_TODAY - timedelta(days=1)).isoformat())


def test_start_after_end_rejected(wizard):
    end = wizard.draft.date_range.end
    with pytest.raises(ValidationError):
        wizard.update_field("startDate", (end + timedelta(days=1)).isoformat())


def test_malformed_date_rejected(wizard):
    with pytest.raises(ValidationError):
        wizard.update_field("date_range.end", "next tuesday")


def test_clearing_dates(wizard):
    wizard.update_field("date_range.end", "")
    wizard.update_field("date_range.start", (FIXED_TODAY + timedelta(days=90)).isoformat())
    assert wizard.draft.date_range.end is None


def test_guideline_list_editing(wizard):
    wizard.update_guideline(0, "First")
    index = wizard.add_guideline("Second")
    assert index == 1
    assert wizard.remove_guideline(0) == "First"
    assert wizard.draft.guidelines == ["Second"]
    with pytest.raises(ValidationError):
        wizard.update_guideline(5, "nope")


def test_asset_list_editing(wizard):
    ref = AssetReference(id="abc", filename="logo.png", size=10, content_type="image/png")
    wizard.attach_asset(ref)
    assert wizard.draft.assets == [ref]
    assert wizard.remove_asset(0) == ref
    with pytest.raises(ValidationError):
        wizard.remove_asset(0)


def test_terms_accepted_must_be_bool(wizard):
    with pytest.raises(ValidationError):
        wizard.update_field("terms_accepted", "yes")


# ── Navigation ───────────────────────────────────────────────

def test_advance_blocked_on_incomplete_step(wizard):
    with pytest.raises(StepIncomplete) as exc:
        wizard.advance()

    assert exc.value.step_index == 0
    assert {f.field for f in exc.value.failures} == {"title", "goal"}
    assert wizard.current_step == 0


def test_advance_and_retreat(wizard):
    wizard.update_field("title", "Launch")
    wizard.update_field("goal", "launch")

    assert wizard.advance() == 1
    assert wizard.retreat() is True
    assert wizard.current_step == 0
    assert wizard.retreat() is False
    assert wizard.current_step == 0


def test_step_completion_is_pure(wizard):
    before = wizard.draft.to_dict()
    for index in range(len(wizard.steps)):
        first = wizard.is_step_complete(index)
        assert wizard.is_step_complete(index) == first
    assert wizard.draft.to_dict() == before


def test_step_failures_out_of_range(wizard):
    with pytest.raises(IndexError):
        wizard.step_failures(6)


def test_fill_reaches_review(review_wizard):
    assert review_wizard.current_step == 5
    assert not review_wizard.review_ready
    with pytest.raises(StepIncomplete) as exc:
        review_wizard.advance()
    assert exc.value.step_index == 5


def test_review_ready_after_last_step(review_wizard):
    review_wizard.update_field("terms_accepted", True)

    assert review_wizard.advance() == 5
    assert review_wizard.review_ready

    assert review_wizard.retreat() is True
    assert not review_wizard.review_ready
    assert review_wizard.current_step == 5


def test_repurposed_rate_required_for_both(wizard):
    wizard.current_step = 3
    wizard.set_content_type("both")
    wizard.update_field("budget", "5000")
    wizard.update_field("payout_rate.repurposed", "")

    with pytest.raises(StepIncomplete) as exc:
        wizard.advance()
    assert [f.field for f in exc.value.failures] == ["payout_rate.repurposed"]


def test_payment_methods_preselect_default(wizard):
    wizard.current_step = 4
    assert wizard.needs_payment_methods

    wizard.offer_payment_methods(DEMO_PAYMENT_METHODS)

    assert not wizard.needs_payment_methods
    assert wizard.draft.payment_method_id == "pm_1"
    wizard.update_field("payment_method", "pm_2")
    assert wizard.draft.payment_method_id == "pm_2"
    with pytest.raises(ValidationError):
        wizard.update_field("payment_method_id", "pm_404")


def test_offer_keeps_existing_choice(wizard):
    wizard.update_field("payment_method_id", "pm_2")
    wizard.offer_payment_methods(DEMO_PAYMENT_METHODS)
    assert wizard.draft.payment_method_id == "pm_2"


def test_offer_replaces_unknown_early_choice(wizard):
    wizard.update_field("payment_method_id", "pm_404")
    wizard.current_step = 4

    wizard.offer_payment_methods(DEMO_PAYMENT_METHODS)

    assert wizard.draft.payment_method_id == "pm_1"
    assert wizard.is_step_complete(4)


def test_offer_without_default_clears_unknown_choice(wizard):
    wizard.update_field("payment_method_id", "pm_404")

    wizard.offer_payment_methods([DEMO_PAYMENT_METHODS[1]])

    assert wizard.draft.payment_method_id is None
    assert not wizard.is_step_complete(4)


def test_estimate_follows_draft(wizard):
    wizard.update_field("budget", "5000")
    wizard.set_content_type("both")
    assert wizard.estimate.total_views == 13_000_000

    wizard.update_field("budget", "")
    assert wizard.estimate.total_views == 0


# ── Finalize ─────────────────────────────────────────────────

@pytest.mark.parametrize("wizard_fixture", ["wizard", "review_wizard"])
@pytest.mark.parametrize("mode", ["draft", "submit"])
async def test_finalize_requires_terms(request, recording_store, wizard_fixture, mode):
    target = request.getfixturevalue(wizard_fixture)

    with pytest.raises(StepIncomplete) as exc:
        await target.finalize(mode, recording_store)

    assert exc.value.step_index == 5
    assert recording_store.appended == []


async def test_save_as_draft(review_wizard, recording_store):
    review_wizard.update_field("terms_accepted", True)

    campaign = await review_wizard.finalize("draft", recording_store)

    assert campaign.status == CampaignStatus.draft
    assert campaign.id.startswith("campaign-")
    assert recording_store.appended == [campaign]


async def test_submit_for_approval(review_wizard, recording_store):
    review_wizard.update_field("terms_accepted", True)

    campaign = await review_wizard.finalize("submit", recording_store)

    assert campaign.status == CampaignStatus.pending_approval
    assert campaign.draft.title == "Summer Collection Launch"
    assert campaign.to_dict()["status"] == "pending-approval"


async def test_persisted_campaign_is_a_snapshot(review_wizard, recording_store):
    review_wizard.update_field("terms_accepted", True)
    campaign = await review_wizard.finalize("draft", recording_store)

    review_wizard.update_field("title", "Changed afterwards")
    review_wizard.add_guideline("Another")

    assert campaign.draft.title == "Summer Collection Launch"
    assert len(campaign.draft.guidelines) == 2


async def test_submit_rejects_small_budget(review_wizard, recording_store):
    review_wizard.update_field("budget", "500")
    review_wizard.update_field("terms_accepted", True)

    with pytest.raises(ValidationError) as exc:
        await review_wizard.finalize("submit", recording_store)

    assert [f.field for f in exc.value.failures] == ["budget"]
    assert recording_store.appended == []


async def test_draft_mode_skips_submit_checks(review_wizard, recording_store):
    review_wizard.update_field("budget", "500")
    review_wizard.update_field("terms_accepted", True)

    campaign = await review_wizard.finalize("draft", recording_store)
    assert campaign.draft.budget == "500"


async def test_store_failure_propagates_without_retry(review_wizard, failing_store):
    review_wizard.update_field("terms_accepted", True)

    with pytest.raises(StoreError):
        await review_wizard.finalize("submit", failing_store)

    assert failing_store.calls == 1


async def test_store_failure_can_be_retried(review_wizard, failing_store, recording_store):
    review_wizard.update_field("terms_accepted", True)
    with pytest.raises(StoreError):
        await review_wizard.finalize("submit", failing_store)

    campaign = await review_wizard.finalize("submit", recording_store)

    assert recording_store.appended == [campaign]


async def test_concurrent_finalize_appends_once(review_wizard, recording_store):
    store = SlowStore(recording_store)
    review_wizard.update_field("terms_accepted", True)

    results = await asyncio.gather(
        review_wizard.finalize("submit", store),
        review_wizard.finalize("submit", store),
        return_exceptions=True,
    )

    saved = [r for r in results if isinstance(r, PersistedCampaign)]
    rejected = [r for r in results if isinstance(r, FinalizeInProgress)]
    assert len(saved) == 1
    assert len(rejected) == 1
    assert recording_store.appended == saved
    assert not review_wizard.finalizing


async def test_unknown_mode_rejected(review_wizard, recording_store):
    review_wizard.update_field("terms_accepted", True)
    with pytest.raises(ValueError):
        await review_wizard.finalize("publish", recording_store)
