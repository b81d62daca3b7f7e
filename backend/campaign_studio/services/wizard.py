"""
Campaign creation wizard.

Owns the campaign draft and the fixed sequence of six steps:
  0 Details -> 1 Platforms/Content -> 2 Creative -> 3 Budget/Rates
  -> 4 Payment -> 5 Review

All draft mutation goes through this class so the hashtag and allocation
rules apply no matter who edits the draft (API, scripts, tests).

Exceptions:
- ValidationError: unknown field path or malformed value
- StepIncomplete: advance()/finalize() while the step's rule fails
- NotAuthenticated: wizard started without a signed-in brand
- FinalizeInProgress: finalize() re-entered while the store call is pending
- StoreError (from the store): propagated from finalize() untouched
"""
from __future__ import annotations

import copy
import dataclasses
import logging
import re
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Callable, Protocol

from campaign_studio.models import CampaignGoal, CampaignStatus, ContentType, FinalizeMode, Platform
from campaign_studio.settings import Settings, get_settings

from .campaign_store import CampaignStore
from .draft import AssetReference, BudgetAllocation, CampaignDraft, PersistedCampaign
from .estimator import ReachEstimate, estimate_for_draft
from .payment_methods import PaymentMethodInfo, default_payment_method_id
from .validation import (
    SubmitRules,
    ValidationError,
    ValidationFailure,
    WizardError,
    budget_failures,
    coerce_numeric_input,
    creative_failures,
    details_failures,
    disambiguate_repurposed,
    ensure_ad_tag,
    payment_failures,
    platform_failures,
    review_failures,
    submission_failures,
)

logger = logging.getLogger(__name__)


class StepIncomplete(WizardError):
    """Raised when the current step's completion rule does not hold."""

    def __init__(self, step_index: int, failures: list[ValidationFailure]):
        self.step_index = step_index
        self.failures = list(failures)
        super().__init__(f"Step {step_index} is incomplete")


class NotAuthenticated(WizardError):
    """Raised when a wizard is started without an authenticated brand."""
    pass


class FinalizeInProgress(WizardError):
    """Raised when finalize() is called again before the store has answered."""
    pass


class SessionAuth(Protocol):
    def is_authenticated(self) -> bool:
        ...


@dataclass(frozen=True)
class Step:
    title: str
    subtitle: str
    rule: Callable[[CampaignDraft], list[ValidationFailure]]

    def failures(self, draft: CampaignDraft) -> list[ValidationFailure]:
        return self.rule(draft)

    def is_complete(self, draft: CampaignDraft) -> bool:
        return not self.rule(draft)


STEPS: tuple[Step, ...] = (
    Step("Campaign Details", "Let's start with the basic information", details_failures),
    Step("Platforms & Content", "Choose where your campaign will run", platform_failures),
    Step("Creative Brief", "Provide instructions and resources for creators", creative_failures),
    Step("Budget & Payouts", "Set your campaign budget and creator rates", budget_failures),
    Step("Payment Verification", "Confirm your payment method for campaign funding", payment_failures),
    Step("Review & Submit", "Check everything before your campaign goes live", review_failures),
)
PAYMENT_STEP = 4
REVIEW_STEP = 5

# Paths the original form used that do not map 1:1 onto the draft.
PATH_ALIASES = {
    "start_date": "date_range.start",
    "end_date": "date_range.end",
    "payment_method": "payment_method_id",
}
READ_ONLY_FIELDS = {"assets"}

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def normalize_path(path: str) -> str:
    """`payoutRate.original` -> `payout_rate.original`."""
    parts = [_CAMEL_BOUNDARY.sub("_", part.strip()).lower() for part in str(path).split(".")]
    normalized = ".".join(parts)
    return PATH_ALIASES.get(normalized, normalized)


def new_campaign_id() -> str:
    return f"campaign-{uuid.uuid4().hex[:12]}"


def _require_text(field: str, value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError.single(field, "must be text")
    return value


def _require_bool(field: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValidationError.single(field, "must be true or false")
    return value


def _parse_date(field: str, value: Any) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            pass
    raise ValidationError.single(field, "must be a date (YYYY-MM-DD)")


def _parse_percent(field: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError.single(field, "must be a whole percentage")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError.single(field, "must be a whole percentage") from None
    if not number.is_integer() or not 0 <= number <= 100:
        raise ValidationError.single(field, "must be a whole percentage between 0 and 100")
    return int(number)


class CampaignWizard:
    """Step sequencer and single writer of a CampaignDraft."""

    def __init__(
        self,
        draft: CampaignDraft | None = None,
        *,
        settings: Settings | None = None,
        today: Callable[[], date] = date.today,
        steps: tuple[Step, ...] = STEPS,
    ):
        self.settings = settings or get_settings()
        self._today = today
        self.steps = steps
        self.draft = draft if draft is not None else CampaignDraft.initial(self.settings, today())
        self.current_step = 0
        self.review_ready = False
        self.payment_methods: list[PaymentMethodInfo] | None = None
        self.finalizing = False

    @classmethod
    def start(cls, auth: SessionAuth, **kwargs: Any) -> "CampaignWizard":
        """Open a new wizard for a signed-in brand."""
        if not auth.is_authenticated():
            raise NotAuthenticated("Sign in to create a campaign")
        return cls(**kwargs)

    # ── Field updates ────────────────────────────────────────

    def update_field(self, path: str, value: Any) -> None:
        """Set one draft field by dotted path, e.g. `payout_rate.original`."""
        field = normalize_path(path)
        if field in READ_ONLY_FIELDS:
            raise ValidationError.single(field, "cannot be set directly")
        handler = self._handlers().get(field)
        if handler is None:
            raise ValidationError.single(field, "unknown field")
        handler(value)

    def _handlers(self) -> dict[str, Callable[[Any], None]]:
        handlers: dict[str, Callable[[Any], None]] = {
            "title": lambda v: setattr(self.draft, "title", _require_text("title", v)),
            "brief": lambda v: setattr(self.draft, "brief", _require_text("brief", v)),
            "goal": self._set_goal,
            "content_type": self.set_content_type,
            "platforms": self._set_platforms,
            "budget": lambda v: setattr(self.draft, "budget", coerce_numeric_input("budget", v)),
            "min_views": lambda v: setattr(self.draft, "min_views", coerce_numeric_input("min_views", v)),
            "payout_rate.original": lambda v: setattr(
                self.draft.payout_rate, "original", coerce_numeric_input("payout_rate.original", v)
            ),
            "payout_rate.repurposed": lambda v: setattr(
                self.draft.payout_rate, "repurposed", coerce_numeric_input("payout_rate.repurposed", v)
            ),
            "budget_allocation.original": self.set_allocation,
            "budget_allocation.repurposed": lambda v: self.set_allocation(
                100 - _parse_percent("budget_allocation.repurposed", v)
            ),
            "date_range.start": lambda v: self._set_date("start", v),
            "date_range.end": lambda v: self._set_date("end", v),
            "hashtags.original": lambda v: self.update_hashtag(ContentType.original, v),
            "hashtags.repurposed": lambda v: self.update_hashtag(ContentType.repurposed, v),
            "guidelines": self._set_guidelines,
            "payment_method_id": self._set_payment_method,
            "terms_accepted": lambda v: setattr(self.draft, "terms_accepted", _require_bool("terms_accepted", v)),
        }
        for platform in Platform:
            handlers[f"platforms.{platform.value}"] = (
                lambda v, p=platform: self._set_platform(p, _require_bool(f"platforms.{p.value}", v))
            )
        return handlers

    def _set_goal(self, value: Any) -> None:
        if value is None or value == "":
            self.draft.goal = None
            return
        try:
            self.draft.goal = CampaignGoal(value)
        except ValueError:
            raise ValidationError.single("goal", f"unknown goal '{value}'") from None

    def set_content_type(self, value: Any) -> None:
        try:
            content_type = ContentType(value)
        except ValueError:
            raise ValidationError.single("content_type", f"unknown content type '{value}'") from None
        self.draft.content_type = content_type
        if content_type == ContentType.both:
            hashtags = self.draft.hashtags
            if hashtags.original == hashtags.repurposed:
                hashtags.original = ensure_ad_tag(hashtags.original)
                hashtags.repurposed = disambiguate_repurposed(hashtags.original, ensure_ad_tag(hashtags.repurposed))

    def update_hashtag(self, content_type: ContentType | str, value: Any) -> str:
        """Store a hashtag line, appending the #ad disclosure if missing."""
        try:
            content_type = ContentType(content_type)
        except ValueError:
            content_type = None
        if content_type not in (ContentType.original, ContentType.repurposed):
            raise ValidationError.single("hashtags", "hashtags exist for original or repurposed content only")
        field = f"hashtags.{content_type.value}"
        stored = ensure_ad_tag(_require_text(field, value))
        setattr(self.draft.hashtags, content_type.value, stored)
        return stored

    def set_allocation(self, original_percent: Any) -> BudgetAllocation:
        """Split the budget; the repurposed share is always the remainder."""
        original = _parse_percent("budget_allocation.original", original_percent)
        self.draft.budget_allocation = BudgetAllocation(original=original, repurposed=100 - original)
        return self.draft.budget_allocation

    def _set_platform(self, platform: Platform, enabled: bool) -> None:
        if enabled:
            self.draft.platforms.add(platform)
        else:
            self.draft.platforms.discard(platform)

    def _set_platforms(self, value: Any) -> None:
        if not isinstance(value, (list, tuple, set)):
            raise ValidationError.single("platforms", "must be a list of platforms")
        try:
            self.draft.platforms = {Platform(v) for v in value}
        except ValueError:
            raise ValidationError.single("platforms", "unknown platform") from None

    def toggle_platform(self, platform: Platform | str) -> bool:
        try:
            platform = Platform(platform)
        except ValueError:
            raise ValidationError.single("platforms", f"unknown platform '{platform}'") from None
        enabled = platform not in self.draft.platforms
        self._set_platform(platform, enabled)
        return enabled

    def _set_date(self, which: str, value: Any) -> None:
        field = f"date_range.{which}"
        new_date = _parse_date(field, value)
        date_range = self.draft.date_range
        if new_date is not None:
            if which == "start":
                if new_date < self._today():
                    raise ValidationError.single(field, "must not be in the past")
                if date_range.end is not None and new_date > date_range.end:
                    raise ValidationError.single(field, "must not be after the end date")
            elif date_range.start is not None and new_date < date_range.start:
                raise ValidationError.single(field, "must not be before the start date")
        setattr(date_range, which, new_date)

    def _set_guidelines(self, value: Any) -> None:
        if not isinstance(value, (list, tuple)) or not all(isinstance(g, str) for g in value):
            raise ValidationError.single("guidelines", "must be a list of text entries")
        self.draft.guidelines = list(value)

    def add_guideline(self, text: str = "") -> int:
        self.draft.guidelines.append(_require_text("guidelines", text))
        return len(self.draft.guidelines) - 1

    def update_guideline(self, index: int, text: str) -> None:
        self._check_index("guidelines", index, self.draft.guidelines)
        self.draft.guidelines[index] = _require_text(f"guidelines.{index}", text)

    def remove_guideline(self, index: int) -> str:
        self._check_index("guidelines", index, self.draft.guidelines)
        return self.draft.guidelines.pop(index)

    def attach_asset(self, ref: AssetReference) -> None:
        self.draft.assets.append(ref)

    def remove_asset(self, index: int) -> AssetReference:
        self._check_index("assets", index, self.draft.assets)
        return self.draft.assets.pop(index)

    @staticmethod
    def _check_index(field: str, index: int, items: list) -> None:
        if not 0 <= index < len(items):
            raise ValidationError.single(f"{field}.{index}", "no such entry")

    def offer_payment_methods(self, methods: list[PaymentMethodInfo]) -> None:
        """Record the brand's cards and preselect the default one.

        A choice made before the cards were known is kept only if it is one of them.
        """
        self.payment_methods = list(methods)
        offered = {m.id for m in self.payment_methods}
        if self.draft.payment_method_id not in offered:
            self.draft.payment_method_id = default_payment_method_id(self.payment_methods)

    def _set_payment_method(self, value: Any) -> None:
        method_id = _require_text("payment_method_id", value).strip() or None
        if method_id and self.payment_methods is not None:
            if method_id not in {m.id for m in self.payment_methods}:
                raise ValidationError.single("payment_method_id", "unknown payment method")
        self.draft.payment_method_id = method_id

    # ── Navigation ───────────────────────────────────────────

    @property
    def last_step(self) -> int:
        return len(self.steps) - 1

    def step_failures(self, index: int) -> list[ValidationFailure]:
        if not 0 <= index < len(self.steps):
            raise IndexError(f"No step {index}")
        return self.steps[index].failures(self.draft)

    def is_step_complete(self, index: int) -> bool:
        return not self.step_failures(index)

    def advance(self) -> int:
        """Move to the next step, or into review after the last one."""
        failures = self.step_failures(self.current_step)
        if failures:
            raise StepIncomplete(self.current_step, failures)
        if self.current_step < self.last_step:
            self.current_step += 1
            logger.debug(f"[wizard] Advanced to step {self.current_step} ({self.steps[self.current_step].title})")
        else:
            self.review_ready = True
            logger.debug("[wizard] All steps complete, showing review")
        return self.current_step

    def retreat(self) -> bool:
        """Go back one step. Returns False at the first step (caller leaves the wizard)."""
        if self.review_ready:
            self.review_ready = False
            return True
        if self.current_step == 0:
            return False
        self.current_step -= 1
        return True

    @property
    def needs_payment_methods(self) -> bool:
        return self.current_step >= PAYMENT_STEP and self.payment_methods is None

    # ── Derived state ────────────────────────────────────────

    @property
    def estimate(self) -> ReachEstimate:
        return estimate_for_draft(self.draft)

    # ── Finalization ─────────────────────────────────────────

    async def finalize(self, mode: FinalizeMode | str, store: CampaignStore) -> PersistedCampaign:
        """Hand the draft to the store as a draft or for approval.

        Called once per user action; StoreError propagates and is not retried.
        A second call while the first is still waiting on the store raises
        FinalizeInProgress.
        """
        mode = FinalizeMode(mode)
        if self.finalizing:
            raise FinalizeInProgress("Campaign is already being saved")
        failures = review_failures(self.draft)
        if failures:
            raise StepIncomplete(REVIEW_STEP, failures)
        if mode == FinalizeMode.submit:
            failures = submission_failures(self.draft, SubmitRules.from_settings(self.settings), self._today())
            if failures:
                raise ValidationError(failures)

        status = CampaignStatus.pending_approval if mode == FinalizeMode.submit else CampaignStatus.draft
        campaign = PersistedCampaign(
            id=new_campaign_id(),
            status=status,
            created_at=datetime.now(timezone.utc),
            draft=copy.deepcopy(self.draft),
        )
        self.finalizing = True
        try:
            campaign_id = await store.append(campaign)
        finally:
            self.finalizing = False
        if campaign_id and campaign_id != campaign.id:
            campaign = dataclasses.replace(campaign, id=campaign_id)
        logger.info(f"[wizard] Campaign {campaign.id} saved as {status.value}")
        return campaign
