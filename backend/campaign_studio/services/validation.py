"""
Validation rules shared by the wizard step checks and submit-time checks.

Rules return a ValidationFailure (or a list of them) instead of a bare bool,
so the API can point the brand at the offending field. An empty list means
the rule passed.

Hashtag rules:
- every stored hashtag string contains "#ad" (ensure_ad_tag appends it)
- with content type "both", the two hashtag strings must differ; switching
  to "both" with identical strings inserts "#Repurposed" into the
  repurposed one (disambiguate_repurposed)
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Any

from campaign_studio.models import ContentType
from campaign_studio.settings import Settings

from .draft import CampaignDraft

AD_TAG = "#ad"
REPURPOSED_MARKER = "#Repurposed"


@dataclass(frozen=True)
class ValidationFailure:
    field: str
    reason: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "reason": self.reason}


class WizardError(Exception):
    """Base class for recoverable wizard errors."""
    pass


class ValidationError(WizardError):
    """Raised for unknown field paths, malformed input or failed submit checks."""

    def __init__(self, failures: list[ValidationFailure]):
        self.failures = list(failures)
        summary = "; ".join(f"{f.field}: {f.reason}" for f in self.failures)
        super().__init__(summary or "validation failed")

    @classmethod
    def single(cls, field: str, reason: str) -> "ValidationError":
        return cls([ValidationFailure(field, reason)])


# ── Field-level rules ────────────────────────────────────────

def parse_number(value: Any) -> float | None:
    """Parse a numeric input; None when empty, malformed or not finite."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def is_positive_number(value: Any) -> bool:
    number = parse_number(value)
    return number is not None and number > 0


def is_blank(value: str | None) -> bool:
    return value is None or not str(value).strip()


def check_not_blank(field: str, value: str | None) -> ValidationFailure | None:
    if is_blank(value):
        return ValidationFailure(field, "required")
    return None


def check_positive_number(field: str, value: Any) -> ValidationFailure | None:
    if not is_positive_number(value):
        return ValidationFailure(field, "must be a positive number")
    return None


def check_min_number(field: str, value: Any, minimum: float) -> ValidationFailure | None:
    number = parse_number(value)
    if number is None or number < minimum:
        return ValidationFailure(field, f"must be at least {minimum:g}")
    return None


def check_min_whole_number(field: str, value: Any, minimum: int) -> ValidationFailure | None:
    number = parse_number(value)
    if number is not None and not number.is_integer():
        return ValidationFailure(field, "must be a whole number")
    return check_min_number(field, value, minimum)


def check_date_set(field: str, value: date | None) -> ValidationFailure | None:
    if value is None:
        return ValidationFailure(field, "required")
    return None


def check_date_order(start: date | None, end: date | None) -> ValidationFailure | None:
    if start is not None and end is not None and end < start:
        return ValidationFailure("date_range.end", "must not be before the start date")
    return None


def check_not_before(field: str, value: date | None, earliest: date) -> ValidationFailure | None:
    if value is not None and value < earliest:
        return ValidationFailure(field, "must not be in the past")
    return None


def check_min_duration(start: date | None, end: date | None, days: int) -> ValidationFailure | None:
    if start is None or end is None:
        return None
    if (end - start).days < days:
        return ValidationFailure("date_range.end", f"campaign must run at least {days} days")
    return None


def coerce_numeric_input(field: str, value: Any) -> str:
    """Normalize a numeric field update to its stored string form.

    Empty input is allowed while the brand is still typing.
    """
    if value is None:
        return ""
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise ValidationError.single(field, "must be a number")
    text = str(value).strip()
    if text and parse_number(text) is None:
        raise ValidationError.single(field, "must be a number")
    return text


# ── Hashtag rules ────────────────────────────────────────────

def has_ad_tag(value: str | None) -> bool:
    return bool(value) and AD_TAG in value


def ensure_ad_tag(value: str | None) -> str:
    text = (value or "").strip()
    if AD_TAG in text:
        return text
    if not text:
        return AD_TAG
    return f"{text} {AD_TAG}"


def disambiguate_repurposed(original: str, repurposed: str) -> str:
    """Return a repurposed hashtag that differs from the original one.

    The marker goes in front of a trailing "#ad" so the disclosure stays last.
    """
    if original != repurposed:
        return repurposed
    text = repurposed.rstrip()
    if text.endswith(AD_TAG):
        head = text[: -len(AD_TAG)].rstrip()
        marked = f"{head} {REPURPOSED_MARKER}".strip()
        return f"{marked} {AD_TAG}"
    return ensure_ad_tag(f"{text} {REPURPOSED_MARKER}".strip())


def hashtag_failures(draft: CampaignDraft) -> list[ValidationFailure]:
    failures: list[ValidationFailure] = []
    content_type = draft.content_type
    if content_type in (ContentType.original, ContentType.both) and not has_ad_tag(draft.hashtags.original):
        failures.append(ValidationFailure("hashtags.original", f"must contain {AD_TAG}"))
    if content_type in (ContentType.repurposed, ContentType.both) and not has_ad_tag(draft.hashtags.repurposed):
        failures.append(ValidationFailure("hashtags.repurposed", f"must contain {AD_TAG}"))
    if content_type == ContentType.both and draft.hashtags.original == draft.hashtags.repurposed:
        failures.append(ValidationFailure("hashtags.repurposed", "must differ from the original hashtag"))
    return failures


# ── Step rules ───────────────────────────────────────────────

def _collect(*results: ValidationFailure | None) -> list[ValidationFailure]:
    return [r for r in results if r is not None]


def details_failures(draft: CampaignDraft) -> list[ValidationFailure]:
    return _collect(
        check_not_blank("title", draft.title),
        check_not_blank("goal", draft.goal.value if draft.goal else None),
    )


def platform_failures(draft: CampaignDraft) -> list[ValidationFailure]:
    failures = []
    if not draft.platforms:
        failures.append(ValidationFailure("platforms", "select at least one platform"))
    if draft.content_type is None:
        failures.append(ValidationFailure("content_type", "required"))
    return failures


def creative_failures(draft: CampaignDraft) -> list[ValidationFailure]:
    failures = []
    if not any(not is_blank(g) for g in draft.guidelines):
        failures.append(ValidationFailure("guidelines", "add at least one guideline"))
    failures.extend(hashtag_failures(draft))
    failures.extend(_collect(
        check_date_set("date_range.start", draft.date_range.start),
        check_date_set("date_range.end", draft.date_range.end),
        check_not_blank("brief", draft.brief),
    ))
    return failures


def budget_failures(draft: CampaignDraft) -> list[ValidationFailure]:
    failures = _collect(
        check_positive_number("budget", draft.budget),
        check_positive_number("payout_rate.original", draft.payout_rate.original),
    )
    if draft.content_type in (ContentType.both, ContentType.repurposed):
        failures.extend(_collect(
            check_positive_number("payout_rate.repurposed", draft.payout_rate.repurposed),
        ))
    return failures


def payment_failures(draft: CampaignDraft) -> list[ValidationFailure]:
    return _collect(check_not_blank("payment_method_id", draft.payment_method_id))


def review_failures(draft: CampaignDraft) -> list[ValidationFailure]:
    if not draft.terms_accepted:
        return [ValidationFailure("terms_accepted", "terms must be accepted")]
    return []


# ── Submit-time rules ────────────────────────────────────────

@dataclass(frozen=True)
class SubmitRules:
    min_budget: float = 1000
    min_views_floor: int = 1000
    min_campaign_days: int = 30
    enforce_min_campaign_days: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "SubmitRules":
        return cls(
            min_budget=settings.min_budget,
            min_views_floor=settings.min_views_floor,
            min_campaign_days=settings.min_campaign_days,
            enforce_min_campaign_days=settings.enforce_min_campaign_days,
        )


def submission_failures(draft: CampaignDraft, rules: SubmitRules, today: date) -> list[ValidationFailure]:
    """Everything a campaign must satisfy before it goes to approval."""
    failures: list[ValidationFailure] = []
    for step_rule in (details_failures, platform_failures, creative_failures, budget_failures, payment_failures):
        failures.extend(step_rule(draft))

    if is_positive_number(draft.budget):
        failures.extend(_collect(check_min_number("budget", draft.budget, rules.min_budget)))
    failures.extend(_collect(
        check_min_whole_number("min_views", draft.min_views, rules.min_views_floor),
        check_not_before("date_range.start", draft.date_range.start, today),
        check_date_order(draft.date_range.start, draft.date_range.end),
    ))
    if rules.enforce_min_campaign_days:
        failures.extend(_collect(
            check_min_duration(draft.date_range.start, draft.date_range.end, rules.min_campaign_days),
        ))
    return failures
