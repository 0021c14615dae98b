"""Static plan-feature table and pure plan-derived getters.

Features depend on the plan tier only, never on the billing interval.
A ``None`` plan stands for "no active subscription": every getter then
returns the closed default (no jobs, no conversations, no reviews).
"""

from collections.abc import Sequence
from typing import TypeVar

from pydantic import BaseModel, ConfigDict

from cuidly.core.schemas import SubscriptionPlan

T = TypeVar("T")

UNLIMITED = -1


class PlanFeatures(BaseModel):
    """Named entitlements of one plan. Defaults are all closed."""

    model_config = ConfigDict(frozen=True)

    # Family features
    view_profiles: int = 0
    create_jobs: int = 0
    see_reviews: int = 0
    favorite: bool = False
    see_verification_seals: bool = False
    unlimited_contact: bool = False
    max_conversations_per_job: int = 0
    job_expiration_days: int = UNLIMITED
    matching: bool = False
    rate_nannies: bool = False
    job_highlight: bool = False
    boost_per_cycle: int = 0

    # Nanny features
    view_jobs: bool = False
    apply_to_jobs: bool = False
    profile_complete: bool = False
    unlimited_messaging: bool = False
    rate_families: bool = False
    profile_highlight: bool = False
    priority_matching: bool = False
    weekly_boost: int = 0


NO_FEATURES = PlanFeatures()

PLAN_FEATURES: dict[SubscriptionPlan, PlanFeatures] = {
    SubscriptionPlan.FAMILY_FREE: PlanFeatures(
        view_profiles=UNLIMITED,
        create_jobs=1,
        see_reviews=1,
        favorite=True,
        see_verification_seals=True,
        max_conversations_per_job=1,
        job_expiration_days=7,
        rate_nannies=True,
    ),
    SubscriptionPlan.FAMILY_PLUS: PlanFeatures(
        view_profiles=UNLIMITED,
        create_jobs=3,
        see_reviews=UNLIMITED,
        favorite=True,
        see_verification_seals=True,
        unlimited_contact=True,
        max_conversations_per_job=UNLIMITED,
        job_expiration_days=30,
        matching=True,
        rate_nannies=True,
        job_highlight=True,
        boost_per_cycle=1,
    ),
    SubscriptionPlan.NANNY_FREE: PlanFeatures(
        view_jobs=True,
        apply_to_jobs=True,
        profile_complete=True,
        rate_families=True,
    ),
    SubscriptionPlan.NANNY_PRO: PlanFeatures(
        view_jobs=True,
        apply_to_jobs=True,
        profile_complete=True,
        unlimited_messaging=True,
        rate_families=True,
        profile_highlight=True,
        priority_matching=True,
        weekly_boost=1,
    ),
}

_missing = set(SubscriptionPlan) - set(PLAN_FEATURES)
if _missing:
    _msg = f"PLAN_FEATURES has no row for: {sorted(p.value for p in _missing)}"
    raise RuntimeError(_msg)

_FAMILY_PLANS = frozenset({SubscriptionPlan.FAMILY_FREE, SubscriptionPlan.FAMILY_PLUS})
_NANNY_PLANS = frozenset({SubscriptionPlan.NANNY_FREE, SubscriptionPlan.NANNY_PRO})

_DISPLAY_NAMES: dict[SubscriptionPlan, str] = {
    SubscriptionPlan.FAMILY_FREE: "Família Grátis",
    SubscriptionPlan.FAMILY_PLUS: "Família Plus",
    SubscriptionPlan.NANNY_FREE: "Babá Grátis",
    SubscriptionPlan.NANNY_PRO: "Babá Pro",
}


def get_plan_features(plan: SubscriptionPlan | None) -> PlanFeatures:
    if plan is None:
        return NO_FEATURES
    return PLAN_FEATURES[plan]


def get_plan_tier(plan: SubscriptionPlan) -> str:
    """Return "free" or "paid"."""
    if plan in (SubscriptionPlan.FAMILY_FREE, SubscriptionPlan.NANNY_FREE):
        return "free"
    return "paid"


def is_family_plan(plan: SubscriptionPlan | None) -> bool:
    return plan in _FAMILY_PLANS


def is_nanny_plan(plan: SubscriptionPlan | None) -> bool:
    return plan in _NANNY_PLANS


def get_job_limit(plan: SubscriptionPlan | None) -> int:
    """Maximum number of active jobs."""
    return get_plan_features(plan).create_jobs


def get_max_conversations_per_job(plan: SubscriptionPlan | None) -> int:
    """Distinct conversations allowed per job; -1 means unlimited."""
    return get_plan_features(plan).max_conversations_per_job


def get_job_expiration_days(plan: SubscriptionPlan | None) -> int:
    """Days a job stays open after creation; -1 means it never expires."""
    return get_plan_features(plan).job_expiration_days


def get_profile_view_limit(plan: SubscriptionPlan | None) -> int:
    """Distinct nanny profiles the owner may open; -1 means unlimited."""
    return get_plan_features(plan).view_profiles


def get_review_limit(plan: SubscriptionPlan | None) -> int:
    """Reviews visible per nanny; -1 means unlimited."""
    return get_plan_features(plan).see_reviews


def has_matching_feature(plan: SubscriptionPlan | None) -> bool:
    features = get_plan_features(plan)
    return features.matching or features.priority_matching


def has_unlimited_messaging(plan: SubscriptionPlan | None) -> bool:
    return get_plan_features(plan).unlimited_messaging


def get_plan_display_name(plan: SubscriptionPlan) -> str:
    return _DISPLAY_NAMES[plan]


def visible_reviews(plan: SubscriptionPlan | None, reviews: Sequence[T]) -> list[T]:
    """Truncate an already-ordered review list to what the plan may see."""
    limit = get_review_limit(plan)
    if limit == UNLIMITED:
        return list(reviews)
    return list(reviews[:limit])
