"""Plan entitlements: the static feature table, pure gates and the store-backed service.

Usage:
    from cuidly.entitlements import can_start_conversation_for_job, get_job_limit

    decision = can_start_conversation_for_job(subscription, job, conversations_used=1)
    if not decision.can_start:
        ...  # decision.code == DenialCode.CONVERSATION_LIMIT_REACHED
"""

from cuidly.entitlements.features import (
    PLAN_FEATURES,
    UNLIMITED,
    PlanFeatures,
    get_job_expiration_days,
    get_job_limit,
    get_max_conversations_per_job,
    get_plan_display_name,
    get_plan_features,
    get_plan_tier,
    get_profile_view_limit,
    get_review_limit,
    has_matching_feature,
    has_unlimited_messaging,
    is_family_plan,
    is_nanny_plan,
    visible_reviews,
)
from cuidly.entitlements.resolver import (
    can_create_job,
    can_nanny_send_message,
    can_start_conversation_for_job,
    can_use_boost,
    can_view_profile,
    is_job_expired,
    profile_view_usage,
)
from cuidly.entitlements.service import SubscriptionService

__all__ = [
    "PLAN_FEATURES",
    "UNLIMITED",
    "PlanFeatures",
    "SubscriptionService",
    "can_create_job",
    "can_nanny_send_message",
    "can_start_conversation_for_job",
    "can_use_boost",
    "can_view_profile",
    "get_job_expiration_days",
    "get_job_limit",
    "get_max_conversations_per_job",
    "get_plan_display_name",
    "get_plan_features",
    "get_plan_tier",
    "get_profile_view_limit",
    "get_review_limit",
    "has_matching_feature",
    "has_unlimited_messaging",
    "is_family_plan",
    "is_job_expired",
    "is_nanny_plan",
    "profile_view_usage",
    "visible_reviews",
]
