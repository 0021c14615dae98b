"""Tests for the plan feature table and plan getters."""

import pytest
from pydantic import ValidationError

from cuidly.core.schemas import SubscriptionPlan
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
    get_review_limit,
    has_matching_feature,
    has_unlimited_messaging,
    is_family_plan,
    is_nanny_plan,
    visible_reviews,
)

FREE_FAMILY = SubscriptionPlan.FAMILY_FREE
PAID_FAMILY = SubscriptionPlan.FAMILY_PLUS
FREE_NANNY = SubscriptionPlan.NANNY_FREE
PAID_NANNY = SubscriptionPlan.NANNY_PRO


class TestFeatureTable:
    def test_every_plan_has_a_row(self) -> None:
        assert set(PLAN_FEATURES) == set(SubscriptionPlan)

    def test_no_plan_closes_everything(self) -> None:
        features = get_plan_features(None)
        assert features == PlanFeatures()
        assert get_job_limit(None) == 0
        assert get_max_conversations_per_job(None) == 0
        assert get_review_limit(None) == 0
        assert has_matching_feature(None) is False
        assert has_unlimited_messaging(None) is False

    def test_features_frozen(self) -> None:
        with pytest.raises(ValidationError):
            PLAN_FEATURES[FREE_FAMILY].create_jobs = 10  # type: ignore[misc]


class TestLimits:
    def test_paid_family_more_jobs_than_free(self) -> None:
        assert get_job_limit(PAID_FAMILY) > get_job_limit(FREE_FAMILY)
        assert get_job_limit(FREE_FAMILY) == 1
        assert get_job_limit(PAID_FAMILY) == 3

    def test_conversation_caps(self) -> None:
        assert get_max_conversations_per_job(FREE_FAMILY) == 1
        assert get_max_conversations_per_job(PAID_FAMILY) == UNLIMITED

    def test_expiration_days(self) -> None:
        assert get_job_expiration_days(FREE_FAMILY) == 7
        assert get_job_expiration_days(PAID_FAMILY) == 30

    def test_review_limits(self) -> None:
        assert get_review_limit(FREE_FAMILY) == 1
        assert get_review_limit(PAID_FAMILY) == UNLIMITED

    def test_nanny_plans_cannot_create_jobs(self) -> None:
        assert get_job_limit(FREE_NANNY) == 0
        assert get_job_limit(PAID_NANNY) == 0


class TestPlanGetters:
    def test_tiers(self) -> None:
        assert get_plan_tier(FREE_FAMILY) == "free"
        assert get_plan_tier(FREE_NANNY) == "free"
        assert get_plan_tier(PAID_FAMILY) == "paid"
        assert get_plan_tier(PAID_NANNY) == "paid"

    def test_roles(self) -> None:
        assert is_family_plan(PAID_FAMILY) and not is_nanny_plan(PAID_FAMILY)
        assert is_nanny_plan(FREE_NANNY) and not is_family_plan(FREE_NANNY)
        assert not is_family_plan(None) and not is_nanny_plan(None)

    def test_matching_feature(self) -> None:
        assert has_matching_feature(PAID_FAMILY) is True
        assert has_matching_feature(PAID_NANNY) is True
        assert has_matching_feature(FREE_FAMILY) is False

    def test_unlimited_messaging_only_for_pro(self) -> None:
        assert has_unlimited_messaging(PAID_NANNY) is True
        assert has_unlimited_messaging(FREE_NANNY) is False

    def test_boosts(self) -> None:
        assert get_plan_features(PAID_FAMILY).boost_per_cycle == 1
        assert get_plan_features(FREE_FAMILY).boost_per_cycle == 0
        assert get_plan_features(PAID_NANNY).weekly_boost == 1

    def test_display_names(self) -> None:
        assert get_plan_display_name(PAID_NANNY) == "Babá Pro"
        for plan in SubscriptionPlan:
            assert get_plan_display_name(plan)


class TestVisibleReviews:
    def test_free_family_sees_one(self) -> None:
        assert visible_reviews(FREE_FAMILY, ["a", "b", "c"]) == ["a"]

    def test_paid_family_sees_all(self) -> None:
        assert visible_reviews(PAID_FAMILY, ["a", "b", "c"]) == ["a", "b", "c"]

    def test_no_plan_sees_none(self) -> None:
        assert visible_reviews(None, ["a", "b"]) == []
