"""Subscription service: reads usage from the store and asks the pure gates.

This is what a route handler calls. Every method is a fresh re-derivation
from the current rows; nothing is cached between calls.
"""

import logging
import sqlite3
from datetime import datetime

from cuidly.core.db import (
    conversation_exists,
    count_active_jobs,
    count_family_boosts,
    count_job_conversations,
    count_profile_views,
    get_conversation_thread,
    get_job,
    get_last_nanny_boost,
    get_subscription,
    insert_profile_view,
    profile_view_exists,
)
from cuidly.core.errors import InvalidLookupError, JobNotFoundError
from cuidly.core.schemas import (
    BoostDecision,
    BoostUsage,
    ConversationDecision,
    ConversationThread,
    FamilyLookup,
    JobCreationDecision,
    JobExpiration,
    JobSnapshot,
    MessageDecision,
    NannyLookup,
    ProfileViewDecision,
    ProfileViewUsage,
    SubscriptionSnapshot,
)
from cuidly.entitlements import resolver
from cuidly.entitlements.features import PlanFeatures, get_plan_features, get_review_limit

logger = logging.getLogger(__name__)


class SubscriptionService:
    """Entitlement checks backed by a sqlite connection.

    Usage::

        service = SubscriptionService(conn)
        decision = service.can_start_conversation_for_job(
            FamilyLookup(id=7), job_id=42, recipient=NannyLookup(id=3),
        )
        if not decision.can_start:
            ...  # map decision.code to a 403 response
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def get_subscription(self, lookup: NannyLookup | FamilyLookup) -> SubscriptionSnapshot | None:
        return get_subscription(self._conn, lookup)

    def get_plan_features(self, lookup: NannyLookup | FamilyLookup) -> PlanFeatures:
        """Features of the owner's active plan; all closed when inactive."""
        subscription = self.get_subscription(lookup)
        if subscription is None or not subscription.is_active:
            return get_plan_features(None)
        return get_plan_features(subscription.plan)

    def get_review_limit(self, lookup: NannyLookup | FamilyLookup) -> int:
        subscription = self.get_subscription(lookup)
        if subscription is None or not subscription.is_active:
            return get_review_limit(None)
        return get_review_limit(subscription.plan)

    def require_job(self, job_id: int) -> JobSnapshot:
        job = get_job(self._conn, job_id)
        if job is None:
            msg = f"Job {job_id} not found"
            raise JobNotFoundError(msg)
        return job

    def can_create_job(self, lookup: NannyLookup | FamilyLookup) -> JobCreationDecision:
        subscription = self.get_subscription(lookup)
        active_jobs = (
            count_active_jobs(self._conn, lookup.id) if isinstance(lookup, FamilyLookup) else 0
        )
        decision = resolver.can_create_job(subscription, active_jobs)
        if not decision.can_create:
            logger.info(
                "Job creation denied for %s %d: %s",
                lookup.kind, lookup.id, decision.code.value if decision.code else "",
            )
        return decision

    def can_start_conversation_for_job(
        self,
        lookup: NannyLookup | FamilyLookup,
        job_id: int,
        recipient: NannyLookup | FamilyLookup,
        now: datetime | None = None,
    ) -> ConversationDecision:
        """Gate a new conversation between ``lookup`` and ``recipient`` on a job.

        Raises:
            InvalidLookupError: If the pair is not one family and one nanny.
            JobNotFoundError: If the job does not exist.
        """
        if isinstance(lookup, FamilyLookup) and isinstance(recipient, NannyLookup):
            family_id, nanny_id = lookup.id, recipient.id
        elif isinstance(lookup, NannyLookup) and isinstance(recipient, FamilyLookup):
            family_id, nanny_id = recipient.id, lookup.id
        else:
            msg = "a conversation needs exactly one family and one nanny"
            raise InvalidLookupError(msg)

        job = self.require_job(job_id)
        subscription = self.get_subscription(lookup)
        used = count_job_conversations(self._conn, job_id)
        existing = conversation_exists(self._conn, family_id, nanny_id, job_id)
        logger.debug(
            "Conversation gate job=%d family=%d nanny=%d used=%d existing=%s",
            job_id, family_id, nanny_id, used, existing,
        )

        decision = resolver.can_start_conversation_for_job(
            subscription, job, used, has_existing_conversation=existing, now=now,
        )
        if not decision.can_start:
            logger.info(
                "Conversation denied on job %d: %s (%d/%d)",
                job_id,
                decision.code.value if decision.code else "",
                decision.conversations_used,
                decision.conversation_limit,
            )
        return decision

    def can_nanny_send_message(
        self,
        lookup: NannyLookup | FamilyLookup,
        conversation_id: str,
    ) -> MessageDecision:
        subscription = self.get_subscription(lookup)
        # Non-nanny lookups are rejected by the gate before counts matter.
        thread = ConversationThread()
        if isinstance(lookup, NannyLookup):
            thread = get_conversation_thread(self._conn, conversation_id, lookup.id)
        decision = resolver.can_nanny_send_message(subscription, thread)
        if not decision.can_send:
            logger.info(
                "Message denied for %s %d in %s: %s",
                lookup.kind, lookup.id, conversation_id, decision.code.value if decision.code else "",
            )
        return decision

    def can_use_boost(
        self,
        lookup: NannyLookup | FamilyLookup,
        now: datetime | None = None,
    ) -> BoostDecision:
        subscription = self.get_subscription(lookup)
        if subscription is None:
            return resolver.can_use_boost(None, BoostUsage(), now)

        if isinstance(lookup, FamilyLookup):
            usage = BoostUsage(
                boosts_in_cycle=count_family_boosts(
                    self._conn,
                    lookup.id,
                    subscription.current_period_start,
                    subscription.current_period_end,
                )
            )
        else:
            usage = BoostUsage(last_boost_at=get_last_nanny_boost(self._conn, lookup.id))
        return resolver.can_use_boost(subscription, usage, now)

    def is_job_expired(self, job_id: int, now: datetime | None = None) -> JobExpiration:
        """Check a job against its owner's plan window.

        Raises:
            JobNotFoundError: If the job does not exist.
        """
        return resolver.is_job_expired(self.require_job(job_id), now)

    def can_view_profile(
        self,
        lookup: NannyLookup | FamilyLookup,
        nanny_id: int,
    ) -> ProfileViewDecision:
        subscription = self.get_subscription(lookup)
        decision = resolver.can_view_profile(
            subscription,
            count_profile_views(self._conn, lookup),
            already_viewed=profile_view_exists(self._conn, lookup, nanny_id),
        )
        if not decision.can_view:
            logger.info(
                "Profile view denied for %s %d on nanny %d: %s",
                lookup.kind, lookup.id, nanny_id, decision.code.value if decision.code else "",
            )
        return decision

    def register_profile_view(self, lookup: NannyLookup | FamilyLookup, nanny_id: int) -> bool:
        """Record a view. Returns False if this profile was already counted."""
        return insert_profile_view(self._conn, lookup, nanny_id)

    def get_profile_view_usage(self, lookup: NannyLookup | FamilyLookup) -> ProfileViewUsage:
        return resolver.profile_view_usage(
            self.get_subscription(lookup), count_profile_views(self._conn, lookup)
        )
