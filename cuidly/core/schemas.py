"""Core data models: plans, subscription lookups, snapshots and gate decisions.

Snapshots are built by the caller from stored rows; decisions are what the
entitlement gates hand back. Decisions serialize with camelCase aliases
(``model_dump(mode="json", by_alias=True)``) because the front-end branches
on those exact keys.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from cuidly.core.errors import InvalidLookupError, UnknownPlanError


class SubscriptionPlan(str, Enum):
    FAMILY_FREE = "FAMILY_FREE"
    FAMILY_PLUS = "FAMILY_PLUS"
    NANNY_FREE = "NANNY_FREE"
    NANNY_PRO = "NANNY_PRO"


class SubscriptionStatus(str, Enum):
    ACTIVE = "ACTIVE"
    TRIALING = "TRIALING"
    PAST_DUE = "PAST_DUE"
    CANCELED = "CANCELED"
    EXPIRED = "EXPIRED"
    INCOMPLETE = "INCOMPLETE"


ACTIVE_STATUSES = frozenset({SubscriptionStatus.ACTIVE, SubscriptionStatus.TRIALING})


class DenialCode(str, Enum):
    """Machine-readable denial codes. Serialized verbatim to clients."""

    NO_SUBSCRIPTION = "NO_SUBSCRIPTION"
    NOT_NANNY = "NOT_NANNY"
    NOT_FAMILY = "NOT_FAMILY"
    ROLE_MISMATCH = "ROLE_MISMATCH"
    CONVERSATION_LIMIT_REACHED = "CONVERSATION_LIMIT_REACHED"
    WAITING_FAMILY_RESPONSE = "WAITING_FAMILY_RESPONSE"
    JOB_EXPIRED = "JOB_EXPIRED"
    JOB_LIMIT_REACHED = "JOB_LIMIT_REACHED"
    BOOST_NOT_INCLUDED = "BOOST_NOT_INCLUDED"
    BOOST_ALREADY_USED = "BOOST_ALREADY_USED"
    PROFILE_VIEW_LIMIT_REACHED = "PROFILE_VIEW_LIMIT_REACHED"


def parse_plan(value: str | SubscriptionPlan) -> SubscriptionPlan:
    """Convert a stored plan identifier to SubscriptionPlan, failing fast on unknown values."""
    if isinstance(value, SubscriptionPlan):
        return value
    try:
        return SubscriptionPlan(value.strip().upper())
    except ValueError:
        valid = ", ".join(p.value for p in SubscriptionPlan)
        msg = f"Unknown subscription plan '{value}'. Expected one of: {valid}"
        raise UnknownPlanError(msg) from None


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


class NannyLookup(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["nanny"] = "nanny"
    id: int = Field(gt=0)


class FamilyLookup(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["family"] = "family"
    id: int = Field(gt=0)


SubscriptionLookup = Annotated[NannyLookup | FamilyLookup, Field(discriminator="kind")]


def lookup_from_ids(
    nanny_id: int | None = None,
    family_id: int | None = None,
) -> NannyLookup | FamilyLookup:
    """Build a lookup from the two-optional-ids form used by request payloads.

    Raises:
        InvalidLookupError: If neither or both ids are given.
    """
    if nanny_id and family_id:
        msg = "lookup must identify either a nanny or a family, not both"
        raise InvalidLookupError(msg)
    if nanny_id:
        return NannyLookup(id=nanny_id)
    if family_id:
        return FamilyLookup(id=family_id)
    msg = "lookup requires a nanny_id or a family_id"
    raise InvalidLookupError(msg)


# ---------------------------------------------------------------------------
# Snapshots (inputs)
# ---------------------------------------------------------------------------


class SubscriptionSnapshot(BaseModel):
    """Current subscription row for one nanny or family."""

    model_config = ConfigDict(frozen=True)

    lookup: SubscriptionLookup
    plan: SubscriptionPlan
    status: SubscriptionStatus = SubscriptionStatus.ACTIVE
    current_period_start: datetime
    current_period_end: datetime

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES


class JobSnapshot(BaseModel):
    """Job fields needed for expiry and conversation gating."""

    model_config = ConfigDict(frozen=True)

    id: int
    family_id: int
    created_at: datetime
    family_plan: SubscriptionPlan | None = None


class ConversationThread(BaseModel):
    """Message counters for one conversation, from the nanny's point of view."""

    model_config = ConfigDict(frozen=True)

    nanny_message_count: int = Field(default=0, ge=0)
    family_response_count: int = Field(default=0, ge=0)
    family_started: bool = False


class BoostUsage(BaseModel):
    """Boost usage: cycle count for families, last boost time for nannies."""

    model_config = ConfigDict(frozen=True)

    boosts_in_cycle: int = Field(default=0, ge=0)
    last_boost_at: datetime | None = None


# ---------------------------------------------------------------------------
# Decisions (outputs)
# ---------------------------------------------------------------------------


class _Decision(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class ConversationDecision(_Decision):
    can_start: bool
    conversations_used: int
    conversation_limit: int
    code: DenialCode | None = None
    reason: str | None = None


class MessageDecision(_Decision):
    can_send: bool
    code: DenialCode | None = None
    reason: str | None = None


class BoostDecision(_Decision):
    can_use: bool
    code: DenialCode | None = None
    reason: str | None = None
    next_available: datetime | None = None


class JobExpiration(_Decision):
    is_expired: bool
    days_remaining: int | None = None
    expires_at: datetime | None = None
    reason: str | None = None


class JobCreationDecision(_Decision):
    can_create: bool
    jobs_used: int
    job_limit: int
    code: DenialCode | None = None
    reason: str | None = None


class ProfileViewDecision(_Decision):
    can_view: bool
    views_used: int
    view_limit: int
    already_viewed: bool = False
    code: DenialCode | None = None
    reason: str | None = None


class ProfileViewUsage(_Decision):
    views_used: int
    view_limit: int
    remaining_views: int
    is_unlimited: bool
