"""Pure entitlement gates over subscription snapshots and usage counters.

Nothing here touches storage: the caller fetches the subscription row and the
relevant counts, then asks a gate. Denials come back as decision models with
a stable ``code``; they are never raised.

Gate order for conversations (first failing rule wins):
  1. Job expiry   - owner's plan window, independent of the caller's plan
  2. Subscription - missing or inactive
  3. Per-job cap  - from the job owner's plan, -1 = unlimited
"""

from datetime import datetime, timedelta

from cuidly.core.schemas import (
    BoostDecision,
    BoostUsage,
    ConversationDecision,
    ConversationThread,
    DenialCode,
    FamilyLookup,
    JobCreationDecision,
    JobExpiration,
    JobSnapshot,
    MessageDecision,
    NannyLookup,
    ProfileViewDecision,
    ProfileViewUsage,
    SubscriptionPlan,
    SubscriptionSnapshot,
)
from cuidly.entitlements.features import (
    UNLIMITED,
    get_job_expiration_days,
    get_job_limit,
    get_max_conversations_per_job,
    get_plan_display_name,
    get_plan_features,
    get_plan_tier,
    get_profile_view_limit,
    has_unlimited_messaging,
    is_family_plan,
    is_nanny_plan,
)

NANNY_BOOST_INTERVAL = timedelta(days=7)

_INACTIVE_REASON = "Assinatura inativa"


def _resolve_now(now: datetime | None, reference: datetime) -> datetime:
    """Default ``now`` to the current time, matching the reference's timezone awareness."""
    if now is not None:
        return now
    return datetime.now(reference.tzinfo)


def _expired_job_reason(plan: SubscriptionPlan | None, expiration_days: int) -> str:
    reason = "Esta vaga expirou."
    if plan is None:
        return reason
    reason += f" Vagas do plano {get_plan_display_name(plan)} duram {expiration_days} dias."
    if get_plan_tier(plan) == "free":
        reason += " Assine o Plus para vagas com maior duração."
    return reason


def is_job_expired(job: JobSnapshot, now: datetime | None = None) -> JobExpiration:
    """Check a job against its owner's expiration window.

    A job exactly ``expiration_days`` old is still open; it expires once more
    than that many whole days have elapsed.
    """
    expiration_days = get_job_expiration_days(job.family_plan)
    if expiration_days == UNLIMITED:
        return JobExpiration(is_expired=False)

    now = _resolve_now(now, job.created_at)
    days_since_created = max(0, (now - job.created_at).days)
    expires_at = job.created_at + timedelta(days=expiration_days)

    if days_since_created > expiration_days:
        return JobExpiration(
            is_expired=True,
            days_remaining=0,
            expires_at=expires_at,
            reason=_expired_job_reason(job.family_plan, expiration_days),
        )

    return JobExpiration(
        is_expired=False,
        days_remaining=max(0, expiration_days - days_since_created),
        expires_at=expires_at,
    )


def can_start_conversation_for_job(
    subscription: SubscriptionSnapshot | None,
    job: JobSnapshot,
    conversations_used: int,
    *,
    has_existing_conversation: bool = False,
    now: datetime | None = None,
) -> ConversationDecision:
    """Decide whether a new conversation may be opened on a job.

    Args:
        subscription: The initiator's subscription, or None if it has none.
        job: The job the conversation belongs to.
        conversations_used: Conversations already open on this job.
        has_existing_conversation: The pair already talks; continuing is always allowed.
        now: Evaluation time (defaults to the current time).
    """
    limit = get_max_conversations_per_job(job.family_plan)

    expiration = is_job_expired(job, now)
    if expiration.is_expired:
        return ConversationDecision(
            can_start=False,
            conversations_used=conversations_used,
            conversation_limit=limit,
            code=DenialCode.JOB_EXPIRED,
            reason=expiration.reason,
        )

    if subscription is None or not subscription.is_active:
        return ConversationDecision(
            can_start=False,
            conversations_used=conversations_used,
            conversation_limit=0,
            code=DenialCode.NO_SUBSCRIPTION,
            reason=_INACTIVE_REASON,
        )

    if limit == UNLIMITED or has_existing_conversation:
        return ConversationDecision(
            can_start=True,
            conversations_used=conversations_used,
            conversation_limit=limit,
        )

    if conversations_used >= limit:
        return ConversationDecision(
            can_start=False,
            conversations_used=conversations_used,
            conversation_limit=limit,
            code=DenialCode.CONVERSATION_LIMIT_REACHED,
            reason=(
                f"Você atingiu o limite de {limit} conversa(s) para esta vaga. "
                "Assine o Plus para contato ilimitado."
            ),
        )

    return ConversationDecision(
        can_start=True,
        conversations_used=conversations_used,
        conversation_limit=limit,
    )


def can_nanny_send_message(
    subscription: SubscriptionSnapshot | None,
    thread: ConversationThread,
) -> MessageDecision:
    """Apply the free-tier "wait for the family" rule to a nanny's next message.

    Pro nannies always pass without counting. Free nannies may send their
    first message, may reply freely in family-started conversations, and
    otherwise need at least one family message after their latest one.
    """
    if subscription is None or not subscription.is_active:
        return MessageDecision(
            can_send=False, code=DenialCode.NO_SUBSCRIPTION, reason=_INACTIVE_REASON
        )

    if not isinstance(subscription.lookup, NannyLookup):
        return MessageDecision(
            can_send=False, code=DenialCode.NOT_NANNY, reason="Usuário não é uma babá"
        )

    if has_unlimited_messaging(subscription.plan):
        return MessageDecision(can_send=True)

    if not is_nanny_plan(subscription.plan):
        return MessageDecision(
            can_send=False,
            code=DenialCode.ROLE_MISMATCH,
            reason="Plano não corresponde a uma babá",
        )

    if thread.nanny_message_count == 0 or thread.family_started:
        return MessageDecision(can_send=True)

    if thread.family_response_count > 0:
        return MessageDecision(can_send=True)

    return MessageDecision(
        can_send=False,
        code=DenialCode.WAITING_FAMILY_RESPONSE,
        reason=(
            "Aguarde a família responder para enviar outra mensagem. "
            "Assine o Pro para mensagens ilimitadas."
        ),
    )


def can_use_boost(
    subscription: SubscriptionSnapshot | None,
    usage: BoostUsage,
    now: datetime | None = None,
) -> BoostDecision:
    """Check boost availability.

    Families get ``boost_per_cycle`` boosts per billing cycle; the caller
    counts boosts created in ``[current_period_start, current_period_end)``.
    Nannies get one boost per rolling 7-day window from their latest boost.
    """
    if subscription is None or not subscription.is_active:
        return BoostDecision(
            can_use=False, code=DenialCode.NO_SUBSCRIPTION, reason=_INACTIVE_REASON
        )

    features = get_plan_features(subscription.plan)
    lookup = subscription.lookup

    if isinstance(lookup, FamilyLookup):
        if not is_family_plan(subscription.plan):
            return BoostDecision(
                can_use=False,
                code=DenialCode.ROLE_MISMATCH,
                reason="Plano não corresponde a uma família",
            )
        if not features.boost_per_cycle:
            return BoostDecision(
                can_use=False,
                code=DenialCode.BOOST_NOT_INCLUDED,
                reason="Seu plano não inclui boosts",
            )
        if usage.boosts_in_cycle >= features.boost_per_cycle:
            return BoostDecision(
                can_use=False,
                code=DenialCode.BOOST_ALREADY_USED,
                reason="Você já usou seu boost neste ciclo de cobrança",
                next_available=subscription.current_period_end,
            )
        return BoostDecision(can_use=True)

    if not is_nanny_plan(subscription.plan):
        return BoostDecision(
            can_use=False,
            code=DenialCode.ROLE_MISMATCH,
            reason="Plano não corresponde a uma babá",
        )
    if not features.weekly_boost:
        return BoostDecision(
            can_use=False,
            code=DenialCode.BOOST_NOT_INCLUDED,
            reason="Seu plano não inclui boosts",
        )
    if usage.last_boost_at is not None:
        next_available = usage.last_boost_at + NANNY_BOOST_INTERVAL
        if _resolve_now(now, usage.last_boost_at) < next_available:
            return BoostDecision(
                can_use=False,
                code=DenialCode.BOOST_ALREADY_USED,
                reason="Você já usou seu boost esta semana",
                next_available=next_available,
            )
    return BoostDecision(can_use=True)


def can_create_job(
    subscription: SubscriptionSnapshot | None,
    active_jobs: int,
) -> JobCreationDecision:
    """Check the active-job cap for a family."""
    if subscription is None or not subscription.is_active:
        return JobCreationDecision(
            can_create=False,
            jobs_used=active_jobs,
            job_limit=0,
            code=DenialCode.NO_SUBSCRIPTION,
            reason=_INACTIVE_REASON,
        )

    if not isinstance(subscription.lookup, FamilyLookup) or not is_family_plan(
        subscription.plan
    ):
        return JobCreationDecision(
            can_create=False,
            jobs_used=active_jobs,
            job_limit=0,
            code=DenialCode.NOT_FAMILY,
            reason="Apenas famílias podem publicar vagas",
        )

    limit = get_job_limit(subscription.plan)
    if active_jobs >= limit:
        return JobCreationDecision(
            can_create=False,
            jobs_used=active_jobs,
            job_limit=limit,
            code=DenialCode.JOB_LIMIT_REACHED,
            reason=f"Você atingiu o limite de {limit} vaga(s) ativa(s) do seu plano.",
        )

    return JobCreationDecision(can_create=True, jobs_used=active_jobs, job_limit=limit)


def _profile_view_limit(subscription: SubscriptionSnapshot | None) -> int:
    if subscription is None or not subscription.is_active:
        return 0
    return get_profile_view_limit(subscription.plan)


def can_view_profile(
    subscription: SubscriptionSnapshot | None,
    views_used: int,
    *,
    already_viewed: bool = False,
) -> ProfileViewDecision:
    """Check the distinct-profile view cap.

    Re-opening a profile the owner has already viewed is always allowed and
    does not consume a view.
    """
    if subscription is None or not subscription.is_active:
        return ProfileViewDecision(
            can_view=False,
            views_used=views_used,
            view_limit=0,
            code=DenialCode.NO_SUBSCRIPTION,
            reason=_INACTIVE_REASON,
        )

    limit = get_profile_view_limit(subscription.plan)
    if limit == UNLIMITED:
        return ProfileViewDecision(can_view=True, views_used=views_used, view_limit=UNLIMITED)

    if already_viewed:
        return ProfileViewDecision(
            can_view=True, views_used=views_used, view_limit=limit, already_viewed=True
        )

    if views_used >= limit:
        return ProfileViewDecision(
            can_view=False,
            views_used=views_used,
            view_limit=limit,
            code=DenialCode.PROFILE_VIEW_LIMIT_REACHED,
            reason=(
                f"Você atingiu o limite de {limit} perfis. "
                "Assine o plano Plus para acesso ilimitado."
            ),
        )

    return ProfileViewDecision(can_view=True, views_used=views_used, view_limit=limit)


def profile_view_usage(
    subscription: SubscriptionSnapshot | None,
    views_used: int,
) -> ProfileViewUsage:
    limit = _profile_view_limit(subscription)
    if limit == UNLIMITED:
        return ProfileViewUsage(
            views_used=views_used, view_limit=UNLIMITED, remaining_views=UNLIMITED, is_unlimited=True
        )
    return ProfileViewUsage(
        views_used=views_used,
        view_limit=limit,
        remaining_views=max(0, limit - views_used),
        is_unlimited=False,
    )
