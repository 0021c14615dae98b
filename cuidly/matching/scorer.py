"""Weighted match scoring (phase 2).

Each dimension yields a 0-100 sub-score, clamped before weighting. A
dimension whose inputs are missing scores NEUTRAL_SCORE. The final score is
the weighted sum rounded half-up to an integer; weights come from
MatchingConfig and sum to 1.0.

Ineligible candidates are scored too, so listings can still show and order
them after the eligible ones.
"""

import math
from datetime import date, datetime

from cuidly.core.config import MatchingConfig
from cuidly.matching import options
from cuidly.matching.eliminations import MatchContext, default_rules, run_elimination_chain
from cuidly.matching.schemas import (
    ChildData,
    FamilyData,
    JobData,
    MatchResult,
    NannyProfile,
    ScoreComponent,
)

NEUTRAL_SCORE = 50.0

AGE_RANGE_ALL = 100.0
AGE_RANGE_YOUNGEST = 72.0
AGE_RANGE_PARTIAL = 32.0

CHILDREN_AT_CAP = 60.0

REGIME_COMPATIBLE = 50.0

BUDGET_OVERLAP = 80.0
BUDGET_NEAR = 40.0
BUDGET_NEAR_GAP = 10.0

SEAL_VERIFIED = 50.0

# Distance ratio (distance / radius) at or below which the score is full.
DISTANCE_FULL_RATIO = 0.5

RECENCY_FULL_DAYS = 1.0

# A sub-score function returns (score, details) before clamping.
Scored = tuple[float, str]


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def score_age_range(ctx: MatchContext) -> Scored:
    ranges = ctx.age_ranges
    experience = ctx.nanny.age_ranges_experience
    if not ranges:
        return NEUTRAL_SCORE, "Sem crianças com idade conhecida"
    if not experience:
        return NEUTRAL_SCORE, "Babá não informou faixas etárias"

    matched = [r for r in ranges if r in experience]
    if len(matched) == len(ranges):
        return AGE_RANGE_ALL, "Todas as faixas etárias compatíveis"
    if ranges[0] in experience:
        return AGE_RANGE_YOUNGEST, (
            f"Criança mais nova compatível ({len(matched)}/{len(ranges)} faixas)"
        )
    if matched:
        return AGE_RANGE_PARTIAL, f"Compatibilidade parcial ({len(matched)}/{len(ranges)} faixas)"
    return 0.0, "Nenhuma faixa etária compatível"


def score_nanny_type(ctx: MatchContext) -> Scored:
    wanted = ctx.family.nanny_type
    if not wanted:
        return NEUTRAL_SCORE, "Família não especificou tipo de babá"
    if not ctx.nanny.nanny_types:
        return NEUTRAL_SCORE, "Babá não informou tipos de atuação"
    if wanted in ctx.nanny.nanny_types:
        return 100.0, f"Babá atua como {wanted}"
    return 0.0, f"Babá não atua como {wanted}"


def score_contract_regime(ctx: MatchContext) -> Scored:
    wanted = ctx.family.contract_regime
    offered = set(ctx.nanny.contract_regimes)
    if not wanted:
        return NEUTRAL_SCORE, "Família não especificou regime"
    if not offered:
        return NEUTRAL_SCORE, "Babá não informou regimes"
    if wanted in offered:
        return 100.0, f"Regime exato: {wanted}"
    if offered & options.COMPATIBLE_CONTRACT_REGIMES.get(wanted, frozenset()):
        return REGIME_COMPATIBLE, "Regime compatível com ressalva"
    return 0.0, f"Babá não aceita {wanted}"


def score_activities(ctx: MatchContext) -> Scored:
    expected = list(dict.fromkeys(ctx.family.domestic_help_expected))
    if not expected:
        return NEUTRAL_SCORE, "Família não especificou atividades"
    if not ctx.nanny.accepted_activities:
        return NEUTRAL_SCORE, "Babá não informou atividades"
    matched = [a for a in expected if a in ctx.nanny.accepted_activities]
    return 100.0 * len(matched) / len(expected), f"{len(matched)}/{len(expected)} atividades em comum"


def score_availability(ctx: MatchContext) -> Scored:
    family_slots = set(ctx.family.availability_slots or [])
    nanny_slots = set(ctx.nanny.availability_slots or [])
    if not family_slots:
        return NEUTRAL_SCORE, "Família não informou disponibilidade"
    if not nanny_slots:
        return NEUTRAL_SCORE, "Babá não informou disponibilidade"
    shared = family_slots & nanny_slots
    ratio = len(shared) / len(family_slots)
    return 100.0 * ratio, f"Sobreposição de {round_half_up(ratio * 100)}% dos horários"


def score_children_count(ctx: MatchContext) -> Scored:
    cap = ctx.nanny.max_children_care
    count = ctx.number_of_children
    if cap is None:
        return NEUTRAL_SCORE, "Babá não informou limite de crianças"
    if count < cap:
        return 100.0, f"{count} crianças, limite {cap}"
    if count == cap:
        return CHILDREN_AT_CAP, f"No limite ({count} crianças)"
    return 0.0, f"Excede limite da babá ({count} > {cap})"


def score_experience(ctx: MatchContext) -> Scored:
    years = ctx.nanny.experience_years
    if years is None:
        return NEUTRAL_SCORE, "Babá não informou anos de experiência"
    youngest = ctx.age_ranges[0] if ctx.age_ranges else None
    if youngest in options.INFANT_AGE_RANGES:
        target = options.INFANT_EXPERIENCE_TARGET_YEARS
    else:
        target = options.DEFAULT_EXPERIENCE_TARGET_YEARS
    return 100.0 * years / target, f"{years} anos de experiência (referência {target})"


def score_budget(ctx: MatchContext) -> Scored:
    family_range = options.rate_range(ctx.family.hourly_rate_range)
    nanny_range = options.rate_range(ctx.nanny.hourly_rate_range)
    if family_range is None or nanny_range is None:
        return NEUTRAL_SCORE, "Faixa de valor não informada"
    if nanny_range.min <= family_range.min:
        return 100.0, "Valor da babá dentro do orçamento"
    if nanny_range.min <= family_range.max:
        return BUDGET_OVERLAP, "Faixas de valor se sobrepõem"
    gap = nanny_range.min - family_range.max
    if gap <= BUDGET_NEAR_GAP:
        return BUDGET_NEAR, f"Diferença de R$ {gap:g}/h"
    return 0.0, f"Diferença de R$ {gap:g}/h acima do orçamento"


def score_seal(ctx: MatchContext) -> Scored:
    nanny = ctx.nanny
    flags = (
        nanny.document_validated,
        nanny.personal_data_validated,
        nanny.criminal_background_validated,
    )
    if all(flag is None for flag in flags):
        return NEUTRAL_SCORE, "Verificações não informadas"

    expiry = nanny.document_expiration_date
    document = nanny.document_validated is True and (expiry is None or expiry >= ctx.today)
    personal = nanny.personal_data_validated is True
    background = nanny.criminal_background_validated is True
    if document and personal and background:
        return 100.0, "Selo Confiável (documento, dados pessoais e antecedentes)"
    if document and personal:
        return SEAL_VERIFIED, "Selo Verificada (documento e dados pessoais)"
    return 0.0, "Selo Identificada"


def score_reviews(ctx: MatchContext, confidence_count: float) -> Scored:
    """Average rating shrunk towards neutral when there are few reviews.

    ``50 + (quality - 50) * (1 - e^(-count / confidence_count))`` where
    quality maps a 1-5 rating onto 0-100.
    """
    average = ctx.nanny.average_rating
    count = ctx.nanny.review_count
    if average is None or not count:
        return NEUTRAL_SCORE, "Sem avaliações"
    quality = clamp((average - 1.0) / 4.0 * 100.0)
    confidence = 1.0 - math.exp(-count / confidence_count)
    score = NEUTRAL_SCORE + (quality - NEUTRAL_SCORE) * confidence
    return score, f"Média {average:.1f} em {count} avaliações"


def score_distance(ctx: MatchContext, tolerance: float) -> Scored:
    radius = options.max_travel_distance_km(ctx.nanny.max_travel_distance)
    if ctx.distance_km is None or radius is None:
        return NEUTRAL_SCORE, "Distância desconhecida"
    ratio = ctx.distance_km / radius
    details = f"{ctx.distance_km:.1f} km (raio {radius:g} km)"
    if ratio <= DISTANCE_FULL_RATIO:
        return 100.0, details
    if ratio >= tolerance:
        return 0.0, details
    return 100.0 * (tolerance - ratio) / (tolerance - DISTANCE_FULL_RATIO), details


def score_recency(ctx: MatchContext, now: datetime, window_days: int) -> Scored:
    last = ctx.nanny.last_active_at
    if last is None:
        return NEUTRAL_SCORE, "Última atividade desconhecida"
    days = (now - last).total_seconds() / 86400
    details = f"Ativa há {max(0, int(days))} dias"
    if days <= RECENCY_FULL_DAYS:
        return 100.0, details
    if days >= window_days:
        return 0.0, details
    return 100.0 * (window_days - days) / (window_days - RECENCY_FULL_DAYS), details


def _select_children(job: JobData, children: list[ChildData]) -> list[ChildData]:
    """Restrict to the job's children when the job names any."""
    if not job.children_ids:
        return children
    wanted = set(job.children_ids)
    return [c for c in children if c.id in wanted]


def calculate_match_score(
    job: JobData,
    family: FamilyData,
    children: list[ChildData],
    nanny: NannyProfile,
    *,
    config: MatchingConfig | None = None,
    now: datetime | None = None,
) -> MatchResult:
    """Score one nanny against a job, its family and children.

    Args:
        job: Job posting with mandatory requirements and child ids.
        family: The family that owns the job.
        children: The family's children; filtered by ``job.children_ids``.
        nanny: Candidate profile.
        config: Weights and tunables; defaults to MatchingConfig().
        now: Reference time for ages and recency; defaults to the current time
            in the timezone of ``nanny.last_active_at``.

    Returns:
        MatchResult with eligibility, ordered elimination reasons and a
        per-dimension breakdown whose weighted sum rounds to ``score``.
    """
    config = config or MatchingConfig()
    if now is None:
        now = datetime.now(nanny.last_active_at.tzinfo if nanny.last_active_at else None)
    today: date = now.date()

    ctx = MatchContext(
        job=job,
        family=family,
        children=_select_children(job, children),
        nanny=nanny,
        today=today,
    )
    reasons = run_elimination_chain(ctx, default_rules(config.distance_tolerance))

    weights = config.weights
    raw: dict[str, tuple[Scored, float]] = {
        "age_range": (score_age_range(ctx), weights.age_range),
        "nanny_type": (score_nanny_type(ctx), weights.nanny_type),
        "contract_regime": (score_contract_regime(ctx), weights.contract_regime),
        "activities": (score_activities(ctx), weights.activities),
        "availability": (score_availability(ctx), weights.availability),
        "children_count": (score_children_count(ctx), weights.children_count),
        "experience": (score_experience(ctx), weights.experience),
        "budget": (score_budget(ctx), weights.budget),
        "seal": (score_seal(ctx), weights.seal),
        "reviews": (score_reviews(ctx, config.review_confidence_count), weights.reviews),
        "distance": (score_distance(ctx, config.distance_tolerance), weights.distance),
        "recency": (score_recency(ctx, now, config.recency_window_days), weights.recency),
    }
    breakdown = {
        name: ScoreComponent(score=clamp(score), weight=weight, details=details)
        for name, ((score, details), weight) in raw.items()
    }
    total = sum(component.weighted for component in breakdown.values())

    return MatchResult(
        score=int(clamp(round_half_up(total))),
        is_eligible=not reasons,
        elimination_reasons=reasons,
        breakdown=breakdown,
    )
