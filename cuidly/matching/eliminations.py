"""Elimination rule chain for nanny matching (phase 1).

Rule order:
  1. age_range_rule          - youngest child's range must be in the nanny's experience
  2. children_count_rule     - family's children within the nanny's cap
  3. special_needs_rule      - mandated or specialized needs need a covering specialty
  4. non_smoker_rule         - job mandates NON_SMOKER
  5. driver_license_rule     - job mandates DRIVER_LICENSE
  6. certifications_rule     - any other mandated tag must be a certification
  7. DistanceRule            - haversine distance within radius * tolerance
  8. pets_rule               - family has pets, nanny is not comfortable with them
  9. nanny_type_rule         - family's nanny type among the nanny's types
 10. contract_regime_rule    - exact or compatible regime
 11. budget_rule             - hourly brackets overlap
 12. availability_rule       - at least one shared slot

Every rule runs; reasons are collected in chain order. A rule whose inputs
are missing passes. Only a requirement the job explicitly mandates demands
that the nanny affirmatively meet it.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date

from cuidly.matching import options
from cuidly.matching.distance import distance_between
from cuidly.matching.schemas import ChildData, FamilyData, JobData, NannyProfile

logger = logging.getLogger(__name__)


def age_in_years(birth_date: date | None, today: date) -> float | None:
    """Whole years, or fractional months/12 during the first year."""
    if birth_date is None:
        return None
    age = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        age -= 1
    if age <= 0:
        months = (today.year - birth_date.year) * 12 + today.month - birth_date.month
        return max(0, months) / 12
    return float(age)


def children_age_ranges(children: list[ChildData], today: date) -> list[str]:
    """Age ranges of the children, youngest first.

    Unborn children count as NEWBORN. Children with no birth date are skipped.
    """
    aged: list[tuple[float, str]] = []
    for child in children:
        if child.unborn:
            continue
        age = age_in_years(child.birth_date, today)
        age_range = options.age_range_for(age)
        if age is not None and age_range is not None:
            aged.append((age, age_range))
    aged.sort(key=lambda pair: pair[0])

    unborn = sum(1 for c in children if c.unborn)
    return ["NEWBORN"] * unborn + [age_range for _, age_range in aged]


@dataclass(frozen=True)
class MatchContext:
    """Inputs for one job/nanny pair, shared by the rules and the scorer."""

    job: JobData
    family: FamilyData
    children: list[ChildData]
    nanny: NannyProfile
    today: date
    age_ranges: list[str] = field(init=False)
    distance_km: float | None = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "age_ranges", children_age_ranges(self.children, self.today))
        object.__setattr__(
            self, "distance_km", distance_between(self.nanny.address, self.family.address)
        )

    @property
    def number_of_children(self) -> int:
        if self.family.number_of_children is not None:
            return self.family.number_of_children
        return len(self.children)


# A rule takes the match context and returns a reason, or None when it passes.
Rule = Callable[[MatchContext], str | None]


def age_range_rule(ctx: MatchContext) -> str | None:
    if not ctx.age_ranges or not ctx.nanny.age_ranges_experience:
        return None
    youngest = ctx.age_ranges[0]
    if youngest in ctx.nanny.age_ranges_experience:
        return None
    return f"Babá não tem experiência com a faixa etária da criança mais nova ({youngest})"


def children_count_rule(ctx: MatchContext) -> str | None:
    cap = ctx.nanny.max_children_care
    count = ctx.number_of_children
    if cap is None or count <= cap:
        return None
    return f"Família tem {count} crianças, babá aceita até {cap}"


def special_needs_rule(ctx: MatchContext) -> str | None:
    with_needs = [c for c in ctx.children if c.has_special_needs]
    if not with_needs:
        return None

    required: list[str] = []
    for child in with_needs:
        for need in child.special_needs_types:
            if need not in required:
                required.append(need)

    mandated = options.REQUIREMENT_SPECIAL_NEEDS in ctx.job.mandatory_requirements
    specialized = any(need in options.SPECIALIZED_NEEDS for need in required)
    if not mandated and not specialized:
        return None

    if ctx.nanny.has_special_needs_experience is not True:
        return "Família requer experiência com necessidades especiais"

    specialties = set(ctx.nanny.special_needs_specialties)
    if options.SPECIAL_NEEDS_OTHER in specialties:
        return None
    unmatched = [
        need for need in required
        if need != options.SPECIAL_NEEDS_OTHER and need not in specialties
    ]
    if unmatched:
        return f"Babá não tem experiência com: {', '.join(unmatched)}"
    return None


def non_smoker_rule(ctx: MatchContext) -> str | None:
    if options.REQUIREMENT_NON_SMOKER not in ctx.job.mandatory_requirements:
        return None
    if ctx.nanny.is_smoker is False:
        return None
    return "Família requer babá não fumante"


def driver_license_rule(ctx: MatchContext) -> str | None:
    if options.REQUIREMENT_DRIVER_LICENSE not in ctx.job.mandatory_requirements:
        return None
    if ctx.nanny.has_cnh is True:
        return None
    return "Família requer babá com CNH"


_FLAG_REQUIREMENTS = frozenset(
    {
        options.REQUIREMENT_SPECIAL_NEEDS,
        options.REQUIREMENT_NON_SMOKER,
        options.REQUIREMENT_DRIVER_LICENSE,
    }
)


def certifications_rule(ctx: MatchContext) -> str | None:
    missing = [
        tag for tag in ctx.job.mandatory_requirements
        if tag not in _FLAG_REQUIREMENTS and tag not in ctx.nanny.certifications
    ]
    if not missing:
        return None
    return f"Babá não possui requisitos obrigatórios: {', '.join(missing)}"


class DistanceRule:
    """Eliminate when the distance exceeds the nanny's radius times ``tolerance``."""

    def __init__(self, tolerance: float = 1.2) -> None:
        self._tolerance = tolerance

    def __call__(self, ctx: MatchContext) -> str | None:
        radius = options.max_travel_distance_km(ctx.nanny.max_travel_distance)
        if ctx.distance_km is None or radius is None:
            return None
        if ctx.distance_km <= radius * self._tolerance:
            return None
        return (
            f"Distância ({ctx.distance_km:.1f} km) excede o raio máximo da babá ({radius:g} km)"
        )


def pets_rule(ctx: MatchContext) -> str | None:
    if ctx.family.has_pets and ctx.nanny.comfortable_with_pets == options.PETS_NOT_COMFORTABLE:
        return "Família tem animais e babá não se sente confortável"
    return None


def nanny_type_rule(ctx: MatchContext) -> str | None:
    wanted = ctx.family.nanny_type
    if not wanted or not ctx.nanny.nanny_types or wanted in ctx.nanny.nanny_types:
        return None
    return f"Babá não atua como {wanted}"


def contract_regime_rule(ctx: MatchContext) -> str | None:
    wanted = ctx.family.contract_regime
    offered = set(ctx.nanny.contract_regimes)
    if not wanted or not offered or wanted in offered:
        return None
    if offered & options.COMPATIBLE_CONTRACT_REGIMES.get(wanted, frozenset()):
        return None
    return f"Babá não aceita o regime {wanted}"


def budget_rule(ctx: MatchContext) -> str | None:
    family_range = options.rate_range(ctx.family.hourly_rate_range)
    nanny_range = options.rate_range(ctx.nanny.hourly_rate_range)
    if family_range is None or nanny_range is None:
        return None
    if family_range.max >= nanny_range.min and nanny_range.max >= family_range.min:
        return None
    return (
        f"Orçamento incompatível: família paga {ctx.family.hourly_rate_range}, "
        f"babá quer {ctx.nanny.hourly_rate_range}"
    )


def availability_rule(ctx: MatchContext) -> str | None:
    family_slots = ctx.family.availability_slots
    nanny_slots = ctx.nanny.availability_slots
    if not family_slots or not nanny_slots:
        return None
    if set(family_slots) & set(nanny_slots):
        return None
    return "Nenhuma disponibilidade em comum entre família e babá"


def default_rules(distance_tolerance: float = 1.2) -> list[Rule]:
    """The full elimination chain in evaluation order."""
    return [
        age_range_rule,
        children_count_rule,
        special_needs_rule,
        non_smoker_rule,
        driver_license_rule,
        certifications_rule,
        DistanceRule(distance_tolerance),
        pets_rule,
        nanny_type_rule,
        contract_regime_rule,
        budget_rule,
        availability_rule,
    ]


def run_elimination_chain(ctx: MatchContext, rules: list[Rule]) -> list[str]:
    """Apply every rule in order, returning the reasons of those that failed."""
    reasons: list[str] = []
    for rule in rules:
        reason = rule(ctx)
        if reason is not None:
            reasons.append(reason)
    if reasons:
        logger.debug("Nanny %d eliminated for job %d: %s", ctx.nanny.id, ctx.job.id, reasons)
    return reasons
