"""Listing order shared by job search and nanny search.

Order (each key breaks ties of the previous one):
  1. eligible before ineligible
  2. higher score
  3. active boost
  4. highlighted profile
  5. most recent last_active_at (unknown sorts last)
"""

import logging
from datetime import datetime
from typing import NamedTuple

from cuidly.core.config import MatchingConfig
from cuidly.matching.scorer import calculate_match_score
from cuidly.matching.schemas import ChildData, FamilyData, JobData, MatchResult, NannyProfile

logger = logging.getLogger(__name__)


class RankedMatch(NamedTuple):
    nanny: NannyProfile
    result: MatchResult


def listing_sort_key(
    is_eligible: bool,
    score: int,
    has_active_boost: bool = False,
    is_highlighted: bool = False,
    last_active_at: datetime | None = None,
) -> tuple[int, int, int, int, int, float]:
    """Ascending sort key for listings; use with ``sorted(..., key=...)``."""
    if last_active_at is None:
        recency = (1, 0.0)
    else:
        recency = (0, -last_active_at.timestamp())
    return (
        0 if is_eligible else 1,
        -score,
        0 if has_active_boost else 1,
        0 if is_highlighted else 1,
        *recency,
    )


def _ranked_key(match: RankedMatch) -> tuple[int, int, int, int, int, float]:
    return listing_sort_key(
        match.result.is_eligible,
        match.result.score,
        match.nanny.has_active_boost,
        match.nanny.profile_highlight,
        match.nanny.last_active_at,
    )


def rank_matches(
    job: JobData,
    family: FamilyData,
    children: list[ChildData],
    nannies: list[NannyProfile],
    *,
    limit: int | None = None,
    min_score: int = 0,
    include_ineligible: bool = False,
    now: datetime | None = None,
    config: MatchingConfig | None = None,
) -> list[RankedMatch]:
    """Score every nanny and return them in listing order.

    Args:
        limit: Maximum results; defaults to ``config.default_limit``.
        min_score: Drop results scoring below this.
        include_ineligible: Keep eliminated nannies (they sort after all
            eligible ones).
    """
    config = config or MatchingConfig()
    limit = config.default_limit if limit is None else limit

    matches: list[RankedMatch] = []
    for nanny in nannies:
        result = calculate_match_score(job, family, children, nanny, config=config, now=now)
        if not result.is_eligible and not include_ineligible:
            continue
        if result.score < min_score:
            continue
        matches.append(RankedMatch(nanny=nanny, result=result))

    matches.sort(key=_ranked_key)
    logger.debug(
        "Ranked %d/%d nannies for job %d (limit %d)", len(matches), len(nannies), job.id, limit
    )
    return matches[:limit]


def find_best_matches(
    job: JobData,
    family: FamilyData,
    children: list[ChildData],
    nannies: list[NannyProfile],
    limit: int | None = None,
    min_score: int = 0,
    config: MatchingConfig | None = None,
) -> list[RankedMatch]:
    """Eligible nannies only, best first."""
    return rank_matches(
        job, family, children, nannies, limit=limit, min_score=min_score, config=config
    )
