"""Nanny/family match scoring: elimination rules, weighted scores and listing order.

Usage:
    from cuidly.matching import calculate_match_score, rank_matches

    result = calculate_match_score(job, family, children, nanny)
    result.model_dump(mode="json", by_alias=True)  # {"score": 81, "isEligible": true, ...}
"""

from cuidly.matching.converters import (
    build_availability_slots,
    parse_availability_slots,
    to_child_data,
    to_family_data,
    to_job_data,
    to_nanny_profile,
)
from cuidly.matching.distance import distance_between, haversine_km
from cuidly.matching.ranking import RankedMatch, find_best_matches, listing_sort_key, rank_matches
from cuidly.matching.schemas import (
    ChildData,
    Coordinates,
    FamilyData,
    JobData,
    MatchResult,
    NannyProfile,
    ScoreComponent,
)
from cuidly.matching.scorer import calculate_match_score

__all__ = [
    "ChildData",
    "Coordinates",
    "FamilyData",
    "JobData",
    "MatchResult",
    "NannyProfile",
    "RankedMatch",
    "ScoreComponent",
    "build_availability_slots",
    "calculate_match_score",
    "distance_between",
    "find_best_matches",
    "haversine_km",
    "listing_sort_key",
    "parse_availability_slots",
    "rank_matches",
    "to_child_data",
    "to_family_data",
    "to_job_data",
    "to_nanny_profile",
]
