"""Tests for the shared listing order and rank_matches."""

from datetime import date, datetime, timedelta
from typing import Any

from cuidly.core.config import MatchingConfig
from cuidly.matching.ranking import find_best_matches, listing_sort_key, rank_matches
from cuidly.matching.schemas import ChildData, FamilyData, JobData, NannyProfile

NOW = datetime(2026, 10, 19, 12, 0)
JOB = JobData(id=42)
FAMILY = FamilyData(id=7, has_pets=True, nanny_type="MENSALISTA")
CHILDREN = [ChildData(id=1, birth_date=date(2024, 3, 10))]


def _nanny(nanny_id: int, **kw: Any) -> NannyProfile:
    defaults: dict[str, Any] = {
        "nanny_types": ["MENSALISTA"],
        "experience_years": 2,
        "last_active_at": NOW,
    }
    defaults.update(kw)
    return NannyProfile(id=nanny_id, **defaults)


class TestListingSortKey:
    def test_eligible_before_higher_scoring_ineligible(self) -> None:
        keys = [listing_sort_key(False, 99), listing_sort_key(True, 10)]
        assert sorted(keys)[0] == listing_sort_key(True, 10)

    def test_score_descending(self) -> None:
        assert listing_sort_key(True, 80) < listing_sort_key(True, 70)

    def test_boost_breaks_score_tie(self) -> None:
        assert listing_sort_key(True, 70, has_active_boost=True) < listing_sort_key(True, 70)

    def test_highlight_after_boost(self) -> None:
        boosted = listing_sort_key(True, 70, has_active_boost=True)
        highlighted = listing_sort_key(True, 70, is_highlighted=True)
        assert boosted < highlighted < listing_sort_key(True, 70)

    def test_recent_activity_last_tiebreak(self) -> None:
        recent = listing_sort_key(True, 70, last_active_at=NOW)
        older = listing_sort_key(True, 70, last_active_at=NOW - timedelta(days=3))
        unknown = listing_sort_key(True, 70)
        assert recent < older < unknown


class TestRankMatches:
    def test_ineligible_excluded_by_default(self) -> None:
        nannies = [_nanny(1), _nanny(2, comfortable_with_pets="NO")]
        ranked = rank_matches(JOB, FAMILY, CHILDREN, nannies, now=NOW)
        assert [m.nanny.id for m in ranked] == [1]

    def test_ineligible_sorted_last(self) -> None:
        strong_but_eliminated = _nanny(
            1,
            comfortable_with_pets="NO",
            experience_years=10,
            average_rating=5.0,
            review_count=50,
        )
        weak = _nanny(2, nanny_types=["FOLGUISTA", "MENSALISTA"], experience_years=0)
        ranked = rank_matches(
            JOB, FAMILY, CHILDREN, [strong_but_eliminated, weak],
            include_ineligible=True, now=NOW,
        )
        scores = {m.nanny.id: m.result.score for m in ranked}
        assert scores[1] > scores[2]
        assert [m.nanny.id for m in ranked] == [2, 1]
        assert ranked[-1].result.is_eligible is False

    def test_score_order(self) -> None:
        nannies = [_nanny(1, experience_years=0), _nanny(2, experience_years=3)]
        ranked = rank_matches(JOB, FAMILY, CHILDREN, nannies, now=NOW)
        assert [m.nanny.id for m in ranked] == [2, 1]

    def test_boost_then_highlight_on_tie(self) -> None:
        nannies = [
            _nanny(1),
            _nanny(2, profile_highlight=True),
            _nanny(3, has_active_boost=True),
        ]
        ranked = rank_matches(JOB, FAMILY, CHILDREN, nannies, now=NOW)
        assert len({m.result.score for m in ranked}) == 1
        assert [m.nanny.id for m in ranked] == [3, 2, 1]

    def test_min_score_and_limit(self) -> None:
        nannies = [_nanny(i, experience_years=i % 3) for i in range(1, 7)]
        ranked = rank_matches(JOB, FAMILY, CHILDREN, nannies, limit=2, now=NOW)
        assert len(ranked) == 2
        everything = rank_matches(JOB, FAMILY, CHILDREN, nannies, now=NOW)
        cutoff = everything[0].result.score
        top = rank_matches(JOB, FAMILY, CHILDREN, nannies, min_score=cutoff, now=NOW)
        assert all(m.result.score >= cutoff for m in top)
        assert len(top) < len(everything)

    def test_default_limit_from_config(self) -> None:
        nannies = [_nanny(i) for i in range(1, 6)]
        config = MatchingConfig(default_limit=3)
        assert len(rank_matches(JOB, FAMILY, CHILDREN, nannies, now=NOW, config=config)) == 3

    def test_find_best_matches_eligible_only(self) -> None:
        nannies = [_nanny(1, comfortable_with_pets="NO"), _nanny(2)]
        best = find_best_matches(JOB, FAMILY, CHILDREN, nannies)
        assert [m.nanny.id for m in best] == [2]

