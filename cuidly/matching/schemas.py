"""Matching input shapes and the MatchResult output.

Inputs are built fresh per request from stored rows (see converters.py) and
never mutated. Option values (age ranges, rate brackets, nanny types) are the
uppercase identifiers stored by the application, e.g. ``"TODDLER"``,
``"FROM_26_TO_35"``, ``"MENSALISTA"``.
"""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Coordinates(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)


class JobData(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    mandatory_requirements: list[str] = Field(default_factory=list)
    children_ids: list[int] = Field(default_factory=list)


class FamilyData(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    has_pets: bool = False
    number_of_children: int | None = Field(default=None, ge=0)
    nanny_type: str | None = None
    contract_regime: str | None = None
    hourly_rate_range: str | None = None
    domestic_help_expected: list[str] = Field(default_factory=list)
    availability_slots: list[str] | None = None
    address: Coordinates | None = None


class ChildData(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    birth_date: date | None = None
    expected_birth_date: date | None = None
    unborn: bool = False
    has_special_needs: bool = False
    special_needs_types: list[str] = Field(default_factory=list)
    special_needs_description: str | None = None


class NannyProfile(BaseModel):
    """Everything about a candidate nanny that matching and ranking look at."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str = ""
    gender: str | None = None
    birth_date: date | None = None
    is_smoker: bool | None = None
    has_cnh: bool | None = None
    experience_years: int | None = Field(default=None, ge=0)
    has_special_needs_experience: bool | None = None
    special_needs_specialties: list[str] = Field(default_factory=list)
    special_needs_experience_description: str | None = None
    certifications: list[str] = Field(default_factory=list)
    age_ranges_experience: list[str] = Field(default_factory=list)
    max_travel_distance: str | None = None
    max_children_care: int | None = Field(default=None, ge=0)
    comfortable_with_pets: str | None = None
    accepted_activities: list[str] = Field(default_factory=list)
    nanny_types: list[str] = Field(default_factory=list)
    contract_regimes: list[str] = Field(default_factory=list)
    hourly_rate_range: str | None = None
    document_validated: bool | None = None
    document_expiration_date: date | None = None
    personal_data_validated: bool | None = None
    criminal_background_validated: bool | None = None
    average_rating: float | None = Field(default=None, ge=0.0, le=5.0)
    review_count: int | None = Field(default=None, ge=0)
    last_active_at: datetime | None = None
    address: Coordinates | None = None
    availability_slots: list[str] | None = None
    # Listing tie-break signals, filled by the caller from boosts and plan.
    has_active_boost: bool = False
    profile_highlight: bool = False


class ScoreComponent(BaseModel):
    """One scored dimension: a 0-100 sub-score and the weight it carries."""

    model_config = ConfigDict(frozen=True)

    score: float = Field(ge=0.0, le=100.0)
    weight: float = Field(ge=0.0, le=1.0)
    details: str = ""

    @property
    def weighted(self) -> float:
        return self.score * self.weight


class MatchResult(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    score: int = Field(ge=0, le=100)
    is_eligible: bool
    elimination_reasons: list[str] = Field(default_factory=list)
    breakdown: dict[str, ScoreComponent] = Field(default_factory=dict)

    def weighted_total(self) -> float:
        """Unrounded sum of the weighted breakdown; ``score`` is this, rounded."""
        return sum(c.weighted for c in self.breakdown.values())
