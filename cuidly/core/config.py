"""Configuration models and YAML loader for the Cuidly core."""

import math
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, model_validator

# Match scoring weights. Each sub-score is 0-100; the weights must sum to 1.0
# so the weighted total stays on the same 0-100 scale.
AGE_RANGE_WEIGHT = 0.15
NANNY_TYPE_WEIGHT = 0.08
CONTRACT_REGIME_WEIGHT = 0.05
ACTIVITIES_WEIGHT = 0.10
AVAILABILITY_WEIGHT = 0.12
CHILDREN_COUNT_WEIGHT = 0.05
EXPERIENCE_WEIGHT = 0.10
BUDGET_WEIGHT = 0.10
SEAL_WEIGHT = 0.07
REVIEWS_WEIGHT = 0.10
DISTANCE_WEIGHT = 0.05
RECENCY_WEIGHT = 0.03


class MatchingWeights(BaseModel):
    """Per-dimension weights for the match score."""

    age_range: float = Field(default=AGE_RANGE_WEIGHT, ge=0.0, le=1.0)
    nanny_type: float = Field(default=NANNY_TYPE_WEIGHT, ge=0.0, le=1.0)
    contract_regime: float = Field(default=CONTRACT_REGIME_WEIGHT, ge=0.0, le=1.0)
    activities: float = Field(default=ACTIVITIES_WEIGHT, ge=0.0, le=1.0)
    availability: float = Field(default=AVAILABILITY_WEIGHT, ge=0.0, le=1.0)
    children_count: float = Field(default=CHILDREN_COUNT_WEIGHT, ge=0.0, le=1.0)
    experience: float = Field(default=EXPERIENCE_WEIGHT, ge=0.0, le=1.0)
    budget: float = Field(default=BUDGET_WEIGHT, ge=0.0, le=1.0)
    seal: float = Field(default=SEAL_WEIGHT, ge=0.0, le=1.0)
    reviews: float = Field(default=REVIEWS_WEIGHT, ge=0.0, le=1.0)
    distance: float = Field(default=DISTANCE_WEIGHT, ge=0.0, le=1.0)
    recency: float = Field(default=RECENCY_WEIGHT, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def weights_sum_to_one(self) -> "MatchingWeights":
        total = sum(self.model_dump().values())
        if not math.isclose(total, 1.0, abs_tol=1e-6):
            msg = f"matching weights must sum to 1.0, got {total:.4f}"
            raise ValueError(msg)
        return self


class MatchingConfig(BaseModel):
    """Tunables for elimination and scoring."""

    weights: MatchingWeights = Field(default_factory=MatchingWeights)
    distance_tolerance: float = Field(default=1.2, ge=1.0)
    recency_window_days: int = Field(default=30, ge=1)
    review_confidence_count: float = Field(default=5.0, gt=0.0)
    default_limit: int = Field(default=20, ge=1)


class DatabaseConfig(BaseModel):
    """Database configuration."""

    path: str = "data/cuidly.db"


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)
