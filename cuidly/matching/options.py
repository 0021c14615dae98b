"""Closed option sets used by matching: rate brackets, travel radius, age ranges."""

from typing import NamedTuple


class RateRange(NamedTuple):
    min: float
    max: float


# Hourly rate brackets (R$/h), shared by families and nannies. Legacy keys are
# still present in older rows.
HOURLY_RATE_RANGES: dict[str, RateRange] = {
    "UP_TO_25": RateRange(0, 25),
    "FROM_26_TO_35": RateRange(26, 35),
    "FROM_36_TO_45": RateRange(36, 45),
    "FROM_46_TO_60": RateRange(46, 60),
    "FROM_61_TO_80": RateRange(61, 80),
    "OVER_80": RateRange(81, 150),
    # legacy nanny values
    "UP_TO_20": RateRange(0, 20),
    "FROM_21_TO_30": RateRange(21, 30),
    "FROM_31_TO_40": RateRange(31, 40),
    "FROM_41_TO_50": RateRange(41, 50),
    "FROM_51_TO_70": RateRange(51, 70),
    "FROM_71_TO_100": RateRange(71, 100),
    "OVER_100": RateRange(101, 200),
    # legacy family values
    "20_TO_30": RateRange(20, 30),
    "30_TO_40": RateRange(30, 40),
    "40_TO_50": RateRange(40, 50),
    "ABOVE_50": RateRange(51, 150),
}

MAX_TRAVEL_DISTANCE_KM: dict[str, float] = {
    "UP_TO_5KM": 5.0,
    "UP_TO_10KM": 10.0,
    "UP_TO_15KM": 15.0,
    "UP_TO_20KM": 20.0,
    "UP_TO_30KM": 30.0,
    "ENTIRE_CITY": 50.0,
}

# Ordered youngest to oldest; upper bound of each range in years.
AGE_RANGES: list[tuple[str, float]] = [
    ("NEWBORN", 0.25),
    ("BABY", 1.0),
    ("TODDLER", 3.0),
    ("PRESCHOOL", 6.0),
    ("SCHOOL_AGE", 13.0),
]
OLDEST_AGE_RANGE = "TEENAGER"

# Years of experience that count as a full fit for the youngest child's range.
INFANT_AGE_RANGES = frozenset({"NEWBORN", "BABY"})
INFANT_EXPERIENCE_TARGET_YEARS = 3
DEFAULT_EXPERIENCE_TARGET_YEARS = 2

SPECIAL_NEEDS_OTHER = "OTHER"

# Needs that require a nanny with matching specialization even when the job
# does not mandate special-needs experience.
SPECIALIZED_NEEDS = frozenset(
    {
        "AUTISM",
        "DOWN_SYNDROME",
        "CEREBRAL_PALSY",
        "PHYSICAL_DISABILITY",
        "VISUAL_IMPAIRMENT",
        "HEARING_IMPAIRMENT",
    }
)

REQUIREMENT_SPECIAL_NEEDS = "SPECIAL_NEEDS_EXPERIENCE"
REQUIREMENT_NON_SMOKER = "NON_SMOKER"
REQUIREMENT_DRIVER_LICENSE = "DRIVER_LICENSE"

PETS_NOT_COMFORTABLE = "NO"

# Family regime -> nanny regimes accepted as a partial fit.
COMPATIBLE_CONTRACT_REGIMES: dict[str, frozenset[str]] = {
    "AUTONOMA": frozenset({"PJ"}),
    "PJ": frozenset({"AUTONOMA"}),
}


def rate_range(key: str | None) -> RateRange | None:
    if not key:
        return None
    return HOURLY_RATE_RANGES.get(key)


def max_travel_distance_km(key: str | None) -> float | None:
    """Declared travel radius in km, or None when undeclared or unknown."""
    if not key:
        return None
    return MAX_TRAVEL_DISTANCE_KM.get(key)


def age_range_for(age_years: float | None) -> str | None:
    if age_years is None:
        return None
    for name, upper in AGE_RANGES:
        if age_years < upper:
            return name
    return OLDEST_AGE_RANGE
