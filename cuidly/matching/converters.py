"""Convert stored rows into matching inputs.

Rows are camelCase mappings, the shape the application stores and serves
(``{"hasPets": true, "neededDays": [...]}``). Dates may arrive as ISO strings
or as date/datetime objects.
"""

import logging
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Any

from cuidly.matching.schemas import (
    ChildData,
    Coordinates,
    FamilyData,
    JobData,
    NannyProfile,
)

logger = logging.getLogger(__name__)

Row = Mapping[str, Any]

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

DEFAULT_START_TIME = "08:00"
DEFAULT_END_TIME = "18:00"


def _parse_datetime(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def _parse_date(value: Any) -> date | None:
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    parsed = _parse_datetime(value)
    return parsed.date() if parsed else None


def _coordinates(address: Row | None) -> Coordinates | None:
    """Coordinates from an address row; None unless both are present."""
    if not address:
        return None
    lat = address.get("latitude")
    lng = address.get("longitude")
    if lat is None or lng is None:
        return None
    return Coordinates(latitude=float(lat), longitude=float(lng))


def build_availability_slots(
    needed_days: Iterable[str] | None,
    needed_shifts: Iterable[str] | None,
) -> list[str] | None:
    """Cross product of days and shifts as ``DAY_SHIFT`` slots.

    Returns None when either side is empty, meaning "not declared".
    """
    days = list(needed_days or [])
    shifts = list(needed_shifts or [])
    if not days or not shifts:
        return None
    return [f"{day}_{shift}" for day in days for shift in shifts]


def _hour(value: Any) -> int | None:
    """Hour of an ``HH:MM`` time. Bare numbers are read as hours; anything else is None."""
    try:
        return int(str(value).split(":")[0].strip())
    except ValueError:
        return None


def parse_availability_slots(availability: Any) -> list[str] | None:
    """Map a nanny's weekly availability to ``DAY_SHIFT`` slots.

    Input looks like ``{"monday": {"enabled": true, "startTime": "08:00",
    "endTime": "18:00"}, ...}``. A day's window is tested against each shift:
    MORNING 6-12, AFTERNOON 12-18, NIGHT 18-23, and OVERNIGHT when the window
    ends at or before 6 or starts at or after 23.
    """
    if not isinstance(availability, Mapping):
        return None

    slots: list[str] = []
    for day in WEEKDAYS:
        day_data = availability.get(day)
        if not isinstance(day_data, Mapping) or not day_data.get("enabled"):
            continue

        start = _hour(day_data.get("startTime") or DEFAULT_START_TIME)
        end = _hour(day_data.get("endTime") or DEFAULT_END_TIME)
        if start is None or end is None:
            logger.debug("Skipping %s: unreadable hours %r", day, day_data)
            continue
        prefix = day.upper()

        if start < 12 and end > 6:
            slots.append(f"{prefix}_MORNING")
        if start < 18 and end > 12:
            slots.append(f"{prefix}_AFTERNOON")
        if start < 23 and end > 18:
            slots.append(f"{prefix}_NIGHT")
        if end <= 6 or start >= 23:
            slots.append(f"{prefix}_OVERNIGHT")

    return slots or None


def to_job_data(row: Row) -> JobData:
    return JobData(
        id=row["id"],
        mandatory_requirements=list(row.get("mandatoryRequirements") or []),
        children_ids=list(row.get("childrenIds") or []),
    )


def to_family_data(row: Row) -> FamilyData:
    return FamilyData(
        id=row["id"],
        has_pets=bool(row.get("hasPets")),
        number_of_children=row.get("numberOfChildren"),
        nanny_type=row.get("nannyType"),
        contract_regime=row.get("contractRegime"),
        hourly_rate_range=row.get("hourlyRateRange"),
        domestic_help_expected=list(row.get("domesticHelpExpected") or []),
        availability_slots=build_availability_slots(
            row.get("neededDays"), row.get("neededShifts")
        ),
        address=_coordinates(row.get("address")),
    )


def to_child_data(row: Row) -> ChildData:
    return ChildData(
        id=row["id"],
        birth_date=_parse_date(row.get("birthDate")),
        expected_birth_date=_parse_date(row.get("expectedBirthDate")),
        unborn=bool(row.get("unborn")),
        has_special_needs=bool(row.get("hasSpecialNeeds")),
        special_needs_types=list(row.get("specialNeedsTypes") or []),
        special_needs_description=row.get("specialNeedsDescription"),
    )


def to_nanny_profile(row: Row, review_stats: Row | None = None) -> NannyProfile:
    """Build a NannyProfile from a nanny row and optional review aggregates.

    ``review_stats`` carries ``averageRating`` and ``reviewCount``; without it
    the reviews dimension scores neutral.
    """
    stats = review_stats or {}
    return NannyProfile(
        id=row["id"],
        name=row.get("name") or "",
        gender=row.get("gender"),
        birth_date=_parse_date(row.get("birthDate")),
        is_smoker=row.get("isSmoker"),
        has_cnh=row.get("hasCnh"),
        experience_years=row.get("experienceYears"),
        has_special_needs_experience=row.get("hasSpecialNeedsExperience"),
        special_needs_specialties=list(row.get("specialNeedsSpecialties") or []),
        special_needs_experience_description=row.get("specialNeedsExperienceDescription"),
        certifications=list(row.get("certifications") or []),
        age_ranges_experience=list(row.get("ageRangesExperience") or []),
        max_travel_distance=row.get("maxTravelDistance"),
        max_children_care=row.get("maxChildrenCare"),
        comfortable_with_pets=row.get("comfortableWithPets"),
        accepted_activities=list(row.get("acceptedActivities") or []),
        nanny_types=list(row.get("nannyTypes") or []),
        contract_regimes=list(row.get("contractRegimes") or []),
        hourly_rate_range=row.get("hourlyRateRange"),
        document_validated=row.get("documentValidated"),
        document_expiration_date=_parse_date(row.get("documentExpirationDate")),
        personal_data_validated=row.get("personalDataValidated"),
        criminal_background_validated=row.get("criminalBackgroundValidated"),
        average_rating=stats.get("averageRating"),
        review_count=stats.get("reviewCount"),
        last_active_at=_parse_datetime(row.get("lastActiveAt")),
        address=_coordinates(row.get("address")),
        availability_slots=parse_availability_slots(row.get("availabilityJson")),
        has_active_boost=bool(row.get("hasActiveBoost")),
        profile_highlight=bool(row.get("profileHighlight")),
    )
