"""Tests for row conversion and availability slot parsing."""

from datetime import date, datetime

from cuidly.matching.converters import (
    build_availability_slots,
    parse_availability_slots,
    to_child_data,
    to_family_data,
    to_job_data,
    to_nanny_profile,
)
from cuidly.matching.schemas import Coordinates


class TestBuildAvailabilitySlots:
    def test_cross_product(self) -> None:
        slots = build_availability_slots(["MONDAY", "FRIDAY"], ["MORNING", "NIGHT"])
        assert slots == ["MONDAY_MORNING", "MONDAY_NIGHT", "FRIDAY_MORNING", "FRIDAY_NIGHT"]

    def test_missing_days(self) -> None:
        assert build_availability_slots([], ["MORNING"]) is None
        assert build_availability_slots(None, ["MORNING"]) is None

    def test_missing_shifts(self) -> None:
        assert build_availability_slots(["MONDAY"], None) is None


class TestParseAvailabilitySlots:
    def test_business_hours(self) -> None:
        slots = parse_availability_slots(
            {"monday": {"enabled": True, "startTime": "07:00", "endTime": "17:00"}}
        )
        assert slots == ["MONDAY_MORNING", "MONDAY_AFTERNOON"]

    def test_defaults_when_times_missing(self) -> None:
        slots = parse_availability_slots({"tuesday": {"enabled": True}})
        assert slots == ["TUESDAY_MORNING", "TUESDAY_AFTERNOON"]

    def test_evening(self) -> None:
        slots = parse_availability_slots(
            {"friday": {"enabled": True, "startTime": "17:00", "endTime": "22:00"}}
        )
        assert slots == ["FRIDAY_AFTERNOON", "FRIDAY_NIGHT"]

    def test_overnight(self) -> None:
        slots = parse_availability_slots(
            {"saturday": {"enabled": True, "startTime": "23:00", "endTime": "06:00"}}
        )
        assert slots == ["SATURDAY_OVERNIGHT"]

    def test_disabled_days_skipped(self) -> None:
        slots = parse_availability_slots(
            {
                "monday": {"enabled": False, "startTime": "07:00", "endTime": "17:00"},
                "sunday": {"enabled": True, "startTime": "13:00", "endTime": "17:00"},
            }
        )
        assert slots == ["SUNDAY_AFTERNOON"]

    def test_week_order(self) -> None:
        slots = parse_availability_slots(
            {
                "sunday": {"enabled": True, "startTime": "08:00", "endTime": "11:00"},
                "monday": {"enabled": True, "startTime": "08:00", "endTime": "11:00"},
            }
        )
        assert slots == ["MONDAY_MORNING", "SUNDAY_MORNING"]

    def test_numeric_hours(self) -> None:
        slots = parse_availability_slots({"monday": {"enabled": True, "startTime": 8, "endTime": 12}})
        assert slots == ["MONDAY_MORNING"]

    def test_unreadable_hours_skip_the_day(self) -> None:
        slots = parse_availability_slots(
            {
                "monday": {"enabled": True, "startTime": "morning", "endTime": "17:00"},
                "tuesday": {"enabled": True, "startTime": "13:00", "endTime": [17]},
                "wednesday": {"enabled": True},
            }
        )
        assert slots == ["WEDNESDAY_MORNING", "WEDNESDAY_AFTERNOON"]

    def test_only_unreadable_days(self) -> None:
        assert parse_availability_slots({"monday": {"enabled": True, "startTime": "8h"}}) is None

    def test_nothing_enabled(self) -> None:
        assert parse_availability_slots({"monday": {"enabled": False}}) is None

    def test_not_a_mapping(self) -> None:
        assert parse_availability_slots(None) is None
        assert parse_availability_slots("monday") is None


class TestRowConversion:
    def test_job(self) -> None:
        job = to_job_data({"id": 4, "mandatoryRequirements": ["NON_SMOKER"], "childrenIds": [1, 2]})
        assert job.mandatory_requirements == ["NON_SMOKER"]
        assert job.children_ids == [1, 2]

    def test_job_missing_lists(self) -> None:
        job = to_job_data({"id": 4, "mandatoryRequirements": None})
        assert job.mandatory_requirements == []
        assert job.children_ids == []

    def test_family(self) -> None:
        family = to_family_data(
            {
                "id": 7,
                "hasPets": True,
                "numberOfChildren": 2,
                "nannyType": "MENSALISTA",
                "neededDays": ["MONDAY"],
                "neededShifts": ["MORNING"],
                "address": {"latitude": -23.5, "longitude": -46.6},
            }
        )
        assert family.has_pets is True
        assert family.number_of_children == 2
        assert family.availability_slots == ["MONDAY_MORNING"]
        assert family.address == Coordinates(latitude=-23.5, longitude=-46.6)

    def test_family_partial_address(self) -> None:
        family = to_family_data({"id": 7, "address": {"latitude": -23.5, "longitude": None}})
        assert family.address is None

    def test_child_dates_from_strings(self) -> None:
        child = to_child_data(
            {"id": 1, "birthDate": "2024-03-10T00:00:00.000Z", "hasSpecialNeeds": True}
        )
        assert child.birth_date == date(2024, 3, 10)
        assert child.has_special_needs is True
        assert child.special_needs_types == []

    def test_unborn_child(self) -> None:
        child = to_child_data({"id": 2, "unborn": True, "expectedBirthDate": date(2027, 1, 5)})
        assert child.unborn is True
        assert child.birth_date is None
        assert child.expected_birth_date == date(2027, 1, 5)

    def test_nanny_with_review_stats(self) -> None:
        nanny = to_nanny_profile(
            {
                "id": 3,
                "name": None,
                "isSmoker": False,
                "nannyTypes": None,
                "lastActiveAt": "2026-10-18T09:30:00",
                "availabilityJson": {"monday": {"enabled": True}},
            },
            {"averageRating": 4.5, "reviewCount": 8},
        )
        assert nanny.name == ""
        assert nanny.is_smoker is False
        assert nanny.nanny_types == []
        assert nanny.last_active_at == datetime(2026, 10, 18, 9, 30)
        assert nanny.availability_slots == ["MONDAY_MORNING", "MONDAY_AFTERNOON"]
        assert nanny.average_rating == 4.5
        assert nanny.review_count == 8

    def test_nanny_without_review_stats(self) -> None:
        nanny = to_nanny_profile({"id": 3})
        assert nanny.average_rating is None
        assert nanny.review_count is None
        assert nanny.has_active_boost is False
