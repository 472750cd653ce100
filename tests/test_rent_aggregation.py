"""
Tests for rent aggregation across whole-unit and per-room letting.
"""

import pytest
from datetime import date

from app.calculations.models import (
    AggregatedRentResult,
    Lease,
    Property,
    RentalMode,
    Room,
)
from app.calculations.rent import (
    get_aggregated_rent_for_month,
    get_aggregated_rent_for_year,
    is_lease_active_in_month,
    months_of_year,
    occupancy_pct,
)


@pytest.fixture
def flat():
    return Property(purchase_price=200000)


@pytest.fixture
def shared_house():
    return Property(purchase_price=300000, rental_mode=RentalMode.PER_ROOM)


@pytest.fixture
def rooms():
    return [Room(id="r1", name="Room 1"), Room(id="r2", name="Room 2"), Room(id="r3")]


class TestLeaseWindow:
    """Test month-granularity lease activity."""

    def test_open_ended(self):
        lease = Lease(start_date=date(2023, 6, 1), monthly_rent=900)
        assert is_lease_active_in_month(lease, date(2030, 1, 1))
        assert not is_lease_active_in_month(lease, date(2023, 5, 31))

    def test_starts_late_in_month(self):
        lease = Lease(start_date=date(2024, 5, 20), monthly_rent=900)
        assert is_lease_active_in_month(lease, date(2024, 5, 1))

    def test_ends_early_in_month(self):
        lease = Lease(
            start_date=date(2024, 1, 15), end_date=date(2024, 3, 10), monthly_rent=900
        )
        assert is_lease_active_in_month(lease, date(2024, 3, 31))
        assert not is_lease_active_in_month(lease, date(2024, 4, 1))

    def test_missing_start_date(self):
        lease = Lease(start_date=None, monthly_rent=900)
        assert not is_lease_active_in_month(lease, date(2024, 1, 1))


class TestWholeUnit:
    """Test ENTIRE_UNIT aggregation."""

    def test_no_active_lease(self, flat):
        result = get_aggregated_rent_for_month(flat, [], [], date(2024, 1, 1))
        assert result == AggregatedRentResult(
            monthly_gross=0,
            monthly_net=0,
            effective_vacancy_pct=0,
            occupied_rooms=0,
            total_rooms=1,
        )

    def test_expired_lease_is_not_active(self, flat):
        leases = [
            Lease(start_date=date(2022, 1, 1), end_date=date(2022, 12, 31), monthly_rent=800)
        ]
        result = get_aggregated_rent_for_month(flat, leases, [], date(2024, 1, 1))
        assert result.monthly_gross == 0
        assert result.total_rooms == 1

    def test_active_lease(self, flat):
        leases = [Lease(start_date=date(2023, 1, 1), monthly_rent=1000, vacancy_pct=0.1)]
        result = get_aggregated_rent_for_month(flat, leases, [], date(2024, 1, 1))
        assert result.monthly_gross == 1000
        assert result.monthly_net == pytest.approx(900)
        assert result.effective_vacancy_pct == pytest.approx(0.1)
        assert result.occupied_rooms == 1
        assert result.total_rooms == 1

    def test_room_leases_ignored(self, flat):
        leases = [Lease(start_date=date(2023, 1, 1), monthly_rent=400, room_id="r1")]
        result = get_aggregated_rent_for_month(flat, leases, [], date(2024, 1, 1))
        assert result.monthly_gross == 0
        assert result.occupied_rooms == 0

    def test_first_active_lease_wins(self, flat):
        leases = [
            Lease(start_date=date(2020, 1, 1), end_date=date(2021, 1, 1), monthly_rent=700),
            Lease(start_date=date(2023, 1, 1), monthly_rent=1000),
            Lease(start_date=date(2023, 6, 1), monthly_rent=1100),
        ]
        result = get_aggregated_rent_for_month(flat, leases, [], date(2024, 1, 1))
        assert result.monthly_gross == 1000

    def test_missing_rent_counts_as_zero(self, flat):
        leases = [Lease(start_date=date(2023, 1, 1))]
        result = get_aggregated_rent_for_month(flat, leases, [], date(2024, 1, 1))
        assert result.monthly_gross == 0
        assert result.monthly_net == 0
        assert result.effective_vacancy_pct == 0

    def test_missing_rental_mode_defaults_to_whole_unit(self):
        prop = Property(purchase_price=100000, rental_mode=None)
        leases = [Lease(start_date=date(2023, 1, 1), monthly_rent=750)]
        result = get_aggregated_rent_for_month(prop, leases, [], date(2024, 1, 1))
        assert result.monthly_gross == 750
        assert result.total_rooms == 1


class TestPerRoom:
    """Test PER_ROOM aggregation."""

    def test_overlapping_leases_count_room_once(self, shared_house, rooms):
        leases = [
            Lease(start_date=date(2023, 1, 1), monthly_rent=500, room_id="r1"),
            Lease(start_date=date(2023, 9, 1), monthly_rent=450, room_id="r1"),
            Lease(start_date=date(2023, 1, 1), monthly_rent=600, vacancy_pct=0.5, room_id="r2"),
        ]
        result = get_aggregated_rent_for_month(shared_house, leases, rooms, date(2024, 1, 1))
        assert result.monthly_gross == 1550
        assert result.monthly_net == pytest.approx(1250)
        assert result.effective_vacancy_pct == pytest.approx(1 - 1250 / 1550)
        assert result.occupied_rooms == 2
        assert result.total_rooms == 3

    def test_unit_leases_ignored(self, shared_house, rooms):
        leases = [Lease(start_date=date(2023, 1, 1), monthly_rent=1500)]
        result = get_aggregated_rent_for_month(shared_house, leases, rooms, date(2024, 1, 1))
        assert result.monthly_gross == 0
        assert result.effective_vacancy_pct == 0
        assert result.occupied_rooms == 0
        assert result.total_rooms == 3

    def test_inactive_room_leases_ignored(self, shared_house, rooms):
        leases = [
            Lease(start_date=date(2024, 2, 1), monthly_rent=500, room_id="r1"),
            Lease(start_date=date(2022, 1, 1), end_date=date(2023, 12, 31), monthly_rent=500, room_id="r2"),
            Lease(start_date=date(2023, 1, 1), monthly_rent=550, room_id="r3"),
        ]
        result = get_aggregated_rent_for_month(shared_house, leases, rooms, date(2024, 1, 15))
        assert result.monthly_gross == 550
        assert result.occupied_rooms == 1

    def test_no_rooms(self, shared_house):
        leases = [Lease(start_date=date(2023, 1, 1), monthly_rent=500, room_id="r1")]
        result = get_aggregated_rent_for_month(shared_house, leases, [], date(2024, 1, 1))
        assert result == AggregatedRentResult(
            monthly_gross=0,
            monthly_net=0,
            effective_vacancy_pct=0,
            occupied_rooms=0,
            total_rooms=0,
        )

    def test_string_rental_mode(self, rooms):
        prop = Property(purchase_price=300000, rental_mode="PER_ROOM")
        leases = [Lease(start_date=date(2023, 1, 1), monthly_rent=500, room_id="r1")]
        result = get_aggregated_rent_for_month(prop, leases, rooms, date(2024, 1, 1))
        assert result.total_rooms == 3
        assert result.occupied_rooms == 1

    def test_idempotent(self, shared_house, rooms):
        leases = [Lease(start_date=date(2023, 1, 1), monthly_rent=500, room_id="r1")]
        first = get_aggregated_rent_for_month(shared_house, leases, rooms, date(2024, 1, 1))
        second = get_aggregated_rent_for_month(shared_house, leases, rooms, date(2024, 1, 1))
        assert first == second


class TestYearAggregation:
    """Test calendar-year aggregation."""

    def test_months_of_year(self):
        months = months_of_year(2024)
        assert len(months) == 12
        assert months[0] == date(2024, 1, 1)
        assert months[-1] == date(2024, 12, 1)

    def test_lease_starting_mid_year(self, flat):
        leases = [Lease(start_date=date(2024, 7, 1), monthly_rent=1000)]
        result = get_aggregated_rent_for_year(flat, leases, [], 2024)
        assert len(result.months) == 12
        assert result.annual_gross == 6000
        assert result.annual_net == 6000
        assert result.average_effective_vacancy_pct == 0

    def test_full_year_with_vacancy(self, flat):
        leases = [Lease(start_date=date(2023, 3, 1), monthly_rent=1000, vacancy_pct=0.1)]
        result = get_aggregated_rent_for_year(flat, leases, [], 2024)
        assert result.annual_gross == 12000
        assert result.annual_net == pytest.approx(10800)
        assert result.average_effective_vacancy_pct == pytest.approx(0.1)

    def test_per_room_year(self, shared_house, rooms):
        leases = [
            Lease(start_date=date(2024, 1, 1), end_date=date(2024, 6, 30), monthly_rent=500, room_id="r1"),
            Lease(start_date=date(2024, 1, 1), monthly_rent=400, room_id="r2"),
        ]
        result = get_aggregated_rent_for_year(shared_house, leases, rooms, 2024)
        assert result.annual_gross == 500 * 6 + 400 * 12
        assert result.months[0].occupied_rooms == 2
        assert result.months[11].occupied_rooms == 1


class TestOccupancy:
    """Test occupancy percentage."""

    def test_per_room(self):
        result = AggregatedRentResult(1000, 1000, 0, 2, 4)
        assert occupancy_pct(result, RentalMode.PER_ROOM) == 50

    def test_per_room_without_rooms(self):
        result = AggregatedRentResult(0, 0, 0, 0, 0)
        assert occupancy_pct(result, RentalMode.PER_ROOM) == 0

    def test_whole_unit(self):
        result = AggregatedRentResult(1000, 900, 0.1, 1, 1)
        assert occupancy_pct(result, RentalMode.ENTIRE_UNIT) == pytest.approx(90)

    def test_whole_unit_vacant(self):
        result = AggregatedRentResult(0, 0, 0, 0, 1)
        assert occupancy_pct(result) == 0
