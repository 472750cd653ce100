"""
Rent Aggregation

Reconciles whole-unit and per-room letting into a single monthly rent figure,
and rolls months up into calendar years. Leases are matched to a month at
calendar-month granularity: a lease starting or ending on any day of a month
counts as active for that whole month.
"""

from datetime import date
from typing import List, Optional, Sequence

from dateutil.relativedelta import relativedelta

from app.calculations.models import (
    AggregatedRentResult,
    AnnualRentResult,
    Lease,
    Property,
    RentalMode,
    Room,
)
from app.calculations.utils import as_number, safe_div


def _month_key(value: date) -> tuple:
    return (value.year, value.month)


def is_lease_active_in_month(lease: Lease, month_date: date) -> bool:
    """
    Check whether a lease covers any part of the month of ``month_date``.

    Leases without a start date are never active; leases without an end date
    run indefinitely.
    """
    if not lease.start_date:
        return False

    month = _month_key(month_date)
    starts_on_or_before = _month_key(lease.start_date) <= month
    ends_on_or_after = lease.end_date is None or _month_key(lease.end_date) >= month

    return starts_on_or_before and ends_on_or_after


def _net_rent(lease: Lease) -> float:
    return as_number(lease.monthly_rent) * (1 - as_number(lease.vacancy_pct))


def _whole_unit_rent(leases: Sequence[Lease], month_date: date) -> AggregatedRentResult:
    """Rent of a property let as a single unit."""
    active = next(
        (
            lease
            for lease in leases
            if not lease.room_id and is_lease_active_in_month(lease, month_date)
        ),
        None,
    )

    if active is None:
        return AggregatedRentResult(
            monthly_gross=0.0,
            monthly_net=0.0,
            effective_vacancy_pct=0.0,
            occupied_rooms=0,
            total_rooms=1,
        )

    gross = as_number(active.monthly_rent)
    net = _net_rent(active)

    return AggregatedRentResult(
        monthly_gross=gross,
        monthly_net=net,
        effective_vacancy_pct=1 - safe_div(net, gross, fallback=1.0),
        occupied_rooms=1,
        total_rooms=1,
    )


def _per_room_rent(
    leases: Sequence[Lease], rooms: Sequence[Room], month_date: date
) -> AggregatedRentResult:
    """Rent of a property let room by room."""
    total_rooms = len(rooms)

    # Nothing to let
    if total_rooms == 0:
        return AggregatedRentResult(
            monthly_gross=0.0,
            monthly_net=0.0,
            effective_vacancy_pct=0.0,
            occupied_rooms=0,
            total_rooms=0,
        )

    monthly_gross = 0.0
    monthly_net = 0.0
    occupied_room_ids = set()

    for lease in leases:
        if not lease.room_id or not is_lease_active_in_month(lease, month_date):
            continue
        monthly_gross += as_number(lease.monthly_rent)
        monthly_net += _net_rent(lease)
        occupied_room_ids.add(lease.room_id)

    return AggregatedRentResult(
        monthly_gross=monthly_gross,
        monthly_net=monthly_net,
        effective_vacancy_pct=1 - safe_div(monthly_net, monthly_gross, fallback=1.0),
        occupied_rooms=len(occupied_room_ids),
        total_rooms=total_rooms,
    )


def get_aggregated_rent_for_month(
    property: Property,
    leases: Sequence[Lease],
    rooms: Sequence[Room],
    month_date: date,
) -> AggregatedRentResult:
    """
    Aggregate the rent of a property for the month containing ``month_date``.

    ENTIRE_UNIT properties (the default) take the first active lease without
    a room. PER_ROOM properties sum every active room lease and count each
    occupied room once, however many leases it carries.

    Args:
        property: Property whose ``rental_mode`` selects the aggregation
        leases: All leases of the property
        rooms: Rooms of the property (only used for PER_ROOM)
        month_date: Any day in the target month

    Returns:
        AggregatedRentResult for that month
    """
    mode = property.rental_mode or RentalMode.ENTIRE_UNIT

    if mode == RentalMode.PER_ROOM:
        return _per_room_rent(leases, rooms, month_date)
    return _whole_unit_rent(leases, month_date)


def months_of_year(year: int) -> List[date]:
    """First day of each month of a calendar year."""
    start = date(year, 1, 1)
    return [start + relativedelta(months=i) for i in range(12)]


def get_aggregated_rent_for_year(
    property: Property,
    leases: Sequence[Lease],
    rooms: Sequence[Room],
    year: int,
) -> AnnualRentResult:
    """
    Aggregate the rent of a property over a calendar year.

    Gross and net are summed over the twelve months; the effective vacancy
    is the plain average of the monthly figures.
    """
    months = tuple(
        get_aggregated_rent_for_month(property, leases, rooms, month_date)
        for month_date in months_of_year(year)
    )

    return AnnualRentResult(
        annual_gross=sum(m.monthly_gross for m in months),
        annual_net=sum(m.monthly_net for m in months),
        average_effective_vacancy_pct=sum(m.effective_vacancy_pct for m in months)
        / len(months),
        months=months,
    )


def occupancy_pct(
    result: AggregatedRentResult, rental_mode: Optional[RentalMode] = None
) -> float:
    """
    Occupancy of a month as a percentage.

    Per-room properties report occupied rooms over total rooms. Whole units
    report the share of rent actually collected while a lease is in place.
    """
    if rental_mode == RentalMode.PER_ROOM:
        return safe_div(result.occupied_rooms, result.total_rooms) * 100
    if result.occupied_rooms == 0:
        return 0.0
    return (1 - result.effective_vacancy_pct) * 100
