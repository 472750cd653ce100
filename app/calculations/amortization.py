"""
Loan Amortization Calculations

Fixed-payment (annuity) schedules with an optional interest-only period.
Rates are nominal annual percentages (3.5 means 3.5%).
"""

import logging
from datetime import date
from typing import Iterable, List, Optional

from app.calculations.models import AmortizationRow, AmortizationSchedule, Loan

logger = logging.getLogger(__name__)


def monthly_payment(
    principal: float, annual_rate_pct: float, term_months: int
) -> float:
    """
    Calculate the constant monthly payment of a fully amortizing loan.

    A zero rate or a zero term falls back to a flat split of the principal
    over ``max(term_months, 1)`` months.

    Args:
        principal: Loan principal amount
        annual_rate_pct: Nominal annual rate as a percentage (e.g., 3.5)
        term_months: Number of monthly payments

    Returns:
        Monthly payment amount
    """
    if term_months == 0 or annual_rate_pct == 0:
        return principal / max(term_months, 1)

    monthly_rate = annual_rate_pct / 100 / 12
    growth = (1 + monthly_rate) ** term_months

    return principal * monthly_rate * growth / (growth - 1)


def build_amortization_schedule(
    principal: float,
    annual_rate_pct: float,
    term_months: int,
    interest_only_months: int = 0,
) -> AmortizationSchedule:
    """
    Build the month-by-month schedule of a loan.

    Months 1..interest_only_months pay interest only. The remaining months
    amortize the balance with a constant payment computed once over the
    remaining term. An interest-only period covering the whole term yields
    an interest-only schedule.

    Args:
        principal: Loan principal amount
        annual_rate_pct: Nominal annual rate as a percentage
        term_months: Total loan term in months
        interest_only_months: Leading interest-only months

    Returns:
        AmortizationSchedule with exactly ``term_months`` rows
    """
    monthly_rate = annual_rate_pct / 100 / 12
    term_months = max(term_months, 0)
    io_months = min(max(interest_only_months or 0, 0), term_months)

    rows: List[AmortizationRow] = []
    balance = principal

    # Interest-only period
    for month in range(1, io_months + 1):
        interest = balance * monthly_rate
        rows.append(
            AmortizationRow(
                month=month,
                payment=interest,
                interest=interest,
                principal_paid=0.0,
                balance=balance,
            )
        )

    amort_months = term_months - io_months
    if amort_months > 0 or io_months == 0:
        payment = monthly_payment(balance, annual_rate_pct, amort_months)
    else:
        payment = principal * monthly_rate
        logger.debug(
            "Interest-only period covers the whole %s-month term", term_months
        )

    # Amortizing period
    for month in range(io_months + 1, term_months + 1):
        interest = balance * monthly_rate
        principal_paid = payment - interest
        balance = max(0.0, balance - principal_paid)

        rows.append(
            AmortizationRow(
                month=month,
                payment=payment,
                interest=interest,
                principal_paid=principal_paid,
                balance=balance,
            )
        )

    logger.debug(
        "Built %s-month schedule (%s interest-only), payment %.2f",
        term_months,
        io_months,
        payment,
    )

    return AmortizationSchedule(payment=payment, schedule=tuple(rows))


def schedule_for_loan(loan: Loan) -> AmortizationSchedule:
    """Build the schedule of a stored loan record."""
    return build_amortization_schedule(
        principal=loan.principal or 0.0,
        annual_rate_pct=loan.annual_rate_pct or 0.0,
        term_months=loan.term_months or 0,
        interest_only_months=loan.interest_only_months or 0,
    )


def months_between(start: date, end: date) -> int:
    """Whole calendar months from ``start`` to ``end`` (days ignored)."""
    return (end.year - start.year) * 12 + (end.month - start.month)


def remaining_balance(loan: Optional[Loan], as_of: Optional[date] = None) -> float:
    """
    Outstanding principal of a loan at a given date.

    Loans missing a start date, principal or term report 0. Before the start
    month the full principal is outstanding; from the end of the term on,
    nothing is.
    """
    if loan is None or not loan.start_date or not loan.principal or not loan.term_months:
        return 0.0

    if as_of is None:
        as_of = date.today()

    elapsed = months_between(loan.start_date, as_of)

    if elapsed <= 0:
        return loan.principal
    if elapsed >= loan.term_months:
        return 0.0

    return schedule_for_loan(loan).schedule[elapsed - 1].balance


def total_interest(rows: Iterable[AmortizationRow]) -> float:
    """Calculate total interest paid over a schedule."""
    return sum(row.interest for row in rows)
