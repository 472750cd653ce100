"""
Cash Flow Calculations

Monthly and yearly cash flow of one or more rental properties: collected
rent, recurring and one-off expenses, and debt service.
"""

import logging
from datetime import date
from typing import Dict, Iterable, List, Sequence

from dateutil.relativedelta import relativedelta

from app.calculations.amortization import months_between, schedule_for_loan
from app.calculations.models import (
    CashflowRow,
    Loan,
    Periodicity,
    PropertyRecords,
    RecurringExpense,
    RentalMode,
)
from app.calculations.metrics import annualize_expense
from app.calculations.rent import get_aggregated_rent_for_month
from app.calculations.utils import as_number

logger = logging.getLogger(__name__)

# Quarterly expenses fall due in January, April, July and October
QUARTER_START_MONTHS = (1, 4, 7, 10)

CASHFLOW_FIELDS = (
    "rent_income",
    "recurring_expenses",
    "one_off_expenses",
    "debt_payment",
    "debt_interest",
    "debt_principal",
    "noi",
    "net_cashflow",
)


def generate_monthly_dates(start_date: date, num_months: int) -> List[date]:
    """Generate array of monthly dates."""
    return [start_date + relativedelta(months=i) for i in range(num_months + 1)]


def _has_rent_source(records: PropertyRecords) -> bool:
    """Properties with no lease (and no rooms to let) are left out."""
    if records.leases:
        return True
    return records.property.rental_mode == RentalMode.PER_ROOM and bool(records.rooms)


def recurring_due_in_month(expense: RecurringExpense, month_date: date) -> float:
    """
    Amount of a recurring expense falling due in a given month.

    Monthly expenses are due every month, quarterly ones at the start of each
    quarter, and yearly ones in the month of their next due date (never, when
    no due date is recorded).
    """
    try:
        cadence = Periodicity(expense.periodicity)
    except ValueError:
        return 0.0

    amount = as_number(expense.amount)

    if cadence == Periodicity.monthly:
        return amount
    if cadence == Periodicity.quarterly:
        return amount if month_date.month in QUARTER_START_MONTHS else 0.0
    if expense.next_due_date and months_between(expense.next_due_date, month_date) == 0:
        return amount
    return 0.0


def loan_in_term(loan: Loan, month_date: date) -> bool:
    """Check whether a loan is being repaid in the month of ``month_date``."""
    term_months = loan.term_months or 0
    # Loans without a start date are taken to start in the month itself
    if not loan.start_date:
        return term_months > 0
    elapsed = months_between(loan.start_date, month_date)
    return 0 <= elapsed < term_months


def _monthly_debt(loan: Loan) -> Dict[str, float]:
    """Debt service of a loan spread evenly over the months of its first year."""
    amortization = schedule_for_loan(loan)
    first_year = amortization.schedule[:12]
    return {
        "debt_payment": amortization.payment,
        "debt_interest": sum(row.interest for row in first_year) / 12,
        "debt_principal": sum(row.principal_paid for row in first_year) / 12,
    }


def _finish_row(period: str, totals: Dict[str, float]) -> CashflowRow:
    noi = totals["rent_income"] - totals["recurring_expenses"] - totals["one_off_expenses"]
    return CashflowRow(
        period=period,
        rent_income=totals["rent_income"],
        recurring_expenses=totals["recurring_expenses"],
        one_off_expenses=totals["one_off_expenses"],
        debt_payment=totals["debt_payment"],
        debt_interest=totals["debt_interest"],
        debt_principal=totals["debt_principal"],
        noi=noi,
        net_cashflow=noi - totals["debt_payment"],
    )


def compute_month_cashflow(
    portfolio: Sequence[PropertyRecords], month_date: date
) -> CashflowRow:
    """
    Cash flow of the month containing ``month_date``.

    Args:
        portfolio: Records of every property to include
        month_date: Any day in the target month

    Returns:
        CashflowRow labelled ``YYYY-MM``
    """
    totals = dict.fromkeys(CASHFLOW_FIELDS[:6], 0.0)

    for records in portfolio:
        if not _has_rent_source(records):
            continue

        rent = get_aggregated_rent_for_month(
            records.property, records.leases, records.rooms, month_date
        )
        totals["rent_income"] += rent.monthly_net

        totals["recurring_expenses"] += sum(
            recurring_due_in_month(exp, month_date) for exp in records.recurring
        )
        totals["one_off_expenses"] += sum(
            as_number(exp.amount)
            for exp in records.one_off
            if exp.expense_date and months_between(exp.expense_date, month_date) == 0
        )

        if records.loan is not None and loan_in_term(records.loan, month_date):
            for key, value in _monthly_debt(records.loan).items():
                totals[key] += value

    return _finish_row(month_date.strftime("%Y-%m"), totals)


def compute_year_cashflow(portfolio: Sequence[PropertyRecords], year: int) -> CashflowRow:
    """
    Cash flow of a calendar year.

    Rent and debt service are the sums of the twelve monthly figures.
    Recurring expenses are annualized in full and one-off expenses dated in
    the year are added.
    """
    totals = dict.fromkeys(CASHFLOW_FIELDS[:6], 0.0)
    months = generate_monthly_dates(date(year, 1, 1), 11)

    for records in portfolio:
        if not records.leases:
            continue

        totals["rent_income"] += sum(
            get_aggregated_rent_for_month(
                records.property, records.leases, records.rooms, month_date
            ).monthly_net
            for month_date in months
        )
        totals["recurring_expenses"] += sum(
            annualize_expense(exp.amount, exp.periodicity) for exp in records.recurring
        )
        totals["one_off_expenses"] += sum(
            as_number(exp.amount)
            for exp in records.one_off
            if exp.expense_date and exp.expense_date.year == year
        )

        if records.loan is not None:
            debt = _monthly_debt(records.loan)
            active_months = sum(1 for m in months if loan_in_term(records.loan, m))
            for key, value in debt.items():
                totals[key] += value * active_months

    return _finish_row(str(year), totals)


def monthly_cashflows(portfolio: Sequence[PropertyRecords], year: int) -> List[CashflowRow]:
    """One row per month of a calendar year."""
    logger.debug("Monthly cash flow for %d properties in %d", len(portfolio), year)
    return [
        compute_month_cashflow(portfolio, month_date)
        for month_date in generate_monthly_dates(date(year, 1, 1), 11)
    ]


def yearly_cashflows(
    portfolio: Sequence[PropertyRecords], last_year: int, years: int = 5
) -> List[CashflowRow]:
    """One row per year, ending with ``last_year``."""
    return [
        compute_year_cashflow(portfolio, year)
        for year in range(last_year - years + 1, last_year + 1)
    ]


def sum_cashflow_rows(rows: Iterable[CashflowRow], period: str = "total") -> CashflowRow:
    """Add cash flow rows field by field."""
    totals = dict.fromkeys(CASHFLOW_FIELDS, 0.0)
    for row in rows:
        for field_name in CASHFLOW_FIELDS:
            totals[field_name] += getattr(row, field_name)
    return CashflowRow(period=period, **totals)
