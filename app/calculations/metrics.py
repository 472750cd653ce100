"""
Return Metric Calculations

Annualized unlevered figures (NOI, cap rate, gross yield) and the levered
figures derived from them once a loan is taken into account.
"""

import logging
from dataclasses import asdict
from typing import Iterable, Optional, Sequence, Tuple

from app.calculations.amortization import monthly_payment, schedule_for_loan
from app.calculations.models import (
    AnnualMetrics,
    DealAnalysis,
    LeveredMetrics,
    Loan,
    Periodicity,
    PortfolioSummary,
    RecurringExpense,
)
from app.calculations.utils import as_number, safe_div

logger = logging.getLogger(__name__)

# Minimum cash-on-cash return (%) for a deal to count as profitable
MIN_CASH_ON_CASH_PCT = 6.0

PERIODS_PER_YEAR = {
    Periodicity.monthly: 12,
    Periodicity.quarterly: 4,
    Periodicity.yearly: 1,
}


def annualize_expense(amount: float, periodicity: str) -> float:
    """
    Annualize a recurring expense from its billing cadence.

    An unrecognised periodicity contributes 0 rather than raising.
    """
    try:
        cadence = Periodicity(periodicity)
    except ValueError:
        logger.debug("Unknown periodicity %r annualized to 0", periodicity)
        return 0.0

    return as_number(amount) * PERIODS_PER_YEAR[cadence]


def compute_annuals(
    monthly_rent: float,
    recurring: Sequence[RecurringExpense],
    purchase_price: float,
    vacancy_pct: float = 0.0,
    variable_annual_budget: float = 0.0,
    closing_costs_total: float = 0.0,
) -> AnnualMetrics:
    """
    Compute unlevered (no debt) annual metrics.

    Args:
        monthly_rent: Contracted monthly rent
        recurring: Recurring operating expenses
        purchase_price: Acquisition price
        vacancy_pct: Fraction of rent lost to vacancy (0..1)
        variable_annual_budget: Annual budget for variable expenses
        closing_costs_total: One-time acquisition costs

    Returns:
        AnnualMetrics with cap rate and yield as percentages
    """
    rent_annual_gross = monthly_rent * 12 * (1 - vacancy_pct)
    recurring_annual = sum(
        annualize_expense(exp.amount, exp.periodicity) for exp in recurring
    )
    variable_annual = variable_annual_budget

    noi = rent_annual_gross - recurring_annual - variable_annual
    total_investment = purchase_price + closing_costs_total

    return AnnualMetrics(
        rent_annual_gross=rent_annual_gross,
        recurring_annual=recurring_annual,
        variable_annual=variable_annual,
        noi=noi,
        cap_rate_net=safe_div(noi, total_investment) * 100,
        yield_gross=safe_div(rent_annual_gross, total_investment) * 100,
    )


def compute_levered_metrics(
    monthly_rent: float,
    recurring: Sequence[RecurringExpense],
    purchase_price: float,
    vacancy_pct: float = 0.0,
    variable_annual_budget: float = 0.0,
    closing_costs_total: float = 0.0,
    loan: Optional[Loan] = None,
    current_value: Optional[float] = None,
) -> LeveredMetrics:
    """
    Compute levered (with debt) annual metrics.

    Without a loan the result collapses to the unlevered case. When
    ``current_value`` is known and positive, equity and LTV are measured
    against it instead of the purchase price.
    """
    annuals = compute_annuals(
        monthly_rent=monthly_rent,
        recurring=recurring,
        purchase_price=purchase_price,
        vacancy_pct=vacancy_pct,
        variable_annual_budget=variable_annual_budget,
        closing_costs_total=closing_costs_total,
    )
    base = asdict(annuals)

    if loan is None:
        return LeveredMetrics(
            **base,
            ads=0.0,
            interests_annual=0.0,
            principal_annual=0.0,
            cfaf=annuals.noi,
            equity=purchase_price + closing_costs_total,
            cash_on_cash=annuals.cap_rate_net,
            dscr=0.0,
            ltv=0.0,
        )

    amortization = schedule_for_loan(loan)
    ads = amortization.payment * 12

    # First year (or the whole loan when shorter)
    first_year = amortization.schedule[:12]
    interests_annual = sum(row.interest for row in first_year)
    principal_annual = sum(row.principal_paid for row in first_year)

    cfaf = annuals.noi - ads
    if current_value is not None and current_value > 0:
        effective_value = current_value
    else:
        effective_value = purchase_price
    equity = effective_value + closing_costs_total - loan.principal

    return LeveredMetrics(
        **base,
        ads=ads,
        interests_annual=interests_annual,
        principal_annual=principal_annual,
        cfaf=cfaf,
        equity=equity,
        cash_on_cash=safe_div(cfaf, equity) * 100,
        dscr=safe_div(annuals.noi, ads),
        ltv=safe_div(loan.principal, effective_value) * 100,
    )


def summarize_portfolio(
    entries: Iterable[Tuple[LeveredMetrics, float, float]],
) -> PortfolioSummary:
    """
    Roll per-property levered metrics up into portfolio totals.

    Each entry is ``(metrics, loan_principal, property_value)``. Cash-on-cash
    and cap rate are averaged weighting each property by its equity.

    Args:
        entries: Per-property metrics with the loan principal (0 when
            unlevered) and the value used for LTV

    Returns:
        PortfolioSummary
    """
    count = 0
    total_cfaf = total_noi = total_equity = 0.0
    total_principal = total_value = 0.0
    weighted_coc = weighted_cap = 0.0

    for metrics, principal, value in entries:
        count += 1
        total_cfaf += metrics.cfaf
        total_noi += metrics.noi
        total_equity += metrics.equity
        total_principal += as_number(principal)
        total_value += as_number(value)
        weighted_coc += metrics.cash_on_cash * metrics.equity
        weighted_cap += metrics.cap_rate_net * metrics.equity

    return PortfolioSummary(
        properties=count,
        total_cfaf=total_cfaf,
        total_noi=total_noi,
        total_equity=total_equity,
        total_principal=total_principal,
        total_value=total_value,
        weighted_cash_on_cash=safe_div(weighted_coc, total_equity),
        weighted_cap_rate=safe_div(weighted_cap, total_equity),
        portfolio_ltv=safe_div(total_principal, total_value) * 100,
    )


def analyze_deal(
    purchase_price: float,
    down_payment_pct: float,
    interest_rate_pct: float,
    loan_term_years: int,
    monthly_rent: float,
    closing_costs: float = 0.0,
    renovation_costs: float = 0.0,
    property_tax_annual: float = 0.0,
    insurance: float = 0.0,
    hoa: float = 0.0,
    maintenance: float = 0.0,
    property_management_pct: float = 0.0,
    utilities: float = 0.0,
) -> DealAnalysis:
    """
    Evaluate a prospective financed purchase.

    Monthly costs (insurance, HOA, maintenance, utilities) are monthly
    amounts; property tax is annual. The mortgage finances whatever the down
    payment does not cover.

    Args:
        purchase_price: Asking price
        down_payment_pct: Down payment as a percentage of the price
        interest_rate_pct: Nominal annual mortgage rate (%)
        loan_term_years: Mortgage term in years
        monthly_rent: Expected monthly rent
        closing_costs: One-time purchase costs
        renovation_costs: Upfront renovation budget
        property_tax_annual: Yearly property tax
        insurance: Monthly insurance
        hoa: Monthly community fees
        maintenance: Monthly maintenance budget
        property_management_pct: Management fee as a percentage of rent
        utilities: Monthly utilities paid by the owner

    Returns:
        DealAnalysis with percentages already multiplied by 100
    """
    down_payment = purchase_price * down_payment_pct / 100
    loan_amount = purchase_price - down_payment
    total_investment = down_payment + closing_costs + renovation_costs

    if loan_amount > 0:
        monthly_mortgage = monthly_payment(
            loan_amount, interest_rate_pct, loan_term_years * 12
        )
    else:
        monthly_mortgage = 0.0

    gross_monthly_income = monthly_rent
    operating_monthly = (
        property_tax_annual / 12
        + insurance
        + hoa
        + maintenance
        + monthly_rent * property_management_pct / 100
        + utilities
    )
    total_monthly_expenses = monthly_mortgage + operating_monthly

    monthly_cash_flow = gross_monthly_income - total_monthly_expenses
    annual_cash_flow = monthly_cash_flow * 12
    noi = (gross_monthly_income - operating_monthly) * 12
    annual_debt_service = monthly_mortgage * 12
    cash_on_cash = safe_div(annual_cash_flow, total_investment) * 100

    return DealAnalysis(
        down_payment=down_payment,
        loan_amount=loan_amount,
        total_investment=total_investment,
        monthly_mortgage=monthly_mortgage,
        gross_monthly_income=gross_monthly_income,
        total_monthly_expenses=total_monthly_expenses,
        monthly_cash_flow=monthly_cash_flow,
        annual_cash_flow=annual_cash_flow,
        noi=noi,
        cap_rate=safe_div(noi, purchase_price) * 100,
        cash_on_cash=cash_on_cash,
        dscr=safe_div(noi, annual_debt_service),
        break_even_occupancy=safe_div(total_monthly_expenses, gross_monthly_income) * 100,
        is_profitable=monthly_cash_flow > 0 and cash_on_cash > MIN_CASH_ON_CASH_PCT,
    )
