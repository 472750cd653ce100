"""
Financial Calculation Engine

Pure calculation functions for rental property analysis: loan amortization,
acquisition costs, levered and unlevered annual metrics, rent aggregation,
monthly and yearly cash flow, and quick deal analysis.
Inputs are already-fetched records; nothing here performs I/O.
"""

from app.calculations.amortization import (
    build_amortization_schedule,
    monthly_payment,
    remaining_balance,
    total_interest,
)
from app.calculations.cashflow import (
    compute_month_cashflow,
    compute_year_cashflow,
    monthly_cashflows,
    sum_cashflow_rows,
    yearly_cashflows,
)
from app.calculations.costs import sum_closing_costs
from app.calculations.metrics import (
    analyze_deal,
    annualize_expense,
    compute_annuals,
    compute_levered_metrics,
    summarize_portfolio,
)
from app.calculations.rent import (
    get_aggregated_rent_for_month,
    get_aggregated_rent_for_year,
    is_lease_active_in_month,
    occupancy_pct,
)
from app.calculations.utils import safe_div

__all__ = [
    "monthly_payment",
    "build_amortization_schedule",
    "remaining_balance",
    "total_interest",
    "sum_closing_costs",
    "annualize_expense",
    "compute_annuals",
    "compute_levered_metrics",
    "summarize_portfolio",
    "analyze_deal",
    "compute_month_cashflow",
    "compute_year_cashflow",
    "monthly_cashflows",
    "yearly_cashflows",
    "sum_cashflow_rows",
    "get_aggregated_rent_for_month",
    "get_aggregated_rent_for_year",
    "is_lease_active_in_month",
    "occupancy_pct",
    "safe_div",
]
