"""
Financial calculation API endpoints.

These endpoints accept already-fetched property records and return calculated
results. Nothing is stored; every endpoint is a pass-through to the engine.
"""

import logging
from dataclasses import asdict
from datetime import date
from typing import List, Optional

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict, Field

from app.calculations import amortization, cashflow, costs, metrics, rent
from app.calculations.models import (
    AcquisitionCosts,
    Lease,
    Loan,
    OneOffExpense,
    Property,
    PropertyRecords,
    RecurringExpense,
    RentalMode,
    Room,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class CalculationInput(BaseModel):
    """Base for request bodies. Non-finite numbers are rejected here."""

    model_config = ConfigDict(allow_inf_nan=False)


class LoanInput(CalculationInput):
    """Loan terms."""

    principal: float = Field(..., ge=0)
    annual_rate_pct: float = Field(..., ge=0)
    term_months: int = Field(..., ge=0)
    interest_only_months: int = Field(0, ge=0)
    start_date: Optional[date] = None
    up_front_fees: Optional[float] = None
    notes: Optional[str] = None

    def to_record(self) -> Loan:
        return Loan(**self.model_dump())


class AcquisitionCostsInput(CalculationInput):
    """Itemized one-time purchase costs."""

    itp: Optional[float] = None
    notary: Optional[float] = None
    registry: Optional[float] = None
    ajd: Optional[float] = None
    initial_renovation: Optional[float] = None
    appliances: Optional[float] = None
    others: Optional[float] = None

    def to_record(self) -> AcquisitionCosts:
        return AcquisitionCosts(**self.model_dump())


class RecurringExpenseInput(CalculationInput):
    """Recurring expense. Unknown periodicities are accepted and count as 0."""

    amount: float
    periodicity: str
    type: Optional[str] = None
    next_due_date: Optional[date] = None
    is_deductible: Optional[bool] = None
    notes: Optional[str] = None

    def to_record(self) -> RecurringExpense:
        return RecurringExpense(**self.model_dump())


class LeaseInput(CalculationInput):
    """Lease on a unit or a room."""

    start_date: Optional[date] = None
    end_date: Optional[date] = None
    monthly_rent: Optional[float] = None
    vacancy_pct: Optional[float] = None
    room_id: Optional[str] = None
    is_active: Optional[bool] = None

    def to_record(self) -> Lease:
        return Lease(**self.model_dump())


class RoomInput(CalculationInput):
    """Room of a per-room property."""

    id: str
    name: Optional[str] = None
    is_active: bool = True

    def to_record(self) -> Room:
        return Room(**self.model_dump())


class PropertyInput(CalculationInput):
    """Property acquisition data and letting mode."""

    purchase_price: float = 0.0
    current_value: Optional[float] = None
    closing_costs: Optional[AcquisitionCostsInput] = None
    rental_mode: RentalMode = RentalMode.ENTIRE_UNIT

    def to_record(self) -> Property:
        return Property(
            purchase_price=self.purchase_price,
            current_value=self.current_value,
            closing_costs=self.closing_costs.to_record() if self.closing_costs else None,
            rental_mode=self.rental_mode,
        )


class AmortizationInput(CalculationInput):
    """Input for amortization calculation."""

    principal: float = Field(..., ge=0)
    annual_rate_pct: float = Field(..., ge=0)
    term_months: int = Field(..., ge=0)
    interest_only_months: int = Field(0, ge=0)


@router.post("/amortization")
async def calculate_amortization(inputs: AmortizationInput):
    """Generate loan amortization schedule."""
    logger.info(
        "Amortization: %s months at %s%%", inputs.term_months, inputs.annual_rate_pct
    )
    result = amortization.build_amortization_schedule(
        principal=inputs.principal,
        annual_rate_pct=inputs.annual_rate_pct,
        term_months=inputs.term_months,
        interest_only_months=inputs.interest_only_months,
    )

    return {
        "payment": result.payment,
        "schedule": [asdict(row) for row in result.schedule],
        "total_interest": amortization.total_interest(result.schedule),
    }


class RemainingBalanceInput(CalculationInput):
    """Input for outstanding loan balance."""

    loan: LoanInput
    as_of: Optional[date] = None


@router.post("/remaining-balance")
async def calculate_remaining_balance(inputs: RemainingBalanceInput):
    """Outstanding principal of a loan at a date (today by default)."""
    logger.info("Remaining balance as of %s", inputs.as_of or "today")
    balance = amortization.remaining_balance(inputs.loan.to_record(), inputs.as_of)
    return {"balance": balance}


@router.post("/closing-costs")
async def calculate_closing_costs(inputs: Optional[AcquisitionCostsInput] = None):
    """Sum itemized acquisition costs."""
    logger.info("Closing costs")
    total = costs.sum_closing_costs(inputs.to_record() if inputs else None)
    return {"total": total}


class AnnualsInput(CalculationInput):
    """Input for unlevered annual metrics."""

    monthly_rent: float
    vacancy_pct: float = Field(0.0, ge=0, le=1)
    recurring: List[RecurringExpenseInput] = []
    variable_annual_budget: float = 0.0
    purchase_price: float
    closing_costs_total: Optional[float] = None
    closing_costs: Optional[AcquisitionCostsInput] = None

    def closing_total(self) -> float:
        """Explicit total wins over the itemized costs."""
        if self.closing_costs_total is not None:
            return self.closing_costs_total
        return costs.sum_closing_costs(
            self.closing_costs.to_record() if self.closing_costs else None
        )

    def engine_kwargs(self) -> dict:
        return {
            "monthly_rent": self.monthly_rent,
            "recurring": [exp.to_record() for exp in self.recurring],
            "purchase_price": self.purchase_price,
            "vacancy_pct": self.vacancy_pct,
            "variable_annual_budget": self.variable_annual_budget,
            "closing_costs_total": self.closing_total(),
        }


class LeveredInput(AnnualsInput):
    """Input for levered metrics."""

    loan: Optional[LoanInput] = None
    current_value: Optional[float] = None


@router.post("/annuals")
async def calculate_annuals(inputs: AnnualsInput):
    """Unlevered annual metrics."""
    logger.info("Annual metrics for purchase price %s", inputs.purchase_price)
    return asdict(metrics.compute_annuals(**inputs.engine_kwargs()))


@router.post("/levered")
async def calculate_levered(inputs: LeveredInput):
    """Levered annual metrics (unlevered figures when no loan is given)."""
    logger.info("Levered metrics (loan: %s)", inputs.loan is not None)
    result = metrics.compute_levered_metrics(
        **inputs.engine_kwargs(),
        loan=inputs.loan.to_record() if inputs.loan else None,
        current_value=inputs.current_value,
    )
    return asdict(result)


class PortfolioEntryInput(LeveredInput):
    """One property of a portfolio."""


class PortfolioInput(CalculationInput):
    """Input for portfolio totals."""

    properties: List[PortfolioEntryInput] = []


@router.post("/portfolio")
async def calculate_portfolio(inputs: PortfolioInput):
    """Portfolio totals with equity-weighted returns."""
    entries = []
    for entry in inputs.properties:
        loan = entry.loan.to_record() if entry.loan else None
        result = metrics.compute_levered_metrics(
            **entry.engine_kwargs(),
            loan=loan,
            current_value=entry.current_value,
        )
        if entry.current_value is not None and entry.current_value > 0:
            value = entry.current_value
        else:
            value = entry.purchase_price
        entries.append((result, loan.principal if loan else 0.0, value))

    logger.info("Summarizing portfolio of %d properties", len(entries))
    return asdict(metrics.summarize_portfolio(entries))


class RentMonthInput(CalculationInput):
    """Input for monthly rent aggregation."""

    property: PropertyInput = PropertyInput()
    leases: List[LeaseInput] = []
    rooms: List[RoomInput] = []
    month_date: date


class RentYearInput(CalculationInput):
    """Input for yearly rent aggregation."""

    property: PropertyInput = PropertyInput()
    leases: List[LeaseInput] = []
    rooms: List[RoomInput] = []
    year: int = Field(..., ge=1, le=9999)


@router.post("/rent/month")
async def calculate_rent_month(inputs: RentMonthInput):
    """Aggregated rent of a property for one month."""
    logger.info("Rent for %s (%s)", inputs.month_date, inputs.property.rental_mode.value)
    result = rent.get_aggregated_rent_for_month(
        property=inputs.property.to_record(),
        leases=[lease.to_record() for lease in inputs.leases],
        rooms=[room.to_record() for room in inputs.rooms],
        month_date=inputs.month_date,
    )
    return {
        **asdict(result),
        "occupancy_pct": rent.occupancy_pct(result, inputs.property.rental_mode),
    }


@router.post("/rent/year")
async def calculate_rent_year(inputs: RentYearInput):
    """Aggregated rent of a property over a calendar year."""
    logger.info("Rent for %s (%s)", inputs.year, inputs.property.rental_mode.value)
    result = rent.get_aggregated_rent_for_year(
        property=inputs.property.to_record(),
        leases=[lease.to_record() for lease in inputs.leases],
        rooms=[room.to_record() for room in inputs.rooms],
        year=inputs.year,
    )
    return asdict(result)


class OneOffExpenseInput(CalculationInput):
    """Non-recurring expense."""

    expense_date: date
    amount: float
    category: Optional[str] = None
    description: Optional[str] = None
    is_deductible: Optional[bool] = None

    def to_record(self) -> OneOffExpense:
        return OneOffExpense(**self.model_dump())


class PropertyRecordsInput(CalculationInput):
    """Stored records of one property."""

    property: PropertyInput = PropertyInput()
    leases: List[LeaseInput] = []
    rooms: List[RoomInput] = []
    recurring: List[RecurringExpenseInput] = []
    one_off: List[OneOffExpenseInput] = []
    loan: Optional[LoanInput] = None

    def to_record(self) -> PropertyRecords:
        return PropertyRecords(
            property=self.property.to_record(),
            leases=tuple(lease.to_record() for lease in self.leases),
            rooms=tuple(room.to_record() for room in self.rooms),
            recurring=tuple(exp.to_record() for exp in self.recurring),
            one_off=tuple(exp.to_record() for exp in self.one_off),
            loan=self.loan.to_record() if self.loan else None,
        )


class CashflowInput(CalculationInput):
    """Input for monthly or yearly cash flow."""

    properties: List[PropertyRecordsInput] = []
    year: int = Field(..., ge=1, le=9999)
    years: int = Field(5, ge=1, le=50)


@router.post("/cashflow/monthly")
async def calculate_monthly_cashflow(inputs: CashflowInput):
    """Cash flow for each month of a year, with totals."""
    logger.info(
        "Monthly cash flow for %s (%d properties)", inputs.year, len(inputs.properties)
    )
    portfolio = [records.to_record() for records in inputs.properties]
    rows = cashflow.monthly_cashflows(portfolio, inputs.year)
    return {
        "rows": [asdict(row) for row in rows],
        "totals": asdict(cashflow.sum_cashflow_rows(rows)),
    }


@router.post("/cashflow/yearly")
async def calculate_yearly_cashflow(inputs: CashflowInput):
    """Cash flow for the ``years`` years ending with ``year``, with totals."""
    logger.info(
        "Yearly cash flow up to %s (%d properties)", inputs.year, len(inputs.properties)
    )
    portfolio = [records.to_record() for records in inputs.properties]
    rows = cashflow.yearly_cashflows(portfolio, inputs.year, inputs.years)
    return {
        "rows": [asdict(row) for row in rows],
        "totals": asdict(cashflow.sum_cashflow_rows(rows)),
    }


class DealInput(CalculationInput):
    """Input for a quick deal analysis."""

    purchase_price: float = Field(..., ge=0)
    down_payment_pct: float = Field(20.0, ge=0, le=100)
    interest_rate_pct: float = Field(..., ge=0)
    loan_term_years: int = Field(30, ge=0)
    monthly_rent: float = Field(..., ge=0)
    closing_costs: float = 0.0
    renovation_costs: float = 0.0
    property_tax_annual: float = 0.0
    insurance: float = 0.0
    hoa: float = 0.0
    maintenance: float = 0.0
    property_management_pct: float = Field(0.0, ge=0, le=100)
    utilities: float = 0.0


@router.post("/deal")
async def calculate_deal(inputs: DealInput):
    """Evaluate a prospective purchase."""
    logger.info("Deal analysis for purchase price %s", inputs.purchase_price)
    return asdict(metrics.analyze_deal(**inputs.model_dump()))
