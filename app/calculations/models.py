"""
Value records consumed and produced by the calculation engine.

Records are plain frozen dataclasses. Storage, identity and validation of the
raw documents belong to the callers; the engine only reads these fields.
"""

import enum
from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Tuple


class RentalMode(str, enum.Enum):
    """How a property is let."""
    ENTIRE_UNIT = "ENTIRE_UNIT"
    PER_ROOM = "PER_ROOM"


class Periodicity(str, enum.Enum):
    """Billing cadence of a recurring expense."""
    monthly = "monthly"
    quarterly = "quarterly"
    yearly = "yearly"


@dataclass(frozen=True)
class Loan:
    """Fixed-rate loan secured on a property."""

    principal: float
    annual_rate_pct: float  # Nominal annual rate, e.g. 3.5 for 3.5%
    term_months: int
    interest_only_months: int = 0
    start_date: Optional[date] = None
    up_front_fees: Optional[float] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class AmortizationRow:
    """One month of an amortization schedule."""

    month: int  # 1-based
    payment: float
    interest: float
    principal_paid: float
    balance: float  # Outstanding after this month's payment


@dataclass(frozen=True)
class AmortizationSchedule:
    """Constant amortizing payment plus the month-by-month rows."""

    payment: float
    schedule: Tuple[AmortizationRow, ...] = ()


@dataclass(frozen=True)
class AcquisitionCosts:
    """One-time purchase costs. Absent items count as zero."""

    itp: Optional[float] = None  # Transfer tax
    notary: Optional[float] = None
    registry: Optional[float] = None
    ajd: Optional[float] = None  # Stamp duty
    initial_renovation: Optional[float] = None
    appliances: Optional[float] = None
    others: Optional[float] = None


@dataclass(frozen=True)
class RecurringExpense:
    """Operating expense billed on a fixed cadence."""

    amount: float
    periodicity: str
    type: Optional[str] = None
    next_due_date: Optional[date] = None  # Due month of yearly expenses
    is_deductible: Optional[bool] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class AnnualMetrics:
    """Unlevered annual figures. Rates are percentages."""

    rent_annual_gross: float
    recurring_annual: float
    variable_annual: float
    noi: float
    cap_rate_net: float
    yield_gross: float


@dataclass(frozen=True)
class LeveredMetrics(AnnualMetrics):
    """Annual figures after financing. ``dscr`` is a bare ratio."""

    ads: float = 0.0
    interests_annual: float = 0.0
    principal_annual: float = 0.0
    cfaf: float = 0.0
    equity: float = 0.0
    cash_on_cash: float = 0.0
    dscr: float = 0.0
    ltv: float = 0.0


@dataclass(frozen=True)
class Lease:
    """
    Lease on a whole unit, or on a single room when ``room_id`` is set.

    A lease without an end date is open-ended.
    """

    start_date: Optional[date]
    monthly_rent: Optional[float] = None
    end_date: Optional[date] = None
    vacancy_pct: Optional[float] = None  # 0..1
    room_id: Optional[str] = None
    is_active: Optional[bool] = None


@dataclass(frozen=True)
class Room:
    """Lettable room of a PER_ROOM property."""

    id: str
    name: Optional[str] = None
    is_active: bool = True


@dataclass(frozen=True)
class Property:
    """Acquisition data and letting mode of a property."""

    purchase_price: float = 0.0
    current_value: Optional[float] = None
    closing_costs: Optional[AcquisitionCosts] = None
    rental_mode: RentalMode = RentalMode.ENTIRE_UNIT


@dataclass(frozen=True)
class AggregatedRentResult:
    """Rent of a property for one month."""

    monthly_gross: float
    monthly_net: float
    effective_vacancy_pct: float  # 0..1
    occupied_rooms: int
    total_rooms: int


@dataclass(frozen=True)
class AnnualRentResult:
    """Rent of a property over the twelve months of a calendar year."""

    annual_gross: float
    annual_net: float
    average_effective_vacancy_pct: float
    months: Tuple[AggregatedRentResult, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class PortfolioSummary:
    """Dashboard totals across several properties."""

    properties: int
    total_cfaf: float
    total_noi: float
    total_equity: float
    total_principal: float
    total_value: float
    weighted_cash_on_cash: float
    weighted_cap_rate: float
    portfolio_ltv: float


@dataclass(frozen=True)
class OneOffExpense:
    """Non-recurring expense (renovation, repair, furniture...)."""

    expense_date: date
    amount: float
    category: Optional[str] = None
    description: Optional[str] = None
    is_deductible: Optional[bool] = None


@dataclass(frozen=True)
class PropertyRecords:
    """Everything stored for one property, as fetched by the caller."""

    property: Property
    leases: Tuple[Lease, ...] = ()
    rooms: Tuple[Room, ...] = ()
    recurring: Tuple[RecurringExpense, ...] = ()
    one_off: Tuple[OneOffExpense, ...] = ()
    loan: Optional[Loan] = None


@dataclass(frozen=True)
class CashflowRow:
    """Cash flow of a month or a year, across one or more properties."""

    period: str
    rent_income: float = 0.0
    recurring_expenses: float = 0.0
    one_off_expenses: float = 0.0
    debt_payment: float = 0.0
    debt_interest: float = 0.0
    debt_principal: float = 0.0
    noi: float = 0.0
    net_cashflow: float = 0.0


@dataclass(frozen=True)
class DealAnalysis:
    """Quick pre-purchase evaluation of a financed rental."""

    down_payment: float
    loan_amount: float
    total_investment: float
    monthly_mortgage: float
    gross_monthly_income: float
    total_monthly_expenses: float
    monthly_cash_flow: float
    annual_cash_flow: float
    noi: float
    cap_rate: float
    cash_on_cash: float
    dscr: float
    break_even_occupancy: float
    is_profitable: bool
