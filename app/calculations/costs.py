"""
Acquisition Cost Calculations
"""

from typing import Optional

from app.calculations.models import AcquisitionCosts
from app.calculations.utils import as_number

COST_FIELDS = (
    "itp",
    "notary",
    "registry",
    "ajd",
    "initial_renovation",
    "appliances",
    "others",
)


def sum_closing_costs(costs: Optional[AcquisitionCosts] = None) -> float:
    """Sum the one-time purchase costs of a property. Missing items count as 0."""
    if costs is None:
        return 0.0

    return sum(as_number(getattr(costs, name, None)) for name in COST_FIELDS)
