"""
Shared numeric helpers for the calculation engine.
"""


def safe_div(numerator: float, denominator: float, fallback: float = 0.0) -> float:
    """Divide, returning ``fallback`` unless the denominator is positive."""
    if denominator > 0:
        return numerator / denominator
    return fallback


def as_number(value) -> float:
    """Treat missing (None) numeric fields as 0."""
    return value or 0.0
