"""Service layer exports."""

from .factory import build_gateway, build_risk_engine
from .risk_engine import (
    CACHE_TTL_HOURS,
    RiskEngine,
    average_payment_delay,
    summarize_loan_history,
    validate_risk_scoring_output,
)

__all__ = [
    "CACHE_TTL_HOURS",
    "RiskEngine",
    "average_payment_delay",
    "build_gateway",
    "build_risk_engine",
    "summarize_loan_history",
    "validate_risk_scoring_output",
]
