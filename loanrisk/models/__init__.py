"""Public model package exports for the loan risk core."""

from .base import BaseDocumentModel, ensure_utc, utc_now
from .enums import (
    EmploymentType,
    InstallmentStatus,
    LoanStatus,
    RiskLevel,
    UserRole,
    UserStatus,
)
from .exceptions import (
    ModelError,
    ModelNotFoundError,
    ModelValidationError,
    RiskOutputValidationError,
)
from .installments import InstallmentModel
from .loans import LoanModel
from .oracle_payloads import CurrentLoanSnapshot, LoanHistoryAggregate, PaymentBehavior
from .repositories import (
    InstallmentRepository,
    LoanRepository,
    RiskProfileRepository,
    UserRepository,
)
from .risk_profiles import OracleProvenance, RiskProfileModel
from .users import UserModel

__all__ = [
    "BaseDocumentModel",
    "ensure_utc",
    "utc_now",
    "UserModel",
    "LoanModel",
    "InstallmentModel",
    "RiskProfileModel",
    "OracleProvenance",
    "LoanHistoryAggregate",
    "CurrentLoanSnapshot",
    "PaymentBehavior",
    "EmploymentType",
    "InstallmentStatus",
    "LoanStatus",
    "RiskLevel",
    "UserRole",
    "UserStatus",
    "ModelError",
    "ModelNotFoundError",
    "ModelValidationError",
    "RiskOutputValidationError",
    "UserRepository",
    "LoanRepository",
    "InstallmentRepository",
    "RiskProfileRepository",
]
