"""Reusable enums for lending and risk domain models."""

from enum import Enum


class StringEnum(str, Enum):
    """Base enum class with string behavior for JSON serialization."""


class UserStatus(StringEnum):
    """Borrower account approval states."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class UserRole(StringEnum):
    """Role names used by the excluded HTTP layer."""

    USER = "USER"
    ADMIN = "ADMIN"


class EmploymentType(StringEnum):
    """Employment categories captured at onboarding."""

    SALARIED = "SALARIED"
    SELF_EMPLOYED = "SELF_EMPLOYED"
    BUSINESS_OWNER = "BUSINESS_OWNER"
    DAILY_WAGE = "DAILY_WAGE"
    UNEMPLOYED = "UNEMPLOYED"


class LoanStatus(StringEnum):
    """Loan lifecycle states."""

    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    DEFAULTED = "DEFAULTED"
    CANCELLED = "CANCELLED"


class InstallmentStatus(StringEnum):
    """Installment payment states."""

    PENDING = "PENDING"
    PAID = "PAID"
    OVERDUE = "OVERDUE"
    DEFAULTED = "DEFAULTED"
    WAIVED = "WAIVED"


class RiskLevel(StringEnum):
    """Closed set of risk levels the oracle may return."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    @classmethod
    def parse(cls, value: object) -> "RiskLevel":
        """Decode an oracle string, rejecting anything outside the enum.

        Raises:
            ValueError: If ``value`` is not exactly one of the member values.
        """
        if not isinstance(value, str):
            raise ValueError("risk level must be a string, got {0!r}".format(value))
        return cls(value)
