"""Loan domain model, read by the risk core for aggregation."""

from datetime import datetime
import logging
from typing import Optional

from pydantic import Field, model_validator

from .base import BaseDocumentModel
from .enums import LoanStatus


logger = logging.getLogger(__name__)


class LoanModel(BaseDocumentModel):
    """Represents a disbursed loan and its running balance."""

    loan_id: str = Field(..., min_length=3)
    user_id: str = Field(..., min_length=3)

    principal_amount: float = Field(..., gt=0)
    interest_rate: float = Field(default=0.0, ge=0)
    tenure_months: int = Field(..., ge=1)
    monthly_installment: float = Field(default=0.0, ge=0)
    total_amount: float = Field(default=0.0, ge=0)
    outstanding_balance: float = Field(default=0.0, ge=0)
    total_repaid: float = Field(default=0.0, ge=0)

    start_date: Optional[datetime] = Field(default=None)
    end_date: Optional[datetime] = Field(default=None)
    status: LoanStatus = Field(default=LoanStatus.ACTIVE)
    defaulted_at: Optional[datetime] = Field(default=None)
    completed_at: Optional[datetime] = Field(default=None)

    @model_validator(mode="after")
    def _validate_dates(self) -> "LoanModel":
        """Reject schedules that end before they start."""
        if self.start_date and self.end_date and self.end_date < self.start_date:
            logger.error("Loan end_date precedes start_date loan_id=%s", self.loan_id)
            raise ValueError("end_date must not precede start_date")
        return self
