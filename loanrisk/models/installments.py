"""Installment model and repayment-delay helpers."""

from datetime import datetime
import logging
from typing import Optional

from pydantic import Field

from .base import BaseDocumentModel, ensure_utc
from .enums import InstallmentStatus


logger = logging.getLogger(__name__)


class InstallmentModel(BaseDocumentModel):
    """Represents one scheduled repayment of a loan."""

    installment_id: str = Field(..., min_length=3)
    loan_id: str = Field(..., min_length=3)
    user_id: str = Field(..., min_length=3)

    installment_number: int = Field(..., ge=1)
    amount: float = Field(..., ge=0)
    fine_amount: float = Field(default=0.0, ge=0)
    due_date: datetime = Field(...)
    paid_date: Optional[datetime] = Field(default=None)
    status: InstallmentStatus = Field(default=InstallmentStatus.PENDING)
    days_overdue: int = Field(default=0, ge=0)

    def payment_delay_days(self) -> int:
        """Whole days between due and paid date, clamped at zero.

        Early payments and installments without a paid date count as zero.
        """
        if self.paid_date is None:
            return 0
        delta = ensure_utc(self.paid_date) - ensure_utc(self.due_date)
        return max(0, delta.days)
