"""Schemas for the anonymized payloads compiled into oracle prompts."""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


class _OraclePayload(BaseModel):
    """Snake-case fields that serialize with the oracle's camelCase keys."""

    model_config = ConfigDict(populate_by_name=True)

    def to_payload(self) -> Dict[str, Any]:
        """Return the camelCase dictionary embedded in prompts."""
        return self.model_dump(by_alias=True)


class LoanHistoryAggregate(_OraclePayload):
    """Repayment summary across every loan a user has held.

    ``on_time_payments`` is paid minus overdue installments and may be
    negative when overdue installments outnumber paid ones.
    """

    total_loans: int = Field(..., ge=1, alias="totalLoans")
    completed_loans: int = Field(..., ge=0, alias="completedLoans")
    defaulted_loans: int = Field(..., ge=0, alias="defaultedLoans")
    on_time_payments: int = Field(..., alias="onTimePayments")
    late_payments: int = Field(..., ge=0, alias="latePayments")
    missed_payments: int = Field(..., ge=0, alias="missedPayments")
    average_payment_delay: int = Field(..., ge=0, alias="averagePaymentDelay")


class CurrentLoanSnapshot(_OraclePayload):
    """Balance view of the loan under default prediction."""

    principal_amount: float = Field(..., alias="principalAmount")
    outstanding_balance: float = Field(..., alias="outstandingBalance")
    months_remaining: int = Field(..., alias="monthsRemaining")


class PaymentBehavior(_OraclePayload):
    """Installment behaviour restricted to a single loan."""

    total_installments: int = Field(..., ge=0, alias="totalInstallments")
    paid_installments: int = Field(..., ge=0, alias="paidInstallments")
    overdue_installments: int = Field(..., ge=0, alias="overdueInstallments")
    average_delay_days: int = Field(..., ge=0, alias="averageDelayDays")
