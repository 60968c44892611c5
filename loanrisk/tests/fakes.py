"""Shared fakes and builders for the risk core test suite."""

from datetime import datetime, timedelta, timezone
import json
from typing import Any, List, Optional, Union

from loanrisk.ai.gateway import OracleGateway, OracleTransport
from loanrisk.models.enums import EmploymentType, InstallmentStatus, LoanStatus
from loanrisk.models.installments import InstallmentModel
from loanrisk.models.loans import LoanModel
from loanrisk.models.repositories import RiskProfileRepository
from loanrisk.models.users import UserModel
from loanrisk.repositories.memory_repositories import InMemoryRepositories
from loanrisk.services.risk_engine import RiskEngine


FIXED_NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)
MODEL_NAME = "gemini-test"

VALID_SCORING_REPLY = {
    "riskLevel": "MEDIUM",
    "riskScore": 48,
    "riskReasons": ["Stable salaried income", "One late installment"],
    "recommendedMaxLoan": 75000,
    "recommendedTenure": 12,
    "defaultProbability": 0.18,
    "tokensUsed": 812,
}


class ScriptedTransport(OracleTransport):
    """Returns queued replies and records every prompt it receives."""

    def __init__(self, replies: Optional[List[Union[str, Exception]]] = None) -> None:
        self.replies: List[Union[str, Exception]] = list(replies or [])
        self.prompts: List[str] = []

    def queue_json(self, payload: Any) -> None:
        self.replies.append(json.dumps(payload))

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.replies:
            raise AssertionError("ScriptedTransport called with no reply queued")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


class CountingRiskProfileRepository(RiskProfileRepository):
    """Wraps a risk profile repository and counts upserts."""

    def __init__(self, inner: Any) -> None:
        self._inner = inner
        self.upsert_calls = 0

    def get_by_user_id(self, user_id: str):
        return self._inner.get_by_user_id(user_id)

    def upsert(self, model):
        self.upsert_calls += 1
        return self._inner.upsert(model)


def make_user(user_id: str = "usr_100", **overrides: Any) -> UserModel:
    payload = {
        "user_id": user_id,
        "full_name": "Ayesha Khan",
        # DDMMYY = 150690 -> born 15 June 1990
        "cnic_number": "3520211506901",
        "phone": "03001234567",
        "email": "Ayesha@Example.com",
        "address": "House 12, Street 4, Gulberg",
        "city": "Lahore",
        "province": "Punjab",
        "monthly_income": 62000,
        "employment_type": EmploymentType.SALARIED,
        "created_at": FIXED_NOW - timedelta(days=400),
    }
    payload.update(overrides)
    return UserModel(**payload)


def make_loan(loan_id: str, user_id: str = "usr_100", **overrides: Any) -> LoanModel:
    payload = {
        "loan_id": loan_id,
        "user_id": user_id,
        "principal_amount": 50000,
        "interest_rate": 18,
        "tenure_months": 6,
        "monthly_installment": 9000,
        "outstanding_balance": 27000,
        "status": LoanStatus.ACTIVE,
    }
    payload.update(overrides)
    return LoanModel(**payload)


def make_installment(
    installment_id: str,
    loan_id: str,
    number: int,
    status: InstallmentStatus,
    due_date: datetime,
    paid_date: Optional[datetime] = None,
    user_id: str = "usr_100",
) -> InstallmentModel:
    return InstallmentModel(
        installment_id=installment_id,
        loan_id=loan_id,
        user_id=user_id,
        installment_number=number,
        amount=9000,
        due_date=due_date,
        paid_date=paid_date,
        status=status,
    )


def build_engine(transport: Optional[ScriptedTransport] = None, api_key: Optional[str] = "test-key"):
    """Return ``(engine, repositories, transport, counting_profiles)`` over in-memory storage."""
    repositories = InMemoryRepositories()
    transport = transport or ScriptedTransport()
    profiles = CountingRiskProfileRepository(repositories.risk_profiles)
    gateway = OracleGateway(api_key=api_key, model_name=MODEL_NAME, transport=transport)
    engine = RiskEngine(
        users=repositories.users,
        loans=repositories.loans,
        installments=repositories.installments,
        risk_profiles=profiles,
        gateway=gateway,
        clock=lambda: FIXED_NOW,
    )
    return engine, repositories, transport, profiles
