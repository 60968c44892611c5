"""Oracle-backed applicant risk scoring and active-loan default prediction."""

from datetime import datetime
import json
import logging
import math
from numbers import Real
from typing import Any, Callable, Dict, List, Optional, Sequence

from loanrisk.ai.gateway import OracleGateway
from loanrisk.ai.prompts import build_default_prediction_prompt, build_risk_scoring_prompt
from loanrisk.ai.redactor import anonymize_payload
from loanrisk.models.base import utc_now
from loanrisk.models.enums import InstallmentStatus, LoanStatus, RiskLevel
from loanrisk.models.exceptions import RiskOutputValidationError
from loanrisk.models.installments import InstallmentModel
from loanrisk.models.loans import LoanModel
from loanrisk.models.oracle_payloads import CurrentLoanSnapshot, LoanHistoryAggregate, PaymentBehavior
from loanrisk.models.repositories import (
    InstallmentRepository,
    LoanRepository,
    RiskProfileRepository,
    UserRepository,
)
from loanrisk.models.risk_profiles import OracleProvenance, RiskProfileModel


logger = logging.getLogger(__name__)

CACHE_TTL_HOURS = 24


def _round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values."""
    return int(math.floor(value + 0.5))


def average_payment_delay(paid_installments: Sequence[InstallmentModel]) -> int:
    """Mean clamped delay in days over paid installments, 0 when there are none."""
    if not paid_installments:
        return 0
    total_delay = sum(item.payment_delay_days() for item in paid_installments)
    return _round_half_up(total_delay / len(paid_installments))


def _with_status(installments: Sequence[InstallmentModel], status: InstallmentStatus) -> List[InstallmentModel]:
    return [item for item in installments if item.status == status]


def summarize_loan_history(
    loans: Sequence[LoanModel],
    installments: Sequence[InstallmentModel],
) -> Optional[LoanHistoryAggregate]:
    """Aggregate repayment behaviour across all of a user's loans.

    Returns:
        Optional[LoanHistoryAggregate]: None when the user has no loans.
    """
    if not loans:
        return None
    paid = _with_status(installments, InstallmentStatus.PAID)
    overdue = _with_status(installments, InstallmentStatus.OVERDUE)
    defaulted = _with_status(installments, InstallmentStatus.DEFAULTED)
    return LoanHistoryAggregate(
        total_loans=len(loans),
        completed_loans=len([loan for loan in loans if loan.status == LoanStatus.COMPLETED]),
        defaulted_loans=len([loan for loan in loans if loan.status == LoanStatus.DEFAULTED]),
        on_time_payments=len(paid) - len(overdue),
        late_payments=len(overdue),
        missed_payments=len(defaulted),
        average_payment_delay=average_payment_delay(paid),
    )


def validate_risk_scoring_output(output: Any) -> RiskLevel:
    """Check decoded oracle output against the risk profile contract.

    Only ``riskLevel``, ``riskScore`` and ``riskReasons`` are checked; the
    optional recommendation fields pass through untouched.

    Returns:
        RiskLevel: The decoded risk level.

    Raises:
        RiskOutputValidationError: On the first field that breaks the contract.
    """
    if not isinstance(output, dict):
        raise RiskOutputValidationError("Invalid riskLevel in oracle response", field="riskLevel")

    try:
        risk_level = RiskLevel.parse(output.get("riskLevel"))
    except ValueError:
        raise RiskOutputValidationError("Invalid riskLevel in oracle response", field="riskLevel")

    risk_score = output.get("riskScore")
    if (
        isinstance(risk_score, bool)
        or not isinstance(risk_score, Real)
        or not 0 <= risk_score <= 100
    ):
        raise RiskOutputValidationError("Invalid riskScore in oracle response", field="riskScore")

    risk_reasons = output.get("riskReasons")
    if (
        not isinstance(risk_reasons, list)
        or not risk_reasons
        or not all(isinstance(reason, str) for reason in risk_reasons)
    ):
        raise RiskOutputValidationError("Invalid riskReasons in oracle response", field="riskReasons")

    return risk_level


class RiskEngine:
    """Coordinates aggregation, redaction, the oracle, validation and caching.

    There is no lock around the cache check: concurrent calls for one user
    may both reach the oracle, and the later upsert wins.
    """

    def __init__(
        self,
        users: UserRepository,
        loans: LoanRepository,
        installments: InstallmentRepository,
        risk_profiles: RiskProfileRepository,
        gateway: OracleGateway,
        cache_ttl_hours: float = CACHE_TTL_HOURS,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._users = users
        self._loans = loans
        self._installments = installments
        self._risk_profiles = risk_profiles
        self._gateway = gateway
        self._cache_ttl_hours = cache_ttl_hours
        self._clock = clock

    def score_applicant(
        self,
        user_id: str,
        requested_amount: Optional[float] = None,
        requested_tenure: Optional[int] = None,
        force_recalculate: Optional[bool] = None,
        recalculate: Optional[bool] = None,
    ) -> RiskProfileModel:
        """Return the applicant's risk profile, reusing a fresh cached one.

        Args:
            user_id: Borrower identifier; also the cache key.
            requested_amount: Amount the applicant is asking for.
            requested_tenure: Tenure in months the applicant is asking for.
            force_recalculate: Skip the cache and always ask the oracle.
            recalculate: Older name for ``force_recalculate``.

        Raises:
            ModelNotFoundError: If the user does not exist.
            OracleConfigurationError: If the oracle credential is missing.
            OracleDecodeError: If the oracle reply holds no JSON.
            RiskOutputValidationError: If the decoded reply breaks the contract.
        """
        if force_recalculate is not None:
            force = bool(force_recalculate)
        else:
            force = bool(recalculate)
        logger.info(
            "Starting risk score calculation user_id=%s requested_amount=%s requested_tenure=%s force=%s",
            user_id,
            requested_amount,
            requested_tenure,
            force,
        )

        if not force:
            existing = self._risk_profiles.get_by_user_id(user_id)
            if existing is not None and existing.is_fresh(self._clock(), self._cache_ttl_hours):
                logger.info("Using cached risk profile user_id=%s last_calculated=%s", user_id, existing.last_calculated)
                return existing

        try:
            oracle_input = self.build_applicant_input(user_id, requested_amount, requested_tenure)
            decoded = self._gateway.invoke(build_risk_scoring_prompt(oracle_input))
            risk_level = validate_risk_scoring_output(decoded)
        except Exception:
            logger.exception("Risk score calculation failed user_id=%s", user_id)
            raise

        now = self._clock()
        tokens_used = decoded.get("tokensUsed")
        profile = RiskProfileModel(
            user_id=user_id,
            risk_level=risk_level,
            risk_score=decoded["riskScore"],
            risk_reasons=decoded["riskReasons"],
            recommended_max_loan=decoded.get("recommendedMaxLoan"),
            recommended_tenure=decoded.get("recommendedTenure"),
            default_probability=decoded.get("defaultProbability"),
            oracle_response=OracleProvenance(
                raw=json.dumps(decoded, separators=(",", ":"), ensure_ascii=False),
                model=self._gateway.model_name,
                tokens_used=0 if tokens_used is None else tokens_used,
                timestamp=now,
            ),
            last_calculated=now,
        )
        persisted = self._risk_profiles.upsert(profile)
        logger.info(
            "Risk score calculated successfully user_id=%s risk_level=%s risk_score=%s",
            user_id,
            persisted.risk_level.value,
            persisted.risk_score,
        )
        return persisted

    def build_applicant_input(
        self,
        user_id: str,
        requested_amount: Optional[float] = None,
        requested_tenure: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Assemble the anonymized payload for applicant scoring.

        ``loanHistory`` and the requested terms are left out entirely when
        absent rather than sent as zeros or nulls.

        Raises:
            ModelNotFoundError: If the user does not exist.
        """
        user = self._users.get_by_id(user_id)
        loans = self._loans.get_by_user_id(user_id)
        installments: List[InstallmentModel] = []
        if loans:
            installments = self._installments.get_by_loan_ids([loan.loan_id for loan in loans])
        loan_history = summarize_loan_history(loans, installments)

        # The projection is already bucketed; redact again in case it grows a PII field.
        oracle_input: Dict[str, Any] = dict(anonymize_payload(user.anonymized_profile(now=self._clock())))
        if requested_amount is not None:
            oracle_input["requestedAmount"] = requested_amount
        if requested_tenure is not None:
            oracle_input["requestedTenure"] = requested_tenure
        if loan_history is not None:
            oracle_input["loanHistory"] = loan_history.to_payload()
        return oracle_input

    def predict_loan_default(self, loan_id: str) -> Any:
        """Ask the oracle for the default outlook of one active loan.

        The decoded reply is returned exactly as received; none of
        ``defaultProbability``, ``defaultRisk``, ``warningSignals`` or
        ``recommendations`` is guaranteed to be present or well typed.

        Raises:
            ModelNotFoundError: If the loan or its owner does not exist.
            OracleConfigurationError: If the oracle credential is missing.
            OracleDecodeError: If the oracle reply holds no JSON.
        """
        logger.info("Starting default prediction loan_id=%s", loan_id)
        try:
            oracle_input = self.build_active_loan_input(loan_id)
            response = self._gateway.invoke(build_default_prediction_prompt(oracle_input))
        except Exception:
            logger.exception("Default prediction failed loan_id=%s", loan_id)
            raise
        logger.info("Default prediction completed loan_id=%s", loan_id)
        return response

    def build_active_loan_input(self, loan_id: str) -> Dict[str, Any]:
        """Assemble the payload for default prediction on a single loan.

        ``financialProfile`` is the owner's anonymized projection as is; unlike
        applicant scoring it does not go through :func:`anonymize_payload` again.

        Raises:
            ModelNotFoundError: If the loan or its owner does not exist.
        """
        loan = self._loans.get_by_id(loan_id)
        owner = self._users.get_by_id(loan.user_id)
        installments = self._installments.get_by_loan_id(loan_id)

        paid = _with_status(installments, InstallmentStatus.PAID)
        overdue = _with_status(installments, InstallmentStatus.OVERDUE)

        current_loan = CurrentLoanSnapshot(
            principal_amount=loan.principal_amount,
            outstanding_balance=loan.outstanding_balance,
            months_remaining=loan.tenure_months - len(paid),
        )
        payment_behavior = PaymentBehavior(
            total_installments=len(installments),
            paid_installments=len(paid),
            overdue_installments=len(overdue),
            average_delay_days=average_payment_delay(paid),
        )
        return {
            "currentLoan": current_loan.to_payload(),
            "paymentBehavior": payment_behavior.to_payload(),
            "financialProfile": owner.anonymized_profile(now=self._clock()),
        }
