"""Firestore implementations of the repository interfaces."""

import logging
from typing import List, Optional, Sequence

from loanrisk.core.firebase_client_manager import FirebaseClientManager
from loanrisk.models.exceptions import ModelNotFoundError
from loanrisk.models.installments import InstallmentModel
from loanrisk.models.loans import LoanModel
from loanrisk.models.repositories import (
    InstallmentRepository,
    LoanRepository,
    RiskProfileRepository,
    UserRepository,
)
from loanrisk.models.risk_profiles import RiskProfileModel
from loanrisk.models.users import UserModel


logger = logging.getLogger(__name__)

# Firestore rejects "in" filters with more than 30 values.
_IN_QUERY_LIMIT = 30


class FirestoreUserRepository(UserRepository):
    """Fetch user documents from Cloud Firestore."""

    def __init__(self, firebase_manager: FirebaseClientManager, collection_name: str = "users") -> None:
        self._firebase_manager = firebase_manager
        self._collection_name = collection_name
        logger.info("Initialized FirestoreUserRepository collection=%s", collection_name)

    def get_by_id(self, model_id: str) -> UserModel:
        """Fetch user by user identifier.

        Raises:
            ModelNotFoundError: If document does not exist.
        """
        try:
            payload = self._firebase_manager.get_document(self._collection_name, model_id)
            if payload is None or payload.get("is_deleted"):
                raise ModelNotFoundError("User not found: {0}".format(model_id))
            return UserModel.from_firestore(payload, doc_id=model_id)
        except ModelNotFoundError:
            raise
        except Exception:
            logger.exception("Failed to get user_id=%s", model_id)
            raise


class FirestoreLoanRepository(LoanRepository):
    """Fetch loan documents from Cloud Firestore."""

    def __init__(self, firebase_manager: FirebaseClientManager, collection_name: str = "loans") -> None:
        self._firebase_manager = firebase_manager
        self._collection_name = collection_name
        logger.info("Initialized FirestoreLoanRepository collection=%s", collection_name)

    def get_by_id(self, model_id: str) -> LoanModel:
        """Fetch loan by identifier.

        Raises:
            ModelNotFoundError: If document does not exist.
        """
        try:
            payload = self._firebase_manager.get_document(self._collection_name, model_id)
            if payload is None or payload.get("is_deleted"):
                raise ModelNotFoundError("Loan not found: {0}".format(model_id))
            return LoanModel.from_firestore(payload, doc_id=model_id)
        except ModelNotFoundError:
            raise
        except Exception:
            logger.exception("Failed to get loan_id=%s", model_id)
            raise

    def get_by_user_id(self, user_id: str) -> List[LoanModel]:
        """Return non-deleted loans for a user."""
        try:
            payloads = self._firebase_manager.query_documents(
                collection_name=self._collection_name,
                filters=[("user_id", "==", user_id), ("is_deleted", "==", False)],
            )
            return [LoanModel.from_firestore(payload, doc_id=payload.get("id")) for payload in payloads]
        except Exception:
            logger.exception("Failed to list loans for user_id=%s", user_id)
            raise


class FirestoreInstallmentRepository(InstallmentRepository):
    """Fetch installment documents from Cloud Firestore."""

    def __init__(self, firebase_manager: FirebaseClientManager, collection_name: str = "installments") -> None:
        self._firebase_manager = firebase_manager
        self._collection_name = collection_name
        logger.info("Initialized FirestoreInstallmentRepository collection=%s", collection_name)

    def get_by_loan_id(self, loan_id: str) -> List[InstallmentModel]:
        """Fetch installments for one loan ordered by installment number."""
        return self.get_by_loan_ids([loan_id])

    def get_by_loan_ids(self, loan_ids: Sequence[str]) -> List[InstallmentModel]:
        """Fetch installments for many loans, chunking the ``in`` filter."""
        ids = list(dict.fromkeys(loan_ids))
        installments: List[InstallmentModel] = []
        try:
            for start in range(0, len(ids), _IN_QUERY_LIMIT):
                chunk = ids[start : start + _IN_QUERY_LIMIT]
                payloads = self._firebase_manager.query_documents(
                    collection_name=self._collection_name,
                    filters=[("loan_id", "in", chunk), ("is_deleted", "==", False)],
                )
                installments.extend(
                    InstallmentModel.from_firestore(payload, doc_id=payload.get("id")) for payload in payloads
                )
        except Exception:
            logger.exception("Failed to list installments for loan_ids=%s", ids)
            raise
        installments.sort(key=lambda item: (item.loan_id, item.installment_number))
        return installments


class FirestoreRiskProfileRepository(RiskProfileRepository):
    """Persist risk profiles keyed by user id in Cloud Firestore."""

    def __init__(self, firebase_manager: FirebaseClientManager, collection_name: str = "risk_profiles") -> None:
        self._firebase_manager = firebase_manager
        self._collection_name = collection_name
        logger.info("Initialized FirestoreRiskProfileRepository collection=%s", collection_name)

    def get_by_user_id(self, user_id: str) -> Optional[RiskProfileModel]:
        """Return the stored profile for a user, or None."""
        try:
            payload = self._firebase_manager.get_document(self._collection_name, user_id)
            if payload is None:
                return None
            return RiskProfileModel.from_firestore(payload, doc_id=user_id)
        except Exception:
            logger.exception("Failed to get risk profile user_id=%s", user_id)
            raise

    def upsert(self, model: RiskProfileModel) -> RiskProfileModel:
        """Create or overwrite the profile in a single Firestore transaction."""
        try:
            stored = self._firebase_manager.transactional_upsert(
                collection_name=self._collection_name,
                document_id=model.user_id,
                build_payload=model.to_upsert_payload,
            )
            return RiskProfileModel.from_firestore(stored, doc_id=model.user_id)
        except Exception:
            logger.exception("Failed to upsert risk profile user_id=%s", model.user_id)
            raise
