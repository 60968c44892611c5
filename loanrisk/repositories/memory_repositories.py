"""In-memory repositories for local runs and tests when Firestore is disabled."""

import copy
import logging
from threading import RLock
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

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

FilterTuple = Tuple[str, str, Any]


class InMemoryDocumentStore:
    """Thread-safe dict-of-dicts stand-in for Firestore collections."""

    def __init__(self) -> None:
        self._lock = RLock()
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def set_document(self, collection_name: str, document_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Create or replace one document."""
        with self._lock:
            bucket = self._collections.setdefault(collection_name, {})
            bucket[document_id] = copy.deepcopy(payload)
            return self._with_id(bucket[document_id], document_id)

    def get_document(self, collection_name: str, document_id: str) -> Optional[Dict[str, Any]]:
        """Fetch one document by id."""
        with self._lock:
            payload = self._collections.get(collection_name, {}).get(document_id)
            if payload is None:
                return None
            return self._with_id(payload, document_id)

    def query_documents(
        self,
        collection_name: str,
        filters: Optional[Sequence[FilterTuple]] = None,
    ) -> List[Dict[str, Any]]:
        """Return copies of every document matching all filters."""
        with self._lock:
            records: List[Dict[str, Any]] = []
            for document_id, payload in self._collections.get(collection_name, {}).items():
                row = self._with_id(payload, document_id)
                if self._matches_filters(row, filters or []):
                    records.append(row)
            return records

    def transactional_upsert(
        self,
        collection_name: str,
        document_id: str,
        build_payload: Callable[[Optional[Dict[str, Any]]], Dict[str, Any]],
    ) -> Dict[str, Any]:
        """Read, rebuild and replace one document under the store lock."""
        with self._lock:
            current = self.get_document(collection_name, document_id)
            return self.set_document(collection_name, document_id, build_payload(current))

    @staticmethod
    def _with_id(payload: Dict[str, Any], document_id: str) -> Dict[str, Any]:
        row = copy.deepcopy(payload)
        row.setdefault("id", document_id)
        return row

    @staticmethod
    def _matches_filters(payload: Dict[str, Any], filters: Sequence[FilterTuple]) -> bool:
        """Evaluate the subset of Firestore operators the repositories use."""
        for field_name, operator, expected_value in filters:
            actual_value = payload.get(field_name)
            if operator == "==":
                if actual_value != expected_value:
                    return False
            elif operator == "in":
                if actual_value not in expected_value:
                    return False
            else:
                raise ValueError("Unsupported filter operator: {0}".format(operator))
        return True


class InMemoryUserRepository(UserRepository):
    """User repository backed by an :class:`InMemoryDocumentStore`."""

    collection_name = "users"

    def __init__(self, store: InMemoryDocumentStore) -> None:
        self._store = store

    def add(self, model: UserModel) -> UserModel:
        """Seed a user document."""
        stored = self._store.set_document(self.collection_name, model.user_id, model.to_firestore())
        return UserModel.from_firestore(stored, doc_id=model.user_id)

    def get_by_id(self, model_id: str) -> UserModel:
        payload = self._store.get_document(self.collection_name, model_id)
        if payload is None or payload.get("is_deleted"):
            raise ModelNotFoundError("User not found: {0}".format(model_id))
        return UserModel.from_firestore(payload, doc_id=model_id)


class InMemoryLoanRepository(LoanRepository):
    """Loan repository backed by an :class:`InMemoryDocumentStore`."""

    collection_name = "loans"

    def __init__(self, store: InMemoryDocumentStore) -> None:
        self._store = store

    def add(self, model: LoanModel) -> LoanModel:
        """Seed a loan document."""
        stored = self._store.set_document(self.collection_name, model.loan_id, model.to_firestore())
        return LoanModel.from_firestore(stored, doc_id=model.loan_id)

    def get_by_id(self, model_id: str) -> LoanModel:
        payload = self._store.get_document(self.collection_name, model_id)
        if payload is None or payload.get("is_deleted"):
            raise ModelNotFoundError("Loan not found: {0}".format(model_id))
        return LoanModel.from_firestore(payload, doc_id=model_id)

    def get_by_user_id(self, user_id: str) -> List[LoanModel]:
        payloads = self._store.query_documents(
            self.collection_name,
            filters=[("user_id", "==", user_id), ("is_deleted", "==", False)],
        )
        return [LoanModel.from_firestore(payload, doc_id=payload.get("id")) for payload in payloads]


class InMemoryInstallmentRepository(InstallmentRepository):
    """Installment repository backed by an :class:`InMemoryDocumentStore`."""

    collection_name = "installments"

    def __init__(self, store: InMemoryDocumentStore) -> None:
        self._store = store

    def add(self, model: InstallmentModel) -> InstallmentModel:
        """Seed an installment document."""
        stored = self._store.set_document(self.collection_name, model.installment_id, model.to_firestore())
        return InstallmentModel.from_firestore(stored, doc_id=model.installment_id)

    def get_by_loan_id(self, loan_id: str) -> List[InstallmentModel]:
        return self.get_by_loan_ids([loan_id])

    def get_by_loan_ids(self, loan_ids: Sequence[str]) -> List[InstallmentModel]:
        payloads = self._store.query_documents(
            self.collection_name,
            filters=[("loan_id", "in", list(loan_ids)), ("is_deleted", "==", False)],
        )
        installments = [InstallmentModel.from_firestore(payload, doc_id=payload.get("id")) for payload in payloads]
        installments.sort(key=lambda item: (item.loan_id, item.installment_number))
        return installments


class InMemoryRiskProfileRepository(RiskProfileRepository):
    """Risk profile cache backed by an :class:`InMemoryDocumentStore`."""

    collection_name = "risk_profiles"

    def __init__(self, store: InMemoryDocumentStore) -> None:
        self._store = store

    def get_by_user_id(self, user_id: str) -> Optional[RiskProfileModel]:
        payload = self._store.get_document(self.collection_name, user_id)
        if payload is None:
            return None
        return RiskProfileModel.from_firestore(payload, doc_id=user_id)

    def upsert(self, model: RiskProfileModel) -> RiskProfileModel:
        stored = self._store.transactional_upsert(
            self.collection_name,
            model.user_id,
            model.to_upsert_payload,
        )
        logger.debug("Upserted in-memory risk profile user_id=%s version=%s", model.user_id, stored.get("version"))
        return RiskProfileModel.from_firestore(stored, doc_id=model.user_id)


class InMemoryRepositories:
    """Bundle of in-memory repositories sharing one document store."""

    def __init__(self, store: Optional[InMemoryDocumentStore] = None) -> None:
        self.store = store or InMemoryDocumentStore()
        self.users = InMemoryUserRepository(self.store)
        self.loans = InMemoryLoanRepository(self.store)
        self.installments = InMemoryInstallmentRepository(self.store)
        self.risk_profiles = InMemoryRiskProfileRepository(self.store)
