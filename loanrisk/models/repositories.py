"""Repository interfaces for datastore-agnostic model access."""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from .exceptions import ModelNotFoundError
from .installments import InstallmentModel
from .loans import LoanModel
from .risk_profiles import RiskProfileModel
from .users import UserModel


class UserRepository(ABC):
    """Read access to borrower accounts."""

    @abstractmethod
    def get_by_id(self, model_id: str) -> UserModel:
        """Fetch a user by identifier.

        Raises:
            ModelNotFoundError: If user does not exist.
        """


class LoanRepository(ABC):
    """Read access to loans."""

    @abstractmethod
    def get_by_id(self, model_id: str) -> LoanModel:
        """Fetch a loan by identifier.

        Raises:
            ModelNotFoundError: If loan does not exist.
        """

    @abstractmethod
    def get_by_user_id(self, user_id: str) -> List[LoanModel]:
        """Return every non-deleted loan owned by a user."""


class InstallmentRepository(ABC):
    """Read access to installment schedules."""

    @abstractmethod
    def get_by_loan_id(self, loan_id: str) -> List[InstallmentModel]:
        """Fetch installments belonging to one loan."""

    @abstractmethod
    def get_by_loan_ids(self, loan_ids: Sequence[str]) -> List[InstallmentModel]:
        """Fetch installments belonging to any of the given loans."""


class RiskProfileRepository(ABC):
    """Durable cache of applicant risk profiles keyed by user id."""

    @abstractmethod
    def get_by_user_id(self, user_id: str) -> Optional[RiskProfileModel]:
        """Return the stored profile for a user, or None."""

    @abstractmethod
    def upsert(self, model: RiskProfileModel) -> RiskProfileModel:
        """Atomically create or fully overwrite the profile for ``model.user_id``.

        The write keeps ``created_at`` from an existing document and bumps
        ``version``; every other field comes from ``model``.
        """


__all__ = [
    "ModelNotFoundError",
    "UserRepository",
    "LoanRepository",
    "InstallmentRepository",
    "RiskProfileRepository",
]
