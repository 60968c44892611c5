"""Repository implementations for Firestore and in-memory storage."""

from .memory_repositories import (
    InMemoryDocumentStore,
    InMemoryInstallmentRepository,
    InMemoryLoanRepository,
    InMemoryRepositories,
    InMemoryRiskProfileRepository,
    InMemoryUserRepository,
)

__all__ = [
    "InMemoryDocumentStore",
    "InMemoryInstallmentRepository",
    "InMemoryLoanRepository",
    "InMemoryRepositories",
    "InMemoryRiskProfileRepository",
    "InMemoryUserRepository",
]
