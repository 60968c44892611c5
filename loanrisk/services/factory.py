"""Wiring of the risk engine from application settings."""

import logging
from typing import Optional

from loanrisk.ai.gateway import OracleGateway, OracleTransport
from loanrisk.core.config import AppSettings, load_settings
from loanrisk.core.logging_config import setup_logging
from loanrisk.repositories.memory_repositories import InMemoryRepositories

from .risk_engine import RiskEngine


logger = logging.getLogger(__name__)


def build_gateway(settings: AppSettings, transport: Optional[OracleTransport] = None) -> OracleGateway:
    """Create the oracle gateway; a missing credential only fails at call time."""
    return OracleGateway(
        api_key=settings.gemini_api_key,
        model_name=settings.gemini_model_name,
        transport=transport,
    )


def build_risk_engine(
    settings: Optional[AppSettings] = None,
    transport: Optional[OracleTransport] = None,
    repositories: Optional[InMemoryRepositories] = None,
) -> RiskEngine:
    """Build a :class:`RiskEngine` backed by Firestore or in-memory storage.

    Args:
        settings: Loaded settings; read from ``config.yml`` and the
            environment when omitted.
        transport: Optional oracle transport override.
        repositories: In-memory repositories to run against when Firebase
            is disabled. Callers seed users, loans and installments through
            this handle; a fresh empty set is created when omitted.
    """
    settings = settings or load_settings()
    setup_logging(settings.log_level)
    gateway = build_gateway(settings, transport=transport)

    if settings.firebase_enabled:
        from loanrisk.core.firebase_client_manager import FirebaseClientManager
        from loanrisk.repositories.firestore_repositories import (
            FirestoreInstallmentRepository,
            FirestoreLoanRepository,
            FirestoreRiskProfileRepository,
            FirestoreUserRepository,
        )

        manager = FirebaseClientManager(
            project_id=settings.firebase_project_id,
            credentials_path=settings.firebase_credentials_path,
        )
        logger.info("Risk engine using Firestore project_id=%s", settings.firebase_project_id)
        return RiskEngine(
            users=FirestoreUserRepository(manager, settings.users_collection),
            loans=FirestoreLoanRepository(manager, settings.loans_collection),
            installments=FirestoreInstallmentRepository(manager, settings.installments_collection),
            risk_profiles=FirestoreRiskProfileRepository(manager, settings.risk_profiles_collection),
            gateway=gateway,
            cache_ttl_hours=settings.cache_ttl_hours,
        )

    logger.warning("Firebase disabled. Risk engine is using in-memory repositories.")
    if repositories is None:
        repositories = InMemoryRepositories()
    return RiskEngine(
        users=repositories.users,
        loans=repositories.loans,
        installments=repositories.installments,
        risk_profiles=repositories.risk_profiles,
        gateway=gateway,
        cache_ttl_hours=settings.cache_ttl_hours,
    )
