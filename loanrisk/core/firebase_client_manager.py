"""Firestore client manager for reads, queries and transactional upserts."""

from datetime import datetime, timezone
import logging
import os
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter
from google.oauth2 import service_account


logger = logging.getLogger(__name__)

FilterTuple = Tuple[str, str, Any]
UpsertBuilder = Callable[[Optional[Dict[str, Any]]], Dict[str, Any]]


def _utc_now() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(timezone.utc)


class FirebaseClientManager:
    """Encapsulates Firestore client setup and the data operations the core needs."""

    def __init__(self, project_id: Optional[str] = None, credentials_path: Optional[str] = None) -> None:
        """Initialize Firestore client.

        Args:
            project_id: Optional Google Cloud project id override.
            credentials_path: Optional path to a service account json file.
        """
        try:
            if credentials_path:
                os.environ["GOOGLE_APPLICATION_CREDENTIALS"] = credentials_path
                credentials = service_account.Credentials.from_service_account_file(credentials_path)
                self._client = firestore.Client(project=project_id, credentials=credentials)
            else:
                self._client = firestore.Client(project=project_id) if project_id else firestore.Client()
            logger.info("FirebaseClientManager initialized for project_id=%s", project_id)
        except Exception:
            logger.exception("Failed to initialize Firebase Firestore client.")
            raise

    def get_document(self, collection_name: str, document_id: str) -> Optional[Dict[str, Any]]:
        """Get one Firestore document by id."""
        try:
            snapshot = self._client.collection(collection_name).document(document_id).get()
            if not snapshot.exists:
                return None
            data = snapshot.to_dict() or {}
            data["id"] = snapshot.id
            return data
        except Exception:
            logger.exception(
                "Failed to get document collection=%s document_id=%s",
                collection_name,
                document_id,
            )
            raise

    def query_documents(
        self,
        collection_name: str,
        filters: Optional[Sequence[FilterTuple]] = None,
    ) -> List[Dict[str, Any]]:
        """Run a filtered query and return document payloads.

        Args:
            collection_name: Target collection.
            filters: Sequence of tuples `(field, op, value)`.
        """
        try:
            query = self._client.collection(collection_name)
            for field_name, operator, value in filters or []:
                query = query.where(filter=FieldFilter(field_name, operator, value))

            documents: List[Dict[str, Any]] = []
            for snapshot in query.stream():
                payload = snapshot.to_dict() or {}
                payload["id"] = snapshot.id
                documents.append(payload)
            return documents
        except Exception:
            logger.exception("Failed query for collection=%s", collection_name)
            raise

    def transactional_upsert(
        self,
        collection_name: str,
        document_id: str,
        build_payload: UpsertBuilder,
    ) -> Dict[str, Any]:
        """Create or fully replace one document inside a Firestore transaction.

        ``build_payload`` receives the current document (or ``None``) and
        returns the replacement. Firestore retries the callback when the
        document changes underneath the transaction.
        """
        ref = self._client.collection(collection_name).document(document_id)

        @firestore.transactional
        def _apply(transaction: firestore.Transaction) -> Dict[str, Any]:
            snapshot = ref.get(transaction=transaction)
            current = snapshot.to_dict() if snapshot.exists else None
            payload = dict(build_payload(current))
            payload["updated_at"] = payload.get("updated_at", _utc_now())
            transaction.set(ref, payload)
            return payload

        try:
            stored = _apply(self._client.transaction())
            stored["id"] = document_id
            return stored
        except Exception:
            logger.exception(
                "Failed transactional upsert collection=%s document_id=%s",
                collection_name,
                document_id,
            )
            raise
