"""Risk profile document persisted from oracle-backed applicant scoring."""

from datetime import datetime
import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .base import BaseDocumentModel, ensure_utc, utc_now
from .enums import RiskLevel


logger = logging.getLogger(__name__)


class OracleProvenance(BaseModel):
    """Audit trail of the oracle answer a profile was built from."""

    raw: str = Field(..., min_length=1)
    model: str = Field(..., min_length=1)
    tokens_used: Any = Field(default=0)
    timestamp: datetime = Field(default_factory=utc_now)


class RiskProfileModel(BaseDocumentModel):
    """Cached applicant-level risk judgment, one document per user.

    Only ``risk_score`` bounds and a non-empty ``risk_reasons`` are enforced.
    The recommendation fields are stored exactly as the oracle sent them.
    """

    # Oracle reasons are persisted verbatim, padding included.
    model_config = ConfigDict(str_strip_whitespace=False)

    user_id: str = Field(..., min_length=1)
    risk_level: RiskLevel = Field(...)
    risk_score: float = Field(..., ge=0, le=100)
    risk_reasons: List[str] = Field(..., min_length=1)

    recommended_max_loan: Optional[Any] = Field(default=None)
    recommended_tenure: Optional[Any] = Field(default=None)
    default_probability: Optional[Any] = Field(default=None)

    oracle_response: OracleProvenance = Field(...)
    last_calculated: datetime = Field(default_factory=utc_now)

    def to_upsert_payload(self, current: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Build the full replacement document for an upsert.

        Args:
            current: The stored document, or None when creating.

        Returns:
            Dict[str, Any]: Payload carrying over ``created_at`` and bumping
            ``version`` from ``current``; nothing else is merged.
        """
        payload = self.to_firestore()
        payload.pop("id", None)
        payload["updated_at"] = utc_now()
        if current:
            payload["created_at"] = current.get("created_at", payload["created_at"])
            payload["version"] = int(current.get("version", 0) or 0) + 1
        else:
            payload["version"] = 1
        return payload

    def is_fresh(self, now: datetime, ttl_hours: float) -> bool:
        """Whether the profile was calculated less than ``ttl_hours`` ago."""
        age_hours = (ensure_utc(now) - ensure_utc(self.last_calculated)).total_seconds() / 3600.0
        return age_hours < ttl_hours
