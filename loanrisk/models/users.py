"""User domain model for borrower profiles and their anonymized projection."""

from datetime import date, datetime
import logging
from typing import Any, Dict, Optional

from pydantic import Field, field_validator

from .base import BaseDocumentModel, ensure_utc, utc_now
from .enums import EmploymentType, UserRole, UserStatus


logger = logging.getLogger(__name__)

UNKNOWN_AGE_BRACKET = "unknown"


def age_from_cnic(cnic_number: Optional[str], today: Optional[date] = None) -> Optional[int]:
    """Derive age in whole years from the DDMMYY digits of a CNIC.

    Digits 7-12 of the 13-digit number carry the holder's birth date. Years
    above 30 are read as 19xx, the rest as 20xx.

    Returns:
        Optional[int]: Age in years, or None when the digits are not a date.
    """
    if not cnic_number:
        return None
    digits = "".join(ch for ch in str(cnic_number) if ch.isdigit())
    if len(digits) < 12:
        return None
    try:
        day = int(digits[6:8])
        month = int(digits[8:10])
        year = int(digits[10:12])
        year += 1900 if year > 30 else 2000
        birth_date = date(year, month, day)
    except ValueError:
        logger.debug("CNIC digits do not encode a valid birth date.")
        return None
    today = today or utc_now().date()
    return int((today - birth_date).days // 365.25)


def age_bracket(age: Optional[int]) -> str:
    """Bucket an age into the coarse brackets shared with the oracle."""
    if not age or age < 18:
        return UNKNOWN_AGE_BRACKET
    if age < 25:
        return "18-24"
    if age < 35:
        return "25-34"
    if age < 45:
        return "35-44"
    if age < 55:
        return "45-54"
    return "55+"


def income_range(monthly_income: float) -> str:
    """Bucket monthly income into the ranges shared with the oracle."""
    if monthly_income < 30000:
        return "under-30k"
    if monthly_income < 50000:
        return "30k-50k"
    if monthly_income < 75000:
        return "50k-75k"
    if monthly_income < 100000:
        return "75k-100k"
    return "above-100k"


class UserModel(BaseDocumentModel):
    """Represents a borrower account, including PII that never leaves the core."""

    user_id: str = Field(..., min_length=3)
    full_name: str = Field(..., min_length=3, max_length=100)
    cnic_number: str = Field(..., min_length=13, max_length=13)
    phone: str = Field(..., min_length=8)
    email: str = Field(..., min_length=5)
    address: str = Field(..., min_length=3)
    city: str = Field(..., min_length=2)
    province: str = Field(..., min_length=2)
    monthly_income: float = Field(..., ge=0)
    employment_type: EmploymentType = Field(...)
    employer_name: Optional[str] = Field(default=None)
    status: UserStatus = Field(default=UserStatus.PENDING)
    role: UserRole = Field(default=UserRole.USER)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        """Store email addresses lower-cased."""
        return value.lower()

    def anonymized_profile(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Project the user onto bucketed, non-identifying attributes.

        Args:
            now: Reference time for age and account age; defaults to UTC now.

        Returns:
            Dict[str, Any]: Oracle-facing profile with camelCase keys.
        """
        now = ensure_utc(now or utc_now())
        account_age_days = (now - ensure_utc(self.created_at)).days
        return {
            "ageBracket": age_bracket(age_from_cnic(self.cnic_number, today=now.date())),
            "incomeRange": income_range(self.monthly_income),
            "employmentType": self.employment_type.value,
            "city": self.city,
            "province": self.province,
            "accountAge": account_age_days,
        }
