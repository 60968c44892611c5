"""Unit tests for Firestore-ready domain models."""

from datetime import date, timedelta
import unittest

from pydantic import ValidationError

from loanrisk.models.enums import RiskLevel
from loanrisk.models.exceptions import ModelValidationError
from loanrisk.models.loans import LoanModel
from loanrisk.models.risk_profiles import OracleProvenance, RiskProfileModel
from loanrisk.models.users import age_bracket, age_from_cnic, income_range
from loanrisk.tests.fakes import FIXED_NOW, make_user


def _profile(**overrides) -> RiskProfileModel:
    payload = {
        "user_id": "usr_100",
        "risk_level": RiskLevel.MEDIUM,
        "risk_score": 48,
        "risk_reasons": ["Stable income"],
        "oracle_response": OracleProvenance(raw='{"riskLevel":"MEDIUM"}', model="gemini-test", timestamp=FIXED_NOW),
        "last_calculated": FIXED_NOW,
    }
    payload.update(overrides)
    return RiskProfileModel(**payload)


class UserProjectionTests(unittest.TestCase):
    """Test the anonymized user projection and its buckets."""

    def test_anonymized_profile_has_only_bucketed_fields(self) -> None:
        profile = make_user().anonymized_profile(now=FIXED_NOW)

        self.assertEqual(
            profile,
            {
                "ageBracket": "25-34",
                "incomeRange": "50k-75k",
                "employmentType": "SALARIED",
                "city": "Lahore",
                "province": "Punjab",
                "accountAge": 400,
            },
        )

    def test_email_is_lower_cased(self) -> None:
        self.assertEqual(make_user().email, "ayesha@example.com")

    def test_age_from_cnic_reads_ddmmyy_digits(self) -> None:
        self.assertEqual(age_from_cnic("3520211506901", today=date(2025, 6, 1)), 34)
        self.assertEqual(age_from_cnic("3520211506901", today=date(2025, 6, 20)), 35)

    def test_age_from_cnic_two_digit_year_pivot(self) -> None:
        """Years up to 30 belong to this century."""
        self.assertEqual(age_from_cnic("3520200101051", today=date(2025, 6, 1)), 20)
        self.assertEqual(age_from_cnic("3520200101311", today=date(2025, 6, 1)), 94)

    def test_unparseable_cnic_gives_unknown_bracket(self) -> None:
        for cnic in ("3520299999901", "35202", None, ""):
            with self.subTest(cnic=cnic):
                self.assertIsNone(age_from_cnic(cnic, today=date(2025, 6, 1)))
        user = make_user(cnic_number="3520299139901")
        self.assertEqual(user.anonymized_profile(now=FIXED_NOW)["ageBracket"], "unknown")

    def test_minor_or_future_birth_date_gives_unknown_bracket(self) -> None:
        """Birth dates under 18 years ago, or in the future, are not bucketed."""
        # 01 Jan 2010 -> 15 years old; 01 Jan 2028 -> not yet born
        for cnic in ("3520200101101", "3520200101281"):
            with self.subTest(cnic=cnic):
                user = make_user(cnic_number=cnic)
                self.assertEqual(user.anonymized_profile(now=FIXED_NOW)["ageBracket"], "unknown")

    def test_age_brackets(self) -> None:
        cases = [(None, "unknown"), (0, "unknown"), (-3, "unknown"), (17, "unknown"), (18, "18-24"),
                 (24, "18-24"), (25, "25-34"), (35, "35-44"), (44, "35-44"), (45, "45-54"), (55, "55+"), (80, "55+")]
        for age, expected in cases:
            with self.subTest(age=age):
                self.assertEqual(age_bracket(age), expected)

    def test_income_ranges(self) -> None:
        cases = [(0, "under-30k"), (29999, "under-30k"), (30000, "30k-50k"), (50000, "50k-75k"),
                 (74999.5, "50k-75k"), (75000, "75k-100k"), (100000, "above-100k")]
        for income, expected in cases:
            with self.subTest(income=income):
                self.assertEqual(income_range(income), expected)

    def test_cnic_must_be_thirteen_characters(self) -> None:
        with self.assertRaises(ValidationError):
            make_user(cnic_number="12345")


class LoanModelTests(unittest.TestCase):
    """Test loan schedule rules."""

    def test_end_date_before_start_date_is_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            LoanModel(
                loan_id="loan_1",
                user_id="usr_1",
                principal_amount=10000,
                tenure_months=3,
                start_date=FIXED_NOW,
                end_date=FIXED_NOW - timedelta(days=1),
            )


class RiskLevelTests(unittest.TestCase):
    """Test strict risk level decoding."""

    def test_parse_accepts_exact_values(self) -> None:
        for value in ("LOW", "MEDIUM", "HIGH"):
            self.assertEqual(RiskLevel.parse(value).value, value)

    def test_parse_rejects_everything_else(self) -> None:
        for value in ("low", "CRITICAL", "", None, 1, ["LOW"]):
            with self.subTest(value=value):
                with self.assertRaises(ValueError):
                    RiskLevel.parse(value)


class RiskProfileModelTests(unittest.TestCase):
    """Test risk profile constraints, freshness and upsert payloads."""

    def test_score_bounds(self) -> None:
        _profile(risk_score=0)
        _profile(risk_score=100)
        for score in (-1, 100.5):
            with self.assertRaises(ValidationError):
                _profile(risk_score=score)

    def test_reasons_must_not_be_empty(self) -> None:
        with self.assertRaises(ValidationError):
            _profile(risk_reasons=[])

    def test_provenance_tokens_default_to_zero(self) -> None:
        self.assertEqual(_profile().oracle_response.tokens_used, 0)

    def test_freshness_window_is_exclusive(self) -> None:
        profile = _profile(last_calculated=FIXED_NOW - timedelta(hours=24))
        self.assertFalse(profile.is_fresh(FIXED_NOW, 24))
        self.assertTrue(profile.is_fresh(FIXED_NOW - timedelta(seconds=1), 24))

    def test_upsert_payload_for_new_document(self) -> None:
        payload = _profile(id="usr_100").to_upsert_payload(None)

        self.assertNotIn("id", payload)
        self.assertEqual(payload["version"], 1)
        self.assertNotIn("recommended_max_loan", payload)

    def test_upsert_payload_keeps_created_at_and_bumps_version(self) -> None:
        created = FIXED_NOW - timedelta(days=10)
        payload = _profile().to_upsert_payload({"created_at": created, "version": 3, "recommended_max_loan": 5})

        self.assertEqual(payload["created_at"], created)
        self.assertEqual(payload["version"], 4)
        self.assertNotIn("recommended_max_loan", payload)

    def test_firestore_roundtrip(self) -> None:
        profile = _profile(recommended_max_loan=75000, default_probability=0.2)
        restored = RiskProfileModel.from_firestore(profile.to_firestore(), doc_id="usr_100")

        self.assertEqual(restored.id, "usr_100")
        self.assertEqual(restored.risk_level, RiskLevel.MEDIUM)
        self.assertEqual(restored.recommended_max_loan, 75000)
        self.assertEqual(restored.oracle_response.model, "gemini-test")

    def test_from_firestore_wraps_validation_errors(self) -> None:
        with self.assertRaises(ModelValidationError):
            RiskProfileModel.from_firestore({"user_id": "usr_100"}, doc_id="usr_100")


if __name__ == "__main__":
    unittest.main()
