"""PII redaction applied to every payload before it reaches the oracle."""

import logging
from typing import Any, Mapping


logger = logging.getLogger(__name__)

PII_KEYS = frozenset(
    {
        "fullName",
        "full_name",
        "name",
        "email",
        "phone",
        "cnic",
        "cnicNumber",
        "cnic_number",
        "address",
    }
)


def anonymize(value: Any) -> Any:
    """Return a deep copy of ``value`` with PII keys dropped at every level.

    Mappings are rebuilt without denylisted keys, lists and tuples are
    rebuilt element by element, and anything else is returned as is.
    Applying the function twice gives the same result as applying it once.
    """
    if isinstance(value, Mapping):
        return {key: anonymize(item) for key, item in value.items() if key not in PII_KEYS}
    if isinstance(value, list):
        return [anonymize(item) for item in value]
    if isinstance(value, tuple):
        return tuple(anonymize(item) for item in value)
    return value


def anonymize_payload(payload: Any) -> Any:
    """Redact a request payload that is about to be sent to the oracle."""
    logger.debug("Anonymizing payload before sending to the oracle")
    return anonymize(payload)
