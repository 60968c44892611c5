"""Oracle-facing components: redaction, prompt compilation and the gateway."""

from .exceptions import (
    OracleConfigurationError,
    OracleDecodeError,
    OracleError,
    OracleTransportError,
)
from .gateway import GeminiTransport, OracleGateway, OracleTransport, decode_json_response
from .prompts import build_default_prediction_prompt, build_risk_scoring_prompt
from .redactor import PII_KEYS, anonymize, anonymize_payload

__all__ = [
    "OracleError",
    "OracleConfigurationError",
    "OracleDecodeError",
    "OracleTransportError",
    "OracleGateway",
    "OracleTransport",
    "GeminiTransport",
    "decode_json_response",
    "build_risk_scoring_prompt",
    "build_default_prediction_prompt",
    "PII_KEYS",
    "anonymize",
    "anonymize_payload",
]
