"""Errors raised while talking to the generative-model oracle."""


class OracleError(Exception):
    """Base class for oracle gateway failures."""


class OracleConfigurationError(OracleError):
    """Raised before any network call when the oracle credential is missing."""


class OracleTransportError(OracleError):
    """Base for failures raised by custom :class:`OracleTransport` implementations.

    The gateway never wraps transport exceptions; the Gemini transport lets
    ``google.genai`` errors through as they are.
    """


class OracleDecodeError(OracleError):
    """Raised when no JSON value could be extracted from the oracle text."""
