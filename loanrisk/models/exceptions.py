"""Custom exceptions for model and repository layers."""


class ModelError(Exception):
    """Base class for model-related failures."""


class ModelValidationError(ModelError):
    """Raised when model data fails custom business validation."""


class ModelNotFoundError(ModelError):
    """Raised when a requested document does not exist."""


class RiskOutputValidationError(ModelValidationError):
    """Raised when decoded oracle output breaks the risk profile contract.

    Attributes:
        field: Name of the offending oracle field (``riskLevel``,
            ``riskScore`` or ``riskReasons``).
    """

    def __init__(self, message: str, field: str) -> None:
        super().__init__(message)
        self.field = field
