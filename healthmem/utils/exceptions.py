"""
Custom exception hierarchy for healthmem.

Provides structured error types for the node store, the hierarchy
and the generation backends. All exceptions inherit from HealthMemoryError
for easy catching.
"""


class HealthMemoryError(Exception):
    """
    Base exception for all healthmem errors.
    All custom exceptions should inherit from this class.
    """

    def __init__(self, message: str, context: dict | None = None):
        """
        Initialize healthmem error.
        Args:
            message: Error message
            context: Optional context dictionary with additional error details
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}


class StoreError(HealthMemoryError):
    """
    Node store operation errors.
    Raised when the underlying document store fails. Never retried here.
    """

    pass


class InvalidInputError(HealthMemoryError):
    """
    Validation errors.
    Raised when a node, its metadata or a request argument is malformed.
    """

    pass


class NotFoundError(HealthMemoryError):
    """
    Resource not found errors.
    Raised when a requested node or local model doesn't exist.
    """

    pass


class ConfigurationError(HealthMemoryError):
    """
    Configuration errors.
    Raised when configuration is invalid or missing required values.
    """

    pass


class LLMError(HealthMemoryError):
    """Base class for text generation errors."""

    pass


class BackendUnavailableError(LLMError):
    """
    No generation backend is eligible under the current routing state.

    This is an expected outcome (offline, budget spent, strategy constraints)
    and callers are expected to branch on it.
    """

    pass


class BackendFailureError(LLMError):
    """
    A reachable backend failed.
    Raised on API errors, timeouts and malformed responses.
    """

    pass


class ModelAcquisitionError(HealthMemoryError):
    """
    Local model download or cache errors.
    """

    pass
