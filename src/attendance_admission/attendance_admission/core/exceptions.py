class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when a bearer token is missing, expired or invalid."""


class AuthorizationError(DomainError):
    """Raised when the token subject may not act for the claimed identity."""


class ConfigurationError(DomainError):
    """Raised when admission settings are missing or malformed."""


class EmbeddingDimensionError(DomainError):
    """Raised when embeddings being compared do not share one length."""


class TransportError(DomainError):
    """Raised by the client when the admission server cannot be reached."""


class AdmissionRejected(ValidationError):
    """A policy or state rule rejected the event; carries the outcome tag."""

    def __init__(self, error, message: str = ""):
        super().__init__(message or error.value)
        self.error = error
