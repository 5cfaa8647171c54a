"""Exceptions."""

from typing import Any, Dict, Optional


class ConfigurationError(RuntimeError):
    """The API key or shared secret is not configured."""


class TransportError(IOError):
    """The call to LoginRadius failed below the API level."""


class ProviderError(RuntimeError):
    """LoginRadius answered with an ``ErrorCode``."""

    def __init__(self, code: Optional[int], description: str = '',
                 payload: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(f'{code}: {description}')
        self.code = code
        self.description = description
        self.payload = payload or {}


class RefreshError(RuntimeError):
    """Could not obtain a new access token."""


class UnexpectedError(RuntimeError):
    """Something went wrong that the customer can't fix; see the log."""


class NoSuchCustomer(RuntimeError):
    """There is no local customer with that login."""


class ValidationError(ValueError):
    """Input is missing required values."""

    def __init__(self, message: str,
                 fields: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.fields = fields or {}


class AuthenticationFailed(RuntimeError):
    """Failed to authenticate customer with provided credentials."""


class InvalidResetToken(RuntimeError):
    """The password reset token is wrong or has expired."""


class CustomerConflict(RuntimeError):
    """Another request created a customer with the same login first."""


class Unavailable(RuntimeError):
    """The customer store is temporarily unavailable."""
