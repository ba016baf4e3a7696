"""
Error taxonomy for dynamic secret operations.

Every error carries a human readable ``message`` and a ``status_code`` hint
so an outer HTTP layer can map it without knowing the individual classes.
"""
from __future__ import annotations


class DynamicSecretError(Exception):
    """Base error for dynamic secret operations."""

    status_code: int = 400

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.__class__.__doc__ or self.__class__.__name__
        super().__init__(self.message)


class ForbiddenError(DynamicSecretError):
    """Actor lacks the required permission."""

    status_code = 403


class NotFoundError(DynamicSecretError):
    """Folder or dynamic secret does not exist."""

    status_code = 404


class ConflictError(DynamicSecretError):
    """Slug already in use within the folder."""

    status_code = 409


class ValidationError(DynamicSecretError):
    """Provider input rejected."""

    status_code = 422

    def __init__(self, reason: str | None = None) -> None:
        super().__init__(reason)
        self.reason = self.message


class UnknownProviderError(ValidationError):
    """Provider type is not registered."""

    def __init__(self, provider_type: str) -> None:
        super().__init__(f"Unknown dynamic secret provider: {provider_type}")
        self.provider_type = provider_type


class DecryptionError(DynamicSecretError):
    """Stored ciphertext could not be decrypted."""

    status_code = 500
