class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class StorageUnavailable(DomainError):
    """Raised when the local key-value medium cannot be read or written."""


class RemoteWriteFailed(DomainError):
    """Raised when the remote store rejects a write or cannot be reached."""


class RemoteReadFailed(DomainError):
    """Raised when the remote store cannot be read (e.g. roster download)."""
