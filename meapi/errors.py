"""Error kinds raised by the profile store and mapped to HTTP status by the server."""

from __future__ import annotations


class ProfileError(Exception):
    """Base error.  ``message`` is safe to show to API clients."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ProfileError):
    """Required input is missing or empty."""


class ConflictError(ProfileError):
    """A profile already exists."""


class NotFoundError(ProfileError):
    """No profile exists yet."""


class StorageError(ProfileError):
    """The storage engine failed; the transaction has been rolled back."""

    def __init__(self, message: str = "Storage failure"):
        super().__init__(message)
