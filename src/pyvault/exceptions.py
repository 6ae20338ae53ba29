"""Custom exception hierarchy for pyvault."""

from __future__ import annotations


class VaultError(Exception):
    """Base exception for all pyvault errors."""


class VaultConfigError(VaultError):
    """Invalid or missing configuration."""


class VaultNotFoundError(VaultError):
    """Entry is not available.

    Raised when the key is absent from the backend after resolution, or
    when a stale/missing entry could not be refreshed because the
    throttle gate denied an automatic refresh.
    """

    def __init__(self, key: str = "") -> None:
        self.key = key
        super().__init__(f"vault: not found: {key!r}" if key else "vault: not found")


class VaultBackendError(VaultError):
    """Local backend failure (I/O, serialization, capacity)."""

    def __init__(
        self,
        message: str,
        *,
        operation: str = "",
        key: str = "",
    ) -> None:
        self.operation = operation
        self.key = key
        super().__init__(message)


class VaultProviderError(VaultError):
    """External provider failed to fetch entries.

    Aborts the enclosing refresh. Entries already written by earlier
    providers stay in the backend.
    """

    def __init__(self, message: str, *, provider: str = "") -> None:
        self.provider = provider
        super().__init__(message)
