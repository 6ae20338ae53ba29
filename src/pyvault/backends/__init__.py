"""Local persistence backends.

A backend is the read-write side of a vault. Any object with the four
coroutine methods of :class:`Backend` can be used; implementations must
be safe for concurrent use. Backends that can produce isolated views of
their storage additionally implement :class:`NamespaceCapable`.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pyvault.models.entry import Entry


class Backend(Protocol):
    """Structural read-write persistence interface."""

    async def get(self, key: str) -> Entry:
        """Return the entry for *key* or raise ``VaultNotFoundError``."""
        ...

    async def set(self, entry: Entry) -> None:
        """Upsert *entry* by key."""
        ...

    async def delete(self, key: str) -> None:
        """Remove *key*. Missing keys are not an error."""
        ...

    async def list(self) -> list[Entry]:
        """Return every entry visible in the active scope."""
        ...


@runtime_checkable
class NamespaceCapable(Protocol):
    """Optional capability: scoped views over shared storage."""

    def with_namespace(self, namespace: str) -> Backend:
        ...


def scope(backend: Backend, namespace: str) -> Backend:
    """Return *backend* scoped to *namespace* when it supports it.

    Backends without the capability are returned unchanged.
    """
    if namespace and isinstance(backend, NamespaceCapable):
        return backend.with_namespace(namespace)
    return backend


__all__ = [
    "Backend",
    "NamespaceCapable",
    "scope",
]
