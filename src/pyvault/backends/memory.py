"""In-memory backend.

The default backend of a :class:`~pyvault.vault.Vault`. Views created by
:meth:`MemoryBackend.with_namespace` share one dict and one lock with the
backend they came from.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

from pyvault.backends import Backend
from pyvault.exceptions import VaultNotFoundError
from pyvault.models.entry import Entry


@dataclass
class _MemoryState:
    lock: threading.Lock = field(default_factory=threading.Lock)
    entries: dict[tuple[str, str], Entry] = field(default_factory=dict)


class MemoryBackend:
    """Thread-safe dict-backed store with namespace support."""

    def __init__(self, *, _state: _MemoryState | None = None, _namespace: str = "") -> None:
        self._state = _state if _state is not None else _MemoryState()
        self._namespace = _namespace

    @property
    def namespace(self) -> str:
        return self._namespace

    def with_namespace(self, namespace: str) -> Backend:
        """Return a view scoped to *namespace* over the same storage.

        Namespaces nest: scoping ``"prod"`` to ``"eu"`` gives ``"prod/eu"``.
        """
        if self._namespace:
            namespace = f"{self._namespace}/{namespace}"
        return MemoryBackend(_state=self._state, _namespace=namespace)

    async def get(self, key: str) -> Entry:
        with self._state.lock:
            entry = self._state.entries.get((self._namespace, key))
        if entry is None:
            raise VaultNotFoundError(key)
        return entry

    async def set(self, entry: Entry) -> None:
        with self._state.lock:
            self._state.entries[(self._namespace, entry.key)] = entry

    async def delete(self, key: str) -> None:
        with self._state.lock:
            self._state.entries.pop((self._namespace, key), None)

    async def list(self) -> list[Entry]:
        """Return entries of this namespace only."""
        with self._state.lock:
            return [entry for (ns, _key), entry in self._state.entries.items() if ns == self._namespace]
