"""Backend stored in the operating system keychain.

Uses :mod:`keyring`: Keychain on macOS, the Secret Service API on Linux
and Credential Manager on Windows. Entries are stored in their JSON form,
one credential per key.

Keyrings cannot enumerate their credentials portably, so a JSON list of
known keys is kept under :data:`INDEX_KEY` in the same service. The index
is what :meth:`KeychainBackend.list` walks.
"""

from __future__ import annotations

import asyncio
import json
import logging
import threading

import keyring
from keyring.backend import KeyringBackend
from keyring.errors import KeyringError, PasswordDeleteError
from pydantic import ValidationError

from pyvault.backends import Backend
from pyvault.config import VaultConfig
from pyvault.exceptions import VaultBackendError, VaultNotFoundError
from pyvault.models.entry import Entry

_logger = logging.getLogger(__name__)

DEFAULT_SERVICE = "vault"
INDEX_KEY = "__vault_index__"


def _check_key(key: str) -> None:
    if key == INDEX_KEY:
        raise ValueError(f"{INDEX_KEY!r} is reserved for the keychain index")


class KeychainBackend:
    """Keyring-backed store.

    Parameters
    ----------
    service : str
        Keyring service name. Namespaces are appended to it
        (``"vault"`` scoped to ``"prod"`` is ``"vault/prod"``).
    keyring_backend : KeyringBackend or None
        Explicit keyring implementation. Defaults to
        :func:`keyring.get_keyring` at construction time.
    """

    def __init__(
        self,
        *,
        service: str = DEFAULT_SERVICE,
        keyring_backend: KeyringBackend | None = None,
    ) -> None:
        self._service = service
        self._keyring = keyring_backend if keyring_backend is not None else keyring.get_keyring()
        # Serializes index read-modify-write cycles.
        self._index_lock = threading.Lock()

    @classmethod
    def from_config(cls, config: VaultConfig, *, keyring_backend: KeyringBackend | None = None) -> KeychainBackend:
        """Create a backend using ``config.keychain_service``."""
        return cls(service=config.keychain_service, keyring_backend=keyring_backend)

    @property
    def service(self) -> str:
        return self._service

    def with_namespace(self, namespace: str) -> Backend:
        return KeychainBackend(service=f"{self._service}/{namespace}", keyring_backend=self._keyring)

    # ------------------------------------------------------------------
    # Backend interface
    # ------------------------------------------------------------------

    async def get(self, key: str) -> Entry:
        _check_key(key)
        return await asyncio.to_thread(self._get, key)

    async def set(self, entry: Entry) -> None:
        _check_key(entry.key)
        await asyncio.to_thread(self._set, entry)

    async def delete(self, key: str) -> None:
        _check_key(key)
        await asyncio.to_thread(self._delete, key)

    async def list(self) -> list[Entry]:
        return await asyncio.to_thread(self._list)

    # ------------------------------------------------------------------
    # Blocking implementation (runs in a worker thread)
    # ------------------------------------------------------------------

    def _get(self, key: str) -> Entry:
        try:
            data = self._keyring.get_password(self._service, key)
        except KeyringError as exc:
            raise VaultBackendError(f"keychain: get {key!r}: {exc}", operation="get", key=key) from exc
        if data is None:
            raise VaultNotFoundError(key)

        try:
            return Entry.from_json(data)
        except ValidationError as exc:
            raise VaultBackendError(f"keychain: unmarshal {key!r}: {exc}", operation="get", key=key) from exc

    def _set(self, entry: Entry) -> None:
        try:
            self._keyring.set_password(self._service, entry.key, entry.to_json())
        except KeyringError as exc:
            raise VaultBackendError(f"keychain: set {entry.key!r}: {exc}", operation="set", key=entry.key) from exc
        self._add_to_index(entry.key)

    def _delete(self, key: str) -> None:
        try:
            self._keyring.delete_password(self._service, key)
        except PasswordDeleteError:
            _logger.debug("keychain: delete of missing key %r in %s", key, self._service)
        except KeyringError as exc:
            raise VaultBackendError(f"keychain: delete {key!r}: {exc}", operation="delete", key=key) from exc
        self._remove_from_index(key)

    def _list(self) -> list[Entry]:
        entries: list[Entry] = []
        for key in self._read_index():
            try:
                entries.append(self._get(key))
            except VaultNotFoundError:
                # Index is stale (entry removed outside this backend).
                continue
        return entries

    # ------------------------------------------------------------------
    # Key index
    # ------------------------------------------------------------------

    def _add_to_index(self, key: str) -> None:
        with self._index_lock:
            keys = self._load_index()
            if key in keys:
                return
            keys.append(key)
            self._write_index(keys)

    def _remove_from_index(self, key: str) -> None:
        with self._index_lock:
            keys = self._load_index()
            self._write_index([k for k in keys if k != key])

    def _load_index(self) -> list[str]:
        """Read the index for a read-modify-write cycle.

        Keyring failures raise so that a rewrite never drops known keys.
        """
        try:
            data = self._keyring.get_password(self._service, INDEX_KEY)
        except KeyringError as exc:
            raise VaultBackendError(f"keychain: index read: {exc}", operation="index") from exc
        if data is None:
            return []
        try:
            keys = json.loads(data)
        except json.JSONDecodeError:
            _logger.debug("keychain: index for %s is not JSON, ignoring", self._service)
            return []
        if not isinstance(keys, list):
            return []
        return [str(k) for k in keys]

    def _read_index(self) -> list[str]:
        """Best-effort index read for listing; an unreadable index lists nothing."""
        try:
            return self._load_index()
        except VaultBackendError:
            _logger.debug("keychain: index read failed for %s", self._service, exc_info=True)
            return []

    def _write_index(self, keys: list[str]) -> None:
        try:
            self._keyring.set_password(self._service, INDEX_KEY, json.dumps(keys))
        except KeyringError as exc:
            raise VaultBackendError(f"keychain: index write: {exc}", operation="index") from exc
