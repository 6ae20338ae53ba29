"""Resolution engine: a local backend kept fresh from external providers.

Resolution flow for :meth:`Vault.get`:

1. Look the key up in the backend.
2. If found and not expired, return it.
3. If missing or expired, refresh from every provider (throttled: at most
   once per TTL period, or once per vault lifetime without a TTL).
4. Look the key up again.

:meth:`Vault.refresh` is always available and ignores the throttle.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Awaitable, Callable, Sequence
from datetime import UTC, datetime, timedelta
from typing import TypeVar

from pyvault._redact import redact_for_log
from pyvault.backends import Backend, NamespaceCapable, scope
from pyvault.backends.memory import MemoryBackend
from pyvault.config import VaultConfig
from pyvault.exceptions import (
    VaultBackendError,
    VaultConfigError,
    VaultError,
    VaultNotFoundError,
    VaultProviderError,
)
from pyvault.models.entry import MANUAL_SOURCE, Entry
from pyvault.policy import is_expired, should_auto_refresh
from pyvault.providers import Provider, coerce_entries, provider_name

_logger = logging.getLogger(__name__)

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _as_timedelta(ttl: timedelta | float) -> timedelta:
    if not isinstance(ttl, timedelta):
        try:
            ttl = timedelta(seconds=ttl)
        except (OverflowError, ValueError) as exc:
            raise VaultConfigError(f"ttl must be a finite number of seconds, got {ttl!r}") from exc
    if ttl < timedelta(0):
        raise VaultConfigError(f"ttl must be >= 0, got {ttl}")
    return ttl


class Vault:
    """Backend that resolves entries from providers and caches them locally.

    Usage::

        vault = Vault(
            backend=KeychainBackend(),
            providers=[FunctionProvider(load_from_ssm)],
            namespace="prod",
            ttl=timedelta(days=7),
        )
        entry = await vault.get("db-password")

    A vault is itself a :class:`~pyvault.backends.Backend`, so vaults can
    be stacked.

    Parameters
    ----------
    backend : Backend or None
        Local store. Defaults to a fresh :class:`MemoryBackend`.
    providers : Sequence[Provider]
        Consulted in this order on refresh; later providers overwrite
        earlier ones on key collisions.
    namespace : str
        Scope applied to *backend* when it is :class:`NamespaceCapable`.
        Ignored otherwise.
    ttl : timedelta or float
        Entry time-to-live (seconds when a number). Zero disables expiry.
    clock : Callable[[], datetime]
        Source of "now" timestamps. Naive results are taken as UTC.
    """

    def __init__(
        self,
        *,
        backend: Backend | None = None,
        providers: Sequence[Provider] = (),
        namespace: str = "",
        ttl: timedelta | float = timedelta(0),
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        store: Backend = backend if backend is not None else MemoryBackend()
        if namespace and not isinstance(store, NamespaceCapable):
            _logger.debug(
                "Backend %s does not support namespaces; ignoring namespace=%r",
                type(store).__name__,
                namespace,
            )
        self._backend = scope(store, namespace)
        self._providers: tuple[Provider, ...] = tuple(providers)
        self._ttl = _as_timedelta(ttl)
        self._clock = clock

        self._lock = threading.Lock()
        self._last_refresh_at: datetime | None = None

    @classmethod
    def from_config(
        cls,
        config: VaultConfig,
        *,
        backend: Backend | None = None,
        providers: Sequence[Provider] = (),
        clock: Callable[[], datetime] = _utcnow,
    ) -> Vault:
        """Create a vault from a :class:`VaultConfig`."""
        return cls(
            backend=backend,
            providers=providers,
            namespace=config.namespace,
            ttl=config.ttl,
            clock=clock,
        )

    @property
    def backend(self) -> Backend:
        """The (possibly namespace-scoped) backend in use."""
        return self._backend

    @property
    def providers(self) -> tuple[Provider, ...]:
        return self._providers

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    @property
    def last_refresh_at(self) -> datetime | None:
        """Start time of the last successful refresh, or ``None``."""
        with self._lock:
            return self._last_refresh_at

    # ------------------------------------------------------------------
    # Backend interface
    # ------------------------------------------------------------------

    async def get(self, key: str) -> Entry:
        """Return the entry for *key*, refreshing from providers on a miss.

        Raises
        ------
        VaultNotFoundError
            The key is missing (or stale) and either no refresh was
            allowed or the refresh did not supply it.
        VaultBackendError
            The backend failed.
        VaultProviderError
            A triggered refresh failed. Stale data is never returned
            in its place.
        """
        if not key:
            raise ValueError("key must be non-empty")

        try:
            entry: Entry | None = await self._call_backend("get", key, self._backend.get(key))
        except VaultNotFoundError:
            entry = None

        if entry is not None:
            if not self._expired(entry):
                _logger.debug("Cache hit key=%r", key)
                return entry
            _logger.debug("Cache entry expired key=%r created_at=%s", key, entry.created_at)
        else:
            _logger.debug("Cache miss key=%r", key)

        if not self._should_auto_refresh():
            _logger.debug("Auto-refresh throttled; key=%r not available", key)
            raise VaultNotFoundError(key)

        await self.refresh()

        return await self._call_backend("get", key, self._backend.get(key))

    async def set(self, entry: Entry) -> None:
        """Store *entry* directly.

        A missing ``created_at`` is set to now; an empty ``source``
        becomes ``"manual"``.
        """
        update: dict[str, object] = {}
        if entry.created_at is None:
            update["created_at"] = self._now()
        if not entry.source:
            update["source"] = MANUAL_SOURCE
        if update:
            entry = entry.model_copy(update=update)

        _logger.debug("Set %s", redact_for_log(entry))
        await self._call_backend("set", entry.key, self._backend.set(entry))

    async def delete(self, key: str) -> None:
        """Remove *key*. Deleting a missing key is not an error."""
        await self._call_backend("delete", key, self._backend.delete(key))

    async def list(self) -> list[Entry]:
        """Return every entry in the backend, fresh or stale."""
        return await self._call_backend("list", "", self._backend.list())

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    async def refresh(self) -> None:
        """Fetch from every provider in order and write results to the backend.

        Runs regardless of the throttle. The first provider or backend
        failure aborts the refresh; entries written before it stay
        written, and :attr:`last_refresh_at` is left untouched.
        """
        now = self._now()

        for provider in self._providers:
            name = provider_name(provider)
            try:
                entries = coerce_entries(await provider.fetch())
            except Exception as exc:
                raise VaultProviderError(f"vault: refresh: {name}: {exc}", provider=name) from exc

            _logger.debug("Provider %s returned %d entries", name, len(entries))

            for entry in entries:
                stamped = entry.model_copy(update={"created_at": now})
                try:
                    await self._backend.set(stamped)
                except Exception as exc:
                    raise VaultBackendError(
                        f"vault: refresh: set {entry.key!r}: {exc}",
                        operation="refresh",
                        key=entry.key,
                    ) from exc

        with self._lock:
            self._last_refresh_at = now
        _logger.debug("Refresh complete at %s (%d providers)", now.isoformat(), len(self._providers))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _call_backend(self, operation: str, key: str, call: Awaitable[T]) -> T:
        """Await a backend call, wrapping foreign exceptions with context."""
        try:
            return await call
        except VaultError:
            raise
        except Exception as exc:
            target = f" {key!r}" if key else ""
            raise VaultBackendError(
                f"vault: {operation}{target}: {exc}",
                operation=operation,
                key=key,
            ) from exc

    def _should_auto_refresh(self) -> bool:
        with self._lock:
            return should_auto_refresh(
                now=self._now(),
                last_refresh_at=self._last_refresh_at,
                ttl=self._ttl,
                has_providers=bool(self._providers),
            )

    def _expired(self, entry: Entry) -> bool:
        return is_expired(self._now(), entry.created_at, self._ttl)

    def _now(self) -> datetime:
        """Current time from the clock; naive results are taken as UTC."""
        now = self._clock()
        if now.tzinfo is None:
            return now.replace(tzinfo=UTC)
        return now
