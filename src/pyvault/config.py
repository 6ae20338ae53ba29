"""Vault configuration."""

from __future__ import annotations

import dataclasses
import math
import os
from typing import Any

from pyvault.exceptions import VaultConfigError


def _env_float(name: str, value: str) -> float:
    try:
        result = float(value)
    except ValueError as exc:
        raise VaultConfigError(f"{name} must be a number of seconds, got {value!r}") from exc
    if not math.isfinite(result):
        raise VaultConfigError(f"{name} must be finite, got {value!r}")
    return result


@dataclasses.dataclass(frozen=True)
class VaultConfig:
    """Vault configuration.

    Parameters
    ----------
    namespace : str
        Namespace applied to the backend when it supports scoping.
        Empty means unscoped.
    ttl : float
        Entry time-to-live in seconds. Entries older than this are stale
        and trigger a refresh on the next read. ``0`` disables expiry;
        providers are then consulted once per vault lifetime.
    keychain_service : str
        Service name used by :class:`~pyvault.backends.keychain.KeychainBackend`.
    """

    namespace: str = ""
    ttl: float = 0.0
    keychain_service: str = "vault"

    def __post_init__(self) -> None:
        if not math.isfinite(self.ttl) or self.ttl < 0:
            raise VaultConfigError(f"ttl must be a finite number >= 0, got {self.ttl}")

    @classmethod
    def from_env(cls, **overrides: Any) -> VaultConfig:
        """Create configuration from environment variables.

        Reads ``VAULT_NAMESPACE``, ``VAULT_TTL`` (seconds) and
        ``VAULT_KEYCHAIN_SERVICE``. Explicit keyword arguments override
        environment values.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "VAULT_NAMESPACE": "namespace",
            "VAULT_KEYCHAIN_SERVICE": "keychain_service",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        ttl_env = env.get("VAULT_TTL")
        if ttl_env is not None and "ttl" not in overrides:
            config_kwargs["ttl"] = _env_float("VAULT_TTL", ttl_env)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
