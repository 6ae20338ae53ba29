from __future__ import annotations

import pytest

from pyvault.config import VaultConfig
from pyvault.exceptions import VaultConfigError


def test_defaults() -> None:
    config = VaultConfig()
    assert config.namespace == ""
    assert config.ttl == 0.0
    assert config.keychain_service == "vault"


def test_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VAULT_NAMESPACE", "prod")
    monkeypatch.setenv("VAULT_TTL", "3600")
    monkeypatch.setenv("VAULT_KEYCHAIN_SERVICE", "myapp")

    config = VaultConfig.from_env()

    assert config == VaultConfig(namespace="prod", ttl=3600.0, keychain_service="myapp")


def test_from_env_overrides_win(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VAULT_NAMESPACE", "prod")
    monkeypatch.setenv("VAULT_TTL", "not-a-number")

    config = VaultConfig.from_env(namespace="qa", ttl=5.0)

    assert config.namespace == "qa"
    assert config.ttl == 5.0


def test_from_env_invalid_ttl(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VAULT_TTL", "soon")

    with pytest.raises(VaultConfigError):
        VaultConfig.from_env()


def test_negative_ttl_rejected() -> None:
    with pytest.raises(VaultConfigError):
        VaultConfig(ttl=-1.0)


@pytest.mark.parametrize("value", ["inf", "-inf", "nan", "Infinity"])
def test_from_env_non_finite_ttl(monkeypatch: pytest.MonkeyPatch, value: str) -> None:
    monkeypatch.setenv("VAULT_TTL", value)

    with pytest.raises(VaultConfigError):
        VaultConfig.from_env()


@pytest.mark.parametrize("ttl", [float("inf"), float("nan")])
def test_non_finite_ttl_rejected(ttl: float) -> None:
    with pytest.raises(VaultConfigError):
        VaultConfig(ttl=ttl)
