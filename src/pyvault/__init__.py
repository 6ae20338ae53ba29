"""pyvault - Pluggable async configuration and secret cache."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyvault")
except PackageNotFoundError:
    __version__ = "0+local"
from pyvault.backends import Backend, NamespaceCapable
from pyvault.backends.keychain import KeychainBackend
from pyvault.backends.memory import MemoryBackend
from pyvault.config import VaultConfig
from pyvault.exceptions import (
    VaultBackendError,
    VaultConfigError,
    VaultError,
    VaultNotFoundError,
    VaultProviderError,
)
from pyvault.models import MANUAL_SOURCE, Entry
from pyvault.providers import EnvProvider, FunctionProvider, HttpProvider, Provider
from pyvault.vault import Vault

__all__ = [
    "__version__",
    "MANUAL_SOURCE",
    "Backend",
    "Entry",
    "EnvProvider",
    "FunctionProvider",
    "HttpProvider",
    "KeychainBackend",
    "MemoryBackend",
    "NamespaceCapable",
    "Provider",
    "Vault",
    "VaultBackendError",
    "VaultConfig",
    "VaultConfigError",
    "VaultError",
    "VaultNotFoundError",
    "VaultProviderError",
]
