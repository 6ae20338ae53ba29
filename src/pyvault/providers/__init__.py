"""External providers.

A provider is the read-only side of a vault: it produces entries from an
external system and never stores them. :class:`FunctionProvider` adapts a
plain function so no dedicated class is needed.
"""

from pyvault.providers._base import FunctionProvider, Provider, coerce_entries, provider_name
from pyvault.providers.env import EnvProvider
from pyvault.providers.http import HttpProvider

__all__ = [
    "EnvProvider",
    "FunctionProvider",
    "HttpProvider",
    "Provider",
    "coerce_entries",
    "provider_name",
]
