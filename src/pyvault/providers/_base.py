"""Provider protocol and the plain-function adapter."""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any, Protocol

from pyvault.models.entry import Entry

FetchResult = Sequence[Entry | Mapping[str, Any]]


class Provider(Protocol):
    """Structural fetch interface used by :class:`~pyvault.vault.Vault`."""

    async def fetch(self) -> Sequence[Entry]:
        ...


def provider_name(provider: object) -> str:
    """Label used in logs and errors: ``provider.name`` or the class name."""
    name = getattr(provider, "name", None)
    if isinstance(name, str) and name:
        return name
    return type(provider).__name__


def coerce_entries(items: FetchResult) -> list[Entry]:
    """Accept entries or entry-shaped mappings; return entries."""
    return [item if isinstance(item, Entry) else Entry.model_validate(item) for item in items]


class FunctionProvider:
    """Adapt a callable into a :class:`Provider`.

    The callable takes no arguments and returns a sequence of entries
    (or mappings with entry fields), either directly or as an awaitable.

    Usage::

        vault = Vault(providers=[FunctionProvider(load_from_ssm, name="ssm")])
    """

    def __init__(
        self,
        func: Callable[[], FetchResult | Awaitable[FetchResult]],
        *,
        name: str | None = None,
    ) -> None:
        self._func = func
        self.name = name or getattr(func, "__name__", type(self).__name__)

    async def fetch(self) -> list[Entry]:
        result = self._func()
        if inspect.isawaitable(result):
            result = await result
        return coerce_entries(result)

    def __repr__(self) -> str:
        return f"FunctionProvider(name={self.name!r})"
