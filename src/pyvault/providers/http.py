"""Provider fetching entries from a JSON HTTP endpoint."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

import aiohttp
from pydantic import ValidationError

from pyvault.exceptions import VaultProviderError
from pyvault.models.entry import Entry

_logger = logging.getLogger(__name__)

HTTP_SOURCE = "http"


def _parse_payload(payload: Any, *, source: str) -> list[Entry]:
    """Turn a decoded JSON body into entries.

    Two shapes are accepted:
    - a list of entry objects (``{"key": ..., "value": ..., "source": ...}``)
    - an object mapping keys to scalar values
    """
    if isinstance(payload, list):
        entries: list[Entry] = []
        for item in payload:
            if not isinstance(item, dict):
                raise ValueError(f"expected entry object, got {type(item).__name__}")
            data = {"source": source, **item}
            # Providers do not own freshness; the vault stamps created_at.
            data.pop("created_at", None)
            entries.append(Entry.model_validate(data))
        return entries

    if isinstance(payload, dict):
        entries = []
        for key, value in payload.items():
            if isinstance(value, (dict, list)) or value is None:
                raise ValueError(f"value for {key!r} is not a scalar")
            entries.append(Entry(key=str(key), value=str(value), source=source))
        return entries

    raise ValueError(f"unexpected JSON payload type {type(payload).__name__}")


class HttpProvider:
    """Fetch entries with ``GET`` from *url*.

    Parameters
    ----------
    url : str
        Endpoint returning JSON.
    headers : Mapping[str, str] or None
        Extra request headers (e.g. ``Authorization``).
    session : aiohttp.ClientSession or None
        Externally managed session. When omitted a session is opened and
        closed around every fetch.
    source : str
        Source label for entries that do not carry one.
    """

    def __init__(
        self,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        session: aiohttp.ClientSession | None = None,
        source: str = HTTP_SOURCE,
        name: str | None = None,
    ) -> None:
        self._url = url
        self._headers = dict(headers or {})
        self._session = session
        self._source = source
        self.name = name or url

    async def fetch(self) -> list[Entry]:
        if self._session is not None:
            return await self._fetch(self._session)
        async with aiohttp.ClientSession() as session:
            return await self._fetch(session)

    async def _fetch(self, session: aiohttp.ClientSession) -> list[Entry]:
        _logger.debug("GET %s", self._url)

        headers = {"accept": "application/json", **self._headers}
        try:
            async with session.get(self._url, headers=headers) as resp:
                text = await resp.text()
                if resp.status != 200:
                    raise VaultProviderError(
                        f"HTTP {resp.status} from {self._url}: {text[:200]}",
                        provider=self.name,
                    )
        except VaultProviderError:
            raise
        except aiohttp.ClientError as exc:
            raise VaultProviderError(
                f"Request to {self._url} failed: {exc}",
                provider=self.name,
            ) from exc

        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise VaultProviderError(
                f"Invalid JSON from {self._url}: {text[:200]}",
                provider=self.name,
            ) from exc

        try:
            entries = _parse_payload(payload, source=self._source)
        except (ValueError, ValidationError) as exc:
            raise VaultProviderError(
                f"Unexpected payload from {self._url}: {exc}",
                provider=self.name,
            ) from exc

        _logger.debug("Fetched %d entries from %s", len(entries), self._url)
        return entries
