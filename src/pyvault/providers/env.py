"""Provider reading entries from process environment variables."""

from __future__ import annotations

import os
from collections.abc import Mapping

from pyvault.models.entry import Entry

ENV_SOURCE = "env"


class EnvProvider:
    """Yield one entry per environment variable starting with *prefix*.

    ``EnvProvider("APP_SECRET_")`` maps ``APP_SECRET_DB_PASSWORD=hunter2``
    to ``Entry(key="db_password", value="hunter2", source="env")``.
    """

    def __init__(
        self,
        prefix: str,
        *,
        lowercase: bool = True,
        environ: Mapping[str, str] | None = None,
        name: str = "env",
    ) -> None:
        if not prefix:
            raise ValueError("prefix must be non-empty")
        self._prefix = prefix
        self._lowercase = lowercase
        self._environ = environ
        self.name = name

    async def fetch(self) -> list[Entry]:
        env = self._environ if self._environ is not None else os.environ
        entries: list[Entry] = []
        for env_key, value in env.items():
            if not env_key.startswith(self._prefix):
                continue
            key = env_key[len(self._prefix) :]
            if not key:
                continue
            if self._lowercase:
                key = key.lower()
            entries.append(Entry(key=key, value=value, source=ENV_SOURCE))
        return entries
