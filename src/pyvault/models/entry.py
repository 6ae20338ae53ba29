"""Entry model: the unit moved between backends, providers and the vault."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, field_validator

#: Source label given to entries written directly through :meth:`Vault.set`.
MANUAL_SOURCE = "manual"


class Entry(BaseModel):
    """A configuration or secret value.

    Parameters
    ----------
    key : str
        Identifier, unique within a namespace.
    value : str
        Opaque payload.
    created_at : datetime or None
        Freshness baseline. Naive datetimes are assumed to be UTC.
        ``None`` means "not stamped yet"; :class:`~pyvault.vault.Vault`
        fills it in on write.
    source : str
        Provenance label (e.g. ``"manual"``, ``"env"``, ``"http"``).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    key: str
    value: str = ""
    created_at: datetime | None = None
    source: str = ""

    @field_validator("key")
    @classmethod
    def _require_key(cls, value: str) -> str:
        if not value:
            raise ValueError("key must be non-empty")
        return value

    @field_validator("created_at")
    @classmethod
    def _ensure_tz_aware(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    def to_json(self) -> str:
        """Serialize to ``{"key", "value", "created_at", "source"}`` JSON."""
        return self.model_dump_json()

    @classmethod
    def from_json(cls, data: str | bytes) -> Entry:
        """Parse the form produced by :meth:`to_json`."""
        return cls.model_validate_json(data)
