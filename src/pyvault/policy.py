"""Freshness and throttle policy.

Pure predicates over timestamps; all locking and I/O live in
:mod:`pyvault.vault`.
"""

from __future__ import annotations

from datetime import datetime, timedelta


def is_expired(now: datetime, created_at: datetime | None, ttl: timedelta) -> bool:
    """Whether an entry created at *created_at* is stale at *now*.

    A non-positive *ttl* disables expiry. An entry without a timestamp is
    stale as soon as a TTL is set.
    """
    if ttl <= timedelta(0):
        return False
    if created_at is None:
        return True
    return now - created_at > ttl


def should_auto_refresh(
    *,
    now: datetime,
    last_refresh_at: datetime | None,
    ttl: timedelta,
    has_providers: bool,
) -> bool:
    """Throttle gate for refreshes triggered by a cache miss.

    Policy:
    - No providers: never.
    - No refresh completed yet: always.
    - No TTL: only the first time (handled above).
    - With a TTL: once the last refresh is older than the TTL.
    """
    if not has_providers:
        return False
    if last_refresh_at is None:
        return True
    if ttl > timedelta(0):
        return now - last_refresh_at > ttl
    return False
