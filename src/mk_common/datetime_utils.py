"""Timestamps for ledger events and the API envelope. Always UTC, always aware."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Aware UTC now; stamped on every LedgerEvent (ledger_events.created_at)."""
    return datetime.now(timezone.utc)


def utc_isoformat() -> str:
    return utc_now().isoformat()
