from __future__ import annotations

from datetime import date, datetime

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date (YYYY-MM-DD): {value!r}")


def require_iso_date(value: str) -> str:
    """Validate a YYYY-MM-DD string and return it unchanged."""
    parse_iso_date(value)
    return value


def today_iso() -> str:
    return now_local().date().isoformat()


def clock_label(moment: datetime) -> str:
    """24h zero-padded HH:MM used in session labels."""
    return moment.strftime("%H:%M")


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
