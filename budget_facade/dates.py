"""Calendar-date helpers for the ``YYYY-MM-DD`` boundary format."""

from __future__ import annotations

from datetime import date, datetime


def current_local_date() -> date:
    """Return today's calendar date on the local wall clock.

    ``datetime.now()`` without a zone is already local time; truncating it
    gives the local date regardless of the UTC offset.
    """

    return datetime.now().date()


def format_date_to_iso_string(value: date) -> str:
    """Render ``value`` as ``YYYY-MM-DD`` (no time component)."""

    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


def today_iso() -> str:
    return format_date_to_iso_string(current_local_date())
