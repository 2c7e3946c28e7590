"""Shared test helpers for Elpris tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

# Timezone for testing (CET)
TZ = timezone(timedelta(hours=1), name="CET")

BASE_DATE = datetime(2026, 2, 6, tzinfo=TZ)


def make_api_entry(
    hour: int, price: float, day_offset: int = 0, minute: int = 0, minutes: int = 60
) -> dict:
    """Create an elprisetjustnu.se-style price object for testing.

    Args:
        hour: Hour of the day (0-23).
        price: Price in SEK/kWh.
        day_offset: 0 for today, 1 for tomorrow.
        minute: Minute the interval starts at.
        minutes: Interval length in minutes.

    Returns:
        Dict matching one element of the API's JSON array.
    """
    start = (BASE_DATE + timedelta(days=day_offset)).replace(hour=hour, minute=minute)
    end = start + timedelta(minutes=minutes)
    return {
        "SEK_per_kWh": price,
        "EUR_per_kWh": round(price / 11.5, 5),
        "EXR": 11.5,
        "time_start": start.isoformat(),
        "time_end": end.isoformat(),
    }


def make_api_day(prices: list[float], day_offset: int = 0) -> list[dict]:
    """Create 24 hourly API objects from a list of 24 prices."""
    return [make_api_entry(h, p, day_offset) for h, p in enumerate(prices)]


def make_api_quarter_day(prices: list[float], day_offset: int = 0) -> list[dict]:
    """Create 96 quarter-hour API objects from a list of 96 prices."""
    return [
        make_api_entry(i // 4, p, day_offset, minute=(i % 4) * 15, minutes=15)
        for i, p in enumerate(prices)
    ]


def make_config_entry(entry_id="test_entry_id"):
    """Create a mock ConfigEntry for testing."""
    entry = MagicMock()
    entry.entry_id = entry_id
    entry.data = {"name": "Test", "price_area": "SE3"}
    entry.options = {}
    return entry
