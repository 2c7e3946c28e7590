"""Shared test fixtures for Elpris tests."""

from __future__ import annotations

from datetime import datetime

import pytest

from helpers import TZ, make_api_day


@pytest.fixture
def now() -> datetime:
    """Return a fixed 'now' for deterministic testing."""
    return datetime(2026, 2, 6, 14, 30, 0, tzinfo=TZ)


@pytest.fixture
def today_prices() -> list[float]:
    """Return 24 hourly prices simulating a typical Nordic winter day.

    Cheap at night, expensive in morning/evening, moderate midday.
    """
    return [
        0.10, 0.08, 0.05, 0.03, 0.04, 0.06,  # 00-05: cheap night
        0.15, 0.35, 0.50, 0.45, 0.30, 0.25,  # 06-11: morning ramp
        0.20, 0.18, 0.15, 0.12, 0.14, 0.40,  # 12-17: midday + evening ramp
        0.55, 0.60, 0.50, 0.35, 0.20, 0.12,  # 18-23: evening peak + decline
    ]


@pytest.fixture
def tomorrow_prices() -> list[float]:
    """Return 24 hourly prices for tomorrow."""
    return [
        0.08, 0.06, 0.04, 0.02, 0.03, 0.05,  # 00-05
        0.12, 0.30, 0.45, 0.40, 0.28, 0.22,  # 06-11
        0.18, 0.16, 0.13, 0.10, 0.12, 0.35,  # 12-17
        0.50, 0.55, 0.45, 0.30, 0.18, 0.10,  # 18-23
    ]


@pytest.fixture
def today_api(today_prices) -> list[dict]:
    """Return today's prices as the API delivers them."""
    return make_api_day(today_prices)


@pytest.fixture
def tomorrow_api(tomorrow_prices) -> list[dict]:
    """Return tomorrow's prices as the API delivers them."""
    return make_api_day(tomorrow_prices, day_offset=1)
