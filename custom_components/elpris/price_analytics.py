"""Pure price analytics for the Elpris integration.

This module contains no Home Assistant dependencies and can be tested independently.
It turns the raw price list of one day into 24 hourly buckets and derives
everything the entities display from them:
- daily statistics (cheapest hour, most expensive hour, average)
- the cheapest upcoming window of consecutive hours
- a green-to-red color for a price relative to the day's range
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

_LOGGER = logging.getLogger(__name__)

HOURS_PER_DAY = 24

# Hue in degrees: green for the cheapest price, red for the most expensive
HUE_CHEAP = 140.0
HUE_EXPENSIVE = 0.0


class InvalidPriceData(ValueError):
    """Raised when a day's price list cannot be split into 24 hours."""


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RawPriceEntry:
    """One price interval as delivered by the price API."""

    price: float
    interval_start: datetime
    interval_end: datetime

    @classmethod
    def from_api(cls, item: dict) -> RawPriceEntry:
        """Build an entry from an elprisetjustnu.se JSON object.

        Raises KeyError, TypeError or ValueError for malformed items.
        """
        return cls(
            price=float(item["SEK_per_kWh"]),
            interval_start=_to_datetime(item["time_start"]),
            interval_end=_to_datetime(item["time_end"]),
        )


@dataclass(frozen=True)
class HourlyPrice:
    """Average price of one clock hour."""

    hour: int
    avg_price: float
    label: str
    date: str

    def as_dict(self) -> dict:
        """Return the bucket as a plain dict for entity attributes."""
        return {
            "hour": self.hour,
            "price": round(self.avg_price, 4),
            "label": self.label,
            "date": self.date,
        }


@dataclass(frozen=True)
class DailyStats:
    """Cheapest hour, most expensive hour and average price of a day."""

    min: HourlyPrice | None
    max: HourlyPrice | None
    avg: float


@dataclass(frozen=True)
class ChargingWindow:
    """The cheapest run of consecutive hours."""

    start_hour: int
    end_hour: int
    avg_price: float
    is_tomorrow: bool

    @property
    def hours(self) -> int:
        """Return the number of hours the window spans."""
        return (self.end_hour - self.start_hour) % HOURS_PER_DAY or HOURS_PER_DAY

    @property
    def label(self) -> str:
        """Return the window as an 'HH:00–HH:00' range."""
        return f"{self.start_hour:02d}:00–{self.end_hour:02d}:00"


@dataclass(frozen=True)
class HslColor:
    """Hue (degrees), saturation and lightness (percent)."""

    hue: float
    saturation: float
    lightness: float

    @property
    def css(self) -> str:
        """Return the color as a CSS hsl() string."""
        return (
            f"hsl({round(self.hue, 1):g}, "
            f"{round(self.saturation, 1):g}%, "
            f"{round(self.lightness, 1):g}%)"
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _to_datetime(value: str | datetime) -> datetime:
    """Convert a value to a datetime, handling both strings and datetime objects."""
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def hour_label(hour: int) -> str:
    """Return the display label for a clock hour, e.g. '07:00–08:00'."""
    return f"{hour:02d}:00–{hour + 1:02d}:00"


def _mean(values: list[float]) -> float:
    return sum(values) / len(values)


def _cheapest_window_start(prices: list[float], window_size: int) -> tuple[int, float]:
    """Return (start index, sum) of the cheapest run of window_size prices.

    A strict comparison keeps the earliest window when sums are equal.
    """
    best_idx = 0
    best_total = float("inf")
    for i in range(len(prices) - window_size + 1):
        total = sum(prices[i:i + window_size])
        if total < best_total:
            best_total = total
            best_idx = i
    return best_idx, best_total


def _window_end_hour(start_hour: int, window_size: int) -> int:
    """Return the end hour of a window; a window ending at midnight ends at 24."""
    return (start_hour + window_size) % HOURS_PER_DAY or HOURS_PER_DAY


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

def normalize_to_hourly(entries: list[RawPriceEntry]) -> list[HourlyPrice]:
    """Aggregate a day's price entries into 24 hourly buckets.

    The API delivers either 24 hourly entries or 96 quarter-hour entries
    (any multiple of 24 is accepted). Sub-hourly entries are averaged per hour.

    Raises:
        InvalidPriceData: if the number of entries is not a multiple of 24.
    """
    if not entries:
        return []

    if len(entries) == HOURS_PER_DAY:
        return [
            HourlyPrice(
                hour=i,
                avg_price=entry.price,
                label=hour_label(i),
                date=entry.interval_start.date().isoformat(),
            )
            for i, entry in enumerate(entries)
        ]

    if len(entries) % HOURS_PER_DAY:
        raise InvalidPriceData(
            f"Expected 24 or a multiple of 24 price entries, got {len(entries)}"
        )

    entries_per_hour = len(entries) // HOURS_PER_DAY
    hourly: list[HourlyPrice] = []
    for hour in range(HOURS_PER_DAY):
        start_idx = hour * entries_per_hour
        chunk = entries[start_idx:start_idx + entries_per_hour]
        if not chunk:
            continue
        hourly.append(HourlyPrice(
            hour=hour,
            avg_price=_mean([e.price for e in chunk]),
            label=hour_label(hour),
            date=chunk[0].interval_start.date().isoformat(),
        ))
    return hourly


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------

def get_daily_stats(hourly: list[HourlyPrice]) -> DailyStats:
    """Return the cheapest and most expensive hour and the average price.

    The earliest hour wins when several hours share the extreme price.
    An empty day yields DailyStats(None, None, 0.0).
    """
    if not hourly:
        return DailyStats(min=None, max=None, avg=0.0)

    cheapest = hourly[0]
    dearest = hourly[0]
    for bucket in hourly[1:]:
        if bucket.avg_price < cheapest.avg_price:
            cheapest = bucket
        if bucket.avg_price > dearest.avg_price:
            dearest = bucket

    return DailyStats(
        min=cheapest,
        max=dearest,
        avg=_mean([h.avg_price for h in hourly]),
    )


# ---------------------------------------------------------------------------
# Cheapest window
# ---------------------------------------------------------------------------

def find_smart_charging_window(
    today_hourly: list[HourlyPrice],
    tomorrow_hourly: list[HourlyPrice],
    current_hour: int,
    window_size: int = 3,
) -> ChargingWindow | None:
    """Find the cheapest run of window_size consecutive hours from now on.

    The search covers the rest of today (including the current hour) followed
    by all of tomorrow. When fewer than window_size hours remain, the whole of
    today is searched instead. Returns None if today has fewer hours than the
    window.
    """
    if window_size < 1:
        raise ValueError(f"window_size must be at least 1, got {window_size}")

    upcoming = [(h, False) for h in today_hourly[current_hour:]]
    upcoming += [(h, True) for h in tomorrow_hourly]

    if len(upcoming) < window_size:
        if len(today_hourly) < window_size:
            _LOGGER.debug(
                "No %s-hour window: only %s hours of price data",
                window_size, len(today_hourly),
            )
            return None
        _LOGGER.debug(
            "Only %s upcoming hours, searching all of today instead", len(upcoming)
        )
        upcoming = [(h, False) for h in today_hourly]

    best_idx, best_total = _cheapest_window_start(
        [h.avg_price for h, _ in upcoming], window_size
    )
    first, is_tomorrow = upcoming[best_idx]

    return ChargingWindow(
        start_hour=first.hour,
        end_hour=_window_end_hour(first.hour, window_size),
        avg_price=best_total / window_size,
        is_tomorrow=is_tomorrow,
    )


# ---------------------------------------------------------------------------
# Color
# ---------------------------------------------------------------------------

def get_price_color(price: float, min_price: float, max_price: float) -> HslColor:
    """Map a price to a color between green (min_price) and red (max_price).

    A power curve spreads the hues near both ends of the range so that the
    cheapest and most expensive hours stand out from the middle.
    """
    if max_price <= min_price:
        return HslColor(hue=HUE_CHEAP, saturation=80.0, lightness=50.0)

    normalized = (price - min_price) / (max_price - min_price)
    normalized = max(0.0, min(1.0, normalized))

    if normalized < 0.5:
        biased = 0.5 * (2 * normalized) ** 1.5
    else:
        biased = 1 - 0.5 * (2 * (1 - normalized)) ** 1.5

    hue = HUE_EXPENSIVE + (HUE_CHEAP - HUE_EXPENSIVE) * (1 - biased)
    saturation = min(100.0, 75 + abs(normalized - 0.5) * 25)
    return HslColor(hue=hue, saturation=saturation, lightness=50.0)


# ---------------------------------------------------------------------------
# Display helpers
# ---------------------------------------------------------------------------

def format_price(price: float) -> str:
    """Format a price with exactly two decimals, e.g. 1.5 -> '1.50'."""
    return f"{price:.2f}"


def find_next_price(
    today_hourly: list[HourlyPrice],
    tomorrow_hourly: list[HourlyPrice],
    current_hour: int,
) -> HourlyPrice | None:
    """Return the bucket for the hour after current_hour.

    Falls back to the current hour's bucket when the next one is unknown.
    """
    current = today_hourly[current_hour] if current_hour < len(today_hourly) else None
    next_hour = current_hour + 1
    if next_hour < HOURS_PER_DAY:
        if next_hour < len(today_hourly):
            return today_hourly[next_hour]
        return current
    if tomorrow_hourly:
        return tomorrow_hourly[0]
    return current


def price_position(price: float, stats: DailyStats) -> float | None:
    """Return where a price lies within the day's range, in percent (0-100)."""
    if stats.min is None or stats.max is None:
        return None
    span = stats.max.avg_price - stats.min.avg_price
    if span <= 0:
        return 0.0
    position = (price - stats.min.avg_price) / span * 100
    return max(0.0, min(100.0, position))


def percent_change(base: float, new: float) -> float | None:
    """Return the change from base to new in percent, or None if base is 0."""
    if base == 0:
        return None
    return (new - base) / base * 100
