"""DataUpdateCoordinator for the Elpris integration."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import CALLBACK_TYPE, HomeAssistant, callback
from homeassistant.helpers.aiohttp_client import async_get_clientsession
from homeassistant.helpers.event import async_track_time_change
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed
from homeassistant.util import dt as dt_util

from .const import (
    COMPARISON_FROM_HOUR,
    CONF_PRICE_AREA,
    CONF_TOMORROW_CUTOFF_HOUR,
    CONF_WINDOW_SIZE,
    DEFAULT_PRICE_AREA,
    DEFAULT_TOMORROW_CUTOFF_HOUR,
    DEFAULT_WINDOW_SIZE,
    DOMAIN,
    UPDATE_INTERVAL_MINUTES,
)
from .elpris_api import async_fetch_prices
from .price_analytics import (
    ChargingWindow,
    DailyStats,
    HourlyPrice,
    HslColor,
    InvalidPriceData,
    RawPriceEntry,
    find_next_price,
    find_smart_charging_window,
    get_daily_stats,
    get_price_color,
    normalize_to_hourly,
    percent_change,
    price_position,
)

_LOGGER = logging.getLogger(__name__)


@dataclass
class ElprisData:
    """Data returned by the Elpris coordinator."""

    today: list[HourlyPrice] = field(default_factory=list)
    tomorrow: list[HourlyPrice] = field(default_factory=list)
    today_stats: DailyStats | None = None
    tomorrow_stats: DailyStats | None = None
    current: HourlyPrice | None = None
    current_color: HslColor | None = None
    position: float | None = None
    next: HourlyPrice | None = None
    next_color: HslColor | None = None
    tomorrow_change_pct: float | None = None
    tomorrow_color: HslColor | None = None
    comparison_visible: bool = False
    window: ChargingWindow | None = None
    window_start: datetime | None = None
    window_end: datetime | None = None
    window_size: int = DEFAULT_WINDOW_SIZE


def build_price_data(
    today: list[HourlyPrice],
    tomorrow: list[HourlyPrice],
    now: datetime,
    window_size: int = DEFAULT_WINDOW_SIZE,
) -> ElprisData:
    """Derive everything the entities show from one snapshot of prices."""
    data = ElprisData(today=today, tomorrow=tomorrow, window_size=window_size)
    if not today:
        return data

    stats = get_daily_stats(today)
    data.today_stats = stats
    low = stats.min.avg_price
    high = stats.max.avg_price

    hour = now.hour
    if hour < len(today):
        data.current = today[hour]
        data.current_color = get_price_color(data.current.avg_price, low, high)
        data.position = price_position(data.current.avg_price, stats)

    data.next = find_next_price(today, tomorrow, hour)
    if data.next is not None:
        data.next_color = get_price_color(data.next.avg_price, low, high)

    if tomorrow:
        data.tomorrow_stats = get_daily_stats(tomorrow)
        data.tomorrow_change_pct = percent_change(stats.avg, data.tomorrow_stats.avg)
        data.tomorrow_color = get_price_color(data.tomorrow_stats.avg, low, high)
        data.comparison_visible = hour >= COMPARISON_FROM_HOUR

    window = find_smart_charging_window(today, tomorrow, hour, window_size)
    if window is not None:
        day_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        start = day_start + timedelta(
            days=1 if window.is_tomorrow else 0, hours=window.start_hour
        )
        data.window = window
        data.window_start = start
        data.window_end = start + timedelta(hours=window.hours)
        _LOGGER.debug(
            "Cheapest %s-hour window: %s (tomorrow=%s, avg=%.3f)",
            window_size, window.label, window.is_tomorrow, window.avg_price,
        )

    return data


class ElprisCoordinator(DataUpdateCoordinator[ElprisData]):
    """Coordinator that fetches spot prices and recomputes the analytics."""

    config_entry: ConfigEntry

    def __init__(self, hass: HomeAssistant, entry: ConfigEntry) -> None:
        """Initialize the coordinator."""
        super().__init__(
            hass,
            _LOGGER,
            name=f"{DOMAIN}_{entry.entry_id}",
            config_entry=entry,
            update_interval=timedelta(minutes=UPDATE_INTERVAL_MINUTES),
        )
        self._area: str = entry.data.get(CONF_PRICE_AREA, DEFAULT_PRICE_AREA)
        self._session = async_get_clientsession(hass)
        self._raw_prices: dict[date, list[RawPriceEntry]] = {}
        # Days whose published prices could not be normalized
        self._rejected_days: set[date] = set()
        self._unsub_hourly: CALLBACK_TYPE | None = None

    @property
    def area(self) -> str:
        """Return the configured price area."""
        return self._area

    async def _async_setup(self) -> None:
        """Set up the coordinator (called once on first refresh)."""
        # Advance current/next hour on the hour instead of waiting for the poll
        self._unsub_hourly = async_track_time_change(
            self.hass, self._on_hour_change, minute=0, second=0
        )

    @callback
    def _on_hour_change(self, now: datetime) -> None:
        """Handle a new clock hour."""
        _LOGGER.debug("New hour %s, requesting refresh", now.hour)
        self.hass.async_create_task(self.async_request_refresh())

    async def _async_update_data(self) -> ElprisData:
        """Fetch prices for today (and tomorrow after the cutoff) and analyse them."""
        now = dt_util.now()
        today = now.date()
        tomorrow = today + timedelta(days=1)

        options = self.config_entry.options
        window_size = int(options.get(CONF_WINDOW_SIZE, DEFAULT_WINDOW_SIZE))
        cutoff_hour = int(
            options.get(CONF_TOMORROW_CUTOFF_HOUR, DEFAULT_TOMORROW_CUTOFF_HOUR)
        )

        self._prune_cache(today)

        raw_today = await self._async_get_day(today)
        raw_tomorrow: list[RawPriceEntry] = []
        if now.hour >= cutoff_hour:
            raw_tomorrow = await self._async_get_day(tomorrow)

        hourly_today = self._normalize(raw_today, today)
        hourly_tomorrow = self._normalize(raw_tomorrow, tomorrow)

        if not hourly_today:
            raise UpdateFailed(
                f"No price data available for {today} in {self._area}"
            )

        return build_price_data(hourly_today, hourly_tomorrow, now, window_size)

    async def _async_get_day(self, target_date: date) -> list[RawPriceEntry]:
        """Return a day's raw prices, fetching them only until they are known."""
        cached = self._raw_prices.get(target_date)
        if cached:
            return cached
        if target_date in self._rejected_days:
            _LOGGER.debug("Skipping fetch for rejected day %s", target_date)
            return []

        entries = await async_fetch_prices(self._session, target_date, self._area)
        if entries:
            _LOGGER.debug(
                "Fetched %s price entries for %s in %s",
                len(entries), target_date, self._area,
            )
            self._raw_prices[target_date] = entries
        return entries

    def _prune_cache(self, today: date) -> None:
        """Forget prices for days that have passed."""
        for day in [d for d in self._raw_prices if d < today]:
            del self._raw_prices[day]
        self._rejected_days = {d for d in self._rejected_days if d >= today}

    def _normalize(
        self, entries: list[RawPriceEntry], target_date: date
    ) -> list[HourlyPrice]:
        """Normalize a day's entries, treating an invalid day as missing.

        A rejected day is remembered so later polls do not download the
        same payload again.
        """
        try:
            return normalize_to_hourly(entries)
        except InvalidPriceData as err:
            _LOGGER.warning("Ignoring prices for %s: %s", target_date, err)
            self._raw_prices.pop(target_date, None)
            self._rejected_days.add(target_date)
            return []

    async def async_shutdown(self) -> None:
        """Clean up listeners."""
        if self._unsub_hourly:
            self._unsub_hourly()
            self._unsub_hourly = None
        await super().async_shutdown()
