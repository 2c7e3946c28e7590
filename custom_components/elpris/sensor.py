"""Sensor platform for the Elpris integration."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from homeassistant.components.sensor import SensorEntity, SensorStateClass
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import CONF_NAME, CONF_PRICE_AREA, DOMAIN, UNIT_SEK_PER_KWH
from .coordinator import ElprisCoordinator, ElprisData
from .price_analytics import HourlyPrice, HslColor, format_price


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up Elpris sensors from a config entry."""
    coordinator: ElprisCoordinator = hass.data[DOMAIN][entry.entry_id]
    async_add_entities([
        CurrentPriceSensor(coordinator, entry),
        NextHourPriceSensor(coordinator, entry),
        LowestPriceSensor(coordinator, entry),
        HighestPriceSensor(coordinator, entry),
        AveragePriceSensor(coordinator, entry),
        TomorrowAveragePriceSensor(coordinator, entry),
        CheapWindowSensor(coordinator, entry),
    ])


def device_info(entry: ConfigEntry) -> DeviceInfo:
    """Return the service device shared by all Elpris entities of an entry."""
    return DeviceInfo(
        identifiers={(DOMAIN, entry.entry_id)},
        name=entry.data[CONF_NAME],
        manufacturer="elprisetjustnu.se",
        model=f"Spot price {entry.data.get(CONF_PRICE_AREA, '')}".strip(),
        entry_type="service",
    )


def _color_attributes(color: HslColor | None) -> dict[str, Any]:
    if color is None:
        return {"color": None, "hue": None}
    return {"color": color.css, "hue": round(color.hue, 1)}


class _PriceSensorBase(CoordinatorEntity[ElprisCoordinator], SensorEntity):
    """Base class for Elpris price sensors."""

    _attr_has_entity_name = True
    _attr_native_unit_of_measurement = UNIT_SEK_PER_KWH
    _attr_suggested_display_precision = 2

    def __init__(
        self, coordinator: ElprisCoordinator, entry: ConfigEntry
    ) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator)
        self._attr_unique_id = f"{entry.entry_id}_{self._attr_translation_key}"
        self._attr_device_info = device_info(entry)

    @property
    def _data(self) -> ElprisData | None:
        return self.coordinator.data


class CurrentPriceSensor(_PriceSensorBase):
    """Spot price of the current hour."""

    _attr_translation_key = "current_price"
    _attr_icon = "mdi:currency-usd"
    _attr_state_class = SensorStateClass.MEASUREMENT

    @property
    def native_value(self) -> float | None:
        """Return the current hour's average price."""
        if self._data is None or self._data.current is None:
            return None
        return round(self._data.current.avg_price, 4)

    @property
    def extra_state_attributes(self) -> dict:
        """Return label, color and the full price lists."""
        data = self._data
        if data is None or data.current is None:
            return {}
        return {
            "label": data.current.label,
            "formatted": format_price(data.current.avg_price),
            **_color_attributes(data.current_color),
            "position": round(data.position, 1) if data.position is not None else None,
            "today": [h.as_dict() for h in data.today],
            "tomorrow": [h.as_dict() for h in data.tomorrow],
        }


class NextHourPriceSensor(_PriceSensorBase):
    """Spot price of the next hour."""

    _attr_translation_key = "next_hour_price"
    _attr_icon = "mdi:clock-fast"

    @property
    def native_value(self) -> float | None:
        """Return the next hour's average price."""
        if self._data is None or self._data.next is None:
            return None
        return round(self._data.next.avg_price, 4)

    @property
    def extra_state_attributes(self) -> dict:
        """Return label and color of the next hour."""
        data = self._data
        if data is None or data.next is None:
            return {}
        return {
            "label": data.next.label,
            "formatted": format_price(data.next.avg_price),
            **_color_attributes(data.next_color),
        }


# --- Daily statistics ---


class _ExtremeHourSensor(_PriceSensorBase):
    """Base for the cheapest/most expensive hour of today."""

    def _bucket(self) -> HourlyPrice | None:
        raise NotImplementedError

    @property
    def native_value(self) -> float | None:
        """Return the price of the extreme hour."""
        bucket = self._bucket()
        return round(bucket.avg_price, 4) if bucket is not None else None

    @property
    def extra_state_attributes(self) -> dict:
        """Return which hour holds the extreme price."""
        bucket = self._bucket()
        if bucket is None:
            return {}
        return {
            "hour": bucket.hour,
            "label": bucket.label,
            "formatted": format_price(bucket.avg_price),
        }


class LowestPriceSensor(_ExtremeHourSensor):
    """Cheapest hour of today."""

    _attr_translation_key = "lowest_price"
    _attr_icon = "mdi:arrow-down-bold"

    def _bucket(self) -> HourlyPrice | None:
        if self._data is None or self._data.today_stats is None:
            return None
        return self._data.today_stats.min


class HighestPriceSensor(_ExtremeHourSensor):
    """Most expensive hour of today."""

    _attr_translation_key = "highest_price"
    _attr_icon = "mdi:arrow-up-bold"

    def _bucket(self) -> HourlyPrice | None:
        if self._data is None or self._data.today_stats is None:
            return None
        return self._data.today_stats.max


class AveragePriceSensor(_PriceSensorBase):
    """Average price of today."""

    _attr_translation_key = "average_price"
    _attr_icon = "mdi:approximately-equal"

    @property
    def native_value(self) -> float | None:
        """Return today's average price."""
        if self._data is None or self._data.today_stats is None:
            return None
        return round(self._data.today_stats.avg, 4)


class TomorrowAveragePriceSensor(_PriceSensorBase):
    """Average price of tomorrow, compared against today."""

    _attr_translation_key = "tomorrow_average_price"
    _attr_icon = "mdi:calendar-arrow-right"

    @property
    def native_value(self) -> float | None:
        """Return tomorrow's average price, if published."""
        if self._data is None or self._data.tomorrow_stats is None:
            return None
        return round(self._data.tomorrow_stats.avg, 4)

    @property
    def extra_state_attributes(self) -> dict:
        """Return the change against today and the comparison color."""
        data = self._data
        if data is None or data.tomorrow_stats is None:
            return {}
        change = data.tomorrow_change_pct
        return {
            "change_percent": round(change, 1) if change is not None else None,
            **_color_attributes(data.tomorrow_color),
            "comparison_visible": data.comparison_visible,
        }


# --- Cheap window ---


class CheapWindowSensor(_PriceSensorBase):
    """Cheapest upcoming window of consecutive hours."""

    _attr_translation_key = "cheap_window"
    _attr_icon = "mdi:ev-station"

    @property
    def native_value(self) -> float | None:
        """Return the window's average price."""
        if self._data is None or self._data.window is None:
            return None
        return round(self._data.window.avg_price, 4)

    @property
    def extra_state_attributes(self) -> dict:
        """Return where the window lies."""
        data = self._data
        if data is None or data.window is None:
            return {}
        window = data.window
        return {
            "start_hour": window.start_hour,
            "end_hour": window.end_hour,
            "label": window.label,
            "is_tomorrow": window.is_tomorrow,
            "start": _isoformat(data.window_start),
            "end": _isoformat(data.window_end),
            "window_size": data.window_size,
            "formatted": format_price(window.avg_price),
        }


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None
