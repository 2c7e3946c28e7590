"""Binary sensor platform for the Elpris integration."""

from __future__ import annotations

from homeassistant.components.binary_sensor import BinarySensorEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity
from homeassistant.util import dt as dt_util

from .const import DOMAIN
from .coordinator import ElprisCoordinator
from .sensor import device_info


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up Elpris binary sensors from a config entry."""
    coordinator: ElprisCoordinator = hass.data[DOMAIN][entry.entry_id]
    async_add_entities([
        TomorrowAvailableBinarySensor(coordinator, entry),
        CheapWindowActiveBinarySensor(coordinator, entry),
    ])


class _ElprisBinarySensor(CoordinatorEntity[ElprisCoordinator], BinarySensorEntity):
    """Base class for Elpris binary sensors."""

    _attr_has_entity_name = True

    def __init__(
        self, coordinator: ElprisCoordinator, entry: ConfigEntry
    ) -> None:
        """Initialize the binary sensor."""
        super().__init__(coordinator)
        self._attr_unique_id = f"{entry.entry_id}_{self._attr_translation_key}"
        self._attr_device_info = device_info(entry)


class TomorrowAvailableBinarySensor(_ElprisBinarySensor):
    """On once tomorrow's prices have been published."""

    _attr_translation_key = "tomorrow_available"
    _attr_icon = "mdi:calendar-check"

    @property
    def is_on(self) -> bool:
        """Return True if tomorrow's prices are known."""
        if self.coordinator.data is None:
            return False
        return bool(self.coordinator.data.tomorrow)


class CheapWindowActiveBinarySensor(_ElprisBinarySensor):
    """On while the cheapest window is running."""

    _attr_translation_key = "cheap_window_active"
    _attr_icon = "mdi:ev-plug-type2"

    @property
    def is_on(self) -> bool:
        """Return True if now lies inside the cheapest window."""
        data = self.coordinator.data
        if data is None or data.window_start is None or data.window_end is None:
            return False
        return data.window_start <= dt_util.now() < data.window_end
