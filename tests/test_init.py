"""Tests for setting up and unloading the Elpris integration."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from homeassistant.config_entries import ConfigEntryState
from homeassistant.core import HomeAssistant
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.elpris.const import CONF_NAME, CONF_PRICE_AREA, DOMAIN
from custom_components.elpris.elpris_api import parse_price_entries


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations):
    """Enable loading of custom integrations for all tests in this module."""
    yield


@pytest.fixture
def config_entry(hass: HomeAssistant) -> MockConfigEntry:
    entry = MockConfigEntry(
        domain=DOMAIN,
        title="Elpris",
        data={CONF_NAME: "Elpris", CONF_PRICE_AREA: "SE3"},
    )
    entry.add_to_hass(hass)
    return entry


async def test_setup_and_unload(hass: HomeAssistant, config_entry, today_api):
    """Setting up an entry should create all entities; unloading removes them."""
    fetch = AsyncMock(return_value=parse_price_entries(today_api))
    with patch("custom_components.elpris.coordinator.async_fetch_prices", fetch):
        assert await hass.config_entries.async_setup(config_entry.entry_id)
        await hass.async_block_till_done()

    assert config_entry.state is ConfigEntryState.LOADED
    assert config_entry.entry_id in hass.data[DOMAIN]
    assert len(hass.states.async_entity_ids("sensor")) == 7
    assert len(hass.states.async_entity_ids("binary_sensor")) == 2

    assert await hass.config_entries.async_unload(config_entry.entry_id)
    await hass.async_block_till_done()

    assert config_entry.state is ConfigEntryState.NOT_LOADED
    assert config_entry.entry_id not in hass.data[DOMAIN]


async def test_setup_retries_without_prices(hass: HomeAssistant, config_entry):
    """Without today's prices the entry should be retried later."""
    with patch(
        "custom_components.elpris.coordinator.async_fetch_prices",
        AsyncMock(return_value=[]),
    ):
        await hass.config_entries.async_setup(config_entry.entry_id)
        await hass.async_block_till_done()

    assert config_entry.state is ConfigEntryState.SETUP_RETRY
