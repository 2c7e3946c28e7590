"""Config flow for the Elpris integration."""

from __future__ import annotations

import logging
from typing import Any

import voluptuous as vol

from homeassistant.config_entries import (
    ConfigEntry,
    ConfigFlow,
    ConfigFlowResult,
    OptionsFlowWithReload,
)
from homeassistant.core import callback
from homeassistant.helpers.aiohttp_client import async_get_clientsession
from homeassistant.helpers.selector import (
    NumberSelector,
    NumberSelectorConfig,
    NumberSelectorMode,
    SelectOptionDict,
    SelectSelector,
    SelectSelectorConfig,
    TextSelector,
)
from homeassistant.util import dt as dt_util
from homeassistant.util import slugify

from .const import (
    CONF_NAME,
    CONF_PRICE_AREA,
    CONF_TOMORROW_CUTOFF_HOUR,
    CONF_WINDOW_SIZE,
    DEFAULT_NAME,
    DEFAULT_PRICE_AREA,
    DEFAULT_TOMORROW_CUTOFF_HOUR,
    DEFAULT_WINDOW_SIZE,
    DOMAIN,
    PRICE_AREAS,
)
from .elpris_api import async_fetch_prices

_LOGGER = logging.getLogger(__name__)


def _options_schema(defaults: dict[str, Any] | None = None) -> vol.Schema:
    """Build the schema for tunable options."""
    if defaults is None:
        defaults = {}
    return vol.Schema(
        {
            vol.Required(
                CONF_WINDOW_SIZE,
                default=defaults.get(CONF_WINDOW_SIZE, DEFAULT_WINDOW_SIZE),
            ): NumberSelector(
                NumberSelectorConfig(
                    min=1, max=12, step=1, mode=NumberSelectorMode.BOX,
                    unit_of_measurement="hours",
                )
            ),
            vol.Required(
                CONF_TOMORROW_CUTOFF_HOUR,
                default=defaults.get(
                    CONF_TOMORROW_CUTOFF_HOUR, DEFAULT_TOMORROW_CUTOFF_HOUR
                ),
            ): NumberSelector(
                NumberSelectorConfig(
                    min=0, max=23, step=1, mode=NumberSelectorMode.BOX,
                )
            ),
        }
    )


def _clean_options(user_input: dict[str, Any]) -> dict[str, Any]:
    """Coerce number selector floats to whole hours."""
    return {
        CONF_WINDOW_SIZE: int(user_input.get(CONF_WINDOW_SIZE, DEFAULT_WINDOW_SIZE)),
        CONF_TOMORROW_CUTOFF_HOUR: int(
            user_input.get(CONF_TOMORROW_CUTOFF_HOUR, DEFAULT_TOMORROW_CUTOFF_HOUR)
        ),
    }


class ElprisConfigFlow(ConfigFlow, domain=DOMAIN):
    """Handle a config flow for Elpris."""

    VERSION = 1

    @staticmethod
    @callback
    def async_get_options_flow(config_entry: ConfigEntry) -> ElprisOptionsFlow:
        """Get the options flow for this handler."""
        return ElprisOptionsFlow()

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Handle the initial step."""
        errors: dict[str, str] = {}

        if user_input is not None:
            area = user_input[CONF_PRICE_AREA]
            name = user_input[CONF_NAME]

            # Set unique ID to prevent duplicates
            await self.async_set_unique_id(f"{area}_{slugify(name)}")
            self._abort_if_unique_id_configured()

            session = async_get_clientsession(self.hass)
            entries = await async_fetch_prices(session, dt_util.now().date(), area)
            if not entries:
                _LOGGER.warning("Could not fetch today's prices for %s", area)
                errors["base"] = "cannot_connect"
            else:
                # Split data (immutable) and options (mutable)
                return self.async_create_entry(
                    title=name,
                    data={CONF_NAME: name, CONF_PRICE_AREA: area},
                    options=_clean_options(user_input),
                )

        schema = vol.Schema(
            {
                vol.Required(CONF_NAME, default=DEFAULT_NAME): TextSelector(),
                vol.Required(
                    CONF_PRICE_AREA, default=DEFAULT_PRICE_AREA
                ): SelectSelector(
                    SelectSelectorConfig(
                        options=[
                            SelectOptionDict(value=area, label=area)
                            for area in PRICE_AREAS
                        ],
                        mode="dropdown",
                    )
                ),
            }
        ).extend(_options_schema().schema)

        return self.async_show_form(
            step_id="user",
            data_schema=schema,
            errors=errors,
        )


class ElprisOptionsFlow(OptionsFlowWithReload):
    """Handle options flow for Elpris."""

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Manage the options."""
        if user_input is not None:
            return self.async_create_entry(data=_clean_options(user_input))

        return self.async_show_form(
            step_id="init",
            data_schema=_options_schema(self.config_entry.options),
        )
