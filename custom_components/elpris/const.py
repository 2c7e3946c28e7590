"""Constants for the Elpris integration."""

DOMAIN = "elpris"

API_BASE = "https://www.elprisetjustnu.se/api/v1/prices"

# Config entry data keys (immutable after creation)
CONF_NAME = "name"
CONF_PRICE_AREA = "price_area"

# Options keys (changeable via options flow)
CONF_WINDOW_SIZE = "window_size"
CONF_TOMORROW_CUTOFF_HOUR = "tomorrow_cutoff_hour"

# Price areas
PRICE_AREAS = ["SE1", "SE2", "SE3", "SE4"]

# Defaults
DEFAULT_NAME = "Elpris"
DEFAULT_PRICE_AREA = "SE3"
DEFAULT_WINDOW_SIZE = 3
DEFAULT_TOMORROW_CUTOFF_HOUR = 13

# Tomorrow's average is compared against today from this hour on
COMPARISON_FROM_HOUR = 14

# Update interval in minutes
UPDATE_INTERVAL_MINUTES = 30

FETCH_TIMEOUT_SECONDS = 20

UNIT_SEK_PER_KWH = "SEK/kWh"
