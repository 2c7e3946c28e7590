"""Client for the elprisetjustnu.se spot price API."""

from __future__ import annotations

import asyncio
import logging
from datetime import date

import async_timeout
from aiohttp import ClientError, ClientResponseError, ClientSession

from .const import API_BASE, FETCH_TIMEOUT_SECONDS
from .price_analytics import RawPriceEntry

_LOGGER = logging.getLogger(__name__)


def build_price_url(target_date: date, area: str) -> str:
    """Return the API URL for one day's prices in a price area.

    Example: https://www.elprisetjustnu.se/api/v1/prices/2026/02-06_SE3.json
    """
    return (
        f"{API_BASE}/{target_date.year}/"
        f"{target_date.month:02d}-{target_date.day:02d}_{area}.json"
    )


async def async_fetch_prices(
    session: ClientSession,
    target_date: date,
    area: str,
) -> list[RawPriceEntry]:
    """Fetch the price entries for one day, or an empty list on any failure.

    Tomorrow's prices are published around 13:00 and the API answers 404
    until then, so a missing day is logged at debug level only.
    """
    url = build_price_url(target_date, area)
    try:
        async with async_timeout.timeout(FETCH_TIMEOUT_SECONDS):
            async with session.get(url) as response:
                try:
                    response.raise_for_status()
                except ClientResponseError as err:
                    if err.status == 404:
                        _LOGGER.debug(
                            "No prices published yet for %s in %s", target_date, area
                        )
                        return []
                    raise
                payload = await response.json(content_type=None)
    except asyncio.TimeoutError:
        _LOGGER.warning("Timeout fetching prices from %s", url)
        return []
    except ClientError as err:
        _LOGGER.warning("Error fetching prices from %s: %s", url, err)
        return []
    except ValueError as err:
        _LOGGER.warning("Invalid JSON from %s: %s", url, err)
        return []

    return parse_price_entries(payload)


def parse_price_entries(payload: list | None) -> list[RawPriceEntry]:
    """Convert the API's JSON array into RawPriceEntry objects.

    Malformed items are skipped. The result is sorted by interval start.
    """
    if not isinstance(payload, list):
        if payload is not None:
            _LOGGER.warning("Unexpected price payload type: %s", type(payload).__name__)
        return []

    entries: list[RawPriceEntry] = []
    for item in payload:
        try:
            entries.append(RawPriceEntry.from_api(item))
        except (KeyError, TypeError, ValueError) as exc:
            _LOGGER.warning("Error converting price entry %s: %s", item, exc)
            continue

    entries.sort(key=lambda e: e.interval_start)
    return entries
