"""The UniFi Block Clients integration.

Exposes one switch per configured network client; a switch is ON while the
UniFi controller blocks that client.
"""

from __future__ import annotations

import logging

import aiohttp

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import Platform
from homeassistant.core import HomeAssistant
from homeassistant.helpers.aiohttp_client import async_create_clientsession

from .const import DOMAIN
from .coordinator import BlockClientsCoordinator
from .core import BlockClientsConfig, ClientEntityRegistry, UnifiController
from .exceptions import ConfigurationError
from .services import async_setup_services, async_unload_services
from .unifi_logging import get_logger

_LOGGER = logging.getLogger(__name__)

PLATFORMS: list[Platform] = [
    Platform.BINARY_SENSOR,
    Platform.SWITCH,
]


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up UniFi Block Clients from a config entry."""
    hass.data.setdefault(DOMAIN, {})

    try:
        config = BlockClientsConfig.from_entry(entry)
    except ConfigurationError as err:
        _LOGGER.error("%s is required. Check the integration configuration.", err.field)
        return False

    get_logger().set_file_logging(config.debug_logging)

    # Controllers set their session cookie for an IP host, so the jar must accept it
    session = async_create_clientsession(
        hass,
        verify_ssl=config.verify_ssl,
        cookie_jar=aiohttp.CookieJar(unsafe=True),
    )
    controller = UnifiController(
        session,
        config.controller_url,
        config.username,
        config.password,
        config.site_name,
    )
    registry = ClientEntityRegistry(hass, entry.entry_id)
    coordinator = BlockClientsCoordinator(hass, entry, controller, registry, config)
    hass.data[DOMAIN][entry.entry_id] = coordinator

    await async_setup_services(hass)
    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    entry.async_on_unload(entry.add_update_listener(async_reload_entry))

    _LOGGER.info(
        "UniFi Block Clients set up for %s (site %s)",
        config.controller_url,
        config.site_name,
    )
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    if unload_ok := await hass.config_entries.async_unload_platforms(entry, PLATFORMS):
        coordinator: BlockClientsCoordinator = hass.data[DOMAIN].pop(entry.entry_id)
        coordinator.async_unload()

    if not hass.data.get(DOMAIN):
        await async_unload_services(hass)

    return unload_ok


async def async_reload_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Reload the entry after its options changed."""
    await hass.config_entries.async_reload(entry.entry_id)


async def async_remove_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Forget stored client contexts when the entry is deleted."""
    await ClientEntityRegistry(hass, entry.entry_id).async_remove_store()
