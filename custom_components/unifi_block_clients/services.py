"""Services for UniFi Block Clients."""

from __future__ import annotations

import logging

import voluptuous as vol

from homeassistant.core import HomeAssistant, ServiceCall
import homeassistant.helpers.config_validation as cv

from .const import (
    ATTR_REACHABLE,
    DOMAIN,
    SERVICE_REFRESH_CLIENTS,
    SERVICE_SET_REACHABILITY,
)

_LOGGER = logging.getLogger(__name__)


async def async_setup_services(hass: HomeAssistant) -> None:
    """Set up services (once for all entries)."""
    if hass.services.has_service(DOMAIN, SERVICE_REFRESH_CLIENTS):
        return

    async def async_handle_refresh(service_call: ServiceCall) -> None:
        """Run one poll tick on every loaded entry now."""
        for entry_id, coordinator in list(hass.data.get(DOMAIN, {}).items()):
            if not await coordinator.async_poll():
                _LOGGER.warning(
                    "Refresh skipped for %s: controller session not ready", entry_id
                )

    async def async_handle_reachability(service_call: ServiceCall) -> None:
        """Mark every client switch reachable or unreachable."""
        reachable = service_call.data[ATTR_REACHABLE]
        for entry_id, coordinator in list(hass.data.get(DOMAIN, {}).items()):
            if not coordinator.async_update_reachability(reachable):
                _LOGGER.warning(
                    "Reachability update skipped for %s: controller session not ready",
                    entry_id,
                )

    hass.services.async_register(
        DOMAIN,
        SERVICE_REFRESH_CLIENTS,
        async_handle_refresh,
        schema=vol.Schema({}),
    )

    hass.services.async_register(
        DOMAIN,
        SERVICE_SET_REACHABILITY,
        async_handle_reachability,
        schema=vol.Schema({vol.Required(ATTR_REACHABLE): cv.boolean}),
    )
    _LOGGER.debug("Services registered")


async def async_unload_services(hass: HomeAssistant) -> None:
    """Unload services."""
    hass.services.async_remove(DOMAIN, SERVICE_REFRESH_CLIENTS)
    hass.services.async_remove(DOMAIN, SERVICE_SET_REACHABILITY)
