"""Diagnostics for UniFi Block Clients."""

from __future__ import annotations

from typing import Any

from homeassistant.components.diagnostics import async_redact_data
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from .const import CONF_PASSWORD, CONF_USERNAME, DOMAIN
from .unifi_logging import get_logger

REDACT_KEYS = {
    CONF_USERNAME,
    CONF_PASSWORD,
}


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant, entry: ConfigEntry
) -> dict[str, Any]:
    """Return diagnostics for a config entry."""
    coordinator = hass.data.get(DOMAIN, {}).get(entry.entry_id)
    if coordinator is None:
        return {}

    logger = get_logger()
    log_size_kb = await hass.async_add_executor_job(logger.get_total_size_kb)

    return {
        "entry": {
            "entry_id": entry.entry_id,
            "title": entry.title,
            "data": async_redact_data(entry.data, REDACT_KEYS),
            "options": async_redact_data(entry.options, REDACT_KEYS),
        },
        "controller": {
            "url": coordinator.controller.controller_url,
            "site": coordinator.controller.site_name,
            "authenticated": coordinator.controller.authenticated,
        },
        "state": coordinator.state.to_dict(),
        "configured_clients": coordinator.config.clients,
        "exposed_clients": [entity.context.to_dict() for entity in coordinator.entities],
        "recent_events": [event.to_dict() for event in coordinator.events.history],
        "logging": {
            "file_logging_enabled": logger.file_logging_enabled,
            "log_size_kb": log_size_kb,
        },
    }
