"""Switch platform for UniFi Block Clients.

Restores the switches known from the previous run, hands them to the
coordinator, then lets the coordinator reconcile against the configured
clients.
"""

from __future__ import annotations

import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import DOMAIN
from .coordinator import BlockClientsCoordinator

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up client switches."""
    coordinator: BlockClientsCoordinator = hass.data[DOMAIN][entry.entry_id]
    coordinator.registry.attach_platform(async_add_entities)

    restored = await coordinator.registry.async_restore()
    for entity in restored:
        coordinator.on_entity_restored(entity)

    _LOGGER.debug("Restored %d client switches, reconciling", len(restored))
    hass.async_create_task(coordinator.async_on_ready())
