"""Binary sensor entities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable

from homeassistant.components.binary_sensor import (
    BinarySensorDeviceClass,
    BinarySensorEntity,
)
from homeassistant.core import callback
from homeassistant.helpers.dispatcher import async_dispatcher_connect
from homeassistant.helpers.entity import DeviceInfo, EntityCategory

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

    from ..coordinator import BlockClientsCoordinator

from ..const import DOMAIN, MANUFACTURER, SIGNAL_UPDATE


@dataclass
class BinarySensorDefinition:
    """Definition for a binary sensor."""

    key: str
    name: str
    value_fn: Callable[[Any], bool]
    attributes_fn: Callable[[Any], dict[str, Any]] | None = None
    device_class: BinarySensorDeviceClass | None = None


BINARY_SENSOR_DEFINITIONS: list[BinarySensorDefinition] = [
    BinarySensorDefinition(
        key="controller_connected",
        name="Controller Connected",
        value_fn=lambda c: c.is_ready,
        attributes_fn=lambda c: {
            "readiness": c.state.readiness.value,
            "exposed_clients": len(c.entities),
            "last_error": c.state.last_error,
        },
        device_class=BinarySensorDeviceClass.CONNECTIVITY,
    ),
]


class BlockClientsBinarySensor(BinarySensorEntity):
    """Generic binary sensor reading from the coordinator."""

    _attr_has_entity_name = True
    _attr_should_poll = False
    _attr_entity_category = EntityCategory.DIAGNOSTIC

    def __init__(
        self,
        entry_id: str,
        coordinator: BlockClientsCoordinator,
        definition: BinarySensorDefinition,
    ) -> None:
        """Initialize."""
        self._entry_id = entry_id
        self._coordinator = coordinator
        self._definition = definition

        self._attr_unique_id = f"{entry_id}_{definition.key}"
        self._attr_name = definition.name
        self._attr_device_class = definition.device_class

        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, entry_id)},
            name="UniFi Block Clients",
            manufacturer=MANUFACTURER,
        )

    async def async_added_to_hass(self) -> None:
        """Register for updates."""
        self.async_on_remove(
            async_dispatcher_connect(
                self.hass,
                f"{SIGNAL_UPDATE}_{self._entry_id}",
                self._handle_update,
            )
        )
        self._handle_update()

    @callback
    def _handle_update(self) -> None:
        """Handle state update."""
        self._attr_is_on = self._definition.value_fn(self._coordinator)
        if self._definition.attributes_fn:
            self._attr_extra_state_attributes = self._definition.attributes_fn(
                self._coordinator
            )
        self.async_write_ha_state()


async def async_setup_binary_sensors(
    hass: HomeAssistant,
    entry: ConfigEntry,
    coordinator: BlockClientsCoordinator,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up binary sensor entities."""
    async_add_entities([
        BlockClientsBinarySensor(entry.entry_id, coordinator, definition)
        for definition in BINARY_SENSOR_DEFINITIONS
    ])
