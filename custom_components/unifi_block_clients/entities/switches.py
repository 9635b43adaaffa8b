"""Switch entities - one per blockable client.

A switch is ON while its client is blocked. The switch holds no controller
logic of its own: the coordinator binds a refresh handler and a toggle
handler to it, and the switch awaits them for HA's update / turn_on /
turn_off requests.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Awaitable, Callable

from homeassistant.components.switch import SwitchEntity
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.entity import DeviceInfo

from ..const import ATTR_CLIENT_MAC, ATTR_CONTROLLER_RECORD_ID, DOMAIN, MANUFACTURER
from ..unifi_logging import get_logger

if TYPE_CHECKING:
    from ..core.state import ClientContext

RefreshHandler = Callable[["ClientBlockSwitch"], Awaitable[bool]]
ToggleHandler = Callable[["ClientBlockSwitch", bool], Awaitable[bool]]


class ClientBlockSwitch(SwitchEntity):
    """Switch that blocks a network client while on."""

    _attr_should_poll = False
    _attr_has_entity_name = False

    def __init__(self, entry_id: str, context: ClientContext) -> None:
        """Initialize.

        Args:
            entry_id: Config entry the switch belongs to
            context: Persisted identity of the client
        """
        self._logger = get_logger()
        self.context = context
        self._refresh_handler: RefreshHandler | None = None
        self._toggle_handler: ToggleHandler | None = None

        self._attr_unique_id = context.unique_id
        self._attr_name = f"Block {context.display_name}"
        self._attr_icon = "mdi:lan-disconnect"
        self._attr_is_on = False
        self._attr_available = True
        self._live = False

        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, entry_id)},
            name="UniFi Block Clients",
            manufacturer=MANUFACTURER,
        )

    @property
    def identifier(self) -> str:
        """Client MAC address."""
        return self.context.identifier

    @property
    def controller_record_id(self) -> str:
        """Controller id used for status queries."""
        return self.context.controller_record_id

    @property
    def display_name(self) -> str:
        """Client display name."""
        return self.context.display_name

    @property
    def reachable(self) -> bool:
        """Whether the last controller call for this client succeeded."""
        return self._attr_available

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return extra attributes."""
        return {
            ATTR_CLIENT_MAC: self.identifier,
            ATTR_CONTROLLER_RECORD_ID: self.controller_record_id,
        }

    def bind_handlers(self, refresh: RefreshHandler, toggle: ToggleHandler) -> None:
        """Attach the get/set handlers."""
        self._refresh_handler = refresh
        self._toggle_handler = toggle

    def set_reported_state(self, is_blocked: bool) -> None:
        """Store the blocked state reported by the controller."""
        self._attr_is_on = is_blocked
        self._async_write_if_added()

    def set_reachable(self, reachable: bool) -> None:
        """Mark the switch (un)available."""
        if self._attr_available == reachable:
            return
        self._attr_available = reachable
        self._async_write_if_added()

    async def async_added_to_hass(self) -> None:
        """Entity is live in HA."""
        await super().async_added_to_hass()
        self._live = True

    async def async_will_remove_from_hass(self) -> None:
        """Entity is leaving HA."""
        self._live = False
        await super().async_will_remove_from_hass()

    def _async_write_if_added(self) -> None:
        """Push state to HA once the entity is live."""
        if self._live:
            self.async_write_ha_state()

    async def async_update(self) -> None:
        """Refresh blocked state from the controller."""
        if self._refresh_handler is None:
            raise HomeAssistantError(f"{self.identifier} is not set up yet")

        try:
            refreshed = await self._refresh_handler(self)
        except HomeAssistantError as ex:
            raise HomeAssistantError(f"Refreshing {self.identifier} failed: {ex}") from ex

        if not refreshed:
            self._logger.debug("REFRESH_SKIPPED_NOT_READY", client=self.identifier)

    async def async_turn_on(self, **kwargs: Any) -> None:
        """Block the client."""
        await self._async_toggle(True)

    async def async_turn_off(self, **kwargs: Any) -> None:
        """Unblock the client."""
        await self._async_toggle(False)

    async def _async_toggle(self, block: bool) -> None:
        """Run the toggle handler and record the new state."""
        action = "block" if block else "unblock"
        if self._toggle_handler is None:
            raise HomeAssistantError(f"{self.identifier} is not set up yet")

        try:
            done = await self._toggle_handler(self, block)
        except HomeAssistantError as ex:
            raise HomeAssistantError(f"Failed to {action} {self.identifier}: {ex}") from ex

        if not done:
            raise HomeAssistantError(
                f"Cannot {action} {self.identifier}: controller session not ready"
            )

        self.set_reported_state(block)
