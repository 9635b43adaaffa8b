"""Entity registry adapter - the durable side of the exposed switches.

Home Assistant keeps switch registry entries between runs, but not the
controller context a switch needs (MAC, controller record id, name). This
adapter keeps that context in a Store next to the entity registry and
exposes, restores and removes switches through the platform callback.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from homeassistant.components.switch import DOMAIN as SWITCH_DOMAIN
from homeassistant.core import callback
from homeassistant.helpers import entity_registry as er
from homeassistant.helpers.storage import Store

from ..const import DOMAIN, STORAGE_KEY, STORAGE_VERSION
from ..entities.switches import ClientBlockSwitch
from ..unifi_logging import get_logger
from .state import ClientContext

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback


class ClientEntityRegistry:
    """Creates, persists and removes client switches for one config entry."""

    def __init__(self, hass: HomeAssistant, entry_id: str) -> None:
        """Initialize the registry adapter.

        Args:
            hass: Home Assistant instance
            entry_id: Config entry owning the switches
        """
        self.hass = hass
        self.entry_id = entry_id
        self._logger = get_logger()
        self._store: Store = Store(hass, STORAGE_VERSION, f"{STORAGE_KEY}.{entry_id}")
        self._contexts: dict[str, ClientContext] = {}
        self._add_entities: AddEntitiesCallback | None = None

    @callback
    def attach_platform(self, add_entities: AddEntitiesCallback) -> None:
        """Use the switch platform's callback to expose entities."""
        self._add_entities = add_entities

    async def async_restore(self) -> list[ClientBlockSwitch]:
        """Rebuild the switches known from the previous run."""
        data = await self._store.async_load() or {}

        self._contexts = {}
        for item in data.get("clients", []):
            try:
                context = ClientContext.from_dict(item)
            except KeyError:
                self._logger.warning("CONTEXT_MALFORMED", data=item)
                continue
            self._contexts[context.unique_id] = context

        # Registry entries whose context was lost can never be refreshed
        ent_reg = er.async_get(self.hass)
        for reg_entry in er.async_entries_for_config_entry(ent_reg, self.entry_id):
            if reg_entry.domain != SWITCH_DOMAIN:
                continue
            if reg_entry.unique_id not in self._contexts:
                self._logger.info("ORPHAN_ENTITY_REMOVED", entity_id=reg_entry.entity_id)
                ent_reg.async_remove(reg_entry.entity_id)

        self._logger.debug("CONTEXTS_RESTORED", count=len(self._contexts))
        return [ClientBlockSwitch(self.entry_id, context) for context in self._contexts.values()]

    @callback
    def async_expose(self, entities: list[ClientBlockSwitch]) -> None:
        """Add already-registered switches to HA."""
        if entities:
            self._require_platform()(entities)

    @callback
    def async_register(self, entity: ClientBlockSwitch) -> None:
        """Persist a new switch and add it to HA."""
        self._contexts[entity.context.unique_id] = entity.context
        self._async_schedule_save()
        self._require_platform()([entity])

    @callback
    def async_unregister(self, entity: ClientBlockSwitch) -> None:
        """Drop a switch from HA and forget its context."""
        self._contexts.pop(entity.context.unique_id, None)
        self._async_schedule_save()

        ent_reg = er.async_get(self.hass)
        entity_id = ent_reg.async_get_entity_id(SWITCH_DOMAIN, DOMAIN, entity.context.unique_id)
        if entity_id is not None:
            # Removing the registry entry also removes a live entity
            ent_reg.async_remove(entity_id)
        elif entity.hass is not None:
            self.hass.async_create_task(entity.async_remove())

    async def async_remove_store(self) -> None:
        """Delete persisted contexts (config entry removed)."""
        self._contexts = {}
        await self._store.async_remove()

    def _require_platform(self) -> AddEntitiesCallback:
        """Return the platform callback."""
        if self._add_entities is None:
            raise RuntimeError("Switch platform is not set up")
        return self._add_entities

    @callback
    def _async_schedule_save(self) -> None:
        """Save contexts without blocking the caller."""
        self.hass.async_create_task(self._async_save())

    async def _async_save(self) -> None:
        """Write contexts to storage."""
        await self._store.async_save(
            {"clients": [context.to_dict() for context in self._contexts.values()]}
        )
