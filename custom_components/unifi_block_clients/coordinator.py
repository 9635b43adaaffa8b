"""Block Clients Coordinator - reconciliation and state polling.

The coordinator owns the in-memory list of exposed switches and:
- Wires get/set handlers on every switch, restored or new
- Reconciles the configured clients against the exposed switches once the
  platform has finished restoring
- Gates every controller call behind the readiness state
- Polls the blocked state of every switch on a fixed interval
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Callable

from homeassistant.core import callback
from homeassistant.helpers.event import async_track_time_interval
from homeassistant.util import dt as dt_util

from .core.events import ClientEvent, ClientEventBus
from .core.state import BlockClientsConfig, BlockClientsState, ClientContext, ReadinessState
from .domain import ClientReconciler, display_name, generate_unique_id
from .entities.switches import ClientBlockSwitch
from .exceptions import UnifiApiError
from .unifi_logging import get_logger

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant

    from .core.controller import UnifiController
    from .core.registry import ClientEntityRegistry
    from .models import ClientRecord


class BlockClientsCoordinator:
    """Reconciliation engine and entity state adapter for one controller site."""

    def __init__(
        self,
        hass: HomeAssistant,
        entry: ConfigEntry,
        controller: UnifiController,
        registry: ClientEntityRegistry,
        config: BlockClientsConfig | None = None,
    ) -> None:
        """Initialize the coordinator.

        Raises:
            ConfigurationError: a required configuration value is missing
        """
        self.hass = hass
        self.entry = entry
        self.controller = controller
        self.registry = registry
        self.config = config or BlockClientsConfig.from_entry(entry)
        self.state = BlockClientsState()
        self.events = ClientEventBus(hass, entry.entry_id)
        self.entities: list[ClientBlockSwitch] = []
        self._listeners: list[Callable[[], None]] = []
        self._ready_fired = False
        self._logger = get_logger()

        self._logger.info(
            "COORDINATOR_INIT",
            controller=self.config.controller_url,
            site=self.config.site_name,
            clients=len(self.config.clients),
        )

    @property
    def is_ready(self) -> bool:
        """Check if the controller session is authenticated."""
        return self.state.is_ready

    # ========== Host lifecycle ==========

    @callback
    def on_entity_restored(self, entity: ClientBlockSwitch) -> None:
        """Take over a switch known from a previous run."""
        self._logger.info(
            "CLIENT_LOADED", client=entity.identifier, name=entity.display_name
        )
        entity.set_reachable(True)
        self._setup_entity(entity)
        self.hass.async_create_task(
            self.events.emit(ClientEvent.CLIENT_RESTORED, client=entity.identifier)
        )

    async def async_on_ready(self) -> None:
        """Reconcile exposed switches against the configured clients.

        Stale switches are removed before anything is sent to the controller,
        so a client dropped from the configuration never stays exposed even
        if authentication fails. Additions and polling wait for a session.
        """
        if self._ready_fired:
            self._logger.warning("RECONCILE_ALREADY_RUN")
            return
        self._ready_fired = True

        self.state.readiness = ReadinessState.AUTHENTICATING
        plan = ClientReconciler.plan(
            self.config.clients, [entity.identifier for entity in self.entities]
        )
        self._logger.info(
            "RECONCILE_START",
            to_add=len(plan.to_add),
            to_remove=len(plan.remove_positions),
        )

        stale = [self.entities[position] for position in plan.remove_positions]
        for entity in stale:
            self._remove_entity(entity)

        self.registry.async_expose(list(self.entities))
        await self.events.emit(ClientEvent.AUTHENTICATING)

        try:
            await self.controller.async_authenticate()
        except UnifiApiError as ex:
            self.state.readiness = ReadinessState.UNAUTHENTICATED
            self.state.last_error = str(ex)
            self._logger.error(
                "AUTH_FAILED", controller=self.config.controller_url, error=str(ex)
            )
            await self.events.emit(ClientEvent.AUTH_FAILED, error=str(ex))
            return

        if self.state.readiness is not ReadinessState.AUTHENTICATING:
            # Unloaded while the login was in flight
            self._logger.debug("RECONCILE_ABANDONED")
            return

        self.state.readiness = ReadinessState.READY
        self.state.last_error = None
        self._logger.info("AUTHENTICATED", controller=self.config.controller_url)
        self._start_polling()
        await self.events.emit(ClientEvent.READY)

        if plan.to_add:
            await self._async_add_clients(plan.to_add)

        self.state.reconciled = True
        await self.events.emit(
            ClientEvent.RECONCILED, exposed=[entity.identifier for entity in self.entities]
        )

    # ========== Reconciliation ==========

    async def _async_add_clients(self, identifiers: list[str]) -> None:
        """Create switches for clients that have none yet."""
        try:
            records = await self.controller.async_get_known_clients()
        except UnifiApiError as ex:
            # Whole add phase is abandoned; nothing retries it this run
            self.state.last_error = str(ex)
            self._logger.error(
                "ADD_CLIENTS_FAILED", clients=",".join(identifiers), error=str(ex)
            )
            await self.events.emit(ClientEvent.REMOTE_ERROR, action="get_known_clients")
            return

        for mac in ClientReconciler.unknown_identifiers(records, identifiers):
            self._logger.warning("CLIENT_NOT_KNOWN_TO_CONTROLLER", client=mac)

        for record in ClientReconciler.select_records(records, identifiers):
            await self.async_add_client(record)

    async def async_add_client(self, record: ClientRecord) -> bool:
        """Create, wire and register a switch for one controller record."""
        if not self.is_ready:
            self._logger.warning("ADD_REJECTED_NOT_READY", client=record.mac)
            return False

        if any(entity.identifier == record.mac for entity in self.entities):
            self._logger.debug("CLIENT_ALREADY_EXPOSED", client=record.mac)
            return False

        context = ClientContext(
            unique_id=generate_unique_id(record.record_id),
            identifier=record.mac,
            controller_record_id=record.record_id,
            display_name=display_name(record),
        )
        entity = ClientBlockSwitch(self.entry.entry_id, context)
        entity.set_reported_state(record.blocked)
        self._setup_entity(entity)
        self.registry.async_register(entity)

        self._logger.info("CLIENT_ADDED", client=record.mac, name=context.display_name)
        await self.events.emit(ClientEvent.CLIENT_ADDED, client=record.mac)
        return True

    async def async_remove_client(self, entity: ClientBlockSwitch) -> bool:
        """Remove one exposed switch on request."""
        if not self.is_ready:
            self._logger.warning("REMOVE_REJECTED_NOT_READY", client=entity.identifier)
            return False
        self._remove_entity(entity)
        return True

    @callback
    def _remove_entity(self, entity: ClientBlockSwitch) -> None:
        """Unregister a switch and drop it from the in-memory list."""
        self._logger.info(
            "CLIENT_REMOVED", client=entity.identifier, name=entity.display_name
        )
        self.registry.async_unregister(entity)
        self.entities = [e for e in self.entities if e is not entity]
        self.hass.async_create_task(
            self.events.emit(ClientEvent.CLIENT_REMOVED, client=entity.identifier)
        )

    @callback
    def _setup_entity(self, entity: ClientBlockSwitch) -> None:
        """Bind handlers and track the switch."""
        entity.bind_handlers(self.async_refresh, self.async_toggle)
        self.entities.append(entity)

    # ========== Entity state adapter ==========

    async def async_refresh(self, entity: ClientBlockSwitch) -> bool:
        """Read the blocked state of one client into its switch.

        Returns:
            False if the session is not ready, True once the state is written

        Raises:
            UnifiApiError: the controller call failed; the state is left as is
        """
        if not self.is_ready:
            self._logger.warning("REFRESH_REJECTED_NOT_READY", client=entity.identifier)
            return False

        try:
            blocked = await self.controller.async_get_client_block_status(
                entity.controller_record_id
            )
        except UnifiApiError:
            entity.set_reachable(False)
            raise

        entity.set_reachable(True)
        entity.set_reported_state(blocked)
        return True

    async def async_toggle(self, entity: ClientBlockSwitch, block: bool) -> bool:
        """Block or unblock one client.

        Returns:
            False if the session is not ready, True once the controller confirmed

        Raises:
            UnifiApiError: the controller call failed
        """
        if not self.is_ready:
            self._logger.warning(
                "TOGGLE_REJECTED_NOT_READY", client=entity.identifier, block=block
            )
            return False

        try:
            if block:
                await self.controller.async_block_client(entity.identifier)
            else:
                await self.controller.async_unblock_client(entity.identifier)
        except UnifiApiError as ex:
            self._logger.error(
                "TOGGLE_FAILED", client=entity.identifier, block=block, error=str(ex)
            )
            await self.events.emit(
                ClientEvent.REMOTE_ERROR, action="toggle", client=entity.identifier
            )
            raise

        self._logger.info("CLIENT_TOGGLED", client=entity.identifier, block=block)
        await self.events.emit(
            ClientEvent.CLIENT_TOGGLED, client=entity.identifier, block=block
        )
        return True

    @callback
    def async_update_reachability(self, reachable: bool) -> bool:
        """Mark every exposed switch (un)reachable."""
        if not self.is_ready:
            return False
        self._logger.info("REACHABILITY_UPDATE", reachable=reachable, count=len(self.entities))
        for entity in self.entities:
            entity.set_reachable(reachable)
        return True

    # ========== Polling ==========

    def _start_polling(self) -> None:
        """Start the recurring refresh timer."""
        interval = timedelta(milliseconds=self.config.polling_frequency)
        self._listeners.append(
            async_track_time_interval(
                self.hass,
                self._async_poll_tick,
                interval,
                name=f"unifi_block_clients poll {self.entry.entry_id}",
                cancel_on_shutdown=True,
            )
        )
        self._logger.debug("POLLING_STARTED", interval_ms=self.config.polling_frequency)

    async def _async_poll_tick(self, now: datetime) -> None:
        """Timer callback."""
        await self.async_poll()

    async def async_poll(self) -> bool:
        """Refresh every exposed switch once.

        Refreshes run concurrently on a snapshot of the list; one slow or
        failing client does not hold back the others.
        """
        if not self.is_ready:
            self._logger.debug("POLL_SKIPPED_NOT_READY")
            return False

        snapshot = list(self.entities)
        self.state.last_poll = dt_util.utcnow()
        await asyncio.gather(*(self._async_refresh_logged(entity) for entity in snapshot))
        await self.events.emit(ClientEvent.POLL_TICK, count=len(snapshot))
        return True

    async def _async_refresh_logged(self, entity: ClientBlockSwitch) -> None:
        """Refresh one switch, logging instead of raising."""
        try:
            await self.async_refresh(entity)
        except UnifiApiError as ex:
            self._logger.warning(
                "REFRESH_FAILED", client=entity.identifier, error=str(ex)
            )

    # ========== Teardown ==========

    @callback
    def async_unload(self) -> None:
        """Stop polling and close the gate."""
        for remove in self._listeners:
            remove()
        self._listeners.clear()
        self.state.readiness = ReadinessState.UNAUTHENTICATED
        self._logger.info("COORDINATOR_UNLOADED")
