"""Event bus for component communication.

The coordinator announces every lifecycle step here. Events are logged,
handed to registered handlers, and forwarded to HA entities through the
dispatcher when the UI needs to refresh.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from homeassistant.helpers.dispatcher import async_dispatcher_send

from ..const import SIGNAL_UPDATE
from ..unifi_logging import get_logger

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant


class ClientEvent(str, Enum):
    """Event types for the integration."""

    # Readiness
    AUTHENTICATING = "unifi_block_clients.authenticating"
    READY = "unifi_block_clients.ready"
    AUTH_FAILED = "unifi_block_clients.auth_failed"

    # Reconciliation
    CLIENT_RESTORED = "unifi_block_clients.client_restored"
    CLIENT_ADDED = "unifi_block_clients.client_added"
    CLIENT_REMOVED = "unifi_block_clients.client_removed"
    RECONCILED = "unifi_block_clients.reconciled"

    # State
    POLL_TICK = "unifi_block_clients.poll_tick"
    CLIENT_TOGGLED = "unifi_block_clients.client_toggled"
    REMOTE_ERROR = "unifi_block_clients.remote_error"


# Events that change something an entity displays
_UI_EVENTS = {
    ClientEvent.AUTHENTICATING,
    ClientEvent.READY,
    ClientEvent.AUTH_FAILED,
    ClientEvent.RECONCILED,
}


@dataclass
class EventData:
    """Container for event data."""

    event: ClientEvent
    timestamp: datetime
    data: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "event": self.event.value,
            "timestamp": self.timestamp.isoformat(),
            "data": self.data,
        }


EventHandler = Callable[[EventData], Awaitable[None]]


class ClientEventBus:
    """Central event bus for one config entry."""

    def __init__(self, hass: HomeAssistant, entry_id: str) -> None:
        """Initialize the event bus.

        Args:
            hass: Home Assistant instance
            entry_id: Config entry the bus belongs to
        """
        self.hass = hass
        self.entry_id = entry_id
        self._logger = get_logger()
        self._handlers: dict[ClientEvent, list[EventHandler]] = {}
        self.history: list[EventData] = []

    async def emit(self, event: ClientEvent, /, **data: Any) -> None:
        """Emit an event.

        Args:
            event: Event type to emit
            **data: Event data
        """
        event_data = EventData(event=event, timestamp=datetime.now(), data=data)
        self.history.append(event_data)
        del self.history[:-50]

        self._logger.debug(f"EVENT_{event.name}", **data)

        for handler in list(self._handlers.get(event, [])):
            try:
                await handler(event_data)
            except Exception as ex:  # noqa: BLE001
                self._logger.error(
                    "EVENT_HANDLER_ERROR",
                    event_type=event.name,
                    handler=getattr(handler, "__name__", repr(handler)),
                    error=str(ex),
                )

        if event in _UI_EVENTS:
            async_dispatcher_send(self.hass, f"{SIGNAL_UPDATE}_{self.entry_id}")

    def on(self, event: ClientEvent, handler: EventHandler) -> Callable[[], None]:
        """Register an event handler.

        Returns:
            Unsubscribe function
        """
        self._handlers.setdefault(event, []).append(handler)

        def unsubscribe() -> None:
            self.off(event, handler)

        return unsubscribe

    def off(self, event: ClientEvent, handler: EventHandler) -> None:
        """Unregister an event handler."""
        if handler in self._handlers.get(event, []):
            self._handlers[event].remove(handler)
